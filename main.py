import sys

from dag_visualizer.cli import main


if __name__ == "__main__":
    sys.exit(main())
