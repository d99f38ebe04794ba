from dag_visualizer.visualizer.dash_app import DashApp
from dag_visualizer.visualizer.terminal import TerminalRenderer

__all__ = ["DashApp", "TerminalRenderer"]
