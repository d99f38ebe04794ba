"""Step-through viewer for recorded DAG consensus traces."""

__version__ = "0.1.0"
