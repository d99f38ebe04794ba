from abc import ABC, abstractmethod

from dag_visualizer.models import Trace


class Parser(ABC):
    """Produces the whole trace up front; replay never reads the source again."""

    @property
    @abstractmethod
    def source(self) -> str:
        pass

    @abstractmethod
    def parse(self) -> Trace:
        pass
