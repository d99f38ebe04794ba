from dag_visualizer.parser.parser_base import Parser
from dag_visualizer.parser.parser_itf import ParserItf
from dag_visualizer.parser.parser_mock import ParserMock

__all__ = ["Parser", "ParserItf", "ParserMock"]
