import logging
from dataclasses import dataclass

from dag_visualizer.config import DEFAULT_CONFIG, VisualizerConfig
from dag_visualizer.models import BlockStore, Label
from dag_visualizer.visualizer.decision_index import DecisionIndex, describe_decision
from dag_visualizer.visualizer.geometry import Coordinate, coordinates
from dag_visualizer.visualizer.style import EDGE_COLOR, HIGHLIGHT_COLOR

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Point:
    x: float
    y: float
    color: str


@dataclass(frozen=True)
class Line:
    x1: float
    y1: float
    x2: float
    y2: float
    color: str


@dataclass(frozen=True)
class Text:
    x: float
    y: float
    text: str
    color: str


type Primitive = Point | Line | Text


@dataclass(frozen=True)
class NodeLayout:
    label: Label
    coordinate: Coordinate
    color: str


@dataclass(frozen=True)
class EdgeLayout:
    start: Coordinate
    end: Coordinate
    color: str


@dataclass(frozen=True)
class Annotation:
    coordinate: Coordinate
    text: str
    color: str


@dataclass(frozen=True)
class DagLayout:
    nodes: tuple[NodeLayout, ...]
    edges: tuple[EdgeLayout, ...]
    annotation: Annotation | None = None
    anchor_annotation: Annotation | None = None

    def draw_list(self) -> list[Primitive]:
        """Edges first so that nodes and labels are painted over them."""
        primitives: list[Primitive] = []
        for edge in self.edges:
            (x1, y1), (x2, y2) = edge.start, edge.end
            primitives.append(Line(x1, y1, x2, y2, edge.color))
        for node in self.nodes:
            x, y = node.coordinate
            primitives.append(Point(x, y, node.color))
            primitives.append(Text(x, y, node.label, node.color))
        for note in (self.annotation, self.anchor_annotation):
            if note is not None:
                x, y = note.coordinate
                primitives.append(Text(x, y, note.text, note.color))
        return primitives


def build_layout(
    store: BlockStore, index: DecisionIndex, config: VisualizerConfig = DEFAULT_CONFIG
) -> DagLayout:
    nodes: list[NodeLayout] = []
    edges: list[EdgeLayout] = []
    anchor = index.anchor_label()
    anchor_annotation = None

    for block in store:
        ref = block.reference
        position = coordinates(ref.authority, ref.round, config)

        for parent in block.includes:
            if parent == ref:
                continue
            if store.get(parent.round, parent.authority) is None:
                logger.debug("block %s references missing parent %s", ref.label, parent.label)
                continue
            color = (
                HIGHLIGHT_COLOR
                if index.is_supporting_edge(parent.label, ref.label)
                else EDGE_COLOR
            )
            edges.append(
                EdgeLayout(coordinates(parent.authority, parent.round, config), position, color)
            )

        color = index.status_of(ref).get_color()
        nodes.append(NodeLayout(ref.label, position, color))
        if anchor is not None and ref.label == anchor:
            anchor_annotation = Annotation(config.anchor_position, f"Anchor: {anchor}", color)

    annotation = None
    if index.latest is not None:
        annotation = Annotation(
            config.status_position,
            describe_decision(index.latest),
            index.latest.status.get_color(),
        )

    return DagLayout(tuple(nodes), tuple(edges), annotation, anchor_annotation)
