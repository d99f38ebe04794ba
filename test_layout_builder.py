"""
test_layout_builder.py

Tests for turning a block store plus decision history into a draw-list.
"""

from dag_visualizer.models import (
    BlockStore,
    Decision,
    DirectDecision,
    IncompleteWave,
    IndirectDecision,
    ProposerSlotState,
)
from dag_visualizer.visualizer.decision_index import DecisionIndex
from dag_visualizer.visualizer.geometry import coordinates
from dag_visualizer.visualizer.layout_builder import (
    EdgeLayout,
    Line,
    Point,
    Text,
    build_layout,
)
from dag_visualizer.visualizer.style import (
    COMMIT_COLOR,
    EDGE_COLOR,
    HIGHLIGHT_COLOR,
    SKIP_COLOR,
    UNDECIDED_COLOR,
)


def node_colors(layout):
    return {n.label: n.color for n in layout.nodes}


class TestEdges:
    def test_single_parent_edge(self, block):
        store = BlockStore.from_blocks([block("A0"), block("A1", "A0")])
        layout = build_layout(store, DecisionIndex([]))
        assert layout.edges == (EdgeLayout(coordinates(0, 0), coordinates(0, 1), EDGE_COLOR),)

    def test_block_without_parents_has_no_edges(self, block):
        store = BlockStore.from_blocks([block("A0"), block("B0")])
        layout = build_layout(store, DecisionIndex([]))
        assert layout.edges == ()
        assert len(layout.nodes) == 2

    def test_edge_count_matches_includes(self, small_store):
        layout = build_layout(small_store, DecisionIndex([]))
        assert len(layout.edges) == 8
        assert {e.color for e in layout.edges} == {EDGE_COLOR}

    def test_missing_parent_skipped(self, block):
        store = BlockStore.from_blocks([block("A1", "A0")])
        layout = build_layout(store, DecisionIndex([]))
        assert layout.edges == ()

    def test_self_reference_skipped(self, block):
        store = BlockStore.from_blocks([block("A0", "A0")])
        assert build_layout(store, DecisionIndex([])).edges == ()

    def test_supporting_edges_highlighted(self, small_store, ref):
        index = DecisionIndex(
            [
                Decision(
                    ProposerSlotState.COMMIT,
                    ref("A0"),
                    DirectDecision(supporting_edges=(("A1", "A0"), ("A0", "B1"))),
                )
            ]
        )
        layout = build_layout(small_store, index)
        highlighted = {(e.start, e.end) for e in layout.edges if e.color == HIGHLIGHT_COLOR}
        assert highlighted == {
            (coordinates(0, 0), coordinates(0, 1)),
            (coordinates(0, 0), coordinates(1, 1)),
        }
        assert sum(e.color == EDGE_COLOR for e in layout.edges) == 6


class TestNodes:
    def test_empty_decisions_all_neutral(self, small_store):
        layout = build_layout(small_store, DecisionIndex([]))
        assert set(node_colors(layout).values()) == {UNDECIDED_COLOR}
        assert layout.annotation is None
        assert layout.anchor_annotation is None

    def test_status_colors(self, small_store, ref):
        index = DecisionIndex(
            [
                Decision(ProposerSlotState.COMMIT, ref("A0"), DirectDecision()),
                Decision(ProposerSlotState.SKIP, ref("B1"), DirectDecision()),
            ]
        )
        colors = node_colors(build_layout(small_store, index))
        assert colors["A0"] == COMMIT_COLOR
        assert colors["B1"] == SKIP_COLOR
        assert colors["C0"] == UNDECIDED_COLOR

    def test_nodes_ordered_by_round_then_authority(self, small_store):
        layout = build_layout(small_store, DecisionIndex([]))
        assert [n.label for n in layout.nodes] == ["A0", "B0", "C0", "D0", "A1", "B1", "A2"]


class TestAnnotations:
    def test_status_line(self, small_store, ref):
        index = DecisionIndex(
            [Decision(ProposerSlotState.COMMIT, ref("A0"), DirectDecision(("A2",)))]
        )
        layout = build_layout(small_store, index)
        assert layout.annotation is not None
        assert layout.annotation.text == "Block A0: Commit (DirectDecision, certificate blocks: [A2])"
        assert layout.annotation.color == COMMIT_COLOR

    def test_anchor_keeps_node_status_color(self, small_store, ref):
        index = DecisionIndex(
            [
                Decision(ProposerSlotState.COMMIT, ref("A1"), DirectDecision()),
                Decision(ProposerSlotState.COMMIT, ref("A0"), IndirectDecision(anchor="A1")),
            ]
        )
        layout = build_layout(small_store, index)
        assert layout.anchor_annotation is not None
        assert "A1" in layout.anchor_annotation.text
        assert layout.anchor_annotation.color == COMMIT_COLOR
        assert node_colors(layout)["A1"] == COMMIT_COLOR

    def test_anchor_with_empty_edges(self, small_store, ref):
        index = DecisionIndex(
            [Decision(ProposerSlotState.SKIP, ref("B0"), IndirectDecision(anchor="A2", edges=()))]
        )
        layout = build_layout(small_store, index)
        assert layout.anchor_annotation is not None
        assert layout.anchor_annotation.text == "Anchor: A2"
        assert layout.anchor_annotation.color == UNDECIDED_COLOR
        assert node_colors(layout)["A2"] == UNDECIDED_COLOR
        assert {e.color for e in layout.edges} == {EDGE_COLOR}

    def test_anchor_not_in_store(self, small_store, ref):
        index = DecisionIndex(
            [Decision(ProposerSlotState.COMMIT, ref("A0"), IndirectDecision(anchor="Z9"))]
        )
        assert build_layout(small_store, index).anchor_annotation is None

    def test_bare_log_status_line(self, small_store, ref):
        index = DecisionIndex([Decision(ProposerSlotState.UNDECIDED, ref("C0"), IncompleteWave())])
        layout = build_layout(small_store, index)
        assert layout.annotation.text == "Block C0: Undecided (IncompleteWave)"


class TestDrawList:
    def test_deterministic(self, small_store, ref):
        index = DecisionIndex(
            [
                Decision(
                    ProposerSlotState.COMMIT,
                    ref("A0"),
                    IndirectDecision(anchor="A2", edges=(("A0", "A1"), ("A1", "A2"))),
                )
            ]
        )
        first = build_layout(small_store, index).draw_list()
        second = build_layout(small_store, index).draw_list()
        assert first == second
        assert repr(first) == repr(second)

    def test_edges_painted_before_nodes(self, block):
        store = BlockStore.from_blocks([block("A0"), block("A1", "A0")])
        primitives = build_layout(store, DecisionIndex([])).draw_list()
        assert isinstance(primitives[0], Line)
        assert [type(p) for p in primitives[1:]] == [Point, Text, Point, Text]

    def test_annotations_are_text(self, small_store, ref):
        index = DecisionIndex(
            [Decision(ProposerSlotState.COMMIT, ref("A0"), IndirectDecision(anchor="A2"))]
        )
        primitives = build_layout(small_store, index).draw_list()
        texts = [p.text for p in primitives if isinstance(p, Text)]
        assert texts[-2].startswith("Block A0: Commit")
        assert texts[-1] == "Anchor: A2"
