"""
test_figure_builder.py

Tests for the plotly rendering and the Dash page wiring.
"""

import pytest

from dag_visualizer.models import (
    Decision,
    DirectDecision,
    IndirectDecision,
    ProposerSlotState,
    Step,
)
from dag_visualizer.navigation import Command, ReplayMode
from dag_visualizer.visualizer.dash_app import DashApp
from dag_visualizer.visualizer.decision_index import DecisionIndex
from dag_visualizer.visualizer.figure_builder import DagFigureBuilder
from dag_visualizer.visualizer.layout_builder import build_layout
from dag_visualizer.visualizer.style import EDGE_COLOR, HIGHLIGHT_COLOR


@pytest.fixture
def indirect_layout(small_store, ref):
    index = DecisionIndex(
        [
            Decision(
                ProposerSlotState.COMMIT,
                ref("A0"),
                IndirectDecision(anchor="A2", edges=(("A0", "A1"), ("A1", "A2"))),
            )
        ]
    )
    return build_layout(small_store, index)


class TestDagFigureBuilder:
    def test_edge_traces_grouped_by_color(self, indirect_layout):
        fig = DagFigureBuilder().build(indirect_layout)
        line_traces = [t for t in fig.data if t.mode == "lines"]
        assert {t.line.color for t in line_traces} == {EDGE_COLOR, HIGHLIGHT_COLOR}

        highlight = next(t for t in line_traces if t.line.color == HIGHLIGHT_COLOR)
        # two segments, each followed by a gap
        assert len(highlight.x) == 6

    def test_every_node_labelled(self, indirect_layout):
        fig = DagFigureBuilder().build(indirect_layout)
        labels = [label for t in fig.data if t.mode == "markers+text" for label in t.text]
        assert sorted(labels) == sorted(n.label for n in indirect_layout.nodes)

    def test_annotations(self, indirect_layout):
        fig = DagFigureBuilder().build(indirect_layout)
        texts = [a.text for a in fig.layout.annotations]
        assert texts[0].startswith("Block A0: Commit (IndirectDecision")
        assert texts[1] == "Anchor: A2"

    def test_axes_fixed_to_canvas(self, indirect_layout):
        fig = DagFigureBuilder().build(indirect_layout, title="step 1")
        assert tuple(fig.layout.xaxis.range) == (0.0, 110.0)
        assert tuple(fig.layout.yaxis.range) == (0.0, 20.0)
        assert fig.layout.title.text == "step 1"


class TestDashApp:
    @pytest.fixture
    def steps(self, small_store, ref):
        decision = Decision(ProposerSlotState.COMMIT, ref("A0"), DirectDecision())
        return (Step((), small_store), Step((decision,), small_store))

    def test_navigate_snapshots_clamps(self, steps):
        app = DashApp(steps, ReplayMode.SNAPSHOTS)
        assert app.navigate(0, Command.RETREAT) == (0, False)
        assert app.navigate(0, Command.ADVANCE) == (1, False)
        assert app.navigate(1, Command.ADVANCE) == (1, False)

    def test_navigate_decisions_finishes(self, steps):
        app = DashApp(steps, ReplayMode.DECISIONS)
        assert app.navigate(1, Command.ADVANCE) == (1, True)
        assert app.caption(1, finished=True) == "decision 2 / 2 (replay finished)"

    def test_figure_per_step(self, steps):
        app = DashApp(steps, ReplayMode.SNAPSHOTS)
        assert len(app.figure(0).layout.annotations) == 0
        assert len(app.figure(1).layout.annotations) == 1
        assert app.caption(0) == "step 1 / 2"
