import logging
from collections.abc import Sequence
from typing import Any

import plotly.graph_objects as go  # pyright: ignore[reportMissingTypeStubs]
from dash import Dash, Input, Output, State, ctx, dcc, html

from dag_visualizer.config import DEFAULT_CONFIG, VisualizerConfig
from dag_visualizer.models import Step
from dag_visualizer.navigation import Command, Navigator, ReplayMode
from dag_visualizer.visualizer.decision_index import DecisionIndex
from dag_visualizer.visualizer.figure_builder import DagFigureBuilder
from dag_visualizer.visualizer.layout_builder import build_layout

logger = logging.getLogger(__name__)

BUTTON_TO_COMMAND = {
    "prev-step": Command.RETREAT,
    "next-step": Command.ADVANCE,
}


class DashApp:
    """Browser render driver: the same step navigation drawn with plotly."""

    def __init__(
        self,
        steps: Sequence[Step],
        mode: ReplayMode = ReplayMode.SNAPSHOTS,
        config: VisualizerConfig = DEFAULT_CONFIG,
    ):
        self.steps: tuple[Step, ...] = tuple(steps)
        self.mode: ReplayMode = mode
        self.config: VisualizerConfig = config
        self.builder: DagFigureBuilder = DagFigureBuilder(config)
        # validates the step sequence up front
        Navigator(self.steps, mode)

        self.app: Dash = Dash(__name__, title="DAG visualizer")
        self.app.layout = self._build_layout()
        self._register_callbacks()

    def caption(self, index: int, finished: bool = False) -> str:
        unit = "decision" if self.mode is ReplayMode.DECISIONS else "step"
        text = f"{unit} {index + 1} / {len(self.steps)}"
        return f"{text} (replay finished)" if finished else text

    def figure(self, index: int) -> go.Figure:
        step = self.steps[index]
        layout = build_layout(step.blocks, DecisionIndex(step.decisions), self.config)
        return self.builder.build(layout, title=self.caption(index))

    def navigate(self, index: int, command: Command) -> tuple[int, bool]:
        navigator = Navigator(self.steps, self.mode, start=index)
        navigator.apply(command)
        return navigator.index, navigator.terminated

    def _build_layout(self) -> html.Div:
        return html.Div(
            [
                html.Div(
                    [
                        html.Button("◀ Previous", id="prev-step", n_clicks=0),
                        html.Button("Next ▶", id="next-step", n_clicks=0),
                        html.Span(self.caption(0), id="step-caption", style={"marginLeft": "1em"}),
                    ],
                ),
                dcc.Graph(id="dag-graph", figure=self.figure(0)),
                dcc.Store(id="cursor", data=0),
            ]
        )

    def _register_callbacks(self) -> None:
        @self.app.callback(
            Output("cursor", "data"),
            Output("dag-graph", "figure"),
            Output("step-caption", "children"),
            Input("prev-step", "n_clicks"),
            Input("next-step", "n_clicks"),
            State("cursor", "data"),
            prevent_initial_call=True,
        )
        def on_navigate(_prev: int, _next: int, cursor: int | None) -> tuple[int, Any, str]:
            command = BUTTON_TO_COMMAND.get(str(ctx.triggered_id))
            index = cursor or 0
            finished = False
            if command is not None:
                index, finished = self.navigate(index, command)
            logger.debug("web cursor -> %d", index)
            return index, self.figure(index), self.caption(index, finished)

    def run(self, **kwargs: Any) -> None:
        self.app.run(**kwargs)
