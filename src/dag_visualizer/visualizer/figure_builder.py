import plotly.graph_objects as go  # pyright: ignore[reportMissingTypeStubs]

from dag_visualizer.config import DEFAULT_CONFIG, VisualizerConfig
from dag_visualizer.visualizer.layout_builder import Annotation, DagLayout, EdgeLayout, NodeLayout


class DagFigureBuilder:
    def __init__(self, config: VisualizerConfig = DEFAULT_CONFIG):
        self.config: VisualizerConfig = config

    def build(self, layout: DagLayout, title: str | None = None) -> go.Figure:
        fig = go.Figure()
        self._add_edges(fig, layout.edges)
        self._add_nodes(fig, layout.nodes)
        for note in (layout.annotation, layout.anchor_annotation):
            if note is not None:
                self._add_annotation(fig, note)
        self._configure_layout(fig, title)
        return fig

    @staticmethod
    def _add_edges(fig: go.Figure, edges: tuple[EdgeLayout, ...]) -> None:
        edges_by_color: dict[str, list[EdgeLayout]] = {}
        for e in edges:
            edges_by_color.setdefault(e.color, []).append(e)

        for color in sorted(edges_by_color.keys()):
            group = edges_by_color[color]
            xs: list[float | None] = []
            ys: list[float | None] = []
            for edge in group:
                # None breaks the polyline between segments
                xs.extend([edge.start[0], edge.end[0], None])
                ys.extend([edge.start[1], edge.end[1], None])
            fig = fig.add_trace(  # pyright: ignore[reportUnknownMemberType]
                go.Scatter(
                    x=xs,
                    y=ys,
                    mode="lines",
                    line=dict(color=color, width=1),
                    name=f"edges ({color})",
                    hoverinfo="skip",
                )
            )

    @staticmethod
    def _add_nodes(fig: go.Figure, nodes: tuple[NodeLayout, ...]) -> None:
        nodes_by_color: dict[str, list[NodeLayout]] = {}
        for n in nodes:
            nodes_by_color.setdefault(n.color, []).append(n)

        for color in sorted(nodes_by_color.keys()):
            group = nodes_by_color[color]
            fig = fig.add_trace(  # pyright: ignore[reportUnknownMemberType]
                go.Scatter(
                    x=[n.coordinate[0] for n in group],
                    y=[n.coordinate[1] for n in group],
                    mode="markers+text",
                    marker=dict(size=12, color=color),
                    text=[n.label for n in group],
                    textposition="top right",
                    textfont=dict(color=color),
                    name=f"blocks ({color})",
                    hovertemplate="block=%{text}<br>x=%{x}<br>y=%{y}<extra></extra>",
                )
            )

    @staticmethod
    def _add_annotation(fig: go.Figure, note: Annotation) -> None:
        x, y = note.coordinate
        _ = fig.add_annotation(  # pyright: ignore[reportUnknownMemberType]
            x=x,
            y=y,
            text=note.text,
            showarrow=False,
            xanchor="left",
            font=dict(color=note.color),
        )

    def _configure_layout(self, fig: go.Figure, title: str | None) -> None:
        _ = fig.update_layout(  # pyright: ignore[reportUnknownMemberType]
            title=title or "DAG",
            height=600,
            showlegend=False,
            xaxis=dict(title="Round", range=list(self.config.x_bounds), zeroline=False),
            yaxis=dict(
                title="Authority",
                range=list(self.config.y_bounds),
                zeroline=False,
                showticklabels=False,
            ),
            dragmode="pan",
        )
