"""
Curses render driver.

Paints a `DagLayout` onto the terminal and turns key presses into
navigation commands:

    ← →  or  h l     previous / next step
    q                quit

`curses.wrapper` owns the terminal takeover, so normal mode is restored on
every exit path, including exceptions raised inside the loop.
"""

import curses
import logging

from dag_visualizer.config import DEFAULT_CONFIG, VisualizerConfig
from dag_visualizer.navigation import Command, Navigator, ReplayMode
from dag_visualizer.visualizer.decision_index import DecisionIndex
from dag_visualizer.visualizer.layout_builder import DagLayout, Line, Point, Text, build_layout
from dag_visualizer.visualizer.style import (
    COMMIT_COLOR,
    EDGE_COLOR,
    EDGE_SYMBOL,
    HIGHLIGHT_COLOR,
    NODE_SYMBOL,
    SKIP_COLOR,
    UNDECIDED_COLOR,
)

logger = logging.getLogger(__name__)

type Cell = tuple[int, int]

KEY_TO_COMMAND: dict[int, Command] = {
    ord("q"): Command.QUIT,
    ord("h"): Command.RETREAT,
    curses.KEY_LEFT: Command.RETREAT,
    ord("l"): Command.ADVANCE,
    curses.KEY_RIGHT: Command.ADVANCE,
}

# color name -> (curses color, extra attribute)
CURSES_COLORS: dict[str, tuple[int, int]] = {
    COMMIT_COLOR: (curses.COLOR_GREEN, curses.A_BOLD),
    SKIP_COLOR: (curses.COLOR_RED, curses.A_BOLD),
    UNDECIDED_COLOR: (curses.COLOR_WHITE, curses.A_DIM),
    EDGE_COLOR: (curses.COLOR_BLUE, 0),
    HIGHLIGHT_COLOR: (curses.COLOR_YELLOW, curses.A_BOLD),
}

HELP_LINE = "←/h previous   →/l next   q quit"


def command_for_key(key: int) -> Command | None:
    return KEY_TO_COMMAND.get(key)


class CanvasProjection:
    """Maps canvas coordinates (y pointing up) onto a block of terminal cells."""

    def __init__(
        self,
        top: int,
        height: int,
        width: int,
        config: VisualizerConfig = DEFAULT_CONFIG,
    ):
        self.top = top
        self.height = max(height, 1)
        self.width = max(width, 1)
        self.x_bounds = config.x_bounds
        self.y_bounds = config.y_bounds

    def to_cell(self, x: float, y: float) -> Cell | None:
        x0, x1 = self.x_bounds
        y0, y1 = self.y_bounds
        if not (x0 <= x <= x1 and y0 <= y <= y1):
            return None
        col = round((x - x0) / (x1 - x0) * (self.width - 1))
        row = round((y1 - y) / (y1 - y0) * (self.height - 1))
        return self.top + row, col


def rasterize(start: Cell, end: Cell) -> list[Cell]:
    """Bresenham line between two cells, endpoints included."""
    (r0, c0), (r1, c1) = start, end
    dr, dc = abs(r1 - r0), abs(c1 - c0)
    step_r = 1 if r1 >= r0 else -1
    step_c = 1 if c1 >= c0 else -1
    err = dc - dr
    cells: list[Cell] = []
    while True:
        cells.append((r0, c0))
        if (r0, c0) == (r1, c1):
            return cells
        doubled = 2 * err
        if doubled > -dr:
            err -= dr
            c0 += step_c
        if doubled < dc:
            err += dc
            r0 += step_r


def _safe_addstr(win, y: int, x: int, text: str, attr: int = 0):
    h, w = win.getmaxyx()
    if y < 0 or y >= h or x < 0 or x >= w:
        return
    try:
        win.addnstr(y, x, text, w - x, attr)
    except curses.error:
        # writing into the bottom-right cell moves the cursor off screen
        pass


class TerminalRenderer:
    def __init__(self, navigator: Navigator, config: VisualizerConfig = DEFAULT_CONFIG):
        self.navigator = navigator
        self.config = config
        self._attrs: dict[str, int] = {}
        self._cached: tuple[int, DagLayout] | None = None

    def _init_colors(self):
        if not curses.has_colors():
            return
        curses.start_color()
        background = -1
        try:
            curses.use_default_colors()
        except curses.error:
            background = curses.COLOR_BLACK
        for pair_id, (name, (color, extra)) in enumerate(CURSES_COLORS.items(), start=1):
            curses.init_pair(pair_id, color, background)
            self._attrs[name] = curses.color_pair(pair_id) | extra

    def _attr(self, color: str) -> int:
        return self._attrs.get(color, curses.A_NORMAL)

    def _layout(self) -> DagLayout:
        index = self.navigator.index
        if self._cached is None or self._cached[0] != index:
            step = self.navigator.current()
            layout = build_layout(step.blocks, DecisionIndex(step.decisions), self.config)
            self._cached = (index, layout)
        return self._cached[1]

    def header(self) -> str:
        nav = self.navigator
        if nav.mode is ReplayMode.DECISIONS:
            return f" DAG  decision {nav.visible_decisions}/{len(nav)} "
        return f" DAG  step {nav.index + 1}/{len(nav)} "

    def draw(self, stdscr, layout: DagLayout):
        stdscr.erase()
        h, w = stdscr.getmaxyx()
        _safe_addstr(stdscr, 0, 0, self.header().ljust(w), curses.A_REVERSE)
        projection = CanvasProjection(1, h - 2, w, self.config)

        for primitive in layout.draw_list():
            match primitive:
                case Line(x1, y1, x2, y2, color):
                    start, end = projection.to_cell(x1, y1), projection.to_cell(x2, y2)
                    if start is None or end is None:
                        continue
                    for row, col in rasterize(start, end):
                        _safe_addstr(stdscr, row, col, EDGE_SYMBOL, self._attr(color))
                case Point(x, y, color):
                    cell = projection.to_cell(x, y)
                    if cell is not None:
                        _safe_addstr(stdscr, cell[0], cell[1], NODE_SYMBOL, self._attr(color))
                case Text(x, y, text, color):
                    cell = projection.to_cell(x, y)
                    if cell is not None:
                        _safe_addstr(stdscr, cell[0], cell[1] + 1, text, self._attr(color))

        _safe_addstr(stdscr, h - 1, 0, HELP_LINE.ljust(w - 1), curses.A_DIM)
        stdscr.refresh()

    def _loop(self, stdscr):
        try:
            curses.curs_set(0)
        except curses.error:
            logger.debug("terminal cannot hide the cursor")
        stdscr.timeout(self.config.poll_timeout_ms)
        self._init_colors()

        while not self.navigator.terminated:
            self.draw(stdscr, self._layout())
            key = stdscr.getch()
            if key == -1 or key == curses.KEY_RESIZE:
                continue
            command = command_for_key(key)
            if command is not None:
                self.navigator.apply(command)

    def run(self):
        curses.wrapper(self._loop)
