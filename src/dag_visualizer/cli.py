import argparse
import curses
import logging
import sys
from pathlib import Path

from dag_visualizer.config import VisualizerConfig
from dag_visualizer.errors import VisualizerError
from dag_visualizer.navigation import Navigator, ReplayMode, build_steps
from dag_visualizer.parser import Parser, ParserItf, ParserMock
from dag_visualizer.visualizer import DashApp, TerminalRenderer

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dag-visualizer",
        description="Step through a recorded DAG consensus trace.",
    )
    parser.add_argument("trace", nargs="?", type=Path, help="ITF JSON trace file")
    parser.add_argument("--mock", action="store_true", help="replay a generated trace instead")
    parser.add_argument(
        "--mode",
        choices=[m.value for m in ReplayMode],
        default=ReplayMode.SNAPSHOTS.value,
        help="step through trace states or replay the final decisions one by one",
    )
    parser.add_argument(
        "--newest-first",
        action="store_true",
        help="the trace records decisions newest first",
    )
    parser.add_argument("--web", action="store_true", help="serve a Dash page instead of the terminal UI")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8050)
    parser.add_argument("--debug", action="store_true", help="run Dash in debug mode")

    geometry = parser.add_argument_group("layout")
    geometry.add_argument("--horizontal-spacing", type=float, default=15.0)
    geometry.add_argument("--vertical-spacing", type=float, default=5.0)
    geometry.add_argument("--lanes", type=int, default=3, help="highest authority lane")
    geometry.add_argument("--poll-ms", type=int, default=200, help="key poll timeout")

    parser.add_argument(
        "--log-level", default="WARNING", choices=["DEBUG", "INFO", "WARNING", "ERROR"]
    )
    parser.add_argument("--log-file", type=Path)
    return parser


def configure_logging(level: str, log_file: Path | None, terminal: bool) -> None:
    if log_file is not None:
        handler: logging.Handler = logging.FileHandler(log_file)
    elif terminal:
        # curses owns stdout/stderr
        handler = logging.NullHandler()
    else:
        handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logging.basicConfig(level=level.upper(), handlers=[handler], force=True)


def make_parser(args: argparse.Namespace) -> Parser:
    if args.mock:
        return ParserMock()
    if args.trace is None:
        raise VisualizerError("a trace file is required unless --mock is given")
    return ParserItf(args.trace, newest_first=args.newest_first)


def main(argv: list[str] | None = None) -> int:
    args = build_arg_parser().parse_args(argv)
    configure_logging(args.log_level, args.log_file, terminal=not args.web)

    try:
        config = VisualizerConfig(
            horizontal_spacing=args.horizontal_spacing,
            vertical_spacing=args.vertical_spacing,
            max_authority_lanes=args.lanes,
            poll_timeout_ms=args.poll_ms,
        )
        mode = ReplayMode(args.mode)
        parser = make_parser(args)
        logger.info("loading trace from %s", parser.source)
        trace = parser.parse()
        steps = build_steps(trace, mode)
        navigator = Navigator(steps, mode)
    except VisualizerError as exc:
        logger.error("%s", exc)
        print(f"error: {exc}", file=sys.stderr)
        return 1

    logger.info("replaying %d steps in %s mode", len(steps), mode)
    if args.web:
        DashApp(steps, mode, config).run(host=args.host, port=args.port, debug=args.debug)
        return 0

    try:
        TerminalRenderer(navigator, config).run()
    except KeyboardInterrupt:
        return 130
    except curses.error as exc:
        logger.error("terminal setup failed: %s", exc)
        print(f"error: cannot drive the terminal: {exc}", file=sys.stderr)
        return 1
    return 0
