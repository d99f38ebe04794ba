import logging
from collections.abc import Sequence
from enum import Enum, StrEnum

from dag_visualizer.errors import TraceLoadError
from dag_visualizer.models import Step, Trace

logger = logging.getLogger(__name__)


class ReplayMode(StrEnum):
    SNAPSHOTS = "snapshots"
    DECISIONS = "decisions"


class Command(Enum):
    ADVANCE = "advance"
    RETREAT = "retreat"
    QUIT = "quit"


def snapshot_steps(trace: Trace) -> tuple[Step, ...]:
    return trace.steps


def decision_replay_steps(trace: Trace) -> tuple[Step, ...]:
    """
    Replays the final state's decision list one verdict at a time.

    Step k shows the k + 1 earliest decisions over the final block store.
    """
    if not trace.steps:
        raise TraceLoadError("trace has no steps")
    final = trace.final
    if not final.decisions:
        raise TraceLoadError("trace has no decisions to replay")
    return tuple(
        Step(decisions=final.decisions[: k + 1], blocks=final.blocks)
        for k in range(len(final.decisions))
    )


def build_steps(trace: Trace, mode: ReplayMode) -> tuple[Step, ...]:
    if mode is ReplayMode.DECISIONS:
        return decision_replay_steps(trace)
    return snapshot_steps(trace)


class Navigator:
    def __init__(self, steps: Sequence[Step], mode: ReplayMode, start: int = 0):
        if not steps:
            raise TraceLoadError("trace has no steps")
        self.steps: tuple[Step, ...] = tuple(steps)
        self.mode: ReplayMode = mode
        self.index: int = min(max(start, 0), len(self.steps) - 1)
        self.terminated: bool = False

    def __len__(self) -> int:
        return len(self.steps)

    @property
    def visible_decisions(self) -> int:
        return len(self.current().decisions)

    def current(self) -> Step:
        return self.steps[self.index]

    def advance(self) -> None:
        if self.terminated:
            return
        if self.index + 1 < len(self.steps):
            self.index += 1
        elif self.mode is ReplayMode.DECISIONS:
            logger.info("decision replay exhausted after %d steps", len(self.steps))
            self.terminated = True

    def retreat(self) -> None:
        if self.terminated:
            return
        self.index = max(0, self.index - 1)

    def quit(self) -> None:
        self.terminated = True

    def apply(self, command: Command) -> None:
        match command:
            case Command.ADVANCE:
                self.advance()
            case Command.RETREAT:
                self.retreat()
            case Command.QUIT:
                self.quit()
        logger.debug("%s -> step %d (terminated=%s)", command.value, self.index, self.terminated)
