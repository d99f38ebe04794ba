from collections.abc import Sequence

from dag_visualizer.models import (
    BlockReference,
    Decision,
    DecisionError,
    DecisionLog,
    DirectDecision,
    IncompleteWave,
    IndirectDecision,
    Label,
    LabelEdge,
    ProposerSlotState,
    UnableToDecide,
)


def describe_log(log: DecisionLog) -> str:
    match log:
        case DirectDecision(certificate_blocks=blocks):
            return f"DirectDecision, certificate blocks: [{', '.join(blocks)}]"
        case IndirectDecision(anchor=anchor, edges=edges):
            rendered = ", ".join(f"({a}, {b})" for a, b in edges)
            return f"IndirectDecision, anchor: {anchor}, edges: [{rendered}]"
        case IncompleteWave():
            return "IncompleteWave"
        case DecisionError():
            return "Error"
        case UnableToDecide():
            return "UnableToDecide"


def describe_decision(decision: Decision) -> str:
    return (
        f"Block {decision.block.label}: {decision.status}"
        f" ({describe_log(decision.log)})"
    )


class DecisionIndex:
    """
    Answers status and highlight queries for one inspected step.

    Block status is resolved against every decision seen so far, while edge
    and anchor highlighting only look at the most recent decision.
    """

    def __init__(self, decisions: Sequence[Decision]):
        self.decisions: tuple[Decision, ...] = tuple(decisions)
        # last decision for a slot wins
        self._status: dict[BlockReference, ProposerSlotState] = {
            d.block: d.status for d in self.decisions
        }
        self._highlighted: frozenset[LabelEdge] = self._supporting_edges(self.latest)

    @property
    def latest(self) -> Decision | None:
        return self.decisions[-1] if self.decisions else None

    @staticmethod
    def _supporting_edges(decision: Decision | None) -> frozenset[LabelEdge]:
        if decision is None:
            return frozenset()
        match decision.log:
            case DirectDecision(supporting_edges=edges):
                return frozenset(edges)
            case IndirectDecision(edges=edges):
                return frozenset(edges)
            case IncompleteWave() | DecisionError() | UnableToDecide():
                return frozenset()

    def status_of(self, block: BlockReference) -> ProposerSlotState:
        return self._status.get(block, ProposerSlotState.UNDECIDED)

    def is_supporting_edge(self, parent: Label, child: Label) -> bool:
        return (parent, child) in self._highlighted or (child, parent) in self._highlighted

    def anchor_label(self) -> Label | None:
        if self.latest is None:
            return None
        match self.latest.log:
            case IndirectDecision(anchor=anchor):
                return anchor
            case _:
                return None
