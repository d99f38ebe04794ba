from dataclasses import dataclass, field
from enum import StrEnum
from typing import Iterator

type Label = str
type LabelEdge = tuple[Label, Label]


@dataclass(frozen=True)
class BlockReference:
    authority: int
    round: int
    label: Label


@dataclass(frozen=True)
class StatementBlock:
    reference: BlockReference
    includes: tuple[BlockReference, ...] = ()


@dataclass(frozen=True)
class BlockStore:
    """Blocks of one trace step keyed by their (round, authority) slot."""

    blocks: dict[tuple[int, int], StatementBlock] = field(default_factory=dict)

    @classmethod
    def from_blocks(cls, blocks: list[StatementBlock]) -> "BlockStore":
        table: dict[tuple[int, int], StatementBlock] = {}
        for block in blocks:
            ref = block.reference
            table[(ref.round, ref.authority)] = block
        return cls(table)

    def get(self, round: int, authority: int) -> StatementBlock | None:
        return self.blocks.get((round, authority))

    def find(self, label: Label) -> StatementBlock | None:
        for block in self.blocks.values():
            if block.reference.label == label:
                return block
        return None

    def __iter__(self) -> Iterator[StatementBlock]:
        for key in sorted(self.blocks):
            yield self.blocks[key]

    def __len__(self) -> int:
        return len(self.blocks)


class ProposerSlotState(StrEnum):
    COMMIT = "Commit"
    SKIP = "Skip"
    UNDECIDED = "Undecided"

    def get_color(self) -> str:
        from dag_visualizer.visualizer.style import STATUS_COLORS

        return STATUS_COLORS[self]


@dataclass(frozen=True)
class IncompleteWave:
    pass


@dataclass(frozen=True)
class DirectDecision:
    certificate_blocks: tuple[Label, ...] = ()
    supporting_edges: tuple[LabelEdge, ...] = ()


@dataclass(frozen=True)
class IndirectDecision:
    anchor: Label
    edges: tuple[LabelEdge, ...] = ()


@dataclass(frozen=True)
class DecisionError:
    pass


@dataclass(frozen=True)
class UnableToDecide:
    pass


type DecisionLog = (
    IncompleteWave | DirectDecision | IndirectDecision | DecisionError | UnableToDecide
)


@dataclass(frozen=True)
class Decision:
    status: ProposerSlotState
    block: BlockReference
    log: DecisionLog


@dataclass(frozen=True)
class Step:
    decisions: tuple[Decision, ...]
    blocks: BlockStore


@dataclass(frozen=True)
class Trace:
    steps: tuple[Step, ...]

    def __len__(self) -> int:
        return len(self.steps)

    @property
    def final(self) -> Step:
        return self.steps[-1]
