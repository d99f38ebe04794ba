import random
from typing import final, override

from dag_visualizer.parser.parser_base import Parser
from dag_visualizer.models import (
    BlockReference,
    BlockStore,
    Decision,
    DirectDecision,
    IndirectDecision,
    LabelEdge,
    ProposerSlotState,
    StatementBlock,
    Step,
    Trace,
)


@final
class ParserMock(Parser):
    """
    Generates a deterministic trace of a small DAG protocol run.

    Every authority proposes one block per round that includes a quorum of
    the previous round. Each wave starts with a leader slot, which gets
    decided once the wave is complete: directly committed, directly skipped
    (nobody voted for it), or, every `indirect_every` waves starting with the
    first, indirectly through the next wave's leader acting as anchor.
    """

    def __init__(
        self,
        n_authorities: int = 4,
        n_rounds: int = 8,
        wave_length: int = 2,
        skip_every: int = 3,
        indirect_every: int = 3,
        seed: int = 7,
    ):
        self.n_authorities = n_authorities
        self.n_rounds = n_rounds
        self.wave_length = wave_length
        self.skip_every = skip_every
        self.indirect_every = indirect_every
        self.seed = seed

    @property
    @override
    def source(self) -> str:
        return (
            f"mock(authorities={self.n_authorities}, rounds={self.n_rounds}, seed={self.seed})"
        )

    @property
    def quorum(self) -> int:
        faulty = (self.n_authorities - 1) // 3
        return self.n_authorities - faulty

    @staticmethod
    def label(authority: int, round: int) -> str:
        if authority < 26:
            return f"{chr(ord('A') + authority)}{round}"
        return f"V{authority}R{round}"

    def leader(self, round: int) -> int:
        return (round // self.wave_length) % self.n_authorities

    def _is_skipped_wave(self, wave: int) -> bool:
        return self.skip_every > 0 and wave % self.skip_every == self.skip_every - 1

    def _is_indirect_wave(self, wave: int) -> bool:
        return (
            self.indirect_every > 0
            and wave % self.indirect_every == 0
            and not self._is_skipped_wave(wave)
        )

    def _build_round(
        self,
        rng: random.Random,
        round: int,
        previous: list[BlockReference],
    ) -> list[StatementBlock]:
        if round == 0:
            return [
                StatementBlock(BlockReference(a, 0, self.label(a, 0)))
                for a in range(self.n_authorities)
            ]

        excluded: BlockReference | None = None
        prev_round = round - 1
        if prev_round % self.wave_length == 0 and self._is_skipped_wave(
            prev_round // self.wave_length
        ):
            excluded = previous[self.leader(prev_round)]

        blocks: list[StatementBlock] = []
        for authority in range(self.n_authorities):
            own = previous[authority]
            others = [r for r in previous if r != own and r != excluded]
            keeps_own = own != excluded
            low = min(self.quorum - (1 if keeps_own else 0), len(others))
            wanted = rng.randint(low, len(others))
            picked = sorted(rng.sample(others, wanted), key=lambda r: r.authority)
            includes = ([own] if keeps_own else []) + picked
            blocks.append(
                StatementBlock(
                    BlockReference(authority, round, self.label(authority, round)),
                    tuple(includes),
                )
            )
        return blocks

    @staticmethod
    def _find_path(
        store: dict[BlockReference, StatementBlock],
        source: BlockReference,
        target: BlockReference,
    ) -> list[LabelEdge] | None:
        """Depth-first search from `source` down its includes to `target`."""
        if source == target:
            return []
        for parent in store[source].includes:
            if parent.round < target.round:
                continue
            rest = ParserMock._find_path(store, parent, target)
            if rest is not None:
                return [(parent.label, source.label)] + rest
        return None

    def _decide(
        self,
        leader_round: int,
        refs: dict[tuple[int, int], BlockReference],
        store: dict[BlockReference, StatementBlock],
    ) -> Decision:
        wave = leader_round // self.wave_length
        leader = refs[(leader_round, self.leader(leader_round))]
        voters = [b for b in store.values() if b.reference.round == leader_round + 1]
        certifiers = [
            b.reference.label
            for b in store.values()
            if b.reference.round == leader_round + self.wave_length
        ]

        if self._is_skipped_wave(wave):
            return Decision(
                ProposerSlotState.SKIP,
                leader,
                DirectDecision(certificate_blocks=tuple(b.reference.label for b in voters)),
            )

        if self._is_indirect_wave(wave):
            anchor_round = leader_round + self.wave_length
            anchor = refs[(anchor_round, self.leader(anchor_round))]
            path = self._find_path(store, anchor, leader)
            return Decision(
                ProposerSlotState.COMMIT if path is not None else ProposerSlotState.SKIP,
                leader,
                IndirectDecision(anchor=anchor.label, edges=tuple(path or ())),
            )

        return Decision(
            ProposerSlotState.COMMIT,
            leader,
            DirectDecision(
                certificate_blocks=tuple(certifiers),
                supporting_edges=tuple(
                    (leader.label, v.reference.label) for v in voters if leader in v.includes
                ),
            ),
        )

    def _decision_round(self, leader_round: int) -> int:
        """Round whose snapshot first carries the verdict for `leader_round`."""
        if self._is_indirect_wave(leader_round // self.wave_length):
            return leader_round + 2 * self.wave_length
        return leader_round + self.wave_length

    @override
    def parse(self) -> Trace:
        rng = random.Random(self.seed)
        refs: dict[tuple[int, int], BlockReference] = {}
        store: dict[BlockReference, StatementBlock] = {}
        decisions: list[Decision] = []
        steps: list[Step] = []

        previous: list[BlockReference] = []
        for round in range(self.n_rounds):
            blocks = self._build_round(rng, round, previous)
            for block in blocks:
                refs[(round, block.reference.authority)] = block.reference
                store[block.reference] = block
            previous = [b.reference for b in blocks]

            for leader_round in range(0, round + 1, self.wave_length):
                if self._decision_round(leader_round) == round:
                    decisions.append(self._decide(leader_round, refs, store))

            steps.append(
                Step(
                    decisions=tuple(decisions),
                    blocks=BlockStore.from_blocks(list(store.values())),
                )
            )

        return Trace(tuple(steps))
