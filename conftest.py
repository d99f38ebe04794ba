"""Shared fixtures: a small three-round DAG with four authorities."""

import pytest

from dag_visualizer.models import BlockReference, BlockStore, StatementBlock


def make_ref(label: str) -> BlockReference:
    """'A0' -> authority 0, round 0; 'C2' -> authority 2, round 2."""
    return BlockReference(authority=ord(label[0]) - ord("A"), round=int(label[1:]), label=label)


@pytest.fixture
def ref():
    return make_ref


@pytest.fixture
def block():
    def factory(label: str, *parents: str) -> StatementBlock:
        return StatementBlock(make_ref(label), tuple(make_ref(p) for p in parents))

    return factory


@pytest.fixture
def small_store(block):
    """
    Round 0: A0 B0 C0 D0
    Round 1: A1 -> A0 B0 C0, B1 -> A0 B0 D0
    Round 2: A2 -> A1 B1
    """
    return BlockStore.from_blocks(
        [
            block("A0"),
            block("B0"),
            block("C0"),
            block("D0"),
            block("A1", "A0", "B0", "C0"),
            block("B1", "A0", "B0", "D0"),
            block("A2", "A1", "B1"),
        ]
    )
