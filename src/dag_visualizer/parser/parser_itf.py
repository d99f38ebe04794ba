import json
import logging
from pathlib import Path
from typing import Any, final, override

from dag_visualizer.errors import TraceLoadError
from dag_visualizer.parser.parser_base import Parser
from dag_visualizer.models import (
    BlockReference,
    BlockStore,
    Decision,
    DecisionError,
    DecisionLog,
    DirectDecision,
    IncompleteWave,
    IndirectDecision,
    LabelEdge,
    ProposerSlotState,
    StatementBlock,
    Step,
    Trace,
    UnableToDecide,
)

logger = logging.getLogger(__name__)

type Variant = tuple[str, Any]

TAG_TO_STATUS = {
    "Commit": ProposerSlotState.COMMIT,
    "Skip": ProposerSlotState.SKIP,
    "Undecided": ProposerSlotState.UNDECIDED,
}

FIELD_ALIASES = {
    "certificate_blocks": ("certificate_blocks", "certificateBlocks"),
    "supporting_edges": ("supporting_edges", "supportingEdges"),
}

LEGACY_DAG_VAR = "dag"


class _MalformedValue(Exception):
    pass


def decode_value(value: Any) -> Any:
    """Decodes one ITF value into plain Python data."""
    if isinstance(value, list):
        return [decode_value(v) for v in value]
    if not isinstance(value, dict):
        return value

    if "#bigint" in value:
        return int(value["#bigint"])
    if "#tup" in value:
        return tuple(decode_value(v) for v in value["#tup"])
    if "#set" in value:
        return [decode_value(v) for v in value["#set"]]
    if "#map" in value:
        return {_hashable(decode_value(k)): decode_value(v) for k, v in value["#map"]}
    if "#unserializable" in value:
        raise _MalformedValue(f"unserializable value {value['#unserializable']!r}")
    if set(value) == {"tag", "value"}:
        return (value["tag"], decode_value(value["value"]))
    return {k: decode_value(v) for k, v in value.items() if not k.startswith("#")}


def _hashable(key: Any) -> Any:
    if isinstance(key, list):
        return tuple(_hashable(k) for k in key)
    if isinstance(key, dict):
        return tuple(sorted((k, _hashable(v)) for k, v in key.items()))
    return key


@final
class ParserItf(Parser):
    def __init__(
        self,
        trace_path: Path,
        blocks_var: str = "blocks",
        decisions_var: str = "decisions",
        newest_first: bool = False,
    ):
        self.trace_path = trace_path
        self.blocks_var = blocks_var
        self.decisions_var = decisions_var
        self.newest_first = newest_first

    @property
    @override
    def source(self) -> str:
        return str(self.trace_path)

    def _fail(self, message: str, state: int | None = None) -> TraceLoadError:
        return TraceLoadError(message, path=str(self.trace_path), state=state)

    @staticmethod
    def _field(record: dict[str, Any], name: str) -> Any:
        for key in FIELD_ALIASES.get(name, (name,)):
            if key in record:
                return record[key]
        raise _MalformedValue(f"record is missing field {name!r}")

    @staticmethod
    def _variant(value: Any) -> Variant:
        if not (isinstance(value, tuple) and len(value) == 2 and isinstance(value[0], str)):
            raise _MalformedValue(f"expected a tagged variant, got {value!r}")
        return value

    def _parse_reference(self, value: Any) -> BlockReference:
        if not isinstance(value, dict):
            raise _MalformedValue(f"expected a block reference record, got {value!r}")
        return BlockReference(
            authority=int(self._field(value, "authority")),
            round=int(self._field(value, "round")),
            label=str(self._field(value, "label")),
        )

    @staticmethod
    def _parse_label(value: Any) -> str:
        if isinstance(value, dict) and "label" in value:
            return str(value["label"])
        return str(value)

    def _parse_edges(self, value: Any) -> tuple[LabelEdge, ...]:
        edges: list[LabelEdge] = []
        for edge in value:
            if len(edge) != 2:
                raise _MalformedValue(f"edge must have two endpoints, got {edge!r}")
            edges.append((self._parse_label(edge[0]), self._parse_label(edge[1])))
        return tuple(edges)

    def _parse_log(self, value: Any) -> DecisionLog:
        tag, payload = self._variant(value)
        match tag:
            case "DirectDecision":
                return DirectDecision(
                    certificate_blocks=tuple(
                        self._parse_label(b) for b in self._field(payload, "certificate_blocks")
                    ),
                    supporting_edges=self._parse_edges(self._field(payload, "supporting_edges")),
                )
            case "IndirectDecision":
                return IndirectDecision(
                    anchor=self._parse_label(self._field(payload, "anchor")),
                    edges=self._parse_edges(self._field(payload, "edges")),
                )
            case "IncompleteWave":
                return IncompleteWave()
            case "Error":
                return DecisionError()
            case "UnableToDecide":
                return UnableToDecide()
            case _:
                raise _MalformedValue(f"unknown decision log {tag!r}")

    def _parse_status(self, value: Any) -> ProposerSlotState:
        tag, _ = self._variant(value)
        if tag not in TAG_TO_STATUS:
            raise _MalformedValue(f"unknown proposer slot state {tag!r}")
        return TAG_TO_STATUS[tag]

    def _parse_decision(self, value: Any) -> Decision:
        return Decision(
            status=self._parse_status(self._field(value, "status")),
            block=self._parse_reference(self._field(value, "block")),
            log=self._parse_log(self._field(value, "log")),
        )

    def _parse_block(self, value: Any) -> StatementBlock:
        return StatementBlock(
            reference=self._parse_reference(self._field(value, "reference")),
            includes=tuple(self._parse_reference(r) for r in self._field(value, "includes")),
        )

    def _parse_store(self, value: Any) -> BlockStore:
        blocks: list[StatementBlock] = []
        for by_authority in value.values():
            for block in by_authority.values():
                blocks.append(self._parse_block(block))
        return BlockStore.from_blocks(blocks)

    def _parse_legacy_dag(self, value: Any) -> tuple[list[Decision], BlockStore]:
        """Reads the older `dag` shape: a list of blocks each tagged with its slot state.

        Such traces carry no decision logs, so every decided slot is replayed
        with an IncompleteWave log in list order.
        """
        blocks: list[StatementBlock] = []
        decisions: list[Decision] = []
        for record in value:
            block = self._parse_block(self._field(record, "block"))
            status = self._parse_status(self._field(record, "state"))
            blocks.append(block)
            if status != ProposerSlotState.UNDECIDED:
                decisions.append(Decision(status, block.reference, IncompleteWave()))
        return decisions, BlockStore.from_blocks(blocks)

    def _parse_state(self, raw: dict[str, Any], index: int) -> Step:
        if not isinstance(raw, dict):
            raise self._fail("state is not a record", index)
        legacy = self.blocks_var not in raw and LEGACY_DAG_VAR in raw
        required = (LEGACY_DAG_VAR,) if legacy else (self.blocks_var, self.decisions_var)
        for var in required:
            if var not in raw:
                raise self._fail(f"state variable {var!r} is missing", index)
        try:
            if legacy:
                decisions, blocks = self._parse_legacy_dag(decode_value(raw[LEGACY_DAG_VAR]))
            else:
                decisions = [self._parse_decision(d) for d in decode_value(raw[self.decisions_var])]
                blocks = self._parse_store(decode_value(raw[self.blocks_var]))
        except (_MalformedValue, AttributeError, KeyError, TypeError, ValueError) as exc:
            raise self._fail(f"malformed state: {exc}", index) from exc

        # steps always hold decisions oldest first
        if self.newest_first:
            decisions.reverse()
        return Step(decisions=tuple(decisions), blocks=blocks)

    @override
    def parse(self) -> Trace:
        try:
            document = json.loads(self.trace_path.read_text())
        except OSError as exc:
            raise self._fail(f"cannot read trace: {exc.strerror or exc}") from exc
        except json.JSONDecodeError as exc:
            raise self._fail(f"invalid JSON: {exc}") from exc
        except UnicodeDecodeError as exc:
            raise self._fail(f"invalid encoding: {exc}") from exc

        if not isinstance(document, dict) or not isinstance(document.get("states"), list):
            raise self._fail("not an ITF trace, 'states' list is missing")

        states = document["states"]
        if not states:
            raise self._fail("trace has no states")

        steps = tuple(self._parse_state(raw, i) for i, raw in enumerate(states))
        logger.info(
            "loaded %d states from %s (%d blocks, %d decisions in final state)",
            len(steps),
            self.trace_path,
            len(steps[-1].blocks),
            len(steps[-1].decisions),
        )
        return Trace(steps)
