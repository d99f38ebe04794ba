from dag_visualizer.models import ProposerSlotState

COMMIT_COLOR = "green"
SKIP_COLOR = "red"
UNDECIDED_COLOR = "gray"

EDGE_COLOR = "blue"
HIGHLIGHT_COLOR = "yellow"

STATUS_COLORS: dict[ProposerSlotState, str] = {
    ProposerSlotState.COMMIT: COMMIT_COLOR,
    ProposerSlotState.SKIP: SKIP_COLOR,
    ProposerSlotState.UNDECIDED: UNDECIDED_COLOR,
}

NODE_SYMBOL = "●"
EDGE_SYMBOL = "·"
