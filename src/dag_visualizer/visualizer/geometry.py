from dag_visualizer.config import DEFAULT_CONFIG, VisualizerConfig

type Coordinate = tuple[float, float]


def coordinates(
    authority: int, round: int, config: VisualizerConfig = DEFAULT_CONFIG
) -> Coordinate:
    """Rounds advance left to right, authority 0 sits in the top lane."""
    x = round * config.horizontal_spacing
    y = (config.max_authority_lanes - authority) * config.vertical_spacing + config.lane_offset
    return float(x), float(y)
