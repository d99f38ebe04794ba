from dataclasses import dataclass

from dag_visualizer.errors import ConfigError


@dataclass(frozen=True)
class VisualizerConfig:
    # Geometry
    horizontal_spacing: float = 15.0
    vertical_spacing: float = 5.0
    lane_offset: float = 1.5
    max_authority_lanes: int = 3

    # Canvas
    x_bounds: tuple[float, float] = (0.0, 110.0)
    y_bounds: tuple[float, float] = (0.0, 20.0)
    status_position: tuple[float, float] = (0.0, 0.0)
    anchor_position: tuple[float, float] = (0.0, 19.0)

    # Event loop
    poll_timeout_ms: int = 200

    def __post_init__(self):
        if self.horizontal_spacing <= 0 or self.vertical_spacing <= 0:
            raise ConfigError("spacing must be positive")
        if self.max_authority_lanes < 0:
            raise ConfigError("max_authority_lanes must not be negative")
        for name, (low, high) in (("x_bounds", self.x_bounds), ("y_bounds", self.y_bounds)):
            if low >= high:
                raise ConfigError(f"{name} must be increasing, got [{low}, {high}]")
        if self.poll_timeout_ms <= 0:
            raise ConfigError("poll_timeout_ms must be positive")


DEFAULT_CONFIG = VisualizerConfig()
