class VisualizerError(Exception):
    """Base class for failures reported to the user before the replay starts."""


class TraceLoadError(VisualizerError):
    def __init__(self, message: str, path: str | None = None, state: int | None = None):
        self.path = path
        self.state = state
        parts: list[str] = []
        if path:
            parts.append(path)
        if state is not None:
            parts.append(f"state {state}")
        prefix = ", ".join(parts)
        super().__init__(f"{prefix}: {message}" if prefix else message)


class ConfigError(VisualizerError):
    pass
