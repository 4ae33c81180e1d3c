"""Exception types shared across the relay."""


class RelayError(Exception):
    """Base class for relay errors."""


class ConfigError(RelayError):
    """Required configuration is missing or invalid."""


class InferenceError(RelayError):
    """One call to the inference API did not produce a usable reply."""

    def __init__(self, model: str, reason: str, status_code: int | None = None):
        self.model = model
        self.reason = reason
        self.status_code = status_code
        super().__init__(f"{model}: {reason}")
