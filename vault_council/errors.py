"""Failure types raised by the council core."""


class ModelCallFailure(Exception):
    """Raised when a single model call fails."""

    def __init__(self, model: str, cause: str) -> None:
        self.model = model
        self.cause = cause
        super().__init__(f"Failed to get response from {model}: {cause}")


class TransportFailure(ModelCallFailure):
    """Network or backend error during one model call."""


class EmptyResponseFailure(ModelCallFailure):
    """Backend answered with no usable completion."""

    def __init__(self, model: str, cause: str = "No response from model") -> None:
        super().__init__(model, cause)


class ConfigurationFailure(Exception):
    """Raised on a precondition violation, before any network call."""


class DispatchTimeout(Exception):
    """Raised when a whole dispatch round exceeds its deadline."""

    def __init__(self, timeout_sec: float) -> None:
        self.timeout_sec = timeout_sec
        super().__init__(f"Dispatch round timed out after {timeout_sec}s")
