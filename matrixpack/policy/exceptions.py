"""Policy subsystem exceptions."""


class LiveMatrixError(Exception):
    """Base class for interception policy errors."""


class InvalidHostTokenError(LiveMatrixError):
    """Raised when a host list contains entries that are not bare host names."""

    def __init__(self, tokens: list[str]) -> None:
        self.tokens = list(tokens)
        rendered = ", ".join(repr(token) for token in self.tokens)
        super().__init__(f"Invalid host entries: {rendered}")


class UnknownServiceError(LiveMatrixError):
    """Raised when a service name is not in the service catalog."""


class PolicyConfigError(LiveMatrixError, ValueError):
    """Raised when a policy config payload is invalid."""
