"""Errors raised by external-service wrappers."""


class ConfigurationError(RuntimeError):
    """A required provider credential or setting is missing."""


class UpstreamError(RuntimeError):
    """The provider answered with a non-success response or unusable payload."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code
