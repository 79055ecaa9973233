"""Custom exceptions for edlink-stream."""


class EdlinkError(Exception):
    """Base exception for all edlink-stream errors."""


class ApiError(EdlinkError):
    """Raised when fetching a page fails.

    Covers connection failures, non-success HTTP status and bodies that
    cannot be decoded into a page.  The original exception is chained and
    also kept on ``cause``.
    """

    def __init__(self, message: str, *, url: str, cause: BaseException | None = None):
        self.url = url
        self.cause = cause
        super().__init__(f"{message} (url={url})")


class ConfigurationError(EdlinkError):
    """Raised when required settings are missing or malformed."""


class PolicyViolation(EdlinkError):
    """Raised when a pagination policy descriptor is not recognized."""
