"""Error taxonomy for Dida365 Link."""


class DidaLinkError(Exception):
    """Base class for all errors raised by Dida365 Link."""


class NetworkError(DidaLinkError):
    """Transport failure or non-success HTTP status."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        """Initialize with message and optional HTTP status."""
        super().__init__(message)
        self.status_code = status_code


class AuthError(NetworkError):
    """Sign-on rejected or request refused for stale credentials."""


class ApiError(DidaLinkError):
    """Successful response with an unexpected body shape."""


class PreconditionError(DidaLinkError):
    """Command cannot run: no active document, no choice, or missing capability."""
