"""Exceptions for the TED connector."""
from typing import Optional


class TEDError(Exception):
    """Base class for TED connector failures."""

    pass


class TEDUpstreamError(TEDError):
    """Raised when TED answers with a non-2xx status or cannot be reached.

    status_code is None for transport failures (connection refused, timeout).
    body holds the raw response text (truncated) or the transport error message.
    """

    def __init__(self, status_code: Optional[int], body: str):
        self.status_code = status_code
        self.body = body
        label = status_code if status_code is not None else "transport error"
        super().__init__(f"TED API {label}: {body}")


class TEDResponseFormatError(TEDError, ValueError):
    """Raised when TED returns a body that is not JSON (or is HTML from a wrong endpoint)."""

    pass
