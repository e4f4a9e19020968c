from __future__ import annotations


class ReconstructHTTPError(RuntimeError):
    """Base error for shared HTTP client operations."""


class ReconstructHTTPStatusError(ReconstructHTTPError):
    def __init__(self, message: str, status_code: int | None = None, body: str = "") -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class ReconstructHTTPNetworkError(ReconstructHTTPError):
    """Raised when the transport fails before a response arrives."""
