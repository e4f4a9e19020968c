from .client import get_http_client, request
from .errors import ReconstructHTTPError, ReconstructHTTPNetworkError, ReconstructHTTPStatusError

__all__ = [
    "get_http_client",
    "request",
    "ReconstructHTTPError",
    "ReconstructHTTPNetworkError",
    "ReconstructHTTPStatusError",
]
