from .exceptions import (
    RedditKitError,
    InvalidKindError,
    MissingRequestContextError,
    HTTPClientError,
    APIResponseError,
)
from .logging import setup_logging

__all__ = [
    "RedditKitError",
    "InvalidKindError",
    "MissingRequestContextError",
    "HTTPClientError",
    "APIResponseError",
    "setup_logging",
]
