from typing import Dict, Any


class RedditKitError(Exception):
    """Base exception class for library errors"""

    def __init__(
        self,
        detail: str,
        error_code: str,
        additional_info: Dict[str, Any] | None = None,
    ):
        super().__init__(detail)
        self.detail = detail
        self.error_code = error_code
        self.additional_info = additional_info or {}


class InvalidKindError(RedditKitError):
    """Raised when a tagged object does not carry the expected kind"""

    def __init__(self, expected: str, actual: str | None):
        super().__init__(
            detail=f"Expected kind '{expected}', got '{actual}'",
            error_code="INVALID_KIND",
            additional_info={"expected": expected, "actual": actual},
        )
        self.expected = expected
        self.actual = actual


class MissingRequestContextError(RedditKitError):
    """Raised when a fetcher lacks the information to re-issue its request"""

    def __init__(self, detail: str = "Unable to fetch next page"):
        super().__init__(
            detail=detail,
            error_code="MISSING_REQUEST_CONTEXT",
        )


class HTTPClientError(RedditKitError):
    """Raised when there's an error in the HTTP client"""

    def __init__(
        self,
        detail: str,
        status_code: int | None = None,
        url: str | None = None,
    ):
        additional_info: Dict[str, Any] = {}
        if url:
            additional_info["url"] = url
        if status_code is not None:
            additional_info["status_code"] = status_code
        super().__init__(
            detail=detail,
            error_code="HTTP_CLIENT_ERROR",
            additional_info=additional_info,
        )
        self.status_code = status_code


class APIResponseError(RedditKitError):
    """Raised when a response does not have the shape the endpoint promises"""

    def __init__(self, detail: str, errors: list | None = None):
        additional_info = {"errors": errors} if errors else {}
        super().__init__(
            detail=detail,
            error_code="API_RESPONSE_ERROR",
            additional_info=additional_info,
        )
