from redditkit.clients import HTTPClient, RedditClient
from redditkit.core.exceptions import (
    APIResponseError,
    HTTPClientError,
    InvalidKindError,
    MissingRequestContextError,
    RedditKitError,
)
from redditkit.listings import (
    Context,
    CursorPager,
    Fetcher,
    Listing,
    MoreChildrenFetcher,
    RequestDescriptor,
)
from redditkit.models.entities import Comment, Post

__all__ = [
    "HTTPClient",
    "RedditClient",
    "APIResponseError",
    "HTTPClientError",
    "InvalidKindError",
    "MissingRequestContextError",
    "RedditKitError",
    "Context",
    "CursorPager",
    "Fetcher",
    "Listing",
    "MoreChildrenFetcher",
    "RequestDescriptor",
    "Comment",
    "Post",
]
