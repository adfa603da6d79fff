from .context import Context, RequestDescriptor, Transport
from .listing import Listing
from .fetcher import Fetcher, CursorPager, MoreChildrenFetcher

__all__ = [
    "Context",
    "RequestDescriptor",
    "Transport",
    "Listing",
    "Fetcher",
    "CursorPager",
    "MoreChildrenFetcher",
]
