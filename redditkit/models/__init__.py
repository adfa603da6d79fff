from .objects import RedditObject, ListingData, MoreData

__all__ = [
    "RedditObject",
    "ListingData",
    "MoreData",
]
