from .reddit import RedditClient
from .http import HTTPClient

__all__ = ["RedditClient", "HTTPClient"]
