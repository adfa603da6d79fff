from typing import Dict, Optional, TypeVar, Union

from redditkit.clients.http import HTTPClient
from redditkit.core.config import settings
from redditkit.core.exceptions import APIResponseError
from redditkit.core.logging import LogContext, add_correlation_id
from redditkit.listings.context import Context, RequestDescriptor
from redditkit.listings.fetcher import CursorPager, ItemParser
from redditkit.listings.listing import Listing
from redditkit.models.entities import (
    Comment,
    Post,
    parse_comment_listing,
    parse_post,
    parse_thing,
)
from redditkit.models.objects import ListingData
from redditkit.utils.pagination import assert_kind, strip_namespace

logger = LogContext(__name__)

T = TypeVar("T")


class RedditClient:
    """
    Read-only entry point returning the first page of common listings.

    Every method performs exactly one request; later pages are fetched
    lazily by the returned listing.
    """

    def __init__(
        self,
        http_client: Optional[HTTPClient] = None,
        page_limit: str = settings.PAGE_LIMIT,
    ) -> None:
        self.http_client = http_client or HTTPClient()
        self.page_limit = page_limit

    async def __aenter__(self) -> "RedditClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        await self.http_client.close()

    async def get_listing(
        self,
        url: str,
        parse_item: ItemParser[T],
        query: Optional[Dict[str, str]] = None,
        post: Optional[str] = None,
    ) -> Listing[T]:
        """
        Fetch the first page of a cursor-paged endpoint.

        Args:
            url: Endpoint path, e.g. "r/python/hot"
            parse_item: Turns one child of a page into an item
            query: Extra query parameters, kept for every later page
            post: Short id of the post the listing belongs to, if any
        """
        add_correlation_id("listing_url", url)
        ctx = Context(
            client=self.http_client,
            post=post,
            req=RequestDescriptor(url=url, query=query or {}),
        )
        return await CursorPager("", parse_item, self.page_limit).fetch(ctx)

    async def get_subreddit_posts(
        self,
        subreddit: str,
        sort: str = "hot",
        time_filter: Optional[str] = None,
    ) -> Listing[Post]:
        query = {"t": time_filter} if time_filter else None
        return await self.get_listing(f"r/{subreddit}/{sort}", parse_post, query)

    async def search_posts(self, subreddit: str, text: str) -> Listing[Post]:
        return await self.get_listing(
            f"r/{subreddit}/search",
            parse_post,
            {"q": text, "restrict_sr": "true"},
        )

    async def get_user_posts(self, username: str) -> Listing[Post]:
        return await self.get_listing(f"user/{username}/submitted", parse_post)

    async def get_user_overview(self, username: str) -> Listing[Union[Post, Comment]]:
        """Posts and comments of a user, mixed in the order the API returns."""
        return await self.get_listing(f"user/{username}/overview", parse_thing)

    async def get_comments(self, post_id: str) -> Listing[Comment]:
        """
        Fetch the comment tree of a post.

        Top-level comments are the listing's items; hidden replies are
        loaded through the listing (or the nested reply listings) on demand.
        """
        post_id = strip_namespace(post_id)
        add_correlation_id("post_id", post_id)

        res = await self.http_client.get(f"comments/{post_id}")
        if not isinstance(res, list) or len(res) != 2:
            raise APIResponseError(
                f"Expected a post and a comment listing for {post_id}"
            )

        assert_kind("Listing", res[0])
        page = ListingData.model_validate(assert_kind("Listing", res[1]).data)

        ctx = Context(client=self.http_client, post=post_id)
        listing = parse_comment_listing(page, ctx)

        logger.debug(
            "Fetched comment tree",
            extra={"post_id": post_id, "top_level": len(listing.items)},
        )
        return listing
