"""Page-fetch strategies: the ways a listing can obtain its next page."""

from typing import Any, Callable, Dict, Generic, List, Optional, Protocol, TypeVar

from redditkit.core.exceptions import APIResponseError, MissingRequestContextError
from redditkit.core.logging import LogContext
from redditkit.listings.context import Context
from redditkit.listings.listing import Listing
from redditkit.models.objects import ListingData, MoreData, RedditObject
from redditkit.utils.pagination import (
    DEFAULT_PAGE_LIMIT,
    assert_kind,
    build_page_query,
    group,
    namespace,
    strip_namespace,
)

logger = LogContext(__name__)

T = TypeVar("T")
T_co = TypeVar("T_co", covariant=True)

MORE_CHILDREN_BATCH = 100

ItemParser = Callable[[RedditObject, Context], T]
ListingParser = Callable[[ListingData, Context], Listing[T]]


class Fetcher(Protocol[T_co]):
    """Produces the page following the one it is attached to."""

    async def fetch(self, ctx: Context) -> Listing[T_co]:
        ...


class CursorPager(Generic[T]):
    """
    Fetcher for flat listings paged with an "after" cursor.

    Each successful fetch yields a new pager positioned at the page's
    trailing cursor, or none once the server reports the end.

    Args:
        after: Cursor to resume from. "" requests the first page
        parse_item: Turns one child of a page into an item
        limit: Page size requested from the server
    """

    def __init__(
        self,
        after: str,
        parse_item: ItemParser[T],
        limit: str = DEFAULT_PAGE_LIMIT,
    ) -> None:
        self.after = after
        self.parse_item = parse_item
        self.limit = limit

    def __repr__(self) -> str:
        return f"CursorPager(after={self.after!r})"

    async def next_page(self, ctx: Context) -> ListingData:
        """Fetch and validate the raw page at this pager's cursor."""
        if ctx.req is None:
            raise MissingRequestContextError()

        query = build_page_query(self.after, ctx.req.query, self.limit)
        res = await ctx.client.get(ctx.req.url, query)
        listing = assert_kind("Listing", res)
        return ListingData.model_validate(listing.data)

    async def fetch(self, ctx: Context) -> Listing[T]:
        page = await self.next_page(ctx)
        items = [self.parse_item(child, ctx) for child in page.children]

        next_pager = None
        if page.after and page.after != self.after:
            next_pager = CursorPager(page.after, self.parse_item, self.limit)
        elif page.after:
            logger.warning(
                "Server returned the same cursor twice, ending listing",
                extra={"after": page.after},
            )

        return Listing(ctx, items, next_pager)


def nest_things(things: List[Any], parent_id: str) -> ListingData:
    """
    Rebuild a reply tree from the flat list returned by api/morechildren.

    Things whose parent is in the list are attached to that parent's
    replies. Things replying to `parent_id` become top-level children.
    Anything else belongs to a parent outside the list and is dropped.
    """
    by_name: Dict[str, Dict[str, Any]] = {}
    roots: List[Dict[str, Any]] = []
    orphans: List[str] = []

    for thing in things:
        if isinstance(thing, RedditObject):
            thing = thing.model_dump()
        data = dict(thing.get("data") or {})
        node = {"kind": thing.get("kind"), "data": data}

        node_parent = data.get("parent_id", parent_id)
        parent = by_name.get(node_parent)
        if parent is None:
            if node_parent == parent_id:
                roots.append(node)
            else:
                orphans.append(data.get("name") or str(data.get("id")))
        else:
            replies = parent["data"].get("replies")
            if not isinstance(replies, dict):
                replies = {"kind": "Listing", "data": {"children": []}}
                parent["data"]["replies"] = replies
            replies["data"]["children"].append(node)

        if data.get("name"):
            by_name[data["name"]] = node

    if orphans:
        logger.warning(
            "Dropped replies whose parent is not in the batch",
            extra={"parent_id": parent_id, "dropped": orphans},
        )

    return ListingData.model_validate({"children": roots})


class MoreChildrenFetcher(Generic[T]):
    """
    Fetcher for the "more" placeholders of a reply tree.

    Loads the hidden replies in batches of at most `batch_size` ids, each
    batch chaining a fetcher for the ids still unloaded. A placeholder that
    lists no ids ("continue this thread") loads the parent's subtree instead.

    Args:
        more: The placeholder node
        parse_listing: Turns a (nested) page of replies into a listing
        batch_size: Maximum ids requested per call
        thread: "Continue this thread" placeholder loaded once every id
            of `more` has been fetched
    """

    def __init__(
        self,
        more: MoreData,
        parse_listing: ListingParser[T],
        batch_size: int = MORE_CHILDREN_BATCH,
        thread: Optional[MoreData] = None,
    ) -> None:
        self.more = more
        self.parse_listing = parse_listing
        self.batch_size = batch_size
        self.thread = thread

    def __repr__(self) -> str:
        return (
            f"MoreChildrenFetcher(parent_id={self.more.parent_id!r}, "
            f"remaining={len(self.more.children)}, "
            f"thread={self.thread is not None})"
        )

    async def fetch(self, ctx: Context) -> Listing[T]:
        if ctx.post is None:
            raise MissingRequestContextError(
                "Unable to fetch more replies without a post id"
            )

        if self.more.children:
            return await self._fetch_children(ctx)
        return await self._continue_thread(ctx)

    async def _fetch_children(self, ctx: Context) -> Listing[T]:
        batch, *rest = group(self.more.children, self.batch_size)
        res = await ctx.client.get(
            "api/morechildren",
            {
                "api_type": "json",
                "children": ",".join(batch),
                "link_id": namespace("t3", ctx.post),
                "limit_children": "false",
            },
        )
        page = nest_things(self._things(res), self.more.parent_id)

        # Placeholders at the top level of the batch continue this one.
        remaining = [id for chunk in rest for id in chunk]
        thread = self.thread
        children = []
        for child in page.children:
            if child.kind != "more":
                children.append(child)
                continue
            node = MoreData.model_validate(child.data)
            if node.children:
                remaining.extend(node.children)
            elif thread is None:
                thread = node

        listing = self.parse_listing(ListingData(children=children), ctx)

        next_fetcher = None
        if remaining:
            rest_more = self.more.model_copy(
                update={"children": remaining, "count": len(remaining)}
            )
            next_fetcher = MoreChildrenFetcher(
                rest_more, self.parse_listing, self.batch_size, thread
            )
        elif thread is not None:
            next_fetcher = MoreChildrenFetcher(
                thread, self.parse_listing, self.batch_size
            )

        logger.debug(
            "Fetched more children",
            extra={
                "parent_id": self.more.parent_id,
                "requested": len(batch),
                "remaining": len(remaining),
            },
        )
        return Listing(ctx, listing.items, next_fetcher)

    async def _continue_thread(self, ctx: Context) -> Listing[T]:
        parent = strip_namespace(self.more.parent_id)
        res = await ctx.client.get(f"comments/{ctx.post}", {"comment": parent})

        if not isinstance(res, list) or len(res) != 2:
            raise APIResponseError(
                f"Expected a post and a comment listing for thread {parent}"
            )
        assert_kind("Listing", res[0])
        comments = ListingData.model_validate(assert_kind("Listing", res[1]).data)

        if not comments.children:
            return Listing(ctx, [])

        head = assert_kind("t1", comments.children[0])
        replies = (head.data or {}).get("replies")
        if not replies:
            return Listing(ctx, [])

        replies_page = ListingData.model_validate(assert_kind("Listing", replies).data)
        return self.parse_listing(replies_page, ctx)

    @staticmethod
    def _things(res: Any) -> List[Any]:
        body = res.get("json") if isinstance(res, dict) else None
        if not isinstance(body, dict):
            raise APIResponseError("Malformed api/morechildren response")

        if body.get("errors"):
            raise APIResponseError(
                "api/morechildren returned errors", errors=body["errors"]
            )

        try:
            return list(body["data"]["things"])
        except (KeyError, TypeError) as e:
            raise APIResponseError("Malformed api/morechildren response") from e
