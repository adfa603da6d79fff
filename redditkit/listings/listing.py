import asyncio
import inspect
from typing import (
    TYPE_CHECKING,
    Any,
    AsyncIterator,
    Awaitable,
    Callable,
    Generic,
    Iterable,
    List,
    Optional,
    TypeVar,
    Union,
)

from redditkit.core.logging import LogContext, PerformanceLogger
from redditkit.listings.context import Context

if TYPE_CHECKING:
    from redditkit.listings.fetcher import Fetcher

logger = LogContext(__name__)

T = TypeVar("T")
R = TypeVar("R")

# A visitor may be a plain function or a coroutine function.
Visitor = Callable[[T], Union[R, Awaitable[R]]]


async def _resolve(result: Any) -> Any:
    if inspect.isawaitable(result):
        return await result
    return result


def _retrieve_exception(task: "asyncio.Future[Any]") -> None:
    # Waiters may all be cancelled before the shared fetch fails.
    if not task.cancelled():
        task.exception()


class Listing(Generic[T]):
    """
    A lazily fetched, cursor-paged sequence of items.

    A listing is a chain of nodes, one per page. Each node holds the items
    already on hand and, optionally, a fetcher able to produce the next node.
    Nodes fetch their successor at most once and keep it, so walking the
    same listing twice never repeats a request.

    Args:
        ctx: Request context shared by the whole chain
        items: The items of this page, in server order
        fetcher: Strategy producing the next page. None makes this node
            terminal: it will never cause an API call
    """

    def __init__(
        self,
        ctx: Context,
        items: Iterable[T],
        fetcher: Optional["Fetcher[T]"] = None,
    ) -> None:
        self._ctx = ctx
        self._items: List[T] = list(items)
        self._fetcher = fetcher
        self._next: Optional["Listing[T]"] = None
        self._pending: Optional["asyncio.Future[Listing[T]]"] = None

    @property
    def ctx(self) -> Context:
        return self._ctx

    @property
    def items(self) -> List[T]:
        """A copy of the items held by this page"""
        return list(self._items)

    @property
    def next(self) -> Optional["Listing[T]"]:
        """The following page, if it has already been fetched"""
        return self._next

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(items={len(self._items)}, "
            f"can_fetch_more={self.can_fetch_more()}, "
            f"fetched_next={self._next is not None})"
        )

    async def is_empty(self) -> bool:
        """
        Whether or not this listing is empty.

        Answers from memory when possible. Otherwise fetches the next page
        once and keeps it for later traversal.
        """
        # Items on hand: not empty.
        if self._items:
            return False

        # Nothing on hand and no way to get more: empty.
        if self._fetcher is None:
            return True

        next_page = await self._fetch_next()
        return next_page is None or not next_page._items

    def can_fetch_more(self) -> bool:
        """
        Whether or not this listing could perform a fetch to get more items.

        False guarantees this listing will never cause an API call. True does
        not mean more items exist, only that there might be.
        """
        return self._fetcher is not None

    async def for_each_page(self, fn: Visitor[List[T], Optional[bool]]) -> None:
        """
        Call `fn` on the items of every page, in order.

        Returning (or resolving to) False from `fn` stops the traversal
        without fetching anything else.
        """
        page: Optional[Listing[T]] = self

        while page is not None:
            if await _resolve(fn(page.items)) is False:
                return
            page = await page._fetch_next()

    async def for_each(self, fn: Visitor[T, Optional[bool]]) -> None:
        """
        Call `fn` on every item of the listing, in order.

        Returning (or resolving to) False from `fn` stops the traversal,
        skipping the rest of the current page and every later page.
        """

        async def visit_page(items: List[T]) -> bool:
            for item in items:
                if await _resolve(fn(item)) is False:
                    return False
            return True

        await self.for_each_page(visit_page)

    async def some(self, fn: Visitor[T, bool]) -> bool:
        """
        Whether `fn` holds for any item of the listing.

        Traversal stops at the first match.
        """
        found = False

        async def check(item: T) -> bool:
            nonlocal found
            found = bool(await _resolve(fn(item)))
            return not found

        await self.for_each(check)
        return found

    async def __aiter__(self) -> AsyncIterator[T]:
        page: Optional[Listing[T]] = self

        while page is not None:
            for item in page.items:
                yield item
            page = await page._fetch_next()

    async def _fetch_next(self) -> Optional["Listing[T]"]:
        """
        Return the next page, fetching it if needed.

        Concurrent callers share a single in-flight fetch. A failed fetch
        leaves nothing behind, so the next call tries again.
        """
        if self._next is not None:
            return self._next

        if self._fetcher is None:
            return None

        if self._pending is None:
            self._pending = asyncio.ensure_future(self._run_fetch(self._fetcher))
            self._pending.add_done_callback(_retrieve_exception)

        # Shielded so that one cancelled waiter does not cancel the shared fetch.
        return await asyncio.shield(self._pending)

    async def _run_fetch(self, fetcher: "Fetcher[T]") -> "Listing[T]":
        try:
            # Logs the failure, if any, at warning level.
            with PerformanceLogger(logger, f"{fetcher.__class__.__name__}.fetch"):
                page = await fetcher.fetch(self._ctx)

            if self._next is None:
                self._next = page
            logger.debug(
                "Fetched next page",
                extra={
                    "item_count": len(page._items),
                    "can_fetch_more": page.can_fetch_more(),
                },
            )
            return self._next
        finally:
            self._pending = None
