import pytest

from redditkit.core.exceptions import (
    HTTPClientError,
    InvalidKindError,
    MissingRequestContextError,
)
from redditkit.listings.context import Context, RequestDescriptor
from redditkit.listings.fetcher import CursorPager
from redditkit.listings.listing import Listing
from redditkit.models.objects import RedditObject
from tests.factories import listing_thing, post_thing, thing


def parse_title(obj, ctx):
    return obj.data["title"]


@pytest.fixture
def pager():
    return CursorPager("t3_abc", parse_title)


class TestNextPage:
    @pytest.mark.asyncio
    async def test_default_query(self, pager, paged_ctx, mock_transport):
        mock_transport.get.return_value = listing_thing([])

        await pager.next_page(paged_ctx)

        mock_transport.get.assert_awaited_once_with(
            "r/python/new", {"limit": "100", "after": "t3_abc"}
        )

    @pytest.mark.asyncio
    async def test_base_query_overrides_defaults(self, pager, mock_transport):
        mock_transport.get.return_value = listing_thing([])
        ctx = Context(
            client=mock_transport,
            req=RequestDescriptor(
                url="r/python/top", query={"after": "t3_override", "t": "week"}
            ),
        )

        await pager.next_page(ctx)

        mock_transport.get.assert_awaited_once_with(
            "r/python/top", {"limit": "100", "after": "t3_override", "t": "week"}
        )

    @pytest.mark.asyncio
    async def test_first_page_sends_empty_cursor(self, paged_ctx, mock_transport):
        mock_transport.get.return_value = listing_thing([])

        await CursorPager("", parse_title, limit="25").next_page(paged_ctx)

        mock_transport.get.assert_awaited_once_with(
            "r/python/new", {"limit": "25", "after": ""}
        )

    @pytest.mark.asyncio
    async def test_missing_request_context(self, pager, ctx, mock_transport):
        with pytest.raises(MissingRequestContextError) as exc_info:
            await pager.next_page(ctx)

        assert exc_info.value.error_code == "MISSING_REQUEST_CONTEXT"
        mock_transport.get.assert_not_called()

    @pytest.mark.asyncio
    async def test_invalid_kind(self, pager, paged_ctx, mock_transport):
        mock_transport.get.return_value = thing("Other", {})

        with pytest.raises(InvalidKindError) as exc_info:
            await pager.next_page(paged_ctx)

        assert exc_info.value.expected == "Listing"
        assert exc_info.value.actual == "Other"

    @pytest.mark.asyncio
    async def test_accepts_decoded_objects(self, pager, paged_ctx, mock_transport):
        raw = listing_thing([post_thing(title="A")], after="t3_next")
        mock_transport.get.return_value = RedditObject(**raw)

        page = await pager.next_page(paged_ctx)

        assert page.after == "t3_next"
        assert page.dist == 1
        assert page.children[0].kind == "t3"


class TestFetch:
    @pytest.mark.asyncio
    async def test_builds_listing_with_advanced_cursor(
        self, pager, paged_ctx, mock_transport
    ):
        mock_transport.get.return_value = listing_thing(
            [post_thing(title="A"), post_thing(title="B")], after="t3_def"
        )

        listing = await pager.fetch(paged_ctx)

        assert isinstance(listing, Listing)
        assert listing.items == ["A", "B"]
        assert listing.ctx is paged_ctx
        assert listing.can_fetch_more()
        assert listing._fetcher.after == "t3_def"

    @pytest.mark.asyncio
    async def test_last_page_is_terminal(self, pager, paged_ctx, mock_transport):
        mock_transport.get.return_value = listing_thing([post_thing(title="A")])

        listing = await pager.fetch(paged_ctx)

        assert listing.items == ["A"]
        assert not listing.can_fetch_more()

    @pytest.mark.asyncio
    async def test_repeated_cursor_ends_listing(self, pager, paged_ctx, mock_transport):
        mock_transport.get.return_value = listing_thing(
            [post_thing(title="A")], after="t3_abc"
        )

        listing = await pager.fetch(paged_ctx)

        assert not listing.can_fetch_more()

    @pytest.mark.asyncio
    async def test_traversal_follows_cursors(self, paged_ctx, mock_transport):
        mock_transport.get.side_effect = [
            listing_thing([post_thing(title="A")], after="t3_1"),
            listing_thing([post_thing(title="B")], after="t3_2"),
            listing_thing([]),
        ]
        listing = Listing(paged_ctx, [], CursorPager("", parse_title))

        titles = []
        await listing.for_each(titles.append)

        assert titles == ["A", "B"]
        cursors = [call.args[1]["after"] for call in mock_transport.get.await_args_list]
        assert cursors == ["", "t3_1", "t3_2"]

    @pytest.mark.asyncio
    async def test_invalid_kind_leaves_listing_retryable(
        self, paged_ctx, mock_transport
    ):
        mock_transport.get.side_effect = [
            thing("Other", {}),
            listing_thing([post_thing(title="A")]),
        ]
        listing = Listing(paged_ctx, [], CursorPager("t3_abc", parse_title))

        with pytest.raises(InvalidKindError):
            await listing.is_empty()
        assert listing.next is None

        assert await listing.is_empty() is False
        assert listing.next.items == ["A"]
        assert mock_transport.get.await_count == 2

    @pytest.mark.asyncio
    async def test_transport_error_propagates(self, pager, paged_ctx, mock_transport):
        error = HTTPClientError(detail="boom", status_code=503)
        mock_transport.get.side_effect = error

        with pytest.raises(HTTPClientError) as exc_info:
            await pager.fetch(paged_ctx)

        assert exc_info.value is error
