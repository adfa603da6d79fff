import pytest

from redditkit.core.exceptions import InvalidKindError
from redditkit.listings.fetcher import MoreChildrenFetcher
from redditkit.models.entities import (
    Comment,
    Post,
    parse_comment,
    parse_comment_listing,
    parse_post,
    parse_thing,
)
from redditkit.models.objects import ListingData
from tests.factories import comment_thing, listing_thing, more_thing, post_thing


class TestParsePost:
    def test_parse_post(self, ctx):
        post = parse_post(post_thing(id="abc", title="Hello", selftext="Body"), ctx)

        assert isinstance(post, Post)
        assert post.id == "abc"
        assert post.name == "t3_abc"
        assert post.title == "Hello"
        assert post.body == "Body"

    def test_wrong_kind(self, ctx):
        with pytest.raises(InvalidKindError) as exc_info:
            parse_post(comment_thing(), ctx)

        assert exc_info.value.expected == "t3"
        assert exc_info.value.actual == "t1"


class TestParseComment:
    def test_comment_without_replies(self, ctx):
        comment = parse_comment(comment_thing(id="a", body="hi"), ctx)

        assert isinstance(comment, Comment)
        assert comment.body == "hi"
        assert comment.replies.items == []
        assert not comment.replies.can_fetch_more()

    def test_nested_replies_share_context(self, comments_ctx):
        raw = comment_thing(
            id="a",
            replies=listing_thing(
                [
                    comment_thing(id="b", parent_id="t1_a", depth=1),
                    more_thing("t1_a", ["c", "d"], depth=1),
                ]
            ),
        )

        comment = parse_comment(raw, comments_ctx)

        assert [reply.id for reply in comment.replies.items] == ["b"]
        assert comment.replies.ctx is comments_ctx
        assert isinstance(comment.replies._fetcher, MoreChildrenFetcher)
        assert comment.replies._fetcher.more.children == ["c", "d"]


class TestParseCommentListing:
    def test_merges_placeholders(self, comments_ctx):
        page = ListingData.model_validate(
            listing_thing(
                [
                    comment_thing(id="a"),
                    more_thing("t3_post", ["b"]),
                    more_thing("t3_post", ["c"]),
                ]
            )["data"]
        )

        listing = parse_comment_listing(page, comments_ctx)

        assert [c.id for c in listing.items] == ["a"]
        assert listing._fetcher.more.children == ["b", "c"]
        assert listing._fetcher.more.count == 2

    def test_without_placeholder_is_terminal(self, comments_ctx):
        page = ListingData.model_validate(listing_thing([comment_thing()])["data"])

        assert not parse_comment_listing(page, comments_ctx).can_fetch_more()

    def test_continue_thread_kept_apart(self, comments_ctx):
        page = ListingData.model_validate(
            listing_thing(
                [
                    comment_thing(id="b", parent_id="t1_a"),
                    more_thing("t1_a", ["c"]),
                    more_thing("t1_a", [], id="_"),
                ]
            )["data"]
        )

        listing = parse_comment_listing(page, comments_ctx)

        assert listing._fetcher.more.children == ["c"]
        assert listing._fetcher.thread.id == "_"
        assert listing._fetcher.thread.children == []

    def test_only_continue_thread(self, comments_ctx):
        page = ListingData.model_validate(
            listing_thing([more_thing("t1_a", [], id="_")])["data"]
        )

        listing = parse_comment_listing(page, comments_ctx)

        assert listing._fetcher.more.id == "_"
        assert listing._fetcher.thread is None


class TestParseThing:
    def test_dispatches_on_kind(self, ctx):
        assert isinstance(parse_thing(post_thing(), ctx), Post)
        assert isinstance(parse_thing(comment_thing(), ctx), Comment)

    def test_unknown_kind(self, ctx):
        with pytest.raises(InvalidKindError) as exc_info:
            parse_thing({"kind": "t5", "data": {}}, ctx)

        assert exc_info.value.actual == "t5"
