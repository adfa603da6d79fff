from typing import Any, Callable, Dict, List, Optional, Union
from pydantic import BaseModel, ConfigDict, Field

from redditkit.core.exceptions import InvalidKindError
from redditkit.listings.context import Context
from redditkit.listings.fetcher import MoreChildrenFetcher
from redditkit.listings.listing import Listing
from redditkit.models.objects import ListingData, MoreData, RedditObject
from redditkit.utils.pagination import assert_kind


class Thing(BaseModel):
    """
    Fields shared by posts and comments

    Attributes:
        id: Short id, e.g. "abc"
        name: Fullname, e.g. "t3_abc"
        author: Username of the author, None once deleted
        subreddit: Name of the subreddit the item lives in
        score: Net votes
        created_utc: Creation time as a unix timestamp
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    id: str
    name: str
    author: Optional[str] = None
    subreddit: Optional[str] = None
    score: int = 0
    created_utc: float = 0.0


class Post(Thing):
    """A submission. The API calls the text body `selftext`."""

    model_config = ConfigDict(populate_by_name=True)

    title: str = ""
    body: str = Field(default="", alias="selftext")
    url: Optional[str] = None
    num_comments: int = 0
    over_18: bool = False
    locked: bool = False


class Comment(Thing):
    """A comment together with the listing of its replies."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    body: str = ""
    parent_id: str
    link_id: Optional[str] = None
    depth: int = 0
    replies: Listing


def parse_post(obj: Any, ctx: Context) -> Post:
    return Post.model_validate(assert_kind("t3", obj).data)


def parse_comment(obj: Any, ctx: Context) -> Comment:
    data = dict(assert_kind("t1", obj).data)

    # The API sends "" rather than an empty listing when there are no replies.
    raw_replies = data.pop("replies", None)
    if raw_replies:
        page = ListingData.model_validate(assert_kind("Listing", raw_replies).data)
        replies = parse_comment_listing(page, ctx)
    else:
        replies = Listing(ctx, [])

    return Comment.model_validate({**data, "replies": replies})


def parse_comment_listing(page: ListingData, ctx: Context) -> Listing[Comment]:
    """
    Build one level of a comment tree.

    The "more" placeholders of the level become the listing's fetcher. Their
    ids are merged into one batch fetch; a "continue this thread"
    placeholder is loaded after them.
    """
    comments: List[Comment] = []
    more: Optional[MoreData] = None
    thread: Optional[MoreData] = None

    for child in page.children:
        if child.kind != "more":
            comments.append(parse_comment(child, ctx))
            continue

        node = MoreData.model_validate(child.data)
        if not node.children:
            thread = thread or node
        elif more is None:
            more = node
        else:
            more = more.model_copy(
                update={
                    "children": more.children + node.children,
                    "count": more.count + node.count,
                }
            )

    fetcher = None
    if more is not None:
        fetcher = MoreChildrenFetcher(more, parse_comment_listing, thread=thread)
    elif thread is not None:
        fetcher = MoreChildrenFetcher(thread, parse_comment_listing)
    return Listing(ctx, comments, fetcher)


KIND_PARSERS: Dict[str, Callable[[RedditObject, Context], Union[Post, Comment]]] = {
    "t1": parse_comment,
    "t3": parse_post,
}


def parse_thing(obj: Any, ctx: Context) -> Union[Post, Comment]:
    """Dispatch a tagged object to the parser registered for its kind."""
    if isinstance(obj, RedditObject):
        kind = obj.kind
    else:
        kind = obj.get("kind") if isinstance(obj, dict) else None
    parser = KIND_PARSERS.get(kind)
    if parser is None:
        raise InvalidKindError("|".join(KIND_PARSERS), kind)
    return parser(obj, ctx)
