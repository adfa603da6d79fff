from typing import Any, List, Optional
from pydantic import BaseModel, ConfigDict, Field


class RedditObject(BaseModel):
    """
    A tagged object as it appears on the wire

    Attributes:
        kind: Discriminator naming the payload type, e.g. "Listing", "t3", "more"
        data: The payload itself, left opaque until the kind has been checked
    """

    model_config = ConfigDict(frozen=True)

    kind: str
    data: Any = None


class ListingData(BaseModel):
    """
    The payload of a "Listing" object: one page of a remote collection

    Attributes:
        after: Cursor of the page following this one, None on the last page
        before: Cursor of the page preceding this one
        children: Items of the page in server order
        dist: Number of children as reported by the server
        modhash: Opaque hash the server attaches to some listings
    """

    after: Optional[str] = None
    before: Optional[str] = None
    children: List[RedditObject] = Field(default_factory=list)
    dist: Optional[int] = None
    modhash: Optional[str] = None


class MoreData(BaseModel):
    """
    The payload of a "more" object: a placeholder for unloaded replies

    Attributes:
        count: Number of replies hidden behind this node
        name: Fullname of the node
        id: Short id of the node, "_" for "continue this thread" nodes
        parent_id: Fullname of the comment or post the replies belong to
        depth: Depth of the hidden replies in the tree
        children: Short ids of the hidden top-level replies
    """

    count: int = 0
    name: str
    id: str
    parent_id: str
    depth: int = 0
    children: List[str] = Field(default_factory=list)
