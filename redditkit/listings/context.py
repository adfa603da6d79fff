"""Request context shared by every node of a listing chain."""

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Protocol

from pydantic import BaseModel, Field


class Transport(Protocol):
    """The two request primitives listings consume from the transport."""

    async def get(self, path: str, query: Mapping[str, str] | None = None) -> Any:
        ...

    async def post(self, path: str, body: Mapping[str, Any] | None = None) -> Any:
        ...


class RequestDescriptor(BaseModel, frozen=True):
    """How to re-issue a paginated request."""

    url: str
    """Endpoint path, relative to the transport's base URL."""

    query: Dict[str, str] = Field(default_factory=dict)
    """Base query parameters. These win over the pager's defaults."""


@dataclass(frozen=True)
class Context:
    """
    Immutable bundle handed to every fetch of a listing chain.

    Attributes:
        client: Shared transport handle, not owned by the listing
        post: Short id of the item the listing hangs off, e.g. a post whose
            comments are listed
        req: Present when the listing can be paged by re-issuing a request
    """

    client: Transport
    post: Optional[str] = None
    req: Optional[RequestDescriptor] = None
