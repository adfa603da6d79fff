from typing import Any, Dict, List, Mapping, Sequence, TypeVar

from redditkit.core.exceptions import InvalidKindError
from redditkit.models.objects import RedditObject

T = TypeVar("T")

DEFAULT_PAGE_LIMIT = "100"


def build_page_query(
    after: str | None,
    base_query: Mapping[str, str] | None = None,
    limit: str = DEFAULT_PAGE_LIMIT,
) -> Dict[str, str]:
    """
    Build the query string parameters for fetching one page of a listing

    Args:
        after: The cursor to resume from, None or "" for the first page
        base_query: Parameters of the original request. Keys present here
            override the defaults, including "limit" and "after"
        limit: Page size requested from the server

    Returns:
        A new dictionary with the merged parameters
    """
    query = {"limit": limit, "after": after or ""}
    query.update(base_query or {})
    return query


def group(items: Sequence[T], size: int) -> List[List[T]]:
    """
    Split a sequence into consecutive chunks of at most `size` elements

    Raises:
        ValueError: If size is not positive
    """
    if size <= 0:
        raise ValueError(f"Group size must be positive, got {size}")
    return [list(items[i : i + size]) for i in range(0, len(items), size)]


def namespace(prefix: str, id: str) -> str:
    """Turn a short id into a fullname, e.g. ("t3", "abc") -> "t3_abc" """
    if id.startswith(f"{prefix}_"):
        return id
    return f"{prefix}_{id}"


def strip_namespace(fullname: str) -> str:
    """Turn a fullname into a short id, e.g. "t3_abc" -> "abc" """
    _, sep, short = fullname.partition("_")
    return short if sep else fullname


def assert_kind(kind: str, obj: Any) -> RedditObject:
    """
    Check that `obj` is a tagged object of the given kind

    Raw JSON mappings are accepted and converted.

    Raises:
        InvalidKindError: If `obj` is not tagged with `kind`
    """
    if isinstance(obj, Mapping) and "kind" in obj:
        obj = RedditObject(kind=obj["kind"], data=obj.get("data"))
    if not isinstance(obj, RedditObject):
        raise InvalidKindError(kind, None)
    if obj.kind != kind:
        raise InvalidKindError(kind, obj.kind)
    return obj
