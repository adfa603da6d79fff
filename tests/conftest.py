import pytest
from unittest.mock import AsyncMock

from redditkit.clients.http import HTTPClient
from redditkit.core.logging import reset_correlation_context
from redditkit.listings.context import Context, RequestDescriptor


@pytest.fixture(autouse=True)
def clean_correlation_context():
    reset_correlation_context()
    yield
    reset_correlation_context()


@pytest.fixture
def mock_transport():
    """Create a mock transport"""
    transport = AsyncMock(spec=HTTPClient)
    transport.get.return_value = None
    transport.post.return_value = None
    return transport


@pytest.fixture
def ctx(mock_transport):
    """Context of a listing that cannot be re-requested"""
    return Context(client=mock_transport)


@pytest.fixture
def paged_ctx(mock_transport):
    """Context of a cursor-paged listing"""
    return Context(
        client=mock_transport,
        req=RequestDescriptor(url="r/python/new", query={}),
    )


@pytest.fixture
def comments_ctx(mock_transport):
    """Context of the comment tree of post 'post'"""
    return Context(client=mock_transport, post="post")
