"""Pytest configuration and shared fixtures."""

from collections.abc import AsyncIterator, Callable, Iterator

import httpx
import pytest

from ise_client import AsyncISEClient, ISEClient

TEST_URL = "https://10.0.0.1"


class FailingStream(httpx.SyncByteStream):
    """Response body that fails while being read."""

    def __iter__(self) -> Iterator[bytes]:
        raise httpx.ReadError("fail")
        yield b""  # pragma: no cover


class AsyncFailingStream(httpx.AsyncByteStream):
    """Async response body that fails while being read."""

    async def __aiter__(self) -> AsyncIterator[bytes]:
        raise httpx.ReadError("fail")
        yield b""  # pragma: no cover


Handler = Callable[[httpx.Request], httpx.Response]


@pytest.fixture
def make_client() -> Iterator[Callable[..., ISEClient]]:
    """Factory for ISEClient instances backed by a MockTransport.

    Backoff delays default to zero so retry tests do not sleep. The
    retry budget defaults to 0, as in a plain single-shot client.
    """
    clients: list[ISEClient] = []

    def factory(handler: Handler, url: str = TEST_URL, **overrides) -> ISEClient:
        overrides.setdefault("max_retries", 0)
        overrides.setdefault("backoff_min_delay", 0)
        overrides.setdefault("backoff_max_delay", 0)
        client = ISEClient(
            url,
            "usr",
            "pwd",
            transport=httpx.MockTransport(handler),
            **overrides,
        )
        clients.append(client)
        return client

    yield factory

    for client in clients:
        client.close()


@pytest.fixture
async def make_async_client() -> AsyncIterator[Callable[..., AsyncISEClient]]:
    """Factory for AsyncISEClient instances backed by a MockTransport."""
    clients: list[AsyncISEClient] = []

    def factory(handler: Handler, url: str = TEST_URL, **overrides) -> AsyncISEClient:
        overrides.setdefault("max_retries", 0)
        overrides.setdefault("backoff_min_delay", 0)
        overrides.setdefault("backoff_max_delay", 0)
        client = AsyncISEClient(
            url,
            "usr",
            "pwd",
            transport=httpx.MockTransport(handler),
            **overrides,
        )
        clients.append(client)
        return client

    yield factory

    for client in clients:
        await client.close()


@pytest.fixture
def failing_stream() -> type[httpx.SyncByteStream]:
    """Stream class whose iteration raises httpx.ReadError."""
    return FailingStream


@pytest.fixture
def async_failing_stream() -> type[httpx.AsyncByteStream]:
    """Async stream class whose iteration raises httpx.ReadError."""
    return AsyncFailingStream
