"""Main ISE client classes.

This module provides the entry points for talking to the configuration API:
- ISEClient: Synchronous client
- AsyncISEClient: Asynchronous client

Both expose the four verbs ``get``, ``delete``, ``post`` and ``put``. Each
verb builds a Request descriptor (URL, JSON headers, basic auth) and hands
it to the execution engine, which retries transient failures and returns
the response as a path-queryable Document.

Example:
    Synchronous usage::

        from ise_client import Body, ISEClient

        with ISEClient("https://10.0.0.1", "admin", "secret", max_retries=5) as client:
            users = client.get("/ers/config/internaluser")
            for name in users.get("SearchResult.resources.#.name").as_list():
                print(name)

            body = Body().set("InternalUser.name", "jdoe").set("InternalUser.password", "...")
            created = client.post("/ers/config/internaluser", str(body), log_payload=False)
            print(created.headers.get("Location"))

    Asynchronous usage::

        from ise_client import AsyncISEClient

        async with AsyncISEClient("https://10.0.0.1", "admin", "secret") as client:
            users = await client.get("/ers/config/internaluser")
"""

import base64
import logging
from typing import Any

import httpx

from ise_client._http import AsyncHTTPClient, HTTPClient
from ise_client.body import Body
from ise_client.config import ClientConfig
from ise_client.document import Document
from ise_client.models import JSON_MEDIA_TYPE, HttpMethod, Request

RequestData = str | bytes | Body


def join_url(base_url: str, path: str) -> str:
    """Join a base URL and a path with exactly one separator between them.

    Args:
        base_url: Base URL, with or without a trailing slash.
        path: Path relative to the base, with or without a leading slash.

    Returns:
        The absolute target URL.
    """
    base = base_url.rstrip("/")
    if not path:
        return base
    return f"{base}/{path.lstrip('/')}"


def basic_auth_header(username: str, password: str) -> str:
    """Build the value of a basic-auth Authorization header."""
    token = base64.b64encode(f"{username}:{password}".encode("utf-8")).decode("ascii")
    return f"Basic {token}"


def _encode(data: RequestData | None) -> bytes | None:
    if data is None:
        return None
    if isinstance(data, Body):
        return data.encode()
    if isinstance(data, str):
        return data.encode("utf-8")
    return bytes(data)


def resolve_config(
    url: str | None,
    username: str | None,
    password: str | None,
    config: ClientConfig | None,
    overrides: dict[str, Any],
) -> ClientConfig:
    """Build a client configuration: defaults, then explicit values, then overrides.

    ``config`` replaces the defaults when given. The url, username and
    password arguments only take effect when they are not None.

    Raises:
        pydantic.ValidationError: If no url is available, or a value is
            unknown or invalid.
    """
    explicit = {
        name: value
        for name, value in (("url", url), ("username", username), ("password", password))
        if value is not None
    }
    if config is None:
        return ClientConfig(**explicit, **overrides)
    return config.with_overrides(**explicit, **overrides)


class _RequestFactory:
    """Request descriptor construction shared by both clients."""

    config: ClientConfig

    def new_request(
        self,
        method: HttpMethod,
        path: str,
        data: RequestData | None = None,
        *,
        headers: dict[str, str] | None = None,
        params: dict[str, Any] | None = None,
        log_payload: bool = True,
    ) -> Request:
        """Build a request descriptor for this client.

        Defaults are set first (JSON Accept/Content-Type, basic auth); the
        keyword arguments are applied on top of them.

        Args:
            method: The HTTP method.
            path: Path relative to the configured base URL.
            data: JSON payload as text, bytes or a Body.
            headers: Headers overriding or extending the defaults.
            params: Query parameters; None values are dropped.
            log_payload: Set to False to keep the bodies out of the logs.

        Returns:
            A fresh Request.
        """
        if params:
            params = {k: v for k, v in params.items() if v is not None}

        request = Request(
            method=method,
            url=join_url(self.config.url, path),
            body=_encode(data),
            headers={
                "Accept": JSON_MEDIA_TYPE,
                "Content-Type": JSON_MEDIA_TYPE,
                "Authorization": basic_auth_header(self.config.username, self.config.password),
            },
            params=params or None,
            log_payload=log_payload,
        )
        for name, value in (headers or {}).items():
            # Header names are case-insensitive; an override replaces the default
            for existing in [k for k in request.headers if k.lower() == name.lower()]:
                del request.headers[existing]
            request.headers[name] = value
        return request

    def __repr__(self) -> str:
        return f"{type(self).__name__}(url={self.config.url!r}, username={self.config.username!r})"


class ISEClient(_RequestFactory):
    """Synchronous client for the configuration REST API.

    Safe to share between threads: calls do not share mutable state apart
    from httpx's connection pool.

    Example:
        Manual lifecycle management::

            client = ISEClient("https://10.0.0.1", "admin", "secret")
            try:
                client.delete("/ers/config/internaluser/1234")
            finally:
                client.close()
    """

    def __init__(
        self,
        url: str | None = None,
        username: str | None = None,
        password: str | None = None,
        *,
        config: ClientConfig | None = None,
        transport: httpx.BaseTransport | None = None,
        logger: logging.Logger | None = None,
        **overrides: Any,
    ) -> None:
        """Initialize the client.

        Args:
            url: Base URL of the server, e.g. https://10.0.0.1 (port optional).
                Required unless ``config`` is given.
            username: Basic-auth user name.
            password: Basic-auth password.
            config: Starting configuration used instead of the defaults.
            transport: Custom HTTP transport (e.g., MockTransport for testing).
            logger: Logger to use instead of the module logger.
            **overrides: ClientConfig fields applied last, e.g.
                ``timeout=120``, ``max_retries=0``, ``verify_ssl=True``.

        Raises:
            pydantic.ValidationError: If the url is missing, or an override
                is unknown or invalid.
        """
        config = resolve_config(url, username, password, config, overrides)
        self._http = HTTPClient(config, transport=transport, logger=logger)

    @classmethod
    def from_config(
        cls,
        config: ClientConfig,
        *,
        transport: httpx.BaseTransport | None = None,
        logger: logging.Logger | None = None,
        **overrides: Any,
    ) -> "ISEClient":
        """Create a client from an existing configuration plus overrides."""
        return cls(config=config, transport=transport, logger=logger, **overrides)

    @property
    def config(self) -> ClientConfig:  # type: ignore[override]
        """The active configuration."""
        return self._http.config

    def configure(self, **overrides: Any) -> None:
        """Replace configuration fields after construction.

        Calls already in flight keep the configuration and transport they
        started with.
        """
        self._http.reconfigure(self.config.with_overrides(**overrides))

    def __enter__(self) -> "ISEClient":
        """Enter context manager."""
        return self

    def __exit__(self, *args: Any) -> None:
        """Exit context manager and close the client."""
        self.close()

    def close(self) -> None:
        """Close the client and release resources."""
        self._http.close()

    def execute(self, request: Request) -> Document:
        """Execute a request built with ``new_request``.

        Returns:
            The Document of the successful response.

        Raises:
            ISEClientError: See ise_client.exceptions for the subclasses.
        """
        return self._http.execute(request)

    def get(
        self,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        params: dict[str, Any] | None = None,
        log_payload: bool = True,
    ) -> Document:
        """Make a GET request.

        Results are the raw data structure as returned by the server.

        Args:
            path: The URL path.
            headers: Extra or overriding headers.
            params: Query parameters.
            log_payload: Whether bodies may be logged.

        Returns:
            The response Document.
        """
        request = self.new_request("GET", path, headers=headers, params=params, log_payload=log_payload)
        return self.execute(request)

    def delete(
        self,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        params: dict[str, Any] | None = None,
        log_payload: bool = True,
    ) -> Document:
        """Make a DELETE request."""
        request = self.new_request("DELETE", path, headers=headers, params=params, log_payload=log_payload)
        return self.execute(request)

    def post(
        self,
        path: str,
        data: RequestData,
        *,
        headers: dict[str, str] | None = None,
        params: dict[str, Any] | None = None,
        log_payload: bool = True,
    ) -> Document:
        """Make a POST request.

        Hint: use Body to build the payload.

        Args:
            path: The URL path.
            data: JSON payload.
            headers: Extra or overriding headers.
            params: Query parameters.
            log_payload: Whether bodies may be logged.

        Returns:
            The response Document; ``headers["Location"]`` holds the URL of
            a created resource.
        """
        request = self.new_request("POST", path, data, headers=headers, params=params, log_payload=log_payload)
        return self.execute(request)

    def put(
        self,
        path: str,
        data: RequestData,
        *,
        headers: dict[str, str] | None = None,
        params: dict[str, Any] | None = None,
        log_payload: bool = True,
    ) -> Document:
        """Make a PUT request."""
        request = self.new_request("PUT", path, data, headers=headers, params=params, log_payload=log_payload)
        return self.execute(request)


class AsyncISEClient(_RequestFactory):
    """Asynchronous client for the configuration REST API.

    Example:
        Concurrent reads::

            async with AsyncISEClient("https://10.0.0.1", "admin", "secret") as client:
                users, groups = await asyncio.gather(
                    client.get("/ers/config/internaluser"),
                    client.get("/ers/config/identitygroup"),
                )
    """

    def __init__(
        self,
        url: str | None = None,
        username: str | None = None,
        password: str | None = None,
        *,
        config: ClientConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        logger: logging.Logger | None = None,
        **overrides: Any,
    ) -> None:
        """Initialize the async client.

        Args:
            url: Base URL of the server; required unless ``config`` is given.
            username: Basic-auth user name.
            password: Basic-auth password.
            config: Starting configuration used instead of the defaults.
            transport: Custom HTTP transport (e.g., MockTransport for testing).
            logger: Logger to use instead of the module logger.
            **overrides: ClientConfig fields applied last.
        """
        config = resolve_config(url, username, password, config, overrides)
        self._http = AsyncHTTPClient(config, transport=transport, logger=logger)

    @classmethod
    def from_config(
        cls,
        config: ClientConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        logger: logging.Logger | None = None,
        **overrides: Any,
    ) -> "AsyncISEClient":
        """Create a client from an existing configuration plus overrides."""
        return cls(config=config, transport=transport, logger=logger, **overrides)

    @property
    def config(self) -> ClientConfig:  # type: ignore[override]
        """The active configuration."""
        return self._http.config

    async def configure(self, **overrides: Any) -> None:
        """Replace configuration fields after construction."""
        await self._http.reconfigure(self.config.with_overrides(**overrides))

    async def __aenter__(self) -> "AsyncISEClient":
        """Enter async context manager."""
        return self

    async def __aexit__(self, *args: Any) -> None:
        """Exit async context manager and close the client."""
        await self.close()

    async def close(self) -> None:
        """Close the client and release resources."""
        await self._http.close()

    async def execute(self, request: Request) -> Document:
        """Execute a request built with ``new_request``."""
        return await self._http.execute(request)

    async def get(
        self,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        params: dict[str, Any] | None = None,
        log_payload: bool = True,
    ) -> Document:
        """Make an async GET request."""
        request = self.new_request("GET", path, headers=headers, params=params, log_payload=log_payload)
        return await self.execute(request)

    async def delete(
        self,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        params: dict[str, Any] | None = None,
        log_payload: bool = True,
    ) -> Document:
        """Make an async DELETE request."""
        request = self.new_request("DELETE", path, headers=headers, params=params, log_payload=log_payload)
        return await self.execute(request)

    async def post(
        self,
        path: str,
        data: RequestData,
        *,
        headers: dict[str, str] | None = None,
        params: dict[str, Any] | None = None,
        log_payload: bool = True,
    ) -> Document:
        """Make an async POST request."""
        request = self.new_request("POST", path, data, headers=headers, params=params, log_payload=log_payload)
        return await self.execute(request)

    async def put(
        self,
        path: str,
        data: RequestData,
        *,
        headers: dict[str, str] | None = None,
        params: dict[str, Any] | None = None,
        log_payload: bool = True,
    ) -> Document:
        """Make an async PUT request."""
        request = self.new_request("PUT", path, data, headers=headers, params=params, log_payload=log_payload)
        return await self.execute(request)
