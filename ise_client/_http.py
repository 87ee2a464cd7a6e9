"""Request execution engine for the ISE client.

This module owns the retry loop used by all client verbs. For each
attempt it:
- Rebuilds the transport request from the retained body bytes
- Sends it and reads the response body as a separate step
- Classifies the outcome as success, retryable or fatal
- Sleeps with exponential backoff before retrying

Outcome classes:
- Transport failure (no response) and body read failure are retried.
- HTTP 2xx returns the Document.
- HTTP 408 and 502-504 are retried.
- Any other non-2xx status is raised immediately.

When the retry budget is spent the last retryable error is raised as is.

This is an internal module and should not be imported directly by users.
"""

import asyncio
import logging
import time
from typing import Any

import httpx

from ise_client._logging import TRACE, resolve_logger
from ise_client.backoff import BackoffPolicy
from ise_client.config import ClientConfig
from ise_client.document import Document
from ise_client.exceptions import (
    FatalStatusError,
    ISEClientError,
    ReadError,
    RequestTimeoutError,
    RetryableStatusError,
    TransportError,
)
from ise_client.models import Request

# Status codes that trigger automatic retry
RETRYABLE_STATUS_CODES = frozenset({408, 502, 503, 504})

# Errors raised while draining a response body
_READ_ERRORS = (httpx.TransportError, httpx.DecodingError, httpx.StreamError)

_RETRYABLE_ERRORS = (TransportError, ReadError, RetryableStatusError)


def is_success(status_code: int) -> bool:
    """Return True for 2xx status codes."""
    return 200 <= status_code <= 299


def is_retryable_status(status_code: int) -> bool:
    """Return True for status codes treated as transient."""
    return status_code in RETRYABLE_STATUS_CODES


def _policy(config: ClientConfig) -> BackoffPolicy:
    return BackoffPolicy(
        max_retries=config.max_retries,
        min_delay=config.backoff_min_delay,
        max_delay=config.backoff_max_delay,
        factor=config.backoff_delay_factor,
    )


def _log_request(logger: logging.Logger, request: Request) -> None:
    if request.log_payload:
        logger.debug("HTTP Request: %s, %s, %s", request.method, request.url, request.body_text())
    else:
        logger.debug("HTTP Request: %s, %s", request.method, request.url)


def _transport_error(request: Request, config: ClientConfig, exc: httpx.TransportError) -> TransportError:
    if isinstance(exc, httpx.TimeoutException):
        return RequestTimeoutError(
            message=f"HTTP Request timed out: {exc}",
            url=request.url,
            timeout=config.timeout,
            cause=exc,
        )
    return TransportError(
        message=f"HTTP Connection error: {exc}",
        url=request.url,
        cause=exc,
    )


def _read_error(request: Request, response: httpx.Response, exc: Exception) -> ReadError:
    return ReadError(
        message=f"Cannot read response body: {exc}",
        url=request.url,
        status_code=response.status_code,
        cause=exc,
    )


def _classify(
    request: Request,
    response: httpx.Response,
    content: bytes,
    config: ClientConfig,
    logger: logging.Logger,
) -> Document:
    """Turn a fully read response into a Document or a status error.

    Raises:
        RetryableStatusError: For HTTP 408 and 502-504.
        FatalStatusError: For any other non-2xx status.
    """
    document = Document.from_bytes(
        content,
        status_code=response.status_code,
        headers=response.headers,
    )
    if request.log_payload:
        logger.debug("HTTP Response: %s, %s", response.status_code, document.raw)
    else:
        logger.debug("HTTP Response: %s", response.status_code)

    status_code = response.status_code
    if is_success(status_code):
        return document

    error_message = document.get(config.error_message_path).as_str()
    error_cls = RetryableStatusError if is_retryable_status(status_code) else FatalStatusError
    raise error_cls(
        status_code=status_code,
        error_message=error_message,
        url=request.url,
        document=document,
    )
class _EngineBase:
    """State and logging shared by the sync and async engines.

    The active configuration and the httpx client built from it are kept
    together in one attribute. ``execute`` takes a snapshot of that pair when
    a call starts, so reconfiguring never changes the retry budget, backoff
    bounds or transport of a call already in flight. Clients replaced by
    ``reconfigure`` stay open until the engine is closed.
    """

    def __init__(self, config: ClientConfig, logger: logging.Logger | None = None) -> None:
        self.logger = resolve_logger(logger, __name__)
        self._active = (config, self._create_client(config))
        self._retired: list[Any] = []

    def _create_client(self, config: ClientConfig) -> Any:
        raise NotImplementedError

    @property
    def config(self) -> ClientConfig:
        """The configuration new calls will use."""
        return self._active[0]

    def _swap(self, config: ClientConfig) -> None:
        previous = self._active[1]
        self._active = (config, self._create_client(config))
        self._retired.append(previous)

    def _build_request(self, client: httpx.Client | httpx.AsyncClient, request: Request) -> httpx.Request:
        # A new httpx.Request per attempt so the body stream is never reused
        return client.build_request(
            request.method,
            request.url,
            content=request.body,
            headers=request.headers,
            params=request.params,
        )

    def _next_delay(self, policy: BackoffPolicy, attempt: int) -> float:
        delay = policy.delay(attempt)
        self.logger.log(TRACE, "Starting sleeping for %.3fs", delay)
        return delay

    def _should_retry(self, policy: BackoffPolicy, attempt: int, exc: ISEClientError) -> bool:
        """Record the attempt count on ``exc`` and decide whether to retry."""
        exc.attempts = attempt + 1
        if policy.should_retry(attempt):
            self.logger.warning("HTTP Request failed: %s, retries: %d", exc, attempt)
            return True
        self.logger.error("HTTP Request failed after %d attempt(s): %s", exc.attempts, exc)
        return False


class HTTPClient(_EngineBase):
    """Synchronous execution engine.

    Wraps an httpx.Client. The instance can be shared between threads; each
    call keeps its own attempt counter, configuration snapshot and request
    descriptor, and backoff sleeps only block the calling thread.

    Attributes:
        config: The active client configuration.
        logger: Logger receiving the diagnostic trail.
    """

    def __init__(
        self,
        config: ClientConfig,
        transport: httpx.BaseTransport | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            config: Client configuration (timeout, TLS, retry bounds).
            transport: Custom transport (e.g., MockTransport for testing).
            logger: Logger to use instead of the module logger.
        """
        self._transport = transport
        super().__init__(config, logger)

    def _create_client(self, config: ClientConfig) -> httpx.Client:
        return httpx.Client(
            verify=config.verify_ssl,
            timeout=config.timeout,
            transport=self._transport,
        )

    def reconfigure(self, config: ClientConfig) -> None:
        """Switch new calls to ``config``, rebuilding the httpx client."""
        self._swap(config)

    def close(self) -> None:
        """Close the HTTP client and release resources."""
        for client in [*self._retired, self._active[1]]:
            client.close()
        self._retired.clear()

    def __enter__(self) -> "HTTPClient":
        """Enter context manager."""
        return self

    def __exit__(self, *args: Any) -> None:
        """Exit context manager and close client."""
        self.close()

    def execute(self, request: Request) -> Document:
        """Execute a request, retrying transient failures.

        Args:
            request: The request descriptor.

        Returns:
            The Document of the successful (2xx) response.

        Raises:
            TransportError: No response received and retries exhausted.
            ReadError: Body unreadable and retries exhausted.
            RetryableStatusError: 408/502-504 and retries exhausted.
            FatalStatusError: Any other non-2xx status (not retried).
        """
        config, client = self._active
        policy = _policy(config)
        attempt = 0
        while True:
            try:
                document = self._attempt(client, config, request)
            except _RETRYABLE_ERRORS as exc:
                if not self._should_retry(policy, attempt, exc):
                    raise
                time.sleep(self._next_delay(policy, attempt))
                attempt += 1
            except FatalStatusError as exc:
                exc.attempts = attempt + 1
                self.logger.error("HTTP Request failed: %s", exc)
                raise
            else:
                self.logger.debug("HTTP Request succeeded after %d attempt(s)", attempt + 1)
                return document

    def _attempt(self, client: httpx.Client, config: ClientConfig, request: Request) -> Document:
        http_request = self._build_request(client, request)
        _log_request(self.logger, request)

        try:
            response = client.send(http_request, stream=True)
        except httpx.TransportError as e:
            raise _transport_error(request, config, e) from e

        try:
            content = response.read()
        except _READ_ERRORS as e:
            raise _read_error(request, response, e) from e
        finally:
            response.close()

        return _classify(request, response, content, config, self.logger)


class AsyncHTTPClient(_EngineBase):
    """Asynchronous execution engine.

    Same retry semantics as HTTPClient. Backoff uses ``asyncio.sleep`` so a
    retrying call suspends only its own task.

    Attributes:
        config: The active client configuration.
        logger: Logger receiving the diagnostic trail.
    """

    def __init__(
        self,
        config: ClientConfig,
        transport: httpx.AsyncBaseTransport | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        """Initialize the async engine.

        Args:
            config: Client configuration (timeout, TLS, retry bounds).
            transport: Custom transport (e.g., MockTransport for testing).
            logger: Logger to use instead of the module logger.
        """
        self._transport = transport
        super().__init__(config, logger)

    def _create_client(self, config: ClientConfig) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            verify=config.verify_ssl,
            timeout=config.timeout,
            transport=self._transport,
        )

    async def reconfigure(self, config: ClientConfig) -> None:
        """Switch new calls to ``config``, rebuilding the httpx client."""
        self._swap(config)

    async def close(self) -> None:
        """Close the HTTP client and release resources."""
        for client in [*self._retired, self._active[1]]:
            await client.aclose()
        self._retired.clear()

    async def __aenter__(self) -> "AsyncHTTPClient":
        """Enter async context manager."""
        return self

    async def __aexit__(self, *args: Any) -> None:
        """Exit async context manager and close client."""
        await self.close()

    async def execute(self, request: Request) -> Document:
        """Execute a request asynchronously, retrying transient failures.

        See HTTPClient.execute for the outcome classes and raised errors.
        """
        config, client = self._active
        policy = _policy(config)
        attempt = 0
        while True:
            try:
                document = await self._attempt(client, config, request)
            except _RETRYABLE_ERRORS as exc:
                if not self._should_retry(policy, attempt, exc):
                    raise
                await asyncio.sleep(self._next_delay(policy, attempt))
                attempt += 1
            except FatalStatusError as exc:
                exc.attempts = attempt + 1
                self.logger.error("HTTP Request failed: %s", exc)
                raise
            else:
                self.logger.debug("HTTP Request succeeded after %d attempt(s)", attempt + 1)
                return document

    async def _attempt(self, client: httpx.AsyncClient, config: ClientConfig, request: Request) -> Document:
        http_request = self._build_request(client, request)
        _log_request(self.logger, request)

        try:
            response = await client.send(http_request, stream=True)
        except httpx.TransportError as e:
            raise _transport_error(request, config, e) from e

        try:
            content = await response.aread()
        except _READ_ERRORS as e:
            raise _read_error(request, response, e) from e
        finally:
            await response.aclose()

        return _classify(request, response, content, config, self.logger)
