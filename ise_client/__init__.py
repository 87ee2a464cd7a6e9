"""ISE REST API Client Library.

An HTTP client for the configuration REST API of an ISE appliance. It
retries transient failures with jittered exponential backoff and returns
response bodies as path-queryable documents.

Example:
    Synchronous usage::

        from ise_client import ISEClient

        with ISEClient("https://10.0.0.1", "admin", "secret") as client:
            res = client.get("/ers/config/internaluser")
            print(res.get("SearchResult.total").as_int())

    Asynchronous usage::

        from ise_client import AsyncISEClient

        async with AsyncISEClient("https://10.0.0.1", "admin", "secret") as client:
            res = await client.get("/ers/config/internaluser")

Exports:
    ISEClient: Synchronous client.
    AsyncISEClient: Asynchronous client.
    ClientConfig: Validated client configuration.
    Document, Result: Path-queryable response bodies.
    Body: Fluent builder for request payloads.

    Exceptions:
        ISEClientError: Base exception for all client errors.
        TransportError: No response was received.
        RequestTimeoutError: The request timed out.
        ReadError: The response body could not be read.
        APIError: Server returned a non-2xx status.
        RetryableStatusError: HTTP 408, 502, 503 or 504.
        FatalStatusError: Any other non-2xx status.
"""

from ise_client._logging import TRACE
from ise_client.backoff import BackoffPolicy, calculate_backoff, should_retry
from ise_client.body import Body
from ise_client.client import AsyncISEClient, ISEClient
from ise_client.config import ClientConfig
from ise_client.document import Document, Result
from ise_client.exceptions import (
    APIError,
    FatalStatusError,
    ISEClientError,
    ReadError,
    RequestTimeoutError,
    RetryableStatusError,
    TransportError,
)
from ise_client.models import Request

__version__ = "0.1.0"

__all__ = [
    # Clients
    "ISEClient",
    "AsyncISEClient",
    "ClientConfig",
    "Request",
    # Documents and payloads
    "Document",
    "Result",
    "Body",
    # Backoff
    "BackoffPolicy",
    "calculate_backoff",
    "should_retry",
    "TRACE",
    # Exceptions
    "ISEClientError",
    "TransportError",
    "RequestTimeoutError",
    "ReadError",
    "APIError",
    "RetryableStatusError",
    "FatalStatusError",
]
