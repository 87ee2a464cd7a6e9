"""Exception hierarchy for the ISE client.

Every failure of a logical call surfaces to the caller as one of these
exceptions. Each carries the Document of the last attempt (an empty one
when no response was ever received), so callers can still inspect any
diagnostic content the server sent back.

Exception Hierarchy:
    ISEClientError (base)
    ├── TransportError - No response received (connection, DNS, TLS)
    │   └── RequestTimeoutError - Timed out before a response arrived
    ├── ReadError - Response received but its body could not be read
    └── APIError - Server answered with a non-2xx status
        ├── RetryableStatusError (HTTP 408, 502, 503, 504)
        └── FatalStatusError (every other non-2xx status)

TransportError, ReadError and RetryableStatusError are retried until the
client's retry budget is spent; the last one is then raised unchanged.
FatalStatusError is raised on first sight.

Example:
    Inspecting a failed call::

        try:
            client.get("/ers/config/internaluser/name/jdoe")
        except FatalStatusError as e:
            print(e.status_code, e.message)
            print(e.document.pretty())
        except ISEClientError as e:
            print(f"Request failed after {e.attempts} attempt(s): {e}")
"""

from ise_client.document import Document


class ISEClientError(Exception):
    """Base exception for all ISE client errors.

    Attributes:
        message: Human-readable error description.
        document: The Document of the last attempt (empty if none).
        attempts: Number of transport calls made for the logical call.
    """

    def __init__(self, message: str, document: Document | None = None) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            document: The Document of the last attempt.
        """
        self.message = message
        self.document = document if document is not None else Document()
        self.attempts = 0
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation of the error."""
        return self.message


class TransportError(ISEClientError):
    """The request could not be delivered or no response was received.

    Covers DNS failures, refused connections and TLS handshake errors.

    Attributes:
        url: The target URL.
        cause: The underlying transport exception.
    """

    def __init__(
        self,
        message: str,
        url: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.url = url
        self.cause = cause
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including URL if available."""
        if self.url:
            return f"{self.message} (url: {self.url})"
        return self.message


class RequestTimeoutError(TransportError):
    """The request timed out before a response was received.

    Attributes:
        timeout: The configured timeout in seconds.
    """

    def __init__(
        self,
        message: str,
        url: str | None = None,
        timeout: float | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.timeout = timeout
        super().__init__(message, url=url, cause=cause)

    def __str__(self) -> str:
        parts = []
        if self.timeout is not None:
            parts.append(f"timeout: {self.timeout}s")
        if self.url:
            parts.append(f"url: {self.url}")
        if not parts:
            return self.message
        return f"{self.message} ({', '.join(parts)})"


class ReadError(ISEClientError):
    """A response arrived but its body could not be read completely.

    Attributes:
        url: The target URL.
        status_code: Status code of the partially received response.
        cause: The underlying stream exception.
    """

    def __init__(
        self,
        message: str,
        url: str | None = None,
        status_code: int | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.url = url
        self.status_code = status_code
        self.cause = cause
        super().__init__(message)


class APIError(ISEClientError):
    """The server answered with a non-2xx status.

    The message is extracted best effort from the response body; it is an
    empty string when the body carries none.

    Attributes:
        status_code: HTTP status code from the server.
        error_message: Message extracted from the response body.
        url: The target URL.
    """

    def __init__(
        self,
        status_code: int,
        error_message: str = "",
        url: str | None = None,
        document: Document | None = None,
    ) -> None:
        self.status_code = status_code
        self.error_message = error_message
        self.url = url
        super().__init__(
            f"HTTP Request failed: StatusCode {status_code}, Message: {error_message}",
            document=document,
        )


class RetryableStatusError(APIError):
    """A status treated as transient (408, 502, 503, 504).

    Retried with backoff while the retry budget lasts.
    """


class FatalStatusError(APIError):
    """Any other non-2xx status. Never retried."""
