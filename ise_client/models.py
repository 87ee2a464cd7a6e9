"""Request descriptor consumed by the execution engine.

A Request is built fresh for every logical call. Its body is kept as
immutable bytes so that every retry can send an identical payload; the
engine wraps those bytes into a new transport request per attempt.
"""

from dataclasses import dataclass, field
from typing import Any, Literal

# HTTP methods supported by the client
HttpMethod = Literal["GET", "POST", "PUT", "DELETE"]

JSON_MEDIA_TYPE = "application/json"


@dataclass
class Request:
    """A single logical API call.

    Attributes:
        method: The HTTP method.
        url: Absolute target URL (base URL joined with the path).
        body: Payload bytes retained for replay across attempts.
        headers: Request headers, including Accept, Content-Type and the
            basic-auth Authorization header.
        params: Query parameters.
        log_payload: Whether request and response bodies may appear in
            diagnostic logs. Disable for sensitive payloads.
    """

    method: HttpMethod
    url: str
    body: bytes | None = field(default=None, repr=False)
    headers: dict[str, str] = field(default_factory=dict, repr=False)
    params: dict[str, Any] | None = None
    log_payload: bool = True

    def body_text(self) -> str:
        """The body decoded for logging, or an empty string."""
        if not self.body:
            return ""
        return self.body.decode("utf-8", errors="replace")
