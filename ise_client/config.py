"""Configuration for the ISE client.

ClientConfig holds everything a client needs to reach the server: base URL,
credentials, TLS verification, timeout and the retry/backoff bounds. It is
immutable; ``with_overrides`` returns a validated copy with some fields
replaced, which is how clients apply construction-time and later overrides.

Example:
    Building a configuration from the environment::

        # ISE_URL=https://10.0.0.1 ISE_USERNAME=admin ISE_PASSWORD=...
        config = ClientConfig.from_env()
        config = config.with_overrides(max_retries=5, timeout=120)
"""

import os
from pathlib import Path
from typing import Any, Mapping

from dotenv import dotenv_values
from pydantic import BaseModel, ConfigDict, Field

DEFAULT_TIMEOUT = 60.0
DEFAULT_MAX_RETRIES = 3
DEFAULT_BACKOFF_MIN_DELAY = 2.0
DEFAULT_BACKOFF_MAX_DELAY = 60.0
DEFAULT_BACKOFF_DELAY_FACTOR = 3.0

# Where ERS puts the human-readable error of a failed request
DEFAULT_ERROR_MESSAGE_PATH = "ERSResponse.messages.0.title"

DEFAULT_ENV_PREFIX = "ISE_"


class ClientConfig(BaseModel):
    """Validated, immutable client settings.

    The delay bounds are not cross-checked (``backoff_max_delay`` below
    ``backoff_min_delay`` is accepted); the backoff policy clamps so that
    delays are never negative or infinite.

    Attributes:
        url: Base URL of the server, e.g. https://10.0.0.1:443.
        username: Basic-auth user name.
        password: Basic-auth password (never shown in repr).
        verify_ssl: Verify the server certificate. Off by default since
            appliances usually present a self-signed certificate.
        timeout: Per-request timeout in seconds.
        max_retries: Retries allowed after the first attempt.
        backoff_min_delay: Minimum delay between two attempts, in seconds.
        backoff_max_delay: Maximum delay between two attempts, in seconds.
        backoff_delay_factor: Exponential growth factor of the delay.
        error_message_path: Document path of the error message in error
            responses.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    url: str = Field(..., min_length=1, description="Base URL of the server")
    username: str = Field("", description="Basic-auth user name")
    password: str = Field("", repr=False, description="Basic-auth password")
    verify_ssl: bool = Field(False, description="Verify TLS certificates")
    timeout: float = Field(DEFAULT_TIMEOUT, gt=0, description="Request timeout (s)")
    max_retries: int = Field(DEFAULT_MAX_RETRIES, ge=0, description="Retry budget")
    backoff_min_delay: float = Field(DEFAULT_BACKOFF_MIN_DELAY, ge=0, description="Minimum backoff (s)")
    backoff_max_delay: float = Field(DEFAULT_BACKOFF_MAX_DELAY, ge=0, description="Maximum backoff (s)")
    backoff_delay_factor: float = Field(DEFAULT_BACKOFF_DELAY_FACTOR, gt=0, description="Backoff growth factor")
    error_message_path: str = Field(DEFAULT_ERROR_MESSAGE_PATH, description="Error message path")

    def with_overrides(self, **overrides: Any) -> "ClientConfig":
        """Return a validated copy with the given fields replaced.

        Raises:
            pydantic.ValidationError: If an override is unknown or invalid.
        """
        return type(self).model_validate({**self.model_dump(), **overrides})

    @classmethod
    def from_env(
        cls,
        prefix: str = DEFAULT_ENV_PREFIX,
        env_file: str | Path | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> "ClientConfig":
        """Load settings from environment variables.

        Each field maps to ``<prefix><FIELD>`` (e.g. ``ISE_MAX_RETRIES``).
        Values from ``env_file`` are read first and overridden by the
        process environment.

        Args:
            prefix: Variable name prefix.
            env_file: Optional dotenv file.
            environ: Environment mapping; ``os.environ`` when omitted.

        Returns:
            The validated configuration.

        Raises:
            pydantic.ValidationError: If a value is missing or invalid.
        """
        values: dict[str, str] = {}
        if env_file is not None:
            values.update({k: v for k, v in dotenv_values(env_file).items() if v is not None})
        values.update(os.environ if environ is None else environ)

        data = {}
        for name in cls.model_fields:
            key = f"{prefix}{name.upper()}"
            if key in values:
                data[name] = values[key]
        return cls.model_validate(data)
