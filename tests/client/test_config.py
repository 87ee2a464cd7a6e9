"""Unit tests for ClientConfig (ise_client/config.py).

Covers defaults, validation, overrides and loading from the environment
or a dotenv file.
"""

from pathlib import Path

import pytest
from pydantic import ValidationError

from ise_client.config import (
    DEFAULT_BACKOFF_DELAY_FACTOR,
    DEFAULT_BACKOFF_MAX_DELAY,
    DEFAULT_BACKOFF_MIN_DELAY,
    DEFAULT_ERROR_MESSAGE_PATH,
    DEFAULT_MAX_RETRIES,
    DEFAULT_TIMEOUT,
    ClientConfig,
)


class TestDefaults:
    """Tests for default values."""

    def test_defaults(self) -> None:
        config = ClientConfig(url="https://10.0.0.1")
        assert config.username == ""
        assert config.password == ""
        assert config.verify_ssl is False
        assert config.timeout == DEFAULT_TIMEOUT == 60.0
        assert config.max_retries == DEFAULT_MAX_RETRIES == 3
        assert config.backoff_min_delay == DEFAULT_BACKOFF_MIN_DELAY == 2.0
        assert config.backoff_max_delay == DEFAULT_BACKOFF_MAX_DELAY == 60.0
        assert config.backoff_delay_factor == DEFAULT_BACKOFF_DELAY_FACTOR == 3.0
        assert config.error_message_path == DEFAULT_ERROR_MESSAGE_PATH

    def test_password_hidden_from_repr(self) -> None:
        config = ClientConfig(url="https://10.0.0.1", username="admin", password="s3cret")
        assert "s3cret" not in repr(config)
        assert "admin" in repr(config)


class TestValidation:
    """Tests for field validation."""

    def test_url_required(self) -> None:
        with pytest.raises(ValidationError):
            ClientConfig(url="")

    @pytest.mark.parametrize(
        "field, value",
        [
            ("timeout", 0),
            ("max_retries", -1),
            ("backoff_min_delay", -1),
            ("backoff_max_delay", -0.5),
            ("backoff_delay_factor", 0),
        ],
    )
    def test_rejects_out_of_range(self, field: str, value: float) -> None:
        with pytest.raises(ValidationError):
            ClientConfig(url="https://10.0.0.1", **{field: value})

    def test_rejects_unknown_field(self) -> None:
        with pytest.raises(ValidationError):
            ClientConfig(url="https://10.0.0.1", retries=5)

    def test_inverted_delay_bounds_accepted(self) -> None:
        """Bounds are not cross-checked; the backoff clamps instead."""
        config = ClientConfig(url="https://10.0.0.1", backoff_min_delay=10, backoff_max_delay=1)
        assert config.backoff_min_delay == 10

    def test_frozen(self) -> None:
        config = ClientConfig(url="https://10.0.0.1")
        with pytest.raises(ValidationError):
            config.timeout = 5  # type: ignore[misc]


class TestWithOverrides:
    """Tests for with_overrides."""

    def test_returns_new_config(self) -> None:
        config = ClientConfig(url="https://10.0.0.1", username="admin")
        updated = config.with_overrides(max_retries=0, timeout=5)
        assert updated.max_retries == 0
        assert updated.timeout == 5
        assert updated.username == "admin"
        assert config.max_retries == DEFAULT_MAX_RETRIES

    def test_overrides_are_validated(self) -> None:
        config = ClientConfig(url="https://10.0.0.1")
        with pytest.raises(ValidationError):
            config.with_overrides(max_retries=-2)
        with pytest.raises(ValidationError):
            config.with_overrides(unknown=1)


class TestFromEnv:
    """Tests for loading from environment variables and dotenv files."""

    def test_from_mapping(self) -> None:
        config = ClientConfig.from_env(
            environ={
                "ISE_URL": "https://10.0.0.1",
                "ISE_USERNAME": "admin",
                "ISE_PASSWORD": "secret",
                "ISE_MAX_RETRIES": "5",
                "ISE_VERIFY_SSL": "true",
                "UNRELATED": "x",
            }
        )
        assert config.url == "https://10.0.0.1"
        assert config.username == "admin"
        assert config.password == "secret"
        assert config.max_retries == 5
        assert config.verify_ssl is True

    def test_custom_prefix(self) -> None:
        config = ClientConfig.from_env(prefix="LAB_", environ={"LAB_URL": "https://lab"})
        assert config.url == "https://lab"

    def test_missing_url(self) -> None:
        with pytest.raises(ValidationError):
            ClientConfig.from_env(environ={})

    def test_invalid_value(self) -> None:
        with pytest.raises(ValidationError):
            ClientConfig.from_env(environ={"ISE_URL": "https://x", "ISE_TIMEOUT": "soon"})

    def test_env_file(self, tmp_path: Path) -> None:
        env_file = tmp_path / ".env"
        env_file.write_text("ISE_URL=https://10.0.0.2\nISE_TIMEOUT=15\n")
        config = ClientConfig.from_env(env_file=env_file, environ={})
        assert config.url == "https://10.0.0.2"
        assert config.timeout == 15

    def test_environment_overrides_env_file(self, tmp_path: Path) -> None:
        env_file = tmp_path / ".env"
        env_file.write_text("ISE_URL=https://file\nISE_USERNAME=from-file\n")
        config = ClientConfig.from_env(env_file=env_file, environ={"ISE_URL": "https://env"})
        assert config.url == "https://env"
        assert config.username == "from-file"

    def test_process_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ISE_URL", "https://10.0.0.3")
        monkeypatch.setenv("ISE_BACKOFF_MAX_DELAY", "30")
        config = ClientConfig.from_env()
        assert config.url == "https://10.0.0.3"
        assert config.backoff_max_delay == 30
