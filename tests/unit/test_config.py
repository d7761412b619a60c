"""Unit tests for environment-driven settings."""

import os
from unittest.mock import patch

import pytest

from examportal.config import Settings


@pytest.mark.unit
class TestSettings:
    """Tests for Settings.from_env."""

    @patch.dict(os.environ, {}, clear=True)
    def test_defaults(self) -> None:
        """Defaults apply when no variables are set."""
        settings = Settings.from_env()

        assert settings.db_path == "examportal.db"
        assert settings.registration_timeout == 10.0
        assert settings.busy_timeout == 5.0
        assert settings.mail_relay_url == ""
        assert settings.port == 8000

    @patch.dict(
        os.environ,
        {
            "EXAMPORTAL_DB_PATH": "/tmp/portal.db",
            "EXAMPORTAL_REGISTRATION_TIMEOUT": "2.5",
            "EXAMPORTAL_MAIL_RELAY_URL": "https://relay.example/send",
            "EXAMPORTAL_TICKET_BASE_URL": "https://portal.example/tickets",
            "EXAMPORTAL_PORT": "9000",
        },
        clear=True,
    )
    def test_reads_environment(self) -> None:
        """EXAMPORTAL_* variables override defaults."""
        settings = Settings.from_env()

        assert settings.db_path == "/tmp/portal.db"
        assert settings.registration_timeout == 2.5
        assert settings.mail_relay_url == "https://relay.example/send"
        assert settings.ticket_base_url == "https://portal.example/tickets"
        assert settings.port == 9000

    @patch.dict(os.environ, {"EXAMPORTAL_REGISTRATION_TIMEOUT": ""}, clear=True)
    def test_blank_number_uses_default(self) -> None:
        """A blank numeric variable falls back to the default."""
        assert Settings.from_env().registration_timeout == 10.0

    @patch.dict(os.environ, {"EXAMPORTAL_DB_BUSY_TIMEOUT": "soon"}, clear=True)
    def test_invalid_number_raises(self) -> None:
        """A non-numeric value is rejected with the variable name."""
        with pytest.raises(ValueError, match="EXAMPORTAL_DB_BUSY_TIMEOUT"):
            Settings.from_env()

    def test_settings_are_frozen(self) -> None:
        """Settings cannot be mutated after construction."""
        settings = Settings()
        with pytest.raises(AttributeError):
            settings.db_path = "other.db"  # type: ignore[misc]
