"""Runtime settings for the exam portal, read from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_DB_PATH = "examportal.db"
DEFAULT_REGISTRATION_TIMEOUT = 10.0
DEFAULT_BUSY_TIMEOUT = 5.0
DEFAULT_TICKET_BASE_URL = "http://localhost:8000/tickets"
DEFAULT_INSTITUTION = "Exam Registration Office"


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be a number, got {raw!r}") from e


@dataclass(frozen=True)
class Settings:
    """Portal configuration.

    Attributes:
        db_path: Path to the SQLite database file (":memory:" for tests).
        registration_timeout: Deadline in seconds for one registration unit of work.
        busy_timeout: Seconds SQLite waits for the write lock before giving up.
        mail_relay_url: HTTP mail relay endpoint. Empty means log-only dispatch.
        mail_relay_token: Bearer token for the mail relay.
        mail_sender: From address used in outgoing mail.
        ticket_base_url: Base URL for hall ticket references.
        institution: Name used to sign confirmation mails.
        host: Bind address for the HTTP server.
        port: Bind port for the HTTP server.
    """

    db_path: str = DEFAULT_DB_PATH
    registration_timeout: float = DEFAULT_REGISTRATION_TIMEOUT
    busy_timeout: float = DEFAULT_BUSY_TIMEOUT
    mail_relay_url: str = ""
    mail_relay_token: str = ""
    mail_sender: str = "no-reply@localhost"
    ticket_base_url: str = DEFAULT_TICKET_BASE_URL
    institution: str = DEFAULT_INSTITUTION
    host: str = "127.0.0.1"
    port: int = 8000

    @classmethod
    def from_env(cls) -> Settings:
        """Build settings from EXAMPORTAL_* environment variables."""
        env = os.environ
        return cls(
            db_path=env.get("EXAMPORTAL_DB_PATH", DEFAULT_DB_PATH),
            registration_timeout=_env_float(
                "EXAMPORTAL_REGISTRATION_TIMEOUT", DEFAULT_REGISTRATION_TIMEOUT
            ),
            busy_timeout=_env_float("EXAMPORTAL_DB_BUSY_TIMEOUT", DEFAULT_BUSY_TIMEOUT),
            mail_relay_url=env.get("EXAMPORTAL_MAIL_RELAY_URL", ""),
            mail_relay_token=env.get("EXAMPORTAL_MAIL_RELAY_TOKEN", ""),
            mail_sender=env.get("EXAMPORTAL_MAIL_SENDER", "no-reply@localhost"),
            ticket_base_url=env.get("EXAMPORTAL_TICKET_BASE_URL", DEFAULT_TICKET_BASE_URL),
            institution=env.get("EXAMPORTAL_INSTITUTION", DEFAULT_INSTITUTION),
            host=env.get("EXAMPORTAL_HOST", "127.0.0.1"),
            port=int(_env_float("EXAMPORTAL_PORT", 8000)),
        )
