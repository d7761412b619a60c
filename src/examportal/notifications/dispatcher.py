"""Notification dispatchers - outbound email."""

from __future__ import annotations

import logging
from typing import Protocol

import httpx

from examportal.logging import sanitize_for_log
from examportal.notifications.models import DispatchResult

logger = logging.getLogger("examportal.notifications")


class NotificationDispatcher(Protocol):
    """Interface for sending one email."""

    def send(self, recipient_email: str, subject: str, body: str) -> DispatchResult:
        """Send a message; never raises for delivery problems."""
        ...


class MailRelayDispatcher:
    """Sends mail through an HTTP mail relay.

    The relay accepts ``{"from", "to", "subject", "html"}`` as JSON and
    answers 2xx when the message is queued.
    """

    def __init__(
        self,
        relay_url: str,
        token: str = "",
        sender: str = "no-reply@localhost",
        timeout: float = 30.0,
    ) -> None:
        """Initialize the dispatcher.

        Args:
            relay_url: Relay endpoint URL.
            token: Bearer token for the relay, if it requires one.
            sender: From address.
            timeout: HTTP timeout in seconds.
        """
        self.relay_url = relay_url
        self.token = token
        self.sender = sender
        self.timeout = timeout
        self._client: httpx.Client | None = None

    @property
    def client(self) -> httpx.Client:
        """Get or create the HTTP client."""
        if self._client is None:
            headers = {"Content-Type": "application/json"}
            if self.token:
                headers["Authorization"] = f"Bearer {self.token}"
            self._client = httpx.Client(headers=headers, timeout=self.timeout)
        return self._client

    def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            self._client.close()
            self._client = None

    def send(self, recipient_email: str, subject: str, body: str) -> DispatchResult:
        payload = {
            "from": self.sender,
            "to": recipient_email,
            "subject": subject,
            "html": body,
        }
        try:
            response = self.client.post(self.relay_url, json=payload)
        except httpx.HTTPError as e:
            logger.warning("Mail relay request failed: %s", sanitize_for_log(str(e)))
            return DispatchResult(ok=False, error=f"Mail relay unreachable: {e}")

        if response.status_code >= 300:
            error = f"Mail relay returned {response.status_code}: {response.text[:200]}"
            logger.warning(sanitize_for_log(error))
            return DispatchResult(ok=False, error=error)

        logger.info("Mail queued for %s", sanitize_for_log(recipient_email))
        return DispatchResult(ok=True)


class LogDispatcher:
    """Writes messages to the log instead of sending them."""

    def send(self, recipient_email: str, subject: str, body: str) -> DispatchResult:
        logger.info(
            "Mail for %s (not sent, no relay configured): %s",
            sanitize_for_log(recipient_email),
            subject,
        )
        logger.debug("Mail body: %s", body)
        return DispatchResult(ok=True)
