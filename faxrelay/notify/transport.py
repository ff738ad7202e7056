"""Messaging transport: sends a single SMS through Twilio."""

from __future__ import annotations

import asyncio
import logging
from typing import Protocol

from twilio.base.exceptions import TwilioException
from twilio.http.http_client import TwilioHttpClient
from twilio.rest import Client as TwilioClient

from faxrelay.errors import DispatchError

logger = logging.getLogger(__name__)

TWILIO_CLIENT_TIMEOUT = 10


class MessagingTransport(Protocol):
    """Anything that can deliver one text message."""

    async def send(self, from_number: str, to_number: str, body: str) -> None: ...


def mask_phone(phone: str) -> str:
    """Mask phone number for logging - show first 6 digits only."""
    if len(phone) > 6:
        return phone[:6] + "***"
    return phone


class TwilioTransport:
    """Twilio REST transport.

    The Twilio client is synchronous, so each send runs in a worker thread.
    Retry and timeout policy belong to the Twilio HTTP client.
    """

    def __init__(
        self,
        account_sid: str,
        auth_token: str,
        *,
        timeout: float = TWILIO_CLIENT_TIMEOUT,
        client: TwilioClient | None = None,
    ) -> None:
        self._client = client or TwilioClient(
            account_sid,
            auth_token,
            http_client=TwilioHttpClient(timeout=timeout),
        )

    async def send(self, from_number: str, to_number: str, body: str) -> None:
        try:
            message = await asyncio.to_thread(
                self._client.messages.create,
                from_=from_number,
                to=to_number,
                body=body,
            )
        except TwilioException as exc:
            msg = f"Twilio send to {mask_phone(to_number)} failed: {exc}"
            raise DispatchError(msg) from exc
        logger.debug("SMS queued sid=%s to=%s", message.sid, mask_phone(to_number))
