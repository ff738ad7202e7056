"""Tests for the Twilio messaging transport."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from twilio.base.exceptions import TwilioRestException

from faxrelay.errors import DispatchError
from faxrelay.notify.transport import TwilioTransport, mask_phone


def _client() -> MagicMock:
    client = MagicMock()
    client.messages.create.return_value = MagicMock(sid="SM123")
    return client


class TestMaskPhone:
    def test_masks_long_number(self) -> None:
        assert mask_phone("14443332222") == "144433***"

    def test_short_number_unchanged(self) -> None:
        assert mask_phone("12345") == "12345"


class TestTwilioTransport:
    async def test_send_calls_messages_create(self) -> None:
        client = _client()
        transport = TwilioTransport("AC123", "token", client=client)
        await transport.send("12223334444", "14443332222", "You have a fax!")
        client.messages.create.assert_called_once_with(
            from_="12223334444",
            to="14443332222",
            body="You have a fax!",
        )

    async def test_twilio_error_wrapped(self) -> None:
        client = _client()
        client.messages.create.side_effect = TwilioRestException(
            400, "https://api.twilio.com", msg="invalid number", code=21211
        )
        transport = TwilioTransport("AC123", "token", client=client)
        with pytest.raises(DispatchError, match="144433"):
            await transport.send("12223334444", "14443332222", "hi")

    def test_builds_real_client_without_network(self) -> None:
        transport = TwilioTransport("AC123", "token", timeout=5)
        assert transport._client.username == "AC123"
