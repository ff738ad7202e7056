"""FaxRelay: wires directory, refresher, dispatcher and webhook server together."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import TYPE_CHECKING

from faxrelay.accounts.models import Account
from faxrelay.accounts.refresher import REFRESH_INTERVAL_SECONDS, DirectoryRefresher
from faxrelay.accounts.store import DirectoryStore
from faxrelay.notify.dispatcher import NotificationDispatcher
from faxrelay.notify.transport import TwilioTransport
from faxrelay.webhook.auth import RequestAuthenticator, enforce_startup_policy
from faxrelay.webhook.server import FaxWebhookServer

if TYPE_CHECKING:
    from faxrelay.config import RelayConfig
    from faxrelay.notify.transport import MessagingTransport

logger = logging.getLogger(__name__)


def synthetic_account(config: RelayConfig) -> Account | None:
    """Account built from the operator's own ``fax_number``/``mobile_number``."""
    if config.fax_number and config.mobile_number:
        return Account(fax_number=config.fax_number, contacts=(config.mobile_number,))
    return None


class FaxRelay:
    """Owns every long-lived component of the relay.

    ``start()`` validates the configuration and loads the directory before
    anything listens; failures there are fatal and propagate. ``stop()``
    cancels the refresh task and closes the listener without draining
    in-flight requests.
    """

    def __init__(
        self,
        config: RelayConfig,
        *,
        transport: MessagingTransport | None = None,
        refresh_interval: float = REFRESH_INTERVAL_SECONDS,
    ) -> None:
        self._config = config
        self._transport = transport
        accounts_file = Path(config.accounts_file).expanduser() if config.accounts_file else None
        self.store = DirectoryStore(accounts_file, synthetic=synthetic_account(config))
        self.refresher = DirectoryRefresher(self.store, interval=refresh_interval)
        self._server: FaxWebhookServer | None = None

    async def start(self) -> None:
        enforce_startup_policy(self._config)

        logger.info(
            "Load accounts path=%s every=%.0fs",
            self._config.accounts_file or "-",
            self.refresher.interval,
        )
        try:
            directory = await asyncio.to_thread(self.store.load)
        except Exception:
            logger.exception("Failed to load accounts path=%s", self._config.accounts_file)
            raise
        logger.info("Loaded %d account(s)", len(directory))

        transport = self._transport or TwilioTransport(
            self._config.twilio_sid,
            self._config.twilio_token,
        )
        self._server = FaxWebhookServer(
            self._config,
            self.store,
            NotificationDispatcher(transport),
            RequestAuthenticator(self._config),
        )
        await self.refresher.start()
        try:
            await self._server.start()
        except BaseException:
            await self.refresher.stop()
            raise
        logger.info("faxrelay server started")

    async def stop(self) -> None:
        await self.refresher.stop()
        if self._server:
            await self._server.stop()
            self._server = None
        logger.info("faxrelay server stopped")

    async def run_forever(self) -> None:
        """Start, then serve until the surrounding task is cancelled."""
        await self.start()
        try:
            await asyncio.Event().wait()
        finally:
            await self.stop()
