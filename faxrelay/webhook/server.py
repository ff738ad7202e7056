"""Webhook HTTP server: aiohttp-based ingress for Twilio fax callbacks."""

from __future__ import annotations

import logging
import ssl
from typing import TYPE_CHECKING, Any

from aiohttp import web

from faxrelay.log_context import next_request_id, set_log_context
from faxrelay.webhook.auth import AUTH_REALM, RequestAuthenticator
from faxrelay.webhook.models import (
    RECEIVE_PATH,
    RECEIVED_PATH,
    accept_directive,
    reject_directive,
)

if TYPE_CHECKING:
    from multidict import MultiDictProxy

    from faxrelay.accounts.models import Account
    from faxrelay.accounts.store import DirectoryStore
    from faxrelay.config import RelayConfig
    from faxrelay.notify.dispatcher import NotificationDispatcher

logger = logging.getLogger(__name__)

MISSING_TO_MESSAGE = 'missing "?to=<faxnumber>" query in request'
UNAUTHORISED_BODY = "Unauthorised.\n"
XML_CONTENT_TYPE = "text/xml"

# Twilio posts ``MediaUrl``; ``mediaUrl`` is accepted for hand-rolled callers.
_MEDIA_URL_FIELDS = ("MediaUrl", "mediaUrl")


class FaxWebhookServer:
    """HTTP server implementing the fax receive protocol.

    Routes:
    - ``GET  /health``        -- Health check with directory size and generation.
    - ``POST /fax/receive``   -- Decide whether to accept an inbound fax.
    - ``POST /fax/received``  -- Fax arrived; notify the account's contacts.

    No state is kept between the two calls; the sender correlates them through
    the ``to`` query parameter of the accept directive.
    """

    def __init__(
        self,
        config: RelayConfig,
        store: DirectoryStore,
        dispatcher: NotificationDispatcher,
        authenticator: RequestAuthenticator | None = None,
    ) -> None:
        self._config = config
        self._store = store
        self._dispatcher = dispatcher
        self._auth = authenticator or RequestAuthenticator(config)
        self._runner: web.AppRunner | None = None

    def build_app(self) -> web.Application:
        app = web.Application()
        app.router.add_get("/health", self._handle_health)
        app.router.add_route("*", RECEIVE_PATH, self._handle_receive)
        app.router.add_route("*", RECEIVED_PATH, self._handle_received)
        return app

    async def start(self) -> None:
        """Create the aiohttp app and start listening."""
        self._runner = web.AppRunner(self.build_app(), access_log=None)
        await self._runner.setup()
        site = web.TCPSite(
            self._runner,
            self._config.http_bind_address,
            self._config.http_port,
            ssl_context=self._ssl_context(),
        )
        await site.start()
        scheme = "https" if self._config.has_tls else "http"
        logger.info(
            "Fax webhook server listening on %s://%s:%d",
            scheme,
            self._config.http_bind_address,
            self._config.http_port,
        )

    async def stop(self) -> None:
        """Shut down the server."""
        if self._runner:
            await self._runner.cleanup()
            self._runner = None
        logger.info("Fax webhook server stopped")

    def _ssl_context(self) -> ssl.SSLContext | None:
        if not self._config.has_tls:
            return None
        ctx = ssl.create_default_context(ssl.Purpose.CLIENT_AUTH)
        ctx.load_cert_chain(self._config.tls_cert_file, self._config.tls_key_file)
        return ctx

    # -- Handlers --

    async def _handle_health(self, _request: web.Request) -> web.Response:
        directory = self._store.directory
        return web.json_response(
            {"status": "ok", "accounts": len(directory), "generation": directory.generation}
        )

    async def _handle_receive(self, request: web.Request) -> web.Response:
        """Answer the receive decision call with an accept or reject directive."""
        request_id = self._begin(request, "rx")
        try:
            rejected, _form = await self._gate(request)
            if rejected is not None:
                return rejected

            to = request.query.get("to", "")
            if not to:
                return _http_error(400, MISSING_TO_MESSAGE)
            set_log_context(fax_number=to)

            if self._lookup(to) is not None:
                resp = accept_directive(to, RECEIVED_PATH)
            else:
                resp = reject_directive()
            logger.info("HTTP response fax_num=%s resp=%s", to, resp)
            return web.Response(text=resp, content_type=XML_CONTENT_TYPE)
        finally:
            logger.info("HTTP request end id=%d", request_id)

    async def _handle_received(self, request: web.Request) -> web.Response:
        """Notify the account's contacts that a fax has arrived.

        Unknown accounts and a missing media URL end the call silently with 200.
        """
        request_id = self._begin(request, "done")
        try:
            rejected, form = await self._gate(request)
            if rejected is not None:
                return rejected

            to = request.query.get("to", "")
            if not to:
                return _http_error(400, MISSING_TO_MESSAGE)
            set_log_context(fax_number=to)

            account = self._lookup(to)
            if account is None:
                logger.info("Account not found fax_num=%s", to)
                return web.Response()

            media_url = _media_url(form, request)
            if not media_url:
                logger.info("Missing MediaUrl fax_num=%s", to)
                return web.Response()

            await self._dispatcher.fan_out(account, media_url)
            return web.Response()
        finally:
            logger.info("HTTP request end id=%d", request_id)

    # -- Helpers --

    def _begin(self, request: web.Request, operation: str) -> int:
        request_id = next_request_id()
        set_log_context(operation=operation, request_id=request_id)
        logger.info(
            "HTTP request begin id=%d method=%s url=%s",
            request_id,
            request.method,
            request.path_qs,
        )
        return request_id

    async def _gate(
        self, request: web.Request
    ) -> tuple[web.Response | None, MultiDictProxy[Any] | None]:
        """Apply method, credential and signature checks in that order.

        Returns ``(error_response, None)`` on rejection, ``(None, form)`` otherwise.
        """
        if request.method != "POST":
            return _http_error(404, ""), None

        if not self._auth.check_credentials(request):
            logger.info("HTTP error status=401 reason=credentials")
            resp = web.Response(status=401, text=UNAUTHORISED_BODY)
            resp.headers["WWW-Authenticate"] = f'Basic realm="{AUTH_REALM}"'
            return resp, None

        form = await request.post()
        params = {key: str(value) for key, value in form.items()}
        if not self._auth.check_signature(request, params):
            logger.info("Twilio request validation failed")
            return _http_error(401, ""), None

        return None, form

    def _lookup(self, fax_number: str) -> Account | None:
        """Find an account whose stored number equals *fax_number* exactly."""
        account = self._store.find(fax_number)
        if account is None or account.fax_number != fax_number:
            return None
        return account


def _media_url(form: MultiDictProxy[Any] | None, request: web.Request) -> str:
    sources = (form, request.query) if form is not None else (request.query,)
    for source in sources:
        for field in _MEDIA_URL_FIELDS:
            if source.get(field):
                return str(source[field])
    return ""


def _http_error(status: int, msg: str) -> web.Response:
    logger.info("HTTP error status=%d msg=%s", status, msg)
    return web.Response(status=status, text=msg)
