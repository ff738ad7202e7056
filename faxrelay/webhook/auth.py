"""Webhook authentication: HTTP Basic credentials and Twilio request signatures."""

from __future__ import annotations

import hmac
import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING

from aiohttp import BasicAuth
from twilio.request_validator import RequestValidator

from faxrelay.errors import StartupConfigurationError

if TYPE_CHECKING:
    from aiohttp import web

    from faxrelay.config import RelayConfig

logger = logging.getLogger(__name__)

AUTH_REALM = "faxrelay"
SIGNATURE_HEADER = "X-Twilio-Signature"


def check_transport_credentials(authorization: str, username: str, password: str) -> bool:
    """Check an ``Authorization: Basic ...`` header value.

    Both fields are compared in constant time. A missing or malformed header
    fails closed.
    """
    if not authorization:
        logger.info("Auth failed: no credentials")
        return False
    try:
        provided = BasicAuth.decode(authorization, encoding="utf-8")
    except ValueError:
        logger.info("Auth failed: malformed Authorization header")
        return False
    user_ok = hmac.compare_digest(provided.login.encode(), username.encode())
    pwd_ok = hmac.compare_digest(provided.password.encode(), password.encode())
    if not (user_ok and pwd_ok):
        logger.info("Auth failed: invalid credentials")
        return False
    return True


def build_webhook_url(request: web.Request, public_base_url: str = "") -> str:
    """Reconstruct the URL the webhook sender signed.

    Behind a reverse proxy the request URL is the internal one, so an
    explicit *public_base_url* wins, then ``X-Forwarded-*`` headers, then the
    request's own scheme and host.
    """
    if public_base_url:
        return public_base_url.rstrip("/") + request.path_qs
    proto = request.headers.get("X-Forwarded-Proto") or request.scheme
    host = request.headers.get("X-Forwarded-Host") or request.host
    return f"{proto}://{host}{request.path_qs}"


def check_origin_signature(
    url: str,
    params: Mapping[str, str],
    signature: str,
    auth_token: str,
) -> bool:
    """Validate a Twilio ``X-Twilio-Signature`` against *url* and POST *params*."""
    if not signature:
        logger.info("Signature check failed: missing %s header", SIGNATURE_HEADER)
        return False
    if not auth_token:
        logger.warning("Signature check failed: no Twilio token configured")
        return False
    valid = RequestValidator(auth_token).validate(url, dict(params), signature)
    if not valid:
        logger.info("Signature check failed: signature mismatch url=%s", url)
    return bool(valid)


class RequestAuthenticator:
    """Two independent gates composed by configuration.

    - transport credentials are checked iff a username and password are configured
    - the origin signature is checked unless ``skip_request_validation`` is set
    """

    def __init__(self, config: RelayConfig) -> None:
        self._config = config

    @property
    def credentials_required(self) -> bool:
        return self._config.has_credentials

    @property
    def signature_required(self) -> bool:
        return not self._config.skip_request_validation

    def check_credentials(self, request: web.Request) -> bool:
        if not self.credentials_required:
            return True
        return check_transport_credentials(
            request.headers.get("Authorization", ""),
            self._config.http_user,
            self._config.http_pwd,
        )

    def check_signature(self, request: web.Request, params: Mapping[str, str]) -> bool:
        if not self.signature_required:
            return True
        return check_origin_signature(
            build_webhook_url(request, self._config.public_base_url),
            params,
            request.headers.get(SIGNATURE_HEADER, ""),
            self._config.twilio_token,
        )


def enforce_startup_policy(config: RelayConfig) -> None:
    """Refuse to serve with an incomplete or unsafe configuration.

    Raises `StartupConfigurationError`. Every relaxation allowed by
    ``unsafe`` is logged as a warning.
    """
    if not config.twilio_sid:
        msg = "Twilio SID must be configured"
        raise StartupConfigurationError(msg)
    if not config.twilio_token:
        msg = "Twilio token must be configured"
        raise StartupConfigurationError(msg)

    if not config.has_credentials:
        if not config.unsafe:
            msg = "provide username and password in config or specify '--unsafe' command line option"
            raise StartupConfigurationError(msg)
        logger.warning("WARNING: no user credentials configured and running in unsafe mode")

    if bool(config.tls_cert_file) != bool(config.tls_key_file):
        msg = "TLS needs both a cert file and a key file"
        raise StartupConfigurationError(msg)

    if not config.has_tls:
        if not config.unsafe:
            msg = "provide TLS cert and key file in config or specify '--unsafe' command line option"
            raise StartupConfigurationError(msg)
        logger.warning("WARNING: TLS not configured, serving unencrypted HTTP")

    if config.skip_request_validation:
        logger.warning("WARNING: Twilio request signature validation disabled")
