"""Webhook system: Twilio fax receive/received endpoints."""

from faxrelay.webhook.auth import RequestAuthenticator, enforce_startup_policy
from faxrelay.webhook.server import FaxWebhookServer

__all__ = ["FaxWebhookServer", "RequestAuthenticator", "enforce_startup_policy"]
