"""Contact notifications: message transport and per-contact fan-out."""

from faxrelay.notify.dispatcher import NotificationDispatcher
from faxrelay.notify.models import NotificationJob, render_fax_alert
from faxrelay.notify.transport import MessagingTransport, TwilioTransport

__all__ = [
    "MessagingTransport",
    "NotificationDispatcher",
    "NotificationJob",
    "TwilioTransport",
    "render_fax_alert",
]
