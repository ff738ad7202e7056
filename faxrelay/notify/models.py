"""Notification data models and message rendering."""

from __future__ import annotations

from dataclasses import dataclass

FAX_ALERT_TEMPLATE = "You have a fax!\n\n{media_url}"


def render_fax_alert(media_url: str) -> str:
    """Render the message sent to each contact for a received fax."""
    return FAX_ALERT_TEMPLATE.format(media_url=media_url)


@dataclass
class NotificationJob:
    """One send attempt to one contact."""

    sender: str
    recipient: str
    body: str
    ok: bool = False
    error: str | None = None
