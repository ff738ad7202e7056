"""Notification fan-out: one independent send per account contact."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from faxrelay.notify.models import NotificationJob, render_fax_alert
from faxrelay.notify.transport import mask_phone

if TYPE_CHECKING:
    from faxrelay.accounts.models import Account
    from faxrelay.notify.transport import MessagingTransport

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    """Sends the fax alert to every contact of an account.

    Contacts are attempted sequentially in stored order. A failure for one
    contact is logged and recorded on its job; the remaining contacts are
    still attempted. Nothing is retried or rolled back.
    """

    def __init__(self, transport: MessagingTransport) -> None:
        self._transport = transport

    async def send(self, job: NotificationJob) -> NotificationJob:
        """Attempt a single job and record its outcome."""
        try:
            await self._transport.send(job.sender, job.recipient, job.body)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            job.ok = False
            job.error = str(exc) or type(exc).__name__
            logger.warning(
                "Failed SMS contact=%s: %s",
                mask_phone(job.recipient),
                job.error,
            )
            return job
        job.ok = True
        return job

    async def fan_out(self, account: Account, media_url: str) -> list[NotificationJob]:
        """Notify every contact of *account* about the fax at *media_url*."""
        body = render_fax_alert(media_url)
        jobs = [
            NotificationJob(sender=account.fax_number, recipient=contact, body=body)
            for contact in account.contacts
        ]
        for job in jobs:
            await self.send(job)
        sent = sum(1 for j in jobs if j.ok)
        logger.info("Fax alert sent to %d/%d contact(s)", sent, len(jobs))
        return jobs
