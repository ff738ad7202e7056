"""Directory store: owns the current snapshot and rebuilds it on demand."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from faxrelay.accounts.models import Account, AccountDirectory
from faxrelay.accounts.source import load_accounts_file
from faxrelay.errors import AccountSourceError, RefreshError
from faxrelay.log_context import set_log_context

logger = logging.getLogger(__name__)


class DirectoryStore:
    """Holds the currently visible `AccountDirectory`.

    Readers take the current reference without locking. ``load`` and
    ``refresh`` build a complete new snapshot first and then replace the
    reference in a single assignment, so readers see either the old or the
    new snapshot and never a partial one.
    """

    def __init__(
        self,
        accounts_file: Path | None = None,
        *,
        synthetic: Account | None = None,
    ) -> None:
        self._accounts_file = accounts_file
        self._synthetic = synthetic
        self._generation = 0
        self._directory = AccountDirectory.empty()

    @property
    def directory(self) -> AccountDirectory:
        return self._directory

    def find(self, fax_number: str) -> Account | None:
        """Return the account for *fax_number* in the current snapshot, or None."""
        return self._directory.find(fax_number)

    def build(self) -> AccountDirectory:
        """Read the account source and build a fresh snapshot (not installed)."""
        records: list[Account] = []
        if self._accounts_file is not None:
            records = load_accounts_file(self._accounts_file)
        return AccountDirectory.build(
            records,
            synthetic=self._synthetic,
            generation=self._generation + 1,
        )

    def load(self) -> AccountDirectory:
        """Build and install a snapshot. Errors propagate to the caller."""
        directory = self.build()
        self._install(directory)
        return directory

    async def refresh(self) -> bool:
        """Rebuild off the event loop and swap in the result.

        On failure the previous snapshot stays visible and False is returned.
        """
        set_log_context(operation="sync")
        try:
            directory = await asyncio.to_thread(self._rebuild)
        except RefreshError as exc:
            logger.warning("%s", exc)
            return False
        self._install(directory)
        return True

    def _rebuild(self) -> AccountDirectory:
        try:
            return self.build()
        except AccountSourceError as exc:
            msg = f"Account refresh failed, keeping generation {self._generation}: {exc}"
            raise RefreshError(msg) from exc

    def _install(self, directory: AccountDirectory) -> None:
        self._directory = directory
        self._generation = directory.generation
        logger.debug(
            "Account directory installed (generation=%d, accounts=%d)",
            directory.generation,
            len(directory),
        )
