"""Account directory: fax number to contact list, refreshed in the background."""

from faxrelay.accounts.models import Account, AccountDirectory
from faxrelay.accounts.refresher import DirectoryRefresher
from faxrelay.accounts.store import DirectoryStore

__all__ = ["Account", "AccountDirectory", "DirectoryRefresher", "DirectoryStore"]
