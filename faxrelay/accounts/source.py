"""Account file loader: a JSON array of ``{fax_number, contacts}`` records."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from faxrelay.accounts.models import Account
from faxrelay.errors import AccountSourceError

logger = logging.getLogger(__name__)


def load_accounts_file(path: Path) -> list[Account]:
    """Read account records from *path* in file order.

    Raises `AccountSourceError` if the file cannot be read or is malformed.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        msg = f"cannot read accounts file {path}: {exc}"
        raise AccountSourceError(msg) from exc

    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        msg = f"invalid JSON in accounts file {path}: {exc}"
        raise AccountSourceError(msg) from exc

    if not isinstance(data, list):
        msg = f"accounts file {path} must contain a JSON array"
        raise AccountSourceError(msg)

    accounts = [Account.from_dict(item) for item in data]
    logger.debug("Read %d account record(s) from %s", len(accounts), path)
    return accounts
