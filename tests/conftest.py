"""Shared test fixtures."""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

SAMPLE_ACCOUNTS: list[dict[str, Any]] = [
    {"fax_number": "12223334444", "contacts": ["14443332222", "19998887777"]},
    {"fax_number": "14443332222", "contacts": ["15556667777", "17776665555"]},
]


@pytest.fixture
def write_accounts(tmp_path: Path) -> Callable[[Any], Path]:
    """Write *data* as the accounts JSON file and return its path."""
    path = tmp_path / "accounts.json"

    def _write(data: Any) -> Path:
        text = data if isinstance(data, str) else json.dumps(data)
        path.write_text(text, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def accounts_file(write_accounts: Callable[[Any], Path]) -> Path:
    return write_accounts(SAMPLE_ACCOUNTS)
