"""Tests for the JSON account file loader."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from faxrelay.accounts.source import load_accounts_file
from faxrelay.errors import AccountSourceError


def test_reads_records_in_order(accounts_file: Path) -> None:
    accounts = load_accounts_file(accounts_file)
    assert [a.fax_number for a in accounts] == ["12223334444", "14443332222"]
    assert accounts[0].contacts == ("14443332222", "19998887777")
    assert accounts[1].contacts == ("15556667777", "17776665555")


def test_empty_array(write_accounts: Callable[[Any], Path]) -> None:
    assert load_accounts_file(write_accounts([])) == []


def test_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(AccountSourceError, match="cannot read"):
        load_accounts_file(tmp_path / "nope.json")


def test_invalid_json_raises(write_accounts: Callable[[Any], Path]) -> None:
    with pytest.raises(AccountSourceError, match="invalid JSON"):
        load_accounts_file(write_accounts("[{not json"))


def test_non_array_raises(write_accounts: Callable[[Any], Path]) -> None:
    with pytest.raises(AccountSourceError, match="JSON array"):
        load_accounts_file(write_accounts({"fax_number": "1"}))


def test_malformed_record_raises(write_accounts: Callable[[Any], Path]) -> None:
    with pytest.raises(AccountSourceError):
        load_accounts_file(write_accounts([{"fax_number": "1", "contacts": "2"}]))


def test_invalid_utf8_raises(tmp_path: Path) -> None:
    path = tmp_path / "accounts.json"
    path.write_bytes(b'[{"fax_number": "1\xff", "contacts": []}]')
    with pytest.raises(AccountSourceError, match="cannot read"):
        load_accounts_file(path)
