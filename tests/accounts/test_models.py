"""Tests for Account records and the AccountDirectory snapshot."""

from __future__ import annotations

import pytest

from faxrelay.accounts.models import Account, AccountDirectory
from faxrelay.errors import AccountSourceError


class TestAccountFromDict:
    def test_parses_record(self) -> None:
        acct = Account.from_dict({"fax_number": "12223334444", "contacts": ["1", "2"]})
        assert acct.fax_number == "12223334444"
        assert acct.contacts == ("1", "2")

    def test_contacts_default_empty(self) -> None:
        assert Account.from_dict({"fax_number": "1"}).contacts == ()

    def test_duplicate_contacts_kept(self) -> None:
        acct = Account.from_dict({"fax_number": "1", "contacts": ["5", "5"]})
        assert acct.contacts == ("5", "5")

    def test_missing_fax_number_raises(self) -> None:
        with pytest.raises(AccountSourceError, match="fax_number"):
            Account.from_dict({"contacts": []})

    def test_non_string_contact_raises(self) -> None:
        with pytest.raises(AccountSourceError, match="contacts"):
            Account.from_dict({"fax_number": "1", "contacts": [15556667777]})

    def test_non_object_raises(self) -> None:
        with pytest.raises(AccountSourceError):
            Account.from_dict(["1", []])

    def test_to_dict(self) -> None:
        acct = Account("1", ("2", "3"))
        assert acct.to_dict() == {"fax_number": "1", "contacts": ["2", "3"]}

    def test_frozen(self) -> None:
        acct = Account("1", ("2",))
        with pytest.raises(AttributeError):
            acct.fax_number = "9"  # type: ignore[misc]


class TestAccountDirectory:
    def test_find_hit_and_miss(self) -> None:
        directory = AccountDirectory.build([Account("1", ("2",))])
        assert directory.find("1") == Account("1", ("2",))
        assert directory.find("9") is None

    def test_last_duplicate_wins(self) -> None:
        directory = AccountDirectory.build([Account("1", ("a",)), Account("1", ("b",))])
        assert len(directory) == 1
        found = directory.find("1")
        assert found is not None
        assert found.contacts == ("b",)

    def test_synthetic_overrides_file_entry(self) -> None:
        directory = AccountDirectory.build(
            [Account("1", ("a",)), Account("2", ("c",))],
            synthetic=Account("1", ("mobile",)),
        )
        found = directory.find("1")
        assert found is not None
        assert found.contacts == ("mobile",)
        assert "2" in directory

    def test_lookup_is_exact(self) -> None:
        directory = AccountDirectory.build([Account("12223334444")])
        assert directory.find("+12223334444") is None
        assert directory.find("1 222 333 4444") is None

    def test_snapshot_not_affected_by_source_mutation(self) -> None:
        table = {"1": Account("1")}
        directory = AccountDirectory(table)
        table["2"] = Account("2")
        assert "2" not in directory

    def test_generation_and_repr(self) -> None:
        directory = AccountDirectory.build([Account("1")], generation=4)
        assert directory.generation == 4
        assert "generation=4" in repr(directory)

    def test_empty(self) -> None:
        directory = AccountDirectory.empty()
        assert len(directory) == 0
        assert directory.fax_numbers() == []
