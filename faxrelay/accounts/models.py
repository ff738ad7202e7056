"""Account data models and the immutable directory snapshot."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from faxrelay.errors import AccountSourceError


@dataclass(frozen=True, slots=True)
class Account:
    """A fax number and the contacts notified when a fax arrives.

    Contact order is preserved and duplicates are kept.
    """

    fax_number: str
    contacts: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {"fax_number": self.fax_number, "contacts": list(self.contacts)}

    @classmethod
    def from_dict(cls, data: Any) -> Account:
        if not isinstance(data, dict):
            msg = f"account record must be an object, got {type(data).__name__}"
            raise AccountSourceError(msg)
        fax = data.get("fax_number")
        if not isinstance(fax, str) or not fax:
            msg = f"account record has no fax_number: {data!r}"
            raise AccountSourceError(msg)
        contacts = data.get("contacts") or []
        if not isinstance(contacts, list) or not all(isinstance(c, str) for c in contacts):
            msg = f"contacts for {fax} must be a list of strings"
            raise AccountSourceError(msg)
        return cls(fax_number=fax, contacts=tuple(contacts))


class AccountDirectory:
    """Read-only snapshot mapping fax number to `Account`.

    A snapshot is fully built before anyone can see it and is never changed
    afterwards; a refresh produces a new instance.
    """

    __slots__ = ("_accounts", "generation")

    def __init__(self, accounts: dict[str, Account], generation: int = 0) -> None:
        self._accounts = MappingProxyType(dict(accounts))
        self.generation = generation

    @classmethod
    def build(
        cls,
        accounts: Iterable[Account],
        synthetic: Account | None = None,
        generation: int = 0,
    ) -> AccountDirectory:
        """Index *accounts* by fax number; later duplicates overwrite earlier ones.

        *synthetic* is applied last, so it replaces a file entry with the same number.
        """
        table: dict[str, Account] = {}
        for account in accounts:
            table[account.fax_number] = account
        if synthetic is not None:
            table[synthetic.fax_number] = synthetic
        return cls(table, generation=generation)

    @classmethod
    def empty(cls) -> AccountDirectory:
        return cls({})

    def find(self, fax_number: str) -> Account | None:
        return self._accounts.get(fax_number)

    def fax_numbers(self) -> list[str]:
        return list(self._accounts)

    def __len__(self) -> int:
        return len(self._accounts)

    def __contains__(self, fax_number: object) -> bool:
        return fax_number in self._accounts

    def __repr__(self) -> str:
        return f"AccountDirectory(accounts={len(self)}, generation={self.generation})"
