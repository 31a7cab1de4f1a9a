"""Ledger entry model consumed by the running-balance engine."""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Optional, Union

from clubdash.domain.models.enums import TransactionKind

Number = Union[Decimal, int, float, str]


def to_decimal(value: Number) -> Decimal:
    """Convert a numeric input to Decimal without float artifacts."""
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except InvalidOperation:
        return Decimal("NaN")


@dataclass(frozen=True)
class LedgerEntry:
    """
    One movement in an ordered ledger.

    `amount` is non-negative; `kind` gives the sign. Entries with
    `is_virtual` set or a `parent_id` are parts of another entry and are
    never accumulated on their own.
    """

    entry_id: str
    kind: TransactionKind
    amount: Decimal
    is_virtual: bool = False
    parent_id: Optional[str] = None
    txn_date: Optional[date] = None
    description: Optional[str] = field(default=None, compare=False)

    def __post_init__(self) -> None:
        if isinstance(self.kind, str):
            object.__setattr__(self, "kind", TransactionKind(self.kind))
        object.__setattr__(self, "amount", to_decimal(self.amount))

    @classmethod
    def from_signed(
        cls,
        entry_id: str,
        signed_amount: Number,
        **kwargs,
    ) -> "LedgerEntry":
        """Build an entry from a signed amount (negative = expense)."""
        amount = to_decimal(signed_amount)
        kind = TransactionKind.EXPENSE if amount.is_signed() else TransactionKind.INCOME
        return cls(entry_id=entry_id, kind=kind, amount=abs(amount), **kwargs)

    @property
    def is_part(self) -> bool:
        """Return True if this entry is a decomposed part of another entry."""
        return self.is_virtual or bool(self.parent_id)

    @property
    def signed_amount(self) -> Decimal:
        """Positive for income, negative for expense."""
        if self.kind == TransactionKind.INCOME:
            return self.amount
        return -self.amount
