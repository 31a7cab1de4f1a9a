"""Persisted financial transaction model."""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from clubdash.domain.models.enums import TransactionKind
from clubdash.domain.models.ledger import LedgerEntry


@dataclass
class FinancialTransaction:
    """
    Bank-account transaction (source of truth for running balances).

    Split parts are stored as separate rows with `parent_id` set and
    `is_virtual` True; their amounts are already included in the parent.
    """

    txn_id: str
    account_id: str
    txn_date: date
    kind: TransactionKind
    amount: Decimal
    description: Optional[str] = None
    parent_id: Optional[str] = None
    is_virtual: bool = False
    is_deleted: bool = False
    created_at: Optional[datetime] = field(default=None)

    def __post_init__(self) -> None:
        if isinstance(self.kind, str):
            self.kind = TransactionKind(self.kind)

    def to_ledger_entry(self) -> LedgerEntry:
        return LedgerEntry(
            entry_id=self.txn_id,
            kind=self.kind,
            amount=self.amount,
            is_virtual=self.is_virtual,
            parent_id=self.parent_id,
            txn_date=self.txn_date,
            description=self.description,
        )
