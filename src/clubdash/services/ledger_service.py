"""Ledger service for bank-account transactions and running balances."""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Optional

from clubdash.core.timezone import now_local
from clubdash.core.exceptions import ValidationError, NotFoundError
from clubdash.domain.models import MISS, FinancialTransaction, TransactionKind
from clubdash.domain.models.ledger import Number, to_decimal
from clubdash.domain.views import AccountSummary, BalancePage, BalanceRow
from clubdash.repositories.protocols import TransactionRepository
from clubdash.services.balance_engine import RunningBalanceEngine
from clubdash.services.ttl_cache import TTLCacheStore

logger = logging.getLogger(__name__)


@dataclass
class TransactionPart:
    """One part of a split transaction."""

    amount: Decimal
    description: Optional[str] = None


@dataclass
class TransactionCreate:
    """Input data for recording a transaction."""

    account_id: str
    kind: TransactionKind
    amount: Decimal
    txn_date: Optional[date] = None
    description: Optional[str] = None
    parts: list[TransactionPart] = field(default_factory=list)

    def __post_init__(self) -> None:
        if isinstance(self.kind, str):
            self.kind = TransactionKind(self.kind)


# Amounts are stored with two decimal places
CENT = Decimal("0.01")


def to_cents(value: Number, label: str) -> Decimal:
    """Convert an amount to cents, rejecting sub-cent precision and non-positive values."""
    amount = to_decimal(value)
    if not amount.is_finite() or amount <= 0:
        raise ValidationError(f"{label} requires amount > 0")
    try:
        cents = amount.quantize(CENT)
    except InvalidOperation:
        raise ValidationError(f"{label} amount {amount} is too large") from None
    if cents != amount:
        raise ValidationError(f"{label} amount {amount} has more than two decimal places")
    return cents


def balance_cache_key(account_id: str) -> str:
    return f"ledger:{account_id}"


def summary_cache_key(account_id: str) -> str:
    return f"financial:{account_id}:summary"


class LedgerService:
    """
    Service for recording bank-account transactions.

    Running balances are computed over the account's whole active ledger
    through the shared RunningBalanceEngine; a newly recorded latest
    transaction is absorbed incrementally, other edits trigger a full pass.
    """

    def __init__(
        self,
        transaction_repo: TransactionRepository,
        balance_engine: RunningBalanceEngine,
        cache: Optional[TTLCacheStore] = None,
    ):
        self._transaction_repo = transaction_repo
        self._balance_engine = balance_engine
        self._cache = cache

    def record_transaction(self, data: TransactionCreate) -> FinancialTransaction:
        """
        Record a transaction, storing split parts as virtual children.

        Parts must add up to the transaction amount.
        """
        amount = self._validate_create(data)
        created_at = now_local().replace(tzinfo=None)
        txn_date = data.txn_date or created_at.date()

        parent = self._transaction_repo.create(
            FinancialTransaction(
                txn_id=str(uuid.uuid4()),
                account_id=data.account_id,
                txn_date=txn_date,
                kind=data.kind,
                amount=amount,
                description=data.description,
                created_at=created_at,
            )
        )
        for part in data.parts:
            self._transaction_repo.create(
                FinancialTransaction(
                    txn_id=str(uuid.uuid4()),
                    account_id=data.account_id,
                    txn_date=txn_date,
                    kind=data.kind,
                    amount=to_cents(part.amount, "Every part"),
                    description=part.description,
                    parent_id=parent.txn_id,
                    is_virtual=True,
                    created_at=created_at,
                )
            )
        logger.info("Recorded %s %s on account %s", data.kind.value, amount, data.account_id)
        self._invalidate_financial()
        return parent

    def get_transaction(self, txn_id: str) -> FinancialTransaction:
        """Get transaction by ID."""
        transaction = self._transaction_repo.get_by_id(txn_id)
        if not transaction:
            raise NotFoundError("Transaction", txn_id)
        return transaction

    def soft_delete_transaction(self, txn_id: str) -> None:
        """Mark a transaction and its parts as deleted."""
        transaction = self.get_transaction(txn_id)
        if transaction.parent_id:
            raise ValidationError("Delete the parent transaction instead of one of its parts")
        if transaction.is_deleted:
            return  # Already deleted

        for part in self._transaction_repo.list_parts(txn_id):
            part.is_deleted = True
            self._transaction_repo.update(part)
        transaction.is_deleted = True
        self._transaction_repo.update(transaction)
        self._invalidate_financial()

    def running_balances(
        self,
        account_id: str,
        opening_balance: Number = Decimal("0"),
        page: int = 1,
        page_size: Optional[int] = None,
    ) -> BalancePage:
        """
        Return one page of the account ledger, newest first, with balances.

        Balances cover the whole ledger so every page agrees with the
        others; parts carry no balance of their own.
        """
        if page < 1:
            raise ValidationError("Page must be >= 1")
        if page_size is not None and page_size < 1:
            raise ValidationError("Page size must be >= 1")

        transactions = self._transaction_repo.list_page(account_id)
        cache_key = balance_cache_key(account_id)
        opening = to_decimal(opening_balance)
        balances = self._balance_engine.compute(
            [t.to_ledger_entry() for t in transactions],
            opening,
            cache_key=cache_key,
        )
        path = self._balance_engine.last_path(cache_key)

        top_level = [t for t in transactions if not t.parent_id]
        if page_size is not None:
            wanted = {t.txn_id for t in top_level[(page - 1) * page_size:page * page_size]}
        else:
            wanted = {t.txn_id for t in top_level}

        rows = [
            BalanceRow(
                txn_id=t.txn_id,
                txn_date=t.txn_date,
                kind=t.kind.value,
                amount=t.amount,
                description=t.description,
                balance=balances.get(t.txn_id),
                parent_id=t.parent_id,
                is_virtual=t.is_virtual,
                created_at=t.created_at,
            )
            for t in transactions
            if t.txn_id in wanted or t.parent_id in wanted
        ]
        return BalancePage(
            account_id=account_id,
            rows=rows,
            total=len(top_level),
            page=page,
            page_size=page_size,
            opening_balance=opening,
            compute_path=path.value if path else None,
        )

    def account_summary(self, account_id: str) -> AccountSummary:
        """Return income and expense totals, cached in the `financial` namespace."""
        key = summary_cache_key(account_id)
        if self._cache is not None:
            cached = self._cache.get(key)
            if cached is not MISS:
                return cached

        income = Decimal("0")
        expense = Decimal("0")
        count = 0
        for t in self._transaction_repo.list_page(account_id):
            if t.parent_id or t.is_virtual:
                continue
            count += 1
            if t.kind == TransactionKind.INCOME:
                income += t.amount
            else:
                expense += t.amount
        summary = AccountSummary(
            account_id=account_id,
            transaction_count=count,
            total_income=income,
            total_expense=expense,
        )
        if self._cache is not None:
            self._cache.set(key, summary)
        return summary

    def _validate_create(self, data: TransactionCreate) -> Decimal:
        if not data.account_id:
            raise ValidationError("Transaction requires an account_id")
        amount = to_cents(data.amount, data.kind.value)
        if data.parts:
            part_amounts = [to_cents(p.amount, "Every part") for p in data.parts]
            if sum(part_amounts, Decimal("0")) != amount:
                raise ValidationError(
                    f"Parts add up to {sum(part_amounts, Decimal('0'))}, expected {amount}"
                )
        return amount

    def _invalidate_financial(self) -> None:
        if self._cache is not None:
            self._cache.invalidate_matching(r"^financial:")
