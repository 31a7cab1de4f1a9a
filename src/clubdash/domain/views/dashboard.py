"""View models for dashboard datasets and loader state."""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional

from clubdash.domain.models.enums import LoadStatus


@dataclass
class MemberStats:
    """Headline member counts shown at the top of the dashboard."""

    total: int = 0
    active: int = 0
    inactive: int = 0
    suspended: int = 0
    pending: int = 0
    by_category: dict[str, int] = field(default_factory=dict)
    by_level: dict[str, int] = field(default_factory=dict)
    new_this_month: int = 0


@dataclass
class BirthdayView:
    member_id: str
    name: str
    birth_date: date
    days_until: int


@dataclass
class DistributionItem:
    """Share of members tagged with one industry or interest."""

    label: str
    count: int
    percentage: float


@dataclass(frozen=True)
class LoadState:
    """Published state of one tracked dataset."""

    key: str
    status: LoadStatus = LoadStatus.IDLE
    value: Any = None
    error: Optional[BaseException] = None
    from_cache: bool = False
    updated_at: Optional[float] = None


@dataclass
class BalanceRow:
    """Ledger row with its cumulative balance after the row is applied."""

    txn_id: str
    txn_date: date
    kind: str
    amount: Decimal
    description: Optional[str]
    balance: Optional[Decimal]
    parent_id: Optional[str] = None
    is_virtual: bool = False
    created_at: Optional[datetime] = None


@dataclass
class BalancePage:
    """One page of a ledger with running balances."""

    account_id: str
    rows: list[BalanceRow]
    total: int
    page: int
    page_size: Optional[int]
    opening_balance: Decimal
    compute_path: Optional[str] = None


@dataclass(frozen=True)
class AccountSummary:
    """Income/expense totals of an account's active ledger."""

    account_id: str
    transaction_count: int
    total_income: Decimal
    total_expense: Decimal

    def closing_balance(self, opening_balance: Decimal) -> Decimal:
        return opening_balance + self.total_income - self.total_expense
