"""Pydantic schemas for ledger endpoints."""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from clubdash.domain.models import TransactionKind


class TransactionPartRequest(BaseModel):
    amount: Decimal = Field(..., gt=0)
    description: Optional[str] = Field(default=None, max_length=500)


class TransactionCreateRequest(BaseModel):
    """Request schema for recording a transaction."""

    account_id: str = Field(..., min_length=1, description="Bank account ID")
    kind: TransactionKind = Field(..., description="income or expense")
    amount: Decimal = Field(..., gt=0, description="Unsigned amount")
    txn_date: Optional[date] = Field(default=None, description="Defaults to today")
    description: Optional[str] = Field(default=None, max_length=500)
    parts: list[TransactionPartRequest] = Field(
        default_factory=list,
        description="Optional split; parts must add up to amount",
    )


class TransactionResponse(BaseModel):
    """Response schema for a single transaction."""

    model_config = {"from_attributes": True}

    txn_id: str
    account_id: str
    txn_date: date
    kind: TransactionKind
    amount: Decimal
    description: Optional[str] = None
    parent_id: Optional[str] = None
    is_virtual: bool
    is_deleted: bool
    created_at: Optional[datetime] = None


class BalanceRowResponse(BaseModel):
    model_config = {"from_attributes": True}

    txn_id: str
    txn_date: date
    kind: TransactionKind
    amount: Decimal
    description: Optional[str] = None
    balance: Optional[Decimal] = None
    parent_id: Optional[str] = None
    is_virtual: bool = False


class BalancePageResponse(BaseModel):
    """One page of an account ledger with running balances."""

    model_config = {"from_attributes": True}

    account_id: str
    rows: list[BalanceRowResponse]
    total: int
    page: int
    page_size: Optional[int] = None
    opening_balance: Decimal
    compute_path: Optional[str] = None


class AccountSummaryResponse(BaseModel):
    account_id: str
    transaction_count: int
    total_income: Decimal
    total_expense: Decimal
    opening_balance: Decimal
    closing_balance: Decimal


class LedgerEntryRequest(BaseModel):
    """One entry of an ad-hoc ledger, newest first in its list."""

    entry_id: str = Field(..., min_length=1)
    kind: TransactionKind
    amount: Decimal
    is_virtual: bool = False
    parent_id: Optional[str] = None


class BalanceComputeRequest(BaseModel):
    entries: list[LedgerEntryRequest]
    opening_balance: Decimal = Decimal("0")
    cache_key: Optional[str] = Field(
        default=None,
        description="Reuse and update the cached result stored under this key",
    )


class BalanceComputeResponse(BaseModel):
    balances: dict[str, Decimal]
    compute_path: str
