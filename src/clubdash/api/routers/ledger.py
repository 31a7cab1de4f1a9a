"""Ledger API router."""

from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, Query

from clubdash.api.deps import get_balance_engine, get_ledger_service
from clubdash.api.schemas import (
    AccountSummaryResponse,
    BalanceComputeRequest,
    BalanceComputeResponse,
    BalancePageResponse,
    TransactionCreateRequest,
    TransactionResponse,
)
from clubdash.domain.models import ComputePath, LedgerEntry
from clubdash.services import (
    LedgerService,
    RunningBalanceEngine,
    TransactionCreate,
    TransactionPart,
)

router = APIRouter(prefix="/ledger", tags=["ledger"])


@router.post("/transactions", response_model=TransactionResponse, status_code=201)
def record_transaction(
    data: TransactionCreateRequest,
    service: LedgerService = Depends(get_ledger_service),
):
    """Record an income or expense, optionally split into parts."""
    transaction = service.record_transaction(
        TransactionCreate(
            account_id=data.account_id,
            kind=data.kind,
            amount=data.amount,
            txn_date=data.txn_date,
            description=data.description,
            parts=[TransactionPart(amount=p.amount, description=p.description) for p in data.parts],
        )
    )
    return TransactionResponse.model_validate(transaction)


@router.get("/transactions/{txn_id}", response_model=TransactionResponse)
def get_transaction(txn_id: str, service: LedgerService = Depends(get_ledger_service)):
    return TransactionResponse.model_validate(service.get_transaction(txn_id))


@router.delete("/transactions/{txn_id}", status_code=204)
def delete_transaction(txn_id: str, service: LedgerService = Depends(get_ledger_service)):
    """Soft delete a transaction and its parts (idempotent)."""
    service.soft_delete_transaction(txn_id)


@router.get("/{account_id}/transactions", response_model=BalancePageResponse)
def list_transactions(
    account_id: str,
    page: int = Query(1, ge=1),
    page_size: Optional[int] = Query(None, ge=1, le=500),
    opening_balance: Decimal = Query(Decimal("0")),
    service: LedgerService = Depends(get_ledger_service),
):
    """One page of the ledger, newest first, with running balances."""
    result = service.running_balances(
        account_id,
        opening_balance=opening_balance,
        page=page,
        page_size=page_size,
    )
    return BalancePageResponse.model_validate(result)


@router.get("/{account_id}/summary", response_model=AccountSummaryResponse)
def account_summary(
    account_id: str,
    opening_balance: Decimal = Query(Decimal("0")),
    service: LedgerService = Depends(get_ledger_service),
):
    summary = service.account_summary(account_id)
    return AccountSummaryResponse(
        account_id=summary.account_id,
        transaction_count=summary.transaction_count,
        total_income=summary.total_income,
        total_expense=summary.total_expense,
        opening_balance=opening_balance,
        closing_balance=summary.closing_balance(opening_balance),
    )


@router.post("/balances/compute", response_model=BalanceComputeResponse)
def compute_balances(
    data: BalanceComputeRequest,
    engine: RunningBalanceEngine = Depends(get_balance_engine),
):
    """
    Compute running balances for an ad-hoc ledger (newest entry first).

    With a cache_key the shared engine cache is consulted and updated.
    """
    entries = [
        LedgerEntry(
            entry_id=e.entry_id,
            kind=e.kind,
            amount=e.amount,
            is_virtual=e.is_virtual,
            parent_id=e.parent_id,
        )
        for e in data.entries
    ]
    balances = engine.compute(entries, data.opening_balance, cache_key=data.cache_key)
    if data.cache_key is None:
        path = ComputePath.DIRECT
    else:
        path = engine.last_path(data.cache_key)
    return BalanceComputeResponse(balances=dict(balances), compute_path=path.value)
