"""Pydantic schemas for API request/response."""

from clubdash.api.schemas.dashboard import LoadStateResponse, DashboardResponse
from clubdash.api.schemas.ledger import (
    TransactionPartRequest,
    TransactionCreateRequest,
    TransactionResponse,
    BalanceRowResponse,
    BalancePageResponse,
    AccountSummaryResponse,
    LedgerEntryRequest,
    BalanceComputeRequest,
    BalanceComputeResponse,
)
from clubdash.api.schemas.cache import (
    CacheKeyStatResponse,
    BalanceCacheStatResponse,
    CacheStatsResponse,
    InvalidateResponse,
)

__all__ = [
    "LoadStateResponse",
    "DashboardResponse",
    "TransactionPartRequest",
    "TransactionCreateRequest",
    "TransactionResponse",
    "BalanceRowResponse",
    "BalancePageResponse",
    "AccountSummaryResponse",
    "LedgerEntryRequest",
    "BalanceComputeRequest",
    "BalanceComputeResponse",
    "CacheKeyStatResponse",
    "BalanceCacheStatResponse",
    "CacheStatsResponse",
    "InvalidateResponse",
]
