"""Service layer - caching, loading and ledger orchestration."""

from clubdash.services.ttl_cache import TTLCacheStore, DEFAULT_NAMESPACE_TTLS
from clubdash.services.priority_loader import PriorityLoader, LoadRequest, build_tier_delays
from clubdash.services.balance_engine import RunningBalanceEngine
from clubdash.services.dashboard_service import DashboardService, DashboardDataSource
from clubdash.services.ledger_service import (
    LedgerService,
    TransactionCreate,
    TransactionPart,
)

__all__ = [
    "TTLCacheStore",
    "DEFAULT_NAMESPACE_TTLS",
    "PriorityLoader",
    "LoadRequest",
    "build_tier_delays",
    "RunningBalanceEngine",
    "DashboardService",
    "DashboardDataSource",
    "LedgerService",
    "TransactionCreate",
    "TransactionPart",
]
