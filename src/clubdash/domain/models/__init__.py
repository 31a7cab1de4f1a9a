"""Domain models package."""

from clubdash.domain.models.enums import (
    TransactionKind,
    LoadPriority,
    LoadStatus,
    ComputePath,
    MemberStatus,
    EventStatus,
    DEFAULT_TIER_DELAYS,
)
from clubdash.domain.models.cache import (
    CacheEntry,
    CacheKeyStat,
    CacheStats,
    BalanceCacheState,
    MISS,
)
from clubdash.domain.models.ledger import LedgerEntry, to_decimal
from clubdash.domain.models.member import Member, Event
from clubdash.domain.models.transaction import FinancialTransaction

__all__ = [
    "TransactionKind",
    "LoadPriority",
    "LoadStatus",
    "ComputePath",
    "MemberStatus",
    "EventStatus",
    "DEFAULT_TIER_DELAYS",
    "CacheEntry",
    "CacheKeyStat",
    "CacheStats",
    "BalanceCacheState",
    "MISS",
    "LedgerEntry",
    "to_decimal",
    "Member",
    "Event",
    "FinancialTransaction",
]
