"""Enumerations for domain models."""

from enum import Enum


class TransactionKind(str, Enum):
    """Direction of a ledger movement."""

    INCOME = "income"
    EXPENSE = "expense"


class LoadPriority(str, Enum):
    """
    Scheduling tiers for dashboard reads.

    Declaration order is importance order; the delay for each tier comes
    from the loader's tier table (see DEFAULT_TIER_DELAYS).
    """

    CRITICAL = "CRITICAL"
    HIGH = "HIGH"
    NORMAL = "NORMAL"
    LOW = "LOW"

    @property
    def rank(self) -> int:
        return list(LoadPriority).index(self)


# Seconds a request of each tier waits before its producer is called
DEFAULT_TIER_DELAYS: dict[LoadPriority, float] = {
    LoadPriority.CRITICAL: 0.0,
    LoadPriority.HIGH: 0.5,
    LoadPriority.NORMAL: 1.5,
    LoadPriority.LOW: 3.0,
}


class LoadStatus(str, Enum):
    """Lifecycle of a tracked dataset."""

    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    ERRORED = "errored"

    @property
    def is_terminal(self) -> bool:
        return self in (LoadStatus.LOADED, LoadStatus.ERRORED)


class ComputePath(str, Enum):
    """How a running-balance result was produced."""

    DIRECT = "direct"  # no cache key
    UNCHANGED = "unchanged"
    EXTENDED = "extended"
    FULL = "full"


class MemberStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"
    PENDING = "pending"


class EventStatus(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    CANCELLED = "cancelled"
    COMPLETED = "completed"
