"""Cache models for the TTL store and the running-balance engine."""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Generic, Mapping, TypeVar

V = TypeVar("V")


@dataclass(frozen=True)
class CacheEntry(Generic[V]):
    """A cached value and the clock reading at which it was stored."""

    value: V
    inserted_at: float
    size_bytes: int = 0

    def age(self, now: float) -> float:
        return now - self.inserted_at


@dataclass(frozen=True)
class CacheKeyStat:
    key: str
    age_seconds: float
    size_bytes: int


@dataclass(frozen=True)
class CacheStats:
    """Point-in-time view of a TTL store."""

    total: int
    hits: int
    misses: int
    entries: tuple[CacheKeyStat, ...]
    total_size_bytes: int = 0


@dataclass(frozen=True)
class BalanceCacheState:
    """
    Last computation stored for one balance cache key.

    IMPORTANT: `signatures` must mirror exactly the filtered entry list
    that produced `balances`; the engine never edits a state in place.
    """

    balances: Mapping[str, Decimal]
    last_computed_position: int
    opening_balance: Decimal
    entry_ids: tuple[str, ...]
    signatures: tuple[tuple[str, Decimal], ...]


class _Miss:
    """Sentinel type returned by cache reads that find nothing fresh."""

    _instance: Any = None

    def __new__(cls) -> "_Miss":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "MISS"


MISS = _Miss()
