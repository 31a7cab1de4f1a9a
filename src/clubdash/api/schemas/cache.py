"""Pydantic schemas for cache endpoints."""

from pydantic import BaseModel


class CacheKeyStatResponse(BaseModel):
    key: str
    age_seconds: float
    size_bytes: int


class BalanceCacheStatResponse(BaseModel):
    key: str
    entry_count: int
    balance_count: int


class CacheStatsResponse(BaseModel):
    """TTL store entries with sizes and counters plus cached balance ledgers."""

    total: int
    hits: int
    misses: int
    total_size_bytes: int
    entries: list[CacheKeyStatResponse]
    balance_caches: list[BalanceCacheStatResponse]


class InvalidateResponse(BaseModel):
    removed: int
