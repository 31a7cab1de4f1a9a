"""Cache administration router."""

import re

from fastapi import APIRouter, Depends, Query

from clubdash.api.deps import get_balance_engine, get_cache, get_context
from clubdash.api.schemas import (
    BalanceCacheStatResponse,
    CacheKeyStatResponse,
    CacheStatsResponse,
    InvalidateResponse,
)
from clubdash.app_context import AppContext
from clubdash.core.exceptions import ValidationError
from clubdash.services import RunningBalanceEngine, TTLCacheStore

router = APIRouter(prefix="/cache", tags=["cache"])


@router.get("/stats", response_model=CacheStatsResponse)
def cache_stats(
    cache: TTLCacheStore = Depends(get_cache),
    engine: RunningBalanceEngine = Depends(get_balance_engine),
):
    """Entries with their ages and sizes, hit/miss counters and cached ledgers."""
    stats = cache.stats()
    balance_stats = engine.cache_stats()
    return CacheStatsResponse(
        total=stats.total,
        hits=stats.hits,
        misses=stats.misses,
        total_size_bytes=stats.total_size_bytes,
        entries=[
            CacheKeyStatResponse(key=e.key, age_seconds=e.age_seconds, size_bytes=e.size_bytes)
            for e in stats.entries
        ],
        balance_caches=[BalanceCacheStatResponse(**e) for e in balance_stats["entries"]],
    )


@router.delete("", status_code=204)
def clear_session(context: AppContext = Depends(get_context)):
    """Drop every cached dataset and balance (sign-out)."""
    context.reset_session()


@router.delete("/matching", response_model=InvalidateResponse)
def invalidate_matching(
    pattern: str = Query(..., min_length=1, description="Regular expression searched in keys"),
    cache: TTLCacheStore = Depends(get_cache),
):
    try:
        compiled = re.compile(pattern)
    except re.error as exc:
        raise ValidationError(f"Invalid pattern {pattern!r}: {exc}") from None
    return InvalidateResponse(removed=cache.invalidate_matching(compiled))
