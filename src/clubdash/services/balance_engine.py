"""Incremental running-balance engine for reverse-chronological ledgers."""

import logging
import threading
from decimal import Decimal
from types import MappingProxyType
from typing import Iterable, Mapping, Optional, Sequence

from clubdash.core.exceptions import InvalidLedgerEntryError
from clubdash.domain.models import BalanceCacheState, ComputePath, LedgerEntry, to_decimal
from clubdash.domain.models.ledger import Number

logger = logging.getLogger(__name__)

EMPTY_BALANCES: Mapping[str, Decimal] = MappingProxyType({})


def validate_entries(entries: Sequence[LedgerEntry]) -> None:
    """
    Reject entries that cannot be accumulated safely.

    Amounts must be finite and non-negative, ids unique, and every
    parent_id must name another entry of the same list.
    """
    seen: set[str] = set()
    for entry in entries:
        if entry.entry_id in seen:
            raise InvalidLedgerEntryError(entry.entry_id, "duplicate entry id")
        seen.add(entry.entry_id)
        if not entry.amount.is_finite():
            raise InvalidLedgerEntryError(entry.entry_id, f"amount {entry.amount} is not finite")
        if entry.amount < 0:
            raise InvalidLedgerEntryError(
                entry.entry_id,
                f"amount {entry.amount} is negative; use kind to express direction",
            )
    for entry in entries:
        if entry.parent_id and entry.parent_id not in seen:
            raise InvalidLedgerEntryError(
                entry.entry_id,
                f"parent {entry.parent_id} is not part of this ledger",
            )


def accumulate(
    entries: Sequence[LedgerEntry],
    opening_balance: Decimal,
    balances: Optional[dict[str, Decimal]] = None,
) -> dict[str, Decimal]:
    """
    Record the running total after each entry, oldest (last) to newest (first).

    Balances are written into `balances` when given.
    """
    result = balances if balances is not None else {}
    running = opening_balance
    for entry in reversed(entries):
        running += entry.signed_amount
        result[entry.entry_id] = running
    return result


def signature_of(entries: Iterable[LedgerEntry]) -> tuple[tuple[str, Decimal], ...]:
    return tuple((entry.entry_id, entry.signed_amount) for entry in entries)


class RunningBalanceEngine:
    """
    Computes per-entry cumulative balances with a per-key result cache.

    Ledgers are ordered newest first. With a cache key, a call is served
    from the stored result when nothing changed, extended when only newer
    entries were added in front of the stored sequence, and recomputed in
    full otherwise. Every path returns the same balances a full
    recomputation would.
    """

    def __init__(self) -> None:
        self._cache: dict[str, BalanceCacheState] = {}
        self._last_path: dict[str, ComputePath] = {}
        self._lock = threading.Lock()

    def compute(
        self,
        entries: Sequence[LedgerEntry],
        opening_balance: Number,
        cache_key: Optional[str] = None,
    ) -> Mapping[str, Decimal]:
        """
        Return a read-only mapping of entry id to balance after that entry.

        Virtual and child entries are validated but excluded from the
        result. Raises InvalidLedgerEntryError on malformed input.
        """
        validate_entries(entries)
        opening = to_decimal(opening_balance)
        if not opening.is_finite():
            raise InvalidLedgerEntryError("<opening balance>", f"{opening_balance} is not finite")

        ledger = [entry for entry in entries if not entry.is_part]
        if not ledger:
            if cache_key is not None:
                self._record_path(cache_key, ComputePath.FULL)
            return EMPTY_BALANCES

        if cache_key is None:
            return MappingProxyType(accumulate(ledger, opening))

        signatures = signature_of(ledger)
        with self._lock:
            cached = self._cache.get(cache_key)
            if cached is not None and cached.opening_balance == opening:
                if cached.signatures == signatures:
                    logger.debug("Using cached balances: %s", cache_key)
                    self._last_path[cache_key] = ComputePath.UNCHANGED
                    return cached.balances

                added = self._leading_additions(cached, signatures)
                if added:
                    logger.debug("Incremental balances for %s (%d new entries)", cache_key, added)
                    return self._extend(cache_key, cached, ledger, signatures, added)

            logger.debug("Full balance calculation: %s", cache_key)
            return self._store(cache_key, ledger, opening, signatures, ComputePath.FULL)

    def last_path(self, cache_key: str) -> Optional[ComputePath]:
        """Return how the latest call for cache_key was served."""
        with self._lock:
            return self._last_path.get(cache_key)

    def clear_cache(self, cache_key: str) -> None:
        with self._lock:
            self._cache.pop(cache_key, None)
            self._last_path.pop(cache_key, None)
        logger.info("Cleared balance cache: %s", cache_key)

    def clear_all(self) -> None:
        with self._lock:
            self._cache.clear()
            self._last_path.clear()
        logger.info("Cleared all balance caches")

    def cache_stats(self) -> dict:
        """Return the cached keys with their entry and balance counts."""
        with self._lock:
            entries = [
                {
                    "key": key,
                    "entry_count": len(state.entry_ids),
                    "balance_count": len(state.balances),
                }
                for key, state in sorted(self._cache.items())
            ]
        return {"total": len(entries), "entries": entries}

    @staticmethod
    def _leading_additions(
        cached: BalanceCacheState,
        signatures: tuple[tuple[str, Decimal], ...],
    ) -> int:
        """
        Return how many newer entries precede an unchanged cached sequence.

        Zero means the new ledger is not such an extension. Only additions
        at the newest end keep every older balance valid; anything else
        (older entries, removals, edits, reordering) needs a full pass.
        """
        added = len(signatures) - len(cached.signatures)
        if added <= 0 or signatures[added:] != cached.signatures:
            return 0
        return added

    def _extend(
        self,
        cache_key: str,
        cached: BalanceCacheState,
        ledger: list[LedgerEntry],
        signatures: tuple[tuple[str, Decimal], ...],
        added: int,
    ) -> Mapping[str, Decimal]:
        boundary_id = cached.entry_ids[0]
        balances = dict(cached.balances)
        accumulate(ledger[:added], balances[boundary_id], balances)
        state = BalanceCacheState(
            balances=MappingProxyType(balances),
            last_computed_position=len(ledger) - 1,
            opening_balance=cached.opening_balance,
            entry_ids=tuple(entry.entry_id for entry in ledger),
            signatures=signatures,
        )
        self._cache[cache_key] = state
        self._last_path[cache_key] = ComputePath.EXTENDED
        return state.balances

    def _store(
        self,
        cache_key: str,
        ledger: list[LedgerEntry],
        opening: Decimal,
        signatures: tuple[tuple[str, Decimal], ...],
        path: ComputePath,
    ) -> Mapping[str, Decimal]:
        state = BalanceCacheState(
            balances=MappingProxyType(accumulate(ledger, opening)),
            last_computed_position=len(ledger) - 1,
            opening_balance=opening,
            entry_ids=tuple(entry.entry_id for entry in ledger),
            signatures=signatures,
        )
        self._cache[cache_key] = state
        self._last_path[cache_key] = path
        return state.balances

    def _record_path(self, cache_key: str, path: ComputePath) -> None:
        with self._lock:
            self._cache.pop(cache_key, None)
            self._last_path[cache_key] = path
