"""
Unit tests for RunningBalanceEngine.

Tests cover:
- Oldest-to-newest accumulation with signed amounts
- Exclusion of virtual and child entries
- Input validation
- UNCHANGED / EXTENDED / FULL cache paths
- Equivalence with a naive recomputation over random edit sequences
"""

import random
from decimal import Decimal

import pytest

from clubdash.core.exceptions import InvalidLedgerEntryError
from clubdash.domain.models import ComputePath, LedgerEntry, TransactionKind
from clubdash.services.balance_engine import EMPTY_BALANCES, RunningBalanceEngine

from tests.conftest import expense, income, naive_balances


# =============================================================================
# ACCUMULATION
# =============================================================================


class TestAccumulation:
    """Tests for balance arithmetic without a cache key."""

    def test_balances_accumulate_oldest_first(self, balance_engine: RunningBalanceEngine):
        """
        GIVEN a newest-first ledger [e1, e2, e3] and opening balance 100
        WHEN balances are computed
        THEN e3 (oldest) is applied first and e1 carries the closing balance
        """
        entries = [income("e1", 10), expense("e2", 30), income("e3", 50)]

        balances = balance_engine.compute(entries, Decimal("100"))

        assert balances == {
            "e3": Decimal("150"),
            "e2": Decimal("120"),
            "e1": Decimal("130"),
        }

    def test_virtual_and_child_entries_are_excluded(self, balance_engine: RunningBalanceEngine):
        """
        GIVEN a parent with two split parts and a virtual entry
        WHEN balances are computed
        THEN only real top-level entries have balances and parts add nothing
        """
        entries = [
            income("p", 100),
            income("p-1", 60, parent_id="p", is_virtual=True),
            income("p-2", 40, parent_id="p"),
            expense("v", 999, is_virtual=True),
            expense("e", 25),
        ]

        balances = balance_engine.compute(entries, 0)

        assert balances == {"e": Decimal("-25"), "p": Decimal("75")}

    def test_empty_ledger(self, balance_engine: RunningBalanceEngine):
        assert balance_engine.compute([], 0) == {}
        assert balance_engine.compute([income("v", 5, is_virtual=True)], 0) is EMPTY_BALANCES

    def test_result_is_read_only(self, balance_engine: RunningBalanceEngine):
        balances = balance_engine.compute([income("e1", 1)], 0)

        with pytest.raises(TypeError):
            balances["e1"] = Decimal("0")

    def test_numeric_opening_balance_converted_exactly(self, balance_engine: RunningBalanceEngine):
        balances = balance_engine.compute([income("e1", "0.1"), income("e2", "0.2")], 0.1)

        assert balances["e1"] == Decimal("0.4")

    def test_from_signed_builds_expenses(self, balance_engine: RunningBalanceEngine):
        entries = [LedgerEntry.from_signed("b", -4), LedgerEntry.from_signed("a", 10)]

        assert entries[0].kind == TransactionKind.EXPENSE
        assert balance_engine.compute(entries, 0) == {"a": Decimal("10"), "b": Decimal("6")}


# =============================================================================
# VALIDATION
# =============================================================================


class TestValidation:
    """Tests for malformed input."""

    @pytest.mark.parametrize("amount", ["NaN", "Infinity", "-5", "not-a-number"])
    def test_bad_amounts_rejected(self, balance_engine: RunningBalanceEngine, amount: str):
        with pytest.raises(InvalidLedgerEntryError) as exc_info:
            balance_engine.compute([income("ok", 1), income("bad", amount)], 0)

        assert exc_info.value.entry_id == "bad"
        assert exc_info.value.code == "INVALID_LEDGER_ENTRY"

    def test_duplicate_ids_rejected(self, balance_engine: RunningBalanceEngine):
        with pytest.raises(InvalidLedgerEntryError):
            balance_engine.compute([income("e1", 1), expense("e1", 2)], 0)

    def test_unknown_parent_rejected(self, balance_engine: RunningBalanceEngine):
        """
        GIVEN a child entry whose parent is not in the list
        WHEN balances are computed
        THEN InvalidLedgerEntryError names the child
        """
        with pytest.raises(InvalidLedgerEntryError) as exc_info:
            balance_engine.compute([income("c", 5, parent_id="missing")], 0)

        assert exc_info.value.entry_id == "c"

    def test_non_finite_opening_rejected(self, balance_engine: RunningBalanceEngine):
        with pytest.raises(InvalidLedgerEntryError):
            balance_engine.compute([income("e1", 1)], "Infinity")

    def test_invalid_input_leaves_cache_untouched(self, balance_engine: RunningBalanceEngine):
        first = balance_engine.compute([income("e1", 1)], 0, cache_key="k")

        with pytest.raises(InvalidLedgerEntryError):
            balance_engine.compute([income("e2", -1), income("e1", 1)], 0, cache_key="k")

        assert balance_engine.compute([income("e1", 1)], 0, cache_key="k") is first


# =============================================================================
# CACHE PATHS
# =============================================================================


class TestCachePaths:
    """Tests for cache reuse and incremental extension."""

    def test_unchanged_ledger_returns_same_object(self, balance_engine: RunningBalanceEngine):
        """
        GIVEN balances computed for [e1, e2, e3] with opening 100
        WHEN the same ledger and opening are passed again
        THEN the identical mapping object is returned
        """
        entries = [income("e1", 1), income("e2", 2), income("e3", 3)]

        first = balance_engine.compute(entries, 100, cache_key="acc")
        second = balance_engine.compute(list(entries), 100, cache_key="acc")

        assert second is first
        assert first == {"e3": Decimal("103"), "e2": Decimal("105"), "e1": Decimal("106")}
        assert balance_engine.last_path("acc") == ComputePath.UNCHANGED

    def test_newer_entry_extends_cached_result(self, balance_engine: RunningBalanceEngine):
        """
        GIVEN cached balances {e2: 5, e1: 15} for [e1, e2]
        WHEN a newer e0 (+2) is added in front
        THEN the result is {e2: 5, e1: 15, e0: 17} via the EXTENDED path
        """
        first = balance_engine.compute([income("e1", 10), income("e2", 5)], 0, cache_key="acc")
        assert first == {"e2": Decimal("5"), "e1": Decimal("15")}

        second = balance_engine.compute(
            [income("e0", 2), income("e1", 10), income("e2", 5)], 0, cache_key="acc"
        )

        assert second == {"e2": Decimal("5"), "e1": Decimal("15"), "e0": Decimal("17")}
        assert balance_engine.last_path("acc") == ComputePath.EXTENDED
        assert first == {"e2": Decimal("5"), "e1": Decimal("15")}

    def test_older_entry_appended_forces_full(self, balance_engine: RunningBalanceEngine):
        balance_engine.compute([income("e1", 10), income("e2", 5)], 0, cache_key="acc")

        balances = balance_engine.compute(
            [income("e1", 10), income("e2", 5), income("e3", 1)], 0, cache_key="acc"
        )

        assert balances == {"e3": Decimal("1"), "e2": Decimal("6"), "e1": Decimal("16")}
        assert balance_engine.last_path("acc") == ComputePath.FULL

    def test_amount_edit_forces_full(self, balance_engine: RunningBalanceEngine):
        """
        GIVEN cached balances for [e1, e2]
        WHEN e2's amount changes but the ids stay the same
        THEN the balances are recomputed in full
        """
        balance_engine.compute([income("e1", 10), income("e2", 5)], 0, cache_key="acc")

        balances = balance_engine.compute([income("e1", 10), income("e2", 7)], 0, cache_key="acc")

        assert balances == {"e2": Decimal("7"), "e1": Decimal("17")}
        assert balance_engine.last_path("acc") == ComputePath.FULL

    def test_kind_edit_forces_full(self, balance_engine: RunningBalanceEngine):
        balance_engine.compute([income("e1", 10)], 0, cache_key="acc")

        balances = balance_engine.compute([expense("e1", 10)], 0, cache_key="acc")

        assert balances == {"e1": Decimal("-10")}

    def test_opening_change_forces_full(self, balance_engine: RunningBalanceEngine):
        entries = [income("e1", 10)]
        first = balance_engine.compute(entries, 0, cache_key="acc")

        second = balance_engine.compute(entries, 50, cache_key="acc")

        assert second is not first
        assert second == {"e1": Decimal("60")}
        assert balance_engine.last_path("acc") == ComputePath.FULL

    def test_removal_forces_full(self, balance_engine: RunningBalanceEngine):
        balance_engine.compute([income("e0", 1), income("e1", 10), income("e2", 5)], 0, cache_key="acc")

        balances = balance_engine.compute([income("e0", 1), income("e2", 5)], 0, cache_key="acc")

        assert balances == {"e2": Decimal("5"), "e0": Decimal("6")}
        assert balance_engine.last_path("acc") == ComputePath.FULL

    def test_keys_are_isolated(self, balance_engine: RunningBalanceEngine):
        a = balance_engine.compute([income("x", 1)], 0, cache_key="a")
        b = balance_engine.compute([income("x", 1)], 0, cache_key="b")

        assert a is not b
        assert balance_engine.last_path("b") == ComputePath.FULL

    def test_clear_cache_forces_recompute(self, balance_engine: RunningBalanceEngine):
        entries = [income("e1", 1)]
        first = balance_engine.compute(entries, 0, cache_key="acc")

        balance_engine.clear_cache("acc")
        second = balance_engine.compute(entries, 0, cache_key="acc")

        assert second is not first
        assert second == first

    def test_empty_ledger_drops_cached_state(self, balance_engine: RunningBalanceEngine):
        balance_engine.compute([income("e1", 1)], 0, cache_key="acc")

        assert balance_engine.compute([], 0, cache_key="acc") == {}
        assert balance_engine.cache_stats()["total"] == 0
        assert balance_engine.last_path("acc") == ComputePath.FULL

    def test_cache_stats(self, balance_engine: RunningBalanceEngine):
        balance_engine.compute([income("e1", 1), income("p", 1, is_virtual=True)], 0, cache_key="acc")

        stats = balance_engine.cache_stats()

        assert stats == {
            "total": 1,
            "entries": [{"key": "acc", "entry_count": 1, "balance_count": 1}],
        }

    def test_clear_all(self, balance_engine: RunningBalanceEngine):
        balance_engine.compute([income("e1", 1)], 0, cache_key="a")
        balance_engine.compute([income("e1", 1)], 0, cache_key="b")

        balance_engine.clear_all()

        assert balance_engine.cache_stats()["total"] == 0
        assert balance_engine.last_path("a") is None


# =============================================================================
# EQUIVALENCE WITH NAIVE RECOMPUTATION
# =============================================================================


class TestCacheEquivalence:
    """Random edit sequences must match a plain full pass on every call."""

    @staticmethod
    def _random_entry(rng: random.Random, entry_id: str) -> LedgerEntry:
        kind = rng.choice([TransactionKind.INCOME, TransactionKind.EXPENSE])
        amount = Decimal(rng.randint(0, 50000)) / 100
        return LedgerEntry(entry_id=entry_id, kind=kind, amount=amount)

    def _mutate(self, rng: random.Random, entries: list[LedgerEntry], next_id) -> list[LedgerEntry]:
        entries = list(entries)
        op = rng.choice(["prepend", "prepend", "append", "remove", "edit", "swap", "part", "same"])
        if op == "prepend":
            for _ in range(rng.randint(1, 3)):
                entries.insert(0, self._random_entry(rng, next_id()))
        elif op == "append":
            entries.append(self._random_entry(rng, next_id()))
        elif op == "remove" and entries:
            removed = entries.pop(rng.randrange(len(entries)))
            entries = [e for e in entries if e.parent_id != removed.entry_id]
        elif op == "edit" and entries:
            i = rng.randrange(len(entries))
            entries[i] = self._random_entry(rng, entries[i].entry_id)
        elif op == "swap" and len(entries) > 1:
            i, j = rng.sample(range(len(entries)), 2)
            entries[i], entries[j] = entries[j], entries[i]
        elif op == "part":
            parents = [e for e in entries if not e.is_part]
            if parents:
                parent = rng.choice(parents)
                part = LedgerEntry(
                    entry_id=next_id(),
                    kind=parent.kind,
                    amount=parent.amount,
                    is_virtual=True,
                    parent_id=parent.entry_id,
                )
                entries.insert(entries.index(parent) + 1, part)
        return entries

    @pytest.mark.parametrize("seed", range(20))
    def test_random_sequences_match_naive(self, seed: int):
        """
        GIVEN a seeded sequence of prepends, appends, removals, edits,
              reorders and split parts
        WHEN each version is computed through the cached engine
        THEN every result equals a naive full recomputation
        """
        rng = random.Random(seed)
        counter = iter(range(10_000))
        next_id = lambda: f"t{next(counter)}"  # noqa: E731
        engine = RunningBalanceEngine()
        opening = Decimal(rng.randint(-1000, 1000))
        entries = [self._random_entry(rng, next_id()) for _ in range(rng.randint(0, 5))]

        for _ in range(40):
            if rng.random() < 0.1:
                opening = Decimal(rng.randint(-1000, 1000))
            result = engine.compute(entries, opening, cache_key="fuzz")

            assert dict(result) == naive_balances(entries, opening)
            entries = self._mutate(rng, entries, next_id)
