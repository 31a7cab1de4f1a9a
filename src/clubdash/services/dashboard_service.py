"""Dashboard datasets loaded through the priority loader."""

import asyncio
import logging
from collections import Counter
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Awaitable, Callable, Iterable, Optional, Protocol

from clubdash.core.exceptions import NotFoundError, ValidationError
from clubdash.core.timezone import now_local
from clubdash.domain.models import Event, EventStatus, LoadPriority, Member, MemberStatus
from clubdash.domain.views import BirthdayView, DistributionItem, LoadState, MemberStats
from clubdash.services.priority_loader import LoadRequest, PriorityLoader

logger = logging.getLogger(__name__)

TOP_DISTRIBUTION_ITEMS = 10


class DashboardDataSource(Protocol):
    """Blocking reads the dashboard aggregates from."""

    def list_members(self) -> list[Member]:
        ...

    def list_events(self) -> list[Event]:
        ...


@dataclass(frozen=True)
class DatasetSpec:
    """Where a dashboard dataset is cached and how urgently it loads."""

    name: str
    key: str
    priority: LoadPriority


# =============================================================================
# AGGREGATIONS
# =============================================================================


def compute_member_stats(members: Iterable[Member], today: date) -> MemberStats:
    """Count members by status, category and level."""
    stats = MemberStats()
    by_category: Counter = Counter()
    by_level: Counter = Counter()
    for member in members:
        stats.total += 1
        if member.status == MemberStatus.ACTIVE:
            stats.active += 1
        elif member.status == MemberStatus.INACTIVE:
            stats.inactive += 1
        elif member.status == MemberStatus.SUSPENDED:
            stats.suspended += 1
        elif member.status == MemberStatus.PENDING:
            stats.pending += 1
        if member.category:
            by_category[member.category] += 1
        if member.level:
            by_level[member.level] += 1
        created = member.created_at
        if created and (created.year, created.month) == (today.year, today.month):
            stats.new_this_month += 1
    stats.by_category = dict(by_category)
    stats.by_level = dict(by_level)
    return stats


def _birthday_in(birth_date: date, year: int) -> date:
    try:
        return birth_date.replace(year=year)
    except ValueError:
        # Feb 29 outside a leap year
        return date(year, 2, 28)


def next_birthday(birth_date: date, today: date) -> date:
    """Return the next occurrence of a birthday on or after today."""
    candidate = _birthday_in(birth_date, today.year)
    if candidate < today:
        candidate = _birthday_in(birth_date, today.year + 1)
    return candidate


def upcoming_birthdays(members: Iterable[Member], today: date, days: int) -> list[BirthdayView]:
    """Active members whose birthday falls within the next `days` days, soonest first."""
    result = []
    for member in members:
        if member.status != MemberStatus.ACTIVE or member.birth_date is None:
            continue
        days_until = (next_birthday(member.birth_date, today) - today).days
        if days_until <= days:
            result.append(
                BirthdayView(
                    member_id=member.member_id,
                    name=member.name,
                    birth_date=member.birth_date,
                    days_until=days_until,
                )
            )
    return sorted(result, key=lambda b: (b.days_until, b.name))


def birthdays_in_month(members: Iterable[Member], today: date, month: int) -> list[BirthdayView]:
    """Active members born in `month`, ordered by day of month."""
    if not 1 <= month <= 12:
        raise ValidationError(f"Month must be between 1 and 12, got {month}")
    result = [
        BirthdayView(
            member_id=member.member_id,
            name=member.name,
            birth_date=member.birth_date,
            days_until=(next_birthday(member.birth_date, today) - today).days,
        )
        for member in members
        if member.status == MemberStatus.ACTIVE
        and member.birth_date is not None
        and member.birth_date.month == month
    ]
    return sorted(result, key=lambda b: (b.birth_date.day, b.name))


def distribution(
    tag_lists: Iterable[list[str]],
    limit: int = TOP_DISTRIBUTION_ITEMS,
) -> list[DistributionItem]:
    """
    Count how many members carry each tag.

    Percentages are relative to members with at least one tag; only the
    `limit` most common tags are returned.
    """
    counts: Counter = Counter()
    tagged = 0
    for tags in tag_lists:
        if not tags:
            continue
        tagged += 1
        counts.update(set(tags))
    ranked = sorted(counts.items(), key=lambda item: (-item[1], item[0]))[:limit]
    return [
        DistributionItem(label=label, count=count, percentage=round(count / tagged * 100, 2))
        for label, count in ranked
    ]


# =============================================================================
# SERVICE
# =============================================================================


class DashboardService:
    """
    Builds the dashboard datasets and loads them by priority.

    Headline stats load first; member lists and upcoming events follow,
    then birthdays and distributions, and past events last.
    """

    DATASETS: dict[str, DatasetSpec] = {
        spec.name: spec
        for spec in (
            DatasetSpec("stats", "stats:members", LoadPriority.CRITICAL),
            DatasetSpec("members", "members:full", LoadPriority.HIGH),
            DatasetSpec("upcoming_events", "events:upcoming", LoadPriority.HIGH),
            DatasetSpec("birthdays", "birthdays:upcoming", LoadPriority.NORMAL),
            DatasetSpec("industries", "industries:all", LoadPriority.NORMAL),
            DatasetSpec("interests", "interests:all", LoadPriority.NORMAL),
            DatasetSpec("past_events", "events:past", LoadPriority.LOW),
        )
    }

    def __init__(
        self,
        loader: PriorityLoader,
        source: DashboardDataSource,
        birthday_window_days: int = 30,
        clock: Callable[[], datetime] = now_local,
    ):
        self._loader = loader
        self._source = source
        self._birthday_window_days = birthday_window_days
        self._clock = clock

    def key_for(self, name: str, birthday_month: Optional[int] = None) -> str:
        spec = self._spec(name)
        if name == "birthdays":
            if birthday_month is not None:
                if not 1 <= birthday_month <= 12:
                    raise ValidationError(f"Month must be between 1 and 12, got {birthday_month}")
                return f"birthdays:month:{birthday_month}"
            return f"birthdays:upcoming:{self._birthday_window_days}"
        return spec.key

    def load(self, name: str, birthday_month: Optional[int] = None) -> LoadRequest:
        """Schedule one dataset at its configured priority."""
        spec = self._spec(name)
        return self._loader.schedule(
            spec.priority,
            self.key_for(name, birthday_month),
            self._producer(name, birthday_month),
        )

    def load_all(self, birthday_month: Optional[int] = None) -> dict[str, LoadRequest]:
        """Schedule every dataset; critical ones are requested first."""
        ordered = sorted(self.DATASETS.values(), key=lambda spec: spec.priority.rank)
        return {spec.name: self.load(spec.name, birthday_month) for spec in ordered}

    def refresh(self, name: str, birthday_month: Optional[int] = None) -> LoadRequest:
        """Reload one dataset now, bypassing cache and priority."""
        return self._loader.refresh(
            self.key_for(name, birthday_month),
            self._producer(name, birthday_month),
        )

    def snapshot(self, birthday_month: Optional[int] = None) -> dict[str, LoadState]:
        """Latest published state of every dataset."""
        return {
            name: self._loader.state(self.key_for(name, birthday_month))
            for name in self.DATASETS
        }

    def invalidate_members(self) -> int:
        """Drop every cached dataset derived from member records."""
        return self._loader.cache.invalidate_matching(r"^(stats|members|birthdays|industries|interests):")

    def invalidate_events(self) -> int:
        """Drop cached event lists."""
        return self._loader.cache.invalidate_matching(r"^events:")

    def _spec(self, name: str) -> DatasetSpec:
        spec = self.DATASETS.get(name)
        if spec is None:
            raise NotFoundError("Dataset", name)
        return spec

    def _producer(self, name: str, birthday_month: Optional[int]) -> Callable[[], Awaitable[Any]]:
        builders: dict[str, Callable[[], Any]] = {
            "stats": lambda: compute_member_stats(self._source.list_members(), self._today()),
            "members": self._source.list_members,
            "upcoming_events": lambda: self._events(upcoming=True),
            "birthdays": lambda: self._birthdays(birthday_month),
            "industries": lambda: distribution(m.industries for m in self._active_members()),
            "interests": lambda: distribution(m.interests for m in self._active_members()),
            "past_events": lambda: self._events(upcoming=False),
        }
        build = builders[name]

        async def produce() -> Any:
            return await asyncio.to_thread(build)

        return produce

    def _today(self) -> date:
        return self._clock().date()

    def _active_members(self) -> list[Member]:
        return [m for m in self._source.list_members() if m.status == MemberStatus.ACTIVE]

    def _birthdays(self, month: Optional[int]) -> list[BirthdayView]:
        members = self._source.list_members()
        if month is not None:
            return birthdays_in_month(members, self._today(), month)
        return upcoming_birthdays(members, self._today(), self._birthday_window_days)

    def _events(self, upcoming: bool) -> list[Event]:
        now = self._clock().replace(tzinfo=None)
        published = [e for e in self._source.list_events() if e.status == EventStatus.PUBLISHED]
        if upcoming:
            return [e for e in published if e.start_date >= now]
        return sorted((e for e in published if e.start_date < now), key=lambda e: e.start_date, reverse=True)
