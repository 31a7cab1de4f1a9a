"""Member and Event domain models."""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from clubdash.core.timezone import parse_date
from clubdash.domain.models.enums import MemberStatus, EventStatus


@dataclass
class Member:
    """Club member as needed by the dashboard aggregations."""

    member_id: str
    name: str
    status: MemberStatus = MemberStatus.ACTIVE
    category: Optional[str] = None
    level: Optional[str] = None
    birth_date: Optional[date] = None
    industries: list[str] = field(default_factory=list)
    interests: list[str] = field(default_factory=list)
    created_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        if isinstance(self.status, str):
            self.status = MemberStatus(self.status)
        if isinstance(self.birth_date, str):
            self.birth_date = parse_date(self.birth_date)


@dataclass
class Event:
    """Club event."""

    event_id: str
    name: str
    start_date: datetime
    status: EventStatus = EventStatus.PUBLISHED

    def __post_init__(self) -> None:
        if isinstance(self.status, str):
            self.status = EventStatus(self.status)
