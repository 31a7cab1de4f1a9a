"""Member and event repository protocols."""

from typing import Protocol, Optional

from clubdash.domain.models import Member, Event, MemberStatus, EventStatus


class MemberRepository(Protocol):
    """Interface for member data access."""

    def create(self, member: Member) -> Member:
        """Persist a new member."""
        ...

    def get_by_id(self, member_id: str) -> Optional[Member]:
        """Retrieve member by ID."""
        ...

    def list_all(self, status: Optional[MemberStatus] = None) -> list[Member]:
        """List members, optionally restricted to one status."""
        ...


class EventRepository(Protocol):
    """Interface for event data access."""

    def create(self, event: Event) -> Event:
        """Persist a new event."""
        ...

    def list_all(self, status: Optional[EventStatus] = None) -> list[Event]:
        """List events ordered by start date."""
        ...
