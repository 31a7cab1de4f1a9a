"""SQLAlchemy implementations of MemberRepository and EventRepository."""

from typing import Optional

from sqlalchemy.orm import Session

from clubdash.domain.models import Member, Event, MemberStatus, EventStatus
from clubdash.repositories.sqlalchemy.orm_models import MemberORM, EventORM


class SqlAlchemyMemberRepository:
    """SQLAlchemy-backed member repository."""

    def __init__(self, db: Session):
        self._db = db

    def create(self, member: Member) -> Member:
        """Persist a new member."""
        orm_member = MemberORM(
            member_id=member.member_id,
            name=member.name,
            status=member.status,
            category=member.category,
            level=member.level,
            birth_date=member.birth_date,
            industries=list(member.industries),
            interests=list(member.interests),
            created_at=member.created_at,
        )
        self._db.add(orm_member)
        self._db.commit()
        self._db.refresh(orm_member)
        return self._to_domain(orm_member)

    def get_by_id(self, member_id: str) -> Optional[Member]:
        """Retrieve member by ID."""
        orm_member = self._db.query(MemberORM).filter(
            MemberORM.member_id == member_id
        ).first()
        return self._to_domain(orm_member) if orm_member else None

    def list_all(self, status: Optional[MemberStatus] = None) -> list[Member]:
        """List members ordered by name."""
        query = self._db.query(MemberORM)
        if status is not None:
            query = query.filter(MemberORM.status == status)
        return [self._to_domain(m) for m in query.order_by(MemberORM.name).all()]

    @staticmethod
    def _to_domain(orm_member: MemberORM) -> Member:
        return Member(
            member_id=orm_member.member_id,
            name=orm_member.name,
            status=orm_member.status,
            category=orm_member.category,
            level=orm_member.level,
            birth_date=orm_member.birth_date,
            industries=list(orm_member.industries or []),
            interests=list(orm_member.interests or []),
            created_at=orm_member.created_at,
        )


class SqlAlchemyEventRepository:
    """SQLAlchemy-backed event repository."""

    def __init__(self, db: Session):
        self._db = db

    def create(self, event: Event) -> Event:
        """Persist a new event."""
        orm_event = EventORM(
            event_id=event.event_id,
            name=event.name,
            start_date=event.start_date,
            status=event.status,
        )
        self._db.add(orm_event)
        self._db.commit()
        self._db.refresh(orm_event)
        return self._to_domain(orm_event)

    def list_all(self, status: Optional[EventStatus] = None) -> list[Event]:
        """List events ordered by start date."""
        query = self._db.query(EventORM)
        if status is not None:
            query = query.filter(EventORM.status == status)
        return [self._to_domain(e) for e in query.order_by(EventORM.start_date).all()]

    @staticmethod
    def _to_domain(orm_event: EventORM) -> Event:
        return Event(
            event_id=orm_event.event_id,
            name=orm_event.name,
            start_date=orm_event.start_date,
            status=orm_event.status,
        )
