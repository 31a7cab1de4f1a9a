"""Dashboard data source reading members and events through SQLAlchemy."""

from typing import Callable

from sqlalchemy.orm import Session

from clubdash.domain.models import Member, Event
from clubdash.repositories.sqlalchemy.member_repo import (
    SqlAlchemyMemberRepository,
    SqlAlchemyEventRepository,
)


class SqlAlchemyDashboardSource:
    """
    Opens a fresh session per read.

    Dashboard producers run in worker threads, so sessions are never
    shared between concurrent reads.
    """

    def __init__(self, session_factory: Callable[[], Session]):
        self._session_factory = session_factory

    def list_members(self) -> list[Member]:
        with self._session_factory() as db:
            return SqlAlchemyMemberRepository(db).list_all()

    def list_events(self) -> list[Event]:
        with self._session_factory() as db:
            return SqlAlchemyEventRepository(db).list_all()
