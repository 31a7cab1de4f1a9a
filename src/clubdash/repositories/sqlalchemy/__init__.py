"""SQLAlchemy repository implementations."""

from clubdash.repositories.sqlalchemy.database import (
    get_engine,
    get_session_factory,
    get_db,
    session_scope,
    init_db,
    configure_database,
    reset_database,
    Base,
)
from clubdash.repositories.sqlalchemy.member_repo import (
    SqlAlchemyMemberRepository,
    SqlAlchemyEventRepository,
)
from clubdash.repositories.sqlalchemy.transaction_repo import SqlAlchemyTransactionRepository
from clubdash.repositories.sqlalchemy.dashboard_source import SqlAlchemyDashboardSource

__all__ = [
    "get_engine",
    "get_session_factory",
    "get_db",
    "session_scope",
    "init_db",
    "configure_database",
    "reset_database",
    "Base",
    "SqlAlchemyMemberRepository",
    "SqlAlchemyEventRepository",
    "SqlAlchemyTransactionRepository",
    "SqlAlchemyDashboardSource",
]
