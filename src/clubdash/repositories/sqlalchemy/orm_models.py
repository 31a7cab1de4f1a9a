"""SQLAlchemy ORM model definitions."""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    Column,
    String,
    Date,
    DateTime,
    Boolean,
    Text,
    JSON,
    ForeignKey,
    Numeric,
    Enum as SqlEnum,
)

from clubdash.repositories.sqlalchemy.database import Base
from clubdash.domain.models.enums import MemberStatus, EventStatus, TransactionKind


class MemberORM(Base):
    """SQLAlchemy model for Member."""

    __tablename__ = "members"

    member_id = Column(String(36), primary_key=True)
    name = Column(String(255), nullable=False)
    status = Column(SqlEnum(MemberStatus), nullable=False, default=MemberStatus.ACTIVE)
    category = Column(String(50), nullable=True)
    level = Column(String(50), nullable=True)
    birth_date = Column(Date, nullable=True)
    industries = Column(JSON, nullable=False, default=list)
    interests = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime, nullable=True, default=datetime.utcnow)


class EventORM(Base):
    """SQLAlchemy model for Event."""

    __tablename__ = "events"

    event_id = Column(String(36), primary_key=True)
    name = Column(String(255), nullable=False)
    start_date = Column(DateTime, nullable=False)
    status = Column(SqlEnum(EventStatus), nullable=False, default=EventStatus.PUBLISHED)


class FinancialTransactionORM(Base):
    """SQLAlchemy model for FinancialTransaction (bank ledger row)."""

    __tablename__ = "financial_transactions"

    txn_id = Column(String(36), primary_key=True)
    account_id = Column(String(36), nullable=False, index=True)
    txn_date = Column(Date, nullable=False)
    kind = Column(SqlEnum(TransactionKind), nullable=False)
    amount = Column(Numeric(precision=18, scale=2), nullable=False, default=Decimal("0"))
    description = Column(Text, nullable=True)
    parent_id = Column(String(36), ForeignKey("financial_transactions.txn_id"), nullable=True)
    is_virtual = Column(Boolean, default=False)
    is_deleted = Column(Boolean, default=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
