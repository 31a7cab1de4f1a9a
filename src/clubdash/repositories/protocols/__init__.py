"""Repository protocol definitions (interfaces)."""

from clubdash.repositories.protocols.member_repo import MemberRepository, EventRepository
from clubdash.repositories.protocols.transaction_repo import TransactionRepository

__all__ = [
    "MemberRepository",
    "EventRepository",
    "TransactionRepository",
]
