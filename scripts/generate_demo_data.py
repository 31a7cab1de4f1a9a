#!/usr/bin/env python3
"""
Generate demo data for the dashboard.
Creates members with birthdays and tags, a few events around today, and
three months of income/expense transactions on one bank account.
"""

import random
import sys
import uuid
from datetime import date, datetime, timedelta
from decimal import Decimal
from pathlib import Path

# Add src/ to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root / "src"))

from clubdash.app_context import get_app_context
from clubdash.domain.models import Event, EventStatus, Member, MemberStatus, TransactionKind
from clubdash.repositories.sqlalchemy import (
    SqlAlchemyEventRepository,
    SqlAlchemyMemberRepository,
    init_db,
    session_scope,
)
from clubdash.services import TransactionCreate, TransactionPart

FIRST_NAMES = ["Aisha", "Ben", "Chen", "Devi", "Farid", "Grace", "Hui Min", "Imran", "Jia", "Kumar"]
LAST_NAMES = ["Tan", "Lim", "Rahman", "Wong", "Singh", "Lee", "Ng", "Abdullah"]
INDUSTRIES = ["Finance", "Technology", "Education", "Healthcare", "Retail", "Legal", "Property"]
INTERESTS = ["Golf", "Networking", "Charity", "Hiking", "Books", "Wine", "Badminton"]
STATUSES = [MemberStatus.ACTIVE] * 8 + [MemberStatus.INACTIVE, MemberStatus.PENDING]


def generate_members(db, count: int = 40) -> None:
    repo = SqlAlchemyMemberRepository(db)
    today = date.today()
    for i in range(count):
        birth = date(random.randint(1960, 2000), random.randint(1, 12), random.randint(1, 28))
        repo.create(Member(
            member_id=str(uuid.uuid4()),
            name=f"{random.choice(FIRST_NAMES)} {random.choice(LAST_NAMES)} {i}",
            status=random.choice(STATUSES),
            category=random.choice(["Ordinary", "Corporate", "Honorary"]),
            level=random.choice(["Silver", "Gold", "Platinum"]),
            birth_date=birth,
            industries=random.sample(INDUSTRIES, k=random.randint(0, 2)),
            interests=random.sample(INTERESTS, k=random.randint(0, 3)),
            created_at=datetime.combine(today - timedelta(days=random.randint(0, 365)), datetime.min.time()),
        ))
    print(f"✓ {count} members created")


def generate_events(db) -> None:
    repo = SqlAlchemyEventRepository(db)
    now = datetime.now().replace(minute=0, second=0, microsecond=0)
    for offset in (-60, -21, -3, 2, 10, 45):
        repo.create(Event(
            event_id=str(uuid.uuid4()),
            name=f"Club night {(now + timedelta(days=offset)):%d %b}",
            start_date=now + timedelta(days=offset),
            status=EventStatus.PUBLISHED,
        ))
    print("✓ 6 events created")


def generate_transactions(db, account_id: str = "main-account") -> None:
    ledger = get_app_context().ledger(db)
    start = date.today() - timedelta(days=90)
    count = 0
    for day in range(0, 91, 3):
        txn_date = start + timedelta(days=day)
        if random.random() < 0.4:
            amount = Decimal(random.randint(50, 400) * 10)
            parts = []
            if random.random() < 0.3:
                half = (amount / 2).quantize(Decimal("0.01"))
                parts = [
                    TransactionPart(amount=half, description="Membership fees"),
                    TransactionPart(amount=amount - half, description="Event tickets"),
                ]
            ledger.record_transaction(TransactionCreate(
                account_id=account_id,
                kind=TransactionKind.INCOME,
                amount=amount,
                txn_date=txn_date,
                description="Collections",
                parts=parts,
            ))
        else:
            ledger.record_transaction(TransactionCreate(
                account_id=account_id,
                kind=TransactionKind.EXPENSE,
                amount=Decimal(random.randint(10, 150) * 10),
                txn_date=txn_date,
                description=random.choice(["Venue", "Catering", "Printing", "Bank charges"]),
            ))
        count += 1
    print(f"✓ {count} transactions recorded on {account_id}")


def main() -> None:
    random.seed(7)
    init_db()
    with session_scope() as db:
        generate_members(db)
        generate_events(db)
        generate_transactions(db)


if __name__ == "__main__":
    main()
