"""SQLAlchemy implementation of TransactionRepository."""

from typing import Optional

from sqlalchemy.orm import Session

from clubdash.domain.models import FinancialTransaction
from clubdash.repositories.sqlalchemy.orm_models import FinancialTransactionORM


class SqlAlchemyTransactionRepository:
    """SQLAlchemy-backed financial transaction repository."""

    def __init__(self, db: Session):
        self._db = db

    def create(self, transaction: FinancialTransaction) -> FinancialTransaction:
        """Persist a new transaction."""
        orm_txn = self._to_orm(transaction)
        self._db.add(orm_txn)
        self._db.commit()
        self._db.refresh(orm_txn)
        return self._to_domain(orm_txn)

    def get_by_id(self, txn_id: str) -> Optional[FinancialTransaction]:
        """Retrieve transaction by ID."""
        orm_txn = self._db.query(FinancialTransactionORM).filter(
            FinancialTransactionORM.txn_id == txn_id
        ).first()
        return self._to_domain(orm_txn) if orm_txn else None

    def update(self, transaction: FinancialTransaction) -> FinancialTransaction:
        """Update an existing transaction."""
        orm_txn = self._db.query(FinancialTransactionORM).filter(
            FinancialTransactionORM.txn_id == transaction.txn_id
        ).first()
        if not orm_txn:
            raise ValueError(f"Transaction not found: {transaction.txn_id}")

        orm_txn.txn_date = transaction.txn_date
        orm_txn.kind = transaction.kind
        orm_txn.amount = transaction.amount
        orm_txn.description = transaction.description
        orm_txn.is_deleted = transaction.is_deleted

        self._db.commit()
        self._db.refresh(orm_txn)
        return self._to_domain(orm_txn)

    def list_page(
        self,
        account_id: str,
        limit: Optional[int] = None,
        offset: int = 0,
        include_deleted: bool = False,
    ) -> list[FinancialTransaction]:
        """List top-level transactions newest first, each followed by its parts."""
        query = self._db.query(FinancialTransactionORM).filter(
            FinancialTransactionORM.account_id == account_id,
            FinancialTransactionORM.parent_id.is_(None),
        )
        if not include_deleted:
            query = query.filter(FinancialTransactionORM.is_deleted == False)  # noqa: E712
        query = query.order_by(
            FinancialTransactionORM.txn_date.desc(),
            FinancialTransactionORM.created_at.desc(),
            FinancialTransactionORM.txn_id.desc(),
        ).offset(offset)
        if limit is not None:
            query = query.limit(limit)
        parents = query.all()
        if not parents:
            return []

        parts_query = self._db.query(FinancialTransactionORM).filter(
            FinancialTransactionORM.parent_id.in_([p.txn_id for p in parents])
        )
        if not include_deleted:
            parts_query = parts_query.filter(FinancialTransactionORM.is_deleted == False)  # noqa: E712
        parts_by_parent: dict[str, list[FinancialTransactionORM]] = {}
        for part in parts_query.order_by(FinancialTransactionORM.created_at).all():
            parts_by_parent.setdefault(part.parent_id, []).append(part)

        result = []
        for parent in parents:
            result.append(self._to_domain(parent))
            result.extend(self._to_domain(p) for p in parts_by_parent.get(parent.txn_id, []))
        return result

    def list_parts(self, parent_id: str) -> list[FinancialTransaction]:
        """List the split parts recorded under a transaction."""
        parts = (
            self._db.query(FinancialTransactionORM)
            .filter(FinancialTransactionORM.parent_id == parent_id)
            .order_by(FinancialTransactionORM.created_at)
            .all()
        )
        return [self._to_domain(p) for p in parts]

    def count(self, account_id: str, include_deleted: bool = False) -> int:
        """Count top-level transactions for an account."""
        query = self._db.query(FinancialTransactionORM).filter(
            FinancialTransactionORM.account_id == account_id,
            FinancialTransactionORM.parent_id.is_(None),
        )
        if not include_deleted:
            query = query.filter(FinancialTransactionORM.is_deleted == False)  # noqa: E712
        return query.count()

    @staticmethod
    def _to_orm(transaction: FinancialTransaction) -> FinancialTransactionORM:
        return FinancialTransactionORM(
            txn_id=transaction.txn_id,
            account_id=transaction.account_id,
            txn_date=transaction.txn_date,
            kind=transaction.kind,
            amount=transaction.amount,
            description=transaction.description,
            parent_id=transaction.parent_id,
            is_virtual=transaction.is_virtual,
            is_deleted=transaction.is_deleted,
            created_at=transaction.created_at,
        )

    @staticmethod
    def _to_domain(orm_txn: FinancialTransactionORM) -> FinancialTransaction:
        return FinancialTransaction(
            txn_id=orm_txn.txn_id,
            account_id=orm_txn.account_id,
            txn_date=orm_txn.txn_date,
            kind=orm_txn.kind,
            amount=orm_txn.amount,
            description=orm_txn.description,
            parent_id=orm_txn.parent_id,
            is_virtual=bool(orm_txn.is_virtual),
            is_deleted=bool(orm_txn.is_deleted),
            created_at=orm_txn.created_at,
        )
