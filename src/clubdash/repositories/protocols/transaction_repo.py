"""Financial transaction repository protocol."""

from typing import Protocol, Optional

from clubdash.domain.models import FinancialTransaction


class TransactionRepository(Protocol):
    """Interface for bank-account transaction data access."""

    def create(self, transaction: FinancialTransaction) -> FinancialTransaction:
        """Persist a new transaction."""
        ...

    def get_by_id(self, txn_id: str) -> Optional[FinancialTransaction]:
        """Retrieve transaction by ID."""
        ...

    def update(self, transaction: FinancialTransaction) -> FinancialTransaction:
        """Update an existing transaction."""
        ...

    def list_page(
        self,
        account_id: str,
        limit: Optional[int] = None,
        offset: int = 0,
        include_deleted: bool = False,
    ) -> list[FinancialTransaction]:
        """List top-level transactions newest first, each followed by its parts."""
        ...

    def list_parts(self, parent_id: str) -> list[FinancialTransaction]:
        """List the split parts recorded under a transaction."""
        ...

    def count(self, account_id: str, include_deleted: bool = False) -> int:
        """Count top-level transactions for an account."""
        ...
