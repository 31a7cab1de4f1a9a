"""Dependency injection for FastAPI."""

from fastapi import Depends
from sqlalchemy.orm import Session

from clubdash.app_context import AppContext, get_app_context
from clubdash.repositories.sqlalchemy.database import get_db
from clubdash.services import DashboardService, LedgerService, RunningBalanceEngine, TTLCacheStore


def get_context() -> AppContext:
    """Provide the process-wide AppContext."""
    return get_app_context()


def get_dashboard_service(context: AppContext = Depends(get_context)) -> DashboardService:
    """Provide DashboardService instance."""
    return context.dashboard


def get_ledger_service(
    db: Session = Depends(get_db),
    context: AppContext = Depends(get_context),
) -> LedgerService:
    """Provide LedgerService instance."""
    return context.ledger(db)


def get_cache(context: AppContext = Depends(get_context)) -> TTLCacheStore:
    """Provide the session TTL cache."""
    return context.cache


def get_balance_engine(context: AppContext = Depends(get_context)) -> RunningBalanceEngine:
    """Provide the shared RunningBalanceEngine."""
    return context.balance_engine
