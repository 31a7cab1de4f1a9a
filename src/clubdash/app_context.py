"""Application context holding the session-wide caches.

The TTL store, the priority loader and the balance engine live for the
whole session; request-scoped services are built around them.
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from clubdash.config.settings import Settings, get_settings
from clubdash.repositories.sqlalchemy import (
    SqlAlchemyDashboardSource,
    SqlAlchemyTransactionRepository,
    get_session_factory,
)
from clubdash.services import (
    DashboardDataSource,
    DashboardService,
    LedgerService,
    PriorityLoader,
    RunningBalanceEngine,
    TTLCacheStore,
)

logger = logging.getLogger(__name__)


class AppContext:
    """
    Session-wide cache and loader instances.

    One context per process; `reset_session` drops every cached dataset
    and balance, as happens when a user signs out.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        dashboard_source: Optional[DashboardDataSource] = None,
    ):
        self._settings = settings or get_settings()
        self._dashboard_source = dashboard_source

        self.cache = TTLCacheStore(
            namespace_ttls=self._settings.cache_ttls,
            default_ttl=self._settings.cache_default_ttl_seconds,
            single_flight=self._settings.cache_single_flight,
        )
        self.loader = PriorityLoader(self.cache, tier_delays=self._settings.tier_delays)
        self.balance_engine = RunningBalanceEngine()
        self._dashboard: Optional[DashboardService] = None

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def dashboard(self) -> DashboardService:
        """Get the DashboardService instance."""
        if self._dashboard is None:
            source = self._dashboard_source or SqlAlchemyDashboardSource(get_session_factory())
            self._dashboard = DashboardService(
                loader=self.loader,
                source=source,
                birthday_window_days=self._settings.birthday_window_days,
            )
        return self._dashboard

    def ledger(self, db: Session) -> LedgerService:
        """Build a LedgerService bound to a request session."""
        return LedgerService(
            transaction_repo=SqlAlchemyTransactionRepository(db),
            balance_engine=self.balance_engine,
            cache=self.cache,
        )

    def reset_session(self) -> None:
        """Clear every session-scoped cache."""
        self.cache.clear()
        self.balance_engine.clear_all()
        logger.info("Session caches cleared")

    async def close(self) -> None:
        """Wait for scheduled loads to finish."""
        await self.loader.drain()


# Global application context (one per process)
_app_context: Optional[AppContext] = None


def get_app_context() -> AppContext:
    """Get or create the global application context."""
    global _app_context
    if _app_context is None:
        _app_context = AppContext()
    return _app_context


def set_app_context(context: AppContext) -> None:
    """Set the global application context."""
    global _app_context
    _app_context = context


def reset_app_context() -> None:
    global _app_context
    _app_context = None
