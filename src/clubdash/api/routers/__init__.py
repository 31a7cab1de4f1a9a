"""API routers package."""

from clubdash.api.routers.dashboard import router as dashboard_router
from clubdash.api.routers.ledger import router as ledger_router
from clubdash.api.routers.cache import router as cache_router

__all__ = [
    "dashboard_router",
    "ledger_router",
    "cache_router",
]
