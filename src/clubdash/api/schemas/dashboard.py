"""Pydantic schemas for dashboard endpoints."""

from typing import Any, Optional

from pydantic import BaseModel

from clubdash.domain.models import LoadStatus


class LoadStateResponse(BaseModel):
    """Published state of one dataset."""

    dataset: str
    key: str
    status: LoadStatus
    value: Any = None
    error: Optional[str] = None
    from_cache: bool = False
    updated_at: Optional[float] = None


class DashboardResponse(BaseModel):
    """Every dashboard dataset keyed by name."""

    datasets: dict[str, LoadStateResponse]
