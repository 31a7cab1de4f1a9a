"""Dashboard API router."""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.encoders import jsonable_encoder

from clubdash.api.deps import get_dashboard_service
from clubdash.api.schemas import DashboardResponse, InvalidateResponse, LoadStateResponse
from clubdash.domain.views import LoadState
from clubdash.services import DashboardService

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


def _to_response(dataset: str, state: LoadState) -> LoadStateResponse:
    return LoadStateResponse(
        dataset=dataset,
        key=state.key,
        status=state.status,
        value=jsonable_encoder(state.value),
        error=str(state.error) if state.error is not None else None,
        from_cache=state.from_cache,
        updated_at=state.updated_at,
    )


@router.get("", response_model=DashboardResponse)
async def load_dashboard(
    birthday_month: Optional[int] = Query(None, ge=1, le=12),
    wait: bool = Query(True, description="Wait for every dataset instead of returning a snapshot"),
    service: DashboardService = Depends(get_dashboard_service),
):
    """
    Load every dataset by priority.

    With wait=false the current snapshot is returned right away while the
    deferred tiers keep loading in the background.
    """
    requests = service.load_all(birthday_month)
    if wait:
        states = {name: await request.wait() for name, request in requests.items()}
    else:
        states = service.snapshot(birthday_month)
    return DashboardResponse(
        datasets={name: _to_response(name, state) for name, state in states.items()}
    )


@router.get("/{dataset}", response_model=LoadStateResponse)
async def load_dataset(
    dataset: str,
    birthday_month: Optional[int] = Query(None),
    service: DashboardService = Depends(get_dashboard_service),
):
    """Load one dataset at its priority and wait for it."""
    request = service.load(dataset, birthday_month)
    return _to_response(dataset, await request.wait())


@router.post("/{dataset}/refresh", response_model=LoadStateResponse)
async def refresh_dataset(
    dataset: str,
    birthday_month: Optional[int] = Query(None),
    service: DashboardService = Depends(get_dashboard_service),
):
    """Reload one dataset now, bypassing the cache."""
    request = service.refresh(dataset, birthday_month)
    return _to_response(dataset, await request.wait())


@router.post("/invalidate/members", response_model=InvalidateResponse)
def invalidate_members(service: DashboardService = Depends(get_dashboard_service)):
    """Drop cached datasets derived from member records."""
    return InvalidateResponse(removed=service.invalidate_members())


@router.post("/invalidate/events", response_model=InvalidateResponse)
def invalidate_events(service: DashboardService = Depends(get_dashboard_service)):
    """Drop cached event lists."""
    return InvalidateResponse(removed=service.invalidate_events())
