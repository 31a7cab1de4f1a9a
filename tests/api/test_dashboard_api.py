"""
API tests for dashboard endpoints.

Tests cover:
- Loading every dataset
- Loading one dataset, served from cache the second time
- Refresh and invalidation
- Error responses (400, 404)
"""

from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

from clubdash.core.timezone import now_local
from clubdash.domain.models import MemberStatus
from clubdash.repositories.sqlalchemy import SqlAlchemyEventRepository, SqlAlchemyMemberRepository

from tests.conftest import make_event, make_member


@pytest.fixture
def seeded(api_session):
    """Three members and two events around now."""
    today = now_local().date()
    members = SqlAlchemyMemberRepository(api_session)
    members.create(make_member("Aisha", birth_date=today.replace(year=1992), industries=["Finance"]))
    members.create(make_member("Ben", industries=["Finance", "Legal"], interests=["Golf"]))
    members.create(make_member("Chen", status=MemberStatus.INACTIVE))

    now = now_local().replace(tzinfo=None)
    events = SqlAlchemyEventRepository(api_session)
    events.create(make_event("Gala", now + timedelta(days=5)))
    events.create(make_event("AGM", now - timedelta(days=5)))
    return api_session


# =============================================================================
# LOAD ALL
# =============================================================================


class TestDashboardAPI:
    """Tests for GET /dashboard."""

    def test_load_all_datasets(self, client: TestClient, seeded):
        """
        GIVEN members and events in the database
        WHEN I GET /dashboard
        THEN every dataset is returned LOADED
        """
        response = client.get("/dashboard")

        assert response.status_code == 200
        datasets = response.json()["datasets"]
        assert set(datasets) == {
            "stats",
            "members",
            "upcoming_events",
            "birthdays",
            "industries",
            "interests",
            "past_events",
        }
        assert all(d["status"] == "loaded" for d in datasets.values())
        assert datasets["stats"]["value"]["total"] == 3
        assert datasets["stats"]["value"]["active"] == 2
        assert [e["name"] for e in datasets["upcoming_events"]["value"]] == ["Gala"]
        assert [e["name"] for e in datasets["past_events"]["value"]] == ["AGM"]
        assert [b["name"] for b in datasets["birthdays"]["value"]] == ["Aisha"]
        assert datasets["industries"]["value"][0] == {"label": "Finance", "count": 2, "percentage": 100.0}

    def test_snapshot_without_waiting(self, client: TestClient, seeded):
        response = client.get("/dashboard", params={"wait": False})

        assert response.status_code == 200
        statuses = {d["status"] for d in response.json()["datasets"].values()}
        assert statuses <= {"loading", "loaded"}

    def test_invalid_birthday_month(self, client: TestClient):
        response = client.get("/dashboard", params={"birthday_month": 13})

        assert response.status_code == 422


# =============================================================================
# SINGLE DATASET
# =============================================================================


class TestDatasetAPI:
    """Tests for GET /dashboard/{dataset} and refresh."""

    def test_second_load_comes_from_cache(self, client: TestClient, seeded):
        """
        GIVEN the members dataset was loaded once
        WHEN I load it again
        THEN it is served from cache
        """
        first = client.get("/dashboard/members").json()
        second = client.get("/dashboard/members").json()

        assert first["status"] == "loaded"
        assert first["from_cache"] is False
        assert second["from_cache"] is True
        assert [m["name"] for m in second["value"]] == ["Aisha", "Ben", "Chen"]

    def test_refresh_sees_new_data(self, client: TestClient, seeded):
        client.get("/dashboard/members")
        SqlAlchemyMemberRepository(seeded).create(make_member("Dina"))

        cached = client.get("/dashboard/members").json()
        refreshed = client.post("/dashboard/members/refresh").json()

        assert len(cached["value"]) == 3
        assert refreshed["from_cache"] is False
        assert len(refreshed["value"]) == 4

    def test_birthdays_by_month(self, client: TestClient, seeded):
        month = now_local().month

        data = client.get("/dashboard/birthdays", params={"birthday_month": month}).json()

        assert data["key"] == f"birthdays:month:{month}"
        assert [b["name"] for b in data["value"]] == ["Aisha"]

    def test_unknown_dataset_404(self, client: TestClient):
        response = client.get("/dashboard/payments")

        assert response.status_code == 404
        assert response.json()["error"] == "NOT_FOUND"

    def test_bad_birthday_month_400(self, client: TestClient):
        response = client.get("/dashboard/birthdays", params={"birthday_month": 0})

        assert response.status_code == 400
        assert response.json()["error"] == "VALIDATION_ERROR"


# =============================================================================
# INVALIDATION
# =============================================================================


class TestInvalidationAPI:
    """Tests for dataset invalidation endpoints."""

    def test_invalidate_members(self, client: TestClient, seeded):
        client.get("/dashboard/members")
        client.get("/dashboard/stats")
        client.get("/dashboard/upcoming_events")

        response = client.post("/dashboard/invalidate/members")

        assert response.json() == {"removed": 2}
        assert client.get("/dashboard/members").json()["from_cache"] is False
        assert client.get("/dashboard/upcoming_events").json()["from_cache"] is True

    def test_invalidate_events(self, client: TestClient, seeded):
        client.get("/dashboard/past_events")

        assert client.post("/dashboard/invalidate/events").json() == {"removed": 1}
