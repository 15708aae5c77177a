# backend/tests/routes/test_presence_routes.py
"""
Route tests for /api/v1/presence.

The app runs against the per-test SQLite session and registry; the
authenticated user is injected by overriding ``get_current_user``.
"""

from fastapi.testclient import TestClient
import pytest

from helpdesk.api.dependencies import CurrentUser, get_current_user, get_db, get_registry
from helpdesk.main import app

BASE = "/api/v1/presence"
TZ = "America/Los_Angeles"


@pytest.fixture
def current_user():
    return {"user": CurrentUser(id="user-1")}


@pytest.fixture
def client(db, seeded_catalog, current_user):
    def _get_db():
        yield db

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_registry] = lambda: seeded_catalog
    app.dependency_overrides[get_current_user] = lambda: current_user["user"]
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


def _plan(client, date="2025-01-20", segments=None, **extra):
    body = {
        "date": date,
        "segments": segments or [{"status_code": "REMOTE", "from": "09:00", "to": "17:00"}],
    }
    body.update(extra)
    return client.post(f"{BASE}/plan-day", params={"tz": TZ}, json=body)


class TestPlanDayRoute:
    def test_plan_day_success(self, client):
        response = _plan(
            client,
            segments=[
                {"status_code": "REMOTE", "from": "09:00", "to": "12:00"},
                {
                    "status_code": "AVAILABLE",
                    "office_code": "NEWPORT_BEACH",
                    "from": "12:00",
                    "to": "17:00",
                },
            ],
        )

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["date"] == "2025-01-20"
        assert [s["start_time"] for s in data["segments"]] == ["09:00", "12:00"]
        assert data["segments"][1]["status"]["code"] == "AVAILABLE"
        assert data["segments"][1]["office_location"]["name"] == "Newport Beach"

    def test_business_rule_errors_return_422_with_all_errors(self, client):
        response = _plan(
            client,
            segments=[
                {"status_code": "REMOTE", "from": "09:00", "to": "12:00"},
                {"status_code": "REMOTE", "from": "11:00", "to": "15:00"},
            ],
        )

        assert response.status_code == 422
        detail = response.json()["detail"]
        assert detail["code"] == "PRESENCE_VALIDATION_FAILED"
        assert detail["details"]["errors"] == [
            {"field": "segments[1]", "message": "Overlaps with segment 1 (09:00–12:00)"}
        ]

    def test_schema_errors_use_the_same_shape(self, client):
        response = _plan(client, segments=[{"status_code": "REMOTE", "from": "9am", "to": "17:00"}])

        assert response.status_code == 422
        errors = response.json()["detail"]["details"]["errors"]
        assert {"field": "segments[0].from", "message": "Invalid time format. Use HH:mm"} in errors

    def test_repeat_range_with_all_days(self, client):
        response = client.post(
            f"{BASE}/plan-day",
            params={"tz": TZ, "all_days": "true"},
            json={
                "date": "2025-01-20",
                "repeat_until": "2025-01-22",
                "segments": [{"status_code": "REMOTE", "from": "09:00", "to": "17:00"}],
            },
        )

        assert response.status_code == 200
        assert [s["date"] for s in response.json()["segments"]] == [
            "2025-01-20",
            "2025-01-21",
            "2025-01-22",
        ]

    def test_non_admin_cannot_plan_for_someone_else(self, client):
        response = _plan(client, user_id="user-2")

        assert response.status_code == 403

    def test_admin_can_plan_for_someone_else(self, client, current_user):
        current_user["user"] = CurrentUser(id="admin-1", is_admin=True)

        response = _plan(client, user_id="user-2")
        assert response.status_code == 200

        day = client.get(f"{BASE}/day", params={"date": "2025-01-20", "tz": TZ, "user_id": "user-2"})
        assert len(day.json()["segments"]) == 1

    def test_unknown_timezone(self, client):
        response = client.post(
            f"{BASE}/plan-day",
            params={"tz": "Mars/Olympus_Mons"},
            json={
                "date": "2025-01-20",
                "segments": [{"status_code": "REMOTE", "from": "09:00", "to": "17:00"}],
            },
        )

        assert response.status_code == 400


class TestReadRoutes:
    def test_options(self, client):
        response = client.get(f"{BASE}/options")

        assert response.status_code == 200
        data = response.json()
        assert [s["code"] for s in data["statuses"]][0] == "AVAILABLE"
        assert data["offices"] == [{"code": "NEWPORT_BEACH", "name": "Newport Beach"}]

    def test_day_uses_from_key(self, client):
        _plan(client)

        response = client.get(f"{BASE}/day", params={"date": "2025-01-20", "tz": TZ})

        assert response.status_code == 200
        segment = response.json()["segments"][0]
        assert segment["from"] == "09:00"
        assert segment["to"] == "17:00"
        assert segment["status_label"] == "Remote"

    def test_day_rejects_bad_date(self, client):
        response = client.get(f"{BASE}/day", params={"date": "Jan 20"})

        assert response.status_code == 422

    def test_day_rejects_impossible_date(self, client):
        response = client.get(f"{BASE}/day", params={"date": "2025-02-30"})

        assert response.status_code == 422
        errors = response.json()["detail"]["details"]["errors"]
        assert errors == [{"field": "date", "message": "Invalid date format. Use YYYY-MM-DD"}]

    def test_week_view_rejects_impossible_start_date(self, client):
        response = client.get(f"{BASE}/week-view", params={"start_date": "2025-02-30"})

        assert response.status_code == 422
        assert response.json()["detail"]["details"]["errors"][0]["field"] == "start_date"

    def test_plan_in_spring_forward_gap_returns_422(self, client):
        response = _plan(
            client,
            date="2025-03-09",
            segments=[{"status_code": "REMOTE", "from": "02:00", "to": "03:00"}],
        )

        assert response.status_code == 422
        assert response.json()["detail"]["details"]["errors"][0]["field"] == "segments[0].to"

    def test_week_view(self, client):
        _plan(client)

        response = client.get(f"{BASE}/week-view", params={"start_date": "2025-01-20", "tz": TZ})

        assert response.status_code == 200
        days = response.json()["days"]
        assert len(days) == 7
        assert days[0]["day_of_week"] == "Monday"
        assert days[0]["schedules"][0]["time_range"] == "09:00 - 17:00"
        assert days[0]["schedules"][0]["type"] == "specific-schedule"

    def test_current_with_empty_store(self, client):
        response = client.get(f"{BASE}/current")

        assert response.status_code == 200
        assert response.json() == {"presences": []}


class TestDeleteRoute:
    def test_delete_own_segment(self, client):
        segment_id = _plan(client).json()["segments"][0]["id"]

        response = client.delete(f"{BASE}/segment/{segment_id}")

        assert response.status_code == 200
        assert response.json() == {"success": True, "id": segment_id}

    def test_delete_missing_segment(self, client):
        response = client.delete(f"{BASE}/segment/01HZZZZZZZZZZZZZZZZZZZZZZZ")

        assert response.status_code == 404
        assert response.json()["detail"]["message"] == "Segment not found"

    def test_delete_someone_elses_segment(self, client, current_user):
        segment_id = _plan(client).json()["segments"][0]["id"]
        current_user["user"] = CurrentUser(id="user-2")

        response = client.delete(f"{BASE}/segment/{segment_id}")

        assert response.status_code == 403
        assert (
            response.json()["detail"]["message"]
            == "Unauthorized: You can only delete your own segments"
        )


class TestAdminRoutes:
    def test_requires_admin(self, client):
        response = client.post(f"{BASE}/admin/status", json={"code": "TRAINING", "label": "Training"})

        assert response.status_code == 403

    def test_create_and_conflict(self, client, current_user):
        current_user["user"] = CurrentUser(id="admin-1", is_admin=True)

        created = client.post(f"{BASE}/admin/status", json={"code": "TRAINING", "label": "Training"})
        duplicate = client.post(f"{BASE}/admin/status", json={"code": "TRAINING", "label": "Again"})

        assert created.status_code == 201
        assert created.json()["code"] == "TRAINING"
        assert duplicate.status_code == 409

        options = client.get(f"{BASE}/options").json()
        assert "TRAINING" in [s["code"] for s in options["statuses"]]

    def test_update_unknown_office(self, client, current_user):
        current_user["user"] = CurrentUser(id="admin-1", is_admin=True)

        response = client.patch(f"{BASE}/admin/office", json={"id": "missing", "name": "Nowhere"})

        assert response.status_code == 404


def test_missing_user_is_unauthorized(db, seeded_catalog):
    def _get_db():
        yield db

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_registry] = lambda: seeded_catalog
    try:
        response = TestClient(app).get(f"{BASE}/current")
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 401


def test_prometheus_metrics_exposes_presence_counters(client):
    _plan(client)

    response = client.get("/metrics/prometheus")

    assert response.status_code == 200
    assert "helpdesk_presence_days_planned_total" in response.text
    assert "helpdesk_service_operations_total" in response.text


def test_health(client):
    assert client.get("/health").json()["status"] == "healthy"
