# =============================================================================
# tests/test_dashboard.py - Dashboard Summary and Audit Log Tests
# =============================================================================
# Run with: pytest tests/test_dashboard.py -v
# =============================================================================

from datetime import datetime, timedelta, timezone

from core.services.dashboard_service import WEEKS, DashboardService, start_of_iso_week
from core.tables import JobApplication, User

API = "/api/v1"

# A Wednesday
NOW = datetime(2024, 5, 15, 10, 30, tzinfo=timezone.utc)


class TestStartOfIsoWeek:

    def test_midweek(self):
        assert start_of_iso_week(NOW) == datetime(2024, 5, 13, tzinfo=timezone.utc)

    def test_monday_midnight_is_its_own_week(self):
        monday = datetime(2024, 5, 13, tzinfo=timezone.utc)

        assert start_of_iso_week(monday) == monday

    def test_naive_treated_as_utc(self):
        assert start_of_iso_week(datetime(2024, 5, 19, 23, 59)) == datetime(2024, 5, 13, tzinfo=timezone.utc)


class TestDashboardSummaryService:
    """Tests for DashboardService.summary against fixed dates."""

    def _seed(self, db) -> str:
        user = User(email="carol@example.com")
        db.add(user)
        db.flush()
        created = [
            (NOW - timedelta(hours=1), "APPLIED"),
            (NOW - timedelta(days=2), "APPLIED"),
            (NOW - timedelta(weeks=1), "INTERVIEW"),
            (NOW - timedelta(weeks=7), "OFFER"),
            (NOW - timedelta(weeks=12), "REJECTED"),
        ]
        for created_at, stage in created:
            db.add(JobApplication(user_id=user.id, company="Co", title="Eng", stage=stage, created_at=created_at))
        db.add(JobApplication(
            user_id=user.id, company="Gone", title="Eng", stage="SAVED",
            created_at=NOW, deleted_at=NOW,
        ))
        db.commit()
        return user.id

    def test_stage_counts_include_every_stage(self, db):
        user_id = self._seed(db)

        summary = DashboardService.summary(db, user_id, now=NOW)

        assert summary["stage_counts"] == {
            "SAVED": 0, "APPLIED": 2, "INTERVIEW": 1, "OFFER": 1, "REJECTED": 1,
        }
        assert summary["total"] == 5

    def test_weekly_buckets(self, db):
        user_id = self._seed(db)

        weekly = DashboardService.summary(db, user_id, now=NOW)["weekly_applications"]

        assert len(weekly) == WEEKS
        assert weekly[-1] == {"week_start": "2024-05-13", "count": 2}
        assert weekly[-2] == {"week_start": "2024-05-06", "count": 1}
        assert weekly[0] == {"week_start": "2024-03-25", "count": 1}
        assert sum(week["count"] for week in weekly) == 4


class TestDashboardApi:
    """Tests for GET /dashboard/summary."""

    def test_empty_account(self, client, auth_headers):
        body = client.get(f"{API}/dashboard/summary", headers=auth_headers).json()

        assert body["total"] == 0
        assert set(body["stage_counts"]) == {"SAVED", "APPLIED", "INTERVIEW", "OFFER", "REJECTED"}
        assert len(body["weekly_applications"]) == WEEKS

    def test_counts_only_own_applications(self, client, auth_headers, application, other_headers):
        mine = client.get(f"{API}/dashboard/summary", headers=auth_headers).json()
        theirs = client.get(f"{API}/dashboard/summary", headers=other_headers).json()

        assert mine["total"] == 1
        assert mine["weekly_applications"][-1]["count"] == 1
        assert theirs["total"] == 0

    def test_requires_auth(self, client):
        assert client.get(f"{API}/dashboard/summary").status_code == 401


class TestAuditLog:
    """Tests for GET /audit."""

    def test_pagination_and_action_filter(self, client, auth_headers):
        for i in range(3):
            client.post(f"{API}/applications", json={"company": f"Co {i}", "title": "Eng"}, headers=auth_headers)

        first = client.get(
            f"{API}/audit",
            params={"action": "APPLICATION_CREATED", "page_size": 2},
            headers=auth_headers,
        ).json()
        second = client.get(
            f"{API}/audit",
            params={"action": "APPLICATION_CREATED", "page_size": 2, "page": 2},
            headers=auth_headers,
        ).json()

        assert first["total"] == 3
        assert len(first["items"]) == 2
        assert len(second["items"]) == 1
        assert {e["action"] for e in first["items"] + second["items"]} == {"APPLICATION_CREATED"}

    def test_entity_filter(self, client, auth_headers, application):
        client.patch(f"{API}/applications/{application['id']}", json={"stage": "OFFER"}, headers=auth_headers)

        body = client.get(f"{API}/audit", params={"entity_id": application["id"]}, headers=auth_headers).json()

        assert {e["action"] for e in body["items"]} == {"APPLICATION_CREATED", "APPLICATION_UPDATED"}

    def test_other_users_entries_hidden(self, client, auth_headers, application, other_headers):
        body = client.get(f"{API}/audit", params={"entity_id": application["id"]}, headers=other_headers).json()

        assert body["total"] == 0

    def test_page_size_capped(self, client, auth_headers):
        response = client.get(f"{API}/audit", params={"page_size": 500}, headers=auth_headers)

        assert response.status_code == 400
