# =============================================================================
# tests/test_child_resources_api.py - Interview, Task, Note, Contact, Link,
# Document, Label, Offer and Email Preference Endpoint Tests
# =============================================================================
# Run with: pytest tests/test_child_resources_api.py -v
# =============================================================================

from datetime import timedelta

from lib.database import utcnow

API = "/api/v1"


def _future(hours: int = 48) -> str:
    return (utcnow() + timedelta(hours=hours)).isoformat()


# =============================================================================
# Interviews
# =============================================================================

class TestInterviews:
    """Tests for /interviews."""

    def _create(self, client, headers, application_id, **fields):
        body = {"application_id": application_id, "scheduled_at": _future(), **fields}
        response = client.post(f"{API}/interviews", json=body, headers=headers)
        assert response.status_code == 201, response.text
        return response.json()

    def test_defaults(self, client, auth_headers, application):
        interview = self._create(client, auth_headers, application["id"])

        assert interview["type"] == "VIDEO"
        assert interview["duration"] == 60
        assert interview["result"] == "PENDING"
        assert interview["reminder_sent"] is False

    def test_duration_bounds(self, client, auth_headers, application):
        response = client.post(
            f"{API}/interviews",
            json={"application_id": application["id"], "scheduled_at": _future(), "duration": 5},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert "duration" in response.json()["error"]["details"]

    def test_foreign_application_rejected(self, client, application, other_headers):
        response = client.post(
            f"{API}/interviews",
            json={"application_id": application["id"], "scheduled_at": _future()},
            headers=other_headers,
        )

        assert response.status_code == 404

    def test_list_ordered_and_filtered(self, client, auth_headers, application):
        later = self._create(client, auth_headers, application["id"], scheduled_at=_future(72))
        sooner = self._create(client, auth_headers, application["id"], scheduled_at=_future(24))
        self._create(
            client, auth_headers, application["id"],
            scheduled_at=(utcnow() - timedelta(days=2)).isoformat(), result="PASSED",
        )

        upcoming = client.get(f"{API}/interviews", params={"upcoming": "true"}, headers=auth_headers).json()
        passed = client.get(f"{API}/interviews", params={"result": "PASSED"}, headers=auth_headers).json()

        assert [i["id"] for i in upcoming["items"]] == [sooner["id"], later["id"]]
        assert len(passed["items"]) == 1

    def test_reschedule_resets_reminder(self, client, auth_headers, application):
        interview = self._create(client, auth_headers, application["id"])
        client.patch(f"{API}/interviews/{interview['id']}", json={"reminder_sent": True}, headers=auth_headers)

        response = client.patch(
            f"{API}/interviews/{interview['id']}",
            json={"scheduled_at": _future(96)},
            headers=auth_headers,
        )

        assert response.json()["reminder_sent"] is False

    def test_deleted_application_hides_interviews(self, client, auth_headers, application):
        self._create(client, auth_headers, application["id"])
        client.delete(f"{API}/applications/{application['id']}", headers=auth_headers)

        assert client.get(f"{API}/interviews", headers=auth_headers).json()["items"] == []


# =============================================================================
# Tasks
# =============================================================================

class TestTasks:
    """Tests for /tasks."""

    def test_create_standalone(self, client, auth_headers):
        response = client.post(f"{API}/tasks", json={"title": "Update resume"}, headers=auth_headers)

        assert response.status_code == 201
        assert response.json()["status"] == "OPEN"
        assert response.json()["application_id"] is None

    def test_order_open_first_nulls_last(self, client, auth_headers):
        # Arrange
        no_due = client.post(f"{API}/tasks", json={"title": "Someday"}, headers=auth_headers).json()
        late = client.post(f"{API}/tasks", json={"title": "Later", "due_date": _future(72)}, headers=auth_headers).json()
        soon = client.post(f"{API}/tasks", json={"title": "Soon", "due_date": _future(1)}, headers=auth_headers).json()
        done = client.post(
            f"{API}/tasks", json={"title": "Done", "due_date": _future(0), "status": "DONE"}, headers=auth_headers
        ).json()

        # Act
        items = client.get(f"{API}/tasks", headers=auth_headers).json()["items"]

        # Assert: open before done, undated last
        assert [t["id"] for t in items] == [soon["id"], late["id"], no_due["id"], done["id"]]

    def test_status_filter(self, client, auth_headers):
        client.post(f"{API}/tasks", json={"title": "A"}, headers=auth_headers)
        client.post(f"{API}/tasks", json={"title": "B", "status": "DONE"}, headers=auth_headers)

        items = client.get(f"{API}/tasks", params={"status": "DONE"}, headers=auth_headers).json()["items"]

        assert [t["title"] for t in items] == ["B"]

    def test_complete_task(self, client, auth_headers):
        task = client.post(f"{API}/tasks", json={"title": "A"}, headers=auth_headers).json()

        response = client.patch(f"{API}/tasks/{task['id']}", json={"status": "DONE"}, headers=auth_headers)

        assert response.json()["status"] == "DONE"

    def test_delete(self, client, auth_headers):
        task = client.post(f"{API}/tasks", json={"title": "A"}, headers=auth_headers).json()

        client.delete(f"{API}/tasks/{task['id']}", headers=auth_headers)

        assert client.get(f"{API}/tasks", headers=auth_headers).json()["items"] == []


# =============================================================================
# Notes / Contacts / Links
# =============================================================================

class TestNotes:
    """Tests for /notes."""

    def test_crud(self, client, auth_headers, application):
        note = client.post(
            f"{API}/notes",
            json={"application_id": application["id"], "content": "First"},
            headers=auth_headers,
        ).json()

        updated = client.patch(f"{API}/notes/{note['id']}", json={"content": "Edited"}, headers=auth_headers)
        listed = client.get(f"{API}/notes", params={"application_id": application["id"]}, headers=auth_headers)

        assert updated.json()["content"] == "Edited"
        assert [n["content"] for n in listed.json()["items"]] == ["Edited"]

    def test_list_requires_application(self, client, auth_headers):
        response = client.get(f"{API}/notes", headers=auth_headers)

        assert response.status_code == 400

    def test_empty_content(self, client, auth_headers, application):
        response = client.post(
            f"{API}/notes",
            json={"application_id": application["id"], "content": "   "},
            headers=auth_headers,
        )

        assert response.status_code == 400


class TestContacts:
    """Tests for /contacts."""

    def test_create_and_filter(self, client, auth_headers, application):
        client.post(
            f"{API}/contacts",
            json={"name": "Jane", "email": "jane@acme.com", "application_id": application["id"]},
            headers=auth_headers,
        )
        client.post(f"{API}/contacts", json={"name": "Floating"}, headers=auth_headers)

        all_contacts = client.get(f"{API}/contacts", headers=auth_headers).json()["items"]
        for_app = client.get(
            f"{API}/contacts", params={"application_id": application["id"]}, headers=auth_headers
        ).json()["items"]

        assert len(all_contacts) == 2
        assert [c["name"] for c in for_app] == ["Jane"]

    def test_invalid_email(self, client, auth_headers):
        response = client.post(f"{API}/contacts", json={"name": "Jane", "email": "nope"}, headers=auth_headers)

        assert response.status_code == 400
        assert "email" in response.json()["error"]["details"]


class TestAttachmentLinks:
    """Tests for /links."""

    def test_create_and_list(self, client, auth_headers, application):
        response = client.post(
            f"{API}/links",
            json={"application_id": application["id"], "label": "Posting", "url": "https://acme.com/jobs/1"},
            headers=auth_headers,
        )
        listed = client.get(f"{API}/links", params={"application_id": application["id"]}, headers=auth_headers)

        assert response.status_code == 201
        assert listed.json()["items"][0]["label"] == "Posting"

    def test_rejects_non_http_url(self, client, auth_headers, application):
        response = client.post(
            f"{API}/links",
            json={"application_id": application["id"], "label": "Bad", "url": "javascript:alert(1)"},
            headers=auth_headers,
        )

        assert response.status_code == 400


# =============================================================================
# Documents / Labels / Offers
# =============================================================================

class TestDocuments:
    """Tests for /documents."""

    def _create(self, client, headers, **fields):
        body = {"name": "Resume", "file_name": "resume.pdf", **fields}
        response = client.post(f"{API}/documents", json=body, headers=headers)
        assert response.status_code == 201, response.text
        return response.json()

    def test_single_default_per_type(self, client, auth_headers):
        first = self._create(client, auth_headers, is_default=True)
        second = self._create(client, auth_headers, name="Resume v2", is_default=True)
        letter = self._create(client, auth_headers, name="Letter", type="COVER_LETTER", is_default=True)

        docs = {d["id"]: d for d in client.get(f"{API}/documents", headers=auth_headers).json()["items"]}

        assert docs[first["id"]]["is_default"] is False
        assert docs[second["id"]]["is_default"] is True
        assert docs[letter["id"]]["is_default"] is True

    def test_type_filter_and_order(self, client, auth_headers):
        self._create(client, auth_headers, name="Plain")
        default = self._create(client, auth_headers, name="Main", is_default=True)
        self._create(client, auth_headers, name="Letter", type="COVER_LETTER")

        items = client.get(f"{API}/documents", params={"type": "RESUME"}, headers=auth_headers).json()["items"]

        assert len(items) == 2
        assert items[0]["id"] == default["id"]

    def test_update_makes_default(self, client, auth_headers):
        first = self._create(client, auth_headers, is_default=True)
        second = self._create(client, auth_headers, name="Other")

        client.patch(f"{API}/documents/{second['id']}", json={"is_default": True}, headers=auth_headers)

        assert client.get(f"{API}/documents/{first['id']}", headers=auth_headers).json()["is_default"] is False


class TestLabels:
    """Tests for /labels."""

    def test_default_color(self, client, auth_headers):
        response = client.post(f"{API}/labels", json={"name": "Dream job"}, headers=auth_headers)

        assert response.json()["color"] == "#6366f1"

    def test_duplicate_name_case_insensitive(self, client, auth_headers):
        client.post(f"{API}/labels", json={"name": "Urgent"}, headers=auth_headers)

        response = client.post(f"{API}/labels", json={"name": "URGENT"}, headers=auth_headers)

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "DUPLICATE"

    def test_invalid_color(self, client, auth_headers):
        response = client.post(f"{API}/labels", json={"name": "X", "color": "red"}, headers=auth_headers)

        assert response.status_code == 400

    def test_names_are_per_user(self, client, auth_headers, other_headers):
        client.post(f"{API}/labels", json={"name": "Urgent"}, headers=auth_headers)

        response = client.post(f"{API}/labels", json={"name": "Urgent"}, headers=other_headers)

        assert response.status_code == 201


class TestSalaryOffers:
    """Tests for /offers."""

    def test_create_normalizes_currency(self, client, auth_headers, application):
        response = client.post(
            f"{API}/offers",
            json={"application_id": application["id"], "base_salary": 120000, "currency": "eur"},
            headers=auth_headers,
        )

        body = response.json()
        assert response.status_code == 201
        assert body["currency"] == "EUR"
        assert body["type"] == "INITIAL"
        assert body["offer_date"] is not None

    def test_base_salary_must_be_positive(self, client, auth_headers, application):
        response = client.post(
            f"{API}/offers",
            json={"application_id": application["id"], "base_salary": 0},
            headers=auth_headers,
        )

        assert response.status_code == 400

    def test_list_newest_offer_first(self, client, auth_headers, application):
        for days_ago, offer_type in ((10, "INITIAL"), (2, "COUNTER")):
            client.post(
                f"{API}/offers",
                json={
                    "application_id": application["id"],
                    "base_salary": 100000,
                    "type": offer_type,
                    "offer_date": (utcnow() - timedelta(days=days_ago)).isoformat(),
                },
                headers=auth_headers,
            )

        items = client.get(f"{API}/offers", params={"application_id": application["id"]}, headers=auth_headers)

        assert [o["type"] for o in items.json()["items"]] == ["COUNTER", "INITIAL"]


# =============================================================================
# Email Preferences
# =============================================================================

class TestEmailPreferences:
    """Tests for /email-preferences."""

    def test_defaults_created_on_read(self, client, auth_headers):
        body = client.get(f"{API}/email-preferences", headers=auth_headers).json()

        assert body["interview_reminder"] is True
        assert body["interview_reminder_hours"] == 24
        assert body["digest_frequency"] == "WEEKLY"
        assert body["marketing_emails"] is False

    def test_partial_update(self, client, auth_headers):
        response = client.patch(
            f"{API}/email-preferences",
            json={"task_reminder": False, "digest_frequency": "DAILY"},
            headers=auth_headers,
        )

        body = response.json()
        assert body["task_reminder"] is False
        assert body["digest_frequency"] == "DAILY"
        assert body["interview_reminder"] is True

    def test_hours_out_of_range(self, client, auth_headers):
        response = client.patch(
            f"{API}/email-preferences",
            json={"interview_reminder_hours": 500},
            headers=auth_headers,
        )

        assert response.status_code == 400
