# =============================================================================
# tests/test_csv.py - CSV Import / Export Tests
# =============================================================================
# Run with: pytest tests/test_csv.py -v
# =============================================================================

from sqlalchemy import select

from app.config import settings
from core.services.csv_service import EXPORT_COLUMNS, normalize_import_row
from core.tables import User

API = "/api/v1/applications"

EXPORT_HEADER = ",".join(EXPORT_COLUMNS.keys())


def make_pro(db, email: str = "alice@example.com") -> None:
    user = db.scalar(select(User).where(User.email == email))
    user.plan = "PRO"
    db.commit()


# =============================================================================
# Row Normalization
# =============================================================================

class TestNormalizeImportRow:
    """Tests for camelCase mapping and tag splitting."""

    def test_camel_case_keys(self):
        row = normalize_import_row({"company": "Acme", "salaryMin": "100", "appliedDate": "2024-01-02"})

        assert row == {"company": "Acme", "salary_min": "100", "applied_date": "2024-01-02"}

    def test_server_columns_dropped(self):
        row = normalize_import_row({"id": "x", "createdAt": "2024-01-01", "company": "Acme"})

        assert row == {"company": "Acme"}

    def test_tags_split_on_pipe(self):
        row = normalize_import_row({"tags": " remote | fintech ||"})

        assert row["tags"] == ["remote", "fintech"]

    def test_stage_uppercased(self):
        assert normalize_import_row({"stage": " applied "})["stage"] == "APPLIED"

    def test_blank_stage_dropped(self):
        """A blank stage cell falls back to the SAVED default."""
        assert "stage" not in normalize_import_row({"company": "Acme", "stage": "  "})


# =============================================================================
# Export
# =============================================================================

class TestExport:
    """Tests for GET /applications/export."""

    def test_free_plan_rejected(self, client, auth_headers, application):
        response = client.get(f"{API}/export", headers=auth_headers)

        assert response.status_code == 403
        assert response.json()["error"]["code"] == "PLAN_REQUIRED"

    def test_pro_export(self, client, auth_headers, application, db):
        # Arrange
        client.patch(
            f"{API}/{application['id']}",
            json={"tags": ["remote", "fintech"], "salary_min": 100000},
            headers=auth_headers,
        )
        make_pro(db)

        # Act
        response = client.get(f"{API}/export", headers=auth_headers)

        # Assert
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert response.headers["content-disposition"].startswith('attachment; filename="applications-')
        lines = response.text.strip().splitlines()
        assert lines[0] == EXPORT_HEADER
        assert len(lines) == 2
        assert lines[1].startswith("Acme,Backend Engineer,APPLIED,")
        assert "remote|fintech" in lines[1]
        assert "100000" in lines[1]

    def test_export_honours_filters(self, client, auth_headers, application, db):
        client.post(API, json={"company": "Globex", "title": "SRE", "stage": "OFFER"}, headers=auth_headers)
        make_pro(db)

        response = client.get(f"{API}/export", params={"stage": "OFFER"}, headers=auth_headers)

        lines = response.text.strip().splitlines()
        assert len(lines) == 2
        assert lines[1].startswith("Globex,SRE,OFFER,")


# =============================================================================
# Import
# =============================================================================

class TestJsonImport:
    """Tests for POST /applications/import."""

    def test_valid_and_invalid_rows(self, client, auth_headers):
        rows = [
            {"company": "Acme", "title": "Engineer", "stage": "applied", "salaryMin": "90000", "tags": "a|b"},
            {"company": "", "title": "Missing company"},
            {"company": "Globex", "title": "SRE", "salaryMin": 200, "salaryMax": 100},
        ]

        response = client.post(f"{API}/import", json={"rows": rows}, headers=auth_headers)

        body = response.json()
        assert response.status_code == 200
        assert body["created"] == 1
        assert body["truncated"] is False
        assert [f["row"] for f in body["failures"]] == [2, 3]
        assert "company" in body["failures"][0]["errors"]

        listed = client.get(API, headers=auth_headers).json()["items"]
        assert listed[0]["company"] == "Acme"
        assert listed[0]["stage"] == "APPLIED"
        assert listed[0]["salary_min"] == 90000
        assert listed[0]["tags"] == ["a", "b"]

    def test_empty_rows_rejected(self, client, auth_headers):
        response = client.post(f"{API}/import", json={"rows": []}, headers=auth_headers)

        assert response.status_code == 400

    def test_free_plan_truncates(self, client, auth_headers, monkeypatch):
        monkeypatch.setattr(settings, "FREE_PLAN_APPLICATION_LIMIT", 2)
        rows = [{"company": f"Co {i}", "title": "Engineer"} for i in range(3)]

        response = client.post(f"{API}/import", json={"rows": rows}, headers=auth_headers)

        assert response.json()["created"] == 2
        assert response.json()["truncated"] is True

    def test_free_plan_full(self, client, auth_headers, application, monkeypatch):
        monkeypatch.setattr(settings, "FREE_PLAN_APPLICATION_LIMIT", 1)

        response = client.post(
            f"{API}/import",
            json={"rows": [{"company": "Acme", "title": "Engineer"}]},
            headers=auth_headers,
        )

        assert response.status_code == 403
        assert response.json()["error"]["code"] == "PLAN_LIMIT"


class TestCsvUploadImport:
    """Tests for POST /applications/import/csv."""

    def _upload(self, client, headers, content: bytes):
        return client.post(
            f"{API}/import/csv",
            files={"file": ("applications.csv", content, "text/csv")},
            headers=headers,
        )

    def test_upload(self, client, auth_headers):
        content = (
            b"company,title,stage,salaryMin,tags\n"
            b"Acme,Engineer,INTERVIEW,120000,remote|senior\n"
            b"Globex,SRE,,,\n"
        )

        response = self._upload(client, auth_headers, content)

        assert response.json()["created"] == 2
        items = {a["company"]: a for a in client.get(API, headers=auth_headers).json()["items"]}
        assert items["Acme"]["stage"] == "INTERVIEW"
        assert items["Acme"]["tags"] == ["remote", "senior"]
        assert items["Globex"]["stage"] == "SAVED"

    def test_blank_cells_use_defaults(self, client, auth_headers):
        content = (
            b"company,title,stage,location\n"
            b"Acme,Engineer,,Berlin\n"
            b"Beta,Dev,APPLIED,\n"
        )

        response = self._upload(client, auth_headers, content)

        body = response.json()
        assert body["created"] == 2
        assert body["failures"] == []
        items = {a["company"]: a for a in client.get(API, headers=auth_headers).json()["items"]}
        assert (items["Acme"]["stage"], items["Acme"]["location"]) == ("SAVED", "Berlin")
        assert (items["Beta"]["stage"], items["Beta"]["location"]) == ("APPLIED", None)

    def test_header_only_file(self, client, auth_headers):
        response = self._upload(client, auth_headers, b"company,title\n")

        assert response.status_code == 400
        assert "file" in response.json()["error"]["details"]

    def test_exported_file_imports(self, client, auth_headers, application, other_headers, db):
        # Arrange
        make_pro(db)
        exported = client.get(f"{API}/export", headers=auth_headers).content

        # Act
        response = self._upload(client, other_headers, exported)

        # Assert
        assert response.json()["created"] == 1
        imported = client.get(API, headers=other_headers).json()["items"][0]
        assert (imported["company"], imported["title"], imported["stage"]) == ("Acme", "Backend Engineer", "APPLIED")


def test_empty_upload(client, auth_headers):
    response = client.post(
        f"{API}/import/csv",
        files={"file": ("applications.csv", b"", "text/csv")},
        headers=auth_headers,
    )

    assert response.status_code == 400
