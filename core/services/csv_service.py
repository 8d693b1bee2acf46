# =============================================================================
# core/services/csv_service.py - CSV Import / Export of Applications
# =============================================================================
# Export (PRO only) writes the filtered application list with camelCase
# headers. Import takes the same columns, from a JSON body or an uploaded
# CSV, in either camelCase or snake_case.
# =============================================================================

import io
import logging
from typing import Any

import pandas as pd
from pydantic import ValidationError
from sqlalchemy import desc
from sqlalchemy.orm import Session

from app.config import settings
from app.dependencies import RequestContext
from app.exceptions import PlanLimitError, ValidationFailedError
from core.models.application import (
    MAX_IMPORT_ROWS,
    ApplicationCreate,
    ApplicationListParams,
    ImportFailure,
    ImportResult,
)
from core.models.common import AuditAction, Plan
from core.services.application_service import ApplicationService
from core.services.audit_service import AuditService
from core.services.plan_service import PlanService
from core.tables import JobApplication
from lib.utils import iso

logger = logging.getLogger(__name__)

TAG_SEPARATOR = "|"

# CSV header -> JobApplication attribute
EXPORT_COLUMNS: dict[str, str] = {
    "company": "company",
    "title": "title",
    "stage": "stage",
    "location": "location",
    "url": "url",
    "salaryMin": "salary_min",
    "salaryMax": "salary_max",
    "appliedDate": "applied_date",
    "source": "source",
    "tags": "tags",
    "createdAt": "created_at",
    "updatedAt": "updated_at",
}

IMPORT_KEY_ALIASES: dict[str, str] = {
    "salaryMin": "salary_min",
    "salaryMax": "salary_max",
    "salaryCurrency": "salary_currency",
    "appliedDate": "applied_date",
    "remoteType": "remote_type",
    "jobType": "job_type",
    "nextFollowUp": "next_follow_up",
    "rejectionReason": "rejection_reason",
}

# Server-managed columns that an exported file carries but import must skip
IGNORED_IMPORT_KEYS = {"id", "createdAt", "updatedAt", "created_at", "updated_at", "deleted_at"}


def _format_cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, list):
        return TAG_SEPARATOR.join(value)
    if hasattr(value, "isoformat"):
        return iso(value)
    return str(value)


def normalize_import_row(row: dict[str, Any]) -> dict[str, Any]:
    """Map camelCase keys to field names and split piped tag strings."""
    normalized: dict[str, Any] = {}
    for key, value in row.items():
        key = str(key).strip()
        if key in IGNORED_IMPORT_KEYS:
            continue
        normalized[IMPORT_KEY_ALIASES.get(key, key)] = value

    tags = normalized.get("tags")
    if isinstance(tags, str):
        normalized["tags"] = [t for t in (part.strip() for part in tags.split(TAG_SEPARATOR)) if t]
    if isinstance(normalized.get("stage"), str):
        stage = normalized.pop("stage").strip().upper()
        if stage:
            normalized["stage"] = stage
    return normalized


def _error_details(error: ValidationError) -> dict[str, list[str]]:
    details: dict[str, list[str]] = {}
    for item in error.errors():
        field = ".".join(str(part) for part in item["loc"]) or "row"
        details.setdefault(field, []).append(item["msg"])
    return details


class CsvService:
    """Service for bulk moving applications in and out as CSV."""

    @staticmethod
    def export_csv(
        db: Session,
        user_id: str,
        plan: Plan,
        params: ApplicationListParams,
        ctx: RequestContext | None = None,
    ) -> str:
        """
        Render the user's (filtered) applications as CSV text.

        Raises:
            PlanRequiredError: Caller is on FREE
        """
        PlanService.require_pro(plan, "CSV export")

        stmt = ApplicationService.filtered_statement(db, user_id, params)
        apps = db.scalars(stmt.order_by(desc(JobApplication.updated_at))).all()

        records = [
            {header: _format_cell(getattr(app, attr)) for header, attr in EXPORT_COLUMNS.items()}
            for app in apps
        ]
        df = pd.DataFrame(records, columns=list(EXPORT_COLUMNS.keys()))
        content = df.to_csv(index=False)

        logger.info(f"Exported {len(apps)} applications for user {user_id}")
        AuditService.record(
            db, user_id, AuditAction.EXPORT_CSV,
            entity_type="JobApplication", meta={"count": len(apps)}, ctx=ctx,
        )
        return content

    @staticmethod
    def parse_csv(content: bytes) -> list[dict[str, Any]]:
        """
        Read an uploaded CSV into row dicts (all values as strings).

        Raises:
            ValidationFailedError: Unreadable, empty or oversized file
        """
        try:
            df = pd.read_csv(
                io.BytesIO(content),
                dtype=str,
                keep_default_na=False,
                skipinitialspace=True,
                encoding="utf-8-sig",
            )
        except (pd.errors.EmptyDataError, pd.errors.ParserError, UnicodeDecodeError) as e:
            raise ValidationFailedError("Could not read CSV file", {"file": [str(e)]})

        if df.empty:
            raise ValidationFailedError("CSV file has no rows", {"file": ["File contains no data rows"]})
        if len(df) > MAX_IMPORT_ROWS:
            raise ValidationFailedError(
                f"At most {MAX_IMPORT_ROWS} rows can be imported at once",
                {"rows": [f"Got {len(df)} rows"]},
            )

        return df.to_dict(orient="records")

    @staticmethod
    def import_rows(
        db: Session,
        user_id: str,
        plan: Plan,
        rows: list[dict[str, Any]],
        ctx: RequestContext | None = None,
    ) -> ImportResult:
        """
        Create applications from rows, skipping invalid ones.

        FREE users only get as many rows as fit under their cap; the rest are
        dropped and `truncated` is set.

        Raises:
            PlanLimitError: FREE user with no room left at all
        """
        if len(rows) > MAX_IMPORT_ROWS:
            raise ValidationFailedError(
                f"At most {MAX_IMPORT_ROWS} rows can be imported at once",
                {"rows": [f"Got {len(rows)} rows"]},
            )

        room = PlanService.remaining_application_slots(db, user_id, plan)
        if room is not None and room <= 0:
            raise PlanLimitError(settings.FREE_PLAN_APPLICATION_LIMIT)

        accepted = rows if room is None else rows[:room]
        failures: list[ImportFailure] = []
        created = 0

        for index, raw in enumerate(accepted, start=1):
            try:
                data = ApplicationCreate.model_validate(normalize_import_row(raw))
            except ValidationError as e:
                failures.append(ImportFailure(row=index, errors=_error_details(e)))
                continue
            values = data.model_dump()
            values["tags"] = values.get("tags") or []
            db.add(JobApplication(user_id=user_id, **values))
            created += 1

        db.commit()
        logger.info(f"Imported {created}/{len(rows)} applications for user {user_id}")

        AuditService.record(
            db, user_id, AuditAction.APPLICATION_CREATED,
            entity_type="JobApplication",
            meta={
                "via": "csv_import",
                "requested": len(rows),
                "accepted": len(accepted),
                "created": created,
                "failed": len(failures),
            },
            ctx=ctx,
        )
        return ImportResult(
            ok=True,
            created=created,
            truncated=len(accepted) < len(rows),
            failures=failures,
        )
