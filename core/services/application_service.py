# =============================================================================
# core/services/application_service.py - Job Application Business Logic
# =============================================================================
# CRUD, search, bulk operations, tag stats and the per-application timeline.
#
# Every query is scoped by user_id and excludes soft-deleted rows. Rows
# owned by another user behave exactly like missing rows (404).
# =============================================================================

import logging
from collections import Counter
from typing import Any

from sqlalchemy import Select, asc, desc, func, or_, select
from sqlalchemy.orm import Session

from app.dependencies import RequestContext
from app.exceptions import NotFoundError, ValidationFailedError
from core.models.application import (
    ApplicationCreate,
    ApplicationListParams,
    ApplicationUpdate,
    MAX_TAGS,
    BulkOperationRequest,
    BulkOperationResult,
    TagCount,
)
from core.models.common import AuditAction, Plan
from core.services.audit_service import AuditService
from core.services.plan_service import PlanService
from core.tables import (
    AuditLog,
    Contact,
    Interview,
    JobApplication,
    Note,
    Task,
)
from lib.database import utcnow
from lib.utils import escape_like, normalize_tags, strip_control_chars, truncate

logger = logging.getLogger(__name__)

ENTITY = "JobApplication"

TIMELINE_AUDIT_LIMIT = 50
TIMELINE_NOTE_LIMIT = 20
TIMELINE_NOTE_PREVIEW = 100


class ApplicationService:
    """
    Service for job application operations.

    Provides a clean interface between API routes and database.
    """

    # -------------------------------------------------------------------------
    # Lookup
    # -------------------------------------------------------------------------

    @staticmethod
    def get_owned(db: Session, user_id: str, application_id: str) -> JobApplication:
        """
        Fetch a live application owned by the user.

        Raises:
            NotFoundError: Missing, deleted, or owned by someone else
        """
        app = db.scalar(
            select(JobApplication).where(
                JobApplication.id == application_id,
                JobApplication.user_id == user_id,
                JobApplication.deleted_at.is_(None),
            )
        )
        if app is None:
            raise NotFoundError("Application")
        return app

    # -------------------------------------------------------------------------
    # CRUD
    # -------------------------------------------------------------------------

    @staticmethod
    def create_application(
        db: Session,
        user_id: str,
        plan: Plan,
        data: ApplicationCreate,
        ctx: RequestContext | None = None,
        audit_meta: dict[str, Any] | None = None,
    ) -> JobApplication:
        """
        Create an application after checking the plan limit.

        Raises:
            PlanLimitError: FREE plan at its cap
        """
        PlanService.ensure_can_create_application(db, user_id, plan)

        values = data.model_dump()
        values["tags"] = values.get("tags") or []
        app = JobApplication(user_id=user_id, **values)
        db.add(app)
        db.commit()
        db.refresh(app)

        logger.info(f"Created application {app.id} for user {user_id}")
        AuditService.record(
            db, user_id, AuditAction.APPLICATION_CREATED,
            entity_type=ENTITY, entity_id=app.id,
            meta=audit_meta or {"company": app.company, "title": app.title},
            ctx=ctx,
        )
        return app

    @staticmethod
    def update_application(
        db: Session,
        user_id: str,
        application_id: str,
        data: ApplicationUpdate,
        ctx: RequestContext | None = None,
    ) -> JobApplication:
        """
        Apply a partial update.

        The salary range is re-checked against stored values, so sending only
        salary_min can still fail.
        """
        app = ApplicationService.get_owned(db, user_id, application_id)
        changes = data.model_dump(exclude_unset=True)

        for required in ("company", "title", "stage", "priority"):
            if required in changes and changes[required] is None:
                raise ValidationFailedError("Invalid input", {required: ["Field cannot be empty"]})

        salary_min = changes.get("salary_min", app.salary_min)
        salary_max = changes.get("salary_max", app.salary_max)
        if salary_min is not None and salary_max is not None and salary_min > salary_max:
            raise ValidationFailedError(
                "Invalid input",
                {"salary_min": ["salary_min must be less than or equal to salary_max"]},
            )

        if "tags" in changes:
            changes["tags"] = changes["tags"] or []

        previous_stage = app.stage
        for field, value in changes.items():
            setattr(app, field, value)
        app.updated_at = utcnow()
        db.commit()
        db.refresh(app)

        meta: dict[str, Any] = {"fields": sorted(changes.keys())}
        if app.stage != previous_stage:
            meta["stage"] = {"from": previous_stage, "to": app.stage}
        AuditService.record(
            db, user_id, AuditAction.APPLICATION_UPDATED,
            entity_type=ENTITY, entity_id=app.id, meta=meta, ctx=ctx,
        )
        return app

    @staticmethod
    def delete_application(
        db: Session,
        user_id: str,
        application_id: str,
        ctx: RequestContext | None = None,
    ) -> None:
        """Soft delete."""
        app = ApplicationService.get_owned(db, user_id, application_id)
        app.soft_delete()
        db.commit()

        logger.info(f"Deleted application {application_id} for user {user_id}")
        AuditService.record(
            db, user_id, AuditAction.APPLICATION_DELETED,
            entity_type=ENTITY, entity_id=application_id,
            meta={"company": app.company, "title": app.title},
            ctx=ctx,
        )

    # -------------------------------------------------------------------------
    # List / Search
    # -------------------------------------------------------------------------

    @staticmethod
    def _matching_tag_ids(db: Session, user_id: str, wanted: list[str]) -> list[str]:
        # Tags are a JSON column; any-match filtering runs in Python for portability
        rows = db.execute(
            select(JobApplication.id, JobApplication.tags).where(
                JobApplication.user_id == user_id,
                JobApplication.deleted_at.is_(None),
            )
        ).all()
        wanted_set = set(wanted)
        return [
            row.id for row in rows
            if wanted_set.intersection(t.lower() for t in (row.tags or []))
        ]

    @staticmethod
    def filtered_statement(db: Session, user_id: str, params: ApplicationListParams) -> Select:
        """Live applications matching q, stage, tags and the applied-date range."""
        stmt = select(JobApplication).where(
            JobApplication.user_id == user_id,
            JobApplication.deleted_at.is_(None),
        )

        if params.q:
            term = strip_control_chars(params.q).strip()
            if term:
                pattern = f"%{escape_like(term)}%"
                stmt = stmt.where(
                    or_(
                        JobApplication.company.ilike(pattern, escape="\\"),
                        JobApplication.title.ilike(pattern, escape="\\"),
                        JobApplication.location.ilike(pattern, escape="\\"),
                    )
                )

        if params.stage:
            stmt = stmt.where(JobApplication.stage == params.stage)

        if params.from_date:
            stmt = stmt.where(JobApplication.applied_date >= params.from_date)
        if params.to_date:
            stmt = stmt.where(JobApplication.applied_date <= params.to_date)

        tags = params.tag_list
        if tags:
            ids = ApplicationService._matching_tag_ids(db, user_id, tags)
            stmt = stmt.where(JobApplication.id.in_(ids))
        return stmt

    @staticmethod
    def list_applications(
        db: Session,
        user_id: str,
        params: ApplicationListParams,
    ) -> tuple[list[JobApplication], int]:
        """
        Filtered, sorted, paginated list.

        Returns:
            Tuple of (page items, total matching)
        """
        stmt = ApplicationService.filtered_statement(db, user_id, params)
        total = db.scalar(select(func.count()).select_from(stmt.subquery())) or 0

        sort_column = getattr(JobApplication, params.sort_by)
        direction = asc if params.sort_dir == "asc" else desc
        stmt = (
            stmt.order_by(direction(sort_column), desc(JobApplication.id))
            .offset((params.page - 1) * params.page_size)
            .limit(params.page_size)
        )
        return list(db.scalars(stmt).all()), total

    # -------------------------------------------------------------------------
    # Bulk
    # -------------------------------------------------------------------------

    @staticmethod
    def bulk_operation(
        db: Session,
        user_id: str,
        request: BulkOperationRequest,
        ctx: RequestContext | None = None,
    ) -> BulkOperationResult:
        """
        Update or soft-delete many applications at once.

        Ids that don't resolve to a live, owned application are counted as
        failed, as are rows whose tags would pass MAX_TAGS; the rest are
        processed in one transaction.
        """
        ids = list(dict.fromkeys(request.ids))
        apps = db.scalars(
            select(JobApplication).where(
                JobApplication.id.in_(ids),
                JobApplication.user_id == user_id,
                JobApplication.deleted_at.is_(None),
            )
        ).all()
        found = {app.id for app in apps}
        missing = [i for i in ids if i not in found]
        errors = [f"Application {i} not found" for i in missing]

        if request.operation == "delete":
            for app in apps:
                app.soft_delete()
            db.commit()
            for app in apps:
                AuditService.record(
                    db, user_id, AuditAction.APPLICATION_DELETED,
                    entity_type=ENTITY, entity_id=app.id, meta={"via": "bulk"}, ctx=ctx,
                )
            return BulkOperationResult(
                success=not missing, deleted=len(apps), failed=len(missing), errors=errors,
            )

        data = request.data
        now = utcnow()
        updated: list[JobApplication] = []
        for app in apps:
            tags = None
            if data.tags is not None:
                tags = list(data.tags)
            elif data.add_tags or data.remove_tags:
                current = normalize_tags(app.tags or [])
                for tag in data.add_tags or []:
                    if tag not in current:
                        current.append(tag)
                removed = set(data.remove_tags or [])
                tags = [t for t in current if t not in removed]
                # Same cap as create and PATCH; the row is left untouched
                if len(tags) > MAX_TAGS:
                    errors.append(f"Application {app.id} would exceed {MAX_TAGS} tags")
                    continue

            if data.stage is not None:
                app.stage = data.stage
            if data.priority is not None:
                app.priority = data.priority
            if tags is not None:
                app.tags = tags
            app.updated_at = now
            updated.append(app)
        db.commit()

        failed = len(ids) - len(updated)
        fields = sorted(data.model_dump(exclude_none=True).keys())
        for app in updated:
            AuditService.record(
                db, user_id, AuditAction.APPLICATION_UPDATED,
                entity_type=ENTITY, entity_id=app.id,
                meta={"via": "bulk", "fields": fields}, ctx=ctx,
            )
        return BulkOperationResult(
            success=not failed, updated=len(updated), failed=failed, errors=errors,
        )

    # -------------------------------------------------------------------------
    # Tags
    # -------------------------------------------------------------------------

    @staticmethod
    def tag_counts(db: Session, user_id: str) -> list[TagCount]:
        """Distinct tags across live applications, most used first."""
        rows = db.scalars(
            select(JobApplication.tags).where(
                JobApplication.user_id == user_id,
                JobApplication.deleted_at.is_(None),
            )
        ).all()
        counter: Counter[str] = Counter()
        for tags in rows:
            for tag in normalize_tags(tags or []):
                counter[tag] += 1
        return [
            TagCount(tag=tag, count=count)
            for tag, count in sorted(counter.items(), key=lambda item: (-item[1], item[0]))
        ]

    # -------------------------------------------------------------------------
    # Timeline
    # -------------------------------------------------------------------------

    @staticmethod
    def timeline(db: Session, user_id: str, application_id: str) -> list[dict[str, Any]]:
        """
        Merge everything that happened to an application into one feed.

        Sources: the creation itself, audit entries, notes, tasks, interviews
        and contacts. Sorted newest first.
        """
        app = ApplicationService.get_owned(db, user_id, application_id)
        events: list[dict[str, Any]] = [
            {
                "id": f"created-{app.id}",
                "type": "created",
                "title": "Application created",
                "description": f"{app.title} at {app.company}",
                "date": app.created_at,
                "icon": "plus",
                "color": "green",
            }
        ]

        audit_rows = db.scalars(
            select(AuditLog)
            .where(AuditLog.user_id == user_id, AuditLog.entity_id == application_id)
            .order_by(AuditLog.created_at.desc())
            .limit(TIMELINE_AUDIT_LIMIT)
        ).all()
        for entry in audit_rows:
            if entry.action == AuditAction.APPLICATION_CREATED.value:
                continue
            icon, color = _audit_style(entry.action)
            events.append({
                "id": f"audit-{entry.id}",
                "type": "audit",
                "title": entry.action.replace("_", " ").title(),
                "description": _describe_audit(entry.meta),
                "date": entry.created_at,
                "icon": icon,
                "color": color,
            })

        notes = db.scalars(
            select(Note)
            .where(Note.user_id == user_id, Note.application_id == application_id, Note.deleted_at.is_(None))
            .order_by(Note.created_at.desc())
            .limit(TIMELINE_NOTE_LIMIT)
        ).all()
        for note in notes:
            events.append({
                "id": f"note-{note.id}",
                "type": "note",
                "title": "Note added",
                "description": truncate(note.content, TIMELINE_NOTE_PREVIEW),
                "date": note.created_at,
                "icon": "message",
                "color": "gray",
            })

        tasks = db.scalars(
            select(Task).where(Task.user_id == user_id, Task.application_id == application_id, Task.deleted_at.is_(None))
        ).all()
        for task in tasks:
            events.append({
                "id": f"task-{task.id}",
                "type": "task",
                "title": "Task completed" if task.status == "DONE" else "Task created",
                "description": task.title,
                "date": task.updated_at if task.status == "DONE" else task.created_at,
                "icon": "check" if task.status == "DONE" else "clipboard",
                "color": "green" if task.status == "DONE" else "yellow",
            })

        interviews = db.scalars(
            select(Interview).where(
                Interview.user_id == user_id,
                Interview.application_id == application_id,
                Interview.deleted_at.is_(None),
            )
        ).all()
        for interview in interviews:
            events.append({
                "id": f"interview-{interview.id}",
                "type": "interview",
                "title": f"{interview.type.title()} interview",
                "description": f"Result: {interview.result.title()}",
                "date": interview.scheduled_at,
                "icon": "calendar",
                "color": "purple",
            })

        contacts = db.scalars(
            select(Contact).where(
                Contact.user_id == user_id,
                Contact.application_id == application_id,
                Contact.deleted_at.is_(None),
            )
        ).all()
        for contact in contacts:
            events.append({
                "id": f"contact-{contact.id}",
                "type": "contact",
                "title": "Contact added",
                "description": f"{contact.name}{f' ({contact.role})' if contact.role else ''}",
                "date": contact.created_at,
                "icon": "user",
                "color": "blue",
            })

        events.sort(key=lambda e: e["date"], reverse=True)
        return events


def _audit_style(action: str) -> tuple[str, str]:
    if action.endswith("_CREATED"):
        return "plus", "green"
    if action.endswith("_UPDATED"):
        return "edit", "blue"
    if action.endswith("_DELETED"):
        return "trash", "red"
    return "activity", "gray"


def _describe_audit(meta: dict[str, Any] | None) -> str:
    if not meta:
        return ""
    stage = meta.get("stage")
    if isinstance(stage, dict):
        return f"Stage changed from {stage.get('from')} to {stage.get('to')}"
    fields = meta.get("fields")
    if fields:
        return f"Updated {', '.join(fields)}"
    return ""
