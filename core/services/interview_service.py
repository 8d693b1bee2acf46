# =============================================================================
# core/services/interview_service.py - Interview Business Logic
# =============================================================================
# Interviews always belong to a live application owned by the same user.
# Rescheduling clears reminder_sent so a new reminder goes out.
# =============================================================================

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.dependencies import RequestContext
from app.exceptions import NotFoundError, ValidationFailedError
from core.models.common import AuditAction
from core.models.interview import InterviewCreate, InterviewUpdate
from core.services.application_service import ApplicationService
from core.services.audit_service import AuditService
from core.tables import Interview, JobApplication
from lib.database import utcnow

logger = logging.getLogger(__name__)

ENTITY = "Interview"


class InterviewService:
    """Service for interview scheduling operations."""

    @staticmethod
    def get_owned(db: Session, user_id: str, interview_id: str) -> Interview:
        interview = db.scalar(
            select(Interview).where(
                Interview.id == interview_id,
                Interview.user_id == user_id,
                Interview.deleted_at.is_(None),
            )
        )
        if interview is None:
            raise NotFoundError("Interview")
        return interview

    @staticmethod
    def list_interviews(
        db: Session,
        user_id: str,
        application_id: str | None = None,
        upcoming: bool = False,
        result: str | None = None,
    ) -> list[Interview]:
        """Interviews on live applications, soonest first."""
        stmt = (
            select(Interview)
            .join(JobApplication, Interview.application_id == JobApplication.id)
            .where(
                Interview.user_id == user_id,
                Interview.deleted_at.is_(None),
                JobApplication.deleted_at.is_(None),
            )
        )
        if application_id:
            stmt = stmt.where(Interview.application_id == application_id)
        if upcoming:
            stmt = stmt.where(Interview.scheduled_at >= utcnow())
        if result:
            stmt = stmt.where(Interview.result == result)
        return list(db.scalars(stmt.order_by(Interview.scheduled_at.asc())).all())

    @staticmethod
    def create_interview(
        db: Session,
        user_id: str,
        data: InterviewCreate,
        ctx: RequestContext | None = None,
    ) -> Interview:
        app = ApplicationService.get_owned(db, user_id, data.application_id)
        interview = Interview(user_id=user_id, **data.model_dump())
        db.add(interview)
        db.commit()
        db.refresh(interview)

        logger.info(f"Scheduled interview {interview.id} for application {app.id}")
        AuditService.record(
            db, user_id, AuditAction.INTERVIEW_CREATED,
            entity_type=ENTITY, entity_id=app.id,
            meta={"interview_id": interview.id, "type": interview.type},
            ctx=ctx,
        )
        return interview

    @staticmethod
    def update_interview(
        db: Session,
        user_id: str,
        interview_id: str,
        data: InterviewUpdate,
        ctx: RequestContext | None = None,
    ) -> Interview:
        interview = InterviewService.get_owned(db, user_id, interview_id)
        changes = data.model_dump(exclude_unset=True)

        for required in ("scheduled_at", "duration", "type", "result"):
            if required in changes and changes[required] is None:
                raise ValidationFailedError("Invalid input", {required: ["Field cannot be empty"]})
        if "interviewers" in changes:
            changes["interviewers"] = changes["interviewers"] or []

        if "scheduled_at" in changes and changes["scheduled_at"] != interview.scheduled_at:
            changes.setdefault("reminder_sent", False)
        if changes.get("reminder_sent") is None:
            changes.pop("reminder_sent", None)

        for field, value in changes.items():
            setattr(interview, field, value)
        interview.updated_at = utcnow()
        db.commit()
        db.refresh(interview)

        AuditService.record(
            db, user_id, AuditAction.INTERVIEW_UPDATED,
            entity_type=ENTITY, entity_id=interview.application_id,
            meta={"interview_id": interview.id, "fields": sorted(changes.keys())},
            ctx=ctx,
        )
        return interview

    @staticmethod
    def delete_interview(
        db: Session,
        user_id: str,
        interview_id: str,
        ctx: RequestContext | None = None,
    ) -> None:
        interview = InterviewService.get_owned(db, user_id, interview_id)
        interview.soft_delete()
        db.commit()

        AuditService.record(
            db, user_id, AuditAction.INTERVIEW_DELETED,
            entity_type=ENTITY, entity_id=interview.application_id,
            meta={"interview_id": interview.id},
            ctx=ctx,
        )
