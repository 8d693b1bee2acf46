# =============================================================================
# core/services/label_service.py - Label Business Logic
# =============================================================================
# Label names are unique per user, compared case-insensitively.
# =============================================================================

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.dependencies import RequestContext
from app.exceptions import ConflictError, NotFoundError
from core.models.common import AuditAction
from core.models.label import LabelCreate, LabelUpdate
from core.services.audit_service import AuditService
from core.tables import Label
from lib.database import utcnow

ENTITY = "Label"


class LabelService:

    @staticmethod
    def get_owned(db: Session, user_id: str, label_id: str) -> Label:
        label = db.scalar(
            select(Label).where(Label.id == label_id, Label.user_id == user_id, Label.deleted_at.is_(None))
        )
        if label is None:
            raise NotFoundError("Label")
        return label

    @staticmethod
    def list_labels(db: Session, user_id: str) -> list[Label]:
        return list(db.scalars(
            select(Label)
            .where(Label.user_id == user_id, Label.deleted_at.is_(None))
            .order_by(Label.name.asc())
        ).all())

    @staticmethod
    def _ensure_unique(db: Session, user_id: str, name: str, exclude_id: str | None = None) -> None:
        stmt = select(Label.id).where(
            Label.user_id == user_id,
            Label.deleted_at.is_(None),
            func.lower(Label.name) == name.lower(),
        )
        if exclude_id:
            stmt = stmt.where(Label.id != exclude_id)
        if db.scalar(stmt) is not None:
            raise ConflictError(f"A label named '{name}' already exists", code="DUPLICATE")

    @staticmethod
    def create_label(db: Session, user_id: str, data: LabelCreate, ctx: RequestContext | None = None) -> Label:
        LabelService._ensure_unique(db, user_id, data.name)
        label = Label(user_id=user_id, name=data.name, color=data.color)
        db.add(label)
        db.commit()
        db.refresh(label)

        AuditService.record(
            db, user_id, AuditAction.LABEL_CREATED,
            entity_type=ENTITY, entity_id=label.id, meta={"name": label.name}, ctx=ctx,
        )
        return label

    @staticmethod
    def update_label(
        db: Session,
        user_id: str,
        label_id: str,
        data: LabelUpdate,
        ctx: RequestContext | None = None,
    ) -> Label:
        label = LabelService.get_owned(db, user_id, label_id)
        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        if "name" in changes:
            LabelService._ensure_unique(db, user_id, changes["name"], exclude_id=label.id)

        for field, value in changes.items():
            setattr(label, field, value)
        label.updated_at = utcnow()
        db.commit()
        db.refresh(label)

        AuditService.record(
            db, user_id, AuditAction.LABEL_UPDATED,
            entity_type=ENTITY, entity_id=label.id, meta={"fields": sorted(changes.keys())}, ctx=ctx,
        )
        return label

    @staticmethod
    def delete_label(db: Session, user_id: str, label_id: str, ctx: RequestContext | None = None) -> None:
        label = LabelService.get_owned(db, user_id, label_id)
        label.soft_delete()
        db.commit()

        AuditService.record(
            db, user_id, AuditAction.LABEL_DELETED,
            entity_type=ENTITY, entity_id=label.id, meta={"name": label.name}, ctx=ctx,
        )
