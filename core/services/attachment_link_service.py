# =============================================================================
# core/services/attachment_link_service.py - Attachment Link Business Logic
# =============================================================================
# Labeled URLs (job posting, shared drive folder, take-home repo) on an
# application.
# =============================================================================

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.dependencies import RequestContext
from app.exceptions import NotFoundError, ValidationFailedError
from core.models.attachment_link import AttachmentLinkCreate, AttachmentLinkUpdate
from core.models.common import AuditAction
from core.services.application_service import ApplicationService
from core.services.audit_service import AuditService
from core.tables import AttachmentLink
from lib.database import utcnow

ENTITY = "AttachmentLink"


class AttachmentLinkService:

    @staticmethod
    def get_owned(db: Session, user_id: str, link_id: str) -> AttachmentLink:
        link = db.scalar(
            select(AttachmentLink).where(
                AttachmentLink.id == link_id,
                AttachmentLink.user_id == user_id,
                AttachmentLink.deleted_at.is_(None),
            )
        )
        if link is None:
            raise NotFoundError("Link")
        return link

    @staticmethod
    def list_links(db: Session, user_id: str, application_id: str) -> list[AttachmentLink]:
        ApplicationService.get_owned(db, user_id, application_id)
        return list(db.scalars(
            select(AttachmentLink)
            .where(
                AttachmentLink.user_id == user_id,
                AttachmentLink.application_id == application_id,
                AttachmentLink.deleted_at.is_(None),
            )
            .order_by(AttachmentLink.created_at.desc())
        ).all())

    @staticmethod
    def create_link(
        db: Session,
        user_id: str,
        data: AttachmentLinkCreate,
        ctx: RequestContext | None = None,
    ) -> AttachmentLink:
        ApplicationService.get_owned(db, user_id, data.application_id)
        link = AttachmentLink(user_id=user_id, **data.model_dump())
        db.add(link)
        db.commit()
        db.refresh(link)

        AuditService.record(
            db, user_id, AuditAction.LINK_CREATED,
            entity_type=ENTITY, entity_id=link.application_id,
            meta={"link_id": link.id, "label": link.label},
            ctx=ctx,
        )
        return link

    @staticmethod
    def update_link(
        db: Session,
        user_id: str,
        link_id: str,
        data: AttachmentLinkUpdate,
        ctx: RequestContext | None = None,
    ) -> AttachmentLink:
        link = AttachmentLinkService.get_owned(db, user_id, link_id)
        changes = data.model_dump(exclude_unset=True)
        for required in ("label", "url"):
            if required in changes and changes[required] is None:
                raise ValidationFailedError("Invalid input", {required: ["Field cannot be empty"]})

        for field, value in changes.items():
            setattr(link, field, value)
        link.updated_at = utcnow()
        db.commit()
        db.refresh(link)

        AuditService.record(
            db, user_id, AuditAction.LINK_UPDATED,
            entity_type=ENTITY, entity_id=link.application_id,
            meta={"link_id": link.id, "fields": sorted(changes.keys())},
            ctx=ctx,
        )
        return link

    @staticmethod
    def delete_link(db: Session, user_id: str, link_id: str, ctx: RequestContext | None = None) -> None:
        link = AttachmentLinkService.get_owned(db, user_id, link_id)
        link.soft_delete()
        db.commit()

        AuditService.record(
            db, user_id, AuditAction.LINK_DELETED,
            entity_type=ENTITY, entity_id=link.application_id, meta={"link_id": link.id}, ctx=ctx,
        )
