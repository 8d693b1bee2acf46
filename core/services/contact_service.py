# =============================================================================
# core/services/contact_service.py - Contact Business Logic
# =============================================================================

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.dependencies import RequestContext
from app.exceptions import NotFoundError, ValidationFailedError
from core.models.common import AuditAction
from core.models.contact import ContactCreate, ContactUpdate
from core.services.application_service import ApplicationService
from core.services.audit_service import AuditService
from core.tables import Contact
from lib.database import utcnow

ENTITY = "Contact"


class ContactService:
    """People met during the search, optionally tied to an application."""

    @staticmethod
    def get_owned(db: Session, user_id: str, contact_id: str) -> Contact:
        contact = db.scalar(
            select(Contact).where(Contact.id == contact_id, Contact.user_id == user_id, Contact.deleted_at.is_(None))
        )
        if contact is None:
            raise NotFoundError("Contact")
        return contact

    @staticmethod
    def list_contacts(db: Session, user_id: str, application_id: str | None = None) -> list[Contact]:
        stmt = select(Contact).where(Contact.user_id == user_id, Contact.deleted_at.is_(None))
        if application_id:
            ApplicationService.get_owned(db, user_id, application_id)
            stmt = stmt.where(Contact.application_id == application_id)
        return list(db.scalars(stmt.order_by(Contact.created_at.desc())).all())

    @staticmethod
    def create_contact(
        db: Session,
        user_id: str,
        data: ContactCreate,
        ctx: RequestContext | None = None,
    ) -> Contact:
        if data.application_id:
            ApplicationService.get_owned(db, user_id, data.application_id)

        contact = Contact(user_id=user_id, **data.model_dump())
        db.add(contact)
        db.commit()
        db.refresh(contact)

        AuditService.record(
            db, user_id, AuditAction.CONTACT_CREATED,
            entity_type=ENTITY, entity_id=contact.application_id or contact.id,
            meta={"contact_id": contact.id, "name": contact.name},
            ctx=ctx,
        )
        return contact

    @staticmethod
    def update_contact(
        db: Session,
        user_id: str,
        contact_id: str,
        data: ContactUpdate,
        ctx: RequestContext | None = None,
    ) -> Contact:
        contact = ContactService.get_owned(db, user_id, contact_id)
        changes = data.model_dump(exclude_unset=True)
        if "name" in changes and changes["name"] is None:
            raise ValidationFailedError("Invalid input", {"name": ["Field cannot be empty"]})

        for field, value in changes.items():
            setattr(contact, field, value)
        contact.updated_at = utcnow()
        db.commit()
        db.refresh(contact)

        AuditService.record(
            db, user_id, AuditAction.CONTACT_UPDATED,
            entity_type=ENTITY, entity_id=contact.application_id or contact.id,
            meta={"contact_id": contact.id, "fields": sorted(changes.keys())},
            ctx=ctx,
        )
        return contact

    @staticmethod
    def delete_contact(db: Session, user_id: str, contact_id: str, ctx: RequestContext | None = None) -> None:
        contact = ContactService.get_owned(db, user_id, contact_id)
        contact.soft_delete()
        db.commit()

        AuditService.record(
            db, user_id, AuditAction.CONTACT_DELETED,
            entity_type=ENTITY, entity_id=contact.application_id or contact.id,
            meta={"contact_id": contact.id},
            ctx=ctx,
        )
