# =============================================================================
# core/services/document_service.py - Document Library Business Logic
# =============================================================================
# Resumes, cover letters and portfolios. At most one document per type is
# the default; marking one as default clears the flag on its siblings.
# =============================================================================

import logging

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from app.dependencies import RequestContext
from app.exceptions import NotFoundError, ValidationFailedError
from core.models.common import AuditAction
from core.models.document import DocumentCreate, DocumentUpdate
from core.services.application_service import ApplicationService
from core.services.audit_service import AuditService
from core.tables import Document
from lib.database import utcnow

logger = logging.getLogger(__name__)

ENTITY = "Document"


class DocumentService:
    """Service for the user's document library."""

    @staticmethod
    def get_owned(db: Session, user_id: str, document_id: str) -> Document:
        document = db.scalar(
            select(Document).where(
                Document.id == document_id,
                Document.user_id == user_id,
                Document.deleted_at.is_(None),
            )
        )
        if document is None:
            raise NotFoundError("Document")
        return document

    @staticmethod
    def list_documents(
        db: Session,
        user_id: str,
        doc_type: str | None = None,
        application_id: str | None = None,
    ) -> list[Document]:
        """Grouped by type, default first, then most recently updated."""
        stmt = select(Document).where(Document.user_id == user_id, Document.deleted_at.is_(None))
        if doc_type:
            stmt = stmt.where(Document.type == doc_type)
        if application_id:
            stmt = stmt.where(Document.application_id == application_id)
        stmt = stmt.order_by(Document.type.asc(), Document.is_default.desc(), Document.updated_at.desc())
        return list(db.scalars(stmt).all())

    @staticmethod
    def _clear_default(db: Session, user_id: str, doc_type: str, keep_id: str | None = None) -> None:
        stmt = update(Document).where(
            Document.user_id == user_id,
            Document.type == doc_type,
            Document.is_default.is_(True),
        )
        if keep_id:
            stmt = stmt.where(Document.id != keep_id)
        db.execute(stmt.values(is_default=False).execution_options(synchronize_session=False))

    @staticmethod
    def create_document(
        db: Session,
        user_id: str,
        data: DocumentCreate,
        ctx: RequestContext | None = None,
    ) -> Document:
        if data.application_id:
            ApplicationService.get_owned(db, user_id, data.application_id)

        if data.is_default:
            DocumentService._clear_default(db, user_id, data.type)

        document = Document(user_id=user_id, **data.model_dump())
        db.add(document)
        db.commit()
        db.refresh(document)

        AuditService.record(
            db, user_id, AuditAction.DOCUMENT_CREATED,
            entity_type=ENTITY, entity_id=document.id,
            meta={"name": document.name, "type": document.type},
            ctx=ctx,
        )
        return document

    @staticmethod
    def update_document(
        db: Session,
        user_id: str,
        document_id: str,
        data: DocumentUpdate,
        ctx: RequestContext | None = None,
    ) -> Document:
        document = DocumentService.get_owned(db, user_id, document_id)
        changes = data.model_dump(exclude_unset=True)
        for required in ("name", "type", "file_name", "is_default"):
            if required in changes and changes[required] is None:
                raise ValidationFailedError("Invalid input", {required: ["Field cannot be empty"]})
        if changes.get("application_id"):
            ApplicationService.get_owned(db, user_id, changes["application_id"])

        for field, value in changes.items():
            setattr(document, field, value)

        if document.is_default:
            DocumentService._clear_default(db, user_id, document.type, keep_id=document.id)

        document.updated_at = utcnow()
        db.commit()
        db.refresh(document)

        AuditService.record(
            db, user_id, AuditAction.DOCUMENT_UPDATED,
            entity_type=ENTITY, entity_id=document.id,
            meta={"fields": sorted(changes.keys())},
            ctx=ctx,
        )
        return document

    @staticmethod
    def delete_document(db: Session, user_id: str, document_id: str, ctx: RequestContext | None = None) -> None:
        document = DocumentService.get_owned(db, user_id, document_id)
        document.soft_delete()
        document.is_default = False
        db.commit()

        AuditService.record(
            db, user_id, AuditAction.DOCUMENT_DELETED,
            entity_type=ENTITY, entity_id=document.id, meta={"name": document.name}, ctx=ctx,
        )
