# =============================================================================
# core/services/note_service.py - Note Business Logic
# =============================================================================

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.dependencies import RequestContext
from app.exceptions import NotFoundError
from core.models.common import AuditAction
from core.models.note import NoteCreate, NoteUpdate
from core.services.application_service import ApplicationService
from core.services.audit_service import AuditService
from core.tables import Note
from lib.database import utcnow

ENTITY = "Note"


class NoteService:
    """Free-text notes on an application."""

    @staticmethod
    def get_owned(db: Session, user_id: str, note_id: str) -> Note:
        note = db.scalar(
            select(Note).where(Note.id == note_id, Note.user_id == user_id, Note.deleted_at.is_(None))
        )
        if note is None:
            raise NotFoundError("Note")
        return note

    @staticmethod
    def list_notes(db: Session, user_id: str, application_id: str) -> list[Note]:
        ApplicationService.get_owned(db, user_id, application_id)
        return list(db.scalars(
            select(Note)
            .where(Note.user_id == user_id, Note.application_id == application_id, Note.deleted_at.is_(None))
            .order_by(Note.created_at.desc())
        ).all())

    @staticmethod
    def create_note(db: Session, user_id: str, data: NoteCreate, ctx: RequestContext | None = None) -> Note:
        ApplicationService.get_owned(db, user_id, data.application_id)
        note = Note(user_id=user_id, application_id=data.application_id, content=data.content)
        db.add(note)
        db.commit()
        db.refresh(note)

        AuditService.record(
            db, user_id, AuditAction.NOTE_CREATED,
            entity_type=ENTITY, entity_id=note.application_id, meta={"note_id": note.id}, ctx=ctx,
        )
        return note

    @staticmethod
    def update_note(
        db: Session,
        user_id: str,
        note_id: str,
        data: NoteUpdate,
        ctx: RequestContext | None = None,
    ) -> Note:
        note = NoteService.get_owned(db, user_id, note_id)
        note.content = data.content
        note.updated_at = utcnow()
        db.commit()
        db.refresh(note)

        AuditService.record(
            db, user_id, AuditAction.NOTE_UPDATED,
            entity_type=ENTITY, entity_id=note.application_id, meta={"note_id": note.id}, ctx=ctx,
        )
        return note

    @staticmethod
    def delete_note(db: Session, user_id: str, note_id: str, ctx: RequestContext | None = None) -> None:
        note = NoteService.get_owned(db, user_id, note_id)
        note.soft_delete()
        db.commit()

        AuditService.record(
            db, user_id, AuditAction.NOTE_DELETED,
            entity_type=ENTITY, entity_id=note.application_id, meta={"note_id": note.id}, ctx=ctx,
        )
