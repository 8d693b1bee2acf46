# =============================================================================
# core/services/email_preferences_service.py - Notification Preferences
# =============================================================================
# One row per user, created lazily with defaults on first read or write.
# =============================================================================

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.dependencies import RequestContext
from core.models.common import AuditAction
from core.models.email_preferences import EmailPreferencesUpdate
from core.services.audit_service import AuditService
from core.tables import EmailPreferences
from lib.database import utcnow


class EmailPreferencesService:

    @staticmethod
    def get_or_create(db: Session, user_id: str) -> EmailPreferences:
        prefs = db.scalar(select(EmailPreferences).where(EmailPreferences.user_id == user_id))
        if prefs is None:
            prefs = EmailPreferences(user_id=user_id)
            db.add(prefs)
            db.commit()
            db.refresh(prefs)
        return prefs

    @staticmethod
    def update(
        db: Session,
        user_id: str,
        data: EmailPreferencesUpdate,
        ctx: RequestContext | None = None,
    ) -> EmailPreferences:
        """Apply a partial update; null values are ignored."""
        prefs = EmailPreferencesService.get_or_create(db, user_id)
        changes = data.model_dump(exclude_unset=True, exclude_none=True)

        for field, value in changes.items():
            setattr(prefs, field, value)
        prefs.updated_at = utcnow()
        db.commit()
        db.refresh(prefs)

        AuditService.record(
            db, user_id, AuditAction.EMAIL_PREFERENCES_UPDATED,
            entity_type="EmailPreferences", entity_id=prefs.id,
            meta={"fields": sorted(changes.keys())},
            ctx=ctx,
        )
        return prefs
