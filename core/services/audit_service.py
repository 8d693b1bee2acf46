# =============================================================================
# core/services/audit_service.py - Audit Log
# =============================================================================
# Records who did what to which entity. Audit writes are best effort: a
# failure is logged and rolled back, never surfaced to the caller.
# =============================================================================

import logging
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.dependencies import RequestContext
from core.models.common import AuditAction
from core.tables import AuditLog

logger = logging.getLogger(__name__)


class AuditService:
    """Service for audit log writes and reads."""

    @staticmethod
    def record(
        db: Session,
        user_id: str,
        action: AuditAction,
        entity_type: str | None = None,
        entity_id: str | None = None,
        meta: dict[str, Any] | None = None,
        ctx: RequestContext | None = None,
    ) -> None:
        """
        Append an audit entry and commit it.

        Call after the audited change has been committed.
        """
        entry = AuditLog(
            user_id=user_id,
            action=action.value,
            entity_type=entity_type,
            entity_id=entity_id,
            meta=meta,
            ip=ctx.ip if ctx else None,
            user_agent=ctx.user_agent if ctx else None,
        )
        try:
            db.add(entry)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to write audit entry {action.value} for user {user_id}: {e}")

    @staticmethod
    def list_entries(
        db: Session,
        user_id: str,
        page: int = 1,
        page_size: int = 50,
        entity_id: str | None = None,
        action: AuditAction | None = None,
    ) -> tuple[list[AuditLog], int]:
        """Newest-first audit entries for a user."""
        stmt = select(AuditLog).where(AuditLog.user_id == user_id)
        if entity_id:
            stmt = stmt.where(AuditLog.entity_id == entity_id)
        if action:
            stmt = stmt.where(AuditLog.action == action.value)

        total = db.scalar(select(func.count()).select_from(stmt.subquery())) or 0
        rows = db.scalars(
            stmt.order_by(AuditLog.created_at.desc())
            .offset((page - 1) * page_size)
            .limit(page_size)
        ).all()
        return list(rows), total
