# =============================================================================
# core/services/session_service.py - Login Session Business Logic
# =============================================================================
# Issues, validates and revokes login sessions.
#
# - The raw token (32 random bytes, hex) is handed to the client inside the
#   access token; only its SHA-256 hash is stored.
# - Sessions expire after SESSION_DURATION and can be revoked one by one or
#   all at once (optionally keeping the caller's own session).
# - last_active_at is refreshed at most every ACTIVITY_UPDATE_INTERVAL and
#   that refresh is best effort.
# =============================================================================

import logging
from datetime import timedelta

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import settings
from app.exceptions import BadRequestError, NotFoundError
from core.models.session import SessionInfo
from core.tables import UserSession
from lib.database import utcnow
from lib.security import generate_session_token, hash_token
from lib.user_agent import ParsedUserAgent, get_device_description, parse_user_agent

logger = logging.getLogger(__name__)

SESSION_DURATION = timedelta(days=settings.ACCESS_TOKEN_EXPIRE_DAYS)
ACTIVITY_UPDATE_INTERVAL = timedelta(minutes=5)
REVOKED_RETENTION = timedelta(days=30)


class SessionService:
    """
    Service for login session operations.

    Provides a clean interface between auth routes and the user_sessions table.
    """

    @staticmethod
    def create_session(
        db: Session,
        user_id: str,
        user_agent: str | None = None,
        ip_address: str | None = None,
    ) -> tuple[str, UserSession]:
        """
        Create a new session for a user.

        Args:
            db: Database session
            user_id: Owner of the session
            user_agent: Raw User-Agent header
            ip_address: Client IP

        Returns:
            Tuple of (raw token, persisted UserSession)
        """
        token = generate_session_token()
        parsed = parse_user_agent(user_agent)
        now = utcnow()

        row = UserSession(
            user_id=user_id,
            session_token_hash=hash_token(token),
            user_agent=user_agent,
            ip_address=ip_address,
            device_type=parsed.device_type,
            browser=parsed.browser,
            os=parsed.os,
            created_at=now,
            last_active_at=now,
            expires_at=now + SESSION_DURATION,
        )
        db.add(row)
        db.commit()

        logger.info(f"Created session {row.id} for user {user_id} ({get_device_description(parsed)})")
        return token, row

    @staticmethod
    def validate_session(db: Session, token: str) -> UserSession | None:
        """
        Look up a live session by raw token.

        Returns None if the session doesn't exist, was revoked, or expired.
        """
        row = db.scalar(
            select(UserSession).where(UserSession.session_token_hash == hash_token(token))
        )
        if row is None:
            return None

        now = utcnow()
        if row.revoked_at is not None or row.expires_at <= now:
            return None

        if now - row.last_active_at > ACTIVITY_UPDATE_INTERVAL:
            try:
                row.last_active_at = now
                db.commit()
            except SQLAlchemyError as e:
                db.rollback()
                logger.warning(f"Failed to update activity for session {row.id}: {e}")

        return row

    @staticmethod
    def get_user_sessions(
        db: Session,
        user_id: str,
        current_session_id: str | None = None,
    ) -> list[SessionInfo]:
        """Active sessions, most recently used first."""
        now = utcnow()
        rows = db.scalars(
            select(UserSession)
            .where(
                UserSession.user_id == user_id,
                UserSession.revoked_at.is_(None),
                UserSession.expires_at > now,
            )
            .order_by(UserSession.last_active_at.desc())
        ).all()

        return [
            SessionInfo(
                id=row.id,
                device=get_device_description(
                    ParsedUserAgent(
                        device_type=row.device_type or "unknown",
                        browser=row.browser or "Unknown",
                        os=row.os or "Unknown",
                    )
                ),
                device_type=row.device_type,
                browser=row.browser,
                os=row.os,
                ip_address=row.ip_address,
                last_active_at=row.last_active_at,
                created_at=row.created_at,
                expires_at=row.expires_at,
                is_current=row.id == current_session_id,
            )
            for row in rows
        ]

    @staticmethod
    def revoke_session(
        db: Session,
        session_id: str,
        user_id: str,
        current_session_id: str | None = None,
    ) -> None:
        """
        Revoke one of the user's sessions.

        Raises:
            NotFoundError: Session doesn't exist or belongs to someone else
            BadRequestError: Already revoked, or it's the caller's own session
        """
        row = db.scalar(
            select(UserSession).where(UserSession.id == session_id, UserSession.user_id == user_id)
        )
        if row is None:
            raise NotFoundError("Session")
        if row.revoked_at is not None:
            raise BadRequestError("Session is already revoked", code="ALREADY_REVOKED")
        if current_session_id and row.id == current_session_id:
            raise BadRequestError(
                "Cannot revoke the current session",
                code="CANNOT_REVOKE_CURRENT",
                suggestion="Use logout to end the current session",
            )

        row.revoked_at = utcnow()
        db.commit()
        logger.info(f"Revoked session {session_id} for user {user_id}")

    @staticmethod
    def revoke_current(db: Session, session_id: str) -> None:
        """Revoke the caller's own session (logout)."""
        db.execute(
            update(UserSession)
            .where(UserSession.id == session_id, UserSession.revoked_at.is_(None))
            .values(revoked_at=utcnow())
        )
        db.commit()

    @staticmethod
    def revoke_all_user_sessions(
        db: Session,
        user_id: str,
        except_session_id: str | None = None,
    ) -> int:
        """
        Revoke every live session of a user, optionally keeping one.

        Returns:
            Number of sessions revoked
        """
        stmt = update(UserSession).where(
            UserSession.user_id == user_id,
            UserSession.revoked_at.is_(None),
        )
        if except_session_id:
            stmt = stmt.where(UserSession.id != except_session_id)

        result = db.execute(stmt.values(revoked_at=utcnow()))
        db.commit()
        logger.info(f"Revoked {result.rowcount} sessions for user {user_id}")
        return result.rowcount

    @staticmethod
    def cleanup_expired_sessions(db: Session) -> int:
        """
        Delete expired sessions and sessions revoked more than 30 days ago.

        Returns:
            Number of rows deleted
        """
        now = utcnow()
        result = db.execute(
            delete(UserSession).where(
                or_(
                    UserSession.expires_at < now,
                    UserSession.revoked_at < now - REVOKED_RETENTION,
                )
            ).execution_options(synchronize_session=False)
        )
        db.commit()
        logger.info(f"Cleaned up {result.rowcount} expired sessions")
        return result.rowcount

    @staticmethod
    def get_active_session_count(db: Session, user_id: str) -> int:
        now = utcnow()
        return db.scalar(
            select(func.count())
            .select_from(UserSession)
            .where(
                UserSession.user_id == user_id,
                UserSession.revoked_at.is_(None),
                UserSession.expires_at > now,
            )
        ) or 0
