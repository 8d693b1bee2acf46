# =============================================================================
# core/services/account_service.py - Account Settings
# =============================================================================
# Profile lookup, linked sign-in methods and account deletion. Deleting an
# account is a soft delete so the audit trail survives.
# =============================================================================

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.auth.models import UserResponse
from app.dependencies import RequestContext
from app.exceptions import BadRequestError, NotFoundError
from core.models.account import ConnectionInfo, ConnectionsResponse
from core.models.common import AuditAction
from core.services.audit_service import AuditService
from core.services.auth_service import to_user_response
from core.services.oauth_service import PROVIDERS
from core.services.session_service import SessionService
from core.tables import Account, User

logger = logging.getLogger(__name__)


class AccountService:

    @staticmethod
    def _get_user(db: Session, user_id: str) -> User:
        user = db.scalar(select(User).where(User.id == user_id, User.deleted_at.is_(None)))
        if user is None:
            raise NotFoundError("User")
        return user

    @staticmethod
    def me(db: Session, user_id: str) -> UserResponse:
        response = to_user_response(AccountService._get_user(db, user_id))
        response.active_sessions = SessionService.get_active_session_count(db, user_id)
        return response

    @staticmethod
    def connections(db: Session, user_id: str) -> ConnectionsResponse:
        user = AccountService._get_user(db, user_id)
        accounts = db.scalars(
            select(Account).where(Account.user_id == user.id).order_by(Account.created_at.asc())
        ).all()
        return ConnectionsResponse(
            accounts=[ConnectionInfo(provider=a.provider, connected_at=a.created_at) for a in accounts],
            has_password=user.password_hash is not None,
        )

    @staticmethod
    def disconnect(db: Session, user_id: str, provider: str, ctx: RequestContext | None = None) -> None:
        """
        Unlink an OAuth provider.

        Raises:
            BadRequestError: Unknown provider, or LAST_SIGN_IN_METHOD
            NotFoundError: Provider isn't linked
        """
        if provider not in PROVIDERS:
            raise BadRequestError(
                f"Invalid provider. Must be one of: {', '.join(PROVIDERS)}",
                code="VALIDATION_ERROR",
            )

        user = AccountService._get_user(db, user_id)
        accounts = db.scalars(select(Account).where(Account.user_id == user.id)).all()
        target = next((a for a in accounts if a.provider == provider), None)
        if target is None:
            raise NotFoundError(f"{provider.capitalize()} connection")

        if user.password_hash is None and len(accounts) == 1:
            raise BadRequestError(
                "Cannot disconnect your only sign-in method",
                code="LAST_SIGN_IN_METHOD",
                suggestion="Set a password or connect another provider first",
            )

        db.delete(target)
        db.commit()
        logger.info(f"Disconnected {provider} from user {user.id}")
        AuditService.record(
            db, user.id, AuditAction.ACCOUNT_DISCONNECTED,
            entity_type="Account", entity_id=user.id, meta={"provider": provider}, ctx=ctx,
        )

    @staticmethod
    def delete_account(db: Session, user_id: str, ctx: RequestContext | None = None) -> None:
        user = AccountService._get_user(db, user_id)

        user.soft_delete()
        db.commit()

        revoked = SessionService.revoke_all_user_sessions(db, user.id)
        logger.info(f"Deleted account {user.id} ({revoked} sessions revoked)")
        AuditService.record(
            db, user.id, AuditAction.ACCOUNT_DELETED,
            entity_type="User", entity_id=user.id, meta={"sessions_revoked": revoked}, ctx=ctx,
        )
