# =============================================================================
# core/services/plan_service.py - Subscription Plan Rules
# =============================================================================
# Central place for FREE/PRO gating:
# - FREE accounts are capped at FREE_PLAN_APPLICATION_LIMIT live applications
# - CSV export is PRO only
# =============================================================================

import logging

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.config import settings
from app.exceptions import PlanLimitError, PlanRequiredError
from core.models.common import Plan
from core.tables import JobApplication

logger = logging.getLogger(__name__)


class PlanService:
    """Plan limit checks shared by create, import and export."""

    @staticmethod
    def count_applications(db: Session, user_id: str) -> int:
        return db.scalar(
            select(func.count())
            .select_from(JobApplication)
            .where(JobApplication.user_id == user_id, JobApplication.deleted_at.is_(None))
        ) or 0

    @staticmethod
    def remaining_application_slots(db: Session, user_id: str, plan: Plan) -> int | None:
        """
        How many more applications the user may create.

        Returns:
            None for unlimited (PRO), otherwise a non-negative count
        """
        if plan == Plan.PRO:
            return None
        used = PlanService.count_applications(db, user_id)
        return max(0, settings.FREE_PLAN_APPLICATION_LIMIT - used)

    @staticmethod
    def ensure_can_create_application(db: Session, user_id: str, plan: Plan) -> None:
        """
        Raises:
            PlanLimitError: FREE plan already at its cap
        """
        remaining = PlanService.remaining_application_slots(db, user_id, plan)
        if remaining is not None and remaining <= 0:
            logger.info(f"User {user_id} hit the free plan application limit")
            raise PlanLimitError(settings.FREE_PLAN_APPLICATION_LIMIT)

    @staticmethod
    def require_pro(plan: Plan, feature: str) -> None:
        """
        Raises:
            PlanRequiredError: Caller is not on PRO
        """
        if plan != Plan.PRO:
            raise PlanRequiredError(feature)
