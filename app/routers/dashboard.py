# =============================================================================
# app/routers/dashboard.py - Dashboard and Audit Endpoints
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from app.auth import AuthUser, get_current_user
from app.dependencies import DbDep
from core.models.common import AuditAction, Page
from core.models.dashboard import AuditEntryResponse, DashboardSummary
from core.services.audit_service import AuditService
from core.services.dashboard_service import DashboardService

router = APIRouter()
audit_router = APIRouter()


@router.get("/summary", response_model=DashboardSummary)
async def get_summary(
    db: DbDep,
    user: AuthUser = Depends(get_current_user),
):
    """
    Pipeline summary.

    Returns counts per stage (every stage present), the number of
    applications created in each of the last 8 ISO weeks, and the total.
    """
    return DashboardSummary(**DashboardService.summary(db, user.id))


@audit_router.get("", response_model=Page[AuditEntryResponse])
async def list_audit_entries(
    db: DbDep,
    page: Annotated[int, Query(ge=1)] = 1,
    page_size: Annotated[int, Query(ge=1, le=100)] = 50,
    entity_id: Annotated[str | None, Query(description="Only entries for this entity")] = None,
    action: Annotated[AuditAction | None, Query(description="Only this action")] = None,
    user: AuthUser = Depends(get_current_user),
):
    """The caller's audit trail, newest first."""
    rows, total = AuditService.list_entries(
        db, user.id, page=page, page_size=page_size, entity_id=entity_id, action=action
    )
    return Page[AuditEntryResponse](
        page=page,
        page_size=page_size,
        total=total,
        items=[AuditEntryResponse.model_validate(row) for row in rows],
    )
