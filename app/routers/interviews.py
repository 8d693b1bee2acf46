# =============================================================================
# app/routers/interviews.py - Interview Endpoints
# =============================================================================
# Interviews hang off an application. Rescheduling re-arms the reminder.
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query

from app.auth import AuthUser, get_current_user
from app.dependencies import ContextDep, DbDep
from core.models.common import InterviewResult, ItemList, OkResponse
from core.models.interview import InterviewCreate, InterviewResponse, InterviewUpdate
from core.services.interview_service import InterviewService

router = APIRouter()

InterviewId = Annotated[str, Path(description="Interview ID")]


@router.get("", response_model=ItemList[InterviewResponse])
async def list_interviews(
    db: DbDep,
    application_id: Annotated[str | None, Query(description="Only this application")] = None,
    upcoming: Annotated[bool, Query(description="Only interviews from now on")] = False,
    result: Annotated[InterviewResult | None, Query(description="Filter by result")] = None,
    user: AuthUser = Depends(get_current_user),
):
    """
    List interviews ordered by scheduled time, soonest first.

    Interviews of deleted applications are not returned.
    """
    interviews = InterviewService.list_interviews(
        db,
        user.id,
        application_id=application_id,
        upcoming=upcoming,
        result=result.value if result else None,
    )
    return ItemList[InterviewResponse](
        items=[InterviewResponse.model_validate(i) for i in interviews]
    )


@router.post("", response_model=InterviewResponse, status_code=201)
async def create_interview(
    body: InterviewCreate,
    db: DbDep,
    ctx: ContextDep,
    user: AuthUser = Depends(get_current_user),
):
    interview = InterviewService.create_interview(db, user.id, body, ctx)
    return InterviewResponse.model_validate(interview)


@router.get("/{interview_id}", response_model=InterviewResponse)
async def get_interview(
    interview_id: InterviewId,
    db: DbDep,
    user: AuthUser = Depends(get_current_user),
):
    return InterviewResponse.model_validate(InterviewService.get_owned(db, user.id, interview_id))


@router.patch("/{interview_id}", response_model=InterviewResponse)
async def update_interview(
    interview_id: InterviewId,
    body: InterviewUpdate,
    db: DbDep,
    ctx: ContextDep,
    user: AuthUser = Depends(get_current_user),
):
    """Partial update. A new scheduled_at resets reminder_sent."""
    interview = InterviewService.update_interview(db, user.id, interview_id, body, ctx)
    return InterviewResponse.model_validate(interview)


@router.delete("/{interview_id}", response_model=OkResponse)
async def delete_interview(
    interview_id: InterviewId,
    db: DbDep,
    ctx: ContextDep,
    user: AuthUser = Depends(get_current_user),
):
    InterviewService.delete_interview(db, user.id, interview_id, ctx)
    return OkResponse()
