# =============================================================================
# app/routers/onboarding.py - Onboarding Endpoints
# =============================================================================

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from app.auth import AuthUser, get_current_user
from app.dependencies import ContextDep, DbDep
from core.services.onboarding_service import OnboardingService
from lib.rate_limiter import rate_limit

router = APIRouter()


class SampleDataResponse(BaseModel):
    ok: bool = True
    created: int


@router.post(
    "/sample-data",
    response_model=SampleDataResponse,
    status_code=201,
    dependencies=[Depends(rate_limit("onboarding:sample-data", 5))],
)
async def seed_sample_data(
    db: DbDep,
    ctx: ContextDep,
    user: AuthUser = Depends(get_current_user),
):
    """
    Fill an empty workspace with example applications.

    Each sample comes with notes, tasks, contacts and links so every screen
    has something to show. Returns 400 if the user already has applications.
    """
    created = OnboardingService.seed_sample_data(db, user.id, ctx)
    return SampleDataResponse(created=created)
