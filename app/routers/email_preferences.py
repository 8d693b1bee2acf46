# =============================================================================
# app/routers/email_preferences.py - Email Preference Endpoints
# =============================================================================
# Reminder, digest and marketing opt-ins. Reading creates the defaults row.
# =============================================================================

from fastapi import APIRouter, Depends

from app.auth import AuthUser, get_current_user
from app.dependencies import ContextDep, DbDep
from core.models.email_preferences import EmailPreferencesResponse, EmailPreferencesUpdate
from core.services.email_preferences_service import EmailPreferencesService

router = APIRouter()


@router.get("", response_model=EmailPreferencesResponse)
async def get_email_preferences(
    db: DbDep,
    user: AuthUser = Depends(get_current_user),
):
    prefs = EmailPreferencesService.get_or_create(db, user.id)
    return EmailPreferencesResponse.model_validate(prefs)


@router.patch("", response_model=EmailPreferencesResponse)
async def update_email_preferences(
    body: EmailPreferencesUpdate,
    db: DbDep,
    ctx: ContextDep,
    user: AuthUser = Depends(get_current_user),
):
    """
    Update email preferences.

    Omitted fields keep their value. Setting unsubscribed_all stops every
    reminder regardless of the individual switches.
    """
    prefs = EmailPreferencesService.update(db, user.id, body, ctx)
    return EmailPreferencesResponse.model_validate(prefs)
