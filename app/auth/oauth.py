# =============================================================================
# app/auth/oauth.py - OAuth Sign-in Routes
# =============================================================================
# Authorization-code flow for Google and GitHub:
#   1. GET  /auth/oauth/{provider}/authorize -> provider URL + signed state
#   2. browser returns to the frontend with ?code=&state=
#   3. POST /auth/oauth/{provider}/callback  -> our access token
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Path

from app.auth.models import OAuthAuthorizeResponse, OAuthCallbackRequest, TokenResponse
from app.dependencies import ContextDep, DbDep
from core.services.oauth_service import OAuthService

router = APIRouter(prefix="/auth/oauth", tags=["Auth"])

Provider = Annotated[str, Path(description="google or github")]


@router.get("/{provider}/authorize", response_model=OAuthAuthorizeResponse)
async def authorize(provider: Provider):
    """
    Get the provider's consent URL.

    The state value is signed and expires after 10 minutes; send it back
    unchanged to the callback.
    """
    url, state = OAuthService.authorize_url(provider)
    return OAuthAuthorizeResponse(url=url, state=state)


@router.post("/{provider}/callback", response_model=TokenResponse)
async def callback(
    provider: Provider,
    body: OAuthCallbackRequest,
    db: DbDep,
    ctx: ContextDep,
):
    """
    Exchange the authorization code and sign in.

    Links to an existing account with the same verified email, or creates
    a new one.

    Raises:
        400 INVALID_STATE: State missing, forged or expired
        400 EMAIL_NOT_VERIFIED: Provider has no verified email for the user
        502 EXTERNAL_SERVICE_ERROR: Provider rejected the code
    """
    return OAuthService.sign_in(db, provider, body.code, body.state, ctx)
