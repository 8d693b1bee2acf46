# =============================================================================
# core/services/oauth_service.py - Google / GitHub Sign-In
# =============================================================================
# Authorization-code flow:
#   1. authorize_url() builds the provider URL with a signed, 10 minute
#      `state` JWT bound to the provider
#   2. the frontend receives ?code=&state= and posts them back
#   3. sign_in() verifies state, exchanges the code over httpx, reads the
#      verified email and finds, links or creates the user
# =============================================================================

import logging
import secrets
from dataclasses import dataclass
from datetime import timedelta
from urllib.parse import urlencode

import httpx
from jose import JWTError
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.auth.models import TokenResponse
from app.config import settings
from app.dependencies import RequestContext
from app.exceptions import BadRequestError, ExternalServiceError, NotConfiguredError, UnauthorizedError
from core.models.common import AuditAction
from core.services.audit_service import AuditService
from core.services.auth_service import AuthService
from core.tables import Account, User
from lib.login_throttle import mask_email
from lib.retry import with_retry
from lib.security import create_access_token, decode_access_token

logger = logging.getLogger(__name__)

STATE_TTL = timedelta(minutes=10)
HTTP_TIMEOUT_SECONDS = 10.0


@dataclass(frozen=True)
class OAuthProvider:
    name: str
    authorize_url: str
    token_url: str
    scope: str


@dataclass(frozen=True)
class OAuthProfile:
    provider_account_id: str
    email: str | None
    name: str | None
    email_verified: bool


PROVIDERS: dict[str, OAuthProvider] = {
    "google": OAuthProvider(
        name="google",
        authorize_url="https://accounts.google.com/o/oauth2/v2/auth",
        token_url="https://oauth2.googleapis.com/token",
        scope="openid email profile",
    ),
    "github": OAuthProvider(
        name="github",
        authorize_url="https://github.com/login/oauth/authorize",
        token_url="https://github.com/login/oauth/access_token",
        scope="read:user user:email",
    ),
}

GOOGLE_USERINFO_URL = "https://openidconnect.googleapis.com/v1/userinfo"
GITHUB_USER_URL = "https://api.github.com/user"
GITHUB_EMAILS_URL = "https://api.github.com/user/emails"


def _credentials(provider: str) -> tuple[str, str]:
    if provider == "google":
        return settings.GOOGLE_CLIENT_ID, settings.GOOGLE_CLIENT_SECRET
    return settings.GITHUB_CLIENT_ID, settings.GITHUB_CLIENT_SECRET


def get_provider(provider: str) -> OAuthProvider:
    """
    Raises:
        BadRequestError: UNSUPPORTED_PROVIDER
        NotConfiguredError: provider has no client credentials
    """
    config = PROVIDERS.get(provider)
    if config is None:
        raise BadRequestError(f"Unsupported OAuth provider '{provider}'", code="UNSUPPORTED_PROVIDER")
    client_id, client_secret = _credentials(provider)
    if not client_id or not client_secret:
        raise NotConfiguredError(f"{provider.capitalize()} sign-in")
    return config


def redirect_uri(provider: str) -> str:
    return f"{settings.OAUTH_REDIRECT_BASE.rstrip('/')}/{provider}"


class OAuthService:
    """Service for third-party sign-in."""

    http_client_factory = httpx.Client

    @staticmethod
    def authorize_url(provider: str) -> tuple[str, str]:
        """
        Returns:
            Tuple of (provider authorization URL, state)
        """
        config = get_provider(provider)
        client_id, _ = _credentials(provider)
        state = create_access_token(
            {"purpose": "oauth_state", "provider": provider, "nonce": secrets.token_urlsafe(16)},
            expires_delta=STATE_TTL,
        )
        params = {
            "client_id": client_id,
            "redirect_uri": redirect_uri(provider),
            "response_type": "code",
            "scope": config.scope,
            "state": state,
        }
        if provider == "google":
            params["prompt"] = "select_account"
        return f"{config.authorize_url}?{urlencode(params)}", state

    @staticmethod
    def verify_state(provider: str, state: str) -> None:
        try:
            payload = decode_access_token(state)
        except JWTError:
            raise BadRequestError("OAuth state is invalid or expired", code="INVALID_STATE")
        if payload.get("purpose") != "oauth_state" or payload.get("provider") != provider:
            raise BadRequestError("OAuth state is invalid or expired", code="INVALID_STATE")

    @classmethod
    def fetch_profile(cls, provider: str, code: str) -> OAuthProfile:
        """
        Exchange the code and read the user's identity.

        Raises:
            ExternalServiceError: Provider rejected the code or is unreachable
        """
        config = get_provider(provider)
        client_id, client_secret = _credentials(provider)

        try:
            with cls.http_client_factory(timeout=HTTP_TIMEOUT_SECONDS) as client:
                def exchange() -> dict:
                    response = client.post(
                        config.token_url,
                        data={
                            "client_id": client_id,
                            "client_secret": client_secret,
                            "code": code,
                            "grant_type": "authorization_code",
                            "redirect_uri": redirect_uri(provider),
                        },
                        headers={"Accept": "application/json"},
                    )
                    response.raise_for_status()
                    return response.json()

                tokens = with_retry(exchange)
                access_token = tokens.get("access_token")
                if not access_token:
                    raise ExternalServiceError(provider, tokens.get("error_description") or "no access token")

                headers = {"Authorization": f"Bearer {access_token}", "Accept": "application/json"}
                if provider == "google":
                    info = client.get(GOOGLE_USERINFO_URL, headers=headers)
                    info.raise_for_status()
                    data = info.json()
                    return OAuthProfile(
                        provider_account_id=str(data["sub"]),
                        email=data.get("email"),
                        name=data.get("name"),
                        email_verified=bool(data.get("email_verified")),
                    )

                info = client.get(GITHUB_USER_URL, headers=headers)
                info.raise_for_status()
                data = info.json()
                emails = client.get(GITHUB_EMAILS_URL, headers=headers)
                emails.raise_for_status()
                primary = next(
                    (e for e in emails.json() if e.get("primary") and e.get("verified")),
                    None,
                )
                return OAuthProfile(
                    provider_account_id=str(data["id"]),
                    email=primary["email"] if primary else None,
                    name=data.get("name") or data.get("login"),
                    email_verified=primary is not None,
                )
        except httpx.HTTPError as e:
            logger.error(f"OAuth exchange with {provider} failed: {e}")
            raise ExternalServiceError(provider, str(e))

    @staticmethod
    def sign_in(
        db: Session,
        provider: str,
        code: str,
        state: str,
        ctx: RequestContext | None = None,
    ) -> TokenResponse:
        OAuthService.verify_state(provider, state)
        profile = OAuthService.fetch_profile(provider, code)
        user = OAuthService.find_or_create_user(db, provider, profile)

        token = AuthService.issue_token(db, user, ctx)
        AuditService.record(
            db, user.id, AuditAction.AUTH_LOGIN,
            entity_type="User", entity_id=user.id, meta={"method": provider}, ctx=ctx,
        )
        return token

    @staticmethod
    def find_or_create_user(db: Session, provider: str, profile: OAuthProfile) -> User:
        """
        Resolve the local user for a provider identity.

        1. Existing linked Account -> its user
        2. Verified email matches a user -> link a new Account
        3. Otherwise create a password-less user and link it
        """
        account = db.scalar(
            select(Account).where(
                Account.provider == provider,
                Account.provider_account_id == profile.provider_account_id,
            )
        )
        if account is not None:
            user = db.scalar(select(User).where(User.id == account.user_id, User.deleted_at.is_(None)))
            if user is None:
                raise UnauthorizedError("Account no longer exists")
            return user

        if not profile.email or not profile.email_verified:
            raise BadRequestError(
                f"Your {provider} account has no verified email address",
                code="EMAIL_NOT_VERIFIED",
            )

        email = profile.email.strip().lower()
        user = db.scalar(select(User).where(User.email == email))
        if user is not None and user.deleted_at is not None:
            raise UnauthorizedError("Account no longer exists")

        if user is None:
            user = User(email=email, name=profile.name, password_hash=None)
            db.add(user)
            db.flush()
            logger.info(f"Created user {user.id} via {provider} ({mask_email(email)})")

        db.add(Account(user_id=user.id, provider=provider, provider_account_id=profile.provider_account_id))
        db.commit()
        db.refresh(user)
        logger.info(f"Linked {provider} account to user {user.id}")
        return user
