# =============================================================================
# app/dependencies.py - Shared Dependencies
# =============================================================================
# FastAPI dependency injection for shared resources.
# These are injected into route handlers using Depends().
# =============================================================================

from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session

from app.config import settings
from app.exceptions import NotConfiguredError, UnauthorizedError
from lib.database import get_db
from lib.security import constant_time_equals
from lib.utils import get_client_ip, get_user_agent


@dataclass(frozen=True)
class RequestContext:
    """Caller metadata recorded on sessions and audit entries."""
    ip: str
    user_agent: str | None


def get_request_context(request: Request) -> RequestContext:
    return RequestContext(ip=get_client_ip(request), user_agent=get_user_agent(request))


def require_cron_secret(authorization: Annotated[str | None, Header()] = None) -> None:
    """
    Guard for scheduler-triggered endpoints.

    Expects `Authorization: Bearer <CRON_SECRET>`.
    """
    if not settings.CRON_SECRET:
        raise NotConfiguredError("CRON_SECRET")
    if not authorization or not constant_time_equals(authorization, f"Bearer {settings.CRON_SECRET}"):
        raise UnauthorizedError("Invalid cron secret")


# Type aliases for dependency injection
DbDep = Annotated[Session, Depends(get_db)]
ContextDep = Annotated[RequestContext, Depends(get_request_context)]
