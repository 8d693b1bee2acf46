# =============================================================================
# lib/utils.py - Shared Utilities
# =============================================================================
# Common utilities used across the application.
# =============================================================================

import re
from datetime import datetime, timezone
from typing import Iterable

from fastapi import Request

_CONTROL_CHARS_RE = re.compile(r"[\x00-\x1f\x7f]")


# =============================================================================
# Request Helpers
# =============================================================================

def get_client_ip(request: Request) -> str:
    """
    Best-effort client IP.

    Prefers the first x-forwarded-for hop, then x-real-ip, then the socket
    peer, and falls back to "unknown".
    """
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first

    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()

    if request.client and request.client.host:
        return request.client.host

    return "unknown"


def get_user_agent(request: Request) -> str | None:
    return request.headers.get("user-agent")


# =============================================================================
# Text Helpers
# =============================================================================

def strip_control_chars(value: str) -> str:
    """Remove ASCII control characters (search input hygiene)."""
    return _CONTROL_CHARS_RE.sub("", value)


def escape_like(value: str) -> str:
    """
    Escape LIKE wildcards so user input matches literally.

    Use with `.ilike(pattern, escape="\\\\")`.
    """
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def normalize_tags(tags: Iterable[str]) -> list[str]:
    """Lower-case, strip and de-duplicate tags, keeping first-seen order."""
    seen: list[str] = []
    for tag in tags:
        cleaned = tag.strip().lower()
        if cleaned and cleaned not in seen:
            seen.append(cleaned)
    return seen


def truncate(value: str, length: int) -> str:
    return value if len(value) <= length else value[:length] + "..."


# =============================================================================
# Time Helpers
# =============================================================================

def ensure_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to naive datetimes; convert aware ones to UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None
