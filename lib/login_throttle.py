# =============================================================================
# lib/login_throttle.py - Failed Login Tracking and Lockout
# =============================================================================
# Tracks failed login attempts per (IP, normalized email) and locks the pair
# out with exponential backoff once the threshold is crossed.
#
# Lockout schedule (5 attempts per step, doubling, capped):
#   5 failures  -> 1 minute
#   10 failures -> 2 minutes
#   15 failures -> 4 minutes
#   ...         -> max 15 minutes
#
# State lives in process memory: it is not persisted and not shared between
# workers. A successful login clears the record.
#
# Usage:
#   from lib.login_throttle import login_throttle
#
#   result = login_throttle.check_login_allowed(ip, email)
#   if not result.allowed:
#       ...
# =============================================================================

import logging
import math
import threading
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable

logger = logging.getLogger(__name__)


# =============================================================================
# Configuration
# =============================================================================

MAX_ATTEMPTS = 5
ATTEMPT_WINDOW_SECONDS = 15 * 60
INITIAL_LOCKOUT_SECONDS = 60
MAX_LOCKOUT_SECONDS = 15 * 60
LOCKOUT_MULTIPLIER = 2
CLEANUP_INTERVAL_SECONDS = 5 * 60


# =============================================================================
# Data Classes
# =============================================================================

@dataclass
class LoginAttemptRecord:
    count: int
    first_attempt: float
    last_attempt: float
    locked_until: float | None = None


@dataclass
class LoginAttemptResult:
    """Outcome of a throttle check or a recorded failure."""
    allowed: bool
    remaining_attempts: int
    locked_until: float | None = None
    retry_after_seconds: int | None = None

    @property
    def locked_until_iso(self) -> str | None:
        if self.locked_until is None:
            return None
        return datetime.fromtimestamp(self.locked_until, tz=timezone.utc).isoformat()


# =============================================================================
# Helpers
# =============================================================================

def make_key(ip: str, email: str) -> str:
    """Throttle key for an (IP, email) pair. Email is case/space normalized."""
    return f"login:{ip}:{email.lower().strip()}"


def mask_email(email: str) -> str:
    """Mask an email for logs: "alice@example.com" -> "al***@example.com"."""
    local, sep, domain = email.partition("@")
    if not sep:
        return "***"
    return f"{local[:2]}***@{domain}"


def calculate_lockout_seconds(attempt_count: int) -> int:
    """Lockout duration for a given failure count (0 below the threshold)."""
    if attempt_count < MAX_ATTEMPTS:
        return 0
    lockout_level = attempt_count // MAX_ATTEMPTS - 1
    duration = INITIAL_LOCKOUT_SECONDS * (LOCKOUT_MULTIPLIER ** lockout_level)
    return min(duration, MAX_LOCKOUT_SECONDS)


def format_lockout_duration(seconds: int) -> str:
    """Human-readable lockout duration ("30 seconds", "2 minutes")."""
    if seconds < 60:
        return f"{seconds} second{'s' if seconds != 1 else ''}"
    minutes = math.ceil(seconds / 60)
    return f"{minutes} minute{'s' if minutes != 1 else ''}"


# =============================================================================
# Throttle
# =============================================================================

class LoginThrottle:
    """
    In-memory failed-login tracker.

    Args:
        clock: Callable returning the current epoch seconds (injectable for tests)
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._attempts: dict[str, LoginAttemptRecord] = {}
        self._lock = threading.Lock()
        self._last_cleanup = clock()

    def check_login_allowed(self, ip: str, email: str) -> LoginAttemptResult:
        """
        Check whether a login attempt may proceed.

        Returns allowed=False with retry_after_seconds while a lockout is active
        or while the attempt window is exhausted.
        """
        key = make_key(ip, email)
        now = self._clock()

        with self._lock:
            self._maybe_cleanup(now)
            record = self._attempts.get(key)

            if record is None:
                return LoginAttemptResult(allowed=True, remaining_attempts=MAX_ATTEMPTS)

            if record.locked_until is not None and record.locked_until > now:
                return LoginAttemptResult(
                    allowed=False,
                    remaining_attempts=0,
                    locked_until=record.locked_until,
                    retry_after_seconds=math.ceil(record.locked_until - now),
                )

            if now - record.first_attempt > ATTEMPT_WINDOW_SECONDS:
                del self._attempts[key]
                return LoginAttemptResult(allowed=True, remaining_attempts=MAX_ATTEMPTS)

            remaining = max(0, MAX_ATTEMPTS - record.count)
            if remaining > 0:
                return LoginAttemptResult(allowed=True, remaining_attempts=remaining)

            # Attempts used up: blocked until the window closes
            window_end = record.first_attempt + ATTEMPT_WINDOW_SECONDS
            return LoginAttemptResult(
                allowed=False,
                remaining_attempts=0,
                locked_until=window_end,
                retry_after_seconds=math.ceil(window_end - now),
            )

    def record_failed_attempt(self, ip: str, email: str) -> LoginAttemptResult:
        """
        Record a failed attempt and apply a lockout when the threshold is hit.

        Returns the state after recording (allowed=False if now locked).
        """
        key = make_key(ip, email)
        now = self._clock()

        with self._lock:
            record = self._attempts.get(key)

            if record is None or now - record.first_attempt > ATTEMPT_WINDOW_SECONDS:
                record = LoginAttemptRecord(count=0, first_attempt=now, last_attempt=now)
                self._attempts[key] = record

            record.count += 1
            record.last_attempt = now

            if record.count >= MAX_ATTEMPTS:
                lockout = calculate_lockout_seconds(record.count)
                record.locked_until = now + lockout
                logger.warning(
                    f"Login locked for {format_lockout_duration(lockout)} "
                    f"after {record.count} failures ({ip}, {mask_email(email)})"
                )
                return LoginAttemptResult(
                    allowed=False,
                    remaining_attempts=0,
                    locked_until=record.locked_until,
                    retry_after_seconds=lockout,
                )

            return LoginAttemptResult(
                allowed=True,
                remaining_attempts=MAX_ATTEMPTS - record.count,
            )

    def clear_login_attempts(self, ip: str, email: str) -> None:
        """Forget all failures for the pair (called after a successful login)."""
        with self._lock:
            self._attempts.pop(make_key(ip, email), None)

    def get_attempt_count(self, ip: str, email: str) -> int:
        with self._lock:
            record = self._attempts.get(make_key(ip, email))
            return record.count if record else 0

    def reset(self) -> None:
        """Drop every record."""
        with self._lock:
            self._attempts.clear()

    def _maybe_cleanup(self, now: float) -> None:
        # Caller holds the lock
        if now - self._last_cleanup < CLEANUP_INTERVAL_SECONDS:
            return
        self._last_cleanup = now
        stale = [
            key for key, record in self._attempts.items()
            if now - record.first_attempt > ATTEMPT_WINDOW_SECONDS
            and (record.locked_until is None or record.locked_until < now)
        ]
        for key in stale:
            del self._attempts[key]
        if stale:
            logger.debug(f"Cleaned up {len(stale)} expired login attempt records")


# Process-wide instance used by the auth routes
login_throttle = LoginThrottle()
