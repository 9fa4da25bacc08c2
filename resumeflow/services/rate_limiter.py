"""
Sliding-window rate limiter shared by every AI-assisted endpoint.

Each accepted request appends one row to `api_rate_limits`. A check counts
the rows for (user, endpoint) inside the trailing minute and hour, fresh on
every call - nothing is cached.

SOFT LIMIT:
check() and record() are separate statements without row locking, so two
concurrent requests from the same user can both pass a check at cap - 1.
The overshoot is bounded by the number of in-flight requests and accepted.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Tuple

from sqlalchemy import delete, func, insert, select
from sqlalchemy.orm import Session

from resumeflow.core.errors import RateLimitError
from resumeflow.db.schema import api_rate_limits

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

MINUTE = 60
HOUR = 60 * 60
LONGEST_WINDOW = HOUR


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class RateLimitPolicy:
    per_minute: int
    per_hour: int

    @property
    def windows(self) -> Tuple[Tuple[int, int, str], ...]:
        """(window seconds, cap, message), shortest window first."""
        return (
            (MINUTE, self.per_minute, "Rate limit exceeded. Please wait a moment before trying again."),
            (HOUR, self.per_hour, "Hourly rate limit exceeded. Please try again later."),
        )


VALIDATE_UPLOAD = "validate-resume-upload"
EXTRACT_TEXT = "extract-resume-text"
ANALYZE_RESUME = "analyze-resume"

DEFAULT_POLICY = RateLimitPolicy(per_minute=5, per_hour=50)

ENDPOINT_POLICIES: Dict[str, RateLimitPolicy] = {
    VALIDATE_UPLOAD: RateLimitPolicy(per_minute=3, per_hour=20),
    EXTRACT_TEXT: RateLimitPolicy(per_minute=5, per_hour=50),
    ANALYZE_RESUME: RateLimitPolicy(per_minute=5, per_hour=50),
}


def policy_for(endpoint: str) -> RateLimitPolicy:
    return ENDPOINT_POLICIES.get(endpoint, DEFAULT_POLICY)


class RateLimiter:
    """
    Per-user, per-endpoint sliding-window counter.

    Usage:
        limiter = RateLimiter(db, clock=utc_now)
        limiter.hit(user_id, EXTRACT_TEXT)     # check + record
    or, when only successful calls should count:
        limiter.check(user_id, VALIDATE_UPLOAD)
        ...do the work...
        limiter.record(user_id, VALIDATE_UPLOAD)
    """

    def __init__(self, session: Session, clock: Clock = utc_now):
        self.session = session
        self.clock = clock

    def count(self, user_id: int, endpoint: str, window_seconds: int) -> int:
        """Number of recorded requests inside the trailing window ending now."""
        since = self.clock() - timedelta(seconds=window_seconds)
        statement = select(func.count()).select_from(api_rate_limits).where(
            api_rate_limits.c.user_id == user_id,
            api_rate_limits.c.endpoint == endpoint,
            api_rate_limits.c.window_start >= since
        )
        return self.session.execute(statement).scalar_one()

    def check(self, user_id: int, endpoint: str) -> None:
        """
        Raise RateLimitError if any window of the endpoint's policy is full.
        Retry-After is the length of the window that is full.
        """
        for window_seconds, cap, message in policy_for(endpoint).windows:
            used = self.count(user_id, endpoint, window_seconds)
            if used >= cap:
                logger.warning(
                    "Rate limit hit: user=%s endpoint=%s window=%ss used=%s cap=%s",
                    user_id, endpoint, window_seconds, used, cap
                )
                raise RateLimitError(message, retry_after=window_seconds)

    def record(self, user_id: int, endpoint: str) -> None:
        """Append one accepted-request event, then purge expired events."""
        now = self.clock()
        self.session.execute(
            insert(api_rate_limits).values(user_id=user_id, endpoint=endpoint, window_start=now)
        )
        self.session.execute(
            delete(api_rate_limits).where(
                api_rate_limits.c.user_id == user_id,
                api_rate_limits.c.endpoint == endpoint,
                api_rate_limits.c.window_start < now - timedelta(seconds=LONGEST_WINDOW)
            )
        )
        self.session.commit()

    def hit(self, user_id: int, endpoint: str) -> None:
        """Admit the request or raise RateLimitError."""
        self.check(user_id, endpoint)
        self.record(user_id, endpoint)
