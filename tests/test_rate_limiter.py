"""
Rate Limiter Tests
"""
import pytest
from sqlalchemy import func, select

from resumeflow.core.errors import RateLimitError
from resumeflow.db.schema import api_rate_limits
from resumeflow.services.rate_limiter import (
    ANALYZE_RESUME,
    DEFAULT_POLICY,
    EXTRACT_TEXT,
    VALIDATE_UPLOAD,
    policy_for,
)


def _rows(session):
    return session.execute(select(func.count()).select_from(api_rate_limits)).scalar_one()


class TestPolicies:

    def test_endpoint_policies(self):
        assert policy_for(VALIDATE_UPLOAD).per_minute == 3
        assert policy_for(VALIDATE_UPLOAD).per_hour == 20
        assert policy_for(EXTRACT_TEXT).per_minute == 5
        assert policy_for(ANALYZE_RESUME).per_hour == 50

    def test_unknown_endpoint_uses_default(self):
        assert policy_for("something-new") == DEFAULT_POLICY


class TestSlidingWindow:

    def test_minute_cap(self, rate_limiter, candidate):
        for _ in range(3):
            rate_limiter.hit(candidate, VALIDATE_UPLOAD)

        with pytest.raises(RateLimitError) as exc_info:
            rate_limiter.hit(candidate, VALIDATE_UPLOAD)

        assert exc_info.value.status_code == 429
        assert exc_info.value.retry_after == 60
        assert exc_info.value.headers["Retry-After"] == "60"

    def test_rejected_request_is_not_recorded(self, rate_limiter, session, candidate):
        for _ in range(3):
            rate_limiter.hit(candidate, VALIDATE_UPLOAD)
        with pytest.raises(RateLimitError):
            rate_limiter.hit(candidate, VALIDATE_UPLOAD)

        assert _rows(session) == 3

    def test_admitted_again_after_window(self, rate_limiter, clock, candidate):
        for _ in range(3):
            rate_limiter.hit(candidate, VALIDATE_UPLOAD)

        clock.advance(61)
        rate_limiter.hit(candidate, VALIDATE_UPLOAD)

    def test_still_limited_at_window_edge(self, rate_limiter, clock, candidate):
        for _ in range(3):
            rate_limiter.hit(candidate, VALIDATE_UPLOAD)

        clock.advance(59)
        with pytest.raises(RateLimitError):
            rate_limiter.check(candidate, VALIDATE_UPLOAD)

    def test_hour_cap(self, rate_limiter, clock, candidate):
        for _ in range(20):
            rate_limiter.hit(candidate, VALIDATE_UPLOAD)
            clock.advance(61)

        with pytest.raises(RateLimitError) as exc_info:
            rate_limiter.check(candidate, VALIDATE_UPLOAD)

        assert exc_info.value.retry_after == 3600
        assert "Hourly" in exc_info.value.message

    def test_counts_are_per_user_and_endpoint(self, rate_limiter, candidate, other_candidate):
        for _ in range(3):
            rate_limiter.hit(candidate, VALIDATE_UPLOAD)

        rate_limiter.hit(other_candidate, VALIDATE_UPLOAD)
        rate_limiter.hit(candidate, EXTRACT_TEXT)

    def test_check_does_not_record(self, rate_limiter, session, candidate):
        rate_limiter.check(candidate, EXTRACT_TEXT)
        assert _rows(session) == 0

    def test_expired_rows_are_purged(self, rate_limiter, session, clock, candidate):
        rate_limiter.record(candidate, EXTRACT_TEXT)
        clock.advance(3601)
        rate_limiter.record(candidate, EXTRACT_TEXT)

        assert _rows(session) == 1
        assert rate_limiter.count(candidate, EXTRACT_TEXT, 3600) == 1
