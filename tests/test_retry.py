# =============================================================================
# tests/test_retry.py - Retry With Backoff Tests
# =============================================================================

import httpx
import pytest

from lib.retry import is_retryable_error, with_retry


def _status_error(status: int) -> httpx.HTTPStatusError:
    request = httpx.Request("GET", "https://api.example.com")
    response = httpx.Response(status, request=request)
    return httpx.HTTPStatusError("boom", request=request, response=response)


class TestIsRetryable:
    """Tests for is_retryable_error classification."""

    def test_transport_errors_retry(self):
        assert is_retryable_error(httpx.ConnectError("refused")) is True

    def test_server_errors_retry(self):
        assert is_retryable_error(_status_error(503)) is True

    def test_client_errors_do_not_retry(self):
        assert is_retryable_error(_status_error(400)) is False

    def test_other_errors_do_not_retry(self):
        assert is_retryable_error(ValueError("bad")) is False


class TestWithRetry:
    """Tests for with_retry."""

    def test_returns_after_transient_failures(self):
        # Arrange: fail twice, then succeed
        calls = []
        sleeps = []

        def flaky():
            calls.append(1)
            if len(calls) < 3:
                raise httpx.ConnectError("refused")
            return "ok"

        # Act
        result = with_retry(flaky, sleep=sleeps.append)

        # Assert
        assert result == "ok"
        assert len(calls) == 3
        assert len(sleeps) == 2
        assert 0.9 <= sleeps[0] <= 1.1
        assert 1.8 <= sleeps[1] <= 2.2

    def test_gives_up_after_max_retries(self):
        calls = []

        def always_down():
            calls.append(1)
            raise httpx.ConnectError("refused")

        with pytest.raises(httpx.ConnectError):
            with_retry(always_down, max_retries=2, sleep=lambda _: None)

        assert len(calls) == 3

    def test_non_retryable_raises_immediately(self):
        calls = []

        def bad_request():
            calls.append(1)
            raise _status_error(422)

        with pytest.raises(httpx.HTTPStatusError):
            with_retry(bad_request, sleep=lambda _: None)

        assert len(calls) == 1

    def test_delay_is_capped(self):
        sleeps = []

        def always_down():
            raise httpx.ReadTimeout("slow")

        with pytest.raises(httpx.ReadTimeout):
            with_retry(always_down, max_retries=5, initial_delay=4.0, max_delay=5.0, sleep=sleeps.append)

        assert all(delay <= 5.0 for delay in sleeps)
