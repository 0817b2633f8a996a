"""
Tests for retry policy service.
"""

import pytest
import sys
import os

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '../src'))

from services import retry


class TestBackoffDelay:
    """Test exponential backoff."""

    def test_doubles_per_attempt(self):
        delays = [retry.backoff_delay(1.0, attempt) for attempt in range(1, 5)]

        assert delays == [1.0, 2.0, 4.0, 8.0]

    def test_scales_with_base(self):
        assert retry.backoff_delay(0.25, 3) == 1.0

    def test_rejects_attempt_zero(self):
        with pytest.raises(ValueError, match="attempt must be >= 1"):
            retry.backoff_delay(1.0, 0)


class TestIsRetryableStatus:
    """Test which statuses are retried."""

    @pytest.mark.parametrize("status_code", [500, 502, 503, 504, 599])
    def test_server_errors_retry(self, status_code):
        assert retry.is_retryable_status(status_code) is True

    @pytest.mark.parametrize("status_code", [200, 301, 400, 401, 403, 404, 422, 429])
    def test_other_statuses_are_final(self, status_code):
        assert retry.is_retryable_status(status_code) is False


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
