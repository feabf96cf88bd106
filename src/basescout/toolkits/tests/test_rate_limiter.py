"""
Tests for the fixed-window rate limiter.
"""
import pytest

from basescout.exceptions import RateExceeded
from basescout.toolkits.utils.rate_limiter import FixedWindowRateLimiter


class TestFixedWindowRateLimiter:

    def test_consume_counts_down(self, fake_clock):
        limiter = FixedWindowRateLimiter(points=3, duration_seconds=1.0, clock=fake_clock)

        assert [limiter.consume() for _ in range(3)] == [2, 1, 0]

    def test_exhausted_window_raises(self, fake_clock, mock_logger):
        limiter = FixedWindowRateLimiter(points=2, duration_seconds=1.0, clock=fake_clock)
        limiter.consume()
        fake_clock.advance(0.25)
        limiter.consume()

        with pytest.raises(RateExceeded) as exc_info:
            limiter.consume()

        assert exc_info.value.key == "global"
        assert exc_info.value.retry_after_seconds == pytest.approx(0.75)
        mock_logger['rate'].warning.assert_called_once()

    def test_window_resets_after_duration(self, fake_clock):
        limiter = FixedWindowRateLimiter(points=1, duration_seconds=1.0, clock=fake_clock)
        limiter.consume()

        with pytest.raises(RateExceeded):
            limiter.consume()

        fake_clock.advance(1.0)
        assert limiter.consume() == 0

    def test_keys_have_independent_quotas(self, fake_clock):
        limiter = FixedWindowRateLimiter(points=1, duration_seconds=1.0, clock=fake_clock)
        limiter.consume("a")

        assert limiter.consume("b") == 0
        with pytest.raises(RateExceeded):
            limiter.consume("a")

    def test_remaining_does_not_consume(self, fake_clock):
        limiter = FixedWindowRateLimiter(points=5, duration_seconds=1.0, clock=fake_clock)
        assert limiter.remaining() == 5

        limiter.consume()
        limiter.consume()
        assert limiter.remaining() == 3
        assert limiter.remaining() == 3

        fake_clock.advance(2.0)
        assert limiter.remaining() == 5

    def test_reset(self, fake_clock):
        limiter = FixedWindowRateLimiter(points=1, duration_seconds=60.0, clock=fake_clock)
        limiter.consume()
        limiter.reset()

        assert limiter.consume() == 0

    @pytest.mark.parametrize("points,duration", [(0, 1.0), (1, 0), (1, -1.0)])
    def test_invalid_configuration(self, points, duration):
        with pytest.raises(ValueError):
            FixedWindowRateLimiter(points=points, duration_seconds=duration)
