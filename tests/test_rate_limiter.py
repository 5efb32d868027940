"""Unit tests for the sliding-window rate limiter and the coaching heuristics."""
import pytest

from liftlog_api.oracles.base import OracleError, RefinementOracle
from liftlog_api.services.coaching import (
    GENERIC_RAMP,
    REST_MODERATE,
    rest_guideline,
    rest_text,
    warmup_ramp,
    warmup_text,
)
from liftlog_api.services.rate_limiter import SlidingWindowLimiter


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


class TestSlidingWindowLimiter:
    def test_limit_and_expiry(self):
        clock = FakeClock()
        limiter = SlidingWindowLimiter(max_requests=2, window_seconds=60, clock=clock)

        assert limiter.allow("a") is True
        clock.now += 10
        assert limiter.allow("a") is True
        assert limiter.allow("a") is False
        assert limiter.allow("b") is True

        clock.now += 50  # first hit is now 60s old
        assert limiter.allow("a") is True
        assert limiter.allow("a") is False

    def test_expired_keys_are_dropped(self):
        clock = FakeClock()
        limiter = SlidingWindowLimiter(max_requests=5, window_seconds=60, clock=clock)

        for n in range(100):
            limiter.allow(f"10.0.0.{n}")
        assert limiter.tracked_keys() == 100

        clock.now += 61
        assert limiter.allow("10.0.0.200") is True
        assert limiter.tracked_keys() == 1

    def test_reset(self):
        limiter = SlidingWindowLimiter(max_requests=1)
        assert limiter.allow("a") is True
        assert limiter.allow("a") is False
        limiter.reset()
        assert limiter.allow("a") is True


class BrokenOracle(RefinementOracle):
    name = "broken"

    def refine(self, context):
        raise OracleError("down")


class TestCoachingHeuristics:
    @pytest.mark.parametrize(
        "name,expected",
        [
            ("Leg Extension", "Rest 45-75s between sets."),
            ("Romanian Deadlift", "Rest 2-3 min between sets."),
            ("Seated Cable Row", "Rest 2-3 min between sets."),
            ("Ab Wheel", REST_MODERATE),
        ],
    )
    def test_rest_guideline(self, name, expected):
        assert rest_guideline(name) == expected

    def test_rest_text_survives_oracle_failure(self):
        assert rest_text("Ab Wheel", BrokenOracle()) == REST_MODERATE

    def test_dumbbell_ramp(self):
        assert warmup_ramp(80, "lb", equip="dumbbell") == [
            "40%: 32.5lb x 8",
            "60%: 47.5lb x 5",
            "75%: 60lb x 3",
            "90%: 72.5lb x 1",
            "Top set: 80lb",
        ]

    def test_generic_ramp(self):
        assert warmup_ramp(None) == GENERIC_RAMP
        assert warmup_ramp(-5) == GENERIC_RAMP

    def test_warmup_text_without_oracle(self):
        text = warmup_text("Bench", "lb", 135)
        assert text.splitlines()[0] == "40%: 55lb x 8"
        assert text.splitlines()[-1].startswith("Cue:")
