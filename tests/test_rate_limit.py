"""
Tests for the sliding-window rate limiter.

The store takes an injectable timer, so windows are exercised by moving a
fake clock instead of sleeping.
"""

import pytest
from starlette.requests import Request

from optigence.core.rate_limit import (
    RATE_LIMIT_PRESETS,
    RateLimitDecision,
    RateLimitPolicy,
    RateLimiterStore,
    client_fingerprint,
)


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    return RateLimiterStore(timer=clock)


def make_request(headers=None, client=("10.0.0.1", 5555)) -> Request:
    scope = {
        "type": "http",
        "method": "GET",
        "path": "/",
        "headers": [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()],
        "client": client,
    }
    return Request(scope)


class TestPresets:

    def test_preset_values(self):
        assert RATE_LIMIT_PRESETS["ai"] == RateLimitPolicy("ai", 5, 60)
        assert RATE_LIMIT_PRESETS["voice"] == RateLimitPolicy("voice", 10, 60)
        assert RATE_LIMIT_PRESETS["general"] == RateLimitPolicy("general", 30, 60)
        assert RATE_LIMIT_PRESETS["admin"] == RateLimitPolicy("admin", 10, 300)


class TestRateLimiterStore:
    """Sliding window per (policy, client)."""

    def test_allows_up_to_limit(self, store):
        policy = RATE_LIMIT_PRESETS["ai"]

        decisions = [store.check("client", policy) for _ in range(5)]

        assert all(decision.allowed for decision in decisions)
        assert [decision.remaining for decision in decisions] == [4, 3, 2, 1, 0]

    def test_rejects_over_limit(self, store, clock):
        """The sixth request in a minute is rejected until the oldest expires."""
        policy = RATE_LIMIT_PRESETS["ai"]
        for _ in range(5):
            store.check("client", policy)
            clock.now += 1

        clock.now = 1010.5
        decision = store.check("client", policy)

        assert decision.allowed is False
        assert decision.remaining == 0
        assert decision.reset_at == 1060.0
        assert decision.retry_after == 50

    def test_retry_after_rounds_up(self, store, clock):
        policy = RateLimitPolicy("tight", 1, 10)
        store.check("client", policy)

        clock.now += 0.25
        decision = store.check("client", policy)

        assert decision.retry_after == 10

    def test_window_slides(self, store, clock):
        policy = RateLimitPolicy("tight", 2, 10)
        store.check("client", policy)
        clock.now += 5
        store.check("client", policy)

        clock.now += 5.5
        decision = store.check("client", policy)

        assert decision.allowed is True
        assert decision.remaining == 0

    def test_rejected_requests_not_counted(self, store, clock):
        policy = RateLimitPolicy("tight", 1, 10)
        store.check("client", policy)
        for _ in range(3):
            clock.now += 1
            store.check("client", policy)

        clock.now = 1010.5

        assert store.check("client", policy).allowed is True

    def test_clients_and_policies_are_independent(self, store):
        policy = RateLimitPolicy("tight", 1, 10)
        store.check("a", policy)

        assert store.check("b", policy).allowed is True
        assert store.check("a", RateLimitPolicy("other", 1, 10)).allowed is True
        assert store.check("a", policy).allowed is False

    def test_reset(self, store):
        policy = RateLimitPolicy("tight", 1, 10)
        store.check("a", policy)
        store.check("b", policy)

        store.reset("a")

        assert len(store) == 1
        assert store.check("a", policy).allowed is True

        store.reset()
        assert len(store) == 0


class TestDecisionHeaders:

    def test_allowed_headers(self):
        decision = RateLimitDecision(allowed=True, limit=5, remaining=3, reset_at=1060.2)

        assert decision.headers() == {
            "X-RateLimit-Limit": "5",
            "X-RateLimit-Remaining": "3",
            "X-RateLimit-Reset": "1061",
        }

    def test_rejected_headers(self):
        decision = RateLimitDecision(allowed=False, limit=5, remaining=0, reset_at=1060.0, retry_after=42)

        assert decision.headers()["Retry-After"] == "42"


class TestClientFingerprint:
    """IP resolution order and user-agent truncation."""

    def test_forwarded_for_first_entry(self):
        request = make_request({"X-Forwarded-For": "1.1.1.1, 2.2.2.2", "User-Agent": "curl/8.0"})

        assert client_fingerprint(request) == "1.1.1.1:curl/8.0"

    def test_real_ip(self):
        request = make_request({"X-Real-IP": "3.3.3.3"})

        assert client_fingerprint(request) == "3.3.3.3:unknown"

    def test_client_host_and_truncated_agent(self):
        request = make_request({"User-Agent": "a" * 80})

        assert client_fingerprint(request) == "10.0.0.1:" + "a" * 50

    def test_no_client(self):
        assert client_fingerprint(make_request(client=None)) == "unknown:unknown"
