"""
Tests for the extraction usage budget

Tests covering:
1. Token cost arithmetic
2. Per-minute and per-hour rate windows
3. Safe spend limit
4. Reset and reporting
"""

import pytest

from core.usage import TokenPricing, UsageBudget


# =============================================================================
# Test Fixtures
# =============================================================================

class FakeClock:
    """Settable time source."""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def make_budget(clock):
    def _make(**overrides) -> UsageBudget:
        return UsageBudget(clock=clock, **overrides)
    return _make


# =============================================================================
# Test: Cost
# =============================================================================

class TestCost:

    def test_default_pricing(self):
        # 1M input at $3 plus 100k output at $15/M
        assert TokenPricing().cost(1_000_000, 100_000) == pytest.approx(4.5)

    def test_record_accumulates(self, make_budget):
        budget = make_budget()

        budget.record(10_000, 2_000)
        stats = budget.record(10_000, 2_000)

        assert stats.total_calls == 2
        assert stats.total_input_tokens == 20_000
        assert stats.total_output_tokens == 4_000
        assert stats.estimated_cost == pytest.approx(0.12)

    def test_remaining_budget(self, make_budget):
        budget = make_budget(budget_limit=1.0)
        budget.record(0, 40_000)

        assert budget.remaining_budget == pytest.approx(0.4)


# =============================================================================
# Test: Rate Windows
# =============================================================================

class TestRateLimits:

    def test_minute_window(self, make_budget):
        budget = make_budget(max_calls_per_minute=2)

        assert budget.check_and_reserve().allowed
        assert budget.check_and_reserve().allowed

        refused = budget.check_and_reserve()
        assert not refused.allowed
        assert refused.reason == "Rate limit reached (2 calls/minute)"

    def test_minute_window_slides(self, make_budget, clock):
        budget = make_budget(max_calls_per_minute=1)
        budget.check_and_reserve()

        clock.advance(61)

        assert budget.check_and_reserve().allowed

    def test_hour_window(self, make_budget, clock):
        budget = make_budget(max_calls_per_minute=10, max_calls_per_hour=3)
        for _ in range(3):
            assert budget.check_and_reserve().allowed
            clock.advance(120)

        refused = budget.check_and_reserve()
        assert refused.reason == "Hourly rate limit reached (3 calls/hour)"

        clock.advance(3600)
        assert budget.check_and_reserve().allowed

    def test_refused_call_not_counted(self, make_budget, clock):
        budget = make_budget(max_calls_per_minute=1, max_calls_per_hour=2)
        budget.check_and_reserve()
        budget.check_and_reserve()  # refused

        clock.advance(61)

        assert budget.check_and_reserve().allowed


# =============================================================================
# Test: Spend Limit
# =============================================================================

class TestSpendLimit:

    def test_refuses_at_safe_limit(self, make_budget):
        budget = make_budget(budget_limit=5.0, safe_limit=4.5)
        budget.record(1_000_000, 100_000)  # $4.50

        decision = budget.check_and_reserve()

        assert not decision.allowed
        assert decision.reason.startswith("Budget limit reached")

    def test_warning_logged(self, make_budget, caplog):
        budget = make_budget(warning_threshold=0.01)

        budget.record(10_000, 0)

        assert "Extraction spend" in caplog.text

    def test_reset(self, make_budget, clock):
        budget = make_budget(max_calls_per_minute=1)
        budget.check_and_reserve()
        budget.record(1_000_000, 100_000)

        budget.reset()

        assert budget.stats.total_calls == 0
        assert budget.check_and_reserve().allowed

    def test_to_dict(self, make_budget):
        data = make_budget(budget_limit=2.0, safe_limit=1.5).to_dict()

        assert data["budget_limit"] == 2.0
        assert data["safe_limit"] == 1.5
        assert data["remaining_budget"] == 2.0
        assert data["total_calls"] == 0
