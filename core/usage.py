"""
Usage Budget - Cost and Rate Tracking for the Claims Extractor

Tracks estimated spend and call rate of the upstream extraction service
and decides whether another call may be made. It is an injected
collaborator of the analysis pipeline; the scoring core never reads it.
"""

from __future__ import annotations

import logging
import threading
import time
from collections import deque
from dataclasses import dataclass, replace
from typing import Callable, Final, Optional


logger = logging.getLogger(__name__)


# =============================================================================
# Defaults
# =============================================================================

# USD per million tokens
DEFAULT_INPUT_PRICE_PER_MILLION: Final[float] = 3.0
DEFAULT_OUTPUT_PRICE_PER_MILLION: Final[float] = 15.0

DEFAULT_BUDGET_LIMIT: Final[float] = 5.0
DEFAULT_WARNING_THRESHOLD: Final[float] = 4.0
DEFAULT_SAFE_LIMIT: Final[float] = 4.5  # Hard stop, leaves a buffer under the budget

DEFAULT_MAX_CALLS_PER_MINUTE: Final[int] = 5
DEFAULT_MAX_CALLS_PER_HOUR: Final[int] = 30

_MINUTE: Final[float] = 60.0
_HOUR: Final[float] = 3600.0


# =============================================================================
# Types
# =============================================================================


@dataclass(frozen=True)
class TokenPricing:
    input_per_million: float = DEFAULT_INPUT_PRICE_PER_MILLION
    output_per_million: float = DEFAULT_OUTPUT_PRICE_PER_MILLION

    def cost(self, input_tokens: int, output_tokens: int) -> float:
        return (
            input_tokens / 1_000_000 * self.input_per_million
            + output_tokens / 1_000_000 * self.output_per_million
        )


@dataclass(frozen=True)
class UsageStats:
    total_calls: int = 0
    total_input_tokens: int = 0
    total_output_tokens: int = 0
    estimated_cost: float = 0.0
    last_reset: float = 0.0

    def to_dict(self) -> dict:
        return {
            "total_calls": self.total_calls,
            "total_input_tokens": self.total_input_tokens,
            "total_output_tokens": self.total_output_tokens,
            "estimated_cost": round(self.estimated_cost, 4),
            "last_reset": self.last_reset,
        }


@dataclass(frozen=True)
class UsageDecision:
    """Answer to 'may another call be made?'."""

    allowed: bool
    stats: UsageStats
    reason: Optional[str] = None


# =============================================================================
# Usage Budget
# =============================================================================


class UsageBudget:
    """
    Spend and rate limiter.

    check_and_reserve() counts the call against the rate windows when it
    is allowed; record() adds the tokens actually consumed.
    """

    def __init__(
        self,
        budget_limit: float = DEFAULT_BUDGET_LIMIT,
        safe_limit: float = DEFAULT_SAFE_LIMIT,
        warning_threshold: float = DEFAULT_WARNING_THRESHOLD,
        max_calls_per_minute: int = DEFAULT_MAX_CALLS_PER_MINUTE,
        max_calls_per_hour: int = DEFAULT_MAX_CALLS_PER_HOUR,
        pricing: Optional[TokenPricing] = None,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialise the budget.

        Args:
            budget_limit: Total spend allowed (USD)
            safe_limit: Spend at which calls are refused
            warning_threshold: Spend at which a warning is logged
            max_calls_per_minute: Burst limit
            max_calls_per_hour: Sustained limit
            pricing: Token pricing (default: published per-million rates)
            clock: Seconds since epoch; injectable for tests
        """
        self._budget_limit = budget_limit
        self._safe_limit = safe_limit
        self._warning_threshold = warning_threshold
        self._max_per_minute = max_calls_per_minute
        self._max_per_hour = max_calls_per_hour
        self._pricing = pricing or TokenPricing()
        self._clock = clock
        self._lock = threading.Lock()
        self._recent_calls: deque[float] = deque()
        self._stats = UsageStats(last_reset=self._clock())

    @property
    def budget_limit(self) -> float:
        return self._budget_limit

    @property
    def stats(self) -> UsageStats:
        return self._stats

    @property
    def remaining_budget(self) -> float:
        return max(0.0, self._budget_limit - self._stats.estimated_cost)

    def check_and_reserve(self) -> UsageDecision:
        """
        Decide whether another call may be made and, if so, count it.

        Refuses when spend has reached the safe limit or either rate
        window is full.
        """
        with self._lock:
            now = self._clock()
            while self._recent_calls and self._recent_calls[0] < now - _HOUR:
                self._recent_calls.popleft()

            reason = None
            if self._stats.estimated_cost >= self._safe_limit:
                reason = (
                    f"Budget limit reached: ${self._stats.estimated_cost:.2f} "
                    f"/ ${self._budget_limit:.2f}"
                )
            elif len(self._recent_calls) >= self._max_per_hour:
                reason = f"Hourly rate limit reached ({self._max_per_hour} calls/hour)"
            else:
                last_minute = sum(1 for t in self._recent_calls if t >= now - _MINUTE)
                if last_minute >= self._max_per_minute:
                    reason = f"Rate limit reached ({self._max_per_minute} calls/minute)"

            if reason is not None:
                logger.warning("Extraction call refused: %s", reason)
                return UsageDecision(allowed=False, stats=self._stats, reason=reason)

            self._recent_calls.append(now)
            return UsageDecision(allowed=True, stats=self._stats)

    def record(self, input_tokens: int, output_tokens: int) -> UsageStats:
        """Add one completed call's token usage."""
        with self._lock:
            cost = self._pricing.cost(input_tokens, output_tokens)
            self._stats = replace(
                self._stats,
                total_calls=self._stats.total_calls + 1,
                total_input_tokens=self._stats.total_input_tokens + input_tokens,
                total_output_tokens=self._stats.total_output_tokens + output_tokens,
                estimated_cost=self._stats.estimated_cost + cost,
            )
            if self._stats.estimated_cost >= self._warning_threshold:
                logger.warning(
                    "Extraction spend at $%.2f of $%.2f budget",
                    self._stats.estimated_cost,
                    self._budget_limit,
                )
            return self._stats

    def reset(self) -> None:
        """Clear spend and rate windows."""
        with self._lock:
            self._recent_calls.clear()
            self._stats = UsageStats(last_reset=self._clock())

    def to_dict(self) -> dict:
        return {
            **self._stats.to_dict(),
            "budget_limit": self._budget_limit,
            "safe_limit": self._safe_limit,
            "remaining_budget": round(self.remaining_budget, 4),
        }
