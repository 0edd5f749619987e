"""
Trust / Claim Aggregation

Turns a list of per-claim verdicts into a stable, complete per-category
breakdown. The scalar trust score itself is computed upstream and is
only passed through; nothing here derives it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final, Iterable, Optional, Sequence

from .models import (
    CATEGORY_LABELS,
    SEVERITY_RANK,
    Claim,
    ScoringCategory,
    Severity,
    Verdict,
)
from .fit_engine.engine import clamp_score, round_half_up


# Risk radar weighting per verdict
CONTRADICTION_RISK_WEIGHT: Final[float] = 3.0
UNVERIFIED_RISK_WEIGHT: Final[float] = 1.5
RISK_SCALE: Final[float] = 33.0
MAX_RISK: Final[int] = 100


@dataclass(frozen=True)
class CategorySummary:
    """Verdict counts for one scoring category."""

    category: ScoringCategory
    total: int = 0
    verified: int = 0
    unverified: int = 0
    contradictions: int = 0

    @property
    def label(self) -> str:
        return CATEGORY_LABELS[self.category]

    def to_dict(self) -> dict:
        return {
            "category": self.category.value,
            "total": self.total,
            "verified": self.verified,
            "unverified": self.unverified,
            "contradictions": self.contradictions,
        }


def summarize_claims(claims: Iterable[Claim]) -> list[CategorySummary]:
    """
    Count claims per category and verdict.

    Iterates the fixed category enumeration, so every category appears
    exactly once (in enumeration order) even with no claims. Confidence
    and severity are not consulted.
    """
    claims = list(claims)
    summaries = []
    for category in ScoringCategory:
        in_category = [c for c in claims if c.category == category]
        summaries.append(CategorySummary(
            category=category,
            total=len(in_category),
            verified=sum(1 for c in in_category if c.verdict == Verdict.VERIFIED),
            unverified=sum(1 for c in in_category if c.verdict == Verdict.UNVERIFIED),
            contradictions=sum(1 for c in in_category if c.verdict == Verdict.CONTRADICTION),
        ))
    return summaries


def count_verdicts(claims: Iterable[Claim]) -> dict[Verdict, int]:
    """Claim count per verdict, with every verdict present."""
    counts = {verdict: 0 for verdict in Verdict}
    for claim in claims:
        counts[claim.verdict] += 1
    return counts


def category_risk(summary: CategorySummary) -> int:
    """
    Risk radar value for a category (0-100, higher = more issues).

    Contradictions weigh double an unverified claim.
    """
    weighted = (
        summary.contradictions * CONTRADICTION_RISK_WEIGHT
        + summary.unverified * UNVERIFIED_RISK_WEIGHT
    )
    risk = int(weighted / max(summary.total, 1) * RISK_SCALE + 0.5)
    return min(MAX_RISK, risk)


def average_confidence(claims: Sequence[Claim], category: ScoringCategory) -> Optional[float]:
    """Mean confidence of a category's claims, None if it has none."""
    values = [c.confidence for c in claims if c.category == category]
    if not values:
        return None
    return sum(values) / len(values)


def highest_severity(claims: Sequence[Claim], category: ScoringCategory) -> Optional[Severity]:
    """Most severe severity among a category's claims."""
    severities = [c.severity for c in claims if c.category == category]
    if not severities:
        return None
    return min(severities, key=lambda s: SEVERITY_RANK[s])


def normalise_trust_score(value: float) -> int:
    """Upstream trust score as stored: rounded half-up, clamped to 0-100."""
    return clamp_score(round_half_up(value))
