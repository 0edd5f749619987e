"""
Report Renderer

Shapes engine results into the nested dictionaries a presentation layer
reads: grouping, ordering and display-only derived values. No rule here
changes a score; anything that would belongs in the fit engine.

Two reports:
1. Fit report (build_fit_report) - one buyer against one property
2. Trust report (build_trust_report) - one analysed listing
"""

from __future__ import annotations

from typing import Final, Optional

from core.accessibility import accessibility_label, requirement_for, requirements_for
from core.buyer_profile import BuyerProfile
from core.fit_engine import (
    FIT_LABEL_TEXT,
    FeatureStatus,
    FitScoreResult,
    FlagSeverity,
    SuggestionPriority,
)
from core.fit_engine.engine import round_half_up
from core.models import (
    ACTION_PRIORITY_RANK,
    CATEGORY_LABELS,
    SEVERITY_RANK,
    AnalysisRecord,
    Claim,
    ScoringCategory,
    Verdict,
)
from core.trust import (
    average_confidence,
    category_risk,
    count_verdicts,
    highest_severity,
    summarize_claims,
)
from utils.formatting import format_currency, format_percent


# =============================================================================
# Display Constants
# =============================================================================

# Category score bands used for bar colouring
SCORE_TIERS: Final[tuple[tuple[int, str], ...]] = (
    (80, "strong"),
    (60, "good"),
    (40, "fair"),
)
LOWEST_TIER: Final[str] = "weak"

# Price-per-sqft differences inside this band are shown as neutral
PPSF_NEUTRAL_BAND: Final[float] = 5.0

REPORT_VERSION: Final[str] = "1.0"


def score_tier(score: int) -> str:
    for threshold, tier in SCORE_TIERS:
        if score >= threshold:
            return tier
    return LOWEST_TIER


# =============================================================================
# Fit Report
# =============================================================================


def build_fit_report(result: FitScoreResult, profile: Optional[BuyerProfile] = None) -> dict:
    """
    Shape a fit result for display.

    Args:
        result: Output of the fit engine
        profile: The buyer profile the result was computed for. When given,
            the report carries the accessibility checklist for its needs.

    Returns:
        Report dictionary (JSON-serialisable)
    """
    normalised = result.normalised_weights()

    breakdown = []
    for category in result.breakdown:
        share = normalised.get(category.name, 0.0)
        breakdown.append({
            "name": category.name,
            "score": category.score,
            "tier": score_tier(category.score),
            "weight": category.weight,
            "weight_percent": round_half_up(category.weight * 100),
            "weighted_contribution": round(category.score * share, 1),
            "details": category.details,
        })

    flags_by_severity = {
        severity.value: [f.to_dict() for f in result.accessibility_flags if f.severity == severity]
        for severity in FlagSeverity
    }
    suggestions_by_priority = {
        priority.value: [s.to_dict() for s in result.suggestions if s.priority == priority]
        for priority in SuggestionPriority
    }

    report = {
        "version": REPORT_VERSION,
        "overall_score": result.overall_score,
        "label": result.label.value,
        "label_text": FIT_LABEL_TEXT[result.label],
        "summary": result.summary,
        "breakdown": breakdown,
        "features": {
            "matched": [f.to_dict() for f in result.matched_features],
            "missed": [f.to_dict() for f in result.missed_features],
            "matched_count": sum(
                1 for f in result.matched_features if f.status == FeatureStatus.MATCHED
            ),
            "missed_count": len(result.missed_features),
        },
        "accessibility": {
            "flags": flags_by_severity,
            "counts": {key: len(flags) for key, flags in flags_by_severity.items()},
            "has_blocker": result.has_accessibility_blocker,
            "checklist": [],
            "needs": [],
        },
        "suggestions": suggestions_by_priority,
        "suggestion_count": len(result.suggestions),
    }

    if profile is not None and profile.has_accessibility_needs:
        needs = tuple(dict.fromkeys(profile.declared_needs))
        report["accessibility"]["checklist"] = requirements_for(needs)
        report["accessibility"]["needs"] = [
            {
                "need": need.value,
                "label": accessibility_label(need),
                "requirements": list(requirement_for(need).requirements),
            }
            for need in needs
        ]

    return report


# =============================================================================
# Trust Report
# =============================================================================


def sort_claims(claims) -> list[Claim]:
    """Most severe first, then highest confidence."""
    return sorted(claims, key=lambda c: (SEVERITY_RANK[c.severity], -c.confidence))


def ppsf_difference(subject_ppsf: Optional[float], comparable_ppsf: float) -> Optional[float]:
    """Percent the subject's $/sqft sits above (+) or below (-) a comparable's."""
    if not subject_ppsf or not comparable_ppsf:
        return None
    return (subject_ppsf - comparable_ppsf) / comparable_ppsf * 100


def _ppsf_direction(diff: Optional[float]) -> Optional[str]:
    if diff is None:
        return None
    if diff > PPSF_NEUTRAL_BAND:
        return "above"
    if diff < -PPSF_NEUTRAL_BAND:
        return "below"
    return "in_line"


def build_trust_report(
    record: AnalysisRecord,
    category: Optional[ScoringCategory] = None,
) -> dict:
    """
    Shape an analysis record for display.

    Args:
        record: The analysed listing
        category: Restrict the claim list to one category. Counts and
            category summaries always cover every claim.

    Returns:
        Report dictionary (JSON-serialisable)
    """
    claims = list(record.claims)
    verdicts = count_verdicts(claims)

    categories = []
    for summary in summarize_claims(claims):
        severity = highest_severity(claims, summary.category)
        confidence = average_confidence(claims, summary.category)
        categories.append({
            **summary.to_dict(),
            "label": summary.label,
            "risk": category_risk(summary),
            "average_confidence": round(confidence, 2) if confidence is not None else None,
            "highest_severity": severity.value if severity else None,
        })

    shown = claims if category is None else [c for c in claims if c.category == category]
    action_items = sorted(
        record.action_items, key=lambda a: ACTION_PRIORITY_RANK[a.priority]
    )

    report = {
        "version": REPORT_VERSION,
        "id": record.id,
        "address": record.address,
        "status": record.status.value,
        "created_at": record.created_at,
        "list_price": record.list_price,
        "list_price_display": format_currency(record.list_price),
        "property_type": record.property_type,
        "trust_score": record.trust_score,
        "trust_label": record.trust_label.value,
        "overall_verdict": record.overall_verdict,
        "error_message": record.error_message,
        "verdict_counts": {verdict.value: verdicts[verdict] for verdict in Verdict},
        "categories": categories,
        "category_filter": category.value if category else None,
        "category_filter_label": CATEGORY_LABELS[category] if category else None,
        "claims": [c.to_dict() for c in sort_claims(shown)],
        "action_items": [a.to_dict() for a in action_items],
        "snapshot": record.snapshot.to_dict() if record.snapshot else None,
        "market": None,
    }

    market = record.market_context
    if market is not None:
        comparables = []
        for comp in market.comparables:
            diff = ppsf_difference(market.price_per_sqft, comp.ppsf)
            comparables.append({
                **comp.to_dict(),
                "ppsf_diff_percent": round(diff, 1) if diff is not None else None,
                "ppsf_direction": _ppsf_direction(diff),
                "ppsf_diff_display": format_percent(diff, signed=True) if diff is not None else None,
            })
        report["market"] = {**market.to_dict(), "comparables": comparables}

    return report
