"""
Data models for the Fit Scoring Engine.

Engine input (FitAnalysisInput) and the structured result
(FitScoreResult) with its category breakdown, feature matches,
accessibility flags and suggestions. Everything is created fresh on each
scoring call.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final, Optional

from core.buyer_profile import AccessibilityNeed, FeatureImportance, PropertyFeature
from core.models import (
    ActionItem,
    AnalysisRecord,
    Claim,
    MarketContext,
    PropertySnapshot,
    TrustLabel,
    WireEnum,
)


# =============================================================================
# Enums
# =============================================================================


class FitLabel(WireEnum):
    """
    Overall match label.

    A pure function of the score and the hard-cap flags.
    """
    GREAT_MATCH = "great_match"
    GOOD_MATCH = "good_match"
    FAIR = "fair"
    POOR_MATCH = "poor_match"
    DEALBREAKER = "dealbreaker"


class FeatureStatus(WireEnum):
    MATCHED = "matched"
    MISSING = "missing"
    UNKNOWN = "unknown"  # Structured data cannot decide
    VIOLATED = "violated"  # Dealbreaker present


class DealbreakerStatus(WireEnum):
    VIOLATED = "violated"
    CLEAR = "clear"
    UNKNOWN = "unknown"


class FlagSeverity(WireEnum):
    """Accessibility flag severity, most to least severe."""
    BLOCKER = "blocker"
    CONCERN = "concern"
    MANAGEABLE = "manageable"
    CLEAR = "clear"


class SuggestionCategory(WireEnum):
    LOOK_FOR = "look_for"
    WATCH_OUT = "watch_out"
    ASK_ABOUT = "ask_about"
    MODIFY = "modify"


class SuggestionPriority(WireEnum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


# Fixed summary sentence per label
FIT_SUMMARIES: Final[dict[FitLabel, str]] = {
    FitLabel.GREAT_MATCH: "This property is a strong match for your needs and preferences.",
    FitLabel.GOOD_MATCH: "This property is a good fit with a few areas to investigate.",
    FitLabel.FAIR: "This property partially meets your needs. Review the gaps carefully.",
    FitLabel.POOR_MATCH: "This property has significant mismatches with your requirements.",
    FitLabel.DEALBREAKER: (
        "This property triggers one or more dealbreakers "
        "or has critical accessibility barriers."
    ),
}

FIT_LABEL_TEXT: Final[dict[FitLabel, str]] = {
    FitLabel.GREAT_MATCH: "Great Match",
    FitLabel.GOOD_MATCH: "Good Match",
    FitLabel.FAIR: "Fair",
    FitLabel.POOR_MATCH: "Poor Match",
    FitLabel.DEALBREAKER: "Dealbreaker",
}


# =============================================================================
# Engine Input
# =============================================================================


@dataclass(frozen=True)
class FitAnalysisInput:
    """
    Everything the engine reads about one analysed listing.

    trust_score and claims come from upstream and are opaque here.
    """
    snapshot: Optional[PropertySnapshot] = None
    market_context: Optional[MarketContext] = None
    trust_score: float = 0
    trust_label: TrustLabel = TrustLabel.PENDING
    list_price: Optional[int] = None
    claims: tuple[Claim, ...] = ()
    action_items: tuple[ActionItem, ...] = ()

    @classmethod
    def from_record(cls, record: AnalysisRecord) -> "FitAnalysisInput":
        """Engine input for a stored analysis record."""
        return cls(
            snapshot=record.snapshot,
            market_context=record.market_context,
            trust_score=record.trust_score or 0,
            trust_label=record.trust_label,
            list_price=record.list_price,
            claims=record.claims,
            action_items=record.action_items,
        )

    @classmethod
    def from_dict(cls, data: dict) -> "FitAnalysisInput":
        return cls(
            snapshot=PropertySnapshot.from_dict(data.get("snapshot")),
            market_context=MarketContext.from_dict(data.get("market_context")),
            trust_score=data.get("trust_score") or 0,
            trust_label=TrustLabel.parse(data.get("trust_label") or "pending"),
            list_price=data.get("list_price"),
            claims=tuple(Claim.from_dict(c) for c in data.get("claims") or []),
            action_items=tuple(ActionItem.from_dict(a) for a in data.get("action_items") or []),
        )


# =============================================================================
# Result Types
# =============================================================================


@dataclass(frozen=True)
class FitCategory:
    """One scored category of the breakdown."""
    name: str
    score: int  # 0-100
    weight: float  # Raw weight, 0-1
    details: str

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "score": self.score,
            "weight": self.weight,
            "details": self.details,
        }


@dataclass(frozen=True)
class FitFeatureMatch:
    """Outcome of checking one profile feature against the property."""
    feature: PropertyFeature
    label: str
    importance: FeatureImportance
    status: FeatureStatus
    explanation: str

    def to_dict(self) -> dict:
        return {
            "feature": self.feature.value,
            "label": self.label,
            "importance": self.importance.value,
            "status": self.status.value,
            "explanation": self.explanation,
        }


@dataclass(frozen=True)
class AccessibilityFlag:
    """An accessibility conflict (or confirmation) for one declared need."""
    need: AccessibilityNeed
    label: str
    severity: FlagSeverity
    issue: str
    recommendation: str

    def to_dict(self) -> dict:
        return {
            "need": self.need.value,
            "label": self.label,
            "severity": self.severity.value,
            "issue": self.issue,
            "recommendation": self.recommendation,
        }


@dataclass(frozen=True)
class PropertySuggestion:
    """Something the buyer should look for, watch out for, ask or modify."""
    category: SuggestionCategory
    title: str
    description: str
    priority: SuggestionPriority

    def to_dict(self) -> dict:
        return {
            "category": self.category.value,
            "title": self.title,
            "description": self.description,
            "priority": self.priority.value,
        }


@dataclass(frozen=True)
class FitScoreResult:
    """
    Complete fit assessment for one buyer and one property.

    Always fully populated: every category is present even when its
    score reflects insufficient data.
    """
    overall_score: int
    label: FitLabel
    summary: str
    breakdown: tuple[FitCategory, ...]
    matched_features: tuple[FitFeatureMatch, ...] = ()
    missed_features: tuple[FitFeatureMatch, ...] = ()
    accessibility_flags: tuple[AccessibilityFlag, ...] = ()
    suggestions: tuple[PropertySuggestion, ...] = ()

    def category(self, name: str) -> Optional[FitCategory]:
        """Look up a breakdown entry by name."""
        for entry in self.breakdown:
            if entry.name == name:
                return entry
        return None

    def normalised_weights(self) -> dict[str, float]:
        """Weights as used in the composite (raw weight / total raw weight)."""
        total = sum(c.weight for c in self.breakdown)
        if total <= 0:
            return {c.name: 0.0 for c in self.breakdown}
        return {c.name: c.weight / total for c in self.breakdown}

    @property
    def has_violated_dealbreaker(self) -> bool:
        return any(
            f.importance == FeatureImportance.DEALBREAKER and f.status == FeatureStatus.VIOLATED
            for f in self.missed_features
        )

    @property
    def has_accessibility_blocker(self) -> bool:
        return any(f.severity == FlagSeverity.BLOCKER for f in self.accessibility_flags)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON output."""
        return {
            "overall_score": self.overall_score,
            "label": self.label.value,
            "summary": self.summary,
            "breakdown": [c.to_dict() for c in self.breakdown],
            "matched_features": [f.to_dict() for f in self.matched_features],
            "missed_features": [f.to_dict() for f in self.missed_features],
            "accessibility_flags": [f.to_dict() for f in self.accessibility_flags],
            "suggestions": [s.to_dict() for s in self.suggestions],
        }
