"""
Fit Scoring Engine

Personalised 0-100 Fit Score for one buyer and one property, with a
weighted category breakdown, feature matches, accessibility flags and
suggestions.
"""

from .models import (
    FIT_LABEL_TEXT,
    FIT_SUMMARIES,
    AccessibilityFlag,
    DealbreakerStatus,
    FeatureStatus,
    FitAnalysisInput,
    FitCategory,
    FitFeatureMatch,
    FitLabel,
    FitScoreResult,
    FlagSeverity,
    PropertySuggestion,
    SuggestionCategory,
    SuggestionPriority,
)
from .pricing import EffectivePrice, PriceSource, resolve_effective_price
from .features import check_dealbreaker, check_feature_present
from .engine import FitScoringEngine, compute_fit_score, derive_label

__all__ = [
    # Models
    "FIT_LABEL_TEXT",
    "FIT_SUMMARIES",
    "AccessibilityFlag",
    "DealbreakerStatus",
    "FeatureStatus",
    "FitAnalysisInput",
    "FitCategory",
    "FitFeatureMatch",
    "FitLabel",
    "FitScoreResult",
    "FlagSeverity",
    "PropertySuggestion",
    "SuggestionCategory",
    "SuggestionPriority",
    # Pricing
    "EffectivePrice",
    "PriceSource",
    "resolve_effective_price",
    # Feature predicates
    "check_dealbreaker",
    "check_feature_present",
    # Engine
    "FitScoringEngine",
    "compute_fit_score",
    "derive_label",
]

__version__ = "1.0"
