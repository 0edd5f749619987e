"""
Listing Fit & Trust Engine - Core Business Logic

Evaluates a real-estate listing against public records and a buyer's
requirements:
1. Snapshot Merge (authoritative record + inferred snapshot, per field)
2. Trust Aggregation (claim verdict counts per fixed category)
3. Fit Scoring (weighted categories, hard caps, flags, suggestions)

Everything in the scoring path is synchronous, pure and deterministic.
Persistence, usage tracking and the analysis pipeline are collaborators
around that core.
"""

from .models import (
    CATEGORY_LABELS,
    ActionCategory,
    ActionItem,
    ActionPriority,
    AnalysisRecord,
    AnalysisStatus,
    Claim,
    ClaimSource,
    ComparableProperty,
    Evidence,
    EvidenceType,
    InvalidStatusTransition,
    InventoryLevel,
    MarketContext,
    PropertySnapshot,
    ScoringCategory,
    Severity,
    TrustLabel,
    Verdict,
)
from .buyer_profile import (
    AccessibilityNeed,
    BuyerProfile,
    BuyerSituation,
    CommuteMode,
    FeatureImportance,
    HouseholdMember,
    ProfileValidationError,
    ProfileValidationResult,
    PropertyFeature,
    assign_feature,
    remove_feature,
    validate_buyer_profile,
)
from .accessibility import (
    ACCESSIBILITY_REQUIREMENTS,
    AccessibilityRequirement,
    requirements_for,
)
from .merge import merge_field, merge_snapshots
from .trust import CategorySummary, count_verdicts, normalise_trust_score, summarize_claims

# Fit Scoring Engine
from .fit_engine import (
    FitAnalysisInput,
    FitLabel,
    FitScoreResult,
    FitScoringEngine,
    compute_fit_score,
    resolve_effective_price,
)

# Collaborators
from .usage import UsageBudget, UsageDecision, UsageStats
from .repository import (
    AnalysisRepository,
    BuyerProfileRepository,
    KeyValueStore,
    get_analysis_repository,
    get_profile_repository,
)
from .pipeline import (
    AnalysisFailedError,
    AnalysisPipeline,
    AnalysisRequest,
    ClaimsExtraction,
    ClaimsExtractor,
    PropertyRecordSource,
)

__all__ = [
    # Domain model
    "CATEGORY_LABELS",
    "ActionCategory",
    "ActionItem",
    "ActionPriority",
    "AnalysisRecord",
    "AnalysisStatus",
    "Claim",
    "ClaimSource",
    "ComparableProperty",
    "Evidence",
    "EvidenceType",
    "InvalidStatusTransition",
    "InventoryLevel",
    "MarketContext",
    "PropertySnapshot",
    "ScoringCategory",
    "Severity",
    "TrustLabel",
    "Verdict",
    # Buyer profile
    "AccessibilityNeed",
    "BuyerProfile",
    "BuyerSituation",
    "CommuteMode",
    "FeatureImportance",
    "HouseholdMember",
    "ProfileValidationError",
    "ProfileValidationResult",
    "PropertyFeature",
    "assign_feature",
    "remove_feature",
    "validate_buyer_profile",
    # Accessibility table
    "ACCESSIBILITY_REQUIREMENTS",
    "AccessibilityRequirement",
    "requirements_for",
    # Merge and trust
    "merge_field",
    "merge_snapshots",
    "CategorySummary",
    "count_verdicts",
    "normalise_trust_score",
    "summarize_claims",
    # Fit engine
    "FitAnalysisInput",
    "FitLabel",
    "FitScoreResult",
    "FitScoringEngine",
    "compute_fit_score",
    "resolve_effective_price",
    # Collaborators
    "UsageBudget",
    "UsageDecision",
    "UsageStats",
    "AnalysisRepository",
    "BuyerProfileRepository",
    "KeyValueStore",
    "get_analysis_repository",
    "get_profile_repository",
    "AnalysisFailedError",
    "AnalysisPipeline",
    "AnalysisRequest",
    "ClaimsExtraction",
    "ClaimsExtractor",
    "PropertyRecordSource",
]
