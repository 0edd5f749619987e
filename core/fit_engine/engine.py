"""
Fit Scoring Engine

Compares a buyer profile against one analysed property and produces a
0-100 Fit Score with a category breakdown, feature matches,
accessibility flags and suggestions.

Scoring methodology:
- Budget Fit (25%): effective price against comfortable and stretch ceilings
- Size & Layout (20%): bed, bath and square footage shortfalls
- Accessibility (30% with declared needs, 5% without): story count,
  construction year and neighborhood noise against each need
- Feature Match (15%): must-haves, nice-to-haves and dealbreakers
- Trust & Risk (10%): the upstream trust score, passed through
- Lifestyle Fit (remainder, at least 5%): situation and household heuristics

Hard caps run after the weighted average: a violated dealbreaker or an
accessibility blocker caps the score at 25; an effective price more than
10% / 20% over the stretch budget caps it at 40 / 30.

Deterministic and side-effect free; missing data degrades to documented
fallback scores instead of raising.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Optional

from core.accessibility import SINGLE_LEVEL_NEEDS, STAIR_SENSITIVE_NEEDS
from core.buyer_profile import (
    AccessibilityNeed,
    BuyerProfile,
    BuyerSituation,
    FeatureImportance,
    HouseholdMember,
    feature_label,
)
from core.models import PropertySnapshot, ScoringCategory

from . import constants as C
from .features import check_dealbreaker, check_feature_present
from .models import (
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
from .pricing import EffectivePrice, resolve_effective_price


logger = logging.getLogger(__name__)


# =============================================================================
# Helpers
# =============================================================================


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return int(math.floor(value + 0.5))


def clamp_score(value: float) -> int:
    return int(max(C.MIN_SCORE, min(C.MAX_SCORE, value)))


def _money(amount: float) -> str:
    return f"${amount:,.0f}"


def _number(value: float) -> str:
    return f"{value:g}"


def _need_name(need: AccessibilityNeed) -> str:
    return need.value.replace("_", " ")


def percent_over_stretch(price: float, budget_stretch: float) -> float:
    """How far a price exceeds the stretch ceiling, as a percentage of it."""
    if budget_stretch <= 0:
        return C.DEGENERATE_STRETCH_PCT_OVER
    return (price - budget_stretch) / budget_stretch * 100


@dataclass
class _Findings:
    """Per-call accumulator. Never shared between calls."""

    matched: list[FitFeatureMatch] = field(default_factory=list)
    missed: list[FitFeatureMatch] = field(default_factory=list)
    flags: list[AccessibilityFlag] = field(default_factory=list)
    suggestions: list[PropertySuggestion] = field(default_factory=list)

    def suggest(
        self,
        category: SuggestionCategory,
        title: str,
        description: str,
        priority: SuggestionPriority,
    ) -> None:
        self.suggestions.append(PropertySuggestion(category, title, description, priority))

    def flag(
        self,
        need: AccessibilityNeed,
        label: str,
        severity: FlagSeverity,
        issue: str,
        recommendation: str,
    ) -> None:
        self.flags.append(AccessibilityFlag(need, label, severity, issue, recommendation))


# =============================================================================
# Engine
# =============================================================================


class FitScoringEngine:
    """
    Computes Fit Scores.

    Holds no state between calls; one instance can serve concurrent
    requests.
    """

    def score(self, profile: BuyerProfile, analysis: FitAnalysisInput) -> FitScoreResult:
        """
        Score one property for one buyer.

        Args:
            profile: The buyer's requirements
            analysis: Merged snapshot, trust score, list price and claims

        Returns:
            FitScoreResult with every category present
        """
        findings = _Findings()
        snapshot = analysis.snapshot
        price = resolve_effective_price(analysis.list_price, snapshot)

        accessibility_weight = (
            C.WEIGHT_ACCESSIBILITY_WITH_NEEDS
            if profile.has_accessibility_needs
            else C.WEIGHT_ACCESSIBILITY_NO_NEEDS
        )

        budget = self._score_budget(profile, price, findings)
        size = self._score_size(profile, snapshot)
        accessibility = self._score_accessibility(
            profile, analysis, accessibility_weight, findings
        )
        features = self._score_features(profile, snapshot, findings)
        trust = self._score_trust(analysis)
        lifestyle = self._score_lifestyle(
            profile, snapshot, self._lifestyle_weight(accessibility_weight), findings
        )
        self._add_pet_suggestion(profile, snapshot, findings)

        breakdown = (budget, size, accessibility, features, trust, lifestyle)
        overall = self._weighted_average(breakdown)

        has_dealbreaker = any(
            m.importance == FeatureImportance.DEALBREAKER and m.status == FeatureStatus.VIOLATED
            for m in findings.missed
        )
        has_blocker = any(f.severity == FlagSeverity.BLOCKER for f in findings.flags)
        overall = self._apply_hard_caps(overall, profile, price, has_dealbreaker or has_blocker)

        label = derive_label(overall, has_dealbreaker, has_blocker)

        return FitScoreResult(
            overall_score=overall,
            label=label,
            summary=FIT_SUMMARIES[label],
            breakdown=breakdown,
            matched_features=tuple(findings.matched),
            missed_features=tuple(findings.missed),
            accessibility_flags=tuple(findings.flags),
            suggestions=tuple(findings.suggestions),
        )

    # =========================================================================
    # Categories
    # =========================================================================

    def _score_budget(
        self,
        profile: BuyerProfile,
        price: Optional[EffectivePrice],
        findings: _Findings,
    ) -> FitCategory:
        """Budget fit: 100 within budget, 60-20 within stretch, under 15 beyond."""
        if price is None:
            return FitCategory(
                name=C.CATEGORY_BUDGET,
                score=C.BUDGET_NO_PRICE_SCORE,
                weight=C.WEIGHT_BUDGET,
                details="No price data available. Cannot evaluate budget fit.",
            )

        value = price.value
        prefix = f"At {_money(value)} ({price.description})"

        if value <= profile.budget_max:
            score = 100
            details = f"{prefix}, within your {_money(profile.budget_max)} budget."
        elif value <= profile.budget_stretch:
            over_by = value - profile.budget_max
            stretch_range = profile.budget_stretch - profile.budget_max
            score = round_half_up(
                C.BUDGET_STRETCH_TOP - (over_by / stretch_range) * C.BUDGET_STRETCH_SPAN
            )
            details = f"{prefix}, {_money(over_by)} over preferred max but within stretch."
            findings.suggest(
                SuggestionCategory.WATCH_OUT,
                "Over your preferred budget",
                f"This property is {_money(over_by)} above your preferred maximum "
                f"of {_money(profile.budget_max)}.",
                SuggestionPriority.HIGH,
            )
        else:
            over_stretch = value - profile.budget_stretch
            pct_over = percent_over_stretch(value, profile.budget_stretch)
            score = max(
                0,
                C.BUDGET_OVER_STRETCH_BASE
                - round_half_up(pct_over / C.BUDGET_OVER_STRETCH_DIVISOR),
            )
            details = (
                f"{prefix}, exceeds your stretch budget of {_money(profile.budget_stretch)} "
                f"by {_money(over_stretch)}."
            )
            findings.suggest(
                SuggestionCategory.WATCH_OUT,
                "Significantly over budget",
                f"This property is {_money(over_stretch)} above your absolute maximum. "
                "Likely not affordable.",
                SuggestionPriority.HIGH,
            )

        return FitCategory(C.CATEGORY_BUDGET, clamp_score(score), C.WEIGHT_BUDGET, details)

    def _score_size(
        self,
        profile: BuyerProfile,
        snapshot: Optional[PropertySnapshot],
    ) -> FitCategory:
        """
        Size & layout: start at 100 and subtract per shortfall.

        An unknown field costs less than a confirmed miss.
        """
        if snapshot is None:
            return FitCategory(
                name=C.CATEGORY_SIZE,
                score=C.SIZE_NO_SNAPSHOT_SCORE,
                weight=C.WEIGHT_SIZE,
                details="No property details available. Cannot verify size requirements.",
            )

        score = 100
        issues: list[str] = []

        if profile.beds_min > 0:
            if snapshot.beds is None:
                score -= C.SIZE_BEDS_UNKNOWN_PENALTY
                issues.append(f"Bed count unknown (you need {profile.beds_min}+)")
            elif snapshot.beds < profile.beds_min:
                gap = profile.beds_min - snapshot.beds
                score -= gap * C.SIZE_BED_PENALTY_PER_ROOM
                issues.append(f"{snapshot.beds} beds (you need {profile.beds_min}+)")

        if profile.baths_min > 0:
            if snapshot.baths is None:
                score -= C.SIZE_BATHS_UNKNOWN_PENALTY
                issues.append(f"Bath count unknown (you need {_number(profile.baths_min)}+)")
            elif snapshot.baths < profile.baths_min:
                score -= C.SIZE_BATH_PENALTY
                issues.append(
                    f"{_number(snapshot.baths)} baths (you need {_number(profile.baths_min)}+)"
                )

        if profile.sqft_min > 0:
            if snapshot.sqft is None:
                score -= C.SIZE_SQFT_UNKNOWN_PENALTY
                issues.append(f"Square footage unknown (you want {profile.sqft_min:,}+)")
            elif snapshot.sqft < profile.sqft_min:
                deficit_pct = (profile.sqft_min - snapshot.sqft) / profile.sqft_min * 100
                score -= min(C.SIZE_SQFT_MAX_PENALTY, round_half_up(deficit_pct))
                issues.append(f"{snapshot.sqft:,} sqft (you want {profile.sqft_min:,}+)")

        details = (
            "Size concerns: " + "; ".join(issues)
            if issues
            else "Property meets your size requirements."
        )
        return FitCategory(C.CATEGORY_SIZE, clamp_score(score), C.WEIGHT_SIZE, details)

    def _score_accessibility(
        self,
        profile: BuyerProfile,
        analysis: FitAnalysisInput,
        weight: float,
        findings: _Findings,
    ) -> FitCategory:
        """Accessibility: need-specific rules against stories, age and noise claims."""
        if not profile.has_accessibility_needs:
            return FitCategory(
                C.CATEGORY_ACCESSIBILITY, 100, weight, "No specific accessibility requirements."
            )

        snapshot = analysis.snapshot
        stories = snapshot.stories if snapshot else None
        is_multi_story = stories is not None and stories > 1
        is_single_story = stories is not None and stories == 1
        flags_before = len(findings.flags)
        score = 100

        for need in dict.fromkeys(profile.declared_needs):
            if need in STAIR_SENSITIVE_NEEDS and is_multi_story:
                is_wheelchair = need == AccessibilityNeed.WHEELCHAIR_FULL
                score -= (
                    C.ACCESS_WHEELCHAIR_MULTI_STORY_PENALTY
                    if is_wheelchair
                    else C.ACCESS_MOBILITY_MULTI_STORY_PENALTY
                )
                findings.flag(
                    need,
                    _need_name(need),
                    FlagSeverity.BLOCKER if is_wheelchair else FlagSeverity.CONCERN,
                    f"{stories}-story home. "
                    + (
                        "Full-time wheelchair users need single-story or elevator."
                        if is_wheelchair
                        else "Multi-story may be challenging."
                    ),
                    "This property likely won't work without a residential elevator "
                    "($20K-$50K). Consider single-story alternatives."
                    if is_wheelchair
                    else "Check if main floor has bedroom, bathroom, kitchen, and laundry.",
                )
                findings.suggest(
                    SuggestionCategory.ASK_ABOUT,
                    "Ask about main floor livability",
                    f"With {_need_name(need)} needs, confirm bedroom and full bathroom "
                    "on main floor.",
                    SuggestionPriority.HIGH,
                )
            elif need in SINGLE_LEVEL_NEEDS and is_single_story:
                findings.flag(
                    need,
                    _need_name(need),
                    FlagSeverity.MANAGEABLE,
                    "Single-story is positive for mobility needs.",
                    'Verify doorway widths (36"+), entry step height, and bathroom configuration.',
                )
            elif need in SINGLE_LEVEL_NEEDS and stories is None:
                score -= C.ACCESS_STORIES_UNKNOWN_PENALTY
                findings.flag(
                    need,
                    _need_name(need),
                    FlagSeverity.CONCERN,
                    "Number of stories unknown. Cannot verify accessibility.",
                    "Confirm if single-story or has elevator access before visiting.",
                )

            if need == AccessibilityNeed.SENSORY_SENSITIVITY and _has_noise_claims(analysis):
                score -= C.ACCESS_NOISE_PENALTY
                findings.flag(
                    need,
                    "Sensory Sensitivity",
                    FlagSeverity.CONCERN,
                    "Potential noise concerns found in the neighborhood.",
                    "Visit at multiple times of day. Check proximity to major roads.",
                )

            if (
                need == AccessibilityNeed.RESPIRATORY
                and snapshot is not None
                and snapshot.year_built
                and snapshot.year_built < C.RESPIRATORY_YEAR_THRESHOLD
            ):
                score -= C.ACCESS_OLD_BUILD_PENALTY
                findings.flag(
                    need,
                    "Respiratory Needs",
                    FlagSeverity.CONCERN,
                    f"Built in {snapshot.year_built}. Older homes may have ventilation issues.",
                    "Request mold inspection and air quality test. Check HVAC.",
                )

            if need == AccessibilityNeed.AGING_IN_PLACE and is_multi_story:
                score -= C.ACCESS_AGING_MULTI_STORY_PENALTY
                findings.flag(
                    need,
                    "Aging in Place",
                    FlagSeverity.CONCERN,
                    "Multi-story may become challenging as mobility changes.",
                    "Evaluate main-floor master suite potential.",
                )
                findings.suggest(
                    SuggestionCategory.MODIFY,
                    "Aging-in-place modification potential",
                    "Get estimate for: main-floor bedroom, grab bars, walk-in shower, "
                    "wider doorways.",
                    SuggestionPriority.MEDIUM,
                )

        new_flags = findings.flags[flags_before:]
        if new_flags:
            blockers = sum(1 for f in new_flags if f.severity == FlagSeverity.BLOCKER)
            concerns = sum(1 for f in new_flags if f.severity == FlagSeverity.CONCERN)
            details = f"{blockers} blockers, {concerns} concerns for accessibility."
        else:
            details = "No major accessibility conflicts detected (verify during inspection)."

        return FitCategory(C.CATEGORY_ACCESSIBILITY, clamp_score(score), weight, details)

    def _score_features(
        self,
        profile: BuyerProfile,
        snapshot: Optional[PropertySnapshot],
        findings: _Findings,
    ) -> FitCategory:
        """Feature match: penalties for missing must-haves and violated dealbreakers."""
        score = 100
        matched_before = len(findings.matched)
        missed_before = len(findings.missed)

        for feature in profile.must_haves:
            status = check_feature_present(feature, snapshot)
            if status == FeatureStatus.MATCHED:
                findings.matched.append(FitFeatureMatch(
                    feature, feature_label(feature), FeatureImportance.MUST_HAVE,
                    status, "Required feature present.",
                ))
            elif status == FeatureStatus.MISSING:
                score -= C.FEATURE_MUST_HAVE_MISSING_PENALTY
                findings.missed.append(FitFeatureMatch(
                    feature, feature_label(feature), FeatureImportance.MUST_HAVE,
                    status, "This must-have feature appears to be missing.",
                ))
            else:
                score -= C.FEATURE_MUST_HAVE_UNKNOWN_PENALTY
                findings.missed.append(FitFeatureMatch(
                    feature, feature_label(feature), FeatureImportance.MUST_HAVE,
                    FeatureStatus.UNKNOWN, "Could not verify. Check during visit.",
                ))

        for feature in profile.nice_to_haves:
            status = check_feature_present(feature, snapshot)
            if status == FeatureStatus.MATCHED:
                findings.matched.append(FitFeatureMatch(
                    feature, feature_label(feature), FeatureImportance.NICE_TO_HAVE,
                    status, "Bonus feature present!",
                ))
            elif status == FeatureStatus.MISSING:
                score -= C.FEATURE_NICE_TO_HAVE_MISSING_PENALTY
                findings.missed.append(FitFeatureMatch(
                    feature, feature_label(feature), FeatureImportance.NICE_TO_HAVE,
                    status, "Nice-to-have not present.",
                ))

        for feature in profile.dealbreakers:
            if check_dealbreaker(feature, snapshot) == DealbreakerStatus.VIOLATED:
                score -= C.FEATURE_DEALBREAKER_PENALTY
                findings.missed.append(FitFeatureMatch(
                    feature, feature_label(feature), FeatureImportance.DEALBREAKER,
                    FeatureStatus.VIOLATED, "Dealbreaker triggered.",
                ))

        matched = len(findings.matched) - matched_before
        missed = len(findings.missed) - missed_before
        return FitCategory(
            C.CATEGORY_FEATURES,
            clamp_score(score),
            C.WEIGHT_FEATURES,
            f"{matched} matched, {missed} missing or flagged.",
        )

    def _score_trust(self, analysis: FitAnalysisInput) -> FitCategory:
        """Trust & risk: the upstream trust score, not computed here."""
        score = clamp_score(round_half_up(analysis.trust_score))
        return FitCategory(
            C.CATEGORY_TRUST,
            score,
            C.WEIGHT_TRUST,
            f"Listing trust score is {score}/100.",
        )

    def _score_lifestyle(
        self,
        profile: BuyerProfile,
        snapshot: Optional[PropertySnapshot],
        weight: float,
        findings: _Findings,
    ) -> FitCategory:
        """Lifestyle fit: base 65 adjusted by situation and household."""
        score = C.LIFESTYLE_BASE_SCORE
        beds = snapshot.beds if snapshot else None
        stories = snapshot.stories if snapshot else None

        if (
            profile.situation == BuyerSituation.MULTIGENERATIONAL
            and beds is not None
            and beds >= C.LIFESTYLE_MULTIGEN_MIN_BEDS
        ):
            score += C.LIFESTYLE_MULTIGEN_BONUS

        if profile.situation == BuyerSituation.RETIRING and stories == 1:
            score += C.LIFESTYLE_RETIRING_SINGLE_STORY_BONUS

        if profile.has_household_member(HouseholdMember.ELDERLY_PARENT):
            if stories is not None and stories > 1:
                score -= C.LIFESTYLE_ELDERLY_MULTI_STORY_PENALTY
                findings.suggest(
                    SuggestionCategory.ASK_ABOUT,
                    "Elderly parent accommodations",
                    "Verify main-floor bedroom/bathroom and proximity to medical facilities.",
                    SuggestionPriority.HIGH,
                )
            elif stories == 1:
                score += C.LIFESTYLE_ELDERLY_SINGLE_STORY_BONUS

        if profile.has_household_member(HouseholdMember.FAMILY_YOUNG_KIDS):
            findings.suggest(
                SuggestionCategory.LOOK_FOR,
                "Child safety check",
                "Check pool fencing, stair gates, window locks, fenced yard. "
                "Verify school district.",
                SuggestionPriority.MEDIUM,
            )

        return FitCategory(
            C.CATEGORY_LIFESTYLE,
            clamp_score(score),
            weight,
            "Based on household and lifestyle preferences.",
        )

    # =========================================================================
    # Composite
    # =========================================================================

    @staticmethod
    def _lifestyle_weight(accessibility_weight: float) -> float:
        """Remainder of the fixed weights, floored."""
        fixed = (
            C.WEIGHT_BUDGET
            + C.WEIGHT_SIZE
            + accessibility_weight
            + C.WEIGHT_FEATURES
            + C.WEIGHT_TRUST
        )
        return max(C.WEIGHT_LIFESTYLE_FLOOR, 1 - fixed)

    @staticmethod
    def _weighted_average(breakdown: tuple[FitCategory, ...]) -> int:
        """Weighted mean over the raw weights, so effective weights sum to 1."""
        total_weight = sum(c.weight for c in breakdown)
        weighted_sum = sum(c.score * c.weight for c in breakdown)
        return round_half_up(weighted_sum / total_weight)

    @staticmethod
    def _apply_hard_caps(
        score: int,
        profile: BuyerProfile,
        price: Optional[EffectivePrice],
        hard_cap_triggered: bool,
    ) -> int:
        """Caps only ever lower the score."""
        if hard_cap_triggered:
            score = min(score, C.DEALBREAKER_SCORE_CAP)
            logger.debug("Dealbreaker/blocker cap applied: %s", score)

        if price is not None and price.value > profile.budget_stretch:
            pct_over = percent_over_stretch(price.value, profile.budget_stretch)
            if pct_over > C.OVER_STRETCH_SEVERE_PCT:
                score = min(score, C.OVER_STRETCH_SEVERE_CAP)
            elif pct_over > C.OVER_STRETCH_MODERATE_PCT:
                score = min(score, C.OVER_STRETCH_MODERATE_CAP)

        return clamp_score(score)

    @staticmethod
    def _add_pet_suggestion(
        profile: BuyerProfile,
        snapshot: Optional[PropertySnapshot],
        findings: _Findings,
    ) -> None:
        """Informational only; does not affect the score."""
        if not profile.has_pets:
            return
        pets = ", ".join(profile.pet_types) if profile.pet_types else "pets"
        has_hoa = snapshot is not None and snapshot.hoa is not None and snapshot.hoa > 0
        findings.suggest(
            SuggestionCategory.ASK_ABOUT,
            "Pet policy check",
            f"You have {pets}. "
            + ("HOA detected. Verify pet restrictions." if has_hoa else "No HOA, but check CC&Rs."),
            SuggestionPriority.MEDIUM,
        )


# =============================================================================
# Module Functions
# =============================================================================


def _has_noise_claims(analysis: FitAnalysisInput) -> bool:
    """Any neighborhood-fit claim mentioning noise, traffic, highways or airports."""
    for claim in analysis.claims:
        if claim.category != ScoringCategory.NEIGHBORHOOD_FIT:
            continue
        statement = (claim.statement or "").lower()
        if any(keyword in statement for keyword in C.NOISE_KEYWORDS):
            return True
    return False


def derive_label(score: int, has_dealbreaker: bool, has_blocker: bool) -> FitLabel:
    """Label from score and hard-cap flags; a hard-cap trigger always wins."""
    if has_dealbreaker or has_blocker:
        return FitLabel.DEALBREAKER
    if score >= C.GREAT_MATCH_THRESHOLD:
        return FitLabel.GREAT_MATCH
    if score >= C.GOOD_MATCH_THRESHOLD:
        return FitLabel.GOOD_MATCH
    if score >= C.FAIR_THRESHOLD:
        return FitLabel.FAIR
    return FitLabel.POOR_MATCH


_ENGINE = FitScoringEngine()


def compute_fit_score(
    profile: Optional[BuyerProfile],
    analysis: FitAnalysisInput,
) -> Optional[FitScoreResult]:
    """
    Score a property for a buyer.

    Returns None when there is no profile (no personalization).
    """
    if profile is None:
        return None
    return _ENGINE.score(profile, analysis)
