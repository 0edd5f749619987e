"""
Tests for the report renderer

Tests covering:
1. Fit report breakdown, tiers and weight display
2. Feature, accessibility and suggestion grouping
3. Trust report claim ordering and category filter
4. Comparable $/sqft differences
"""

import pytest

from core.buyer_profile import (
    AccessibilityNeed,
    BuyerProfile,
    BuyerSituation,
    FeatureImportance,
    PropertyFeature,
)
from core.fit_engine import (
    AccessibilityFlag,
    FeatureStatus,
    FitCategory,
    FitFeatureMatch,
    FitLabel,
    FitScoreResult,
    FlagSeverity,
    PropertySuggestion,
    SuggestionCategory,
    SuggestionPriority,
)
from core.models import (
    ActionCategory,
    ActionItem,
    ActionPriority,
    AnalysisRecord,
    AnalysisStatus,
    Claim,
    ClaimSource,
    ComparableProperty,
    MarketContext,
    PropertySnapshot,
    ScoringCategory,
    Severity,
    TrustLabel,
    Verdict,
)
from reporting import (
    build_fit_report,
    build_trust_report,
    ppsf_difference,
    score_tier,
    sort_claims,
)


# =============================================================================
# Test Fixtures
# =============================================================================

@pytest.fixture
def fit_result():
    return FitScoreResult(
        overall_score=72,
        label=FitLabel.GOOD_MATCH,
        summary="Solid match with a few gaps.",
        breakdown=(
            FitCategory("Budget Fit", 100, 0.25, "Within budget"),
            FitCategory("Size & Layout", 80, 0.15, "Meets needs"),
            FitCategory("Accessibility", 40, 0.30, "One concern"),
            FitCategory("Feature Match", 50, 0.15, "1 of 2"),
            FitCategory("Trust & Risk", 70, 0.15, "Trust 70"),
            FitCategory("Lifestyle Fit", 60, 0.05, "No signals"),
        ),
        matched_features=(
            FitFeatureMatch(
                PropertyFeature.GARAGE, "Garage", FeatureImportance.MUST_HAVE,
                FeatureStatus.MATCHED, "Attached 2-car",
            ),
            FitFeatureMatch(
                PropertyFeature.NO_HOA, "No HOA", FeatureImportance.NICE_TO_HAVE,
                FeatureStatus.UNKNOWN, "HOA not on record",
            ),
        ),
        missed_features=(
            FitFeatureMatch(
                PropertyFeature.SINGLE_STORY, "Single Story", FeatureImportance.MUST_HAVE,
                FeatureStatus.MISSING, "2 stories",
            ),
        ),
        accessibility_flags=(
            AccessibilityFlag(
                AccessibilityNeed.MOBILITY_LIMITED, "Mobility", FlagSeverity.CONCERN,
                "2 stories", "Check for a main-floor bedroom",
            ),
        ),
        suggestions=(
            PropertySuggestion(
                SuggestionCategory.ASK_ABOUT, "Stair lift", "Ask about fitting one",
                SuggestionPriority.MEDIUM,
            ),
            PropertySuggestion(
                SuggestionCategory.WATCH_OUT, "Entry steps", "Count the steps",
                SuggestionPriority.HIGH,
            ),
        ),
    )


def _claim(category, verdict, severity=Severity.INFO, confidence=0.5, statement="claim"):
    return Claim(
        category=category,
        statement=statement,
        source=ClaimSource.LISTING,
        verdict=verdict,
        confidence=confidence,
        severity=severity,
    )


@pytest.fixture
def record():
    record = AnalysisRecord(id="r1", address="12 Elm St", list_price=500000)
    record.transition_to(AnalysisStatus.ANALYZING)
    record.complete(
        snapshot=PropertySnapshot(beds=3, sqft=2000),
        market_context=MarketContext(
            price_per_sqft=250.0,
            comparables=(
                ComparableProperty("1 Oak", 400000, 2000, 3, 2, "2024-02-01", 200.0),
                ComparableProperty("2 Oak", 500000, 2000, 3, 2, "2024-03-01", 245.0),
                ComparableProperty("3 Oak", 600000, 2000, 3, 2, "2024-04-01", 300.0),
            ),
        ),
        trust_score=58,
        trust_label=TrustLabel.MEDIUM,
        overall_verdict="Some claims need checking",
        claims=(
            _claim(ScoringCategory.PRICING_ANOMALY, Verdict.VERIFIED, Severity.INFO, 0.9, "a"),
            _claim(ScoringCategory.RECORD_MISMATCH, Verdict.CONTRADICTION, Severity.CRITICAL, 0.6, "b"),
            _claim(ScoringCategory.RECORD_MISMATCH, Verdict.UNVERIFIED, Severity.WARNING, 0.7, "c"),
            _claim(ScoringCategory.PRICING_ANOMALY, Verdict.MARKETING, Severity.CRITICAL, 0.8, "d"),
        ),
        action_items=(
            ActionItem(ActionCategory.QUESTION, ActionPriority.LOW, "Ask", "Ask seller"),
            ActionItem(ActionCategory.INSPECTION, ActionPriority.CRITICAL, "Inspect", "Roof"),
            ActionItem(ActionCategory.DOCUMENT, ActionPriority.MEDIUM, "Permits", "Get permits"),
        ),
    )
    return record


# =============================================================================
# Test: Fit Report
# =============================================================================

class TestFitReport:

    def test_header(self, fit_result):
        report = build_fit_report(fit_result)

        assert report["overall_score"] == 72
        assert report["label"] == "good_match"
        assert report["label_text"]
        assert report["summary"] == "Solid match with a few gaps."

    @pytest.mark.parametrize("score,tier", [
        (100, "strong"), (80, "strong"), (79, "good"), (60, "good"),
        (59, "fair"), (40, "fair"), (39, "weak"), (0, "weak"),
    ])
    def test_score_tier(self, score, tier):
        assert score_tier(score) == tier

    def test_breakdown_keeps_order(self, fit_result):
        report = build_fit_report(fit_result)

        assert [c["name"] for c in report["breakdown"]] == [
            "Budget Fit", "Size & Layout", "Accessibility",
            "Feature Match", "Trust & Risk", "Lifestyle Fit",
        ]

    def test_weight_percent_shows_raw_weight(self, fit_result):
        report = build_fit_report(fit_result)
        percents = [c["weight_percent"] for c in report["breakdown"]]

        assert percents == [25, 15, 30, 15, 15, 5]

    def test_weighted_contributions_sum_to_composite(self, fit_result):
        report = build_fit_report(fit_result)
        total = sum(c["weighted_contribution"] for c in report["breakdown"])

        # Raw weights sum to 1.05; contributions use the normalised share
        assert total == pytest.approx(66.7, abs=0.2)

    def test_feature_counts(self, fit_result):
        features = build_fit_report(fit_result)["features"]

        assert features["matched_count"] == 1
        assert features["missed_count"] == 1
        assert len(features["matched"]) == 2

    def test_flags_grouped_by_severity(self, fit_result):
        accessibility = build_fit_report(fit_result)["accessibility"]

        assert accessibility["counts"] == {
            "blocker": 0, "concern": 1, "manageable": 0, "clear": 0,
        }
        assert accessibility["flags"]["concern"][0]["need"] == "mobility_limited"
        assert accessibility["has_blocker"] is False

    def test_suggestions_grouped_by_priority(self, fit_result):
        report = build_fit_report(fit_result)

        assert [s["title"] for s in report["suggestions"]["high"]] == ["Entry steps"]
        assert [s["title"] for s in report["suggestions"]["medium"]] == ["Stair lift"]
        assert report["suggestions"]["low"] == []
        assert report["suggestion_count"] == 2

    def test_checklist_for_declared_needs(self, fit_result):
        profile = BuyerProfile(
            situation=BuyerSituation.RETIRING,
            accessibility_needs=(AccessibilityNeed.WHEELCHAIR_FULL, AccessibilityNeed.NONE),
        )

        checklist = build_fit_report(fit_result, profile)["accessibility"]["checklist"]

        assert checklist[0] == "Single story or elevator access"
        assert len(checklist) == len(set(checklist))

    def test_requirements_per_need(self, fit_result):
        profile = BuyerProfile(
            situation=BuyerSituation.RETIRING,
            accessibility_needs=(
                AccessibilityNeed.RESPIRATORY,
                AccessibilityNeed.RESPIRATORY,
                AccessibilityNeed.WHEELCHAIR_FULL,
            ),
        )

        needs = build_fit_report(fit_result, profile)["accessibility"]["needs"]

        assert [n["need"] for n in needs] == ["respiratory", "wheelchair_full"]
        assert needs[1]["label"] == "Full-Time Wheelchair / Power Chair"
        assert needs[1]["requirements"][0] == "Single story or elevator access"

    def test_no_checklist_without_needs(self, fit_result):
        profile = BuyerProfile(
            situation=BuyerSituation.FIRST_TIME,
            accessibility_needs=(AccessibilityNeed.NONE,),
        )

        assert build_fit_report(fit_result, profile)["accessibility"]["checklist"] == []


# =============================================================================
# Test: Trust Report
# =============================================================================

class TestTrustReport:

    def test_header(self, record):
        report = build_trust_report(record)

        assert report["id"] == "r1"
        assert report["status"] == "complete"
        assert report["trust_score"] == 58
        assert report["trust_label"] == "medium"
        assert report["list_price_display"] == "$500,000"
        assert report["snapshot"]["beds"] == 3

    def test_verdict_counts(self, record):
        counts = build_trust_report(record)["verdict_counts"]

        assert counts == {"verified": 1, "unverified": 1, "contradiction": 1, "marketing": 1}

    def test_every_category_listed(self, record):
        categories = build_trust_report(record)["categories"]

        assert [c["category"] for c in categories] == [c.value for c in ScoringCategory]

    def test_category_detail(self, record):
        categories = {c["category"]: c for c in build_trust_report(record)["categories"]}
        mismatch = categories["record_mismatch"]

        assert mismatch["label"] == "Record Mismatch"
        assert mismatch["contradictions"] == 1
        assert mismatch["highest_severity"] == "critical"
        assert mismatch["average_confidence"] == 0.65
        assert categories["ownership_title"]["highest_severity"] is None
        assert categories["ownership_title"]["risk"] == 0

    def test_claims_most_severe_first(self, record):
        statements = [c["statement"] for c in build_trust_report(record)["claims"]]

        assert statements == ["d", "b", "c", "a"]

    def test_category_filter(self, record):
        report = build_trust_report(record, ScoringCategory.RECORD_MISMATCH)

        assert [c["statement"] for c in report["claims"]] == ["b", "c"]
        assert report["category_filter"] == "record_mismatch"
        assert report["category_filter_label"] == "Record Mismatch"
        # Counts still cover every claim
        assert sum(report["verdict_counts"].values()) == 4

    def test_action_items_by_priority(self, record):
        titles = [a["title"] for a in build_trust_report(record)["action_items"]]

        assert titles == ["Inspect", "Permits", "Ask"]

    def test_pending_record(self):
        report = build_trust_report(AnalysisRecord(id="p", address="1 Main"))

        assert report["status"] == "pending"
        assert report["market"] is None
        assert report["snapshot"] is None
        assert report["claims"] == []


# =============================================================================
# Test: Comparables
# =============================================================================

class TestComparables:

    def test_ppsf_difference(self):
        assert ppsf_difference(250.0, 200.0) == pytest.approx(25.0)
        assert ppsf_difference(150.0, 200.0) == pytest.approx(-25.0)

    def test_ppsf_difference_missing(self):
        assert ppsf_difference(None, 200.0) is None
        assert ppsf_difference(250.0, 0) is None

    def test_comparables_annotated(self, record):
        comparables = build_trust_report(record)["market"]["comparables"]

        assert [c["ppsf_diff_percent"] for c in comparables] == [25.0, 2.0, -16.7]
        assert [c["ppsf_direction"] for c in comparables] == ["above", "in_line", "below"]
        assert comparables[0]["ppsf_diff_display"] == "+25.0%"

    def test_sort_claims_ties_by_confidence(self):
        low = _claim(ScoringCategory.NEIGHBORHOOD_FIT, Verdict.UNVERIFIED, Severity.WARNING, 0.2, "low")
        high = _claim(ScoringCategory.NEIGHBORHOOD_FIT, Verdict.UNVERIFIED, Severity.WARNING, 0.9, "high")

        assert [c.statement for c in sort_claims([low, high])] == ["high", "low"]
