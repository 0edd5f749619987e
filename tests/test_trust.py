"""
Tests for Trust / Claim Aggregation

Tests covering:
1. Category completeness (always six entries, enumeration order)
2. Verdict counting
3. Risk radar value
4. Average confidence and highest severity
"""

import pytest

from core.models import (
    Claim,
    ClaimSource,
    ScoringCategory,
    Severity,
    Verdict,
)
from core.trust import (
    CategorySummary,
    average_confidence,
    category_risk,
    count_verdicts,
    highest_severity,
    summarize_claims,
)


# =============================================================================
# Test Fixtures
# =============================================================================

@pytest.fixture
def make_claim():
    """Factory fixture for claims."""
    def _create(
        category: ScoringCategory = ScoringCategory.RECORD_MISMATCH,
        verdict: Verdict = Verdict.VERIFIED,
        confidence: float = 0.8,
        severity: Severity = Severity.INFO,
        statement: str = "3 bedrooms",
    ) -> Claim:
        return Claim(
            category=category,
            statement=statement,
            source=ClaimSource.LISTING,
            verdict=verdict,
            confidence=confidence,
            severity=severity,
        )
    return _create


@pytest.fixture
def claims(make_claim):
    return [
        make_claim(verdict=Verdict.VERIFIED, confidence=0.9),
        make_claim(verdict=Verdict.CONTRADICTION, confidence=0.7, severity=Severity.CRITICAL),
        make_claim(verdict=Verdict.UNVERIFIED, confidence=0.5, severity=Severity.CAUTION),
        make_claim(ScoringCategory.PRICING_ANOMALY, Verdict.MARKETING, 0.4),
        make_claim(ScoringCategory.NEIGHBORHOOD_FIT, Verdict.UNVERIFIED, 0.6, Severity.WARNING),
    ]


# =============================================================================
# Test: Category Completeness
# =============================================================================

class TestSummarizeClaims:

    def test_empty_claims_give_six_zero_entries(self):
        summaries = summarize_claims([])

        assert [s.category for s in summaries] == list(ScoringCategory)
        for summary in summaries:
            assert (summary.total, summary.verified, summary.unverified, summary.contradictions) == (0, 0, 0, 0)

    def test_counts_per_category(self, claims):
        summaries = {s.category: s for s in summarize_claims(claims)}

        record = summaries[ScoringCategory.RECORD_MISMATCH]
        assert record.total == 3
        assert record.verified == 1
        assert record.unverified == 1
        assert record.contradictions == 1

        pricing = summaries[ScoringCategory.PRICING_ANOMALY]
        assert pricing.total == 1
        assert pricing.verified == pricing.unverified == pricing.contradictions == 0

    def test_categories_without_claims_still_present(self, claims):
        summaries = {s.category: s for s in summarize_claims(claims)}

        assert summaries[ScoringCategory.OWNERSHIP_TITLE].total == 0
        assert len(summaries) == 6

    def test_accepts_any_iterable(self, claims):
        assert summarize_claims(iter(claims)) == summarize_claims(claims)

    def test_label_and_dict(self):
        summary = CategorySummary(ScoringCategory.RENOVATION_PERMIT, total=2, verified=2)

        assert summary.label == "Renovation / Permits"
        assert summary.to_dict()["category"] == "renovation_permit"


# =============================================================================
# Test: Verdict Counts
# =============================================================================

class TestCountVerdicts:

    def test_every_verdict_present(self):
        assert count_verdicts([]) == {verdict: 0 for verdict in Verdict}

    def test_counts(self, claims):
        counts = count_verdicts(claims)

        assert counts[Verdict.VERIFIED] == 1
        assert counts[Verdict.UNVERIFIED] == 2
        assert counts[Verdict.CONTRADICTION] == 1
        assert counts[Verdict.MARKETING] == 1


# =============================================================================
# Test: Risk Radar
# =============================================================================

class TestCategoryRisk:

    def test_no_claims_no_risk(self):
        assert category_risk(CategorySummary(ScoringCategory.RECORD_MISMATCH)) == 0

    def test_mixed_verdicts(self):
        summary = CategorySummary(
            ScoringCategory.RECORD_MISMATCH, total=3, verified=1, unverified=1, contradictions=1
        )

        # (3 + 1.5) / 3 * 33 = 49.5 -> 50
        assert category_risk(summary) == 50

    def test_all_contradictions(self):
        summary = CategorySummary(ScoringCategory.PRICING_ANOMALY, total=2, contradictions=2)

        assert category_risk(summary) == 99

    def test_capped_at_100(self):
        summary = CategorySummary(
            ScoringCategory.PRICING_ANOMALY, total=1, unverified=1, contradictions=1
        )

        assert category_risk(summary) == 100

    def test_all_verified_no_risk(self):
        summary = CategorySummary(ScoringCategory.OWNERSHIP_TITLE, total=4, verified=4)

        assert category_risk(summary) == 0


# =============================================================================
# Test: Confidence and Severity
# =============================================================================

class TestConfidenceAndSeverity:

    def test_average_confidence(self, claims):
        average = average_confidence(claims, ScoringCategory.RECORD_MISMATCH)

        assert average == pytest.approx((0.9 + 0.7 + 0.5) / 3)

    def test_average_confidence_none_without_claims(self, claims):
        assert average_confidence(claims, ScoringCategory.OWNERSHIP_TITLE) is None

    def test_highest_severity(self, claims):
        assert highest_severity(claims, ScoringCategory.RECORD_MISMATCH) == Severity.CRITICAL
        assert highest_severity(claims, ScoringCategory.NEIGHBORHOOD_FIT) == Severity.WARNING

    def test_highest_severity_none_without_claims(self, claims):
        assert highest_severity(claims, ScoringCategory.RENOVATION_PERMIT) is None
