"""
Tests for the analysis pipeline

Tests covering:
1. Ingesting pre-extracted results
2. Running through a record source and claims extractor
3. Failure handling and the usage budget
"""

from dataclasses import replace
from typing import Optional

import pytest

from core.models import (
    AnalysisStatus,
    Claim,
    ClaimSource,
    PropertySnapshot,
    ScoringCategory,
    TrustLabel,
    Verdict,
)
from core.pipeline import (
    AnalysisFailedError,
    AnalysisPipeline,
    AnalysisRequest,
    ClaimsExtraction,
)
from core.repository import AnalysisRepository
from core.usage import UsageBudget


# =============================================================================
# Fakes
# =============================================================================

class FakeRecordSource:
    def __init__(self, snapshot: Optional[PropertySnapshot]):
        self.snapshot = snapshot
        self.addresses = []

    def fetch_snapshot(self, address: str) -> Optional[PropertySnapshot]:
        self.addresses.append(address)
        return self.snapshot


class FakeExtractor:
    def __init__(self, extraction: Optional[ClaimsExtraction] = None, error: Optional[Exception] = None):
        self.extraction = extraction
        self.error = error
        self.calls = 0

    def extract(self, request, record_snapshot):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.extraction


# =============================================================================
# Test Fixtures
# =============================================================================

@pytest.fixture
def repository():
    return AnalysisRepository()


@pytest.fixture
def request_():
    return AnalysisRequest(address="12 Elm St", listing_text="Charming 4 bed", list_price=500000)


@pytest.fixture
def extraction():
    return ClaimsExtraction(
        snapshot=PropertySnapshot(beds=4, baths=2, sqft=1900, hoa=120),
        market_context=None,
        trust_score=62,
        trust_label=TrustLabel.MEDIUM,
        overall_verdict="Bedroom count disputed",
        claims=(
            Claim(
                category=ScoringCategory.RECORD_MISMATCH,
                statement="4 bedrooms",
                source=ClaimSource.LISTING,
                verdict=Verdict.CONTRADICTION,
                confidence=0.8,
            ),
        ),
        input_tokens=2_000,
        output_tokens=500,
    )


@pytest.fixture
def record_snapshot():
    return PropertySnapshot(beds=3, sqft=1850, year_built=1998)


# =============================================================================
# Test: Ingest
# =============================================================================

class TestIngest:

    def test_completes_record(self, repository, request_, record_snapshot, extraction):
        pipeline = AnalysisPipeline(repository)

        record = pipeline.ingest(request_, record_snapshot, extraction)
        stored = repository.get(record.id)

        assert stored.status == AnalysisStatus.COMPLETE
        assert stored.trust_score == 62
        assert stored.list_price == 500000
        assert len(stored.claims) == 1

    def test_record_values_win_merge(self, repository, request_, record_snapshot, extraction):
        record = AnalysisPipeline(repository).ingest(request_, record_snapshot, extraction)

        assert record.snapshot.beds == 3
        assert record.snapshot.sqft == 1850
        assert record.snapshot.baths == 2
        assert record.snapshot.hoa == 120
        assert record.snapshot.year_built == 1998

    def test_extraction_from_dict(self):
        extraction = ClaimsExtraction.from_dict({
            "snapshot": {"beds": 2},
            "trust_score": 71,
            "trust_label": "high",
            "claims": [{
                "category": "pricing_anomaly",
                "statement": "Priced below market",
                "verdict": "verified",
                "confidence": 0.9,
            }],
        })

        assert extraction.trust_label == TrustLabel.HIGH
        assert extraction.claims[0].source == ClaimSource.LISTING
        assert extraction.market_context is None

    def test_extraction_null_collections(self):
        extraction = ClaimsExtraction.from_dict({
            "trust_score": None,
            "trust_label": None,
            "overall_verdict": None,
            "claims": None,
            "action_items": None,
        })

        assert extraction.trust_score == 0
        assert extraction.trust_label == TrustLabel.PENDING
        assert extraction.overall_verdict == ""
        assert extraction.claims == ()
        assert extraction.action_items == ()

    @pytest.mark.parametrize("raw,stored", [
        (72.5, 73), (72.4, 72), (72.9, 73), (140, 100), (-5, 0),
    ])
    def test_trust_score_rounded_and_clamped(self, raw, stored):
        assert ClaimsExtraction.from_dict({"trust_score": raw}).trust_score == stored

    def test_ingest_clamps_trust_score(self, repository, request_, extraction):
        record = AnalysisPipeline(repository).ingest(
            request_, None, replace(extraction, trust_score=140),
        )

        assert repository.get(record.id).trust_score == 100


# =============================================================================
# Test: Run
# =============================================================================

class TestRun:

    def test_success(self, repository, request_, record_snapshot, extraction):
        source = FakeRecordSource(record_snapshot)
        usage = UsageBudget()
        pipeline = AnalysisPipeline(
            repository, record_source=source, claims_extractor=FakeExtractor(extraction), usage=usage,
        )

        record = pipeline.run(request_)

        assert record.is_complete
        assert source.addresses == ["12 Elm St"]
        assert record.snapshot.beds == 3
        assert usage.stats.total_calls == 1
        assert usage.stats.total_input_tokens == 2_000

    def test_without_record_source(self, repository, request_, extraction):
        pipeline = AnalysisPipeline(repository, claims_extractor=FakeExtractor(extraction))

        record = pipeline.run(request_)

        assert record.snapshot == extraction.snapshot

    def test_requires_extractor(self, repository, request_):
        with pytest.raises(ValueError):
            AnalysisPipeline(repository).run(request_)

        assert len(repository) == 0

    def test_extractor_failure(self, repository, request_):
        pipeline = AnalysisPipeline(
            repository, claims_extractor=FakeExtractor(error=RuntimeError("upstream timeout")),
        )

        with pytest.raises(AnalysisFailedError) as exc_info:
            pipeline.run(request_)

        stored = repository.get(exc_info.value.analysis_id)
        assert stored.status == AnalysisStatus.ERROR
        assert stored.error_message == "upstream timeout"
        assert stored.overall_verdict == "Analysis failed: upstream timeout"

    def test_budget_refusal(self, repository, request_, extraction):
        extractor = FakeExtractor(extraction)
        pipeline = AnalysisPipeline(
            repository,
            claims_extractor=extractor,
            usage=UsageBudget(max_calls_per_minute=1),
        )
        pipeline.run(request_)

        with pytest.raises(AnalysisFailedError) as exc_info:
            pipeline.run(request_)

        assert extractor.calls == 1
        assert "calls/minute" in exc_info.value.message
        assert repository.get(exc_info.value.analysis_id).status == AnalysisStatus.ERROR

    def test_save_failure_on_completion(self, request_, extraction):
        class FlakyRepository(AnalysisRepository):
            def save(self, record):
                if record.status == AnalysisStatus.COMPLETE:
                    raise OSError("disk full")
                return super().save(record)

        repository = FlakyRepository()
        pipeline = AnalysisPipeline(repository, claims_extractor=FakeExtractor(extraction))

        with pytest.raises(AnalysisFailedError) as exc_info:
            pipeline.run(request_)

        stored = repository.get(exc_info.value.analysis_id)
        assert stored.status == AnalysisStatus.ERROR
        assert stored.error_message == "disk full"
