"""
Analysis Pipeline - Upstream Orchestration Around the Scoring Core

Runs one analysis request through its external collaborators:

1. CREATE - pending record
2. ANALYZE - status moves to analyzing
3. LOOKUP - authoritative property record (external record source)
4. RESERVE - usage budget check for the claims extractor
5. EXTRACT - claims, inferred snapshot, market context and trust score
6. MERGE - authoritative and inferred snapshots, per field
7. COMPLETE - results attached, status complete

Any failure after step 2 moves the record to error and raises
AnalysisFailedError. The collaborators are Protocols so real lookups,
LLM extractors or test fakes can be injected.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Protocol, Sequence

from .merge import merge_snapshots
from .models import (
    ActionItem,
    AnalysisRecord,
    AnalysisStatus,
    Claim,
    MarketContext,
    PropertySnapshot,
    TrustLabel,
)
from .repository import AnalysisRepository
from .trust import normalise_trust_score
from .usage import UsageBudget


logger = logging.getLogger(__name__)


# =============================================================================
# Collaborator Contracts
# =============================================================================


@dataclass(frozen=True)
class AnalysisRequest:
    """One request to analyse a listing."""

    address: str
    listing_text: Optional[str] = None
    list_price: Optional[int] = None
    property_type: Optional[str] = None


@dataclass(frozen=True)
class ClaimsExtraction:
    """What the claims extractor returns for one listing."""

    snapshot: Optional[PropertySnapshot]  # Inferred / estimated
    market_context: Optional[MarketContext]
    trust_score: int
    trust_label: TrustLabel
    overall_verdict: str
    claims: Sequence[Claim] = ()
    action_items: Sequence[ActionItem] = ()
    input_tokens: int = 0
    output_tokens: int = 0

    @classmethod
    def from_dict(cls, data: dict) -> "ClaimsExtraction":
        return cls(
            snapshot=PropertySnapshot.from_dict(data.get("snapshot")),
            market_context=MarketContext.from_dict(data.get("market_context")),
            trust_score=normalise_trust_score(data.get("trust_score") or 0),
            trust_label=TrustLabel.parse(data.get("trust_label") or "pending"),
            overall_verdict=data.get("overall_verdict") or "",
            claims=tuple(Claim.from_dict(c) for c in data.get("claims") or []),
            action_items=tuple(ActionItem.from_dict(a) for a in data.get("action_items") or []),
            input_tokens=int(data.get("input_tokens") or 0),
            output_tokens=int(data.get("output_tokens") or 0),
        )


class PropertyRecordSource(Protocol):
    """Looks up the public property record for an address."""

    def fetch_snapshot(self, address: str) -> Optional[PropertySnapshot]:
        ...


class ClaimsExtractor(Protocol):
    """Extracts structured claims from a listing (LLM or rule engine)."""

    def extract(
        self,
        request: AnalysisRequest,
        record_snapshot: Optional[PropertySnapshot],
    ) -> ClaimsExtraction:
        ...


class AnalysisFailedError(RuntimeError):
    """Raised when an analysis could not be completed; the record is in error."""

    def __init__(self, analysis_id: str, message: str):
        self.analysis_id = analysis_id
        self.message = message
        super().__init__(f"Analysis {analysis_id} failed: {message}")


# =============================================================================
# Pipeline
# =============================================================================


class AnalysisPipeline:
    """Drives an analysis record from pending to complete or error."""

    def __init__(
        self,
        repository: AnalysisRepository,
        record_source: Optional[PropertyRecordSource] = None,
        claims_extractor: Optional[ClaimsExtractor] = None,
        usage: Optional[UsageBudget] = None,
    ):
        self._repository = repository
        self._record_source = record_source
        self._claims_extractor = claims_extractor
        self._usage = usage

    def start(self, request: AnalysisRequest) -> AnalysisRecord:
        """Create the record and move it to analyzing."""
        record = self._repository.create(
            address=request.address,
            listing_text=request.listing_text,
            list_price=request.list_price,
            property_type=request.property_type,
        )
        record.transition_to(AnalysisStatus.ANALYZING)
        self._repository.save(record)
        logger.info("Analysis %s started for %s", record.id, request.address)
        return record

    def finish(
        self,
        record: AnalysisRecord,
        record_snapshot: Optional[PropertySnapshot],
        extraction: ClaimsExtraction,
        list_price: Optional[int] = None,
    ) -> AnalysisRecord:
        """
        Merge snapshots, attach results and mark complete.

        The passed record is left in analyzing until the completed copy
        has been saved.
        """
        merged = merge_snapshots(record_snapshot, extraction.snapshot)
        completed = record.copy()
        completed.complete(
            snapshot=merged,
            market_context=extraction.market_context,
            trust_score=normalise_trust_score(extraction.trust_score),
            trust_label=extraction.trust_label,
            overall_verdict=extraction.overall_verdict,
            claims=tuple(extraction.claims),
            action_items=tuple(extraction.action_items),
            list_price=list_price,
        )
        self._repository.save(completed)
        logger.info(
            "Analysis %s complete: trust score %s, %d claims",
            completed.id,
            completed.trust_score,
            len(completed.claims),
        )
        return completed

    def fail(self, record: AnalysisRecord, message: str) -> AnalysisRecord:
        """Mark the record as errored and persist it."""
        record.fail(message)
        self._repository.save(record)
        logger.error("Analysis %s failed: %s", record.id, message)
        return record

    def ingest(
        self,
        request: AnalysisRequest,
        record_snapshot: Optional[PropertySnapshot],
        extraction: ClaimsExtraction,
    ) -> AnalysisRecord:
        """Complete a record from data already fetched and extracted elsewhere."""
        record = self.start(request)
        return self.finish(record, record_snapshot, extraction, request.list_price)

    def run(self, request: AnalysisRequest) -> AnalysisRecord:
        """
        Run a request end to end through the collaborators.

        Raises:
            AnalysisFailedError: If any step fails (record saved as error)
        """
        if self._claims_extractor is None:
            raise ValueError("A claims extractor is required to run an analysis")

        record = self.start(request)
        try:
            record_snapshot = None
            if self._record_source is not None:
                record_snapshot = self._record_source.fetch_snapshot(request.address)

            if self._usage is not None:
                decision = self._usage.check_and_reserve()
                if not decision.allowed:
                    raise _BudgetRefused(decision.reason or "Usage budget exhausted")

            extraction = self._claims_extractor.extract(request, record_snapshot)

            if self._usage is not None:
                self._usage.record(extraction.input_tokens, extraction.output_tokens)

            return self.finish(record, record_snapshot, extraction, request.list_price)
        except Exception as e:
            self.fail(record, str(e) or type(e).__name__)
            raise AnalysisFailedError(record.id, record.error_message) from e


class _BudgetRefused(Exception):
    pass
