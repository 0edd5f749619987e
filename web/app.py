"""
FastAPI application for the fit and trust engine.

Thin HTTP surface over the core: payloads are validated by pydantic,
converted to domain objects with from_dict, scored or stored, and shaped
by the report renderer. Configuration via environment variables (see
utils.config).
"""

import logging
from dataclasses import replace
from typing import List, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, Field

from core import (
    AnalysisFailedError,
    AnalysisPipeline,
    AnalysisRecord,
    AnalysisRepository,
    AnalysisRequest,
    BuyerProfile,
    BuyerProfileRepository,
    ClaimsExtraction,
    ClaimsExtractor,
    PropertyRecordSource,
    PropertySnapshot,
    ProfileValidationError,
    ScoringCategory,
    UsageBudget,
    get_analysis_repository,
    get_profile_repository,
    validate_buyer_profile,
)
from core.fit_engine import FitAnalysisInput, compute_fit_score
from reporting import FitReportPDFGenerator, build_fit_report, build_trust_report
from utils.config import Config


logger = logging.getLogger(__name__)

APP_VERSION = "1.0.0"


# =============================================================================
# API Request Models
# =============================================================================


class BuyerProfileInput(BaseModel):
    """Buyer profile as submitted by the wizard."""
    id: Optional[str] = None
    situation: str  # first_time, upgrading, downsizing, ...
    household_members: List[str] = []
    household_size: int = 1
    accessibility_needs: List[str] = []
    accessibility_notes: str = ""
    budget_min: int = 0
    budget_max: int = 0
    budget_stretch: int = 0
    monthly_payment_max: int = 0
    must_haves: List[str] = []
    nice_to_haves: List[str] = []
    dealbreakers: List[str] = []
    commute_destination: str = ""
    commute_mode: str = "driving"
    max_commute_minutes: int = 45
    beds_min: int = 2
    baths_min: float = 1
    sqft_min: int = 0
    prioritize_outdoor_space: bool = False
    has_pets: bool = False
    pet_types: List[str] = []


class PropertySnapshotInput(BaseModel):
    """Physical facts; every field may be unknown."""
    beds: Optional[int] = None
    baths: Optional[float] = None
    sqft: Optional[int] = None
    lot_sqft: Optional[int] = None
    year_built: Optional[int] = None
    stories: Optional[int] = None
    garage: Optional[str] = None
    hoa: Optional[float] = None
    zoning: Optional[str] = None
    tax_assessed_value: Optional[int] = None
    last_sale_date: Optional[str] = None
    last_sale_price: Optional[int] = None


class ComparableInput(BaseModel):
    address: str
    price: int
    sqft: int
    beds: int
    baths: float
    sold_date: str
    ppsf: float


class MarketContextInput(BaseModel):
    median_area_price: Optional[int] = None
    price_per_sqft: Optional[float] = None
    area_median_ppsf: Optional[float] = None
    avg_days_on_market: Optional[int] = None
    inventory_level: Optional[str] = None  # low, balanced, high
    comparables: Optional[List[ComparableInput]] = None


class EvidenceInput(BaseModel):
    type: str  # supports, contradicts, neutral
    source: Optional[str] = None
    description: Optional[str] = None
    data_point: Optional[str] = None


class ClaimInput(BaseModel):
    """Extracted claims may arrive with any text field missing."""
    category: str
    statement: Optional[str] = None
    source: Optional[str] = None
    verdict: str
    confidence: Optional[float] = None
    explanation: Optional[str] = None
    severity: Optional[str] = None
    evidence: Optional[List[EvidenceInput]] = None


class ActionItemInput(BaseModel):
    category: str  # question, document, inspection
    priority: str  # critical, high, medium, low
    title: Optional[str] = None
    description: Optional[str] = None
    related_claim_categories: Optional[List[str]] = None


class AnalysisInput(BaseModel):
    """Analysed listing supplied inline for scoring."""
    snapshot: Optional[PropertySnapshotInput] = None
    market_context: Optional[MarketContextInput] = None
    trust_score: Optional[float] = None
    trust_label: Optional[str] = None
    list_price: Optional[int] = None
    claims: Optional[List[ClaimInput]] = None
    action_items: Optional[List[ActionItemInput]] = None


class ExtractionInput(AnalysisInput):
    """Claims extractor output supplied with an ingest request."""
    overall_verdict: Optional[str] = None
    input_tokens: Optional[int] = None
    output_tokens: Optional[int] = None


class FitScoreRequest(BaseModel):
    """Score a profile against an analysis supplied inline."""
    profile: BuyerProfileInput
    analysis: AnalysisInput = Field(default_factory=AnalysisInput)


class AnalysisIngestRequest(BaseModel):
    """
    Create an analysis record.

    With `extraction` the record is completed from the supplied data.
    Without it the configured claims extractor runs.
    """
    address: str
    listing_text: Optional[str] = None
    list_price: Optional[int] = None
    property_type: Optional[str] = None
    record_snapshot: Optional[PropertySnapshotInput] = None
    extraction: Optional[ExtractionInput] = None


class AnalysisFitRequest(BaseModel):
    """Score a stored analysis for an inline or stored profile."""
    profile: Optional[BuyerProfileInput] = None
    profile_id: Optional[str] = None


# =============================================================================
# Helpers
# =============================================================================


def parse_profile(body: BuyerProfileInput) -> BuyerProfile:
    """
    Build and validate a buyer profile from a request payload.

    Raises:
        ValueError: Unknown vocabulary values
        ProfileValidationError: Failed construction checks
    """
    profile = BuyerProfile.from_dict(body.model_dump())
    result = validate_buyer_profile(profile)
    if not result.is_valid:
        raise ProfileValidationError(list(result.errors))
    return profile


def create_app(
    config: Optional[Config] = None,
    analysis_repository: Optional[AnalysisRepository] = None,
    profile_repository: Optional[BuyerProfileRepository] = None,
    usage: Optional[UsageBudget] = None,
    record_source: Optional[PropertyRecordSource] = None,
    claims_extractor: Optional[ClaimsExtractor] = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""
    # Repositories define __len__, so an empty one is falsy
    analyses = analysis_repository
    profiles = profile_repository
    if config is None:
        # Process app: share the module-level repositories
        config = Config.load()
        if analyses is None:
            analyses = get_analysis_repository()
        if profiles is None:
            profiles = get_profile_repository()
    else:
        if analyses is None:
            analyses = AnalysisRepository(config.analyses_path)
        if profiles is None:
            profiles = BuyerProfileRepository(config.profiles_path)
    usage = usage or UsageBudget(
        budget_limit=config.usage_budget_usd,
        safe_limit=config.usage_safe_limit_usd,
        max_calls_per_minute=config.max_calls_per_minute,
        max_calls_per_hour=config.max_calls_per_hour,
    )
    pipeline = AnalysisPipeline(
        analyses,
        record_source=record_source,
        claims_extractor=claims_extractor,
        usage=usage,
    )
    pdf_generator = FitReportPDFGenerator()

    app = FastAPI(
        title="Fit & Trust Engine",
        description="Personalised property fit scores and listing trust reports",
        version=APP_VERSION,
        debug=config.debug,
    )

    # ==========================================================================
    # Error mapping
    # ==========================================================================

    @app.exception_handler(ProfileValidationError)
    async def profile_invalid(request: Request, exc: ProfileValidationError):
        return JSONResponse(
            status_code=422,
            content={"error": "Invalid buyer profile", "details": exc.errors},
        )

    @app.exception_handler(ValueError)
    async def value_invalid(request: Request, exc: ValueError):
        return JSONResponse(
            status_code=422,
            content={"error": "Invalid request", "details": str(exc)},
        )

    @app.exception_handler(AnalysisFailedError)
    async def analysis_failed(request: Request, exc: AnalysisFailedError):
        return JSONResponse(
            status_code=500,
            content={"error": "Analysis failed", "details": exc.message, "id": exc.analysis_id},
        )

    def load_analysis(analysis_id: str) -> AnalysisRecord:
        record = analyses.get(analysis_id)
        if record is None:
            raise HTTPException(status_code=404, detail=f"Analysis {analysis_id} not found")
        return record

    def resolve_profile(body: AnalysisFitRequest) -> BuyerProfile:
        if body.profile is not None:
            return parse_profile(body.profile)
        if body.profile_id is None:
            raise ValueError("Either profile or profile_id is required")
        profile = profiles.get(body.profile_id)
        if profile is None:
            raise HTTPException(status_code=404, detail=f"Profile {body.profile_id} not found")
        return profile

    # ==========================================================================
    # Health
    # ==========================================================================

    @app.get("/", include_in_schema=False)
    def root():
        """Root healthcheck. No dependencies, no IO."""
        return {"status": "ok"}

    @app.get("/health", include_in_schema=False)
    def health():
        return {"status": "healthy", "version": APP_VERSION}

    # ==========================================================================
    # Fit scoring
    # ==========================================================================

    @app.post("/api/fit-score")
    def fit_score(body: FitScoreRequest):
        """Score an inline profile against an inline analysis."""
        profile = parse_profile(body.profile)
        analysis = FitAnalysisInput.from_dict(body.analysis.model_dump())
        result = compute_fit_score(profile, analysis)
        return build_fit_report(result, profile)

    # ==========================================================================
    # Analyses
    # ==========================================================================

    @app.post("/api/analyses", status_code=201)
    def create_analysis(body: AnalysisIngestRequest):
        request = AnalysisRequest(
            address=body.address,
            listing_text=body.listing_text,
            list_price=body.list_price,
            property_type=body.property_type,
        )
        if body.extraction is None:
            record = pipeline.run(request)
        else:
            record = pipeline.ingest(
                request,
                PropertySnapshot.from_dict(
                    body.record_snapshot.model_dump() if body.record_snapshot else None
                ),
                ClaimsExtraction.from_dict(body.extraction.model_dump()),
            )
        return {"id": record.id, "status": record.status.value}

    @app.get("/api/analyses/{analysis_id}")
    def get_analysis(analysis_id: str, category: Optional[str] = None):
        record = load_analysis(analysis_id)
        scoring_category = ScoringCategory.parse(category) if category else None
        return build_trust_report(record, scoring_category)

    @app.post("/api/analyses/{analysis_id}/fit")
    def analysis_fit(analysis_id: str, body: AnalysisFitRequest):
        record = load_analysis(analysis_id)
        profile = resolve_profile(body)
        result = compute_fit_score(profile, FitAnalysisInput.from_record(record))
        return build_fit_report(result, profile)

    @app.post("/api/analyses/{analysis_id}/fit.pdf")
    def analysis_fit_pdf(analysis_id: str, body: AnalysisFitRequest):
        record = load_analysis(analysis_id)
        profile = resolve_profile(body)
        result = compute_fit_score(profile, FitAnalysisInput.from_record(record))
        pdf = pdf_generator.generate_to_buffer(build_fit_report(result, profile), record.address)
        return Response(
            content=pdf,
            media_type="application/pdf",
            headers={"Content-Disposition": f'attachment; filename="fit-{analysis_id}.pdf"'},
        )

    # ==========================================================================
    # Buyer profiles
    # ==========================================================================

    @app.put("/api/profiles/{profile_id}")
    def put_profile(profile_id: str, body: BuyerProfileInput):
        profile = replace(parse_profile(body), id=profile_id)
        profiles.save(profile_id, profile)
        return profile.to_dict()

    @app.get("/api/profiles/{profile_id}")
    def get_profile(profile_id: str):
        profile = profiles.get(profile_id)
        if profile is None:
            raise HTTPException(status_code=404, detail=f"Profile {profile_id} not found")
        return profile.to_dict()

    # ==========================================================================
    # Usage
    # ==========================================================================

    @app.get("/api/usage")
    def get_usage():
        return usage.to_dict()

    logger.info("Fit & Trust Engine app created (data dir %s)", config.data_dir)
    return app


# Create app instance for uvicorn
app = create_app()
