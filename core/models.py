"""
Domain model for listing analysis.

Shared value types consumed by the trust aggregation, snapshot merge and
fit scoring components. Absence of data is a first-class state: every
physical fact on a snapshot is independently nullable and is never
coerced to zero or False.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from datetime import datetime
from enum import Enum
from typing import Any, Final, Optional


# =============================================================================
# Enums
# =============================================================================


class WireEnum(Enum):
    """Enum whose values are the lowercase strings used on the wire."""

    @classmethod
    def from_string(cls, value: Optional[str]):
        """Convert string to member, case-insensitive. Unknown -> None."""
        if value is None:
            return None
        normalised = str(value).lower().strip()
        for member in cls:
            if member.value == normalised:
                return member
        return None

    @classmethod
    def parse(cls, value: Any):
        """
        Convert a member or string to a member.

        Raises:
            ValueError: If the value is not part of the vocabulary
        """
        if isinstance(value, cls):
            return value
        member = cls.from_string(value)
        if member is None:
            raise ValueError(f"Invalid {cls.__name__}: {value!r}")
        return member


class ScoringCategory(WireEnum):
    """The six fixed claim categories used for trust scoring."""

    RECORD_MISMATCH = "record_mismatch"
    PRICING_ANOMALY = "pricing_anomaly"
    OWNERSHIP_TITLE = "ownership_title"
    DISCLOSURE_AMBIGUITY = "disclosure_ambiguity"
    NEIGHBORHOOD_FIT = "neighborhood_fit"
    RENOVATION_PERMIT = "renovation_permit"


class Verdict(WireEnum):
    """Outcome of checking a claim against records."""

    VERIFIED = "verified"
    UNVERIFIED = "unverified"
    CONTRADICTION = "contradiction"
    MARKETING = "marketing"


class Severity(WireEnum):
    """Claim severity, least to most severe."""

    INFO = "info"
    CAUTION = "caution"
    WARNING = "warning"
    CRITICAL = "critical"


class ClaimSource(WireEnum):
    """Where a claim originated."""

    LISTING = "listing"
    PUBLIC_RECORD = "public_record"
    INFERENCE = "inference"


class EvidenceType(WireEnum):
    SUPPORTS = "supports"
    CONTRADICTS = "contradicts"
    NEUTRAL = "neutral"


class TrustLabel(WireEnum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    PENDING = "pending"


class InventoryLevel(WireEnum):
    LOW = "low"
    BALANCED = "balanced"
    HIGH = "high"


class ActionCategory(WireEnum):
    QUESTION = "question"
    DOCUMENT = "document"
    INSPECTION = "inspection"


class ActionPriority(WireEnum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class AnalysisStatus(WireEnum):
    """
    Lifecycle of an analysis record.

    pending -> analyzing -> complete | error
    """

    PENDING = "pending"
    ANALYZING = "analyzing"
    COMPLETE = "complete"
    ERROR = "error"


# =============================================================================
# Constants
# =============================================================================

CATEGORY_LABELS: Final[dict[ScoringCategory, str]] = {
    ScoringCategory.RECORD_MISMATCH: "Record Mismatch",
    ScoringCategory.PRICING_ANOMALY: "Pricing Anomaly",
    ScoringCategory.OWNERSHIP_TITLE: "Ownership / Title",
    ScoringCategory.DISCLOSURE_AMBIGUITY: "Disclosure Ambiguity",
    ScoringCategory.NEIGHBORHOOD_FIT: "Neighborhood Fit",
    ScoringCategory.RENOVATION_PERMIT: "Renovation / Permits",
}

# Lower rank sorts first
SEVERITY_RANK: Final[dict[Severity, int]] = {
    Severity.CRITICAL: 0,
    Severity.WARNING: 1,
    Severity.CAUTION: 2,
    Severity.INFO: 3,
}

ACTION_PRIORITY_RANK: Final[dict[ActionPriority, int]] = {
    ActionPriority.CRITICAL: 0,
    ActionPriority.HIGH: 1,
    ActionPriority.MEDIUM: 2,
    ActionPriority.LOW: 3,
}

ALLOWED_STATUS_TRANSITIONS: Final[dict[AnalysisStatus, tuple[AnalysisStatus, ...]]] = {
    AnalysisStatus.PENDING: (AnalysisStatus.ANALYZING,),
    AnalysisStatus.ANALYZING: (AnalysisStatus.COMPLETE, AnalysisStatus.ERROR),
    AnalysisStatus.COMPLETE: (),
    AnalysisStatus.ERROR: (),
}


# =============================================================================
# Errors
# =============================================================================


class InvalidStatusTransition(ValueError):
    """Raised when an analysis record is moved along a disallowed edge."""

    def __init__(self, current: AnalysisStatus, requested: AnalysisStatus):
        self.current = current
        self.requested = requested
        super().__init__(
            f"Cannot move analysis from {current.value} to {requested.value}"
        )


# =============================================================================
# Property Snapshot
# =============================================================================


@dataclass(frozen=True)
class PropertySnapshot:
    """
    Physical facts about one property.

    Every field is independently nullable. A new snapshot is produced by
    merging, never by mutating an existing one.
    """

    beds: Optional[int] = None
    baths: Optional[float] = None  # May be fractional, e.g. 2.5
    sqft: Optional[int] = None
    lot_sqft: Optional[int] = None
    year_built: Optional[int] = None
    stories: Optional[int] = None
    garage: Optional[str] = None  # Free-text descriptor, "None" when known absent
    hoa: Optional[float] = None  # Monthly fee
    zoning: Optional[str] = None
    tax_assessed_value: Optional[int] = None
    last_sale_date: Optional[str] = None
    last_sale_price: Optional[int] = None

    @classmethod
    def empty(cls) -> "PropertySnapshot":
        """Snapshot with every field unknown."""
        return cls()

    @classmethod
    def field_names(cls) -> tuple[str, ...]:
        """All snapshot fields in declaration order."""
        return tuple(f.name for f in fields(cls))

    @property
    def is_empty(self) -> bool:
        """True when no field carries data."""
        return all(getattr(self, name) is None for name in self.field_names())

    @property
    def is_single_story(self) -> bool:
        return self.stories is not None and self.stories == 1

    @property
    def is_multi_story(self) -> bool:
        return self.stories is not None and self.stories > 1

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON output."""
        return {name: getattr(self, name) for name in self.field_names()}

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> Optional["PropertySnapshot"]:
        """Build from a dictionary; unknown keys are ignored."""
        if data is None:
            return None
        return cls(**{name: data.get(name) for name in cls.field_names()})


# =============================================================================
# Market Context
# =============================================================================


@dataclass(frozen=True)
class ComparableProperty:
    """A recently sold comparable."""

    address: str
    price: int
    sqft: int
    beds: int
    baths: float
    sold_date: str
    ppsf: float  # Price per square foot

    def to_dict(self) -> dict:
        return {
            "address": self.address,
            "price": self.price,
            "sqft": self.sqft,
            "beds": self.beds,
            "baths": self.baths,
            "sold_date": self.sold_date,
            "ppsf": self.ppsf,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ComparableProperty":
        """
        Raises:
            ValueError: If a field is missing
        """
        try:
            return cls(
                address=data["address"],
                price=data["price"],
                sqft=data["sqft"],
                beds=data["beds"],
                baths=data["baths"],
                sold_date=data["sold_date"],
                ppsf=data["ppsf"],
            )
        except KeyError as e:
            raise ValueError(f"Comparable is missing {e.args[0]!r}") from e


@dataclass(frozen=True)
class MarketContext:
    """Area pricing signals and comparables for one property."""

    median_area_price: Optional[int] = None
    price_per_sqft: Optional[float] = None
    area_median_ppsf: Optional[float] = None
    avg_days_on_market: Optional[int] = None
    inventory_level: Optional[InventoryLevel] = None
    comparables: tuple[ComparableProperty, ...] = ()

    def to_dict(self) -> dict:
        return {
            "median_area_price": self.median_area_price,
            "price_per_sqft": self.price_per_sqft,
            "area_median_ppsf": self.area_median_ppsf,
            "avg_days_on_market": self.avg_days_on_market,
            "inventory_level": self.inventory_level.value if self.inventory_level else None,
            "comparables": [c.to_dict() for c in self.comparables],
        }

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> Optional["MarketContext"]:
        if data is None:
            return None
        inventory = data.get("inventory_level")
        return cls(
            median_area_price=data.get("median_area_price"),
            price_per_sqft=data.get("price_per_sqft"),
            area_median_ppsf=data.get("area_median_ppsf"),
            avg_days_on_market=data.get("avg_days_on_market"),
            inventory_level=InventoryLevel.parse(inventory) if inventory else None,
            comparables=tuple(
                ComparableProperty.from_dict(c) for c in data.get("comparables") or []
            ),
        )


# =============================================================================
# Claims and Evidence
# =============================================================================


@dataclass(frozen=True)
class Evidence:
    """One piece of evidence for or against a claim."""

    type: EvidenceType
    source: str
    description: str
    data_point: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "type": self.type.value,
            "source": self.source,
            "description": self.description,
            "data_point": self.data_point,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Evidence":
        return cls(
            type=EvidenceType.parse(data.get("type")),
            source=data.get("source") or "",
            description=data.get("description") or "",
            data_point=data.get("data_point"),
        )


@dataclass(frozen=True)
class Claim:
    """
    One verifiable assertion extracted from a listing.

    Produced upstream and treated as read-only input.
    """

    category: ScoringCategory
    statement: str
    source: ClaimSource
    verdict: Verdict
    confidence: float  # 0.0 - 1.0
    explanation: str = ""
    severity: Severity = Severity.INFO
    evidence: tuple[Evidence, ...] = ()

    def to_dict(self) -> dict:
        return {
            "category": self.category.value,
            "statement": self.statement,
            "source": self.source.value,
            "verdict": self.verdict.value,
            "confidence": self.confidence,
            "explanation": self.explanation,
            "severity": self.severity.value,
            "evidence": [e.to_dict() for e in self.evidence],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Claim":
        return cls(
            category=ScoringCategory.parse(data.get("category")),
            statement=data.get("statement") or "",
            source=ClaimSource.parse(data.get("source") or "listing"),
            verdict=Verdict.parse(data.get("verdict")),
            confidence=float(data.get("confidence") or 0.0),
            explanation=data.get("explanation") or "",
            severity=Severity.parse(data.get("severity") or "info"),
            evidence=tuple(Evidence.from_dict(e) for e in data.get("evidence") or []),
        )


@dataclass(frozen=True)
class ActionItem:
    """A follow-up step for the buyer (question, document request, inspection)."""

    category: ActionCategory
    priority: ActionPriority
    title: str
    description: str
    related_claim_categories: tuple[ScoringCategory, ...] = ()

    def to_dict(self) -> dict:
        return {
            "category": self.category.value,
            "priority": self.priority.value,
            "title": self.title,
            "description": self.description,
            "related_claim_categories": [c.value for c in self.related_claim_categories],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ActionItem":
        return cls(
            category=ActionCategory.parse(data.get("category")),
            priority=ActionPriority.parse(data.get("priority")),
            title=data.get("title") or "",
            description=data.get("description") or "",
            related_claim_categories=tuple(
                ScoringCategory.parse(c) for c in data.get("related_claim_categories") or []
            ),
        )


# =============================================================================
# Analysis Record
# =============================================================================


@dataclass
class AnalysisRecord:
    """
    One analysis request and its results.

    Created once per request. The only mutation allowed after creation is
    a status transition (which carries the results or the failure message).
    """

    id: str
    address: str
    status: AnalysisStatus = AnalysisStatus.PENDING
    created_at: str = field(default_factory=lambda: datetime.utcnow().isoformat())
    listing_text: Optional[str] = None
    list_price: Optional[int] = None
    property_type: Optional[str] = None

    # Results (populated on completion)
    snapshot: Optional[PropertySnapshot] = None
    market_context: Optional[MarketContext] = None
    trust_score: Optional[int] = None
    trust_label: TrustLabel = TrustLabel.PENDING
    overall_verdict: str = ""
    claims: tuple[Claim, ...] = ()
    action_items: tuple[ActionItem, ...] = ()
    error_message: Optional[str] = None

    def transition_to(self, status: AnalysisStatus) -> None:
        """
        Move to a new status.

        Raises:
            InvalidStatusTransition: If the edge is not allowed
        """
        if status not in ALLOWED_STATUS_TRANSITIONS[self.status]:
            raise InvalidStatusTransition(self.status, status)
        self.status = status

    def complete(
        self,
        snapshot: Optional[PropertySnapshot],
        market_context: Optional[MarketContext],
        trust_score: int,
        trust_label: TrustLabel,
        overall_verdict: str,
        claims: tuple[Claim, ...],
        action_items: tuple[ActionItem, ...],
        list_price: Optional[int] = None,
    ) -> None:
        """Attach results and mark the record complete."""
        self.transition_to(AnalysisStatus.COMPLETE)
        self.snapshot = snapshot
        self.market_context = market_context
        self.trust_score = trust_score
        self.trust_label = trust_label
        self.overall_verdict = overall_verdict
        self.claims = tuple(claims)
        self.action_items = tuple(action_items)
        if list_price is not None:
            self.list_price = list_price

    def fail(self, message: str) -> None:
        """Record a failure and mark the record as errored."""
        self.transition_to(AnalysisStatus.ERROR)
        self.error_message = message
        self.overall_verdict = f"Analysis failed: {message}"

    @property
    def is_complete(self) -> bool:
        return self.status == AnalysisStatus.COMPLETE

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "address": self.address,
            "status": self.status.value,
            "created_at": self.created_at,
            "listing_text": self.listing_text,
            "list_price": self.list_price,
            "property_type": self.property_type,
            "snapshot": self.snapshot.to_dict() if self.snapshot else None,
            "market_context": self.market_context.to_dict() if self.market_context else None,
            "trust_score": self.trust_score,
            "trust_label": self.trust_label.value,
            "overall_verdict": self.overall_verdict,
            "claims": [c.to_dict() for c in self.claims],
            "action_items": [a.to_dict() for a in self.action_items],
            "error_message": self.error_message,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "AnalysisRecord":
        return cls(
            id=data["id"],
            address=data["address"],
            status=AnalysisStatus.parse(data.get("status", "pending")),
            created_at=data.get("created_at") or datetime.utcnow().isoformat(),
            listing_text=data.get("listing_text"),
            list_price=data.get("list_price"),
            property_type=data.get("property_type"),
            snapshot=PropertySnapshot.from_dict(data.get("snapshot")),
            market_context=MarketContext.from_dict(data.get("market_context")),
            trust_score=data.get("trust_score"),
            trust_label=TrustLabel.parse(data.get("trust_label") or "pending"),
            overall_verdict=data.get("overall_verdict") or "",
            claims=tuple(Claim.from_dict(c) for c in data.get("claims") or []),
            action_items=tuple(ActionItem.from_dict(a) for a in data.get("action_items") or []),
            error_message=data.get("error_message"),
        )

    def copy(self) -> "AnalysisRecord":
        """Shallow copy; nested values are immutable."""
        return replace(self)
