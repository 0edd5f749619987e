"""
Buyer Match Profile

The buyer's stated requirements: situation, household, accessibility
needs, budget, feature preferences and lifestyle. A profile is created by
the guided wizard and replaced (never edited in place) when the buyer
re-runs it. The scoring engine only reads it.

Validation lives here, at profile construction. The fit engine assumes
a well-formed profile and does not re-check internal consistency.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Final, Iterable, Optional

from .models import WireEnum


# =============================================================================
# Vocabularies
# =============================================================================


class BuyerSituation(WireEnum):
    FIRST_TIME = "first_time"
    UPGRADING = "upgrading"
    DOWNSIZING = "downsizing"
    INVESTOR = "investor"
    RELOCATING = "relocating"
    RETIRING = "retiring"
    MULTIGENERATIONAL = "multigenerational"  # Living with elderly parents or extended family


class HouseholdMember(WireEnum):
    SOLO = "solo"
    COUPLE = "couple"
    FAMILY_YOUNG_KIDS = "family_young_kids"
    FAMILY_TEENS = "family_teens"
    ELDERLY_PARENT = "elderly_parent"
    ROOMMATES = "roommates"
    CAREGIVER_PRESENT = "caregiver_present"


class AccessibilityNeed(WireEnum):
    """Specific needs rather than labels. NONE is a sentinel."""

    WHEELCHAIR_FULL = "wheelchair_full"  # Full-time wheelchair user
    WHEELCHAIR_OCCASIONAL = "wheelchair_occasional"
    MOBILITY_LIMITED = "mobility_limited"  # Walker, cane, difficulty with stairs
    VISUAL_IMPAIRMENT = "visual_impairment"
    HEARING_IMPAIRMENT = "hearing_impairment"
    SENSORY_SENSITIVITY = "sensory_sensitivity"  # Noise, light, crowds
    CHRONIC_FATIGUE = "chronic_fatigue"
    RESPIRATORY = "respiratory"
    COGNITIVE = "cognitive"
    CHILD_DISABILITY = "child_disability"
    TEMPORARY_INJURY = "temporary_injury"
    AGING_IN_PLACE = "aging_in_place"
    NONE = "none"


class PropertyFeature(WireEnum):
    SINGLE_STORY = "single_story"
    ELEVATOR = "elevator"
    WIDE_DOORWAYS = "wide_doorways"
    ACCESSIBLE_BATHROOM = "accessible_bathroom"
    ROLL_IN_SHOWER = "roll_in_shower"
    NO_STEP_ENTRY = "no_step_entry"
    GARAGE = "garage"
    YARD = "yard"
    POOL = "pool"
    GOOD_SCHOOLS = "good_schools"
    WALKABLE = "walkable"
    NEAR_TRANSIT = "near_transit"
    NEAR_MEDICAL = "near_medical"
    NEAR_GROCERY = "near_grocery"
    QUIET_STREET = "quiet_street"
    LOW_HOA = "low_hoa"
    NO_HOA = "no_hoa"
    NEW_CONSTRUCTION = "new_construction"
    CENTRAL_AC = "central_ac"
    SOLAR = "solar"
    EV_CHARGING = "ev_charging"
    HOME_OFFICE = "home_office"
    GUEST_SUITE = "guest_suite"
    LOW_MAINTENANCE = "low_maintenance"
    PET_FRIENDLY = "pet_friendly"
    GATED_COMMUNITY = "gated_community"
    FLAT_LOT = "flat_lot"
    LAUNDRY_MAIN_FLOOR = "laundry_main_floor"


class FeatureImportance(WireEnum):
    """Which of the three disjoint feature sets a tag belongs to."""

    MUST_HAVE = "must_have"
    NICE_TO_HAVE = "nice_to_have"
    DEALBREAKER = "dealbreaker"


class CommuteMode(WireEnum):
    DRIVING = "driving"
    TRANSIT = "transit"
    BIKING = "biking"
    WALKING = "walking"
    REMOTE = "remote"
    WHEELCHAIR_ACCESSIBLE_TRANSIT = "wheelchair_accessible_transit"


# =============================================================================
# Display Labels
# =============================================================================

SITUATION_LABELS: Final[dict[BuyerSituation, str]] = {
    BuyerSituation.FIRST_TIME: "First-Time Buyer",
    BuyerSituation.UPGRADING: "Upgrading Home",
    BuyerSituation.DOWNSIZING: "Downsizing",
    BuyerSituation.INVESTOR: "Investor / Rental",
    BuyerSituation.RELOCATING: "Relocating",
    BuyerSituation.RETIRING: "Retiring",
    BuyerSituation.MULTIGENERATIONAL: "Multi-Generational Living",
}

HOUSEHOLD_LABELS: Final[dict[HouseholdMember, str]] = {
    HouseholdMember.SOLO: "Living Alone",
    HouseholdMember.COUPLE: "With Partner",
    HouseholdMember.FAMILY_YOUNG_KIDS: "Family (Young Children)",
    HouseholdMember.FAMILY_TEENS: "Family (Teenagers)",
    HouseholdMember.ELDERLY_PARENT: "Aging Parent(s)",
    HouseholdMember.ROOMMATES: "With Roommates",
    HouseholdMember.CAREGIVER_PRESENT: "Live-In Caregiver",
}

FEATURE_LABELS: Final[dict[PropertyFeature, str]] = {
    PropertyFeature.SINGLE_STORY: "Single Story",
    PropertyFeature.ELEVATOR: "Elevator Access",
    PropertyFeature.WIDE_DOORWAYS: 'Wide Doorways (36"+)',
    PropertyFeature.ACCESSIBLE_BATHROOM: "Accessible Bathroom",
    PropertyFeature.ROLL_IN_SHOWER: "Roll-In Shower",
    PropertyFeature.NO_STEP_ENTRY: "No-Step Entry",
    PropertyFeature.GARAGE: "Garage",
    PropertyFeature.YARD: "Private Yard",
    PropertyFeature.POOL: "Pool",
    PropertyFeature.GOOD_SCHOOLS: "Good School District",
    PropertyFeature.WALKABLE: "Walkable Area",
    PropertyFeature.NEAR_TRANSIT: "Near Public Transit",
    PropertyFeature.NEAR_MEDICAL: "Near Medical Facilities",
    PropertyFeature.NEAR_GROCERY: "Near Grocery / Essentials",
    PropertyFeature.QUIET_STREET: "Quiet Street",
    PropertyFeature.LOW_HOA: "Low HOA (<$200/mo)",
    PropertyFeature.NO_HOA: "No HOA",
    PropertyFeature.NEW_CONSTRUCTION: "New Construction",
    PropertyFeature.CENTRAL_AC: "Central A/C",
    PropertyFeature.SOLAR: "Solar Panels",
    PropertyFeature.EV_CHARGING: "EV Charging",
    PropertyFeature.HOME_OFFICE: "Dedicated Home Office",
    PropertyFeature.GUEST_SUITE: "Guest / In-Law Suite",
    PropertyFeature.LOW_MAINTENANCE: "Low-Maintenance Property",
    PropertyFeature.PET_FRIENDLY: "Pet-Friendly",
    PropertyFeature.GATED_COMMUNITY: "Gated Community",
    PropertyFeature.FLAT_LOT: "Flat Lot (No Hillside)",
    PropertyFeature.LAUNDRY_MAIN_FLOOR: "Laundry on Main Floor",
}


def feature_label(feature: PropertyFeature) -> str:
    """Human-readable name for a feature tag."""
    return FEATURE_LABELS.get(feature, feature.value.replace("_", " "))


# =============================================================================
# Validation Limits
# =============================================================================

HOUSEHOLD_SIZE_RANGE: Final[tuple[int, int]] = (1, 20)
COMMUTE_MINUTES_RANGE: Final[tuple[int, int]] = (0, 180)
ROOM_COUNT_RANGE: Final[tuple[int, int]] = (0, 10)
MAX_ACCESSIBILITY_NOTES_LENGTH: Final[int] = 500


class ProfileValidationError(ValueError):
    """Raised when a buyer profile fails construction checks."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__("; ".join(errors))


@dataclass(frozen=True)
class ProfileValidationResult:
    """Outcome of profile validation."""

    is_valid: bool
    errors: tuple[str, ...] = ()


# =============================================================================
# Buyer Profile
# =============================================================================


@dataclass(frozen=True)
class BuyerProfile:
    """
    A buyer's stated requirements.

    must_haves, nice_to_haves and dealbreakers are disjoint. Dealbreakers
    name features whose presence (or, for single_story, whose absence)
    disqualifies a property.
    """

    # Who you are
    situation: BuyerSituation
    household_members: tuple[HouseholdMember, ...] = ()
    household_size: int = 1

    # Accessibility
    accessibility_needs: tuple[AccessibilityNeed, ...] = ()
    accessibility_notes: str = ""

    # Budget
    budget_min: int = 0
    budget_max: int = 0  # Comfortable ceiling
    budget_stretch: int = 0  # Absolute ceiling
    monthly_payment_max: int = 0

    # Features
    must_haves: tuple[PropertyFeature, ...] = ()
    nice_to_haves: tuple[PropertyFeature, ...] = ()
    dealbreakers: tuple[PropertyFeature, ...] = ()

    # Lifestyle
    commute_destination: str = ""
    commute_mode: CommuteMode = CommuteMode.DRIVING
    max_commute_minutes: int = 45
    beds_min: int = 2
    baths_min: float = 1
    sqft_min: int = 0
    prioritize_outdoor_space: bool = False
    has_pets: bool = False
    pet_types: tuple[str, ...] = ()

    id: Optional[str] = None

    @classmethod
    def create(cls, **kwargs: Any) -> "BuyerProfile":
        """
        Build and validate a profile.

        Raises:
            ProfileValidationError: If any construction check fails
        """
        profile = cls(**kwargs)
        result = validate_buyer_profile(profile)
        if not result.is_valid:
            raise ProfileValidationError(list(result.errors))
        return profile

    @property
    def has_accessibility_needs(self) -> bool:
        """True when any need other than the `none` sentinel is declared."""
        return any(n != AccessibilityNeed.NONE for n in self.accessibility_needs)

    @property
    def declared_needs(self) -> tuple[AccessibilityNeed, ...]:
        """Accessibility needs without the sentinel, in declared order."""
        return tuple(n for n in self.accessibility_needs if n != AccessibilityNeed.NONE)

    def has_household_member(self, member: HouseholdMember) -> bool:
        return member in self.household_members

    def features_in(self, importance: FeatureImportance) -> tuple[PropertyFeature, ...]:
        return {
            FeatureImportance.MUST_HAVE: self.must_haves,
            FeatureImportance.NICE_TO_HAVE: self.nice_to_haves,
            FeatureImportance.DEALBREAKER: self.dealbreakers,
        }[importance]

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "situation": self.situation.value,
            "household_members": [m.value for m in self.household_members],
            "household_size": self.household_size,
            "accessibility_needs": [n.value for n in self.accessibility_needs],
            "accessibility_notes": self.accessibility_notes,
            "budget_min": self.budget_min,
            "budget_max": self.budget_max,
            "budget_stretch": self.budget_stretch,
            "monthly_payment_max": self.monthly_payment_max,
            "must_haves": [f.value for f in self.must_haves],
            "nice_to_haves": [f.value for f in self.nice_to_haves],
            "dealbreakers": [f.value for f in self.dealbreakers],
            "commute_destination": self.commute_destination,
            "commute_mode": self.commute_mode.value,
            "max_commute_minutes": self.max_commute_minutes,
            "beds_min": self.beds_min,
            "baths_min": self.baths_min,
            "sqft_min": self.sqft_min,
            "prioritize_outdoor_space": self.prioritize_outdoor_space,
            "has_pets": self.has_pets,
            "pet_types": list(self.pet_types),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "BuyerProfile":
        """
        Build from a dictionary. Missing keys take wizard defaults.

        Raises:
            ValueError: If an enumerated value is not recognised
        """
        return cls(
            id=data.get("id"),
            situation=BuyerSituation.parse(data.get("situation")),
            household_members=_parse_all(HouseholdMember, data.get("household_members")),
            household_size=data.get("household_size", 1),
            accessibility_needs=_parse_all(AccessibilityNeed, data.get("accessibility_needs")),
            accessibility_notes=data.get("accessibility_notes") or "",
            budget_min=data.get("budget_min", 0),
            budget_max=data.get("budget_max", 0),
            budget_stretch=data.get("budget_stretch", 0),
            monthly_payment_max=data.get("monthly_payment_max", 0),
            must_haves=_parse_all(PropertyFeature, data.get("must_haves")),
            nice_to_haves=_parse_all(PropertyFeature, data.get("nice_to_haves")),
            dealbreakers=_parse_all(PropertyFeature, data.get("dealbreakers")),
            commute_destination=data.get("commute_destination") or "",
            commute_mode=CommuteMode.parse(data.get("commute_mode") or "driving"),
            max_commute_minutes=data.get("max_commute_minutes", 45),
            beds_min=data.get("beds_min", 2),
            baths_min=data.get("baths_min", 1),
            sqft_min=data.get("sqft_min", 0),
            prioritize_outdoor_space=bool(data.get("prioritize_outdoor_space", False)),
            has_pets=bool(data.get("has_pets", False)),
            pet_types=tuple(data.get("pet_types") or ()),
        )


def _parse_all(enum_cls, values: Optional[Iterable[Any]]) -> tuple:
    return tuple(enum_cls.parse(v) for v in values or ())


# =============================================================================
# Validation
# =============================================================================


def validate_buyer_profile(profile: BuyerProfile) -> ProfileValidationResult:
    """
    Check a profile's internal consistency.

    Args:
        profile: Profile to check

    Returns:
        ProfileValidationResult listing every failed check
    """
    errors: list[str] = []

    low, high = HOUSEHOLD_SIZE_RANGE
    if not low <= profile.household_size <= high:
        errors.append(f"household_size must be between {low} and {high}")

    for name in ("budget_min", "budget_max", "budget_stretch", "monthly_payment_max"):
        if getattr(profile, name) < 0:
            errors.append(f"{name} cannot be negative")
    if profile.budget_stretch < profile.budget_max:
        errors.append("budget_stretch must be >= budget_max")
    if profile.budget_max < profile.budget_min:
        errors.append("budget_max must be >= budget_min")

    low, high = COMMUTE_MINUTES_RANGE
    if not low <= profile.max_commute_minutes <= high:
        errors.append(f"max_commute_minutes must be between {low} and {high}")

    low, high = ROOM_COUNT_RANGE
    if not low <= profile.beds_min <= high:
        errors.append(f"beds_min must be between {low} and {high}")
    if not low <= profile.baths_min <= high:
        errors.append(f"baths_min must be between {low} and {high}")
    if profile.sqft_min < 0:
        errors.append("sqft_min cannot be negative")

    if len(profile.accessibility_notes) > MAX_ACCESSIBILITY_NOTES_LENGTH:
        errors.append(
            f"accessibility_notes cannot exceed {MAX_ACCESSIBILITY_NOTES_LENGTH} characters"
        )

    # Feature sets must be disjoint
    seen: dict[PropertyFeature, FeatureImportance] = {}
    for importance in FeatureImportance:
        for feature in profile.features_in(importance):
            previous = seen.get(feature)
            if previous is not None and previous != importance:
                errors.append(
                    f"{feature.value} appears in both {previous.value} and {importance.value}"
                )
            seen[feature] = importance

    return ProfileValidationResult(is_valid=not errors, errors=tuple(errors))


# =============================================================================
# Wizard Operations
# =============================================================================


def assign_feature(
    profile: BuyerProfile,
    feature: PropertyFeature,
    importance: FeatureImportance,
) -> BuyerProfile:
    """
    Put a feature in one set, removing it from the other two.

    Returns a new profile; the input is not modified.
    """
    cleared = remove_feature(profile, feature)
    if importance == FeatureImportance.MUST_HAVE:
        return replace(cleared, must_haves=cleared.must_haves + (feature,))
    if importance == FeatureImportance.NICE_TO_HAVE:
        return replace(cleared, nice_to_haves=cleared.nice_to_haves + (feature,))
    return replace(cleared, dealbreakers=cleared.dealbreakers + (feature,))


def remove_feature(profile: BuyerProfile, feature: PropertyFeature) -> BuyerProfile:
    """Remove a feature from every set."""
    return replace(
        profile,
        must_haves=tuple(f for f in profile.must_haves if f != feature),
        nice_to_haves=tuple(f for f in profile.nice_to_haves if f != feature),
        dealbreakers=tuple(f for f in profile.dealbreakers if f != feature),
    )
