"""
Accessibility Requirement Table

Static mapping from each accessibility need to what it requires of a
property: human-readable requirement strings for the buyer's checklist
and the property features that serve the need.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final, Iterable

from .buyer_profile import AccessibilityNeed, PropertyFeature


@dataclass(frozen=True)
class AccessibilityRequirement:
    """What one accessibility need asks of a property."""

    need: AccessibilityNeed
    label: str
    requirements: tuple[str, ...]
    related_features: tuple[PropertyFeature, ...] = ()

    def to_dict(self) -> dict:
        return {
            "need": self.need.value,
            "label": self.label,
            "requirements": list(self.requirements),
            "related_features": [f.value for f in self.related_features],
        }


_N = AccessibilityNeed
_F = PropertyFeature

ACCESSIBILITY_REQUIREMENTS: Final[dict[AccessibilityNeed, AccessibilityRequirement]] = {
    req.need: req
    for req in (
        AccessibilityRequirement(
            need=_N.WHEELCHAIR_FULL,
            label="Full-Time Wheelchair / Power Chair",
            requirements=(
                "Single story or elevator access",
                'Wide doorways (36"+ clear)',
                "Roll-in shower or adaptable bathroom",
                "Accessible kitchen counter heights",
                "No-step entry / ramp access",
                "Accessible garage with clearance",
                "Proximity to accessible transit",
            ),
            related_features=(
                _F.SINGLE_STORY, _F.ELEVATOR, _F.WIDE_DOORWAYS,
                _F.ROLL_IN_SHOWER, _F.NO_STEP_ENTRY, _F.GARAGE,
            ),
        ),
        AccessibilityRequirement(
            need=_N.WHEELCHAIR_OCCASIONAL,
            label="Part-Time Wheelchair / Scooter",
            requirements=(
                "Single story preferred or elevator",
                "Wide hallways and doorways",
                "Minimal steps at entry (1-2 max with ramp potential)",
                "At least one accessible bathroom on main floor",
            ),
            related_features=(
                _F.SINGLE_STORY, _F.ELEVATOR, _F.WIDE_DOORWAYS, _F.ACCESSIBLE_BATHROOM,
            ),
        ),
        AccessibilityRequirement(
            need=_N.MOBILITY_LIMITED,
            label="Mobility Aid (Walker, Cane, Difficulty with Stairs)",
            requirements=(
                "Few or no stairs (single story ideal)",
                "Grab bar-ready bathrooms",
                "Walk-in shower or tub with low threshold",
                "Well-lit pathways, minimal tripping hazards",
                "Close parking to entry",
            ),
            related_features=(_F.SINGLE_STORY, _F.ACCESSIBLE_BATHROOM, _F.NO_STEP_ENTRY),
        ),
        AccessibilityRequirement(
            need=_N.VISUAL_IMPAIRMENT,
            label="Visual Impairment (Low Vision / Blind)",
            requirements=(
                "Well-lit interior and exterior",
                "Simple, predictable floor plan",
                "Proximity to public transit",
                "Walkable neighborhood (safe pedestrian infrastructure)",
                "Minimal level changes between rooms",
            ),
            related_features=(_F.NEAR_TRANSIT, _F.WALKABLE, _F.SINGLE_STORY),
        ),
        AccessibilityRequirement(
            need=_N.HEARING_IMPAIRMENT,
            label="Hearing Impairment (Deaf / Hard of Hearing)",
            requirements=(
                "Visual doorbell / alert systems installable",
                "Open floor plan for line-of-sight",
                "Good natural lighting for sign language",
                "Proximity to deaf community resources (if desired)",
            ),
        ),
        AccessibilityRequirement(
            need=_N.SENSORY_SENSITIVITY,
            label="Sensory Sensitivity (Noise, Light, Crowds)",
            requirements=(
                "Quiet neighborhood (away from highways, airports, bars)",
                "Good sound insulation between rooms",
                "Not adjacent to commercial or high-traffic areas",
                "Private outdoor space (enclosed yard)",
                "Ability to control lighting (no mandatory shared lighting)",
            ),
            related_features=(_F.QUIET_STREET, _F.YARD),
        ),
        AccessibilityRequirement(
            need=_N.CHRONIC_FATIGUE,
            label="Chronic Fatigue / Energy-Limiting Condition",
            requirements=(
                "Single story preferred",
                "Low-maintenance yard or HOA-maintained landscaping",
                "Short distance from parking to door",
                "Laundry on main floor",
                "Nearby essential services (grocery, pharmacy)",
            ),
            related_features=(
                _F.SINGLE_STORY, _F.LOW_MAINTENANCE, _F.LAUNDRY_MAIN_FLOOR, _F.NEAR_GROCERY,
            ),
        ),
        AccessibilityRequirement(
            need=_N.RESPIRATORY,
            label="Respiratory (Asthma, COPD)",
            requirements=(
                "Good ventilation / modern HVAC",
                "Away from freeways and industrial zones",
                "No mold history",
                "Central air with filtration",
                "Not in high wildfire smoke area",
            ),
            related_features=(_F.CENTRAL_AC, _F.NEW_CONSTRUCTION),
        ),
        AccessibilityRequirement(
            need=_N.COGNITIVE,
            label="Cognitive / Memory Support Needs",
            requirements=(
                "Simple, predictable layout",
                "Secure perimeter (fenced yard, lockable gates)",
                "Quiet, low-stimulation neighborhood",
                "Proximity to care facilities",
                "Safe kitchen layout",
            ),
            related_features=(_F.QUIET_STREET, _F.GATED_COMMUNITY, _F.NEAR_MEDICAL),
        ),
        AccessibilityRequirement(
            need=_N.CHILD_DISABILITY,
            label="Child with Disability in Household",
            requirements=(
                "Accessible bedroom and bathroom on main floor",
                "Safe, enclosed outdoor play area",
                "Proximity to specialized schools and therapy centers",
                "Wide doorways for equipment",
                "Low-allergen materials if respiratory issues",
            ),
            related_features=(_F.ACCESSIBLE_BATHROOM, _F.YARD, _F.WIDE_DOORWAYS),
        ),
        AccessibilityRequirement(
            need=_N.TEMPORARY_INJURY,
            label="Temporary Injury / Recovery",
            requirements=(
                "Main floor bedroom and bathroom available",
                "Minimal stairs during recovery",
                "Accessible shower",
                "Close parking",
            ),
            related_features=(_F.SINGLE_STORY, _F.ROLL_IN_SHOWER),
        ),
        AccessibilityRequirement(
            need=_N.AGING_IN_PLACE,
            label="Planning to Age in Place",
            requirements=(
                "Single story or main-floor master suite",
                "Bathroom adaptable for grab bars",
                "Wide doorways (future wheelchair possibility)",
                "Low-maintenance exterior",
                "Near medical facilities",
                "Good neighborhood walkability",
            ),
            related_features=(
                _F.SINGLE_STORY, _F.WIDE_DOORWAYS, _F.LOW_MAINTENANCE,
                _F.NEAR_MEDICAL, _F.WALKABLE,
            ),
        ),
        AccessibilityRequirement(
            need=_N.NONE,
            label="No Specific Accessibility Needs",
            requirements=(),
        ),
    )
}

# Needs for which a multi-story home is a problem
STAIR_SENSITIVE_NEEDS: Final[frozenset[AccessibilityNeed]] = frozenset({
    _N.WHEELCHAIR_FULL,
    _N.WHEELCHAIR_OCCASIONAL,
    _N.MOBILITY_LIMITED,
    _N.CHRONIC_FATIGUE,
})

# Needs that must confirm single-level living (and flag unknown story counts)
SINGLE_LEVEL_NEEDS: Final[frozenset[AccessibilityNeed]] = frozenset({
    _N.WHEELCHAIR_FULL,
    _N.WHEELCHAIR_OCCASIONAL,
    _N.MOBILITY_LIMITED,
})


def requirement_for(need: AccessibilityNeed) -> AccessibilityRequirement:
    return ACCESSIBILITY_REQUIREMENTS[need]


def accessibility_label(need: AccessibilityNeed) -> str:
    return ACCESSIBILITY_REQUIREMENTS[need].label


def requirements_for(needs: Iterable[AccessibilityNeed]) -> list[str]:
    """
    Combined checklist for a set of needs.

    Order follows the needs as given; `none` contributes nothing and
    repeated requirement strings appear once.
    """
    checklist: list[str] = []
    for need in needs:
        for requirement in ACCESSIBILITY_REQUIREMENTS[need].requirements:
            if requirement not in checklist:
                checklist.append(requirement)
    return checklist
