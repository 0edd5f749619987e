"""
Feature predicates.

Decide whether a profile feature is present on a property using only the
structured snapshot. Few features are decidable this way (story count,
garage, HOA, construction year, lot size); everything else is reported
as unknown and left to the claims/evidence system.
"""

from __future__ import annotations

from typing import Optional

from core.buyer_profile import PropertyFeature
from core.models import PropertySnapshot

from .constants import (
    GARAGE_NONE_DESCRIPTOR,
    LOW_HOA_MAX_MONTHLY,
    NEW_CONSTRUCTION_MIN_YEAR,
    YARD_MIN_LOT_SQFT,
)
from .models import DealbreakerStatus, FeatureStatus


def _story_status(snapshot: PropertySnapshot) -> FeatureStatus:
    if snapshot.is_single_story:
        return FeatureStatus.MATCHED
    if snapshot.is_multi_story:
        return FeatureStatus.MISSING
    return FeatureStatus.UNKNOWN


def _garage_status(snapshot: PropertySnapshot) -> FeatureStatus:
    garage = (snapshot.garage or "").strip()
    if not garage:
        return FeatureStatus.UNKNOWN
    if garage.lower() == GARAGE_NONE_DESCRIPTOR.lower():
        return FeatureStatus.MISSING
    return FeatureStatus.MATCHED


def _no_hoa_status(snapshot: PropertySnapshot) -> FeatureStatus:
    if snapshot.hoa is None:
        return FeatureStatus.UNKNOWN
    return FeatureStatus.MATCHED if snapshot.hoa == 0 else FeatureStatus.MISSING


def _low_hoa_status(snapshot: PropertySnapshot) -> FeatureStatus:
    if snapshot.hoa is None:
        return FeatureStatus.UNKNOWN
    if snapshot.hoa <= LOW_HOA_MAX_MONTHLY:
        return FeatureStatus.MATCHED
    return FeatureStatus.MISSING


def _new_construction_status(snapshot: PropertySnapshot) -> FeatureStatus:
    if not snapshot.year_built:
        return FeatureStatus.UNKNOWN
    if snapshot.year_built >= NEW_CONSTRUCTION_MIN_YEAR:
        return FeatureStatus.MATCHED
    return FeatureStatus.MISSING


def _yard_status(snapshot: PropertySnapshot) -> FeatureStatus:
    if not snapshot.lot_sqft:
        return FeatureStatus.UNKNOWN
    if snapshot.lot_sqft > YARD_MIN_LOT_SQFT:
        return FeatureStatus.MATCHED
    return FeatureStatus.MISSING


_PRESENCE_CHECKS = {
    PropertyFeature.SINGLE_STORY: _story_status,
    PropertyFeature.GARAGE: _garage_status,
    PropertyFeature.NO_HOA: _no_hoa_status,
    PropertyFeature.LOW_HOA: _low_hoa_status,
    PropertyFeature.NEW_CONSTRUCTION: _new_construction_status,
    PropertyFeature.YARD: _yard_status,
}


def check_feature_present(
    feature: PropertyFeature,
    snapshot: Optional[PropertySnapshot],
) -> FeatureStatus:
    """
    Whether a wanted feature is on the property.

    Returns MATCHED, MISSING, or UNKNOWN when the data cannot decide.
    """
    if snapshot is None:
        return FeatureStatus.UNKNOWN
    check = _PRESENCE_CHECKS.get(feature)
    if check is None:
        return FeatureStatus.UNKNOWN
    return check(snapshot)


def check_dealbreaker(
    feature: PropertyFeature,
    snapshot: Optional[PropertySnapshot],
) -> DealbreakerStatus:
    """
    Whether a dealbreaker is triggered.

    no_hoa is violated by a positive HOA fee; single_story is violated by
    a confirmed multi-story property.
    """
    if snapshot is None:
        return DealbreakerStatus.UNKNOWN

    if feature == PropertyFeature.NO_HOA:
        if snapshot.hoa is None:
            return DealbreakerStatus.UNKNOWN
        return DealbreakerStatus.VIOLATED if snapshot.hoa > 0 else DealbreakerStatus.CLEAR

    if feature == PropertyFeature.SINGLE_STORY:
        if snapshot.stories is None:
            return DealbreakerStatus.UNKNOWN
        return DealbreakerStatus.VIOLATED if snapshot.is_multi_story else DealbreakerStatus.CLEAR

    return DealbreakerStatus.UNKNOWN
