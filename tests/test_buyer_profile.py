"""
Tests for the Buyer Profile

Tests covering:
1. Defaults and derived properties
2. Construction checks (validate_buyer_profile / BuyerProfile.create)
3. Wizard feature assignment
4. Dictionary conversion
"""

import pytest

from core.buyer_profile import (
    AccessibilityNeed,
    BuyerProfile,
    BuyerSituation,
    CommuteMode,
    FeatureImportance,
    HouseholdMember,
    ProfileValidationError,
    PropertyFeature,
    assign_feature,
    feature_label,
    remove_feature,
    validate_buyer_profile,
)


# =============================================================================
# Test Fixtures
# =============================================================================

@pytest.fixture
def profile():
    return BuyerProfile(
        situation=BuyerSituation.DOWNSIZING,
        household_members=(HouseholdMember.COUPLE, HouseholdMember.ELDERLY_PARENT),
        household_size=3,
        accessibility_needs=(AccessibilityNeed.MOBILITY_LIMITED,),
        budget_min=400000,
        budget_max=600000,
        budget_stretch=650000,
        must_haves=(PropertyFeature.SINGLE_STORY,),
        nice_to_haves=(PropertyFeature.YARD,),
        dealbreakers=(PropertyFeature.POOL,),
        has_pets=True,
        pet_types=("dog",),
    )


# =============================================================================
# Test: Defaults
# =============================================================================

class TestDefaults:

    def test_wizard_defaults(self):
        profile = BuyerProfile(situation=BuyerSituation.FIRST_TIME)

        assert profile.commute_mode == CommuteMode.DRIVING
        assert profile.max_commute_minutes == 45
        assert profile.beds_min == 2
        assert profile.baths_min == 1
        assert profile.sqft_min == 0
        assert profile.household_size == 1

    def test_has_accessibility_needs(self, profile):
        assert profile.has_accessibility_needs

    def test_none_sentinel_only(self):
        profile = BuyerProfile(
            situation=BuyerSituation.FIRST_TIME,
            accessibility_needs=(AccessibilityNeed.NONE,),
        )

        assert not profile.has_accessibility_needs
        assert profile.declared_needs == ()

    def test_household_member_lookup(self, profile):
        assert profile.has_household_member(HouseholdMember.ELDERLY_PARENT)
        assert not profile.has_household_member(HouseholdMember.ROOMMATES)

    def test_feature_labels(self):
        assert feature_label(PropertyFeature.LOW_HOA) == "Low HOA (<$200/mo)"
        for feature in PropertyFeature:
            assert feature_label(feature)


# =============================================================================
# Test: Validation
# =============================================================================

class TestValidation:

    def test_valid_profile(self, profile):
        result = validate_buyer_profile(profile)

        assert result.is_valid
        assert result.errors == ()

    @pytest.mark.parametrize("changes,fragment", [
        ({"household_size": 0}, "household_size"),
        ({"household_size": 21}, "household_size"),
        ({"budget_min": -1}, "budget_min cannot be negative"),
        ({"budget_stretch": 500000}, "budget_stretch must be >= budget_max"),
        ({"budget_min": 700000, "budget_stretch": 700000}, "budget_max must be >= budget_min"),
        ({"max_commute_minutes": 181}, "max_commute_minutes"),
        ({"beds_min": 11}, "beds_min"),
        ({"baths_min": -1}, "baths_min"),
        ({"sqft_min": -5}, "sqft_min"),
        ({"accessibility_notes": "x" * 501}, "accessibility_notes"),
    ])
    def test_invalid_fields(self, profile, changes, fragment):
        data = {**profile.to_dict(), **changes}

        result = validate_buyer_profile(BuyerProfile.from_dict(data))

        assert not result.is_valid
        assert any(fragment in error for error in result.errors)

    def test_overlapping_feature_sets(self, profile):
        data = {**profile.to_dict(), "nice_to_haves": ["single_story"]}

        result = validate_buyer_profile(BuyerProfile.from_dict(data))

        assert "single_story appears in both must_have and nice_to_have" in result.errors

    def test_create_raises_with_errors(self):
        with pytest.raises(ProfileValidationError) as excinfo:
            BuyerProfile.create(situation=BuyerSituation.INVESTOR, household_size=0, budget_max=-5)

        assert len(excinfo.value.errors) >= 2
        assert isinstance(excinfo.value, ValueError)

    def test_create_returns_valid_profile(self):
        profile = BuyerProfile.create(
            situation=BuyerSituation.RELOCATING, budget_max=500000, budget_stretch=550000
        )

        assert profile.budget_stretch == 550000


# =============================================================================
# Test: Feature Assignment
# =============================================================================

class TestFeatureAssignment:

    def test_moving_feature_between_sets(self, profile):
        updated = assign_feature(profile, PropertyFeature.SINGLE_STORY, FeatureImportance.DEALBREAKER)

        assert PropertyFeature.SINGLE_STORY not in updated.must_haves
        assert PropertyFeature.SINGLE_STORY in updated.dealbreakers
        assert validate_buyer_profile(updated).is_valid

    def test_input_not_modified(self, profile):
        assign_feature(profile, PropertyFeature.YARD, FeatureImportance.MUST_HAVE)

        assert profile.nice_to_haves == (PropertyFeature.YARD,)
        assert profile.must_haves == (PropertyFeature.SINGLE_STORY,)

    def test_assign_same_bucket_keeps_single_entry(self, profile):
        updated = assign_feature(profile, PropertyFeature.SINGLE_STORY, FeatureImportance.MUST_HAVE)

        assert updated.must_haves == (PropertyFeature.SINGLE_STORY,)

    def test_remove_feature_everywhere(self, profile):
        updated = remove_feature(profile, PropertyFeature.POOL)

        assert updated.dealbreakers == ()
        assert updated.must_haves == profile.must_haves

    def test_features_in(self, profile):
        assert profile.features_in(FeatureImportance.NICE_TO_HAVE) == (PropertyFeature.YARD,)


# =============================================================================
# Test: Dictionary Conversion
# =============================================================================

class TestDictConversion:

    def test_to_dict_uses_wire_strings(self, profile):
        data = profile.to_dict()

        assert data["situation"] == "downsizing"
        assert data["accessibility_needs"] == ["mobility_limited"]
        assert data["must_haves"] == ["single_story"]
        assert data["commute_mode"] == "driving"

    def test_from_dict_restores_profile(self, profile):
        assert BuyerProfile.from_dict(profile.to_dict()) == profile

    def test_from_dict_defaults(self):
        profile = BuyerProfile.from_dict({"situation": "retiring"})

        assert profile.situation == BuyerSituation.RETIRING
        assert profile.beds_min == 2

    def test_from_dict_case_insensitive(self):
        profile = BuyerProfile.from_dict({"situation": "First_Time", "must_haves": ["GARAGE"]})

        assert profile.situation == BuyerSituation.FIRST_TIME
        assert profile.must_haves == (PropertyFeature.GARAGE,)

    def test_unknown_vocabulary_raises(self):
        with pytest.raises(ValueError):
            BuyerProfile.from_dict({"situation": "first_time", "must_haves": ["moat"]})

    def test_missing_situation_raises(self):
        with pytest.raises(ValueError):
            BuyerProfile.from_dict({})
