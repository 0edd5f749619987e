"""
Fit engine tuning constants.

Product-tuning values with no derivation behind them, kept in one place
so they can be revisited without reading the algorithm.
"""

from typing import Final


# =============================================================================
# Category Weights
# =============================================================================

WEIGHT_BUDGET: Final[float] = 0.25
WEIGHT_SIZE: Final[float] = 0.20
WEIGHT_ACCESSIBILITY_WITH_NEEDS: Final[float] = 0.30
WEIGHT_ACCESSIBILITY_NO_NEEDS: Final[float] = 0.05
WEIGHT_FEATURES: Final[float] = 0.15
WEIGHT_TRUST: Final[float] = 0.10
WEIGHT_LIFESTYLE_FLOOR: Final[float] = 0.05  # Lifestyle takes the remainder, at least this

# =============================================================================
# Category Names
# =============================================================================

CATEGORY_BUDGET: Final[str] = "Budget Fit"
CATEGORY_SIZE: Final[str] = "Size & Layout"
CATEGORY_ACCESSIBILITY: Final[str] = "Accessibility"
CATEGORY_FEATURES: Final[str] = "Feature Match"
CATEGORY_TRUST: Final[str] = "Trust & Risk"
CATEGORY_LIFESTYLE: Final[str] = "Lifestyle Fit"

# =============================================================================
# Score Bounds
# =============================================================================

MIN_SCORE: Final[int] = 0
MAX_SCORE: Final[int] = 100

# =============================================================================
# Budget
# =============================================================================

BUDGET_NO_PRICE_SCORE: Final[int] = 40
BUDGET_STRETCH_TOP: Final[int] = 60  # Score just over the comfortable max
BUDGET_STRETCH_SPAN: Final[int] = 40  # Drops to 20 at the stretch ceiling
BUDGET_OVER_STRETCH_BASE: Final[int] = 15
BUDGET_OVER_STRETCH_DIVISOR: Final[int] = 2
DEGENERATE_STRETCH_PCT_OVER: Final[float] = 100.0  # Stretch ceiling <= 0

# =============================================================================
# Size & Layout
# =============================================================================

SIZE_NO_SNAPSHOT_SCORE: Final[int] = 35
SIZE_BED_PENALTY_PER_ROOM: Final[int] = 25
SIZE_BATH_PENALTY: Final[int] = 20
SIZE_SQFT_MAX_PENALTY: Final[int] = 35
SIZE_BEDS_UNKNOWN_PENALTY: Final[int] = 10
SIZE_BATHS_UNKNOWN_PENALTY: Final[int] = 5
SIZE_SQFT_UNKNOWN_PENALTY: Final[int] = 10

# =============================================================================
# Accessibility
# =============================================================================

ACCESS_WHEELCHAIR_MULTI_STORY_PENALTY: Final[int] = 50
ACCESS_MOBILITY_MULTI_STORY_PENALTY: Final[int] = 25
ACCESS_STORIES_UNKNOWN_PENALTY: Final[int] = 15
ACCESS_NOISE_PENALTY: Final[int] = 25
ACCESS_OLD_BUILD_PENALTY: Final[int] = 15
ACCESS_AGING_MULTI_STORY_PENALTY: Final[int] = 20
RESPIRATORY_YEAR_THRESHOLD: Final[int] = 1990  # Built before this year is flagged
NOISE_KEYWORDS: Final[tuple[str, ...]] = ("noise", "traffic", "highway", "airport")

# =============================================================================
# Feature Match
# =============================================================================

FEATURE_MUST_HAVE_MISSING_PENALTY: Final[int] = 18
FEATURE_MUST_HAVE_UNKNOWN_PENALTY: Final[int] = 8
FEATURE_NICE_TO_HAVE_MISSING_PENALTY: Final[int] = 5
FEATURE_DEALBREAKER_PENALTY: Final[int] = 50
LOW_HOA_MAX_MONTHLY: Final[float] = 200
NEW_CONSTRUCTION_MIN_YEAR: Final[int] = 2020
YARD_MIN_LOT_SQFT: Final[int] = 2000  # Lot must exceed this
GARAGE_NONE_DESCRIPTOR: Final[str] = "None"

# =============================================================================
# Lifestyle
# =============================================================================

LIFESTYLE_BASE_SCORE: Final[int] = 65
LIFESTYLE_MULTIGEN_MIN_BEDS: Final[int] = 4
LIFESTYLE_MULTIGEN_BONUS: Final[int] = 15
LIFESTYLE_RETIRING_SINGLE_STORY_BONUS: Final[int] = 15
LIFESTYLE_ELDERLY_MULTI_STORY_PENALTY: Final[int] = 20
LIFESTYLE_ELDERLY_SINGLE_STORY_BONUS: Final[int] = 10

# =============================================================================
# Hard Caps and Labels
# =============================================================================

DEALBREAKER_SCORE_CAP: Final[int] = 25
OVER_STRETCH_SEVERE_PCT: Final[float] = 20.0
OVER_STRETCH_SEVERE_CAP: Final[int] = 30
OVER_STRETCH_MODERATE_PCT: Final[float] = 10.0
OVER_STRETCH_MODERATE_CAP: Final[int] = 40

GREAT_MATCH_THRESHOLD: Final[int] = 75
GOOD_MATCH_THRESHOLD: Final[int] = 60
FAIR_THRESHOLD: Final[int] = 40
