# Constants for the session-scoring engine.

# Fixed blend of the five sub-scores (sums to 1.0)
SCORING_WEIGHTS = {
    "category_affinity": 0.30,
    "price_range_fit": 0.25,
    "tag_affinity": 0.20,
    "popularity": 0.15,
    "recency_boost": 0.10,
}

# Factor names (also read by badge and reasoning logic)
FACTOR_CATEGORY = "Category Affinity"
FACTOR_PRICE = "Price Range Fit"
FACTOR_TAG = "Tag Affinity"
FACTOR_POPULARITY = "Popularity"
FACTOR_RECENCY = "Recency Boost"

RELATED_CATEGORY_FACTOR = 0.4  # share of a neighbour category's affinity
RECENT_VIEW_WINDOW = 3         # products considered by the recency boost
RECENCY_CATEGORY_BOOST = 60
RECENCY_TAG_BOOST = 15
RECENCY_TAG_CAP = 40

# Total-score penalties (they stack)
PENALTY_IN_CART = 30
PENALTY_CURRENT_PRODUCT = 50
PENALTY_LAST_VIEWED = 20

BEST_MATCH_SCORE = 85

# Tag affinity deltas per event
TAG_DELTA_VIEW = 0.1
TAG_DELTA_ADD_TO_CART = 0.25
TAG_DELTA_REMOVE_FROM_CART = -0.05

# Category weight per event
CATEGORY_WEIGHT_VIEW = 1
CATEGORY_WEIGHT_ADD_TO_CART = 2

# Price sensitivity thresholds (same currency unit as product prices)
BUDGET_AVG_PRICE = 3000
MODERATE_AVG_PRICE = 8000
PREMIUM_AVG_PRICE = 15000
INDIFFERENT_RANGE_RATIO = 0.8

# Cart advisor
MAX_CART_OPTIMIZATIONS = 5
BUNDLE_CONFIDENCE = 0.75
BUNDLE_SAVING_RATE = 0.15
ALTERNATIVE_CONFIDENCE = 0.65
ALTERNATIVE_MAX_PRICE_RATIO = 0.85
ALTERNATIVE_MIN_RATING = 3.5
OVERLAP_CONFIDENCE = 0.55
PRICE_ALERT_CONFIDENCE = 0.7
PRICE_ALERT_RATIO = 1.5
QUANTITY_CONFIDENCE = 0.5
QUANTITY_SAVING_RATE = 0.1
QUANTITY_MIN = 2
QUANTITY_MAX = 5  # exclusive

# Orchestration
DEFAULT_CONFIDENCE = 0.3  # reported when nothing was scored
CART_PAGE = "cart"
