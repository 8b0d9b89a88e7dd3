"""
Threshold Constants

Centralized values used by the geo estimator, the load matching engine and
the eligibility policy.

IMPORTANT: weights and breakpoints are product policy. Changing them changes
which load a carrier is offered.
"""

# ============================================================================
# Travel Time
# SYNC WITH: freight_match/algorithms/geo_distance.py
# ============================================================================

# Average truck speed including rest stops and fueling (mph)
AVERAGE_TRUCK_SPEED_MPH = 55.0

# Multiplier applied to raw drive time (20% operational buffer)
TRAVEL_TIME_BUFFER_FACTOR = 1.2

# Minimum slack between arrival and pickup for a load to be feasible (hours)
MIN_PICKUP_BUFFER_HOURS = 2.0

KM_TO_MILES = 0.621371


# ============================================================================
# Proximity Score Breakpoints (miles -> score)
# SYNC WITH: geo_distance.proximity_score
# ============================================================================

PROXIMITY_FULL_SCORE_MILES = 50.0

# (upper bound miles, score at lower bound, score at upper bound)
PROXIMITY_LINEAR_BANDS = (
    (150.0, 0.9, 0.7),
    (300.0, 0.7, 0.5),
    (500.0, 0.5, 0.3),
)

PROXIMITY_DECAY_START_SCORE = 0.3
PROXIMITY_DECAY_MILES = 1000.0
PROXIMITY_FLOOR = 0.1

# Used when the distance to pickup cannot be computed
DEFAULT_PROXIMITY_SCORE = 0.5


# ============================================================================
# Match Scoring Weights
# SYNC WITH: freight_match/algorithms/load_matching.py
# ============================================================================

WEIGHT_CARGO_MATCH = 0.40
WEIGHT_PROXIMITY = 0.35
WEIGHT_TIMELINE = 0.25

# rate / RATE_BONUS_DIVISOR, capped at MAX_RATE_BONUS
RATE_BONUS_DIVISOR = 10000.0
MAX_RATE_BONUS = 0.10

MAX_MATCH_SCORE = 1.0


# ============================================================================
# Eligibility Codes
# SYNC WITH: freight_match/algorithms/eligibility.py
# ============================================================================

ACTIVE_STATUS_CODE = "A"
ALLOWED_TO_OPERATE_FLAG = "Y"
ACTIVE_AUTHORITY_STATUS = "A"
