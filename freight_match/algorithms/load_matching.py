"""
Load Matching Algorithm

Deterministic engine that picks the best available load for a carrier.

Pipeline:
1. Keep loads with status "available"
2. Mandatory cargo filter (carrier must haul the load's commodity code;
   carriers with no cargo data get the benefit of the doubt)
3. Score each survivor:
   0.40 * cargo_match + 0.35 * proximity + 0.25 * timeline_feasible
   + min(rate / 10000, 0.10), capped at 1.0
4. Rank by score descending, ties broken by lowest load_id
5. Return the top load only if its score is > 0

Equipment type is not considered; the FMCSA data does not carry it.
"""

import logging
from datetime import datetime
from typing import Iterable, List, Optional

from freight_match.algorithms.geo_distance import GeoDistanceEstimator
from freight_match.constants.thresholds import (
    DEFAULT_PROXIMITY_SCORE,
    MAX_MATCH_SCORE,
    MAX_RATE_BONUS,
    RATE_BONUS_DIVISOR,
    WEIGHT_CARGO_MATCH,
    WEIGHT_PROXIMITY,
    WEIGHT_TIMELINE,
)
from freight_match.schemas.carrier import CarrierProfile
from freight_match.schemas.load import Load, MatchFactors, MatchResult

logger = logging.getLogger(__name__)


# ============================================================================
# Scoring Functions
# ============================================================================


def rate_bonus(loadboard_rate: float) -> float:
    """Small preference for better-paying loads: min(rate / 10000, 0.10)."""
    return min(max(loadboard_rate, 0.0) / RATE_BONUS_DIVISOR, MAX_RATE_BONUS)


def compute_match_score(
    cargo_match: bool,
    proximity: float,
    timeline_feasible: bool,
    bonus: float
) -> float:
    """Weighted sum of the match factors, clamped to [0, 1]."""
    score = (
        (WEIGHT_CARGO_MATCH if cargo_match else 0.0)
        + proximity * WEIGHT_PROXIMITY
        + (WEIGHT_TIMELINE if timeline_feasible else 0.0)
        + bonus
    )
    return max(0.0, min(score, MAX_MATCH_SCORE))


def cargo_compatible(carrier: CarrierProfile, load: Load) -> bool:
    """
    Mandatory cargo check.

    A carrier whose cargo set is unknown or empty passes every load.
    """
    if not carrier.has_cargo_data():
        return True
    return carrier.can_haul(load.commodity_type)


# ============================================================================
# Engine
# ============================================================================


class LoadMatchingEngine:
    """
    Scores and ranks candidate loads for one carrier.

    The carrier profile is only read; any profile mutation goes through the
    carrier cache, never through the engine.
    """

    def __init__(self, estimator: GeoDistanceEstimator):
        self.estimator = estimator

    def find_best_match(
        self,
        carrier: CarrierProfile,
        loads: Iterable[Load],
        current_location: str,
        as_of: datetime
    ) -> Optional[MatchResult]:
        """
        Return the best load for the carrier, or None if nothing qualifies.

        Raises:
            InvalidLocationFormat: current_location is not "City, State"
        """
        ranked = self.rank_loads(carrier, loads, current_location, as_of)
        if not ranked:
            return None

        best = ranked[0]
        if best.match_score <= 0:
            logger.info(f"Best candidate load {best.load.load_id} scored 0; no match")
            return None

        logger.info(
            f"Best match for MC {carrier.mc_number}: load {best.load.load_id} "
            f"score={best.match_score:.3f} out of {len(ranked)} candidates"
        )
        return best

    def rank_loads(
        self,
        carrier: CarrierProfile,
        loads: Iterable[Load],
        current_location: str,
        as_of: datetime
    ) -> List[MatchResult]:
        """All cargo-compatible available loads, scored and ordered best first."""
        # fail fast on bad input before any distance work
        self.estimator.parse_location(current_location)

        available = [load for load in loads if load.is_available()]
        if not available:
            logger.info("No available loads to match")
            return []

        compatible = [load for load in available if cargo_compatible(carrier, load)]
        if not compatible:
            logger.info(
                f"No cargo-compatible loads for MC {carrier.mc_number} "
                f"(hauls {carrier.cargo_carried}) among {len(available)} available"
            )
            return []

        if not carrier.has_cargo_data():
            logger.info(f"MC {carrier.mc_number} has no cargo data; all loads pass cargo filter")

        scored = [self.score_load(carrier, load, current_location, as_of) for load in compatible]
        scored.sort(key=lambda result: (-result.match_score, result.load.load_id))
        return scored

    def score_load(
        self,
        carrier: CarrierProfile,
        load: Load,
        current_location: str,
        as_of: datetime
    ) -> MatchResult:
        """Compute the factor breakdown and overall score for one load."""
        cargo_match = cargo_compatible(carrier, load)

        timeline = self.estimator.feasibility(
            current_location,
            load.origin,
            as_of,
            load.pickup_datetime
        )

        if timeline.distance is not None:
            proximity = self.estimator.proximity_score(timeline.distance.miles)
        else:
            proximity = DEFAULT_PROXIMITY_SCORE

        bonus = rate_bonus(load.loadboard_rate)
        score = compute_match_score(cargo_match, proximity, timeline.feasible, bonus)

        factors = MatchFactors(
            cargo_match=cargo_match,
            location_proximity=proximity,
            timeline_feasible=timeline.feasible,
            distance_to_pickup_miles=timeline.distance_miles,
            estimated_travel_hours=timeline.hours_needed,
            hours_available=timeline.hours_available,
            buffer_hours=timeline.buffer_hours,
            rate_bonus=bonus,
            degraded=timeline.degraded,
        )

        logger.debug(
            f"Load {load.load_id}: proximity={proximity:.3f} feasible={timeline.feasible} "
            f"bonus={bonus:.3f} score={score:.3f}"
        )
        return MatchResult(load=load, match_score=score, match_factors=factors)
