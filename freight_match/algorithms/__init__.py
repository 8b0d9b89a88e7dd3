"""
Algorithms Package

Deterministic computations used by the service layer:
- geo_distance: location resolution, distance, travel time, proximity, feasibility
- load_matching: weighted load scoring and ranking for a carrier
- eligibility: carrier eligibility policy with per-condition breakdown

No randomness; network access only through an opt-in geocoder gazetteer.
"""

from freight_match.algorithms.geo_distance import (
    Coordinates,
    DistanceResult,
    FeasibilityResult,
    Gazetteer,
    GazetteerEntry,
    GeocoderGazetteer,
    GeoDistanceEstimator,
    estimate_travel_hours,
    proximity_score
)
from freight_match.algorithms.load_matching import LoadMatchingEngine, compute_match_score
from freight_match.algorithms.eligibility import evaluate_eligibility

__all__ = [
    "Coordinates",
    "DistanceResult",
    "FeasibilityResult",
    "Gazetteer",
    "GazetteerEntry",
    "GeocoderGazetteer",
    "GeoDistanceEstimator",
    "estimate_travel_hours",
    "proximity_score",
    "LoadMatchingEngine",
    "compute_match_score",
    "evaluate_eligibility",
]
