"""
Constants Package

Cargo classification table and the numeric policy values used by the
matching engine and eligibility checks.

Safe to import anywhere - no heavy dependencies or circular imports.
"""

from .cargo_types import (
    CARGO_TYPES,
    MIN_CARGO_CODE,
    MAX_CARGO_CODE,
    is_valid_cargo_code,
    get_cargo_type_name,
    cargo_code_from_description,
    cargo_code_from_item,
)

from .thresholds import (
    AVERAGE_TRUCK_SPEED_MPH,
    TRAVEL_TIME_BUFFER_FACTOR,
    MIN_PICKUP_BUFFER_HOURS,
    DEFAULT_PROXIMITY_SCORE,
    WEIGHT_CARGO_MATCH,
    WEIGHT_PROXIMITY,
    WEIGHT_TIMELINE,
    MAX_RATE_BONUS,
)

from .constants import (
    TRACE_HEADER_NAME,
    SERVICE_NAME,
    SERVICE_VERSION,
)

__all__ = [
    # Cargo
    "CARGO_TYPES",
    "MIN_CARGO_CODE",
    "MAX_CARGO_CODE",
    "is_valid_cargo_code",
    "get_cargo_type_name",
    "cargo_code_from_description",
    "cargo_code_from_item",
    # Thresholds
    "AVERAGE_TRUCK_SPEED_MPH",
    "TRAVEL_TIME_BUFFER_FACTOR",
    "MIN_PICKUP_BUFFER_HOURS",
    "DEFAULT_PROXIMITY_SCORE",
    "WEIGHT_CARGO_MATCH",
    "WEIGHT_PROXIMITY",
    "WEIGHT_TIMELINE",
    "MAX_RATE_BONUS",
    # Global
    "TRACE_HEADER_NAME",
    "SERVICE_NAME",
    "SERVICE_VERSION",
]
