"""
Load Schemas

Pydantic models for loads, assignments and match results.
Load and Assignment are persisted in the record store; MatchResult is built
per matching request and never stored.
"""

from datetime import datetime
from typing import Any, List, Literal, Optional, Union
from pydantic import BaseModel, Field, ConfigDict, field_validator

from freight_match.constants.cargo_types import is_valid_cargo_code
from freight_match.tools.time_tool import ensure_utc

LoadStatus = Literal["available", "assigned"]
AssignmentStatus = Literal["pending", "confirmed", "cancelled"]

LOAD_AVAILABLE = "available"
LOAD_ASSIGNED = "assigned"

ASSIGNMENT_PENDING = "pending"
ASSIGNMENT_CONFIRMED = "confirmed"
ASSIGNMENT_CANCELLED = "cancelled"
ACTIVE_ASSIGNMENT_STATUSES = (ASSIGNMENT_PENDING, ASSIGNMENT_CONFIRMED)


class LoadFields(BaseModel):
    """Fields shared by stored loads and load-creation requests."""
    origin: str = Field(..., description='Pickup location, "City, ST"')
    destination: str = Field(..., description='Delivery location, "City, ST"')
    pickup_datetime: datetime
    delivery_datetime: datetime
    commodity_type: int = Field(..., description="Cargo code 1..30")
    loadboard_rate: float = Field(..., ge=0, description="Posted rate (USD)")
    weight: float = Field(0, ge=0)
    miles: float = Field(0, ge=0)
    equipment_type: str = ""
    notes: str = ""
    num_pieces: int = 0
    dimensions: str = ""

    model_config = ConfigDict(extra="ignore")

    @field_validator("commodity_type")
    @classmethod
    def _check_commodity(cls, value: int) -> int:
        if not is_valid_cargo_code(value):
            raise ValueError("commodity_type must be a cargo code in 1..30")
        return value

    @field_validator("pickup_datetime", "delivery_datetime")
    @classmethod
    def _utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)


class Load(LoadFields):
    load_id: int
    status: LoadStatus = LOAD_AVAILABLE
    created_at: Optional[datetime] = None

    @field_validator("status", mode="before")
    @classmethod
    def _default_status(cls, value: Any) -> Any:
        # legacy records carry no status; they are still in the pool
        return value or LOAD_AVAILABLE

    def is_available(self) -> bool:
        return self.status == LOAD_AVAILABLE


class LoadCreate(LoadFields):
    load_id: Optional[int] = Field(None, ge=1, description="Assigned as max+1 when omitted")


class Assignment(BaseModel):
    assignment_id: int
    load_id: int
    carrier_mc: str
    assigned_at: datetime
    match_score: float = Field(..., ge=0.0, le=1.0)
    status: AssignmentStatus = ASSIGNMENT_PENDING

    def is_active(self) -> bool:
        return self.status in ACTIVE_ASSIGNMENT_STATUSES


# ============================================================================
# Matching
# ============================================================================


class MatchFactors(BaseModel):
    """Breakdown of how a load scored for a carrier."""
    cargo_match: bool
    location_proximity: float = Field(..., ge=0.0, le=1.0)
    timeline_feasible: bool
    distance_to_pickup_miles: Optional[float] = None
    estimated_travel_hours: float = 0.0
    hours_available: float = 0.0
    buffer_hours: float = 0.0
    rate_bonus: float = 0.0
    degraded: bool = Field(
        False, description="Feasibility fell back because a location could not be resolved"
    )


class MatchResult(BaseModel):
    load: Load
    match_score: float = Field(..., ge=0.0, le=1.0)
    match_factors: MatchFactors


# ============================================================================
# API Bodies
# ============================================================================


class AssignLoadRequest(BaseModel):
    mc_number: Union[str, int]
    current_location: str = Field(..., description='Carrier location, "City, ST"')


class CarrierCargoInfo(BaseModel):
    mc_number: str
    dot_number: str
    cargo_types: List[int] = Field(default_factory=list)


class AssignLoadResponse(BaseModel):
    success: bool = True
    assignment_id: int
    carrier_cargo_info: CarrierCargoInfo
    matched_load: Load
    commodity_name: Optional[str] = Field(None, description="Cargo classification name of the matched load")
    match_score: float
    match_factors: MatchFactors
