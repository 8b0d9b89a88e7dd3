"""
Pydantic Schemas Package

Typed models for the freight matching service.

Export Groups:
- Base: Proofs, ApiResponse, ErrorResponse
- Carrier: CarrierProfile and its parts, eligibility, verify bodies
- Load: Load, Assignment, MatchResult, assign bodies
"""

# Base schemas
from freight_match.schemas.base import (
    Proofs,
    ApiResponse,
    ErrorBody,
    ErrorResponse
)

# Carrier schemas
from freight_match.schemas.carrier import (
    AuthorityInfo,
    InsuranceInfo,
    CarrierIdentity,
    CarrierProfile,
    EligibilityChecks,
    EligibilityResult,
    VerifyCarrierRequest,
    VerifyCarrierResponse
)

# Load schemas
from freight_match.schemas.load import (
    Load,
    LoadCreate,
    Assignment,
    MatchFactors,
    MatchResult,
    AssignLoadRequest,
    CarrierCargoInfo,
    AssignLoadResponse
)

__all__ = [
    # Base
    "Proofs",
    "ApiResponse",
    "ErrorBody",
    "ErrorResponse",
    # Carrier
    "AuthorityInfo",
    "InsuranceInfo",
    "CarrierIdentity",
    "CarrierProfile",
    "EligibilityChecks",
    "EligibilityResult",
    "VerifyCarrierRequest",
    "VerifyCarrierResponse",
    # Load
    "Load",
    "LoadCreate",
    "Assignment",
    "MatchFactors",
    "MatchResult",
    "AssignLoadRequest",
    "CarrierCargoInfo",
    "AssignLoadResponse",
]
