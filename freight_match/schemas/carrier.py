"""
Carrier Schemas

Pydantic models for carrier verification.
CarrierProfile is the merged result of the identity, authority,
operation-classification and (on demand) cargo-carried lookups, and is the
document stored in the carriers collection of the record store.
"""

from datetime import datetime
from typing import Any, List, Optional, Union
from pydantic import BaseModel, Field, ConfigDict, field_validator

from freight_match.constants.cargo_types import is_valid_cargo_code
from freight_match.tools.time_tool import ensure_utc


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


class AuthorityInfo(BaseModel):
    """
    Operating authority status from the authority lookup.

    "A" = active, anything else (including "") = inactive/absent.
    """
    common_authority_status: str = Field("", description="Common authority status")
    contract_authority_status: str = Field("", description="Contract authority status")
    authorized_for_property: str = Field("N", description="Y/N")
    authorized_for_passenger: str = Field("N", description="Y/N")
    authorized_for_household_goods: str = Field("N", description="Y/N")

    model_config = ConfigDict(extra="ignore")


class InsuranceInfo(BaseModel):
    """
    Insurance figures as reported upstream (numeric text, thousands of USD).

    Compared numerically by the eligibility policy.
    """
    bipd_on_file: str = Field("0", description="BIPD coverage on file")
    bipd_required: str = Field("0", description="BIPD coverage required")
    cargo_on_file: str = Field("0", description="Cargo coverage on file")

    model_config = ConfigDict(extra="ignore")

    @field_validator("bipd_on_file", "bipd_required", "cargo_on_file", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str:
        text = _as_text(value).strip()
        return text or "0"


class CarrierIdentity(BaseModel):
    """Normalized result of the identity (docket-number) lookup."""
    dot_number: str
    legal_name: str = ""
    dba_name: Optional[str] = None
    status_code: str = ""
    allowed_to_operate: str = "N"
    safety_rating: Optional[str] = None
    insurance: InsuranceInfo = Field(default_factory=InsuranceInfo)

    @field_validator("dot_number", mode="before")
    @classmethod
    def _dot_as_text(cls, value: Any) -> str:
        return _as_text(value)


class CarrierProfile(BaseModel):
    """
    Verified carrier profile, keyed by MC number.

    cargo_carried is None until the cargo lookup has run; an empty list means
    the lookup ran and reported nothing. Both are treated as "unknown" by the
    matching engine.
    """
    mc_number: str = Field(..., description="Normalized MC number (cache key)")
    dot_number: str = Field(..., description="USDOT number")
    legal_name: str = ""
    dba_name: Optional[str] = None
    status_code: str = Field("", description='"A" = active')
    allowed_to_operate: str = Field("N", description="Y/N")
    safety_rating: Optional[str] = None

    authority: AuthorityInfo = Field(default_factory=AuthorityInfo)
    operation_classification: List[str] = Field(default_factory=list)
    cargo_carried: Optional[List[int]] = Field(None, description="Cargo codes 1..30")
    insurance: InsuranceInfo = Field(default_factory=InsuranceInfo)

    last_verified: datetime
    cached_at: datetime

    model_config = ConfigDict(extra="ignore")

    @field_validator("cargo_carried")
    @classmethod
    def _check_cargo_codes(cls, value: Optional[List[int]]) -> Optional[List[int]]:
        if value is None:
            return None
        bad = [code for code in value if not is_valid_cargo_code(code)]
        if bad:
            raise ValueError(f"cargo codes must be in 1..30, got {bad}")
        # de-duplicate, keep first-seen order
        return list(dict.fromkeys(value))

    @field_validator("last_verified", "cached_at")
    @classmethod
    def _utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)

    def has_cargo_data(self) -> bool:
        return bool(self.cargo_carried)

    def can_haul(self, commodity_type: int) -> bool:
        return commodity_type in (self.cargo_carried or [])


# ============================================================================
# Eligibility
# ============================================================================


class EligibilityChecks(BaseModel):
    """Per-condition breakdown; every condition is always reported."""
    is_active: bool
    allowed_to_operate: bool
    has_authority: bool
    insurance_compliant: bool


class EligibilityResult(BaseModel):
    eligible: bool
    validation_details: EligibilityChecks
    failed_checks: List[str] = Field(default_factory=list)
    authorized_for_property: bool = Field(
        False, description="Reported for information, not an eligibility condition"
    )


# ============================================================================
# API Bodies
# ============================================================================


class VerifyCarrierRequest(BaseModel):
    mc_number: Union[str, int] = Field(..., description='MC number, e.g. "MC-123456" or "123456"')


class VerifyCarrierResponse(BaseModel):
    eligible: bool
    mc_number: str
    dot_number: str
    legal_name: str
    validation_details: EligibilityChecks
    failed_checks: List[str]
