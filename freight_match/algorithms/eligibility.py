"""
Carrier Eligibility Policy

A carrier is eligible iff ALL of:
- status code is active ("A")
- allowed-to-operate flag is "Y"
- common or contract authority is active
- BIPD insurance on file >= BIPD required (numeric comparison)

The per-condition breakdown and the list of failed conditions are always
returned alongside the boolean. Used by carrier verification, not by load
matching.
"""

import logging
from typing import Any

from freight_match.constants.thresholds import (
    ACTIVE_AUTHORITY_STATUS,
    ACTIVE_STATUS_CODE,
    ALLOWED_TO_OPERATE_FLAG,
)
from freight_match.schemas.carrier import (
    CarrierProfile,
    EligibilityChecks,
    EligibilityResult,
)

logger = logging.getLogger(__name__)


def safe_float(value: Any, default: float = 0.0) -> float:
    """
    Safely convert value to float, returning default on error.
    Handles None, empty strings, thousands separators and junk text.
    """
    if value is None or value == "":
        return default
    try:
        return float(str(value).replace(",", "").strip())
    except (ValueError, TypeError):
        return default


def evaluate_eligibility(profile: CarrierProfile) -> EligibilityResult:
    """
    Apply the eligibility policy to a verified profile.

    Args:
        profile: Carrier profile from verification or the cache

    Returns:
        EligibilityResult with the boolean, the breakdown and failed_checks
    """
    authority = profile.authority

    is_active = profile.status_code.strip().upper() == ACTIVE_STATUS_CODE
    allowed_to_operate = profile.allowed_to_operate.strip().upper() == ALLOWED_TO_OPERATE_FLAG
    has_authority = (
        authority.common_authority_status.strip().upper() == ACTIVE_AUTHORITY_STATUS
        or authority.contract_authority_status.strip().upper() == ACTIVE_AUTHORITY_STATUS
    )

    bipd_on_file = safe_float(profile.insurance.bipd_on_file)
    bipd_required = safe_float(profile.insurance.bipd_required)
    insurance_compliant = bipd_on_file >= bipd_required

    checks = EligibilityChecks(
        is_active=is_active,
        allowed_to_operate=allowed_to_operate,
        has_authority=has_authority,
        insurance_compliant=insurance_compliant,
    )
    failed = [name for name, passed in checks.model_dump().items() if not passed]

    eligible = not failed
    if not eligible:
        logger.info(f"Carrier MC {profile.mc_number} ineligible: {', '.join(failed)}")

    return EligibilityResult(
        eligible=eligible,
        validation_details=checks,
        failed_checks=failed,
        authorized_for_property=authority.authorized_for_property.strip().upper() == "Y",
    )
