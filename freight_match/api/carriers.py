"""
Carriers API Endpoints

Endpoints:
- POST /carriers/verify       - Verify a carrier against FMCSA and report eligibility
- GET  /carriers/{mc_number}  - Cached carrier profile
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, Query

from freight_match.algorithms.eligibility import evaluate_eligibility
from freight_match.api.common import ERROR_RESPONSES, get_container, standard_response
from freight_match.core.errors import CarrierNotFound
from freight_match.schemas.base import ApiResponse
from freight_match.schemas.carrier import VerifyCarrierRequest, VerifyCarrierResponse
from freight_match.services.container import ServiceContainer
from freight_match.tools.time_tool import to_iso

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/verify", response_model=ApiResponse, responses=ERROR_RESPONSES)
async def verify_carrier(
    body: VerifyCarrierRequest,
    force_refresh: bool = Query(False, description="Bypass the cache read"),
    container: ServiceContainer = Depends(get_container)
) -> Dict[str, Any]:
    """
    Verify a carrier and evaluate eligibility.

    Eligible iff active, allowed to operate, common or contract authority
    active, and BIPD insurance on file >= required. The per-condition
    breakdown is always returned.
    """
    profile = await container.verification.verify(body.mc_number, force_refresh=force_refresh)
    result = evaluate_eligibility(profile)

    response = VerifyCarrierResponse(
        eligible=result.eligible,
        mc_number=profile.mc_number,
        dot_number=profile.dot_number,
        legal_name=profile.legal_name,
        validation_details=result.validation_details,
        failed_checks=result.failed_checks,
    )

    data = response.model_dump()
    data.update({
        "authorized_for_property": result.authorized_for_property,
        "operation_classification": profile.operation_classification,
        "safety_rating": profile.safety_rating,
        "last_verified": to_iso(profile.last_verified),
    })

    verdict = "eligible" if result.eligible else "not eligible"
    return standard_response(
        message=f"Carrier MC {profile.mc_number} is {verdict}",
        data=data,
        sources=["fmcsa", "carrier_cache"],
        algorithm="eligibility_policy"
    )


@router.get("/{mc_number}", response_model=ApiResponse, responses=ERROR_RESPONSES)
async def get_carrier(
    mc_number: str,
    container: ServiceContainer = Depends(get_container)
) -> Dict[str, Any]:
    """Cached carrier profile, with a freshness flag. No upstream calls."""
    profile = container.verification.get_cached(mc_number)
    if profile is None:
        raise CarrierNotFound(mc_number)

    return standard_response(
        message=f"Carrier MC {profile.mc_number} profile retrieved",
        data={
            "profile": profile.model_dump(mode="json"),
            "fresh": container.cache.is_valid(profile),
        },
        sources=["carrier_cache"]
    )
