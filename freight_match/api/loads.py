"""
Loads API Endpoints

Endpoints:
- GET  /loads/available - Loads open for assignment
- POST /loads           - Create a load
- POST /loads/assign    - Match a carrier to its best load and record the assignment
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, status

from freight_match.api.common import ERROR_RESPONSES, get_container, standard_response
from freight_match.constants.cargo_types import get_cargo_type_name
from freight_match.schemas.base import ApiResponse
from freight_match.schemas.load import (
    AssignLoadRequest,
    AssignLoadResponse,
    CarrierCargoInfo,
    LoadCreate,
)
from freight_match.services.container import ServiceContainer

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/available", response_model=ApiResponse, responses=ERROR_RESPONSES)
async def list_available_loads(
    container: ServiceContainer = Depends(get_container)
) -> Dict[str, Any]:
    loads = container.loads.list_available()
    return standard_response(
        message=f"{len(loads)} available loads",
        data={
            "count": len(loads),
            "loads": [load.model_dump(mode="json") for load in loads],
        },
        sources=["record_store"]
    )


@router.post("", status_code=status.HTTP_201_CREATED, response_model=ApiResponse, responses=ERROR_RESPONSES)
async def create_load(
    body: LoadCreate,
    container: ServiceContainer = Depends(get_container)
) -> Dict[str, Any]:
    load = container.loads.add(body, created_at=container.clock())
    return standard_response(
        message=f"Load {load.load_id} created",
        data={"load": load.model_dump(mode="json")},
        sources=["record_store"]
    )


@router.post("/assign", response_model=ApiResponse, responses=ERROR_RESPONSES)
async def assign_load(
    body: AssignLoadRequest,
    container: ServiceContainer = Depends(get_container)
) -> Dict[str, Any]:
    """
    Find and assign the best available load for a carrier.

    Verifies the carrier (cache first), fetches its cargo set if missing,
    ranks available loads and records a pending assignment for the winner.
    """
    outcome = await container.dispatch.assign_best_load(body.mc_number, body.current_location)
    match = outcome.match

    response = AssignLoadResponse(
        success=True,
        assignment_id=outcome.assignment_id,
        carrier_cargo_info=CarrierCargoInfo(
            mc_number=outcome.carrier.mc_number,
            dot_number=outcome.carrier.dot_number,
            cargo_types=outcome.carrier.cargo_carried or [],
        ),
        matched_load=match.load,
        commodity_name=get_cargo_type_name(match.load.commodity_type),
        match_score=match.match_score,
        match_factors=match.match_factors,
    )

    return standard_response(
        message=f"Load {match.load.load_id} assigned (score {match.match_score:.2f})",
        data=response.model_dump(mode="json"),
        sources=["carrier_cache", "fmcsa", "record_store"],
        algorithm="weighted_load_matching"
    )
