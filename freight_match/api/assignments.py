"""
Assignments API Endpoints

Endpoints:
- POST /assignments/{assignment_id}/confirm - pending -> confirmed
- POST /assignments/{assignment_id}/cancel  - pending/confirmed -> cancelled, load released
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends

from freight_match.api.common import ERROR_RESPONSES, get_container, standard_response
from freight_match.schemas.base import ApiResponse
from freight_match.services.container import ServiceContainer

router = APIRouter()


@router.post("/{assignment_id}/confirm", response_model=ApiResponse, responses=ERROR_RESPONSES)
async def confirm_assignment(
    assignment_id: int,
    container: ServiceContainer = Depends(get_container)
) -> Dict[str, Any]:
    assignment = container.recorder.confirm_assignment(assignment_id)
    return standard_response(
        message=f"Assignment {assignment_id} confirmed",
        data={"assignment": assignment.model_dump(mode="json")},
        sources=["record_store"]
    )


@router.post("/{assignment_id}/cancel", response_model=ApiResponse, responses=ERROR_RESPONSES)
async def cancel_assignment(
    assignment_id: int,
    container: ServiceContainer = Depends(get_container)
) -> Dict[str, Any]:
    assignment = container.recorder.cancel_assignment(assignment_id)
    return standard_response(
        message=f"Assignment {assignment_id} cancelled; load {assignment.load_id} is available again",
        data={"assignment": assignment.model_dump(mode="json")},
        sources=["record_store"]
    )
