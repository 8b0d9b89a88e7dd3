"""
Shared API Helpers

Dependency access to the service container and the standard
{message, data, proofs} response envelope.
"""

from typing import Any, Dict, List, Optional, Union

from fastapi import Request

from freight_match.core.logging import get_trace_id
from freight_match.schemas.base import ErrorResponse
from freight_match.services.container import ServiceContainer


def get_container(request: Request) -> ServiceContainer:
    """FastAPI dependency: the container built by the app lifespan."""
    return request.app.state.container


# Error envelopes documented on every route
ERROR_RESPONSES: Dict[Union[int, str], Dict[str, Any]] = {
    400: {"model": ErrorResponse, "description": "Invalid request"},
    404: {"model": ErrorResponse, "description": "Resource not found"},
    409: {"model": ErrorResponse, "description": "Assignment state conflict"},
    500: {"model": ErrorResponse, "description": "Upstream verification failure"},
}


def standard_response(
    message: str,
    data: Optional[Dict[str, Any]] = None,
    sources: Optional[List[str]] = None,
    algorithm: Optional[str] = None
) -> Dict[str, Any]:
    """Build standard response format."""
    proofs: Dict[str, Any] = {"trace_id": get_trace_id()}
    if sources:
        proofs["sources"] = sources
    if algorithm:
        proofs["algorithm"] = algorithm

    return {
        "message": message,
        "data": data or {},
        "proofs": proofs
    }
