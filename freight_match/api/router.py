"""
Central API Router

Aggregates all endpoint routers for the freight matching service.
"""

import importlib
import logging
from fastapi import APIRouter

logger = logging.getLogger(__name__)

# Main API router
api_router = APIRouter()

# Router configurations: (module_name, prefix, tags)
ROUTER_CONFIGS = [
    ("carriers", "/carriers", ["Carrier Verification"]),
    ("loads", "/loads", ["Load Matching"]),
    ("assignments", "/assignments", ["Assignments"]),
]


def _include_router(module_name: str, prefix: str, tags: list) -> None:
    """Import a router module and include it; a broken module fails startup."""
    try:
        module = importlib.import_module(f"freight_match.api.{module_name}")
        api_router.include_router(module.router, prefix=prefix, tags=tags)
        logger.info(f"Registered {module_name} router at {prefix}")
    except (ImportError, AttributeError) as e:
        logger.error(f"Failed to register {module_name} router: {e}")
        raise


for module_name, prefix, tags in ROUTER_CONFIGS:
    _include_router(module_name, prefix, tags)

logger.info(f"API router initialized with {len(api_router.routes)} routes")
