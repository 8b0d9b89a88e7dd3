"""
Core Package

Centralized configuration, logging and error handling for the freight
matching service.

Modules:
- config: Environment configuration and settings
- logging: Logging with trace_id support
- errors: AppError hierarchy and domain error taxonomy

Usage:
    from freight_match.core import settings, setup_logging, set_trace_id
    from freight_match.core import CarrierNotFound, InvalidLocationFormat
"""

# Configuration
from freight_match.core.config import settings, get_settings, is_production, is_development

# Logging
from freight_match.core.logging import (
    setup_logging,
    set_trace_id,
    get_trace_id,
    get_logger
)

# Errors
from freight_match.core.errors import (
    AppError,
    ValidationError,
    NotFoundError,
    ConflictError,
    InternalError,
    InvalidIdentifierFormat,
    InvalidLocationFormat,
    CarrierNotFound,
    LoadNotFound,
    AssignmentNotFound,
    NoEligibleLoads,
    DuplicateActiveAssignment,
    InvalidAssignmentTransition,
    VerificationUpstreamFailure,
    error_payload
)

__all__ = [
    # Config
    "settings",
    "get_settings",
    "is_production",
    "is_development",

    # Logging
    "setup_logging",
    "set_trace_id",
    "get_trace_id",
    "get_logger",

    # Errors
    "AppError",
    "ValidationError",
    "NotFoundError",
    "ConflictError",
    "InternalError",
    "InvalidIdentifierFormat",
    "InvalidLocationFormat",
    "CarrierNotFound",
    "LoadNotFound",
    "AssignmentNotFound",
    "NoEligibleLoads",
    "DuplicateActiveAssignment",
    "InvalidAssignmentTransition",
    "VerificationUpstreamFailure",
    "error_payload",
]
