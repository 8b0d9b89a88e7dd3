"""
Services Package

Stateful services built on the algorithms and the record store:
- carrier_cache: TTL cache of verified carrier profiles
- verification: FMCSA verification orchestrator
- assignment: atomic assignment recording and transitions
- dispatch: verify -> match -> assign workflow
- container: wiring from settings
"""

from freight_match.services.carrier_cache import CarrierProfileCache
from freight_match.services.verification import CarrierVerificationService, normalize_mc_number
from freight_match.services.assignment import AssignmentRecorder
from freight_match.services.dispatch import DispatchOutcome, LoadDispatchService
from freight_match.services.container import ServiceContainer

__all__ = [
    "CarrierProfileCache",
    "CarrierVerificationService",
    "normalize_mc_number",
    "AssignmentRecorder",
    "DispatchOutcome",
    "LoadDispatchService",
    "ServiceContainer",
]
