"""
Load Dispatch Workflow

End-to-end "find me a load" flow for an inbound carrier:
verify carrier -> ensure cargo set -> available loads -> best match -> assignment.

The carrier is assumed to be available now unless as_of is given.
"""

import logging
from datetime import datetime
from typing import Any, Callable, Optional

from pydantic import BaseModel

from freight_match.algorithms.load_matching import LoadMatchingEngine
from freight_match.core.errors import NoEligibleLoads
from freight_match.repositories.record_store import LoadRepository
from freight_match.schemas.carrier import CarrierProfile
from freight_match.schemas.load import MatchResult
from freight_match.services.assignment import AssignmentRecorder
from freight_match.services.verification import CarrierVerificationService
from freight_match.tools.time_tool import utcnow

logger = logging.getLogger(__name__)


class DispatchOutcome(BaseModel):
    assignment_id: int
    carrier: CarrierProfile
    match: MatchResult


class LoadDispatchService:
    """Wires verification, matching and assignment together."""

    def __init__(
        self,
        verification: CarrierVerificationService,
        loads: LoadRepository,
        engine: LoadMatchingEngine,
        recorder: AssignmentRecorder,
        clock: Callable[[], datetime] = utcnow
    ):
        self.verification = verification
        self.loads = loads
        self.engine = engine
        self.recorder = recorder
        self.clock = clock

    async def assign_best_load(
        self,
        mc_number: Any,
        current_location: str,
        as_of: Optional[datetime] = None
    ) -> DispatchOutcome:
        """
        Match the carrier to its best available load and record the assignment.

        Raises:
            InvalidIdentifierFormat / InvalidLocationFormat: bad input
            CarrierNotFound / VerificationUpstreamFailure: from verification
            NoEligibleLoads: nothing available, or nothing matched
            DuplicateActiveAssignment: the load was taken concurrently
        """
        # validate the location before any upstream call
        self.engine.estimator.parse_location(current_location)

        carrier = await self.verification.verify(mc_number)
        carrier = await self.verification.ensure_cargo_capabilities(carrier)
        logger.info(f"Carrier MC {carrier.mc_number} can haul: {carrier.cargo_carried}")

        available = self.loads.list_available()
        logger.info(f"Found {len(available)} available loads")
        if not available:
            raise NoEligibleLoads(carrier.mc_number, message="No available loads found")

        as_of = as_of or self.clock()
        match = self.engine.find_best_match(carrier, available, current_location, as_of)
        if match is None:
            raise NoEligibleLoads(carrier.mc_number)

        assignment_id = self.recorder.create_assignment(
            match.load.load_id,
            carrier.mc_number,
            match.match_score
        )

        return DispatchOutcome(assignment_id=assignment_id, carrier=carrier, match=match)
