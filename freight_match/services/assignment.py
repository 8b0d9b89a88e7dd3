"""
Assignment Recorder

Creates and transitions load assignments. Each operation runs in one record
store transaction, so the assignment write and the load status change are
persisted together or not at all.

Invariant: at most one pending/confirmed assignment per load.

Transitions:
    pending   -> confirmed | cancelled
    confirmed -> cancelled
Cancelling returns the load to "available".
"""

import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from freight_match.core.errors import (
    AssignmentNotFound,
    DuplicateActiveAssignment,
    InvalidAssignmentTransition,
    LoadNotFound,
    ValidationError,
)
from freight_match.repositories.record_store import JsonRecordStore
from freight_match.schemas.load import (
    ACTIVE_ASSIGNMENT_STATUSES,
    ASSIGNMENT_CANCELLED,
    ASSIGNMENT_CONFIRMED,
    ASSIGNMENT_PENDING,
    LOAD_ASSIGNED,
    LOAD_AVAILABLE,
    Assignment,
)
from freight_match.tools.time_tool import utcnow

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS = {
    ASSIGNMENT_PENDING: {ASSIGNMENT_CONFIRMED, ASSIGNMENT_CANCELLED},
    ASSIGNMENT_CONFIRMED: {ASSIGNMENT_CANCELLED},
    ASSIGNMENT_CANCELLED: set(),
}


def _find(rows: List[Dict[str, Any]], key: str, value: Any) -> Optional[Dict[str, Any]]:
    return next((row for row in rows if row.get(key) == value), None)


class AssignmentRecorder:
    """
    Args:
        store: Record store holding loads and assignments
        clock: Returns the current aware UTC time
    """

    def __init__(self, store: JsonRecordStore, clock: Callable[[], datetime] = utcnow):
        self.store = store
        self.clock = clock

    def create_assignment(self, load_id: int, carrier_mc: str, match_score: float) -> int:
        """
        Record a pending assignment and mark the load assigned.

        Returns:
            New assignment id (max existing + 1)

        Raises:
            ValidationError: match_score outside [0, 1]
            LoadNotFound: no such load
            DuplicateActiveAssignment: load already has a pending/confirmed assignment
        """
        if not 0.0 <= match_score <= 1.0:
            raise ValidationError(
                message="match_score must be between 0 and 1",
                details={"match_score": match_score}
            )

        with self.store.transaction() as doc:
            load_row = _find(doc["loads"], "load_id", load_id)
            if load_row is None:
                raise LoadNotFound(load_id)

            active = next(
                (
                    row for row in doc["assignments"]
                    if row.get("load_id") == load_id
                    and row.get("status") in ACTIVE_ASSIGNMENT_STATUSES
                ),
                None
            )
            if active is not None:
                logger.warning(
                    f"Load {load_id} already has active assignment {active.get('assignment_id')}"
                )
                raise DuplicateActiveAssignment(load_id, active.get("assignment_id"))

            assignment_id = max(
                (row.get("assignment_id", 0) for row in doc["assignments"]),
                default=0
            ) + 1

            assignment = Assignment(
                assignment_id=assignment_id,
                load_id=load_id,
                carrier_mc=carrier_mc,
                assigned_at=self.clock(),
                match_score=match_score,
                status=ASSIGNMENT_PENDING,
            )
            doc["assignments"].append(assignment.model_dump(mode="json"))
            load_row["status"] = LOAD_ASSIGNED

        logger.info(f"Created assignment {assignment_id}: load {load_id} -> MC {carrier_mc}")
        return assignment_id

    def confirm_assignment(self, assignment_id: int) -> Assignment:
        return self._transition(assignment_id, ASSIGNMENT_CONFIRMED)

    def cancel_assignment(self, assignment_id: int) -> Assignment:
        """Cancel the assignment and release its load back to "available"."""
        return self._transition(assignment_id, ASSIGNMENT_CANCELLED)

    def _transition(self, assignment_id: int, target: str) -> Assignment:
        with self.store.transaction() as doc:
            row = _find(doc["assignments"], "assignment_id", assignment_id)
            if row is None:
                raise AssignmentNotFound(assignment_id)

            current = row.get("status", ASSIGNMENT_PENDING)
            if target not in ALLOWED_TRANSITIONS.get(current, set()):
                raise InvalidAssignmentTransition(assignment_id, current, target)

            row["status"] = target
            if target == ASSIGNMENT_CANCELLED:
                load_row = _find(doc["loads"], "load_id", row.get("load_id"))
                if load_row is not None:
                    load_row["status"] = LOAD_AVAILABLE

            updated = Assignment.model_validate(row)

        logger.info(f"Assignment {assignment_id}: {current} -> {target}")
        return updated
