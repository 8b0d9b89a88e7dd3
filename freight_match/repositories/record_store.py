"""
Record Store

Single-writer JSON document store with three collections
(loads, carriers, assignments) and narrow per-collection repositories.

Every logical mutation runs inside transaction(): the store lock is held
for the whole read-modify-write, and the document is persisted with one
atomic file replace (temp file + os.replace). If the block raises, nothing
is written.

Usage:
    store = JsonRecordStore("./data/db.json")
    with store.transaction() as doc:
        doc["loads"].append({...})
"""

import copy
import json
import logging
import os
import tempfile
import threading
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Union

from freight_match.core.errors import ConflictError, CorruptRecordStore
from freight_match.schemas.carrier import CarrierProfile
from freight_match.schemas.load import (
    ACTIVE_ASSIGNMENT_STATUSES,
    LOAD_AVAILABLE,
    Assignment,
    Load,
    LoadCreate,
)

logger = logging.getLogger(__name__)

COLLECTIONS = ("loads", "carriers", "assignments")

Document = Dict[str, List[Dict[str, Any]]]


def empty_document() -> Document:
    return {name: [] for name in COLLECTIONS}


class JsonRecordStore:
    """
    Whole-document JSON store.

    Args:
        path: JSON file location; None keeps the document in memory only
    """

    def __init__(self, path: Optional[Union[str, Path]] = None):
        self.path = Path(path) if path is not None else None
        self._lock = threading.RLock()
        self._memory: Document = empty_document()

    @contextmanager
    def locked(self) -> Iterator[None]:
        """Hold the store lock across several repository calls."""
        with self._lock:
            yield

    def read(self) -> Document:
        """Return a private copy of the current document."""
        with self._lock:
            if self.path is None:
                return copy.deepcopy(self._memory)

            if not self.path.exists():
                return empty_document()

            with self.path.open("r", encoding="utf-8") as fh:
                try:
                    doc = json.load(fh)
                except json.JSONDecodeError as e:
                    raise self._corrupt(f"invalid JSON at line {e.lineno}") from e

            if not isinstance(doc, dict):
                raise self._corrupt(f"top level is {type(doc).__name__}, expected an object")

            for name in COLLECTIONS:
                doc.setdefault(name, [])
                if not isinstance(doc[name], list):
                    raise self._corrupt(f"collection {name!r} is not a list")
            return doc

    def _corrupt(self, reason: str) -> CorruptRecordStore:
        logger.error(f"Record store {self.path} is unreadable: {reason}")
        return CorruptRecordStore(reason)

    @contextmanager
    def transaction(self) -> Iterator[Document]:
        """
        Serialized read-modify-write of the whole document.

        Yields a mutable copy; it replaces the stored document only if the
        block completes without raising.
        """
        with self._lock:
            doc = self.read()
            yield doc
            self._write(doc)

    def _write(self, doc: Document) -> None:
        if self.path is None:
            self._memory = copy.deepcopy(doc)
            return

        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=str(self.path.parent), prefix=".db-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(doc, fh, indent=2)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise


# ============================================================================
# Repositories
# ============================================================================


class LoadRepository:
    """Read/write access to the loads collection."""

    def __init__(self, store: JsonRecordStore):
        self.store = store

    def list_all(self) -> List[Load]:
        return [Load.model_validate(row) for row in self.store.read()["loads"]]

    def list_available(self) -> List[Load]:
        return [load for load in self.list_all() if load.is_available()]

    def get(self, load_id: int) -> Optional[Load]:
        for row in self.store.read()["loads"]:
            if row.get("load_id") == load_id:
                return Load.model_validate(row)
        return None

    def add(self, data: LoadCreate, created_at: datetime) -> Load:
        """
        Insert a new load with status "available".

        load_id defaults to max(existing) + 1.

        Raises:
            ConflictError: explicit load_id already exists
        """
        with self.store.transaction() as doc:
            existing_ids = [row.get("load_id", 0) for row in doc["loads"]]
            load_id = data.load_id
            if load_id is None:
                load_id = max(existing_ids, default=0) + 1
            elif load_id in existing_ids:
                raise ConflictError(
                    message=f"Load {load_id} already exists",
                    details={"load_id": load_id},
                    code="duplicate_load"
                )

            load = Load(
                **data.model_dump(exclude={"load_id"}),
                load_id=load_id,
                status=LOAD_AVAILABLE,
                created_at=created_at,
            )
            doc["loads"].append(load.model_dump(mode="json"))

        logger.info(f"Added new load with ID {load.load_id}")
        return load


class CarrierRepository:
    """Read/write access to the carriers collection, keyed by MC number."""

    def __init__(self, store: JsonRecordStore):
        self.store = store

    def get(self, mc_number: str) -> Optional[CarrierProfile]:
        for row in self.store.read()["carriers"]:
            if row.get("mc_number") == mc_number:
                return CarrierProfile.model_validate(row)
        return None

    def list_all(self) -> List[CarrierProfile]:
        return [CarrierProfile.model_validate(row) for row in self.store.read()["carriers"]]

    def upsert(self, profile: CarrierProfile) -> None:
        """Insert, or fully replace the record with the same MC number."""
        row = profile.model_dump(mode="json")
        with self.store.transaction() as doc:
            carriers = doc["carriers"]
            for index, existing in enumerate(carriers):
                if existing.get("mc_number") == profile.mc_number:
                    carriers[index] = row
                    logger.info(f"Updated carrier cache for MC {profile.mc_number}")
                    break
            else:
                carriers.append(row)
                logger.info(f"Added carrier to cache for MC {profile.mc_number}")


class AssignmentRepository:
    """Read access to the assignments collection; writes go through AssignmentRecorder."""

    def __init__(self, store: JsonRecordStore):
        self.store = store

    def list_all(self) -> List[Assignment]:
        return [Assignment.model_validate(row) for row in self.store.read()["assignments"]]

    def get(self, assignment_id: int) -> Optional[Assignment]:
        for row in self.store.read()["assignments"]:
            if row.get("assignment_id") == assignment_id:
                return Assignment.model_validate(row)
        return None

    def list_for_load(self, load_id: int) -> List[Assignment]:
        return [a for a in self.list_all() if a.load_id == load_id]

    def active_for_load(self, load_id: int) -> Optional[Assignment]:
        return next(
            (a for a in self.list_for_load(load_id) if a.status in ACTIVE_ASSIGNMENT_STATUSES),
            None
        )
