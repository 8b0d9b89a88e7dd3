"""
Repositories Package

JSON record store and its per-collection repositories.
"""

from freight_match.repositories.record_store import (
    COLLECTIONS,
    JsonRecordStore,
    LoadRepository,
    CarrierRepository,
    AssignmentRepository,
    empty_document
)

__all__ = [
    "COLLECTIONS",
    "JsonRecordStore",
    "LoadRepository",
    "CarrierRepository",
    "AssignmentRepository",
    "empty_document",
]
