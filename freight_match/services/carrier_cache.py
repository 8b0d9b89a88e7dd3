"""
Carrier Profile Cache

TTL judgment over the carriers collection. Entries are never evicted;
an entry is valid while now - cached_at < ttl.
"""

import logging
from datetime import datetime, timedelta
from typing import Callable, Optional

from freight_match.repositories.record_store import CarrierRepository
from freight_match.schemas.carrier import CarrierProfile
from freight_match.tools.time_tool import utcnow

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 24 * 3600

# smallest step used to keep cached_at strictly increasing
_STAMP_STEP = timedelta(microseconds=1)


class CarrierProfileCache:
    """
    Carrier profiles keyed by normalized MC number.

    Args:
        repository: Carriers collection
        ttl_seconds: Freshness window
        clock: Returns the current aware UTC time
    """

    def __init__(
        self,
        repository: CarrierRepository,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        clock: Callable[[], datetime] = utcnow
    ):
        self.repository = repository
        self.ttl_seconds = ttl_seconds
        self.clock = clock

    def get(self, mc_number: str) -> Optional[CarrierProfile]:
        return self.repository.get(mc_number)

    def put(self, profile: CarrierProfile) -> CarrierProfile:
        """
        Full-replace upsert, stamping cached_at with the current time.

        Returns the stored profile.
        """
        with self.repository.store.locked():
            now = self.clock()
            previous = self.repository.get(profile.mc_number)
            if previous is not None and now <= previous.cached_at:
                now = previous.cached_at + _STAMP_STEP

            stamped = profile.model_copy(update={"cached_at": now})
            self.repository.upsert(stamped)

        return stamped

    def is_valid(self, profile: CarrierProfile, ttl_seconds: Optional[int] = None) -> bool:
        ttl = self.ttl_seconds if ttl_seconds is None else ttl_seconds
        age = (self.clock() - profile.cached_at).total_seconds()
        return age < ttl

    def get_valid(self, mc_number: str) -> Optional[CarrierProfile]:
        """Cached profile if present and fresh, else None."""
        profile = self.get(mc_number)
        if profile is None:
            return None
        if not self.is_valid(profile):
            logger.info(f"Cached profile for MC {mc_number} expired (cached_at {profile.cached_at.isoformat()})")
            return None
        return profile
