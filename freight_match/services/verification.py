"""
Carrier Verification Service

Orchestrates the FMCSA lookups into one CarrierProfile and writes it through
the carrier cache.

Flow (verify):
1. Normalize the MC number (fails fast, no network)
2. Fresh cache entry -> return it, zero upstream calls
3. Identity lookup (sequential; yields the DOT number)
4. Authority + operation-classification lookups, concurrently
5. Assemble the profile (eligibility is evaluated by the caller)
6. Write through the cache
"""

import asyncio
import logging
import re
from datetime import datetime
from typing import Any, Callable, Optional

from freight_match.core.errors import (
    AppError,
    InvalidIdentifierFormat,
    VerificationUpstreamFailure,
)
from freight_match.schemas.carrier import CarrierProfile
from freight_match.services.carrier_cache import CarrierProfileCache
from freight_match.tools.fmcsa_client import FmcsaClient
from freight_match.tools.time_tool import utcnow

logger = logging.getLogger(__name__)

_MC_PREFIX = re.compile(r"^MC\s*[-#]?\s*", re.IGNORECASE)
_MC_DIGITS = re.compile(r"^[0-9]{1,7}$")


def normalize_mc_number(raw_value: Any) -> str:
    """
    Normalize an MC number: trim and strip an optional "MC" prefix token.

    Accepts "123456", "MC123456", "MC-123456", "mc 123456", "MC#123456"
    and plain integers.

    Raises:
        InvalidIdentifierFormat: not 1-7 decimal digits after normalization
    """
    if isinstance(raw_value, bool) or not isinstance(raw_value, (str, int)):
        raise InvalidIdentifierFormat(raw_value)

    text = _MC_PREFIX.sub("", str(raw_value).strip()).strip()
    if not _MC_DIGITS.match(text):
        raise InvalidIdentifierFormat(raw_value)
    return text


class CarrierVerificationService:
    """
    Verifies carriers against FMCSA with a TTL cache in front.

    Args:
        client: FMCSA lookup client
        cache: Carrier profile cache
        clock: Returns the current aware UTC time
    """

    def __init__(
        self,
        client: FmcsaClient,
        cache: CarrierProfileCache,
        clock: Callable[[], datetime] = utcnow
    ):
        self.client = client
        self.cache = cache
        self.clock = clock

    async def verify(self, mc_number: Any, force_refresh: bool = False) -> CarrierProfile:
        """
        Return a verified carrier profile, from cache when fresh.

        Args:
            mc_number: Raw MC number as supplied by the caller
            force_refresh: Skip the cache read (the result is still cached)

        Raises:
            InvalidIdentifierFormat: malformed MC number
            CarrierNotFound: identity lookup has no result
            VerificationUpstreamFailure: any lookup failed or timed out
        """
        mc = normalize_mc_number(mc_number)

        if not force_refresh:
            cached = self.cache.get_valid(mc)
            if cached is not None:
                logger.info(f"Using cached profile for MC {mc}")
                return cached

        logger.info(f"Verifying MC {mc} against FMCSA")
        identity = await self.client.get_carrier_identity(mc)
        dot = identity.dot_number

        results = await asyncio.gather(
            self.client.get_authority(dot),
            self.client.get_operation_classification(dot),
            return_exceptions=True
        )
        for lookup, result in zip(("authority", "operation_classification"), results):
            if isinstance(result, AppError):
                logger.warning(f"Verification of MC {mc} aborted: {lookup} lookup failed")
                raise result
            if isinstance(result, BaseException):
                logger.error(f"Unexpected {lookup} failure for MC {mc}: {type(result).__name__}: {result}")
                raise VerificationUpstreamFailure(lookup, type(result).__name__) from result

        authority, classification = results
        now = self.clock()

        profile = CarrierProfile(
            mc_number=mc,
            dot_number=dot,
            legal_name=identity.legal_name,
            dba_name=identity.dba_name,
            status_code=identity.status_code,
            allowed_to_operate=identity.allowed_to_operate,
            safety_rating=identity.safety_rating,
            authority=authority,
            operation_classification=classification,
            cargo_carried=None,
            insurance=identity.insurance,
            last_verified=now,
            cached_at=now,
        )

        stored = self.cache.put(profile)
        logger.info(f"Verified MC {mc} (DOT {dot}, {identity.legal_name or 'unnamed'})")
        return stored

    async def ensure_cargo_capabilities(self, profile: CarrierProfile) -> CarrierProfile:
        """
        Make sure the profile carries its cargo set.

        When cargo_carried has never been fetched, look it up by DOT number
        and store the merged profile. A profile that already has a cargo set
        (even an empty one) is returned unchanged.

        Raises:
            VerificationUpstreamFailure: cargo lookup failed
        """
        if profile.cargo_carried is not None:
            return profile

        codes = await self.client.get_cargo_carried(profile.dot_number)
        merged = profile.model_copy(update={"cargo_carried": codes})
        return self.cache.put(merged)

    def get_cached(self, mc_number: Any) -> Optional[CarrierProfile]:
        """Cached profile regardless of freshness."""
        return self.cache.get(normalize_mc_number(mc_number))
