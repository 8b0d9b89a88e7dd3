"""
Service Container

Builds the service graph once from settings and owns the resources that
need closing (the FMCSA HTTP client). The FastAPI lifespan creates one
container per app; tests build their own with fakes.

Usage:
    container = ServiceContainer.from_settings()
    profile = await container.verification.verify("MC-123456")
    await container.aclose()
"""

import logging
from datetime import datetime
from typing import Callable, Optional

from freight_match.algorithms.geo_distance import Gazetteer, GeocoderGazetteer, GeoDistanceEstimator
from freight_match.algorithms.load_matching import LoadMatchingEngine
from freight_match.core.config import Settings, get_settings
from freight_match.repositories.record_store import (
    AssignmentRepository,
    CarrierRepository,
    JsonRecordStore,
    LoadRepository,
)
from freight_match.services.assignment import AssignmentRecorder
from freight_match.services.carrier_cache import CarrierProfileCache
from freight_match.services.dispatch import LoadDispatchService
from freight_match.services.verification import CarrierVerificationService
from freight_match.tools.fmcsa_client import FmcsaClient
from freight_match.tools.time_tool import utcnow

logger = logging.getLogger(__name__)


def build_gazetteer(settings: Settings) -> Gazetteer:
    """City index for the configured GEOCODER backend."""
    if settings.GEOCODER == "nominatim":
        logger.info("Resolving cities through Nominatim")
        return GeocoderGazetteer(
            user_agent=settings.GEOCODER_USER_AGENT,
            timeout=settings.GEOCODER_TIMEOUT
        )
    if settings.GEOCODER == "geonames":
        return Gazetteer.from_geonames(min_population=settings.GEONAMES_MIN_POPULATION)
    raise ValueError(f"Unsupported GEOCODER {settings.GEOCODER!r}; expected geonames or nominatim")


class ServiceContainer:
    """Wired services sharing one record store and one FMCSA client."""

    def __init__(
        self,
        store: JsonRecordStore,
        client: FmcsaClient,
        cache_ttl_seconds: int = 86400,
        estimator: Optional[GeoDistanceEstimator] = None,
        clock: Callable[[], datetime] = utcnow
    ):
        self.store = store
        self.client = client
        self.clock = clock

        self.loads = LoadRepository(store)
        self.carriers = CarrierRepository(store)
        self.assignments = AssignmentRepository(store)

        self.cache = CarrierProfileCache(self.carriers, ttl_seconds=cache_ttl_seconds, clock=clock)
        self.verification = CarrierVerificationService(client, self.cache, clock=clock)
        self.estimator = estimator or GeoDistanceEstimator()
        self.engine = LoadMatchingEngine(self.estimator)
        self.recorder = AssignmentRecorder(store, clock=clock)
        self.dispatch = LoadDispatchService(
            self.verification,
            self.loads,
            self.engine,
            self.recorder,
            clock=clock
        )

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "ServiceContainer":
        settings = settings or get_settings()

        client = FmcsaClient(
            base_url=settings.FMCSA_BASE_URL,
            api_key=settings.FMCSA_API_KEY or "",
            timeout=settings.FMCSA_CLIENT_TIMEOUT,
            max_connections=settings.FMCSA_CLIENT_MAX_CONNECTIONS,
            max_keepalive=settings.FMCSA_CLIENT_MAX_KEEPALIVE,
        )
        store = JsonRecordStore(settings.DB_PATH)
        logger.info(f"Record store at {settings.DB_PATH}")

        estimator = GeoDistanceEstimator(gazetteer=build_gazetteer(settings))

        return cls(
            store=store,
            client=client,
            cache_ttl_seconds=settings.CARRIER_CACHE_TTL,
            estimator=estimator
        )

    async def aclose(self) -> None:
        await self.client.aclose()
