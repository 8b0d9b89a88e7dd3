"""
Geo Distance Estimator

Resolves free-text "City, State" locations to coordinates, computes
great-circle distance and estimated truck travel time, and judges whether a
carrier can reach a pickup before it is due.

Resolution goes through a gazetteer: the GeoNames US city dataset shipped
with geonamescache by default (offline), or a geopy geocoder such as
Nominatim. When a city name exists in several states and none matches the
requested state, the first entry is used as a best-effort approximation.
"""

import logging
import math
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple

import geonamescache
from geopy.distance import great_circle
from geopy.exc import GeopyError
from geopy.geocoders import Nominatim

from freight_match.constants.thresholds import (
    AVERAGE_TRUCK_SPEED_MPH,
    KM_TO_MILES,
    MIN_PICKUP_BUFFER_HOURS,
    PROXIMITY_DECAY_MILES,
    PROXIMITY_DECAY_START_SCORE,
    PROXIMITY_FLOOR,
    PROXIMITY_FULL_SCORE_MILES,
    PROXIMITY_LINEAR_BANDS,
    TRAVEL_TIME_BUFFER_FACTOR,
)
from freight_match.core.errors import InvalidLocationFormat
from freight_match.tools.time_tool import hours_between

logger = logging.getLogger(__name__)

# GeoNames dataset sizes shipped by geonamescache: 500, 1000, 5000, 15000
DEFAULT_MIN_CITY_POPULATION = 15000


# ============================================================================
# Value Types
# ============================================================================


@dataclass(frozen=True)
class Coordinates:
    latitude: float
    longitude: float

    def as_tuple(self) -> Tuple[float, float]:
        return (self.latitude, self.longitude)


@dataclass(frozen=True)
class DistanceResult:
    miles: float
    km: float


@dataclass(frozen=True)
class FeasibilityResult:
    """
    Outcome of a pickup timeline check.

    degraded is True when either endpoint could not be resolved; feasible then
    only says whether the pickup is still in the future.
    """
    feasible: bool
    hours_needed: float
    hours_available: float
    buffer_hours: float
    distance: Optional[DistanceResult] = None
    degraded: bool = False

    @property
    def distance_miles(self) -> Optional[float]:
        return self.distance.miles if self.distance else None


@dataclass(frozen=True)
class GazetteerEntry:
    city: str
    state: str
    state_name: str
    latitude: float
    longitude: float


# ============================================================================
# Gazetteer
# ============================================================================


def _normalize_city(name: str) -> str:
    key = " ".join(name.replace(".", "").lower().split())
    if key.startswith("saint "):
        key = "st " + key[len("saint "):]
    return key


def _alias_list(value: Any) -> List[str]:
    if not value:
        return []
    if isinstance(value, str):
        return [part for part in value.split(",") if part]
    return [str(part) for part in value]


class Gazetteer:
    """
    City-name index of coordinates.

    Entries keep their insertion order per name; the first entry is the
    fallback when no candidate matches the requested state. Alternate names
    are only consulted when no entry carries the name itself.
    """

    def __init__(
        self,
        entries: Iterable[GazetteerEntry],
        aliases: Optional[Iterable[Tuple[str, GazetteerEntry]]] = None
    ):
        self._by_city: Dict[str, List[GazetteerEntry]] = {}
        self._by_alias: Dict[str, List[GazetteerEntry]] = {}
        for entry in entries:
            self._by_city.setdefault(_normalize_city(entry.city), []).append(entry)
        for alias, entry in aliases or ():
            bucket = self._by_alias.setdefault(_normalize_city(alias), [])
            if entry not in bucket:
                bucket.append(entry)

    @classmethod
    def from_geonames(cls, min_population: int = DEFAULT_MIN_CITY_POPULATION) -> "Gazetteer":
        """
        Build the US city index from the GeoNames dataset bundled with geonamescache.

        Cities are ordered by population, so a name shared across states
        falls back to its largest city.
        """
        cache = geonamescache.GeonamesCache(min_city_population=min_population)
        states = cache.get_us_states()

        cities = [city for city in cache.get_cities().values() if city.get("countrycode") == "US"]
        cities.sort(key=lambda city: int(city.get("population") or 0), reverse=True)

        entries: List[GazetteerEntry] = []
        aliases: List[Tuple[str, GazetteerEntry]] = []
        for city in cities:
            state = str(city.get("admin1code") or "").upper()
            entry = GazetteerEntry(
                city=city["name"],
                state=state,
                state_name=states.get(state, {}).get("name", ""),
                latitude=float(city["latitude"]),
                longitude=float(city["longitude"]),
            )
            entries.append(entry)
            for alias in _alias_list(city.get("alternatenames")):
                if alias.isascii() and alias != entry.city:
                    aliases.append((alias, entry))

        gazetteer = cls(entries, aliases)
        logger.debug(f"Loaded GeoNames gazetteer with {len(gazetteer)} US city names")
        return gazetteer

    def lookup(self, city: str) -> List[GazetteerEntry]:
        key = _normalize_city(city)
        return list(self._by_city.get(key) or self._by_alias.get(key, []))

    def __len__(self) -> int:
        return len(self._by_city)


class GeocoderGazetteer(Gazetteer):
    """
    Gazetteer backed by a geopy geocoder (Nominatim unless one is injected).

    Results are cached per city name. Geocoder failures resolve to no
    candidates and are not cached, so the next request retries.
    """

    def __init__(
        self,
        geocoder: Any = None,
        user_agent: str = "freight-match",
        timeout: float = 5.0,
        max_results: int = 10
    ):
        super().__init__([])
        self.geocoder = geocoder if geocoder is not None else Nominatim(user_agent=user_agent, timeout=timeout)
        self.max_results = max_results
        self._location_cache: Dict[str, List[GazetteerEntry]] = {}

    def lookup(self, city: str) -> List[GazetteerEntry]:
        key = _normalize_city(city)
        if key in self._location_cache:
            return list(self._location_cache[key])

        try:
            locations = self.geocoder.geocode(
                {"city": city},
                exactly_one=False,
                addressdetails=True,
                country_codes="us",
                limit=self.max_results,
            )
        except GeopyError as e:
            logger.warning(f"Geocoder lookup for {city!r} failed: {type(e).__name__}: {e}")
            return []

        entries = [
            entry for entry in (self._entry_from_location(city, loc) for loc in locations or [])
            if entry is not None
        ]
        self._location_cache[key] = entries
        return list(entries)

    @staticmethod
    def _entry_from_location(city: str, location: Any) -> Optional[GazetteerEntry]:
        address = (location.raw or {}).get("address", {})
        if address.get("country_code", "us") != "us":
            return None

        region = address.get("ISO3166-2-lvl4", "")
        state = region.split("-", 1)[1] if region.upper().startswith("US-") else ""

        return GazetteerEntry(
            city=city,
            state=state.upper(),
            state_name=address.get("state", ""),
            latitude=float(location.latitude),
            longitude=float(location.longitude),
        )

    def __len__(self) -> int:
        return len(self._location_cache)


# ============================================================================
# Pure Functions
# ============================================================================


def estimate_travel_hours(
    distance_miles: float,
    average_speed_mph: float = AVERAGE_TRUCK_SPEED_MPH
) -> float:
    """Drive time with the 20% operational buffer: (miles / speed) * 1.2."""
    return (distance_miles / average_speed_mph) * TRAVEL_TIME_BUFFER_FACTOR


def proximity_score(distance_miles: float) -> float:
    """
    Score closeness to pickup in (0, 1].

    - 0-50 miles: 1.0
    - 50-150: 0.9 -> 0.7
    - 150-300: 0.7 -> 0.5
    - 300-500: 0.5 -> 0.3
    - 500+: 0.3 * exp(-(miles - 500) / 1000), floored at 0.1

    Non-increasing in distance; negative input is treated as 0.
    """
    miles = max(0.0, float(distance_miles))

    if miles <= PROXIMITY_FULL_SCORE_MILES:
        return 1.0

    lower = PROXIMITY_FULL_SCORE_MILES
    for upper, start_score, end_score in PROXIMITY_LINEAR_BANDS:
        if miles <= upper:
            fraction = (miles - lower) / (upper - lower)
            return start_score - fraction * (start_score - end_score)
        lower = upper

    decayed = PROXIMITY_DECAY_START_SCORE * math.exp(-(miles - lower) / PROXIMITY_DECAY_MILES)
    return max(PROXIMITY_FLOOR, decayed)


# ============================================================================
# Estimator
# ============================================================================


class GeoDistanceEstimator:
    """
    Location resolution plus distance, travel-time and feasibility checks.

    Args:
        gazetteer: City index; defaults to the GeoNames US cities
        average_speed_mph: Truck speed used for travel estimates
        min_buffer_hours: Slack required between arrival and pickup
    """

    def __init__(
        self,
        gazetteer: Optional[Gazetteer] = None,
        average_speed_mph: float = AVERAGE_TRUCK_SPEED_MPH,
        min_buffer_hours: float = MIN_PICKUP_BUFFER_HOURS
    ):
        self.gazetteer = gazetteer if gazetteer is not None else Gazetteer.from_geonames()
        self.average_speed_mph = average_speed_mph
        self.min_buffer_hours = min_buffer_hours

    @staticmethod
    def parse_location(location: str) -> Tuple[str, str]:
        """
        Split "City, ST" (or "City, State") into (city, state).

        Raises:
            InvalidLocationFormat: when there is no comma-separated state part
        """
        if not isinstance(location, str):
            raise InvalidLocationFormat(location)

        parts = [part.strip() for part in location.split(",")]
        if len(parts) < 2 or not parts[0] or not parts[1]:
            raise InvalidLocationFormat(location)

        return parts[0], parts[1]

    def resolve(self, location: str) -> Optional[Coordinates]:
        """
        Resolve location text to coordinates.

        Returns None when the city is unknown. Raises InvalidLocationFormat
        when the text is not "City, State".
        """
        city, state = self.parse_location(location)

        candidates = self.gazetteer.lookup(city)
        if not candidates:
            logger.debug(f"No coordinates found for {location!r}")
            return None

        wanted = state.upper()
        match = next(
            (c for c in candidates if c.state == wanted or c.state_name.upper() == wanted),
            None
        )
        if match is None:
            match = candidates[0]
            logger.info(
                f"State {state!r} not found for {city!r}; using {match.city}, {match.state}"
            )

        return Coordinates(latitude=match.latitude, longitude=match.longitude)

    def distance(self, origin: Coordinates, destination: Coordinates) -> DistanceResult:
        """Great-circle distance between two points."""
        km = great_circle(origin.as_tuple(), destination.as_tuple()).km
        return DistanceResult(miles=km * KM_TO_MILES, km=km)

    def distance_between(self, origin: str, destination: str) -> Optional[DistanceResult]:
        """Distance between two location strings, or None if either is unknown."""
        origin_coords = self.resolve(origin)
        dest_coords = self.resolve(destination)
        if origin_coords is None or dest_coords is None:
            logger.warning(
                f"Could not find coordinates for origin: {origin} or destination: {destination}"
            )
            return None
        return self.distance(origin_coords, dest_coords)

    def estimate_travel_hours(self, distance_miles: float) -> float:
        return estimate_travel_hours(distance_miles, self.average_speed_mph)

    def proximity_score(self, distance_miles: float) -> float:
        return proximity_score(distance_miles)

    def feasibility(
        self,
        current_location: str,
        pickup_location: str,
        now: datetime,
        pickup_at: datetime
    ) -> FeasibilityResult:
        """
        Check whether a carrier at current_location can make the pickup.

        Feasible when hours_available - hours_needed >= min_buffer_hours.
        If either location cannot be resolved the result is degraded:
        feasible iff the pickup is still in the future.

        Raises:
            InvalidLocationFormat: if current_location is malformed. A malformed
                pickup_location is load data and degrades instead.
        """
        origin = self.resolve(current_location)

        try:
            destination = self.resolve(pickup_location)
        except InvalidLocationFormat:
            logger.warning(f"Malformed pickup location {pickup_location!r}; treating as unresolved")
            destination = None

        hours_available = hours_between(now, pickup_at)

        if origin is None or destination is None:
            return FeasibilityResult(
                feasible=hours_available > 0,
                hours_needed=0.0,
                hours_available=hours_available,
                buffer_hours=hours_available,
                distance=None,
                degraded=True,
            )

        distance = self.distance(origin, destination)
        hours_needed = self.estimate_travel_hours(distance.miles)
        buffer_hours = hours_available - hours_needed

        return FeasibilityResult(
            feasible=buffer_hours >= self.min_buffer_hours,
            hours_needed=hours_needed,
            hours_available=hours_available,
            buffer_hours=buffer_hours,
            distance=distance,
        )
