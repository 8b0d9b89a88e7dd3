import sys
import asyncio
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

import httpx
import pytest

# Add the project root to sys.path so that "freight_match" can be found
# without an editable install.
# structure: <root>/freight_match/tests/conftest.py

current_dir = Path(__file__).parent.absolute()
root_dir = current_dir.parent.parent
sys.path.insert(0, str(root_dir))

FMCSA_TEST_BASE_URL = "https://fmcsa.test/qc/services/carriers"
FIXED_NOW = datetime(2026, 3, 2, 12, 0, tzinfo=timezone.utc)


# ==================== Clock ====================

class FakeClock:
    """Manually advanced clock returning aware UTC datetimes."""

    def __init__(self, now: datetime = FIXED_NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


# ==================== FMCSA Stub ====================

_LOOKUP_BY_SUFFIX = {
    "authority": "authority",
    "operation-classification": "operation_classification",
    "cargo-carried": "cargo_carried",
}


class FmcsaStub:
    """
    In-memory FMCSA QCMobile responder for httpx.MockTransport.

    Records each lookup name in `calls` and the peak number of requests in
    flight at once.
    """

    def __init__(self):
        self.carriers: Dict[str, Dict[str, Any]] = {}
        self.authority: Dict[str, Dict[str, Any]] = {}
        self.classification: Dict[str, List[str]] = {}
        self.cargo: Dict[str, List[Dict[str, Any]]] = {}
        self.fail: Dict[str, int] = {}
        self.raise_on: Dict[str, Exception] = {}
        self.calls: List[str] = []
        self.requests: List[httpx.Request] = []
        self.delay = 0.0
        self.in_flight = 0
        self.max_in_flight = 0

    def add_carrier(
        self,
        mc_number: str,
        dot_number: str,
        cargo_ids: Optional[List[int]] = None,
        carrier: Optional[Dict[str, Any]] = None,
        authority: Optional[Dict[str, Any]] = None
    ) -> None:
        self.carriers[mc_number] = {
            "dotNumber": int(dot_number),
            "legalName": f"CARRIER {mc_number} LLC",
            "dbaName": None,
            "statusCode": "A",
            "allowedToOperate": "Y",
            "safetyRating": "S",
            "bipdInsuranceOnFile": "1000",
            "bipdRequiredAmount": "750",
            "cargoInsuranceOnFile": "100",
            **(carrier or {}),
        }
        self.authority[dot_number] = {
            "commonAuthorityStatus": "A",
            "contractAuthorityStatus": "N",
            "authorizedForProperty": "Y",
            "authorizedForPassenger": "N",
            "authorizedForHouseholdGoods": "N",
            **(authority or {}),
        }
        self.classification[dot_number] = ["Authorized For Hire"]
        self.cargo[dot_number] = [
            {"id": {"cargoClassId": code}, "cargoClassDesc": ""}
            for code in (cargo_ids or [])
        ]

    def count(self, lookup: str) -> int:
        return self.calls.count(lookup)

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        parts = request.url.path.split("/carriers/", 1)[1].strip("/").split("/")
        if parts[0] == "docket-number":
            lookup, key = "identity", parts[1]
        else:
            lookup, key = _LOOKUP_BY_SUFFIX[parts[1]], parts[0]
        self.calls.append(lookup)

        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
        finally:
            self.in_flight -= 1

        if lookup in self.raise_on:
            raise self.raise_on[lookup]
        if lookup in self.fail:
            return httpx.Response(self.fail[lookup], json={"message": "upstream exploded"})

        if lookup == "identity":
            carrier = self.carriers.get(key)
            return httpx.Response(200, json={"content": [{"carrier": carrier}] if carrier else []})
        if lookup == "authority":
            record = self.authority.get(key)
            return httpx.Response(200, json={"content": [{"carrierAuthority": record}] if record else []})
        if lookup == "operation_classification":
            labels = self.classification.get(key, [])
            return httpx.Response(200, json={"content": [{"operationClassDesc": label} for label in labels]})
        return httpx.Response(200, json={"content": self.cargo.get(key, [])})


# ==================== Fixtures ====================

@pytest.fixture
def now():
    return FIXED_NOW


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def fmcsa_stub():
    stub = FmcsaStub()
    stub.add_carrier("123456", "3000001", cargo_ids=[1, 3, 15])
    return stub


@pytest.fixture
def fmcsa_client(fmcsa_stub):
    from freight_match.tools.fmcsa_client import FmcsaClient

    return FmcsaClient(
        base_url=FMCSA_TEST_BASE_URL,
        api_key="test-web-key",
        timeout=5.0,
        transport=httpx.MockTransport(fmcsa_stub.handler)
    )


@pytest.fixture(scope="session")
def estimator():
    """Estimator over the GeoNames US cities (loaded once)."""
    from freight_match.algorithms.geo_distance import GeoDistanceEstimator
    return GeoDistanceEstimator()


@pytest.fixture
def store(tmp_path):
    from freight_match.repositories.record_store import JsonRecordStore
    return JsonRecordStore(tmp_path / "db.json")


@pytest.fixture
def container(store, fmcsa_client, estimator, clock):
    from freight_match.services.container import ServiceContainer
    return ServiceContainer(
        store=store,
        client=fmcsa_client,
        cache_ttl_seconds=86400,
        estimator=estimator,
        clock=clock
    )


@pytest.fixture
def make_load():
    """Factory for Load objects with sensible defaults."""
    from freight_match.schemas.load import Load

    def _make(load_id: int, **overrides) -> Any:
        fields = {
            "load_id": load_id,
            "origin": "Joliet, IL",
            "destination": "Atlanta, GA",
            "pickup_datetime": FIXED_NOW + timedelta(hours=24),
            "delivery_datetime": FIXED_NOW + timedelta(hours=48),
            "commodity_type": 1,
            "loadboard_rate": 1500.0,
            "weight": 40000,
            "miles": 720,
            "equipment_type": "Dry Van",
        }
        fields.update(overrides)
        return Load(**fields)

    return _make


@pytest.fixture
def make_profile():
    """Factory for CarrierProfile objects that pass every eligibility check."""
    from freight_match.schemas.carrier import AuthorityInfo, CarrierProfile, InsuranceInfo

    def _make(mc_number: str = "123456", **overrides) -> Any:
        fields = {
            "mc_number": mc_number,
            "dot_number": "3000001",
            "legal_name": "TEST CARRIER LLC",
            "status_code": "A",
            "allowed_to_operate": "Y",
            "authority": AuthorityInfo(common_authority_status="A", authorized_for_property="Y"),
            "operation_classification": ["Authorized For Hire"],
            "cargo_carried": [1, 3, 15],
            "insurance": InsuranceInfo(bipd_on_file="1000", bipd_required="750"),
            "last_verified": FIXED_NOW,
            "cached_at": FIXED_NOW,
        }
        fields.update(overrides)
        return CarrierProfile(**fields)

    return _make


@pytest.fixture
def seed_loads(store):
    """Write Load objects straight into the store."""

    def _seed(loads) -> None:
        with store.transaction() as doc:
            doc["loads"].extend(load.model_dump(mode="json") for load in loads)

    return _seed
