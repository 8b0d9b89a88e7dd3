"""
Algorithm Tests

Tests for deterministic algorithm functions:
- geo_distance: location parsing, GeoNames and geocoder resolution, proximity, feasibility
- load_matching: cargo filter, scoring, ranking and tie-break
- eligibility: policy breakdown
- cargo_types: code table translation

Run: pytest freight_match/tests/test_algorithms.py -v
"""

import pytest
from datetime import timedelta


# ==================== Location Parsing / Gazetteer ====================

def test_parse_location_splits_city_and_state():
    """Test "City, ST" parsing trims whitespace."""
    from freight_match.algorithms.geo_distance import GeoDistanceEstimator

    assert GeoDistanceEstimator.parse_location("  Chicago ,  IL ") == ("Chicago", "IL")


@pytest.mark.parametrize("location", ["Chicago", "", ", IL", "Chicago,", None, 42])
def test_parse_location_rejects_malformed_text(location):
    """Test location text without a state part is rejected."""
    from freight_match.algorithms.geo_distance import GeoDistanceEstimator
    from freight_match.core.errors import InvalidLocationFormat

    with pytest.raises(InvalidLocationFormat):
        GeoDistanceEstimator.parse_location(location)


def test_resolve_prefers_matching_state(estimator):
    """Test a duplicated city name resolves to the requested state."""
    portland_me = estimator.resolve("Portland, ME")
    assert portland_me.latitude == pytest.approx(43.66, abs=0.05)
    assert portland_me.longitude == pytest.approx(-70.26, abs=0.05)

    springfield_il = estimator.resolve("springfield, Illinois")
    assert springfield_il.latitude == pytest.approx(39.80, abs=0.05)
    assert springfield_il.longitude == pytest.approx(-89.64, abs=0.05)


def test_resolve_falls_back_to_first_entry_on_state_mismatch(estimator):
    """Test unknown state for a known city uses the most populous entry."""
    coords = estimator.resolve("Portland, XX")
    assert coords.latitude == pytest.approx(45.52, abs=0.05)  # Portland, OR


def test_resolve_unknown_city_returns_none(estimator):
    """Test cities missing from the gazetteer resolve to None."""
    assert estimator.resolve("Nowhereville, KS") is None


def test_resolve_normalizes_saint_spelling(estimator):
    """Test "Saint Louis" and "St. Louis" hit the same entry."""
    assert estimator.resolve("Saint Louis, MO") == estimator.resolve("St. Louis, MO")


@pytest.mark.parametrize("location,latitude,longitude", [
    ("Scranton, PA", 41.41, -75.66),
    ("Fontana, CA", 34.09, -117.44),
    ("Laredo, TX", 27.51, -99.51),
    ("Allentown, PA", 40.61, -75.49),
])
def test_resolve_covers_secondary_freight_cities(estimator, location, latitude, longitude):
    """Test mid-size freight cities resolve from the GeoNames dataset."""
    coords = estimator.resolve(location)

    assert coords is not None
    assert coords.latitude == pytest.approx(latitude, abs=0.1)
    assert coords.longitude == pytest.approx(longitude, abs=0.1)


def test_distant_pickup_is_not_degraded(estimator, now):
    """Test a cross-country pickup 3 h out is infeasible, not a degraded pass."""
    result = estimator.feasibility("Scranton, PA", "Seattle, WA", now, now + timedelta(hours=3))

    assert result.degraded is False
    assert result.feasible is False
    assert result.distance_miles > 2000


def test_custom_gazetteer_is_used():
    """Test the estimator accepts an injected gazetteer."""
    from freight_match.algorithms.geo_distance import Gazetteer, GazetteerEntry, GeoDistanceEstimator

    alpha = GazetteerEntry(city="Alpha", state="AA", state_name="Alphastate", latitude=10.0, longitude=10.0)
    gazetteer = Gazetteer([alpha], aliases=[("Alpha City", alpha)])
    estimator = GeoDistanceEstimator(gazetteer=gazetteer)

    assert len(gazetteer) == 1
    assert estimator.resolve("Alpha, AA").as_tuple() == (10.0, 10.0)
    assert estimator.resolve("alpha city, Alphastate").as_tuple() == (10.0, 10.0)
    assert estimator.resolve("Chicago, IL") is None


# ==================== Geocoder Gazetteer ====================

class FakeGeocoder:
    """geopy-style geocoder returning canned Location objects."""

    def __init__(self, results=None, error=None):
        self.results = results or {}
        self.error = error
        self.queries = []

    def geocode(self, query, **kwargs):
        self.queries.append((query, kwargs))
        if self.error is not None:
            raise self.error
        return self.results.get(query["city"])


def _location(address, lat, lon, state_code, state_name, country_code="us"):
    from geopy.location import Location

    raw = {"address": {
        "state": state_name,
        "ISO3166-2-lvl4": f"{country_code.upper()}-{state_code}",
        "country_code": country_code,
    }}
    return Location(address, (lat, lon), raw)


def test_geocoder_gazetteer_matches_state_and_caches():
    """Test geocoder results are filtered by state and looked up once per city."""
    from freight_match.algorithms.geo_distance import GeocoderGazetteer, GeoDistanceEstimator

    geocoder = FakeGeocoder({"Portland": [
        _location("Portland, Oregon", 45.52, -122.68, "OR", "Oregon"),
        _location("Portland, Maine", 43.66, -70.26, "ME", "Maine"),
        _location("Portland, Victoria", -38.34, 141.60, "VIC", "Victoria", country_code="au"),
    ]})
    gazetteer = GeocoderGazetteer(geocoder=geocoder)
    estimator = GeoDistanceEstimator(gazetteer=gazetteer)

    assert estimator.resolve("Portland, ME").as_tuple() == (43.66, -70.26)
    assert estimator.resolve("Portland, Oregon").as_tuple() == (45.52, -122.68)
    assert estimator.resolve("Portland, XX").as_tuple() == (45.52, -122.68)
    assert len(gazetteer.lookup("portland")) == 2

    assert len(geocoder.queries) == 1
    query, options = geocoder.queries[0]
    assert query == {"city": "Portland"}
    assert options["country_codes"] == "us"
    assert options["exactly_one"] is False


def test_geocoder_gazetteer_unknown_city_returns_none():
    """Test an empty geocoder answer resolves to None."""
    from freight_match.algorithms.geo_distance import GeocoderGazetteer, GeoDistanceEstimator

    estimator = GeoDistanceEstimator(gazetteer=GeocoderGazetteer(geocoder=FakeGeocoder()))

    assert estimator.resolve("Nowhereville, KS") is None


def test_geocoder_failure_degrades_and_is_retried(now):
    """Test geocoder errors degrade feasibility and are not cached."""
    from geopy.exc import GeocoderUnavailable
    from freight_match.algorithms.geo_distance import GeocoderGazetteer, GeoDistanceEstimator

    geocoder = FakeGeocoder(error=GeocoderUnavailable("service down"))
    gazetteer = GeocoderGazetteer(geocoder=geocoder)
    estimator = GeoDistanceEstimator(gazetteer=gazetteer)

    result = estimator.feasibility("Chicago, IL", "Joliet, IL", now, now + timedelta(hours=4))
    assert result.degraded is True
    assert result.feasible is True

    geocoder.error = None
    geocoder.results = {"Chicago": [_location("Chicago, Illinois", 41.85, -87.65, "IL", "Illinois")]}
    assert estimator.resolve("Chicago, IL").as_tuple() == (41.85, -87.65)
    assert len(gazetteer) == 1


# ==================== Distance / Travel Time ====================

def test_distance_chicago_to_joliet(estimator):
    """Test great-circle distance between nearby cities."""
    result = estimator.distance_between("Chicago, IL", "Joliet, IL")

    assert 20 < result.miles < 35
    assert result.km == pytest.approx(result.miles / 0.621371)


def test_distance_between_unknown_city_is_none(estimator):
    """Test distance is None when either end cannot be resolved."""
    assert estimator.distance_between("Chicago, IL", "Nowhereville, KS") is None


def test_estimate_travel_hours_applies_buffer():
    """Test travel time is (miles / 55) * 1.2."""
    from freight_match.algorithms.geo_distance import estimate_travel_hours

    assert estimate_travel_hours(0) == 0
    assert estimate_travel_hours(137.5) == pytest.approx(3.0)
    assert estimate_travel_hours(550) == pytest.approx(12.0)


# ==================== Proximity Score ====================

def test_proximity_score_breakpoints():
    """Test the proximity curve at its breakpoints."""
    from freight_match.algorithms.geo_distance import proximity_score

    assert proximity_score(0) == 1.0
    assert proximity_score(50) == 1.0
    assert proximity_score(100) == pytest.approx(0.8)
    assert proximity_score(150) == pytest.approx(0.7)
    assert proximity_score(300) == pytest.approx(0.5)
    assert proximity_score(500) == pytest.approx(0.3)
    assert proximity_score(1500) == pytest.approx(0.3 * 2.718281828 ** -1, rel=1e-6)
    assert proximity_score(10000) == pytest.approx(0.1)


def test_proximity_score_negative_distance_is_zero():
    """Test negative distances score like distance 0."""
    from freight_match.algorithms.geo_distance import proximity_score

    assert proximity_score(-10) == 1.0


def test_proximity_score_is_monotonic_and_positive():
    """Test proximity never increases with distance and never reaches 0."""
    from freight_match.algorithms.geo_distance import proximity_score

    distances = [d * 2.5 for d in range(0, 4001)]
    scores = [proximity_score(d) for d in distances]

    for previous, current in zip(scores, scores[1:]):
        assert current <= previous
    assert all(0 < score <= 1.0 for score in scores)


# ==================== Feasibility ====================

def test_feasibility_boundary_at_two_hour_buffer(estimator, monkeypatch, now):
    """Test feasible iff buffer >= 2 hours (3 h drive, pickup at +5 h)."""
    from freight_match.algorithms.geo_distance import DistanceResult

    monkeypatch.setattr(estimator, "distance", lambda o, d: DistanceResult(miles=137.5, km=221.3))

    on_boundary = estimator.feasibility("Chicago, IL", "Joliet, IL", now, now + timedelta(hours=5))
    assert on_boundary.hours_needed == pytest.approx(3.0)
    assert on_boundary.buffer_hours == pytest.approx(2.0)
    assert on_boundary.feasible is True

    just_short = estimator.feasibility(
        "Chicago, IL", "Joliet, IL", now, now + timedelta(hours=5) - timedelta(seconds=1)
    )
    assert just_short.buffer_hours < 2.0
    assert just_short.feasible is False


def test_feasibility_matches_buffer_rule_over_grid(estimator, now):
    """Test feasible == (buffer >= 2.0) for many distance/time combinations."""
    origins = ["Joliet, IL", "Milwaukee, WI", "St. Louis, MO", "Dallas, TX", "Miami, FL"]
    for origin in origins:
        for hours_ahead in (-3, 0, 1, 2, 4, 8, 16, 32, 64):
            result = estimator.feasibility("Chicago, IL", origin, now, now + timedelta(hours=hours_ahead))
            assert result.degraded is False
            assert result.feasible == (result.buffer_hours >= 2.0)
            assert result.buffer_hours == pytest.approx(result.hours_available - result.hours_needed)


def test_feasibility_infeasible_when_pickup_too_soon(estimator, monkeypatch, now):
    """Test pickup in 1 h with a 3 h drive is infeasible with negative buffer."""
    from freight_match.algorithms.geo_distance import DistanceResult

    monkeypatch.setattr(estimator, "distance", lambda o, d: DistanceResult(miles=137.5, km=221.3))

    result = estimator.feasibility("Chicago, IL", "Joliet, IL", now, now + timedelta(hours=1))

    assert result.feasible is False
    assert result.buffer_hours == pytest.approx(-2.0)


def test_feasibility_degrades_for_unknown_city(estimator, now):
    """Test unresolvable pickup falls back to "pickup is in the future"."""
    future = estimator.feasibility("Chicago, IL", "Nowhereville, KS", now, now + timedelta(hours=1))
    assert future.degraded is True
    assert future.feasible is True
    assert future.hours_needed == 0
    assert future.distance_miles is None
    assert future.buffer_hours == pytest.approx(1.0)

    past = estimator.feasibility("Chicago, IL", "Nowhereville, KS", now, now - timedelta(hours=1))
    assert past.feasible is False


def test_feasibility_malformed_pickup_degrades(estimator, now):
    """Test a malformed load origin is treated as unresolvable, not an error."""
    result = estimator.feasibility("Chicago, IL", "Somewhere", now, now + timedelta(hours=10))
    assert result.degraded is True
    assert result.feasible is True


def test_feasibility_malformed_current_location_raises(estimator, now):
    """Test a malformed carrier location is an input error."""
    from freight_match.core.errors import InvalidLocationFormat

    with pytest.raises(InvalidLocationFormat):
        estimator.feasibility("Chicago", "Joliet, IL", now, now + timedelta(hours=10))


# ==================== Load Matching ====================

@pytest.fixture
def engine(estimator):
    from freight_match.algorithms.load_matching import LoadMatchingEngine
    return LoadMatchingEngine(estimator)


def test_match_scenario_cargo_filter_and_proximity(engine, make_profile, make_load, now):
    """Test carrier {1,3,15}: near feasible code-1 load beats far code-15; code 2 filtered."""
    carrier = make_profile(cargo_carried=[1, 3, 15])
    loads = [
        make_load(1, commodity_type=1, origin="Joliet, IL", loadboard_rate=2000),
        make_load(2, commodity_type=15, origin="Miami, FL",
                  pickup_datetime=now + timedelta(hours=5), loadboard_rate=5000),
        make_load(3, commodity_type=2, origin="Joliet, IL", loadboard_rate=3000),
    ]

    ranked = engine.rank_loads(carrier, loads, "Chicago, IL", now)
    best = engine.find_best_match(carrier, loads, "Chicago, IL", now)

    assert [r.load.load_id for r in ranked] == [1, 2]
    assert best.load.load_id == 1
    assert best.match_factors.cargo_match is True
    assert best.match_factors.timeline_feasible is True
    assert best.match_factors.location_proximity == 1.0
    assert best.match_score == pytest.approx(1.0)

    far = ranked[1]
    assert far.match_factors.timeline_feasible is False
    assert far.match_score < best.match_score


def test_match_scenario_unknown_cargo_passes_all(engine, make_profile, make_load, now):
    """Test carrier without cargo data: all loads compete, closer one wins."""
    carrier = make_profile(cargo_carried=None)
    loads = [
        make_load(1, commodity_type=4, origin="Dallas, TX", pickup_datetime=now + timedelta(hours=48)),
        make_load(2, commodity_type=7, origin="Milwaukee, WI"),
    ]

    ranked = engine.rank_loads(carrier, loads, "Chicago, IL", now)
    best = engine.find_best_match(carrier, loads, "Chicago, IL", now)

    assert len(ranked) == 2
    assert best.load.load_id == 2
    assert ranked[1].load.load_id == 1
    assert ranked[1].match_score < best.match_score


def test_match_empty_cargo_list_gets_benefit_of_doubt(engine, make_profile, make_load, now):
    """Test an empty cargo set behaves like unknown."""
    carrier = make_profile(cargo_carried=[])
    best = engine.find_best_match(carrier, [make_load(1, commodity_type=9)], "Chicago, IL", now)

    assert best is not None
    assert best.load.load_id == 1


def test_match_scenario_location_without_state(engine, make_profile, make_load, monkeypatch, now):
    """Test "Chicago" fails before any distance work."""
    from freight_match.core.errors import InvalidLocationFormat

    def _no_distance(*args, **kwargs):
        raise AssertionError("distance computed for malformed location")

    monkeypatch.setattr(engine.estimator, "feasibility", _no_distance)
    monkeypatch.setattr(engine.estimator, "distance", _no_distance)

    with pytest.raises(InvalidLocationFormat):
        engine.find_best_match(make_profile(), [make_load(1)], "Chicago", now)


def test_match_scenario_pickup_too_soon(engine, make_profile, make_load, monkeypatch, now):
    """Test 1 h to pickup with a 3 h drive: infeasible, timeline weight lost."""
    from freight_match.algorithms.geo_distance import DistanceResult

    monkeypatch.setattr(engine.estimator, "distance", lambda o, d: DistanceResult(miles=137.5, km=221.3))
    load = make_load(1, pickup_datetime=now + timedelta(hours=1), loadboard_rate=0)

    result = engine.score_load(make_profile(), load, "Chicago, IL", now)

    assert result.match_factors.timeline_feasible is False
    assert result.match_factors.buffer_hours < 0
    # 137.5 mi: proximity 0.9 - 0.875 * 0.2 = 0.725; no timeline, no rate bonus
    assert result.match_factors.location_proximity == pytest.approx(0.725)
    assert result.match_score == pytest.approx(0.40 + 0.725 * 0.35)


def test_match_never_selects_incompatible_cargo(engine, make_profile, make_load, now):
    """Test loads outside a non-empty cargo set are never selected."""
    carrier = make_profile(cargo_carried=[1])
    loads = [make_load(i, commodity_type=code) for i, code in enumerate([2, 3, 4, 5], start=1)]

    assert engine.find_best_match(carrier, loads, "Chicago, IL", now) is None
    assert engine.rank_loads(carrier, loads, "Chicago, IL", now) == []


def test_match_ignores_non_available_loads(engine, make_profile, make_load, now):
    """Test assigned loads are not candidates."""
    loads = [make_load(1, status="assigned"), make_load(2, status="assigned")]

    assert engine.find_best_match(make_profile(), loads, "Chicago, IL", now) is None


def test_match_no_loads_returns_none(engine, make_profile, now):
    """Test an empty candidate list is not an error."""
    assert engine.find_best_match(make_profile(), [], "Chicago, IL", now) is None


def test_match_tie_break_lowest_load_id(engine, make_profile, make_load, now):
    """Test identical scores resolve to the lowest load_id regardless of input order."""
    loads = [make_load(7), make_load(3), make_load(5)]

    ranked = engine.rank_loads(make_profile(), loads, "Chicago, IL", now)
    best = engine.find_best_match(make_profile(), loads, "Chicago, IL", now)

    assert len({r.match_score for r in ranked}) == 1
    assert [r.load.load_id for r in ranked] == [3, 5, 7]
    assert best.load.load_id == 3


def test_match_scores_are_bounded(engine, make_profile, make_load, now):
    """Test every score lies within [0, 1]."""
    loads = [
        make_load(1, origin="Joliet, IL", loadboard_rate=50000),
        make_load(2, origin="Los Angeles, CA", pickup_datetime=now - timedelta(hours=5)),
        make_load(3, origin="Nowhereville, KS", loadboard_rate=0),
        make_load(4, origin="Denver, CO", loadboard_rate=999),
    ]

    ranked = engine.rank_loads(make_profile(cargo_carried=None), loads, "Chicago, IL", now)

    assert len(ranked) == 4
    for result in ranked:
        assert 0.0 <= result.match_score <= 1.0


def test_unresolved_origin_uses_default_proximity(engine, make_profile, make_load, now):
    """Test unknown pickup city scores proximity 0.5 and is flagged degraded."""
    result = engine.score_load(make_profile(), make_load(1, origin="Nowhereville, KS"), "Chicago, IL", now)

    assert result.match_factors.location_proximity == 0.5
    assert result.match_factors.degraded is True
    assert result.match_factors.distance_to_pickup_miles is None


def test_cross_country_pickup_scores_low(engine, make_profile, make_load, now):
    """Test a Seattle pickup 3 h out is a poor match for a carrier in Scranton."""
    load = make_load(1, origin="Seattle, WA", pickup_datetime=now + timedelta(hours=3))

    result = engine.score_load(make_profile(), load, "Scranton, PA", now)

    assert result.match_factors.degraded is False
    assert result.match_factors.timeline_feasible is False
    assert result.match_factors.location_proximity < 0.2
    assert result.match_score < 0.6


def test_compute_match_score_weights():
    """Test weights and rate bonus cap."""
    from freight_match.algorithms.load_matching import compute_match_score, rate_bonus

    assert rate_bonus(500) == pytest.approx(0.05)
    assert rate_bonus(5000) == pytest.approx(0.10)
    assert rate_bonus(-100) == 0.0
    assert compute_match_score(True, 1.0, True, 0.10) == 1.0
    assert compute_match_score(True, 0.5, False, 0.0) == pytest.approx(0.575)
    assert compute_match_score(False, 0.0, False, 0.0) == 0.0


# ==================== Eligibility ====================

def test_eligibility_all_checks_pass(make_profile):
    """Test a fully compliant carrier is eligible."""
    from freight_match.algorithms.eligibility import evaluate_eligibility

    result = evaluate_eligibility(make_profile())

    assert result.eligible is True
    assert result.failed_checks == []
    assert result.validation_details.model_dump() == {
        "is_active": True,
        "allowed_to_operate": True,
        "has_authority": True,
        "insurance_compliant": True,
    }
    assert result.authorized_for_property is True


def test_eligibility_reports_every_failure(make_profile):
    """Test failures are listed individually, not collapsed."""
    from freight_match.algorithms.eligibility import evaluate_eligibility
    from freight_match.schemas.carrier import AuthorityInfo, InsuranceInfo

    profile = make_profile(
        status_code="I",
        allowed_to_operate="N",
        authority=AuthorityInfo(common_authority_status="I", contract_authority_status="N"),
        insurance=InsuranceInfo(bipd_on_file="500", bipd_required="750"),
    )

    result = evaluate_eligibility(profile)

    assert result.eligible is False
    assert result.failed_checks == [
        "is_active", "allowed_to_operate", "has_authority", "insurance_compliant"
    ]


def test_eligibility_contract_authority_is_enough(make_profile):
    """Test active contract authority satisfies the authority check."""
    from freight_match.algorithms.eligibility import evaluate_eligibility
    from freight_match.schemas.carrier import AuthorityInfo

    profile = make_profile(authority=AuthorityInfo(common_authority_status="I", contract_authority_status="A"))

    assert evaluate_eligibility(profile).validation_details.has_authority is True


def test_eligibility_insurance_is_numeric(make_profile):
    """Test insurance amounts compare as numbers, not strings."""
    from freight_match.algorithms.eligibility import evaluate_eligibility
    from freight_match.schemas.carrier import InsuranceInfo

    # "1,000" >= "750" numerically, though "1,000" < "750" as text
    ok = make_profile(insurance=InsuranceInfo(bipd_on_file="1,000", bipd_required="750"))
    short = make_profile(insurance=InsuranceInfo(bipd_on_file="90", bipd_required="750"))

    assert evaluate_eligibility(ok).validation_details.insurance_compliant is True
    assert evaluate_eligibility(short).failed_checks == ["insurance_compliant"]


def test_safe_float_handles_junk():
    """Test unparsable amounts become the default."""
    from freight_match.algorithms.eligibility import safe_float

    assert safe_float(None) == 0.0
    assert safe_float("") == 0.0
    assert safe_float("n/a") == 0.0
    assert safe_float("1,250") == 1250.0
    assert safe_float(7) == 7.0


# ==================== Cargo Types ====================

def test_cargo_code_from_item_prefers_numeric_id():
    """Test id.cargoClassId wins over the description."""
    from freight_match.constants.cargo_types import cargo_code_from_item

    assert cargo_code_from_item({"id": {"cargoClassId": 4}, "cargoClassDesc": "General Freight"}) == 4


def test_cargo_code_from_item_translates_description():
    """Test descriptions are translated case-insensitively."""
    from freight_match.constants.cargo_types import cargo_code_from_item

    assert cargo_code_from_item({"cargoClassDesc": "general freight"}) == 1
    assert cargo_code_from_item({"id": {"cargoClassId": 99}, "cargoClassDesc": "Household Goods"}) == 2


def test_cargo_code_from_item_drops_unknown():
    """Test unknown descriptions yield None."""
    from freight_match.constants.cargo_types import cargo_code_from_item

    assert cargo_code_from_item({"cargoClassDesc": "Unobtainium"}) is None
    assert cargo_code_from_item({}) is None


def test_is_valid_cargo_code_range():
    """Test codes are integers 1..30."""
    from freight_match.constants.cargo_types import is_valid_cargo_code

    assert is_valid_cargo_code(1)
    assert is_valid_cargo_code(30)
    assert not is_valid_cargo_code(0)
    assert not is_valid_cargo_code(31)
    assert not is_valid_cargo_code(True)
    assert not is_valid_cargo_code("1")
