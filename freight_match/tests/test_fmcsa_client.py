"""
FMCSA Client Tests

Tests for response mapping and error handling of the FMCSA lookup client,
using httpx.MockTransport in place of the network.

Run: pytest freight_match/tests/test_fmcsa_client.py -v
"""

import httpx
import pytest


def _client(handler, api_key: str = "test-web-key"):
    from freight_match.tools.fmcsa_client import FmcsaClient

    return FmcsaClient(
        base_url="https://fmcsa.test/qc/services/carriers/",
        api_key=api_key,
        timeout=2.0,
        transport=httpx.MockTransport(handler)
    )


# ==================== Identity ====================

@pytest.mark.asyncio
async def test_identity_maps_fields_and_sends_web_key():
    """Test identity mapping and the webKey query parameter."""
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={
            "content": [{
                "carrier": {
                    "dotNumber": 1234567,
                    "legalName": "ACME TRUCKING INC",
                    "dbaName": "ACME",
                    "statusCode": "A",
                    "allowedToOperate": "Y",
                    "safetyRating": "S",
                    "bipdInsuranceOnFile": 1000,
                    "bipdRequiredAmount": "750",
                    "cargoInsuranceOnFile": None,
                }
            }]
        })

    client = _client(handler)
    identity = await client.get_carrier_identity("654321")
    await client.aclose()

    assert identity.dot_number == "1234567"
    assert identity.legal_name == "ACME TRUCKING INC"
    assert identity.dba_name == "ACME"
    assert identity.status_code == "A"
    assert identity.allowed_to_operate == "Y"
    assert identity.insurance.bipd_on_file == "1000"
    assert identity.insurance.bipd_required == "750"
    assert identity.insurance.cargo_on_file == "0"

    assert seen[0].url.path == "/qc/services/carriers/docket-number/654321"
    assert seen[0].url.params["webKey"] == "test-web-key"
    assert client.is_closed


@pytest.mark.asyncio
async def test_identity_without_api_key_omits_param():
    """Test no webKey parameter is sent when no key is configured."""
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"content": [{"carrier": {"dotNumber": 1}}]})

    client = _client(handler, api_key="")
    await client.get_carrier_identity("1")

    assert "webKey" not in seen[0].url.params


@pytest.mark.asyncio
@pytest.mark.parametrize("response", [
    httpx.Response(200, json={"content": []}),
    httpx.Response(200, json={"content": None}),
    httpx.Response(200, json={"content": [{"carrier": None}]}),
    httpx.Response(404, json={"message": "not found"}),
])
async def test_identity_not_found(response):
    """Test empty or 404 identity results become CarrierNotFound."""
    from freight_match.core.errors import CarrierNotFound

    client = _client(lambda request: response)

    with pytest.raises(CarrierNotFound) as exc_info:
        await client.get_carrier_identity("111111")

    assert exc_info.value.status_code == 404


# ==================== Error Mapping ====================

@pytest.mark.asyncio
@pytest.mark.parametrize("status_code,reason", [
    (500, "upstream unavailable"),
    (503, "upstream unavailable"),
    (401, "upstream rejected credentials"),
    (429, "upstream rate limited"),
    (400, "upstream returned status 400"),
])
async def test_status_errors_map_to_upstream_failure(status_code, reason):
    """Test non-2xx responses become VerificationUpstreamFailure."""
    from freight_match.core.errors import VerificationUpstreamFailure

    client = _client(lambda request: httpx.Response(status_code, text="nope"))

    with pytest.raises(VerificationUpstreamFailure) as exc_info:
        await client.get_authority("1234567")

    error = exc_info.value
    assert error.lookup == "authority"
    assert error.reason == reason
    assert error.upstream_status == status_code
    assert error.status_code == 500
    assert error.to_dict()["code"] == "verification_upstream_failure"


@pytest.mark.asyncio
async def test_connection_error_maps_to_upstream_failure():
    """Test transport failures become VerificationUpstreamFailure."""
    from freight_match.core.errors import VerificationUpstreamFailure

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = _client(handler)

    with pytest.raises(VerificationUpstreamFailure) as exc_info:
        await client.get_operation_classification("1234567")

    assert exc_info.value.lookup == "operation_classification"
    assert exc_info.value.upstream_status is None
    assert "ConnectError" in exc_info.value.reason


@pytest.mark.asyncio
async def test_invalid_json_maps_to_upstream_failure():
    """Test undecodable bodies become VerificationUpstreamFailure."""
    from freight_match.core.errors import VerificationUpstreamFailure

    client = _client(lambda request: httpx.Response(200, text="<html>maintenance</html>"))

    with pytest.raises(VerificationUpstreamFailure) as exc_info:
        await client.get_cargo_carried("1234567")

    assert exc_info.value.reason == "upstream returned invalid JSON"


# ==================== Authority / Classification / Cargo ====================

@pytest.mark.asyncio
async def test_authority_reads_first_record():
    """Test the first authority record is used."""
    client = _client(lambda request: httpx.Response(200, json={
        "content": [
            {"carrierAuthority": {
                "commonAuthorityStatus": "A",
                "contractAuthorityStatus": "I",
                "authorizedForProperty": "Y",
            }},
            {"carrierAuthority": {"commonAuthorityStatus": "I"}},
        ]
    }))

    authority = await client.get_authority("1234567")

    assert authority.common_authority_status == "A"
    assert authority.contract_authority_status == "I"
    assert authority.authorized_for_property == "Y"
    assert authority.authorized_for_household_goods == "N"


@pytest.mark.asyncio
async def test_authority_without_records_is_inactive():
    """Test missing authority records read as absent."""
    client = _client(lambda request: httpx.Response(200, json={"content": []}))

    authority = await client.get_authority("1234567")

    assert authority.common_authority_status == ""
    assert authority.contract_authority_status == ""


@pytest.mark.asyncio
async def test_operation_classification_labels():
    """Test classification descriptions are collected in order."""
    client = _client(lambda request: httpx.Response(200, json={
        "content": [
            {"operationClassDesc": "Authorized For Hire"},
            {"operationClassDesc": None},
            {"operationClassDesc": "Private(Property)"},
        ]
    }))

    labels = await client.get_operation_classification("1234567")

    assert labels == ["Authorized For Hire", "Private(Property)"]


@pytest.mark.asyncio
async def test_cargo_carried_mixes_ids_and_descriptions():
    """Test numeric ids, translated descriptions, and dropped unknowns."""
    client = _client(lambda request: httpx.Response(200, json={
        "content": [
            {"id": {"cargoClassId": 1}, "cargoClassDesc": "General Freight"},
            {"cargoClassDesc": "Building Materials"},
            {"cargoClassDesc": "Moon Rocks"},
            {"id": {"cargoClassId": 1}},
            {"id": {"cargoClassId": 31}},
        ]
    }))

    codes = await client.get_cargo_carried("1234567")

    assert codes == [1, 7]
