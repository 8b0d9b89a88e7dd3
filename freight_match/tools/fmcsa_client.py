"""
FMCSA Carrier Lookup HTTP Client

Async interface to the FMCSA QCMobile carrier lookups used by verification.
One httpx.AsyncClient per FmcsaClient instance, created by the service
container and closed on app shutdown.

Lookups:
- get_carrier_identity: GET /docket-number/{mc}            -> content[0].carrier
- get_authority:        GET /{dot}/authority                -> content[0].carrierAuthority
- get_operation_classification: GET /{dot}/operation-classification
- get_cargo_carried:    GET /{dot}/cargo-carried           -> cargo codes 1..30

Every request carries the optional webKey query parameter and the configured
timeout. Status and transport errors are mapped onto the app error taxonomy.

Usage:
    client = FmcsaClient(base_url=settings.FMCSA_BASE_URL, api_key=settings.FMCSA_API_KEY)
    identity = await client.get_carrier_identity("123456")
    await client.aclose()
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from freight_match.constants.cargo_types import cargo_code_from_item
from freight_match.core.errors import CarrierNotFound, VerificationUpstreamFailure
from freight_match.core.logging import get_trace_id
from freight_match.constants.constants import TRACE_HEADER_NAME
from freight_match.schemas.carrier import AuthorityInfo, CarrierIdentity, InsuranceInfo

logger = logging.getLogger(__name__)

DOCKET_PATH = "/docket-number/{mc_number}"
AUTHORITY_PATH = "/{dot_number}/authority"
OPERATION_CLASSIFICATION_PATH = "/{dot_number}/operation-classification"
CARGO_CARRIED_PATH = "/{dot_number}/cargo-carried"


# ============================================================================
# Helper Functions
# ============================================================================


def _content_records(payload: Any) -> List[Dict[str, Any]]:
    """
    Extract the record list from a QCMobile response body.

    "content" is a list for most lookups but a bare object for some.
    """
    if not isinstance(payload, dict):
        return []
    content = payload.get("content")
    if isinstance(content, dict):
        return [content]
    if isinstance(content, list):
        return [record for record in content if isinstance(record, dict)]
    return []


def _handle_http_error(lookup: str, e: httpx.HTTPStatusError) -> None:
    """
    Map an upstream HTTP error to VerificationUpstreamFailure.
    Logs full error server-side, exposes only safe details.
    """
    status_code = e.response.status_code

    try:
        error_data = e.response.json()
        error_message = error_data.get("message") or error_data.get("detail") or str(error_data)
    except Exception:
        error_message = e.response.text or f"Status {status_code}"

    logger.warning(f"FMCSA {lookup} lookup error {status_code}: {error_message}")

    if status_code in (401, 403):
        reason = "upstream rejected credentials"
    elif status_code == 429:
        reason = "upstream rate limited"
    elif status_code >= 500:
        reason = "upstream unavailable"
    else:
        reason = f"upstream returned status {status_code}"

    raise VerificationUpstreamFailure(lookup, reason, upstream_status=status_code)


def _handle_connection_error(lookup: str, e: Exception) -> None:
    """Handle connection errors (timeout, network issues, etc.)."""
    logger.error(f"FMCSA {lookup} connection error: {type(e).__name__}: {e}")
    if isinstance(e, httpx.TimeoutException):
        reason = "upstream timed out"
    else:
        reason = f"cannot connect to upstream: {type(e).__name__}"
    raise VerificationUpstreamFailure(lookup, reason)


def _build_identity(carrier: Dict[str, Any]) -> CarrierIdentity:
    return CarrierIdentity(
        dot_number=carrier.get("dotNumber") or "",
        legal_name=carrier.get("legalName") or "",
        dba_name=carrier.get("dbaName"),
        status_code=carrier.get("statusCode") or "",
        allowed_to_operate=carrier.get("allowedToOperate") or "N",
        safety_rating=carrier.get("safetyRating"),
        insurance=InsuranceInfo(
            bipd_on_file=carrier.get("bipdInsuranceOnFile"),
            bipd_required=carrier.get("bipdRequiredAmount"),
            cargo_on_file=carrier.get("cargoInsuranceOnFile"),
        ),
    )


def _build_authority(authority: Dict[str, Any]) -> AuthorityInfo:
    return AuthorityInfo(
        common_authority_status=authority.get("commonAuthorityStatus") or "",
        contract_authority_status=authority.get("contractAuthorityStatus") or "",
        authorized_for_property=authority.get("authorizedForProperty") or "N",
        authorized_for_passenger=authority.get("authorizedForPassenger") or "N",
        authorized_for_household_goods=authority.get("authorizedForHouseholdGoods") or "N",
    )


# ============================================================================
# Client
# ============================================================================


class FmcsaClient:
    """
    Async FMCSA lookup client with connection pooling.

    Args:
        base_url: QCMobile carriers base URL
        api_key: webKey credential (omitted from requests when empty)
        timeout: Per-request timeout in seconds
        max_connections: Pool size
        max_keepalive: Keep-alive pool size
        transport: Optional httpx transport (tests pass httpx.MockTransport)
    """

    def __init__(
        self,
        base_url: str,
        api_key: str = "",
        timeout: float = 10.0,
        max_connections: int = 50,
        max_keepalive: int = 10,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout

        limits = httpx.Limits(
            max_connections=max_connections,
            max_keepalive_connections=max_keepalive
        )
        self._client = httpx.AsyncClient(
            timeout=timeout,
            limits=limits,
            follow_redirects=False,
            transport=transport
        )
        logger.info(f"FMCSA client configured with URL: {self.base_url}")

    @property
    def is_closed(self) -> bool:
        return self._client.is_closed

    async def aclose(self) -> None:
        """Close the underlying httpx.AsyncClient gracefully."""
        if not self._client.is_closed:
            await self._client.aclose()
            logger.info("Closed FMCSA httpx.AsyncClient")

    def _build_headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        trace_id = get_trace_id()
        if trace_id:
            headers[TRACE_HEADER_NAME] = trace_id
        return headers

    def _build_params(self) -> Dict[str, str]:
        return {"webKey": self.api_key} if self.api_key else {}

    async def _get_json(self, lookup: str, path: str) -> Any:
        """
        GET a lookup path and decode the JSON body.

        Raises:
            VerificationUpstreamFailure: status, transport or decode error
        """
        url = f"{self.base_url}{path}"
        logger.debug(f"FMCSA {lookup} lookup: {path}")

        try:
            response = await self._client.get(
                url,
                params=self._build_params(),
                headers=self._build_headers()
            )
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            _handle_http_error(lookup, e)
        except (httpx.TimeoutException, httpx.TransportError) as e:
            _handle_connection_error(lookup, e)
        except ValueError as e:
            logger.error(f"FMCSA {lookup} returned a non-JSON body: {e}")
            raise VerificationUpstreamFailure(lookup, "upstream returned invalid JSON")

    # ========================================================================
    # Lookups
    # ========================================================================

    async def get_carrier_identity(self, mc_number: str) -> CarrierIdentity:
        """
        Identity lookup by docket (MC) number.

        Raises:
            CarrierNotFound: upstream has no carrier for this MC number
            VerificationUpstreamFailure: any other upstream failure
        """
        try:
            payload = await self._get_json("identity", DOCKET_PATH.format(mc_number=mc_number))
        except VerificationUpstreamFailure as e:
            if e.upstream_status == 404:
                raise CarrierNotFound(mc_number)
            raise

        records = _content_records(payload)
        carrier = records[0].get("carrier") if records else None
        if not isinstance(carrier, dict) or not carrier.get("dotNumber"):
            logger.info(f"FMCSA has no carrier for MC {mc_number}")
            raise CarrierNotFound(mc_number)

        identity = _build_identity(carrier)
        logger.info(f"Retrieved FMCSA identity for MC {mc_number}: DOT {identity.dot_number}")
        return identity

    async def get_authority(self, dot_number: str) -> AuthorityInfo:
        """Operating authority; the first authority record is authoritative."""
        payload = await self._get_json("authority", AUTHORITY_PATH.format(dot_number=dot_number))

        for record in _content_records(payload):
            authority = record.get("carrierAuthority")
            if isinstance(authority, dict):
                return _build_authority(authority)

        logger.info(f"No authority records for DOT {dot_number}")
        return AuthorityInfo()

    async def get_operation_classification(self, dot_number: str) -> List[str]:
        """Operation classification descriptions, e.g. ["Authorized For Hire"]."""
        payload = await self._get_json(
            "operation_classification",
            OPERATION_CLASSIFICATION_PATH.format(dot_number=dot_number)
        )
        return [
            str(record["operationClassDesc"])
            for record in _content_records(payload)
            if record.get("operationClassDesc")
        ]

    async def get_cargo_carried(self, dot_number: str) -> List[int]:
        """
        Cargo codes the carrier is authorized to haul.

        Items carry either a numeric id.cargoClassId or a cargoClassDesc that
        is translated through the cargo table; untranslatable items are dropped.
        """
        payload = await self._get_json("cargo_carried", CARGO_CARRIED_PATH.format(dot_number=dot_number))

        codes: List[int] = []
        for record in _content_records(payload):
            code = cargo_code_from_item(record)
            if code is not None and code not in codes:
                codes.append(code)

        logger.info(f"DOT {dot_number} hauls cargo codes {codes}")
        return codes
