"""Mondial Relay REST API v2 client for relay points, shipments and labels."""

import logging
import re
import time

import requests

from mondial_relay.base_client import RelayPointSearchClient, ShipmentClient
from mondial_relay.criteria import RelayPointSearchCriteria
from mondial_relay.errors import MondialRelayApiError, MondialRelayAuthenticationError
from mondial_relay.models import RelayPoint, RelayPointCollection
from mondial_relay.shipments import LabelResponse, ShipmentRequest, ShipmentResponse
from mondial_relay.signing import encode_body, sign_request

logger = logging.getLogger(__name__)

# Sandbox and production share one host; the credentials select the
# environment (test accounts such as TTMRSDBX).
API_BASE_URL_PRODUCTION = "https://api.mondialrelay.com/v2"
API_BASE_URL_SANDBOX = "https://api.mondialrelay.com/v2"

DEFAULT_TIMEOUT = 30.0
MAX_RETRY_ATTEMPTS = 3
RETRY_DELAY_SECONDS = 1.0
USER_AGENT = "mondial-relay-client/1.0"
DEFAULT_LABEL_FORMAT = "A4"

# Fallback error codes for HTTP errors without a Mondial Relay error body.
_HTTP_STATUS_ERROR_CODES = {
    400: 2,
    404: 80,
    429: 3,
}
_GENERIC_ERROR_CODE = 3
_LOOKUP_ERROR_CODE = 80

_LABEL_FORMAT_RE = re.compile(r"format[=_]([A-Z0-9x]+)", re.IGNORECASE)

# Failures a response can produce once it reaches the model layer.
_PARSE_ERRORS = (ValueError, KeyError, TypeError)


class MondialRelayApiClient(RelayPointSearchClient, ShipmentClient):
    """Client for the Mondial Relay REST API v2."""

    def __init__(
        self,
        api_key: str,
        api_secret: str,
        sandbox: bool = False,
        session: requests.Session | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        enable_retry: bool = True,
        base_url: str | None = None,
    ):
        if not api_key or not api_secret:
            raise ValueError("API key and secret are required.")

        self.api_key = api_key
        self.api_secret = api_secret
        self.sandbox = sandbox
        self.timeout = timeout
        self.enable_retry = enable_retry

        default_url = API_BASE_URL_SANDBOX if sandbox else API_BASE_URL_PRODUCTION
        self.base_url = (base_url or default_url).rstrip("/")
        self.session = session or requests.Session()

    def find_relay_points(self, criteria: RelayPointSearchCriteria) -> RelayPointCollection:
        body = _build_search_body(criteria)

        try:
            data = self._request("POST", "/relay-points/search", body).json()
            return RelayPointCollection.from_api_response(data)
        except MondialRelayAuthenticationError:
            raise
        except (MondialRelayApiError, *_PARSE_ERRORS) as exc:
            logger.error(f"Failed to search relay points {body}: {exc}")
            raise _wrap(
                exc, "Échec de la recherche des points relais.", {"criteria": body}
            ) from exc

    def get_relay_point(self, relay_point_id: str, country_code: str) -> RelayPoint | None:
        endpoint = f"/relay-points/{country_code}/{relay_point_id}"
        context = {"relayPointId": relay_point_id, "countryCode": country_code}

        try:
            data = self._request("GET", endpoint).json()
            return RelayPoint.from_api_response(data)
        except MondialRelayAuthenticationError:
            raise
        except MondialRelayApiError as exc:
            logger.warning(f"Relay point {country_code}/{relay_point_id} lookup failed: {exc}")
            if exc.context.get("httpStatus") == 404:
                return None
            raise MondialRelayApiError(
                _LOOKUP_ERROR_CODE, context={**context, "carrierCode": exc.code}
            ) from exc
        except _PARSE_ERRORS as exc:
            logger.warning(f"Invalid relay point payload for {country_code}/{relay_point_id}: {exc}")
            raise MondialRelayApiError(_LOOKUP_ERROR_CODE, context=context) from exc

    def create_shipment(self, request: ShipmentRequest) -> ShipmentResponse:
        try:
            data = self._request("POST", "/shipments", request.to_payload()).json()
            return ShipmentResponse.from_api_response(data)
        except MondialRelayAuthenticationError:
            raise
        except (MondialRelayApiError, *_PARSE_ERRORS) as exc:
            logger.error(f"Failed to create shipment for order {request.order_reference}: {exc}")
            raise _wrap(
                exc,
                "Échec de la création de l'expédition.",
                {"orderReference": request.order_reference},
            ) from exc

    def get_label(self, expedition_number: str) -> LabelResponse:
        try:
            resp = self._request("GET", f"/shipments/{expedition_number}/label")
        except MondialRelayAuthenticationError:
            raise
        except MondialRelayApiError as exc:
            logger.error(f"Failed to retrieve label for expedition {expedition_number}: {exc}")
            raise _wrap(
                exc,
                "Échec de la récupération de l'étiquette.",
                {"expeditionNumber": expedition_number},
            ) from exc

        content_type = resp.headers.get("Content-Type") or "application/pdf"
        return LabelResponse.from_api_response(
            content=resp.content,
            expedition_number=expedition_number,
            content_type=content_type.split(";")[0].strip(),
            format=_extract_label_format(resp.headers.get("Content-Disposition", "")),
        )

    def _request(
        self,
        method: str,
        endpoint: str,
        body: dict | None = None,
        params: dict | None = None,
    ) -> requests.Response:
        """Make a signed request, retrying transport failures.

        Args:
            method: HTTP method.
            endpoint: API endpoint path (e.g. /shipments).
            body: JSON body payload.
            params: Query parameters.

        Returns:
            The response, whose status is below 400.

        Raises:
            MondialRelayAuthenticationError: On HTTP 401 or 403.
            MondialRelayApiError: On any other HTTP error, or when every
                attempt failed at the transport level.
        """
        url = f"{self.base_url}{endpoint}"
        data = encode_body(body).encode("utf-8") if body is not None else None
        max_attempts = MAX_RETRY_ATTEMPTS if self.enable_retry else 1
        last_error = None

        for attempt in range(1, max_attempts + 1):
            logger.debug(f"Mondial Relay API request {method} {url} (attempt {attempt}/{max_attempts})")
            try:
                resp = self.session.request(
                    method,
                    url,
                    params=params,
                    data=data,
                    headers=self._build_headers(method, endpoint, body),
                    timeout=self.timeout,
                )
            except (requests.ConnectionError, requests.Timeout) as exc:
                last_error = exc
                logger.warning(
                    f"Mondial Relay API transport error on {method} {url} "
                    f"(attempt {attempt}/{max_attempts}): {exc}"
                )
                if attempt < max_attempts:
                    self._sleep(attempt)
                continue

            logger.debug(f"Mondial Relay API response {resp.status_code} (attempt {attempt})")
            _check_response(resp)
            return resp

        if max_attempts == 1:
            message = "Erreur de connexion à l'API Mondial Relay."
        else:
            message = f"Service temporairement indisponible après {max_attempts} tentatives."
        raise MondialRelayApiError(
            _GENERIC_ERROR_CODE,
            message,
            context={"attempts": max_attempts, "method": method, "endpoint": endpoint},
        ) from last_error

    def _build_headers(self, method: str, endpoint: str, body: dict | None) -> dict:
        timestamp = str(int(time.time()))
        return {
            "Authorization": f"Bearer {self.api_key}",
            "X-MR-Signature": sign_request(self.api_secret, method, endpoint, timestamp, body),
            "X-MR-Timestamp": timestamp,
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": USER_AGENT,
        }

    @staticmethod
    def _sleep(attempt: int) -> None:
        """Back off exponentially: 1s after the first attempt, then 2s, ..."""
        time.sleep(RETRY_DELAY_SECONDS * 2 ** (attempt - 1))


def _build_search_body(criteria: RelayPointSearchCriteria) -> dict:
    """Build the POST /relay-points/search body.

    Coordinates take priority over the postal code when both are set.
    """
    body: dict = {
        "countryCode": criteria.country_code,
        "radius": criteria.radius,
        "limit": criteria.limit,
    }
    if criteria.has_coordinates():
        body["latitude"] = criteria.latitude
        body["longitude"] = criteria.longitude
    elif criteria.has_postal_code():
        body["postalCode"] = criteria.postal_code
        if criteria.city is not None:
            body["city"] = criteria.city

    if criteria.delivery_mode is not None:
        body["deliveryMode"] = criteria.delivery_mode
    if criteria.weight is not None:
        body["weight"] = criteria.weight
    return body


def _check_response(resp: requests.Response) -> None:
    """Raise the matching MondialRelayApiError for an error response."""
    status = resp.status_code
    if status in (401, 403):
        raise MondialRelayAuthenticationError(context={"statusCode": status})
    if status < 400:
        return

    try:
        data = resp.json()
    except ValueError:
        data = None

    if isinstance(data, dict) and data.get("errorCode") is not None:
        try:
            code = int(data["errorCode"])
        except (TypeError, ValueError):
            code = None
        if code is not None:
            raise MondialRelayApiError(
                code, data.get("errorMessage"), context={**data, "httpStatus": status}
            )

    raise MondialRelayApiError(
        _HTTP_STATUS_ERROR_CODES.get(status, _GENERIC_ERROR_CODE),
        context={"httpStatus": status},
    )


def _wrap(exc: Exception, message: str, context: dict) -> MondialRelayApiError:
    """Re-raise a failed operation under its own message, keeping the code."""
    if isinstance(exc, MondialRelayApiError):
        return MondialRelayApiError(exc.code, message, {**context, **exc.context})
    return MondialRelayApiError(_GENERIC_ERROR_CODE, message, context)


def _extract_label_format(disposition: str) -> str:
    """Read the label format from a Content-Disposition header.

    Falls back to A4 when the header does not advertise one.
    """
    match = _LABEL_FORMAT_RE.search(disposition or "")
    if match:
        return match.group(1).upper()
    return DEFAULT_LABEL_FORMAT
