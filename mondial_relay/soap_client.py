"""Mondial Relay SOAP web services client for relay point search.

The REST API v2 has no relay point search, so searches go through the
legacy ``Web_Services.asmx`` service. Every call carries a ``Security``
field: the uppercase MD5 of the other parameter values followed by the
enseigne's private key.
"""

import logging
from xml.etree import ElementTree as ET

import requests

from mondial_relay.base_client import RelayPointSearchClient
from mondial_relay.criteria import RelayPointSearchCriteria
from mondial_relay.errors import MondialRelayApiError, MondialRelaySoapError
from mondial_relay.models import RelayPoint, RelayPointCollection
from mondial_relay.signing import security_hash

logger = logging.getLogger(__name__)

SERVICE_URL = "https://api.mondialrelay.com/Web_Services.asmx"
DEFAULT_TIMEOUT = 30.0

SOAP_ENV_NS = "http://schemas.xmlsoap.org/soap/envelope/"
WEB_SERVICE_NS = "http://www.mondialrelay.fr/webservice/"

ET.register_namespace("soap", SOAP_ENV_NS)
ET.register_namespace("mr", WEB_SERVICE_NS)

STATUS_OK = 0
STATUS_RELAY_POINT_NOT_FOUND = 24
STATUS_EMPTY_RESPONSE = 99
_COMMUNICATION_ERROR_CODE = 3

CLOSED_DAY = "0000 0000 0000 0000"

# Weekday -> SOAP field holding its opening hours.
_OPENING_HOURS_FIELDS = {
    "monday": "Horaires_Lundi",
    "tuesday": "Horaires_Mardi",
    "wednesday": "Horaires_Mercredi",
    "thursday": "Horaires_Jeudi",
    "friday": "Horaires_Vendredi",
    "saturday": "Horaires_Samedi",
    "sunday": "Horaires_Dimanche",
}


class SoapFault(Exception):
    """A SOAP Fault returned by the web service."""

    def __init__(self, faultcode: str, faultstring: str):
        self.faultcode = faultcode
        self.faultstring = faultstring
        super().__init__(f"{faultcode}: {faultstring}")


def _tag(name: str) -> str:
    return f"{{{WEB_SERVICE_NS}}}{name}"


def _format_time(token: str) -> str:
    return f"{token[0:2]}:{token[2:4]}"


def parse_hours_to_slots(hours: str) -> list[dict[str, str]]:
    """Decode one day of opening hours.

    The web service sends four HHMM tokens: morning open, morning close,
    afternoon open, afternoon close. A half-day is open only when both
    of its tokens are non-zero.

    Args:
        hours: Raw hours string, e.g. "0830 1200 1400 1900".

    Returns:
        Zero, one or two ``{"open": "HH:MM", "close": "HH:MM"}`` slots.
    """
    if not hours or hours == CLOSED_DAY:
        return []

    parts = hours.split(" ")
    if len(parts) < 4:
        return []

    slots = []
    for open_token, close_token in ((parts[0], parts[1]), (parts[2], parts[3])):
        if open_token != "0000" and close_token != "0000":
            slots.append({"open": _format_time(open_token), "close": _format_time(close_token)})
    return slots


def _text(element: ET.Element, name: str) -> str | None:
    child = element.find(_tag(name))
    if child is None:
        return None
    return (child.text or "").strip()


def _parse_decimal(value: str | None) -> float:
    """Parse a comma-decimal coordinate such as "48,856614"."""
    if not value:
        return 0.0
    return float(value.replace(",", "."))


def _parse_opening_hours(element: ET.Element) -> dict[str, list[dict[str, str]]]:
    opening_hours = {}
    for day, field_name in _OPENING_HOURS_FIELDS.items():
        hours_element = element.find(_tag(field_name))
        if hours_element is None:
            continue

        # Hours come either as <string> children or as plain text.
        strings = [(s.text or "").strip() for s in hours_element.findall(_tag("string"))]
        hours = " ".join(strings) if strings else (hours_element.text or "")

        slots = parse_hours_to_slots(hours.strip())
        if slots:
            opening_hours[day] = slots
    return opening_hours


def _parse_relay_point(element: ET.Element) -> RelayPoint:
    distance = _text(element, "Distance")
    photo_url = _text(element, "URL_Photo")
    information = _text(element, "Information")

    return RelayPoint(
        relay_point_id=_text(element, "Num") or "",
        name=_text(element, "LgAdr1") or "",
        street=_text(element, "LgAdr3") or "",
        postal_code=_text(element, "CP") or "",
        city=_text(element, "Ville") or "",
        country_code=_text(element, "Pays") or "",
        latitude=_parse_decimal(_text(element, "Latitude")),
        longitude=_parse_decimal(_text(element, "Longitude")),
        distance_meters=int(distance) if distance else None,
        opening_hours=_parse_opening_hours(element),
        photo_url=photo_url,
        informations=information,
    )


def _status(result: ET.Element) -> int:
    stat = _text(result, "STAT")
    try:
        return int(stat)
    except (TypeError, ValueError):
        return STATUS_EMPTY_RESPONSE


class MondialRelaySoapClient(RelayPointSearchClient):
    """Client for the Mondial Relay SOAP web services (API v1)."""

    def __init__(
        self,
        enseigne: str,
        private_key: str,
        session: requests.Session | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        service_url: str = SERVICE_URL,
    ):
        if not enseigne or not private_key:
            raise ValueError("Enseigne and private key are required.")

        self.enseigne = enseigne
        self.private_key = private_key
        self.timeout = timeout
        self.service_url = service_url
        self.session = session or requests.Session()

    def find_relay_points(self, criteria: RelayPointSearchCriteria) -> RelayPointCollection:
        """Search relay points with WSI4_PointRelais_Recherche."""
        params = {
            "Enseigne": self.enseigne,
            "Pays": criteria.country_code,
            "NumPointRelais": "",
            "Ville": criteria.city or "",
            "CP": criteria.postal_code or "",
            "Latitude": str(criteria.latitude) if criteria.has_coordinates() else "",
            "Longitude": str(criteria.longitude) if criteria.has_coordinates() else "",
            "Taille": "",
            "Poids": str(criteria.weight) if criteria.weight else "",
            "Action": criteria.delivery_mode or "",
            "DelaiEnvoi": "0",
            "RayonRecherche": str(criteria.radius * 1000),
            "TypeActivite": "",
            "NACE": "",
            "NombreResultats": str(criteria.limit),
        }
        params["Security"] = security_hash(params, self.private_key)

        try:
            result = self._call("WSI4_PointRelais_Recherche", params)
            if result is None:
                raise MondialRelaySoapError(STATUS_EMPTY_RESPONSE, "Réponse SOAP vide")

            stat = _status(result)
            if stat != STATUS_OK:
                raise MondialRelaySoapError(stat)

            details = result.findall(f"{_tag('PointsRelais')}/{_tag('PointRelais_Details')}")
            relay_points = [_parse_relay_point(d) for d in details]

            logger.debug(f"Mondial Relay SOAP search returned {len(relay_points)} relay points")
            return RelayPointCollection(relay_points, total_count=len(relay_points))
        except MondialRelayApiError:
            raise
        except SoapFault as exc:
            logger.error(f"Mondial Relay SOAP fault {exc.faultcode}: {exc.faultstring}")
            raise MondialRelayApiError(
                _COMMUNICATION_ERROR_CODE,
                f"Erreur de communication SOAP: {exc.faultstring}",
            ) from exc
        except requests.RequestException as exc:
            logger.error(f"Mondial Relay SOAP transport error: {exc}")
            raise MondialRelayApiError(
                _COMMUNICATION_ERROR_CODE,
                f"Erreur de communication SOAP: {exc}",
            ) from exc
        except Exception as exc:
            logger.error(f"Mondial Relay SOAP error: {exc}")
            raise MondialRelayApiError(
                _COMMUNICATION_ERROR_CODE,
                f"Erreur inattendue: {exc}",
            ) from exc

    def get_relay_point(self, relay_point_id: str, country_code: str) -> RelayPoint | None:
        """Fetch relay point details with WSI2_DetailPointRelais.

        Unknown relay points (STAT 24) and unexpected failures return
        None; other STAT codes raise MondialRelaySoapError.
        """
        params = {
            "Enseigne": self.enseigne,
            "Pays": country_code,
            "NumPointRelais": relay_point_id,
        }
        params["Security"] = security_hash(params, self.private_key)

        try:
            result = self._call("WSI2_DetailPointRelais", params)
            if result is None:
                return None

            stat = _status(result)
            if stat == STATUS_RELAY_POINT_NOT_FOUND:
                return None
            if stat != STATUS_OK:
                raise MondialRelaySoapError(stat)

            return _parse_relay_point(result)
        except MondialRelayApiError:
            raise
        except Exception as exc:
            logger.error(f"Error getting relay point {country_code}/{relay_point_id} details: {exc}")
            return None

    def _call(self, method: str, params: dict) -> ET.Element | None:
        """Invoke a web service method.

        Args:
            method: SOAP operation name (e.g. WSI4_PointRelais_Recherche).
            params: Operation parameters, Security included.

        Returns:
            The ``<method>Result`` element, or None if the response has none.

        Raises:
            SoapFault: When the service answers with a SOAP Fault.
            requests.RequestException: On transport or HTTP errors.
        """
        logged_params = {k: v for k, v in params.items() if k != "Security"}
        logger.debug(f"Mondial Relay SOAP request {method}: {logged_params}")

        resp = self.session.post(
            self.service_url,
            data=_build_envelope(method, params),
            headers={
                "Content-Type": "text/xml; charset=utf-8",
                "SOAPAction": f'"{WEB_SERVICE_NS}{method}"',
            },
            timeout=self.timeout,
        )

        try:
            root = ET.fromstring(resp.content) if resp.content else None
        except ET.ParseError:
            resp.raise_for_status()
            raise

        if root is not None:
            fault = root.find(f".//{{{SOAP_ENV_NS}}}Fault")
            if fault is not None:
                raise SoapFault(
                    (fault.findtext("faultcode") or "").strip(),
                    (fault.findtext("faultstring") or "").strip(),
                )
        resp.raise_for_status()

        if root is None:
            return None
        return root.find(f".//{_tag(method + 'Result')}")


def _build_envelope(method: str, params: dict) -> bytes:
    envelope = ET.Element(f"{{{SOAP_ENV_NS}}}Envelope")
    body = ET.SubElement(envelope, f"{{{SOAP_ENV_NS}}}Body")
    call = ET.SubElement(body, _tag(method))
    for key, value in params.items():
        ET.SubElement(call, _tag(key)).text = value
    return ET.tostring(envelope, encoding="utf-8", xml_declaration=True)
