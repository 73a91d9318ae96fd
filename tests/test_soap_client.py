from unittest.mock import MagicMock
from xml.etree import ElementTree as ET

import pytest
import requests

from mondial_relay.criteria import RelayPointSearchCriteria
from mondial_relay.errors import MondialRelayApiError, MondialRelaySoapError
from mondial_relay.signing import security_hash
from mondial_relay.soap_client import (
    WEB_SERVICE_NS,
    MondialRelaySoapClient,
    parse_hours_to_slots,
)

ENSEIGNE = "BDTEST13"
PRIVATE_KEY = "PrivateK"

POINT_DETAILS = """
<STAT>0</STAT>
<Num>066974</Num>
<LgAdr1>TABAC LE CENTRAL          </LgAdr1>
<LgAdr2 />
<LgAdr3>12 RUE DE RIVOLI</LgAdr3>
<CP>75001</CP>
<Ville>PARIS</Ville>
<Pays>FR</Pays>
<Latitude>48,856614</Latitude>
<Longitude>02,352222</Longitude>
<Distance>450</Distance>
<Horaires_Lundi><string>0830</string><string>1200</string><string>1400</string><string>1900</string></Horaires_Lundi>
<Horaires_Mardi><string>0830</string><string>1200</string><string>0000</string><string>0000</string></Horaires_Mardi>
<Horaires_Dimanche><string>0000</string><string>0000</string><string>0000</string><string>0000</string></Horaires_Dimanche>
<URL_Photo>https://www.mondialrelay.com/photo/066974.jpg</URL_Photo>
<Information>Entrée par la cour</Information>
"""


def _soap_response(method: str, result: str | None) -> requests.Response:
    inner = f"<{method}Result>{result}</{method}Result>" if result is not None else ""
    body = f"""<?xml version="1.0" encoding="utf-8"?>
<soap:Envelope xmlns:soap="http://schemas.xmlsoap.org/soap/envelope/">
  <soap:Body>
    <{method}Response xmlns="http://www.mondialrelay.fr/webservice/">{inner}</{method}Response>
  </soap:Body>
</soap:Envelope>"""
    resp = requests.Response()
    resp.status_code = 200
    resp._content = body.encode("utf-8")
    return resp


def _fault_response(faultstring: str) -> requests.Response:
    body = f"""<?xml version="1.0" encoding="utf-8"?>
<soap:Envelope xmlns:soap="http://schemas.xmlsoap.org/soap/envelope/">
  <soap:Body>
    <soap:Fault><faultcode>soap:Server</faultcode><faultstring>{faultstring}</faultstring></soap:Fault>
  </soap:Body>
</soap:Envelope>"""
    resp = requests.Response()
    resp.status_code = 500
    resp._content = body.encode("utf-8")
    return resp


def _client(*responses) -> tuple[MondialRelaySoapClient, MagicMock]:
    session = MagicMock()
    session.post.side_effect = list(responses)
    return MondialRelaySoapClient(ENSEIGNE, PRIVATE_KEY, session=session), session


def _sent_params(session: MagicMock) -> dict:
    envelope = ET.fromstring(session.post.call_args.kwargs["data"])
    call = envelope[0][0]
    return {child.tag.split("}")[1]: child.text or "" for child in call}


def test_parse_hours_closed_day():
    assert parse_hours_to_slots("0000 0000 0000 0000") == []
    assert parse_hours_to_slots("") == []


def test_parse_hours_full_day():
    assert parse_hours_to_slots("0830 1200 1400 1900") == [
        {"open": "08:30", "close": "12:00"},
        {"open": "14:00", "close": "19:00"},
    ]


def test_parse_hours_morning_only():
    assert parse_hours_to_slots("0830 1200 0000 0000") == [{"open": "08:30", "close": "12:00"}]


def test_parse_hours_afternoon_only():
    assert parse_hours_to_slots("0000 0000 1400 1900") == [{"open": "14:00", "close": "19:00"}]


def test_parse_hours_half_open_range_is_ignored():
    assert parse_hours_to_slots("0830 0000 1400 1900") == [{"open": "14:00", "close": "19:00"}]


def test_parse_hours_with_too_few_tokens():
    assert parse_hours_to_slots("0830 1200 1400") == []


def test_constructor_requires_credentials():
    with pytest.raises(ValueError):
        MondialRelaySoapClient("", PRIVATE_KEY)


def test_find_relay_points_parses_points():
    result = f"<STAT>0</STAT><PointsRelais><PointRelais_Details>{POINT_DETAILS}</PointRelais_Details></PointsRelais>"
    client, _ = _client(_soap_response("WSI4_PointRelais_Recherche", result))

    collection = client.find_relay_points(RelayPointSearchCriteria.from_postal_code("75001", "FR"))

    assert len(collection) == 1
    assert collection.total_count == 1
    point = collection.first()
    assert point.relay_point_id == "066974"
    assert point.name == "TABAC LE CENTRAL"
    assert point.street == "12 RUE DE RIVOLI"
    assert point.postal_code == "75001"
    assert point.city == "PARIS"
    assert point.country_code == "FR"
    assert point.latitude == pytest.approx(48.856614)
    assert point.longitude == pytest.approx(2.352222)
    assert point.distance_meters == 450
    assert point.photo_url == "https://www.mondialrelay.com/photo/066974.jpg"
    assert point.informations == "Entrée par la cour"
    assert point.opening_hours == {
        "monday": [{"open": "08:30", "close": "12:00"}, {"open": "14:00", "close": "19:00"}],
        "tuesday": [{"open": "08:30", "close": "12:00"}],
    }
    assert not point.is_open_on_day("sunday")


def test_find_relay_points_with_several_results():
    details = "".join(
        f"<PointRelais_Details>{POINT_DETAILS.replace('066974', num)}</PointRelais_Details>"
        for num in ("000001", "000002", "000003")
    )
    client, _ = _client(
        _soap_response("WSI4_PointRelais_Recherche", f"<STAT>0</STAT><PointsRelais>{details}</PointsRelais>")
    )

    collection = client.find_relay_points(RelayPointSearchCriteria.from_postal_code("75001"))

    assert [rp.relay_point_id for rp in collection] == ["000001", "000002", "000003"]
    assert collection.total_count == 3


def test_find_relay_points_sends_signed_parameters_in_order():
    client, session = _client(_soap_response("WSI4_PointRelais_Recherche", "<STAT>0</STAT>"))
    criteria = RelayPointSearchCriteria.from_postal_code("75001", "FR", city="Paris", radius=5, limit=10)

    collection = client.find_relay_points(criteria.with_weight(1500).with_delivery_mode("24R"))

    assert collection.is_empty()
    params = _sent_params(session)
    assert list(params) == [
        "Enseigne", "Pays", "NumPointRelais", "Ville", "CP", "Latitude", "Longitude",
        "Taille", "Poids", "Action", "DelaiEnvoi", "RayonRecherche", "TypeActivite",
        "NACE", "NombreResultats", "Security",
    ]
    assert params["Enseigne"] == ENSEIGNE
    assert params["Ville"] == "Paris"
    assert params["Poids"] == "1500"
    assert params["Action"] == "24R"
    assert params["RayonRecherche"] == "5000"
    assert params["NombreResultats"] == "10"
    unsigned = {k: v for k, v in params.items() if k != "Security"}
    assert params["Security"] == security_hash(unsigned, PRIVATE_KEY)

    kwargs = session.post.call_args.kwargs
    assert kwargs["headers"]["SOAPAction"] == f'"{WEB_SERVICE_NS}WSI4_PointRelais_Recherche"'
    assert kwargs["timeout"] == 30.0


def test_find_relay_points_status_error():
    client, _ = _client(_soap_response("WSI4_PointRelais_Recherche", "<STAT>97</STAT>"))

    with pytest.raises(MondialRelayApiError) as excinfo:
        client.find_relay_points(RelayPointSearchCriteria.from_postal_code("75001"))

    assert excinfo.value.code == 97
    assert excinfo.value.message == "Clé de sécurité invalide"


@pytest.mark.parametrize("stat, message", [(3, "Compte enseigne non actif"), (81, "Code postal invalide")])
def test_status_codes_use_soap_classification(stat, message):
    client, _ = _client(_soap_response("WSI4_PointRelais_Recherche", f"<STAT>{stat}</STAT>"))

    with pytest.raises(MondialRelaySoapError) as excinfo:
        client.find_relay_points(RelayPointSearchCriteria.from_postal_code("75001"))

    assert excinfo.value.code == stat
    assert excinfo.value.message == message
    assert not excinfo.value.is_temporary


def test_find_relay_points_empty_response():
    client, _ = _client(_soap_response("WSI4_PointRelais_Recherche", None))

    with pytest.raises(MondialRelayApiError) as excinfo:
        client.find_relay_points(RelayPointSearchCriteria.from_postal_code("75001"))

    assert excinfo.value.code == 99
    assert excinfo.value.message == "Réponse SOAP vide"


def test_find_relay_points_soap_fault():
    client, _ = _client(_fault_response("Server was unable to process request."))

    with pytest.raises(MondialRelayApiError) as excinfo:
        client.find_relay_points(RelayPointSearchCriteria.from_postal_code("75001"))

    assert excinfo.value.code == 3
    assert excinfo.value.message == "Erreur de communication SOAP: Server was unable to process request."


def test_find_relay_points_transport_error():
    client, _ = _client(requests.ConnectionError("connection refused"))

    with pytest.raises(MondialRelayApiError) as excinfo:
        client.find_relay_points(RelayPointSearchCriteria.from_postal_code("75001"))

    assert excinfo.value.code == 3
    assert excinfo.value.is_temporary
    assert isinstance(excinfo.value.__cause__, requests.ConnectionError)


def test_get_relay_point_success():
    client, session = _client(_soap_response("WSI2_DetailPointRelais", POINT_DETAILS))

    point = client.get_relay_point("066974", "FR")

    assert point.relay_point_id == "066974"
    assert point.is_open_on_day("monday")
    params = _sent_params(session)
    assert list(params) == ["Enseigne", "Pays", "NumPointRelais", "Security"]
    assert params["Security"] == security_hash(
        {"Enseigne": ENSEIGNE, "Pays": "FR", "NumPointRelais": "066974"}, PRIVATE_KEY
    )


def test_get_relay_point_not_found_returns_none():
    client, _ = _client(_soap_response("WSI2_DetailPointRelais", "<STAT>24</STAT>"))

    assert client.get_relay_point("999999", "FR") is None


def test_get_relay_point_without_result_returns_none():
    client, _ = _client(_soap_response("WSI2_DetailPointRelais", None))

    assert client.get_relay_point("066974", "FR") is None


def test_get_relay_point_other_status_raises():
    client, _ = _client(_soap_response("WSI2_DetailPointRelais", "<STAT>27</STAT>"))

    with pytest.raises(MondialRelayApiError) as excinfo:
        client.get_relay_point("066974", "XX")

    assert excinfo.value.code == 27
    assert excinfo.value.message == "Pays Point Relais invalide"


def test_get_relay_point_swallows_unexpected_errors():
    client, _ = _client(requests.Timeout("read timed out"))

    assert client.get_relay_point("066974", "FR") is None
