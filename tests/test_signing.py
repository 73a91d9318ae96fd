import hashlib
import hmac

from mondial_relay.signing import encode_body, security_hash, sign_request


def test_sign_request_matches_hmac_of_concatenated_parts():
    body = {"countryCode": "FR", "postalCode": "75001", "city": "Évry"}

    signature = sign_request("secret", "POST", "/relay-points/search", "1700000000", body)

    expected = hmac.new(
        b"secret",
        ('POST/relay-points/search1700000000{"countryCode":"FR","postalCode":"75001","city":"Évry"}').encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()
    assert signature == expected


def test_sign_request_without_body():
    signature = sign_request("secret", "GET", "/shipments/EXP1/label", "1700000000")

    expected = hmac.new(b"secret", b"GET/shipments/EXP1/label1700000000", hashlib.sha256).hexdigest()
    assert signature == expected


def test_sign_request_changes_with_timestamp():
    first = sign_request("secret", "GET", "/x", "1")
    second = sign_request("secret", "GET", "/x", "2")

    assert first != second


def test_encode_body_is_compact_and_keeps_unicode():
    assert encode_body(None) == ""
    assert encode_body({"a": "é/è", "b": 1}) == '{"a":"é/è","b":1}'


def test_security_hash_is_uppercase_md5_of_values_and_key():
    params = {"Enseigne": "BDTEST13", "Pays": "FR", "NumPointRelais": "066974"}

    result = security_hash(params, "PrivateK")

    assert result == hashlib.md5(b"BDTEST13FR066974PrivateK").hexdigest().upper()
    assert result == result.upper()


def test_security_hash_is_deterministic_and_ignores_security_field():
    params = {"Enseigne": "BDTEST13", "Pays": "FR", "CP": "75001"}

    first = security_hash(params, "PrivateK")
    second = security_hash(dict(params, Security="ANYTHING"), "PrivateK")

    assert first == second


def test_security_hash_changes_with_any_value():
    params = {"Enseigne": "BDTEST13", "Pays": "FR", "CP": "75001"}

    assert security_hash(params, "PrivateK") != security_hash(dict(params, CP="75002"), "PrivateK")
    assert security_hash(params, "PrivateK") != security_hash(params, "OtherKey")
