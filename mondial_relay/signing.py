"""Request signing for the Mondial Relay REST and SOAP APIs."""

import hashlib
import hmac
import json


def encode_body(body: dict | None) -> str:
    """Serialize a JSON body exactly as it is signed and sent."""
    if body is None:
        return ""
    return json.dumps(body, ensure_ascii=False, separators=(",", ":"))


def sign_request(
    api_secret: str,
    method: str,
    path: str,
    timestamp: str,
    body: dict | None = None,
) -> str:
    """Generate the HMAC-SHA256 signature for a REST v2 request.

    Args:
        api_secret: Mondial Relay API secret.
        method: HTTP method (e.g. POST).
        path: API endpoint path (e.g. /relay-points/search).
        timestamp: Unix timestamp in seconds, as sent in X-MR-Timestamp.
        body: JSON body payload, or None for requests without a body.

    Returns:
        Hex-encoded HMAC-SHA256 signature string.
    """
    base_string = f"{method}{path}{timestamp}{encode_body(body)}"
    return hmac.new(
        api_secret.encode("utf-8"),
        base_string.encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()


def security_hash(params: dict, private_key: str) -> str:
    """Generate the MD5 security key for a SOAP web service call.

    Values are concatenated in the order the parameters were inserted,
    so callers must build ``params`` in the field order the web service
    documents.

    Args:
        params: SOAP call parameters (a ``Security`` entry is ignored).
        private_key: Mondial Relay private key for the enseigne.

    Returns:
        Hex-encoded MD5 digest string (uppercase).
    """
    base_string = "".join(str(v) for k, v in params.items() if k != "Security")
    return hashlib.md5((base_string + private_key).encode("utf-8")).hexdigest().upper()
