"""Credential check against the Mondial Relay REST API."""

import logging

import requests

from mondial_relay.criteria import RelayPointSearchCriteria
from mondial_relay.errors import MondialRelayApiError
from mondial_relay.rest_client import MondialRelayApiClient

logger = logging.getLogger(__name__)


def test_connection(
    api_key: str,
    api_secret: str,
    sandbox: bool = False,
    session: requests.Session | None = None,
    base_url: str | None = None,
) -> dict:
    """Check credentials with a one-result relay point search in Paris.

    Args:
        api_key: Mondial Relay API key.
        api_secret: Mondial Relay API secret.
        sandbox: Whether the credentials are sandbox credentials.
        session: Optional requests session to send the probe with.
        base_url: Optional API base URL override.

    Returns:
        ``{"success": True, "data": {...}}`` when the API answered, or
        ``{"success": False, "error": message}`` otherwise.
    """
    try:
        client = MondialRelayApiClient(
            api_key=api_key,
            api_secret=api_secret,
            sandbox=sandbox,
            session=session,
            base_url=base_url,
        )
        criteria = RelayPointSearchCriteria.from_postal_code("75001", "FR", limit=1)
        relay_points = client.find_relay_points(criteria)
    except (MondialRelayApiError, ValueError) as exc:
        logger.error(f"Mondial Relay API connection test failed (sandbox={sandbox}): {exc}")
        return {"success": False, "error": str(exc)}

    return {
        "success": True,
        "data": {
            "message": "Connection successful",
            "sandbox": sandbox,
            "relayPointsFound": len(relay_points),
        },
    }


# Not a pytest test despite the name.
test_connection.__test__ = False
