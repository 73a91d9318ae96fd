#!/usr/bin/env python3
"""CLI entry point for searching relay points and fetching labels."""

import argparse
import logging
import sys

from mondial_relay.base_client import RelayPointSearchClient
from mondial_relay.config import Settings
from mondial_relay.connection import test_connection
from mondial_relay.criteria import RelayPointSearchCriteria
from mondial_relay.errors import MondialRelayApiError
from mondial_relay.models import WEEKDAYS, RelayPoint, RelayPointCollection
from mondial_relay.rest_client import MondialRelayApiClient
from mondial_relay.soap_client import MondialRelaySoapClient


def _print_relay_point(index, relay_point: RelayPoint):
    """Print one relay point to stdout."""
    print(f"  {index}. {relay_point.name} [{relay_point.relay_point_id}]")
    print(f"    Address:  {relay_point.full_address}")
    if relay_point.distance_km is not None:
        print(f"    Distance: {relay_point.distance_km:.2f} km")
    for day in WEEKDAYS:
        slots = relay_point.opening_hours_for_day(day)
        if slots:
            hours = ", ".join(f"{s['open']}-{s['close']}" for s in slots)
            print(f"    {day.capitalize():<10}{hours}")
    print(f"    Map:      {relay_point.google_maps_url}")
    print()


def _print_collection(collection: RelayPointCollection):
    """Print search results to stdout."""
    print(f"\n{'=' * 70}")
    print("  MONDIAL RELAY POINTS")
    print(f"  {len(collection)} shown | {collection.total_count} found")
    print(f"{'=' * 70}\n")

    for i, relay_point in enumerate(collection, 1):
        _print_relay_point(i, relay_point)


def _settings_from_args(args) -> Settings:
    """Overlay CLI credentials on the environment settings."""
    env = Settings.from_env()
    return Settings(
        api_key=args.api_key or env.api_key,
        api_secret=args.api_secret or env.api_secret,
        sandbox=args.sandbox or env.sandbox,
        api_base_url=env.api_base_url,
        enseigne=args.enseigne or env.enseigne,
        private_key=args.private_key or env.private_key,
        timeout=env.timeout,
    )


def _build_rest_client(settings: Settings) -> MondialRelayApiClient:
    if not settings.api_key or not settings.api_secret:
        raise ValueError(
            "MONDIAL_RELAY_API_KEY and MONDIAL_RELAY_API_SECRET must be set "
            "either as arguments or in a .env file."
        )
    return MondialRelayApiClient(
        api_key=settings.api_key,
        api_secret=settings.api_secret,
        sandbox=settings.sandbox,
        timeout=settings.timeout,
        base_url=settings.api_base_url,
    )


def _build_search_client(args, settings: Settings) -> RelayPointSearchClient:
    """Instantiate the client for the chosen search API.

    Args:
        args: Parsed argparse namespace.
        settings: Credentials to build the client with.

    Returns:
        A RelayPointSearchClient for the SOAP or REST API.
    """
    if args.api == "rest":
        return _build_rest_client(settings)

    if not settings.enseigne or not settings.private_key:
        raise ValueError(
            "MONDIAL_RELAY_ENSEIGNE and MONDIAL_RELAY_PRIVATE_KEY must be set "
            "either as arguments or in a .env file."
        )
    return MondialRelaySoapClient(
        enseigne=settings.enseigne,
        private_key=settings.private_key,
        timeout=settings.timeout,
    )


def _criteria_from_args(args) -> RelayPointSearchCriteria:
    criteria = RelayPointSearchCriteria(
        postal_code=args.postal_code,
        city=args.city,
        country_code=args.country,
        latitude=args.latitude,
        longitude=args.longitude,
        radius=args.radius,
        limit=args.limit,
    )
    if args.delivery_mode:
        criteria = criteria.with_delivery_mode(args.delivery_mode)
    if args.weight:
        criteria = criteria.with_weight(args.weight)
    return criteria


def _search(args, settings: Settings):
    client = _build_search_client(args, settings)
    criteria = _criteria_from_args(args)

    print("Searching Mondial Relay points...")
    collection = client.find_relay_points(criteria)

    if args.max_distance is not None:
        collection = collection.filter_by_max_distance(args.max_distance)
    if args.service:
        collection = collection.filter_by_service(args.service)

    if collection.is_empty():
        print("No relay points found.")
        return
    _print_collection(collection)


def _detail(args, settings: Settings):
    client = _build_search_client(args, settings)
    relay_point = client.get_relay_point(args.relay_point_id, args.country)
    if relay_point is None:
        print(f"Relay point {args.country}/{args.relay_point_id} not found.")
        sys.exit(1)
    print()
    _print_relay_point(1, relay_point)


def _label(args, settings: Settings):
    client = _build_rest_client(settings)
    label = client.get_label(args.expedition_number)
    path = label.save_to_file(args.output or label.suggested_filename())
    print(f"Label ({label.format}, {label.human_readable_size()}) saved to {path}")


def _test_connection(args, settings: Settings):
    result = test_connection(
        settings.api_key,
        settings.api_secret,
        sandbox=settings.sandbox,
        base_url=settings.api_base_url,
    )
    if not result["success"]:
        print(f"Connection failed: {result['error']}", file=sys.stderr)
        sys.exit(1)
    data = result["data"]
    print(f"{data['message']} (sandbox: {data['sandbox']}, relay points found: {data['relayPointsFound']})")


def _add_search_api_argument(parser):
    parser.add_argument(
        "--api",
        default="soap",
        choices=["soap", "rest"],
        help='API used for relay point lookups (default: "soap").',
    )


def main():
    parser = argparse.ArgumentParser(
        description="Search Mondial Relay pickup points and download shipping labels.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")

    # Shared credential arguments.
    rest_group = parser.add_argument_group("REST API options")
    rest_group.add_argument(
        "--api-key",
        help="REST API key (overrides MONDIAL_RELAY_API_KEY env var).",
    )
    rest_group.add_argument(
        "--api-secret",
        help="REST API secret (overrides MONDIAL_RELAY_API_SECRET env var).",
    )
    rest_group.add_argument(
        "--sandbox",
        action="store_true",
        help="Use sandbox credentials (overrides MONDIAL_RELAY_SANDBOX env var).",
    )

    soap_group = parser.add_argument_group("SOAP API options")
    soap_group.add_argument(
        "--enseigne",
        help="Enseigne code (overrides MONDIAL_RELAY_ENSEIGNE env var).",
    )
    soap_group.add_argument(
        "--private-key",
        help="Private key (overrides MONDIAL_RELAY_PRIVATE_KEY env var).",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    search_parser = subparsers.add_parser("search", help="Search relay points.")
    _add_search_api_argument(search_parser)
    search_parser.add_argument("--postal-code", help="Postal code to search around.")
    search_parser.add_argument("--city", help="City name, refines a postal code search.")
    search_parser.add_argument("--latitude", type=float, help="Latitude to search around.")
    search_parser.add_argument("--longitude", type=float, help="Longitude to search around.")
    search_parser.add_argument("--country", default="FR", help='ISO country code (default: "FR").')
    search_parser.add_argument("--radius", type=int, default=20, help="Search radius in km (default: 20).")
    search_parser.add_argument("--limit", type=int, default=20, help="Maximum results (default: 20).")
    search_parser.add_argument("--delivery-mode", help='Delivery mode, e.g. "24R".')
    search_parser.add_argument("--weight", type=int, help="Parcel weight in grams.")
    search_parser.add_argument(
        "--max-distance",
        type=int,
        metavar="METERS",
        help="Only show relay points within this distance.",
    )
    search_parser.add_argument("--service", help="Only show relay points offering this service.")
    search_parser.set_defaults(handler=_search)

    detail_parser = subparsers.add_parser("detail", help="Show one relay point.")
    _add_search_api_argument(detail_parser)
    detail_parser.add_argument("relay_point_id", help="Relay point identifier.")
    detail_parser.add_argument("--country", default="FR", help='ISO country code (default: "FR").')
    detail_parser.set_defaults(handler=_detail)

    label_parser = subparsers.add_parser("label", help="Download a shipping label.")
    label_parser.add_argument("expedition_number", help="Expedition number.")
    label_parser.add_argument("--output", metavar="FILE", help="Where to save the label.")
    label_parser.set_defaults(handler=_label)

    connection_parser = subparsers.add_parser(
        "test-connection", help="Check the REST API credentials."
    )
    connection_parser.set_defaults(handler=_test_connection)

    args = parser.parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        args.handler(args, _settings_from_args(args))
    except (MondialRelayApiError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
