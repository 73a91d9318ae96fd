"""Relay point models shared by the REST and SOAP clients."""

from collections.abc import Callable, Iterator
from dataclasses import dataclass, field

WEEKDAYS = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)


@dataclass(frozen=True)
class RelayPoint:
    """A Mondial Relay pickup point.

    ``opening_hours`` maps a lowercase weekday name to its ordered time
    slots, each slot a ``{"open": "HH:MM", "close": "HH:MM"}`` dict.
    Days without slots are closed.
    """

    relay_point_id: str
    name: str
    street: str
    postal_code: str
    city: str
    country_code: str
    latitude: float
    longitude: float
    distance_meters: int | None = None
    opening_hours: dict[str, list[dict[str, str]]] = field(default_factory=dict)
    services: tuple[str, ...] = ()
    photo_url: str | None = None
    informations: str | None = None
    is_active: bool = True
    exceptional_closures: tuple[dict[str, str], ...] = ()

    # Opening hours are a dict, so points compare by value but are not hashable.
    __hash__ = None

    def __post_init__(self):
        if not -90 <= self.latitude <= 90:
            raise ValueError(f"Invalid latitude: {self.latitude}. Must be between -90 and 90.")
        if not -180 <= self.longitude <= 180:
            raise ValueError(f"Invalid longitude: {self.longitude}. Must be between -180 and 180.")
        if self.distance_meters is not None and self.distance_meters < 0:
            raise ValueError(f"Invalid distance: {self.distance_meters} m. Must not be negative.")
        unknown_days = set(self.opening_hours) - set(WEEKDAYS)
        if unknown_days:
            raise ValueError(f"Unknown opening hours days: {', '.join(sorted(unknown_days))}")

        # Accept any iterable for the tuple fields.
        object.__setattr__(self, "services", tuple(self.services))
        object.__setattr__(self, "exceptional_closures", tuple(self.exceptional_closures))

    @property
    def full_address(self) -> str:
        return f"{self.street}, {self.postal_code} {self.city}, {self.country_code}"

    @property
    def distance_km(self) -> float | None:
        if self.distance_meters is None:
            return None
        return round(self.distance_meters / 1000, 2)

    @property
    def google_maps_url(self) -> str:
        return (
            "https://www.google.com/maps/search/?api=1"
            f"&query={self.latitude:f},{self.longitude:f}"
        )

    def has_service(self, service: str) -> bool:
        return service in self.services

    def opening_hours_for_day(self, day: str) -> list[dict[str, str]]:
        return self.opening_hours.get(day, [])

    def is_open_on_day(self, day: str) -> bool:
        return bool(self.opening_hours_for_day(day))

    @classmethod
    def from_api_response(cls, data: dict) -> "RelayPoint":
        """Build a relay point from a REST v2 API payload.

        Args:
            data: Relay point object as returned by the API.

        Returns:
            A RelayPoint instance.
        """
        address = data["address"]
        coordinates = data["coordinates"]
        distance = data.get("distance")

        return cls(
            relay_point_id=str(data["id"]),
            name=str(data["name"]),
            street=str(address["street"]),
            postal_code=str(address["postalCode"]),
            city=str(address["city"]),
            country_code=str(address["countryCode"]),
            latitude=float(coordinates["latitude"]),
            longitude=float(coordinates["longitude"]),
            distance_meters=int(distance) if distance is not None else None,
            opening_hours=data.get("openingHours") or {},
            services=data.get("services") or (),
            photo_url=data.get("photoUrl"),
            informations=data.get("informations"),
            is_active=data.get("isActive", True),
            exceptional_closures=data.get("exceptionalClosures") or (),
        )

    def to_dict(self) -> dict:
        return {
            "relayPointId": self.relay_point_id,
            "name": self.name,
            "address": {
                "street": self.street,
                "postalCode": self.postal_code,
                "city": self.city,
                "countryCode": self.country_code,
            },
            "coordinates": {
                "latitude": self.latitude,
                "longitude": self.longitude,
            },
            "distanceMeters": self.distance_meters,
            "distanceKm": self.distance_km,
            "openingHours": {
                day: [dict(slot) for slot in slots]
                for day, slots in self.opening_hours.items()
            },
            "services": list(self.services),
            "photoUrl": self.photo_url,
            "informations": self.informations,
            "isActive": self.is_active,
            "exceptionalClosures": [dict(c) for c in self.exceptional_closures],
            "googleMapsUrl": self.google_maps_url,
        }


class RelayPointCollection:
    """An ordered, read-only list of relay points from one search.

    ``total_count`` is the number of matches the server reported, which
    may exceed the number of points returned. Filtering keeps it as is.
    """

    def __init__(self, relay_points: list[RelayPoint] | None = None, total_count: int = 0):
        self._relay_points = tuple(relay_points or ())
        self._total_count = total_count

    @property
    def total_count(self) -> int:
        return self._total_count

    def __iter__(self) -> Iterator[RelayPoint]:
        return iter(self._relay_points)

    def __len__(self) -> int:
        return len(self._relay_points)

    def __repr__(self) -> str:
        return f"RelayPointCollection({len(self)} points, total_count={self._total_count})"

    def is_empty(self) -> bool:
        return not self._relay_points

    def all(self) -> list[RelayPoint]:
        return list(self._relay_points)

    def first(self) -> RelayPoint | None:
        return self.get(0)

    def get(self, index: int) -> RelayPoint | None:
        if 0 <= index < len(self._relay_points):
            return self._relay_points[index]
        return None

    def find_by_id(self, relay_point_id: str) -> RelayPoint | None:
        for relay_point in self._relay_points:
            if relay_point.relay_point_id == relay_point_id:
                return relay_point
        return None

    def filter(self, predicate: Callable[[RelayPoint], bool]) -> "RelayPointCollection":
        return RelayPointCollection(
            [rp for rp in self._relay_points if predicate(rp)],
            total_count=self._total_count,
        )

    def filter_by_service(self, service: str) -> "RelayPointCollection":
        return self.filter(lambda rp: rp.has_service(service))

    def filter_by_max_distance(self, max_distance_meters: int) -> "RelayPointCollection":
        return self.filter(
            lambda rp: rp.distance_meters is not None
            and rp.distance_meters <= max_distance_meters
        )

    def filter_active(self) -> "RelayPointCollection":
        return self.filter(lambda rp: rp.is_active)

    def map(self, fn: Callable[[RelayPoint], object]) -> list:
        return [fn(rp) for rp in self._relay_points]

    def to_list(self) -> list[dict]:
        return self.map(lambda rp: rp.to_dict())

    @classmethod
    def from_api_response(
        cls,
        response: dict,
        items_key: str = "relayPoints",
        total_key: str = "totalCount",
    ) -> "RelayPointCollection":
        """Build a collection from a REST v2 search response.

        Args:
            response: Decoded JSON response body.
            items_key: Key holding the list of relay point objects.
            total_key: Key holding the server-side total. Falls back to
                the number of parsed points when absent.

        Returns:
            A RelayPointCollection instance.
        """
        relay_points = [
            RelayPoint.from_api_response(item) for item in response.get(items_key) or []
        ]
        total_count = response.get(total_key)
        if total_count is None:
            total_count = len(relay_points)
        return cls(relay_points, total_count=int(total_count))

    @classmethod
    def empty(cls) -> "RelayPointCollection":
        return cls([], total_count=0)
