"""Search criteria for Mondial Relay pickup point lookups."""

from dataclasses import dataclass, replace

DEFAULT_RADIUS_KM = 20
DEFAULT_LIMIT = 20
MAX_RADIUS_KM = 100
MAX_LIMIT = 50


@dataclass(frozen=True)
class RelayPointSearchCriteria:
    """Where to look for relay points and how many to return.

    A search needs an anchor: either a postal code or both GPS
    coordinates. Instances are validated on construction and never
    mutated; the ``with_*`` methods return modified copies.
    """

    postal_code: str | None = None
    city: str | None = None
    country_code: str = "FR"
    latitude: float | None = None
    longitude: float | None = None
    radius: int = DEFAULT_RADIUS_KM
    limit: int = DEFAULT_LIMIT
    delivery_mode: str | None = None
    weight: int | None = None

    def __post_init__(self):
        if not self.has_coordinates() and not self.has_postal_code():
            raise ValueError(
                "Either postal code or GPS coordinates must be provided "
                "for relay point search."
            )

        if self.latitude is not None and not -90 <= self.latitude <= 90:
            raise ValueError(
                f"Invalid latitude: {self.latitude}. Must be between -90 and 90."
            )
        if self.longitude is not None and not -180 <= self.longitude <= 180:
            raise ValueError(
                f"Invalid longitude: {self.longitude}. Must be between -180 and 180."
            )

        if not 1 <= self.radius <= MAX_RADIUS_KM:
            raise ValueError(
                f"Invalid radius: {self.radius} km. Must be between 1 and {MAX_RADIUS_KM}."
            )

        if not 1 <= self.limit <= MAX_LIMIT:
            raise ValueError(
                f"Invalid limit: {self.limit}. Must be between 1 and {MAX_LIMIT}."
            )

        if self.weight is not None and self.weight <= 0:
            raise ValueError(f"Invalid weight: {self.weight} grams. Must be positive.")

    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    def has_postal_code(self) -> bool:
        return bool(self.postal_code)

    @classmethod
    def from_postal_code(
        cls,
        postal_code: str,
        country_code: str = "FR",
        city: str | None = None,
        radius: int = DEFAULT_RADIUS_KM,
        limit: int = DEFAULT_LIMIT,
    ) -> "RelayPointSearchCriteria":
        """Build criteria anchored on a postal code (and optionally a city)."""
        return cls(
            postal_code=postal_code,
            city=city,
            country_code=country_code,
            radius=radius,
            limit=limit,
        )

    @classmethod
    def from_coordinates(
        cls,
        latitude: float,
        longitude: float,
        country_code: str = "FR",
        radius: int = DEFAULT_RADIUS_KM,
        limit: int = DEFAULT_LIMIT,
    ) -> "RelayPointSearchCriteria":
        """Build criteria anchored on GPS coordinates."""
        return cls(
            latitude=latitude,
            longitude=longitude,
            country_code=country_code,
            radius=radius,
            limit=limit,
        )

    def with_radius(self, radius: int) -> "RelayPointSearchCriteria":
        return replace(self, radius=radius)

    def with_limit(self, limit: int) -> "RelayPointSearchCriteria":
        return replace(self, limit=min(limit, MAX_LIMIT))

    def with_delivery_mode(self, delivery_mode: str | None) -> "RelayPointSearchCriteria":
        return replace(self, delivery_mode=delivery_mode)

    def with_weight(self, weight: int | None) -> "RelayPointSearchCriteria":
        return replace(self, weight=weight)
