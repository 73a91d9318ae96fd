"""Abstract capabilities implemented by the Mondial Relay clients."""

from abc import ABC, abstractmethod

from mondial_relay.criteria import RelayPointSearchCriteria
from mondial_relay.models import RelayPoint, RelayPointCollection
from mondial_relay.shipments import LabelResponse, ShipmentRequest, ShipmentResponse


class RelayPointSearchClient(ABC):
    """Base class for clients that can search relay points."""

    @abstractmethod
    def find_relay_points(self, criteria: RelayPointSearchCriteria) -> RelayPointCollection:
        """Search relay points around a postal code or GPS position.

        Args:
            criteria: Search anchor, radius, limit and optional filters.

        Returns:
            Matching relay points, nearest first.

        Raises:
            MondialRelayApiError: When the search fails.
        """

    @abstractmethod
    def get_relay_point(self, relay_point_id: str, country_code: str) -> RelayPoint | None:
        """Fetch a single relay point.

        Args:
            relay_point_id: Mondial Relay point identifier.
            country_code: ISO 3166-1 alpha-2 country code.

        Returns:
            The relay point, or None when it does not exist.
        """


class ShipmentClient(ABC):
    """Base class for clients that can create shipments and labels."""

    @abstractmethod
    def create_shipment(self, request: ShipmentRequest) -> ShipmentResponse:
        """Create an expedition to a relay point.

        Raises:
            MondialRelayApiError: When the shipment is rejected or the
                API cannot be reached.
        """

    @abstractmethod
    def get_label(self, expedition_number: str) -> LabelResponse:
        """Download the shipping label for an expedition.

        Raises:
            MondialRelayApiError: When the label is not available.
        """
