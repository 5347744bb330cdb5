"""
PlaceBook Backend: Abstract Geocoder Interface
==============================================

What:  Contract for turning a free-text address into coordinates.
How:   Concrete providers inherit from Geocoder and implement
       get_coordinates(). The application factory builds one instance,
       stores it on ``app.state.geocoder`` and closes it at shutdown.
Who:   PlaceService.create_place(), through the get_geocoder dependency.

Implementations:
    - GoogleGeocoder: Google Maps Geocoding API (default)
    - Tests inject a fake geocoder through create_app(geocoder=...)
"""

from abc import ABC, abstractmethod

from fastapi import Request

from placebook.schemas.place import Coordinates


class Geocoder(ABC):
    """
    Abstract interface for address → coordinates lookups.

    Contract:
        - get_coordinates() never returns None
        - An empty address or an address with no match raises GeocodingError
        - Provider/transport failures raise GeocodingServiceError
    """

    @abstractmethod
    async def get_coordinates(self, address: str) -> Coordinates:
        """
        Resolve `address` to the coordinates of its first match.

        Raises:
            GeocodingError: Empty address or no result (→ 422)
            GeocodingServiceError: Provider unreachable or refused (→ 500)
        """
        ...

    async def aclose(self) -> None:
        """Release any network resources. Called once at shutdown."""
        return None


def get_geocoder(request: Request) -> Geocoder:
    """FastAPI dependency returning the application's geocoder."""
    return request.app.state.geocoder
