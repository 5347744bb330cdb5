"""
PlaceBook Backend: Google Maps Geocoder
=======================================

What:  Geocoder implementation backed by the Google Maps Geocoding API.
How:   One long-lived httpx.AsyncClient per application; each lookup is a
       single GET ``<geocoding_url>?address=<address>&key=<api key>``.
When:  Once per place creation, after field validation and before the
       database transaction.

Response handling:
    status "OK"             → results[0].geometry.location
    status "ZERO_RESULTS"   → GeocodingError (422)
    any other status        → GeocodingServiceError (500), e.g. REQUEST_DENIED
    HTTP error / transport  → GeocodingServiceError (500)

Failed lookups are not retried.
"""

import logging
import time
from typing import Optional

import httpx

from placebook.config import settings
from placebook.exceptions import GeocodingError, GeocodingServiceError
from placebook.schemas.place import Coordinates
from placebook.services.geocoding import Geocoder

logger = logging.getLogger(__name__)


class GoogleGeocoder(Geocoder):
    """
    Google Maps Geocoding API client.

    Args:
        api_key:   Overrides settings.google_api_key
        base_url:  Overrides settings.geocoding_url
        client:    Pre-built httpx.AsyncClient (tests pass one backed by
                   httpx.MockTransport); otherwise one is created here
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.google_api_key
        self.base_url = base_url or settings.geocoding_url
        self._client = client or httpx.AsyncClient(timeout=settings.geocoding_timeout)

        if not self.api_key:
            logger.warning("GoogleGeocoder initialized without an API key")

    async def get_coordinates(self, address: str) -> Coordinates:
        if not address or not address.strip():
            raise GeocodingError(context={"reason": "empty_address"})

        start_time = time.perf_counter()
        try:
            response = await self._client.get(
                self.base_url,
                params={"address": address, "key": self.api_key},
            )
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            logger.error("Geocoding API returned HTTP %d", e.response.status_code)
            raise GeocodingServiceError(
                context={"http_status": e.response.status_code},
            )
        except (httpx.HTTPError, ValueError) as e:
            # ValueError: body was not JSON
            logger.error("Geocoding request failed: %s", str(e))
            raise GeocodingServiceError(
                context={"error_type": type(e).__name__},
            )

        duration_ms = (time.perf_counter() - start_time) * 1000
        status = data.get("status") if isinstance(data, dict) else None
        results = data.get("results") if isinstance(data, dict) else None

        if status == "ZERO_RESULTS" or (status == "OK" and not results):
            logger.info("Geocoding found no match (%.0fms)", duration_ms)
            raise GeocodingError(context={"status": status})

        if status != "OK":
            logger.error(
                "Geocoding API refused the request: status=%s message=%s",
                status,
                data.get("error_message") if isinstance(data, dict) else None,
            )
            raise GeocodingServiceError(context={"status": status})

        try:
            location = results[0]["geometry"]["location"]
            coordinates = Coordinates(lat=location["lat"], lng=location["lng"])
        except (KeyError, IndexError, TypeError, ValueError) as e:
            logger.error("Unexpected geocoding payload: %s", str(e))
            raise GeocodingServiceError(context={"error_type": type(e).__name__})

        logger.info(
            "Geocoded address in %.0fms: (%.5f, %.5f)",
            duration_ms,
            coordinates.lat,
            coordinates.lng,
        )
        return coordinates

    async def aclose(self) -> None:
        await self._client.aclose()
