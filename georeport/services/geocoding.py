"""
Reverse geocoding against OpenStreetMap's Nominatim API.

One request per call: no cache, no retries. A missing place name or an
error status yields the fallback sentinel; only failed requests raise.
"""
import logging
from typing import Optional

import httpx

from georeport.config import NOMINATIM_REVERSE_URL
from georeport.errors import UpstreamError
from georeport.models import UNKNOWN_LOCATION

logger = logging.getLogger(__name__)


class NominatimGeocoder:
    def __init__(
        self,
        url: str = NOMINATIM_REVERSE_URL,
        user_agent: str = "GeoReportAPI/1.0",
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.url = url
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=timeout, headers={"User-Agent": user_agent}
        )

    async def reverse_geocode(self, latitude: float, longitude: float) -> str:
        params = {"lat": latitude, "lon": longitude, "format": "json"}
        try:
            r = await self._client.get(self.url, params=params)
        except httpx.RequestError as e:
            logger.error(f"Geocoding request failed for ({latitude}, {longitude}): {e}")
            raise UpstreamError("Geocoding service unreachable", cause=e) from e

        if r.status_code != 200:
            logger.warning(
                f"Geocoding HTTP error ({r.status_code}) for coordinates ({latitude}, {longitude})"
            )
            return UNKNOWN_LOCATION

        try:
            data = r.json()
        except ValueError:
            logger.warning(f"Geocoding returned a non-JSON body for ({latitude}, {longitude})")
            return UNKNOWN_LOCATION

        name = data.get("display_name") if isinstance(data, dict) else None
        if not name:
            logger.warning(f"No address found for coordinates ({latitude}, {longitude})")
            return UNKNOWN_LOCATION
        return name

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
