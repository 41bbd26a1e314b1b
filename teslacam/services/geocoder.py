# teslacam/services/geocoder.py
"""
Reverse geocoding — turns an event's coordinates into a street and city.

Best-effort enrichment: a failed lookup is logged and returns None, the event
is still ingested with whatever the recorder wrote in event.json.

Endpoint: GET {GEOCODING_URL}?format=jsonv2&lat=..&lon=..&zoom=18&addressdetails=1
Expects:  {"address": {"road": .., "neighbourhood": .., "suburb": .., "city"|"town"|"village": ..}}
"""

from dataclasses import dataclass
from typing import Optional

import httpx

from teslacam.utils.json_parser import get_nested
from teslacam.utils.logger import get_logger

logger = get_logger(__name__)

_STREET_KEYS = ("road", "neighbourhood", "suburb")
_CITY_KEYS = ("city", "town", "village")


@dataclass
class GeocodeResult:
    street: str = ""
    city: str = ""


class NullGeocoder:
    """Used when reverse geocoding is disabled."""

    async def reverse(self, latitude: float, longitude: float) -> Optional[GeocodeResult]:
        return None

    async def aclose(self):
        pass


class NominatimGeocoder:
    """
    Nominatim-compatible reverse lookup over one long-lived HTTP client.
    Nominatim's usage policy requires an identifying User-Agent.
    """

    def __init__(self, url: str, user_agent: str, timeout: float = 10.0,
                 client: Optional[httpx.AsyncClient] = None):
        self.url = url
        self._client = client or httpx.AsyncClient(
            timeout=timeout,
            headers={"User-Agent": user_agent},
        )

    async def reverse(self, latitude: float, longitude: float) -> Optional[GeocodeResult]:
        params = {
            "format": "jsonv2",
            "lat": latitude,
            "lon": longitude,
            "zoom": 18,
            "addressdetails": 1,
        }
        try:
            response = await self._client.get(self.url, params=params)
            if response.status_code != 200:
                logger.warning(f"[GEO] Lookup ({latitude}, {longitude}) returned HTTP {response.status_code}")
                return None
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"[GEO] Lookup ({latitude}, {longitude}) failed: {e}")
            return None

        address = get_nested(data, "address", default={}) if isinstance(data, dict) else {}
        if not isinstance(address, dict) or not address:
            logger.debug(f"[GEO] No address for ({latitude}, {longitude})")
            return None

        result = GeocodeResult(
            street=_first(address, _STREET_KEYS),
            city=_first(address, _CITY_KEYS),
        )
        logger.debug(f"[GEO] ({latitude}, {longitude}) → street='{result.street}' city='{result.city}'")
        return result

    async def aclose(self):
        await self._client.aclose()


def _first(address: dict, keys: tuple) -> str:
    for key in keys:
        value = address.get(key)
        if value:
            return str(value)
    return ""


def build_geocoder(settings) -> "NullGeocoder | NominatimGeocoder":
    if not settings.REVERSE_GEOCODING_ENABLED:
        return NullGeocoder()
    logger.info(f"[GEO] Reverse geocoding enabled via {settings.GEOCODING_URL}")
    return NominatimGeocoder(
        url=settings.GEOCODING_URL,
        user_agent=settings.GEOCODING_USER_AGENT,
        timeout=settings.GEOCODING_TIMEOUT_SECONDS,
    )
