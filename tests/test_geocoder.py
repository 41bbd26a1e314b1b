"""Unit tests for reverse geocoding."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import httpx
import pytest
from types import SimpleNamespace
from teslacam.services.geocoder import NominatimGeocoder, NullGeocoder, GeocodeResult, build_geocoder

URL = "https://geo.example/reverse"


def geocoder_with(handler):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler), headers={"User-Agent": "test-agent"})
    return NominatimGeocoder(URL, user_agent="test-agent", client=client)


class TestNominatimGeocoder:
    @pytest.mark.asyncio
    async def test_road_and_city(self):
        seen = {}

        def handler(request):
            seen["params"] = dict(request.url.params)
            seen["ua"] = request.headers["user-agent"]
            return httpx.Response(200, json={"address": {"road": "Oudegracht", "city": "Utrecht"}})

        geocoder = geocoder_with(handler)
        result = await geocoder.reverse(52.1, 5.3)
        await geocoder.aclose()

        assert result == GeocodeResult(street="Oudegracht", city="Utrecht")
        assert seen["params"]["lat"] == "52.1"
        assert seen["params"]["lon"] == "5.3"
        assert seen["params"]["zoom"] == "18"
        assert seen["params"]["addressdetails"] == "1"
        assert seen["ua"] == "test-agent"

    @pytest.mark.asyncio
    async def test_fallback_keys(self):
        def handler(request):
            return httpx.Response(200, json={"address": {"suburb": "Lombok", "village": "Oog in Al"}})

        result = await geocoder_with(handler).reverse(52.1, 5.3)
        assert result == GeocodeResult(street="Lombok", city="Oog in Al")

    @pytest.mark.asyncio
    async def test_http_error_returns_none(self):
        result = await geocoder_with(lambda request: httpx.Response(503)).reverse(52.1, 5.3)
        assert result is None

    @pytest.mark.asyncio
    async def test_network_error_returns_none(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        assert await geocoder_with(handler).reverse(52.1, 5.3) is None

    @pytest.mark.asyncio
    async def test_no_address(self):
        result = await geocoder_with(lambda request: httpx.Response(200, json={"error": "Unable to geocode"})).reverse(0.0, 0.0)
        assert result is None


@pytest.mark.asyncio
async def test_null_geocoder():
    assert await NullGeocoder().reverse(52.1, 5.3) is None


def test_build_geocoder_respects_flag():
    disabled = SimpleNamespace(REVERSE_GEOCODING_ENABLED=False)
    assert isinstance(build_geocoder(disabled), NullGeocoder)

    enabled = SimpleNamespace(
        REVERSE_GEOCODING_ENABLED=True, GEOCODING_URL=URL,
        GEOCODING_USER_AGENT="test-agent", GEOCODING_TIMEOUT_SECONDS=10,
    )
    assert isinstance(build_geocoder(enabled), NominatimGeocoder)
