"""Integration tests for the Gemini, geocoding, tax and ranking HTTP clients"""

import asyncio
import json
from typing import Callable, List
from unittest.mock import AsyncMock, patch
import httpx
import pytest
from tfs_gateway.domain.exceptions import (
    GeminiAPIError,
    InvalidJSONFormatError,
    InvalidResponseError,
    LocationNotFoundError,
    MaxRetriesExceededError,
    MissingAPIKeyError,
    ParsingFailedError,
)
from tfs_gateway.domain.models import FinancialProfile, GeoLocation, Vehicle
from tfs_gateway.domain.ranking import AFFORDABLE
from tfs_gateway.infrastructure.clients.gemini import GeminiClient, extract_text
from tfs_gateway.infrastructure.clients.geocoding import NominatimGeocoder
from tfs_gateway.infrastructure.clients.ranking import VehicleRankingClient
from tfs_gateway.infrastructure.clients.tax import TaxLookupClient
from tests.helpers import gemini_envelope, ranking_text

AUSTIN = GeoLocation(latitude=30.2672, longitude=-97.7431)

TransportFactory = Callable[..., httpx.MockTransport]


class StubGeocoder:
    def __init__(self, postal_code: str = "78701", delay: float = 0.0):
        self.postal_code = postal_code
        self.delay = delay

    async def resolve_postal_code(self, location: GeoLocation) -> str:
        if self.delay:
            await asyncio.sleep(self.delay)
        return self.postal_code


def prompt_of(request: httpx.Request) -> str:
    return json.loads(request.content)["contents"][0]["parts"][0]["text"]


# Gemini client

async def test_generate_text_request_shape(gemini_transport: TransportFactory):
    requests: List[httpx.Request] = []
    transport = gemini_transport(httpx.Response(200, json=gemini_envelope("hello")), requests=requests)
    client = GeminiClient(api_key="test-key", base_url="https://gemini.test/v1beta", model="gemini-test", transport=transport)

    text = await client.generate_text("Say hello", generation_config={"temperature": 0.3})

    assert text == "hello"
    request = requests[0]
    assert request.method == "POST"
    assert str(request.url) == "https://gemini.test/v1beta/models/gemini-test:generateContent"
    assert request.headers["x-goog-api-key"] == "test-key"
    body = json.loads(request.content)
    assert body["contents"] == [{"parts": [{"text": "Say hello"}]}]
    assert body["generationConfig"] == {"temperature": 0.3}


async def test_generate_text_without_config_omits_generation_config(gemini_transport: TransportFactory):
    requests: List[httpx.Request] = []
    transport = gemini_transport(httpx.Response(200, json=gemini_envelope("ok")), requests=requests)

    await GeminiClient(api_key="test-key", transport=transport).generate_text("ping")

    assert "generationConfig" not in json.loads(requests[0].content)


async def test_generate_text_missing_key_sends_nothing(gemini_transport: TransportFactory):
    requests: List[httpx.Request] = []
    transport = gemini_transport(httpx.Response(200, json=gemini_envelope("ok")), requests=requests)

    with pytest.raises(MissingAPIKeyError):
        await GeminiClient(api_key="  ", transport=transport).generate_text("ping")

    assert requests == []


async def test_generate_text_non_200(gemini_transport: TransportFactory):
    transport = gemini_transport(httpx.Response(429, json={"error": {"message": "quota"}}))

    with pytest.raises(GeminiAPIError) as exc_info:
        await GeminiClient(api_key="test-key", transport=transport).generate_text("ping")

    assert exc_info.value.status_code == 429
    assert isinstance(exc_info.value, InvalidResponseError)


async def test_generate_text_non_json(gemini_transport: TransportFactory):
    transport = gemini_transport(httpx.Response(200, text="<html>oops</html>"))

    with pytest.raises(InvalidResponseError):
        await GeminiClient(api_key="test-key", transport=transport).generate_text("ping")


async def test_generate_text_transport_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = GeminiClient(api_key="test-key", transport=httpx.MockTransport(handler))

    with pytest.raises(InvalidResponseError, match="request failed"):
        await client.generate_text("ping")


@pytest.mark.parametrize(
    "data",
    [
        {},
        {"candidates": []},
        {"candidates": [{"content": {"parts": []}}]},
        {"candidates": [{"content": {"parts": [{"inlineData": {}}]}}]},
        {"candidates": [{"content": {"parts": [{"text": 42}]}}]},
        [],
    ],
)
def test_extract_text_missing_text(data):
    with pytest.raises(ParsingFailedError):
        extract_text(data)


# Geocoding

async def test_geocoder_resolves_zip_plus_four():
    requests: List[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json={"address": {"postcode": "78701-1234", "county": "Travis County"}})

    geocoder = NominatimGeocoder(
        base_url="https://geo.test", user_agent="tfs-test", transport=httpx.MockTransport(handler)
    )

    assert await geocoder.resolve_postal_code(AUSTIN) == "78701"
    assert requests[0].url.path == "/reverse"
    assert requests[0].url.params["lat"] == "30.2672"
    assert requests[0].url.params["format"] == "jsonv2"
    assert requests[0].headers["user-agent"] == "tfs-test"


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(200, json={"address": {"city": "Nowhere"}}),
        httpx.Response(200, json={"error": "Unable to geocode"}),
        httpx.Response(500, text="down"),
        httpx.Response(200, text="not json"),
    ],
)
async def test_geocoder_failures(response: httpx.Response):
    geocoder = NominatimGeocoder(base_url="https://geo.test", transport=httpx.MockTransport(lambda request: response))

    with pytest.raises(LocationNotFoundError):
        await geocoder.resolve_postal_code(AUSTIN)


# Tax lookup

async def test_tax_lookup_success(gemini_transport: TransportFactory):
    requests: List[httpx.Request] = []
    transport = gemini_transport(
        httpx.Response(200, json=gemini_envelope("County: Travis County\nTax: 8.25")), requests=requests
    )
    client = TaxLookupClient(gemini=GeminiClient(api_key="test-key", transport=transport), geocoder=StubGeocoder())

    info = await client.fetch_county_and_tax(AUSTIN)

    assert info.county == "Travis County"
    assert info.sales_tax_percentage == 8.25
    assert info.zip_code == "78701"
    assert "78701" in prompt_of(requests[0])


async def test_tax_lookup_fractional_rate(gemini_transport: TransportFactory):
    transport = gemini_transport(httpx.Response(200, json=gemini_envelope("County: Cook County\nTax: 0.1025")))
    client = TaxLookupClient(gemini=GeminiClient(api_key="test-key", transport=transport), geocoder=StubGeocoder("60601"))

    info = await client.fetch_county_and_tax(GeoLocation(latitude=41.88, longitude=-87.62))

    assert info.sales_tax_percentage == pytest.approx(10.25)


async def test_tax_lookup_location_watchdog(gemini_transport: TransportFactory):
    requests: List[httpx.Request] = []
    transport = gemini_transport(httpx.Response(200, json=gemini_envelope("County: X\nTax: 1")), requests=requests)
    client = TaxLookupClient(
        gemini=GeminiClient(api_key="test-key", transport=transport),
        geocoder=StubGeocoder(delay=1.0),
        location_timeout=0.05,
    )

    with pytest.raises(LocationNotFoundError):
        await client.fetch_county_and_tax(AUSTIN)

    assert requests == []


async def test_tax_lookup_empty_zip(gemini_transport: TransportFactory):
    transport = gemini_transport(httpx.Response(200, json=gemini_envelope("County: X\nTax: 1")))
    client = TaxLookupClient(gemini=GeminiClient(api_key="test-key", transport=transport), geocoder=StubGeocoder(""))

    with pytest.raises(LocationNotFoundError):
        await client.fetch_county_and_tax(AUSTIN)


async def test_tax_lookup_missing_key(gemini_transport: TransportFactory):
    transport = gemini_transport(httpx.Response(200, json=gemini_envelope("County: X\nTax: 1")))
    client = TaxLookupClient(gemini=GeminiClient(api_key="", transport=transport), geocoder=StubGeocoder())

    with pytest.raises(MissingAPIKeyError):
        await client.fetch_county_and_tax(AUSTIN)


async def test_tax_lookup_non_200_is_invalid_response(gemini_transport: TransportFactory):
    transport = gemini_transport(httpx.Response(500, text="internal"))
    client = TaxLookupClient(gemini=GeminiClient(api_key="test-key", transport=transport), geocoder=StubGeocoder())

    with pytest.raises(InvalidResponseError, match="status code: 500"):
        await client.fetch_county_and_tax(AUSTIN)


async def test_tax_lookup_missing_text(gemini_transport: TransportFactory):
    transport = gemini_transport(httpx.Response(200, json={"candidates": []}))
    client = TaxLookupClient(gemini=GeminiClient(api_key="test-key", transport=transport), geocoder=StubGeocoder())

    with pytest.raises(ParsingFailedError):
        await client.fetch_county_and_tax(AUSTIN)


# Vehicle ranking

async def test_ranking_first_attempt(
    gemini_transport: TransportFactory,
    sample_vehicles: List[Vehicle],
    demo_profile: FinancialProfile,
):
    requests: List[httpx.Request] = []
    reversed_vehicles = list(reversed(sample_vehicles))
    transport = gemini_transport(
        httpx.Response(200, json=gemini_envelope("```json\n" + ranking_text(reversed_vehicles) + "\n```")),
        requests=requests,
    )
    client = VehicleRankingClient(gemini=GeminiClient(api_key="test-key", transport=transport), retry_delay=0)

    ranked = await client.rank_vehicles(sample_vehicles, demo_profile, 8.25)

    assert [r.vehicle for r in ranked] == reversed_vehicles
    assert all(r.category == AFFORDABLE for r in ranked)
    assert len(requests) == 1
    assert json.loads(requests[0].content)["generationConfig"]["temperature"] == 0.3


async def test_ranking_succeeds_on_third_attempt(
    gemini_transport: TransportFactory,
    sample_vehicles: List[Vehicle],
    demo_profile: FinancialProfile,
):
    """Two malformed responses then a valid one: exactly three requests"""
    requests: List[httpx.Request] = []
    transport = gemini_transport(
        httpx.Response(200, json=gemini_envelope("Here are my picks: Corolla, Camry")),
        httpx.Response(200, json=gemini_envelope('{"ranked_vehicles": [{"year": 2025}]}')),
        httpx.Response(200, json=gemini_envelope(ranking_text(sample_vehicles))),
        requests=requests,
    )
    client = VehicleRankingClient(
        gemini=GeminiClient(api_key="test-key", transport=transport), max_retries=3, retry_delay=0
    )

    ranked = await client.rank_vehicles(sample_vehicles, demo_profile, 8.25)

    assert len(requests) == 3
    assert [r.vehicle for r in ranked] == sample_vehicles
    assert "invalid JSON format" not in prompt_of(requests[0])
    assert "invalid JSON format" in prompt_of(requests[1])
    assert "invalid JSON format" in prompt_of(requests[2])


async def test_ranking_exhausts_retries(
    gemini_transport: TransportFactory,
    sample_vehicles: List[Vehicle],
    demo_profile: FinancialProfile,
):
    requests: List[httpx.Request] = []
    transport = gemini_transport(httpx.Response(200, json=gemini_envelope("no json here")), requests=requests)
    client = VehicleRankingClient(
        gemini=GeminiClient(api_key="test-key", transport=transport), max_retries=3, retry_delay=0
    )

    with pytest.raises(MaxRetriesExceededError) as exc_info:
        await client.rank_vehicles(sample_vehicles, demo_profile, 8.25)

    assert len(requests) == 3
    assert exc_info.value.attempts == 3
    assert isinstance(exc_info.value.__cause__, InvalidJSONFormatError)


async def test_ranking_retries_http_errors(
    gemini_transport: TransportFactory,
    sample_vehicles: List[Vehicle],
    demo_profile: FinancialProfile,
):
    requests: List[httpx.Request] = []
    transport = gemini_transport(httpx.Response(503, text="overloaded"), requests=requests)
    client = VehicleRankingClient(
        gemini=GeminiClient(api_key="test-key", transport=transport), max_retries=2, retry_delay=0
    )

    with pytest.raises(MaxRetriesExceededError) as exc_info:
        await client.rank_vehicles(sample_vehicles, demo_profile, 8.25)

    assert len(requests) == 2
    assert isinstance(exc_info.value.__cause__, GeminiAPIError)


async def test_ranking_missing_key_not_retried(
    gemini_transport: TransportFactory,
    sample_vehicles: List[Vehicle],
    demo_profile: FinancialProfile,
):
    requests: List[httpx.Request] = []
    transport = gemini_transport(httpx.Response(200, json=gemini_envelope("{}")), requests=requests)
    client = VehicleRankingClient(gemini=GeminiClient(api_key="", transport=transport), retry_delay=0)

    with pytest.raises(MissingAPIKeyError):
        await client.rank_vehicles(sample_vehicles, demo_profile, 8.25)

    assert requests == []


@patch("tfs_gateway.infrastructure.clients.ranking.asyncio.sleep", new_callable=AsyncMock)
async def test_ranking_fixed_delay_between_attempts(
    mock_sleep: AsyncMock,
    gemini_transport: TransportFactory,
    sample_vehicles: List[Vehicle],
    demo_profile: FinancialProfile,
):
    transport = gemini_transport(httpx.Response(200, json=gemini_envelope("garbage")))
    client = VehicleRankingClient(
        gemini=GeminiClient(api_key="test-key", transport=transport), max_retries=3, retry_delay=1.0
    )

    with pytest.raises(MaxRetriesExceededError):
        await client.rank_vehicles(sample_vehicles, demo_profile, 8.25)

    # No sleep after the final attempt
    assert mock_sleep.await_count == 2
    mock_sleep.assert_awaited_with(1.0)


async def test_ranking_cancellation_propagates(sample_vehicles: List[Vehicle], demo_profile: FinancialProfile):
    gemini = GeminiClient(api_key="test-key")
    client = VehicleRankingClient(gemini=gemini, max_retries=3, retry_delay=0)

    with patch.object(gemini, "generate_text", new=AsyncMock(side_effect=asyncio.CancelledError())) as mock_generate:
        with pytest.raises(asyncio.CancelledError):
            await client.rank_vehicles(sample_vehicles, demo_profile, 8.25)

    assert mock_generate.await_count == 1


def test_explicit_zero_settings_are_kept():
    gemini = GeminiClient(api_key="test-key", timeout=0)
    client = VehicleRankingClient(gemini=gemini, max_retries=0, retry_delay=0)

    assert gemini.timeout == 0
    assert client.max_retries == 0
    assert client.retry_delay == 0
    assert NominatimGeocoder(timeout=0).timeout == 0
    assert TaxLookupClient(gemini=gemini, geocoder=StubGeocoder(), location_timeout=0).location_timeout == 0


async def test_tax_lookup_zero_location_timeout(gemini_transport: TransportFactory):
    transport = gemini_transport(httpx.Response(200, json=gemini_envelope("County: X\nTax: 1")))
    client = TaxLookupClient(
        gemini=GeminiClient(api_key="test-key", transport=transport),
        geocoder=StubGeocoder(delay=0.5),
        location_timeout=0,
    )

    with pytest.raises(LocationNotFoundError):
        await client.fetch_county_and_tax(AUSTIN)
