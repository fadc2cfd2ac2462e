from __future__ import annotations

import httpx
import pytest

from pupmatch.app import app
from pupmatch.catalog.data_store import get_breeds
from pupmatch.client.api_client import MatchingApiClient, build_remote_orchestrator
from pupmatch.client.config import ClientConfig
from pupmatch.matching.errors import PersistenceFailure, RecommendationFetchError
from pupmatch.matching.normalizer import normalize
from pupmatch.matching.orchestrator import FALLBACK_NOTICE
from pupmatch.matching.persistence import clear_preferences, get_preferences
from pupmatch.matching.ranking import rank

CONFIG = ClientConfig(base_url="http://pupmatch.test", timeout=2.0)

RAW = {
    "activityLevel": "low",
    "livingSpace": "apartment",
    "experienceLevel": "first-time",
    "size": ["toy", "small"],
}

PUPPY_JSON = {
    "id": "p-119",
    "name": "Pixie",
    "breed": "Shih Tzu",
    "size": "toy",
    "gender": "female",
    "ageWeeks": 11,
    "price": 1650,
    "country": "USA",
    "state": "FL",
    "city": "Tampa",
    "breederName": "Sunshine Tzus",
    "verified": True,
    "shipping": True,
}


def _client(handler) -> MatchingApiClient:
    return MatchingApiClient(CONFIG, transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_scoring_failure_falls_back_to_filtered_listings():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        if request.url.path == "/matching/recommendations":
            return httpx.Response(500, json={"detail": "Internal Server Error"})
        if request.url.path == "/puppies":
            return httpx.Response(200, json={"puppies": [PUPPY_JSON], "total": 1})
        return httpx.Response(404)

    raw = {**RAW, "breed": "Shih Tzu", "shipping": True, "verified": True}
    async with _client(handler) as client:
        outcome = await build_remote_orchestrator(client).get_recommendations(raw)

    assert outcome.fallback_applied
    assert outcome.notice == FALLBACK_NOTICE
    assert [p.id for p in outcome.puppies] == ["p-119"]

    listing_request = seen[-1]
    assert listing_request.method == "GET"
    assert listing_request.url.path == "/puppies"
    params = listing_request.url.params
    assert params["breed"] == "Shih Tzu"
    assert params.get_list("size") == ["toy", "small"]
    assert params["shipping"] == "true"
    assert params["verified"] == "true"
    assert len(seen) == 2


@pytest.mark.asyncio
async def test_fetch_recommendations_parses_ranking():
    prefs = normalize(RAW)
    expected = rank(prefs, get_breeds(), limit=3)

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.params["limit"] == "3"
        body = {
            "recommendations": [r.model_dump(by_alias=True, mode="json") for r in expected],
            "totalBreedsScored": 24,
        }
        return httpx.Response(200, json=body)

    async with _client(handler) as client:
        ranked = await client.fetch_recommendations(prefs, limit=3)

    assert ranked == expected


@pytest.mark.asyncio
async def test_connection_error_becomes_fetch_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with _client(handler) as client:
        with pytest.raises(RecommendationFetchError):
            await client.fetch_recommendations(normalize(RAW))


@pytest.mark.asyncio
async def test_malformed_body_becomes_fetch_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"<html>maintenance</html>")

    async with _client(handler) as client:
        with pytest.raises(RecommendationFetchError):
            await client.fetch_recommendations(normalize(RAW))


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [[], "ok", {"recommendations": 5}, {"recommendations": [1]}])
async def test_unexpected_json_shape_becomes_fetch_error(body):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=body)

    async with _client(handler) as client:
        with pytest.raises(RecommendationFetchError):
            await client.fetch_recommendations(normalize(RAW))


@pytest.mark.asyncio
async def test_non_object_response_falls_back_to_listings():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/puppies":
            return httpx.Response(200, json={"puppies": [PUPPY_JSON], "total": 1})
        return httpx.Response(200, json=[])

    async with _client(handler) as client:
        outcome = await build_remote_orchestrator(client).get_recommendations(RAW)

    assert outcome.fallback_applied
    assert outcome.notice == FALLBACK_NOTICE
    assert [p.id for p in outcome.puppies] == ["p-119"]


@pytest.mark.asyncio
async def test_failed_save_raises_persistence_failure():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, json={"detail": "Failed to save preferences"})

    async with _client(handler) as client:
        with pytest.raises(PersistenceFailure):
            await client.save_preferences("adopter", normalize(RAW))


@pytest.mark.asyncio
async def test_remote_orchestrator_against_app():
    clear_preferences()
    transport = httpx.ASGITransport(app=app)
    config = ClientConfig(base_url="http://testserver")

    async with MatchingApiClient(config, transport=transport) as client:
        user = await client.login("adopter", "adopter123")
        orchestrator = build_remote_orchestrator(client)
        outcome = await orchestrator.get_recommendations(RAW, user_id=user["username"])
        await orchestrator.drain()

    assert not outcome.fallback_applied
    assert len(outcome.recommendations) == 9
    assert {r.breed.size.value for r in outcome.recommendations} <= {"toy", "small"}
    ranked_names = {r.breed.name for r in outcome.recommendations}
    assert outcome.puppies
    assert {p.breed for p in outcome.puppies} <= ranked_names
    assert get_preferences("adopter") == outcome.preferences
