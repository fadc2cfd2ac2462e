from __future__ import annotations

import logging

import httpx

from ..listings.models import ListingFilters, Puppy
from ..matching.errors import PersistenceFailure, RecommendationFetchError
from ..matching.models import MatchPreferences, RankedBreed
from ..matching.orchestrator import RecommendationOrchestrator
from .config import DEFAULT_CLIENT_CONFIG, ClientConfig

logger = logging.getLogger(__name__)


class MatchingApiClient:
    """
    Async client for the PupMatch API.

    Keeps one ``httpx.AsyncClient`` (and its session cookie) per instance.
    Every call is a single attempt with the configured timeout.
    """

    def __init__(
        self,
        config: ClientConfig = DEFAULT_CLIENT_CONFIG,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config
        self._http = httpx.AsyncClient(
            base_url=config.base_url,
            timeout=config.timeout,
            transport=transport,
        )

    async def __aenter__(self) -> MatchingApiClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def login(self, username: str, password: str) -> dict:
        response = await self._http.post(
            "/auth/login", json={"username": username, "password": password},
        )
        response.raise_for_status()
        return response.json()["user"]

    async def fetch_recommendations(
        self, preferences: MatchPreferences, limit: int | None = None,
    ) -> list[RankedBreed]:
        """POST the preferences to the scoring endpoint and parse the ranking."""
        params = {"limit": limit} if limit is not None else None
        try:
            response = await self._http.post(
                "/matching/recommendations", json=preferences.to_wire(), params=params,
            )
            response.raise_for_status()
            body = response.json()
            items = body.get("recommendations") if isinstance(body, dict) else None
            if not isinstance(items, list):
                raise RecommendationFetchError("Recommendation response has no recommendations list")
            return [RankedBreed.model_validate(item) for item in items]
        except (httpx.HTTPError, ValueError) as exc:
            raise RecommendationFetchError(f"Recommendation request failed: {exc}") from exc

    async def save_preferences(self, user_id: str, preferences: MatchPreferences) -> None:
        """Save preferences for the signed-in session user.

        The server resolves the user from the session cookie; ``user_id`` is
        only used for logging.
        """
        try:
            response = await self._http.put("/matching/preferences", json=preferences.to_wire())
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise PersistenceFailure(f"Saving preferences failed: {exc}") from exc
        logger.debug("Saved match preferences for %s", user_id)

    async def search_puppies(self, filters: ListingFilters) -> list[Puppy]:
        response = await self._http.get("/puppies", params=filters.to_query_params())
        response.raise_for_status()
        return [Puppy.model_validate(item) for item in response.json().get("puppies", [])]


def build_remote_orchestrator(client: MatchingApiClient) -> RecommendationOrchestrator:
    return RecommendationOrchestrator(
        fetch_recommendations=client.fetch_recommendations,
        search_listings=client.search_puppies,
        save_preferences=client.save_preferences,
    )
