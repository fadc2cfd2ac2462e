from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, Mapping, Optional, Sequence

from ..catalog.data_store import get_breeds
from ..catalog.models import Breed
from ..listings.models import ListingFilters, Puppy
from .config import DEFAULT_SCORING_CONFIG, ScoringConfig
from .errors import RecommendationFetchError
from .models import MatchPreferences, RankedBreed, RecommendationOutcome
from .normalizer import normalize
from .ranking import rank
from .sort_adapter import puppies_for_top_breeds, puppy_match_details

logger = logging.getLogger(__name__)

FALLBACK_NOTICE = (
    "We couldn't load your personalised breed matches right now, so we're "
    "showing puppies that fit your search filters instead."
)
LISTINGS_UNAVAILABLE_NOTICE = (
    "We couldn't load breed matches or puppy listings right now. "
    "Please try again in a moment."
)

FetchRecommendations = Callable[[MatchPreferences, Optional[int]], Awaitable[list[RankedBreed]]]
SearchListings = Callable[[ListingFilters], Awaitable[list[Puppy]]]
SavePreferences = Callable[[str, MatchPreferences], Any]


class LocalRecommender:
    """Runs the ranking pipeline in-process over a catalog snapshot."""

    def __init__(
        self,
        catalog: Callable[[], Sequence[Breed]] = get_breeds,
        config: ScoringConfig = DEFAULT_SCORING_CONFIG,
    ) -> None:
        self._catalog = catalog
        self._config = config

    async def __call__(
        self, preferences: MatchPreferences, limit: int | None = None,
    ) -> list[RankedBreed]:
        try:
            breeds = tuple(self._catalog())
        except (OSError, ValueError) as exc:
            raise RecommendationFetchError(f"Breed catalog unavailable: {exc}") from exc
        return rank(preferences, breeds, limit=limit, config=self._config)


class RecommendationOrchestrator:
    """
    Coordinates one "Find My Perfect Puppy" request.

    - Preferences of signed-in adopters are saved in the background; a failed
      save is logged and never affects the recommendations.
    - Recommendations are fetched once. If that fails, the raw criteria are
      applied as plain listing filters and the outcome carries a notice.
    """

    def __init__(
        self,
        fetch_recommendations: FetchRecommendations,
        search_listings: SearchListings,
        save_preferences: SavePreferences | None = None,
        puppies_limit: int = 20,
    ) -> None:
        self._fetch_recommendations = fetch_recommendations
        self._search_listings = search_listings
        self._save_preferences = save_preferences
        self._puppies_limit = puppies_limit
        self._pending: set[asyncio.Task] = set()

    async def get_recommendations(
        self,
        raw: Mapping[str, Any],
        user_id: str | None = None,
        criteria: Mapping[str, Any] | None = None,
        limit: int | None = 10,
    ) -> RecommendationOutcome:
        # Malformed input is the caller's to fix: NormalizationError propagates.
        preferences = normalize(raw)

        if user_id and self._save_preferences is not None:
            self._schedule_save(user_id, preferences)

        try:
            recommendations = await self._fetch_recommendations(preferences, limit)
        except Exception:
            # RecommendationFetchError or any other failure of the call.
            logger.warning(
                "Recommendation fetch failed, falling back to listing filters", exc_info=True,
            )
            return await self._fallback(preferences, raw if criteria is None else criteria)

        logger.info(
            "Recommended %d breeds (activity=%s, space=%s, experience=%s)",
            len(recommendations),
            preferences.activity_level.value,
            preferences.living_space.value,
            preferences.experience_level.value,
        )
        puppies = await self._matching_puppies(recommendations)
        return RecommendationOutcome(
            preferences=preferences,
            recommendations=recommendations,
            puppies=puppies,
            puppy_matches=puppy_match_details(puppies, recommendations),
        )

    async def drain(self) -> None:
        """Wait for outstanding background preference saves."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    def _schedule_save(self, user_id: str, preferences: MatchPreferences) -> None:
        task = asyncio.get_running_loop().create_task(self._persist(user_id, preferences))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _persist(self, user_id: str, preferences: MatchPreferences) -> None:
        try:
            result = self._save_preferences(user_id, preferences)
            if inspect.isawaitable(result):
                await result
        except Exception:
            logger.warning("Saving match preferences failed for user %s", user_id, exc_info=True)

    async def _matching_puppies(self, recommendations: list[RankedBreed]) -> list[Puppy]:
        if not recommendations:
            return []
        try:
            puppies = await self._search_listings(ListingFilters())
        except Exception:
            logger.warning("Listing search failed, returning breeds without puppies", exc_info=True)
            return []
        return puppies_for_top_breeds(puppies, recommendations, limit=self._puppies_limit)

    async def _fallback(
        self, preferences: MatchPreferences, criteria: Mapping[str, Any] | None,
    ) -> RecommendationOutcome:
        try:
            filters = ListingFilters.from_criteria(criteria)
            puppies = await self._search_listings(filters)
        except Exception:
            logger.warning("Fallback listing search failed", exc_info=True)
            return RecommendationOutcome(
                preferences=preferences,
                fallback_applied=True,
                notice=LISTINGS_UNAVAILABLE_NOTICE,
            )
        return RecommendationOutcome(
            preferences=preferences,
            puppies=puppies,
            fallback_applied=True,
            notice=FALLBACK_NOTICE,
        )
