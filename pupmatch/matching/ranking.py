from __future__ import annotations

import logging
from typing import Iterable

from ..catalog.models import Breed
from .config import DEFAULT_SCORING_CONFIG, ScoringConfig
from .models import ActivityLevel, BreedScore, ExperienceLevel, LivingSpace, MatchPreferences, RankedBreed
from .scorer import score

logger = logging.getLogger(__name__)

_EXPERIENCE_TAGS: dict[ExperienceLevel, str] = {
    ExperienceLevel.first_time: "first-time owners",
    ExperienceLevel.very_experienced: "experienced owners",
}

_ACTIVITY_TAGS: dict[ActivityLevel, str] = {
    ActivityLevel.low: "relaxed households",
    ActivityLevel.high: "active owners",
    ActivityLevel.very_high: "active owners",
}

_SPACE_TAGS: dict[LivingSpace, str] = {
    LivingSpace.apartment: "apartment living",
    LivingSpace.small_yard: "homes with yards",
    LivingSpace.large_yard: "homes with yards",
    LivingSpace.farm: "rural living",
}


def preference_tags(preferences: MatchPreferences) -> frozenset[str]:
    """Adopter-profile tags implied by the preferences, matched against ``idealFor``."""
    tags: set[str] = set()

    if preferences.experience_level in _EXPERIENCE_TAGS:
        tags.add(_EXPERIENCE_TAGS[preferences.experience_level])
    if preferences.activity_level in _ACTIVITY_TAGS:
        tags.add(_ACTIVITY_TAGS[preferences.activity_level])
    tags.add(_SPACE_TAGS[preferences.living_space])

    if preferences.children_ages:
        tags.add("families with kids")
    if preferences.family_size >= 3 or preferences.children_ages:
        tags.add("families")
    elif preferences.family_size == 1:
        tags.add("singles")

    return frozenset(tags)


def passes_size_filter(preferences: MatchPreferences, breed: Breed) -> bool:
    """Size is a hard constraint: breeds outside the accepted set never rank."""
    return preferences.accepts_size(breed.size)


def tag_overlap(breed: Breed, tags: frozenset[str]) -> int:
    return len({t.strip().casefold() for t in breed.ideal_for} & tags)


def rank(
    preferences: MatchPreferences,
    breeds: Iterable[Breed],
    limit: int | None = None,
    config: ScoringConfig = DEFAULT_SCORING_CONFIG,
) -> list[RankedBreed]:
    """
    Rank breeds for one adopter.

    Steps:
    - Drop breeds that fail the hard size filter.
    - Score every remaining breed.
    - Order by total descending, then by ``idealFor`` tag overlap, then by
      name, so equal inputs always produce the same order.
    - Apply ``limit`` when given. Low scores never remove a breed.
    """
    if limit is not None and limit < 0:
        raise ValueError("limit must be non-negative")

    tags = preference_tags(preferences)
    scored: list[tuple[Breed, BreedScore, int]] = []
    filtered_out = 0
    for breed in breeds:
        if not passes_size_filter(preferences, breed):
            filtered_out += 1
            continue
        scored.append((breed, score(preferences, breed, config), tag_overlap(breed, tags)))

    scored.sort(
        key=lambda item: (
            -item[1].total,
            -item[2],
            item[0].name.casefold(),
            item[0].name,
            item[0].id,
        )
    )
    logger.debug(
        "Ranked %d breeds (%d removed by size filter)", len(scored), filtered_out,
    )

    ranked = [RankedBreed(breed=breed, score=breed_score) for breed, breed_score, _ in scored]
    return ranked if limit is None else ranked[:limit]
