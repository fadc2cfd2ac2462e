from __future__ import annotations

from typing import Sequence

from ..listings.models import Puppy
from .models import PuppyMatch, RankedBreed


def breed_score_lookup(ranked: Sequence[RankedBreed]) -> dict[str, int]:
    """Map case-folded breed name to its compatibility total."""
    return {item.breed.name.strip().casefold(): item.score.total for item in ranked}


def puppy_match_score(puppy: Puppy, lookup: dict[str, int]) -> int:
    """A puppy inherits its breed's score; unknown breeds score 0."""
    return lookup.get(puppy.breed.strip().casefold(), 0)


def sort_by_best_match(puppies: Sequence[Puppy], ranked: Sequence[RankedBreed]) -> list[Puppy]:
    """Order puppies by their breed's score, keeping listing order on ties."""
    lookup = breed_score_lookup(ranked)
    return sorted(puppies, key=lambda p: -puppy_match_score(p, lookup))


def puppies_for_top_breeds(
    puppies: Sequence[Puppy], ranked: Sequence[RankedBreed], limit: int = 20,
) -> list[Puppy]:
    """Puppies whose breed appears in ``ranked``, best match first."""
    lookup = breed_score_lookup(ranked)
    matching = [p for p in puppies if p.breed.strip().casefold() in lookup]
    return sort_by_best_match(matching, ranked)[:limit]


def puppy_match_details(
    puppies: Sequence[Puppy], ranked: Sequence[RankedBreed],
) -> dict[str, PuppyMatch]:
    """Map puppy id to its breed's score and reasons; unranked breeds are left out."""
    by_name = {item.breed.name.strip().casefold(): item.score for item in ranked}
    details: dict[str, PuppyMatch] = {}
    for puppy in puppies:
        breed_score = by_name.get(puppy.breed.strip().casefold())
        if breed_score is not None:
            details[puppy.id] = PuppyMatch(
                match_score=breed_score.total, match_reasons=breed_score.reasons,
            )
    return details
