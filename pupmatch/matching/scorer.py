from __future__ import annotations

import math
from typing import Callable, Optional, Tuple

from ..catalog.models import Breed, size_rank
from .config import DEFAULT_SCORING_CONFIG, ScoringConfig
from .models import ActivityLevel, BreedScore, ExperienceLevel, MatchPreferences

# (dimension score 0-100, optional match reason); None when not evaluated.
DimensionResult = Optional[Tuple[float, Optional[str]]]


def _clamp(value: float) -> float:
    return max(0.0, min(100.0, value))


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _or_neutral(value: int | None, config: ScoringConfig) -> int:
    return config.neutral_value if value is None else value


def score_energy(
    preferences: MatchPreferences, breed: Breed, config: ScoringConfig,
) -> DimensionResult:
    """Distance between the breed's energy and the adopter's activity target."""
    target = config.activity_targets[preferences.activity_level]
    energy = _or_neutral(breed.characteristics.energy_level, config)
    distance = abs(energy - target)
    value = _clamp(100.0 - distance * config.energy_step_penalty)

    if breed.characteristics.energy_level is None:
        reason = "Energy level unknown, scored as average"
    elif distance <= 1:
        if preferences.activity_level in (ActivityLevel.high, ActivityLevel.very_high):
            reason = "Great energy level for an active lifestyle"
        elif preferences.activity_level == ActivityLevel.low:
            reason = "Calm temperament suits your relaxed lifestyle"
        else:
            reason = "Well-balanced energy for your moderate lifestyle"
    elif energy > target + 2:
        reason = "Higher energy than your preference, needs more exercise"
    elif energy < target - 2:
        reason = "Lower energy, may not keep up with your active lifestyle"
    else:
        reason = None
    return value, reason


def score_space(
    preferences: MatchPreferences, breed: Breed, config: ScoringConfig,
) -> DimensionResult:
    """Penalize breeds that are too big or too energetic for the living space."""
    allowance = config.space_allowances.get(preferences.living_space)
    energy = _or_neutral(breed.characteristics.energy_level, config)

    size_over = 0
    energy_over = 0
    if allowance is not None:
        if allowance.max_size is not None:
            size_over = max(0, size_rank(breed.size) - size_rank(allowance.max_size))
        if allowance.energy_cap is not None:
            energy_over = max(0, energy - allowance.energy_cap)

    penalty = (
        size_over * config.space_size_step_penalty
        + energy_over * config.space_energy_step_penalty
    )
    value = _clamp(100.0 - penalty)

    if penalty == 0:
        reason = "Great fit for your living space"
    elif value >= 50:
        reason = "Adequate space, but more room would be ideal"
    else:
        reason = "Your living space may be tight for this breed"
    return value, reason


def score_family(
    preferences: MatchPreferences, breed: Breed, config: ScoringConfig,
) -> DimensionResult:
    """Kid-friendliness, with a higher bar for children under the age threshold."""
    if not preferences.has_family:
        return None

    good_with_kids = _or_neutral(breed.characteristics.good_with_kids, config)
    value = good_with_kids * 10.0
    young = any(age < config.young_child_age for age in preferences.children_ages)
    penalized = young and good_with_kids < config.kid_friendly_bar
    if penalized:
        value -= config.young_child_penalty

    if penalized:
        reason = "May not be ideal around very young children"
    elif breed.characteristics.good_with_kids is None:
        reason = None
    elif good_with_kids >= 8:
        reason = "Great with kids of all ages" if preferences.children_ages else "Thrives in family homes"
    else:
        reason = None
    return _clamp(value), reason


def score_trainability(
    preferences: MatchPreferences, breed: Breed, config: ScoringConfig,
) -> DimensionResult:
    """How much the adopter's experience leans on the breed being easy to train."""
    trainability = _or_neutral(breed.characteristics.trainability, config)
    strict = trainability * 10.0
    relaxed = config.experienced_baseline

    if preferences.experience_level == ExperienceLevel.first_time:
        value = strict
    elif preferences.experience_level == ExperienceLevel.very_experienced:
        value = relaxed
    else:
        value = (strict + relaxed) / 2

    if trainability >= 8:
        reason = "Highly trainable, eager to learn"
    elif preferences.experience_level == ExperienceLevel.very_experienced:
        reason = "Your experience covers this breed's training needs"
    elif trainability < 5:
        reason = "May be challenging for your experience level"
    else:
        reason = "Trainable with consistent effort"
    return _clamp(value), reason


def score_grooming(
    preferences: MatchPreferences, breed: Breed, config: ScoringConfig,
) -> DimensionResult:
    """Grooming needs above the adopter's tolerance.

    Only evaluated when the preferences carry a grooming tolerance and the
    breed's grooming needs are known. The wizard does not ask for one yet.
    """
    tolerance = preferences.grooming_tolerance
    needs = breed.characteristics.grooming_needs
    if tolerance is None or needs is None:
        return None

    excess = max(0, needs - tolerance)
    value = _clamp(100.0 - excess * config.grooming_step_penalty)
    reason = "Grooming needs fit your routine" if excess == 0 else "Higher grooming needs than you'd prefer"
    return value, reason


_DIMENSION_SCORERS: tuple[tuple[str, Callable[..., DimensionResult]], ...] = (
    ("energy", score_energy),
    ("space", score_space),
    ("family", score_family),
    ("trainability", score_trainability),
    ("grooming", score_grooming),
)


def effective_weights(
    dimensions: list[str] | tuple[str, ...], config: ScoringConfig = DEFAULT_SCORING_CONFIG,
) -> dict[str, float]:
    """Weights of the evaluated dimensions, rescaled to sum to 1.0."""
    raw = {d: config.weights[d] for d in dimensions}
    total = sum(raw.values())
    if total <= 0:
        return {d: 0.0 for d in dimensions}
    return {d: w / total for d, w in raw.items()}


def score(
    preferences: MatchPreferences,
    breed: Breed,
    config: ScoringConfig = DEFAULT_SCORING_CONFIG,
) -> BreedScore:
    """Compute the 0-100 compatibility score of one breed for one adopter."""
    subscores: dict[str, float] = {}
    reasons: list[str] = []

    for name, scorer in _DIMENSION_SCORERS:
        result = scorer(preferences, breed, config)
        if result is None:
            continue
        value, reason = result
        subscores[name] = value
        if reason:
            reasons.append(reason)

    weights = effective_weights(tuple(subscores), config)
    weighted = sum(weights[name] * value for name, value in subscores.items())
    total = max(0, min(100, _round_half_up(weighted)))

    return BreedScore(
        breed_id=breed.id,
        total=total,
        subscores=subscores,
        reasons=tuple(reasons),
    )
