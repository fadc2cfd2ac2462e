from __future__ import annotations

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Mapping

from ..catalog.models import BreedSize
from .models import ActivityLevel, LivingSpace

DIMENSIONS: tuple[str, ...] = ("energy", "space", "family", "trainability", "grooming")


@dataclass(frozen=True)
class SpaceAllowance:
    """Largest comfortable breed size and energy level for a living space.

    ``None`` means no limit on that axis.
    """

    max_size: BreedSize | None
    energy_cap: int | None


def _default_weights() -> dict[str, float]:
    return {
        "energy": 0.30,
        "space": 0.25,
        "family": 0.25,
        "trainability": 0.20,
        "grooming": 0.15,
    }


def _default_activity_targets() -> dict[ActivityLevel, int]:
    return {
        ActivityLevel.low: 2,
        ActivityLevel.moderate: 5,
        ActivityLevel.high: 8,
        ActivityLevel.very_high: 10,
    }


def _default_space_allowances() -> dict[LivingSpace, SpaceAllowance]:
    return {
        LivingSpace.apartment: SpaceAllowance(max_size=BreedSize.small, energy_cap=6),
        LivingSpace.small_yard: SpaceAllowance(max_size=BreedSize.medium, energy_cap=8),
        LivingSpace.large_yard: SpaceAllowance(max_size=BreedSize.large, energy_cap=10),
        LivingSpace.farm: SpaceAllowance(max_size=None, energy_cap=None),
    }


@dataclass(frozen=True)
class ScoringConfig:
    """Weights and thresholds for the compatibility scorer.

    Passed explicitly to ``score()`` and ``rank()`` so a caller can tune the
    numbers per call. Every value here is a tunable parameter.
    """

    weights: Mapping[str, float] = field(default_factory=_default_weights)
    activity_targets: Mapping[ActivityLevel, int] = field(default_factory=_default_activity_targets)
    neutral_value: int = 5
    energy_step_penalty: float = 12.5
    space_allowances: Mapping[LivingSpace, SpaceAllowance] = field(
        default_factory=_default_space_allowances
    )
    space_size_step_penalty: float = 25.0
    space_energy_step_penalty: float = 10.0
    young_child_age: int = 6
    kid_friendly_bar: int = 7
    young_child_penalty: float = 15.0
    experienced_baseline: float = 85.0
    grooming_step_penalty: float = 15.0

    def __post_init__(self) -> None:
        # Tables are held as read-only copies of what was passed in.
        for name in ("weights", "activity_targets", "space_allowances"):
            object.__setattr__(self, name, MappingProxyType(dict(getattr(self, name))))

        missing = [d for d in DIMENSIONS if d not in self.weights]
        if missing:
            raise ValueError(f"Missing weights for dimensions: {', '.join(missing)}")
        negative = [d for d, w in self.weights.items() if w < 0]
        if negative:
            raise ValueError(f"Weights must be non-negative: {', '.join(negative)}")

    def with_weights(self, **overrides: float) -> ScoringConfig:
        """Return a copy with some dimension weights replaced."""
        unknown = [k for k in overrides if k not in DIMENSIONS]
        if unknown:
            raise ValueError(f"Unknown scoring dimensions: {', '.join(unknown)}")
        return replace(self, weights={**self.weights, **overrides})


DEFAULT_SCORING_CONFIG = ScoringConfig()
