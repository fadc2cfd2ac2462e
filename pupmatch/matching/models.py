from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from ..catalog.models import Breed, BreedSize
from ..listings.models import Puppy

ANY_SIZE = "any"


class ActivityLevel(str, Enum):
    low = "low"
    moderate = "moderate"
    high = "high"
    very_high = "very-high"


class LivingSpace(str, Enum):
    apartment = "apartment"
    small_yard = "small-yard"
    large_yard = "large-yard"
    farm = "farm/acreage"


class ExperienceLevel(str, Enum):
    first_time = "first-time"
    some_experience = "some-experience"
    very_experienced = "very-experienced"


class MatchPreferences(BaseModel):
    """Canonical adopter preferences. Build through ``normalize()``."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    activity_level: ActivityLevel = Field(..., alias="activityLevel")
    living_space: LivingSpace = Field(..., alias="livingSpace")
    family_size: int = Field(default=0, ge=0, alias="familySize")
    children_ages: tuple[int, ...] = Field(default=(), alias="childrenAges")
    experience_level: ExperienceLevel = Field(..., alias="experienceLevel")
    size: tuple[BreedSize, ...] | Literal["any"] = ANY_SIZE
    grooming_tolerance: int | None = Field(default=None, ge=1, le=10, alias="groomingTolerance")

    @property
    def accepts_any_size(self) -> bool:
        return self.size == ANY_SIZE or not self.size

    def accepts_size(self, size: BreedSize) -> bool:
        return self.accepts_any_size or size in self.size

    @property
    def has_family(self) -> bool:
        return self.family_size > 0 or bool(self.children_ages)

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")


class BreedScore(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    breed_id: str = Field(..., alias="breedId")
    total: int = Field(..., ge=0, le=100)
    subscores: dict[str, float] = Field(default_factory=dict)
    reasons: tuple[str, ...] = ()


class RankedBreed(BaseModel):
    model_config = ConfigDict(frozen=True)

    breed: Breed
    score: BreedScore


class PuppyMatch(BaseModel):
    """Score and reasons a listed puppy inherits from its ranked breed."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    match_score: int = Field(..., ge=0, le=100, alias="matchScore")
    match_reasons: tuple[str, ...] = Field(default=(), alias="matchReasons")


class RecommendationOutcome(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    preferences: MatchPreferences | None = None
    recommendations: list[RankedBreed] = Field(default_factory=list)
    puppies: list[Puppy] = Field(default_factory=list)
    puppy_matches: dict[str, PuppyMatch] = Field(default_factory=dict, alias="puppyMatches")
    fallback_applied: bool = Field(default=False, alias="fallbackApplied")
    notice: str | None = None


class RecommendationResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    preferences: MatchPreferences | None = None
    recommendations: list[RankedBreed]
    puppies: list[Puppy] = Field(default_factory=list)
    puppy_matches: dict[str, PuppyMatch] = Field(default_factory=dict, alias="puppyMatches")
    total_breeds_scored: int = Field(..., alias="totalBreedsScored")
    fallback_applied: bool = Field(default=False, alias="fallbackApplied")
    notice: str | None = None


class PuppyListResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    puppies: list[Puppy]
    total: int
    sorted_by: str = Field(default="default", alias="sortedBy")
    match_scores: dict[str, int] | None = Field(default=None, alias="matchScores")
