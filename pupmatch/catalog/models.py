from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class BreedSize(str, Enum):
    toy = "toy"
    small = "small"
    medium = "medium"
    large = "large"
    giant = "giant"


# Smallest to largest; space scoring counts steps along this order.
SIZE_ORDER: tuple[BreedSize, ...] = (
    BreedSize.toy,
    BreedSize.small,
    BreedSize.medium,
    BreedSize.large,
    BreedSize.giant,
)


def size_rank(size: BreedSize) -> int:
    return SIZE_ORDER.index(size)


class BreedCharacteristics(BaseModel):
    """Characteristic vector on a 1-10 scale. ``None`` means unknown."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    energy_level: int | None = Field(default=None, ge=1, le=10, alias="energyLevel")
    friendliness: int | None = Field(default=None, ge=1, le=10)
    trainability: int | None = Field(default=None, ge=1, le=10)
    grooming_needs: int | None = Field(default=None, ge=1, le=10, alias="groomingNeeds")
    good_with_kids: int | None = Field(default=None, ge=1, le=10, alias="goodWithKids")
    good_with_pets: int | None = Field(default=None, ge=1, le=10, alias="goodWithPets")


class Breed(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    size: BreedSize
    characteristics: BreedCharacteristics = Field(default_factory=BreedCharacteristics)
    temperament: tuple[str, ...] = ()
    ideal_for: tuple[str, ...] = Field(default=(), alias="idealFor")
