from __future__ import annotations

from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..catalog.models import BreedSize


class Puppy(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    breed: str
    size: BreedSize | None = None
    gender: str
    age_weeks: int = Field(..., ge=0, alias="ageWeeks")
    price: float = Field(..., ge=0)
    country: str
    state: str
    city: str
    breeder_name: str = Field(..., alias="breederName")
    verified: bool = False
    shipping: bool = False


class ListingFilters(BaseModel):
    breed: str | None = None
    size: list[BreedSize] = Field(default_factory=list)
    gender: str | None = None
    shipping: bool = False
    verified: bool = False
    country: str | None = None
    state: str | None = None

    @field_validator("size", mode="before")
    @classmethod
    def _known_sizes(cls, value: Any) -> list[str]:
        # Wizard input may carry "any", a bare string, or nothing at all.
        if value is None:
            return []
        if isinstance(value, (str, BreedSize)):
            value = [value]
        known = {s.value for s in BreedSize}
        sizes: list[str] = []
        for item in value:
            raw = item.value if isinstance(item, BreedSize) else str(item).strip().lower()
            if raw in known and raw not in sizes:
                sizes.append(raw)
        return sizes

    @classmethod
    def from_criteria(cls, criteria: Mapping[str, Any] | None) -> ListingFilters:
        """Build filters from raw adopter criteria, ignoring unrelated keys."""
        if not criteria:
            return cls()
        data = {k: v for k, v in criteria.items() if k in cls.model_fields and v is not None}
        return cls.model_validate(data)

    def to_query_params(self) -> dict[str, Any]:
        params: dict[str, Any] = {}
        if self.breed:
            params["breed"] = self.breed
        if self.size:
            params["size"] = [s.value for s in self.size]
        if self.gender:
            params["gender"] = self.gender
        if self.shipping:
            params["shipping"] = "true"
        if self.verified:
            params["verified"] = "true"
        if self.country:
            params["country"] = self.country
        if self.state:
            params["state"] = self.state
        return params
