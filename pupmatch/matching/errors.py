from __future__ import annotations

from typing import Any


class MatchingError(Exception):
    """Base class for matching engine errors."""


class FieldError(MatchingError):
    """A single user-correctable problem with one preference field."""

    code = "invalid"

    def __init__(self, field: str, message: str, value: Any = None) -> None:
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message
        self.value = value

    def to_dict(self) -> dict[str, Any]:
        return {"field": self.field, "code": self.code, "message": self.message}


class InvalidPreferenceValue(FieldError):
    code = "invalid_value"


class InvalidRange(FieldError):
    code = "invalid_range"


class NormalizationError(MatchingError):
    """Every field error found while normalizing one raw input."""

    def __init__(self, errors: list[FieldError]) -> None:
        fields = ", ".join(e.field for e in errors)
        super().__init__(f"Invalid match preferences: {fields}")
        self.errors = list(errors)

    @property
    def fields(self) -> list[str]:
        return [e.field for e in self.errors]


class RecommendationFetchError(MatchingError):
    """The recommendation call failed (network, timeout, 5xx)."""


class PersistenceFailure(MatchingError):
    """Saving match preferences failed."""
