from __future__ import annotations

from enum import Enum
from typing import Any, Mapping, TypeVar

from ..catalog.models import SIZE_ORDER, BreedSize
from .errors import FieldError, InvalidPreferenceValue, InvalidRange, NormalizationError
from .models import ANY_SIZE, ActivityLevel, ExperienceLevel, LivingSpace, MatchPreferences

E = TypeVar("E", bound=Enum)

GROOMING_TOLERANCE_RANGE = (1, 10)


def _allowed(enum_cls: type[Enum]) -> str:
    return ", ".join(str(e.value) for e in enum_cls)


def _enum_field(
    raw: Mapping[str, Any], field: str, enum_cls: type[E], errors: list[FieldError],
) -> E | None:
    value = raw.get(field)
    if isinstance(value, enum_cls):
        return value
    if value is None or (isinstance(value, str) and not value.strip()):
        errors.append(InvalidPreferenceValue(field, f"is required (one of: {_allowed(enum_cls)})"))
        return None
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError:
        errors.append(
            InvalidPreferenceValue(field, f"must be one of: {_allowed(enum_cls)}", value)
        )
        return None


def _whole_number(value: Any) -> int | None:
    """Return ``value`` as an int if it is a whole number, else ``None``."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        text = value.strip()
        # ASCII only: int() also parses other scripts' digits.
        if not text.isascii():
            return None
        try:
            return int(text)
        except ValueError:
            return None
    return None


def _family_size(raw: Mapping[str, Any], errors: list[FieldError]) -> int:
    value = raw.get("familySize")
    if value is None:
        return 0
    number = _whole_number(value)
    if number is None:
        errors.append(InvalidPreferenceValue("familySize", "must be a whole number", value))
        return 0
    if number < 0:
        errors.append(InvalidRange("familySize", "must be 0 or greater", value))
        return 0
    return number


def _children_ages(raw: Mapping[str, Any], errors: list[FieldError]) -> tuple[int, ...]:
    value = raw.get("childrenAges")
    if value is None:
        return ()
    if isinstance(value, (str, bytes)) or not isinstance(value, (list, tuple)):
        errors.append(InvalidPreferenceValue("childrenAges", "must be a list of ages", value))
        return ()

    ages: list[int] = []
    for index, item in enumerate(value):
        age = _whole_number(item)
        if age is None:
            errors.append(
                InvalidPreferenceValue("childrenAges", f"entry {index} must be a whole number", item)
            )
        elif age < 0:
            errors.append(InvalidRange("childrenAges", f"entry {index} must be 0 or greater", item))
        else:
            ages.append(age)
    return tuple(sorted(ages))


def _sizes(raw: Mapping[str, Any], errors: list[FieldError]) -> tuple[BreedSize, ...] | str:
    value = raw.get("size")
    if value is None:
        return ANY_SIZE
    if isinstance(value, (str, BreedSize)):
        value = [value]
    if not isinstance(value, (list, tuple, set, frozenset)):
        errors.append(InvalidPreferenceValue("size", "must be a list of breed sizes", value))
        return ANY_SIZE

    wanted: set[BreedSize] = set()
    wildcard = False
    for item in value:
        text = item.value if isinstance(item, BreedSize) else str(item).strip().lower()
        if text == ANY_SIZE:
            wildcard = True
            continue
        try:
            wanted.add(BreedSize(text))
        except ValueError:
            errors.append(
                InvalidPreferenceValue("size", f"must contain only: {_allowed(BreedSize)}", item)
            )

    if wildcard or not wanted:
        return ANY_SIZE
    return tuple(s for s in SIZE_ORDER if s in wanted)


def _grooming_tolerance(raw: Mapping[str, Any], errors: list[FieldError]) -> int | None:
    value = raw.get("groomingTolerance")
    if value is None:
        return None
    number = _whole_number(value)
    if number is None:
        errors.append(InvalidPreferenceValue("groomingTolerance", "must be a whole number", value))
        return None
    low, high = GROOMING_TOLERANCE_RANGE
    if not low <= number <= high:
        errors.append(InvalidRange("groomingTolerance", f"must be between {low} and {high}", value))
        return None
    return number


def normalize(raw: Mapping[str, Any]) -> MatchPreferences:
    """
    Validate raw wizard input and build canonical ``MatchPreferences``.

    Every field is checked before anything is raised, so a form can show all
    of its errors at once. Raises ``NormalizationError`` listing them.
    """
    if not isinstance(raw, Mapping):
        raise NormalizationError(
            [InvalidPreferenceValue("preferences", "must be an object", raw)]
        )

    errors: list[FieldError] = []
    activity = _enum_field(raw, "activityLevel", ActivityLevel, errors)
    living_space = _enum_field(raw, "livingSpace", LivingSpace, errors)
    experience = _enum_field(raw, "experienceLevel", ExperienceLevel, errors)
    family_size = _family_size(raw, errors)
    children_ages = _children_ages(raw, errors)
    size = _sizes(raw, errors)
    grooming = _grooming_tolerance(raw, errors)

    if errors:
        raise NormalizationError(errors)

    return MatchPreferences(
        activity_level=activity,
        living_space=living_space,
        family_size=family_size,
        children_ages=children_ages,
        experience_level=experience,
        size=size,
        grooming_tolerance=grooming,
    )
