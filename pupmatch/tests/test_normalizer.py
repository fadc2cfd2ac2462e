from __future__ import annotations

import pytest
from pydantic import ValidationError

from pupmatch.catalog.models import BreedSize
from pupmatch.matching.errors import InvalidPreferenceValue, InvalidRange, NormalizationError
from pupmatch.matching.models import (
    ANY_SIZE,
    ActivityLevel,
    ExperienceLevel,
    LivingSpace,
    MatchPreferences,
)
from pupmatch.matching.normalizer import normalize

VALID_INPUT = {
    "activityLevel": "moderate",
    "livingSpace": "small-yard",
    "familySize": 3,
    "childrenAges": [9, 2],
    "experienceLevel": "some-experience",
    "size": ["large", "small"],
}


def test_normalize_valid_input():
    prefs = normalize(VALID_INPUT)

    assert prefs.activity_level == ActivityLevel.moderate
    assert prefs.living_space == LivingSpace.small_yard
    assert prefs.experience_level == ExperienceLevel.some_experience
    assert prefs.family_size == 3
    assert prefs.children_ages == (2, 9)
    assert prefs.size == (BreedSize.small, BreedSize.large)
    assert prefs.grooming_tolerance is None


def test_enum_values_are_case_insensitive():
    prefs = normalize({
        "activityLevel": " Very-High ",
        "livingSpace": "FARM/ACREAGE",
        "experienceLevel": "First-Time",
    })
    assert prefs.activity_level == ActivityLevel.very_high
    assert prefs.living_space == LivingSpace.farm
    assert prefs.experience_level == ExperienceLevel.first_time


def test_optional_fields_default():
    prefs = normalize({
        "activityLevel": "low",
        "livingSpace": "apartment",
        "experienceLevel": "first-time",
    })
    assert prefs.family_size == 0
    assert prefs.children_ages == ()
    assert prefs.size == ANY_SIZE
    assert prefs.accepts_any_size


@pytest.mark.parametrize("size", [[], None, "any", ["any"], ["toy", "any"]])
def test_empty_or_wildcard_size_means_any(size):
    prefs = normalize({**VALID_INPUT, "size": size})
    assert prefs.size == ANY_SIZE
    assert prefs.accepts_size(BreedSize.giant)


def test_size_is_deduplicated_in_canonical_order():
    prefs = normalize({**VALID_INPUT, "size": ["giant", "toy", "giant", "Medium"]})
    assert prefs.size == (BreedSize.toy, BreedSize.medium, BreedSize.giant)
    assert not prefs.accepts_size(BreedSize.small)


def test_unknown_enum_names_the_field():
    with pytest.raises(NormalizationError) as exc_info:
        normalize({**VALID_INPUT, "activityLevel": "extreme"})

    errors = exc_info.value.errors
    assert len(errors) == 1
    assert isinstance(errors[0], InvalidPreferenceValue)
    assert errors[0].field == "activityLevel"
    assert errors[0].value == "extreme"


def test_missing_enum_is_invalid_value():
    raw = dict(VALID_INPUT)
    del raw["experienceLevel"]
    with pytest.raises(NormalizationError) as exc_info:
        normalize(raw)
    assert exc_info.value.fields == ["experienceLevel"]


def test_negative_family_size_is_invalid_range():
    with pytest.raises(NormalizationError) as exc_info:
        normalize({**VALID_INPUT, "familySize": -1})
    error = exc_info.value.errors[0]
    assert isinstance(error, InvalidRange)
    assert error.field == "familySize"


def test_negative_child_age_is_invalid_range():
    with pytest.raises(NormalizationError) as exc_info:
        normalize({**VALID_INPUT, "childrenAges": [4, -2]})
    error = exc_info.value.errors[0]
    assert isinstance(error, InvalidRange)
    assert error.field == "childrenAges"


def test_numeric_strings_are_accepted():
    prefs = normalize({**VALID_INPUT, "familySize": "4", "childrenAges": ["7", 3.0]})
    assert prefs.family_size == 4
    assert prefs.children_ages == (3, 7)


@pytest.mark.parametrize("family_size", ["--5", "²", "4.5", "five"])
def test_malformed_family_size_is_collected(family_size):
    with pytest.raises(NormalizationError) as exc_info:
        normalize({**VALID_INPUT, "familySize": family_size})
    error = exc_info.value.errors[0]
    assert isinstance(error, InvalidPreferenceValue)
    assert error.field == "familySize"


def test_non_ascii_child_age_is_collected():
    with pytest.raises(NormalizationError) as exc_info:
        normalize({**VALID_INPUT, "childrenAges": ["³", 4], "familySize": "--1"})
    assert exc_info.value.fields == ["familySize", "childrenAges"]
    assert all(isinstance(e, InvalidPreferenceValue) for e in exc_info.value.errors)


def test_all_violations_reported_together():
    raw = {
        "activityLevel": "extreme",
        "livingSpace": "castle",
        "familySize": -3,
        "childrenAges": [-1, "toddler"],
        "size": ["tiny"],
    }
    with pytest.raises(NormalizationError) as exc_info:
        normalize(raw)

    fields = exc_info.value.fields
    assert set(fields) == {
        "activityLevel",
        "livingSpace",
        "experienceLevel",
        "familySize",
        "childrenAges",
        "size",
    }
    assert fields.count("childrenAges") == 2
    codes = {e.to_dict()["code"] for e in exc_info.value.errors}
    assert codes == {"invalid_value", "invalid_range"}


def test_grooming_tolerance_extension_point():
    prefs = normalize({**VALID_INPUT, "groomingTolerance": 4})
    assert prefs.grooming_tolerance == 4

    with pytest.raises(NormalizationError) as exc_info:
        normalize({**VALID_INPUT, "groomingTolerance": 11})
    assert exc_info.value.fields == ["groomingTolerance"]


def test_non_mapping_input_rejected():
    with pytest.raises(NormalizationError):
        normalize(["low", "apartment"])


def test_preferences_are_immutable_and_round_trip():
    prefs = normalize(VALID_INPUT)
    with pytest.raises(ValidationError):
        prefs.family_size = 5

    wire = prefs.to_wire()
    assert wire["livingSpace"] == "small-yard"
    assert wire["size"] == ["small", "large"]
    assert normalize(wire) == prefs
    assert MatchPreferences.model_validate(wire) == prefs
