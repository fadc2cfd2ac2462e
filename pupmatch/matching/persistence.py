from __future__ import annotations

import time
from typing import Any

from .errors import PersistenceFailure
from .models import MatchPreferences

_preferences: dict[str, dict[str, Any]] = {}


def save_preferences(user_id: str, preferences: MatchPreferences) -> None:
    """Store preferences for a signed-in user in their wire form."""
    if not user_id:
        raise PersistenceFailure("Cannot save preferences without a user id")
    _preferences[user_id] = {
        "matchPreferences": preferences.to_wire(),
        "updatedAt": time.time(),
    }


def get_preferences(user_id: str) -> MatchPreferences | None:
    record = _preferences.get(user_id)
    if not record:
        return None
    return MatchPreferences.model_validate(record["matchPreferences"])


def clear_preferences() -> None:
    _preferences.clear()
