from __future__ import annotations

import logging
from enum import Enum
from typing import Any

import bcrypt

logger = logging.getLogger(__name__)


class Role(str, Enum):
    adopter = "adopter"
    breeder = "breeder"


# username -> (password, role) for the marketplace demo.
DEMO_ACCOUNTS: dict[str, tuple[str, Role]] = {
    "adopter": ("adopter123", Role.adopter),
    "breeder": ("breeder123", Role.breeder),
}

_accounts: dict[str, dict[str, Any]] = {}


def _profile(username: str) -> dict[str, str]:
    return {"username": username, "role": _accounts[username]["role"].value}


def register_account(username: str, password: str, role: Role = Role.adopter) -> dict[str, str]:
    """Create or replace an account and return its public profile."""
    username = username.strip()
    if not username or not password:
        raise ValueError("username and password are required")
    _accounts[username] = {
        "password_hash": bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()),
        "role": Role(role),
    }
    return _profile(username)


def authenticate(username: str, password: str) -> dict[str, str] | None:
    """Check credentials against the bcrypt hash; ``None`` when they don't match."""
    username = username.strip()
    record = _accounts.get(username)
    if record is None or not bcrypt.checkpw(password.encode("utf-8"), record["password_hash"]):
        logger.info("Rejected sign-in for %r", username)
        return None
    return _profile(username)


def seed_demo_accounts() -> None:
    for username, (password, role) in DEMO_ACCOUNTS.items():
        register_account(username, password, role)


seed_demo_accounts()
