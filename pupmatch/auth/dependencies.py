from __future__ import annotations

from fastapi import HTTPException, Request

_SESSION_USER_KEY = "user"


def sign_in(request: Request, user: dict) -> None:
    request.session[_SESSION_USER_KEY] = user


def get_current_user(request: Request) -> dict | None:
    """Signed-in account from the session cookie; ``None`` for anonymous adopters."""
    return request.session.get(_SESSION_USER_KEY)


def current_user_id(request: Request) -> str | None:
    user = get_current_user(request)
    return user["username"] if user else None


def require_user(request: Request) -> dict:
    """Dependency for account-only routes: 401 for anonymous visitors."""
    user = get_current_user(request)
    if not user:
        raise HTTPException(status_code=401, detail="Not signed in")
    return user
