from __future__ import annotations

import logging
import os
from typing import Any

from fastapi import BackgroundTasks, Depends, FastAPI, HTTPException, Query, Request
from fastapi.responses import JSONResponse
from starlette.middleware.sessions import SessionMiddleware

from .auth.dependencies import current_user_id, require_user, sign_in
from .auth.models import LoginRequest
from .auth.users import authenticate
from .catalog.data_store import get_breeds
from .catalog.models import BreedSize
from .listings.models import ListingFilters, Puppy
from .listings.search import search_puppies
from .matching.errors import NormalizationError, PersistenceFailure
from .matching.models import (
    MatchPreferences,
    PuppyListResponse,
    RecommendationOutcome,
    RecommendationResponse,
)
from .matching.normalizer import normalize
from .matching.orchestrator import LocalRecommender, RecommendationOrchestrator
from .matching.persistence import get_preferences, save_preferences
from .matching.ranking import rank
from .matching.sort_adapter import breed_score_lookup, puppy_match_score, sort_by_best_match

logger = logging.getLogger(__name__)
logging.getLogger("pupmatch").setLevel(os.environ.get("LOG_LEVEL", "INFO").upper())

_SESSION_RESULTS_KEY = "match_results"

app = FastAPI(title="PupMatch Breed Matching API", version="1.0.0")
app.add_middleware(
    SessionMiddleware,
    secret_key=os.environ.get("SESSION_SECRET", "pupmatch-secret-change-in-production"),
)


@app.exception_handler(NormalizationError)
async def normalization_error_handler(request: Request, exc: NormalizationError) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content={
            "detail": "invalid_preferences",
            "errors": [e.to_dict() for e in exc.errors],
        },
    )


async def _search_listings(filters: ListingFilters) -> list[Puppy]:
    return search_puppies(filters)


def _local_orchestrator() -> RecommendationOrchestrator:
    return RecommendationOrchestrator(
        fetch_recommendations=LocalRecommender(),
        search_listings=_search_listings,
        save_preferences=save_preferences,
    )


def _session_snapshot(outcome: RecommendationOutcome) -> dict[str, Any]:
    # Cookie-backed session: keep ids and totals only, not full breed records.
    return {
        "preferences": outcome.preferences.to_wire(),
        "results": [
            {"breedId": r.breed.id, "name": r.breed.name, "total": r.score.total}
            for r in outcome.recommendations
        ],
    }


def _saved_preferences(request: Request) -> MatchPreferences | None:
    """Preferences for Best Match sorting: saved ones first, then this session's."""
    user_id = current_user_id(request)
    if user_id:
        saved = get_preferences(user_id)
        if saved is not None:
            return saved

    snapshot = request.session.get(_SESSION_RESULTS_KEY)
    if not snapshot:
        return None
    try:
        return normalize(snapshot["preferences"])
    except (KeyError, TypeError, NormalizationError):
        logger.warning("Ignoring unreadable session match results", exc_info=True)
        return None


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/breeds")
def breeds() -> dict:
    catalog = get_breeds()
    return {"breeds": list(catalog), "total": len(catalog)}


# ── Auth endpoints ───────────────────────────────────────────────────────


@app.post("/auth/login")
def login(body: LoginRequest, request: Request) -> dict:
    user = authenticate(body.username, body.password)
    if not user:
        raise HTTPException(status_code=401, detail="Invalid credentials")
    sign_in(request, user)
    return {"status": "ok", "user": user}


@app.post("/auth/logout")
def logout(request: Request) -> dict:
    request.session.clear()
    return {"status": "logged_out"}


@app.get("/auth/me")
def auth_me(user: dict = Depends(require_user)) -> dict:
    return user


# ── Matching endpoints ───────────────────────────────────────────────────


@app.get("/matching/preferences")
def read_preferences(user: dict = Depends(require_user)) -> dict:
    return {"matchPreferences": get_preferences(user["username"])}


@app.put("/matching/preferences")
def update_preferences(body: dict[str, Any], user: dict = Depends(require_user)) -> dict:
    preferences = normalize(body)
    try:
        save_preferences(user["username"], preferences)
    except PersistenceFailure as exc:
        logger.warning("Saving match preferences failed", exc_info=True)
        raise HTTPException(status_code=503, detail="Failed to save preferences") from exc
    return {"matchPreferences": preferences, "message": "Preferences saved successfully"}


@app.post("/matching/recommendations", response_model=RecommendationResponse)
async def recommendations(
    body: dict[str, Any],
    request: Request,
    background_tasks: BackgroundTasks,
    limit: int = Query(default=10, ge=1, le=50),
) -> RecommendationResponse:
    user_id = current_user_id(request)
    orchestrator = _local_orchestrator()

    outcome = await orchestrator.get_recommendations(body, user_id=user_id, limit=limit)
    # Preference saves finish after the response is sent.
    background_tasks.add_task(orchestrator.drain)

    if user_id is None and not outcome.fallback_applied:
        request.session[_SESSION_RESULTS_KEY] = _session_snapshot(outcome)

    return RecommendationResponse(
        preferences=outcome.preferences,
        recommendations=outcome.recommendations,
        puppies=outcome.puppies,
        puppy_matches=outcome.puppy_matches,
        total_breeds_scored=0 if outcome.fallback_applied else len(get_breeds()),
        fallback_applied=outcome.fallback_applied,
        notice=outcome.notice,
    )


@app.get("/matching/recommendations/last")
def last_recommendations(request: Request) -> dict:
    snapshot = request.session.get(_SESSION_RESULTS_KEY)
    if not snapshot:
        raise HTTPException(status_code=404, detail="No recommendations in this session")
    return snapshot


# ── Listing endpoints ────────────────────────────────────────────────────


@app.get("/puppies", response_model=PuppyListResponse)
def puppies(
    request: Request,
    breed: str | None = None,
    size: list[BreedSize] = Query(default=[]),
    gender: str | None = None,
    shipping: bool = False,
    verified: bool = False,
    country: str | None = None,
    state: str | None = None,
    sort: str = Query(default="default", pattern="^(default|best-match)$"),
) -> PuppyListResponse:
    filters = ListingFilters(
        breed=breed,
        size=size,
        gender=gender,
        shipping=shipping,
        verified=verified,
        country=country,
        state=state,
    )
    results = search_puppies(filters)

    if sort == "best-match":
        preferences = _saved_preferences(request)
        if preferences is not None:
            ranked = rank(preferences, get_breeds())
            lookup = breed_score_lookup(ranked)
            results = sort_by_best_match(results, ranked)
            return PuppyListResponse(
                puppies=results,
                total=len(results),
                sorted_by="best-match",
                match_scores={p.id: puppy_match_score(p, lookup) for p in results},
            )

    return PuppyListResponse(puppies=results, total=len(results))
