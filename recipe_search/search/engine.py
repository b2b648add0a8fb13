from __future__ import annotations

import logging
import time
from datetime import datetime

from ..indexing.builder import RecipeIndex
from ..indexing.store import IndexStoreError
from ..profiles.provider import ProfileLookupError, UserProfileProvider
from .config import DEFAULT_SEARCH_CONFIG, SearchConfig
from .data_store import get_index
from .models import Boosters, SearchRequest, SearchResponse, UserProfile
from .query_planner import parse_query
from .retrieval import retrieve
from .safety import exclude_allergens, forms_overlap, pantry_form
from .scoring import combine_ingredients, score_candidates

logger = logging.getLogger(__name__)


class SearchError(RuntimeError):
    """The search could not complete; no partial results are returned."""


def _uses_only(index: RecipeIndex, candidates: list[int], ingredients: list[str]) -> list[int]:
    available = [f for f in map(pantry_form, ingredients) if f]
    kept: list[int] = []
    for rid in candidates:
        recipe = index.get(rid)
        if recipe is None or not recipe.ingredients:
            continue
        if all(
            any(forms_overlap(pantry_form(ing.name), have) for have in available)
            for ing in recipe.ingredients
        ):
            kept.append(rid)
    return kept


def _load_profile(profiles: UserProfileProvider | None, user_id: int | None) -> UserProfile | None:
    if user_id is None or profiles is None:
        return None
    profile = profiles.get_profile(user_id)
    if profile is None:
        logger.debug("No profile for user %s; searching without personalisation", user_id)
    return profile


def search(
    request: SearchRequest,
    *,
    index: RecipeIndex | None = None,
    profiles: UserProfileProvider | None = None,
    now: datetime | None = None,
    config: SearchConfig = DEFAULT_SEARCH_CONFIG,
) -> SearchResponse:
    """
    Run one search: plan -> retrieve -> allergen exclusion -> score.

    Raises ``SearchError`` if the index or the profile backend fails.
    """
    start_time = time.time()

    try:
        index = index if index is not None else get_index()
        profile = _load_profile(profiles, request.user_id)
    except (IndexStoreError, ProfileLookupError) as exc:
        logger.error("Search failed: %s", exc)
        raise SearchError("search failed") from exc

    plan = parse_query(request.query)

    candidates = retrieve(
        index,
        plan.free_text_terms,
        request.filters,
        limit=config.candidate_limit,
        ad_hoc_ingredients=request.ad_hoc_ingredients,
        ingredient_logic=request.ingredient_logic,
    )
    total_candidates = len(candidates)

    allergies = profile.allergies if profile else []
    candidates = exclude_allergens(index, candidates, allergies)

    ingredients = combine_ingredients(
        request.ad_hoc_ingredients, profile.ingredients if profile else []
    )
    if request.only_user_ingredients:
        candidates = _uses_only(index, candidates, ingredients)

    boosters = Boosters.resolve(plan.boosters, profile.preferences if profile else None)

    results = score_candidates(
        index,
        candidates,
        plan.free_text_terms,
        ingredients,
        boosters,
        explicit_filters=request.filters,
        now=now,
        config=config,
    )

    elapsed_ms = round((time.time() - start_time) * 1000, 1)
    logger.debug(
        "Search %r: %d candidates, %d after safety, %d returned in %sms",
        request.query, total_candidates, len(candidates), len(results), elapsed_ms,
    )

    return SearchResponse(
        results=results,
        total_candidates=total_candidates,
        free_text_terms=plan.free_text_terms,
        boosters=boosters,
    )
