from __future__ import annotations

from datetime import datetime
from typing import Iterable

from ..indexing.builder import RecipeIndex
from ..indexing.classify import bucket_time, compute_difficulty, normalize_diet
from ..indexing.normalize import normalize_string, tokenize
from .config import DEFAULT_SEARCH_CONFIG, ScoringWeights, SearchConfig
from .models import Boosters, Filters, Recipe, SearchResult
from .safety import forms_overlap, pantry_form

# Points per (period, dish type); a recipe takes its best-scoring dish type.
TIME_OF_DAY_BONUS: dict[str, dict[str, float]] = {
    "morning": {
        "breakfast": 10, "morning meal": 10, "brunch": 8,
        "beverage": 4, "drink": 4, "bread": 3, "snack": 2,
    },
    "afternoon": {
        "lunch": 10, "salad": 7, "soup": 6, "brunch": 5, "snack": 5,
        "fingerfood": 4, "main course": 3, "main dish": 3, "side dish": 2,
    },
    "evening": {
        "dinner": 10, "main course": 8, "main dish": 8, "dessert": 6,
        "side dish": 5, "appetizer": 5, "starter": 5, "soup": 4,
    },
}


def period_of_day(now: datetime) -> str:
    if 5 <= now.hour < 11:
        return "morning"
    if 11 <= now.hour < 17:
        return "afternoon"
    return "evening"


def time_of_day_bonus(recipe: Recipe, period: str) -> float:
    table = TIME_OF_DAY_BONUS.get(period, {})
    return max((table.get(normalize_string(d), 0.0) for d in recipe.dish_types), default=0.0)


def title_relevance(
    index: RecipeIndex, recipe_id: int, terms: list[str], weights: ScoringWeights,
) -> float:
    """Sum of IDF over query terms present in the title, scaled."""
    title_tokens = index.title_tokens(recipe_id)
    total = sum(index.idf_stats.idf(term) for term in terms if term in title_tokens)
    return total * weights.title_idf_multiplier


def ingredient_coverage(
    recipe: Recipe,
    available: list[frozenset[str]],
    weights: ScoringWeights,
) -> tuple[float, list[str]]:
    """Return the coverage score and the names of covered recipe ingredients."""
    if not available or not recipe.ingredients:
        return 0.0, []

    matched = [
        ingredient.name
        for ingredient in recipe.ingredients
        if any(forms_overlap(pantry_form(ingredient.name), have) for have in available)
    ]
    coverage = len(matched) / len(recipe.ingredients)
    score = len(matched) * weights.matched_ingredient + min(
        coverage * weights.coverage_cap, weights.coverage_cap
    )
    return score, matched


def booster_score(recipe: Recipe, boosters: Boosters, weights: ScoringWeights) -> float:
    score = 0.0

    if boosters.cuisines:
        cuisines = {normalize_string(c) for c in recipe.cuisines}
        score += weights.cuisine * len(cuisines.intersection(boosters.cuisines))
    if boosters.diets:
        diets = {normalize_diet(d) for d in recipe.diets}
        score += weights.diet * len(diets.intersection(boosters.diets))
    if boosters.meal_types:
        dish_types = {normalize_string(d) for d in recipe.dish_types}
        score += weights.meal_type * len(dish_types.intersection(boosters.meal_types))
    if boosters.difficulties:
        difficulty = recipe.difficulty or compute_difficulty(
            recipe.title, len(recipe.ingredients), recipe.ready_in_minutes
        )
        if difficulty in boosters.difficulties:
            score += weights.difficulty
    if boosters.time_buckets:
        bucket = recipe.time_bucket or bucket_time(recipe.ready_in_minutes)
        # Flat bonus once, for the first preferred bucket the recipe falls in.
        for preferred in boosters.time_buckets:
            if preferred == bucket:
                score += weights.time_bucket
                break

    return score


def combine_ingredients(*groups: Iterable[str]) -> list[str]:
    """Merge ingredient lists, de-duplicated on their normalised form."""
    merged: dict[str, str] = {}
    for group in groups:
        for item in group:
            key = " ".join(tokenize(item)) or " ".join(normalize_string(item).split())
            if key:
                merged.setdefault(key, item)
    return list(merged.values())


def score_candidates(
    index: RecipeIndex,
    candidates: Iterable[int],
    free_text_terms: Iterable[str],
    pantry_ingredients: Iterable[str],
    boosters: Boosters,
    *,
    explicit_filters: Filters | None = None,
    now: datetime | None = None,
    config: SearchConfig = DEFAULT_SEARCH_CONFIG,
) -> list[SearchResult]:
    """
    Score every candidate and return the top ``config.result_limit``.

    The score is the sum of title relevance, time-of-day bonus, ingredient
    coverage and category boosters. Ties keep candidate order. Pure apart
    from *now*, which defaults to the local wall clock.
    """
    weights = config.weights
    terms = list(dict.fromkeys(w for term in free_text_terms for w in tokenize(term)))
    available = [f for f in map(pantry_form, pantry_ingredients) if f]

    filters = explicit_filters or Filters()
    period = None
    if not (filters.meal_types or boosters.meal_types):
        period = period_of_day(now or datetime.now())

    scored: list[tuple[float, Recipe, list[str]]] = []
    for rid in candidates:
        recipe = index.get(rid)
        if recipe is None:
            continue

        score = title_relevance(index, rid, terms, weights)
        if period is not None:
            score += time_of_day_bonus(recipe, period)
        coverage, matched = ingredient_coverage(recipe, available, weights)
        score += coverage
        score += booster_score(recipe, boosters, weights)
        scored.append((score, recipe, matched))

    # sorted() is stable, so equal scores keep retrieval order.
    ranked = sorted(scored, key=lambda item: item[0], reverse=True)[: config.result_limit]
    return [
        SearchResult(recipe=recipe, score=round(score, 4), matched_ingredients=matched)
        for score, recipe, matched in ranked
    ]
