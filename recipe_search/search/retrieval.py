from __future__ import annotations

import logging
from functools import reduce
from typing import Iterable, Literal

from ..indexing.builder import IndexCategory, RecipeIndex
from ..indexing.normalize import tokenize
from .models import Filters

logger = logging.getLogger(__name__)

FILTER_CATEGORIES: tuple[tuple[str, IndexCategory], ...] = (
    ("cuisines", IndexCategory.cuisine),
    ("diets", IndexCategory.diet),
    ("meal_types", IndexCategory.meal_type),
    ("time_buckets", IndexCategory.time_bucket),
    ("difficulties", IndexCategory.difficulty),
)


def _union(index: RecipeIndex, category: IndexCategory, terms: Iterable[str]) -> set[int]:
    ids: set[int] = set()
    for term in terms:
        ids |= index.lookup(category, term)
    return ids


def _free_text_ids(index: RecipeIndex, terms: Iterable[str]) -> set[int]:
    """Recipes whose title OR ingredient tokens contain any of *terms*."""
    words = [word for term in terms for word in tokenize(term)]
    return _union(index, IndexCategory.title, words) | _union(
        index, IndexCategory.ingredient, words
    )


def _ingredient_ids(
    index: RecipeIndex,
    ingredients: Iterable[str],
    logic: Literal["AND", "OR"],
) -> set[int] | None:
    sets = [
        _union(index, IndexCategory.ingredient, words)
        for words in (tokenize(ingredient) for ingredient in ingredients)
        if words
    ]
    if not sets:
        return None
    if logic == "AND":
        return reduce(set.intersection, sets)
    return set().union(*sets)


def retrieve(
    index: RecipeIndex,
    free_text_terms: Iterable[str],
    filters: Filters | None = None,
    *,
    limit: int = 500,
    ad_hoc_ingredients: Iterable[str] = (),
    ingredient_logic: Literal["AND", "OR"] | None = None,
) -> list[int]:
    """
    Resolve hard filters and free-text terms into candidate recipe ids.

    Filter categories are AND-ed, values inside one category are OR-ed, and
    an empty category imposes nothing. Free-text terms match the title or
    ingredient index. With no constraints at all every recipe is a candidate.
    Results are in corpus order and capped at *limit*.
    """
    filters = filters or Filters()
    allowed: set[int] | None = None

    for attr, category in FILTER_CATEGORIES:
        values = getattr(filters, attr)
        if not values:
            continue
        matched = _union(index, category, values)
        allowed = matched if allowed is None else allowed & matched

    terms = list(free_text_terms)
    if terms:
        matched = _free_text_ids(index, terms)
        allowed = matched if allowed is None else allowed & matched

    if ingredient_logic:
        matched = _ingredient_ids(index, ad_hoc_ingredients, ingredient_logic)
        if matched is not None:
            allowed = matched if allowed is None else allowed & matched

    candidates = index.all_ids() if allowed is None else index.in_corpus_order(allowed)
    logger.debug("Retrieved %d candidates (cap %d)", len(candidates), limit)
    return candidates[:limit]
