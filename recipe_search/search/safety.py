from __future__ import annotations

import logging
from typing import Iterable

from ..indexing.builder import RecipeIndex
from ..indexing.normalize import normalize, normalize_string
from .models import Recipe

logger = logging.getLogger(__name__)


def ingredient_forms(text: str | None) -> frozenset[str]:
    """
    Comparable forms of an ingredient or allergen: the case/space-collapsed
    text and its normalised form. Forms shorter than two characters are
    dropped, so blank or garbage terms match nothing.
    """
    collapsed = " ".join(normalize_string(text).split())
    return frozenset(form for form in (collapsed, normalize(text)) if len(form) >= 2)


def forms_overlap(left: frozenset[str], right: frozenset[str]) -> bool:
    """Substring relationship in either direction between any two forms."""
    return any(a in b or b in a for a in left for b in right)


def pantry_form(text: str | None) -> frozenset[str]:
    """
    Single comparable form for pantry matching: the normalised text, or the
    collapsed text when normalisation leaves nothing (e.g. "salt").

    Stricter than ``ingredient_forms``: modifiers never take part, so "oil"
    does not cover "boiled eggs".
    """
    form = normalize(text) or " ".join(normalize_string(text).split())
    return frozenset({form}) if len(form) >= 2 else frozenset()


def contains_allergen(recipe: Recipe, allergen_forms: list[frozenset[str]]) -> bool:
    for ingredient in recipe.ingredients:
        forms = ingredient_forms(ingredient.name)
        if any(forms_overlap(forms, allergen) for allergen in allergen_forms):
            return True
    return False


def exclude_allergens(
    index: RecipeIndex,
    candidates: Iterable[int],
    allergens: Iterable[str],
) -> list[int]:
    """
    Drop every candidate with an ingredient matching any allergen.

    Runs on every search; there is no flag that skips it. Order of the
    surviving candidates is preserved.
    """
    candidates = list(candidates)
    allergen_forms = [forms for forms in map(ingredient_forms, allergens) if forms]
    if not allergen_forms:
        return candidates

    kept: list[int] = []
    for rid in candidates:
        recipe = index.get(rid)
        if recipe is None or contains_allergen(recipe, allergen_forms):
            continue
        kept.append(rid)

    logger.debug("Allergen filter removed %d of %d candidates", len(candidates) - len(kept), len(candidates))
    return kept
