from __future__ import annotations

import logging
import math
from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Iterable, Mapping

from pydantic import ValidationError

from ..search.models import Recipe
from .classify import bucket_time, compute_difficulty, normalize_diet
from .normalize import normalize_string, tokenize

logger = logging.getLogger(__name__)


class IndexCategory(str, Enum):
    title = "title"
    ingredient = "ingredient"
    cuisine = "cuisine"
    diet = "diet"
    meal_type = "meal_type"
    time_bucket = "time_bucket"
    difficulty = "difficulty"


_EMPTY: frozenset[int] = frozenset()

# Always recomputed by the indexer; corpus-supplied values are discarded.
_DERIVED_KEYS = frozenset({"difficulty", "time_bucket", "timeBucket"})


@dataclass(frozen=True)
class IDFStats:
    total_docs: int
    doc_frequency: Mapping[str, int]

    def idf(self, term: str) -> float:
        """``log(total_docs / df)``; unknown terms weigh nothing."""
        df = self.doc_frequency.get(term, 0)
        if df <= 0 or self.total_docs <= 0:
            return 0.0
        return math.log(self.total_docs / df)


@dataclass(frozen=True)
class RecipeIndex:
    """
    A finished, read-only index: recipes in corpus order, per-category
    postings (term -> frozenset of recipe ids) and IDF statistics.

    Instances are only produced by ``IndexBuilder.finalize`` or by loading a
    published store, and are never mutated afterwards.
    """

    recipes: Mapping[int, Recipe]
    postings: Mapping[IndexCategory, Mapping[str, frozenset[int]]]
    idf_stats: IDFStats
    skipped: int = 0
    _order: Mapping[int, int] = field(default_factory=dict, repr=False)

    @classmethod
    def from_parts(
        cls,
        recipes: Iterable[Recipe],
        postings: Mapping[IndexCategory, Mapping[str, Iterable[int]]],
        idf_stats: IDFStats,
        skipped: int = 0,
    ) -> RecipeIndex:
        ordered = {r.id: r for r in recipes}
        frozen = {
            category: MappingProxyType(
                {term: frozenset(ids) for term, ids in postings.get(category, {}).items()}
            )
            for category in IndexCategory
        }
        return cls(
            recipes=MappingProxyType(ordered),
            postings=MappingProxyType(frozen),
            idf_stats=idf_stats,
            skipped=skipped,
            _order=MappingProxyType({rid: pos for pos, rid in enumerate(ordered)}),
        )

    def __len__(self) -> int:
        return len(self.recipes)

    def get(self, recipe_id: int) -> Recipe | None:
        return self.recipes.get(recipe_id)

    def lookup(self, category: IndexCategory, term: str) -> frozenset[int]:
        return self.postings[category].get(term, _EMPTY)

    def all_ids(self) -> list[int]:
        return list(self.recipes)

    def in_corpus_order(self, ids: Iterable[int]) -> list[int]:
        return sorted(ids, key=lambda rid: self._order.get(rid, len(self._order)))

    def title_tokens(self, recipe_id: int) -> frozenset[str]:
        recipe = self.recipes.get(recipe_id)
        return frozenset(tokenize(recipe.title)) if recipe else _EMPTY

    def facets(self) -> dict[str, Any]:
        def _terms(category: IndexCategory) -> list[str]:
            return sorted(self.postings[category])

        return {
            "total_recipes": len(self.recipes),
            "cuisines": _terms(IndexCategory.cuisine),
            "diets": _terms(IndexCategory.diet),
            "meal_types": _terms(IndexCategory.meal_type),
            "time_buckets": _terms(IndexCategory.time_bucket),
            "difficulties": _terms(IndexCategory.difficulty),
        }


class IndexBuilder:
    """
    Accumulates postings for one indexing run.

    ``add`` grows per-term id lists; ``finalize`` de-duplicates and freezes
    them into a ``RecipeIndex``. A builder can be finalised only once.
    """

    def __init__(self) -> None:
        self._recipes: dict[int, Recipe] = {}
        self._postings: dict[IndexCategory, defaultdict[str, list[int]]] = {
            category: defaultdict(list) for category in IndexCategory
        }
        self._skipped = 0
        self._finalized = False

    def _post(self, category: IndexCategory, term: str, recipe_id: int) -> None:
        if term:
            self._postings[category][term].append(recipe_id)

    def add(self, recipe: Recipe) -> Recipe:
        if self._finalized:
            raise RuntimeError("IndexBuilder has already been finalized")
        if recipe.id in self._recipes:
            raise ValueError(f"duplicate recipe id {recipe.id}")

        recipe = recipe.model_copy(update={
            "difficulty": compute_difficulty(
                recipe.title, len(recipe.ingredients), recipe.ready_in_minutes
            ),
            "time_bucket": bucket_time(recipe.ready_in_minutes),
        })
        rid = recipe.id
        self._recipes[rid] = recipe

        # Word-level so "chicken" matches "chicken breast".
        for token in tokenize(recipe.title):
            self._post(IndexCategory.title, token, rid)
        for ingredient in recipe.ingredients:
            for token in tokenize(ingredient.name):
                self._post(IndexCategory.ingredient, token, rid)

        for cuisine in recipe.cuisines:
            self._post(IndexCategory.cuisine, normalize_string(cuisine), rid)
        for diet in recipe.diets:
            self._post(IndexCategory.diet, normalize_diet(diet), rid)
        for dish_type in recipe.dish_types:
            self._post(IndexCategory.meal_type, normalize_string(dish_type), rid)

        self._post(IndexCategory.time_bucket, recipe.time_bucket, rid)
        self._post(IndexCategory.difficulty, recipe.difficulty, rid)
        return recipe

    def add_raw(self, raw: Any) -> bool:
        """Validate and add one corpus record; malformed records are skipped."""
        if isinstance(raw, dict):
            raw = {k: v for k, v in raw.items() if k not in _DERIVED_KEYS}
        try:
            self.add(Recipe.model_validate(raw))
        except (ValidationError, ValueError, TypeError):
            self._skipped += 1
            record_id = raw.get("id") if isinstance(raw, dict) else None
            logger.warning("Skipping malformed recipe (id=%s)", record_id, exc_info=True)
            return False
        return True

    def finalize(self) -> RecipeIndex:
        if self._finalized:
            raise RuntimeError("IndexBuilder has already been finalized")
        self._finalized = True

        postings = {
            category: {term: sorted(set(ids)) for term, ids in terms.items()}
            for category, terms in self._postings.items()
        }

        # Document frequency over the union of title and ingredient postings.
        doc_frequency: dict[str, int] = {}
        title = postings[IndexCategory.title]
        ingredient = postings[IndexCategory.ingredient]
        for term in title.keys() | ingredient.keys():
            doc_frequency[term] = len(set(title.get(term, ())) | set(ingredient.get(term, ())))

        stats = IDFStats(
            total_docs=len(self._recipes),
            doc_frequency=MappingProxyType(doc_frequency),
        )
        return RecipeIndex.from_parts(
            self._recipes.values(), postings, stats, skipped=self._skipped
        )


def build(corpus: Iterable[Any], progress_every: int = 100) -> RecipeIndex:
    """
    Build a complete index from raw corpus records in a single pass.

    Every call starts from an empty builder, so the result never merges with
    an earlier index.
    """
    builder = IndexBuilder()
    seen = 0
    for seen, raw in enumerate(corpus, start=1):
        builder.add_raw(raw)
        if progress_every and seen % progress_every == 0:
            logger.info("Indexed %d recipes...", seen)

    index = builder.finalize()
    logger.info(
        "Index built: %d recipes (%d skipped), %d unique terms",
        len(index), index.skipped, len(index.idf_stats.doc_frequency),
    )
    return index
