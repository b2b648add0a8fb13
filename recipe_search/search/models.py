from __future__ import annotations

from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, Field, field_validator

from ..indexing.classify import normalize_diet
from ..indexing.normalize import normalize_string

Difficulty = Literal["easy", "medium", "hard"]


def _none_to_list(value: Any) -> Any:
    return [] if value is None else value


def _clean_terms(values: list[str]) -> list[str]:
    """Lower-case, trim and de-duplicate while keeping first-seen order."""
    seen: dict[str, None] = {}
    for value in values:
        term = normalize_string(value)
        if term:
            seen.setdefault(term, None)
    return list(seen)


class Ingredient(BaseModel):
    id: int | None = None
    name: str = Field(..., min_length=1)
    amount: float | None = None
    unit: str | None = None

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("ingredient name must not be blank")
        return value


class Recipe(BaseModel):
    id: int
    title: str = Field(..., min_length=1)
    ready_in_minutes: int = Field(
        default=0, ge=0, validation_alias=AliasChoices("ready_in_minutes", "readyInMinutes")
    )
    cuisines: list[str] = Field(default_factory=list)
    diets: list[str] = Field(default_factory=list)
    dish_types: list[str] = Field(
        default_factory=list, validation_alias=AliasChoices("dish_types", "dishTypes")
    )
    ingredients: list[Ingredient] = Field(
        default_factory=list,
        validation_alias=AliasChoices("ingredients", "extendedIngredients"),
    )

    # Display-only fields, never used for ranking.
    image: str | None = None
    image_type: str | None = Field(
        default=None, validation_alias=AliasChoices("image_type", "imageType")
    )
    summary: str | None = None
    instructions: str | None = None
    servings: int | None = None
    source_url: str | None = Field(
        default=None,
        validation_alias=AliasChoices("source_url", "sourceUrl", "spoonacularSourceUrl"),
    )

    # Derived by the indexer.
    difficulty: Difficulty | None = None
    time_bucket: str | None = None

    @field_validator("cuisines", "diets", "dish_types", "ingredients", mode="before")
    @classmethod
    def _lists_default_empty(cls, value: Any) -> Any:
        return _none_to_list(value)

    @field_validator("ready_in_minutes", mode="before")
    @classmethod
    def _missing_time_is_zero(cls, value: Any) -> Any:
        return 0 if value is None else value

    @field_validator("title")
    @classmethod
    def _strip_title(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("title must not be blank")
        return value


class CategorySelection(BaseModel):
    """Shared shape of hard filters and soft boosters; empty list means unset."""

    cuisines: list[str] = Field(default_factory=list)
    diets: list[str] = Field(default_factory=list)
    meal_types: list[str] = Field(
        default_factory=list, validation_alias=AliasChoices("meal_types", "mealTypes")
    )
    time_buckets: list[str] = Field(
        default_factory=list, validation_alias=AliasChoices("time_buckets", "timeBuckets")
    )
    difficulties: list[str] = Field(default_factory=list)

    @field_validator("*", mode="before")
    @classmethod
    def _none_is_unset(cls, value: Any) -> Any:
        return _none_to_list(value)

    @field_validator("cuisines", "meal_types", "time_buckets", "difficulties")
    @classmethod
    def _clean(cls, values: list[str]) -> list[str]:
        return _clean_terms(values)

    @field_validator("diets")
    @classmethod
    def _clean_diets(cls, values: list[str]) -> list[str]:
        return _clean_terms([normalize_diet(v) for v in values])

    def is_empty(self) -> bool:
        return not (
            self.cuisines or self.diets or self.meal_types
            or self.time_buckets or self.difficulties
        )


class Filters(CategorySelection):
    """Explicit hard constraints: a recipe must satisfy every non-empty category."""


class Boosters(CategorySelection):
    """Soft preferences: only ever add to a recipe's score."""

    @classmethod
    def resolve(cls, implicit: Boosters, stored: Boosters | None) -> Boosters:
        """Per category, query-derived boosters win; otherwise the stored default."""
        if stored is None:
            return implicit.model_copy()
        return cls(
            cuisines=implicit.cuisines or stored.cuisines,
            diets=implicit.diets or stored.diets,
            meal_types=implicit.meal_types or stored.meal_types,
            time_buckets=implicit.time_buckets or stored.time_buckets,
            difficulties=implicit.difficulties or stored.difficulties,
        )


class UserProfile(BaseModel):
    allergies: list[str] = Field(default_factory=list)
    ingredients: list[str] = Field(default_factory=list)
    preferences: Boosters = Field(default_factory=Boosters)


class QueryPlan(BaseModel):
    free_text_terms: list[str] = Field(default_factory=list)
    boosters: Boosters = Field(default_factory=Boosters)


class SearchRequest(BaseModel):
    query: str = Field(default="", validation_alias=AliasChoices("query", "searchQuery"))
    filters: Filters = Field(
        default_factory=Filters,
        validation_alias=AliasChoices("filters", "explicit_filters", "explicitFilters"),
    )
    user_id: int | None = Field(default=None, validation_alias=AliasChoices("user_id", "userId"))
    ad_hoc_ingredients: list[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices(
            "ad_hoc_ingredients", "adHocIngredients", "userIngredients"
        ),
    )
    ingredient_logic: Literal["AND", "OR"] | None = Field(
        default=None, validation_alias=AliasChoices("ingredient_logic", "ingredientLogic")
    )
    only_user_ingredients: bool = Field(
        default=False,
        validation_alias=AliasChoices("only_user_ingredients", "onlyUserIngredients"),
    )

    @field_validator("filters", mode="before")
    @classmethod
    def _missing_filters(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_validator("ad_hoc_ingredients", mode="before")
    @classmethod
    def _missing_ingredients(cls, value: Any) -> Any:
        return _none_to_list(value)


class SearchResult(BaseModel):
    recipe: Recipe
    score: float
    matched_ingredients: list[str] = Field(default_factory=list)


class SearchResponse(BaseModel):
    results: list[SearchResult]
    total_candidates: int
    free_text_terms: list[str] = Field(default_factory=list)
    boosters: Boosters = Field(default_factory=Boosters)
