from __future__ import annotations

import logging

from fastapi import Depends, FastAPI, HTTPException

from .indexing.builder import RecipeIndex
from .indexing.store import IndexStoreError
from .profiles.provider import UserProfileProvider, get_default_provider
from .search.data_store import get_index
from .search.engine import SearchError, search
from .search.models import Recipe, SearchRequest, SearchResponse

logger = logging.getLogger(__name__)

app = FastAPI(title="Recipe Search API", version="1.0.0")


def index_dependency() -> RecipeIndex:
    try:
        return get_index()
    except IndexStoreError as exc:
        logger.error("Index unavailable: %s", exc)
        raise HTTPException(status_code=500, detail="Search failed") from exc


def profile_dependency() -> UserProfileProvider:
    return get_default_provider()


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/metadata")
def metadata(index: RecipeIndex = Depends(index_dependency)) -> dict:
    return index.facets()


@app.post("/search", response_model=SearchResponse)
def search_recipes(
    body: SearchRequest,
    index: RecipeIndex = Depends(index_dependency),
    profiles: UserProfileProvider = Depends(profile_dependency),
) -> SearchResponse:
    try:
        return search(body, index=index, profiles=profiles)
    except SearchError as exc:
        raise HTTPException(status_code=500, detail="Search failed") from exc


@app.get("/recipes/{recipe_id}", response_model=Recipe)
def recipe_detail(recipe_id: int, index: RecipeIndex = Depends(index_dependency)) -> Recipe:
    recipe = index.get(recipe_id)
    if recipe is None:
        raise HTTPException(status_code=404, detail="Recipe not found")
    return recipe
