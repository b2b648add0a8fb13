"""
SQLite persistence for a built ``RecipeIndex``.

Layout:
- ``recipes``: one row per recipe in corpus order, JSON payload.
- ``postings``: (category, term, recipe_id) with a lookup index on
  (category, term).
- ``idf_stats``: term -> document frequency.
- ``index_meta``: total_docs and build timestamp.

``publish`` writes a complete new database next to the target and swaps it
in with ``os.replace``; a reader opens either the old file or the new one.
"""
from __future__ import annotations

import logging
import os
import sqlite3
import time
from contextlib import closing
from pathlib import Path
from types import MappingProxyType

import pandas as pd
from pydantic import ValidationError

from ..search.models import Recipe
from .builder import IDFStats, IndexCategory, RecipeIndex

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE recipes (
    id INTEGER PRIMARY KEY,
    position INTEGER NOT NULL,
    payload TEXT NOT NULL
);
CREATE TABLE postings (
    category TEXT NOT NULL,
    term TEXT NOT NULL,
    recipe_id INTEGER NOT NULL,
    PRIMARY KEY (category, term, recipe_id)
);
CREATE INDEX idx_postings_lookup ON postings(category, term);
CREATE TABLE idf_stats (
    term TEXT PRIMARY KEY,
    doc_frequency INTEGER NOT NULL
);
CREATE TABLE index_meta (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL
);
"""


class IndexStoreError(RuntimeError):
    """The index store is missing, corrupt or unreadable."""


def _postings_frame(index: RecipeIndex) -> pd.DataFrame:
    rows = [
        (category.value, term, rid)
        for category, terms in index.postings.items()
        for term, ids in terms.items()
        for rid in sorted(ids)
    ]
    return pd.DataFrame(rows, columns=["category", "term", "recipe_id"])


class IndexStore:
    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def publish(self, index: RecipeIndex) -> Path:
        """Persist *index*, fully replacing whatever was published before."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        tmp_path.unlink(missing_ok=True)

        try:
            with closing(sqlite3.connect(tmp_path)) as conn:
                conn.executescript(_SCHEMA)
                conn.executemany(
                    "INSERT INTO recipes (id, position, payload) VALUES (?, ?, ?)",
                    [
                        (recipe.id, position, recipe.model_dump_json())
                        for position, recipe in enumerate(index.recipes.values())
                    ],
                )
                _postings_frame(index).to_sql("postings", conn, if_exists="append", index=False)
                pd.DataFrame(
                    sorted(index.idf_stats.doc_frequency.items()),
                    columns=["term", "doc_frequency"],
                ).to_sql("idf_stats", conn, if_exists="append", index=False)
                conn.executemany(
                    "INSERT INTO index_meta (key, value) VALUES (?, ?)",
                    [
                        ("total_docs", str(index.idf_stats.total_docs)),
                        ("built_at", str(time.time())),
                    ],
                )
                conn.commit()
            os.replace(tmp_path, self.path)
        except (sqlite3.Error, OSError, ValueError) as exc:
            tmp_path.unlink(missing_ok=True)
            raise IndexStoreError(f"failed to publish index to {self.path}: {exc}") from exc

        logger.info("Published index with %d recipes to %s", len(index), self.path)
        return self.path

    def load(self) -> RecipeIndex:
        """Open the published store read-only and materialise a ``RecipeIndex``."""
        if not self.path.is_file():
            raise IndexStoreError(f"index store not found: {self.path}")

        uri = f"{self.path.resolve().as_uri()}?mode=ro"
        try:
            with closing(sqlite3.connect(uri, uri=True)) as conn:
                recipes = [
                    Recipe.model_validate_json(payload)
                    for (payload,) in conn.execute(
                        "SELECT payload FROM recipes ORDER BY position"
                    )
                ]
                postings_df = pd.read_sql_query(
                    "SELECT category, term, recipe_id FROM postings", conn
                )
                idf_df = pd.read_sql_query("SELECT term, doc_frequency FROM idf_stats", conn)
                meta = dict(conn.execute("SELECT key, value FROM index_meta"))
        except (sqlite3.Error, pd.errors.DatabaseError, ValidationError) as exc:
            raise IndexStoreError(f"failed to load index from {self.path}: {exc}") from exc

        postings: dict[IndexCategory, dict[str, list[int]]] = {c: {} for c in IndexCategory}
        try:
            for (category, term), ids in postings_df.groupby(["category", "term"], sort=False)[
                "recipe_id"
            ]:
                postings[IndexCategory(category)][term] = ids.tolist()
            stats = IDFStats(
                total_docs=int(meta["total_docs"]),
                doc_frequency=MappingProxyType(dict(
                    zip(idf_df["term"].tolist(), idf_df["doc_frequency"].tolist())
                )),
            )
        except (KeyError, ValueError) as exc:
            raise IndexStoreError(f"index store {self.path} is inconsistent: {exc}") from exc

        return RecipeIndex.from_parts(recipes, postings, stats)
