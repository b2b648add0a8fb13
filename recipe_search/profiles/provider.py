"""
User Profile Provider.

The search engine only reads a per-request snapshot of a user's allergies,
pantry ingredients and stored booster preferences. Profiles are owned by an
external service; ``SqliteProfileProvider`` reads that service's tables
read-only and ``InMemoryProfileProvider`` backs tests and local runs.
"""
from __future__ import annotations

import json
import logging
import sqlite3
from contextlib import closing
from functools import lru_cache
from pathlib import Path
from typing import Protocol

from ..search.models import Boosters, UserProfile
from .config import DEFAULT_PROFILE_CONFIG, ProfileConfig

logger = logging.getLogger(__name__)


class ProfileLookupError(RuntimeError):
    """The profile backend failed; distinct from a user simply not existing."""


class UserProfileProvider(Protocol):
    def get_profile(self, user_id: int) -> UserProfile | None: ...


class InMemoryProfileProvider:
    def __init__(self, profiles: dict[int, UserProfile] | None = None) -> None:
        self._profiles: dict[int, UserProfile] = dict(profiles or {})

    def get_profile(self, user_id: int) -> UserProfile | None:
        profile = self._profiles.get(user_id)
        return profile.model_copy(deep=True) if profile else None

    def set_profile(self, user_id: int, profile: UserProfile) -> None:
        self._profiles[user_id] = profile


_PREFERENCE_COLUMNS: dict[str, str] = {
    "cuisines": "defaultCuisines",
    "diets": "defaultDiets",
    "meal_types": "defaultMealTypes",
    "time_buckets": "defaultTimeBuckets",
    "difficulties": "defaultDifficulties",
}


def _parse_json_list(raw: str | None, user_id: int, column: str) -> list[str]:
    if not raw:
        return []
    try:
        values = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("Ignoring malformed %s for user %s", column, user_id)
        return []
    if not isinstance(values, list):
        return []
    return [str(v) for v in values if v]


class SqliteProfileProvider:
    """Reads ``users``, ``user_allergies``, ``user_ingredients`` and ``user_preferences``."""

    def __init__(self, db_path: Path) -> None:
        self.db_path = Path(db_path)

    def get_profile(self, user_id: int) -> UserProfile | None:
        if not self.db_path.is_file():
            raise ProfileLookupError(f"profile database not found: {self.db_path}")

        uri = f"{self.db_path.resolve().as_uri()}?mode=ro"
        try:
            with closing(sqlite3.connect(uri, uri=True)) as conn:
                if conn.execute("SELECT 1 FROM users WHERE id = ?", (user_id,)).fetchone() is None:
                    return None
                allergies = [
                    row[0] for row in conn.execute(
                        "SELECT allergen FROM user_allergies WHERE userId = ? ORDER BY id", (user_id,)
                    )
                ]
                ingredients = [
                    row[0] for row in conn.execute(
                        "SELECT ingredient FROM user_ingredients WHERE userId = ? ORDER BY id", (user_id,)
                    )
                ]
                prefs_row = conn.execute(
                    f"SELECT {', '.join(_PREFERENCE_COLUMNS.values())} "
                    "FROM user_preferences WHERE userId = ?",
                    (user_id,),
                ).fetchone()
        except sqlite3.Error as exc:
            raise ProfileLookupError(f"failed to read profile {user_id}: {exc}") from exc

        preferences = Boosters()
        if prefs_row is not None:
            preferences = Boosters(**{
                field: _parse_json_list(raw, user_id, column)
                for (field, column), raw in zip(_PREFERENCE_COLUMNS.items(), prefs_row)
            })

        return UserProfile(allergies=allergies, ingredients=ingredients, preferences=preferences)


@lru_cache(maxsize=None)
def get_default_provider(config: ProfileConfig = DEFAULT_PROFILE_CONFIG) -> UserProfileProvider:
    if config.db_path is None:
        return InMemoryProfileProvider()
    return SqliteProfileProvider(config.db_path)
