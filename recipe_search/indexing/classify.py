from __future__ import annotations

import re

from .normalize import normalize_string

TIME_BUCKETS: tuple[str, ...] = ("0-15", "16-30", "31-60", "60+")
DIFFICULTIES: tuple[str, ...] = ("easy", "medium", "hard")

_EASY_TITLE_RE = re.compile(r"\b(?:easy|simple|quick)\b")
_HARD_TITLE_RE = re.compile(r"\b(?:hard|difficult|complex|advanced)\b")
_MEDIUM_TITLE_RE = re.compile(r"\b(?:medium|intermediate)\b")

DIET_ALIASES: dict[str, str] = {
    "ketogenic": "keto",
    "paleolithic": "paleo",
    "lacto ovo vegetarian": "vegetarian",
    "whole 30": "whole30",
}


def bucket_time(minutes: int | float | None) -> str:
    """Map a ready-in time to one of the four non-overlapping buckets."""
    value = minutes or 0
    if value <= 15:
        return "0-15"
    if value <= 30:
        return "16-30"
    if value <= 60:
        return "31-60"
    return "60+"


def compute_difficulty(title: str | None, ingredient_count: int, ready_in_minutes: int) -> str:
    """
    Derive a difficulty label from the title, ingredient count and time.

    Title keywords win (easy before hard before medium); otherwise thresholds:
    at most 7 ingredients and 30 minutes is easy, at most 12 and 60 is medium,
    anything else is hard.
    """
    lowered = normalize_string(title)
    if _EASY_TITLE_RE.search(lowered):
        return "easy"
    if _HARD_TITLE_RE.search(lowered):
        return "hard"
    if _MEDIUM_TITLE_RE.search(lowered):
        return "medium"

    if ingredient_count <= 7 and ready_in_minutes <= 30:
        return "easy"
    if ingredient_count <= 12 and ready_in_minutes <= 60:
        return "medium"
    return "hard"


def normalize_diet(diet: str | None) -> str:
    """Canonical diet label, e.g. "Lacto-Ovo Vegetarian" -> "vegetarian"."""
    lowered = " ".join(normalize_string(diet).replace("-", " ").split())
    return DIET_ALIASES.get(lowered, lowered)
