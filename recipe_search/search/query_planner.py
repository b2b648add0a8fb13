from __future__ import annotations

import logging
import re

from ..indexing.classify import bucket_time, normalize_diet
from ..indexing.normalize import normalize_string, tokenize
from .models import Boosters, QueryPlan

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Category patterns
# ---------------------------------------------------------------------------

_CUISINE_RE = re.compile(
    r"\b(italian|mexican|chinese|indian|french|thai|japanese|greek|american"
    r"|mediterranean|korean|spanish|vietnamese)\b"
)
_DIET_RE = re.compile(
    r"\b(vegetarian|vegan|gluten[\s-]free|dairy[\s-]free|paleo|keto|pescatarian)\b"
)
_MEAL_TYPE_RE = re.compile(
    r"\b(breakfast|lunch|dinner|dessert|snack|appetizer|side dish|main course|brunch)(?:e?s)?\b"
)
# "quick" belongs to the time pattern, not to difficulty.
_DIFFICULTY_RE = re.compile(r"\b(easy|medium|hard|simple|difficult)\b")
_MINUTES_RE = re.compile(r"\b(?:under|in|within)\s+(\d+)\s*min(?:ute)?s?\b")
_QUICK_RE = re.compile(r"\b(?:quick|fast)\b")

_FILLER_RE = re.compile(r"\b(?:recipes?|make|cooking|with)\b")

_DIFFICULTY_SYNONYMS: dict[str, str] = {
    "simple": "easy",
    "difficult": "hard",
}


def _unique(values: list[str]) -> list[str]:
    return list(dict.fromkeys(values))


def parse_query(query: str | None) -> QueryPlan:
    """
    Split a raw query into free-text terms and implicit boosters.

    Category words (cuisine, diet, meal type, difficulty, time phrases) become
    boosters and are removed together with filler words; what is left is
    normalised into the free-text terms used against the title and
    ingredient indices.
    """
    text = " ".join(normalize_string(query).split())
    if not text:
        return QueryPlan()

    cuisines = [m.group(1) for m in _CUISINE_RE.finditer(text)]
    diets = [normalize_diet(m.group(1)) for m in _DIET_RE.finditer(text)]
    meal_types = [m.group(1) for m in _MEAL_TYPE_RE.finditer(text)]

    difficulties: list[str] = []
    difficulty_match = _DIFFICULTY_RE.search(text)
    if difficulty_match:
        word = difficulty_match.group(1)
        difficulties.append(_DIFFICULTY_SYNONYMS.get(word, word))

    time_buckets: list[str] = []
    minutes_match = _MINUTES_RE.search(text)
    if minutes_match:
        time_buckets.append(bucket_time(int(minutes_match.group(1))))
    elif _QUICK_RE.search(text):
        time_buckets.append("0-15")

    residue = text
    for pattern in (
        _CUISINE_RE, _DIET_RE, _MEAL_TYPE_RE, _DIFFICULTY_RE,
        _MINUTES_RE, _QUICK_RE, _FILLER_RE,
    ):
        residue = pattern.sub(" ", residue)

    plan = QueryPlan(
        free_text_terms=_unique(tokenize(residue)),
        boosters=Boosters(
            cuisines=cuisines,
            diets=diets,
            meal_types=meal_types,
            time_buckets=time_buckets,
            difficulties=difficulties,
        ),
    )
    logger.debug("Parsed query %r -> terms=%s boosters=%s", query, plan.free_text_terms, plan.boosters)
    return plan
