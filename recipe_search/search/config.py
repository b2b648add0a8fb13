from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ScoringWeights:
    """
    Heuristic ranking weights. Tuning values, not invariants; override with
    ``dataclasses.replace``.
    """

    title_idf_multiplier: float = 10.0
    matched_ingredient: float = 4.0
    coverage_cap: float = 10.0
    cuisine: float = 7.0
    diet: float = 25.0
    meal_type: float = 10.0
    difficulty: float = 8.0
    time_bucket: float = 20.0


@dataclass(frozen=True)
class SearchConfig:
    candidate_limit: int = 500
    result_limit: int = 10
    weights: ScoringWeights = field(default_factory=ScoringWeights)


DEFAULT_SEARCH_CONFIG = SearchConfig()
