"""
Configuration for the offline corpus indexer.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")

_DATA_DIR = Path(__file__).resolve().parent.parent / "data"


@dataclass(frozen=True)
class IndexingConfig:
    """
    Configuration for the reindex pipeline.
    """

    corpus_path: Path = Path(
        os.getenv("RECIPE_CORPUS_PATH", str(_DATA_DIR / "raw" / "recipes.json"))
    )
    index_path: Path = Path(
        os.getenv("RECIPE_INDEX_PATH", str(_DATA_DIR / "processed" / "recipes.db"))
    )
    progress_every: int = 100


DEFAULT_INDEXING_CONFIG = IndexingConfig()
