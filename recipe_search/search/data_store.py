from __future__ import annotations

import logging
import threading

from ..indexing.builder import RecipeIndex
from ..indexing.config import DEFAULT_INDEXING_CONFIG, IndexingConfig
from ..indexing.store import IndexStore

logger = logging.getLogger(__name__)

_index: RecipeIndex | None = None
_lock = threading.Lock()


def get_index(config: IndexingConfig = DEFAULT_INDEXING_CONFIG) -> RecipeIndex:
    """Return the published index, opening the store on first call."""
    global _index
    index = _index
    if index is None:
        with _lock:
            if _index is None:
                _index = IndexStore(config.index_path).load()
                logger.info("Opened index store %s (%d recipes)", config.index_path, len(_index))
            index = _index
    return index


def publish_index(index: RecipeIndex) -> None:
    """Swap in a new index; in-flight searches keep the one they started with."""
    global _index
    with _lock:
        _index = index


def reload_index(config: IndexingConfig = DEFAULT_INDEXING_CONFIG) -> RecipeIndex:
    index = IndexStore(config.index_path).load()
    publish_index(index)
    return index


def close_index() -> None:
    global _index
    with _lock:
        _index = None
