"""
Offline reindex: read a corpus snapshot, build the index, publish it.

Usage:
    python -m recipe_search.indexing.reindex [--corpus PATH] [--index PATH]
"""
from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path

from .builder import RecipeIndex, build
from .config import DEFAULT_INDEXING_CONFIG, IndexingConfig
from .corpus import CorpusError, load_corpus
from .store import IndexStore, IndexStoreError

logger = logging.getLogger(__name__)


def run_reindex(config: IndexingConfig = DEFAULT_INDEXING_CONFIG) -> RecipeIndex:
    """
    Execute the reindex pipeline.

    Steps:
    - Load the raw corpus (fatal on missing or unparsable input).
    - Build all inverted indices and IDF stats, skipping malformed recipes.
    - Publish the result, replacing the previous store in one swap.
    """
    records = load_corpus(config.corpus_path)
    index = build(records, progress_every=config.progress_every)
    IndexStore(config.index_path).publish(index)
    return index


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Rebuild the recipe search index.")
    parser.add_argument("--corpus", type=Path, help="recipe corpus JSON file")
    parser.add_argument("--index", type=Path, help="output SQLite index path")
    args = parser.parse_args(argv)

    config = DEFAULT_INDEXING_CONFIG
    if args.corpus:
        config = replace(config, corpus_path=args.corpus)
    if args.index:
        config = replace(config, index_path=args.index)

    try:
        index = run_reindex(config)
    except (CorpusError, IndexStoreError) as exc:
        logger.error("Reindex aborted: %s", exc)
        return 1

    print(
        f"Reindex complete. {len(index)} recipes ({index.skipped} skipped) "
        f"published to: {config.index_path}"
    )
    return 0


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    sys.exit(main())
