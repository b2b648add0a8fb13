from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class CorpusError(RuntimeError):
    """The recipe corpus could not be read or parsed; indexing must abort."""


def _unwrap(payload: Any) -> list[Any]:
    # Accept both a bare list and the complexSearch {"results": [...]} envelope.
    if isinstance(payload, dict):
        for key in ("results", "recipes"):
            if isinstance(payload.get(key), list):
                return payload[key]
        raise CorpusError("corpus object has no 'results' or 'recipes' list")
    if isinstance(payload, list):
        return payload
    raise CorpusError(f"corpus must be a JSON list, got {type(payload).__name__}")


def load_corpus(path: Path) -> list[Any]:
    """
    Read a recipe corpus snapshot from *path*.

    Returns the raw records; validation of individual recipes happens in the
    indexer so one bad record does not sink the batch.
    """
    if not path.is_file():
        raise CorpusError(f"corpus file not found: {path}")

    try:
        with path.open("r", encoding="utf-8") as fh:
            payload = json.load(fh)
    except (OSError, UnicodeDecodeError) as exc:
        raise CorpusError(f"could not read corpus {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise CorpusError(f"corpus {path} is not valid JSON: {exc}") from exc

    records = _unwrap(payload)
    logger.info("Loaded %d raw recipes from %s", len(records), path)
    return records
