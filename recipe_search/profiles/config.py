from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


@dataclass(frozen=True)
class ProfileConfig:
    db_path: Path | None = (
        Path(os.environ["RECIPE_PROFILE_DB_PATH"]) if os.getenv("RECIPE_PROFILE_DB_PATH") else None
    )


DEFAULT_PROFILE_CONFIG = ProfileConfig()
