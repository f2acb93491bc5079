"""Runtime configuration read from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional


@dataclass(frozen=True)
class AppConfig:
    puzzles_path: Path = Path("puzzles.json")
    data_dir: Path = Path("local_db")
    admin_token: str = "admin-token"
    port: int = 3000
    hint_cooldown_ms: int = 5000
    # largest n the HTTP hint and reveal endpoints will solve
    max_grid_size: int = 5

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "AppConfig":
        env = os.environ if env is None else env
        return cls(
            puzzles_path=Path(env.get("ZIP_PUZZLES_PATH", "puzzles.json")),
            data_dir=Path(env.get("ZIP_DATA_DIR", "local_db")),
            admin_token=env.get("ADMIN_TOKEN", "admin-token"),
            port=int(env.get("PORT", "3000")),
            hint_cooldown_ms=int(env.get("ZIP_HINT_COOLDOWN_MS", "5000")),
            max_grid_size=int(env.get("ZIP_MAX_GRID_SIZE", "5")),
        )
