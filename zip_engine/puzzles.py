"""Puzzle-set loading from ``puzzles.json``.

The file holds ``{"zips": [{"id": 1, "grid": [[1, 0], [0, 2]]}, ...]}``. Grids
must already be 2D arrays of integers; entries with a non-numeric id are
skipped when listing ids, as the web client does.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from zip_engine.board import Board
from zip_engine.exceptions import GridError, PuzzleLoadError
from zip_engine.logger import get_logger

LOGGER = get_logger(__name__)


@dataclass(frozen=True)
class Puzzle:
    id: int
    board: Board


def _as_id(raw: Any) -> Optional[int]:
    try:
        return int(raw)
    except (TypeError, ValueError):
        return None


class PuzzleSet:
    """In-memory view of a puzzle file, keyed by numeric id."""

    def __init__(self, entries: List[Dict[str, Any]]) -> None:
        self._entries: Dict[int, Dict[str, Any]] = {}
        for entry in entries:
            pid = _as_id(entry.get("id")) if isinstance(entry, dict) else None
            if pid is None:
                LOGGER.warning("Skipping puzzle entry without a numeric id: %r", entry)
                continue
            self._entries[pid] = entry

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PuzzleSet":
        zips = data.get("zips") if isinstance(data, dict) else None
        return cls(zips if isinstance(zips, list) else [])

    @classmethod
    def load(cls, path: Path | str) -> "PuzzleSet":
        path = Path(path)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError as exc:
            raise PuzzleLoadError(f"Failed to load {path}: file not found") from exc
        except json.JSONDecodeError as exc:
            raise PuzzleLoadError(f"Failed to parse {path}: {exc}") from exc
        puzzles = cls.from_dict(data)
        LOGGER.info("Loaded %d puzzles from %s", len(puzzles), path)
        return puzzles

    def __len__(self) -> int:
        return len(self._entries)

    def ids(self) -> List[int]:
        return sorted(self._entries)

    def get(self, puzzle_id: int) -> Puzzle:
        entry = self._entries.get(puzzle_id)
        if entry is None:
            raise PuzzleLoadError(f"Puzzle id={puzzle_id} not found")
        grid = entry.get("grid")
        if not isinstance(grid, list) or not grid or not isinstance(grid[0], list):
            raise PuzzleLoadError(
                f"Puzzle id={puzzle_id} has invalid grid (must be a 2D array)"
            )
        try:
            board = Board.from_rows(grid)
        except GridError as exc:
            raise PuzzleLoadError(f"Puzzle id={puzzle_id}: {exc}") from exc
        return Puzzle(id=puzzle_id, board=board)

    def next_id(self, puzzle_id: int) -> Optional[int]:
        """Id following `puzzle_id` in ascending order, or None at the end of the set."""
        ids = self.ids()
        if puzzle_id not in ids:
            return None
        idx = ids.index(puzzle_id)
        return ids[idx + 1] if idx + 1 < len(ids) else None
