"""Accounts and per-user progress, persisted as JSON documents.

Two files live under the data directory:

- ``users.json``: ``{username: {"username", "password_hash", "created_at"}}``
- ``progress.json``: ``{username: {"opened", "completed", "times", "startTimes",
  "meta"}}`` where ``meta[puzzle_id]`` keeps grid size and waypoint count of
  the completed puzzle.

Usernames are matched case-insensitively (stored lowercased). Writes go
through a lock because the HTTP API may serve requests on several threads.
"""

from __future__ import annotations

import json
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from werkzeug.security import check_password_hash, generate_password_hash

from zip_engine.exceptions import AuthenticationError, StoreError, UserExistsError, UserNotFoundError
from zip_engine.logger import get_logger

LOGGER = get_logger(__name__)

DEFAULT_DATA_DIR = Path("local_db")


class _JsonDocument:
    """A dict persisted to a single JSON file, rewritten atomically on save."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self.lock = threading.RLock()

    def read(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise StoreError(f"Corrupt store file {self.path}: {exc}") from exc
        return data if isinstance(data, dict) else {}

    def write(self, data: Dict[str, Any]) -> None:
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
        tmp.replace(self.path)


def _key(username: str) -> str:
    return username.strip().lower()


class UserStore:
    def __init__(self, data_dir: Path | str = DEFAULT_DATA_DIR) -> None:
        data_dir = Path(data_dir)
        data_dir.mkdir(parents=True, exist_ok=True)
        self._doc = _JsonDocument(data_dir / "users.json")

    def register(self, username: str, password: str) -> None:
        key = _key(username)
        with self._doc.lock:
            users = self._doc.read()
            if key in users:
                raise UserExistsError(f"User {key!r} already exists")
            users[key] = {
                "username": key,
                "password_hash": generate_password_hash(password),
                "created_at": datetime.now(timezone.utc).isoformat(),
            }
            self._doc.write(users)
        LOGGER.info("User registered: %s", key)

    def authenticate(self, username: str, password: str) -> None:
        key = _key(username)
        user = self._doc.read().get(key)
        if user is None:
            raise UserNotFoundError(f"User {key!r} not found")
        if not check_password_hash(user["password_hash"], password):
            raise AuthenticationError(f"Wrong password for {key!r}")
        LOGGER.info("User logged in: %s", key)

    def list_users(self) -> List[Dict[str, str]]:
        users = self._doc.read()
        return [
            {"username": u["username"], "createdAt": u.get("created_at", "")}
            for u in users.values()
        ]

    def delete_user(self, username: str) -> None:
        key = _key(username)
        with self._doc.lock:
            users = self._doc.read()
            if key not in users:
                raise UserNotFoundError(f"User {key!r} not found")
            del users[key]
            self._doc.write(users)
        LOGGER.info("User deleted: %s", key)


def _empty_progress() -> Dict[str, Dict[str, Any]]:
    return {"opened": {}, "completed": {}, "times": {}, "startTimes": {}, "meta": {}}


class ProgressStore:
    def __init__(self, data_dir: Path | str = DEFAULT_DATA_DIR) -> None:
        data_dir = Path(data_dir)
        data_dir.mkdir(parents=True, exist_ok=True)
        self._doc = _JsonDocument(data_dir / "progress.json")

    def _update(self, username: str, fn) -> None:
        key = _key(username)
        with self._doc.lock:
            data = self._doc.read()
            entry = data.setdefault(key, _empty_progress())
            for section, value in _empty_progress().items():
                entry.setdefault(section, value)
            fn(entry)
            self._doc.write(data)

    def mark_opened(self, username: str, puzzle_id: int) -> None:
        def apply(entry):
            entry["opened"][str(puzzle_id)] = True
        self._update(username, apply)

    def save_elapsed(self, username: str, puzzle_id: int, elapsed_ms: int) -> None:
        """Remember time spent on an unfinished puzzle so the clock resumes next load."""
        def apply(entry):
            entry["startTimes"][str(puzzle_id)] = int(elapsed_ms)
        self._update(username, apply)

    def record_completion(
        self,
        username: str,
        puzzle_id: int,
        elapsed_ms: int,
        grid_size: Optional[int] = None,
        numbers_count: Optional[int] = None,
    ) -> None:
        """Upsert the completion time of a puzzle."""
        def apply(entry):
            pid = str(puzzle_id)
            entry["opened"][pid] = True
            entry["completed"][pid] = True
            entry["times"][pid] = int(elapsed_ms)
            entry["startTimes"].pop(pid, None)
            entry["meta"][pid] = {"n": grid_size, "numbersCount": numbers_count}
        self._update(username, apply)
        LOGGER.info("Progress saved: %s puzzle %s in %d ms", _key(username), puzzle_id, int(elapsed_ms))

    def is_completed(self, username: str, puzzle_id: int) -> bool:
        entry = self._doc.read().get(_key(username), {})
        return bool(entry.get("completed", {}).get(str(puzzle_id)))

    def elapsed_for(self, username: str, puzzle_id: int) -> int:
        entry = self._doc.read().get(_key(username), {})
        return int(entry.get("startTimes", {}).get(str(puzzle_id), 0))

    def user_progress(self, username: str) -> Dict[str, Dict[str, Any]]:
        entry = self._doc.read().get(_key(username)) or _empty_progress()
        return {
            "opened": dict(entry.get("opened", {})),
            "completed": dict(entry.get("completed", {})),
            "times": dict(entry.get("times", {})),
            "startTimes": dict(entry.get("startTimes", {})),
        }

    def all_progress(self) -> Dict[str, Dict[str, Any]]:
        """Completion times of every user, for rankings."""
        result: Dict[str, Dict[str, Any]] = {}
        for username, entry in self._doc.read().items():
            times = entry.get("times", {})
            if not times:
                continue
            meta = entry.get("meta", {})
            result[username] = {
                "times": {
                    pid: {
                        "ms": ms,
                        "n": meta.get(pid, {}).get("n"),
                        "numbersCount": meta.get(pid, {}).get("numbersCount"),
                    }
                    for pid, ms in times.items()
                }
            }
        return result

    def delete_user(self, username: str) -> None:
        key = _key(username)
        with self._doc.lock:
            data = self._doc.read()
            if data.pop(key, None) is not None:
                self._doc.write(data)
