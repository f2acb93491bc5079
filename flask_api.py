from __future__ import annotations

from typing import List, Optional, Tuple

from flask import Blueprint, Flask, current_app, jsonify, request
from flask_cors import CORS

from zip_engine.board import Board
from zip_engine.config import AppConfig
from zip_engine.exceptions import (
    AuthenticationError,
    GridError,
    PuzzleLoadError,
    UserExistsError,
    UserNotFoundError,
)
from zip_engine.hints import generate_hint, reveal
from zip_engine.logger import configure_logging, get_logger
from zip_engine.models import MoveStatus
from zip_engine.path_state import PathState
from zip_engine.puzzles import PuzzleSet
from zip_engine.reports import build_check_report
from zip_engine.store import ProgressStore, UserStore

RC = Tuple[int, int]

LOGGER = get_logger(__name__)

api = Blueprint("api", __name__)


def _board_from_payload(raw) -> Board:
    """
    Grid may be a 2D array of ints or a text grid (rows on separate lines).
    """
    if isinstance(raw, str):
        return Board.from_string(raw)
    if not isinstance(raw, list) or not raw or not isinstance(raw[0], list):
        raise GridError("grid must be a 2D array of numbers")
    return Board.from_rows(raw)


def _solvable_board(raw) -> Board:
    board = _board_from_payload(raw)
    limit = current_app.config["ZIP"].max_grid_size
    if board.n > limit:
        raise GridError(f"grid is {board.n}x{board.n}; the solver accepts at most {limit}x{limit}")
    return board


def _path_from_payload(raw) -> List[RC]:
    """
    Path cells as [[r, c], ...] or [{"r": r, "c": c}, ...].
    """
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise ValueError("path must be a list of cells")
    cells: List[RC] = []
    for item in raw:
        if isinstance(item, dict):
            cells.append((int(item["r"]), int(item["c"])))
        else:
            r, c = item
            cells.append((int(r), int(c)))
    return cells


def _cell_json(rc: Optional[RC]):
    return None if rc is None else {"r": rc[0], "c": rc[1]}


def _replay(board: Board, cells: List[RC], allow_rewind: bool = False):
    """
    Feed cells through the move rules one at a time.
    Returns (state, first rejected outcome or None, index of that move).
    """
    state = PathState(board)
    for i, rc in enumerate(cells):
        outcome = state.try_extend(rc, allow_rewind)
        if outcome.rejected:
            return state, outcome, i
    return state, None, -1


def _users() -> UserStore:
    return current_app.config["USER_STORE"]


def _progress() -> ProgressStore:
    return current_app.config["PROGRESS_STORE"]


def _is_admin() -> bool:
    return request.headers.get("x-admin-token") == current_app.config["ZIP"].admin_token


@api.get("/health")
def health():
    return jsonify({"ok": True})


# ------------------ accounts ------------------
@api.post("/api/register")
def register():
    data = request.get_json(silent=True) or {}
    username, password = data.get("username"), data.get("password")
    if not isinstance(username, str) or not isinstance(password, str) or not username or not password:
        return jsonify({"error": "missing"}), 400
    try:
        _users().register(username, password)
    except UserExistsError:
        return jsonify({"error": "exists"}), 409
    return jsonify({"ok": True}), 201


@api.post("/api/login")
def login():
    data = request.get_json(silent=True) or {}
    username, password = data.get("username"), data.get("password")
    if not isinstance(username, str) or not isinstance(password, str) or not username or not password:
        return jsonify({"error": "missing"}), 400
    try:
        _users().authenticate(username, password)
    except UserNotFoundError:
        return jsonify({"error": "not_found"}), 404
    except AuthenticationError:
        return jsonify({"error": "wrong_password"}), 401
    return jsonify({"ok": True})


# ------------------ progress ------------------
@api.post("/api/progress")
def submit_progress():
    data = request.get_json(silent=True) or {}
    username = data.get("username")
    if not isinstance(username, str) or not username or data.get("id") is None or data.get("elapsed") is None:
        return jsonify({"error": "missing"}), 400
    try:
        _progress().record_completion(
            username,
            int(data["id"]),
            int(float(data["elapsed"])),
            grid_size=data.get("n") or None,
            numbers_count=data.get("numbersCount") or None,
        )
    except (TypeError, ValueError):
        return jsonify({"error": "invalid"}), 400
    return jsonify({"ok": True})


@api.get("/api/progress")
def all_progress():
    return jsonify(_progress().all_progress())


@api.get("/api/progress/<username>")
def user_progress(username: str):
    return jsonify(_progress().user_progress(username))


# ------------------ admin ------------------
@api.get("/api/users")
def list_users():
    if not _is_admin():
        return jsonify({"error": "unauthorized"}), 401
    return jsonify(_users().list_users())


@api.delete("/api/users/<username>")
def delete_user(username: str):
    if not _is_admin():
        return jsonify({"error": "unauthorized"}), 401
    try:
        _users().delete_user(username)
    except UserNotFoundError:
        return jsonify({"error": "not_found"}), 404
    _progress().delete_user(username)
    return jsonify({"ok": True})


# ------------------ puzzles ------------------
def _puzzle_set() -> PuzzleSet:
    return PuzzleSet.load(current_app.config["ZIP"].puzzles_path)


@api.get("/api/puzzles")
def list_puzzles():
    try:
        return jsonify({"ids": _puzzle_set().ids()})
    except PuzzleLoadError as e:
        return jsonify({"error": str(e)}), 500


@api.get("/api/puzzles/<int:puzzle_id>")
def get_puzzle(puzzle_id: int):
    try:
        puzzles = _puzzle_set()
        puzzle = puzzles.get(puzzle_id)
    except PuzzleLoadError as e:
        return jsonify({"error": str(e)}), 404
    return jsonify({
        "id": puzzle.id,
        "grid": puzzle.board.to_list(),
        "n": puzzle.board.n,
        "numbersCount": puzzle.board.numbers_count,
        "nextId": puzzles.next_id(puzzle_id),
    })


@api.post("/api/analyze")
def analyze():
    try:
        data = request.get_json(force=True) or {}
        board = _board_from_payload(data.get("grid"))
        cells = _path_from_payload(data.get("path"))
        state, rejected, at = _replay(board, cells, bool(data.get("allowRewind", False)))

        # 1) ILLEGAL MOVE (must come first: nothing after it is meaningful)
        if rejected is not None:
            return jsonify({
                "validation": {
                    "ok": False,
                    "explanation": rejected.message,
                    "status": rejected.status.value,
                    "moveIndex": at,
                    "cell": _cell_json(cells[at]),
                },
                "path": [_cell_json(rc) for rc in state.path],
                "check": None,
            })

        # 2) STATE + CHECK REPORT
        report = build_check_report(board, state.path)
        return jsonify({
            "validation": {"ok": True, "explanation": ""},
            "path": [_cell_json(rc) for rc in state.path],
            "status": state.status.value,
            "nextRequired": state.next_required(),
            "check": {
                "solved": report.is_solved,
                "covered": report.covered,
                "total": report.total,
                "summary": report.summary,
                "problems": report.problems,
            },
        })
    except (GridError, ValueError, KeyError, TypeError) as e:
        return jsonify({"error": str(e)}), 400


@api.post("/api/hint")
def hint():
    try:
        data = request.get_json(force=True) or {}
        board = _solvable_board(data.get("grid"))
        cells = _path_from_payload(data.get("path"))
        state, rejected, at = _replay(board, cells)
        if rejected is not None:
            return jsonify({
                "validation": {"ok": False, "explanation": rejected.message, "moveIndex": at},
                "hint": {"has_hint": False, "message": ""},
            })

        h = generate_hint(state)
        return jsonify({
            "validation": {"ok": True, "explanation": ""},
            "hint": {
                "has_hint": h.has_hint,
                "from": _cell_json(h.from_cell),
                "to": _cell_json(h.to_cell),
                "direction": h.direction,
                "message": h.message,
            },
        })
    except (GridError, ValueError, KeyError, TypeError) as e:
        return jsonify({"error": str(e)}), 400


@api.post("/api/reveal")
def reveal_solution():
    try:
        data = request.get_json(force=True) or {}
        board = _solvable_board(data.get("grid"))
        state = PathState(board)
        outcome = reveal(state)
        ok = outcome.status in (MoveStatus.SOLVED, MoveStatus.REPLACED)
        return jsonify({
            "ok": ok,
            "message": outcome.message,
            "path": [_cell_json(rc) for rc in state.path] if ok else None,
        })
    except (GridError, ValueError, TypeError) as e:
        return jsonify({"error": str(e)}), 400


def create_app(config: Optional[AppConfig] = None) -> Flask:
    config = config or AppConfig.from_env()
    app = Flask(__name__)
    CORS(app)
    app.config["ZIP"] = config
    app.config["USER_STORE"] = UserStore(config.data_dir)
    app.config["PROGRESS_STORE"] = ProgressStore(config.data_dir)
    app.register_blueprint(api)
    LOGGER.info("Data dir: %s, puzzles: %s", config.data_dir, config.puzzles_path)
    return app


if __name__ == "__main__":
    configure_logging()
    cfg = AppConfig.from_env()
    create_app(cfg).run(host="0.0.0.0", port=cfg.port, debug=True)
