from __future__ import annotations

from typing import Iterator, List, Optional, Sequence, Tuple

from zip_engine.board import Board
from zip_engine.logger import get_logger
from zip_engine.models import SolutionResult

RC = Tuple[int, int]

LOGGER = get_logger(__name__)


# ------------------ search helpers ------------------
def hit_prefix_count(board: Board, path: Sequence[RC]) -> int:
    """Number of required labels visited by `path`, counted contiguously from the smallest."""
    on_path = set(path)
    count = 0
    for label in board.required:
        if board.positions[label] not in on_path:
            break
        count += 1
    return count


def remaining_degree(board: Board, visited: List[List[bool]], rc: RC) -> int:
    return sum(1 for (r, c) in board.neighbors(rc) if not visited[r][c])


def candidates(board: Board, visited: List[List[bool]], cur: RC, req_idx: int) -> List[RC]:
    """
    Unvisited neighbors of `cur` that are unlabeled or carry the next required label,
    fewest onward exits first (Warnsdorff ordering, stable on ties).
    """
    needed = board.required[req_idx] if req_idx < len(board.required) else None
    out = []
    for (r, c) in board.neighbors(cur):
        if visited[r][c]:
            continue
        v = board.grid[r][c]
        if v != 0 and needed is not None and v != needed:
            continue
        out.append((r, c))
    out.sort(key=lambda rc: remaining_degree(board, visited, rc))
    return out


def _accepts(board: Board, cur: RC, req_idx: int) -> bool:
    if req_idx != len(board.required):
        return False
    return board.value(cur) == board.last_label


def _search(board: Board, path: List[RC], visited: List[List[bool]], req_idx: int) -> Tuple[bool, int]:
    """
    Depth-first search extending `path` in place.
    Returns (found, steps); on failure `path` is back to its starting prefix.
    """
    total = board.size
    if len(path) == total:
        return _accepts(board, path[-1], req_idx), 0

    steps = 0
    # frame: (candidate iterator, required index at this depth)
    stack: List[Tuple[Iterator[RC], int]] = [
        (iter(candidates(board, visited, path[-1], req_idx)), req_idx)
    ]

    while stack:
        it, idx = stack[-1]
        nxt = next(it, None)

        if nxt is None:
            stack.pop()
            if stack:
                r, c = path.pop()
                visited[r][c] = False
            continue

        new_idx = idx
        if idx < len(board.required) and board.value(nxt) == board.required[idx]:
            new_idx = idx + 1

        visited[nxt[0]][nxt[1]] = True
        path.append(nxt)
        steps += 1

        if len(path) == total:
            if _accepts(board, nxt, new_idx):
                return True, steps
            path.pop()
            visited[nxt[0]][nxt[1]] = False
            continue

        stack.append((iter(candidates(board, visited, nxt, new_idx)), new_idx))

    return False, steps


def _run(board: Board, prefix: Sequence[RC], req_idx: int) -> SolutionResult:
    visited = [[False] * board.n for _ in range(board.n)]
    path: List[RC] = []
    for (r, c) in prefix:
        visited[r][c] = True
        path.append((r, c))

    ok, steps = _search(board, path, visited, req_idx)
    LOGGER.debug(
        "Search from prefix of %d cells: %s after %d steps",
        len(prefix), "solved" if ok else "no solution", steps,
    )
    if not ok:
        return SolutionResult(False, None, steps)
    return SolutionResult(True, path, steps)


# ------------------ public API ------------------
def solve(board: Board, prefix: Optional[Sequence[RC]] = None) -> SolutionResult:
    """
    Complete `prefix` (assumed legal) into a full solution, or build one from scratch.
    """
    if prefix:
        return _run(board, prefix, hit_prefix_count(board, prefix))

    if not board.required:
        LOGGER.debug("Grid has no waypoints; refusing to solve")
        return SolutionResult(False, None, 0)
    start = board.cell_with_value(board.required[0])
    if start is None:
        return SolutionResult(False, None, 0)
    return _run(board, [start], 1)


def solve_from_empty(board: Board) -> Optional[List[RC]]:
    return solve(board).path


def solve_from_prefix(board: Board, prefix: Sequence[RC]) -> Optional[List[RC]]:
    return solve(board, prefix).path
