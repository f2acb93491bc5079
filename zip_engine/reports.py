from __future__ import annotations
from typing import Dict, List, Sequence, Tuple

from zip_engine.board import Board, fmt_cell, orth_adjacent
from zip_engine.models import CheckReport

RC = Tuple[int, int]


def path_problems(board: Board, path: Sequence[RC]) -> List[str]:
    """
    Every rule a path breaks, in the order the solved check tests them:
      1) start cell
      2) repeats / out-of-grid cells
      3) adjacency
      4) waypoint order
      5) end cell
    Coverage is reported separately by build_check_report.
    """
    problems: List[str] = []
    if not path:
        return problems

    first = board.first_label
    if first is not None and board.contains(*path[0]) and board.value(path[0]) != first:
        problems.append(f"The path must start on {first}, not at {fmt_cell(path[0])}.")

    seen = set()
    for rc in path:
        if not board.contains(*rc):
            problems.append(f"Cell {fmt_cell(rc)} is outside the {board.n}x{board.n} grid.")
        elif rc in seen:
            problems.append(f"Cell {fmt_cell(rc)} is visited more than once.")
        seen.add(rc)

    for a, b in zip(path, path[1:]):
        if not orth_adjacent(a, b):
            problems.append(f"Cells {fmt_cell(a)} and {fmt_cell(b)} are not orthogonally adjacent.")

    index_of: Dict[RC, int] = {}
    for i, rc in enumerate(path):
        index_of.setdefault(rc, i)
    prev_label, prev_idx = None, -1
    for label in board.required:
        idx = index_of.get(board.positions[label])
        if idx is None:
            continue
        if idx <= prev_idx:
            problems.append(f"Number {label} is visited before {prev_label}.")
        prev_label, prev_idx = label, idx

    if len(path) == board.size:
        missing = [k for k in board.required if board.positions[k] not in index_of]
        for k in missing:
            problems.append(f"Number {k} is never visited.")
        last = board.last_label
        if last is not None and board.contains(*path[-1]) and board.value(path[-1]) != last:
            problems.append(f"The path must end on {last}.")

    return problems


def build_check_report(board: Board, path: Sequence[RC]) -> CheckReport:
    covered = len(path)
    problems = path_problems(board, path)
    if covered != board.size:
        return CheckReport(
            is_solved=False,
            covered=covered,
            total=board.size,
            summary=f"Not yet. You covered {covered}/{board.size} cells.",
            problems=problems,
        )
    if problems:
        return CheckReport(False, covered, board.size, "Not solved yet.", problems)
    return CheckReport(True, covered, board.size, "Solved.", [])

