from __future__ import annotations

from typing import Optional, Tuple

from zip_engine.board import fmt_cell
from zip_engine.logger import get_logger
from zip_engine.models import HintReport, MoveOutcome, MoveStatus
from zip_engine.path_state import PathState
from zip_engine.solver import solve

RC = Tuple[int, int]

LOGGER = get_logger(__name__)


def step_direction(from_cell: RC, to_cell: RC) -> str:
    if to_cell[0] < from_cell[0]:
        return "up"
    if to_cell[0] > from_cell[0]:
        return "down"
    if to_cell[1] < from_cell[1]:
        return "left"
    if to_cell[1] > from_cell[1]:
        return "right"
    return "start"


def _no_hint(message: str) -> HintReport:
    return HintReport(False, message=message)


def generate_hint(state: PathState) -> HintReport:
    """
    Suggest the next step of some solution that continues the current path.
      1) Solved puzzles get no hint.
      2) Empty path -> point at the starting waypoint.
      3) Otherwise -> the step from the head to the next cell of the continuation.
    """
    if state.frozen:
        return _no_hint("Puzzle is already solved.")

    result = solve(state.board, state.path)
    sol = result.path
    if sol is None or len(sol) <= len(state.path):
        LOGGER.debug("No hint: current path of %d cells cannot be completed", len(state.path))
        return _no_hint("No solution continues from the current path. Try undoing a few moves.")

    if not state.path:
        start = sol[0]
        return HintReport(
            True, start, start, "start",
            f"Start on {state.board.value(start)} at {fmt_cell(start)}.",
        )

    head = state.path[-1]
    nxt = sol[len(state.path)]
    direction = step_direction(head, nxt)
    return HintReport(
        True, head, nxt, direction,
        f"Hint: move {direction} from {fmt_cell(head)} to {fmt_cell(nxt)}.",
    )


def reveal(state: PathState) -> MoveOutcome:
    """Replace the path with a full solution built from scratch."""
    if state.frozen:
        return MoveOutcome(MoveStatus.FROZEN, "Puzzle is already solved.")
    sol: Optional[list] = solve(state.board).path
    if sol is None:
        return MoveOutcome(MoveStatus.NOOP, "No solution found.")
    return state.replace(sol)
