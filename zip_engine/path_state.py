"""Player path and the move rules that govern it.

A ``PathState`` holds the ordered cells a player (or the solver) has drawn on a
``Board``. Every proposal returns a ``MoveOutcome``; illegal moves leave the
path untouched and carry a reason the caller can show to the player. Once a
full valid path is drawn the state freezes and only read-only queries work.
"""

from __future__ import annotations

from typing import Callable, List, Optional, Sequence, Tuple

from zip_engine.board import Board, orth_adjacent
from zip_engine.logger import get_logger
from zip_engine.models import MoveOutcome, MoveStatus, PathStatus, SolvedEvent

RC = Tuple[int, int]
SolvedListener = Callable[[SolvedEvent], None]

LOGGER = get_logger(__name__)


def is_solution(board: Board, path: Sequence[RC]) -> bool:
    """True iff `path` is a full, self-avoiding, orthogonal path honoring waypoint order."""
    if len(path) != board.size:
        return False
    if len(set(path)) != len(path):
        return False
    if any(not board.contains(r, c) for (r, c) in path):
        return False

    if board.required and board.value(path[0]) != board.first_label:
        return False

    for i in range(len(path) - 1):
        if not orth_adjacent(path[i], path[i + 1]):
            return False

    index_of = {rc: i for i, rc in enumerate(path)}
    last_idx = -1
    for label in board.required:
        idx = index_of.get(board.positions[label], -1)
        if idx == -1 or idx <= last_idx:
            return False
        last_idx = idx

    if board.required and board.value(path[-1]) != board.last_label:
        return False
    return True


class PathState:
    """Current path on a board plus its frozen/solved lifecycle."""

    def __init__(
        self,
        board: Board,
        previously_solved: bool = False,
        path: Optional[Sequence[RC]] = None,
    ):
        self.board = board
        self.path: List[RC] = [(int(r), int(c)) for (r, c) in (path or [])]
        # solved in an earlier session: starts locked and reset is refused
        self.previously_solved = previously_solved
        self.frozen = previously_solved
        self._listeners: List[SolvedListener] = []

    # ---------- derived facts ----------
    @property
    def head(self) -> Optional[RC]:
        return self.path[-1] if self.path else None

    @property
    def is_full(self) -> bool:
        return len(self.path) == self.board.size

    @property
    def status(self) -> PathStatus:
        if self.frozen:
            return PathStatus.SOLVED
        return PathStatus.IN_PROGRESS if self.path else PathStatus.EMPTY

    def next_required(self) -> Optional[int]:
        visited = set(self.path)
        for label in self.board.required:
            if self.board.positions[label] not in visited:
                return label
        return None

    def is_solved(self) -> bool:
        return is_solution(self.board, self.path)

    def on_solved(self, listener: SolvedListener) -> None:
        self._listeners.append(listener)

    # ---------- moves ----------
    def try_extend(self, rc: RC, allow_rewind: bool = False) -> MoveOutcome:
        if self.frozen:
            return MoveOutcome(MoveStatus.FROZEN, "Puzzle is already solved.")

        rc = (int(rc[0]), int(rc[1]))
        if not self.board.contains(*rc):
            return MoveOutcome(MoveStatus.OUT_OF_BOUNDS, f"Cell {rc} is outside the grid.")

        if self.path and self.path[-1] == rc:
            return MoveOutcome(MoveStatus.NOOP)

        if rc in self.path:
            if not allow_rewind:
                return self._reject(MoveStatus.CROSSING_BLOCKED, "The path cannot cross itself.")
            hit = self.path.index(rc)
            del self.path[hit + 1:]
            LOGGER.debug("Rewound path to %s (length %d)", rc, len(self.path))
            return MoveOutcome(MoveStatus.REWOUND)

        value = self.board.value(rc)

        if not self.path:
            first = self.board.first_label
            if first is not None and value != first:
                return self._reject(MoveStatus.WRONG_START, f"Start on {first}.")
            self.path.append(rc)
            return self._after_append()

        if not orth_adjacent(self.path[-1], rc):
            return self._reject(MoveStatus.NOT_ADJACENT, "Move to a cell next to the head of the path.")

        if value != 0:
            last = self.board.last_label
            if value == last and len(self.path) + 1 != self.board.size:
                return self._reject(
                    MoveStatus.FINAL_TOO_EARLY,
                    f"You can only step on {last} as the final move.",
                )
            needed = self.next_required()
            if needed is not None and value != needed:
                return self._reject(MoveStatus.OUT_OF_ORDER, f"Next number is {needed}.")

        self.path.append(rc)
        return self._after_append()

    def undo_last(self) -> MoveOutcome:
        if self.frozen:
            return MoveOutcome(MoveStatus.FROZEN, "Puzzle is already solved.")
        if not self.path:
            return MoveOutcome(MoveStatus.NOOP)
        self.path.pop()
        return MoveOutcome(MoveStatus.UNDONE)

    def reset(self) -> MoveOutcome:
        if self.previously_solved:
            return MoveOutcome(MoveStatus.RESET_LOCKED, "Puzzle was completed in an earlier session.")
        self.path = []
        self.frozen = False
        return MoveOutcome(MoveStatus.RESET)

    def replace(self, path: Sequence[RC]) -> MoveOutcome:
        """Swap in a whole path (reveal). A full valid path freezes the state."""
        if self.frozen:
            return MoveOutcome(MoveStatus.FROZEN, "Puzzle is already solved.")
        self.path = [(int(r), int(c)) for (r, c) in path]
        if self.is_full and self.is_solved():
            self._freeze()
            return MoveOutcome(MoveStatus.SOLVED, "Solution revealed.")
        return MoveOutcome(MoveStatus.REPLACED, "Solved path loaded.")

    def check(self) -> MoveOutcome:
        """Explicit completion check, as the player's "Check" button does."""
        if self.frozen:
            return MoveOutcome(MoveStatus.SOLVED, "Solved.")
        if not self.is_full:
            return MoveOutcome(
                MoveStatus.INCOMPLETE,
                f"Not yet. You covered {len(self.path)}/{self.board.size} cells.",
            )
        if self.is_solved():
            self._freeze()
            return MoveOutcome(MoveStatus.SOLVED, "Solved.")
        return MoveOutcome(MoveStatus.FULL_UNSOLVED, "Not solved yet.")

    # ---------- internals ----------
    def _reject(self, status: MoveStatus, message: str) -> MoveOutcome:
        LOGGER.debug("Rejected move (%s): %s", status.value, message)
        return MoveOutcome(status, message)

    def _after_append(self) -> MoveOutcome:
        if not self.is_full:
            return MoveOutcome(MoveStatus.ACCEPTED)
        if self.is_solved():
            self._freeze()
            return MoveOutcome(MoveStatus.SOLVED, "Solved.")
        LOGGER.warning(
            "Path covers all %d cells but is not a solution; a legality rule let it through",
            self.board.size,
        )
        return MoveOutcome(MoveStatus.FULL_UNSOLVED, "Not solved yet.")

    def _freeze(self) -> None:
        self.frozen = True
        event = SolvedEvent(
            path=list(self.path),
            grid_size=self.board.n,
            numbers_count=self.board.numbers_count,
        )
        LOGGER.info("Puzzle solved (%dx%d, %d waypoints)", self.board.n, self.board.n, event.numbers_count)
        for listener in self._listeners:
            listener(event)
