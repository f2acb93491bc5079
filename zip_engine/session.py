"""One player's attempt at one puzzle.

``PlaySession`` wires a ``PathState`` to the things around it: the elapsed-time
clock (which only runs while the puzzle is visible), the hint cooldown,
arrow-key moves and, for signed-in players, the progress store.
"""

from __future__ import annotations

import time
from typing import Callable, Optional, Tuple

from zip_engine.board import Board
from zip_engine.hints import generate_hint, reveal
from zip_engine.logger import get_logger
from zip_engine.models import CheckReport, HintReport, MoveOutcome, MoveStatus, SolvedEvent
from zip_engine.path_state import PathState
from zip_engine.reports import build_check_report
from zip_engine.solver import solve
from zip_engine.store import ProgressStore

RC = Tuple[int, int]
Clock = Callable[[], float]

LOGGER = get_logger(__name__)

DIRECTIONS = {
    "up": (-1, 0),
    "down": (1, 0),
    "left": (0, -1),
    "right": (0, 1),
}


class ElapsedClock:
    """Accumulates milliseconds only between resume() and pause()."""

    def __init__(self, elapsed_ms: int = 0, clock: Clock = time.monotonic) -> None:
        self._clock = clock
        self._elapsed_ms = int(elapsed_ms)
        self._started_at: Optional[float] = None

    @property
    def running(self) -> bool:
        return self._started_at is not None

    def resume(self) -> None:
        if self._started_at is None:
            self._started_at = self._clock()

    def pause(self) -> None:
        if self._started_at is not None:
            self._elapsed_ms += int((self._clock() - self._started_at) * 1000)
            self._started_at = None

    def elapsed_ms(self) -> int:
        total = self._elapsed_ms
        if self._started_at is not None:
            total += int((self._clock() - self._started_at) * 1000)
        return total


class PlaySession:
    def __init__(
        self,
        puzzle_id: int,
        board: Board,
        username: Optional[str] = None,
        progress: Optional[ProgressStore] = None,
        hint_cooldown_ms: int = 5000,
        clock: Clock = time.monotonic,
    ) -> None:
        self.puzzle_id = puzzle_id
        self.board = board
        self.username = username
        self.progress = progress if username else None
        self.hint_cooldown_ms = hint_cooldown_ms
        self._clock = clock
        self._hint_ready_at = 0.0
        self._revealing = False
        self._visible = True
        self.solved_ms: Optional[int] = None

        previously_solved = False
        elapsed = 0
        if self.progress is not None:
            self.progress.mark_opened(username, puzzle_id)
            previously_solved = self.progress.is_completed(username, puzzle_id)
            elapsed = self.progress.elapsed_for(username, puzzle_id)

        path = None
        if previously_solved:
            # show a solved path instead of an empty board
            path = solve(board).path
        self.state = PathState(board, previously_solved=previously_solved, path=path)
        self.state.on_solved(self._handle_solved)

        self.timer = ElapsedClock(elapsed, clock)
        if not previously_solved:
            self.timer.resume()

    # ---------- visibility ----------
    def hide(self) -> None:
        """Page hidden or closed: stop the clock and remember time spent."""
        self._visible = False
        self.timer.pause()
        if self.progress is not None and not self.state.frozen:
            self.progress.save_elapsed(self.username, self.puzzle_id, self.timer.elapsed_ms())

    def show(self) -> None:
        self._visible = True
        if not self.state.frozen:
            self.timer.resume()

    # ---------- moves ----------
    def extend(self, rc: RC, allow_rewind: bool = False) -> MoveOutcome:
        return self.state.try_extend(rc, allow_rewind)

    def undo(self) -> MoveOutcome:
        return self.state.undo_last()

    def reset(self) -> MoveOutcome:
        # clock keeps counting across resets, also after a solve paused it
        outcome = self.state.reset()
        if outcome.status == MoveStatus.RESET and self._visible:
            self.timer.resume()
        return outcome

    def move_direction(self, direction: str) -> MoveOutcome:
        """Arrow-key move from the head; an empty path jumps to the starting waypoint."""
        if self.state.frozen:
            return MoveOutcome(MoveStatus.FROZEN, "Puzzle is already solved.")
        if direction not in DIRECTIONS:
            raise ValueError(f"Unknown direction: {direction!r}")

        head = self.state.head
        if head is None:
            first = self.board.first_label
            target = self.board.cell_with_value(first) if first is not None else None
            if target is None:
                return MoveOutcome(MoveStatus.NOOP)
        else:
            dr, dc = DIRECTIONS[direction]
            target = (head[0] + dr, head[1] + dc)
            if not self.board.contains(*target):
                return MoveOutcome(MoveStatus.NOOP)
        return self.state.try_extend(target, allow_rewind=False)

    def check(self) -> CheckReport:
        self.state.check()
        return build_check_report(self.board, self.state.path)

    # ---------- assistance ----------
    def hint_cooldown_remaining_ms(self) -> int:
        return max(0, int((self._hint_ready_at - self._clock()) * 1000))

    def hint(self) -> HintReport:
        if self.state.frozen:
            return HintReport(False, message="Puzzle is already solved.")
        if self.hint_cooldown_remaining_ms() > 0:
            return HintReport(False, message="Hint is cooling down.")
        report = generate_hint(self.state)
        if report.has_hint:
            self._hint_ready_at = self._clock() + self.hint_cooldown_ms / 1000.0
        return report

    def reveal(self) -> MoveOutcome:
        self._revealing = True
        try:
            return reveal(self.state)
        finally:
            self._revealing = False

    # ---------- solved transition ----------
    def _handle_solved(self, event: SolvedEvent) -> None:
        self.timer.pause()
        if self._revealing:
            LOGGER.info("Puzzle %s revealed; completion not recorded", self.puzzle_id)
            return
        self.solved_ms = self.timer.elapsed_ms()
        if self.progress is not None:
            self.progress.record_completion(
                self.username,
                self.puzzle_id,
                self.solved_ms,
                grid_size=event.grid_size,
                numbers_count=event.numbers_count,
            )
