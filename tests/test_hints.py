import unittest

from zip_engine.board import Board, orth_adjacent
from zip_engine.hints import generate_hint, reveal, step_direction
from zip_engine.models import MoveStatus
from zip_engine.path_state import PathState
from zip_engine.reports import build_check_report, path_problems
from zip_engine.solver import solve

GRID_4 = [
    [1, 0, 0, 0],
    [0, 0, 0, 0],
    [0, 0, 0, 0],
    [2, 0, 0, 0],
]

SNAKE_4 = [
    (0, 0), (0, 1), (0, 2), (0, 3),
    (1, 3), (1, 2), (1, 1), (1, 0),
    (2, 0), (2, 1), (2, 2), (2, 3),
    (3, 3), (3, 2), (3, 1), (3, 0),
]

DEAD_PREFIX_4 = [(0, 0), (1, 0), (1, 1), (0, 1), (0, 2), (1, 2), (2, 2)]


def state_with(cells, rows=GRID_4):
    state = PathState(Board(rows))
    for rc in cells:
        state.try_extend(rc)
    return state


class HintTests(unittest.TestCase):
    def test_empty_path_points_at_start(self) -> None:
        hint = generate_hint(state_with([]))
        self.assertTrue(hint.has_hint)
        self.assertEqual(hint.from_cell, (0, 0))
        self.assertEqual(hint.to_cell, (0, 0))
        self.assertEqual(hint.direction, "start")

    def test_hint_continues_a_solution(self) -> None:
        state = state_with(SNAKE_4[:3])
        hint = generate_hint(state)
        self.assertTrue(hint.has_hint)
        self.assertEqual(hint.from_cell, (0, 2))
        self.assertTrue(orth_adjacent(hint.from_cell, hint.to_cell))

        outcome = state.try_extend(hint.to_cell)
        self.assertFalse(outcome.rejected)
        self.assertTrue(solve(state.board, state.path).is_solvable)

    def test_following_hints_solves_the_puzzle(self) -> None:
        state = state_with([])
        state.try_extend(generate_hint(state).to_cell)
        while not state.frozen:
            hint = generate_hint(state)
            self.assertTrue(hint.has_hint)
            state.try_extend(hint.to_cell)
        self.assertTrue(state.is_solved())

    def test_no_hint_from_dead_prefix(self) -> None:
        hint = generate_hint(state_with(DEAD_PREFIX_4))
        self.assertFalse(hint.has_hint)
        self.assertIsNone(hint.to_cell)

    def test_no_hint_when_solved(self) -> None:
        self.assertFalse(generate_hint(state_with(SNAKE_4)).has_hint)

    def test_step_direction(self) -> None:
        self.assertEqual(step_direction((1, 1), (0, 1)), "up")
        self.assertEqual(step_direction((1, 1), (2, 1)), "down")
        self.assertEqual(step_direction((1, 1), (1, 0)), "left")
        self.assertEqual(step_direction((1, 1), (1, 2)), "right")
        self.assertEqual(step_direction((1, 1), (1, 1)), "start")


class RevealTests(unittest.TestCase):
    def test_reveal_replaces_path_and_freezes(self) -> None:
        state = state_with(DEAD_PREFIX_4)
        outcome = reveal(state)
        self.assertEqual(outcome.status, MoveStatus.SOLVED)
        self.assertTrue(state.frozen)
        self.assertTrue(state.is_solved())

    def test_reveal_without_solution_keeps_path(self) -> None:
        rows = [[1, 0, 0, 0], [0, 0, 0, 0], [0, 0, 0, 0], [0, 0, 0, 2]]
        state = state_with([(0, 0), (0, 1)], rows)
        outcome = reveal(state)
        self.assertEqual(outcome.message, "No solution found.")
        self.assertEqual(state.path, [(0, 0), (0, 1)])
        self.assertFalse(state.frozen)

    def test_reveal_on_solved_state_is_refused(self) -> None:
        self.assertEqual(reveal(state_with(SNAKE_4)).status, MoveStatus.FROZEN)


class CheckReportTests(unittest.TestCase):
    def test_incomplete_path(self) -> None:
        report = build_check_report(Board(GRID_4), SNAKE_4[:5])
        self.assertFalse(report.is_solved)
        self.assertEqual(report.summary, "Not yet. You covered 5/16 cells.")
        self.assertEqual(report.problems, [])

    def test_solved_path(self) -> None:
        report = build_check_report(Board(GRID_4), SNAKE_4)
        self.assertTrue(report.is_solved)
        self.assertEqual(report.summary, "Solved.")

    def test_full_path_ending_off_last_waypoint(self) -> None:
        board = Board([[1, 0, 0, 0], [0, 0, 0, 0], [0, 0, 0, 0], [0, 0, 0, 2]])
        report = build_check_report(board, SNAKE_4)
        self.assertFalse(report.is_solved)
        self.assertEqual(report.summary, "Not solved yet.")
        self.assertIn("The path must end on 2.", report.problems)

    def test_problems_name_each_broken_rule(self) -> None:
        board = Board([[1, 2, 0], [0, 0, 0], [0, 3, 4]])
        problems = path_problems(board, [(0, 1), (1, 1), (1, 1), (2, 2)])
        self.assertIn("The path must start on 1, not at (r1, c2).", problems)
        self.assertIn("Cell (r2, c2) is visited more than once.", problems)
        self.assertIn("Cells (r2, c2) and (r3, c3) are not orthogonally adjacent.", problems)


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
