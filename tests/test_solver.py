import unittest

from zip_engine.board import Board
from zip_engine.path_state import PathState, is_solution
from zip_engine.solver import (
    candidates,
    hit_prefix_count,
    solve,
    solve_from_empty,
    solve_from_prefix,
)

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

# legal so far, but (0, 3) is left with a single free neighbor and cannot be the end
DEAD_PREFIX_4 = [(0, 0), (1, 0), (1, 1), (0, 1), (0, 2), (1, 2), (2, 2)]

GRID_5 = [
    [1, 0, 0, 0, 0],
    [0, 0, 0, 2, 0],
    [0, 0, 3, 0, 0],
    [0, 4, 0, 0, 0],
    [0, 0, 0, 0, 5],
]


class SolveFromEmptyTests(unittest.TestCase):
    def test_solution_is_valid(self) -> None:
        for rows in (GRID_4, GRID_5, [[1, 0, 2], [0, 0, 0], [0, 0, 3]]):
            board = Board(rows)
            path = solve_from_empty(board)
            self.assertIsNotNone(path)
            self.assertEqual(len(path), board.size)
            self.assertTrue(is_solution(board, path))

    def test_solution_replays_through_move_rules(self) -> None:
        board = Board(GRID_5)
        state = PathState(board)
        outcomes = [state.try_extend(rc) for rc in solve_from_empty(board)]
        self.assertTrue(all(not o.rejected for o in outcomes))
        self.assertTrue(state.frozen)

    def test_parity_blocked_grid_has_no_solution(self) -> None:
        # both corners share a checkerboard color, so no 16-cell path joins them
        board = Board([[1, 0, 0, 0], [0, 0, 0, 0], [0, 0, 0, 0], [0, 0, 0, 2]])
        result = solve(board)
        self.assertFalse(result.is_solvable)
        self.assertIsNone(result.path)
        self.assertGreater(result.steps, 0)

    def test_grid_without_labels_is_rejected(self) -> None:
        self.assertIsNone(solve_from_empty(Board([[0, 0], [0, 0]])))

    def test_single_cell(self) -> None:
        self.assertEqual(solve_from_empty(Board([[1]])), [(0, 0)])

    def test_labels_need_not_start_at_one(self) -> None:
        board = Board([[3, 0, 5], [0, 0, 0], [0, 0, 9]])
        path = solve_from_empty(board)
        self.assertIsNotNone(path)
        self.assertEqual(path[0], (0, 0))
        self.assertEqual(path[-1], (2, 2))


class SolveFromPrefixTests(unittest.TestCase):
    def test_continues_partial_prefix(self) -> None:
        board = Board(GRID_4)
        prefix = SNAKE_4[:5]
        path = solve_from_prefix(board, prefix)
        self.assertIsNotNone(path)
        self.assertEqual(path[:5], prefix)
        self.assertTrue(is_solution(board, path))

    def test_prefix_is_not_mutated(self) -> None:
        prefix = list(SNAKE_4[:5])
        solve_from_prefix(Board(GRID_4), prefix)
        self.assertEqual(prefix, SNAKE_4[:5])

    def test_full_solution_returned_without_search(self) -> None:
        result = solve(Board(GRID_4), SNAKE_4)
        self.assertTrue(result.is_solvable)
        self.assertEqual(result.path, SNAKE_4)
        self.assertEqual(result.steps, 0)

    def test_dead_prefix_has_no_solution(self) -> None:
        self.assertIsNone(solve_from_prefix(Board(GRID_4), DEAD_PREFIX_4))

    def test_empty_prefix_solves_from_scratch(self) -> None:
        board = Board(GRID_4)
        self.assertEqual(solve_from_prefix(board, []), solve_from_empty(board))

    def test_prefix_past_waypoints(self) -> None:
        board = Board(GRID_5)
        full = solve_from_empty(board)
        prefix = full[:13]
        path = solve_from_prefix(board, prefix)
        self.assertEqual(path[:13], prefix)
        self.assertTrue(is_solution(board, path))


class SearchHelperTests(unittest.TestCase):
    def test_hit_prefix_count_counts_leading_waypoints(self) -> None:
        board = Board([[1, 0, 2], [0, 0, 0], [0, 0, 3]])
        self.assertEqual(hit_prefix_count(board, []), 0)
        self.assertEqual(hit_prefix_count(board, [(0, 0), (0, 1)]), 1)
        self.assertEqual(hit_prefix_count(board, [(0, 0), (0, 1), (0, 2)]), 2)

    def test_candidates_skip_wrong_waypoints(self) -> None:
        board = Board([[0, 2, 0], [3, 1, 0], [0, 0, 0]])
        visited = [[False] * 3 for _ in range(3)]
        visited[1][1] = True
        # next required label is 2 (index 1): cell 3 at (1, 0) is not allowed
        self.assertEqual(candidates(board, visited, (1, 1), 1), [(0, 1), (2, 1), (1, 2)])

    def test_candidates_prefer_fewest_exits(self) -> None:
        board = Board([[0, 2, 0], [3, 1, 0], [0, 0, 0]])
        visited = [[False] * 3 for _ in range(3)]
        visited[1][1] = True
        visited[0][2] = True
        # (0, 1) and (1, 2) have one free neighbor each, (2, 1) has two
        self.assertEqual(candidates(board, visited, (1, 1), 1), [(0, 1), (1, 2), (2, 1)])

    def test_candidates_once_every_waypoint_is_visited(self) -> None:
        board = Board([[1, 0], [0, 0]])
        visited = [[True, False], [False, False]]
        self.assertEqual(candidates(board, visited, (0, 0), 1), [(1, 0), (0, 1)])


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
