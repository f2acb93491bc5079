from __future__ import annotations
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from zip_engine.exceptions import GridError

RC = Tuple[int, int]

# neighbor order matters: the solver breaks degree ties in this order
STEPS: Tuple[RC, ...] = ((-1, 0), (1, 0), (0, -1), (0, 1))


def parse_grid(s: str) -> List[List[int]]:
    """
    Parse a text grid: one row per line, cells separated by whitespace or commas.
    '.' is accepted for an unlabeled cell.
    """
    rows: List[List[int]] = []
    for line in s.strip().splitlines():
        line = line.replace(",", " ").strip()
        if not line:
            continue
        row: List[int] = []
        for tok in line.split():
            if tok == ".":
                row.append(0)
            elif tok.isdigit():
                row.append(int(tok))
            else:
                raise GridError(f"Invalid token '{tok}' in grid.")
        rows.append(row)
    return rows


def orth_adjacent(a: RC, b: RC) -> bool:
    return abs(a[0] - b[0]) + abs(a[1] - b[1]) == 1


def fmt_cell(rc: RC) -> str:
    """1-indexed cell label for messages: (r1, c2)."""
    return f"(r{rc[0]+1}, c{rc[1]+1})"


class Board:
    """
    Immutable Zip grid:
    - grid[r][c] = 0 for an unlabeled cell, k > 0 for waypoint k
    - required = ascending tuple of waypoint labels
    - positions = label -> (r, c)
    """

    def __init__(self, rows: Sequence[Sequence[int]]):
        self.grid: Tuple[Tuple[int, ...], ...] = tuple(tuple(row) for row in rows)
        self.n = len(self.grid)
        self._validate_shape()

        self.positions: Dict[int, RC] = {}
        for r in range(self.n):
            for c in range(self.n):
                v = self.grid[r][c]
                if v == 0:
                    continue
                if v in self.positions:
                    raise GridError(
                        f"Duplicate label {v} at {self.positions[v]} and {(r, c)}."
                    )
                self.positions[v] = (r, c)

        self.required: Tuple[int, ...] = tuple(sorted(self.positions))
        self._neighbors: Dict[RC, Tuple[RC, ...]] = {}
        self._precompute_neighbors()

    @staticmethod
    def from_rows(rows: Iterable[Iterable[int]]) -> "Board":
        try:
            return Board([[int(v) for v in row] for row in rows])
        except (TypeError, ValueError) as exc:
            raise GridError(f"Grid must be a 2D array of integers: {exc}") from exc

    @staticmethod
    def from_string(s: str) -> "Board":
        return Board(parse_grid(s))

    def _validate_shape(self) -> None:
        if self.n == 0:
            raise GridError("Grid must have at least one row.")
        for r, row in enumerate(self.grid):
            if len(row) != self.n:
                raise GridError(
                    f"Grid must be square: row {r} has {len(row)} cells, expected {self.n}."
                )
            for v in row:
                if type(v) != int or v < 0:
                    raise GridError("Each cell must be a non-negative int.")

    def _precompute_neighbors(self) -> None:
        for r in range(self.n):
            for c in range(self.n):
                self._neighbors[(r, c)] = tuple(
                    (r + dr, c + dc) for dr, dc in STEPS if self.contains(r + dr, c + dc)
                )

    # ---------- queries ----------
    @property
    def size(self) -> int:
        """Number of cells a full path must cover."""
        return self.n * self.n

    @property
    def first_label(self) -> Optional[int]:
        return self.required[0] if self.required else None

    @property
    def last_label(self) -> Optional[int]:
        return self.required[-1] if self.required else None

    @property
    def numbers_count(self) -> int:
        return len(self.required)

    def contains(self, r: int, c: int) -> bool:
        return 0 <= r < self.n and 0 <= c < self.n

    def value(self, rc: RC) -> int:
        return self.grid[rc[0]][rc[1]]

    def neighbors(self, rc: RC) -> Tuple[RC, ...]:
        return self._neighbors[rc]

    def cell_with_value(self, v: int) -> Optional[RC]:
        return self.positions.get(v)

    def to_list(self) -> List[List[int]]:
        return [list(row) for row in self.grid]

    def pretty(self, path: Optional[Sequence[RC]] = None) -> str:
        """Render the grid; visited cells show their path index when a path is given."""
        order: Dict[RC, int] = {}
        if path:
            order = {rc: i for i, rc in enumerate(path)}
        width = len(str(max(self.size, self.last_label or 0))) + 2
        lines = []
        for r in range(self.n):
            row = []
            for c in range(self.n):
                v = self.grid[r][c]
                if v != 0:
                    cell = f"[{v}]"
                elif (r, c) in order:
                    cell = str(order[(r, c)] + 1)
                else:
                    cell = "."
                row.append(cell.rjust(width))
            lines.append(" ".join(row))
        return "\n".join(lines)

    def __eq__(self, other) -> bool:
        return isinstance(other, Board) and self.grid == other.grid

    def __hash__(self) -> int:
        return hash(self.grid)
