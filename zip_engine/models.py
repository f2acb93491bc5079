from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

RC = Tuple[int, int]  # (row, col)


class PathStatus(str, Enum):
    EMPTY = "EMPTY"
    IN_PROGRESS = "IN_PROGRESS"
    SOLVED = "SOLVED"


class MoveStatus(str, Enum):
    ACCEPTED = "ACCEPTED"
    REWOUND = "REWOUND"
    UNDONE = "UNDONE"
    RESET = "RESET"
    REPLACED = "REPLACED"
    SOLVED = "SOLVED"
    FULL_UNSOLVED = "FULL_UNSOLVED"
    INCOMPLETE = "INCOMPLETE"
    NOOP = "NOOP"
    FROZEN = "FROZEN"
    OUT_OF_BOUNDS = "OUT_OF_BOUNDS"
    WRONG_START = "WRONG_START"
    NOT_ADJACENT = "NOT_ADJACENT"
    CROSSING_BLOCKED = "CROSSING_BLOCKED"
    OUT_OF_ORDER = "OUT_OF_ORDER"
    FINAL_TOO_EARLY = "FINAL_TOO_EARLY"
    RESET_LOCKED = "RESET_LOCKED"


# statuses that leave the path untouched because the proposal was illegal
REJECTIONS = frozenset({
    MoveStatus.FROZEN,
    MoveStatus.OUT_OF_BOUNDS,
    MoveStatus.WRONG_START,
    MoveStatus.NOT_ADJACENT,
    MoveStatus.CROSSING_BLOCKED,
    MoveStatus.OUT_OF_ORDER,
    MoveStatus.FINAL_TOO_EARLY,
    MoveStatus.RESET_LOCKED,
})


@dataclass(frozen=True)
class MoveOutcome:
    status: MoveStatus
    message: str = ""

    @property
    def rejected(self) -> bool:
        return self.status in REJECTIONS


@dataclass(frozen=True)
class SolutionResult:
    is_solvable: bool
    path: Optional[List[RC]] = None
    steps: int = 0


@dataclass(frozen=True)
class SolvedEvent:
    """Facts handed to persistence when a path reaches the solved state."""
    path: List[RC]
    grid_size: int
    numbers_count: int


@dataclass(frozen=True)
class HintReport:
    has_hint: bool
    from_cell: Optional[RC] = None
    to_cell: Optional[RC] = None
    direction: str = ""  # "up" | "down" | "left" | "right" | "start"
    message: str = ""


@dataclass(frozen=True)
class CheckReport:
    is_solved: bool
    covered: int
    total: int
    summary: str
    problems: List[str] = field(default_factory=list)
