import argparse
import logging
from typing import List, Tuple

from zip_engine.board import Board, fmt_cell
from zip_engine.exceptions import ZipError
from zip_engine.hints import generate_hint, reveal
from zip_engine.logger import configure_logging
from zip_engine.models import MoveStatus
from zip_engine.path_state import PathState
from zip_engine.puzzles import PuzzleSet
from zip_engine.reports import build_check_report

RC = Tuple[int, int]


def parse_moves(s: str) -> List[RC]:
    """'0,0 0,1 1,1' -> [(0, 0), (0, 1), (1, 1)]"""
    moves: List[RC] = []
    for tok in s.split():
        parts = tok.split(",")
        if len(parts) != 2:
            raise ValueError(f"Invalid move '{tok}', expected row,col")
        moves.append((int(parts[0]), int(parts[1])))
    return moves


def load_board(args) -> Board:
    if args.grid:
        return Board.from_string(args.grid.replace(";", "\n"))
    if args.id is None:
        raise SystemExit("--id is required with --puzzles")
    return PuzzleSet.load(args.puzzles).get(args.id).board


def main():
    p = argparse.ArgumentParser(description="Play, check and solve Zip puzzles")
    p.add_argument("--grid", help="Inline grid, rows separated by ';' (e.g. '1 0;0 2')")
    p.add_argument("--puzzles", default="puzzles.json", help="Puzzle set JSON file")
    p.add_argument("--id", type=int, help="Puzzle id inside --puzzles")
    p.add_argument("--moves", default="", help="Moves to replay: 'r,c r,c ...' (0-indexed)")
    p.add_argument("--rewind", action="store_true", help="Let moves onto visited cells rewind the path")
    p.add_argument("--hint", action="store_true", help="Print one next-step hint")
    p.add_argument("--reveal", action="store_true", help="Print a full solution")
    p.add_argument("--check", action="store_true", help="Print the check report")
    p.add_argument("--log-level", default="WARNING", help="DEBUG, INFO, WARNING, ERROR")
    args = p.parse_args()

    configure_logging(getattr(logging, args.log_level.upper(), logging.WARNING))

    try:
        board = load_board(args)
        moves = parse_moves(args.moves)
    except (ZipError, ValueError) as exc:
        print(f"Error: {exc}")
        raise SystemExit(1)

    print("\nGRID:\n")
    print(board.pretty())
    print()

    state = PathState(board)

    print("RUN REPORT")
    print("=" * 60)

    # 1) REPLAY
    if moves:
        print("MOVE REPORT")
        print("-" * 60)
        for rc in moves:
            outcome = state.try_extend(rc, allow_rewind=args.rewind)
            line = f"{fmt_cell(rc)}: {outcome.status.value}"
            if outcome.message:
                line += f" - {outcome.message}"
            print(line)
        print(f"\nPath ({len(state.path)}/{board.size} cells):\n")
        print(board.pretty(state.path))
        print("-" * 60)

    # 2) CHECK
    if args.check:
        report = build_check_report(board, state.path)
        print("CHECK REPORT")
        print("-" * 60)
        print(report.summary)
        for problem in report.problems:
            print(f"- {problem}")
        print("-" * 60)

    # 3) HINT
    if args.hint:
        hint = generate_hint(state)
        print("HINT REPORT")
        print("-" * 60)
        print(hint.message if hint.message else "No hint available.")
        print("-" * 60)

    # 4) REVEAL
    if args.reveal:
        print("SOLVER REPORT")
        print("-" * 60)
        outcome = reveal(state)
        print(outcome.message)
        if outcome.status in (MoveStatus.SOLVED, MoveStatus.REPLACED):
            print()
            print(board.pretty(state.path))
        print("-" * 60)

    print("=" * 60)
    print()


if __name__ == "__main__":
    main()
