"""Gomoku (free-style five in a row) win detection and placement scoring."""

from typing import List, Tuple

from .board import Board, Piece, Position, Side


SIZE = 15
WIN_LENGTH = 5

# Horizontal, vertical, diagonal \, diagonal /
AXES: Tuple[Tuple[int, int], ...] = ((1, 0), (0, 1), (1, 1), (1, -1))

SCORE_FOUR = 10000
SCORE_OPEN_THREE = 5000
SCORE_HALF_OPEN_THREE = 1000
SCORE_OPEN_TWO = 500
SCORE_PER_STONE = 10


def _run(board: Board, pos: Position, side: Side, dx: int, dy: int) -> Tuple[int, bool]:
    """Count same-side stones walking from `pos` (exclusive) along (dx, dy).

    Returns the count and whether the cell just past the run is empty.
    """
    x, y = pos[0] + dx, pos[1] + dy
    count = 0
    while board.in_bounds(x, y):
        piece = board.get_piece(x, y)
        if piece is None or piece.side != side:
            break
        count += 1
        x += dx
        y += dy
    return count, board.is_empty(x, y)


def check_win(board: Board, last_placed: Position, side: Side) -> bool:
    """Check for five or more in a row through the last placed stone."""
    for dx, dy in AXES:
        forward, _ = _run(board, last_placed, side, dx, dy)
        backward, _ = _run(board, last_placed, side, -dx, -dy)
        if 1 + forward + backward >= WIN_LENGTH:
            return True
    return False


def score(board: Board, pos: Position, side: Side) -> int:
    """Heuristic value of placing `side`'s stone at the empty cell `pos`.

    Each axis contributes independently; the total is their sum. The run
    length counts neighbouring stones only, so a run of four means this
    placement makes five.
    """
    total = 0
    for dx, dy in AXES:
        forward, forward_open = _run(board, pos, side, dx, dy)
        backward, backward_open = _run(board, pos, side, -dx, -dy)
        run = forward + backward
        open_ends = int(forward_open) + int(backward_open)

        if run >= 4:
            total += SCORE_FOUR
        elif run == 3 and open_ends == 2:
            total += SCORE_OPEN_THREE
        elif run == 3 and open_ends == 1:
            total += SCORE_HALF_OPEN_THREE
        elif run == 2 and open_ends == 2:
            total += SCORE_OPEN_TWO
        else:
            total += run * SCORE_PER_STONE
    return total


def resolve_placement(board: Board, pos: Position, side: Side) -> Tuple[Board, List[Piece], bool]:
    """Gomoku never captures; the placement wins on five in a row."""
    return board, [], check_win(board, pos, side)
