"""Xiangqi (Chinese chess) move rules."""

from typing import Optional

from .board import Board, Piece, PieceKind, Position, Side


PALACE_FILES = range(3, 6)
RIVER_ROW = 5  # first row on RED's half


def _sign(value: int) -> int:
    return (value > 0) - (value < 0)


def is_in_palace(x: int, y: int, side: Side) -> bool:
    """Check if a square is inside the side's palace."""
    if x not in PALACE_FILES:
        return False
    if side == Side.RED:
        return 7 <= y <= 9
    return 0 <= y <= 2


def count_between(board: Board, origin: Position, target: Position) -> Optional[int]:
    """Count pieces strictly between two squares on one rank or file.

    Returns None if the squares are not on a shared rank or file.
    """
    x1, y1 = origin
    x2, y2 = target
    if x1 != x2 and y1 != y2:
        return None
    step_x, step_y = _sign(x2 - x1), _sign(y2 - y1)
    x, y = x1 + step_x, y1 + step_y
    count = 0
    while (x, y) != (x2, y2):
        if board.get_piece(x, y) is not None:
            count += 1
        x += step_x
        y += step_y
    return count


def is_legal(piece: Piece, target: Position, board: Board) -> bool:
    """Check if `piece` may move to `target` on `board`."""
    x1, y1 = piece.position
    x2, y2 = target

    if not board.in_bounds(x2, y2):
        return False
    if (x1, y1) == (x2, y2):
        return False

    dest_piece = board.get_piece(x2, y2)
    if dest_piece is not None and dest_piece.side == piece.side:
        return False

    if piece.kind == PieceKind.GENERAL:
        return _is_valid_general_move(x1, y1, x2, y2, piece.side)
    elif piece.kind == PieceKind.ADVISOR:
        return _is_valid_advisor_move(x1, y1, x2, y2, piece.side)
    elif piece.kind == PieceKind.ELEPHANT:
        return _is_valid_elephant_move(board, x1, y1, x2, y2, piece.side)
    elif piece.kind == PieceKind.HORSE:
        return _is_valid_horse_move(board, x1, y1, x2, y2)
    elif piece.kind == PieceKind.CHARIOT:
        return count_between(board, piece.position, target) == 0
    elif piece.kind == PieceKind.CANNON:
        return _is_valid_cannon_move(board, piece.position, target, dest_piece is not None)
    elif piece.kind == PieceKind.SOLDIER:
        return _is_valid_soldier_move(x1, y1, x2, y2, piece.side)
    return False


def _is_valid_general_move(x1: int, y1: int, x2: int, y2: int, side: Side) -> bool:
    """One orthogonal step inside the palace."""
    if not is_in_palace(x2, y2, side):
        return False
    return abs(x2 - x1) + abs(y2 - y1) == 1


def _is_valid_advisor_move(x1: int, y1: int, x2: int, y2: int, side: Side) -> bool:
    """One diagonal step inside the palace."""
    if not is_in_palace(x2, y2, side):
        return False
    return abs(x2 - x1) == 1 and abs(y2 - y1) == 1


def _is_valid_elephant_move(board: Board, x1: int, y1: int, x2: int, y2: int, side: Side) -> bool:
    """Check if elephant move is valid.

    Elephant rules:
    - Moves exactly two points diagonally (the "field" pattern)
    - Cannot cross the river
    - Blocked if the midpoint ("eye") is occupied
    """
    if side == Side.RED and y2 < RIVER_ROW:
        return False
    if side == Side.BLACK and y2 >= RIVER_ROW:
        return False
    if abs(x2 - x1) != 2 or abs(y2 - y1) != 2:
        return False
    eye_x, eye_y = (x1 + x2) // 2, (y1 + y2) // 2
    return board.get_piece(eye_x, eye_y) is None


def _is_valid_horse_move(board: Board, x1: int, y1: int, x2: int, y2: int) -> bool:
    """Check if horse move is valid."""
    dx = x2 - x1
    dy = y2 - y1

    if abs(dx) == 1 and abs(dy) == 2:
        # Leg is the first step along the long axis
        return board.get_piece(x1, y1 + _sign(dy)) is None
    elif abs(dx) == 2 and abs(dy) == 1:
        return board.get_piece(x1 + _sign(dx), y1) is None

    return False


def _is_valid_cannon_move(board: Board, origin: Position, target: Position, is_capture: bool) -> bool:
    """Check if cannon move is valid.

    Cannon rules:
    - Moves like a chariot onto an empty square
    - Captures only by jumping exactly one piece (the platform)
    """
    between = count_between(board, origin, target)
    if between is None:
        return False
    if is_capture:
        return between == 1
    return between == 0


def _is_valid_soldier_move(x1: int, y1: int, x2: int, y2: int, side: Side) -> bool:
    """Check if soldier move is valid."""
    dx = x2 - x1
    dy = y2 - y1

    forward = -1 if side == Side.RED else 1
    crossed_river = y1 < RIVER_ROW if side == Side.RED else y1 >= RIVER_ROW

    if dx == 0 and dy == forward:
        return True
    if crossed_river and dy == 0 and abs(dx) == 1:
        return True
    return False


def find_general(board: Board, side: Side) -> Optional[Position]:
    """Get the position of a side's general, if still on the board."""
    for piece in board.pieces(side):
        if piece.kind == PieceKind.GENERAL:
            return piece.position
    return None


def flying_general_violated(board: Board) -> bool:
    """Check if the two generals face each other on an open file.

    Both generals on the same file with no piece between them.
    """
    red = find_general(board, Side.RED)
    black = find_general(board, Side.BLACK)
    if red is None or black is None:
        return False
    if red[0] != black[0]:
        return False
    return count_between(board, red, black) == 0
