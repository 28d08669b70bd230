"""International chess move rules (no castling, en passant or promotion)."""

from .board import Board, Piece, PieceKind, Position, Side


def _sign(value: int) -> int:
    return (value > 0) - (value < 0)


def is_path_clear(start: Position, end: Position, board: Board) -> bool:
    """Walk unit steps from start toward end; any occupied intermediate square blocks.

    The destination square itself is not checked.
    """
    step_x = _sign(end[0] - start[0])
    step_y = _sign(end[1] - start[1])
    x, y = start[0] + step_x, start[1] + step_y
    while (x, y) != end:
        if board.get_piece(x, y) is not None:
            return False
        x += step_x
        y += step_y
    return True


def pawn_direction(side: Side) -> int:
    return -1 if side == Side.WHITE else 1


def pawn_start_row(side: Side, board: Board) -> int:
    return board.height - 2 if side == Side.WHITE else 1


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

    dx = x2 - x1
    dy = y2 - y1

    if piece.kind == PieceKind.PAWN:
        return _is_valid_pawn_move(board, piece, dx, dy, dest_piece is not None)
    elif piece.kind == PieceKind.ROOK:
        if dx != 0 and dy != 0:
            return False
        return is_path_clear(piece.position, target, board)
    elif piece.kind == PieceKind.BISHOP:
        if abs(dx) != abs(dy):
            return False
        return is_path_clear(piece.position, target, board)
    elif piece.kind == PieceKind.QUEEN:
        if dx != 0 and dy != 0 and abs(dx) != abs(dy):
            return False
        return is_path_clear(piece.position, target, board)
    elif piece.kind == PieceKind.KNIGHT:
        return (abs(dx), abs(dy)) in ((1, 2), (2, 1))
    elif piece.kind == PieceKind.KING:
        return abs(dx) <= 1 and abs(dy) <= 1
    return False


def _is_valid_pawn_move(board: Board, piece: Piece, dx: int, dy: int, is_capture: bool) -> bool:
    """Check if pawn move is valid.

    Pawn rules:
    - One step forward onto an empty square
    - Two steps from the start rank if both squares are empty
    - One step diagonally forward only to capture
    """
    x1, y1 = piece.position
    direction = pawn_direction(piece.side)

    if dx == 0 and dy == direction:
        return not is_capture
    if dx == 0 and dy == 2 * direction:
        if y1 != pawn_start_row(piece.side, board) or is_capture:
            return False
        return board.get_piece(x1, y1 + direction) is None
    if abs(dx) == 1 and dy == direction:
        return is_capture
    return False
