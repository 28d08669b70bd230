"""Banqi (dark chess) rules on the 8x4 half board."""

import random
from typing import Dict, List, Optional

from .board import Board, LayoutEntry, Piece, PieceKind, Position, XIANGQI_LAYOUT, initialize


WIDTH = 8
HEIGHT = 4

# GENERAL(7) > CHARIOT(6) > HORSE(5) > ELEPHANT(4) > ADVISOR(3) > CANNON(2) > SOLDIER(1)
RANKS: Dict[PieceKind, int] = {
    PieceKind.GENERAL: 7,
    PieceKind.CHARIOT: 6,
    PieceKind.HORSE: 5,
    PieceKind.ELEPHANT: 4,
    PieceKind.ADVISOR: 3,
    PieceKind.CANNON: 2,
    PieceKind.SOLDIER: 1,
}


def rank_of(kind: PieceKind) -> int:
    return RANKS.get(kind, 0)


def can_capture(attacker: Piece, defender: Piece) -> bool:
    """Rank dominance between two revealed pieces, with the soldier/general reversal."""
    if attacker.side == defender.side:
        return False
    if attacker.kind == PieceKind.GENERAL and defender.kind == PieceKind.SOLDIER:
        return False
    if attacker.kind == PieceKind.SOLDIER and defender.kind == PieceKind.GENERAL:
        return True
    return rank_of(attacker.kind) >= rank_of(defender.kind)


def _is_one_step(origin: Position, target: Position) -> bool:
    return abs(target[0] - origin[0]) + abs(target[1] - origin[1]) == 1


def _pieces_between(board: Board, origin: Position, target: Position) -> Optional[int]:
    x1, y1 = origin
    x2, y2 = target
    if (x1 != x2 and y1 != y2) or (x1, y1) == (x2, y2):
        return None
    step_x = (x2 > x1) - (x2 < x1)
    step_y = (y2 > y1) - (y2 < y1)
    x, y = x1 + step_x, y1 + step_y
    count = 0
    while (x, y) != (x2, y2):
        if board.get_piece(x, y) is not None:
            count += 1
        x += step_x
        y += step_y
    return count


def is_legal(piece: Piece, target: Position, board: Board) -> bool:
    """Check if a revealed `piece` may move to `target`.

    Flipping a hidden piece is a separate action and never passes through
    this predicate.
    """
    if not piece.revealed:
        return False
    if not board.in_bounds(*target):
        return False

    dest_piece = board.get_piece(*target)
    if dest_piece is not None and not dest_piece.revealed:
        # Hidden pieces can never be captured
        return False

    if piece.kind == PieceKind.CANNON:
        if dest_piece is not None:
            if dest_piece.side == piece.side:
                return False
            return _pieces_between(board, piece.position, target) == 1
        return _is_one_step(piece.position, target)

    if not _is_one_step(piece.position, target):
        return False
    if dest_piece is None:
        return True
    return can_capture(piece, dest_piece)


def shuffled_layout(rng: Optional[random.Random] = None) -> List[LayoutEntry]:
    """Deal all 32 Xiangqi pieces face down in random order, row by row."""
    rng = rng or random.Random()
    kinds = [(entry.kind, entry.side) for entry in XIANGQI_LAYOUT]
    rng.shuffle(kinds)
    return [
        LayoutEntry(kind, side, index % WIDTH, index // WIDTH, revealed=False)
        for index, (kind, side) in enumerate(kinds)
    ]


def new_board(rng: Optional[random.Random] = None) -> Board:
    return initialize(shuffled_layout(rng), WIDTH, HEIGHT)
