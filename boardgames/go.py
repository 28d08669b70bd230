"""Go stone placement and capture resolution.

Only captures are modelled: no ko, no suicide check, no territory scoring.
"""

import logging
from collections import deque
from typing import List, Set, Tuple

from .board import Board, Piece, Position, Side


logger = logging.getLogger(__name__)

SIZE = 19
DIRECTIONS: Tuple[Tuple[int, int], ...] = ((1, 0), (-1, 0), (0, 1), (0, -1))


def other_side(side: Side) -> Side:
    return Side.WHITE if side == Side.BLACK else Side.BLACK


def is_legal_placement(pos: Position, board: Board) -> bool:
    """Target must be on the board and empty."""
    return board.is_empty(*pos)


def group_info(board: Board, start: Position) -> Tuple[List[Position], Set[Position]]:
    """Breadth-first search of the group containing `start`.

    Returns the group's stones in visit order and its distinct liberties.
    A liberty shared by two stones of the group is counted once.
    """
    stone = board[start]
    if stone is None:
        return [], set()

    group: List[Position] = []
    liberties: Set[Position] = set()
    seen = {start}
    queue = deque([start])

    while queue:
        x, y = queue.popleft()
        group.append((x, y))
        for dx, dy in DIRECTIONS:
            nx, ny = x + dx, y + dy
            if not board.in_bounds(nx, ny):
                continue
            neighbour = board.get_piece(nx, ny)
            if neighbour is None:
                liberties.add((nx, ny))
            elif neighbour.side == stone.side and (nx, ny) not in seen:
                seen.add((nx, ny))
                queue.append((nx, ny))

    return group, liberties


def dead_groups(board: Board, just_moved_side: Side) -> List[List[Position]]:
    """Find every opponent group left without liberties.

    Groups are scanned in row-major order and all judged against the same
    board, so removing one group never frees liberties for another in this
    pass.
    """
    opponent = other_side(just_moved_side)
    visited: Set[Position] = set()
    dead: List[List[Position]] = []

    for piece in board.pieces(opponent):
        if piece.position in visited:
            continue
        group, liberties = group_info(board, piece.position)
        visited.update(group)
        if not liberties:
            dead.append(group)

    return dead


def _remove_dead(board: Board, just_moved_side: Side) -> Tuple[Board, List[Piece]]:
    groups = dead_groups(board, just_moved_side)
    captured = [board[pos] for group in groups for pos in group]
    if not captured:
        return board, []
    logger.debug("%s captures %d stone(s) in %d group(s)", just_moved_side.value, len(captured), len(groups))
    return board.without(p.position for p in captured), captured


def apply_captures(board: Board, just_moved_side: Side) -> Board:
    """Remove all opponent groups with zero liberties in one pass."""
    return _remove_dead(board, just_moved_side)[0]


def resolve_placement(board: Board, pos: Position, side: Side) -> Tuple[Board, List[Piece], bool]:
    """Settle a freshly placed stone. Go has no line win."""
    board, captured = _remove_dead(board, side)
    return board, captured, False
