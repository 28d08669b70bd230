"""Per-variant rule sets.

Each variant is bound once to its board size, sides, starting position and
legality predicate; callers thread the RuleSet through instead of checking a
mode flag at every call site.
"""

import random
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional, Set, Tuple

from . import banqi, chess, go, gomoku, xiangqi
from .board import Board, CHESS_LAYOUT, Piece, Position, Side, XIANGQI_LAYOUT, initialize


LegalityFn = Callable[[Piece, Position, Board], bool]
BoardFactory = Callable[[random.Random], Board]
PlacementFn = Callable[[Board, Position, Side], Tuple[Board, List[Piece], bool]]


class Variant(Enum):
    """Supported games."""

    XIANGQI = "XIANGQI"
    CHESS = "CHESS"
    BANQI = "BANQI"
    GO = "GO"
    GOMOKU = "GOMOKU"


@dataclass(frozen=True)
class RuleSet:
    """Everything that differs between variants."""

    variant: Variant
    width: int
    height: int
    sides: Tuple[Side, Side]  # first mover first
    make_board: BoardFactory
    is_legal: Optional[LegalityFn] = None
    resolve_placement: Optional[PlacementFn] = None  # set for placement games
    forbids_facing_generals: bool = False
    has_hidden_pieces: bool = False
    summary: Tuple[str, ...] = ()

    @property
    def uses_placement(self) -> bool:
        return self.resolve_placement is not None

    @property
    def first_to_move(self) -> Side:
        return self.sides[0]

    def opponent(self, side: Side) -> Side:
        if side not in self.sides:
            raise ValueError(f"{side.value} does not play {self.variant.value}")
        return self.sides[1] if side == self.sides[0] else self.sides[0]


def _empty_board(width: int, height: int) -> BoardFactory:
    return lambda rng: Board(width, height)


RULESETS: Dict[Variant, RuleSet] = {
    Variant.XIANGQI: RuleSet(
        variant=Variant.XIANGQI,
        width=9,
        height=10,
        sides=(Side.RED, Side.BLACK),
        make_board=lambda rng: initialize(XIANGQI_LAYOUT, 9, 10),
        is_legal=xiangqi.is_legal,
        forbids_facing_generals=True,
        summary=(
            "General: one orthogonal step inside the palace.",
            "Advisor: one diagonal step inside the palace.",
            "Elephant: two points diagonally, cannot cross the river, blocked eye.",
            "Chariot: any distance along a rank or file.",
            "Horse: L-shape, blocked by a piece on its leg.",
            "Cannon: moves like a chariot, captures by jumping exactly one piece.",
            "Soldier: forward only; sideways too after crossing the river.",
            "Capture the enemy general to win.",
        ),
    ),
    Variant.CHESS: RuleSet(
        variant=Variant.CHESS,
        width=8,
        height=8,
        sides=(Side.WHITE, Side.BLACK),
        make_board=lambda rng: initialize(CHESS_LAYOUT, 8, 8),
        is_legal=chess.is_legal,
        summary=(
            "King: one square in any direction.",
            "Queen: any distance along ranks, files and diagonals.",
            "Rook: any distance along ranks and files.",
            "Bishop: any distance diagonally.",
            "Knight: L-shape (2+1), never blocked.",
            "Pawn: one step forward, two from the start rank, captures diagonally.",
            "Capture the enemy king to win.",
        ),
    ),
    Variant.BANQI: RuleSet(
        variant=Variant.BANQI,
        width=banqi.WIDTH,
        height=banqi.HEIGHT,
        sides=(Side.RED, Side.BLACK),
        make_board=banqi.new_board,
        is_legal=banqi.is_legal,
        has_hidden_pieces=True,
        summary=(
            "All pieces start face down; flipping one uses the turn.",
            "Revealed pieces move one orthogonal step.",
            "Rank: General > Chariot > Horse > Elephant > Advisor > Cannon > Soldier.",
            "A soldier may capture the general; the general may not capture a soldier.",
            "Cannon captures by jumping exactly one piece.",
        ),
    ),
    Variant.GO: RuleSet(
        variant=Variant.GO,
        width=go.SIZE,
        height=go.SIZE,
        sides=(Side.BLACK, Side.WHITE),
        make_board=_empty_board(go.SIZE, go.SIZE),
        resolve_placement=go.resolve_placement,
        summary=(
            "Place a stone on any empty intersection; stones never move.",
            "A group with no liberties is removed from the board.",
        ),
    ),
    Variant.GOMOKU: RuleSet(
        variant=Variant.GOMOKU,
        width=gomoku.SIZE,
        height=gomoku.SIZE,
        sides=(Side.BLACK, Side.WHITE),
        make_board=_empty_board(gomoku.SIZE, gomoku.SIZE),
        resolve_placement=gomoku.resolve_placement,
        summary=(
            "Black moves first; place one stone per turn.",
            "Five or more in a row in any direction wins; no forbidden moves.",
        ),
    ),
}


def ruleset_for(variant: Variant) -> RuleSet:
    return RULESETS[variant]


def enumerate_moves(piece: Piece, board: Board, variant: Variant) -> Set[Position]:
    """Every cell of the board the variant's predicate accepts for `piece`."""
    is_legal = ruleset_for(variant).is_legal
    if is_legal is None:
        return set()
    return {pos for pos in board.positions() if is_legal(piece, pos, board)}
