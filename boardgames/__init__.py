"""Rule engine for Xiangqi, Chess, Banqi, Go and Gomoku."""

from .board import (
    Board, Piece, PieceKind, Position, Side, LayoutEntry,
    initialize, place, is_king_present,
    XIANGQI_LAYOUT, CHESS_LAYOUT,
)
from .exceptions import (
    BoardGameError, IllegalMoveError, OutOfBoundsError,
    TerminalStateError, MalformedLayoutError,
)
from .rules import Variant, RuleSet, RULESETS, ruleset_for, enumerate_moves
from .game import (
    GameState, new_game, legal_destinations, is_legal_move,
    apply_move, apply_placement, flip, forfeit,
)
from .engine import Engine, AiMove

__all__ = [
    # Board
    'Board', 'Piece', 'PieceKind', 'Position', 'Side', 'LayoutEntry',
    'initialize', 'place', 'is_king_present',
    'XIANGQI_LAYOUT', 'CHESS_LAYOUT',
    # Errors
    'BoardGameError', 'IllegalMoveError', 'OutOfBoundsError',
    'TerminalStateError', 'MalformedLayoutError',
    # Variants
    'Variant', 'RuleSet', 'RULESETS', 'ruleset_for', 'enumerate_moves',
    # Game flow
    'GameState', 'new_game', 'legal_destinations', 'is_legal_move',
    'apply_move', 'apply_placement', 'flip', 'forfeit',
    # AI
    'Engine', 'AiMove',
]
