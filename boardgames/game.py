"""Game state and the transitions a front end drives.

Every transition takes a GameState snapshot and returns a new one; the input
is never modified. Rejected actions raise an error from
:mod:`boardgames.exceptions` and leave the state as it was.
"""

import logging
import random
from dataclasses import dataclass, replace
from typing import Iterable, Optional, Set, Tuple

from . import go, xiangqi
from .board import Board, Piece, PieceKind, Position, Side, is_king_present, new_piece_id
from .exceptions import IllegalMoveError, OutOfBoundsError, TerminalStateError
from .rules import RuleSet, Variant, enumerate_moves, ruleset_for


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GameState:
    """Immutable snapshot of one game.

    Captured pieces are kept per side: `captured_light` holds RED or WHITE
    pieces, `captured_dark` holds BLACK pieces.
    """

    variant: Variant
    board: Board
    turn: Side
    winner: Optional[Side] = None
    captured_light: Tuple[Piece, ...] = ()
    captured_dark: Tuple[Piece, ...] = ()
    history: Tuple[str, ...] = ()
    ply: int = 0
    strict_generals: bool = False

    @property
    def rules(self) -> RuleSet:
        return ruleset_for(self.variant)

    @property
    def is_terminal(self) -> bool:
        return self.winner is not None

    def captured_of(self, side: Side) -> Tuple[Piece, ...]:
        """Pieces of `side` that have been captured."""
        return self.captured_dark if side == Side.BLACK else self.captured_light


def new_game(
    variant: Variant,
    rng: Optional[random.Random] = None,
    strict_generals: bool = False,
) -> GameState:
    """Create the starting state for a variant.

    Args:
        variant: Game to set up
        rng: Random source for the Banqi deal (seed it for reproducible games)
        strict_generals: Reject Xiangqi moves that leave the generals facing
            each other on an open file
    """
    rules = ruleset_for(variant)
    board = rules.make_board(rng or random.Random())
    logger.info("New %s game (%dx%d), %s to move", variant.value, board.width, board.height, rules.first_to_move.value)
    return GameState(
        variant=variant,
        board=board,
        turn=rules.first_to_move,
        strict_generals=strict_generals,
    )


def _ensure_active(state: GameState) -> None:
    if state.is_terminal:
        raise TerminalStateError(f"Game is over, {state.winner.value} won")


def _ensure_in_bounds(board: Board, pos: Position) -> None:
    if not board.in_bounds(*pos):
        raise OutOfBoundsError(f"{pos} is outside the {board.width}x{board.height} board")


def _piece_on_board(state: GameState, piece: Piece) -> Optional[Piece]:
    """Return the board's copy of `piece`, or None if it is not where it claims to be."""
    current = state.board[piece.position]
    if current is None or current.id != piece.id:
        return None
    return current


def _add_captured(state: GameState, pieces: Iterable[Piece]) -> Tuple[Tuple[Piece, ...], Tuple[Piece, ...]]:
    light = list(state.captured_light)
    dark = list(state.captured_dark)
    for piece in pieces:
        if piece.side == Side.BLACK:
            dark.append(piece)
        else:
            light.append(piece)
    return tuple(light), tuple(dark)


def legal_destinations(state: GameState, piece: Piece) -> Set[Position]:
    """Cells `piece` may move to right now.

    Empty when the game is over, the variant uses placement, the piece is not
    on the board or it is not the piece owner's turn.
    """
    if state.is_terminal or state.rules.uses_placement:
        return set()
    current = _piece_on_board(state, piece)
    if current is None or current.side != state.turn:
        return set()
    return enumerate_moves(current, state.board, state.variant)


def is_legal_move(state: GameState, piece: Piece, target: Position) -> bool:
    """Boolean form of apply_move's validation."""
    return tuple(target) in legal_destinations(state, piece)


def apply_move(state: GameState, piece: Piece, target: Position) -> GameState:
    """Move a piece and return the resulting state.

    Raises:
        TerminalStateError: The game already has a winner
        OutOfBoundsError: Target is off the board
        IllegalMoveError: Any other rule violation
    """
    _ensure_active(state)
    rules = state.rules
    if rules.uses_placement:
        raise IllegalMoveError(f"{state.variant.value} uses placement, not moves")

    target = tuple(target)
    _ensure_in_bounds(state.board, target)

    mover = _piece_on_board(state, piece)
    if mover is None:
        raise IllegalMoveError(f"No such piece at {piece.position}")
    if mover.side != state.turn:
        raise IllegalMoveError(f"It is {state.turn.value}'s turn")
    if not rules.is_legal(mover, target, state.board):
        raise IllegalMoveError(f"{mover} cannot move from {mover.position} to {target}")

    captured = state.board[target]
    board = state.board.place(target, mover)

    if rules.forbids_facing_generals and xiangqi.flying_general_violated(board):
        if state.strict_generals:
            raise IllegalMoveError("Move leaves the generals facing each other")
        logger.warning("Generals face each other on an open file after %s to %s", mover, target)

    next_turn = rules.opponent(state.turn)
    winner = None if is_king_present(board, next_turn) else state.turn

    notation = f"{mover.side.value} {mover.kind.value} {mover.position}->{target}"
    if captured is not None:
        notation += f" x {captured.kind.value}"
        logger.debug("%s captures %s at %s", mover, captured, target)
    if winner is not None:
        logger.info("%s wins %s", winner.value, state.variant.value)

    captured_light, captured_dark = _add_captured(state, [captured] if captured else [])
    return replace(
        state,
        board=board,
        turn=next_turn,
        winner=winner,
        captured_light=captured_light,
        captured_dark=captured_dark,
        history=state.history + (notation,),
        ply=state.ply + 1,
    )


def apply_placement(state: GameState, pos: Position) -> GameState:
    """Place a stone for the side to move (Go and Gomoku)."""
    _ensure_active(state)
    rules = state.rules
    if not rules.uses_placement:
        raise IllegalMoveError(f"{state.variant.value} does not use stone placement")

    pos = tuple(pos)
    _ensure_in_bounds(state.board, pos)
    if not go.is_legal_placement(pos, state.board):
        raise IllegalMoveError(f"{pos} is already occupied")

    stone = Piece(
        id=new_piece_id(PieceKind.STONE, state.turn, state.ply),
        kind=PieceKind.STONE,
        side=state.turn,
        position=pos,
    )
    board, captured, won = rules.resolve_placement(state.board.place(pos, stone), pos, state.turn)
    winner = state.turn if won else None
    if winner is not None:
        logger.info("%s wins %s with the stone at %s", winner.value, state.variant.value, pos)

    notation = f"{state.turn.value} STONE {pos}"
    if captured:
        notation += f" x{len(captured)}"

    captured_light, captured_dark = _add_captured(state, captured)
    return replace(
        state,
        board=board,
        turn=rules.opponent(state.turn),
        winner=winner,
        captured_light=captured_light,
        captured_dark=captured_dark,
        history=state.history + (notation,),
        ply=state.ply + 1,
    )


def flip(state: GameState, pos: Position) -> GameState:
    """Turn a hidden Banqi piece face up; this uses the mover's turn."""
    _ensure_active(state)
    if not state.rules.has_hidden_pieces:
        raise IllegalMoveError(f"{state.variant.value} has no hidden pieces")

    pos = tuple(pos)
    _ensure_in_bounds(state.board, pos)
    piece = state.board[pos]
    if piece is None or piece.revealed:
        raise IllegalMoveError(f"No hidden piece at {pos}")

    revealed = piece.flipped()
    return replace(
        state,
        board=state.board.replace_piece(revealed),
        turn=state.rules.opponent(state.turn),
        history=state.history + (f"{state.turn.value} flips {revealed} at {pos}",),
        ply=state.ply + 1,
    )


def forfeit(state: GameState, loser: Optional[Side] = None, reason: str = "timeout") -> GameState:
    """Declare `loser` (default: the side to move) beaten without a move.

    Used by the clock on timeout and when the side to move has no legal move.
    """
    _ensure_active(state)
    loser = loser or state.turn
    winner = state.rules.opponent(loser)
    logger.info("%s forfeits %s (%s)", loser.value, state.variant.value, reason)
    return replace(
        state,
        winner=winner,
        history=state.history + (f"{loser.value} forfeits ({reason})",),
    )
