"""One-ply heuristic AI for all five variants."""

import logging
import random
from dataclasses import dataclass
from typing import List, Optional, Set

import numpy as np

from . import gomoku
from .banqi import rank_of
from .board import Board, Piece, PieceKind, Position
from .exceptions import TerminalStateError
from .game import GameState, apply_move, apply_placement, flip, forfeit
from .rules import Variant, enumerate_moves


logger = logging.getLogger(__name__)

DEFEND_WEIGHT = 1.1
QUIET_MOVE_SCORE = 5
CAPTURE_BASE_SCORE = 50
BANQI_FLIP_BASE = 15
BANQI_CAPTURE_FACTOR = 10
BANQI_EXPOSURE_FACTOR = 5

NEIGHBOURS = ((0, 1), (0, -1), (1, 0), (-1, 0))


@dataclass(frozen=True)
class AiMove:
    """A scored candidate action for the side to move."""

    piece: Optional[Piece]  # None for stone placement
    target: Position
    score: float
    is_flip: bool = False
    is_placement: bool = False


class Engine:
    """Heuristic move selector; scores every candidate one ply deep."""

    def __init__(self, rng: Optional[random.Random] = None, defend_weight: float = DEFEND_WEIGHT):
        """Initialize engine.

        Args:
            rng: Random source for tie-breaking (seed it for reproducible play)
            defend_weight: Weight of the opponent's score in Go/Gomoku placement
        """
        self.rng = rng or random.Random()
        self.defend_weight = defend_weight
        self.moves_considered = 0

    def enumerate_moves(self, piece: Piece, board: Board, variant: Variant) -> Set[Position]:
        """All destinations the variant's predicate accepts for `piece`."""
        return enumerate_moves(piece, board, variant)

    def select_ai_move(self, state: GameState) -> Optional[AiMove]:
        """Pick the best action for the side to move, or None if there is none."""
        self.moves_considered = 0
        if state.is_terminal:
            return None
        if state.rules.uses_placement:
            return self._select_placement(state)

        candidates = self._collect_candidates(state)
        self.moves_considered = len(candidates)
        if not candidates:
            return None

        best_score = max(move.score for move in candidates)
        top_moves = [move for move in candidates if move.score == best_score]
        choice = self.rng.choice(top_moves)
        logger.debug(
            "%s picks %s -> %s (score %s, %d tied of %d)",
            state.turn.value, choice.piece, choice.target, best_score, len(top_moves), len(candidates),
        )
        return choice

    def ai_move(self, state: GameState) -> GameState:
        """Select and apply one action for the side to move.

        A piece variant with no legal action loses immediately; a full Go or
        Gomoku board is returned unchanged.
        """
        if state.is_terminal:
            raise TerminalStateError(f"Game is over, {state.winner.value} won")

        move = self.select_ai_move(state)
        if move is None:
            if state.rules.uses_placement:
                logger.info("No empty point left on the %s board", state.variant.value)
                return state
            return forfeit(state, reason="no legal moves")

        if move.is_placement:
            return apply_placement(state, move.target)
        if move.is_flip:
            return flip(state, move.target)
        return apply_move(state, move.piece, move.target)

    def _select_placement(self, state: GameState) -> Optional[AiMove]:
        """Attack plus weighted defence over every empty point."""
        board = state.board
        empties = board.empty_positions()
        self.moves_considered = len(empties)
        if not empties:
            return None

        if next(board.pieces(), None) is None:
            return AiMove(None, self.rng.choice(empties), 0.0, is_placement=True)

        side = state.turn
        other = state.rules.opponent(side)
        scores = np.full((board.height, board.width), -np.inf)
        for x, y in empties:
            attack = gomoku.score(board, (x, y), side)
            defend = gomoku.score(board, (x, y), other)
            scores[y, x] = attack + self.defend_weight * defend

        # argmax returns the first maximum in row-major order
        y, x = np.unravel_index(int(np.argmax(scores)), scores.shape)
        best = (int(x), int(y))
        logger.debug("%s places at %s (score %.1f)", side.value, best, scores[y, x])
        return AiMove(None, best, float(scores[y, x]), is_placement=True)

    def _collect_candidates(self, state: GameState) -> List[AiMove]:
        board = state.board
        hidden_pieces = state.rules.has_hidden_pieces
        candidates: List[AiMove] = []

        if hidden_pieces:
            revealed_own = sum(1 for p in board.pieces(state.turn) if p.revealed)
            flip_score = BANQI_FLIP_BASE - revealed_own
            for piece in board.pieces():
                if not piece.revealed:
                    candidates.append(AiMove(piece, piece.position, flip_score, is_flip=True))

        for piece in board.pieces(state.turn):
            for target in sorted(self.enumerate_moves(piece, board, state.variant)):
                if hidden_pieces:
                    score = self._score_banqi_move(board, piece, target)
                else:
                    score = self._score_move(board, target)
                candidates.append(AiMove(piece, target, score))

        return candidates

    def _score_move(self, board: Board, target: Position) -> int:
        """Xiangqi and chess: quiet moves score the same, captures by value."""
        captured = board[target]
        if captured is None:
            return QUIET_MOVE_SCORE
        return CAPTURE_BASE_SCORE + self._get_capture_value(captured.kind)

    def _score_banqi_move(self, board: Board, piece: Piece, target: Position) -> int:
        """Reward captures by rank and penalise landing next to a stronger enemy."""
        captured = board[target]
        score = rank_of(captured.kind) * BANQI_CAPTURE_FACTOR if captured else QUIET_MOVE_SCORE

        my_rank = rank_of(piece.kind)
        for dx, dy in NEIGHBOURS:
            enemy = board.get_piece(target[0] + dx, target[1] + dy)
            if enemy is None or enemy.side == piece.side or not enemy.revealed:
                continue
            # A general may never take a soldier
            if enemy.kind == PieceKind.GENERAL and piece.kind == PieceKind.SOLDIER:
                continue
            if rank_of(enemy.kind) >= my_rank:
                score -= my_rank * BANQI_EXPOSURE_FACTOR
        return score

    def _get_capture_value(self, kind: PieceKind) -> int:
        """Get value of capturing a piece kind."""
        values = {
            PieceKind.GENERAL: 1000,
            PieceKind.KING: 1000,
            PieceKind.CHARIOT: 13,
            PieceKind.CANNON: 7,
            PieceKind.HORSE: 5,
            PieceKind.ELEPHANT: 3,
            PieceKind.ADVISOR: 3,
            PieceKind.SOLDIER: 2,
            PieceKind.QUEEN: 9,
            PieceKind.ROOK: 5,
            PieceKind.BISHOP: 3,
            PieceKind.KNIGHT: 3,
            PieceKind.PAWN: 1,
        }
        return values.get(kind, 0)
