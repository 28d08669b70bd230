"""Unit tests for Gomoku win detection and scoring."""

import pytest
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from boardgames import LayoutEntry, PieceKind, Side, initialize
from boardgames.gomoku import (
    SIZE, SCORE_FOUR, SCORE_OPEN_THREE, SCORE_HALF_OPEN_THREE, SCORE_OPEN_TWO,
    check_win, score,
)


def stones(black=(), white=()):
    layout = [LayoutEntry(PieceKind.STONE, Side.BLACK, x, y) for x, y in black]
    layout += [LayoutEntry(PieceKind.STONE, Side.WHITE, x, y) for x, y in white]
    return initialize(layout, SIZE, SIZE)


class TestCheckWin:
    """Five in a row."""

    @pytest.mark.parametrize("last", [(x, 0) for x in range(5)])
    def test_five_horizontal(self, last):
        """Any stone of the five completes the line."""
        board = stones(black=[(x, 0) for x in range(5)])

        assert check_win(board, last, Side.BLACK)

    @pytest.mark.parametrize("last", [(x, 0) for x in range(4)])
    def test_four_is_not_a_win(self, last):
        board = stones(black=[(x, 0) for x in range(4)])

        assert not check_win(board, last, Side.BLACK)

    def test_vertical(self):
        board = stones(white=[(7, y) for y in range(3, 8)])

        assert check_win(board, (7, 5), Side.WHITE)

    def test_diagonals(self):
        down = stones(black=[(i, i) for i in range(5)])
        up = stones(black=[(i, 10 - i) for i in range(5)])

        assert check_win(down, (2, 2), Side.BLACK)
        assert check_win(up, (4, 6), Side.BLACK)

    def test_overline_wins(self):
        board = stones(black=[(x, 4) for x in range(6)])

        assert check_win(board, (5, 4), Side.BLACK)

    def test_broken_line(self):
        board = stones(black=[(0, 0), (1, 0), (3, 0), (4, 0)], white=[(2, 0)])

        assert not check_win(board, (4, 0), Side.BLACK)

    def test_other_side_stones_do_not_count(self):
        board = stones(black=[(x, 0) for x in range(5)])

        assert not check_win(board, (2, 0), Side.WHITE)


class TestScore:
    """Placement heuristic."""

    def test_completing_five_scores_four_bonus(self):
        board = stones(black=[(x, 7) for x in range(3, 7)])

        assert score(board, (7, 7), Side.BLACK) >= SCORE_FOUR

    def test_open_three(self):
        board = stones(black=[(5, 7), (6, 7), (7, 7)])

        assert score(board, (8, 7), Side.BLACK) >= SCORE_OPEN_THREE

    def test_half_open_three(self):
        board = stones(black=[(5, 7), (6, 7), (7, 7)], white=[(4, 7)])
        total = score(board, (8, 7), Side.BLACK)

        assert SCORE_HALF_OPEN_THREE <= total < SCORE_OPEN_THREE

    def test_open_two(self):
        board = stones(black=[(6, 7), (7, 7)])

        assert SCORE_OPEN_TWO <= score(board, (8, 7), Side.BLACK) < SCORE_HALF_OPEN_THREE

    def test_isolated_point_scores_zero(self):
        board = stones(black=[(0, 0)])

        assert score(board, (10, 10), Side.BLACK) == 0

    def test_axes_add_up(self):
        """Two open twos through one point score twice one open two."""
        board = stones(black=[(6, 7), (7, 7), (8, 5), (8, 6)])

        assert score(board, (8, 7), Side.BLACK) == 2 * SCORE_OPEN_TWO

    def test_blocking_value(self):
        """Scoring for the opponent measures how much a point blocks."""
        board = stones(white=[(x, 7) for x in range(3, 7)])

        assert score(board, (7, 7), Side.WHITE) >= SCORE_FOUR
        assert score(board, (7, 7), Side.BLACK) == 0
