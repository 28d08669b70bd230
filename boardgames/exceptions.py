"""Errors raised by game transitions."""


class BoardGameError(Exception):
    """Base class for engine errors."""


class IllegalMoveError(BoardGameError, ValueError):
    """The requested move, placement or flip fails the variant's rules."""


class OutOfBoundsError(IllegalMoveError):
    """Target coordinates lie outside the board."""


class TerminalStateError(BoardGameError):
    """An action was requested after the game already has a winner."""


class MalformedLayoutError(BoardGameError, ValueError):
    """A starting layout has invalid or overlapping coordinates."""
