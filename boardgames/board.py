"""Board and piece representation shared by every variant."""

import uuid
from dataclasses import dataclass, replace
from enum import Enum
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple

from .exceptions import MalformedLayoutError


Position = Tuple[int, int]


class Side(Enum):
    """Player sides."""

    RED = "RED"
    BLACK = "BLACK"
    WHITE = "WHITE"


class PieceKind(Enum):
    """Piece kinds across all variants."""

    # Xiangqi / Banqi
    GENERAL = "GENERAL"
    ADVISOR = "ADVISOR"
    ELEPHANT = "ELEPHANT"
    HORSE = "HORSE"
    CHARIOT = "CHARIOT"
    CANNON = "CANNON"
    SOLDIER = "SOLDIER"

    # Chess
    KING = "KING"
    QUEEN = "QUEEN"
    ROOK = "ROOK"
    BISHOP = "BISHOP"
    KNIGHT = "KNIGHT"
    PAWN = "PAWN"

    # Go / Gomoku
    STONE = "STONE"


ROYAL_KINDS = (PieceKind.GENERAL, PieceKind.KING)


@dataclass(frozen=True)
class Piece:
    """Represents a piece on the board."""

    id: str
    kind: PieceKind
    side: Side
    position: Position
    revealed: bool = True  # Banqi only

    def moved_to(self, position: Position) -> "Piece":
        return replace(self, position=position)

    def flipped(self) -> "Piece":
        return replace(self, revealed=True)

    def __str__(self) -> str:
        return f"{self.side.value}_{self.kind.value}"


@dataclass(frozen=True)
class LayoutEntry:
    """One piece of a starting layout."""

    kind: PieceKind
    side: Side
    x: int
    y: int
    revealed: bool = True


def new_piece_id(kind: PieceKind, side: Side, index: int = 0) -> str:
    """Generate a fresh unique piece id."""
    return f"{side.value.lower()}-{kind.value.lower()}-{index}-{uuid.uuid4().hex[:8]}"


class Board:
    """Immutable grid of optional pieces.

    Every mutating operation returns a new Board and leaves the original
    untouched, so earlier snapshots stay valid for history and undo.
    """

    def __init__(self, width: int, height: int, cells: Optional[Sequence[Sequence[Optional[Piece]]]] = None):
        self.width = width
        self.height = height
        if cells is None:
            self._cells: Tuple[Tuple[Optional[Piece], ...], ...] = tuple(
                tuple(None for _ in range(width)) for _ in range(height)
            )
        else:
            self._cells = tuple(tuple(row) for row in cells)

    def in_bounds(self, x: int, y: int) -> bool:
        """Check if coordinates lie on the board."""
        return 0 <= x < self.width and 0 <= y < self.height

    def get_piece(self, x: int, y: int) -> Optional[Piece]:
        """Get piece at given coordinates."""
        if self.in_bounds(x, y):
            return self._cells[y][x]
        return None

    def __getitem__(self, pos: Position) -> Optional[Piece]:
        return self.get_piece(pos[0], pos[1])

    def is_empty(self, x: int, y: int) -> bool:
        return self.in_bounds(x, y) and self._cells[y][x] is None

    @property
    def rows(self) -> Tuple[Tuple[Optional[Piece], ...], ...]:
        return self._cells

    def pieces(self, side: Optional[Side] = None) -> Iterator[Piece]:
        """Iterate pieces in row-major order, optionally for one side."""
        for row in self._cells:
            for piece in row:
                if piece is not None and (side is None or piece.side == side):
                    yield piece

    def positions(self) -> Iterator[Position]:
        for y in range(self.height):
            for x in range(self.width):
                yield (x, y)

    def empty_positions(self) -> List[Position]:
        return [(x, y) for x, y in self.positions() if self._cells[y][x] is None]

    def _with_cells(self, changes: Iterable[Tuple[Position, Optional[Piece]]]) -> "Board":
        grid = [list(row) for row in self._cells]
        for (x, y), piece in changes:
            grid[y][x] = piece
        return Board(self.width, self.height, grid)

    def place(self, pos: Position, piece: Piece) -> "Board":
        """Return a new board with `piece` on `pos` and its old cell cleared."""
        changes: List[Tuple[Position, Optional[Piece]]] = []
        old_x, old_y = piece.position
        previous = self.get_piece(old_x, old_y)
        if previous is not None and previous.id == piece.id and piece.position != pos:
            changes.append((piece.position, None))
        changes.append((pos, piece.moved_to(pos)))
        return self._with_cells(changes)

    def replace_piece(self, piece: Piece) -> "Board":
        """Return a new board with the cell at `piece.position` set to `piece`."""
        return self._with_cells([(piece.position, piece)])

    def without(self, positions: Iterable[Position]) -> "Board":
        """Return a new board with the given cells emptied."""
        return self._with_cells((pos, None) for pos in positions)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return self.width == other.width and self.height == other.height and self._cells == other._cells

    def __hash__(self) -> int:
        return hash((self.width, self.height, self._cells))

    def __repr__(self) -> str:
        lines = []
        for row in self._cells:
            lines.append(" ".join("." if p is None else p.kind.value[0] for p in row))
        return f"Board({self.width}x{self.height})\n" + "\n".join(lines)


def initialize(layout: Sequence[LayoutEntry], width: int = 0, height: int = 0) -> Board:
    """Place a layout onto a fresh board.

    The board is sized to fit the layout or (width, height), whichever is
    larger. Each placed piece gets a fresh unique id.
    """
    if any(entry.x < 0 or entry.y < 0 for entry in layout):
        raise MalformedLayoutError("Layout contains negative coordinates")

    if layout:
        width = max(width, max(entry.x for entry in layout) + 1)
        height = max(height, max(entry.y for entry in layout) + 1)

    grid: List[List[Optional[Piece]]] = [[None] * width for _ in range(height)]
    for index, entry in enumerate(layout):
        if grid[entry.y][entry.x] is not None:
            raise MalformedLayoutError(f"Two pieces placed on ({entry.x}, {entry.y})")
        grid[entry.y][entry.x] = Piece(
            id=new_piece_id(entry.kind, entry.side, index),
            kind=entry.kind,
            side=entry.side,
            position=(entry.x, entry.y),
            revealed=entry.revealed,
        )
    return Board(width, height, grid)


def place(board: Board, pos: Position, piece: Piece) -> Board:
    """Copy-on-write placement; see Board.place."""
    return board.place(pos, piece)


def is_king_present(board: Board, side: Side) -> bool:
    """True iff a GENERAL or KING of `side` is on the board (hidden ones count)."""
    return any(piece.kind in ROYAL_KINDS for piece in board.pieces(side))


def _mirror(entries: Sequence[Tuple[PieceKind, int, int]], side: Side, height: int) -> List[LayoutEntry]:
    return [LayoutEntry(kind, side, x, height - 1 - y) for kind, x, y in entries]


_XIANGQI_BLACK = [
    (PieceKind.CHARIOT, 0, 0),
    (PieceKind.HORSE, 1, 0),
    (PieceKind.ELEPHANT, 2, 0),
    (PieceKind.ADVISOR, 3, 0),
    (PieceKind.GENERAL, 4, 0),
    (PieceKind.ADVISOR, 5, 0),
    (PieceKind.ELEPHANT, 6, 0),
    (PieceKind.HORSE, 7, 0),
    (PieceKind.CHARIOT, 8, 0),
    (PieceKind.CANNON, 1, 2),
    (PieceKind.CANNON, 7, 2),
] + [(PieceKind.SOLDIER, x, 3) for x in range(0, 9, 2)]

XIANGQI_LAYOUT: List[LayoutEntry] = [
    LayoutEntry(kind, Side.BLACK, x, y) for kind, x, y in _XIANGQI_BLACK
] + _mirror(_XIANGQI_BLACK, Side.RED, 10)

_CHESS_BACK_RANK = [
    PieceKind.ROOK,
    PieceKind.KNIGHT,
    PieceKind.BISHOP,
    PieceKind.QUEEN,
    PieceKind.KING,
    PieceKind.BISHOP,
    PieceKind.KNIGHT,
    PieceKind.ROOK,
]
_CHESS_BLACK = [(kind, x, 0) for x, kind in enumerate(_CHESS_BACK_RANK)] + [
    (PieceKind.PAWN, x, 1) for x in range(8)
]

CHESS_LAYOUT: List[LayoutEntry] = [
    LayoutEntry(kind, Side.BLACK, x, y) for kind, x, y in _CHESS_BLACK
] + _mirror(_CHESS_BLACK, Side.WHITE, 8)
