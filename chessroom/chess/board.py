"""The Board holds the configuration of pieces. Rules live in moves.py / rules.py, the Board only knows where things are."""

from dataclasses import dataclass
from typing import Any, Iterator, Optional, Self

from chessroom.chess.pieces import BACK_RANK_ORDER, Piece, back_rank, pawn_start_rank
from chessroom.chess.position import BOARD_DIMENSIONS, Position
from chessroom.core.shared_types import Color, PieceType

Grid = list[list[Optional[Piece]]]


@dataclass
class Board:
    grid: Grid

    @classmethod
    def empty(cls) -> Self:
        rows, cols = BOARD_DIMENSIONS
        return cls([[None] * cols for _ in range(rows)])

    @classmethod
    def starting_position(cls) -> Self:
        board = cls.empty()
        for color in Color:
            for col, piece_type in enumerate(BACK_RANK_ORDER):
                board.place_piece(Piece(piece_type, color), Position(back_rank(color), col))
                board.place_piece(
                    Piece(PieceType.PAWN, color), Position(pawn_start_rank(color), col)
                )
        return board

    @classmethod
    def from_fen(cls, fen_str: str) -> Self:
        """Construct a board from the piece placement part of a FEN string.

        ex. standard starting position:
        rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR
        * The first group is the 8th rank, which is row 0 of the grid.
        * Lower case letters are black pieces, upper case white pieces.
        * Digits denote that many consecutive empty squares.

        NOTE: FEN does not carry per-piece history, every piece starts with `has_moved=False`.
        """
        board = cls.empty()
        for row, fen_one_rank in enumerate(fen_str.split("/")):
            col = 0
            for character in fen_one_rank:
                if character.isalpha():
                    board.place_piece(Piece.from_fen(character), Position(row, col))
                    col += 1
                else:
                    col += int(character)
        return board

    def to_fen(self) -> str:
        """Ranks are separated by slashes in FEN string."""
        return "/".join(self._row_to_fen(row) for row in self.grid)

    def _row_to_fen(self, row: list[Optional[Piece]]) -> str:
        fen_characters: list[str] = []
        empty_count = 0
        for piece in row:
            if piece is None:
                empty_count += 1
                continue
            if empty_count > 0:
                fen_characters.append(str(empty_count))
                empty_count = 0
            fen_characters.append(piece.to_fen())

        # if the entire rank is empty, then we still place this number in the string
        if empty_count > 0:
            fen_characters.append(str(empty_count))
        return "".join(fen_characters)

    def copy(self) -> Self:
        """Independent copy. Pieces are immutable, so copying the rows is enough to avoid any aliasing."""
        return type(self)([list(row) for row in self.grid])

    def piece(self, position: Position) -> Optional[Piece]:
        if not position.is_within_bounds():
            return None
        return self.grid[position.row][position.col]

    def is_empty(self, position: Position) -> bool:
        return self.piece(position) is None

    def is_any_occupied(self, positions: list[Position]) -> bool:
        return any(not self.is_empty(position) for position in positions)

    def place_piece(self, piece: Piece, position: Position) -> None:
        self.grid[position.row][position.col] = piece

    def remove_piece(self, position: Position) -> Optional[Piece]:
        piece = self.grid[position.row][position.col]
        self.grid[position.row][position.col] = None
        return piece

    def move_piece(self, from_position: Position, to_position: Position) -> None:
        """Relocate whatever stands on `from_position` and mark it as moved. Anything on the target square is overwritten."""
        piece = self.remove_piece(from_position)
        if piece is None:
            return
        self.place_piece(piece.moved(), to_position)

    def pieces(self) -> Iterator[tuple[Position, Piece]]:
        for row, pieces_on_row in enumerate(self.grid):
            for col, piece in enumerate(pieces_on_row):
                if piece is not None:
                    yield Position(row, col), piece

    def locate_color(self, color: Color) -> list[Position]:
        return [position for position, piece in self.pieces() if piece.color == color]

    def locate_pieces(self, piece_type: PieceType, color: Color) -> list[Position]:
        return [
            position
            for position, piece in self.pieces()
            if piece.type == piece_type and piece.color == color
        ]

    def find_king(self, color: Color) -> Position:
        """Full board scan. A board without a king is a programming error, not a game situation."""
        kings = self.locate_pieces(PieceType.KING, color)
        assert kings, f"No {color} king on the board: {self.to_fen()}"
        return kings[0]

    def to_list(self) -> list[list[Optional[dict[str, Any]]]]:
        return [
            [piece.to_dict() if piece is not None else None for piece in row]
            for row in self.grid
        ]

    @classmethod
    def from_list(cls, rows: list[list[Optional[dict[str, Any]]]]) -> Self:
        return cls(
            [
                [Piece.from_dict(cell) if cell is not None else None for cell in row]
                for row in rows
            ]
        )
