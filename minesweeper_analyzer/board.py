"""Immutable board model consumed by the position analyzer."""

from typing import Dict, List, NamedTuple, Optional, Sequence, Tuple

from .utils import get_neighborhoods

REVEALED = "R"
HIDDEN = "H"
FLAGGED = "F"

_CELL_KINDS = (REVEALED, HIDDEN, FLAGGED)


class Cell(NamedTuple):
    """
    One board cell.

    kind is REVEALED, HIDDEN or FLAGGED. For revealed cells value is the
    adjacent-mine count shown to the player. For hidden and flagged cells value
    and is_mine are ground truth and are never read by the deduction rules.
    """

    kind: str
    value: int
    is_mine: bool = False

    @classmethod
    def revealed(cls, value: int) -> "Cell":
        return cls(REVEALED, value)

    @classmethod
    def hidden(cls, value: int = 0, is_mine: bool = False) -> "Cell":
        return cls(HIDDEN, value, is_mine)

    @classmethod
    def flagged(cls, value: int = -1) -> "Cell":
        return cls(FLAGGED, value, value < 0)


class Board:
    """Row-major grid of cells plus the total mine count."""

    def __init__(self, grid: Sequence[Sequence[Cell]], mines_count: int) -> None:
        """
        Build a board snapshot.

        Args:
            grid: Rows of cells; every row must have the same length.
            mines_count: Total number of mines on the board, must be >= 0.

        Raises:
            ValueError: If the grid is empty or ragged, a cell kind is unknown,
                a revealed value is negative, or mines_count is negative.
        """
        if not grid or not grid[0]:
            raise ValueError("Board must have at least one row and one column.")

        cols = len(grid[0])
        if any(len(row) != cols for row in grid):
            raise ValueError("Board rows must all have the same length.")
        if mines_count < 0:
            raise ValueError("mines_count must be non-negative.")

        for row in grid:
            for cell in row:
                if cell.kind not in _CELL_KINDS:
                    raise ValueError(f"Unknown cell kind: {cell.kind!r}")
                if cell.kind == REVEALED and cell.value < 0:
                    raise ValueError("Revealed cells must have a non-negative value.")

        self.grid: Tuple[Tuple[Cell, ...], ...] = tuple(tuple(row) for row in grid)
        self.rows: int = len(self.grid)
        self.cols: int = cols
        self.mines_count: int = mines_count

        self._neighborhoods: Dict[
            Tuple[int, int], Tuple[Tuple[int, int], ...]
        ] = get_neighborhoods(self.rows, self.cols)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return self.grid == other.grid and self.mines_count == other.mines_count

    def __repr__(self) -> str:
        return f"Board(rows={self.rows}, cols={self.cols}, mines_count={self.mines_count})"

    def cell(self, r: int, c: int) -> Cell:
        return self.grid[r][c]

    def neighbors(self, r: int, c: int) -> Tuple[Tuple[int, int], ...]:
        """Return precomputed neighbor coordinates for a cell, in row-major order."""
        return self._neighborhoods[(r, c)]

    @property
    def flags_count(self) -> int:
        return sum(1 for row in self.grid for cell in row if cell.kind == FLAGGED)

    def hidden_cells(self) -> List[Tuple[int, int]]:
        """Return every hidden (unflagged) cell in row-major order."""
        return [
            (r, c)
            for r in range(self.rows)
            for c in range(self.cols)
            if self.grid[r][c].kind == HIDDEN
        ]

    @classmethod
    def from_rows(
        cls, rows: Sequence[str], mines_count: Optional[int] = None
    ) -> "Board":
        """
        Build a board from a compact text notation.

        Symbols: digits 0-8 are revealed numbers, '.' is a hidden safe cell,
        '*' is a hidden mine and 'F' is a flagged mine. Spaces are ignored.
        Hidden and flagged cells get their true adjacent-mine count (mines get
        -1). If mines_count is omitted it is the number of '*' and 'F' cells.

        Raises:
            ValueError: On an unknown symbol or a ragged grid.
        """
        text = [row.replace(" ", "") for row in rows]
        if not text or not text[0]:
            raise ValueError("Board must have at least one row and one column.")
        height, width = len(text), len(text[0])
        if any(len(row) != width for row in text):
            raise ValueError("Board rows must all have the same length.")

        neighborhoods = get_neighborhoods(height, width)
        mines = {
            (r, c)
            for r in range(height)
            for c in range(width)
            if text[r][c] in "*F"
        }

        grid: List[List[Cell]] = []
        for r in range(height):
            row: List[Cell] = []
            for c in range(width):
                ch = text[r][c]
                adjacent = sum(1 for n in neighborhoods[(r, c)] if n in mines)
                if ch.isdigit():
                    row.append(Cell.revealed(int(ch)))
                elif ch == ".":
                    row.append(Cell.hidden(adjacent))
                elif ch == "*":
                    row.append(Cell.hidden(-1, is_mine=True))
                elif ch == "F":
                    row.append(Cell.flagged(-1))
                else:
                    raise ValueError(f"Unknown board symbol {ch!r} at ({r},{c}).")
            grid.append(row)

        return cls(grid, len(mines) if mines_count is None else mines_count)

    def format_grid(self, show_mines: bool = False) -> str:
        """
        Render the board as a multi-line string for terminal display.

        Args:
            show_mines: If True, hidden mines are drawn as '*' instead of '.'.

        Returns:
            A formatted grid with column labels on top and row labels on the left.
        """

        def cell_str(cell: Cell) -> str:
            if cell.kind == REVEALED:
                return str(cell.value)
            if cell.kind == FLAGGED:
                return "F"
            if show_mines and cell.is_mine:
                return "*"
            return "."

        header = " ".join(f"{c:2d}" for c in range(self.cols))
        out = ["   " + header, "   " + "-" * (3 * self.cols - 1)]
        for r, row in enumerate(self.grid):
            row_cells = " ".join(f" {cell_str(cell)}" for cell in row)
            out.append(f"{r:2d} |" + row_cells)
        return "\n".join(out)
