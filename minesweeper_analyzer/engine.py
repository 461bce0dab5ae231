"""Minesweeper game engine used to produce positions with known ground truth."""

import random
from collections import deque
from typing import Deque, Dict, FrozenSet, List, Set, Tuple

from .board import Board, Cell
from .utils import get_neighborhoods

MINE = -1


class Minesweeper:
    """Minesweeper game with first-click safety, flags and board snapshots."""

    def __init__(
        self,
        rows: int,
        cols: int,
        mines_count: int,
        mines_generation_algorithm: str = "safe_neighborhood_rule",
    ) -> None:
        """
        Initialize a game.

        Args:
            rows: Number of rows, must be > 0.
            cols: Number of columns, must be > 0.
            mines_count: Total number of mines to place, must be >= 0.
            mines_generation_algorithm: Mine placement rule; one of
                {"safe_first_action_rule", "safe_neighborhood_rule"}.

        Raises:
            ValueError: If dimensions are invalid, the algorithm is unknown, or
                the mines cannot fit around the guaranteed-safe zone.
        """
        if rows <= 0 or cols <= 0:
            raise ValueError("rows and cols must be positive.")
        if mines_count < 0:
            raise ValueError("mines_count must be non-negative.")
        if mines_generation_algorithm not in (
            "safe_first_action_rule",
            "safe_neighborhood_rule",
        ):
            raise ValueError(
                'mines_generation_algorithm must be "safe_first_action_rule" '
                'or "safe_neighborhood_rule".'
            )

        reserved = 1 if mines_generation_algorithm == "safe_first_action_rule" else 9
        if mines_count > rows * cols - min(reserved, rows * cols):
            raise ValueError(
                f"Cannot place {mines_count} mines and satisfy {mines_generation_algorithm}."
            )

        self.rows: int = rows
        self.cols: int = cols
        self.mines_count: int = mines_count
        self.mines_generation_algorithm: str = mines_generation_algorithm

        # values[r][c]: MINE or the adjacent-mine count, filled on the first reveal
        self.values: List[List[int]] = [[0] * cols for _ in range(rows)]
        self.revealed: List[List[bool]] = [[False] * cols for _ in range(rows)]
        self.flagged: List[List[bool]] = [[False] * cols for _ in range(rows)]
        self.first_move: bool = True
        self.game_over: bool = False
        self.unrevealed_safe_count: int = rows * cols - mines_count

        self._neighborhoods: Dict[
            Tuple[int, int], Tuple[Tuple[int, int], ...]
        ] = get_neighborhoods(rows, cols)

    def neighbors(self, r: int, c: int) -> Tuple[Tuple[int, int], ...]:
        return self._neighborhoods[(r, c)]

    def _check_bounds(self, r: int, c: int) -> None:
        if not (0 <= r < self.rows and 0 <= c < self.cols):
            raise ValueError("Cell coordinates are outside the board.")

    def place_mines(self, first_r: int, first_c: int) -> None:
        """
        Place mines uniformly at random outside the guaranteed-safe zone.

        The safe zone is the first clicked cell, plus its neighbors under
        "safe_neighborhood_rule". Adjacent counts are filled in afterwards.
        """
        if not self.first_move:
            raise ValueError("Mines have already been placed.")

        safe: Set[Tuple[int, int]] = {(first_r, first_c)}
        if self.mines_generation_algorithm == "safe_neighborhood_rule":
            safe.update(self.neighbors(first_r, first_c))

        eligible = [
            (r, c)
            for r in range(self.rows)
            for c in range(self.cols)
            if (r, c) not in safe
        ]
        if self.mines_count > len(eligible):
            raise ValueError("Not enough cells outside the safe zone for the mines.")

        for r, c in random.sample(eligible, self.mines_count):
            self.values[r][c] = MINE

        for r in range(self.rows):
            for c in range(self.cols):
                if self.values[r][c] == MINE:
                    continue
                self.values[r][c] = sum(
                    1 for nr, nc in self.neighbors(r, c) if self.values[nr][nc] == MINE
                )

        self.first_move = False

    def flood_fill(self, r: int, c: int) -> List[Tuple[int, int, int]]:
        """
        Reveal the region opened by a click at (r, c).

        Blank cells open their neighbors; flagged cells are never opened.

        Returns:
            Newly revealed cells as (r, c, value).
        """
        queue: Deque[Tuple[int, int]] = deque([(r, c)])
        visited: Set[Tuple[int, int]] = {(r, c)}
        revealed_cells: List[Tuple[int, int, int]] = []

        while queue:
            cr, cc = queue.popleft()
            if self.revealed[cr][cc] or self.flagged[cr][cc]:
                continue

            self.revealed[cr][cc] = True
            self.unrevealed_safe_count -= 1
            revealed_cells.append((cr, cc, self.values[cr][cc]))

            if self.values[cr][cc] == 0:
                for nr, nc in self.neighbors(cr, cc):
                    if (nr, nc) in visited or self.revealed[nr][nc]:
                        continue
                    visited.add((nr, nc))
                    queue.append((nr, nc))

        return revealed_cells

    def reveal(self, r: int, c: int) -> Tuple[int, Dict[str, object]]:
        """
        Reveal a cell.

        Returns:
            Tuple of (status, payload) where status is -1 (mine hit), 0
            (game continues or no-op) or 1 (all safe cells revealed).
            Payload holds "revealed_cells" on 0/1 and "all_mines" on -1.

        Raises:
            ValueError: If coordinates are out of bounds.
        """
        self._check_bounds(r, c)

        if self.game_over or self.revealed[r][c] or self.flagged[r][c]:
            return 0, {}

        if self.first_move:
            self.place_mines(r, c)

        if self.values[r][c] == MINE:
            self.revealed[r][c] = True
            self.game_over = True
            all_mines: FrozenSet[Tuple[int, int]] = frozenset(
                (mr, mc)
                for mr in range(self.rows)
                for mc in range(self.cols)
                if self.values[mr][mc] == MINE
            )
            return -1, {"all_mines": all_mines}

        revealed_cells = self.flood_fill(r, c)

        if self.unrevealed_safe_count == 0:
            self.game_over = True
            return 1, {"revealed_cells": revealed_cells}

        return 0, {"revealed_cells": revealed_cells}

    def toggle_flag(self, r: int, c: int) -> bool:
        """
        Flag or unflag a hidden cell.

        Returns:
            The new flag state. Revealed cells cannot be flagged and return False.
        """
        self._check_bounds(r, c)
        if self.revealed[r][c]:
            return False
        self.flagged[r][c] = not self.flagged[r][c]
        return self.flagged[r][c]

    def to_board(self) -> Board:
        """Snapshot the visible position, with ground truth on hidden cells."""
        grid: List[List[Cell]] = []
        for r in range(self.rows):
            row: List[Cell] = []
            for c in range(self.cols):
                value = self.values[r][c]
                if self.flagged[r][c]:
                    row.append(Cell.flagged(value))
                elif self.revealed[r][c] and value != MINE:
                    row.append(Cell.revealed(value))
                else:
                    row.append(Cell.hidden(value, is_mine=value == MINE))
            grid.append(row)
        return Board(grid, self.mines_count)


def play_cli(game: Minesweeper) -> None:
    """
    Run a terminal session on a game with analysis on demand.

    Commands: "r c" reveals, "f r c" toggles a flag, "a" prints the analysis
    report for the current position, "q" quits. Coordinates are 0-based.

    Args:
        game: A Minesweeper instance to play.
    """
    from .analysis import format_report
    from .analyzer import analyze

    print("Minesweeper analyzer CLI. Commands: 'r c', 'f r c', 'a', 'q'.\n")
    print(game.to_board().format_grid())

    while True:
        s = input("\nCommand: ").strip()
        if s.lower() in {"q", "quit", "exit"}:
            print("Quit.")
            return

        if s.lower() == "a":
            board = game.to_board()
            print()
            print(format_report(board, analyze(board)))
            continue

        parts = s.replace(",", " ").split()
        flag = bool(parts) and parts[0].lower() == "f"
        if flag:
            parts = parts[1:]
        if len(parts) != 2:
            print("Invalid input. Examples: 3 5, f 3 5, a")
            continue

        try:
            r = int(parts[0])
            c = int(parts[1])
            if flag:
                game.toggle_flag(r, c)
                status = 0
            else:
                status, _ = game.reveal(r, c)
        except ValueError as exc:
            print(f"Invalid input: {exc}")
            continue

        print()
        print(game.to_board().format_grid())

        if status == -1:
            print("\nYou hit a mine. You lost.")
            print("\nFull board:")
            print(game.to_board().format_grid(show_mines=True))
            return

        if status == 1:
            print("\nYou revealed all safe cells. You won!")
            return
