"""Utility functions for the Minesweeper position analyzer."""

from typing import Dict, List, Tuple

# Module-level cache: (rows, cols) -> {(r,c): ((nr,nc), ...), ...}
_NEIGHBORHOODS_CACHE: Dict[
    Tuple[int, int],
    Dict[Tuple[int, int], Tuple[Tuple[int, int], ...]]
] = {}


def get_neighborhoods(
    rows: int, cols: int
) -> Dict[Tuple[int, int], Tuple[Tuple[int, int], ...]]:
    """
    Build the 8-neighborhood table of an R x C board, keyed by (row, col).

    The table depends only on the board size, so one copy is shared by every
    board of that size. Each neighbor tuple runs in row-major order, which is
    the order constraints collect their hidden cells in.

    Args:
        rows: Number of grid rows. Must be positive.
        cols: Number of grid columns. Must be positive.

    Returns:
        Mapping from each cell (r, c) to a tuple of valid neighboring
        coordinates (nr, nc) under 8-connectivity.

    Raises:
        ValueError: If rows or cols is non-positive.
    """
    if rows <= 0 or cols <= 0:
        raise ValueError("rows and cols must be positive.")

    key = (rows, cols)
    cached = _NEIGHBORHOODS_CACHE.get(key)
    if cached is not None:
        return cached

    neighborhoods: Dict[Tuple[int, int], Tuple[Tuple[int, int], ...]] = {}
    for r in range(rows):
        for c in range(cols):
            nbrs: List[Tuple[int, int]] = []
            for dr in (-1, 0, 1):
                for dc in (-1, 0, 1):
                    if dr == 0 and dc == 0:
                        continue
                    nr, nc = r + dr, c + dc
                    if 0 <= nr < rows and 0 <= nc < cols:
                        nbrs.append((nr, nc))
            neighborhoods[(r, c)] = tuple(nbrs)

    _NEIGHBORHOODS_CACHE[key] = neighborhoods
    return neighborhoods


def coord_label(r: int, c: int) -> str:
    """Return the "(r,c)" label used in constraint sources and reasons."""
    return f"({r},{c})"
