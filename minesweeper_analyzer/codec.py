"""Decode and encode the base64 board export used by the position viewer."""

import base64
import binascii
import json
from typing import Any, Dict, List, Union

from .board import FLAGGED, REVEALED, Board, Cell

RawCell = Union[int, List[int]]


class BoardDecodeError(ValueError):
    """Raised when a board export cannot be turned into a Board."""


def _parse_cell(raw: Any) -> Cell:
    """
    Convert one grid entry of the export into a Cell.

    A bare int is a hidden cell (negative means mine). A list is
    [value, revealed, flagged, ...].
    """
    if isinstance(raw, list):
        if len(raw) < 3:
            raise BoardDecodeError(f"Cell entry too short: {raw!r}")
        value, revealed, flagged = int(raw[0]), raw[1], raw[2]
        if flagged == 1:
            return Cell.flagged(value)
        if revealed == 1:
            return Cell.revealed(value)
        return Cell.hidden(value, is_mine=value < 0)
    if isinstance(raw, bool) or not isinstance(raw, int):
        raise BoardDecodeError(f"Unexpected cell entry: {raw!r}")
    return Cell.hidden(raw, is_mine=raw < 0)


def decode_board(text: str) -> Board:
    """
    Decode a base64 JSON board export.

    The grid is padded: board row r is gridObj[r + 1][1 : numCols + 1].

    Args:
        text: The export string. Surrounding whitespace is ignored.

    Returns:
        The decoded Board.

    Raises:
        BoardDecodeError: If the text is not valid base64, not JSON, or does
            not describe a well-formed board.
    """
    try:
        payload = json.loads(base64.b64decode(text.strip(), validate=True))
    except (binascii.Error, UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise BoardDecodeError(f"Not a board export: {exc}") from exc

    if not isinstance(payload, dict):
        raise BoardDecodeError("Board export must be a JSON object.")

    try:
        rows = int(payload["numRows"])
        cols = int(payload["numCols"])
        mines_count = int(payload["numMines"])
        grid_obj = payload["gridObj"]

        grid: List[List[Cell]] = []
        for r in range(rows):
            raw_row = grid_obj[r + 1][1 : cols + 1]
            if len(raw_row) != cols:
                raise BoardDecodeError(f"Row {r} has {len(raw_row)} cells, expected {cols}.")
            grid.append([_parse_cell(raw) for raw in raw_row])

        return Board(grid, mines_count)
    except BoardDecodeError:
        raise
    except (KeyError, IndexError, TypeError, ValueError) as exc:
        raise BoardDecodeError(f"Malformed board export: {exc}") from exc


def _encode_cell(cell: Cell) -> RawCell:
    if cell.kind == REVEALED:
        return [cell.value, 1, 0, 0]
    if cell.kind == FLAGGED:
        return [cell.value, 0, 1, 0]
    if cell.is_mine:
        return cell.value if cell.value < 0 else -1
    return cell.value


def encode_board(board: Board, *, elapsed: int = 0) -> str:
    """
    Encode a Board in the export format read by decode_board.

    Args:
        board: Board to encode.
        elapsed: Value written to the "time" field.

    Returns:
        The base64 export string.
    """
    padding_row: List[RawCell] = [0] * (board.cols + 1)
    grid_obj: List[List[RawCell]] = [padding_row]
    for row in board.grid:
        grid_obj.append([0] + [_encode_cell(cell) for cell in row])

    payload: Dict[str, Any] = {
        "version": 1,
        "gameTypeId": 0,
        "numRows": board.rows,
        "numCols": board.cols,
        "numMines": board.mines_count,
        "gridObj": grid_obj,
        "time": elapsed,
    }
    raw = json.dumps(payload, separators=(",", ":")).encode("utf-8")
    return base64.b64encode(raw).decode("ascii")
