"""
Position analysis: certain deductions plus heuristic mine probabilities.

The pipeline is a pure function of one board snapshot:

1. Constraint extraction: one constraint per revealed number with hidden neighbors.
2. Deduction: satisfied/saturated rules, then pairwise subset reasoning.
3. Frontier partition: hidden cells next to a revealed number vs. the rest.
4. Probability estimation: averaged local constraint densities on the frontier,
   a uniform estimate for the interior.
5. Result assembly.

Deductions assume every flag is correct. A wrong flag can produce wrong
deductions; this module does not check for it. Each rule pass runs exactly once,
so conclusions that would only follow from other conclusions are not found.
"""

from collections import defaultdict
from typing import (
    DefaultDict,
    Dict,
    FrozenSet,
    List,
    NamedTuple,
    Sequence,
    Tuple,
)

from .board import FLAGGED, HIDDEN, REVEALED, Board
from .utils import coord_label

SAFE = "safe"
MINE = "mine"


class Constraint(NamedTuple):
    """Exactly `mines` of `cells` are mines, read off the revealed number at `src`."""

    cells: Tuple[Tuple[int, int], ...]
    mines: int
    src: str
    value: int


class Deduction:
    """A certain conclusion about one hidden cell with the evidence behind it."""

    def __init__(self, r: int, c: int, action: str, reasons: List[str]) -> None:
        self.r = r
        self.c = c
        self.action = action
        self.reasons = reasons
        # Set when a later rule argued the opposite action. Only possible on
        # an inconsistent board; the first action is kept.
        self.conflicting = False

    def __repr__(self) -> str:
        return (
            f"Deduction(r={self.r}, c={self.c}, action={self.action!r}, "
            f"reasons={self.reasons!r})"
        )


class HiddenCell(NamedTuple):
    r: int
    c: int
    probability: float
    is_frontier: bool


class AnalysisResult(NamedTuple):
    deductions: List[Deduction]
    all_hidden: List[HiddenCell]
    frontier: FrozenSet[Tuple[int, int]]
    interior: FrozenSet[Tuple[int, int]]
    mines_left: int
    interior_probability: float
    probability_map: Dict[Tuple[int, int], float]


# -----------------------------------------------------------------------------
# Constraint extraction
# -----------------------------------------------------------------------------


def extract_constraints(
    board: Board, include_blank: bool = False
) -> List[Constraint]:
    """
    Build one constraint per revealed number that still has hidden neighbors.

    Args:
        board: Position to read.
        include_blank: Also emit constraints for revealed zeros. A regular
            game opens every neighbor of a zero, so these only show up on
            hand-made or partially imported boards.

    Returns:
        Constraints in row-major order of their source cells. Each constraint
        lists its hidden cells in row-major order.
    """
    constraints: List[Constraint] = []
    min_value = 0 if include_blank else 1

    for r in range(board.rows):
        for c in range(board.cols):
            cell = board.grid[r][c]
            if cell.kind != REVEALED or cell.value < min_value:
                continue

            flags = 0
            hidden: List[Tuple[int, int]] = []
            for nr, nc in board.neighbors(r, c):
                kind = board.grid[nr][nc].kind
                if kind == FLAGGED:
                    flags += 1
                elif kind == HIDDEN:
                    hidden.append((nr, nc))

            if not hidden:
                continue

            constraints.append(
                Constraint(
                    cells=tuple(hidden),
                    mines=cell.value - flags,
                    src=coord_label(r, c),
                    value=cell.value,
                )
            )

    return constraints


# -----------------------------------------------------------------------------
# Deduction
# -----------------------------------------------------------------------------


def _record(
    deductions: Dict[Tuple[int, int], Deduction],
    cell: Tuple[int, int],
    action: str,
    reason: str,
) -> None:
    found = deductions.get(cell)
    if found is None:
        deductions[cell] = Deduction(cell[0], cell[1], action, [reason])
        return
    found.reasons.append(reason)
    if found.action != action:
        found.conflicting = True


def deduce(constraints: Sequence[Constraint]) -> List[Deduction]:
    """
    Apply the satisfied, saturated and subset rules once over the constraints.

    A constraint whose remaining mine count is negative (too many flags around
    it) matches neither immediate rule and yields nothing.

    Returns:
        Deductions in the order their cells were first concluded.
    """
    deductions: Dict[Tuple[int, int], Deduction] = {}

    for con in constraints:
        if con.mines == 0:
            reason = f"{con.src}={con.value} satisfied"
            for cell in con.cells:
                _record(deductions, cell, SAFE, reason)
        elif con.mines == len(con.cells):
            reason = f"{con.src}={con.value} all hidden are mines"
            for cell in con.cells:
                _record(deductions, cell, MINE, reason)

    cell_sets = [frozenset(con.cells) for con in constraints]

    for i, a in enumerate(constraints):
        a_set = cell_sets[i]
        for j, b in enumerate(constraints):
            if i == j:
                continue
            b_set = cell_sets[j]
            if len(a_set) >= len(b_set) or not a_set <= b_set:
                continue

            diff = [cell for cell in b.cells if cell not in a_set]
            delta_mines = b.mines - a.mines
            reason = f"Subset {a.src}⊂{b.src}"

            if delta_mines == 0:
                for cell in diff:
                    _record(deductions, cell, SAFE, reason)
            elif delta_mines == len(diff):
                for cell in diff:
                    _record(deductions, cell, MINE, reason)

    return list(deductions.values())


# -----------------------------------------------------------------------------
# Frontier partition
# -----------------------------------------------------------------------------


def partition_frontier(
    board: Board,
) -> Tuple[List[Tuple[int, int]], List[Tuple[int, int]]]:
    """
    Split hidden cells into frontier and interior.

    A hidden cell is on the frontier if any neighbor is a revealed number
    greater than zero.

    Returns:
        (frontier, interior), both in row-major order.
    """
    frontier: List[Tuple[int, int]] = []
    interior: List[Tuple[int, int]] = []

    for r, c in board.hidden_cells():
        on_frontier = any(
            board.grid[nr][nc].kind == REVEALED and board.grid[nr][nc].value > 0
            for nr, nc in board.neighbors(r, c)
        )
        if on_frontier:
            frontier.append((r, c))
        else:
            interior.append((r, c))

    return frontier, interior


# -----------------------------------------------------------------------------
# Probability estimation
# -----------------------------------------------------------------------------


def estimate_probabilities(
    board: Board,
    constraints: Sequence[Constraint],
    frontier: Sequence[Tuple[int, int]],
    interior: Sequence[Tuple[int, int]],
) -> Tuple[Dict[Tuple[int, int], float], int, float]:
    """
    Estimate the mine probability of every hidden cell.

    Frontier cells get the average local density (mines / cells) of the
    constraints they belong to. Interior cells share whatever mines the
    frontier is not expected to hold.

    This is an averaged local-density heuristic, not the exact probability over
    all consistent mine placements. It ignores how overlapping constraints
    interact. Its job is to rank cells cheaply.

    Returns:
        Tuple of (probability_map, mines_left, interior_probability).
        interior_probability is 1.0 when there are no interior cells.
    """
    mines_left = board.mines_count - board.flags_count
    hidden_total = len(frontier) + len(interior)

    pressure: DefaultDict[Tuple[int, int], float] = defaultdict(float)
    touches: DefaultDict[Tuple[int, int], int] = defaultdict(int)

    for con in constraints:
        if not con.cells:
            continue
        density = con.mines / len(con.cells)
        for cell in con.cells:
            pressure[cell] += density
            touches[cell] += 1

    probability_map: Dict[Tuple[int, int], float] = {}
    for cell in frontier:
        if touches[cell]:
            p = pressure[cell] / touches[cell]
        else:
            p = mines_left / hidden_total
        # Over-flagged numbers give negative densities.
        probability_map[cell] = min(1.0, max(0.0, p))

    frontier_expected_mines = sum(probability_map[cell] for cell in frontier)

    if interior:
        interior_mines = max(0.0, mines_left - frontier_expected_mines)
        interior_probability = min(1.0, interior_mines / len(interior))
    else:
        interior_probability = 1.0

    for cell in interior:
        probability_map[cell] = interior_probability

    return probability_map, mines_left, interior_probability


# -----------------------------------------------------------------------------
# Result assembly
# -----------------------------------------------------------------------------


def analyze(board: Board) -> AnalysisResult:
    """
    Analyze a board snapshot.

    Args:
        board: Position to analyze. Not modified.

    Returns:
        AnalysisResult with every deduction, all hidden cells ranked from
        safest to riskiest (ties keep frontier-then-interior row-major order),
        the frontier/interior partition, the remaining mine count, the uniform
        interior probability and a probability for every hidden cell.
    """
    # Zeros with hidden neighbors still prove those neighbors safe, but they
    # do not count as frontier evidence for the probability estimate.
    all_constraints = extract_constraints(board, include_blank=True)
    deductions = deduce(all_constraints)
    constraints = [con for con in all_constraints if con.value > 0]
    frontier, interior = partition_frontier(board)
    probability_map, mines_left, interior_probability = estimate_probabilities(
        board, constraints, frontier, interior
    )

    frontier_set = frozenset(frontier)
    all_hidden = sorted(
        (
            HiddenCell(r, c, probability_map[(r, c)], (r, c) in frontier_set)
            for r, c in frontier + interior
        ),
        key=lambda h: h.probability,
    )

    return AnalysisResult(
        deductions=deductions,
        all_hidden=all_hidden,
        frontier=frontier_set,
        interior=frozenset(interior),
        mines_left=mines_left,
        interior_probability=interior_probability,
        probability_map=probability_map,
    )
