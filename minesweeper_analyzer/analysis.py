"""Reporting and benchmarking tools for the position analyzer."""

from collections import defaultdict
from typing import Dict, List, NamedTuple, Optional, Sequence, Tuple

import matplotlib.pyplot as plt
import numpy as np

from .analyzer import MINE, SAFE, AnalysisResult, HiddenCell, analyze
from .board import FLAGGED, REVEALED, Board
from .engine import Minesweeper

LEVELS: Dict[str, Tuple[int, int, int]] = {
    "beginner": (9, 9, 10),
    "intermediate": (16, 16, 40),
    "expert": (16, 30, 99),
}


# -----------------------------------------------------------------------------
# Reporting
# -----------------------------------------------------------------------------


def format_analysis(
    board: Board, result: AnalysisResult, *, show_coords: bool = True
) -> str:
    """
    Format a board with its deductions as a human-readable grid.

    Revealed numbers are shown as digits, flags as 'F', cells deduced safe as
    'S', cells deduced to be mines as 'X' and any other hidden cell as '.'.
    """
    marks = {(d.r, d.c): ("S" if d.action == SAFE else "X") for d in result.deductions}

    def cell_char(r: int, c: int) -> str:
        cell = board.grid[r][c]
        if cell.kind == REVEALED:
            return str(cell.value)
        if cell.kind == FLAGGED:
            return "F"
        return marks.get((r, c), ".")

    lines: List[str] = []
    if show_coords:
        header = " ".join(f"{c:2d}" for c in range(board.cols))
        lines.append("   " + header)
        lines.append("   " + "-" * (3 * board.cols - 1))

    for r in range(board.rows):
        row = " ".join(f" {cell_char(r, c)}" for c in range(board.cols))
        lines.append(f"{r:2d} |" + row if show_coords else row)

    return "\n".join(lines)


def best_guesses(result: AnalysisResult, limit: int = 8) -> List[HiddenCell]:
    """Return the lowest-risk hidden cells that have no certain deduction."""
    deduced = {(d.r, d.c) for d in result.deductions}
    return [h for h in result.all_hidden if (h.r, h.c) not in deduced][:limit]


class MoveRecommendation(NamedTuple):
    pick: HiddenCell
    best_frontier: Optional[HiddenCell]
    worst_frontier: Optional[HiddenCell]
    steps: List[str]


def recommend_move(result: AnalysisResult) -> Optional[MoveRecommendation]:
    """
    Pick the next cell to click when no certain move is left to make.

    The pick is the lowest-risk cell without a deduction. The steps explain it:
    global density, the frontier/interior split, the interior estimate, the
    best and worst undecided frontier cells, and which side wins.

    Returns:
        MoveRecommendation, or None if every hidden cell carries a deduction.
    """
    guesses = best_guesses(result, 1)
    if not guesses:
        return None
    pick = guesses[0]

    deduced = {(d.r, d.c) for d in result.deductions}
    open_frontier = [
        h for h in result.all_hidden if h.is_frontier and (h.r, h.c) not in deduced
    ]
    best_frontier = min(open_frontier, key=lambda h: h.probability, default=None)
    worst_frontier = max(open_frontier, key=lambda h: h.probability, default=None)

    mines_left = result.mines_left
    frontier_count = len(result.frontier)
    interior_count = len(result.interior)
    hidden_count = frontier_count + interior_count
    interior_p = result.interior_probability

    steps = [
        f"Step 1 - Count: {mines_left} mines left among {hidden_count} hidden cells "
        f"= {mines_left / hidden_count * 100:.1f}% global average.",
        f"Step 2 - Split frontier vs interior: {frontier_count} frontier cells "
        f"(touching numbers) vs {interior_count} interior cells (isolated).",
    ]

    interior_step = f"Step 3 - Evaluate interior: mine probability {interior_p * 100:.1f}%."
    if interior_count:
        interior_mines = interior_p * interior_count
        interior_step += (
            f" That's {mines_left} mines minus ~{round(mines_left - interior_mines)} "
            f"expected frontier mines = ~{round(interior_mines)} mines spread over "
            f"{interior_count} interior cells."
        )
    steps.append(interior_step)

    if best_frontier is None:
        steps.append("Step 4 - Check frontier hotspots: every frontier cell is decided.")
    else:
        steps.append(
            f"Step 4 - Check frontier hotspots: best frontier cell is "
            f"R{best_frontier.r} C{best_frontier.c} at "
            f"{best_frontier.probability * 100:.1f}%, worst is "
            f"R{worst_frontier.r} C{worst_frontier.c} at "
            f"{worst_frontier.probability * 100:.1f}%."
        )

    if pick.is_frontier:
        steps.append(
            f"Step 5 - Pick: the best frontier cell ({pick.probability * 100:.1f}%) "
            f"beats interior ({interior_p * 100:.1f}%), so click on the frontier. "
            "Frontier clicks reveal numbers that may unlock more deductions."
        )
    else:
        frontier_text = (
            f"{best_frontier.probability * 100:.1f}%" if best_frontier else "none left"
        )
        steps.append(
            f"Step 5 - Pick: interior ({interior_p * 100:.1f}%) beats the best "
            f"frontier cell ({frontier_text}), so click deep in the interior. "
            "Interior clicks often open large areas."
        )

    return MoveRecommendation(pick, best_frontier, worst_frontier, steps)


def summarize_analysis(board: Board, result: AnalysisResult) -> Dict[str, float]:
    """
    Collect the headline statistics of one analysis.

    Returns:
        Dict with total_mines, flagged, mines_left, hidden_count,
        frontier_count, interior_count, global_density, interior_density,
        deductions_count, safe_deductions and mine_deductions.
    """
    hidden_count = len(result.frontier) + len(result.interior)
    safe_count = sum(1 for d in result.deductions if d.action == SAFE)
    mine_count = sum(1 for d in result.deductions if d.action == MINE)

    return {
        "total_mines": board.mines_count,
        "flagged": board.mines_count - result.mines_left,
        "mines_left": result.mines_left,
        "hidden_count": hidden_count,
        "frontier_count": len(result.frontier),
        "interior_count": len(result.interior),
        "global_density": (result.mines_left / hidden_count) if hidden_count else 0.0,
        "interior_density": result.interior_probability,
        "deductions_count": len(result.deductions),
        "safe_deductions": safe_count,
        "mine_deductions": mine_count,
    }


def format_report(board: Board, result: AnalysisResult, *, limit: int = 8) -> str:
    """Render statistics, deductions and best guesses as plain text."""
    stats = summarize_analysis(board, result)
    lines = [
        f"Mines remaining: {stats['mines_left']} | "
        f"Hidden cells: {stats['hidden_count']} | "
        f"Frontier: {stats['frontier_count']} | "
        f"Interior: {stats['interior_count']}",
        f"Global mine density in hidden: {stats['global_density'] * 100:.1f}%",
        f"Interior mine density (estimated): {stats['interior_density'] * 100:.1f}%",
        "",
        f"Deductions: {stats['safe_deductions']} safe + {stats['mine_deductions']} mines",
    ]

    if not result.deductions:
        lines.append("  No logical deductions available, must guess.")
    for d in result.deductions:
        lines.append(f"  R{d.r} C{d.c} -> {d.action.upper()}: {d.reasons[0]}")

    move = recommend_move(result)
    if move is not None:
        pick = move.pick
        where = "frontier" if pick.is_frontier else "interior"
        lines.append("")
        lines.append(
            f"Recommended move: R{pick.r} C{pick.c} - "
            f"{pick.probability * 100:.1f}% mine chance ({where})"
        )
        lines.extend(f"  {step}" for step in move.steps)

    lines.append("")
    lines.append("Best guesses:")
    for h in best_guesses(result, limit):
        where = "frontier" if h.is_frontier else "interior"
        lines.append(f"  R{h.r} C{h.c}: {h.probability * 100:.1f}% ({where})")

    return "\n".join(lines)


# -----------------------------------------------------------------------------
# Benchmarking
# -----------------------------------------------------------------------------


def generate_position(
    rows: int,
    cols: int,
    mines_count: int,
    mines_generation_algorithm: str,
    *,
    max_rounds: int = 50,
) -> Tuple[Minesweeper, Board]:
    """
    Play a fresh game up to the point where the analyzer has nothing certain left.

    The game opens with a first click (center cell for
    "safe_neighborhood_rule", top-left otherwise), then repeatedly reveals every
    cell deduced safe and flags every cell deduced to be a mine.

    Args:
        rows: Board rows.
        cols: Board columns.
        mines_count: Total number of mines.
        mines_generation_algorithm: Mine placement rule passed to Minesweeper.
        max_rounds: Maximum number of analyze-and-apply rounds.

    Returns:
        The game and a snapshot of its final position.
    """
    game = Minesweeper(rows, cols, mines_count, mines_generation_algorithm)
    if mines_generation_algorithm == "safe_first_action_rule":
        game.reveal(0, 0)
    else:
        game.reveal(rows // 2, cols // 2)

    for _ in range(max_rounds):
        if game.game_over:
            break
        result = analyze(game.to_board())
        if not result.deductions:
            break

        for d in result.deductions:
            if d.conflicting:
                continue
            if d.action == MINE:
                if not game.flagged[d.r][d.c]:
                    game.toggle_flag(d.r, d.c)
            else:
                status, _ = game.reveal(d.r, d.c)
                if status != 0:
                    break

    return game, game.to_board()


def run_position_single_test(
    rows: int,
    cols: int,
    mines_count: int,
    mines_generation_algorithm: str,
    *,
    max_rounds: int = 50,
    show_boards: bool = False,
    samples: Optional[List[Tuple[float, bool]]] = None,
) -> Dict[str, float]:
    """
    Generate one position and score the analysis of it against ground truth.

    Args:
        rows: Board rows.
        cols: Board columns.
        mines_count: Total number of mines.
        mines_generation_algorithm: Mine placement rule passed to Minesweeper.
        max_rounds: Rounds of deduction applied before the position is scored.
        show_boards: If True, print the position, the ground truth and the report.
        samples: If given, extended with (probability, is_mine) for every hidden
            cell without a deduction.

    Returns:
        Dict with hidden_count, frontier_count, interior_count, deductions_count,
        wrong_deductions, brier_score, best_guess_available and
        best_guess_hit_mine.
    """
    _, board = generate_position(
        rows,
        cols,
        mines_count,
        mines_generation_algorithm,
        max_rounds=max_rounds,
    )
    result = analyze(board)

    wrong = 0
    for d in result.deductions:
        if board.grid[d.r][d.c].is_mine != (d.action == MINE):
            wrong += 1

    deduced = {(d.r, d.c) for d in result.deductions}
    errors: List[float] = []
    for h in result.all_hidden:
        if (h.r, h.c) in deduced:
            continue
        is_mine = board.grid[h.r][h.c].is_mine
        errors.append((h.probability - float(is_mine)) ** 2)
        if samples is not None:
            samples.append((h.probability, is_mine))

    guesses = best_guesses(result, 1)

    if show_boards:
        print("Position (mines visible):")
        print(board.format_grid(show_mines=True))
        print()
        print("Analysis:")
        print(format_analysis(board, result))
        print()
        print(format_report(board, result))

    return {
        "hidden_count": float(len(result.all_hidden)),
        "frontier_count": float(len(result.frontier)),
        "interior_count": float(len(result.interior)),
        "deductions_count": float(len(result.deductions)),
        "wrong_deductions": float(wrong),
        "brier_score": float(np.mean(errors)) if errors else 0.0,
        "best_guess_available": 1.0 if guesses else 0.0,
        "best_guess_hit_mine": (
            1.0 if guesses and board.grid[guesses[0].r][guesses[0].c].is_mine else 0.0
        ),
    }


def run_position_many_tests(
    rows: int,
    cols: int,
    mines_count: int,
    runs: int,
    mines_generation_algorithm: str,
    *,
    max_rounds: int = 50,
    samples: Optional[List[Tuple[float, bool]]] = None,
) -> Dict[str, float]:
    """
    Score many independent positions and average the metrics.

    Returns:
        Averages of run_position_single_test metrics (prefixed with "avg_"),
        plus deduction_accuracy and best_guess_failure_rate over all runs.
    """
    if runs <= 0:
        raise ValueError("runs must be positive.")

    sums: Dict[str, float] = defaultdict(float)
    for _ in range(runs):
        metrics = run_position_single_test(
            rows,
            cols,
            mines_count,
            mines_generation_algorithm,
            max_rounds=max_rounds,
            samples=samples,
        )
        for k, v in metrics.items():
            sums[k] += v

    out: Dict[str, float] = {f"avg_{k}": total / runs for k, total in sums.items()}

    total_deductions = sums["deductions_count"]
    out["deduction_accuracy"] = (
        1.0 - sums["wrong_deductions"] / total_deductions if total_deductions > 0 else 1.0
    )
    total_guesses = sums["best_guess_available"]
    out["best_guess_failure_rate"] = (
        sums["best_guess_hit_mine"] / total_guesses if total_guesses > 0 else 0.0
    )
    return out


def calibration_table(
    probabilities: Sequence[float], outcomes: Sequence[bool], bins: int = 10
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Bucket predicted probabilities and compare them with observed mine rates.

    Args:
        probabilities: Predicted mine probabilities in [0, 1].
        outcomes: Whether each cell actually held a mine.
        bins: Number of equal-width buckets over [0, 1].

    Returns:
        Tuple of (mean_predicted, observed_rate, counts), one entry per bucket.
        Empty buckets hold NaN in the first two arrays.
    """
    if bins <= 0:
        raise ValueError("bins must be positive.")
    p = np.asarray(probabilities, dtype=float)
    y = np.asarray(outcomes, dtype=float)
    if p.shape != y.shape:
        raise ValueError("probabilities and outcomes must have the same length.")

    edges = np.linspace(0.0, 1.0, bins + 1)
    idx = np.clip(np.digitize(p, edges[1:-1]), 0, bins - 1)

    counts = np.bincount(idx, minlength=bins).astype(float)
    pred_sums = np.bincount(idx, weights=p, minlength=bins)
    obs_sums = np.bincount(idx, weights=y, minlength=bins)

    mean_predicted = np.full(bins, np.nan)
    observed_rate = np.full(bins, np.nan)
    np.divide(pred_sums, counts, out=mean_predicted, where=counts > 0)
    np.divide(obs_sums, counts, out=observed_rate, where=counts > 0)
    return mean_predicted, observed_rate, counts


def run_expert_level_analysis(
    runs: int,
    mines_generation_algorithm: str,
    *,
    max_rounds: int = 50,
    bins: int = 10,
) -> Dict[str, Dict[str, float]]:
    """
    Benchmark the analyzer on the standard difficulty levels and plot summaries.

    Standard difficulty levels:
        - Beginner: 9x9, 10 mines
        - Intermediate: 16x16, 40 mines
        - Expert: 16x30, 99 mines

    Returns:
        Mapping from level name to the dict returned by run_position_many_tests().
    """
    results: Dict[str, Dict[str, float]] = {}
    samples: Dict[str, List[Tuple[float, bool]]] = {}
    for level, (r, c, m) in LEVELS.items():
        samples[level] = []
        results[level] = run_position_many_tests(
            r,
            c,
            m,
            runs,
            mines_generation_algorithm,
            max_rounds=max_rounds,
            samples=samples[level],
        )

    level_names = list(LEVELS.keys())
    x = np.arange(len(level_names))

    # 1) Deductions and hidden cells per position
    bar_w = 0.35
    deductions = [results[n]["avg_deductions_count"] for n in level_names]
    frontier = [results[n]["avg_frontier_count"] for n in level_names]

    plt.figure()  # type: ignore[misc]
    plt.bar(x - bar_w / 2, deductions, width=bar_w, label="deductions")  # type: ignore[misc]
    plt.bar(x + bar_w / 2, frontier, width=bar_w, label="frontier cells")  # type: ignore[misc]
    plt.xticks(x, level_names)  # type: ignore[misc]
    plt.ylabel("Average count per position")  # type: ignore[misc]
    plt.title("Deductions and frontier size (per position)")  # type: ignore[misc]
    plt.legend()  # type: ignore[misc]
    plt.tight_layout()
    plt.show()  # type: ignore[misc]

    # 2) Brier score and best-guess failure rate
    brier = [results[n]["avg_brier_score"] for n in level_names]
    failure = [results[n]["best_guess_failure_rate"] for n in level_names]

    plt.figure()  # type: ignore[misc]
    plt.bar(x - bar_w / 2, brier, width=bar_w, label="brier score")  # type: ignore[misc]
    plt.bar(x + bar_w / 2, failure, width=bar_w, label="best guess failure")  # type: ignore[misc]
    plt.xticks(x, level_names)  # type: ignore[misc]
    plt.ylim(0.0, 1.0)  # type: ignore[misc]
    plt.title("Probability quality by difficulty level")  # type: ignore[misc]
    plt.legend()  # type: ignore[misc]
    plt.tight_layout()
    plt.show()  # type: ignore[misc]

    # 3) Calibration curves
    plt.figure()  # type: ignore[misc]
    plt.plot([0.0, 1.0], [0.0, 1.0], linestyle="--", color="gray", label="ideal")  # type: ignore[misc]
    for level in level_names:
        if not samples[level]:
            continue
        probs, outcomes = zip(*samples[level])
        predicted, observed, _ = calibration_table(probs, outcomes, bins)
        mask = ~np.isnan(predicted)
        plt.plot(predicted[mask], observed[mask], marker="o", label=level)  # type: ignore[misc]
    plt.xlabel("Estimated mine probability")  # type: ignore[misc]
    plt.ylabel("Observed mine rate")  # type: ignore[misc]
    plt.title("Calibration of local-density estimates")  # type: ignore[misc]
    plt.legend()  # type: ignore[misc]
    plt.tight_layout()
    plt.show()  # type: ignore[misc]

    return results
