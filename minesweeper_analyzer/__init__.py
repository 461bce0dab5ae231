"""
Minesweeper Position Analyzer

Inspects a partially revealed Minesweeper board and reports:
- Certain deductions: satisfied, saturated and subset constraint rules
- Mine probabilities: averaged local constraint densities on the frontier,
  a uniform estimate for interior cells
"""

from .analysis import (
    MoveRecommendation,
    best_guesses,
    calibration_table,
    format_analysis,
    format_report,
    generate_position,
    recommend_move,
    run_expert_level_analysis,
    run_position_many_tests,
    run_position_single_test,
    summarize_analysis,
)
from .analyzer import (
    MINE,
    SAFE,
    AnalysisResult,
    Constraint,
    Deduction,
    HiddenCell,
    analyze,
    deduce,
    estimate_probabilities,
    extract_constraints,
    partition_frontier,
)
from .board import FLAGGED, HIDDEN, REVEALED, Board, Cell
from .codec import BoardDecodeError, decode_board, encode_board
from .engine import Minesweeper, play_cli

__version__ = "1.0.0"

__all__ = [
    # Board model
    "Board",
    "Cell",
    "REVEALED",
    "HIDDEN",
    "FLAGGED",
    # Analysis core
    "analyze",
    "extract_constraints",
    "deduce",
    "partition_frontier",
    "estimate_probabilities",
    "AnalysisResult",
    "Constraint",
    "Deduction",
    "HiddenCell",
    "SAFE",
    "MINE",
    # Export codec
    "decode_board",
    "encode_board",
    "BoardDecodeError",
    # Game engine and CLI
    "Minesweeper",
    "play_cli",
    # Reporting and benchmarking
    "format_analysis",
    "format_report",
    "best_guesses",
    "recommend_move",
    "MoveRecommendation",
    "summarize_analysis",
    "generate_position",
    "run_position_single_test",
    "run_position_many_tests",
    "calibration_table",
    "run_expert_level_analysis",
]
