"""
Quickstart example for the Minesweeper Position Analyzer.

This script demonstrates basic usage of the analyzer.
"""

import random

from minesweeper_analyzer import (
    Board,
    analyze,
    decode_board,
    encode_board,
    format_analysis,
    format_report,
    generate_position,
    run_position_many_tests,
)


def main():
    print("=" * 60)
    print("Minesweeper Position Analyzer - Quickstart Example")
    print("=" * 60)

    # Example 1: Analyze a hand-written position
    print("\n1. Analyzing a small hand-written position...")
    print("-" * 60)

    board = Board.from_rows([
        "1 1 1 0 0",
        ". * 1 0 0",
        ". . 3 1 1",
        ". * . * .",
    ])
    result = analyze(board)
    print(format_analysis(board, result))
    print()
    print(format_report(board, result))

    # Example 2: Round-trip through the export format
    print("\n2. Export string for the same position:")
    print("-" * 60)
    export = encode_board(board)
    print(export)
    assert decode_board(export) == board

    # Example 3: Analyze a generated Expert position
    print("\n3. Generated Expert position (16x30, 99 mines)...")
    print("-" * 60)
    random.seed(7)
    _, expert = generate_position(16, 30, 99, "safe_neighborhood_rule", max_rounds=5)
    expert_result = analyze(expert)
    print(format_analysis(expert, expert_result))
    print()
    print(format_report(expert, expert_result, limit=5))

    # Example 4: Benchmark against ground truth
    print("\n4. Scoring 20 Intermediate positions against ground truth...")
    print("-" * 60)
    stats = run_position_many_tests(16, 16, 40, 20, "safe_neighborhood_rule")
    print(f"Deduction accuracy: {stats['deduction_accuracy'] * 100:.1f}%")
    print(f"Average deductions per position: {stats['avg_deductions_count']:.1f}")
    print(f"Average Brier score: {stats['avg_brier_score']:.3f}")
    print(f"Best guess failure rate: {stats['best_guess_failure_rate'] * 100:.1f}%")

    print("\n" + "=" * 60)
    print("Done! Run 'streamlit run app/demo.py' for the interactive viewer.")
    print("=" * 60)


if __name__ == "__main__":
    main()
