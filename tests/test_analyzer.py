import random

import pytest

from minesweeper_analyzer import (
    MINE,
    SAFE,
    Board,
    Constraint,
    analyze,
    deduce,
    estimate_probabilities,
    extract_constraints,
    generate_position,
    partition_frontier,
)


def _by_cell(result):
    return {(d.r, d.c): d for d in result.deductions}


# -----------------------------------------------------------------------------
# Constraint extraction
# -----------------------------------------------------------------------------


def test_extract_constraints_collects_hidden_neighbors_in_row_major_order():
    board = Board.from_rows(["* . .", "1 1 ."])

    constraints = extract_constraints(board)

    assert constraints == [
        Constraint(cells=((0, 0), (0, 1)), mines=1, src="(1,0)", value=1),
        Constraint(cells=((0, 0), (0, 1), (0, 2), (1, 2)), mines=1, src="(1,1)", value=1),
    ]


def test_extract_constraints_subtracts_flags_and_skips_resolved_numbers():
    board = Board.from_rows(["F 1 .", "1 1 ."])

    constraints = extract_constraints(board)

    # (1,0) only touches the flag and revealed cells, so it yields nothing.
    assert [con.src for con in constraints] == ["(0,1)", "(1,1)"]
    assert all(con.mines == 0 for con in constraints)


def test_extract_constraints_ignores_zeros_unless_asked():
    board = Board.from_rows([". 0 ."], mines_count=0)

    assert extract_constraints(board) == []
    blank = extract_constraints(board, include_blank=True)
    assert blank == [Constraint(cells=((0, 0), (0, 2)), mines=0, src="(0,1)", value=0)]


# -----------------------------------------------------------------------------
# Deduction rules
# -----------------------------------------------------------------------------


def test_single_hidden_neighbor_of_a_one_is_a_mine():
    result = analyze(Board.from_rows(["1 *"]))

    assert len(result.deductions) == 1
    d = result.deductions[0]
    assert (d.r, d.c, d.action) == (0, 1, MINE)
    assert d.reasons == ["(0,0)=1 all hidden are mines"]


def test_zero_with_hidden_neighbors_marks_them_safe():
    result = analyze(Board.from_rows([". 0 ."], mines_count=0))

    deductions = _by_cell(result)
    assert set(deductions) == {(0, 0), (0, 2)}
    for d in deductions.values():
        assert d.action == SAFE
        assert d.reasons == ["(0,1)=0 satisfied"]


def test_satisfied_number_marks_remaining_neighbors_safe():
    result = analyze(Board.from_rows(["F 1 .", ". . ."]))

    deductions = _by_cell(result)
    assert set(deductions) == {(0, 2), (1, 0), (1, 1), (1, 2)}
    assert all(d.action == SAFE for d in deductions.values())
    assert deductions[(0, 2)].reasons == ["(0,1)=1 satisfied"]


def test_reasons_accumulate_for_the_same_cell():
    result = analyze(Board.from_rows(["2 *", "* 2"]))

    deductions = _by_cell(result)
    assert deductions[(0, 1)].action == MINE
    assert deductions[(0, 1)].reasons == [
        "(0,0)=2 all hidden are mines",
        "(1,1)=2 all hidden are mines",
    ]
    assert not deductions[(0, 1)].conflicting


def test_subset_rule_with_equal_mines_marks_difference_safe():
    constraints = [
        Constraint(cells=((0, 0), (0, 1)), mines=1, src="(1,0)", value=1),
        Constraint(cells=((0, 0), (0, 1), (0, 2)), mines=1, src="(1,1)", value=1),
    ]

    deductions = deduce(constraints)

    assert len(deductions) == 1
    d = deductions[0]
    assert (d.r, d.c, d.action) == (0, 2, SAFE)
    assert d.reasons == ["Subset (1,0)⊂(1,1)"]


def test_subset_rule_on_board():
    result = analyze(Board.from_rows(["* . .", "1 1 ."]))

    assert [(d.r, d.c, d.action) for d in result.deductions] == [
        (0, 2, SAFE),
        (1, 2, SAFE),
    ]
    assert result.deductions[0].reasons == ["Subset (1,0)⊂(1,1)"]


def test_subset_rule_with_full_difference_marks_mines_and_runs_once():
    result = analyze(Board.from_rows(["* . *", "1 2 1"]))

    assert [(d.r, d.c, d.action) for d in result.deductions] == [
        (0, 2, MINE),
        (0, 0, MINE),
    ]
    assert result.deductions[0].reasons == ["Subset (1,0)⊂(1,1)"]
    assert result.deductions[1].reasons == ["Subset (1,2)⊂(1,1)"]
    # (0,1) follows only from the two new mines; a single pass does not see it.
    assert (0, 1) not in _by_cell(result)


def test_equal_cell_sets_are_not_a_strict_subset():
    constraints = [
        Constraint(cells=((0, 0), (0, 1)), mines=1, src="(1,0)", value=1),
        Constraint(cells=((0, 0), (0, 1)), mines=1, src="(1,1)", value=1),
    ]

    assert deduce(constraints) == []


def test_subset_rule_without_conclusion():
    constraints = [
        Constraint(cells=((0, 0),), mines=0, src="(1,0)", value=1),
        Constraint(cells=((0, 0), (0, 1), (0, 2)), mines=1, src="(1,1)", value=1),
    ]

    deductions = deduce(constraints)

    # Only the immediate rule on the first constraint fires.
    assert [(d.r, d.c, d.action) for d in deductions] == [(0, 0, SAFE)]


def test_overflagged_number_yields_no_deduction():
    board = Board.from_rows(["F F", "1 ."])

    result = analyze(board)

    assert result.deductions == []
    assert result.probability_map[(1, 1)] == 0.0


def test_first_action_wins_and_conflict_is_flagged():
    board = Board.from_rows(["1 . 0"], mines_count=1)

    result = analyze(board)

    assert len(result.deductions) == 1
    d = result.deductions[0]
    assert d.action == MINE
    assert d.conflicting
    assert d.reasons == ["(0,0)=1 all hidden are mines", "(0,2)=0 satisfied"]


# -----------------------------------------------------------------------------
# Frontier partition
# -----------------------------------------------------------------------------


def test_partition_frontier_splits_hidden_cells():
    board = Board.from_rows(["F 1 . .", ". . . ."])

    frontier, interior = partition_frontier(board)

    assert frontier == [(0, 2), (1, 0), (1, 1), (1, 2)]
    assert interior == [(0, 3), (1, 3)]


def test_zero_does_not_put_cells_on_the_frontier():
    frontier, interior = partition_frontier(Board.from_rows([". 0 ."], mines_count=0))

    assert frontier == []
    assert interior == [(0, 0), (0, 2)]


@pytest.mark.parametrize("seed", [1, 2, 3, 4, 5])
def test_partition_is_complete_and_disjoint(seed):
    random.seed(seed)
    _, board = generate_position(9, 9, 10, "safe_neighborhood_rule", max_rounds=2)

    result = analyze(board)

    assert result.frontier | result.interior == set(board.hidden_cells())
    assert not result.frontier & result.interior


# -----------------------------------------------------------------------------
# Probability estimation
# -----------------------------------------------------------------------------


def test_frontier_probability_averages_local_densities():
    board = Board.from_rows(["* . *", "1 2 1"])

    result = analyze(board)

    assert result.probability_map[(0, 0)] == pytest.approx(7 / 12)
    assert result.probability_map[(0, 1)] == pytest.approx(5 / 9)
    assert result.probability_map[(0, 2)] == pytest.approx(7 / 12)
    assert result.mines_left == 2


def test_interior_probability_shares_leftover_mines():
    board = Board.from_rows(["1 * . ."], mines_count=2)

    result = analyze(board)

    assert result.probability_map == {
        (0, 1): pytest.approx(1.0),
        (0, 2): pytest.approx(0.5),
        (0, 3): pytest.approx(0.5),
    }
    assert result.interior_probability == pytest.approx(0.5)


def test_no_mines_left_means_zero_everywhere():
    board = Board.from_rows(["F 1 . .", ". . . ."])

    result = analyze(board)

    assert result.mines_left == 0
    assert result.interior_probability == 0.0
    assert set(result.probability_map.values()) == {0.0}


def test_empty_interior_defaults_interior_probability_to_one():
    board = Board.from_rows(["1 .", ". *"])

    result = analyze(board)

    assert result.interior == frozenset()
    assert result.interior_probability == 1.0
    assert list(result.probability_map.values()) == [pytest.approx(1 / 3)] * 3


def test_interior_probability_floors_at_zero():
    # The frontier expects more mines than are left.
    board = Board.from_rows(["2 . . .", ". . . ."], mines_count=1)

    result = analyze(board)

    assert result.interior_probability == 0.0
    for cell in result.interior:
        assert result.probability_map[cell] == 0.0


def test_untouched_frontier_cell_falls_back_to_global_ratio():
    board = Board.from_rows(["1 * . ."], mines_count=3)

    probability_map, mines_left, interior_probability = estimate_probabilities(
        board, [], [(0, 1)], [(0, 2), (0, 3)]
    )

    assert mines_left == 3
    assert probability_map[(0, 1)] == pytest.approx(1.0)
    assert interior_probability == pytest.approx(1.0)


def test_zero_constraints_do_not_dilute_frontier_probabilities():
    # The zero at (0,2) proves (0,1) safe but must not average into its density.
    board = Board.from_rows(["1 . 0"], mines_count=1)

    result = analyze(board)

    assert result.frontier == frozenset({(0, 1)})
    assert result.probability_map[(0, 1)] == 1.0


@pytest.mark.parametrize("seed", [11, 12, 13, 14])
def test_probabilities_are_bounded(seed):
    random.seed(seed)
    _, board = generate_position(16, 16, 40, "safe_neighborhood_rule", max_rounds=3)

    result = analyze(board)

    assert set(result.probability_map) == set(board.hidden_cells())
    assert all(0.0 <= p <= 1.0 for p in result.probability_map.values())


# -----------------------------------------------------------------------------
# Result assembly
# -----------------------------------------------------------------------------


def test_ranking_is_ascending_and_stable():
    board = Board.from_rows(["* . *", "1 2 1"])

    result = analyze(board)

    assert [(h.r, h.c) for h in result.all_hidden] == [(0, 1), (0, 0), (0, 2)]
    assert all(h.is_frontier for h in result.all_hidden)


def test_ties_keep_frontier_then_interior_row_major_order():
    board = Board.from_rows(["F 1 . .", ". . . ."])

    result = analyze(board)

    assert [(h.r, h.c, h.is_frontier) for h in result.all_hidden] == [
        (0, 2, True),
        (1, 0, True),
        (1, 1, True),
        (1, 2, True),
        (0, 3, False),
        (1, 3, False),
    ]


@pytest.mark.parametrize("seed", [21, 22, 23])
def test_ranking_is_sorted_on_generated_positions(seed):
    random.seed(seed)
    _, board = generate_position(16, 30, 99, "safe_neighborhood_rule", max_rounds=1)

    probabilities = [h.probability for h in analyze(board).all_hidden]

    assert probabilities == sorted(probabilities)


def test_board_without_hidden_cells():
    result = analyze(Board.from_rows(["1 F", "1 1"]))

    assert result.deductions == []
    assert result.all_hidden == []
    assert result.frontier == frozenset()
    assert result.interior == frozenset()
    assert result.mines_left == 0
    assert result.interior_probability == 1.0
    assert result.probability_map == {}


def test_analyze_is_deterministic():
    random.seed(99)
    _, board = generate_position(16, 16, 40, "safe_neighborhood_rule", max_rounds=2)

    first = analyze(board)
    second = analyze(board)

    assert first.all_hidden == second.all_hidden
    assert first.probability_map == second.probability_map
    assert [(d.r, d.c, d.action, d.reasons) for d in first.deductions] == [
        (d.r, d.c, d.action, d.reasons) for d in second.deductions
    ]


@pytest.mark.parametrize("seed", range(30, 40))
def test_deductions_agree_with_ground_truth(seed):
    random.seed(seed)
    _, board = generate_position(16, 16, 40, "safe_neighborhood_rule", max_rounds=3)

    for d in analyze(board).deductions:
        assert not d.conflicting
        assert board.grid[d.r][d.c].is_mine == (d.action == MINE)
