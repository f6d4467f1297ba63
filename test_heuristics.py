"""
Tests for the static board evaluation
"""
import sys
import os
import random

import pytest

sys.path.append(os.path.join(os.path.dirname(__file__), 'src'))

from heuristics import (WEIGHT_PRESETS, BoardEvaluator, HeuristicWeights, corner_lock_term,
                        corner_term, empty_term, exponent_grid, get_preset, gradient_term,
                        instability_term, max_tile_term, merge_potential_term,
                        monotonicity_term, smoothness_term)
from expectimax import GOOD_ENOUGH_SCORE, LOSS_SCORE


def grid(*rows):
    rows = [list(r) for r in rows]
    while len(rows) < 4:
        rows.append([0, 0, 0, 0])
    return exponent_grid(rows)


def test_exponent_grid():
    assert grid([0, 2, 4, 2048])[0] == [0, 1, 2, 11]


def test_single_tile_terms():
    exps = grid([0, 2, 0, 0])
    assert empty_term(exps) == 15
    assert smoothness_term(exps) == 0
    assert monotonicity_term(exps) == 1  # the column holding the 2 falls to empty cells
    assert corner_term(exps) == -1
    assert max_tile_term(exps) == 1


def test_classic_evaluation_by_hand():
    board = [[0, 2, 0, 0], [0, 0, 0, 0], [0, 0, 0, 0], [0, 0, 0, 0]]
    # 300 * 15 empty + 100 * 1 monotonic column - 2000 off-corner + 2 * log2(2)
    assert BoardEvaluator().evaluate(board) == 2602.0


def test_smoothness_counts_occupied_neighbours_only():
    assert smoothness_term(grid([8, 4, 2, 0])) == -2
    assert smoothness_term(grid([8, 0, 2, 0])) == 0
    assert smoothness_term(grid([8, 0, 0, 0], [2, 0, 0, 0])) == -2


def same_rows(row):
    # identical rows leave every column flat, so only the rows score
    return exponent_grid([list(row) for _ in range(4)])


def test_monotonicity_rewards_ordered_lines():
    assert monotonicity_term(same_rows([8, 4, 2, 2])) == 4 * 2
    assert monotonicity_term(same_rows([2, 4, 8, 16])) == 4 * 3
    assert monotonicity_term(same_rows([8, 2, 4, 8])) == 0
    assert monotonicity_term(same_rows([8, 8, 8, 8])) == 0


def test_monotonicity_sees_empty_cells():
    # same tiles in the same order, the gap in front breaks the run
    assert monotonicity_term(same_rows([8, 4, 2, 0])) == 4 * 3
    assert monotonicity_term(same_rows([0, 8, 4, 2])) == 4 * 1
    assert monotonicity_term(same_rows([8, 0, 0, 8])) == 0
    assert monotonicity_term(grid([0, 0, 0, 0], [8, 0, 0, 0])) == 3


def test_corner_term():
    assert corner_term(grid([8, 4, 2, 0])) == 1
    assert corner_term(grid([0, 0, 0, 0], [0, 0, 0, 0], [0, 0, 0, 0], [0, 0, 2, 8])) == 1
    assert corner_term(grid([4, 8, 0, 0])) == -1


def test_merge_potential():
    assert merge_potential_term(grid([4, 4, 0, 0])) == 2
    assert merge_potential_term(grid([4, 0, 0, 0], [4, 0, 0, 0])) == 2
    assert merge_potential_term(grid([4, 8, 0, 0])) == 0


def test_instability_depends_on_anchor():
    exps = grid([2, 4, 0, 0])
    assert instability_term(exps, 'top_left') == -1
    assert instability_term(exps, 'bottom_left') == -1
    assert instability_term(exps, 'top_right') == 0


def test_gradient_prefers_the_anchor():
    exps = grid([2, 0, 0, 0])
    assert gradient_term(exps, 'top_left') == 6
    assert gradient_term(exps, 'bottom_right') == 0


def test_corner_lock():
    locked = grid([16, 8, 4, 0], [8, 0, 0, 0])
    assert corner_lock_term(locked, 'top_left') == 7
    assert corner_lock_term(grid([8, 16, 0, 0]), 'top_left') == -4
    assert corner_lock_term(grid([0] * 4), 'top_left') == 0


def test_evaluate_is_deterministic():
    rng = random.Random(8)
    for name in WEIGHT_PRESETS:
        evaluator = BoardEvaluator(WEIGHT_PRESETS[name])
        for _ in range(50):
            board = [[(1 << rng.randint(1, 10)) if rng.random() < 0.6 else 0 for _ in range(4)]
                     for _ in range(4)]
            assert evaluator.evaluate(board) == evaluator.evaluate([list(r) for r in board])


def test_breakdown_adds_up():
    evaluator = BoardEvaluator(WEIGHT_PRESETS['corner_lock'])
    board = [[0, 0, 0, 0], [2, 0, 0, 0], [8, 4, 0, 0], [64, 16, 4, 2]]
    parts = evaluator.breakdown(board)
    assert set(parts) == {'empty', 'monotonicity', 'smoothness', 'corner', 'max_tile',
                          'gradient', 'merge_potential', 'instability', 'corner_lock'}
    assert sum(parts.values()) == pytest.approx(evaluator.evaluate(board))


def test_zero_weights_drop_out():
    parts = BoardEvaluator().breakdown([[2, 0, 0, 0]] + [[0] * 4] * 3)
    assert 'gradient' not in parts


def test_presets_stay_clear_of_search_markers():
    for weights in WEIGHT_PRESETS.values():
        assert weights.max_magnitude() < GOOD_ENOUGH_SCORE
        assert -weights.max_magnitude() > LOSS_SCORE


def test_bound_holds_on_a_big_board():
    evaluator = BoardEvaluator()
    board = [[131072, 2, 131072, 2], [2, 131072, 2, 131072],
             [131072, 2, 131072, 2], [2, 131072, 2, 131072]]
    assert abs(evaluator.evaluate(board)) <= evaluator.max_magnitude()


def test_get_preset():
    weights = get_preset('classic', empty=10.0)
    assert weights.empty == 10.0
    assert weights.corner == HeuristicWeights().corner
    with pytest.raises(ValueError):
        get_preset('nope')


def test_unknown_anchor():
    with pytest.raises(ValueError):
        HeuristicWeights(anchor='middle')
