"""
static evaluation of 2048 boards

every term works on the grid of tile exponents (log2 values, 0 = empty)
and is a pure function of it; BoardEvaluator adds them up with fixed weights
"""
from dataclasses import dataclass, replace

from board import GRID_SIZE, is_corner, log2_tile


# largest exponent a term has to expect (131072 tile)
MAX_EXPONENT = 17

ANCHORS = ('top_left', 'top_right', 'bottom_left', 'bottom_right')

# positional weights with the anchor in the top-left cell, falling off with distance
GRADIENT = [[2 * (GRID_SIZE - 1) - (i + j) for j in range(GRID_SIZE)] for i in range(GRID_SIZE)]

# number of horizontally + vertically adjacent cell pairs
_ADJACENT_PAIRS = 2 * GRID_SIZE * (GRID_SIZE - 1)


@dataclass(frozen=True)
class HeuristicWeights:
    empty: float = 300.0
    monotonicity: float = 100.0
    smoothness: float = 3.0
    corner: float = 2000.0
    max_tile: float = 2.0
    # variant terms, off unless a preset turns them on
    gradient: float = 0.0
    merge_potential: float = 0.0
    instability: float = 0.0
    corner_lock: float = 0.0
    anchor: str = 'bottom_left'

    def __post_init__(self):
        if self.anchor not in ANCHORS:
            raise ValueError(f"Unknown anchor corner: {self.anchor}")

    def max_magnitude(self):
        """upper bound on |evaluate(board)| for any reachable board"""
        bounds = {
            'empty': GRID_SIZE * GRID_SIZE,
            'monotonicity': 2 * GRID_SIZE * MAX_EXPONENT,
            'smoothness': _ADJACENT_PAIRS * MAX_EXPONENT,
            'corner': 1,
            'max_tile': MAX_EXPONENT,
            'gradient': sum(map(sum, GRADIENT)) * MAX_EXPONENT,
            'merge_potential': _ADJACENT_PAIRS * MAX_EXPONENT,
            'instability': _ADJACENT_PAIRS * MAX_EXPONENT,
            'corner_lock': MAX_EXPONENT + 2 * (GRID_SIZE - 1),
        }
        return sum(abs(getattr(self, name)) * bound for name, bound in bounds.items())


WEIGHT_PRESETS = {
    'classic': HeuristicWeights(),
    'gradient': HeuristicWeights(gradient=30.0, merge_potential=20.0),
    'corner_lock': HeuristicWeights(
        empty=270.0,
        monotonicity=47.0,
        smoothness=3.0,
        corner=1000.0,
        max_tile=2.0,
        gradient=10.0,
        merge_potential=10.0,
        instability=10.0,
        corner_lock=800.0,
    ),
}


def get_preset(name, **overrides):
    """look up a named weight set, optionally replacing some of its values"""
    if name not in WEIGHT_PRESETS:
        raise ValueError(f"Unknown weight preset: {name}")
    return replace(WEIGHT_PRESETS[name], **overrides)


def exponent_grid(board):
    return [[log2_tile(value) for value in row] for row in board]


def _lines(exps):
    """all rows then all columns"""
    return [list(row) for row in exps] + [[exps[i][j] for i in range(GRID_SIZE)] for j in range(GRID_SIZE)]


def _orient(exps, anchor):
    """flip the grid so the anchor corner lands in the top-left cell"""
    if anchor in ('bottom_left', 'bottom_right'):
        exps = exps[::-1]
    if anchor in ('top_right', 'bottom_right'):
        exps = [row[::-1] for row in exps]
    return exps


def empty_term(exps):
    return sum(1 for row in exps for e in row if e == 0)


def smoothness_term(exps):
    """minus the exponent gaps between occupied neighbours"""
    smooth = 0
    for i in range(GRID_SIZE):
        for j in range(GRID_SIZE):
            e = exps[i][j]
            if e == 0:
                continue
            if j + 1 < GRID_SIZE and exps[i][j + 1]:
                smooth -= abs(e - exps[i][j + 1])
            if i + 1 < GRID_SIZE and exps[i + 1][j]:
                smooth -= abs(e - exps[i + 1][j])
    return smooth


def monotonicity_term(exps):
    """
    per row and column: steps along the dominant direction count up,
    steps against it count down. empty cells are exponent 0, so a gap
    inside a line is a step like any other
    """
    score = 0
    for line in _lines(exps):
        up = down = 0
        for current, nxt in zip(line, line[1:]):
            if nxt > current:
                up += nxt - current
            else:
                down += current - nxt
        score += max(up, down) - min(up, down)
    return score


def corner_term(exps):
    """+1 when the largest tile sits in any corner, -1 otherwise"""
    top = max(max(row) for row in exps)
    if top == 0:
        return 0
    for i in range(GRID_SIZE):
        for j in range(GRID_SIZE):
            if exps[i][j] == top and is_corner((i, j)):
                return 1
    return -1


def max_tile_term(exps):
    return max(max(row) for row in exps)


def gradient_term(exps, anchor='bottom_left'):
    oriented = _orient(exps, anchor)
    return sum(GRADIENT[i][j] * oriented[i][j] for i in range(GRID_SIZE) for j in range(GRID_SIZE))


def merge_potential_term(exps):
    """equal neighbours are a merge waiting to happen, bigger ones count more"""
    score = 0
    for i in range(GRID_SIZE):
        for j in range(GRID_SIZE):
            e = exps[i][j]
            if e == 0:
                continue
            if j + 1 < GRID_SIZE and exps[i][j + 1] == e:
                score += e
            if i + 1 < GRID_SIZE and exps[i + 1][j] == e:
                score += e
    return score


def instability_term(exps, anchor='bottom_left'):
    """minus the gaps where a tile nearer the anchor is smaller than the one behind it"""
    oriented = _orient(exps, anchor)
    penalty = 0
    for i in range(GRID_SIZE):
        for j in range(GRID_SIZE):
            near = oriented[i][j]
            if near == 0:
                continue
            if j + 1 < GRID_SIZE and oriented[i][j + 1] > near:
                penalty += oriented[i][j + 1] - near
            if i + 1 < GRID_SIZE and oriented[i + 1][j] > near:
                penalty += oriented[i + 1][j] - near
    return -penalty


def corner_lock_term(exps, anchor='bottom_left'):
    """
    -log2(max) unless the largest tile sits on the anchor; on the anchor,
    log2(max) plus one for every step outward (along the anchor row and
    column) that keeps roughly halving
    """
    oriented = _orient(exps, anchor)
    top = max(max(row) for row in oriented)
    if top == 0:
        return 0
    if oriented[0][0] != top:
        return -top

    score = top
    for line in (oriented[0], [oriented[i][0] for i in range(GRID_SIZE)]):
        previous = line[0]
        for e in line[1:]:
            if e == 0 or previous - e not in (0, 1):
                break
            score += 1
            previous = e
    return score


class BoardEvaluator:
    """weighted sum of the heuristic terms"""

    def __init__(self, weights=None):
        self.weights = weights or HeuristicWeights()
        w = self.weights
        anchor = w.anchor
        terms = [
            ('empty', w.empty, empty_term),
            ('monotonicity', w.monotonicity, monotonicity_term),
            ('smoothness', w.smoothness, smoothness_term),
            ('corner', w.corner, corner_term),
            ('max_tile', w.max_tile, max_tile_term),
            ('gradient', w.gradient, lambda exps: gradient_term(exps, anchor)),
            ('merge_potential', w.merge_potential, merge_potential_term),
            ('instability', w.instability, lambda exps: instability_term(exps, anchor)),
            ('corner_lock', w.corner_lock, lambda exps: corner_lock_term(exps, anchor)),
        ]
        # zero weights drop out, the order of the rest is fixed
        self._terms = [(name, weight, fn) for name, weight, fn in terms if weight != 0]

    def max_magnitude(self):
        return self.weights.max_magnitude()

    def evaluate(self, board):
        exps = exponent_grid(board)
        score = 0.0
        for _, weight, fn in self._terms:
            score += weight * fn(exps)
        return score

    def breakdown(self, board):
        """weighted contribution of every active term"""
        exps = exponent_grid(board)
        return {name: weight * fn(exps) for name, weight, fn in self._terms}
