"""
expectimax search for 2048

the tree alternates between the agent (picks the move with the best
value) and chance (a 2 or a 4 appears on an empty cell). the search runs
against a wall-clock budget: once the budget is spent every node falls
back to the static evaluation
"""
import random
import threading
import time
from enum import Enum

from board import GRID_SIZE, SEARCH_ORDER, can_move, copy_board, empty_cells, try_move


# both markers sit far outside anything the evaluator can return
LOSS_SCORE = -1_000_000.0
GOOD_ENOUGH_SCORE = 100_000.0

SPAWN_PROBABILITIES = ((2, 0.9), (4, 0.1))

# spawns on the border are weighted up when averaging chance nodes
EDGE_WEIGHT = 1.5
INTERIOR_WEIGHT = 1.0

DEFAULT_SAMPLE_CAP = 3
DEFAULT_TIME_LIMIT_MS = 5000


class Ply(Enum):
    AGENT = "agent"
    CHANCE = "chance"


def spawn_weight(cell):
    i, j = cell
    if i in (0, GRID_SIZE - 1) or j in (0, GRID_SIZE - 1):
        return EDGE_WEIGHT
    return INTERIOR_WEIGHT


class ExpectimaxSearch:
    """
    depth-limited expectimax with a transposition table

    the table lives for one top-level decision: call start() when a
    decision begins and clear() before every deepening iteration.

    values computed after the deadline passed are not real subtree
    values, so by default any result whose subtree hit the deadline is
    kept out of the table (cache_timeouts=True caches them anyway)
    """

    def __init__(self, evaluator, hasher,
                 time_limit_ms=DEFAULT_TIME_LIMIT_MS,
                 sample_cap=DEFAULT_SAMPLE_CAP,
                 rng=None,
                 cache_timeouts=False):
        if time_limit_ms <= 0:
            raise ValueError("time_limit_ms must be positive")
        if sample_cap < 1:
            raise ValueError("sample_cap must be at least 1")
        if evaluator.max_magnitude() >= GOOD_ENOUGH_SCORE:
            raise ValueError(
                f"evaluator can reach {evaluator.max_magnitude():,.0f}, "
                f"which overlaps the search markers ({GOOD_ENOUGH_SCORE:,.0f})"
            )

        self.evaluator = evaluator
        self.hasher = hasher
        self.time_limit_ms = time_limit_ms
        self.sample_cap = sample_cap
        self.rng = rng or random.Random()
        self.cache_timeouts = cache_timeouts

        self.table = {}
        self._lock = threading.Lock()
        self._local = threading.local()
        self.start_time = time.monotonic()

        # statistics (approximate when several threads search at once)
        self.nodes = 0
        self.cache_hits = 0
        self.timeouts = 0

    def start(self):
        """begin a new top-level decision"""
        self.start_time = time.monotonic()
        self.nodes = 0
        self.cache_hits = 0
        self.timeouts = 0
        self.clear()

    def clear(self):
        with self._lock:
            self.table.clear()

    def elapsed_ms(self):
        return (time.monotonic() - self.start_time) * 1000.0

    def timed_out(self):
        return self.elapsed_ms() > self.time_limit_ms

    def _fallbacks(self):
        # per thread, so another worker's timeout can't be mistaken for ours
        return getattr(self._local, 'fallbacks', 0)

    def _note_timeout(self):
        self._local.fallbacks = self._fallbacks() + 1
        self.timeouts += 1

    def search(self, board, depth, ply):
        self.nodes += 1

        if self.timed_out():
            self._note_timeout()
            return self.evaluator.evaluate(board)
        if depth <= 0:
            return self.evaluator.evaluate(board)
        if not can_move(board):
            return LOSS_SCORE

        key = (self.hasher.fingerprint(board), ply, depth)
        cached = self.table.get(key)
        if cached is not None:
            self.cache_hits += 1
            return cached

        fallbacks_before = self._fallbacks()
        if ply is Ply.AGENT:
            result = self._agent(board, depth)
        else:
            result = self._chance(board, depth)

        if self.cache_timeouts or self._fallbacks() == fallbacks_before:
            with self._lock:
                self.table[key] = result
        return result

    def _agent(self, board, depth):
        best = None
        for direction in SEARCH_ORDER:
            child, changed = try_move(board, direction)
            if not changed:
                continue

            score = self.search(child, depth - 1, Ply.CHANCE)
            if best is None or score > best:
                best = score

            # good enough, don't look at the rest
            if score > GOOD_ENOUGH_SCORE:
                break
            if self.timed_out():
                # the remaining directions were never searched
                self._note_timeout()
                break

        return LOSS_SCORE if best is None else best

    def _chance(self, board, depth):
        cells = empty_cells(board)
        if not cells:
            return self.evaluator.evaluate(board)

        weights = {cell: spawn_weight(cell) for cell in cells}
        # normalised over every empty cell, even the ones not sampled
        total = sum(weights.values())

        if len(cells) > self.sample_cap:
            sampled = self.rng.sample(cells, self.sample_cap)
        else:
            sampled = cells

        expected = 0.0
        for cell in sampled:
            share = weights[cell] / total
            i, j = cell
            for value, probability in SPAWN_PROBABILITIES:
                child = copy_board(board)
                child[i][j] = value
                expected += probability * share * self.search(child, depth - 1, Ply.AGENT)
        return expected
