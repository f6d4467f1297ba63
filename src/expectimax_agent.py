"""
Expectimax agent for 2048

picks a move by iterative deepening: search depth 1, 2, 3 ... until the
time budget runs out, and play the best move of the deepest depth that
finished in time
"""
import logging
import os
import random
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

import numpy as np

import ai_config
from board import (Direction, SEARCH_ORDER, copy_board, count_empty,
                   find_max_tile_position, is_corner, try_move)
from expectimax import DEFAULT_SAMPLE_CAP, DEFAULT_TIME_LIMIT_MS, ExpectimaxSearch, Ply
from heuristics import BoardEvaluator, HeuristicWeights, get_preset
from zobrist import ZobristHasher


logger = logging.getLogger(__name__)

# (min empty cells, depth): open boards branch more and need less lookahead
DEPTH_SCHEDULE = ai_config.DEPTH_SCHEDULE
DEEPEST_DEPTH = ai_config.DEEPEST_DEPTH


def max_search_depth(empty, schedule=DEPTH_SCHEDULE, deepest=DEEPEST_DEPTH):
    depth = deepest
    for min_empty, scheduled in schedule:
        if empty >= min_empty:
            depth = scheduled
            break
    if depth < 1:
        raise ValueError(f"search depth must be at least 1, got {depth}")
    return depth


@dataclass
class Decision:
    """
    outcome of one move decision

    direction is None in two different situations:
    - no move changes the board -> the game is lost
    - the budget ran out before depth 1 finished -> undecided
    """
    direction: Direction = None
    score: float = None
    depth: int = 0
    timed_out: bool = False
    elapsed_ms: float = 0.0
    nodes: int = 0
    has_legal_move: bool = True

    @property
    def undecided(self):
        return self.direction is None and self.has_legal_move


class ExpectimaxAgent:
    """
    plays 2048 with time-bounded expectimax

    the live board is never modified; every candidate is searched on a copy
    """

    def __init__(self,
                 weights=None,
                 time_limit_ms=DEFAULT_TIME_LIMIT_MS,
                 sample_cap=DEFAULT_SAMPLE_CAP,
                 corner_preservation=True,
                 seed=None,
                 parallel=False,
                 max_workers=None,
                 cache_timeouts=False,
                 depth_schedule=DEPTH_SCHEDULE,
                 deepest_depth=DEEPEST_DEPTH):
        """
        args:
            weights: HeuristicWeights for the leaf evaluation (classic set if None)
            time_limit_ms: wall-clock budget per decision
            sample_cap: empty cells expanded per chance node
            corner_preservation: keep a corner-held max tile in a corner when possible
            seed: seeds chance sampling and the Zobrist table (reproducible runs)
            parallel: score the root moves of each depth on a thread pool
            max_workers: pool size, defaults to the number of CPUs
            cache_timeouts: also cache values computed after the deadline
            depth_schedule / deepest_depth: depth limit from the empty cell count
        """
        if deepest_depth < 1 or any(depth < 1 for _, depth in depth_schedule):
            raise ValueError("every search depth must be at least 1")
        if max_workers is not None and max_workers < 1:
            raise ValueError("max_workers must be at least 1")

        self.weights = weights or HeuristicWeights()
        self.corner_preservation = corner_preservation
        self.parallel = parallel
        self.max_workers = max_workers
        self.depth_schedule = depth_schedule
        self.deepest_depth = deepest_depth

        self.evaluator = BoardEvaluator(self.weights)
        self.hasher = ZobristHasher(seed=seed)
        self.search = ExpectimaxSearch(
            self.evaluator,
            self.hasher,
            time_limit_ms=time_limit_ms,
            sample_cap=sample_cap,
            rng=random.Random(seed),
            cache_timeouts=cache_timeouts,
        )
        self.last_decision = None

    @classmethod
    def from_config(cls, config=None, weights=None):
        """build an agent from an ai_config.EngineConfig (current settings if None)"""
        config = config or ai_config.get_config()
        return cls(
            weights=weights or get_preset(config.weight_preset),
            time_limit_ms=config.time_limit_ms,
            sample_cap=config.sample_cap,
            corner_preservation=config.corner_preservation,
            seed=config.seed,
            parallel=config.parallel,
            max_workers=config.max_workers,
            cache_timeouts=config.cache_timeouts,
            depth_schedule=config.depth_schedule,
            deepest_depth=config.deepest_depth,
        )

    @property
    def time_limit_ms(self):
        return self.search.time_limit_ms

    def candidate_moves(self, board):
        """
        root moves worth searching, in search order

        a move that pulls a corner-held max tile out of the corners is
        dropped, unless no move keeps it in a corner
        """
        moves = []
        for direction in SEARCH_ORDER:
            child, changed = try_move(board, direction)
            if changed:
                moves.append((direction, child))

        if not self.corner_preservation or not is_corner(find_max_tile_position(board)):
            return moves

        keeping = [(d, child) for d, child in moves if is_corner(find_max_tile_position(child))]
        return keeping or moves

    def _score_sequential(self, candidates, depth):
        best = None
        for direction, child in candidates:
            score = self.search.search(child, depth - 1, Ply.CHANCE)
            if best is None or score > best[1]:
                best = (direction, score)
            if self.search.timed_out():
                break
        return best

    def _score_parallel(self, candidates, depth):
        workers = self.max_workers or os.cpu_count() or 1
        with ThreadPoolExecutor(max_workers=min(workers, len(candidates))) as executor:
            futures = [executor.submit(self.search.search, child, depth - 1, Ply.CHANCE)
                       for _, child in candidates]
            scores = [future.result() for future in futures]

        best = None
        for (direction, _), score in zip(candidates, scores):
            if best is None or score > best[1]:
                best = (direction, score)
        return best

    def decide(self, board):
        """run iterative deepening on a copy of board and return a Decision"""
        board = copy_board(board)
        self.search.start()

        candidates = self.candidate_moves(board)
        if not candidates:
            decision = Decision(has_legal_move=False)
            self.last_decision = decision
            logger.debug("no legal move")
            return decision

        max_depth = max_search_depth(count_empty(board), self.depth_schedule, self.deepest_depth)
        best_direction = None
        best_score = None
        completed = 0
        timed_out = False

        for depth in range(1, max_depth + 1):
            # values from a shallower pass don't mean the same thing
            self.search.clear()

            if self.parallel:
                best = self._score_parallel(candidates, depth)
            else:
                best = self._score_sequential(candidates, depth)

            if self.search.timed_out():
                # partial depth, keep the previous answer
                timed_out = True
                logger.debug("depth %d cut by the deadline after %.0f ms", depth, self.search.elapsed_ms())
                break

            best_direction, best_score = best
            completed = depth
            logger.debug("depth %d: %s (%.1f), %d nodes", depth, best_direction.name, best_score,
                         self.search.nodes)

        decision = Decision(
            direction=best_direction,
            score=best_score,
            depth=completed,
            timed_out=timed_out,
            elapsed_ms=self.search.elapsed_ms(),
            nodes=self.search.nodes,
            has_legal_move=True,
        )
        if decision.undecided:
            logger.warning("no search depth finished within %d ms", self.search.time_limit_ms)
        self.last_decision = decision
        return decision

    def select_move(self, board):
        """best Direction for board, or None (see Decision for why)"""
        return self.decide(board).direction

    def choose_action(self, observation):
        """
        gym-facing wrapper: observation is the 4x4 array from Game2048Env

        returns the action number, or None when no move was chosen
        """
        board = np.asarray(observation, dtype=np.int64).tolist()
        direction = self.select_move(board)
        return None if direction is None else int(direction)
