"""
Zobrist hashing for 2048 boards

one random 64-bit value per (cell, log2 tile) pair, XOR-ed together over
the occupied cells -> identical layouts always get the same fingerprint
"""
import numpy as np

from board import GRID_SIZE, log2_tile


# exponents 0..17 -> tiles up to 131072
MAX_LOG_TILE = 18


class ZobristHasher:
    """
    owns the random table, built once when the hasher is created

    pass a seed to get the same table (and the same fingerprints) every run
    """

    def __init__(self, seed=None, n_exponents=MAX_LOG_TILE):
        if n_exponents < 15:
            raise ValueError("hash table needs at least 15 exponents (tiles up to 16384)")
        self.seed = seed
        self.n_exponents = n_exponents

        rng = np.random.default_rng(seed)
        table = rng.integers(0, np.iinfo(np.uint64).max, size=(GRID_SIZE * GRID_SIZE, n_exponents),
                             dtype=np.uint64, endpoint=True)
        # plain ints: XOR on python ints is faster than on numpy scalars here
        self.table = [[int(value) for value in row] for row in table]

    def fingerprint(self, board):
        h = 0
        for i in range(GRID_SIZE):
            row = board[i]
            for j in range(GRID_SIZE):
                value = row[j]
                if value == 0:
                    continue
                exponent = log2_tile(value)
                if exponent >= self.n_exponents:
                    raise ValueError(f"tile {value} is too large for the hash table")
                h ^= self.table[i * GRID_SIZE + j][exponent]
        return h
