"""
live game state: the board the driver plays on
"""
import random

from board import (Direction, GameStatus, copy_board, format_board, max_tile,
                   new_board, slide, spawn_random_tile, status, validate_board)


DIRECTION_NAMES = {
    'up': Direction.UP,
    'down': Direction.DOWN,
    'left': Direction.LEFT,
    'right': Direction.RIGHT,
}


def to_direction(direction):
    """accept a Direction, its number or its name"""
    if isinstance(direction, str):
        if direction.lower() not in DIRECTION_NAMES:
            raise ValueError(f"Unknown direction: {direction}")
        return DIRECTION_NAMES[direction.lower()]
    try:
        return Direction(direction)
    except ValueError:
        raise ValueError(f"Unknown direction: {direction}") from None


class Game2048:
    def __init__(self, seed=None, board=None):
        """initialize 4x4 2048 game, from a given board if there is one"""
        self.size = 4
        self.rng = random.Random(seed)
        self.board = None
        self.score = 0
        self.moves = 0
        self.status = GameStatus.IN_PROGRESS
        self._start(board)

    def _start(self, board):
        if board is None:
            self.board = new_board(self.rng)
        else:
            self.board = copy_board(validate_board(board))
        self.score = 0
        self.moves = 0
        self.status = status(self.board)

    @property
    def game_over(self):
        return self.status is not GameStatus.IN_PROGRESS

    def add_random_tile(self):
        """add a random tile (2 or 4) to an empty space"""
        self.board = spawn_random_tile(self.board, self.rng)

    def make_move(self, direction):
        """
        make a move in the specified direction

        returns:
            (moved, points) -> points is the sum of the merged tiles
        """
        direction = to_direction(direction)
        if self.game_over:
            return False, 0

        new, moved, points = slide(self.board, direction)
        if moved:
            self.board = new
            self.score += points
            self.moves += 1
            self.add_random_tile()
            # won or lost, either one ends the game
            self.status = status(self.board)

        return moved, points

    def is_game_over(self):
        return self.game_over

    def has_won(self):
        return self.status is GameStatus.WON

    def max_tile(self):
        return max_tile(self.board)

    def reset(self, seed=None, board=None):
        """reset the game"""
        if seed is not None:
            self.rng.seed(seed)
        self._start(board)

    def print_board(self):
        """print the board to console"""
        print(f"Score: {self.score}")
        print(format_board(self.board))
        if self.status is GameStatus.WON:
            print("2048 REACHED!")
        elif self.status is GameStatus.LOST:
            print("GAME OVER!")
        print()
