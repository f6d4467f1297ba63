import gymnasium as gym
from gymnasium import spaces
import numpy as np

from board import GameStatus, format_board, legal_moves, max_tile, validate_board
from game import Game2048


class Game2048Env(gym.Env):
    """
    gymnasium environment for 2048 game

    the driver side of the player: the agent looks at the observation,
    the environment applies its move, spawns a tile and reports whether
    the game was won or lost
    """

    metadata = {"render_modes": ["human", "ansi"]}

    def __init__(self, render_mode=None):
        super().__init__()

        self.render_mode = render_mode
        self.game = Game2048()

        # actions -> 4 possible moves
        # 0 = up, 1 = down, 2 = left, 3 = right
        self.action_space = spaces.Discrete(4)

        # observation space -> 4x4 grid of raw tile values
        self.observation_space = spaces.Box(
            low=0,
            high=131072,
            shape=(4, 4),
            dtype=np.int32
        )

        # map actions to game directions
        self.action_to_direction = {
            0: 'up',
            1: 'down',
            2: 'left',
            3: 'right'
        }

    def _get_observation(self):
        return np.array(self.game.board, dtype=np.int32)

    def _get_info(self, moved=False, points=0):
        return {
            "score": self.game.score,
            "moved": moved,
            "points_gained": points,
            "max_tile": max_tile(self.game.board),
            "moves": self.game.moves,
            "status": self.game.status.value,
            "legal_actions": [int(d) for d in legal_moves(self.game.board)],
        }

    def reset(self, seed=None, options=None):
        """
        reset the game to start a new episode

        options:
            board: start from this 4x4 position instead of two random tiles
        """
        super().reset(seed=seed)

        board = None
        if options and options.get("board") is not None:
            board = validate_board(np.asarray(options["board"], dtype=np.int64).tolist())

        # game randomness follows the env seed
        game_seed = int(self.np_random.integers(0, 2**32))
        self.game.reset(seed=game_seed, board=board)

        return self._get_observation(), self._get_info()

    def step(self, action):
        """apply one move; reward is the points earned from merging"""
        if not self.action_space.contains(action):
            raise ValueError(f"Invalid action: {action}")

        direction = self.action_to_direction[int(action)]
        moved, points = self.game.make_move(direction)

        reward = float(points) if moved else 0.0
        observation = self._get_observation()

        # won and lost both end the episode
        terminated = self.game.status is not GameStatus.IN_PROGRESS
        truncated = False

        info = self._get_info(moved, points)

        if self.render_mode == "human":
            self.render()

        return observation, reward, terminated, truncated, info

    def render(self):
        """display the game state"""
        if self.render_mode == "ansi":
            return format_board(self.game.board)
        self.game.print_board()

    def close(self):
        """clean up resources"""
        pass
