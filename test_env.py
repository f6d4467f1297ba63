"""
Test script for the 2048 environment
"""
import sys
import os

import numpy as np
import pytest

# Add src directory to path so we can import our modules
sys.path.append(os.path.join(os.path.dirname(__file__), 'src'))

from game_gym import Game2048Env


def test_environment():
    """Test the 2048 environment with random actions"""
    env = Game2048Env()

    observation, info = env.reset(seed=7)
    assert observation.shape == (4, 4)
    assert info["score"] == 0
    assert np.count_nonzero(observation) == 2

    for step in range(10):
        action = env.action_space.sample()
        obs, reward, terminated, truncated, info = env.step(action)

        assert env.observation_space.contains(obs)
        assert reward >= 0
        assert truncated is False
        if info["moved"]:
            assert reward == info["points_gained"]

        if terminated:
            break

    env.close()


def test_reset_is_reproducible_with_seed():
    env = Game2048Env()
    first, _ = env.reset(seed=123)
    second, _ = env.reset(seed=123)
    assert np.array_equal(first, second)


def test_reset_from_board_option():
    board = [[2, 2, 0, 0], [0, 0, 0, 0], [0, 0, 0, 0], [0, 0, 0, 0]]
    env = Game2048Env()
    obs, info = env.reset(seed=1, options={"board": board})
    assert obs.tolist() == board
    assert info["status"] == "in_progress"
    assert info["legal_actions"] == [2, 1, 3]  # left, down, right; up changes nothing

    obs, reward, terminated, truncated, info = env.step(2)  # left
    assert info["moved"] is True
    assert reward == 4.0
    assert obs[0][0] == 4
    assert np.count_nonzero(obs) == 2  # merged tile + spawned tile


def test_reset_rejects_invalid_board():
    env = Game2048Env()
    bad = [[3, 0, 0, 0], [0, 0, 0, 0], [0, 0, 0, 0], [0, 0, 0, 0]]
    with pytest.raises(ValueError):
        env.reset(options={"board": bad})


def test_step_terminates_on_win():
    board = [[1024, 1024, 0, 0], [0, 0, 0, 0], [0, 0, 0, 0], [0, 0, 0, 0]]
    env = Game2048Env()
    env.reset(seed=3, options={"board": board})
    obs, reward, terminated, truncated, info = env.step(2)
    assert terminated is True
    assert info["status"] == "won"
    assert info["max_tile"] == 2048
    assert reward == 2048.0


def test_step_rejects_unknown_action():
    env = Game2048Env()
    env.reset(seed=0)
    with pytest.raises(ValueError):
        env.step(7)


def test_ansi_render_returns_text():
    env = Game2048Env(render_mode="ansi")
    env.reset(seed=5)
    text = env.render()
    assert isinstance(text, str)
    assert text.count("|") == 20


if __name__ == "__main__":
    test_environment()
    print("Test completed!")
