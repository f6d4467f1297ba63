"""
Play script - watch the expectimax agent play 2048 in the console
"""
import logging
import time

import numpy as np

import ai_config
from board import Direction, parse_board
from expectimax_agent import ExpectimaxAgent
from game_gym import Game2048Env


def play_game(agent, env, verbose=True, start_board=None, max_moves=None):
    """
    play one complete game

    stops when the game is won or lost, or when the agent could not
    decide in time (outcome 'undecided', which is not a loss)
    """
    options = {"board": start_board} if start_board is not None else None
    observation, info = env.reset(options=options)

    decision_times = []
    max_tile = info["max_tile"]
    outcome = info["status"]

    if verbose:
        print("Game started! Watching AI play...")
        env.game.print_board()

    while outcome == "in_progress":
        if max_moves is not None and info["moves"] >= max_moves:
            outcome = "move_limit"
            break

        decision = agent.decide(observation.tolist())
        decision_times.append(decision.elapsed_ms)

        if decision.direction is None:
            # lost boards are caught by the env; this is a search that never finished depth 1
            outcome = "undecided" if decision.undecided else "lost"
            break

        observation, reward, terminated, truncated, info = env.step(int(decision.direction))

        if verbose:
            print(f"AI Move: {Direction(decision.direction).name} | depth {decision.depth} | "
                  f"{decision.elapsed_ms:.0f} ms | +{reward:.0f}")
            env.game.print_board()

        current_max = info["max_tile"]
        if current_max > max_tile:
            max_tile = current_max
            if verbose:
                print(f"New max tile: {max_tile}")

        outcome = info["status"]
        if terminated or truncated:
            break

    result = {
        "score": env.game.score,
        "max_tile": max_tile,
        "moves": env.game.moves,
        "outcome": outcome,
        "mean_decision_ms": float(np.mean(decision_times)) if decision_times else 0.0,
    }

    if verbose:
        print(f"\nGame Over! ({outcome})")
        print(f"Final Score: {result['score']:,}")
        print(f"Max Tile: {result['max_tile']}")
        print(f"Moves: {result['moves']}\n")

    return result


def run_games(games=1, config=None, verbose=False, start_board=None, seed=None):
    """play several games and print the tile achievement distribution"""
    agent = ExpectimaxAgent.from_config(config)
    env = Game2048Env()
    if seed is not None:
        env.reset(seed=seed)

    results = []
    max_tiles_achieved = {}
    start_time = time.time()

    for game_number in range(1, games + 1):
        result = play_game(agent, env, verbose=verbose, start_board=start_board)
        results.append(result)
        max_tiles_achieved[result["max_tile"]] = max_tiles_achieved.get(result["max_tile"], 0) + 1

        print(f"Game {game_number:3d} | Score: {result['score']:7,d} | Tile: {result['max_tile']:5d} | "
              f"Moves: {result['moves']:5d} | {result['outcome']} | "
              f"{result['mean_decision_ms']:.0f} ms/move")

    scores = [r["score"] for r in results]
    elapsed = time.time() - start_time

    print("=" * 50)
    print(f"Games Played: {games}")
    print(f"Average Score: {np.mean(scores):,.0f}")
    print(f"Best Score: {max(scores):,}")
    print(f"\nMax Tiles Achieved:")
    for tile in sorted(max_tiles_achieved.keys(), reverse=True):
        count = max_tiles_achieved[tile]
        percentage = (count / games) * 100
        print(f"  {tile:5d}: {count:3d} times ({percentage:5.1f}%)")
    print(f"\nTotal Time: {elapsed:.1f}s")
    print("=" * 50 + "\n")

    return results


if __name__ == "__main__":
    # ===================================================================
    # PLAY CONFIGURATION
    # ===================================================================

    # number of games to play
    GAMES = 1

    # print every move
    VERBOSE = True

    # start position, 16 comma separated values (None for a random start)
    START_BOARD = None

    # seed for the game (None for a random game)
    GAME_SEED = None

    # show search diagnostics
    DEBUG_LOGGING = False

    # ===================================================================

    logging.basicConfig(
        level=logging.DEBUG if DEBUG_LOGGING else logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    # AI2048_TIME_LIMIT_MS=1000 python play.py etc.
    applied = ai_config.load_env_overrides()
    if applied:
        print(f"Config overrides: {', '.join(applied)}")

    print("\n" + "=" * 70)
    print("2048 AI - Expectimax Player")
    print("=" * 70)
    config = ai_config.get_config()
    print(f"  - Time limit: {config.time_limit_ms} ms per move")
    print(f"  - Weights: {config.weight_preset}")
    print(f"  - Chance samples: {config.sample_cap}")
    print(f"  - Corner preservation: {config.corner_preservation}")
    print(f"  - Parallel: {config.parallel}")
    print("=" * 70 + "\n")

    try:
        start = parse_board(START_BOARD) if START_BOARD else None
        run_games(games=GAMES, config=config, verbose=VERBOSE, start_board=start, seed=GAME_SEED)

    except KeyboardInterrupt:
        print("\nInterrupted by user")
