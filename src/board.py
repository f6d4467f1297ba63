"""
board rules for 2048: moves, spawns and terminal checks

every function here is pure -> it returns a new board and never
mutates the one it was given, so search branches can share nothing
"""
import random
from enum import Enum, IntEnum


GRID_SIZE = 4
WIN_TILE = 2048


class Direction(IntEnum):
    # same numbering as the gym action space
    UP = 0
    DOWN = 1
    LEFT = 2
    RIGHT = 3


# preference order for search, also the tie-break order
SEARCH_ORDER = (Direction.LEFT, Direction.DOWN, Direction.RIGHT, Direction.UP)

CORNERS = ((0, 0), (0, GRID_SIZE - 1), (GRID_SIZE - 1, 0), (GRID_SIZE - 1, GRID_SIZE - 1))


class GameStatus(Enum):
    IN_PROGRESS = "in_progress"
    WON = "won"
    LOST = "lost"


def empty_board():
    return [[0 for _ in range(GRID_SIZE)] for _ in range(GRID_SIZE)]


def new_board(rng=None):
    """start position: empty board with two random tiles"""
    board = empty_board()
    board = spawn_random_tile(board, rng)
    board = spawn_random_tile(board, rng)
    return board


def copy_board(board):
    return [list(row) for row in board]


def log2_tile(value):
    """exact log2 of a tile (bit scan, no floats), 0 for an empty cell"""
    if value <= 0:
        return 0
    return value.bit_length() - 1


def rotate_clockwise(board):
    return [[board[GRID_SIZE - 1 - j][i] for j in range(GRID_SIZE)] for i in range(GRID_SIZE)]


def rotate_counter_clockwise(board):
    return [[board[j][GRID_SIZE - 1 - i] for j in range(GRID_SIZE)] for i in range(GRID_SIZE)]


def _slide_row_left(row):
    """compress, merge each pair once, re-compress"""
    tiles = [value for value in row if value != 0]
    merged = []
    points = 0
    j = 0
    while j < len(tiles):
        if j < len(tiles) - 1 and tiles[j] == tiles[j + 1]:
            merged.append(tiles[j] * 2)
            points += tiles[j] * 2
            j += 2  # merged tile can't merge again this move
        else:
            merged.append(tiles[j])
            j += 1
    merged += [0] * (GRID_SIZE - len(merged))
    return merged, points


def _slide_left(board):
    new = []
    points = 0
    for row in board:
        merged, gained = _slide_row_left(row)
        new.append(merged)
        points += gained
    return new, points


def slide(board, direction):
    """
    apply a move and report merge points

    left is the only real move, the other three rotate the board,
    slide left and rotate back so all directions merge the same way

    returns:
        (new_board, changed, points)
    """
    direction = Direction(direction)
    if direction == Direction.LEFT:
        new, points = _slide_left(board)
    elif direction == Direction.RIGHT:
        new, points = _slide_left(rotate_clockwise(rotate_clockwise(board)))
        new = rotate_clockwise(rotate_clockwise(new))
    elif direction == Direction.UP:
        new, points = _slide_left(rotate_counter_clockwise(board))
        new = rotate_clockwise(new)
    else:
        new, points = _slide_left(rotate_clockwise(board))
        new = rotate_counter_clockwise(new)

    changed = new != board
    return new, changed, points


def try_move(board, direction):
    """returns (new_board, changed) for one direction"""
    new, changed, _ = slide(board, direction)
    return new, changed


def legal_moves(board):
    """directions that would change the board, in search order"""
    return [d for d in SEARCH_ORDER if try_move(board, d)[1]]


def can_move(board):
    """true if there is an empty cell or two equal neighbours"""
    for i in range(GRID_SIZE):
        for j in range(GRID_SIZE):
            if board[i][j] == 0:
                return True
            if i < GRID_SIZE - 1 and board[i][j] == board[i + 1][j]:
                return True
            if j < GRID_SIZE - 1 and board[i][j] == board[i][j + 1]:
                return True
    return False


def empty_cells(board):
    return [(i, j) for i in range(GRID_SIZE) for j in range(GRID_SIZE) if board[i][j] == 0]


def count_empty(board):
    return sum(1 for row in board for value in row if value == 0)


def max_tile(board):
    return max(max(row) for row in board)


def find_max_tile_position(board):
    """first cell holding the largest tile, scanning row by row"""
    best = 0
    position = (0, 0)
    for i in range(GRID_SIZE):
        for j in range(GRID_SIZE):
            if board[i][j] > best:
                best = board[i][j]
                position = (i, j)
    return position


def is_corner(position):
    return tuple(position) in CORNERS


def spawn_random_tile(board, rng=None):
    """
    put a 2 (90%) or a 4 (10%) on a uniformly chosen empty cell

    a full board comes back unchanged (as a copy)
    """
    rng = rng or random
    new = copy_board(board)
    cells = empty_cells(new)
    if cells:
        row, col = rng.choice(cells)
        new[row][col] = 2 if rng.random() < 0.9 else 4
    return new


def status(board):
    if max_tile(board) >= WIN_TILE:
        return GameStatus.WON
    if not can_move(board):
        return GameStatus.LOST
    return GameStatus.IN_PROGRESS


def validate_board(board):
    """raise ValueError unless board is a 4x4 grid of 0 or powers of two >= 2"""
    if len(board) != GRID_SIZE or any(len(row) != GRID_SIZE for row in board):
        raise ValueError(f"board must be {GRID_SIZE}x{GRID_SIZE}")
    for row in board:
        for value in row:
            if value < 0:
                raise ValueError(f"negative tile value: {value}")
            if value == 1 or value & (value - 1):
                raise ValueError(f"tile value is not a power of two >= 2: {value}")
    return board


def parse_board(text):
    """16 comma/semicolon separated ints in row-major order -> board"""
    values = [int(x.strip()) for x in text.replace(";", ",").split(",") if x.strip()]
    if len(values) != GRID_SIZE * GRID_SIZE:
        raise ValueError(f"expected {GRID_SIZE * GRID_SIZE} integers, got {len(values)}")
    board = [values[i * GRID_SIZE:(i + 1) * GRID_SIZE] for i in range(GRID_SIZE)]
    return validate_board(board)


def format_board(board):
    lines = ["-" * 25]
    for row in board:
        cells = "".join("    |" if cell == 0 else f"{cell:4}|" for cell in row)
        lines.append("|" + cells)
    lines.append("-" * 25)
    return "\n".join(lines)
