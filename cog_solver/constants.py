"""Project-wide constants.

These values centralize the board geometry, the annealing defaults and the
score normalization floors used throughout the codebase.
"""

from __future__ import annotations

# Board geometry: keys 0..95 are the board, 96..107 the build shelf, 108+ spare.
BOARD_ROWS: int = 8
BOARD_COLS: int = 12
BOARD_SIZE: int = BOARD_ROWS * BOARD_COLS
BOARD_MAX_KEY: int = BOARD_SIZE - 1
BUILD_SHELF_SIZE: int = 12
BUILD_MIN_KEY: int = BOARD_SIZE
BUILD_MAX_KEY: int = BUILD_MIN_KEY + BUILD_SHELF_SIZE - 1
SPARE_MIN_KEY: int = BUILD_MAX_KEY + 1
DEFAULT_SPARE_SLOTS: int = 24

# Location names returned by `Position.location`.
LOCATION_BOARD: str = "board"
LOCATION_BUILD: str = "build"
LOCATION_SPARE: str = "spare"

# Score normalization.
DEFAULT_PLAYER_COUNT: int = 10
DEFAULT_FLAG_COUNT: int = 4

# Annealing defaults.
SWAP_PROB: float = 0.4
RESTART_EVERY: int = 12_000
SHUFFLE_MOVES: int = 500
YIELD_INTERVAL_MS: float = 100.0
T0_SCALE: float = 0.2
T_MIN_RATIO: float = 0.001
T_FLOOR: float = 1e-6
DEFAULT_SOLVE_TIME_MS: float = 1000.0
