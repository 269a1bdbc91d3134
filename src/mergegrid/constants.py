GRID_ROWS = 6
GRID_COLS = 5

# Block values are drawn from VALUE_MIN * INCREMENT_POWER**k capped at VALUE_MAX.
VALUE_MIN = 1
VALUE_MAX = 32
INCREMENT_POWER = 2

# Multiplier applied to a rendered block's bounds when hit testing pointer input.
HIT_BOX_SCALE = 0.8

# Number of grid snapshots retained for undo.
HISTORY_DEPTH = 10

# Bundled arcade window geometry.
WINDOW_WIDTH = 480
WINDOW_HEIGHT = 640
BOTTOM_MARGIN = 20
BOARD_MAX_WIDTH_PCT = 0.90
BOARD_MAX_HEIGHT_PCT = 0.85
TILE_PADDING = 4
MIN_TILE_SIZE = 20

# Seconds a retired block takes to fade before its removal completes.
RETIRE_DURATION = 0.18
