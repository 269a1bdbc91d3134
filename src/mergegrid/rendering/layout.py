from mergegrid.constants import (
    BOTTOM_MARGIN,
    BOARD_MAX_WIDTH_PCT,
    BOARD_MAX_HEIGHT_PCT,
    MIN_TILE_SIZE,
)


def compute_board_geometry(window_width: int, window_height: int, rows: int, cols: int):
    """Return (tile_size, start_x, start_y) for a rows x cols board centred horizontally.

    The board never exceeds the configured fraction of the window; start_y is
    the bottom edge of the lowest row.
    """
    max_board_w = window_width * BOARD_MAX_WIDTH_PCT
    max_board_h = (window_height - BOTTOM_MARGIN) * BOARD_MAX_HEIGHT_PCT
    tile_by_w = max_board_w / cols
    tile_by_h = max_board_h / rows
    tile_size = int(min(tile_by_w, tile_by_h))
    if tile_size < MIN_TILE_SIZE:
        tile_size = MIN_TILE_SIZE
    total_width = cols * tile_size
    start_x = (window_width - total_width) / 2
    start_y = BOTTOM_MARGIN
    return tile_size, start_x, start_y
