"""Arcade implementation of the rendering gateway.

Block visuals are plain records drawn every frame; retiring a block fades it
out over RETIRE_DURATION and the awaiting coroutine resumes once the fade is
done. ``update`` must be driven from the window's update loop.
"""
from __future__ import annotations

import asyncio
import itertools
import math
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from mergegrid.components.block import Block
from mergegrid.config import GridSize
from mergegrid.constants import RETIRE_DURATION, TILE_PADDING
from mergegrid.rendering.gateway import Rect
from mergegrid.rendering.layout import compute_board_geometry

# Tile colours cycle with the block's exponent.
PALETTE: Tuple[Tuple[int, int, int], ...] = (
    (238, 228, 218),
    (237, 224, 200),
    (242, 177, 121),
    (245, 149, 99),
    (246, 124, 95),
    (246, 94, 59),
    (237, 207, 114),
    (237, 204, 97),
    (237, 200, 80),
    (237, 197, 63),
)
SURFACE_COLOR = (187, 173, 160)
HIGHLIGHT_COLOR = (255, 255, 255)
TEXT_COLOR = (60, 58, 50)


@dataclass(slots=True)
class BlockVisual:
    handle: int
    row: int
    col: int
    value: int
    highlighted: bool = False
    alpha: float = 1.0
    retiring: Optional[asyncio.Future] = None


def color_for(value: int) -> Tuple[int, int, int]:
    exponent = int(math.log2(value)) if value > 0 else 0
    return PALETTE[exponent % len(PALETTE)]


class ArcadeGateway:
    def __init__(self, window, *, retire_duration: float = RETIRE_DURATION):
        self.window = window
        self.retire_duration = retire_duration
        self.rows = 0
        self.cols = 0
        self.visuals: Dict[int, BlockVisual] = {}
        self._handles = itertools.count(1)

    # -- geometry ----------------------------------------------------------------

    def geometry(self) -> Tuple[int, float, float]:
        return compute_board_geometry(self.window.width, self.window.height, max(self.rows, 1), max(self.cols, 1))

    def cell_rect(self, row: int, col: int) -> Rect:
        tile_size, start_x, start_y = self.geometry()
        # Row 0 is drawn at the top of the board.
        left = start_x + col * tile_size + TILE_PADDING / 2
        bottom = start_y + (self.rows - 1 - row) * tile_size + TILE_PADDING / 2
        return Rect(left, bottom, tile_size - TILE_PADDING, tile_size - TILE_PADDING)

    def bounding_box(self, handle: int) -> Optional[Rect]:
        visual = self.visuals.get(handle)
        if visual is None or visual.retiring is not None:
            return None
        return self.cell_rect(visual.row, visual.col)

    # -- gateway -----------------------------------------------------------------

    async def render_grid_surface(self, dimensions: GridSize) -> None:
        self.rows = dimensions.rows
        self.cols = dimensions.cols
        for visual in list(self.visuals.values()):
            self._finish(visual)
        self.visuals.clear()

    async def render_block(self, block: Block) -> int:
        handle = next(self._handles)
        self.visuals[handle] = BlockVisual(handle=handle, row=block.row, col=block.col, value=block.value)
        return handle

    async def update_block(self, block: Block, handle: int) -> None:
        visual = self.visuals.get(handle)
        if visual is None:
            return
        visual.row = block.row
        visual.col = block.col
        visual.value = block.value

    async def retire_block(self, handle: int) -> None:
        visual = self.visuals.get(handle)
        if visual is None:
            return
        if visual.retiring is None:
            visual.highlighted = False
            visual.retiring = asyncio.get_running_loop().create_future()
        if self.retire_duration <= 0:
            self._finish(visual)
        await visual.retiring

    async def apply_highlight(self, handle: int) -> None:
        visual = self.visuals.get(handle)
        if visual is not None:
            visual.highlighted = True

    async def remove_highlight(self, handle: int) -> None:
        visual = self.visuals.get(handle)
        if visual is not None:
            visual.highlighted = False

    # -- frame loop ----------------------------------------------------------------

    def update(self, dt: float) -> None:
        for visual in list(self.visuals.values()):
            if visual.retiring is None:
                continue
            visual.alpha -= dt / self.retire_duration
            if visual.alpha <= 0.0:
                self._finish(visual)

    def _finish(self, visual: BlockVisual) -> None:
        self.visuals.pop(visual.handle, None)
        if visual.retiring is not None and not visual.retiring.done():
            visual.retiring.set_result(None)

    def draw(self) -> None:
        # Local import keeps the gateway usable in headless tests.
        import arcade

        tile_size, start_x, start_y = self.geometry()
        arcade.draw_lbwh_rectangle_filled(
            start_x, start_y, self.cols * tile_size, self.rows * tile_size, SURFACE_COLOR
        )
        for visual in self.visuals.values():
            rect = self.cell_rect(visual.row, visual.col)
            alpha = max(0, min(255, int(255 * visual.alpha)))
            arcade.draw_lbwh_rectangle_filled(
                rect.left, rect.bottom, rect.width, rect.height, (*color_for(visual.value), alpha)
            )
            if visual.highlighted:
                arcade.draw_lbwh_rectangle_outline(
                    rect.left, rect.bottom, rect.width, rect.height, HIGHLIGHT_COLOR, border_width=4
                )
            cx, cy = rect.center
            arcade.draw_text(
                str(visual.value),
                cx,
                cy,
                (*TEXT_COLOR, alpha),
                font_size=max(10, int(tile_size * 0.3)),
                anchor_x="center",
                anchor_y="center",
            )
