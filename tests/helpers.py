from __future__ import annotations

import itertools
import random
from typing import Any, Dict, List, Tuple

from mergegrid.components.block import Block
from mergegrid.engine import MergeGridEngine
from mergegrid.input.pointer import POINTER_END, POINTER_MOVE, POINTER_START, PointerEvent
from mergegrid.rendering.gateway import Rect

CELL = 10.0


def center(row: int, col: int) -> Tuple[float, float]:
    """Screen point at the middle of cell (row, col) for RecordingRenderer geometry."""
    return col * CELL + CELL / 2, row * CELL + CELL / 2


def press(row: int, col: int) -> PointerEvent:
    x, y = center(row, col)
    return PointerEvent(POINTER_START, x=x, y=y, button=1)


def move(row: int, col: int) -> PointerEvent:
    x, y = center(row, col)
    return PointerEvent(POINTER_MOVE, x=x, y=y)


def release(row: int = 0, col: int = 0) -> PointerEvent:
    x, y = center(row, col)
    return PointerEvent(POINTER_END, x=x, y=y)


class RecordingRenderer:
    """In-memory gateway laying cells out on a CELL-sized grid and logging every call."""

    def __init__(self):
        self.calls: List[Tuple[str, Any]] = []
        self.visuals: Dict[int, Tuple[int, int, int]] = {}
        self.highlighted: set[int] = set()
        self.surfaces = 0
        self._handles = itertools.count(1)

    async def render_grid_surface(self, dimensions):
        self.surfaces += 1
        self.visuals.clear()
        self.highlighted.clear()
        self.calls.append(("surface", (dimensions.rows, dimensions.cols)))

    async def render_block(self, block: Block):
        handle = next(self._handles)
        self.visuals[handle] = (block.row, block.col, block.value)
        self.calls.append(("render", block.id))
        return handle

    async def update_block(self, block: Block, handle):
        self.visuals[handle] = (block.row, block.col, block.value)
        self.calls.append(("update", block.id))

    async def retire_block(self, handle):
        self.visuals.pop(handle, None)
        self.highlighted.discard(handle)
        self.calls.append(("retire", handle))

    async def apply_highlight(self, handle):
        self.highlighted.add(handle)
        self.calls.append(("highlight", handle))

    async def remove_highlight(self, handle):
        self.highlighted.discard(handle)
        self.calls.append(("unhighlight", handle))

    def bounding_box(self, handle):
        visual = self.visuals.get(handle)
        if visual is None:
            return None
        row, col, _ = visual
        return Rect(col * CELL, row * CELL, CELL, CELL)

    def names(self) -> List[str]:
        return [name for name, _ in self.calls]


def make_engine(*, seed: int = 7, **options) -> Tuple[MergeGridEngine, RecordingRenderer]:
    options.setdefault("grid_size", {"rows": 3, "cols": 3})
    options.setdefault("value_range", {"min": 2, "max": 16, "increment_power": 2})
    renderer = RecordingRenderer()
    engine = MergeGridEngine(renderer=renderer, rng=random.Random(seed), **options)
    return engine, renderer


def set_values(engine: MergeGridEngine, values: List[List[int]]) -> None:
    """Overwrite block values in place (rows of ints matching the grid shape)."""
    for r, row in enumerate(values):
        for c, value in enumerate(row):
            block = engine.board.block_at(r, c)
            if block is not None:
                block.value = value
