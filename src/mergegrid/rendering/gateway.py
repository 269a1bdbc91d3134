"""Contracts the engine uses to manifest state visually and to read raw input.

The engine never knows how a block is drawn or animated; it only awaits the
gateway's coroutines, which may suspend until a visual transition finishes.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Protocol, Tuple, TYPE_CHECKING

if TYPE_CHECKING:
    from mergegrid.components.block import Block
    from mergegrid.config import GridSize


@dataclass(frozen=True, slots=True)
class Rect:
    left: float
    bottom: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def top(self) -> float:
        return self.bottom + self.height

    @property
    def center(self) -> Tuple[float, float]:
        return self.left + self.width / 2, self.bottom + self.height / 2

    def scaled(self, factor: float) -> "Rect":
        """Grow or shrink symmetrically about the centre."""
        cx, cy = self.center
        width = self.width * factor
        height = self.height * factor
        return Rect(cx - width / 2, cy - height / 2, width, height)

    def contains(self, x: float, y: float) -> bool:
        # A degenerate box has no inside.
        if self.width <= 0 or self.height <= 0:
            return False
        return self.left <= x <= self.right and self.bottom <= y <= self.top


class RenderingGateway(Protocol):
    """Visual side of the engine. Every coroutine completes once its visual work is done."""

    async def render_grid_surface(self, dimensions: "GridSize") -> None:
        """Create the grid surface, or reset it dropping every existing block visual."""
        ...

    async def render_block(self, block: "Block") -> Any:
        """Materialize block and return an opaque handle to its visual."""
        ...

    async def update_block(self, block: "Block", handle: Any) -> None:
        ...

    async def retire_block(self, handle: Any) -> None:
        """Remove a block's visual; returns once the removal transition has finished."""
        ...

    async def apply_highlight(self, handle: Any) -> None:
        ...

    async def remove_highlight(self, handle: Any) -> None:
        ...

    def bounding_box(self, handle: Any) -> Optional[Rect]:
        ...


class InputAdapter(Protocol):
    def coordinates(self, raw_event: Any) -> Optional[Tuple[float, float]]:
        ...

    def bounds(self, handle: Any) -> Optional[Rect]:
        ...
