from __future__ import annotations

import logging
from typing import List, Optional

from esper import World

from mergegrid.components.block import Block
from mergegrid.components.board import Board
from mergegrid.config import GridSize
from mergegrid.errors import NoTargetElementError
from mergegrid.events.bus import EventBus, EngineEvent
from mergegrid.rendering.gateway import RenderingGateway
from mergegrid.systems.block_factory import BlockFactory
from mergegrid.systems.board_ops import (
    get_board,
    install_grid,
    render_handle_for,
    set_render_handle,
)

logger = logging.getLogger(__name__)

Grid = List[List[Optional[Block]]]


class BoardSystem:
    """Owns grid generation and the visual side of the board (full redraws, block renders, highlights)."""

    def __init__(
        self,
        world: World,
        event_bus: EventBus,
        grid_size: GridSize,
        factory: BlockFactory,
        renderer: RenderingGateway | None = None,
    ):
        self.world = world
        self.event_bus = event_bus
        self.grid_size = grid_size
        self.factory = factory
        self.renderer = renderer

    @property
    def board(self) -> Board:
        return get_board(self.world)

    def require_renderer(self) -> RenderingGateway:
        if self.renderer is None:
            raise NoTargetElementError("Cannot render grid: no rendering gateway configured")
        return self.renderer

    async def generate_state(self) -> Optional[Grid]:
        """Build a full grid of fresh blocks, row-major. None if cancelled."""
        before = await self.event_bus.publish(EngineEvent.BEFORE_GENERATE_STATE, self.grid_size)
        if before.cancelled:
            return None
        grid: Grid = []
        for row in range(self.grid_size.rows):
            cells: List[Optional[Block]] = []
            for col in range(self.grid_size.cols):
                cells.append(await self.factory.generate(row, col))
            grid.append(cells)
        after = await self.event_bus.publish(EngineEvent.AFTER_GENERATE_STATE, grid)
        return after.payload if after.payload is not None else grid

    def install(self, grid: Grid) -> List[Block]:
        """Replace the board with grid; the surface is expected to be redrawn afterwards."""
        installed = install_grid(self.world, grid)
        logger.debug("Installed %d blocks on a %dx%d board", len(installed), self.board.rows, self.board.cols)
        return installed

    async def render_grid(self) -> None:
        renderer = self.require_renderer()
        await self.event_bus.publish(EngineEvent.BEFORE_RENDER_GRID, self.grid_size)
        await renderer.render_grid_surface(self.grid_size)
        # The surface was reset; handles from earlier renders are stale.
        for block in list(self.board.occupied()):
            set_render_handle(self.world, block, None)
        for block in list(self.board.occupied()):
            await self.render_block(block)
        await self.event_bus.publish(EngineEvent.AFTER_RENDER_GRID, self.grid_size)

    async def render_block(self, block: Block) -> Block:
        """Materialize block, or refresh its existing visual in place."""
        renderer = self.require_renderer()
        before = await self.event_bus.publish(EngineEvent.BEFORE_RENDER_BLOCK, block)
        if before.cancelled:
            return block
        handle = render_handle_for(self.world, block)
        if handle is not None:
            await renderer.update_block(block, handle)
        else:
            handle = await renderer.render_block(block)
            set_render_handle(self.world, block, handle)
        after = await self.event_bus.publish(EngineEvent.AFTER_RENDER_BLOCK, block)
        return after.payload if after.payload is not None else block

    async def highlight(self, block: Block) -> None:
        handle = render_handle_for(self.world, block)
        if handle is None or self.renderer is None:
            return
        before = await self.event_bus.publish(EngineEvent.BEFORE_HIGHLIGHT, block)
        if before.cancelled:
            return
        await self.renderer.apply_highlight(handle)
        await self.event_bus.publish(EngineEvent.AFTER_HIGHLIGHT, block)

    async def remove_highlight(self, block: Block) -> None:
        handle = render_handle_for(self.world, block)
        if handle is None or self.renderer is None:
            return
        before = await self.event_bus.publish(EngineEvent.BEFORE_REMOVE_HIGHLIGHT, block)
        if before.cancelled:
            return
        await self.renderer.remove_highlight(handle)
        await self.event_bus.publish(EngineEvent.AFTER_REMOVE_HIGHLIGHT, block)

    async def retire_block(self, handle) -> None:
        if handle is None or self.renderer is None:
            return
        await self.renderer.retire_block(handle)
