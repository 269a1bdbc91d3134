"""Merge grid engine: the public surface wiring board, selection, merge and history together.

All work happens on one asyncio task at a time. Lifecycle calls and pointer
input share one lock per engine, so a reset, an undo or a gesture end waits
for an in-flight merge (and whatever rule, handler or fade it is awaiting)
to finish before it touches the grid.
"""
from __future__ import annotations

import asyncio
import logging
import random
from typing import Any, Awaitable, Callable, List, Optional

from esper import World

from mergegrid.components.block import Block
from mergegrid.components.board import Board
from mergegrid.config import EngineConfig
from mergegrid.errors import ReentrantInputError
from mergegrid.events.bus import EngineEvent, EventBus, EventName, Handler
from mergegrid.history import GridSnapshot, History
from mergegrid.input.pointer import (
    POINTER_CANCEL,
    POINTER_END,
    POINTER_MOVE,
    POINTER_START,
    PointerInput,
)
from mergegrid.rendering.gateway import InputAdapter, RenderingGateway
from mergegrid.systems.block_factory import BlockFactory
from mergegrid.systems.board import BoardSystem
from mergegrid.systems.board_ops import get_board, restore_snapshot
from mergegrid.systems.merge import MergeSystem
from mergegrid.systems.selection import SelectionSystem
from mergegrid.world import create_world

logger = logging.getLogger(__name__)

# Raw event type names routed by handle_input, DOM and normalized spellings alike.
START_TYPES = frozenset({POINTER_START, "mousedown", "touchstart", "pointerdown"})
MOVE_TYPES = frozenset({POINTER_MOVE, "mousemove", "touchmove", "pointermove"})
END_TYPES = frozenset({POINTER_END, "mouseup", "touchend", "pointerup"})
CANCEL_TYPES = frozenset({POINTER_CANCEL, "touchcancel", "pointercancel"})


class MergeGridEngine:
    def __init__(
        self,
        config: EngineConfig | None = None,
        *,
        renderer: RenderingGateway | None = None,
        input_adapter: InputAdapter | None = None,
        event_bus: EventBus | None = None,
        world: World | None = None,
        rng: random.Random | None = None,
        **options: Any,
    ):
        if config is None:
            config = EngineConfig.from_options(options)
        elif options:
            raise TypeError(f"Unexpected options alongside config: {sorted(options)}")
        self.config = config
        self.event_bus = event_bus or EventBus()
        self.world = world or create_world(self.event_bus, config, rng=rng)
        self.renderer = renderer
        self.input_adapter = input_adapter or PointerInput(renderer)
        self._history = History(config.history_depth)
        self.factory = BlockFactory(self.world, self.event_bus, config.value_range)
        self.board_system = BoardSystem(
            self.world, self.event_bus, config.grid_size, self.factory, renderer
        )
        self.merge_system = MergeSystem(
            self.world,
            self.event_bus,
            self.board_system,
            self.factory,
            self._history,
            rules=config.merge_rules,
        )
        self.selection_system = SelectionSystem(
            self.world,
            self.event_bus,
            self.board_system,
            self.merge_system,
            self.input_adapter,
            hit_box_scale=config.hit_box_scale,
            rules=config.selection_rules,
        )
        self._transition_lock = asyncio.Lock()
        self._transition_task: asyncio.Task | None = None

    # -- state -----------------------------------------------------------------

    @property
    def board(self) -> Board:
        return get_board(self.world)

    @property
    def state(self) -> List[List[Optional[Block]]]:
        return self.board.rows_view()

    @property
    def selected_blocks(self) -> List[Block]:
        return list(self.selection_system.selected_blocks)

    @property
    def current_block(self) -> Optional[Block]:
        return self.selection_system.current_block

    @property
    def is_dragging(self) -> bool:
        return self.selection_system.dragging

    @property
    def history(self) -> List[GridSnapshot]:
        return list(self._history)

    # -- events ----------------------------------------------------------------

    def subscribe(self, name: EventName, handler: Handler) -> Handler:
        return self.event_bus.subscribe(name, handler)

    def subscribe_once(self, name: EventName, handler: Handler) -> Handler:
        return self.event_bus.subscribe_once(name, handler)

    def unsubscribe(self, name: EventName, handler: Handler | None = None) -> None:
        self.event_bus.unsubscribe(name, handler)

    def unsubscribe_all(self) -> None:
        self.event_bus.unsubscribe_all()

    # -- lifecycle -------------------------------------------------------------

    async def initialize(self) -> bool:
        return await self._serialized(self._initialize)

    async def reset(self) -> bool:
        """Regenerate every cell and redraw. History is left alone."""
        return await self._serialized(self._reset)

    async def undo(self) -> bool:
        """Restore the most recent snapshot. False when nothing was restored."""
        return await self._serialized(self._undo)

    async def _initialize(self) -> bool:
        before = await self.event_bus.publish(EngineEvent.BEFORE_INITIALIZE)
        if before.cancelled:
            return False
        self.board_system.require_renderer()
        if self.board.occupied_count() == 0:
            await self._reset()
        else:
            await self.board_system.render_grid()
        await self.event_bus.publish(EngineEvent.AFTER_INITIALIZE)
        return True

    async def _reset(self) -> bool:
        before = await self.event_bus.publish(EngineEvent.BEFORE_RESET)
        if before.cancelled:
            logger.debug("Reset cancelled")
            return False
        self.board_system.require_renderer()
        self.selection_system.clear()
        grid = await self.board_system.generate_state()
        if grid is None:
            return False
        self.board_system.install(grid)
        await self.board_system.render_grid()
        await self.event_bus.publish(EngineEvent.AFTER_RESET, self.board)
        return True

    async def _undo(self) -> bool:
        if self.is_dragging:
            return False
        before = await self.event_bus.publish(EngineEvent.BEFORE_UNDO)
        if before.cancelled:
            return False
        self.board_system.require_renderer()
        snapshot = self._history.pop()
        if snapshot is None:
            return False
        restore_snapshot(self.world, snapshot)
        await self.board_system.render_grid()
        logger.debug("Restored snapshot, %d left in history", len(self._history))
        await self.event_bus.publish(EngineEvent.AFTER_UNDO, snapshot)
        return True

    # -- input -----------------------------------------------------------------

    async def on_pointer_start(self, raw_event: Any) -> None:
        await self._serialized(self.selection_system.start, raw_event)

    async def on_pointer_move(self, raw_event: Any) -> None:
        await self._serialized(self.selection_system.move, raw_event)

    async def on_pointer_end(self, raw_event: Any) -> bool:
        return await self._serialized(self.selection_system.end, raw_event)

    async def on_pointer_cancel(self, raw_event: Any) -> bool:
        return await self._serialized(self.selection_system.end, raw_event)

    async def handle_input(self, raw_event: Any) -> Any:
        """Route a raw event by its ``type`` to the matching entry point."""
        kind = raw_event.get("type") if isinstance(raw_event, dict) else getattr(raw_event, "type", None)
        if kind in START_TYPES:
            return await self.on_pointer_start(raw_event)
        if kind in MOVE_TYPES:
            return await self.on_pointer_move(raw_event)
        if kind in END_TYPES:
            return await self.on_pointer_end(raw_event)
        if kind in CANCEL_TYPES:
            return await self.on_pointer_cancel(raw_event)
        return None

    async def _serialized(self, step: Callable[..., Awaitable[Any]], *args: Any) -> Any:
        """Run one state transition at a time; lifecycle calls and pointer input share the lock."""
        current = asyncio.current_task()
        if current is not None and current is self._transition_task:
            raise ReentrantInputError("Engine operation dispatched while another one is running on this task")
        async with self._transition_lock:
            self._transition_task = current
            try:
                return await step(*args)
            finally:
                self._transition_task = None
