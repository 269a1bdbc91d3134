from __future__ import annotations

import logging
from enum import Enum, auto
from typing import Any, List, Optional, Sequence, TYPE_CHECKING

from esper import World

from mergegrid.components.block import Block
from mergegrid.events.bus import EventBus, EngineEvent
from mergegrid.events.payloads import DragEndPayload, DragPayload, SelectPayload
from mergegrid.input.pointer import prevent_default
from mergegrid.rendering.gateway import InputAdapter
from mergegrid.rules import selection_allowed
from mergegrid.systems.board import BoardSystem
from mergegrid.systems.board_ops import get_board, is_live, render_handle_for

if TYPE_CHECKING:
    from mergegrid.systems.merge import MergeSystem

logger = logging.getLogger(__name__)


class DragPhase(Enum):
    IDLE = auto()
    DRAGGING = auto()


class SelectionSystem:
    """Turns pointer gestures into an ordered block selection.

    IDLE -> DRAGGING on gesture start, DRAGGING grows the selection on move,
    DRAGGING -> IDLE on gesture end, where the merge resolver gets the
    finished selection.
    """

    def __init__(
        self,
        world: World,
        event_bus: EventBus,
        board_system: BoardSystem,
        merge_system: "MergeSystem",
        input_adapter: InputAdapter,
        *,
        hit_box_scale: float,
        rules: Sequence[Any] = (),
    ):
        self.world = world
        self.event_bus = event_bus
        self.board_system = board_system
        self.merge_system = merge_system
        self.input_adapter = input_adapter
        self.hit_box_scale = hit_box_scale
        self.rules = list(rules)
        self.phase = DragPhase.IDLE
        self.current_block: Optional[Block] = None
        self.selected_blocks: List[Block] = []

    @property
    def dragging(self) -> bool:
        return self.phase is DragPhase.DRAGGING

    def clear(self) -> None:
        self.phase = DragPhase.IDLE
        self.current_block = None
        self.selected_blocks = []

    async def start(self, raw_event: Any) -> None:
        before = await self.event_bus.publish(EngineEvent.BEFORE_DRAG, raw_event)
        if before.cancelled:
            return
        prevent_default(raw_event)
        if self.dragging:
            # A new gesture replaces one that never ended.
            await self._clear_highlights(self.selected_blocks)
        self.phase = DragPhase.DRAGGING
        self.current_block = None
        self.selected_blocks = []
        accepted = await self._track(raw_event)
        await self.event_bus.publish(
            EngineEvent.AFTER_DRAG, DragPayload(raw_event, self.current_block, accepted)
        )

    async def move(self, raw_event: Any) -> None:
        if not self.dragging:
            return
        before = await self.event_bus.publish(EngineEvent.BEFORE_DRAG, raw_event)
        if before.cancelled:
            return
        accepted = await self._track(raw_event)
        await self.event_bus.publish(
            EngineEvent.AFTER_DRAG, DragPayload(raw_event, self.current_block, accepted)
        )

    async def end(self, raw_event: Any) -> bool:
        """Finish the gesture; returns True when the selection merged."""
        if not self.dragging:
            return False
        before = await self.event_bus.publish(EngineEvent.BEFORE_DRAG_END, raw_event)
        if before.cancelled:
            return False
        self.phase = DragPhase.IDLE
        self.current_block = None
        selection = self.selected_blocks
        if not selection:
            await self.event_bus.publish(EngineEvent.AFTER_DRAG_END, DragEndPayload(raw_event, merged=False))
            return False

        merged = False
        if await self.merge_system.validate_merge(selection):
            merged = await self.merge_system.process_merge(selection)
        self.selected_blocks = []
        await self._clear_highlights(selection)
        await self.event_bus.publish(EngineEvent.AFTER_DRAG_END, DragEndPayload(raw_event, merged=merged))
        return merged

    async def _track(self, raw_event: Any) -> bool:
        coords = self.input_adapter.coordinates(raw_event)
        if coords is None:
            return False
        block = self.block_at_point(*coords)
        if block is None or block is self.current_block:
            return False
        board = get_board(self.world)
        if not await selection_allowed(self.rules, block, self.selected_blocks, board):
            logger.debug("Selection of %s at (%d, %d) rejected", block.id, block.row, block.col)
            return False
        before = await self.event_bus.publish(
            EngineEvent.BEFORE_SELECT, SelectPayload(block, list(self.selected_blocks))
        )
        if before.cancelled:
            return False
        self.current_block = block
        self.selected_blocks.append(block)
        await self.board_system.highlight(block)
        await self.event_bus.publish(EngineEvent.AFTER_SELECT, SelectPayload(block, self.selected_blocks))
        return True

    async def _clear_highlights(self, blocks: Sequence[Block]) -> None:
        seen: set[int] = set()
        for block in blocks:
            # Blocks consumed by a merge are already gone from the board.
            if id(block) in seen or not is_live(self.world, block):
                continue
            seen.add(id(block))
            await self.board_system.remove_highlight(block)

    def block_at_point(self, x: float, y: float) -> Optional[Block]:
        """First block in row-major order whose scaled bounds contain (x, y)."""
        for block in get_board(self.world).occupied():
            handle = render_handle_for(self.world, block)
            if handle is None:
                continue
            rect = self.input_adapter.bounds(handle)
            if rect is None:
                continue
            if rect.scaled(self.hit_box_scale).contains(x, y):
                return block
        return None
