from __future__ import annotations

import logging
from typing import Any, Iterable, List, Optional, Sequence

from esper import World

from mergegrid.components.block import Block
from mergegrid.events.bus import EventBus, EngineEvent
from mergegrid.events.payloads import GridPosition, MergePayload, MergeValuePayload
from mergegrid.history import GridSnapshot, History
from mergegrid.rules import merge_allowed
from mergegrid.systems.block_factory import BlockFactory
from mergegrid.systems.board import BoardSystem
from mergegrid.systems.board_ops import get_board, install_block, is_live, remove_block

logger = logging.getLogger(__name__)


def distinct_blocks(selection: Iterable[Block]) -> List[Block]:
    seen: set[int] = set()
    result: List[Block] = []
    for block in selection:
        if id(block) in seen:
            continue
        seen.add(id(block))
        result.append(block)
    return result


class MergeSystem:
    """Validates finished selections and folds them into the last selected block."""

    def __init__(
        self,
        world: World,
        event_bus: EventBus,
        board_system: BoardSystem,
        factory: BlockFactory,
        history: History,
        *,
        rules: Sequence[Any] = (),
    ):
        self.world = world
        self.event_bus = event_bus
        self.board_system = board_system
        self.factory = factory
        self.history = history
        self.rules = list(rules)

    async def validate_merge(self, selection: Sequence[Block]) -> bool:
        if len(selection) < 2:
            return False
        return await merge_allowed(self.rules, selection, get_board(self.world))

    async def calculate_merge_value(self, blocks: Sequence[Block]) -> Optional[int]:
        """Sum of the selected values, a revisited block counting again, unless a
        handler overrides it. None if cancelled.
        """
        before = await self.event_bus.publish(EngineEvent.BEFORE_CALCULATE_MERGE_VALUE, list(blocks))
        if before.cancelled:
            return None
        merge_value = sum(block.value for block in blocks)
        after = await self.event_bus.publish(
            EngineEvent.AFTER_CALCULATE_MERGE_VALUE, MergeValuePayload(list(blocks), merge_value)
        )
        payload = after.payload
        if isinstance(payload, MergeValuePayload):
            return payload.merge_value
        if isinstance(payload, int):
            return payload
        return merge_value

    async def process_merge(self, selection: Sequence[Block]) -> bool:
        """Merge selection into its last block. Returns False, untouched, for a no-op."""
        before = await self.event_bus.publish(EngineEvent.BEFORE_PROCESS_MERGE, list(selection))
        if before.cancelled:
            return False
        blocks = distinct_blocks(selection)
        target = selection[-1] if selection else None
        if len(blocks) < 2 or target is None or not is_live(self.world, target):
            return False
        merge_value = await self.calculate_merge_value(selection)
        if merge_value is None or not is_live(self.world, target):
            return False

        board = get_board(self.world)
        self.history.push(GridSnapshot.capture(board))

        vacated: List[GridPosition] = []
        for block in blocks:
            if block is target:
                continue
            if not is_live(self.world, block):
                continue
            vacated.append(GridPosition(block.row, block.col))
            handle = remove_block(self.world, block)
            await self.board_system.retire_block(handle)
            if not is_live(self.world, target):
                logger.warning("Merge target %s left the board mid-merge; merge abandoned", target.id)
                return False

        target.value = merge_value
        if self.board_system.renderer is not None:
            await self.board_system.render_block(target)
        logger.debug(
            "Merged %d blocks into %s at (%d, %d) = %d",
            len(blocks), target.id, target.row, target.col, merge_value,
        )

        new_blocks = await self.fill_empty_positions(vacated)
        await self.event_bus.publish(
            EngineEvent.AFTER_PROCESS_MERGE,
            MergePayload(blocks=blocks, target=target, merge_value=merge_value, new_blocks=new_blocks),
        )
        return True

    async def fill_empty_positions(self, positions: Sequence[GridPosition]) -> List[Block]:
        before = await self.event_bus.publish(EngineEvent.BEFORE_FILL_EMPTY_POSITIONS, list(positions))
        if before.cancelled:
            return []
        board = get_board(self.world)
        new_blocks: List[Block] = []
        for pos in positions:
            if not board.is_empty(pos.row, pos.col):
                logger.debug("Skipping backfill of occupied cell (%d, %d)", pos.row, pos.col)
                continue
            block = await self.factory.generate(pos.row, pos.col)
            if block is None:
                continue
            install_block(self.world, block)
            if self.board_system.renderer is not None:
                await self.board_system.render_block(block)
            new_blocks.append(block)
        after = await self.event_bus.publish(EngineEvent.AFTER_FILL_EMPTY_POSITIONS, new_blocks)
        return after.payload if after.payload is not None else new_blocks
