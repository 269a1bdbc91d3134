from __future__ import annotations

import itertools
import logging
import random
from typing import Optional

from esper import World

from mergegrid.components.block import Block
from mergegrid.config import ValueRange
from mergegrid.events.bus import EventBus, EngineEvent
from mergegrid.events.payloads import GridPosition

logger = logging.getLogger(__name__)

_block_ids = itertools.count(1)


def next_block_id(row: int, col: int) -> str:
    return f"block-{row}-{col}-{next(_block_ids)}"


class BlockFactory:
    """Produces blocks whose value is drawn uniformly from the configured progression."""

    def __init__(self, world: World, event_bus: EventBus, value_range: ValueRange):
        self.world = world
        self.event_bus = event_bus
        self.value_range = value_range
        self._values = value_range.legal_values()

    @property
    def rng(self) -> random.Random:
        rng = getattr(self.world, "random", None)
        if isinstance(rng, random.Random):
            return rng
        return random

    def legal_values(self) -> list[int]:
        return list(self._values)

    async def generate(self, row: int, col: int) -> Optional[Block]:
        """Return a new block for (row, col), or None if generation was cancelled."""
        before = await self.event_bus.publish(EngineEvent.BEFORE_GENERATE_BLOCK, GridPosition(row, col))
        if before.cancelled:
            logger.debug("Block generation at (%d, %d) cancelled", row, col)
            return None
        value = self.rng.choice(self._values)
        block = Block(id=next_block_id(row, col), value=value, row=row, col=col)
        after = await self.event_bus.publish(EngineEvent.AFTER_GENERATE_BLOCK, block)
        return after.payload if after.payload is not None else block
