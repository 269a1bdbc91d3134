import random

import pytest

from mergegrid.components.block import Block
from mergegrid.config import ValueRange
from mergegrid.events.bus import EventBus, EngineEvent
from mergegrid.systems.block_factory import BlockFactory
from mergegrid.world import create_world


def _factory(bus=None, **range_kwargs):
    bus = bus or EventBus()
    world = create_world(bus, rng=random.Random(3))
    value_range = ValueRange(**({"min": 2, "max": 16, "increment_power": 2} | range_kwargs))
    return BlockFactory(world, bus, value_range), bus


@pytest.mark.asyncio
async def test_generated_values_stay_in_progression():
    factory, _ = _factory()
    values = set()
    for i in range(200):
        block = await factory.generate(i % 3, i % 2)
        assert block.value in {2, 4, 8, 16}
        values.add(block.value)
    assert values == {2, 4, 8, 16}


@pytest.mark.asyncio
async def test_generated_blocks_carry_position_and_unique_ids():
    factory, _ = _factory()
    a = await factory.generate(1, 2)
    b = await factory.generate(1, 2)
    assert (a.row, a.col) == (1, 2)
    assert a.id != b.id


@pytest.mark.asyncio
async def test_cancelled_generation_yields_no_block():
    factory, bus = _factory()
    bus.subscribe(EngineEvent.BEFORE_GENERATE_BLOCK, lambda event: event.cancel())
    assert await factory.generate(0, 0) is None


@pytest.mark.asyncio
async def test_after_generate_replacement_becomes_the_block():
    factory, bus = _factory()

    def always_two(event):
        block = event.payload
        event.payload = Block(id=block.id, value=2, row=block.row, col=block.col)

    bus.subscribe(EngineEvent.AFTER_GENERATE_BLOCK, always_two)
    for _ in range(20):
        assert (await factory.generate(0, 0)).value == 2


@pytest.mark.asyncio
async def test_before_generate_payload_is_the_position():
    factory, bus = _factory()
    seen = []
    bus.subscribe(EngineEvent.BEFORE_GENERATE_BLOCK, lambda event: seen.append((event.payload.row, event.payload.col)))
    await factory.generate(2, 1)
    assert seen == [(2, 1)]
