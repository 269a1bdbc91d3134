import pytest

from tests.helpers import CELL, make_engine


async def _engine(scale):
    engine, _ = make_engine(hit_box_scale=scale)
    await engine.reset()
    return engine


@pytest.mark.asyncio
async def test_point_inside_block_resolves_to_it():
    engine = await _engine(1.0)
    block = engine.selection_system.block_at_point(1.5 * CELL, 2.5 * CELL)
    assert block is engine.board.block_at(2, 1)


@pytest.mark.asyncio
async def test_small_scale_leaves_gaps_between_blocks():
    engine = await _engine(0.5)
    # Near the corner of cell (0, 0), outside its central half.
    assert engine.selection_system.block_at_point(0.1 * CELL, 0.1 * CELL) is None
    assert engine.selection_system.block_at_point(0.5 * CELL, 0.5 * CELL) is engine.board.block_at(0, 0)


@pytest.mark.asyncio
async def test_double_scale_reaches_half_a_block_outside():
    engine, _ = make_engine(hit_box_scale=2.0, grid_size={"rows": 1, "cols": 1})
    await engine.reset()
    only = engine.board.block_at(0, 0)
    assert engine.selection_system.block_at_point(-0.5 * CELL, 0.5 * CELL) is only
    assert engine.selection_system.block_at_point(1.5 * CELL, 1.5 * CELL) is only
    assert engine.selection_system.block_at_point(1.6 * CELL, 0.5 * CELL) is None


@pytest.mark.asyncio
async def test_overlapping_hit_boxes_prefer_row_major_order():
    engine = await _engine(2.0)
    # On the shared edge of (0, 0) and (0, 1): the first in row-major order wins.
    assert engine.selection_system.block_at_point(1.0 * CELL, 0.5 * CELL) is engine.board.block_at(0, 0)


@pytest.mark.asyncio
async def test_zero_scale_never_hits():
    engine = await _engine(0.0)
    for row in range(3):
        for col in range(3):
            x = col * CELL + CELL / 2
            y = row * CELL + CELL / 2
            assert engine.selection_system.block_at_point(x, y) is None
            assert engine.selection_system.block_at_point(x + 1, y + 1) is None
