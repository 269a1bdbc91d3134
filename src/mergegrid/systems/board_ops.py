from __future__ import annotations

from typing import Any, Iterable, List, Optional, Tuple

from esper import World

from mergegrid.components.block import Block
from mergegrid.components.board import Board
from mergegrid.components.render_handle import RenderHandle
from mergegrid.history import GridSnapshot

Position = Tuple[int, int]


def get_board(world: World) -> Board:
    for _, board in world.get_component(Board):
        return board
    raise RuntimeError("Board not found")


def install_block(world: World, block: Block) -> Block:
    """Create an entity for block and place it on the board."""
    board = get_board(world)
    if block.entity < 0 or not world.entity_exists(block.entity):
        block.entity = world.create_entity(block)
    board.place(block)
    return block


def remove_block(world: World, block: Block) -> Optional[Any]:
    """Clear block's cell and delete its entity. Returns its render handle, if any."""
    board = get_board(world)
    if board.contains(block):
        board.clear(block.row, block.col)
    handle = render_handle_for(world, block)
    if block.entity >= 0 and world.entity_exists(block.entity):
        world.delete_entity(block.entity, immediate=True)
    block.entity = -1
    return handle


def clear_board(world: World) -> List[Any]:
    """Remove every block from the board; returns the handles they carried."""
    board = get_board(world)
    handles: List[Any] = []
    for block in list(board.occupied()):
        handle = remove_block(world, block)
        if handle is not None:
            handles.append(handle)
    return handles


def install_grid(world: World, grid: Iterable[Iterable[Optional[Block]]]) -> List[Block]:
    """Replace the board contents wholesale with grid (row-major rows of Block or None)."""
    clear_board(world)
    installed: List[Block] = []
    for row in grid:
        for block in row:
            if block is None:
                continue
            installed.append(install_block(world, block))
    return installed


def restore_snapshot(world: World, snapshot: GridSnapshot) -> List[Block]:
    grid = [
        [snap.to_block() if snap is not None else None for snap in row]
        for row in snapshot.cells
    ]
    return install_grid(world, grid)


def render_handle_for(world: World, block: Block) -> Optional[Any]:
    if block.entity < 0 or not world.entity_exists(block.entity):
        return None
    comp = world.try_component(block.entity, RenderHandle)
    return comp.handle if comp is not None else None


def set_render_handle(world: World, block: Block, handle: Any) -> None:
    try:
        comp = world.component_for_entity(block.entity, RenderHandle)
    except KeyError:
        world.add_component(block.entity, RenderHandle(handle=handle))
    else:
        comp.handle = handle


def is_live(world: World, block: Block) -> bool:
    return block.entity >= 0 and world.entity_exists(block.entity) and get_board(world).contains(block)


def is_adjacent(a: Position, b: Position) -> bool:
    ar, ac = a
    br, bc = b
    return (abs(ar - br) == 1 and ac == bc) or (abs(ac - bc) == 1 and ar == br)
