import random

from esper import World

from mergegrid.components.board import Board
from mergegrid.config import EngineConfig
from mergegrid.events.bus import EventBus


def create_world(
    event_bus: EventBus,
    config: EngineConfig | None = None,
    *,
    rng: random.Random | None = None,
) -> World:
    """Create a World holding one empty Board sized from config."""
    config = config or EngineConfig()
    world = World()
    setattr(world, "random", rng or random.Random())
    setattr(world, "event_bus", event_bus)
    world.create_entity(Board(rows=config.grid_size.rows, cols=config.grid_size.cols))
    return world
