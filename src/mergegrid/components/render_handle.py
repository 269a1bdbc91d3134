from dataclasses import dataclass
from typing import Any


@dataclass(slots=True)
class RenderHandle:
    """Opaque reference to a block's visual, owned by the rendering gateway.

    Lives on the block entity next to Block so snapshots of Block never see it.
    """
    handle: Any
