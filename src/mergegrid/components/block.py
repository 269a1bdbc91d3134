from dataclasses import dataclass, field


@dataclass(slots=True, eq=False)
class Block:
    """A numbered tile occupying one grid cell.

    Compared by identity: two blocks with the same value and position are
    still different blocks. ``entity`` is the esper entity the block lives on
    once installed on the board (-1 before that).
    """
    id: str
    value: int
    row: int
    col: int
    entity: int = field(default=-1, repr=False)

    @property
    def position(self) -> tuple[int, int]:
        return self.row, self.col
