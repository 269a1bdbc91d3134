from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple

from mergegrid.components.block import Block

Position = Tuple[int, int]


@dataclass(slots=True)
class Board:
    """Fixed ``rows x cols`` arena; each cell holds a Block or None (empty).

    Row-major: ``cells[row][col]``.
    """
    rows: int
    cols: int
    cells: List[List[Optional[Block]]] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.cells:
            self.cells = [[None] * self.cols for _ in range(self.rows)]

    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self.rows and 0 <= col < self.cols

    def block_at(self, row: int, col: int) -> Optional[Block]:
        if not self.in_bounds(row, col):
            return None
        return self.cells[row][col]

    def is_empty(self, row: int, col: int) -> bool:
        return self.block_at(row, col) is None

    def place(self, block: Block) -> None:
        if not self.in_bounds(block.row, block.col):
            raise ValueError(f"({block.row}, {block.col}) is outside a {self.rows}x{self.cols} board")
        occupant = self.cells[block.row][block.col]
        if occupant is not None and occupant is not block:
            raise ValueError(f"cell ({block.row}, {block.col}) is already occupied by {occupant.id}")
        self.cells[block.row][block.col] = block

    def clear(self, row: int, col: int) -> Optional[Block]:
        if not self.in_bounds(row, col):
            return None
        block = self.cells[row][col]
        self.cells[row][col] = None
        return block

    def positions(self) -> Iterator[Position]:
        for row in range(self.rows):
            for col in range(self.cols):
                yield row, col

    def occupied(self) -> Iterator[Block]:
        """Yield live blocks in row-major order."""
        for row, col in self.positions():
            block = self.cells[row][col]
            if block is not None:
                yield block

    def empty_positions(self) -> List[Position]:
        return [(r, c) for r, c in self.positions() if self.cells[r][c] is None]

    def occupied_count(self) -> int:
        return sum(1 for _ in self.occupied())

    def contains(self, block: Block) -> bool:
        return self.block_at(block.row, block.col) is block

    def rows_view(self) -> List[List[Optional[Block]]]:
        """Shallow copy of the arena rows."""
        return [list(row) for row in self.cells]
