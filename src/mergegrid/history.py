"""Handle-free grid snapshots and the bounded undo history."""
from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from typing import Deque, Iterator, Optional, Tuple

from mergegrid.components.block import Block
from mergegrid.components.board import Board

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class BlockSnapshot:
    id: str
    value: int
    row: int
    col: int

    @classmethod
    def of(cls, block: Block) -> "BlockSnapshot":
        return cls(id=block.id, value=block.value, row=block.row, col=block.col)

    def to_block(self) -> Block:
        return Block(id=self.id, value=self.value, row=self.row, col=self.col)


@dataclass(frozen=True, slots=True)
class GridSnapshot:
    rows: int
    cols: int
    cells: Tuple[Tuple[Optional[BlockSnapshot], ...], ...]

    @classmethod
    def capture(cls, board: Board) -> "GridSnapshot":
        cells = tuple(
            tuple(BlockSnapshot.of(block) if block is not None else None for block in row)
            for row in board.cells
        )
        return cls(rows=board.rows, cols=board.cols, cells=cells)

    def block_at(self, row: int, col: int) -> Optional[BlockSnapshot]:
        return self.cells[row][col]

    def values(self) -> list[list[Optional[int]]]:
        return [[snap.value if snap is not None else None for snap in row] for row in self.cells]


class History:
    """Bounded FIFO of grid snapshots; the oldest entry is evicted first."""

    def __init__(self, depth: int):
        self.depth = depth
        self._entries: Deque[GridSnapshot] = deque(maxlen=depth)

    def push(self, snapshot: GridSnapshot) -> None:
        if self.depth and len(self._entries) == self.depth:
            logger.debug("History full (%d), evicting oldest snapshot", self.depth)
        self._entries.append(snapshot)

    def pop(self) -> Optional[GridSnapshot]:
        if not self._entries:
            return None
        return self._entries.pop()

    def latest(self) -> Optional[GridSnapshot]:
        return self._entries[-1] if self._entries else None

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[GridSnapshot]:
        return iter(self._entries)
