"""Typed payloads carried by engine events."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from mergegrid.components.block import Block


@dataclass(frozen=True, slots=True)
class GridPosition:
    row: int
    col: int


@dataclass(slots=True)
class SelectPayload:
    block: "Block"
    selection: List["Block"]


@dataclass(slots=True)
class DragPayload:
    raw_event: Any
    block: Optional["Block"]
    accepted: bool


@dataclass(slots=True)
class DragEndPayload:
    raw_event: Any
    merged: bool


@dataclass(slots=True)
class MergeValuePayload:
    blocks: List["Block"]
    merge_value: int


@dataclass(slots=True)
class MergePayload:
    blocks: List["Block"]
    target: "Block"
    merge_value: int
    new_blocks: List["Block"] = field(default_factory=list)
