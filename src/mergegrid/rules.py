"""Selection and merge rules.

A selection rule decides whether a candidate block may join the current
selection; a merge rule decides whether a finished selection may merge.
Rules are evaluated in registration order and the first refusal wins.
Plain callables with the matching signature are accepted anywhere a rule is.
"""
from __future__ import annotations

import inspect
from typing import Any, Callable, Iterable, List, Protocol, Sequence, TYPE_CHECKING

from mergegrid.systems.board_ops import is_adjacent

if TYPE_CHECKING:
    from mergegrid.components.block import Block
    from mergegrid.components.board import Board


class SelectionRule(Protocol):
    def allows(self, block: "Block", selection: Sequence["Block"], board: "Board") -> bool:
        ...


class MergeRule(Protocol):
    def allows(self, selection: Sequence["Block"], board: "Board") -> bool:
        ...


def _predicate(rule: Any) -> Callable[..., Any]:
    allows = getattr(rule, "allows", None)
    if callable(allows):
        return allows
    if callable(rule):
        return rule
    raise TypeError(f"{rule!r} is neither a rule nor a callable")


async def _evaluate(rules: Iterable[Any], *args: Any) -> bool:
    for rule in rules:
        result = _predicate(rule)(*args)
        if inspect.isawaitable(result):
            result = await result
        if not result:
            return False
    return True


async def selection_allowed(
    rules: Iterable[Any], block: "Block", selection: Sequence["Block"], board: "Board"
) -> bool:
    return await _evaluate(rules, block, selection, board)


async def merge_allowed(rules: Iterable[Any], selection: Sequence["Block"], board: "Board") -> bool:
    return await _evaluate(rules, selection, board)


class AdjacentToLast:
    """Candidate must share an edge with the most recently selected block."""

    def allows(self, block, selection, board) -> bool:
        if not selection:
            return True
        return is_adjacent(selection[-1].position, block.position)


class NotAlreadySelected:
    def allows(self, block, selection, board) -> bool:
        return all(block is not chosen for chosen in selection)


class SameValueAsFirst:
    def allows(self, block, selection, board) -> bool:
        return not selection or selection[0].value == block.value


class MinimumSelection:
    def __init__(self, count: int = 2):
        self.count = count

    def allows(self, selection, board) -> bool:
        return len(selection) >= self.count


class AllSameValue:
    def allows(self, selection, board) -> bool:
        values = {block.value for block in selection}
        return len(values) <= 1


def default_selection_rules() -> List[SelectionRule]:
    """Classic chain rules: connected path, no revisits, one value."""
    return [AdjacentToLast(), NotAlreadySelected(), SameValueAsFirst()]
