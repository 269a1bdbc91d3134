from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

from blinker import Signal

logger = logging.getLogger(__name__)


class EngineEvent(str, Enum):
    """Lifecycle events published by the engine.

    Every ``before:*`` event is cancelable; ``after:*`` events carry a payload
    that handlers may replace to override the operation's result.
    """

    # Lifecycle
    BEFORE_INITIALIZE = "before:initialize"
    AFTER_INITIALIZE = "after:initialize"
    BEFORE_RESET = "before:reset"                              # payload: None
    AFTER_RESET = "after:reset"                                # payload: Board
    BEFORE_UNDO = "before:undo"                                # payload: None
    AFTER_UNDO = "after:undo"                                  # payload: GridSnapshot

    # Generation
    BEFORE_GENERATE_STATE = "before:generateState"             # payload: GridSize
    AFTER_GENERATE_STATE = "after:generateState"               # payload: list[list[Block | None]]
    BEFORE_GENERATE_BLOCK = "before:generateBlock"             # payload: GridPosition
    AFTER_GENERATE_BLOCK = "after:generateBlock"               # payload: Block

    # Rendering
    BEFORE_RENDER_GRID = "before:renderGrid"                   # payload: GridSize
    AFTER_RENDER_GRID = "after:renderGrid"                     # payload: GridSize
    BEFORE_RENDER_BLOCK = "before:renderBlock"                 # payload: Block
    AFTER_RENDER_BLOCK = "after:renderBlock"                   # payload: Block
    BEFORE_HIGHLIGHT = "before:highlight"                      # payload: Block
    AFTER_HIGHLIGHT = "after:highlight"                        # payload: Block
    BEFORE_REMOVE_HIGHLIGHT = "before:removeHighlight"         # payload: Block
    AFTER_REMOVE_HIGHLIGHT = "after:removeHighlight"           # payload: Block

    # Gestures
    BEFORE_DRAG = "before:drag"                                # payload: raw input event
    AFTER_DRAG = "after:drag"                                  # payload: DragPayload
    BEFORE_SELECT = "before:select"                            # payload: SelectPayload
    AFTER_SELECT = "after:select"                              # payload: SelectPayload
    BEFORE_DRAG_END = "before:dragEnd"                         # payload: raw input event
    AFTER_DRAG_END = "after:dragEnd"                           # payload: DragEndPayload

    # Merging
    BEFORE_CALCULATE_MERGE_VALUE = "before:calculateMergeValue"  # payload: list[Block]
    AFTER_CALCULATE_MERGE_VALUE = "after:calculateMergeValue"    # payload: MergeValuePayload
    BEFORE_PROCESS_MERGE = "before:processMerge"                 # payload: list[Block]
    AFTER_PROCESS_MERGE = "after:processMerge"                   # payload: MergePayload
    BEFORE_FILL_EMPTY_POSITIONS = "before:fillEmptyPositions"    # payload: list[GridPosition]
    AFTER_FILL_EMPTY_POSITIONS = "after:fillEmptyPositions"      # payload: list[Block]


EventName = Union[EngineEvent, str]


@dataclass(slots=True)
class Event:
    """Mutable record handed to each handler during one publish."""

    name: str
    payload: Any = None
    _cancelled: bool = field(default=False, repr=False)
    _stopped: bool = field(default=False, repr=False)

    def cancel(self) -> None:
        """Cancel the operation and stop dispatch to later handlers."""
        self._cancelled = True
        self._stopped = True

    def stop_propagation(self) -> None:
        """Skip later handlers; the operation still goes ahead."""
        self._stopped = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def propagation_stopped(self) -> bool:
        return self._stopped


@dataclass(frozen=True, slots=True)
class EventResult:
    cancelled: bool
    payload: Any = None


Handler = Callable[[Event], Optional[Awaitable[None]]]


def _key(name: EventName) -> str:
    return name.value if isinstance(name, Enum) else str(name)


class EventBus:
    """Ordered, awaitable event bus leveraging blinker Signal objects.

    Each event name owns one Signal; its receivers mapping keeps connection
    order, which is the dispatch order.
    """

    def __init__(self):
        self._signals: Dict[str, Signal] = {}
        self._once: Dict[str, List[Handler]] = {}

    def subscribe(self, name: EventName, fn: Handler) -> Handler:
        key = _key(name)
        sig = self._signals.setdefault(key, Signal(key))
        # Use weak=False so lambdas and bound methods of unreferenced objects stay connected.
        sig.connect(fn, weak=False)
        return fn

    def subscribe_once(self, name: EventName, fn: Handler) -> Handler:
        self.subscribe(name, fn)
        self._once.setdefault(_key(name), []).append(fn)
        return fn

    def unsubscribe(self, name: EventName, fn: Handler | None = None) -> None:
        key = _key(name)
        sig = self._signals.get(key)
        if sig is None:
            return
        if fn is None:
            del self._signals[key]
            self._once.pop(key, None)
            return
        sig.disconnect(fn)
        once = self._once.get(key)
        if once and fn in once:
            once.remove(fn)
        if not sig.receivers:
            del self._signals[key]

    def unsubscribe_all(self) -> None:
        """Drop every handler for every event name."""
        for sig in self._signals.values():
            for fn in list(sig.receivers.values()):
                sig.disconnect(fn)
        self._signals.clear()
        self._once.clear()

    def handlers(self, name: EventName) -> List[Handler]:
        sig = self._signals.get(_key(name))
        if sig is None:
            return []
        return list(sig.receivers.values())

    async def publish(self, name: EventName, payload: Any = None) -> EventResult:
        key = _key(name)
        # Snapshot so subscriptions changed by handlers only apply to the next publish.
        callbacks = self.handlers(key)
        if not callbacks:
            return EventResult(cancelled=False, payload=payload)
        event = Event(name=key, payload=payload)
        for fn in callbacks:
            try:
                result = fn(event)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.error("Handler %r failed while handling %s", fn, key)
                raise
            finally:
                self._discard_once(key, fn)
            if event.propagation_stopped:
                break
        return EventResult(cancelled=event.cancelled, payload=event.payload)

    def _discard_once(self, key: str, fn: Handler) -> None:
        once = self._once.get(key)
        if not once or fn not in once:
            return
        once.remove(fn)
        sig = self._signals.get(key)
        if sig is not None:
            sig.disconnect(fn)
            if not sig.receivers:
                del self._signals[key]
