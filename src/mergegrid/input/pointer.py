from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Sequence, Tuple

from mergegrid.rendering.gateway import Rect, RenderingGateway

POINTER_START = "pointer_start"
POINTER_MOVE = "pointer_move"
POINTER_END = "pointer_end"
POINTER_CANCEL = "pointer_cancel"


@dataclass(slots=True)
class TouchPoint:
    x: float
    y: float


@dataclass(slots=True)
class PointerEvent:
    """Normalized pointer/touch event.

    Mouse input sets x/y; touch input fills touches (active contacts) or
    changed_touches (contacts that just lifted).
    """
    type: str
    x: Optional[float] = None
    y: Optional[float] = None
    button: int | None = None
    touches: Sequence[Any] = field(default_factory=tuple)
    changed_touches: Sequence[Any] = field(default_factory=tuple)
    default_prevented: bool = False

    def prevent_default(self) -> None:
        self.default_prevented = True


def _field(source: Any, name: str) -> Any:
    if isinstance(source, Mapping):
        return source.get(name)
    return getattr(source, name, None)


def _point(source: Any) -> Optional[Tuple[float, float]]:
    for x_name, y_name in (("client_x", "client_y"), ("x", "y")):
        x = _field(source, x_name)
        y = _field(source, y_name)
        if x is not None and y is not None:
            try:
                return float(x), float(y)
            except (TypeError, ValueError):
                return None
    return None


def extract_coordinates(raw_event: Any) -> Optional[Tuple[float, float]]:
    """Return (x, y) from a mouse-style or touch-style event, or None.

    Touch events use the first active contact, falling back to the first
    changed contact (touch end).
    """
    if raw_event is None:
        return None
    point = _point(raw_event)
    if point is not None:
        return point
    for name in ("touches", "changed_touches"):
        contacts = _field(raw_event, name)
        if contacts:
            return _point(contacts[0])
    return None


def prevent_default(raw_event: Any) -> None:
    hook = getattr(raw_event, "prevent_default", None)
    if callable(hook):
        hook()


class PointerInput:
    """Default input adapter: generic coordinate extraction plus the renderer's block bounds."""

    def __init__(self, renderer: RenderingGateway | None):
        self.renderer = renderer

    def coordinates(self, raw_event: Any) -> Optional[Tuple[float, float]]:
        return extract_coordinates(raw_event)

    def bounds(self, handle: Any) -> Optional[Rect]:
        if self.renderer is None or handle is None:
            return None
        return self.renderer.bounding_box(handle)
