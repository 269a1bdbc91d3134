"""Entry point for the merge grid prototype.

Sets up the engine, the arcade gateway and an arcade window that pumps an
asyncio loop once per frame so engine coroutines can await fades.
"""
from __future__ import annotations

import asyncio
import logging

from arcade import Window, key, run

from mergegrid.constants import WINDOW_HEIGHT, WINDOW_WIDTH
from mergegrid.engine import MergeGridEngine
from mergegrid.input.pointer import POINTER_END, POINTER_MOVE, POINTER_START, PointerEvent
from mergegrid.rendering.arcade_gateway import ArcadeGateway
from mergegrid.rules import MinimumSelection, default_selection_rules

logger = logging.getLogger(__name__)


class MergeGridWindow(Window):
    def __init__(self):
        super().__init__(WINDOW_WIDTH, WINDOW_HEIGHT, "Merge Grid")
        self.set_update_rate(1 / 60)
        self.loop = asyncio.new_event_loop()
        self.gateway = ArcadeGateway(self)
        self.engine = MergeGridEngine(
            renderer=self.gateway,
            selection_rules=default_selection_rules(),
            merge_rules=[MinimumSelection(2)],
        )
        self._schedule(self.engine.initialize())

    def _schedule(self, coro) -> None:
        task = self.loop.create_task(coro)
        task.add_done_callback(self._report)

    @staticmethod
    def _report(task: asyncio.Task) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Engine task failed", exc_info=exc)

    def _pump(self) -> None:
        # Run every callback that is ready right now, then hand control back to arcade.
        self.loop.call_soon(self.loop.stop)
        self.loop.run_forever()

    def on_update(self, delta_time: float):
        self.gateway.update(delta_time)
        self._pump()

    def on_draw(self):
        self.clear()
        self.gateway.draw()

    def on_mouse_press(self, x, y, button, modifiers):
        self._schedule(self.engine.on_pointer_start(PointerEvent(POINTER_START, x=x, y=y, button=button)))

    def on_mouse_drag(self, x, y, dx, dy, buttons, modifiers):
        self._schedule(self.engine.on_pointer_move(PointerEvent(POINTER_MOVE, x=x, y=y, button=buttons)))

    def on_mouse_release(self, x, y, button, modifiers):
        self._schedule(self.engine.on_pointer_end(PointerEvent(POINTER_END, x=x, y=y, button=button)))

    def on_key_press(self, symbol, modifiers):
        if symbol == key.U:
            self._schedule(self.engine.undo())
        elif symbol == key.R:
            self._schedule(self.engine.reset())

    def on_close(self):
        self.loop.close()
        super().on_close()


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    MergeGridWindow()
    run()


if __name__ == "__main__":
    main()
