from __future__ import annotations

import asyncio
import logging
import threading
from concurrent.futures import Future
from typing import Any, Awaitable, Callable, Optional

logger = logging.getLogger(__name__)


class AsyncRunner:
    """Runs coroutines on one background event loop for the Tk main thread.

    Network calls (asset downloads, AI requests) and exports are awaited
    here; results are marshalled back with ``widget.after`` so Tk widgets and
    the element store are only ever touched from the main thread.
    """

    def __init__(self) -> None:
        self.loop = asyncio.new_event_loop()
        self._thread = threading.Thread(target=self._run, name="souvy-async", daemon=True)
        self._thread.start()

    def _run(self) -> None:
        asyncio.set_event_loop(self.loop)
        self.loop.run_forever()

    def submit(
        self,
        coro: Awaitable[Any],
        widget=None,
        on_done: Optional[Callable[[Any], None]] = None,
        on_error: Optional[Callable[[BaseException], None]] = None,
    ) -> Future:
        """Schedule ``coro`` and call ``on_done``/``on_error`` with its outcome.

        With a ``widget`` the callbacks run on the Tk thread via ``after``;
        without one they run on the loop thread.
        """
        future = asyncio.run_coroutine_threadsafe(coro, self.loop)
        if on_done is None and on_error is None:
            return future

        def _call(fn: Callable, arg: Any) -> None:
            if widget is None:
                fn(arg)
                return
            try:
                widget.after(0, lambda: fn(arg))
            except Exception:
                # Widget destroyed before the task finished
                logger.debug("Dropping result for destroyed widget")

        def _deliver(fut: Future) -> None:
            try:
                result = fut.result()
            except Exception as e:
                logger.exception("Background task failed")
                if on_error is not None:
                    _call(on_error, e)
                return
            if on_done is not None:
                _call(on_done, result)

        future.add_done_callback(_deliver)
        return future

    def stop(self) -> None:
        self.loop.call_soon_threadsafe(self.loop.stop)
        self._thread.join(timeout=2)
