import asyncio
from typing import Any, Callable, Optional


class Debouncer:
    """
    Trailing-edge debounce on the running asyncio loop.

    Each `trigger` cancels the pending firing and schedules a new one, so the
    callback runs once with the last value after input settles for `delay`
    seconds.
    """

    def __init__(self, delay: float, callback: Callable[[Any], Any]):
        self.delay = delay
        self.callback = callback
        self._handle: Optional[asyncio.TimerHandle] = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def trigger(self, value: Any) -> None:
        self.cancel()
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self.delay, self._fire, value)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self, value: Any) -> None:
        self._handle = None
        self.callback(value)
