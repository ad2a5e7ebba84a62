import asyncio
import time
from typing import Callable, Generic, Optional, TypeVar

T = TypeVar("T")


class Debouncer(Generic[T]):
    """Emit the latest pushed value once `delay` seconds pass without a new push.

    The clock is injectable so tests can drive it by hand.
    """

    def __init__(self, delay: float, clock: Callable[[], float] = time.monotonic) -> None:
        self.delay = delay
        self._clock = clock
        self._value: Optional[T] = None
        self._deadline: Optional[float] = None

    @property
    def pending(self) -> bool:
        return self._deadline is not None

    def push(self, value: T) -> None:
        self._value = value
        self._deadline = self._clock() + self.delay

    def poll(self) -> Optional[T]:
        """Return the settled value if its quiet period has elapsed, else None."""
        if self._deadline is None or self._clock() < self._deadline:
            return None
        return self._take()

    def flush(self) -> Optional[T]:
        """Emit whatever is pending right now."""
        if self._deadline is None:
            return None
        return self._take()

    def cancel(self) -> None:
        self._value = None
        self._deadline = None

    async def wait(self) -> Optional[T]:
        """Sleep until the pending value settles; pushes made meanwhile extend the wait."""
        while self._deadline is not None:
            remaining = self._deadline - self._clock()
            if remaining <= 0:
                return self._take()
            await asyncio.sleep(remaining)
        return None

    def _take(self) -> Optional[T]:
        value = self._value
        self._value = None
        self._deadline = None
        return value
