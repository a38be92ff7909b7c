"""Join primitive over N asynchronous prerequisites.

A ``HoldBarrier`` counts outstanding holds. Every acquired hold hands back a
single-use :class:`HoldRelease`; releasing it decrements the counter and
notifies the owner, which decides whether it is now ready to proceed.
Coroutines can also ``await barrier.wait()`` for the counter to reach zero.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable

from .errors import HoldReleaseError


class HoldRelease:
    """Single-use handle returned by :meth:`HoldBarrier.acquire`.

    Calling the handle releases the hold. A second call raises
    ``HoldReleaseError`` instead of silently driving the counter negative.
    """

    def __init__(self, barrier: "HoldBarrier", label: str) -> None:
        self._barrier = barrier
        self.label = label
        self.released = False

    def __call__(self) -> None:
        if self.released:
            raise HoldReleaseError(f"Hold '{self.label}' has already been released.")
        self.released = True
        self._barrier._release(self)

    def __repr__(self) -> str:
        state = "released" if self.released else "pending"
        return f"<HoldRelease {self.label!r} {state}>"


class HoldBarrier:
    """Counter of outstanding holds with a completion signal.

    ``wait()`` resolves whenever no hold is outstanding. The signal is reset
    by ``acquire`` and set again by the release that brings the counter back
    to zero.

    Args:
        on_release: Called with no arguments after every release, once the
            counter has been decremented. Exceptions it raises propagate out
            of the release call.
    """

    def __init__(self, on_release: Callable[[], None] | None = None) -> None:
        self._on_release = on_release
        self._pending = 0
        self._acquired = 0
        self.closed = False
        self._clear = asyncio.Event()
        self._clear.set()

    @property
    def pending(self) -> int:
        """Number of holds acquired but not yet released."""
        return self._pending

    @property
    def acquired(self) -> int:
        """Total number of holds ever acquired."""
        return self._acquired

    @property
    def is_clear(self) -> bool:
        return self._pending == 0

    def acquire(self, label: str = "") -> HoldRelease:
        """Register one more prerequisite and return its release handle.

        Raises:
            HoldReleaseError: If the barrier has been closed.
        """
        if self.closed:
            raise HoldReleaseError("Cannot acquire a hold on a closed barrier.")
        self._pending += 1
        self._acquired += 1
        self._clear.clear()
        return HoldRelease(self, label or f"hold-{self._acquired}")

    def close(self) -> None:
        """Reject any further ``acquire`` calls."""
        self.closed = True

    def _release(self, handle: HoldRelease) -> None:
        if self._pending <= 0:
            raise HoldReleaseError(
                f"Hold '{handle.label}' released with no outstanding holds."
            )
        self._pending -= 1
        if self._pending == 0:
            self._clear.set()
        if self._on_release is not None:
            self._on_release()

    async def wait(self) -> None:
        """Block until every acquired hold has been released."""
        await self._clear.wait()
