"""
Cooperative cancellation.

Long running loops call :meth:`Interrupter.check` on the interrupter that
belongs to their :class:`~regionkit.Region.utility.RegionUtility`. Another
thread (or a signal handler) calls :meth:`Interrupter.request` and the next
poll unwinds the whole computation with
:class:`~regionkit.exceptions.SynthesisInterrupted`.

.. code-block:: python

    from regionkit.interrupt import Interrupter

    interrupter = Interrupter()
    timer = threading.Timer(10.0, interrupter.request)
    timer.start()
    result = synthesize(ts, SynthesisOptions(interrupter=interrupter))
"""

from __future__ import annotations

import threading
import time
from typing import Optional

from .exceptions import SynthesisInterrupted


class Interrupter:
    """
    A cancellation flag that can optionally expire after a deadline.

    :param timeout: Seconds after construction at which the interrupter
        fires on its own. ``None`` disables the deadline.
    :type timeout: float | None
    """

    def __init__(self, timeout: Optional[float] = None) -> None:
        self._event = threading.Event()
        self._deadline = None if timeout is None else time.monotonic() + timeout

    def request(self) -> None:
        """Ask every computation polling this interrupter to stop."""
        self._event.set()

    def is_requested(self) -> bool:
        if self._event.is_set():
            return True
        if self._deadline is not None and time.monotonic() >= self._deadline:
            self._event.set()
            return True
        return False

    def check(self) -> None:
        """Raise :class:`SynthesisInterrupted` if cancellation was requested."""
        if self.is_requested():
            raise SynthesisInterrupted()

    def remaining_ms(self) -> Optional[int]:
        """Milliseconds left until the deadline, used as solver timeout."""
        if self._deadline is None:
            return None
        return max(1, int((self._deadline - time.monotonic()) * 1000))


class NeverInterrupted(Interrupter):
    """Interrupter that never fires; the default when none is supplied."""

    def request(self) -> None:
        pass

    def is_requested(self) -> bool:
        return False

    def check(self) -> None:
        pass


NEVER = NeverInterrupted()
