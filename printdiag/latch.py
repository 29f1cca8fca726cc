"""Process-wide one-shot latch."""
from __future__ import annotations

import threading


class OneShotLatch:
    """A flag that moves from unfired to fired exactly once.

    ``try_fire`` returns ``True`` to the first caller only, no matter how many
    threads race for it.  The latch can never be reset.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._fired = False

    def try_fire(self) -> bool:
        # The read and the write happen under one lock acquisition so two
        # racing callers cannot both observe the unfired state.
        with self._lock:
            if self._fired:
                return False
            self._fired = True
            return True

    @property
    def fired(self) -> bool:
        return self._fired

    def __repr__(self) -> str:
        state = "FIRED" if self._fired else "UNFIRED"
        return f"OneShotLatch({state})"


# Lives for the whole process; every UDF instance shares it unless given its own.
PROCESS_LATCH = OneShotLatch()
