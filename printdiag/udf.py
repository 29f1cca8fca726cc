"""The ``print_diag`` UDF: a pass-through that dumps diagnostics once.

The host engine calls :meth:`PrintDiagnosticsUDF.initialize` once when the
query is prepared and :meth:`PrintDiagnosticsUDF.evaluate` for every row.
The first evaluation in the process (as decided by the shared latch) writes
the diagnostics dump; every evaluation returns its argument untouched.

The declared result type is always ``VARCHAR`` even though ``evaluate``
returns the input as-is.  Engines that check the declared type may reject or
cast non-string inputs.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Sequence, TextIO

from printdiag.dump import dump_diagnostics
from printdiag.latch import PROCESS_LATCH, OneShotLatch
from printdiag.session import ConfigurationProvider

LOGGER = logging.getLogger(__name__)

FUNCTION_NAME = "print_diag"
RESULT_TYPE = "VARCHAR"


class UDFArgumentError(ValueError):
    """Raised when a UDF is declared with unusable arguments."""


class ArgumentCountError(UDFArgumentError):
    """Raised when a UDF receives the wrong number of arguments."""


class DeferredValue:
    """An argument slot whose value is produced on demand."""

    __slots__ = ("_value",)

    def __init__(self, value: Any) -> None:
        self._value = value

    def get(self) -> Any:
        return self._value


def _resolve(slot: Any) -> Any:
    if isinstance(slot, DeferredValue):
        return slot.get()
    return slot


class PrintDiagnosticsUDF:
    def __init__(
        self,
        latch: Optional[OneShotLatch] = None,
        sink: Optional[TextIO] = None,
        provider: Optional[ConfigurationProvider] = None,
    ) -> None:
        self.latch = latch if latch is not None else PROCESS_LATCH
        self.sink = sink
        self.provider = provider

    def initialize(self, argument_types: Sequence[Any]) -> str:
        """Validate the argument list and return the declared result type."""

        if len(argument_types) != 1:
            raise ArgumentCountError("This UDF requires exactly one argument.")
        # Any argument type is accepted.
        return RESULT_TYPE

    def evaluate(self, arguments: Sequence[Any]) -> Any:
        if self.latch.try_fire():
            LOGGER.debug("First %s evaluation in this process; dumping diagnostics", FUNCTION_NAME)
            dump_diagnostics(self.sink, provider=self.provider)

        if len(arguments) > 0 and arguments[0] is not None:
            return _resolve(arguments[0])
        return None

    def __call__(self, value: Any) -> Any:
        return self.evaluate([DeferredValue(value)])

    def get_display_string(self, children: Sequence[str]) -> str:
        return f"{FUNCTION_NAME}({children[0]})"
