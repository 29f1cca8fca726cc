"""One-shot diagnostics UDF for DuckDB."""

from .latch import PROCESS_LATCH, OneShotLatch  # noqa: F401
from .udf import ArgumentCountError, DeferredValue, PrintDiagnosticsUDF, UDFArgumentError  # noqa: F401

__version__ = "0.1.0"

__all__ = [
    "PROCESS_LATCH",
    "OneShotLatch",
    "ArgumentCountError",
    "DeferredValue",
    "PrintDiagnosticsUDF",
    "UDFArgumentError",
]
