"""Register ``print_diag`` as a DuckDB scalar function.

DuckDB calls Python UDFs one value at a time, so the registered callable
forwards each value to the UDF instance.  NULL handling is set to
``special`` so that NULL rows still reach ``evaluate`` (and can trip the one-shot dump), and the
function is flagged as having side effects so the planner never folds it
into a constant.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Union

import duckdb

from printdiag.session import ActiveSession, Session
from printdiag.udf import FUNCTION_NAME, PrintDiagnosticsUDF

LOGGER = logging.getLogger(__name__)

STRING_TYPES = {"VARCHAR", "TEXT", "STRING", "CHAR", "BPCHAR"}

# A SQL type string such as "DECIMAL(18,3)" or an already-parsed DuckDB type.
TypeLike = Union[str, Any]


def _ensure_connection(conn_or_url: Optional[object]) -> duckdb.DuckDBPyConnection:
    if isinstance(conn_or_url, duckdb.DuckDBPyConnection):
        return conn_or_url
    if conn_or_url is None:
        raise ValueError("A DuckDB connection or database path is required")
    if isinstance(conn_or_url, str):
        if conn_or_url.startswith("duckdb:///"):
            path = conn_or_url.split("duckdb:///")[1]
        else:
            path = conn_or_url
        return duckdb.connect(path)
    raise TypeError(f"Unsupported connection type: {type(conn_or_url)!r}")


def _as_duckdb_type(type_like: TypeLike) -> Any:
    """Parse ``type_like`` with DuckDB's own type parser."""

    if not isinstance(type_like, str):
        return type_like
    try:
        return duckdb.sqltype(type_like.strip())
    except duckdb.Error as exc:
        raise ValueError(f"Unsupported DuckDB argument type: {type_like!r}") from exc


def _is_string_type(type_like: TypeLike, parsed: Any) -> bool:
    return (
        str(type_like).strip().upper() in STRING_TYPES
        or str(parsed).strip().upper() in STRING_TYPES
    )


def register_print_diag(
    conn_or_url: object,
    *,
    name: str = FUNCTION_NAME,
    argument_type: TypeLike = "VARCHAR",
    udf: Optional[PrintDiagnosticsUDF] = None,
    session: Optional[Session] = None,
) -> duckdb.DuckDBPyConnection:
    """Register the diagnostics UDF on ``conn_or_url`` and return the connection.

    ``initialize`` and type parsing run before any connection is opened, so
    a bad declaration fails before any row is processed and never leaves a
    database file open.  When ``session`` is given, the dump uses that
    session's configuration instead of looking one up at dump time.
    """

    udf = udf if udf is not None else PrintDiagnosticsUDF()
    result_type = udf.initialize([argument_type])
    parameter = _as_duckdb_type(argument_type)
    returns = _as_duckdb_type(result_type)
    if not _is_string_type(argument_type, parameter):
        LOGGER.warning(
            "%s declared with %s argument but a fixed %s result; values are passed through unchanged",
            name,
            argument_type,
            result_type,
        )

    opened = not isinstance(conn_or_url, duckdb.DuckDBPyConnection)
    conn = _ensure_connection(conn_or_url)
    if session is not None:
        udf.provider = ActiveSession(session)

    def print_diag(value):
        return udf(value)

    try:
        conn.create_function(
            name,
            print_diag,
            [parameter],
            returns,
            null_handling="special",
            side_effects=True,
        )
    except Exception:
        if opened:
            conn.close()
        raise
    LOGGER.debug("Registered %s(%s) -> %s", name, argument_type, result_type)
    return conn


def unregister_print_diag(conn: duckdb.DuckDBPyConnection, name: str = FUNCTION_NAME) -> None:
    conn.remove_function(name)
    LOGGER.debug("Removed %s", name)
