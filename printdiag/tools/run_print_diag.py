#!/usr/bin/env python3
"""run_print_diag.py — run a query with ``print_diag`` registered.

Opens a DuckDB database (in-memory by default), registers the diagnostics
UDF and executes ``--sql``.  The diagnostics dump goes to stderr the first
time the function is evaluated; the query result is printed to stdout.

Example::

    python -m printdiag.tools.run_print_diag \
        --sql "SELECT print_diag(name) FROM range(3) t(i), (SELECT 'x' AS name)"
"""

import argparse
import logging
import sys

import duckdb
import pandas as pd

from printdiag.db.duckdb_udf import register_print_diag
from printdiag.session import Session
from printdiag.udf import FUNCTION_NAME, PrintDiagnosticsUDF


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Run a DuckDB query with print_diag registered")
    ap.add_argument("--db", default=":memory:", help="DuckDB database path or duckdb:/// URL")
    ap.add_argument("--sql", help="Query to execute")
    ap.add_argument("--name", default=FUNCTION_NAME, help="Name to register the UDF under")
    ap.add_argument("--arg-type", default="VARCHAR", help="Declared argument type")
    ap.add_argument(
        "--session",
        action="store_true",
        help="Dump the connection's own settings instead of a default configuration",
    )
    ap.add_argument(
        "--display",
        metavar="EXPR",
        help="Print the plan display string for print_diag(EXPR) and exit",
    )
    ap.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    return ap


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    udf = PrintDiagnosticsUDF()
    if args.display:
        print(udf.get_display_string([args.display]))
        return 0
    if not args.sql:
        print("--sql is required unless --display is given", file=sys.stderr)
        return 2

    try:
        conn = register_print_diag(args.db, name=args.name, argument_type=args.arg_type, udf=udf)
    except (ValueError, TypeError, duckdb.Error) as exc:
        print(f"Could not register {args.name}: {exc}", file=sys.stderr)
        return 2

    session = None
    try:
        if args.session:
            session = Session.for_connection(conn).activate()
        try:
            frame = conn.execute(args.sql).df()
        except duckdb.Error as exc:
            print(f"Query failed: {exc}", file=sys.stderr)
            return 1
    finally:
        if session is not None:
            session.deactivate()
        conn.close()

    with pd.option_context("display.max_rows", None, "display.max_columns", None):
        print(frame.to_string(index=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
