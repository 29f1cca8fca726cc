"""Engine registration helpers for the diagnostics UDF."""

from .duckdb_udf import register_print_diag, unregister_print_diag  # noqa: F401

__all__ = ["register_print_diag", "unregister_print_diag"]
