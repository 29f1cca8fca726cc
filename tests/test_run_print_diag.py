from __future__ import annotations

import pytest

pytest.importorskip("duckdb")
pytest.importorskip("pandas")

from printdiag.dump import CLASSPATH_START
from printdiag.latch import OneShotLatch
from printdiag.session import Session
from printdiag.tools import run_print_diag
from printdiag.udf import PrintDiagnosticsUDF


@pytest.fixture(autouse=True)
def _private_latch(monkeypatch):
    monkeypatch.setattr(
        run_print_diag,
        "PrintDiagnosticsUDF",
        lambda: PrintDiagnosticsUDF(latch=OneShotLatch()),
    )


def test_display_only(capsys):
    assert run_print_diag.main(["--display", "col_a"]) == 0
    captured = capsys.readouterr()
    assert captured.out.strip() == "print_diag(col_a)"
    assert captured.err == ""


def test_requires_sql(capsys):
    assert run_print_diag.main([]) == 2
    assert "--sql is required" in capsys.readouterr().err


def test_runs_query_and_dumps_to_stderr(capsys):
    code = run_print_diag.main(["--sql", "SELECT print_diag('hello') AS greeting"])
    assert code == 0
    captured = capsys.readouterr()
    assert "hello" in captured.out
    assert "greeting" in captured.out
    assert captured.err.count(CLASSPATH_START) == 1


def test_session_flag_dumps_connection_settings(capsys):
    code = run_print_diag.main(["--session", "--sql", "SELECT print_diag('x') AS v"])
    assert code == 0
    assert "duckdb.threads=" in capsys.readouterr().err


def test_query_failure_exit_code(capsys):
    assert run_print_diag.main(["--sql", "SELECT * FROM missing_table"]) == 1
    assert "Query failed" in capsys.readouterr().err


def test_bad_argument_type_exit_code(capsys):
    assert run_print_diag.main(["--arg-type", "INTEGER[", "--sql", "SELECT 1"]) == 2
    assert "Could not register" in capsys.readouterr().err


def test_existing_session_is_left_active(capsys):
    outer = Session.start({"outer.key": "kept"})
    assert run_print_diag.main(["--sql", "SELECT print_diag('x') AS v"]) == 0
    assert Session.get() is outer
    assert "outer.key=kept" in capsys.readouterr().err


def test_session_flag_clears_only_its_own_session():
    assert run_print_diag.main(["--session", "--sql", "SELECT 1 AS one"]) == 0
    assert Session.get() is None
