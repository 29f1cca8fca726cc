from __future__ import annotations

import io
import os
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from printdiag.latch import OneShotLatch
from printdiag.session import Session


@pytest.fixture
def latch() -> OneShotLatch:
    return OneShotLatch()


@pytest.fixture
def sink() -> io.StringIO:
    return io.StringIO()


@pytest.fixture(autouse=True)
def _no_active_session(monkeypatch, tmp_path):
    # Keep the default configuration independent of the developer's
    # environment and working directory.
    for name in list(os.environ):
        if name.startswith("PRINTDIAG_"):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    Session.detach()
    yield
    Session.detach()
