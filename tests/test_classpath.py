from __future__ import annotations

import os
import sys

from printdiag.classpath import classpath_entries, classpath_string, split_classpath


def test_split_preserves_order():
    raw = os.pathsep.join(["/opt/a", "/opt/b", "/opt/c"])
    assert split_classpath(raw) == ["/opt/a", "/opt/b", "/opt/c"]


def test_split_keeps_empty_entries():
    raw = f"/opt/a{os.pathsep}{os.pathsep}/opt/b"
    assert split_classpath(raw) == ["/opt/a", "", "/opt/b"]
    assert split_classpath("") == [""]


def test_split_with_explicit_separator():
    assert split_classpath("a;b;c", ";") == ["a", "b", "c"]


def test_classpath_reflects_sys_path(monkeypatch):
    monkeypatch.setattr(sys, "path", ["", "/srv/lib", "/srv/site-packages"])
    assert classpath_string() == os.pathsep.join(["", "/srv/lib", "/srv/site-packages"])
    assert classpath_entries() == ["", "/srv/lib", "/srv/site-packages"]
