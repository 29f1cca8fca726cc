"""Helpers for reading the interpreter load path."""
from __future__ import annotations

import os
import sys
from typing import List, Optional


def classpath_string() -> str:
    """Return ``sys.path`` as a single ``os.pathsep``-delimited string."""

    return os.pathsep.join(str(entry) for entry in sys.path)


def split_classpath(raw: str, separator: Optional[str] = None) -> List[str]:
    """Split ``raw`` into ordered entries.

    Empty entries are kept: an empty string on the load path stands for the
    current directory and is printed as a blank line.
    """

    return raw.split(separator or os.pathsep)


def classpath_entries() -> List[str]:
    return split_classpath(classpath_string())
