"""Lightweight diagnostics helpers."""
from __future__ import annotations

import json
import logging
import os
import time
from pathlib import Path
from typing import Any, Mapping, Optional

LOGGER = logging.getLogger(__name__)

DIAG_PATH_ENV = "PRINTDIAG_DIAG_PATH"


def diag_path() -> Optional[str]:
    """Return the JSONL diagnostics path from the environment, if any."""

    return os.getenv(DIAG_PATH_ENV) or None


def write_jsonl(path: str | os.PathLike[str], record: Mapping[str, Any]) -> None:
    """Append a JSON object with a timestamp to ``path`` as JSONL."""
    try:
        p = Path(path)
        p.parent.mkdir(parents=True, exist_ok=True)
        payload = dict(record)
        payload.setdefault("_ts", int(time.time()))
        with p.open("a", encoding="utf-8") as fh:
            fh.write(json.dumps(payload, ensure_ascii=False, default=str) + "\n")
    except Exception as exc:  # noqa: BLE001 - diagnostics must never block a query
        LOGGER.debug("Could not write diagnostics record to %s: %s", path, exc)
