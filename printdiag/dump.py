"""Write the load path and effective configuration to a diagnostic sink."""
from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass
from typing import Optional, Sequence, TextIO

from printdiag.classpath import classpath_entries
from printdiag.session import ConfigurationProvider, select_provider
from printdiag.util.diagnostics import diag_path, write_jsonl

LOGGER = logging.getLogger(__name__)

CLASSPATH_START = "--- DUMPING TEZ TASK CLASSPATH (in order) ---"
CLASSPATH_END = "--- END OF CLASSPATH DUMP ---"
CONFIG_START = "--- DUMPING TEZ TASK CONFIGURATION ---"
CONFIG_END = "--- END OF CONFIGURATION DUMP ---"


@dataclass(frozen=True)
class DumpSummary:
    classpath_entries: int
    config_entries: int
    provider: str


def dump_diagnostics(
    sink: Optional[TextIO] = None,
    *,
    provider: Optional[ConfigurationProvider] = None,
    classpath: Optional[Sequence[str]] = None,
) -> DumpSummary:
    """Dump the classpath and configuration to ``sink`` (stderr by default).

    ``classpath`` and ``provider`` are resolved at call time when omitted, so
    the output reflects the process as it is at the moment of the dump.
    """

    out = sink if sink is not None else sys.stderr
    entries = list(classpath) if classpath is not None else classpath_entries()

    out.write("\n" + CLASSPATH_START + "\n")
    for entry in entries:
        out.write(f"{entry}\n")
    out.write(CLASSPATH_END + "\n\n")

    chosen = provider if provider is not None else select_provider()
    conf = chosen.configuration()
    out.write(CONFIG_START + "\n")
    count = 0
    for key, value in conf.items():
        out.write(f"{key}={value}\n")
        count += 1
    out.write(CONFIG_END + "\n")
    out.flush()

    summary = DumpSummary(
        classpath_entries=len(entries),
        config_entries=count,
        provider=getattr(chosen, "name", type(chosen).__name__),
    )
    LOGGER.debug(
        "Dumped %d classpath entries and %d configuration entries (%s)",
        summary.classpath_entries,
        summary.config_entries,
        summary.provider,
    )

    path = diag_path()
    if path:
        write_jsonl(
            path,
            {
                "phase": "print_diag_dump",
                "pid": os.getpid(),
                "classpath_entries": summary.classpath_entries,
                "config_entries": summary.config_entries,
                "provider": summary.provider,
            },
        )
    return summary
