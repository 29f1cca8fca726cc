"""Configuration snapshots, sessions and the providers that pick between them.

A dump needs "the effective configuration" of the process.  When an
application has started a :class:`Session` (typically one per DuckDB
connection) its configuration is used as-is.  Otherwise a fresh default
configuration is assembled from built-in values, the DuckDB engine defaults,
an optional YAML site file and ``PRINTDIAG_CONF_*`` environment overrides.

Building the default configuration never raises: every layer that can fail
is logged and skipped so that diagnostics cannot break a running query.
"""

from __future__ import annotations

import logging
import os
import platform
import sys
import threading
from pathlib import Path
from typing import Any, Dict, Iterator, Mapping, MutableMapping, Optional, Protocol, Tuple, Union

import duckdb
import yaml

LOGGER = logging.getLogger(__name__)

SITE_CONF_ENV = "PRINTDIAG_SITE_CONF"
DEFAULT_SITE_CONF = "printdiag-site.yml"
CONF_ENV_PREFIX = "PRINTDIAG_CONF_"

_ACTIVE_LOCK = threading.Lock()
_ACTIVE: Optional["Session"] = None


def _as_text(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class Configuration(MutableMapping[str, str]):
    """Ordered ``str -> str`` mapping; iteration follows insertion order."""

    def __init__(self, values: Optional[Mapping[Any, Any]] = None) -> None:
        self._values: Dict[str, str] = {}
        if values:
            self.update(values)

    def __getitem__(self, key: str) -> str:
        return self._values[key]

    def __setitem__(self, key: Any, value: Any) -> None:
        self._values[_as_text(key)] = _as_text(value)

    def __delitem__(self, key: str) -> None:
        del self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"Configuration({len(self._values)} entries)"

    @classmethod
    def from_duckdb(cls, conn: duckdb.DuckDBPyConnection, *, prefix: str = "duckdb.") -> "Configuration":
        """Snapshot the settings of ``conn`` into a new configuration."""

        conf = cls()
        rows = conn.execute("SELECT name, value FROM duckdb_settings()").fetchall()
        for name, value in rows:
            conf[f"{prefix}{name}"] = value
        return conf

    @classmethod
    def default(cls) -> "Configuration":
        """Build a fresh default configuration.  Never raises."""

        conf = cls(_builtin_defaults())
        conf.update(_engine_defaults())
        conf.update(load_site_conf())
        conf.update(env_overrides())
        return conf


def _builtin_defaults() -> Dict[str, str]:
    from printdiag import __version__

    return {
        "printdiag.version": __version__,
        "printdiag.python.version": platform.python_version(),
        "printdiag.python.executable": sys.executable or "",
        "printdiag.platform": platform.platform(),
        "printdiag.pid": str(os.getpid()),
    }


def _engine_defaults() -> Dict[str, str]:
    try:
        conn = duckdb.connect(":memory:")
    except duckdb.Error as exc:
        LOGGER.warning("Could not open a DuckDB probe connection: %s", exc)
        return {}
    try:
        return dict(Configuration.from_duckdb(conn))
    except duckdb.Error as exc:
        LOGGER.warning("Could not read DuckDB default settings: %s", exc)
        return {}
    finally:
        conn.close()


def _flatten(
    data: Mapping[Any, Any], parent: str = "", ancestors: Tuple[int, ...] = ()
) -> Dict[str, str]:
    # YAML aliases can make a mapping contain itself.
    ancestors = ancestors + (id(data),)
    flat: Dict[str, str] = {}
    for key, value in data.items():
        name = f"{parent}.{key}" if parent else str(key)
        if isinstance(value, Mapping):
            if id(value) in ancestors:
                raise ValueError(f"cyclic alias at {name!r}")
            flat.update(_flatten(value, name, ancestors))
        elif isinstance(value, (list, tuple)):
            flat[name] = ",".join(_as_text(item) for item in value)
        else:
            flat[name] = _as_text(value)
    return flat


def load_site_conf(path: Union[str, os.PathLike, None] = None) -> Dict[str, str]:
    """Load and flatten the YAML site file, or return ``{}``.

    ``path`` defaults to ``$PRINTDIAG_SITE_CONF`` and then to
    ``printdiag-site.yml`` in the working directory.  Missing files are
    normal; unreadable or malformed ones are logged and ignored.
    """

    site = Path(path or os.getenv(SITE_CONF_ENV) or DEFAULT_SITE_CONF)
    if not site.exists():
        return {}
    try:
        with site.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
    except (OSError, UnicodeDecodeError, yaml.YAMLError) as exc:
        LOGGER.warning("Ignoring unreadable site configuration %s: %s", site, exc)
        return {}
    if not isinstance(data, Mapping):
        LOGGER.warning("Ignoring site configuration %s: top level is not a mapping", site)
        return {}
    try:
        return _flatten(data)
    except ValueError as exc:
        LOGGER.warning("Ignoring site configuration %s: %s", site, exc)
        return {}


def env_overrides(environ: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
    """Collect ``PRINTDIAG_CONF_<KEY>`` variables as ``<key>`` entries.

    ``<KEY>`` is lower-cased and ``__`` becomes ``.``, so
    ``PRINTDIAG_CONF_DUCKDB__THREADS=4`` overrides ``duckdb.threads``.
    """

    env = os.environ if environ is None else environ
    overrides: Dict[str, str] = {}
    for name, value in env.items():
        if not name.startswith(CONF_ENV_PREFIX) or name == CONF_ENV_PREFIX:
            continue
        key = name[len(CONF_ENV_PREFIX):].lower().replace("__", ".")
        overrides[key] = value
    return overrides


class Session:
    """An active session carrying the configuration queries run under."""

    def __init__(self, conf: Optional[Mapping[str, Any]] = None) -> None:
        if isinstance(conf, Configuration):
            self.conf = conf
        else:
            self.conf = Configuration(conf)

    @classmethod
    def for_connection(cls, conn: duckdb.DuckDBPyConnection) -> "Session":
        return cls(Configuration.from_duckdb(conn))

    @classmethod
    def start(cls, conf: Optional[Mapping[str, Any]] = None) -> "Session":
        """Create a session and make it the process-wide active one."""

        return cls(conf).activate()

    @staticmethod
    def get() -> Optional["Session"]:
        return _ACTIVE

    @staticmethod
    def detach() -> None:
        global _ACTIVE
        with _ACTIVE_LOCK:
            _ACTIVE = None

    def activate(self) -> "Session":
        global _ACTIVE
        with _ACTIVE_LOCK:
            _ACTIVE = self
        LOGGER.debug("Activated session with %d configuration entries", len(self.conf))
        return self

    def __enter__(self) -> "Session":
        return self.activate()

    def deactivate(self) -> None:
        """Clear the active slot, but only if this session still holds it."""

        global _ACTIVE
        with _ACTIVE_LOCK:
            if _ACTIVE is self:
                _ACTIVE = None

    def __exit__(self, *exc_info: object) -> None:
        self.deactivate()


class ConfigurationProvider(Protocol):
    name: str

    def configuration(self) -> Mapping[str, str]:
        ...


class ActiveSession:
    name = "session"

    def __init__(self, session: Any) -> None:
        self.session = session

    def configuration(self) -> Mapping[str, str]:
        return self.session.conf


class DefaultConfiguration:
    name = "default"

    def configuration(self) -> Mapping[str, str]:
        return Configuration.default()


def select_provider(session: Any = None) -> ConfigurationProvider:
    """Pick the provider for ``session`` (or the active session).

    A session qualifies when it exposes a ``conf`` mapping; anything else,
    including no session at all, falls back to :class:`DefaultConfiguration`.
    """

    if session is None:
        session = Session.get()
    if session is not None and isinstance(getattr(session, "conf", None), Mapping):
        return ActiveSession(session)
    return DefaultConfiguration()
