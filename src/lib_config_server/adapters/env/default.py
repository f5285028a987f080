"""Environment variable adapter for service settings.

Purpose
-------
Translate ``CONFIG_SERVER_*`` process environment variables into the nested
settings mapping consumed by :mod:`lib_config_server.settings`, so container
deployments can select and configure a backend without a settings file.

Key behaviours
--------------
* Only variables starting with the prefix (default ``CONFIG_SERVER``) are read.
* ``__`` is the nesting delimiter (``CONFIG_SERVER_GIT__API_HOST`` becomes
  ``{"git": {"api_host": ...}}``).
* Light scalar coercion (bools, ints, floats, ``null``/``none``).
"""

from __future__ import annotations

import os
from typing import Final, Mapping

from ...observability import log_debug

DEFAULT_ENV_PREFIX: Final[str] = "CONFIG_SERVER"


class DefaultEnvLoader:
    """Load environment variables that belong to the settings namespace.

    With ``coerce=False`` values stay exactly as written, so identifiers such
    as ``007`` or ``1e3`` survive unchanged.
    """

    def __init__(self, *, environ: Mapping[str, str] | None = None, coerce: bool = True) -> None:
        self._environ = os.environ if environ is None else environ
        self._coerce = coerce

    def load(self, prefix: str = DEFAULT_ENV_PREFIX) -> dict[str, object]:
        """Return a nested mapping built from variables with the supplied *prefix*.

        Examples
        --------
        >>> env = {
        ...     'CONFIG_SERVER_PROVIDER': 'git',
        ...     'CONFIG_SERVER_GIT__REPO_OWNER': 'acme',
        ...     'CONFIG_SERVER_TIMEOUT': '2.5',
        ... }
        >>> payload = DefaultEnvLoader(environ=env).load()
        >>> payload['provider'], payload['git']['repo_owner'], payload['timeout']
        ('git', 'acme', 2.5)
        """

        prefix = f"{prefix}_" if prefix and not prefix.endswith("_") else prefix
        collected: dict[str, object] = {}
        for key, value in self._environ.items():
            if prefix and not key.startswith(prefix):
                continue
            stripped = key[len(prefix) :] if prefix else key
            if not stripped:
                continue
            assign_nested(collected, stripped, _coerce(value) if self._coerce else value)
        log_debug("env_settings_loaded", scope="settings", address=None, keys=sorted(collected.keys()))
        return collected


def assign_nested(target: dict[str, object], key: str, value: object) -> None:
    """Assign ``value`` inside ``target`` using ``__`` as a nesting delimiter.

    Examples
    --------
    >>> data: dict[str, object] = {}
    >>> assign_nested(data, 'MONGODB__URI', 'mongodb://db')
    >>> data
    {'mongodb': {'uri': 'mongodb://db'}}
    """

    parts = key.split("__")
    cursor = target
    for part in parts[:-1]:
        cursor = _ensure_child_mapping(cursor, part)
    cursor[parts[-1].lower()] = value


def _ensure_child_mapping(mapping: dict[str, object], key: str) -> dict[str, object]:
    """Ensure ``mapping[key]`` is a ``dict``; never replace an existing scalar."""

    resolved = key.lower()
    child = mapping.setdefault(resolved, {})
    if not isinstance(child, dict):
        raise ValueError(f"Cannot override scalar with mapping for key {key}")
    return child


def _coerce(value: str) -> object:
    """Coerce textual environment values to Python primitives where possible.

    Examples
    --------
    >>> _coerce('true'), _coerce('10'), _coerce('3.5'), _coerce('/srv/configs')
    (True, 10, 3.5, '/srv/configs')
    """

    lowered = value.lower()
    if lowered in {"true", "false"}:
        return lowered == "true"
    if lowered in {"null", "none"}:
        return None
    if value.isdigit() or (value.startswith("-") and value[1:].isdigit()):
        return int(value)
    try:
        return float(value)
    except ValueError:
        return value
