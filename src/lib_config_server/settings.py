"""Service settings: which backend is active and how to reach it.

Purpose
-------
Collect the static configuration the composition root needs to construct
exactly one provider at start-up. Settings are layered: an optional structured
file (TOML, YAML or JSON) first, then ``CONFIG_SERVER_*`` environment variables
on top.

Contents
--------
* :class:`ProviderKind` – the closed set of backend variants.
* :class:`FileSystemSettings`, :class:`GitSettings`, :class:`VaultSettings`,
  :class:`MongoDBSettings`, :class:`UrlSettings` – per-backend sections.
* :class:`Settings` – the root value object.
* :func:`load_settings` – read file + environment layers into :class:`Settings`.

Example settings file::

    provider = "git"
    timeout = 5

    [git]
    api_host = "https://api.github.com"
    context_root = "repos"
    repo_owner = "acme"
    repo_name = "light-service-configs-{projectName}-{environment}"
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Final, Mapping

from .adapters.decoders.structured import load_file
from .adapters.env.default import DEFAULT_ENV_PREFIX, DefaultEnvLoader
from .domain.errors import NotFound, SettingsError
from .observability import log_debug

DEFAULT_TIMEOUT: Final[float] = 5.0


class ProviderKind(str, Enum):
    """Backend variants; one is active per deployment."""

    FILESYSTEM = "filesystem"
    GIT = "git"
    VAULT = "vault"
    MONGODB = "mongodb"
    URL = "url"


@dataclass(frozen=True, slots=True)
class FileSystemSettings:
    service_configs_dir: str | None = None


@dataclass(frozen=True, slots=True)
class GitSettings:
    """Git REST API coordinates.

    ``repo_name`` may contain ``{projectName}`` and ``{environment}``
    placeholders; when blank, the ``light-service-configs-{projectName}-{environment}``
    convention is used per request.
    """

    api_host: str | None = None
    context_root: str | None = None
    repo_owner: str | None = None
    repo_name: str | None = None
    proxy: str | None = None


@dataclass(frozen=True, slots=True)
class VaultSettings:
    server_uri: str | None = None


@dataclass(frozen=True, slots=True)
class MongoDBSettings:
    uri: str | None = None
    database: str | None = None
    collection: str | None = None


@dataclass(frozen=True, slots=True)
class UrlSettings:
    host: str | None = None
    service_configs_dir: str = "/"


@dataclass(frozen=True, slots=True)
class Settings:
    """Root settings object.

    Examples
    --------
    >>> settings = Settings.from_mapping({"provider": "filesystem", "filesystem": {"service_configs_dir": "/srv"}})
    >>> settings.provider, settings.filesystem.service_configs_dir
    (<ProviderKind.FILESYSTEM: 'filesystem'>, '/srv')
    """

    provider: ProviderKind = ProviderKind.VAULT
    timeout: float = DEFAULT_TIMEOUT
    filesystem: FileSystemSettings = field(default_factory=FileSystemSettings)
    git: GitSettings = field(default_factory=GitSettings)
    vault: VaultSettings = field(default_factory=VaultSettings)
    mongodb: MongoDBSettings = field(default_factory=MongoDBSettings)
    url: UrlSettings = field(default_factory=UrlSettings)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Settings":
        """Build settings from a nested mapping, raising :class:`SettingsError` on bad values."""

        provider_value = str(data.get("provider") or ProviderKind.VAULT.value).strip().lower()
        try:
            provider = ProviderKind(provider_value)
        except ValueError as exc:
            choices = ", ".join(kind.value for kind in ProviderKind)
            raise SettingsError(f"Unknown provider {provider_value!r}; expected one of: {choices}") from exc

        try:
            timeout = float(data.get("timeout", DEFAULT_TIMEOUT))
        except (TypeError, ValueError) as exc:
            raise SettingsError(f"Invalid timeout {data.get('timeout')!r}") from exc
        if not math.isfinite(timeout) or timeout <= 0:
            raise SettingsError(f"Timeout must be a positive finite number, got {timeout}")

        return cls(
            provider=provider,
            timeout=timeout,
            filesystem=_section(FileSystemSettings, data, "filesystem"),
            git=_section(GitSettings, data, "git"),
            vault=_section(VaultSettings, data, "vault"),
            mongodb=_section(MongoDBSettings, data, "mongodb"),
            url=_section(UrlSettings, data, "url"),
        )


def load_settings(
    path: str | Path | None = None,
    *,
    environ: Mapping[str, str] | None = None,
    prefix: str = DEFAULT_ENV_PREFIX,
) -> Settings:
    """Return settings from *path* (optional) overlaid by environment variables.

    Raises
    ------
    SettingsError
        When *path* is given but missing, or a value is invalid.
    ParseError
        When the settings file cannot be decoded.
    """

    layers: list[Mapping[str, Any]] = []
    if path is not None:
        try:
            layers.append(load_file(path))
        except NotFound as exc:
            raise SettingsError(f"Settings file not found: {path}") from exc
        log_debug("settings_file_loaded", scope="settings", address=str(path))
    layers.append(DefaultEnvLoader(environ=environ, coerce=False).load(prefix))

    merged: dict[str, Any] = {}
    for layer in layers:
        _overlay(merged, layer)
    return Settings.from_mapping(merged)


def require(value: str | None, name: str) -> str:
    """Return *value* or raise :class:`SettingsError` naming the missing setting."""

    if value is None or not str(value).strip():
        raise SettingsError(f"Missing required setting: {name}")
    return value


def _section(cls: type, data: Mapping[str, Any], name: str) -> Any:
    raw = data.get(name) or {}
    if not isinstance(raw, Mapping):
        raise SettingsError(f"Settings section {name!r} must be a mapping")
    known = set(cls.__dataclass_fields__)
    unknown = sorted(set(raw) - known)
    if unknown:
        raise SettingsError(f"Unknown settings in section {name!r}: {', '.join(unknown)}")
    return cls(**{key: None if value is None else str(value) for key, value in raw.items()})


def _overlay(target: dict[str, Any], incoming: Mapping[str, Any]) -> None:
    """Merge *incoming* into *target*, recursing into nested sections."""

    for key, value in incoming.items():
        existing = target.get(key)
        if isinstance(value, Mapping) and isinstance(existing, dict):
            _overlay(existing, value)
        elif isinstance(value, Mapping):
            target[key] = dict(value)
        else:
            target[key] = value
