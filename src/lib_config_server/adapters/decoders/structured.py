"""Structured payload decoders and blob encoding.

Purpose
-------
Convert raw backend payloads into Python mappings the merge step understands,
and convert opaque certificate/file bytes into the base64 strings returned to
callers. The decoders are thin wrappers around ``yaml.safe_load``,
``json.loads`` and ``tomllib.loads`` so error translation and logging live in
one place.

Contents
--------
* :class:`BaseDecoder` – shared mapping validation.
* :class:`YAMLDecoder` / :class:`JSONDecoder` / :class:`TOMLDecoder` – format
  specific decoders (TOML is only used for local settings files).
* :func:`decoder_for` – pick a decoder from a file name suffix.
* :func:`read_file` / :func:`load_file` – local file helpers raising
  :class:`NotFound` for missing files.
* :func:`encode_blob` / :func:`decode_blob` / :func:`normalise_blob` – base64
  helpers for certs and files.

System Role
-----------
Every provider decodes configs payloads through :func:`decoder_for`; the
settings loader reuses :func:`load_file` for the service's own settings file.
"""

from __future__ import annotations

import base64
import binascii
import json
import tomllib
from pathlib import Path, PurePosixPath
from typing import Mapping

import yaml

from ...domain.errors import NotFound, ParseError
from ...observability import log_debug, log_error


class BaseDecoder:
    """Common utilities shared by the structured decoders."""

    format: str = "unknown"

    @staticmethod
    def _ensure_mapping(data: object, *, source: str) -> Mapping[str, object]:
        """Return *data* when it is a mapping, otherwise raise ``ParseError``.

        Examples
        --------
        >>> BaseDecoder._ensure_mapping({"key": 1}, source="demo")
        {'key': 1}
        >>> BaseDecoder._ensure_mapping([1, 2], source="demo")
        Traceback (most recent call last):
        ...
        lib_config_server.domain.errors.ParseError: Payload demo did not produce a mapping
        """

        if not isinstance(data, Mapping):
            raise ParseError(f"Payload {source} did not produce a mapping")
        return data

    def _invalid(self, source: str, exc: Exception) -> ParseError:
        log_error("payload_invalid", address=source, format=self.format, error=str(exc))
        return ParseError(f"Invalid {self.format.upper()} in {source}: {exc}")

    def _loaded(self, data: object, source: str) -> Mapping[str, object]:
        result = self._ensure_mapping(data, source=source)
        log_debug("payload_decoded", address=source, format=self.format, keys=len(result))
        return result


class YAMLDecoder(BaseDecoder):
    """Decode YAML documents; an empty document decodes to an empty mapping."""

    format = "yaml"

    def decode(self, payload: bytes | str, *, source: str) -> Mapping[str, object]:
        """Return the mapping encoded in *payload*.

        Examples
        --------
        >>> YAMLDecoder().decode(b"server:\\n  port: 8443\\n", source="values.yml")["server"]
        {'port': 8443}
        """

        try:
            data = yaml.safe_load(payload)
        except yaml.YAMLError as exc:
            raise self._invalid(source, exc) from exc
        if data is None:
            data = {}
        return self._loaded(data, source)


class JSONDecoder(BaseDecoder):
    """Decode JSON documents."""

    format = "json"

    def decode(self, payload: bytes | str, *, source: str) -> Mapping[str, object]:
        try:
            data = json.loads(payload)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise self._invalid(source, exc) from exc
        return self._loaded(data, source)


class TOMLDecoder(BaseDecoder):
    """Decode TOML documents (settings files only; no backend stores TOML)."""

    format = "toml"

    def decode(self, payload: bytes | str, *, source: str) -> Mapping[str, object]:
        try:
            text = payload.decode("utf-8") if isinstance(payload, bytes) else payload
            data = tomllib.loads(text)
        except (tomllib.TOMLDecodeError, UnicodeDecodeError) as exc:
            raise self._invalid(source, exc) from exc
        return self._loaded(data, source)


_DECODERS: dict[str, BaseDecoder] = {
    ".yml": YAMLDecoder(),
    ".yaml": YAMLDecoder(),
    ".json": JSONDecoder(),
    ".toml": TOMLDecoder(),
}


def decoder_for(name: str) -> YAMLDecoder | JSONDecoder | TOMLDecoder:
    """Return the decoder registered for *name*'s suffix.

    Raises
    ------
    ParseError
        When the suffix has no registered decoder.

    Examples
    --------
    >>> decoder_for("values.yaml").format
    'yaml'
    """

    decoder = _DECODERS.get(PurePosixPath(name).suffix.lower())
    if decoder is None:
        raise ParseError(f"No decoder registered for {name}")
    return decoder  # type: ignore[return-value]


def read_file(path: Path | str) -> bytes:
    """Read *path* as bytes, raising :class:`NotFound` when it is not a file."""

    file_path = Path(path)
    if not file_path.is_file():
        raise NotFound(f"File not found: {path}")
    payload = file_path.read_bytes()
    log_debug("file_read", address=str(path), size=len(payload))
    return payload


def load_file(path: Path | str) -> Mapping[str, object]:
    """Read and decode a structured file chosen by suffix."""

    return decoder_for(str(path)).decode(read_file(path), source=str(path))


def encode_blob(content: bytes) -> str:
    """Return the base64 representation used for certs and files.

    Examples
    --------
    >>> encode_blob(bytes([0x01, 0x02]))
    'AQI='
    """

    return base64.b64encode(content).decode("ascii")


def decode_blob(encoded: str, *, source: str) -> bytes:
    """Decode base64 text, tolerating the line breaks Git and MIME encoders add.

    Examples
    --------
    >>> decode_blob("c2VydmVy\\nOiB0cnVl", source="values.yml")
    b'server: true'
    """

    try:
        return base64.b64decode("".join(encoded.split()), validate=True)
    except (binascii.Error, ValueError) as exc:
        log_error("payload_invalid", address=source, format="base64", error=str(exc))
        raise ParseError(f"Invalid base64 content in {source}: {exc}") from exc


def normalise_blob(encoded: str, *, source: str) -> str:
    """Return *encoded* as canonical single-line base64."""

    return encode_blob(decode_blob(encoded, source=source))
