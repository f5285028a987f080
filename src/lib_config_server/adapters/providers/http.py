"""Shared ``httpx`` transport for network-backed providers.

Purpose
-------
Send single-attempt requests to the Git, Vault and plain HTTP backends and
normalise their failure signals into the domain taxonomy:

* connection errors and timeouts -> :class:`BackendUnavailable`
* ``404`` -> :class:`NotFound`
* any other status ``>= 300`` -> :class:`UpstreamError` carrying the backend
  status and message verbatim
* undecodable JSON bodies -> :class:`ParseError`

The ``httpx.Client`` is constructed once by the composition root and passed in,
so its connection pool is shared across requests and the timeout bounds every
scope fetch.
"""

from __future__ import annotations

from typing import Any, Mapping

import httpx

from ...domain.errors import BackendUnavailable, NotFound, ParseError, UpstreamError
from ...observability import log_debug, log_error


def new_client(base_url: str, *, timeout: float, proxy: str | None = None) -> httpx.Client:
    """Return a pooled client bound to *base_url* with a per-request *timeout*."""

    return httpx.Client(base_url=base_url, timeout=timeout, proxy=proxy or None)


class HttpTransport:
    """Single-attempt request helper bound to one backend.

    Parameters
    ----------
    client:
        Pre-configured ``httpx.Client`` (base URL, timeout, proxy).
    backend:
        Short backend name used in logs and error messages.
    """

    def __init__(self, client: httpx.Client, *, backend: str) -> None:
        self._client = client
        self._backend = backend

    @property
    def client(self) -> httpx.Client:
        return self._client

    def close(self) -> None:
        """Release pooled connections; the transport is unusable afterwards."""

        self._client.close()

    def get(
        self,
        path: str,
        *,
        headers: Mapping[str, str] | None = None,
        params: Mapping[str, str] | None = None,
    ) -> httpx.Response:
        """GET *path* and return the successful response."""

        return self.request("GET", path, headers=headers, params=params)

    def get_json(
        self,
        path: str,
        *,
        headers: Mapping[str, str] | None = None,
        params: Mapping[str, str] | None = None,
    ) -> Any:
        return self.decode_json(self.get(path, headers=headers, params=params), source=path)

    def post_json(self, path: str, *, body: Mapping[str, Any], headers: Mapping[str, str] | None = None) -> Any:
        return self.decode_json(self.request("POST", path, headers=headers, json=body), source=path)

    def request(
        self,
        method: str,
        path: str,
        *,
        headers: Mapping[str, str] | None = None,
        params: Mapping[str, str] | None = None,
        json: Mapping[str, Any] | None = None,
    ) -> httpx.Response:
        """Send one request and translate failures into domain errors."""

        log_debug("backend_request", backend=self._backend, method=method, address=path)
        try:
            response = self._client.request(method, path, headers=headers, params=params, json=json)
        except httpx.TransportError as exc:
            log_error("backend_unreachable", backend=self._backend, address=path, error=str(exc))
            raise BackendUnavailable(f"Could not connect to {self._backend} backend at {path}: {exc}") from exc

        status = response.status_code
        if status == httpx.codes.NOT_FOUND:
            log_debug("backend_not_found", backend=self._backend, address=path)
            raise NotFound(f"Path not found in {self._backend}: {path}")
        if status >= 300:
            message = error_message(response)
            log_error("backend_error", backend=self._backend, address=path, status=status, error=message)
            raise UpstreamError(message, status_code=status)
        return response

    @staticmethod
    def decode_json(response: httpx.Response, *, source: str) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise ParseError(f"Invalid JSON response from {source}: {exc}") from exc


def error_message(response: httpx.Response) -> str:
    """Extract the backend's diagnostic text from an error response.

    Git answers with ``{"message": ...}``, Vault with ``{"errors": [...]}``;
    anything else is returned as raw text.
    """

    try:
        body = response.json()
    except ValueError:
        return response.text
    if isinstance(body, Mapping):
        if isinstance(body.get("message"), str):
            return body["message"]
        errors = body.get("errors")
        if isinstance(errors, list):
            return "; ".join(str(item) for item in errors)
    return response.text
