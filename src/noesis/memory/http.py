"""
HTTP plumbing shared by the networked vector stores.

- build_endpoint: host + port -> base URL, URI-builder style
- build_http_client: httpx.AsyncClient with strict TLS, optional CRL check,
  optional ``api-key`` header
- HttpVectorStore: base class with one ``_request`` helper that turns
  transport and status failures into BackendError

Client construction never touches the network. Connections open lazily on
the first request.
"""

from __future__ import annotations

import logging
import ssl
from typing import Any
from urllib.parse import urlsplit, urlunsplit

import httpx

from noesis.core.errors import BackendError, ConfigurationError
from noesis.memory.base import VectorStore

logger = logging.getLogger(__name__)

API_KEY_HEADER = "api-key"
DEFAULT_TIMEOUT = 30.0


def build_endpoint(host: str, port: int | None = None) -> str:
    """Build a base URL from a host and a port.

    ``"localhost", 6333`` -> ``"http://localhost:6333/"``
    ``"https://db.example.com:1234/v1", 443`` -> ``"https://db.example.com:443/v1/"``

    A missing scheme defaults to http. A port already present in the host
    is replaced. The result always ends with ``/``.
    """
    host = (host or "").strip()
    if not host:
        raise ConfigurationError("Memory store host is empty.", field="host")
    if "://" not in host:
        host = f"http://{host}"

    parts = urlsplit(host)
    hostname = parts.hostname
    if not hostname:
        raise ConfigurationError(f"Invalid memory store host: '{host}'.", field="host")
    if ":" in hostname:
        hostname = f"[{hostname}]"  # IPv6 literal

    if port is None:
        try:
            port = parts.port
        except ValueError as e:
            raise ConfigurationError(f"Invalid port in host '{host}'.", field="port") from e
    if port is not None and not 0 < int(port) < 65536:
        raise ConfigurationError(f"Invalid memory store port: {port}.", field="port")

    netloc = hostname if port is None else f"{hostname}:{int(port)}"
    path = parts.path if parts.path.endswith("/") else f"{parts.path}/"
    return urlunsplit((parts.scheme, netloc, path, parts.query, ""))


def build_ssl_context(
    check_certificate_revocation: bool = True, crl_file: str = ""
) -> ssl.SSLContext:
    """Default-verifying TLS context.

    Revocation is checked against ``crl_file`` when one is configured;
    OpenSSL has no online CRL fetching, so without a file the context
    falls back to standard chain verification.
    """
    context = ssl.create_default_context()
    if check_certificate_revocation and crl_file:
        try:
            context.load_verify_locations(cafile=crl_file)
        except (OSError, ssl.SSLError) as e:
            raise ConfigurationError(
                f"Could not load certificate revocation list '{crl_file}': {e}",
                field="crl_file",
            ) from e
        context.verify_flags |= ssl.VERIFY_CRL_CHECK_LEAF
    elif check_certificate_revocation:
        logger.debug("Certificate revocation requested but no CRL file configured")
    return context


def build_http_client(
    api_key: str = "",
    check_certificate_revocation: bool = True,
    crl_file: str = "",
    timeout: float = DEFAULT_TIMEOUT,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """An AsyncClient for one vector store. Safe to share across kernels."""
    headers = {}
    if api_key and api_key.strip():
        headers[API_KEY_HEADER] = api_key.strip()

    kwargs: dict[str, Any] = {"headers": headers, "timeout": timeout}
    if transport is not None:
        kwargs["transport"] = transport
    else:
        kwargs["verify"] = build_ssl_context(check_certificate_revocation, crl_file)
    return httpx.AsyncClient(**kwargs)


class HttpVectorStore(VectorStore):
    """A VectorStore that talks REST to a remote service."""

    backend_name = "http"

    def __init__(self, http_client: httpx.AsyncClient, endpoint: str):
        self._client = http_client
        self._endpoint = endpoint if endpoint.endswith("/") else f"{endpoint}/"

    @property
    def endpoint(self) -> str:
        return self._endpoint

    @property
    def http_client(self) -> httpx.AsyncClient:
        return self._client

    def _url(self, path: str) -> str:
        return f"{self._endpoint}{path.lstrip('/')}"

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: dict[str, Any] | None = None,
        allow_not_found: bool = False,
    ) -> Any:
        """Send a request and return the decoded JSON body.

        Returns None for 404 when ``allow_not_found`` is set and for empty
        bodies. Everything else that isn't 2xx raises BackendError.
        """
        url = self._url(path)
        try:
            resp = await self._client.request(method, url, json=json, params=params)
        except httpx.HTTPError as e:
            raise BackendError(
                f"{self.backend_name} request failed: {method} {url}: {e}",
                backend=self.backend_name,
            ) from e

        if resp.status_code == 404 and allow_not_found:
            return None
        if resp.status_code >= 400:
            detail = resp.text[:300]
            logger.error(
                f"{self.backend_name} {method} {path} -> {resp.status_code}: {detail}"
            )
            raise BackendError(
                f"{self.backend_name} returned {resp.status_code} for {method} {path}: {detail}",
                backend=self.backend_name,
                status_code=resp.status_code,
            )
        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError:
            return resp.text

    async def close(self) -> None:
        await self._client.aclose()

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self._endpoint}>"
