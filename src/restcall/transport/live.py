"""Live transport backed by :mod:`httpx`.

:class:`HttpxTransport` sends wire requests to real endpoints. The endpoint
key on each request is resolved to a base URL (and per-endpoint headers)
by an :class:`~restcall.transport.base.EndpointResolver`, typically a
:class:`~restcall.config.ConfigEndpointResolver`. Credentials are left to
the resolver and whatever headers it supplies.

Error mapping:

- :class:`httpx.TimeoutException` -> :class:`~restcall.exceptions.TimeoutError_`
- any other :class:`httpx.HTTPError` -> :class:`~restcall.exceptions.ConnectionError_`
- unresolvable endpoint key or invalid URL -> :class:`~restcall.exceptions.TransportError`

HTTP error statuses are returned as responses, never raised.
"""

from __future__ import annotations

import logging
import threading
from typing import Optional

import httpx

from restcall.exceptions import ConfigError, ConnectionError_, TimeoutError_, TransportError
from restcall.models import EndpointConfig, TransportResponse, WireRequest
from restcall.request_builder import build_url
from restcall.transport.base import EndpointResolver, Transport

logger = logging.getLogger(__name__)


class HttpxTransport(Transport):
    """Transport that performs real HTTP exchanges with :class:`httpx.Client`.

    One client is kept per SSL-verification setting and reused across
    calls. Use as a context manager (or call :meth:`close`) to release
    them.

    Args:
        resolver: Maps endpoint keys to :class:`~restcall.models.EndpointConfig`.
        http_transport: Optional :class:`httpx.BaseTransport` handed to every
            client, e.g. :class:`httpx.MockTransport` in tests.

    Example::

        with HttpxTransport(ConfigEndpointResolver()) as transport:
            response = SyncExecutor(transport).execute(descriptor)
    """

    def __init__(
        self,
        resolver: EndpointResolver,
        http_transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._resolver = resolver
        self._http_transport = http_transport
        self._clients: dict[bool, httpx.Client] = {}
        self._clients_lock = threading.Lock()

    def __enter__(self) -> HttpxTransport:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def send(self, request: WireRequest) -> TransportResponse:
        endpoint = self._resolve(request.endpoint_key)
        url = build_url(endpoint.base_url, request)
        headers = {**endpoint.headers, **request.headers}
        client = self._client_for(endpoint)

        logger.debug("Sending %s %s (timeout %d ms)", request.method.value, url, request.timeout_ms)
        try:
            response = client.request(
                request.method.value,
                url,
                headers=headers,
                content=request.body.encode("utf-8") if request.body else None,
                timeout=request.timeout_ms / 1000,
            )
        except httpx.TimeoutException as exc:
            raise TimeoutError_(
                f"{request.method.value} {url} timed out after {request.timeout_ms} ms: {exc}",
                request.endpoint_key,
            ) from exc
        except httpx.HTTPError as exc:
            raise ConnectionError_(
                f"{request.method.value} {url} failed: {exc}", request.endpoint_key
            ) from exc
        except httpx.InvalidURL as exc:
            raise TransportError(f"Invalid URL '{url}': {exc}", request.endpoint_key) from exc

        return TransportResponse(
            status_code=response.status_code,
            status=response.reason_phrase,
            body=response.text,
            headers=dict(response.headers),
        )

    def close(self) -> None:
        with self._clients_lock:
            for client in self._clients.values():
                client.close()
            self._clients.clear()

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _resolve(self, endpoint_key: str) -> EndpointConfig:
        try:
            return self._resolver(endpoint_key)
        except ConfigError as exc:
            raise TransportError(str(exc), endpoint_key) from exc

    def _client_for(self, endpoint: EndpointConfig) -> httpx.Client:
        with self._clients_lock:
            client = self._clients.get(endpoint.verify_ssl)
            if client is None:
                if self._http_transport is not None:
                    client = httpx.Client(transport=self._http_transport)
                else:
                    client = httpx.Client(verify=endpoint.verify_ssl)
                self._clients[endpoint.verify_ssl] = client
            return client
