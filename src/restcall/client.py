"""Endpoint-bound client facade.

:class:`RestClient` is what integrations usually subclass: it fixes the
endpoint key, builds descriptors for it, and runs them synchronously or
hands them to a scheduler. Subclasses add domain methods on top of
:meth:`RestClient.call`::

    class UsersClient(RestClient):
        def __init__(self, transport):
            super().__init__("Acme", transport)

        def get_user(self, user_id: int) -> TransportResponse:
            return self.call("GET", f"/users/{user_id}")
"""

from __future__ import annotations

from typing import Mapping, Optional, Union

from restcall.descriptor import CallDescriptor
from restcall.exceptions import ValidationError
from restcall.executor import SyncExecutor
from restcall.jobs.job import AsyncJob
from restcall.jobs.scheduler import Scheduler
from restcall.models import DEFAULT_TIMEOUT_MS, HTTPMethod, TransportResponse
from restcall.transport.base import Transport


class RestClient:
    """Client bound to one endpoint key.

    Use as a context manager so that the transport is closed on exit.

    Args:
        endpoint_key: Endpoint every call is routed to.
        transport: Transport used for synchronous calls.
        scheduler: Optional scheduler for :meth:`enqueue`.
        default_timeout_ms: Timeout applied when a call does not set one.
    """

    def __init__(
        self,
        endpoint_key: str,
        transport: Transport,
        *,
        scheduler: Optional[Scheduler] = None,
        default_timeout_ms: int = DEFAULT_TIMEOUT_MS,
    ) -> None:
        if not endpoint_key:
            raise ValidationError("RestClient requires an endpoint key")
        self._endpoint_key = endpoint_key
        self._transport = transport
        self._executor = SyncExecutor(transport)
        self._scheduler = scheduler
        self._default_timeout_ms = default_timeout_ms

    def __enter__(self) -> RestClient:
        return self

    def __exit__(self, *args: object) -> None:
        self._transport.close()

    @property
    def endpoint_key(self) -> str:
        return self._endpoint_key

    def descriptor(
        self,
        method: Union[HTTPMethod, str],
        path: str,
        query: str = "",
        body: str = "",
        headers: Optional[Mapping[str, str]] = None,
        timeout_ms: Optional[int] = None,
    ) -> CallDescriptor:
        """Build a descriptor for this client's endpoint."""
        return CallDescriptor(
            method,
            path,
            query,
            body,
            headers,
            endpoint_key=self._endpoint_key,
            timeout_ms=timeout_ms or self._default_timeout_ms,
        )

    def call(
        self,
        method: Union[HTTPMethod, str],
        path: str,
        query: str = "",
        body: str = "",
        headers: Optional[Mapping[str, str]] = None,
        timeout_ms: Optional[int] = None,
    ) -> TransportResponse:
        """Perform a call synchronously.

        Returns:
            The transport's response, whatever its status code.

        Raises:
            ValidationError: If the call is incomplete.
            TransportError: If no response could be obtained.
        """
        return self._executor.execute(
            self.descriptor(method, path, query, body, headers, timeout_ms)
        )

    def enqueue(
        self,
        method: Union[HTTPMethod, str],
        path: str,
        finalizer_ref: str,
        query: str = "",
        body: str = "",
        headers: Optional[Mapping[str, str]] = None,
        timeout_ms: Optional[int] = None,
    ) -> AsyncJob:
        """Schedule a call; its outcome goes to the finalizer *finalizer_ref*.

        Raises:
            ValidationError: If no scheduler was configured, the call is
                incomplete, or the finalizer is unknown.
        """
        if self._scheduler is None:
            raise ValidationError("RestClient has no scheduler configured")
        return self._scheduler.enqueue(
            self.descriptor(method, path, query, body, headers, timeout_ms),
            finalizer_ref,
        )
