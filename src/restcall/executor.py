"""Synchronous executor -- one descriptor in, one transport response out.

:class:`SyncExecutor` is the blocking execution path. It is also what
:class:`~restcall.jobs.job.AsyncJob` runs on the scheduler's execution
context, so both paths see exactly the same request for the same
descriptor.
"""

from __future__ import annotations

import logging

from restcall.descriptor import CallDescriptor
from restcall.exceptions import TransportError
from restcall.models import TransportResponse
from restcall.request_builder import render_request
from restcall.transport.base import Transport

logger = logging.getLogger(__name__)


class SyncExecutor:
    """Execute call descriptors against a transport.

    Args:
        transport: Where rendered requests are sent (live, mock or dry-run).

    Example::

        executor = SyncExecutor(MockTransport(registry))
        response = executor.execute(CallDescriptor("GET", "/users/1", endpoint_key="Acme"))
        if response.status_code == 200:
            ...
    """

    def __init__(self, transport: Transport) -> None:
        self._transport = transport

    @property
    def transport(self) -> Transport:
        return self._transport

    def execute(self, descriptor: CallDescriptor) -> TransportResponse:
        """Validate, freeze, render and send *descriptor*.

        Exactly one transport call is made. No retries, no caching. The
        transport's response is returned unmodified whatever its status
        code.

        Args:
            descriptor: The call to perform. It is frozen once it has
                passed validation; a rejected descriptor stays editable.

        Returns:
            The transport's response.

        Raises:
            ValidationError: If the descriptor is incomplete.
            TransportError: If the transport could not obtain a response.
        """
        descriptor.validate()
        descriptor.freeze()
        request = render_request(descriptor)

        try:
            response = self._transport.send(request)
        except TransportError as exc:
            logger.debug(
                "%s %s on '%s' failed: %s",
                request.method.value,
                request.full_path,
                request.endpoint_key,
                exc,
            )
            raise

        logger.debug(
            "%s %s on '%s' -> %d",
            request.method.value,
            request.full_path,
            request.endpoint_key,
            response.status_code,
        )
        return response
