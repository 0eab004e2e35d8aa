"""Transports for restcall.

A transport exchanges a rendered :class:`~restcall.models.WireRequest` for a
:class:`~restcall.models.TransportResponse`.

Classes:
    :class:`Transport` -- abstract base.
    :class:`MockTransport` / :class:`MockRegistry` -- scripted responses for tests.
    :class:`HttpxTransport` -- real HTTP via :mod:`httpx`.
    :class:`DryRunTransport` -- prints requests, sends nothing.
"""

from restcall.transport.base import EndpointResolver, Transport
from restcall.transport.dry_run import DryRunTransport
from restcall.transport.live import HttpxTransport
from restcall.transport.mock import MockRegistry, MockTransport, generate_response

__all__ = [
    "Transport",
    "EndpointResolver",
    "MockRegistry",
    "MockTransport",
    "generate_response",
    "HttpxTransport",
    "DryRunTransport",
]
