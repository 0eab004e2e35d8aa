"""restcall -- declarative API calls with sync and background execution.

Describe a call once with a :class:`CallDescriptor`, then either run it
with a :class:`SyncExecutor` or enqueue it on a scheduler and receive the
outcome in a :class:`~restcall.jobs.Finalizer`. Tests swap the live
transport for a :class:`~restcall.transport.MockTransport` that replays
scripted responses per endpoint key.

Typical usage::

    registry = MockRegistry()
    registry.set_mock("Acme", 200, "OK", '{"id": 1}')
    executor = SyncExecutor(MockTransport(registry))
    response = executor.execute(CallDescriptor("GET", "/users/1", endpoint_key="Acme"))

Modules:
    descriptor: The call descriptor and its fluent builder.
    request_builder: Descriptor-to-wire rendering (PATCH tunnelling, headers).
    executor: The synchronous execution path.
    jobs: Asynchronous jobs, schedulers and finalizers.
    transport: Mock, live (httpx) and dry-run transports.
    config: XDG-aware endpoint configuration.
    exceptions: Exception hierarchy.
"""

from restcall.client import RestClient
from restcall.descriptor import CallDescriptor
from restcall.executor import SyncExecutor
from restcall.models import HTTPMethod, MockMode, TransportResponse, WireRequest
from restcall.request_builder import render_request
from restcall.transport.mock import MockRegistry, MockTransport, generate_response

__version__ = "0.1.0"

__all__ = [
    "CallDescriptor",
    "HTTPMethod",
    "MockMode",
    "MockRegistry",
    "MockTransport",
    "RestClient",
    "SyncExecutor",
    "TransportResponse",
    "WireRequest",
    "generate_response",
    "render_request",
]
