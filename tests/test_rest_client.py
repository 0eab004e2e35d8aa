"""Tests for the endpoint-bound RestClient facade."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from restcall.client import RestClient
from restcall.exceptions import NoMockConfiguredError, ValidationError
from restcall.executor import SyncExecutor
from restcall.jobs.finalizer import FinalizerRegistry
from restcall.jobs.scheduler import QueueScheduler
from restcall.models import HTTPMethod, JobState, TransportResponse
from restcall.transport.base import Transport
from restcall.transport.mock import MockRegistry, MockTransport


class UsersClient(RestClient):
    """Example integration built on RestClient."""

    def __init__(self, transport: Transport, **kwargs) -> None:
        super().__init__("Acme", transport, **kwargs)

    def get_user(self, user_id: int) -> TransportResponse:
        return self.call("GET", f"/users/{user_id}")

    def rename_user(self, user_id: int, name: str) -> TransportResponse:
        return self.call("PATCH", f"/users/{user_id}", body=f'{{"name":"{name}"}}')


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------


class TestConstruction:
    def test_requires_endpoint_key(self, mock_transport: MockTransport) -> None:
        with pytest.raises(ValidationError):
            RestClient("", mock_transport)

    def test_endpoint_key_property(self, mock_transport: MockTransport) -> None:
        assert RestClient("Acme", mock_transport).endpoint_key == "Acme"

    def test_context_manager_closes_transport(self) -> None:
        transport = MagicMock(spec=Transport)
        with RestClient("Acme", transport):
            pass
        transport.close.assert_called_once()


# ---------------------------------------------------------------------------
# Descriptors and synchronous calls
# ---------------------------------------------------------------------------


class TestCalls:
    def test_descriptor_bound_to_endpoint(self, mock_transport: MockTransport) -> None:
        client = RestClient("Acme", mock_transport, default_timeout_ms=5000)
        descriptor = client.descriptor("post", "/users", body="{}")
        assert descriptor.endpoint_key == "Acme"
        assert descriptor.method == HTTPMethod.POST
        assert descriptor.timeout_ms == 5000
        assert not descriptor.is_frozen

    def test_explicit_timeout_wins(self, mock_transport: MockTransport) -> None:
        client = RestClient("Acme", mock_transport, default_timeout_ms=5000)
        assert client.descriptor("GET", "/x", timeout_ms=250).timeout_ms == 250

    def test_subclass_methods(
        self, mock_registry: MockRegistry, mock_transport: MockTransport
    ) -> None:
        mock_registry.set_mock("Acme", 200, "OK", '{"id":1,"name":"Bob"}')
        client = UsersClient(mock_transport)

        assert client.get_user(1).json_body()["name"] == "Bob"
        client.rename_user(1, "Bob")

        get, patch = mock_transport.requests
        assert get.full_path == "/users/1"
        assert patch.method == HTTPMethod.POST
        assert patch.full_path == "/users/1?_HttpMethod=PATCH"

    def test_call_propagates_transport_errors(self, mock_transport: MockTransport) -> None:
        with pytest.raises(NoMockConfiguredError):
            UsersClient(mock_transport).get_user(1)


# ---------------------------------------------------------------------------
# Background calls
# ---------------------------------------------------------------------------


class TestEnqueue:
    def test_enqueue_without_scheduler(self, mock_transport: MockTransport) -> None:
        with pytest.raises(ValidationError, match="no scheduler"):
            RestClient("Acme", mock_transport).enqueue("GET", "/x", "record")

    def test_enqueue_and_drain(
        self,
        mock_registry: MockRegistry,
        mock_transport: MockTransport,
        finalizer_registry: FinalizerRegistry,
        recording_finalizer,
    ) -> None:
        mock_registry.set_mock("Acme", 201, "Created", '{"id":7}')
        scheduler = QueueScheduler(SyncExecutor(mock_transport), finalizer_registry)
        client = RestClient("Acme", mock_transport, scheduler=scheduler)

        job = client.enqueue("POST", "/users", "record", body='{"name":"Eve"}')
        assert job.state == JobState.QUEUED
        scheduler.drain()

        assert job.state == JobState.DONE
        (outcome,) = recording_finalizer.received
        assert outcome.response.json_body() == {"id": 7}
        assert job.descriptor.endpoint_key == "Acme"
