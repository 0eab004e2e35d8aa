"""pytest fixtures for code that calls APIs through restcall.

Import the fixtures into a ``conftest.py``::

    from restcall.testing import mock_registry, mock_transport  # noqa: F401

Each test gets its own :class:`~restcall.transport.mock.MockRegistry`,
reset on teardown, so canned responses never leak between tests.
"""

from __future__ import annotations

from typing import Iterator

import pytest

from restcall.transport.mock import MockRegistry, MockTransport


@pytest.fixture
def mock_registry() -> Iterator[MockRegistry]:
    """A fresh mock registry, reset after the test."""
    registry = MockRegistry()
    yield registry
    registry.reset()


@pytest.fixture
def mock_transport(mock_registry: MockRegistry) -> MockTransport:
    """A mock transport answering from :func:`mock_registry`."""
    return MockTransport(mock_registry)
