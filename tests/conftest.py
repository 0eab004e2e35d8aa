"""Shared test fixtures for restcall.

Provides the mock registry/transport fixtures from :mod:`restcall.testing`,
an executor wired to them, a finalizer registry with a recording finalizer,
and isolation for global output and configuration state. These fixtures
are automatically discovered by pytest.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterator

import pytest

from restcall.executor import SyncExecutor
from restcall.jobs.finalizer import Finalizer, FinalizerRegistry, Outcome
from restcall.output import reset_output
from restcall.testing import mock_registry, mock_transport  # noqa: F401
from restcall.transport.mock import MockTransport


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> Iterator[None]:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time, which capsys replaces per test.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Execution fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def executor(mock_transport: MockTransport) -> SyncExecutor:  # noqa: F811
    """A synchronous executor sending through the mock transport."""
    return SyncExecutor(mock_transport)


class RecordingFinalizer(Finalizer):
    """Appends every outcome it receives to a shared list."""

    received: list[Outcome] = []
    instances: list["RecordingFinalizer"] = []

    def __init__(self) -> None:
        RecordingFinalizer.instances.append(self)

    def execute(self, outcome: Outcome) -> None:
        RecordingFinalizer.received.append(outcome)


@pytest.fixture
def recording_finalizer() -> Iterator[type[RecordingFinalizer]]:
    """The :class:`RecordingFinalizer` class with its class-level logs cleared."""
    RecordingFinalizer.received = []
    RecordingFinalizer.instances = []
    yield RecordingFinalizer
    RecordingFinalizer.received = []
    RecordingFinalizer.instances = []


@pytest.fixture
def finalizer_registry(recording_finalizer: type[RecordingFinalizer]) -> FinalizerRegistry:
    """A registry with the recording finalizer registered as ``"record"``."""
    registry = FinalizerRegistry()
    registry.register("record", recording_finalizer)
    return registry


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Sets XDG_CONFIG_HOME to a subdirectory of tmp_path and clears every
    RESTCALL_* environment variable so tests never touch real user config.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    import os

    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    for var in list(os.environ):
        if var.startswith("RESTCALL_"):
            monkeypatch.delenv(var, raising=False)
    monkeypatch.setattr("restcall.config._is_xdg_platform", lambda: True)
    return tmp_path
