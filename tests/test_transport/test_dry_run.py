"""Tests for the dry-run transport."""

from __future__ import annotations

import json

import pytest

from restcall.descriptor import CallDescriptor
from restcall.executor import SyncExecutor
from restcall.output import OutputManager, set_output
from restcall.transport.dry_run import DRY_RUN_BODY, DryRunTransport


@pytest.fixture(autouse=True)
def _plain_output() -> None:
    set_output(OutputManager(no_color=True))


def _patch_descriptor() -> CallDescriptor:
    return CallDescriptor(
        "PATCH", "/users/1", body='{"name":"Bob"}', endpoint_key="Acme", timeout_ms=3000
    )


class TestDryRun:
    def test_prints_request_line_to_stderr(self, capsys: pytest.CaptureFixture[str]) -> None:
        response = SyncExecutor(DryRunTransport()).execute(_patch_descriptor())

        captured = capsys.readouterr()
        assert captured.out == ""
        assert "[dry-run] POST /users/1?_HttpMethod=PATCH -> Acme" in captured.err
        assert "Timeout: 3000 ms" in captured.err
        assert response.status_code == 200

    def test_headers_and_body_hidden_unless_verbose(
        self, capsys: pytest.CaptureFixture[str]
    ) -> None:
        SyncExecutor(DryRunTransport()).execute(_patch_descriptor())
        err = capsys.readouterr().err
        assert "Header:" not in err
        assert "Body:" not in err

    def test_verbose_shows_headers_and_body(self, capsys: pytest.CaptureFixture[str]) -> None:
        set_output(OutputManager(no_color=True, verbose=True))
        SyncExecutor(DryRunTransport()).execute(_patch_descriptor())

        err = capsys.readouterr().err
        assert "[debug]   Header: Content-Type: application/json" in err
        assert "[debug]   Header: Accept: application/json" in err
        assert '[debug]   Body: {"name":"Bob"}' in err

    def test_synthetic_response(self) -> None:
        response = SyncExecutor(DryRunTransport()).execute(
            CallDescriptor("GET", "/x", endpoint_key="Acme")
        )
        assert response.body == DRY_RUN_BODY
        assert json.loads(response.body)["dry_run"] is True
        assert response.headers == {"Content-Type": "application/json"}

    def test_body_line_omitted_when_empty(self, capsys: pytest.CaptureFixture[str]) -> None:
        set_output(OutputManager(no_color=True, verbose=True))
        SyncExecutor(DryRunTransport()).execute(CallDescriptor("GET", "/x", endpoint_key="Acme"))
        assert "Body:" not in capsys.readouterr().err

    def test_quiet_output_prints_nothing(self, capsys: pytest.CaptureFixture[str]) -> None:
        set_output(OutputManager(no_color=True, quiet=True))
        SyncExecutor(DryRunTransport()).execute(CallDescriptor("GET", "/x", endpoint_key="Acme"))
        assert capsys.readouterr().err == ""
