"""Dry-run transport -- show what would be sent, send nothing.

:class:`DryRunTransport` prints each wire request to stderr through the
global :class:`~restcall.output.OutputManager` (headers and body only in
verbose mode) and answers with a
synthetic ``200 OK`` JSON response so callers can continue without
special-casing. Useful for checking PATCH tunnelling and header merging
against a real configuration without touching the endpoint.
"""

from __future__ import annotations

import json

from restcall.models import TransportResponse, WireRequest
from restcall.output import get_output
from restcall.transport.base import Transport

DRY_RUN_BODY = json.dumps({"dry_run": True, "message": "Request was not sent"})


class DryRunTransport(Transport):
    """Transport that prints requests instead of sending them."""

    def send(self, request: WireRequest) -> TransportResponse:
        output = get_output()
        output.info(f"[dry-run] {request.method.value} {request.full_path} -> {request.endpoint_key}")

        output.info(f"  Timeout: {request.timeout_ms} ms")
        for key, value in request.headers.items():
            output.debug(f"  Header: {key}: {value}")
        if request.body:
            output.debug(f"  Body: {request.body}")

        return TransportResponse(
            status_code=200,
            status="OK",
            body=DRY_RUN_BODY,
            headers={"Content-Type": "application/json"},
        )
