"""Render call descriptors into transport-ready wire requests.

:func:`render_request` is a pure function. It applies the two rules that
separate what the caller described from what goes over the wire:

- **PATCH tunnelling** -- endpoints only execute GET/POST/PUT/DELETE
  natively, so PATCH is sent as POST with ``_HttpMethod=PATCH`` appended to
  the query string. The descriptor itself keeps reading PATCH.
- **Header merge** -- the default JSON headers are overlaid by the
  descriptor's headers. Keys are compared by exact string equality, so
  ``content-type`` and ``Content-Type`` end up as two headers.

Query text supplied by the caller is passed through verbatim; only the
parameters this module adds are URL-encoded.
"""

from __future__ import annotations

import logging
from urllib.parse import parse_qsl, urlencode

from restcall.descriptor import CallDescriptor
from restcall.models import DEFAULT_HEADERS, HTTPMethod, WireRequest

logger = logging.getLogger(__name__)

METHOD_OVERRIDE_PARAM = "_HttpMethod"
"""Query parameter that carries a tunnelled HTTP method."""


def render_request(descriptor: CallDescriptor) -> WireRequest:
    """Translate *descriptor* into a :class:`~restcall.models.WireRequest`.

    Args:
        descriptor: The call to render. It is read, never modified.

    Returns:
        The wire request with the effective method, query and headers.
    """
    method = HTTPMethod(descriptor.method)
    query = descriptor.query

    if method == HTTPMethod.PATCH:
        method = HTTPMethod.POST
        if (METHOD_OVERRIDE_PARAM, HTTPMethod.PATCH.value) not in parse_qsl(query, keep_blank_values=True):
            query = append_query_params(query, {METHOD_OVERRIDE_PARAM: HTTPMethod.PATCH.value})

    headers: dict[str, str] = dict(DEFAULT_HEADERS)
    headers.update(descriptor.headers or {})

    wire = WireRequest(
        method=method,
        path=descriptor.path,
        query=query,
        headers=headers,
        body=descriptor.body,
        timeout_ms=descriptor.timeout_ms,
        endpoint_key=descriptor.endpoint_key,
    )
    logger.debug("Rendered %s %s for endpoint '%s'", wire.method.value, wire.full_path, wire.endpoint_key)
    return wire


def append_query_params(query: str, params: dict[str, str]) -> str:
    """Append URL-encoded *params* to an existing, already-encoded *query*.

    Args:
        query: Caller-supplied query string, kept verbatim.
        params: Parameters to add; keys and values are encoded as UTF-8.

    Returns:
        The combined query string, ``&``-joined when *query* was non-empty.
    """
    encoded = urlencode(params, encoding="utf-8")
    if not query:
        return encoded
    return f"{query}&{encoded}"


def build_url(base_url: str, wire: WireRequest) -> str:
    """Join an endpoint's *base_url* with the request's full path.

    Exactly one ``/`` separates the two parts.
    """
    full_path = wire.full_path
    if not full_path:
        return base_url
    if full_path.startswith("?"):
        return f"{base_url.rstrip('/')}{full_path}"
    return f"{base_url.rstrip('/')}/{full_path.lstrip('/')}"
