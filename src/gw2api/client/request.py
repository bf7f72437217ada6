"""Request building and response decoding helpers.

Pure functions shared by the orchestrator: composing the request URL and
query parameters, encoding id lists, building the bearer-token header,
checking the response status, decoding JSON, and reading the pagination
headers into a :class:`~gw2api.models.Page`.
"""

from __future__ import annotations

import json
from typing import Any, Optional, Sequence

from gw2api.client.transport import TransportResponse
from gw2api.exceptions import MalformedResponseError, UpstreamError
from gw2api.models import Id, Page

SUCCESS_STATUSES = (200, 206)
"""Statuses treated as success; the API answers paged and partial-id requests with 206."""

_PAGE_HEADERS = {
    "page_size": "X-Page-Size",
    "page_total": "X-Page-Total",
    "result_count": "X-Result-Count",
    "result_total": "X-Result-Total",
}


def build_url(base_url: str, path: str) -> str:
    """Join the API root and a resource path: ``<base_url>/<path>``."""
    return f"{base_url.rstrip('/')}/{path.strip('/')}"


def build_params(lang: str, params: Optional[dict[str, Any]] = None) -> dict[str, Any]:
    """Return a fresh query mapping with ``lang`` set and ``None`` values dropped."""
    merged = {k: v for k, v in (params or {}).items() if v is not None}
    merged["lang"] = lang
    return merged


def page_params(page: Optional[int] = None, page_size: Optional[int] = None) -> dict[str, Any]:
    """Pagination parameters, omitting whichever is not given."""
    params: dict[str, Any] = {}
    if page is not None:
        params["page"] = page
    if page_size is not None:
        params["page_size"] = page_size
    return params


def ids_to_params(ids: Sequence[Id]) -> dict[str, Any]:
    """Encode ids as ``{"id": x}`` for exactly one id, else ``{"ids": "a,b,c"}``."""
    if len(ids) == 1:
        return {"id": ids[0]}
    return {"ids": ",".join(str(i) for i in ids)}


def auth_headers(api_key: Optional[str]) -> dict[str, str]:
    """Bearer-token header for authenticated resources."""
    if not api_key:
        return {}
    return {"Authorization": f"Bearer {api_key}"}


def check_status(response: TransportResponse) -> None:
    """Raise :class:`UpstreamError` unless the status is 200 or 206."""
    if response.status_code not in SUCCESS_STATUSES:
        raise UpstreamError(response.status_code, response.body)


def decode_json(body: str) -> Any:
    """Decode a response body.

    Raises:
        MalformedResponseError: If *body* is not valid JSON.
    """
    try:
        return json.loads(body)
    except (json.JSONDecodeError, TypeError) as exc:
        raise MalformedResponseError(body if isinstance(body, str) else repr(body)) from exc


def _int_header(response: TransportResponse, name: str) -> Optional[int]:
    value = response.header(name)
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def page_from_response(response: TransportResponse, data: Any) -> Page:
    """Wrap decoded *data* with the pagination metadata found in *response* headers."""
    meta = {field: _int_header(response, header) for field, header in _PAGE_HEADERS.items()}
    return Page(data=data, **meta)
