# geogate/http_utils.py
from __future__ import annotations

import logging
import httpx
from typing import Dict, Any, Optional

from geogate.errors import UpstreamError

log = logging.getLogger(__name__)


async def get_json(
    client: httpx.AsyncClient,
    url: str,
    params: Dict[str, Any],
    service: str,
    headers: Optional[Dict[str, str]] = None,
) -> Dict[str, Any]:
    """
    Single GET returning a JSON object. No retries: any failure is raised as
    UpstreamError(service) and the caller decides what to do with it.
    """
    try:
        r = await client.get(url, params=params, headers=headers)
    except httpx.HTTPError as e:
        # Do not log exception message; it can contain the query string (keys, coordinates)
        log.error("Exception during request to %s (%s)", service, type(e).__name__)
        raise UpstreamError(service, "unreachable") from e

    if r.status_code != 200:
        # Do not log response body (can contain sensitive or unexpected content)
        log.error("HTTP %s from %s", r.status_code, service)
        raise UpstreamError(service, f"HTTP {r.status_code}", {"status_code": r.status_code})

    try:
        data = r.json()
    except ValueError as e:
        log.error("Non-JSON response from %s", service)
        raise UpstreamError(service, "invalid JSON response") from e

    if not isinstance(data, dict):
        log.error("Unexpected JSON shape from %s", service)
        raise UpstreamError(service, "unexpected response shape")

    return data
