"""
HTTP helpers.

All third-party calls (geocoding, weather, remote catalog) go through `get_json`:
- async (`httpx.AsyncClient`) so lookups are suspension points, not blocking calls,
- deterministic defaults (timeout + User-Agent; Nominatim rejects anonymous clients),
- raise on non-2xx so collaborators decide how to degrade.
"""

from __future__ import annotations

from typing import Any

import httpx


DEFAULT_USER_AGENT = "gruenfinder/0.1.0"


async def get_json(
    url: str,
    *,
    params: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
    timeout_seconds: float = 10,
) -> Any:
    """GET `url` and return the decoded JSON response.

    Raises:
        httpx.HTTPError: On transport errors or non-2xx status codes.
        ValueError: If the response body is not valid JSON.
    """
    request_headers = {"User-Agent": DEFAULT_USER_AGENT, "Accept": "application/json"}
    if headers:
        request_headers.update(headers)

    async with httpx.AsyncClient(timeout=timeout_seconds) as client:
        resp = await client.get(url, params=params, headers=request_headers)
        resp.raise_for_status()
        return resp.json()
