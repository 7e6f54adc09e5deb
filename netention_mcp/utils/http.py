"""HTTP utilities for API-backed tools."""

import json
import logging
from collections.abc import Mapping
from typing import Any

import httpx

from netention_mcp.errors import ApiError, EngineValidationError

logger = logging.getLogger(__name__)

DEFAULT_METHOD = "POST"
BODYLESS_METHODS = frozenset({"GET", "HEAD"})


def _parse_headers(raw: Any) -> dict[str, str]:
    """
    Normalise ``config.headers`` into a header dict.

    Args:
        raw: JSON-encoded object, a mapping, or None

    Returns:
        Header name -> value

    Raises:
        EngineValidationError: if the value is not a JSON object or mapping
    """
    if raw is None or raw == "":
        return {}
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError as e:
            raise EngineValidationError(f"Invalid headers JSON: {e.msg}", field="headers") from e
    if not isinstance(raw, Mapping):
        raise EngineValidationError("Headers must be a JSON object", field="headers")
    return {str(k): str(v) for k, v in raw.items()}


async def _call_http_api(
    client: httpx.AsyncClient,
    url: str,
    payload: Any,
    method: str = DEFAULT_METHOD,
    headers: Mapping[str, str] | None = None,
    timeout: float | None = None,
    tool_id: str | None = None,
) -> Any:
    """
    Send ``payload`` as a compact JSON body and return the parsed JSON reply.

    Args:
        client: Shared async HTTP client
        url: Endpoint URL
        payload: Tool input, JSON-encoded as the body (not sent for GET/HEAD)
        method: HTTP method
        headers: Request headers
        timeout: Per-request timeout in seconds, client default when None
        tool_id: Tool id for error details

    Returns:
        Decoded JSON response body

    Raises:
        ApiError: on transport failure, non-2xx status or a non-JSON body
    """
    method = method.upper()
    content = None if method in BODYLESS_METHODS else json.dumps(payload, separators=(",", ":"))
    request_timeout = timeout if timeout is not None else httpx.USE_CLIENT_DEFAULT

    logger.debug(f"HTTP {method} {url}")
    try:
        response = await client.request(
            method,
            url,
            content=content,
            headers=dict(headers or {}),
            timeout=request_timeout,
        )
    except httpx.TimeoutException as e:
        raise ApiError(f"API request timed out: {url}", tool_id=tool_id) from e
    except httpx.HTTPError as e:
        raise ApiError(f"API request failed - {type(e).__name__}: {e}", tool_id=tool_id) from e

    if not response.is_success:
        raise ApiError(
            f"API request failed with status {response.status_code}",
            tool_id=tool_id,
            status_code=response.status_code,
        )

    try:
        return response.json()
    except ValueError as e:
        raise ApiError(f"Failed to parse API response - {e}", tool_id=tool_id, status_code=response.status_code) from e
