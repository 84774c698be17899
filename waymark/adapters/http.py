"""Shared JSON-over-HTTP call with error translation.

Every backend adapter goes through ``request_json`` so transport errors,
timeouts and non-2xx statuses all surface as NetworkError.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from ..domain.errors import NetworkError

logger = logging.getLogger(__name__)


def json_headers(variant: str = "") -> dict[str, str]:
    headers = {"accept": "*/*", "content-type": "application/json"}
    if variant:
        headers["variant"] = variant
    return headers


async def request_json(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    **kwargs: Any,
) -> Any:
    """Send a request and return the decoded JSON body.

    Raises:
        NetworkError: On timeout, connection failure, non-2xx status or
            a body that is not JSON.
    """
    try:
        response = await client.request(method, url, **kwargs)
        response.raise_for_status()
    except httpx.HTTPStatusError as e:
        status = e.response.status_code
        logger.warning(
            "Backend returned an error status",
            extra={"url": url, "status": status},
        )
        raise NetworkError(
            f"Request failed with status {status} {e.response.reason_phrase}",
            status_code=status,
            url=url,
            cause=e,
        ) from e
    except httpx.TimeoutException as e:
        logger.warning("Backend request timed out", extra={"url": url})
        raise NetworkError("Request timed out", url=url, cause=e) from e
    except httpx.HTTPError as e:
        logger.warning(
            "Backend request failed",
            extra={"url": url, "error": str(e)},
        )
        raise NetworkError("Could not reach the server", url=url, cause=e) from e

    try:
        return response.json()
    except ValueError as e:
        raise NetworkError(
            "Server response is not valid JSON",
            status_code=response.status_code,
            url=url,
            cause=e,
        ) from e
