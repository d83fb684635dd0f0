"""HTTP transport for the tracking provider."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp

from parcelwatch._constants import USER_AGENT
from parcelwatch._redact import redact_for_log
from parcelwatch.exceptions import TrackingTransportError

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by the tracking client.

    Having a protocol here makes it easy to pass test doubles while keeping
    the production implementation (`JsonTransport`) concrete.
    """

    async def post_json(self, url: str, payload: Mapping[str, Any]) -> dict[str, Any]:
        ...


class JsonTransport:
    """POSTs JSON bodies and decodes JSON replies."""

    def __init__(self, http_session: aiohttp.ClientSession, *, timeout: float) -> None:
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=timeout)

    async def post_json(self, url: str, payload: Mapping[str, Any]) -> dict[str, Any]:
        headers = {
            "content-type": "application/json",
            "accept": "application/json",
            "user-agent": USER_AGENT,
        }
        body = json.dumps(payload, separators=(",", ":"))

        _logger.debug("POST %s body=%s", url, redact_for_log(payload))

        try:
            async with self._http.post(url, data=body, headers=headers, timeout=self._timeout) as resp:
                text = await resp.text()
                if resp.status != 200:
                    raise TrackingTransportError(
                        f"HTTP {resp.status} from {url}: {text[:200]}",
                        status_code=resp.status,
                        url=url,
                    )
        except TrackingTransportError:
            raise
        except asyncio.TimeoutError as exc:
            raise TrackingTransportError(
                f"Request to {url} timed out after {self._timeout.total}s",
                url=url,
            ) from exc
        except aiohttp.ClientError as exc:
            raise TrackingTransportError(f"Request to {url} failed: {exc}", url=url) from exc

        try:
            result = json.loads(text)
        except json.JSONDecodeError as exc:
            raise TrackingTransportError(f"Invalid JSON from {url}: {text[:200]}", url=url) from exc

        if not isinstance(result, dict):
            raise TrackingTransportError(f"Expected a JSON object from {url}, got {type(result).__name__}", url=url)

        _logger.debug("Response from %s: %s", url, redact_for_log(result))
        return result
