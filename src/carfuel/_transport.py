"""HTTP transport for the carfuel API client."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp

from carfuel._constants import USER_AGENT
from carfuel.config import CarFuelConfig
from carfuel.exceptions import CarFuelTransportError

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by :class:`carfuel.client.CarFuelClient`.

    Having a protocol here makes it easy to pass test doubles while keeping
    the production implementation (`HttpTransport`) concrete.
    """

    async def request(
        self,
        method: str,
        endpoint: str,
        *,
        json_body: Mapping[str, Any] | None = None,
        params: Mapping[str, str] | None = None,
    ) -> tuple[int, dict[str, Any]]:
        ...


class HttpTransport:
    """JSON-over-HTTP transport returning ``(status, envelope)`` pairs.

    Non-2xx statuses are not errors at this level; the client decides what
    an error envelope means. Only network failures and bodies that are not
    a JSON object raise :class:`CarFuelTransportError`.
    """

    def __init__(self, config: CarFuelConfig, http_session: aiohttp.ClientSession) -> None:
        self._config = config
        self._http = http_session

    async def request(
        self,
        method: str,
        endpoint: str,
        *,
        json_body: Mapping[str, Any] | None = None,
        params: Mapping[str, str] | None = None,
    ) -> tuple[int, dict[str, Any]]:
        url = f"{self._config.base_url.rstrip('/')}{endpoint}"
        headers = {"accept": "application/json", "user-agent": USER_AGENT}

        _logger.debug("%s %s", method, url)

        try:
            async with self._http.request(
                method,
                url,
                json=dict(json_body) if json_body is not None else None,
                params=dict(params) if params is not None else None,
                headers=headers,
            ) as resp:
                status = resp.status
                text = await resp.text()
        except aiohttp.ClientError as exc:
            raise CarFuelTransportError(
                f"Request to {endpoint} failed: {exc}",
                endpoint=endpoint,
            ) from exc
        except asyncio.TimeoutError as exc:
            raise CarFuelTransportError(
                f"Request to {endpoint} timed out after {self._config.request_timeout}s",
                endpoint=endpoint,
            ) from exc

        _logger.debug("%s %s -> %s", method, url, status)

        try:
            body = json.loads(text)
        except json.JSONDecodeError as exc:
            raise CarFuelTransportError(
                f"Invalid JSON from {endpoint} (HTTP {status}): {text[:200]}",
                status_code=status,
                endpoint=endpoint,
            ) from exc

        if not isinstance(body, dict):
            raise CarFuelTransportError(
                f"Unexpected response shape from {endpoint} (HTTP {status})",
                status_code=status,
                endpoint=endpoint,
            )
        return status, body
