"""HTTP transport for the storefront JSON API."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp

from pytienda._constants import USER_AGENT
from pytienda._redact import redact_for_log
from pytienda.config import TiendaConfig
from pytienda.exceptions import TiendaApiError, TiendaTransportError

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by endpoint modules.

    Having a protocol here makes it easy to pass test doubles while keeping
    the production implementation (`JsonTransport`) concrete.
    """

    async def get_json(self, endpoint: str, params: Mapping[str, str] | None = None) -> Any: ...


class JsonTransport:
    """Plain JSON-over-HTTP transport on top of an ``aiohttp`` session."""

    def __init__(self, config: TiendaConfig, http_session: aiohttp.ClientSession) -> None:
        self._config = config
        self._http = http_session

    async def get_json(self, endpoint: str, params: Mapping[str, str] | None = None) -> Any:
        """GET *endpoint* and return the decoded JSON body.

        Raises :class:`TiendaTransportError` for network failures, non-200
        responses and undecodable bodies, and :class:`TiendaApiError` when
        the body is an ``{"error": ...}`` object.
        """
        url = f"{self._config.base_url.rstrip('/')}{endpoint}"
        headers = {
            "accept": "application/json",
            "user-agent": USER_AGENT,
        }

        _logger.debug("GET %s params=%s", url, redact_for_log(dict(params or {})))

        try:
            async with self._http.get(url, params=params, headers=headers) as resp:
                text = await resp.text()
                status = resp.status
        except aiohttp.ClientError as exc:
            raise TiendaTransportError(
                f"Request to {endpoint} failed: {exc}",
                endpoint=endpoint,
            ) from exc

        try:
            body = json.loads(text) if text else None
        except json.JSONDecodeError as exc:
            if status != 200:
                raise TiendaTransportError(
                    f"HTTP {status} from {endpoint}: {text[:200]}",
                    status_code=status,
                    endpoint=endpoint,
                ) from exc
            raise TiendaTransportError(
                f"Invalid JSON from {endpoint}: {text[:200]}",
                endpoint=endpoint,
            ) from exc

        if isinstance(body, dict) and "error" in body:
            raise TiendaApiError(
                f"{endpoint} failed: {body['error']}",
                code=str(status),
                endpoint=endpoint,
            )
        if status != 200:
            raise TiendaTransportError(
                f"HTTP {status} from {endpoint}: {text[:200]}",
                status_code=status,
                endpoint=endpoint,
            )

        _logger.debug("GET %s -> %s", url, redact_for_log(body, max_string=128))
        return body
