"""HTTP-based connectivity provider for desktop and development hosts."""

from __future__ import annotations

import logging
from typing import Any

import aiohttp

from turncue.config import ReadinessConfig
from turncue.exceptions import TurnCueError
from turncue.models.platform import ConnectivityResult

_logger = logging.getLogger(__name__)


class HttpConnectivityProbe:
    """Report ``other`` when a well-known URL answers, ``none`` otherwise.

    Usage::

        async with HttpConnectivityProbe(config) as probe:
            result = await probe.check_connectivity()

    A caller-supplied :class:`aiohttp.ClientSession` is used as-is and
    never closed by the probe.
    """

    def __init__(
        self,
        config: ReadinessConfig | None = None,
        *,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self._config = config if config is not None else ReadinessConfig()
        self._external_session = session is not None
        self._http_session = session

    async def __aenter__(self) -> HttpConnectivityProbe:
        if self._http_session is None:
            self._http_session = aiohttp.ClientSession()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None

    def _require_session(self) -> aiohttp.ClientSession:
        if self._http_session is None:
            raise TurnCueError("Probe not initialized. Use 'async with HttpConnectivityProbe(...) as probe:'")
        return self._http_session

    async def check_connectivity(self) -> ConnectivityResult:
        session = self._require_session()
        url = self._config.connectivity_url
        timeout = aiohttp.ClientTimeout(total=self._config.connectivity_timeout)

        _logger.debug("HEAD %s", url)
        try:
            async with session.head(url, timeout=timeout, allow_redirects=False) as resp:
                status = resp.status
        except (aiohttp.ClientError, TimeoutError) as exc:
            _logger.debug("Connectivity probe to %s failed: %s", url, exc)
            return ConnectivityResult.NONE

        if status >= 500:
            _logger.debug("Connectivity probe got HTTP %d from %s", status, url)
            return ConnectivityResult.NONE
        return ConnectivityResult.OTHER
