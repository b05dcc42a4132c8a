"""Connectivity probes consulted before each network attempt."""

from __future__ import annotations

import logging

import httpx

from augmet_uploader.domain.ports import ConnectivityProbe

logger = logging.getLogger(__name__)


class HttpConnectivityProbe(ConnectivityProbe):
    """Treat any HTTP response from ``url`` as online."""

    def __init__(
        self,
        url: str,
        timeout_seconds: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._url = url
        self._timeout_seconds = timeout_seconds
        self._transport = transport

    async def is_online(self) -> bool:
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout_seconds,
                transport=self._transport,
            ) as http_client:
                await http_client.head(self._url)
        except httpx.TransportError as exc:
            logger.info("Connectivity check against %s failed: %s", self._url, exc)
            return False
        return True


class StaticConnectivityProbe(ConnectivityProbe):
    """Probe with a fixed answer, used when checks are disabled."""

    def __init__(self, online: bool = True) -> None:
        self.online = online

    async def is_online(self) -> bool:
        return self.online


__all__ = ["HttpConnectivityProbe", "StaticConnectivityProbe"]
