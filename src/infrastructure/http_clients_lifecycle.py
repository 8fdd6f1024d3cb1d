"""Hosted service owning the outbound HTTP clients.

Implements HostedService so the clients are closed on application
shutdown rather than left to the garbage collector.
"""

import logging
from typing import TYPE_CHECKING

import httpx
from neuroglia.hosting.abstractions import HostedService

if TYPE_CHECKING:
    from neuroglia.hosting.web import WebApplicationBuilder

logger = logging.getLogger(__name__)


class HttpClientsLifecycle(HostedService):
    """Closes every registered ``httpx.AsyncClient`` on shutdown."""

    def __init__(self, **clients: httpx.AsyncClient) -> None:
        self._clients = clients

    async def start_async(self) -> None:
        logger.info(f"✅ HTTP clients ready: {', '.join(self._clients) or 'none'}")

    async def stop_async(self) -> None:
        for name, client in self._clients.items():
            if not client.is_closed:
                await client.aclose()
                logger.debug(f"🔌 Closed HTTP client '{name}'")
        logger.info("✅ HTTP clients closed")

    @staticmethod
    def configure(builder: "WebApplicationBuilder", **clients: httpx.AsyncClient) -> "HttpClientsLifecycle":
        lifecycle = HttpClientsLifecycle(**clients)
        builder.services.add_singleton(HostedService, singleton=lifecycle)
        return lifecycle
