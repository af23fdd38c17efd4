"""HTTP session and timeout helpers.

API and scrape requests use short timeouts; downloads use long ones. Both
are derived from [network] timeout_seconds.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import aiohttp

from debapps.config.settings import NetworkSettings
from debapps.constants import HTTP_USER_AGENT


def api_timeout(network: NetworkSettings) -> aiohttp.ClientTimeout:
    """Timeout for version probes and API calls."""
    return aiohttp.ClientTimeout(
        total=network.timeout_seconds * 3,
        sock_connect=network.timeout_seconds,
    )


def download_timeout(network: NetworkSettings) -> aiohttp.ClientTimeout:
    """Timeout for artifact downloads."""
    return aiohttp.ClientTimeout(
        total=network.timeout_seconds * 60,
        sock_read=network.timeout_seconds * 3,
        sock_connect=network.timeout_seconds,
    )


@asynccontextmanager
async def create_http_session(
    network: NetworkSettings,
) -> AsyncIterator[aiohttp.ClientSession]:
    """Create configured HTTP session.

    Args:
        network: Network settings

    Yields:
        Configured aiohttp.ClientSession

    """
    connector = aiohttp.TCPConnector(limit=10, limit_per_host=4)
    async with aiohttp.ClientSession(
        timeout=download_timeout(network),
        connector=connector,
        headers={"User-Agent": HTTP_USER_AGENT},
    ) as session:
        yield session
