"""HTTP fetching and artifact downloads.

Artifacts are fetched through a three-stage fallback chain:

1. aiohttp, resuming a partial file with a Range request (with retries)
2. aiohttp, from scratch
3. ``curl -fL``

Small text/JSON/bytes fetches used by version resolution share the same
retry loop with a short timeout.
"""

import asyncio
import contextlib
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Any, TypeVar
from urllib.parse import urlparse

import aiofiles
import aiohttp
import orjson

from debapps.config.settings import NetworkSettings
from debapps.constants import (
    ALLOWED_URL_SCHEMES,
    DOWNLOAD_CHUNK_SIZE,
    GITHUB_API_BASE,
)
from debapps.core.auth import GitHubAuth
from debapps.core.http_session import api_timeout, download_timeout
from debapps.exceptions import DownloadError
from debapps.infrastructure.process import CommandRunner
from debapps.logger import get_logger

T = TypeVar("T")

logger = get_logger(__name__)

HTTP_PARTIAL_CONTENT = 206


def validate_url(url: str) -> str:
    """Check that a URL uses an allowed scheme.

    Returns:
        The URL scheme

    Raises:
        DownloadError: If the scheme is not http, https or ftp

    """
    scheme = urlparse(url).scheme.lower()
    if scheme not in ALLOWED_URL_SCHEMES or not urlparse(url).netloc:
        msg = f"Unsupported or invalid URL: {url}"
        raise DownloadError(msg, target=url)
    return scheme


class DownloadService:
    """Fetch pages and download artifacts with retries and fallbacks."""

    def __init__(
        self,
        session: aiohttp.ClientSession,
        network: NetworkSettings,
        runner: CommandRunner,
        auth: GitHubAuth | None = None,
    ) -> None:
        """Initialize download service.

        Args:
            session: Shared aiohttp session
            network: Retry and timeout settings
            runner: Command runner used for the curl fallback
            auth: GitHub authentication applied to api.github.com requests

        """
        self.session = session
        self.network = network
        self.runner = runner
        self.auth = auth

    def _headers(self, url: str, extra: dict[str, str] | None) -> dict[str, str]:
        headers = dict(extra or {})
        if self.auth is not None and url.startswith(GITHUB_API_BASE):
            self.auth.apply_auth(headers)
        return headers

    async def _make_request_with_retry(
        self,
        url: str,
        process_callback: Callable[[aiohttp.ClientResponse], Awaitable[T]],
        description: str,
        timeout: aiohttp.ClientTimeout,
        headers: dict[str, str] | None = None,
        cleanup_callback: Callable[[], None] | None = None,
        attempts: int | None = None,
    ) -> T:
        """Make HTTP request with retry logic."""
        retry_attempts = max(1, attempts or self.network.retry_attempts)

        for attempt in range(1, retry_attempts + 1):
            try:
                async with self.session.get(
                    url, headers=headers, timeout=timeout
                ) as response:
                    response.raise_for_status()
                    return await process_callback(response)

            except (aiohttp.ClientError, TimeoutError) as e:
                logger.warning(
                    "Attempt %s/%s failed for %s: %s",
                    attempt,
                    retry_attempts,
                    description,
                    e,
                )
                if cleanup_callback:
                    cleanup_callback()

                if attempt == retry_attempts:
                    msg = f"{description} failed after {retry_attempts} attempts"
                    raise DownloadError(msg, target=url) from e

                backoff = 2**attempt
                logger.debug("Retrying in %s seconds...", backoff)
                await asyncio.sleep(backoff)

        msg = f"{description} failed"
        raise DownloadError(msg, target=url)

    # --- small fetches ---------------------------------------------------

    async def fetch_text(
        self, url: str, headers: dict[str, str] | None = None
    ) -> str:
        """GET a page and return its text.

        Raises:
            DownloadError: If every attempt fails

        """
        validate_url(url)

        async def process(response: aiohttp.ClientResponse) -> str:
            return await response.text(errors="replace")

        return await self._make_request_with_retry(
            url,
            process,
            f"Fetching {url}",
            api_timeout(self.network),
            headers=self._headers(url, headers),
        )

    async def fetch_bytes(
        self, url: str, headers: dict[str, str] | None = None
    ) -> bytes:
        """GET a small binary resource such as a signing key."""
        validate_url(url)

        async def process(response: aiohttp.ClientResponse) -> bytes:
            return await response.read()

        return await self._make_request_with_retry(
            url,
            process,
            f"Fetching {url}",
            api_timeout(self.network),
            headers=self._headers(url, headers),
        )

    async def fetch_json(
        self, url: str, headers: dict[str, str] | None = None
    ) -> Any:
        """GET a JSON document.

        Error responses (4xx/5xx) are still parsed when they carry a JSON
        body, so that API error messages reach the caller.

        Raises:
            DownloadError: On network failure or a non-JSON body

        """
        validate_url(url)
        request_headers = self._headers(url, headers)
        request_headers.setdefault("Accept", "application/json")

        retry_attempts = max(1, self.network.retry_attempts)
        for attempt in range(1, retry_attempts + 1):
            try:
                async with self.session.get(
                    url,
                    headers=request_headers,
                    timeout=api_timeout(self.network),
                ) as response:
                    body = await response.read()
                break
            except (aiohttp.ClientError, TimeoutError) as e:
                logger.warning(
                    "Attempt %s/%s failed for %s: %s",
                    attempt,
                    retry_attempts,
                    url,
                    e,
                )
                if attempt == retry_attempts:
                    msg = f"Request failed after {retry_attempts} attempts"
                    raise DownloadError(msg, target=url) from e
                await asyncio.sleep(2**attempt)

        try:
            return orjson.loads(body)
        except orjson.JSONDecodeError as e:
            msg = f"Invalid JSON response: {e}"
            raise DownloadError(msg, target=url) from e

    # --- artifact downloads ----------------------------------------------

    async def _stream_to_file(
        self, url: str, dest: Path, resume: bool, attempts: int | None
    ) -> None:
        offset = dest.stat().st_size if resume and dest.exists() else 0
        headers = {"Range": f"bytes={offset}-"} if offset else {}

        def cleanup() -> None:
            if not dest.exists():
                return
            if resume:
                # Every retry asks for the same Range, so drop the bytes
                # a failed attempt appended past the starting offset.
                logger.debug("Truncating %s back to %d bytes", dest, offset)
                with dest.open("r+b") as f:
                    f.truncate(offset)
                return
            logger.debug("Removing partial download: %s", dest)
            with contextlib.suppress(OSError):
                dest.unlink()

        async def process(response: aiohttp.ClientResponse) -> None:
            mode = "ab" if response.status == HTTP_PARTIAL_CONTENT else "wb"
            if offset and mode == "ab":
                logger.debug("Resuming %s at byte %d", dest.name, offset)
            async with aiofiles.open(dest, mode=mode) as f:
                async for chunk in response.content.iter_chunked(
                    DOWNLOAD_CHUNK_SIZE
                ):
                    if chunk:
                        await f.write(chunk)

        await self._make_request_with_retry(
            url,
            process,
            f"Downloading {dest.name}",
            download_timeout(self.network),
            headers=headers,
            cleanup_callback=cleanup,
            attempts=attempts,
        )

    async def _curl(self, url: str, dest: Path) -> None:
        if not self.runner.which("curl"):
            msg = "curl is not available"
            raise DownloadError(msg, target=url)
        result = await self.runner.run("curl", "-fL", "-o", str(dest), url)
        if not result.ok:
            msg = f"curl exited with status {result.returncode}"
            raise DownloadError(msg, target=url)

    async def download(self, url: str, dest: Path) -> Path:
        """Download url to dest using the fallback chain.

        Args:
            url: http, https or ftp URL
            dest: Destination file

        Returns:
            dest

        Raises:
            DownloadError: If the URL is invalid or every stage fails

        """
        scheme = validate_url(url)
        dest.parent.mkdir(parents=True, exist_ok=True)
        logger.info("Downloading %s", url)

        if scheme != "ftp":
            try:
                await self._stream_to_file(url, dest, resume=True, attempts=None)
            except DownloadError as e:
                logger.warning("⚠️  Resumable download failed: %s", e)
            else:
                return dest

            with contextlib.suppress(OSError):
                dest.unlink()
            try:
                await self._stream_to_file(url, dest, resume=False, attempts=1)
            except DownloadError as e:
                logger.warning("⚠️  Fresh download failed, trying curl: %s", e)
            else:
                return dest

        with contextlib.suppress(OSError):
            dest.unlink()
        await self._curl(url, dest)
        if not dest.exists() or dest.stat().st_size == 0:
            msg = "Downloaded file is empty"
            raise DownloadError(msg, target=url)
        return dest
