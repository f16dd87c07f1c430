"""
Handles fetching manifests and artifacts over HTTP.

Artifacts are pulled with a managed transfer first (streamed into a partial file
and resumed with Range requests between retries). If that fails for any reason,
a plain single GET is tried before the download is reported as failed.
"""

import asyncio
import json
import logging
import os
import ssl
import time
from contextlib import suppress
from pathlib import Path
from typing import Any

import aiofiles
import aiohttp

from build_updater import __version__
from build_updater.exceptions import TransferError, TransferErrorKind
from build_updater.models.config import UpdaterConfig

log = logging.getLogger(__name__)

CACHE_BUSTER_PARAM = "_ts"
PARTIAL_SUFFIX = ".part"


def create_ssl_context() -> ssl.SSLContext:
    """Builds the client TLS context, refusing anything older than TLS 1.2."""
    context = ssl.create_default_context()
    context.minimum_version = ssl.TLSVersion.TLSv1_2
    return context


class TransferClient:
    """Downloads files and JSON manifests over one shared aiohttp session."""

    CHUNK_SIZE = 262144  # 256 KB

    def __init__(
        self,
        attempts: int = 3,
        base_delay: float = 1.5,
        connect_timeout: float = 15.0,
        read_timeout: float = 90.0,
    ):
        self.attempts = attempts
        self.base_delay = base_delay
        self.connect_timeout = connect_timeout
        self.read_timeout = read_timeout
        self._session: aiohttp.ClientSession | None = None

    @classmethod
    def from_config(cls, config: UpdaterConfig) -> "TransferClient":
        return cls(
            attempts=config.download_attempts,
            base_delay=config.retry_base_delay,
            connect_timeout=config.connect_timeout,
            read_timeout=config.read_timeout,
        )

    async def _initialize_session(self) -> aiohttp.ClientSession:
        """Ensures an active session exists; the TLS floor is applied before any request."""
        if self._session is None or self._session.closed:
            connector = aiohttp.TCPConnector(
                ssl=create_ssl_context(),
                limit=4,
                ttl_dns_cache=300,
                enable_cleanup_closed=True,
            )
            self._session = aiohttp.ClientSession(
                connector=connector,
                timeout=aiohttp.ClientTimeout(
                    total=None,
                    sock_connect=self.connect_timeout,
                    sock_read=self.read_timeout,
                ),
                headers={"User-Agent": f"build-updater/{__version__}"},
            )
        return self._session

    async def close(self) -> None:
        """Gracefully closes the aiohttp session."""
        if self._session and not self._session.closed:
            await self._session.close()
            log.debug("Transfer session closed.")

    async def fetch_to_file(self, url: str, destination: str | os.PathLike) -> Path:
        """
        Downloads url to destination, creating parent directories as needed.

        Raises:
            TransferError: If both the managed and the plain transfer fail.
        """
        destination = Path(destination)
        await asyncio.to_thread(destination.parent.mkdir, parents=True, exist_ok=True)

        try:
            await self._managed_download(url, destination)
            return destination
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as e:
            log.warning(
                f"Managed transfer of {url} failed ({e}). Falling back to a plain GET."
            )

        partial = destination.with_name(destination.name + PARTIAL_SUFFIX)
        with suppress(OSError):
            await asyncio.to_thread(partial.unlink, missing_ok=True)

        try:
            await self._plain_download(url, destination)
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as e:
            raise TransferError(
                f"Could not download {url}: {e}", url, TransferErrorKind.UNREACHABLE
            ) from e
        return destination

    async def _managed_download(self, url: str, destination: Path) -> None:
        """Streams url into a partial file, resuming from its size on each retry."""
        partial = destination.with_name(destination.name + PARTIAL_SUFFIX)
        last_exception = None
        for attempt in range(1, self.attempts + 1):
            try:
                offset = partial.stat().st_size if partial.exists() else 0
                headers = {"Range": f"bytes={offset}-"} if offset else {}
                session = await self._initialize_session()
                async with session.get(
                    url, headers=headers, allow_redirects=True
                ) as response:
                    if response.status == 416:
                        # Partial file no longer lines up with the resource.
                        partial.unlink(missing_ok=True)
                    response.raise_for_status()

                    resumed = offset > 0 and response.status == 206
                    if offset and not resumed:
                        log.debug(f"Server ignored range request for {url}; restarting.")
                    async with aiofiles.open(partial, "ab" if resumed else "wb") as f:
                        async for chunk in response.content.iter_chunked(
                            self.CHUNK_SIZE
                        ):
                            await f.write(chunk)

                await asyncio.to_thread(os.replace, partial, destination)
                return
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                last_exception = e
                log.debug(
                    f"Download attempt {attempt}/{self.attempts} for "
                    f"'{destination.name}' failed: {e}."
                )
                if attempt < self.attempts:
                    await asyncio.sleep(self.base_delay * (2 ** (attempt - 1)))

        if last_exception:
            raise last_exception

    async def _plain_download(self, url: str, destination: Path) -> None:
        """Fetches the whole body in one request and writes it out."""
        session = await self._initialize_session()
        async with session.get(url, allow_redirects=True) as response:
            response.raise_for_status()
            body = await response.read()
        async with aiofiles.open(destination, "wb") as f:
            await f.write(body)

    async def fetch_json(self, url: str) -> dict[str, Any]:
        """
        Fetches url and parses it as a JSON object.

        A timestamp query parameter is added to every request so that no cache
        between here and the origin can serve a stale manifest.

        Raises:
            TransferError: UNREACHABLE for network/HTTP failures, MALFORMED for a
            body that is not a JSON object.
        """
        params = {CACHE_BUSTER_PARAM: str(int(time.time()))}
        try:
            session = await self._initialize_session()
            async with session.get(url, params=params, allow_redirects=True) as r:
                r.raise_for_status()
                raw = await r.read()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise TransferError(
                f"Could not fetch {url}: {e}", url, TransferErrorKind.UNREACHABLE
            ) from e

        try:
            data = json.loads(raw)
        except ValueError as e:
            raise TransferError(
                f"Response from {url} is not valid JSON: {e}",
                url,
                TransferErrorKind.MALFORMED,
            ) from e

        if not isinstance(data, dict):
            raise TransferError(
                f"Response from {url} is not a JSON object.",
                url,
                TransferErrorKind.MALFORMED,
            )
        return data
