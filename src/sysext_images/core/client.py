"""Async client for sysext image repositories."""

import asyncio
import logging
from typing import Optional
from urllib.parse import quote

import aiofiles
import aiohttp
from yarl import URL

from ..exceptions import DownloadError
from .session import create_session
from .types import DEFAULT_TIMEOUT

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


class SysextRepositoryClient:
    """Fetches resources from a sysext image repository over HTTP(S).

    A repository is a flat directory served at a base URL holding a
    ``SHA256SUMS`` manifest, the images and a ``<image>.json`` sidecar per
    image.
    """

    def __init__(
        self,
        url: str,
        timeout: int = DEFAULT_TIMEOUT,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        """Initialize the repository client.

        Args:
            url: Repository base URL (e.g., https://download.example.org/sysext)
            timeout: Request timeout in seconds
            session: Existing session to reuse; it is not closed by this client
        """
        self.url = url.rstrip("/")
        self.timeout = timeout
        self.session = session
        self._owns_session = session is None

    async def __aenter__(self) -> "SysextRepositoryClient":
        """Enter async context manager."""
        if not self.session:
            self.session = await create_session(self.timeout)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit async context manager."""
        await self.close()

    async def close(self) -> None:
        """Close the client session if this client created it."""
        if self._owns_session and self.session and not self.session.closed:
            await self.session.close()

    def resource_url(self, resource: str) -> URL:
        """URL of a resource; the name is escaped as a single path segment."""
        return URL(f"{self.url}/{quote(resource, safe='')}", encoded=True)

    async def download(self, resource: str, output_path: str) -> None:
        """Download a repository resource into a local file.

        Args:
            resource: Resource name relative to the base URL (e.g., SHA256SUMS)
            output_path: File to write; it is truncated first

        Raises:
            DownloadError: If the request fails or returns an error status
        """
        if not self.session:
            raise DownloadError(
                "Client session is not open", url=self.url, resource=resource
            )

        url = self.resource_url(resource)
        logger.debug(f"Downloading {url}")
        try:
            async with self.session.get(url) as resp:
                resp.raise_for_status()
                async with aiofiles.open(output_path, "wb") as f:
                    async for chunk in resp.content.iter_chunked(CHUNK_SIZE):
                        await f.write(chunk)

        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise DownloadError(
                f"Failed to download '{resource}' from '{self.url}': {e}",
                url=self.url,
                resource=resource,
            ) from e
