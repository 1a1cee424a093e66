"""Metadata acquisition for images in a remote repository."""

import asyncio
import logging
from typing import Optional

from ..core.client import SysextRepositoryClient
from ..core.types import SysextConfig
from ..exceptions import AmbiguousEntryError, NoEntryError, SysextError
from ..models import ImageDeps, ImageEntry, ImageFailure, MetadataReport
from ..parsers.json_deps import load_image_json
from ..utils.digest import validate_digest
from ..utils.names import matches_name_filter, short_name
from ..utils.tmpfile import PrivateTempFile
from .manifest import MANIFEST_NAME, ManifestEntry, load_manifest

logger = logging.getLogger(__name__)

MANIFEST_TMP_PREFIX = "sysext-SHA256SUMS."
JSON_TMP_PREFIX = "sysext-image-json."


async def image_list_from_url(
    client: SysextRepositoryClient, tmp_dir: Optional[str] = None
) -> list[ManifestEntry]:
    """Fetch and parse the repository manifest.

    Raises:
        DownloadError: If the manifest cannot be downloaded
    """
    with PrivateTempFile(MANIFEST_TMP_PREFIX, tmp_dir) as tmp:
        tmp.close()
        await client.download(MANIFEST_NAME, tmp.path)
        return await load_manifest(tmp.path)


async def image_json_from_url(
    client: SysextRepositoryClient, image_name: str, tmp_dir: Optional[str] = None
) -> ImageDeps:
    """Fetch and parse the JSON sidecar of one image.

    Args:
        client: Open repository client
        image_name: Image filename as listed in the manifest
        tmp_dir: Directory for the temporary file

    Returns:
        ImageDeps of the image

    Raises:
        DownloadError: If the sidecar cannot be downloaded
        MetadataParseError: If the sidecar is not valid
        NoEntryError: If the sidecar lists no entry
        AmbiguousEntryError: If the sidecar lists more than one entry
    """
    jsonfn = f"{image_name}.json"

    with PrivateTempFile(JSON_TMP_PREFIX, tmp_dir) as tmp:
        tmp.close()
        await client.download(jsonfn, tmp.path)
        images = await load_image_json(tmp.path)

    if not images:
        raise NoEntryError(f"No entry with dependencies found ({jsonfn})")

    if len(images) > 1:
        # TODO: pick the entry matching image_name once sidecars define how
        raise AmbiguousEntryError(
            f"More than one entry found in {jsonfn} ({len(images)})",
            count=len(images),
        )

    return images[0]


async def _fetch_entry(
    client: SysextRepositoryClient,
    manifest_entry: ManifestEntry,
    semaphore: asyncio.Semaphore,
    tmp_dir: Optional[str],
) -> ImageEntry | ImageFailure:
    filename = manifest_entry.filename
    async with semaphore:
        try:
            deps = await image_json_from_url(client, filename, tmp_dir)
        except SysextError as e:
            logger.warning(f"Skipping remote image '{filename}': {e}")
            return ImageFailure(filename=filename, error=e)

    checksum = manifest_entry.checksum.lower()
    return ImageEntry(
        name=short_name(filename),
        filename=filename,
        deps=deps,
        remote=True,
        sha256=checksum if validate_digest(checksum) else None,
    )


async def fetch_remote_metadata(
    client: SysextRepositoryClient,
    name_filter: Optional[str] = None,
    concurrent_downloads: int = 4,
    tmp_dir: Optional[str] = None,
) -> MetadataReport:
    """Acquire metadata for the images of a repository using an open client.

    Sidecars are fetched concurrently; the report keeps manifest order.

    Raises:
        DownloadError: If the manifest cannot be downloaded
    """
    manifest = await image_list_from_url(client, tmp_dir)

    wanted = []
    for manifest_entry in manifest:
        if matches_name_filter(manifest_entry.filename, name_filter):
            wanted.append(manifest_entry)
        else:
            logger.debug(
                f"Skipping remote image '{manifest_entry.filename}': not '{name_filter}'"
            )

    semaphore = asyncio.Semaphore(concurrent_downloads)
    tasks = [
        asyncio.ensure_future(_fetch_entry(client, entry, semaphore, tmp_dir))
        for entry in wanted
    ]
    try:
        results = await asyncio.gather(*tasks)
    except BaseException:
        # no fetch may outlive the client session
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise

    report = MetadataReport()
    for result in results:
        if isinstance(result, ImageFailure):
            report.failures.append(result)
        else:
            report.entries.append(result)
    return report


async def image_remote_metadata(
    config: SysextConfig, name_filter: Optional[str] = None
) -> MetadataReport:
    """Acquire metadata for every image listed by the configured repository.

    Args:
        config: Client configuration; url must be set
        name_filter: Only fetch sidecars of images with this short name

    Returns:
        MetadataReport with remote entries

    Raises:
        ValueError: If no repository URL is configured
        DownloadError: If the manifest cannot be downloaded
    """
    if not config.url:
        raise ValueError("No repository URL configured")

    async with SysextRepositoryClient(config.url, timeout=config.timeout) as client:
        return await fetch_remote_metadata(
            client,
            name_filter=name_filter,
            concurrent_downloads=config.concurrent_downloads,
            tmp_dir=config.tmp_dir,
        )
