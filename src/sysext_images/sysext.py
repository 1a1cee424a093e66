"""Functional sysext image operations."""

import asyncio
from typing import Optional

from .core.types import DEFAULT_STORE_DIR, DEFAULT_TIMEOUT, SysextConfig
from .local.discover import discover_images as _discover_images
from .local.extract import Extractor, systemd_dissect_extract
from .local.metadata import image_local_metadata as _image_local_metadata
from .models import ImageEntry, MetadataReport
from .remote.metadata import image_remote_metadata as _image_remote_metadata
from .update import get_latest_version as _get_latest_version


async def discover_images(store_dir: str = DEFAULT_STORE_DIR) -> list[str]:
    """List the image files of a local store.

    Args:
        store_dir: Store directory (e.g. "/var/lib/sysext/store")

    Returns:
        list[str]: Image filenames in directory order, symlinks resolved
            (e.g. ["debug-tools-23.7.x86-64.raw"])

    Raises:
        OSError: If the store cannot be read
        TruncatedReadError: If a symlink target cannot be trusted

    Examples:
        images = await discover_images("/var/lib/sysext/store")
        print(f"Found images: {images}")
    """
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, _discover_images, store_dir)


async def image_local_metadata(
    store_dir: str = DEFAULT_STORE_DIR,
    name_filter: Optional[str] = None,
    extractor: Extractor = systemd_dissect_extract,
) -> MetadataReport:
    """Read the metadata of every image in a local store.

    Args:
        store_dir: Store directory
        name_filter: Only consider images with this short name (e.g. "debug-tools")
        extractor: Extraction collaborator, systemd-dissect by default

    Returns:
        MetadataReport: Parsed entries plus the images that failed

    Examples:
        report = await image_local_metadata(name_filter="debug-tools")
        for entry in report:
            print(entry.deps.describe())
    """
    config = SysextConfig(store_dir=store_dir)
    return await _image_local_metadata(config, name_filter, extractor)


async def image_remote_metadata(
    url: str, name_filter: Optional[str] = None, timeout: int = DEFAULT_TIMEOUT
) -> MetadataReport:
    """Read the metadata of every image in a remote repository.

    Args:
        url: Repository URL (e.g. "https://download.example.org/sysext")
        name_filter: Only fetch sidecars of images with this short name
        timeout: Request timeout in seconds

    Returns:
        MetadataReport: Parsed entries plus the images that failed

    Raises:
        DownloadError: If the manifest cannot be downloaded

    Examples:
        report = await image_remote_metadata("https://download.example.org/sysext")
        print(f"{len(report)} images available")
    """
    config = SysextConfig(url=url, timeout=timeout)
    return await _image_remote_metadata(config, name_filter)


async def get_latest_version(
    curr: ImageEntry,
    url: Optional[str] = None,
    store_dir: str = DEFAULT_STORE_DIR,
    timeout: int = DEFAULT_TIMEOUT,
    strict: bool = False,
    extractor: Extractor = systemd_dissect_extract,
) -> Optional[ImageEntry]:
    """Find the newest version of an installed image.

    Args:
        curr: Currently installed image with its metadata
        url: Repository URL; only the local store is searched without it
        store_dir: Store directory
        timeout: Request timeout in seconds
        strict: Fail on the first broken image instead of skipping it
        extractor: Extraction collaborator for local images

    Returns:
        ImageEntry | None: The best update, or None if curr is the newest

    Examples:
        update = await get_latest_version(curr, "https://download.example.org/sysext")
        if update:
            print(f"Update available: {update.filename}")
    """
    config = SysextConfig(store_dir=store_dir, url=url, timeout=timeout)
    return await _get_latest_version(
        curr, config=config, extractor=extractor, strict=strict
    )
