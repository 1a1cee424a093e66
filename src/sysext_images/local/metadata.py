"""Metadata acquisition for images in the local store."""

import asyncio
import logging
import os
from typing import Optional

from ..core.types import SysextConfig
from ..exceptions import ExtractionError, SysextError
from ..models import ImageDeps, ImageEntry, ImageFailure, MetadataReport
from ..parsers.release import load_ext_release
from ..utils.names import matches_name_filter, short_name
from ..utils.tmpfile import PrivateTempFile
from .discover import discover_images
from .extract import DISSECT_BINARY, Extractor, systemd_dissect_extract

logger = logging.getLogger(__name__)

TMP_PREFIX = "sysext-image-extrelease."


async def image_read_metadata(
    store_dir: str,
    image_name: str,
    extractor: Extractor = systemd_dissect_extract,
    tmp_dir: Optional[str] = None,
) -> ImageDeps:
    """Read the dependency metadata embedded in a local image.

    The extension-release file is extracted into a private temporary file,
    which is removed again before returning.

    Args:
        store_dir: Store directory holding the image
        image_name: Image filename
        extractor: Extraction collaborator
        tmp_dir: Directory for the temporary file

    Returns:
        ImageDeps of the image

    Raises:
        ExtractionError: If the release file cannot be extracted
        MetadataParseError: If the release file cannot be parsed
    """
    with PrivateTempFile(TMP_PREFIX, tmp_dir) as tmp:
        status = await extractor(store_dir, image_name, tmp.fd)
        tmp.close()

        if status != 0:
            reason = (
                os.strerror(-status)
                if status < 0
                else f"{DISSECT_BINARY} failed ({status})"
            )
            message = (
                f"Failed to extract extension-release from '{image_name}': {reason}"
            )
            logger.error(message)
            raise ExtractionError(message, image=image_name, status=status)

        return await load_ext_release(image_name, tmp.path)


async def image_local_metadata(
    config: SysextConfig,
    name_filter: Optional[str] = None,
    extractor: Extractor = systemd_dissect_extract,
) -> MetadataReport:
    """Acquire metadata for every image in the local store.

    Images are processed in store order. An image whose metadata cannot be
    read is recorded as a failure and the scan continues.

    Args:
        config: Client configuration (store_dir, tmp_dir)
        name_filter: Only consider images with this short name
        extractor: Extraction collaborator

    Returns:
        MetadataReport with local entries

    Raises:
        OSError: If the store cannot be scanned
        TruncatedReadError: If a symlink in the store cannot be trusted
    """
    loop = asyncio.get_running_loop()
    try:
        filenames = await loop.run_in_executor(None, discover_images, config.store_dir)
    except (OSError, SysextError) as e:
        logger.error(f"Scan local images failed: {e}")
        raise

    report = MetadataReport()
    for filename in filenames:
        if not matches_name_filter(filename, name_filter):
            logger.debug(f"Skipping local image '{filename}': not '{name_filter}'")
            continue

        try:
            deps = await image_read_metadata(
                config.store_dir, filename, extractor, config.tmp_dir
            )
        except SysextError as e:
            logger.warning(f"Skipping local image '{filename}': {e}")
            report.failures.append(ImageFailure(filename=filename, error=e))
            continue

        report.entries.append(
            ImageEntry(
                name=short_name(filename),
                filename=filename,
                deps=deps,
                local=True,
            )
        )

    return report
