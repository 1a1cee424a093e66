"""Selection of the newest compatible image version."""

import logging
from typing import Iterable, Optional

from .core.types import SysextConfig
from .exceptions import DownloadError
from .local.extract import Extractor, systemd_dissect_extract
from .local.metadata import image_local_metadata
from .models import ImageEntry
from .remote.metadata import image_remote_metadata
from .utils.version import is_newer

logger = logging.getLogger(__name__)


def check_if_newer(
    curr: ImageEntry, cand: ImageEntry, update: Optional[ImageEntry]
) -> Optional[ImageEntry]:
    """Fold one candidate into the running best update.

    A candidate qualifies if it has the architecture of the current image and
    a strictly newer version than both the current image and the running
    best. A qualifying candidate replaces the running best and hands over its
    metadata record.

    Returns:
        The new running best update
    """
    if curr.deps is None or cand.deps is None:
        return update

    if cand.architecture is None or cand.architecture != curr.architecture:
        logger.debug(
            f"Rejecting '{cand.filename}': architecture {cand.architecture} "
            f"!= {curr.architecture}"
        )
        return update

    if not is_newer(cand.version, curr.version):
        logger.debug(
            f"Rejecting '{cand.filename}': version {cand.version} is not newer "
            f"than installed {curr.version}"
        )
        return update

    if update is not None and not is_newer(cand.version, update.version):
        return update

    return ImageEntry.take_from(cand)


def select_update(
    curr: ImageEntry, *candidate_lists: Iterable[ImageEntry]
) -> Optional[ImageEntry]:
    """Pick the best update for curr from the given candidate lists."""
    update = None
    for candidates in candidate_lists:
        for cand in candidates:
            update = check_if_newer(curr, cand, update)
    return update


async def get_latest_version(
    curr: ImageEntry,
    url: Optional[str] = None,
    config: Optional[SysextConfig] = None,
    extractor: Extractor = systemd_dissect_extract,
    strict: bool = False,
) -> Optional[ImageEntry]:
    """Find the newest version of an installed image.

    Candidates come from the remote repository (if a URL is configured) and
    the local store, restricted to images of the same name.

    Args:
        curr: Currently installed image
        url: Repository URL; overrides config.url
        config: Client configuration; defaults to SysextConfig.from_env()
        extractor: Extraction collaborator for local images
        strict: Raise on the first image or repository failure instead of
            skipping it

    Returns:
        The best update, or None if nothing newer is available

    Raises:
        OSError: If the local store cannot be scanned
        SysextError: In strict mode, the first acquisition failure
    """
    config = config or SysextConfig.from_env()
    url = (url or config.url or "").rstrip("/") or None

    update = None

    if url:
        remote_config = SysextConfig(
            store_dir=config.store_dir,
            url=url,
            timeout=config.timeout,
            tmp_dir=config.tmp_dir,
            concurrent_downloads=config.concurrent_downloads,
        )
        try:
            remote = await image_remote_metadata(remote_config, name_filter=curr.name)
        except DownloadError as e:
            logger.error(f"Fetching image data from '{url}' failed: {e}")
            if strict:
                raise
        else:
            if strict:
                remote.raise_for_failures()
            update = select_update(curr, remote)

    try:
        local = await image_local_metadata(
            config, name_filter=curr.name, extractor=extractor
        )
    except OSError as e:
        logger.error(f"Searching for images in '{config.store_dir}' failed: {e}")
        raise
    if strict:
        local.raise_for_failures()

    for cand in local:
        update = check_if_newer(curr, cand, update)

    return update
