"""Extraction of the extension-release file from an image."""

import asyncio
import errno
import logging
import os
from typing import Awaitable, Callable

from ..utils.names import strip_image_suffix

logger = logging.getLogger(__name__)

DISSECT_BINARY = "systemd-dissect"
EXTENSION_RELEASE_DIR = "/usr/lib/extension-release.d"

# extract(store_dir, image_name, output_fd) -> status
Extractor = Callable[[str, str, int], Awaitable[int]]


def extension_release_path(image_name: str) -> str:
    """Path of the extension-release file inside an image."""
    return f"{EXTENSION_RELEASE_DIR}/extension-release.{strip_image_suffix(image_name)}"


async def systemd_dissect_extract(store_dir: str, image_name: str, output_fd: int) -> int:
    """Copy the extension-release file of an image to output_fd.

    Returns:
        0 on success, a negative errno if the tool could not be started,
        the tool's positive exit status otherwise
    """
    argv = [
        DISSECT_BINARY,
        "--copy-from",
        os.path.join(store_dir, image_name),
        extension_release_path(image_name),
        "-",
    ]

    try:
        proc = await asyncio.create_subprocess_exec(
            *argv,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=output_fd,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as e:
        return -(e.errno or errno.EIO)

    _, stderr = await proc.communicate()
    status = proc.returncode or 0
    if status != 0:
        logger.debug(
            f"{DISSECT_BINARY} failed for '{image_name}': "
            f"{stderr.decode(errors='replace').strip()}"
        )
    if status < 0:
        # killed by signal, report it the way a shell would
        status = 128 - status
    return status
