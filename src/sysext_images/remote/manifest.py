"""Parsing of SHA256SUMS manifests."""

import logging
import re
from dataclasses import dataclass
from typing import Union

import aiofiles

from ..utils.names import is_image_filename

logger = logging.getLogger(__name__)

MANIFEST_NAME = "SHA256SUMS"

# "<checksum><blanks><filename>"
_LINE_PATTERN = re.compile(r"^([^ \t]+)[ \t]+(.+)$")


@dataclass
class ManifestEntry:
    """One image line of a checksum manifest."""

    checksum: str
    filename: str


def parse_manifest_entries(content: Union[bytes, str]) -> list[ManifestEntry]:
    """Parse a checksum manifest into image entries.

    Lines that do not name a ``.raw`` or ``.img`` file (the manifest's own
    signature, sidecars, ...) are skipped. Filenames are kept verbatim and
    duplicates are preserved in manifest order.

    Args:
        content: Manifest content

    Returns:
        List of manifest entries; empty for an empty manifest
    """
    if isinstance(content, bytes):
        content = content.decode("utf-8", errors="surrogateescape")

    entries = []
    for line in content.split("\n"):
        if not is_image_filename(line):
            continue

        match = _LINE_PATTERN.match(line)
        if match is None:
            logger.debug(f"Skipping manifest line without checksum: {line!r}")
            continue

        entries.append(ManifestEntry(checksum=match.group(1), filename=match.group(2)))

    return entries


def parse_manifest(content: Union[bytes, str]) -> list[str]:
    """Parse a checksum manifest into the list of image filenames."""
    return [entry.filename for entry in parse_manifest_entries(content)]


async def load_manifest(path: str) -> list[ManifestEntry]:
    """Read and parse a manifest file."""
    async with aiofiles.open(path, "rb") as f:
        return parse_manifest_entries(await f.read())
