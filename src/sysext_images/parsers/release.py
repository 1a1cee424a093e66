"""Parsing of KEY=VALUE release files (os-release, extension-release)."""

import logging
from pathlib import Path
from typing import Optional

import aiofiles

from ..exceptions import MetadataParseError
from ..models import ImageDeps

logger = logging.getLogger(__name__)

OS_RELEASE_PATHS = ("/etc/os-release", "/usr/lib/os-release")

# Release file key -> ImageDeps attribute
RELEASE_KEYS = {
    "ID": "id",
    "VERSION_ID": "version_id",
    "SYSEXT_LEVEL": "sysext_level",
    "SYSEXT_SCOPE": "sysext_scope",
    "SYSEXT_VERSION_ID": "sysext_version_id",
    "ARCHITECTURE": "architecture",
}

_ESCAPABLE = '"\\$`'


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] == "'":
        return value[1:-1]

    if len(value) >= 2 and value[0] == value[-1] == '"':
        inner = value[1:-1]
        out = []
        i = 0
        while i < len(inner):
            ch = inner[i]
            if ch == "\\" and i + 1 < len(inner) and inner[i + 1] in _ESCAPABLE:
                out.append(inner[i + 1])
                i += 2
                continue
            out.append(ch)
            i += 1
        return "".join(out)

    return value


def parse_release_text(text: str, source: str = "<release>") -> dict[str, str]:
    """Parse KEY=VALUE lines into a dictionary.

    Blank lines and ``#``/``;`` comments are skipped, values may be single or
    double quoted. Lines without ``=`` are logged and ignored.
    """
    result: dict[str, str] = {}
    for lineno, line in enumerate(text.splitlines(), start=1):
        line = line.strip()
        if not line or line[0] in "#;":
            continue

        key, sep, value = line.partition("=")
        key = key.strip()
        if not sep or not key:
            logger.debug(f"{source}:{lineno}: ignoring line without assignment")
            continue

        result[key] = _unquote(value.strip())
    return result


def release_to_deps(values: dict[str, str], image_name: Optional[str] = None) -> ImageDeps:
    """Map release file keys onto an ImageDeps record."""
    deps = ImageDeps(image_name=image_name)
    for key, attr in RELEASE_KEYS.items():
        value = values.get(key)
        if value:
            setattr(deps, attr, value)
    return deps


async def _read_text(path: str) -> str:
    async with aiofiles.open(path, "rb") as f:
        raw = await f.read()
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise MetadataParseError(f"Cannot decode release file ({path}): {e}") from e


async def load_ext_release(image_name: str, path: str) -> ImageDeps:
    """Load the extension-release file extracted from an image.

    Args:
        image_name: Image filename the release file belongs to
        path: Path of the extracted release file

    Returns:
        ImageDeps with image_name set

    Raises:
        MetadataParseError: If the file cannot be decoded
    """
    text = await _read_text(path)
    return release_to_deps(parse_release_text(text, source=path), image_name=image_name)


async def load_os_release(path: Optional[str] = None) -> ImageDeps:
    """Load the host identity from os-release.

    Without a path, ``/etc/os-release`` is tried first and
    ``/usr/lib/os-release`` second.

    Raises:
        FileNotFoundError: If no os-release file exists
    """
    candidates = (path,) if path else OS_RELEASE_PATHS
    for candidate in candidates:
        if Path(candidate).exists():
            text = await _read_text(candidate)
            return release_to_deps(parse_release_text(text, source=candidate))

    raise FileNotFoundError(f"No os-release file found in {', '.join(candidates)}")
