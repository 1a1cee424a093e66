"""Parsing of JSON image sidecars into dependency records."""

import json
import logging
from typing import Any

import aiofiles

from ..exceptions import MetadataParseError
from ..models import ImageDeps

logger = logging.getLogger(__name__)

# JSON key -> ImageDeps attribute; keys are case sensitive
FIELD_TABLE = {
    "image_name": "image_name",
    "SYSEXT_VERSION_ID": "sysext_version_id",
    "SYSEXT_SCOPE": "sysext_scope",
    "ID": "id",
    "SYSEXT_LEVEL": "sysext_level",
    "VERSION_ID": "version_id",
    "ARCHITECTURE": "architecture",
}

NESTED_KEY = "sysext"


def _dispatch_fields(obj: dict[str, Any], deps: ImageDeps) -> None:
    """Copy the known string fields of obj into deps, ignoring unknown keys."""
    for key, attr in FIELD_TABLE.items():
        if key not in obj:
            continue
        value = obj[key]
        if value is None:
            continue
        if not isinstance(value, str):
            raise MetadataParseError(
                f"JSON field '{key}' has wrong type: expected string, "
                f"got {type(value).__name__}"
            )
        # Empty strings carry no information, keep the field absent
        if value:
            setattr(deps, attr, value)


def parse_image_entry(obj: Any) -> ImageDeps:
    """Parse one JSON object into an ImageDeps record.

    Fields may appear at top level and inside a ``sysext`` object; values
    from the nested object win.

    Args:
        obj: Decoded JSON value

    Returns:
        ImageDeps record

    Raises:
        MetadataParseError: If obj is not an object or a field has the wrong type
    """
    if not isinstance(obj, dict):
        raise MetadataParseError(f"Entry is no object: {type(obj).__name__}")

    deps = ImageDeps()
    _dispatch_fields(obj, deps)

    nested = obj.get(NESTED_KEY)
    if nested is None:
        return deps
    if not isinstance(nested, dict):
        raise MetadataParseError(
            f"JSON field '{NESTED_KEY}' has wrong type: expected object, "
            f"got {type(nested).__name__}"
        )
    _dispatch_fields(nested, deps)
    return deps


def parse_image_json(content: str) -> list[ImageDeps]:
    """Parse a sidecar document holding an object or an array of objects.

    An empty array yields an empty list; deciding whether that is an error
    is up to the caller.

    Raises:
        MetadataParseError: If the document is not valid JSON or any entry is invalid
    """
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise MetadataParseError(
            f"Failed to parse JSON {e.lineno}:{e.colno}: {e.msg}"
        ) from e
    except (ValueError, RecursionError) as e:
        # oversized integers and excessive nesting
        raise MetadataParseError(f"Failed to parse JSON: {e}") from e

    if isinstance(data, list):
        return [parse_image_entry(item) for item in data]

    return [parse_image_entry(data)]


async def load_image_json(path: str) -> list[ImageDeps]:
    """Read and parse a sidecar file.

    Raises:
        MetadataParseError: If the file is not UTF-8 or not a valid sidecar
    """
    async with aiofiles.open(path, "rb") as f:
        raw = await f.read()

    try:
        content = raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise MetadataParseError(f"Cannot decode JSON file ({path}): {e}") from e

    try:
        return parse_image_json(content)
    except MetadataParseError as e:
        logger.error(f"Failed to parse json file ({path}): {e}")
        raise
