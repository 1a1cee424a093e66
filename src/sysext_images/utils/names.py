"""Image filename helpers."""

from typing import Optional

IMAGE_SUFFIXES = (".raw", ".img")


def is_image_filename(filename: str) -> bool:
    """Check if filename carries a recognized image suffix."""
    return filename.endswith(IMAGE_SUFFIXES)


def strip_image_suffix(filename: str) -> str:
    """Remove the image suffix, e.g. ``foo-1.0.x86-64.raw`` -> ``foo-1.0.x86-64``."""
    for suffix in IMAGE_SUFFIXES:
        if filename.endswith(suffix):
            return filename[: -len(suffix)]
    return filename


def _cut_last(value: str, sep: str) -> str:
    head, found, _ = value.rpartition(sep)
    return head if found else value


def short_name(filename: str) -> str:
    """Derive the image family name from a filename.

    Strips, in order, the file extension, the architecture and the version:
    ``debug-tools-23.7.x86-64.raw`` becomes ``debug-tools``. A missing
    separator leaves the name as it is.

    Args:
        filename: Image filename

    Returns:
        Short name of the image
    """
    name = _cut_last(filename, ".")  # extension
    name = _cut_last(name, ".")  # architecture
    return _cut_last(name, "-")  # version


def matches_name_filter(filename: str, name_filter: Optional[str]) -> bool:
    """Check if filename belongs to the image family named by ``name_filter``.

    The filter must equal the whole short name; it is not a raw prefix of
    the filename. ``debug`` therefore selects ``debug-23.raw`` but not
    ``debug-tools-23.raw``. No filter matches everything.
    """
    if not name_filter:
        return True
    return short_name(filename) == name_filter
