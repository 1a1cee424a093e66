"""Custom exceptions for the sysext image metadata client."""

from typing import Optional


class SysextError(Exception):
    """Base exception for all sysext image errors."""

    pass


class DownloadError(SysextError):
    """Raised when a resource cannot be fetched from the remote repository."""

    def __init__(self, message: str, url: str = "", resource: str = "") -> None:
        super().__init__(message)
        self.url = url
        self.resource = resource


class ExtractionError(SysextError):
    """Raised when the extension-release file cannot be extracted from an image.

    ``status`` is the extractor's result: negative values are errno codes,
    positive values are tool specific failure codes.
    """

    def __init__(self, message: str, image: str = "", status: int = 0) -> None:
        super().__init__(message)
        self.image = image
        self.status = status


class MetadataParseError(SysextError):
    """Raised when a JSON sidecar or release file is structurally invalid."""

    pass


class NoEntryError(SysextError):
    """Raised when a sidecar parses but contains no entry with dependencies."""

    pass


class AmbiguousEntryError(SysextError):
    """Raised when a sidecar lists more than one image entry."""

    def __init__(self, message: str, count: Optional[int] = None) -> None:
        super().__init__(message)
        self.count = count


class TruncatedReadError(SysextError):
    """Raised when a symlink target may have been truncated while reading it."""

    pass
