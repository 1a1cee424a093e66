"""sysext-images - metadata resolution and update selection for system extension images."""

__version__ = "0.1.0"

from .compat import annotate_compatibility, extension_release_validate, native_architecture
from .core.client import SysextRepositoryClient
from .core.types import SysextConfig
from .exceptions import (
    AmbiguousEntryError,
    DownloadError,
    ExtractionError,
    MetadataParseError,
    NoEntryError,
    SysextError,
    TruncatedReadError,
)
from .models import ImageDeps, ImageEntry, ImageFailure, MetadataReport
from .parsers.release import load_ext_release, load_os_release
from .sysext import (
    discover_images,
    get_latest_version,
    image_local_metadata,
    image_remote_metadata,
)
from .utils.version import compare_versions

__all__ = [
    "SysextConfig",
    "SysextRepositoryClient",
    "ImageDeps",
    "ImageEntry",
    "ImageFailure",
    "MetadataReport",
    "discover_images",
    "image_local_metadata",
    "image_remote_metadata",
    "get_latest_version",
    "compare_versions",
    "load_ext_release",
    "load_os_release",
    "extension_release_validate",
    "annotate_compatibility",
    "native_architecture",
    "SysextError",
    "DownloadError",
    "ExtractionError",
    "MetadataParseError",
    "NoEntryError",
    "AmbiguousEntryError",
    "TruncatedReadError",
]
