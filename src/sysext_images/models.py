"""Data models for sysext image metadata."""

from dataclasses import dataclass, field
from typing import Iterator, List, Optional


@dataclass
class ImageDeps:
    """Dependency and compatibility metadata of one image version.

    Every field is either a non-empty string or ``None``; ``None`` means the
    image does not declare the value.
    """

    image_name: Optional[str] = None
    sysext_version_id: Optional[str] = None
    sysext_scope: Optional[str] = None
    id: Optional[str] = None
    sysext_level: Optional[str] = None
    version_id: Optional[str] = None
    architecture: Optional[str] = None

    def describe(self) -> str:
        """Render the record as a human readable listing."""
        return "\n".join(
            [
                f"image name: {self.image_name}",
                f"* sysext version_id: {self.sysext_version_id}",
                f"* sysext scope: {self.sysext_scope}",
                f"* id: {self.id}",
                f"* sysext_level: {self.sysext_level}",
                f"* version_id: {self.version_id}",
                f"* architecture: {self.architecture}",
            ]
        )


@dataclass
class ImageEntry:
    """One catalog entry, found either in the local store or a remote repository."""

    name: str
    filename: str = ""
    deps: Optional[ImageDeps] = None
    remote: bool = False
    local: bool = False
    installed: bool = False
    compatible: bool = False
    sha256: Optional[str] = None

    @classmethod
    def take_from(cls, donor: "ImageEntry") -> "ImageEntry":
        """Build a new entry from ``donor``, moving its metadata record.

        The donor is left without a record.
        """
        entry = cls(
            name=donor.name,
            filename=donor.filename,
            deps=donor.deps,
            remote=donor.remote,
            local=donor.local,
            installed=donor.installed,
            compatible=donor.compatible,
            sha256=donor.sha256,
        )
        donor.deps = None
        return entry

    @property
    def version(self) -> Optional[str]:
        return self.deps.sysext_version_id if self.deps else None

    @property
    def architecture(self) -> Optional[str]:
        return self.deps.architecture if self.deps else None


@dataclass
class ImageFailure:
    """An image whose metadata could not be acquired."""

    filename: str
    error: Exception


@dataclass
class MetadataReport:
    """Result of acquiring metadata for a whole catalog.

    Successfully parsed images land in ``entries`` in catalog order, images
    that failed land in ``failures``.
    """

    entries: List[ImageEntry] = field(default_factory=list)
    failures: List[ImageFailure] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[ImageEntry]:
        return iter(self.entries)

    @property
    def ok(self) -> bool:
        return not self.failures

    def raise_for_failures(self) -> None:
        """Re-raise the first recorded failure, if any."""
        if self.failures:
            raise self.failures[0].error
