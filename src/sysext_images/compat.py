"""Host compatibility checks for extension images."""

import logging
import platform
from typing import Iterable, Optional

from .models import ImageDeps, ImageEntry

logger = logging.getLogger(__name__)

ANY = "_any"
DEFAULT_SCOPE = "system portable"

# machine type -> image architecture name
_ARCH_MAP = {
    "x86_64": "x86-64",
    "amd64": "x86-64",
    "i386": "x86",
    "i486": "x86",
    "i586": "x86",
    "i686": "x86",
    "aarch64": "arm64",
    "arm64": "arm64",
    "armv7l": "arm",
    "armv8l": "arm",
    "ppc64le": "ppc64-le",
    "ppc64": "ppc64",
    "s390x": "s390x",
    "riscv64": "riscv64",
    "loongarch64": "loongarch64",
}


def native_architecture(machine: Optional[str] = None) -> str:
    """Architecture name of the host as used in ARCHITECTURE= fields."""
    machine = (machine or platform.machine()).lower()
    return _ARCH_MAP.get(machine, machine)


def extension_release_validate(
    name: str,
    host_id: Optional[str],
    host_version_id: Optional[str],
    host_sysext_level: Optional[str],
    host_scope: Optional[str],
    deps: ImageDeps,
    host_architecture: Optional[str] = None,
) -> bool:
    """Check if an extension image may be merged on the host.

    The image must cover the requested scope and the host architecture,
    target the host distribution, and match either the host's SYSEXT_LEVEL
    or, without one, its VERSION_ID.

    Args:
        name: Image name, used for logging
        host_id: Host ID= value
        host_version_id: Host VERSION_ID= value
        host_sysext_level: Host SYSEXT_LEVEL= value
        host_scope: Scope to validate for (system, initrd, portable)
        deps: Image metadata
        host_architecture: Host architecture; defaults to the running machine

    Returns:
        True if compatible
    """
    if host_scope:
        scopes = (deps.sysext_scope or DEFAULT_SCOPE).split()
        if host_scope not in scopes:
            logger.debug(f"Extension '{name}' is not suitable for scope {host_scope}")
            return False

    if deps.architecture and deps.architecture != ANY:
        arch = host_architecture or native_architecture()
        if deps.architecture != arch:
            logger.debug(
                f"Extension '{name}' is for architecture '{deps.architecture}', "
                f"but deployed on top of '{arch}'"
            )
            return False

    if not deps.id:
        logger.debug(f"Extension '{name}' does not contain ID in release file")
        return False

    if deps.id == ANY:
        logger.debug(f"Extension '{name}' matches '{ANY}' OS")
        return True

    if deps.id != host_id:
        logger.debug(
            f"Extension '{name}' is for OS '{deps.id}', but deployed on top of '{host_id}'"
        )
        return False

    if deps.sysext_level and host_sysext_level:
        if deps.sysext_level != host_sysext_level:
            logger.debug(
                f"Extension '{name}' is for API level '{deps.sysext_level}', "
                f"but running on API level '{host_sysext_level}'"
            )
            return False
        return True

    if not deps.version_id:
        logger.debug(f"Extension '{name}' does not contain VERSION_ID, any version matches")
        return True

    if deps.version_id != host_version_id:
        logger.debug(
            f"Extension '{name}' is for OS version '{deps.version_id}', "
            f"but deployed on top of '{host_version_id}'"
        )
        return False

    return True


def annotate_compatibility(
    entries: Iterable[ImageEntry],
    host: ImageDeps,
    scope: str = "system",
    host_architecture: Optional[str] = None,
) -> None:
    """Set ``compatible`` on each entry against the host release."""
    for entry in entries:
        entry.compatible = entry.deps is not None and extension_release_validate(
            entry.filename or entry.name,
            host.id,
            host.version_id,
            host.sysext_level,
            scope,
            entry.deps,
            host_architecture=host_architecture,
        )
