"""Discovery of images in the local image store."""

import os

from ..exceptions import TruncatedReadError
from ..utils.names import is_image_filename

# Magic symlinks (/proc, /sys) report st_size 0; assume a path fits in PATH_MAX
PATH_MAX = 4096


def read_link_checked(directory: str, name: str) -> str:
    """Read a symlink target, refusing targets that changed while reading.

    The link size reported by lstat() bounds the target length. A target
    longer than that cannot be trusted.

    Raises:
        OSError: If the link cannot be stat'ed or read
        TruncatedReadError: If the target exceeds the expected size
    """
    path = os.path.join(directory, name)
    st = os.lstat(path)
    target = os.readlink(path)

    limit = st.st_size if st.st_size > 0 else PATH_MAX - 1
    if len(os.fsencode(target)) > limit:
        raise TruncatedReadError(f"Target of symlink '{path}' may have been truncated")

    return target


def discover_images(path: str) -> list[str]:
    """List the images of a store directory.

    Only names ending in ``.raw`` or ``.img`` are returned, ordered by the
    directory entry name. Symlinks are replaced by the basename of their
    target.

    Args:
        path: Store directory

    Returns:
        Image filenames; empty if the store holds no images

    Raises:
        OSError: If the directory or a symlink cannot be read
        TruncatedReadError: If a symlink target cannot be trusted
    """
    with os.scandir(path) as it:
        matches = sorted(
            (entry for entry in it if is_image_filename(entry.name)),
            key=lambda entry: entry.name,
        )

    result = []
    for entry in matches:
        if entry.is_symlink():
            target = read_link_checked(path, entry.name)
            result.append(target.rsplit("/", 1)[-1])
        else:
            result.append(entry.name)

    return result
