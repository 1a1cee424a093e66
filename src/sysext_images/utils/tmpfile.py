"""Private temporary files that never outlive their caller."""

import os
import tempfile
from pathlib import Path
from typing import Optional


class PrivateTempFile:
    """Exclusively created temporary file, unlinked when the context exits.

    Usage:
        with PrivateTempFile("sysext-image-json.") as tmp:
            write_to(tmp.fd)
            read_from(tmp.path)
    """

    def __init__(self, prefix: str, directory: Optional[str] = None) -> None:
        self.prefix = prefix
        self.directory = directory
        self.fd: int = -1
        self.path: str = ""

    def __enter__(self) -> "PrivateTempFile":
        # mkstemp opens with O_CREAT|O_EXCL and mode 0600
        self.fd, self.path = tempfile.mkstemp(prefix=self.prefix, dir=self.directory)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
        Path(self.path).unlink(missing_ok=True)

    def close(self) -> None:
        """Close the descriptor, keeping the file until the context exits."""
        if self.fd >= 0:
            os.close(self.fd)
            self.fd = -1
