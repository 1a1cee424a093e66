"""Configuration types for the sysext image client."""

import os
from dataclasses import dataclass
from typing import Optional

DEFAULT_STORE_DIR = "/var/lib/sysext/store"
DEFAULT_TIMEOUT = 30
DEFAULT_CONCURRENT_DOWNLOADS = 4


@dataclass
class SysextConfig:
    """Where images live and how to reach them."""

    store_dir: str = DEFAULT_STORE_DIR
    url: Optional[str] = None
    timeout: int = DEFAULT_TIMEOUT
    tmp_dir: Optional[str] = None
    concurrent_downloads: int = DEFAULT_CONCURRENT_DOWNLOADS

    def __post_init__(self) -> None:
        if self.url is not None:
            self.url = self.url.rstrip("/")
        if self.concurrent_downloads < 1:
            raise ValueError(
                f"concurrent_downloads must be positive: {self.concurrent_downloads}"
            )

    @classmethod
    def from_env(cls) -> "SysextConfig":
        """Build a configuration from SYSEXT_* environment variables."""
        return cls(
            store_dir=os.getenv("SYSEXT_STORE_DIR", DEFAULT_STORE_DIR),
            url=os.getenv("SYSEXT_URL") or None,
            timeout=int(os.getenv("SYSEXT_TIMEOUT", str(DEFAULT_TIMEOUT))),
            tmp_dir=os.getenv("SYSEXT_TMPDIR") or None,
        )
