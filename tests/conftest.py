"""Test configuration and fixtures."""

import pytest
import pytest_asyncio

from sysext_images.core.types import SysextConfig
from tests.helpers import RepoServer


@pytest.fixture
def store_dir(tmp_path):
    """Empty local image store."""
    path = tmp_path / "store"
    path.mkdir()
    return path


@pytest.fixture
def tmp_dir(tmp_path):
    """Directory receiving the private temporary files."""
    path = tmp_path / "tmp"
    path.mkdir()
    return path


@pytest.fixture
def config(store_dir, tmp_dir):
    """Configuration pointing at the test store, without repository."""
    return SysextConfig(store_dir=str(store_dir), tmp_dir=str(tmp_dir))


@pytest_asyncio.fixture
async def repo():
    """Running in-process image repository."""
    server = RepoServer()
    await server.start()
    yield server
    await server.close()


def pytest_configure(config):
    """Configure pytest markers and settings."""
    config.addinivalue_line("markers", "unit: mark test as unit test (default)")
