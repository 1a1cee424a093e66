"""HTTP session factory."""

import aiohttp

from .types import DEFAULT_TIMEOUT


async def create_session(timeout: int = DEFAULT_TIMEOUT) -> aiohttp.ClientSession:
    """Create an aiohttp session with a total request timeout.

    The caller owns the session and must close it.
    """
    return aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=timeout))
