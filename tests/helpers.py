"""Test helpers: fake collaborators and fixture builders."""

import json
import os
from collections import Counter
from typing import Union

from aiohttp import web
from aiohttp.test_utils import TestServer

DIGEST = "a" * 64


def release_text(**fields: str) -> str:
    """Build extension-release content from KEY=value pairs."""
    return "".join(f"{key}={value}\n" for key, value in fields.items())


def sidecar(version: str, arch: str = "x86-64", **extra) -> dict:
    """Build one JSON sidecar object."""
    entry = {"SYSEXT_VERSION_ID": version, "ARCHITECTURE": arch, "ID": "opensuse"}
    entry.update(extra)
    return entry


def manifest(*filenames: str, digest: str = DIGEST) -> str:
    """Build SHA256SUMS content listing filenames."""
    return "".join(f"{digest}  {name}\n" for name in filenames)


class FakeExtractor:
    """Extraction collaborator writing canned release files.

    ``releases`` maps image filename to either release file content or an
    integer status to return without writing anything.
    """

    def __init__(self, releases: dict[str, Union[str, int]]):
        self.releases = releases
        self.calls: list[str] = []

    async def __call__(self, store_dir: str, image_name: str, output_fd: int) -> int:
        self.calls.append(image_name)
        release = self.releases.get(image_name, 1)
        if isinstance(release, int):
            return release
        os.write(output_fd, release.encode("utf-8"))
        return 0


class RepoServer:
    """In-process HTTP repository serving resources from a dict."""

    def __init__(self) -> None:
        self.resources: dict[str, bytes] = {}
        self.hits: Counter = Counter()
        app = web.Application()
        app.router.add_get("/{name}", self._handle)
        self.server = TestServer(app)

    async def _handle(self, request: web.Request) -> web.Response:
        name = request.match_info["name"]
        self.hits[name] += 1
        if name not in self.resources:
            raise web.HTTPNotFound()
        return web.Response(body=self.resources[name])

    @property
    def url(self) -> str:
        return str(self.server.make_url("/"))

    def add(self, name: str, content: Union[str, bytes, dict, list]) -> None:
        if isinstance(content, (dict, list)):
            content = json.dumps(content)
        if isinstance(content, str):
            content = content.encode("utf-8")
        self.resources[name] = content

    async def start(self) -> None:
        await self.server.start_server()

    async def close(self) -> None:
        await self.server.close()
