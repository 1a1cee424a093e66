"""Tests for update selection."""

import sys

import pytest

from sysext_images import sysext
from sysext_images.core.types import SysextConfig
from sysext_images.exceptions import (
    DownloadError,
    ExtractionError,
    MetadataParseError,
    NoEntryError,
)
from sysext_images.models import ImageDeps, ImageEntry
from sysext_images.update import check_if_newer, get_latest_version, select_update
from tests.helpers import FakeExtractor, manifest, release_text, sidecar


def entry(version, arch="x86-64", name="foo", **flags):
    return ImageEntry(
        name=name,
        filename=f"{name}-{version}.{arch}.raw",
        deps=ImageDeps(sysext_version_id=version, architecture=arch),
        **flags,
    )


@pytest.fixture
def curr():
    return entry("1.0", installed=True)


def test_select_update_picks_highest_compatible(curr):
    """Test architecture mismatches and older versions are rejected."""
    candidates = [entry("2.0"), entry("9.0", arch="arm64"), entry("1.5")]
    update = select_update(curr, candidates)
    assert update.version == "2.0"


def test_select_update_none_newer(curr):
    """Test nothing is returned when no candidate is newer."""
    assert select_update(curr, [entry("1.0"), entry("0.9")]) is None


def test_select_update_numeric_order(curr):
    """Test version 10 beats version 9."""
    update = select_update(curr, [entry("9"), entry("10"), entry("2")])
    assert update.version == "10"


def test_select_update_tie_keeps_first(curr):
    """Test an equal version does not replace the running best."""
    first = entry("2.0", remote=True)
    second = entry("2.0", local=True)
    update = select_update(curr, [first], [second])
    assert update.remote
    assert not update.local


def test_select_update_order_independent(curr):
    """Test the winning version does not depend on candidate order."""
    versions = ["1.1", "3.0", "2.5", "0.5", "3.0.1", "2.9"]
    forward = select_update(curr, [entry(v) for v in versions])
    backward = select_update(curr, [entry(v) for v in reversed(versions)])
    assert forward.version == backward.version == "3.0.1"


def test_check_if_newer_moves_record(curr):
    """Test the winning candidate hands its record to the new entry."""
    cand = entry("2.0", local=True, compatible=True)
    deps = cand.deps

    update = check_if_newer(curr, cand, None)

    assert update is not cand
    assert update.deps is deps
    assert cand.deps is None
    assert update.name == "foo"
    assert update.local and update.compatible


def test_check_if_newer_rejected_keeps_donor(curr):
    """Test a rejected candidate keeps its record."""
    cand = entry("0.1")
    assert check_if_newer(curr, cand, None) is None
    assert cand.deps is not None


def test_check_if_newer_requires_metadata(curr):
    """Test candidates without version or architecture never win."""
    assert check_if_newer(curr, ImageEntry(name="foo"), None) is None
    no_version = ImageEntry(name="foo", deps=ImageDeps(architecture="x86-64"))
    assert check_if_newer(curr, no_version, None) is None
    no_arch = ImageEntry(name="foo", deps=ImageDeps(sysext_version_id="5"))
    assert check_if_newer(curr, no_arch, None) is None


def local_release(version, arch="x86-64"):
    return release_text(ID="fedora", SYSEXT_VERSION_ID=version, ARCHITECTURE=arch)


@pytest.mark.asyncio
async def test_get_latest_version_local_only(config, store_dir, curr, tmp_dir):
    """Test local store candidates are considered without a URL."""
    for name in ["foo-1.5.x86-64.raw", "foo-2.0.x86-64.raw", "bar-9.0.x86-64.raw"]:
        (store_dir / name).write_bytes(b"")
    extractor = FakeExtractor(
        {
            "foo-1.5.x86-64.raw": local_release("1.5"),
            "foo-2.0.x86-64.raw": local_release("2.0"),
            "bar-9.0.x86-64.raw": local_release("9.0"),
        }
    )

    update = await get_latest_version(curr, config=config, extractor=extractor)

    assert update.filename == "foo-2.0.x86-64.raw"
    assert update.local
    assert "bar-9.0.x86-64.raw" not in extractor.calls
    assert list(tmp_dir.iterdir()) == []


@pytest.mark.asyncio
async def test_get_latest_version_remote_and_local(repo, config, store_dir, curr, tmp_dir):
    """Test the newest candidate of both sources wins."""
    repo.add("SHA256SUMS", manifest("foo-3.0.x86-64.raw", "foo-4.0.arm64.raw"))
    repo.add("foo-3.0.x86-64.raw.json", sidecar("3.0"))
    repo.add("foo-4.0.arm64.raw.json", sidecar("4.0", arch="arm64"))
    (store_dir / "foo-2.0.x86-64.raw").write_bytes(b"")
    extractor = FakeExtractor({"foo-2.0.x86-64.raw": local_release("2.0")})

    update = await get_latest_version(curr, url=repo.url, config=config, extractor=extractor)

    assert update.filename == "foo-3.0.x86-64.raw"
    assert update.remote
    assert update.version == "3.0"
    assert list(tmp_dir.iterdir()) == []


@pytest.mark.asyncio
async def test_get_latest_version_local_newer_than_remote(repo, config, store_dir, curr):
    """Test a newer local image beats the remote one."""
    repo.add("SHA256SUMS", manifest("foo-3.0.x86-64.raw"))
    repo.add("foo-3.0.x86-64.raw.json", sidecar("3.0"))
    (store_dir / "foo-10.0.x86-64.raw").write_bytes(b"")
    extractor = FakeExtractor({"foo-10.0.x86-64.raw": local_release("10.0")})

    update = await get_latest_version(curr, url=repo.url, config=config, extractor=extractor)

    assert update.filename == "foo-10.0.x86-64.raw"
    assert update.local


@pytest.mark.asyncio
async def test_get_latest_version_is_idempotent(repo, config, store_dir, curr):
    """Test repeated resolution against unchanged sources agrees."""
    repo.add("SHA256SUMS", manifest("foo-3.0.x86-64.raw"))
    repo.add("foo-3.0.x86-64.raw.json", sidecar("3.0"))
    (store_dir / "foo-2.0.x86-64.raw").write_bytes(b"")
    extractor = FakeExtractor({"foo-2.0.x86-64.raw": local_release("2.0")})

    first = await get_latest_version(curr, url=repo.url, config=config, extractor=extractor)
    second = await get_latest_version(curr, url=repo.url, config=config, extractor=extractor)

    assert first == second


@pytest.mark.asyncio
async def test_get_latest_version_nothing_newer(config, store_dir, curr):
    """Test None when the installed image is the newest."""
    (store_dir / "foo-1.0.x86-64.raw").write_bytes(b"")
    extractor = FakeExtractor({"foo-1.0.x86-64.raw": local_release("1.0")})

    assert await get_latest_version(curr, config=config, extractor=extractor) is None


@pytest.mark.asyncio
async def test_get_latest_version_remote_down_non_strict(config, store_dir, curr, tmp_dir):
    """Test an unreachable repository falls back to local images."""
    (store_dir / "foo-2.0.x86-64.raw").write_bytes(b"")
    extractor = FakeExtractor({"foo-2.0.x86-64.raw": local_release("2.0")})

    update = await get_latest_version(
        curr, url="http://127.0.0.1:1", config=config, extractor=extractor
    )

    assert update.filename == "foo-2.0.x86-64.raw"
    assert list(tmp_dir.iterdir()) == []


@pytest.mark.asyncio
async def test_get_latest_version_remote_down_strict(config, curr):
    """Test strict mode raises the transport failure."""
    with pytest.raises(DownloadError):
        await get_latest_version(
            curr,
            url="http://127.0.0.1:1",
            config=config,
            extractor=FakeExtractor({}),
            strict=True,
        )


@pytest.mark.asyncio
async def test_get_latest_version_broken_images(repo, config, store_dir, curr, tmp_dir):
    """Test broken images are skipped unless strict."""
    repo.add("SHA256SUMS", manifest("foo-3.0.x86-64.raw"))
    repo.add("foo-3.0.x86-64.raw.json", [])
    (store_dir / "foo-2.0.x86-64.raw").write_bytes(b"")
    (store_dir / "foo-5.0.x86-64.raw").write_bytes(b"")
    extractor = FakeExtractor({"foo-2.0.x86-64.raw": local_release("2.0"), "foo-5.0.x86-64.raw": 1})

    update = await get_latest_version(curr, url=repo.url, config=config, extractor=extractor)
    assert update.filename == "foo-2.0.x86-64.raw"

    with pytest.raises(NoEntryError):
        await get_latest_version(
            curr, url=repo.url, config=config, extractor=extractor, strict=True
        )

    (store_dir / "foo-2.0.x86-64.raw").unlink()
    with pytest.raises(ExtractionError):
        await get_latest_version(curr, config=config, extractor=extractor, strict=True)

    assert list(tmp_dir.iterdir()) == []


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "bad_sidecar",
    [
        pytest.param("[" * 200000 + "]" * 200000, id="deep-nesting"),
        pytest.param(
            '{"extra": ' + "7" * 5001 + "}",
            id="huge-integer",
            marks=pytest.mark.skipif(
                not hasattr(sys, "get_int_max_str_digits"),
                reason="integer digit limit needs Python 3.11",
            ),
        ),
    ],
)
async def test_get_latest_version_unparsable_sidecar_skipped(
    repo, config, curr, tmp_dir, bad_sidecar
):
    """Test a sidecar the JSON parser rejects only drops its own image."""
    repo.add("SHA256SUMS", manifest("foo-2.0.x86-64.raw", "foo-3.0.x86-64.raw"))
    repo.add("foo-2.0.x86-64.raw.json", bad_sidecar)
    repo.add("foo-3.0.x86-64.raw.json", sidecar("3.0"))

    update = await get_latest_version(
        curr, url=repo.url, config=config, extractor=FakeExtractor({})
    )

    assert update.filename == "foo-3.0.x86-64.raw"
    assert list(tmp_dir.iterdir()) == []

    with pytest.raises(MetadataParseError):
        await get_latest_version(
            curr, url=repo.url, config=config, extractor=FakeExtractor({}), strict=True
        )


@pytest.mark.asyncio
async def test_get_latest_version_reserved_url_characters(repo, config, curr):
    """Test image names with '#' and '?' are fetched as they are listed."""
    repo.add("SHA256SUMS", manifest("foo-3.0#a.x86-64.raw", "foo-2.0?b.x86-64.raw"))
    repo.add("foo-3.0#a.x86-64.raw.json", sidecar("3.0"))
    repo.add("foo-2.0?b.x86-64.raw.json", sidecar("2.0"))

    update = await get_latest_version(
        curr, url=repo.url, config=config, extractor=FakeExtractor({})
    )

    assert update.filename == "foo-3.0#a.x86-64.raw"
    assert update.version == "3.0"
    assert repo.hits["foo-2.0?b.x86-64.raw.json"] == 1


@pytest.mark.asyncio
async def test_get_latest_version_missing_store(tmp_path, curr):
    """Test an unreadable store is fatal."""
    config = SysextConfig(store_dir=str(tmp_path / "missing"))
    with pytest.raises(FileNotFoundError):
        await get_latest_version(curr, config=config, extractor=FakeExtractor({}))


@pytest.mark.asyncio
async def test_functional_api(repo, store_dir, curr):
    """Test the functional wrappers reach the same result."""
    repo.add("SHA256SUMS", manifest("foo-3.0.x86-64.raw"))
    repo.add("foo-3.0.x86-64.raw.json", sidecar("3.0"))
    (store_dir / "foo-2.0.x86-64.raw").write_bytes(b"")
    extractor = FakeExtractor({"foo-2.0.x86-64.raw": local_release("2.0")})

    assert await sysext.discover_images(str(store_dir)) == ["foo-2.0.x86-64.raw"]

    local = await sysext.image_local_metadata(str(store_dir), "foo", extractor)
    assert [e.version for e in local] == ["2.0"]

    remote = await sysext.image_remote_metadata(repo.url, "foo")
    assert [e.version for e in remote] == ["3.0"]

    update = await sysext.get_latest_version(
        curr, url=repo.url, store_dir=str(store_dir), extractor=extractor
    )
    assert update.version == "3.0"
