import hashlib

import pytest

from conftest import make_jar
from mc_remapper.application.exceptions import ArchiveError
from mc_remapper.infrastructure.processing import Sha1Verifier, ZipArchiveInspector


@pytest.mark.asyncio
async def test_digest_matches_hashlib(tmp_path):
    path = tmp_path / "data.bin"
    path.write_bytes(b"a" * 5000)
    verifier = Sha1Verifier(chunk_size=64)

    assert await verifier.digest(path) == hashlib.sha1(b"a" * 5000).hexdigest()


def test_sidecar_round_trip(tmp_path):
    verifier = Sha1Verifier()
    path = tmp_path / "1.21.jar"

    assert verifier.sidecar_path(path) == (tmp_path / "1.21.jar.sha1").absolute()
    assert verifier.read_sidecar(path) is None

    verifier.write_sidecar(path, "abc123")
    assert verifier.read_sidecar(path) == "abc123"

    verifier.discard_sidecar(path)
    verifier.discard_sidecar(path)
    assert not verifier.sidecar_path(path).exists()


@pytest.mark.asyncio
async def test_is_valid_archive(tmp_path):
    inspector = ZipArchiveInspector()
    good = tmp_path / "good.jar"
    good.write_bytes(make_jar({"a.class": b"x"}))
    bad = tmp_path / "bad.jar"
    bad.write_bytes(b"PK\x03\x04 garbage")

    assert await inspector.is_valid_archive(good)
    assert not await inspector.is_valid_archive(bad)
    assert not await inspector.is_valid_archive(tmp_path / "missing.jar")
    assert not await inspector.is_valid_archive(tmp_path)


def test_open_nested_entry(tmp_path):
    inspector = ZipArchiveInspector()
    archive = tmp_path / "bundler.jar"
    archive.write_bytes(make_jar({"META-INF/versions/x/server-x.jar": b"inner"}))

    with inspector.open_nested_entry(archive, "META-INF/versions/x/server-x.jar") as stream:
        assert stream.read() == b"inner"

    with inspector.open_nested_entry(archive, "META-INF/missing.jar") as stream:
        assert stream is None


def test_open_nested_entry_on_broken_archive(tmp_path):
    archive = tmp_path / "broken.jar"
    archive.write_bytes(b"not a zip")

    with pytest.raises(ArchiveError):
        with ZipArchiveInspector().open_nested_entry(archive, "any"):
            pass
