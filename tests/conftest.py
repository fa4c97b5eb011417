"""Shared fixtures: in-memory fakes for the network and the Java engines."""

import hashlib
import io
import json
import zipfile
from pathlib import Path
from typing import Dict, List, Optional

import pytest

from mc_remapper.application.domain import (
    Decompiler,
    PipelineConfig,
    ReleaseDescriptor,
    Remapper,
    Target,
    Transport,
)
from mc_remapper.application.exceptions import DecompileError, RemapError, TransportError
from mc_remapper.application.service import PipelineOrchestrator
from mc_remapper.infrastructure.metadata import PydanticMetadataParser
from mc_remapper.infrastructure.processing import Sha1Verifier, ZipArchiveInspector

RELEASE = ReleaseDescriptor(id="1.21", url="https://meta.test/v1/1.21.json")


def sha1(data: bytes) -> str:
    return hashlib.sha1(data).hexdigest()


def make_jar(entries: Dict[str, bytes]) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        for name, content in entries.items():
            archive.writestr(name, content)
    return buffer.getvalue()


def metadata_json(downloads: Dict[str, tuple]) -> str:
    """Builds version metadata from key -> (url, sha1)."""
    return json.dumps(
        {
            "id": RELEASE.id,
            "downloads": {
                key: {"url": url, "sha1": digest}
                for key, (url, digest) in downloads.items()
            },
        }
    )


class FakeTransport(Transport):
    def __init__(self, texts: Dict[str, str], blobs: Dict[str, bytes]):
        self.texts = texts
        self.blobs = blobs
        self.text_calls: List[str] = []
        self.byte_calls: List[str] = []

    async def get_text(self, url: str) -> str:
        self.text_calls.append(url)
        if url not in self.texts:
            raise TransportError(f"404 for {url}")
        return self.texts[url]

    async def get_bytes(self, url: str, size: Optional[int] = None) -> bytes:
        self.byte_calls.append(url)
        if url not in self.blobs:
            raise TransportError(f"404 for {url}")
        return self.blobs[url]


class FakeRemapper(Remapper):
    def __init__(self, fail: bool = False):
        self.calls = []
        self.fail = fail

    async def remap(self, mapping: Path, input_jar: Path, output_jar: Path):
        self.calls.append((mapping, input_jar, output_jar))
        if self.fail:
            raise RemapError("bad mapping line 1")
        output_jar.write_bytes(
            make_jar({"remapped.txt": input_jar.read_bytes()[:16]})
        )


class FakeDecompiler(Decompiler):
    def __init__(self, fail: bool = False):
        self.calls = []
        self.seen_before_run = []
        self.fail = fail

    async def decompile(self, input_jar: Path, output_dir: Path):
        self.calls.append((input_jar, output_dir))
        self.seen_before_run = (
            sorted(p.name for p in output_dir.iterdir())
            if output_dir.exists()
            else []
        )
        if self.fail:
            raise DecompileError("engine crashed")
        output_dir.mkdir(parents=True, exist_ok=True)
        (output_dir / "Main.java").write_text("class Main {}", encoding="utf-8")


@pytest.fixture
def client_jar() -> bytes:
    return make_jar({"net/minecraft/a.class": b"\xca\xfe\xba\xbe client"})


@pytest.fixture
def mappings() -> bytes:
    return b"net.minecraft.Main -> a:\n"


@pytest.fixture
def client_transport(client_jar, mappings) -> FakeTransport:
    metadata = metadata_json(
        {
            "client": ("https://files.test/client.jar", sha1(client_jar)),
            "client_mappings": ("https://files.test/client.txt", sha1(mappings)),
        }
    )
    return FakeTransport(
        texts={RELEASE.url: metadata},
        blobs={
            "https://files.test/client.jar": client_jar,
            "https://files.test/client.txt": mappings,
        },
    )


@pytest.fixture
def build_orchestrator(tmp_path):
    """Factory for orchestrators sharing one output root."""

    def _build(
        transport: Transport,
        target: Target = Target.CLIENT,
        remap: bool = True,
        decompile: bool = False,
        remapper: Optional[Remapper] = None,
        decompiler: Optional[Decompiler] = None,
        output_root: Optional[Path] = None,
    ) -> PipelineOrchestrator:
        config = PipelineConfig(
            output_root=output_root or tmp_path / "output",
            release=RELEASE,
            target=target,
            remap_enabled=remap,
            decompile_enabled=decompile,
        )
        return PipelineOrchestrator(
            config=config,
            transport=transport,
            parser=PydanticMetadataParser(),
            verifier=Sha1Verifier(chunk_size=1024),
            inspector=ZipArchiveInspector(),
            remapper=remapper or FakeRemapper(),
            decompiler=decompiler or FakeDecompiler(),
        )

    return _build
