"""
This module defines the core domain models for the application.

These classes represent the pure, technology-agnostic entities and data
structures that the remapping pipeline operates on, together with the ports
(interfaces) implemented by the infrastructure adapters.
"""

import dataclasses
import enum
from pathlib import Path

from abc import ABC, abstractmethod
from types import MappingProxyType
from typing import BinaryIO, ContextManager, Dict, Iterator, Mapping, Optional


# --- Domain Models ---

@dataclasses.dataclass(frozen=True)
class ReleaseDescriptor:
    """Identifies a single release and the location of its metadata."""

    id: str
    url: str


class Target(enum.Enum):
    """The side of the application an artifact is prepared for."""

    CLIENT = "client"
    SERVER = "server"

    @property
    def key(self) -> str:
        return self.value

    @property
    def mappings_key(self) -> str:
        return f"{self.value}_mappings"


@dataclasses.dataclass(frozen=True)
class PipelineConfig:
    """Immutable settings for one pipeline run."""

    output_root: Path
    release: ReleaseDescriptor
    target: Target
    remap_enabled: bool = True
    decompile_enabled: bool = False

    @property
    def work_root(self) -> Path:
        """The per-release, per-target cache directory."""
        return self.output_root / (self.release.id + self.target.name.lower())


@dataclasses.dataclass(frozen=True)
class ArtifactRef:
    """Where to fetch an artifact from and what it should hash to."""

    url: str
    sha1: Optional[str] = None
    size: Optional[int] = None


class VersionManifest:
    """
    A read-only mapping of artifact keys (e.g. 'client', 'server_mappings')
    to their download references.
    """

    def __init__(self, entries: Mapping[str, ArtifactRef]):
        self._entries = MappingProxyType(dict(entries))

    def entry(self, key: str) -> ArtifactRef:
        """Returns the reference for a key. Raises KeyError if absent."""
        return self._entries[key]

    def keys(self) -> Iterator[str]:
        return iter(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __bool__(self) -> bool:
        return bool(self._entries)


@dataclasses.dataclass(frozen=True)
class DownloadOutcome:
    """
    The result of a cache-aware download. 'skipped' means the cache was hit
    and no network access or write happened in this run.
    """

    path: Path
    skipped: bool


@dataclasses.dataclass(frozen=True)
class BestEffortOutcome:
    """Result of a side operation whose failure must not abort the run."""

    description: str
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclasses.dataclass
class PipelineReport:
    """Summary of what a pipeline run did."""

    jar: Optional[DownloadOutcome] = None
    mapping: Optional[DownloadOutcome] = None
    unpacked: bool = False
    remapped_jar: Optional[Path] = None
    remap_skipped: bool = False
    decompiled_dir: Optional[Path] = None
    side_effects: Dict[str, BestEffortOutcome] = dataclasses.field(
        default_factory=dict
    )


# --- Ports (Interfaces) ---

class Transport(ABC):
    """A port for fetching remote text and bytes."""

    @abstractmethod
    async def get_text(self, url: str) -> str:
        """Fetches a document as text. Raises TransportError on failure."""
        pass

    @abstractmethod
    async def get_bytes(self, url: str, size: Optional[int] = None) -> bytes:
        """Fetches raw bytes. Raises TransportError on failure."""
        pass


class ReleaseSource(ABC):
    """A port for resolving a version id into a release descriptor."""

    @abstractmethod
    async def get_release(self, version_id: str) -> ReleaseDescriptor:
        """Resolves a version id, or an alias such as 'latest'."""
        pass


class MetadataParser(ABC):
    """A port for turning version metadata text into a manifest."""

    @abstractmethod
    def parse(self, text: str) -> VersionManifest:
        """Raises MetadataError if the text is not valid metadata."""
        pass


class ContentVerifier(ABC):
    """A port for content digests and their sidecar files."""

    @abstractmethod
    async def digest(self, path: Path) -> str:
        """Computes the hex digest of a file."""
        pass

    @abstractmethod
    def sidecar_path(self, path: Path) -> Path:
        """The path of the digest file recorded next to an artifact."""
        pass

    async def matches(self, path: Path, expected: str) -> bool:
        """Whether the file at 'path' hashes to 'expected'."""
        return await self.digest(path) == expected

    def read_sidecar(self, path: Path) -> Optional[str]:
        """Returns the recorded digest for an artifact, if any."""
        sidecar = self.sidecar_path(path)
        if not sidecar.exists():
            return None
        return sidecar.read_text(encoding="utf-8")

    def write_sidecar(self, path: Path, digest: str):
        self.sidecar_path(path).write_text(digest, encoding="utf-8")

    def discard_sidecar(self, path: Path):
        self.sidecar_path(path).unlink(missing_ok=True)


class ArchiveInspector(ABC):
    """A port for structural checks and reads on archive files."""

    @abstractmethod
    async def is_valid_archive(self, path: Path) -> bool:
        """Whether the file opens as an archive with a readable entry table."""
        pass

    @abstractmethod
    def open_nested_entry(
        self, archive: Path, entry: str
    ) -> ContextManager[Optional[BinaryIO]]:
        """
        Opens one entry of an archive for blocking reads.
        Yields None when the entry is absent. Raises ArchiveError if the
        archive itself cannot be read.
        """
        pass


class Remapper(ABC):
    """A port for the external symbol-remapping engine."""

    @abstractmethod
    async def remap(self, mapping: Path, input_jar: Path, output_jar: Path):
        """Remaps 'input_jar' with 'mapping' into 'output_jar'."""
        pass


class Decompiler(ABC):
    """A port for the external decompilation engine."""

    @abstractmethod
    async def decompile(self, input_jar: Path, output_dir: Path):
        """Writes reconstructed sources for 'input_jar' into 'output_dir'."""
        pass
