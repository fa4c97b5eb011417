"""
Infrastructure adapters for hashing and archive inspection tasks.
"""

import asyncio
import contextlib
import hashlib
import logging
import zipfile
from pathlib import Path
from typing import BinaryIO, Generator, Optional

from ..application.domain import ArchiveInspector, ContentVerifier
from ..application.exceptions import ArchiveError


class Sha1Verifier(ContentVerifier):
    """An adapter that implements the ContentVerifier port using SHA-1."""

    SIDECAR_SUFFIX = ".sha1"

    def __init__(self, chunk_size: int = 65536):
        """Initializes the verifier."""
        self.logger = logging.getLogger(self.__class__.__name__)
        self.chunk_size = chunk_size

    async def digest(self, path: Path) -> str:
        """Perform the blocking I/O work of hashing a file in a thread."""

        self.logger.debug(f"Computing checksum for {path.name}...")

        def _read_and_hash():
            hasher = hashlib.sha1()
            with open(path, "rb") as f:
                while chunk := f.read(self.chunk_size):
                    hasher.update(chunk)
            return hasher.hexdigest()

        return await asyncio.to_thread(_read_and_hash)

    def sidecar_path(self, path: Path) -> Path:
        path = path.absolute()
        return path.with_name(path.name + self.SIDECAR_SUFFIX)


class ZipArchiveInspector(ArchiveInspector):
    """Reads jar files (zip archives) with the zipfile module."""

    def __init__(self):
        self.logger = logging.getLogger(self.__class__.__name__)

    def _blocking_is_valid(self, path: Path) -> bool:
        if not path.is_file():
            return False
        try:
            with zipfile.ZipFile(path) as archive:
                archive.infolist()
        except (zipfile.BadZipFile, OSError) as e:
            self.logger.debug(f"{path.name} is not a readable archive: {e}")
            return False
        return True

    async def is_valid_archive(self, path: Path) -> bool:
        return await asyncio.to_thread(self._blocking_is_valid, path)

    @contextlib.contextmanager
    def open_nested_entry(
        self, archive: Path, entry: str
    ) -> Generator[Optional[BinaryIO], None, None]:
        """
        Opens 'entry' inside 'archive' for reading.

        Yields:
            A readable stream of the entry, or None when the archive has no
            such entry.

        Raises:
            ArchiveError: If the archive cannot be opened, or the entry is
                          corrupt while it is being read.
        """
        try:
            zip_file = zipfile.ZipFile(archive)
        except (zipfile.BadZipFile, OSError) as e:
            raise ArchiveError(f"Cannot open {archive.name}: {e}") from e

        with zip_file:
            try:
                info = zip_file.getinfo(entry)
            except KeyError:
                yield None
                return

            try:
                with zip_file.open(info) as stream:
                    yield stream
            except zipfile.BadZipFile as e:
                raise ArchiveError(
                    f"Corrupt entry {entry} in {archive.name}: {e}"
                ) from e
