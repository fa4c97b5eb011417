"""Decides whether an artifact from a previous run can be reused."""

import logging
from pathlib import Path
from typing import Optional

from .domain import ArchiveInspector, ContentVerifier

ARCHIVE_SUFFIXES = frozenset({".jar", ".zip"})


class ArtifactCache:
    """
    Cache policy over the files kept in a work root.

    A file counts as cached when it exists, is a readable archive (for
    archive suffixes), re-hashes to the expected digest, and its sidecar
    digest file records that same digest. An artifact without a sidecar is
    never reused, even when its bytes are correct.
    """

    def __init__(self, verifier: ContentVerifier, inspector: ArchiveInspector):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.verifier = verifier
        self.inspector = inspector

    async def is_cached(self, path: Path, expected_digest: Optional[str]) -> bool:
        if not path.exists():
            return False

        if path.suffix.lower() in ARCHIVE_SUFFIXES:
            if not await self.inspector.is_valid_archive(path):
                self.logger.info(f"{path.name} is not a valid archive.")
                return False

        if expected_digest is None:
            return True

        try:
            if not await self.verifier.matches(path, expected_digest):
                self.logger.info(f"Checksum of {path.name} is outdated.")
                return False
            recorded = self.verifier.read_sidecar(path)
        except (OSError, UnicodeDecodeError) as e:
            self.logger.warning(f"Could not check cached {path.name}: {e}")
            return False

        return recorded == expected_digest
