"""
The core application service, containing the pipeline's business logic.

This module defines PipelineOrchestrator, which turns a release descriptor
into a remapped (and optionally decompiled) archive. Every stage is cached
in the work root so that a repeated run resumes from the last stage that
completed.
"""

import asyncio
import logging
import shutil
import time
from pathlib import Path

from tqdm.contrib.logging import logging_redirect_tqdm

from .cache import ArtifactCache
from .domain import *
from .exceptions import *
from .fileops import atomic_target, best_effort, remove_tree, write_bytes_atomically

SERVER_JAR_ENTRY = "META-INF/versions/{id}/server-{id}.jar"


class PipelineOrchestrator:
    """Drives one pipeline run for a single release and target."""

    def __init__(
        self,
        config: PipelineConfig,
        transport: Transport,
        parser: MetadataParser,
        verifier: ContentVerifier,
        inspector: ArchiveInspector,
        remapper: Remapper,
        decompiler: Decompiler,
    ):
        """Initializes the orchestrator with necessary dependencies (ports)."""
        self.logger = logging.getLogger(self.__class__.__name__)
        self.config = config
        self.transport = transport
        self.parser = parser
        self.verifier = verifier
        self.inspector = inspector
        self.remapper = remapper
        self.decompiler = decompiler
        self.cache = ArtifactCache(verifier, inspector)
        self.root = config.work_root
        self.manifest = None
        self._started = False

    @property
    def release_id(self) -> str:
        return self.config.release.id

    @property
    def version_jar_path(self) -> Path:
        return self.root / f"{self.release_id}.jar"

    @property
    def mapping_path(self) -> Path:
        return self.root / f"{self.release_id}.map"

    @property
    def remapped_jar_path(self) -> Path:
        return self.root / f"remapped-{self.release_id}.jar"

    @property
    def version_meta_path(self) -> Path:
        return self.root / f"{self.release_id}.json"

    async def run(self) -> PipelineReport:
        """
        Executes every stage in order.

        Returns:
            A PipelineReport describing which stages ran or were skipped.

        Raises:
            ProcessingFailure: If any stage fails. Stages after the failing
                one are not executed; outputs of earlier stages stay on disk.
        """

        if self._started:
            raise RuntimeError("A pipeline orchestrator can only run once.")
        self._started = True

        report = PipelineReport()
        self.logger.info(
            f"Preparing {self.config.target.key} {self.release_id} "
            f"in {self.root}..."
        )

        with logging_redirect_tqdm():
            self._create_output_directory()
            self.manifest = await self._resolve_manifest(report)

            report.jar = await self.download(
                "Version jar", self.config.target.key, self.version_jar_path
            )

            if self.config.target is Target.SERVER:
                if report.jar.skipped:
                    self.logger.info("SKIP --> Unpack server is already done.")
                else:
                    report.unpacked = await self._unpack_server_jar(
                        report.jar.path
                    )

            report.mapping = await self.download(
                "Version mapping",
                self.config.target.mappings_key,
                self.mapping_path,
            )

            if self.config.remap_enabled:
                report.remapped_jar = await self._remap_jar(report)
                if self.config.decompile_enabled:
                    report.decompiled_dir = await self._decompile(
                        report.remapped_jar, report
                    )

        self.logger.info(f"Finished preparing {self.release_id}.")
        return report

    def _create_output_directory(self):
        if self.root.is_dir():
            return
        try:
            self.root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise DirectoryCreationFailure(
                "Output directory", f"Failed to create {self.root}"
            ) from e

    def _read_cached_manifest(self, path: Path):
        """Returns the manifest saved by an earlier run, if it is usable."""
        if not path.exists():
            return None
        try:
            manifest = self.parser.parse(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, MetadataError) as e:
            self.logger.debug(f"Ignoring cached {path.name}: {e}")
            return None
        return manifest or None

    async def _resolve_manifest(self, report: PipelineReport) -> VersionManifest:
        path = self.version_meta_path
        manifest = self._read_cached_manifest(path)
        if manifest is not None:
            self.logger.info("SKIP --> Version metadata is already downloaded.")
            return manifest

        self.logger.info("Downloading version metadata...")
        try:
            text = await self.transport.get_text(self.config.release.url)
        except TransportError as e:
            raise MetadataFetchFailure(
                "Version metadata", "Failed to download version metadata"
            ) from e

        report.side_effects["metadata"] = best_effort(
            "save version metadata", path.write_text, text, encoding="utf-8"
        )

        try:
            return self.parser.parse(text)
        except MetadataError as e:
            raise MetadataParseFailure(
                "Version metadata", "Failed to parse version metadata"
            ) from e

    async def download(
        self, display: str, key: str, target_path: Path
    ) -> DownloadOutcome:
        """
        Guarantee that an artifact from the manifest exists and is verified,
        downloading only if necessary.

        Args:
            display: A human-readable name used in logs and failures.
            key: The artifact key in the version manifest.
            target_path: Where the artifact is stored in the work root.

        Returns:
            A DownloadOutcome; 'skipped' is True on a cache hit.

        Raises:
            ManifestKeyMissing: If the manifest has no entry for 'key'.
            TransportFailure: If the bytes cannot be fetched.
            WriteFailure: If the artifact or its sidecar cannot be written.
            IntegrityMismatch: If the bytes do not match the expected digest.
        """

        try:
            ref = self.manifest.entry(key)
        except KeyError as e:
            raise ManifestKeyMissing(
                display, f"No '{key}' download in version metadata"
            ) from e

        if await self.cache.is_cached(target_path, ref.sha1):
            self.logger.info(f"SKIP --> {display} is already downloaded.")
            return DownloadOutcome(path=target_path, skipped=True)

        self.logger.info(f"Downloading {display}...")
        start = time.monotonic()

        try:
            content = await self.transport.get_bytes(ref.url, ref.size)
        except TransportError as e:
            raise TransportFailure(display, "Failed to download file data") from e

        try:
            await asyncio.to_thread(write_bytes_atomically, target_path, content)
        except OSError as e:
            raise WriteFailure(display, f"Failed to write {target_path}") from e

        if ref.sha1 is not None:
            await self._verify_download(display, target_path, ref.sha1)

        elapsed_ms = int((time.monotonic() - start) * 1000)
        self.logger.info(f"{display} is downloaded in {elapsed_ms}ms")
        return DownloadOutcome(path=target_path, skipped=False)

    async def _verify_download(self, display: str, path: Path, expected: str):
        try:
            actual = await self.verifier.digest(path)
        except OSError as e:
            raise IntegrityMismatch(
                display, f"Failed to checksum '{display}'"
            ) from e

        if actual != expected:
            best_effort("discard stale sidecar", self.verifier.discard_sidecar, path)
            raise IntegrityMismatch(
                display,
                f"Checksum failed for '{display}'. "
                f"Expected {expected}, got {actual}",
            )

        try:
            self.verifier.write_sidecar(path, expected)
        except OSError as e:
            raise WriteFailure(display, "Failed to write sha1 file") from e

    def _blocking_unpack(self, archive: Path, entry: str, destination: Path) -> bool:
        with self.inspector.open_nested_entry(archive, entry) as source:
            if source is None:
                return False
            with atomic_target(destination) as part_path:
                with open(part_path, "wb") as out:
                    shutil.copyfileobj(source, out)
        return True

    async def _unpack_server_jar(self, path: Path) -> bool:
        """Replaces a bundler jar with the server jar nested inside it."""
        self.logger.info("Unpack server jar...")
        entry = SERVER_JAR_ENTRY.format(id=self.release_id)
        destination = path.parent / f"{self.release_id}.jar"

        try:
            found = await asyncio.to_thread(
                self._blocking_unpack, path, entry, destination
            )
        except (ArchiveError, OSError) as e:
            raise ArchiveUnpackFailure(
                "Unpack server", "Failed to unpack server jar"
            ) from e

        if not found:
            self.logger.info(f"No {entry} in {path.name}, nothing to unpack.")
        return found

    async def _remap_jar(self, report: PipelineReport) -> Path:
        out_path = self.remapped_jar_path
        if report.jar.skipped and await self.inspector.is_valid_archive(out_path):
            self.logger.info("SKIP --> Remapping is already done.")
            report.remap_skipped = True
            return out_path

        self.logger.info("Remapping...")
        try:
            await self.remapper.remap(report.mapping.path, report.jar.path, out_path)
        except RemapError as e:
            raise RemapFailure("Remap", "Failed to remap jar") from e
        return out_path

    async def _decompile(self, remapped: Path, report: PipelineReport) -> Path:
        self.logger.info("Decompiling...")
        out_dir = remapped.parent / "decompiled"

        outcome = best_effort(
            "delete directory with decompiled files, continue to decompile",
            remove_tree,
            out_dir,
        )
        report.side_effects["decompiled"] = outcome

        try:
            await self.decompiler.decompile(remapped, out_dir)
        except DecompileError as e:
            raise DecompileFailure("Decompile", "Failed to decompile jar") from e
        return out_dir
