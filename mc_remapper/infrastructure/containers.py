"""
Dependency Injection container for the mc_remapper component.

This container uses the `dependency-injector` library to wire together all
the components of the application, such as the pipeline and infrastructure
adapters, based on the application's configuration.
"""

import logging
from pathlib import Path

from dependency_injector import containers, providers
import httpx

from ..application.domain import *
from ..application.service import PipelineOrchestrator
from ..settings import settings

from .api_client import HttpReleaseSource
from .engines import SpecialSourceRemapper, VineflowerDecompiler
from .metadata import PydanticMetadataParser
from .processing import Sha1Verifier, ZipArchiveInspector
from .transport import HttpTransport

logger = logging.getLogger(__name__)


def build_pipeline_config(
    release: ReleaseDescriptor,
    target: str,
    output,
    default_output: str,
    no_remap: bool,
    decompile: bool,
) -> PipelineConfig:
    """Builds the run settings from CLI arguments and configured defaults."""
    if decompile and no_remap:
        logger.warning("--decompile has no effect together with --no-remap.")
    return PipelineConfig(
        output_root=Path(output or default_output),
        release=release,
        target=Target(target),
        remap_enabled=not no_remap,
        decompile_enabled=bool(decompile),
    )


class Container(containers.DeclarativeContainer):
    """DI container for wiring the application components."""

    cli_args = providers.Configuration()

    config = providers.Object(settings)

    http_client = providers.Singleton(httpx.AsyncClient, follow_redirects=True)

    release_source: providers.Factory[ReleaseSource] = providers.Factory(
        HttpReleaseSource,
        client=http_client,
        manifest_url=config().remapper.version_manifest_url,
        timeout=config().remapper.timeout,
    )

    transport: providers.Factory[Transport] = providers.Factory(
        HttpTransport,
        client=http_client,
        timeout=config().remapper.timeout,
        chunk_size=config().remapper.downloader.chunk_size,
    )

    parser: providers.Factory[MetadataParser] = providers.Factory(
        PydanticMetadataParser,
    )

    verifier: providers.Factory[ContentVerifier] = providers.Factory(
        Sha1Verifier,
        chunk_size=config().remapper.verifier.chunk_size,
    )

    inspector: providers.Factory[ArchiveInspector] = providers.Factory(
        ZipArchiveInspector,
    )

    remapper: providers.Factory[Remapper] = providers.Factory(
        SpecialSourceRemapper,
        java=config().remapper.engines.java,
        jar=config().remapper.engines.specialsource_jar,
    )

    decompiler: providers.Factory[Decompiler] = providers.Factory(
        VineflowerDecompiler,
        java=config().remapper.engines.java,
        jar=config().remapper.engines.vineflower_jar,
    )

    # Call with release=... once the version id is resolved.
    pipeline_config = providers.Callable(
        build_pipeline_config,
        target=cli_args.target,
        output=cli_args.output,
        default_output=config().remapper.output_dir,
        no_remap=cli_args.no_remap,
        decompile=cli_args.decompile,
    )

    # Call with config=pipeline_config(release=...).
    pipeline = providers.Factory(
        PipelineOrchestrator,
        transport=transport,
        parser=parser,
        verifier=verifier,
        inspector=inspector,
        remapper=remapper,
        decompiler=decompiler,
    )
