"""
Entry point for the mc_remapper component.
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from .application.domain import Target
from .application.exceptions import RemapperError
from .infrastructure.containers import Container

logger = logging.getLogger(__name__)


def setup_logging(level: str):
    """Applies basic logging configuration."""
    logging.basicConfig(level=level)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Download, remap and decompile a game release jar."
    )

    parser.add_argument(
        "--version",
        required=True,
        help="A release id such as 1.21, or 'latest' / 'snapshot'.",
    )

    parser.add_argument(
        "--target",
        choices=[target.value for target in Target],
        default=Target.CLIENT.value,
        help="Which side to prepare (default: client).",
    )

    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Output root directory (default: remapper.output_dir setting).",
    )

    parser.add_argument(
        "--no-remap",
        action="store_true",
        help="Only download the jar and its mappings.",
    )

    parser.add_argument(
        "--decompile",
        action="store_true",
        help="Decompile the remapped jar into a 'decompiled' directory.",
    )

    return parser


async def run_application(args: argparse.Namespace):
    """Wires and runs the application using the DI container."""

    container = Container()
    container.cli_args.from_dict(vars(args))
    setup_logging(level=container.config().logging.level)

    try:
        release = await container.release_source().get_release(args.version)
        config = container.pipeline_config(release=release)
        await container.pipeline(config=config).run()
    except RemapperError as e:
        logger.error(f"An application error occurred: {e}")
        sys.exit(1)
    finally:
        await container.http_client().aclose()


def main():
    asyncio.run(run_application(build_parser().parse_args()))


if __name__ == "__main__":
    main()
