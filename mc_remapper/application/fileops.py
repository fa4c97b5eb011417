"""Filesystem helpers shared by the pipeline stages."""

import contextlib
import logging
import shutil
from pathlib import Path
from typing import Generator

from .domain import BestEffortOutcome

logger = logging.getLogger(__name__)


@contextlib.contextmanager
def atomic_target(destination: Path) -> Generator[Path, None, None]:
    """
    Provides a temporary '.part' path and ensures cleanup.

    The caller writes to the yielded path; it is renamed over 'destination'
    only when the block exits without an exception.
    """
    part_path = destination.with_suffix(destination.suffix + ".part")
    destination.parent.mkdir(parents=True, exist_ok=True)
    try:
        yield part_path
        part_path.replace(destination)
    finally:
        part_path.unlink(missing_ok=True)


def write_bytes_atomically(destination: Path, data: bytes):
    with atomic_target(destination) as part_path:
        part_path.write_bytes(data)


def best_effort(description: str, action, *args, **kwargs) -> BestEffortOutcome:
    """Runs a side operation, capturing an OSError instead of raising it."""
    try:
        action(*args, **kwargs)
    except OSError as e:
        logger.error(f"Failed to {description}: {e}")
        return BestEffortOutcome(description, e)
    return BestEffortOutcome(description)


def remove_tree(path: Path):
    """Deletes a directory tree; a missing path is not an error."""
    if path.exists():
        shutil.rmtree(path)
