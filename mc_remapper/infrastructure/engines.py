"""
Adapters that run the external remapping and decompilation engines.

Both engines are Java programs; they are started as subprocesses so the
pipeline only depends on their command-line contract.
"""

import asyncio
import logging
from pathlib import Path
from typing import Type

from ..application.domain import Decompiler, Remapper
from ..application.exceptions import DecompileError, InfrastructureError, RemapError

_OUTPUT_TAIL_CHARS = 2000


class JavaEngine:
    """Runs an executable jar with a configured Java runtime."""

    error_class: Type[InfrastructureError] = InfrastructureError

    def __init__(self, java: str, jar: str):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.java = java
        self.jar = Path(jar) if jar else None

    async def _run(self, *args: str):
        if self.jar is None or not self.jar.is_file():
            raise self.error_class(
                f"Engine jar for {self.__class__.__name__} not found: {self.jar}"
            )

        command = [self.java, "-jar", str(self.jar), *args]
        self.logger.debug(f"Running {' '.join(command)}")

        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
            )
        except OSError as e:
            raise self.error_class(f"Cannot start {self.java}: {e}") from e

        output, _ = await process.communicate()
        if process.returncode != 0:
            tail = output.decode(errors="replace")[-_OUTPUT_TAIL_CHARS:]
            raise self.error_class(
                f"{self.jar.name} exited with code {process.returncode}: {tail}"
            )


class SpecialSourceRemapper(JavaEngine, Remapper):
    """Remaps a jar with SpecialSource using ProGuard-format mappings."""

    error_class = RemapError

    async def remap(self, mapping: Path, input_jar: Path, output_jar: Path):
        await self._run(
            "--in-jar", str(input_jar),
            "--out-jar", str(output_jar),
            "--srg-in", str(mapping),
        )


class VineflowerDecompiler(JavaEngine, Decompiler):
    """Decompiles a jar into a source directory with Vineflower."""

    error_class = DecompileError

    async def decompile(self, input_jar: Path, output_dir: Path):
        try:
            output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise DecompileError(f"Cannot prepare {output_dir}: {e}") from e
        await self._run(str(input_jar), str(output_dir))
