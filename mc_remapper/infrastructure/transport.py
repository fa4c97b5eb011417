"""HTTP implementation of the Transport port."""

from typing import AsyncGenerator, Optional

import httpx
from tqdm import tqdm

from ..application.domain import Transport
from ..application.exceptions import TransportError

from .base_client import BaseClient


class HttpTransport(BaseClient, Transport):
    """A transport that fetches documents and files over HTTP(S)."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        timeout: float,
        chunk_size: int,
    ):
        """Initializes the transport adapter."""
        super().__init__(client, timeout)
        self.chunk_size = chunk_size

    async def get_text(self, url: str) -> str:
        self.logger.debug(f"Fetching {url}...")
        return await self._get_text(url)

    async def _stream_chunks(
        self, response: httpx.Response, buffer: bytearray
    ) -> AsyncGenerator[int, None]:
        """Produce byte chunks from a response and collect them in a buffer."""
        async for chunk in response.aiter_bytes(self.chunk_size):
            buffer.extend(chunk)
            yield len(chunk)

    async def _consume_stream_with_progress(
        self,
        stream: AsyncGenerator[int, None],
        total_size: Optional[int],
        desc: str,
    ):
        """Consume the byte stream to update a TQDM progress bar."""

        with tqdm(
            total=total_size, unit="B", unit_scale=True, desc=desc
        ) as progress_bar:
            async for progress in stream:
                progress_bar.update(progress)

        if total_size and progress_bar.n != total_size:
            raise TransportError(
                f"Size mismatch: {progress_bar.n} != {total_size}"
            )

    async def get_bytes(self, url: str, size: Optional[int] = None) -> bytes:
        """
        Downloads a file into memory.

        Args:
            url: The file location.
            size: The expected size in bytes, if known. Used for the
                  progress bar and checked once the body is read.

        Returns:
            The response body.

        Raises:
            TransportError: On a non-2xx status, a connection failure, a
                            timeout, or a truncated body.
        """

        buffer = bytearray()
        name = url.rsplit("/", 1)[-1]
        try:
            async with self.client.stream(
                "GET", url, timeout=self.timeout
            ) as response:
                response.raise_for_status()
                stream = self._stream_chunks(response, buffer)
                await self._consume_stream_with_progress(stream, size, name)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise TransportError(f"GET {url} failed: {e}") from e

        return bytes(buffer)
