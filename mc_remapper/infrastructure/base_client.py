"""Base class for async HTTP clients."""

import logging

import httpx

from ..application.exceptions import ConfigurationError, TransportError


class BaseClient:
    """A base client that holds an async client and its request timeout."""

    def __init__(self, client: httpx.AsyncClient, timeout: float):
        """
        Initializes the base client.

        Args:
            client: An instance of httpx.AsyncClient.
            timeout: Per-request timeout in seconds.

        Raises:
            ConfigurationError: If the timeout is not a positive number.
        """

        if not timeout or timeout <= 0:
            raise ConfigurationError(
                f"Timeout for {self.__class__.__name__} must be positive, "
                f"got {timeout!r}. Please check your config files."
            )

        self.client = client
        self.timeout = timeout
        self.logger = logging.getLogger(self.__class__.__name__)

    async def _get_text(self, url: str) -> str:
        """Executes a GET request and returns the decoded body."""
        try:
            response = await self.client.get(url, timeout=self.timeout)
            response.raise_for_status()
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise TransportError(f"GET {url} failed: {e}") from e
        return response.text
