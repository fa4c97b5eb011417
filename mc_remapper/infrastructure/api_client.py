"""HTTP implementation of the ReleaseSource port."""

import httpx
import pydantic

from ..application.domain import ReleaseDescriptor, ReleaseSource
from ..application.exceptions import APIError, ReleaseNotFoundError

from .api_models import LauncherManifest, VersionEntry
from .base_client import BaseClient


class HttpReleaseSource(BaseClient, ReleaseSource):
    """Resolves releases from the launcher version manifest."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        manifest_url: str,
        timeout: float,
    ):
        """Initializes the release source adapter."""
        super().__init__(client, timeout)
        self.manifest_url = manifest_url

    def _map_to_domain(self, dto: VersionEntry) -> ReleaseDescriptor:
        return ReleaseDescriptor(id=dto.id, url=dto.url)

    def _validate(self, text: str) -> LauncherManifest:
        try:
            return LauncherManifest.model_validate_json(text)
        except pydantic.ValidationError as e:
            raise APIError(f"Invalid version manifest: {e}") from e

    def _resolve_alias(self, manifest: LauncherManifest, version_id: str) -> str:
        aliases = {
            "latest": manifest.latest.release,
            "snapshot": manifest.latest.snapshot,
        }
        return aliases.get(version_id, version_id)

    async def get_release(self, version_id: str) -> ReleaseDescriptor:
        """
        Fetches the version manifest and finds the requested release.

        Args:
            version_id: A release id such as '1.21', or one of the aliases
                        'latest' and 'snapshot'.

        Returns:
            The descriptor of the matching release.

        Raises:
            TransportError: If the manifest cannot be fetched.
            APIError: If the manifest is malformed.
            ReleaseNotFoundError: If no release has the requested id.
        """

        self.logger.info(f"Resolving version '{version_id}'...")

        manifest = self._validate(await self._get_text(self.manifest_url))
        wanted = self._resolve_alias(manifest, version_id)

        for entry in manifest.versions:
            if entry.id == wanted:
                self.logger.info(f"Resolved '{version_id}' to {entry.id}.")
                return self._map_to_domain(entry)

        raise ReleaseNotFoundError(f"Unknown version '{version_id}'")
