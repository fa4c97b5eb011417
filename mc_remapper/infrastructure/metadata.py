"""Pydantic implementation of the MetadataParser port."""

import pydantic

from ..application.domain import ArtifactRef, MetadataParser, VersionManifest
from ..application.exceptions import MetadataError

from .api_models import DownloadDetails, VersionMetadata


class PydanticMetadataParser(MetadataParser):
    """Validates version metadata JSON and maps it to a domain manifest."""

    def _map_to_domain(self, dto: DownloadDetails) -> ArtifactRef:
        return ArtifactRef(url=dto.url, sha1=dto.sha1, size=dto.size)

    def parse(self, text: str) -> VersionManifest:
        try:
            metadata = VersionMetadata.model_validate_json(text)
        except pydantic.ValidationError as e:
            raise MetadataError(f"Invalid version metadata: {e}") from e

        return VersionManifest(
            {
                key: self._map_to_domain(details)
                for key, details in metadata.downloads.items()
            }
        )
