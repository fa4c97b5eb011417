"""
Pydantic models for validating the launcher metadata documents.

These models serve as a strict contract for the expected JSON data, ensuring
that any deviation from this structure is caught at the infrastructure layer
before being passed to the application core. Fields the pipeline does not
use are ignored.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel


class LatestVersions(BaseModel):
    """The 'latest' object of the launcher version manifest."""

    release: str
    snapshot: str


class VersionEntry(BaseModel):
    """A single release listed in the launcher version manifest."""

    id: str
    url: str
    type: Optional[str] = None
    sha1: Optional[str] = None


class LauncherManifest(BaseModel):
    """Represents the top-level structure of the launcher version manifest."""

    latest: LatestVersions
    versions: List[VersionEntry]


class DownloadDetails(BaseModel):
    """
    Represents one entry of a version's 'downloads' object.

    'sha1' is Optional because some historical entries carry no digest; the
    pipeline then only checks that the file is present and readable.
    """

    url: str
    sha1: Optional[str] = None
    size: Optional[int] = None


class VersionMetadata(BaseModel):
    """Represents the per-version metadata document."""

    downloads: Dict[str, DownloadDetails]
