from typing import Optional

import msgspec

# Child element tags read from each program entry of the manifest
VERSION_TAG = "version"
CHANGELOG_TAG = "changelog"
FILE_NAME_TAG = "file-name"
DOWNLOAD_LINK_TAG = "download-link"

REQUIRED_TAGS = (VERSION_TAG, CHANGELOG_TAG, FILE_NAME_TAG, DOWNLOAD_LINK_TAG)


class UpdateManifest(msgspec.Struct, frozen=True):
    """
    Update information published for a single program.

    All four fields are non-empty once a manifest has been resolved.
    """

    version: str
    changelog: str
    file_name: str
    download_link: str


class UpdateSession(msgspec.Struct):
    """
    State of one update attempt.

    ``manifest`` stays None until the manifest has been resolved.
    """

    program_name: str
    manifest_source: str
    current_version: str
    manifest: Optional[UpdateManifest] = None

    @property
    def is_resolved(self) -> bool:
        return self.manifest is not None
