"""Resolve the update manifest entry of a program.

The manifest is an XML document holding one element per program:

    <root>
        <ProgramName>
            <version>...</version>
            <changelog>...</changelog>
            <file-name>...</file-name>
            <download-link>...</download-link>
        </ProgramName>
    </root>
"""

from typing import Any, Dict

from loguru import logger

from autoupdater.models.manifest import (
    CHANGELOG_TAG,
    DOWNLOAD_LINK_TAG,
    FILE_NAME_TAG,
    REQUIRED_TAGS,
    VERSION_TAG,
    UpdateManifest,
)
from autoupdater.utils.exception import ManifestMalformedError
from autoupdater.utils.xml import (
    fetch_xml_document,
    find_descendant_text,
    iter_elements,
)


def read_manifest_entry(root: Any, program_name: str) -> UpdateManifest:
    """
    Read the manifest entry of a program from a parsed document.

    Every element named `program_name` is read in document order and each one
    overwrites the fields of the previous, so the last entry wins.

    :param root: Root element of the manifest document.
    :param program_name: Tag of the program entry, matched exactly.
    :return: The resolved manifest.
    :raises ManifestMalformedError: If there is no entry, or an entry lacks a field.
    """
    fields: Dict[str, str] = {}
    matches = 0

    for entry in iter_elements(root, program_name):
        matches += 1
        for tag in REQUIRED_TAGS:
            text = find_descendant_text(entry, tag)
            if not text:
                logger.error(
                    f"Manifest entry <{program_name}> #{matches} has no <{tag}> value"
                )
                raise ManifestMalformedError(
                    f"Manifest entry <{program_name}> is missing a <{tag}> value"
                )
            fields[tag] = text

    if matches == 0:
        logger.error(f"Manifest has no entry for program: {program_name}")
        raise ManifestMalformedError(f"Manifest has no <{program_name}> entry")

    if matches > 1:
        logger.warning(
            f"Manifest has {matches} <{program_name}> entries, using the last one"
        )

    return UpdateManifest(
        version=fields[VERSION_TAG],
        changelog=fields[CHANGELOG_TAG],
        file_name=fields[FILE_NAME_TAG],
        download_link=fields[DOWNLOAD_LINK_TAG],
    )


def resolve(
    program_name: str,
    manifest_source: str,
    current_version: str,
    timeout: float = 15,
) -> UpdateManifest:
    """
    Fetch the manifest and resolve the entry of a program.

    :param program_name: Tag of the program entry.
    :param manifest_source: http(s) URL, file:// URL or local path of the manifest.
    :param current_version: Version currently installed, logged for reference.
    :param timeout: Timeout in seconds for remote requests.
    :return: The resolved manifest.
    :raises ManifestUnreachableError: If the manifest cannot be fetched.
    :raises ManifestMalformedError: If the manifest cannot be parsed or is incomplete.
    """
    logger.info(f"Resolving update manifest for {program_name} from {manifest_source}")
    root = fetch_xml_document(manifest_source, timeout=timeout)
    manifest = read_manifest_entry(root, program_name)
    logger.info(
        f"Resolved {program_name}: current version {current_version}, "
        f"published version {manifest.version}"
    )
    return manifest
