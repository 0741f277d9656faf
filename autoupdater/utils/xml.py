from typing import Any, Iterator, Optional

import requests
from loguru import logger
from lxml import etree

from autoupdater.utils.exception import (
    ManifestMalformedError,
    ManifestUnreachableError,
)
from autoupdater.utils.generic import is_remote_source, local_source_path


def _make_parser() -> etree.XMLParser:
    # Never expand external entities or fetch DTDs for a remote document
    return etree.XMLParser(
        resolve_entities=False, no_network=True, load_dtd=False, huge_tree=False
    )


def fetch_xml_source(source: str, timeout: float = 15) -> bytes:
    """
    Read the raw bytes of an XML document.

    :param source: http(s) URL, file:// URL or local path.
    :param timeout: Timeout in seconds for remote requests.
    :return: Document contents.
    :raises ManifestUnreachableError: If the document cannot be fetched.
    """
    if is_remote_source(source):
        logger.debug(f"Fetching XML document from URL: {source}")
        try:
            response = requests.get(source, timeout=timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            logger.error(f"Failed to fetch XML document from {source}: {e}")
            raise ManifestUnreachableError(
                f"Failed to fetch manifest from {source}: {e}"
            ) from e
        return response.content

    path = local_source_path(source)
    logger.debug(f"Reading XML document from file: {path}")
    try:
        return path.read_bytes()
    except OSError as e:
        logger.error(f"Failed to read XML document at {path}: {e}")
        raise ManifestUnreachableError(
            f"Failed to read manifest at {path}: {e}"
        ) from e


def parse_xml_bytes(content: bytes, source: str = "<bytes>") -> Any:
    """
    Parse an XML document into an lxml element tree.

    :param content: Raw document bytes.
    :param source: Where the document came from, for error messages.
    :return: The document root element.
    :raises ManifestMalformedError: If the document is not well-formed XML.
    """
    try:
        root = etree.fromstring(content, parser=_make_parser())
    except etree.XMLSyntaxError as e:
        logger.error(f"Error parsing XML document {source}: {e}")
        raise ManifestMalformedError(
            f"Manifest {source} is not valid XML: {e}"
        ) from e
    if root is None:
        raise ManifestMalformedError(f"Manifest {source} is empty")
    return root


def fetch_xml_document(source: str, timeout: float = 15) -> Any:
    """Fetch and parse an XML document, returning its root element."""
    return parse_xml_bytes(fetch_xml_source(source, timeout=timeout), source)


def iter_elements(root: Any, tag: str) -> Iterator[Any]:
    """
    Iterate over every element named `tag` in document order,
    the root element included.
    """
    return root.iter(tag)


def element_text(element: Any) -> str:
    """
    Return the full text content of an element, descendants included,
    with surrounding whitespace stripped. Comments are ignored.
    """
    return str(element.xpath("string()")).strip()


def find_descendant_text(element: Any, tag: str) -> Optional[str]:
    """
    Return the text of the first descendant named `tag`.

    :param element: Element to search below. The element itself is not considered.
    :param tag: Tag to look for.
    :return: Stripped text content, or None when no such descendant exists.
    """
    child = next(element.iterdescendants(tag), None)
    if child is None:
        return None
    return element_text(child)
