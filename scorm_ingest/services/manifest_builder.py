"""
Manifest Model Builder

Walks the normalized XML tree of an imsmanifest.xml and builds the typed
Manifest model. Authoring tools disagree on namespace prefixes and on
whether a child is serialized once or many times, so every access is
tolerant and lists are always normalized through ``to_sequence``.
"""

import logging
from typing import Any, Dict, List, Optional

from ..exceptions import InvalidManifestStructureError
from ..models.scorm import (
    DEFAULT_TITLE,
    Item,
    Manifest,
    Metadata,
    Organization,
    Resource,
    ResourceFile,
)
from ..utils.sequences import first_present, to_sequence

logger = logging.getLogger(__name__)

ROOT_KEYS = ("manifest", "imscp:manifest", "imsmanifest")


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _text_of(value: Any) -> Optional[str]:
    """Text of a scalar or of an element carrying attributes."""
    if value is None:
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, dict):
        for key in ("_", "#text"):
            if isinstance(value.get(key), str):
                return value[key]
        return None
    if isinstance(value, list):
        return _text_of(value[0]) if value else None
    return str(value)


def extract_title(element: Any) -> str:
    """
    Extract the title of a manifest, organization or item element.

    First match wins: a plain string, the ``_`` text field, the ``#text``
    text field, then the literal "Untitled Course".
    """
    title = _as_dict(element).get("title")
    if isinstance(title, str):
        return title
    if isinstance(title, dict):
        if title.get("_"):
            return title["_"]
        if title.get("#text"):
            return title["#text"]
    return DEFAULT_TITLE


def _identifier(element: Dict[str, Any], name: str = "identifier") -> Optional[str]:
    return _text_of(first_present(element, name, f"{name}_"))


def parse_item(element: Any) -> Item:
    """Parse an item element and, recursively, its children."""
    element = _as_dict(element)
    children = to_sequence(element.get("item"))

    return Item(
        identifier=_identifier(element) or "",
        identifierref=_identifier(element, "identifierref"),
        title=extract_title(element),
        items=[parse_item(child) for child in children] if children else None,
        parameters=_text_of(element.get("parameters")) or None,
    )


def parse_organization(element: Any) -> Organization:
    element = _as_dict(element)
    return Organization(
        identifier=_identifier(element) or "",
        title=extract_title(element),
        items=[parse_item(item) for item in to_sequence(element.get("item"))],
    )


def parse_resource(element: Any) -> Resource:
    element = _as_dict(element)
    files: List[ResourceFile] = []
    for file_el in to_sequence(element.get("file")):
        file_el = _as_dict(file_el)
        href = file_el.get("href") or _as_dict(file_el.get("$")).get("href") or ""
        files.append(ResourceFile(href=href))

    return Resource(
        identifier=_identifier(element) or "",
        type=_text_of(element.get("type")) or "webcontent",
        href=_text_of(element.get("href")) or None,
        files=files,
    )


def parse_metadata(element: Any) -> Optional[Metadata]:
    """Copy the metadata element, reducing schema/schemaversion to text."""
    if element in (None, ""):
        return None
    if not isinstance(element, dict):
        logger.debug("Ignoring non-element manifest metadata: %r", element)
        return None

    data = dict(element)
    for key in ("schema", "schemaversion"):
        if key in data:
            data[key] = _text_of(data[key])
    return Metadata.model_validate(data)


def find_manifest_root(tree: Any) -> Any:
    """Return the manifest root element, or raise if none is present."""
    tree = _as_dict(tree)
    for key in ROOT_KEYS:
        if key in tree and tree[key] is not None:
            return tree[key]
    raise InvalidManifestStructureError(tree.keys())


def build_manifest(tree: Any) -> Manifest:
    """
    Build a Manifest from a normalized XML tree

    Args:
        tree: Output of ``parse_xml``, keyed by root element name

    Returns:
        Manifest; structural deficiencies are left for validation

    Raises:
        InvalidManifestStructureError: If no manifest root element exists
    """
    root = _as_dict(find_manifest_root(tree))

    organizations = to_sequence(_as_dict(root.get("organizations")).get("organization"))
    resources = to_sequence(_as_dict(root.get("resources")).get("resource"))

    manifest = Manifest(
        identifier=_identifier(root) or "",
        version=_text_of(root.get("version")) or "1.0",
        title=extract_title(root),
        organizations=[parse_organization(org) for org in organizations],
        resources=[parse_resource(res) for res in resources],
        metadata=parse_metadata(root.get("metadata")),
    )
    logger.debug(
        "Built manifest %r: %d organization(s), %d resource(s)",
        manifest.identifier,
        len(manifest.organizations),
        len(manifest.resources),
    )
    return manifest
