"""
SCORM Package Service

Entry point for ingesting an uploaded SCORM ZIP: reads imsmanifest.xml,
builds the manifest model, detects the SCORM version and extracts the
launchable SCOs. Every step is a pure function of the archive bytes.
"""

import io
import logging
import zipfile
from typing import Any, Dict, List, Optional

from ..exceptions import MalformedArchiveError, MissingManifestError
from ..models.scorm import ScormPackage, Sco
from .manifest_builder import build_manifest
from .sco_extractor import extract_scos
from .version import detect_version
from .xml_tree import parse_xml

logger = logging.getLogger(__name__)

MANIFEST_PATH = "imsmanifest.xml"
DEFAULT_ORGANIZATION = "default"


class ZipReader:
    """Read-only view over an in-memory ZIP archive."""

    def __init__(self, data: bytes):
        try:
            self._zip = zipfile.ZipFile(io.BytesIO(data))
        except (zipfile.BadZipFile, zipfile.LargeZipFile, ValueError) as e:
            raise MalformedArchiveError(str(e)) from e
        self._names = {
            info.filename for info in self._zip.infolist() if not info.is_dir()
        }

    def names(self) -> List[str]:
        return sorted(self._names)

    def has_entry(self, path: str) -> bool:
        return path in self._names

    def entry(self, path: str) -> Optional[bytes]:
        """Return the bytes of ``path``, or None when it is not in the archive."""
        if not self.has_entry(path):
            return None
        try:
            return self._zip.read(path)
        except (zipfile.BadZipFile, RuntimeError, NotImplementedError) as e:
            # encrypted entries or unsupported compression
            raise MalformedArchiveError(f"cannot read {path}: {e}") from e


def parse_package(data: bytes) -> ScormPackage:
    """
    Parse a SCORM package from ZIP bytes

    Args:
        data: Raw bytes of the uploaded ZIP

    Returns:
        ScormPackage with version, manifest, SCOs and organization identifier

    Raises:
        MalformedArchiveError: If the bytes are not a ZIP archive
        MissingManifestError: If imsmanifest.xml is absent
        MalformedXmlError: If the manifest is not well-formed XML
        InvalidManifestStructureError: If the manifest has no root element
    """
    archive = ZipReader(data)

    manifest_bytes = archive.entry(MANIFEST_PATH)
    if manifest_bytes is None:
        raise MissingManifestError(MANIFEST_PATH)

    manifest_xml = manifest_bytes.decode("utf-8-sig", errors="replace")
    manifest = build_manifest(parse_xml(manifest_xml))

    version = detect_version(manifest)
    scos = extract_scos(manifest, archive.has_entry)
    organization_identifier = (
        manifest.organizations[0].identifier if manifest.organizations else ""
    ) or DEFAULT_ORGANIZATION

    logger.info(
        "Parsed SCORM %s package %r: %d SCO(s)",
        version, manifest.identifier, len(scos),
    )
    return ScormPackage(
        version=version,
        manifest=manifest,
        scos=scos,
        organizationIdentifier=organization_identifier,
    )


def convert_to_course_modules(scos: List[Sco], course_id: str) -> List[Dict[str, Any]]:
    """Map SCOs to course-module drafts, numbered contiguously."""
    return [
        {
            "courseId": course_id,
            "title": sco.title,
            "description": f"SCORM content: {sco.identifier}",
            "content": f"SCORM SCO: {sco.launchUrl}",
            "orderIndex": index,
            "scormScoId": sco.identifier,
            "estimatedDuration": None,
            "prerequisites": None,
        }
        for index, sco in enumerate(scos)
    ]
