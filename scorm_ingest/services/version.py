"""SCORM version detection from manifest metadata."""

from ..models.scorm import Manifest, SCORMVersion

DEFAULT_VERSION: SCORMVersion = "1.2"


def detect_version(manifest: Manifest) -> SCORMVersion:
    """
    Infer the SCORM version from ``metadata.schemaversion``.

    Schema version strings are free text across authoring tools, so this is
    a substring check: "2004" anywhere means SCORM 2004, "1.2" means SCORM
    1.2, and anything else (including missing metadata) defaults to 1.2.
    """
    schemaversion = manifest.metadata.schemaversion if manifest.metadata else None
    if schemaversion:
        if "2004" in schemaversion:
            return "2004"
        if "1.2" in schemaversion:
            return "1.2"
    return DEFAULT_VERSION
