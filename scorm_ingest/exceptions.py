"""Domain exception classes for SCORM package ingestion.

These are raised by the service layer and propagate uncaught to the caller;
routers map them to HTTP 400 responses.
"""


class ScormPackageError(Exception):
    """Base class for every fatal package-ingestion failure."""


class MalformedArchiveError(ScormPackageError):
    """Raised when the uploaded bytes are not a readable ZIP archive."""

    def __init__(self, reason: str = ""):
        self.reason = reason
        super().__init__(
            f"SCORM package is not a valid ZIP archive: {reason}"
            if reason else "SCORM package is not a valid ZIP archive"
        )


class MissingManifestError(ScormPackageError):
    def __init__(self, path: str = "imsmanifest.xml"):
        self.path = path
        super().__init__(f"SCORM package is missing {path}")


class MalformedXmlError(ScormPackageError):
    """Raised when the manifest is not well-formed XML."""

    def __init__(self, reason: str = ""):
        self.reason = reason
        super().__init__(f"Manifest is not well-formed XML: {reason}")


class InvalidManifestStructureError(ScormPackageError):
    """Raised when no recognizable manifest root element is present."""

    def __init__(self, keys=None):
        self.keys = list(keys or [])
        super().__init__(
            f"Invalid manifest structure: no manifest root element (found {self.keys})"
        )
