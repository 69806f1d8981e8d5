"""SCORM version detection tests"""

import pytest

from scorm_ingest.models.scorm import Manifest, Metadata
from scorm_ingest.services.version import detect_version


@pytest.mark.parametrize(
    "schemaversion, expected",
    [
        ("ADL SCORM 2004 3rd Edition", "2004"),
        ("2004 4th Edition", "2004"),
        ("1.2", "1.2"),
        ("SCORM 1.2", "1.2"),
        ("CAM 1.3", "1.2"),
        ("", "1.2"),
        (None, "1.2"),
    ],
)
def test_detect_version_from_schemaversion(schemaversion, expected):
    manifest = Manifest(metadata=Metadata(schemaversion=schemaversion))
    assert detect_version(manifest) == expected


def test_missing_metadata_defaults_to_1_2():
    assert detect_version(Manifest()) == "1.2"
