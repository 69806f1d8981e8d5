"""Manifest validation tests"""

from scorm_ingest.models.scorm import Item, Manifest, Organization, Resource, ResourceFile
from scorm_ingest.services.manifest_validator import validate_manifest


def _valid_manifest(**overrides):
    fields = dict(
        identifier="M",
        title="Course",
        organizations=[Organization(identifier="O", items=[Item(identifier="I", identifierref="R")])],
        resources=[Resource(identifier="R", href="x.html", files=[ResourceFile(href="x.html")])],
    )
    fields.update(overrides)
    return Manifest(**fields)


class TestValidateManifest:
    def test_complete_manifest_is_clean(self):
        manifest = _valid_manifest()
        result = validate_manifest(manifest)

        assert result.valid is True
        assert result.errors == []
        assert result.warnings == []
        assert result.manifest is manifest

    def test_missing_identifier_is_error(self):
        result = validate_manifest(_valid_manifest(identifier=""))
        assert result.valid is False
        assert any("identifier" in e for e in result.errors)

    def test_zero_organizations_is_error(self):
        result = validate_manifest(_valid_manifest(organizations=[]))
        assert result.valid is False
        assert any("organization" in e.lower() for e in result.errors)

    def test_organization_without_identifier_is_error(self):
        result = validate_manifest(_valid_manifest(organizations=[
            Organization(identifier="O", items=[Item(identifier="I")]),
            Organization(identifier="", items=[Item(identifier="J")]),
        ]))
        assert result.valid is False
        assert result.errors == ["Organization 1 is missing identifier"]

    def test_resource_without_identifier_is_error(self):
        result = validate_manifest(_valid_manifest(resources=[
            Resource(identifier="", files=[ResourceFile(href="x.html")]),
        ]))
        assert result.valid is False
        assert result.errors == ["Resource 0 is missing identifier"]

    def test_missing_title_is_warning_only(self):
        result = validate_manifest(_valid_manifest(title=""))
        assert result.valid is True
        assert result.warnings == ["Manifest is missing title"]

    def test_no_resources_is_warning_only(self):
        result = validate_manifest(_valid_manifest(resources=[]))
        assert result.valid is True
        assert result.warnings == ["Manifest contains no resources"]

    def test_organization_without_items_is_warning_only(self):
        result = validate_manifest(_valid_manifest(organizations=[Organization(identifier="O")]))
        assert result.valid is True
        assert result.warnings == ["Organization 0 contains no items"]

    def test_resource_without_files_is_warning_only(self):
        result = validate_manifest(_valid_manifest(resources=[Resource(identifier="R", href="x.html")]))
        assert result.valid is True
        assert result.warnings == ["Resource 0 contains no files"]

    def test_empty_manifest_collects_everything(self):
        result = validate_manifest(Manifest(title=""))
        assert result.valid is False
        assert len(result.errors) == 2
        assert result.warnings == ["Manifest is missing title", "Manifest contains no resources"]
