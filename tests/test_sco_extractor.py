"""SCO extraction tests"""

from scorm_ingest.models.scorm import Item, Manifest, Organization, Resource, ResourceFile
from scorm_ingest.services.sco_extractor import extract_scos, flatten_items


def _resource(identifier, href=None, files=()):
    return Resource(
        identifier=identifier,
        href=href,
        files=[ResourceFile(href=f) for f in files],
    )


def _exists(*paths):
    available = set(paths)
    return lambda path: path in available


class TestFlattenItems:
    def test_pre_order_depth_first(self):
        tree = [
            Item(identifier="A", items=[
                Item(identifier="A1", items=[Item(identifier="A1a")]),
                Item(identifier="A2"),
            ]),
            Item(identifier="B"),
        ]
        assert [i.identifier for i in flatten_items(tree)] == ["A", "A1", "A1a", "A2", "B"]

    def test_empty(self):
        assert flatten_items([]) == []
        assert flatten_items(None) == []


class TestExtractScos:
    def test_no_organization_yields_nothing(self):
        manifest = Manifest(identifier="M", resources=[_resource("R", href="x.html")])
        assert extract_scos(manifest, lambda path: True) == []

    def test_skipped_items_leave_gaps_in_order_index(self):
        manifest = Manifest(
            identifier="M",
            organizations=[Organization(identifier="O", items=[
                Item(identifier="A", identifierref="RA", title="A"),
                Item(identifier="B", identifierref="MISSING", title="B"),
                Item(identifier="C", identifierref="RC", title="C"),
            ])],
            resources=[_resource("RA", href="a.html"), _resource("RC", href="c.html")],
        )
        scos = extract_scos(manifest, _exists("a.html", "c.html"))

        assert [(s.identifier, s.orderIndex) for s in scos] == [("A", 0), ("C", 2)]

    def test_grouping_items_count_towards_order_index(self):
        manifest = Manifest(
            organizations=[Organization(items=[
                Item(identifier="MODULE", items=[
                    Item(identifier="LEAF", identifierref="R"),
                ]),
            ])],
            resources=[_resource("R", href="leaf.html")],
        )
        [sco] = extract_scos(manifest, _exists("leaf.html"))
        assert sco.orderIndex == 1

    def test_launch_path_prefers_href_then_first_file(self):
        manifest = Manifest(
            organizations=[Organization(items=[
                Item(identifier="H", identifierref="RH"),
                Item(identifier="F", identifierref="RF"),
            ])],
            resources=[
                _resource("RH", href="main.html", files=["other.html"]),
                _resource("RF", files=["first.html", "second.html"]),
            ],
        )
        scos = extract_scos(manifest, _exists("main.html", "other.html", "first.html"))

        assert [(s.launchUrl, s.entryPoint) for s in scos] == [
            ("main.html", "main.html"),
            ("first.html", "first.html"),
        ]

    def test_resource_without_launch_file_is_skipped(self):
        manifest = Manifest(
            organizations=[Organization(items=[Item(identifier="I", identifierref="R")])],
            resources=[_resource("R")],
        )
        assert extract_scos(manifest, lambda path: True) == []

    def test_launch_file_missing_from_archive_is_skipped(self):
        manifest = Manifest(
            organizations=[Organization(items=[Item(identifier="I", identifierref="R")])],
            resources=[_resource("R", href="gone.html")],
        )
        assert extract_scos(manifest, _exists("index.html")) == []

    def test_only_first_organization_is_used(self):
        manifest = Manifest(
            organizations=[
                Organization(identifier="O1", items=[Item(identifier="FIRST", identifierref="R")]),
                Organization(identifier="O2", items=[Item(identifier="SECOND", identifierref="R")]),
            ],
            resources=[_resource("R", href="x.html")],
        )
        scos = extract_scos(manifest, _exists("x.html"))
        assert [s.identifier for s in scos] == ["FIRST"]

    def test_item_with_children_and_reference_is_launchable(self):
        manifest = Manifest(
            organizations=[Organization(items=[
                Item(identifier="P", identifierref="R", items=[
                    Item(identifier="CHILD", identifierref="R"),
                ]),
            ])],
            resources=[_resource("R", href="x.html")],
        )
        scos = extract_scos(manifest, _exists("x.html"))
        assert [(s.identifier, s.orderIndex) for s in scos] == [("P", 0), ("CHILD", 1)]

    def test_sco_metadata_and_title(self):
        manifest = Manifest(
            organizations=[Organization(items=[
                Item(identifier="I", identifierref="R", title="Intro", parameters="?a=1"),
            ])],
            resources=[Resource(identifier="R", type="sco", href="x.html")],
        )
        [sco] = extract_scos(manifest, _exists("x.html"))

        assert sco.title == "Intro"
        assert sco.metadata == {"resourceType": "sco", "parameters": "?a=1"}
