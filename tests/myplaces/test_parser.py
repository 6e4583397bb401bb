"""Tests for the KML parser: root selection, defaults, coordinates, identities."""

import pytest

from myplaces.errors import MalformedDocument, UnrecognizedFormat
from myplaces.geo import Coordinate
from myplaces.parser import IdSequence, parse_document


def _kml(body: str, doc_name: str | None = None) -> str:
    name = f"<name>{doc_name}</name>" if doc_name is not None else ""
    return f"<kml><Document>{name}{body}</Document></kml>"


def _placemark(inner: str) -> str:
    return f"<Placemark>{inner}</Placemark>"


def _only_place(tree):
    assert len(tree.places) == 1
    return next(iter(tree.places.values()))


@pytest.mark.unit
class TestRootSelection:
    """Single Folder is used directly; anything else gets a synthetic root."""

    def test_single_folder_becomes_root(self, nested_kml):
        """One Folder and no stray placemarks: no synthetic wrapper."""
        tree = parse_document(nested_kml)
        assert tree.root.name == "Europe"
        assert tree.root.parent_id is None
        assert [tree.folders[f].name for f in tree.root.subfolder_ids] == ["France", "Italy"]

    def test_sibling_folders_synthesize_root(self, siblings_kml):
        """Two Folders: root named from Document name with .kml stripped."""
        tree = parse_document(siblings_kml)
        assert tree.root.name == "Europe Trip"
        assert [tree.folders[f].name for f in tree.root.subfolder_ids] == ["Spain", "Portugal"]
        for fid in tree.root.subfolder_ids:
            assert tree.folders[fid].parent_id == tree.root_id

    def test_folder_plus_placemark_synthesizes_root(self):
        """One Folder plus a direct Placemark still gets a synthetic root."""
        kml = _kml("<Folder><name>A</name></Folder>" + _placemark("<name>Loose</name>"), "Trip")
        tree = parse_document(kml)
        assert tree.root.name == "Trip"
        assert len(tree.root.subfolder_ids) == 1
        assert [tree.places[p].name for p in tree.root.place_ids] == ["Loose"]

    def test_synthetic_root_default_name(self):
        """Without a Document name the synthetic root is "My Places"."""
        tree = parse_document(_kml(_placemark("<name>P</name>")))
        assert tree.root.name == "My Places"

    def test_suffix_only_stripped_once(self):
        tree = parse_document(_kml(_placemark(""), "a.kml.kml"))
        assert tree.root.name == "a.kml"

    def test_suffix_is_case_sensitive(self):
        tree = parse_document(_kml(_placemark(""), "Trip.KML"))
        assert tree.root.name == "Trip.KML"

    def test_empty_document_synthesizes_empty_root(self):
        tree = parse_document(_kml("", "Empty"))
        assert tree.root.name == "Empty"
        assert tree.root.subfolder_ids == []
        assert tree.places == {}

    def test_unknown_elements_ignored(self):
        kml = _kml("<Style id='s'/><Folder><name>Only</name><GroundOverlay/></Folder>")
        tree = parse_document(kml)
        assert tree.root.name == "Only"
        assert len(tree.folders) == 1

    def test_exactly_one_root(self, nested_kml):
        tree = parse_document(nested_kml)
        roots = [f for f in tree.folders.values() if f.parent_id is None]
        assert roots == [tree.root]


@pytest.mark.unit
class TestFolderParsing:
    def test_untitled_folder(self):
        tree = parse_document(_kml("<Folder><Folder/></Folder>"))
        assert tree.root.name == "Untitled Folder"
        child = tree.folders[tree.root.subfolder_ids[0]]
        assert child.name == "Untitled Folder"

    def test_child_order_preserved(self):
        """Children keep document order, not alphabetical order."""
        body = "".join(_placemark(f"<name>{n}</name>") for n in ["Zulu", "Alpha", "Mike"])
        tree = parse_document(_kml(f"<Folder><name>R</name>{body}</Folder>"))
        assert [tree.places[p].name for p in tree.root.place_ids] == ["Zulu", "Alpha", "Mike"]

    def test_deep_nesting(self):
        """Nesting far beyond the recursion limit parses fine."""
        depth = 1500
        body = "<Folder><name>f</name>" * depth + _placemark("<name>deep</name>") + "</Folder>" * depth
        tree = parse_document(_kml(body))
        assert len(tree.folders) == depth
        place = _only_place(tree)
        assert place.name == "deep"
        assert tree.places_in(tree.root_id, recursive=True) == [place]


@pytest.mark.unit
class TestPlaceParsing:
    """Placemark name/description/Point handling."""

    def test_fields(self, nested_kml):
        tree = parse_document(nested_kml)
        eiffel = next(p for p in tree.places.values() if p.name == "Eiffel Tower")
        assert eiffel.details == "Iron lattice tower"
        assert eiffel.latitude == pytest.approx(48.8584)
        assert eiffel.longitude == pytest.approx(2.2945)
        assert tree.folders[eiffel.folder_id].name == "France"
        assert eiffel.color is None

    def test_defaults_when_missing(self):
        place = _only_place(parse_document(_kml(_placemark(""))))
        assert place.name == "Untitled Place"
        assert place.details == "No Description"
        assert place.coordinate == Coordinate(0.0, 0.0)

    def test_empty_elements_are_not_missing(self):
        """A present but empty element yields "" rather than the default text."""
        place = _only_place(parse_document(_kml(_placemark("<name></name><description/>"))))
        assert place.name == ""
        assert place.details == ""

    def test_text_is_stripped(self):
        place = _only_place(parse_document(_kml(_placemark("<name>\n  Dock  \n</name>"))))
        assert place.name == "Dock"

    def test_cdata_description(self):
        inner = "<name>x</name><description><![CDATA[<b>bold</b> text]]></description>"
        place = _only_place(parse_document(_kml(_placemark(inner))))
        assert place.details == "<b>bold</b> text"

    def test_coordinate_order_longitude_first(self):
        inner = "<Point><coordinates>-122.4,37.7,0</coordinates></Point>"
        place = _only_place(parse_document(_kml(_placemark(inner))))
        assert place.longitude == pytest.approx(-122.4)
        assert place.latitude == pytest.approx(37.7)

    def test_coordinate_without_altitude(self):
        inner = "<Point><coordinates>10.5,20.25</coordinates></Point>"
        place = _only_place(parse_document(_kml(_placemark(inner))))
        assert place.coordinate == Coordinate(latitude=20.25, longitude=10.5)

    def test_coordinate_with_whitespace(self):
        inner = "<Point><coordinates>\n   10.5,20.25,0\n  </coordinates></Point>"
        place = _only_place(parse_document(_kml(_placemark(inner))))
        assert place.coordinate == Coordinate(latitude=20.25, longitude=10.5)

    @pytest.mark.parametrize("text", ["abc,37.7", "-122.4", "", "1,nan", "inf,2", "1;2"])
    def test_unreadable_coordinates_default_to_origin(self, text):
        inner = f"<name>p</name><Point><coordinates>{text}</coordinates></Point>"
        place = _only_place(parse_document(_kml(_placemark(inner))))
        assert place.coordinate == Coordinate(0.0, 0.0)

    def test_point_without_coordinates(self):
        place = _only_place(parse_document(_kml(_placemark("<Point/>"))))
        assert place.coordinate == Coordinate(0.0, 0.0)

    def test_point_tag_is_case_sensitive(self):
        inner = "<point><coordinates>5,6</coordinates></point>"
        place = _only_place(parse_document(_kml(_placemark(inner))))
        assert place.coordinate == Coordinate(0.0, 0.0)

    def test_nested_name_not_used(self):
        """Only a direct <name> child names the placemark."""
        inner = "<ExtendedData><name>inner</name></ExtendedData>"
        place = _only_place(parse_document(_kml(_placemark(inner))))
        assert place.name == "Untitled Place"


@pytest.mark.unit
class TestIdentities:
    def test_document_order(self, nested_kml):
        """Identities follow depth-first document order, per kind."""
        tree = parse_document(nested_kml)
        assert [tree.folders[i].name for i in sorted(tree.folders)] == [
            "Europe", "France", "Paris Cafes", "Italy",
        ]
        assert [tree.places[i].name for i in sorted(tree.places)] == [
            "Eiffel Tower", "Café de Flore", "Big Ben", "Colosseum",
        ]

    def test_synthetic_root_takes_first_id(self, siblings_kml):
        tree = parse_document(siblings_kml)
        assert tree.root_id == min(tree.folders)

    def test_shared_sequences_continue(self, nested_kml):
        folder_ids, place_ids = IdSequence(), IdSequence()
        first = parse_document(nested_kml, folder_ids, place_ids)
        second = parse_document(nested_kml, folder_ids, place_ids)
        assert min(second.folders) > max(first.folders)
        assert min(second.places) > max(first.places)


@pytest.mark.unit
class TestErrors:
    def test_malformed_xml(self, malformed_kml):
        with pytest.raises(MalformedDocument):
            parse_document(malformed_kml)

    def test_not_xml(self):
        with pytest.raises(MalformedDocument):
            parse_document(b"this is not xml at all")

    def test_empty_input(self):
        with pytest.raises(MalformedDocument):
            parse_document(b"")

    def test_wraps_parser_error(self, malformed_kml):
        with pytest.raises(MalformedDocument) as info:
            parse_document(malformed_kml)
        assert info.value.__cause__ is not None

    def test_wrong_root_element(self):
        with pytest.raises(UnrecognizedFormat):
            parse_document(b"<gpx><trk/></gpx>")

    def test_missing_document(self):
        with pytest.raises(UnrecognizedFormat):
            parse_document(b"<kml><Folder><name>x</name></Folder></kml>")

    def test_namespaced_kml_accepted(self, nested_kml):
        """The standard KML namespace declaration does not hide the tags."""
        assert b'xmlns="http://www.opengis.net/kml/2.2"' in nested_kml
        assert len(parse_document(nested_kml).places) == 4
