"""Shared KML sample documents and fixtures."""

from __future__ import annotations

import pytest

from myplaces.location import LatestLocation
from myplaces.projection import ListProjection
from myplaces.repository import PlaceRepository

# Single root Folder under Document: the Folder itself becomes the root.
#   Europe
#     France            Eiffel Tower
#       Paris Cafes     Café de Flore
#     (Big Ben)
#     Italy             Colosseum
NESTED_KML = """\
<?xml version="1.0" encoding="UTF-8"?>
<kml xmlns="http://www.opengis.net/kml/2.2">
  <Document>
    <name>Europe Trip.kml</name>
    <Folder>
      <name>Europe</name>
      <Folder>
        <name>France</name>
        <Placemark>
          <name>Eiffel Tower</name>
          <description>Iron lattice tower</description>
          <Point><coordinates>2.2945,48.8584,0</coordinates></Point>
        </Placemark>
        <Folder>
          <name>Paris Cafes</name>
          <Placemark>
            <name>Café de Flore</name>
            <Point><coordinates>2.3325,48.8541,0</coordinates></Point>
          </Placemark>
        </Folder>
      </Folder>
      <Placemark>
        <name>Big Ben</name>
        <Point><coordinates>-0.1246,51.5007,0</coordinates></Point>
      </Placemark>
      <Folder>
        <name>Italy</name>
        <Placemark>
          <name>Colosseum</name>
          <Point><coordinates>12.4922,41.8902,0</coordinates></Point>
        </Placemark>
      </Folder>
    </Folder>
  </Document>
</kml>
"""

# Two sibling Folders under Document: a root is synthesized from the Document name.
SIBLINGS_KML = """\
<?xml version="1.0" encoding="UTF-8"?>
<kml>
  <Document>
    <name>Europe Trip.kml</name>
    <Folder>
      <name>Spain</name>
      <Placemark>
        <name>Sagrada Familia</name>
        <Point><coordinates>2.1744,41.4036,0</coordinates></Point>
      </Placemark>
    </Folder>
    <Folder>
      <name>Portugal</name>
    </Folder>
  </Document>
</kml>
"""

# Places along the meridian north of (0, 0): roughly 10 m, 5000 m and 200 m away.
NEARBY_KML = """\
<kml>
  <Document>
    <name>Probe</name>
    <Placemark><name>Ten</name><Point><coordinates>0,0.0000899</coordinates></Point></Placemark>
    <Placemark><name>FiveK</name><Point><coordinates>0,0.0449662</coordinates></Point></Placemark>
    <Placemark><name>TwoHundred</name><Point><coordinates>0,0.0017987</coordinates></Point></Placemark>
  </Document>
</kml>
"""

MALFORMED_KML = "<kml><Document><name>Broken</name></Document>"


@pytest.fixture
def nested_kml() -> bytes:
    return NESTED_KML.encode("utf-8")


@pytest.fixture
def siblings_kml() -> bytes:
    return SIBLINGS_KML.encode("utf-8")


@pytest.fixture
def nearby_kml() -> bytes:
    return NEARBY_KML.encode("utf-8")


@pytest.fixture
def malformed_kml() -> bytes:
    return MALFORMED_KML.encode("utf-8")


@pytest.fixture
def repository() -> PlaceRepository:
    return PlaceRepository()


@pytest.fixture
def loaded_repository(repository, nested_kml) -> PlaceRepository:
    repository.ingest(nested_kml)
    return repository


@pytest.fixture
def location() -> LatestLocation:
    return LatestLocation()


@pytest.fixture
def projection(loaded_repository, location) -> ListProjection:
    return ListProjection(loaded_repository, location)
