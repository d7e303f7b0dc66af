"""
Unit tests for speciesdist.geography module
"""

import pytest
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from speciesdist.geography import (
    BOUNDARY_NAME_PROPERTY,
    BOUNDARY_NAME_TO_CODE,
    INSET_CODES,
    STATIC_FEATURES,
    feature_region_code,
    region_code_for_boundary,
)
from speciesdist.regions import REGION_CODES


class TestBoundaryLookup:

    @pytest.mark.parametrize("name,code", [
        ("Lombardia", "Lo"),
        ("Valle d'Aosta/Vallée d'Aoste", "Ao"),
        ("Trentino-Alto Adige/Südtirol", "VT"),
        ("Friuli-Venezia Giulia", "FVG"),
        ("Sicilia", "Si"),
        ("Sardegna", "Sa"),
    ])
    def test_known_names(self, name, code):
        assert region_code_for_boundary(name) == code

    @pytest.mark.parametrize("name", ["Île-de-France", "lombardia", "", None])
    def test_unknown_names(self, name):
        assert region_code_for_boundary(name) is None

    def test_all_twenty_regions_mapped(self):
        assert len(BOUNDARY_NAME_TO_CODE) == 20
        assert set(BOUNDARY_NAME_TO_CODE.values()) <= set(REGION_CODES)


class TestStaticFeatures:

    def test_inline_territories(self):
        codes = [feature_region_code(f) for f in STATIC_FEATURES]
        assert codes == ["Cor", "RSM", "CV"]

    def test_corsica_ring_is_closed(self):
        corsica = STATIC_FEATURES[0]
        ring = corsica["geometry"]["coordinates"][0]

        assert corsica["geometry"]["type"] == "Polygon"
        assert ring[0] == ring[-1]
        assert all(8.0 < lon < 10.0 and 41.0 < lat < 43.5 for lon, lat in ring)

    def test_point_territories(self):
        points = [f for f in STATIC_FEATURES if f["geometry"]["type"] == "Point"]
        assert len(points) == 2

    def test_every_territory_is_drawable(self):
        drawn = set(BOUNDARY_NAME_TO_CODE.values())
        drawn |= {feature_region_code(f) for f in STATIC_FEATURES}
        drawn |= set(INSET_CODES)
        assert drawn == set(REGION_CODES)

    def test_boundary_feature(self):
        feature = {"type": "Feature", "properties": {BOUNDARY_NAME_PROPERTY: "Toscana"}}
        assert feature_region_code(feature) == "To"

    def test_feature_without_properties(self):
        assert feature_region_code({"type": "Feature"}) is None
