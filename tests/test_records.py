"""
Unit tests for speciesdist.records and speciesdist.regions

Tests cover:
1. Scientific name composition with optional subgenus and subspecies
2. Author selection between species and subspecies authorship
3. Dropping rows without genus or species
4. Pass-through of raw and unrecognised columns
5. Presence marker parsing and region lookups
"""

import pytest
import numpy as np
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from speciesdist.records import (
    SpeciesRecord,
    compose_scientific_name,
    normalize_row,
)
from speciesdist.regions import (
    DISTRIBUTION_COLUMNS,
    EXCLUSIVE_REGION_CODES,
    MACRO_REGIONS,
    REGION_CODES,
    RegionValue,
    is_region_code,
    macro_region_for,
    region_display_name,
)


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def species_row():
    return {
        "Classe": "Amphibia",
        "Genere": "Bufo",
        "Sottogenere": "",
        "Specie": "bufo",
        "Sottospecie": "",
        "Autore e anno specie": "(Linnaeus, 1758)",
        "Autore e anno sottospecie": "",
        "N": "y",
        "Lo": "y",
        "Cor": "?",
        "Note": "common",
    }


# ============================================================================
# Name Composition
# ============================================================================

class TestComposeScientificName:
    """Tests for scientific name composition."""

    def test_genus_and_species(self):
        assert compose_scientific_name("Rana", "", "dalmatina", "") == "Rana dalmatina"

    def test_with_subgenus(self):
        assert compose_scientific_name("Rana", "Pelophylax", "esculentus", "") == \
            "Rana (Pelophylax) esculentus"

    def test_with_subspecies(self):
        assert compose_scientific_name("Bufo", "", "bufo", "spinosus") == "Bufo bufo spinosus"

    def test_all_parts(self):
        assert compose_scientific_name("A", "B", "c", "d") == "A (B) c d"


# ============================================================================
# Row Normalization
# ============================================================================

class TestNormalizeRow:
    """Tests for normalize_row."""

    def test_basic_row(self, species_row):
        record = normalize_row(species_row)

        assert isinstance(record, SpeciesRecord)
        assert record.scientific_name == "Bufo bufo"
        assert record.author == "(Linnaeus, 1758)"
        assert record.class_name == "Amphibia"
        assert not record.has_subspecies

    def test_components_are_trimmed(self):
        record = normalize_row({
            "Genere": "  Podarcis ",
            "Sottogenere": " ",
            "Specie": "siculus\t",
            "Sottospecie": " campestris",
        })

        assert record.scientific_name == "Podarcis siculus campestris"
        # Raw values are kept verbatim
        assert record.genus == "  Podarcis "

    def test_subspecies_author_selected(self):
        record = normalize_row({
            "Genere": "Salamandra",
            "Specie": "salamandra",
            "Sottospecie": "gigliolii",
            "Autore e anno specie": "(Linnaeus, 1758)",
            "Autore e anno sottospecie": "Eiselt & Lanza, 1956",
        })

        assert record.author == "Eiselt & Lanza, 1956"
        assert record.has_subspecies

    def test_empty_subspecies_author_is_copied_verbatim(self):
        record = normalize_row({
            "Genere": "Podarcis",
            "Specie": "siculus",
            "Sottospecie": "campestris",
            "Autore e anno specie": "(Rafinesque, 1810)",
            "Autore e anno sottospecie": "",
        })

        assert record.author == ""

    def test_whitespace_subspecies_uses_species_author(self):
        record = normalize_row({
            "Genere": "Rana",
            "Specie": "dalmatina",
            "Sottospecie": "   ",
            "Autore e anno specie": "Fitzinger, 1839",
            "Autore e anno sottospecie": "Nobody, 2000",
        })

        assert record.author == "Fitzinger, 1839"
        assert record.scientific_name == "Rana dalmatina"

    def test_missing_author_columns(self):
        record = normalize_row({"Genere": "Rana", "Specie": "dalmatina"})
        assert record.author == ""

    @pytest.mark.parametrize("row", [
        {"Genere": "Rana", "Specie": ""},
        {"Genere": "", "Specie": "sp."},
        {"Genere": "   ", "Specie": "sp."},
        {"Genere": "Rana", "Specie": None},
        {"Specie": "dalmatina"},
        {"Genere": "Rana"},
        {"Genere": np.nan, "Specie": "sp."},
    ])
    def test_rows_without_genus_or_species_are_dropped(self, row):
        assert normalize_row(row) is None

    def test_extra_columns_pass_through(self, species_row):
        record = normalize_row(species_row)

        assert record.get("Note") == "common"
        assert record.extra["Note"] == "common"
        assert record.get("Autore e anno specie") == "(Linnaeus, 1758)"
        assert record.get("Autore e anno sottospecie") == ""

    def test_derived_columns_in_source_are_replaced(self, species_row):
        species_row["Nome Scientifico"] = "Wrong name"
        species_row["Autore"] = "Wrong author"

        record = normalize_row(species_row)

        assert record.get("Nome Scientifico") == "Bufo bufo"
        assert record.get("Autore") == "(Linnaeus, 1758)"
        assert "Nome Scientifico" not in record.extra

    def test_distribution_values(self, species_row):
        record = normalize_row(species_row)

        assert record.region_value("Lo") is RegionValue.PRESENT
        assert record.region_value("Cor") is RegionValue.DOUBTFUL
        assert record.region_value("To") is RegionValue.ABSENT
        assert record.get("N") == "y"

    def test_missing_cells_are_none(self):
        record = normalize_row({"Genere": "Rana", "Specie": "dalmatina", "Lo": None})

        assert record.get("Lo") is None
        assert record.region_value("Lo") is RegionValue.ABSENT
        assert record.get("Famiglia") is None
        assert record.get("Famiglia", "") == ""


# ============================================================================
# Record Model
# ============================================================================

class TestSpeciesRecord:
    """Tests for the SpeciesRecord value type."""

    def test_record_is_immutable(self, species_row):
        record = normalize_row(species_row)

        with pytest.raises(AttributeError):
            record.scientific_name = "Other"
        with pytest.raises(TypeError):
            record.distribution["Lo"] = ""

    def test_identity_ignores_raw_whitespace(self):
        a = normalize_row({"Genere": "Rana ", "Specie": "dalmatina"})
        b = normalize_row({"Genere": "Rana", "Specie": " dalmatina"})
        assert a.identity == b.identity

    def test_to_row_round_trip(self, species_row):
        record = normalize_row(species_row)
        row = record.to_row()

        assert row["Nome Scientifico"] == "Bufo bufo"
        assert row["Autore"] == "(Linnaeus, 1758)"
        assert row["Genere"] == "Bufo"
        assert row["Lo"] == "y"
        assert row["Note"] == "common"
        # Columns absent from the source stay absent
        assert "Famiglia" not in row

        again = normalize_row(row)
        assert again.scientific_name == record.scientific_name
        assert again.author == record.author


# ============================================================================
# Region Vocabulary
# ============================================================================

class TestRegions:
    """Tests for the region tables and presence markers."""

    def test_code_tables(self):
        assert len(REGION_CODES) == 25
        assert set(MACRO_REGIONS) == {"N", "S", "Si", "Sa"}
        assert "Si" not in EXCLUSIVE_REGION_CODES
        assert "Sa" not in EXCLUSIVE_REGION_CODES
        assert len(EXCLUSIVE_REGION_CODES) == 23
        # Shared Si/Sa columns appear once
        assert len(DISTRIBUTION_COLUMNS) == len(set(DISTRIBUTION_COLUMNS)) == 27

    def test_every_region_has_one_macro_region(self):
        members = [code for codes in MACRO_REGIONS.values() for code in codes]
        assert sorted(members) == sorted(REGION_CODES)

    @pytest.mark.parametrize("code,macro", [
        ("Lo", "N"), ("Ao", "N"), ("To", "S"), ("Cor", "S"),
        ("M", "S"), ("Si", "Si"), ("Sa", "Sa"), ("XX", None),
    ])
    def test_macro_region_for(self, code, macro):
        assert macro_region_for(code) == macro

    @pytest.mark.parametrize("raw,expected", [
        ("y", RegionValue.PRESENT),
        ("?", RegionValue.DOUBTFUL),
        ("", RegionValue.ABSENT),
        (None, RegionValue.ABSENT),
        ("Y", RegionValue.ABSENT),
        (" y", RegionValue.ABSENT),
        ("n", RegionValue.ABSENT),
        (RegionValue.DOUBTFUL, RegionValue.DOUBTFUL),
    ])
    def test_region_value_parse(self, raw, expected):
        assert RegionValue.parse(raw) is expected

    def test_display_names(self):
        assert region_display_name("Lo") == "Lombardia"
        assert region_display_name("N") == "Nord"
        assert region_display_name("Si") == "Sicilia"
        assert region_display_name("unknown") == "unknown"

    def test_is_region_code(self):
        assert is_region_code("FVG")
        assert is_region_code("S")
        assert not is_region_code("fvg")
