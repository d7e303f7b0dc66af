"""
Unit tests for speciesdist.aggregation module

Tests cover:
1. Resolution tier detection (regional vs macro-regional)
2. Presence counting and macro-region inheritance
3. Gradient classification, including degenerate count ranges
4. Singleton classification from the single record's markers
5. Summary tabulation
"""

import pytest
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from speciesdist.aggregation import (
    DisplayState,
    ResolutionTier,
    aggregate_regions,
    classify_regions,
    count_presence,
    has_regional_data,
    resolution_tier,
    summary_to_dataframe,
)
from speciesdist.filters import filter_records
from speciesdist.loader import load_dataset
from speciesdist.records import normalize_row
from speciesdist.regions import MACRO_REGIONS, REGION_CODES


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def sample_records():
    return load_dataset(Path(__file__).parent / "data" / "checklist_sample.csv")


def make_record(genus="Rana", species="sp", **regions):
    return normalize_row({"Genere": genus, "Specie": species, **regions})


# ============================================================================
# Tier Detection
# ============================================================================

class TestResolutionTier:
    """Tests for tier detection."""

    def test_empty_is_macro(self):
        assert resolution_tier([]) is ResolutionTier.MACRO

    def test_all_regional(self):
        records = [make_record(Lo="y"), make_record(To="?")]
        assert resolution_tier(records) is ResolutionTier.REGIONAL

    def test_one_macro_only_record_forces_macro(self):
        records = [make_record(Lo="y"), make_record(N="y", S="y")]
        assert resolution_tier(records) is ResolutionTier.MACRO

    def test_shared_columns_do_not_prove_regional_data(self):
        record = make_record(Si="y", Sa="y")
        assert not has_regional_data(record)
        assert resolution_tier([record]) is ResolutionTier.MACRO

    def test_any_non_blank_value_counts(self):
        assert has_regional_data(make_record(Pu="n"))
        assert not has_regional_data(make_record(Pu="  "))

    def test_sample_tiers(self, sample_records):
        amphibians = filter_records(sample_records, {"Classe": "amphibia"})
        reptiles = filter_records(sample_records, {"Classe": "reptilia"})

        assert resolution_tier(sample_records) is ResolutionTier.MACRO
        assert resolution_tier(amphibians) is ResolutionTier.REGIONAL
        assert resolution_tier(reptiles) is ResolutionTier.MACRO


# ============================================================================
# Counting
# ============================================================================

class TestCountPresence:

    def test_only_present_markers_count(self):
        records = [make_record(Lo="y"), make_record(Lo="?"), make_record(Lo=""), make_record()]
        assert count_presence(records, ["Lo", "To"]) == {"Lo": 1, "To": 0}

    def test_empty_collection(self):
        assert count_presence([], ["N", "S"]) == {"N": 0, "S": 0}


# ============================================================================
# Gradient Mode
# ============================================================================

class TestGradientClassification:
    """Tests for classification with zero or several records."""

    def test_regional_counts(self, sample_records):
        amphibians = filter_records(sample_records, {"Classe": "amphibia"})
        summary = aggregate_regions(amphibians)

        assert summary.tier is ResolutionTier.REGIONAL
        assert summary.record_count == 5
        assert summary.counts["Lo"] == 3
        assert summary.counts["Cal"] == 3
        assert summary.counts["To"] == 2
        assert summary.counts["Cp"] == 1
        # Doubtful markers are not counted
        assert summary.counts["Cor"] == 0
        assert summary.counts["ER"] == 0
        assert summary.count_range == (0, 3)

    def test_regional_intensities(self, sample_records):
        amphibians = filter_records(sample_records, {"Classe": "amphibia"})
        summary = aggregate_regions(amphibians)

        lo = summary.classify("Lo")
        assert lo.state is DisplayState.GRADIENT
        assert lo.intensity == pytest.approx(1.0)
        assert summary.classify("To").intensity == pytest.approx(2 / 3)
        assert summary.classify("Cp").intensity == pytest.approx(1 / 3)
        assert summary.classify("Cor").state is DisplayState.NO_DATA
        assert summary.classify("Cor").intensity is None

    def test_macro_counts_inherited(self, sample_records):
        summary = aggregate_regions(sample_records)

        assert summary.tier is ResolutionTier.MACRO
        assert dict(summary.counts) == {"N": 5, "S": 6, "Si": 3, "Sa": 2}
        for macro, members in MACRO_REGIONS.items():
            for code in members:
                assert summary.region_counts[code] == summary.counts[macro]

    def test_count_for_resolves_through_tier(self, sample_records):
        macro = aggregate_regions(sample_records)
        assert macro.count_for("Lo") == 5
        assert macro.count_for("N") == 5
        assert macro.count_for("Sa") == 2
        assert macro.count_for("Atlantis") == 0

        amphibians = aggregate_regions(filter_records(sample_records, {"Classe": "amphibia"}))
        assert amphibians.count_for("Lo") == 3
        assert amphibians.count_for("Cor") == 0
        # Macro codes have no column of their own at regional resolution
        assert amphibians.count_for("N") == 0

    def test_macro_intensities(self, sample_records):
        summary = aggregate_regions(sample_records)

        assert summary.count_range == (2, 6)
        assert summary.classify("Lo").intensity == pytest.approx(0.75)
        assert summary.classify("Cor").intensity == pytest.approx(1.0)
        assert summary.classify("N").intensity == pytest.approx(0.75)
        # Minimum non-zero count is drawn at the low end, not as no data
        sa = summary.classify("Sa")
        assert sa.state is DisplayState.GRADIENT
        assert sa.intensity == pytest.approx(0.0)

    def test_tier_switch_after_filter(self, sample_records):
        reptiles = filter_records(sample_records, {"Classe": "reptilia"})
        summary = aggregate_regions(reptiles)

        assert summary.tier is ResolutionTier.MACRO
        assert summary.counts["N"] == 2
        assert summary.classify("Lo").count == 2
        assert summary.classify("Lo").intensity == pytest.approx(0.5)

    def test_equal_counts_give_full_intensity(self):
        # counts {0, 5, 5}: min 0, max 5
        records = [make_record(Lo="y", To="y") for _ in range(5)] + [make_record(Pu="?")]
        summary = aggregate_regions(records)

        assert summary.classify("Lo").intensity == pytest.approx(1.0)
        assert summary.classify("To").intensity == pytest.approx(1.0)
        assert summary.classify("Pu").state is DisplayState.NO_DATA

    def test_single_distinct_count(self):
        # Every territory has the same count: max == min
        summary = aggregate_regions([make_record(N="y", S="y", Si="y", Sa="y")] * 2)

        assert summary.count_range == (2, 2)
        assert summary.classify("Lo").intensity == pytest.approx(1.0)

    def test_empty_collection(self):
        summary = aggregate_regions([])

        assert summary.tier is ResolutionTier.MACRO
        assert summary.record_count == 0
        assert summary.count_range == (0, 1)
        for code in REGION_CODES:
            assert summary.classify(code).state is DisplayState.NO_DATA

    def test_all_zero_counts(self):
        summary = aggregate_regions([make_record(Lo="?"), make_record(To="")])

        assert summary.count_range == (0, 1)
        assert all(c.state is DisplayState.NO_DATA for c in classify_regions(summary).values())

    def test_unknown_code_is_no_data(self, sample_records):
        summary = aggregate_regions(sample_records)
        assert summary.classify("Atlantis").state is DisplayState.NO_DATA

    def test_intensity_bounds(self, sample_records):
        for subset in [sample_records, sample_records[:3], sample_records[4:]]:
            summary = aggregate_regions(subset)
            for cls in classify_regions(summary).values():
                if cls.state is DisplayState.GRADIENT:
                    assert 0.0 <= cls.intensity <= 1.0
                    assert cls.count > 0


# ============================================================================
# Singleton Mode
# ============================================================================

class TestSingletonClassification:
    """Tests for classification with exactly one record."""

    def test_regional_singleton(self):
        summary = aggregate_regions([make_record(Lo="y", To="?", Pu="")])

        assert summary.singleton_mode
        assert summary.classify("Lo").state is DisplayState.PRESENT
        assert summary.classify("To").state is DisplayState.DOUBTFUL
        assert summary.classify("Pu").state is DisplayState.ABSENT
        assert summary.classify("Cal").state is DisplayState.ABSENT
        assert summary.classify("Lo").intensity is None

    def test_unrecognised_marker_is_absent(self):
        summary = aggregate_regions([make_record(Lo="Y", To="x")])

        assert summary.classify("Lo").state is DisplayState.ABSENT
        assert summary.classify("To").state is DisplayState.ABSENT

    def test_macro_singleton_uses_parent_marker(self, sample_records):
        zamenis = filter_records(sample_records, {"Genere": "zamenis"})
        summary = aggregate_regions(zamenis)

        assert summary.tier is ResolutionTier.MACRO
        assert summary.classify("Lo").state is DisplayState.PRESENT
        assert summary.classify("Cal").state is DisplayState.PRESENT
        assert summary.classify("Si").state is DisplayState.ABSENT

    def test_sample_singletons(self, sample_records):
        testudo = aggregate_regions(filter_records(sample_records, {"Genere": "testudo"}))
        bufotes = aggregate_regions(filter_records(sample_records, {"Genere": "bufotes"}))

        assert testudo.tier is ResolutionTier.REGIONAL
        assert testudo.classify("Cor").state is DisplayState.PRESENT
        assert testudo.classify("Lo").state is DisplayState.ABSENT
        assert bufotes.classify("Cor").state is DisplayState.DOUBTFUL

    def test_two_records_switch_to_gradient(self):
        summary = aggregate_regions([make_record(Lo="y"), make_record(Lo="?")])

        assert not summary.singleton_mode
        assert summary.classify("Lo").state is DisplayState.GRADIENT
        assert summary.classify("To").state is DisplayState.NO_DATA


# ============================================================================
# Tabulation
# ============================================================================

class TestSummaryToDataFrame:

    def test_columns_and_rows(self, sample_records):
        df = summary_to_dataframe(aggregate_regions(sample_records))

        assert list(df.columns) == [
            'code', 'name', 'macro_region', 'count', 'state', 'intensity', 'tier'
        ]
        assert list(df['code']) == REGION_CODES
        row = df.set_index('code').loc['Lo']
        assert row['name'] == 'Lombardia'
        assert row['macro_region'] == 'N'
        assert row['count'] == 5
        assert row['state'] == 'gradient'
        assert row['tier'] == 'macro'
