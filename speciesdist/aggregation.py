"""
Regional Aggregation of Checklist Records

This module summarises a (filtered) record collection per territory and
classifies every territory for choropleth display.

Resolution Tiers:
- REGIONAL: every record has at least one non-empty region column that is
  not shared with a macro-region (Sicily and Sardinia columns are shared,
  so on their own they cannot prove region-level data). Counts are taken
  per region code.
- MACRO: anything else, including an empty collection. Counts are taken
  per macro-region (N, S, Si, Sa) and each region inherits the count of
  the macro-region containing it.

Classification Modes:
1. Exactly one record (singleton mode): the record's marker for the
   territory (or its macro-region under the MACRO tier) picks one of three
   fixed categories: PRESENT, DOUBTFUL or ABSENT.
2. Zero or several records (gradient mode): a count of 0 is NO_DATA.
   Any other count is normalized linearly,
       intensity = (count - min) / (max - min)
   over all counts of the active tier, with max raised to at least 1. If
   max equals min the intensity is 1.

The mode depends on the number of records alone.

Degenerate inputs (empty collection, all-zero counts, a single distinct
count) are handled numerically and never raise.

Example Usage:
    >>> from speciesdist.aggregation import aggregate_regions
    >>> summary = aggregate_regions(filtered_records)
    >>> summary.tier
    <ResolutionTier.REGIONAL: 'regional'>
    >>> summary.classify("Lo")
    RegionClassification(code='Lo', state=<DisplayState.GRADIENT: 'gradient'>, count=12, intensity=0.8)
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Sequence, Tuple
import logging

import pandas as pd

from .records import SpeciesRecord
from .regions import (
    EXCLUSIVE_REGION_CODES,
    MACRO_REGION_CODES,
    MACRO_REGIONS,
    REGION_CODES,
    RegionValue,
    macro_region_for,
    region_display_name,
)

logger = logging.getLogger(__name__)


class ResolutionTier(Enum):
    REGIONAL = "regional"
    MACRO = "macro"


class DisplayState(Enum):
    """How a territory is drawn."""
    PRESENT = "present"
    DOUBTFUL = "doubtful"
    ABSENT = "absent"
    NO_DATA = "no_data"
    GRADIENT = "gradient"


_CATEGORY_FOR_VALUE = {
    RegionValue.PRESENT: DisplayState.PRESENT,
    RegionValue.DOUBTFUL: DisplayState.DOUBTFUL,
    RegionValue.ABSENT: DisplayState.ABSENT,
}


@dataclass(frozen=True)
class RegionClassification:
    code: str
    state: DisplayState
    count: int = 0
    intensity: Optional[float] = None


# ============================================================================
# Tier Detection and Counting
# ============================================================================

def has_regional_data(record: SpeciesRecord) -> bool:
    """True if any region-only column of ``record`` holds a non-blank value."""
    for code in EXCLUSIVE_REGION_CODES:
        value = record.distribution.get(code)
        if value is not None and value.strip():
            return True
    return False


def resolution_tier(records: Sequence[SpeciesRecord]) -> ResolutionTier:
    """
    Decide whether ``records`` support region-level aggregation.

    An empty collection is always MACRO.
    """
    if records and all(has_regional_data(r) for r in records):
        return ResolutionTier.REGIONAL
    return ResolutionTier.MACRO


def count_presence(
    records: Sequence[SpeciesRecord],
    codes: Sequence[str],
) -> Dict[str, int]:
    """
    Count records marked present ("y") for each code.

    Parameters
    ----------
    records : Sequence[SpeciesRecord]
        Records to count
    codes : Sequence[str]
        Region or macro-region codes

    Returns
    -------
    Dict[str, int]
        code -> number of records with a PRESENT marker, for every code
    """
    codes = list(codes)
    frame = pd.DataFrame(
        [{code: record.distribution.get(code) for code in codes} for record in records],
        columns=codes,
    )
    present = frame.eq(RegionValue.PRESENT.value).sum()
    return {code: int(present[code]) for code in codes}


# ============================================================================
# Summary
# ============================================================================

@dataclass(frozen=True)
class RegionSummary:
    """
    Aggregate statistics for one record collection.

    Attributes
    ----------
    tier : ResolutionTier
        Which codes the counts are keyed by
    record_count : int
        Number of records summarised
    counts : Mapping[str, int]
        Present counts keyed by the tier's codes (regions or macro-regions)
    region_counts : Mapping[str, int]
        Present counts for every region code; under the MACRO tier each
        region carries its macro-region's count
    singleton : Optional[SpeciesRecord]
        The only record, when exactly one was summarised
    """
    tier: ResolutionTier
    record_count: int
    counts: Mapping[str, int] = field(default_factory=dict)
    region_counts: Mapping[str, int] = field(default_factory=dict)
    singleton: Optional[SpeciesRecord] = None

    def __post_init__(self):
        object.__setattr__(self, 'counts', MappingProxyType(dict(self.counts)))
        object.__setattr__(self, 'region_counts', MappingProxyType(dict(self.region_counts)))

    @property
    def singleton_mode(self) -> bool:
        return self.record_count == 1

    @property
    def count_range(self) -> Tuple[int, int]:
        """(min, max) over the tier's counts, with max raised to at least 1."""
        values = list(self.counts.values())
        if not values:
            return 0, 1
        return min(values), max(max(values), 1)

    def source_code(self, code: str) -> Optional[str]:
        """
        Code whose column and count decide the display of ``code``.

        Under the REGIONAL tier this is the code itself; under the MACRO
        tier a region resolves to its macro-region. Unknown codes give None.
        """
        if self.tier is ResolutionTier.REGIONAL:
            return code if code in REGION_CODES else None
        if code in MACRO_REGIONS:
            return code
        return macro_region_for(code)

    def count_for(self, code: str) -> int:
        """Present count behind ``code`` at this tier; 0 for unknown codes."""
        source = self.source_code(code)
        if source is None:
            return 0
        return self.counts.get(source, 0)

    def classify(self, code: str) -> RegionClassification:
        """
        Classify one territory for display.

        Parameters
        ----------
        code : str
            Region or macro-region code

        Returns
        -------
        RegionClassification
            Categorical state in singleton mode, NO_DATA or GRADIENT with an
            intensity in [0, 1] otherwise. Unknown codes are NO_DATA.
        """
        source = self.source_code(code)
        if source is None:
            return RegionClassification(code, DisplayState.NO_DATA)

        count = self.count_for(code)

        if self.singleton_mode and self.singleton is not None:
            value = self.singleton.region_value(source)
            return RegionClassification(code, _CATEGORY_FOR_VALUE[value], count)

        if count == 0:
            return RegionClassification(code, DisplayState.NO_DATA, 0)

        low, high = self.count_range
        intensity = 1.0 if high == low else (count - low) / (high - low)
        return RegionClassification(code, DisplayState.GRADIENT, count, intensity)


def aggregate_regions(records: Sequence[SpeciesRecord]) -> RegionSummary:
    """
    Summarise presence per territory for a record collection.

    Parameters
    ----------
    records : Sequence[SpeciesRecord]
        Already-filtered records

    Returns
    -------
    RegionSummary
        Tier, counts and classification accessors. Recomputed from scratch
        for every collection.
    """
    tier = resolution_tier(records)

    if tier is ResolutionTier.REGIONAL:
        counts = count_presence(records, REGION_CODES)
        region_counts = dict(counts)
    else:
        counts = count_presence(records, MACRO_REGION_CODES)
        region_counts = {code: counts[macro_region_for(code)] for code in REGION_CODES}

    logger.debug(
        f"Aggregated {len(records)} records at {tier.value} resolution: "
        f"{sum(1 for c in counts.values() if c)} of {len(counts)} territories occupied"
    )

    return RegionSummary(
        tier=tier,
        record_count=len(records),
        counts=counts,
        region_counts=region_counts,
        singleton=records[0] if len(records) == 1 else None,
    )


def classify_regions(
    summary: RegionSummary,
    codes: Optional[Sequence[str]] = None,
) -> Dict[str, RegionClassification]:
    """Classify every region code (or the given codes)."""
    if codes is None:
        codes = REGION_CODES
    return {code: summary.classify(code) for code in codes}


def summary_to_dataframe(summary: RegionSummary) -> pd.DataFrame:
    """
    Tabulate a summary, one row per region code.

    Columns: code, name, macro_region, count, state, intensity, tier.
    """
    rows: List[Dict[str, object]] = []
    for code in REGION_CODES:
        cls = summary.classify(code)
        rows.append({
            'code': code,
            'name': region_display_name(code),
            'macro_region': macro_region_for(code),
            'count': summary.count_for(code),
            'state': cls.state.value,
            'intensity': cls.intensity,
            'tier': summary.tier.value,
        })
    return pd.DataFrame(rows)
