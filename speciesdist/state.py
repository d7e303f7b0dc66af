"""
Explicit View State

The viewer's filter and sort settings live in one immutable object that is
passed to the pure filtering, sorting and aggregation functions. Every
change produces a new state.

Example Usage:
    >>> from speciesdist.state import ViewState
    >>> state = ViewState().with_filter("Classe", "amphibia")
    >>> state = state.with_region_presence("Lo")      # map click
    >>> state = state.toggle_sort("Famiglia")         # header click
    >>> table = state.table(records)
    >>> summary = state.summary(records)
"""

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import List, Mapping, Optional, Sequence, Tuple

from .aggregation import RegionSummary, aggregate_regions
from .filters import active_filters, filter_records
from .records import SpeciesRecord
from .regions import RegionValue
from .sorting import SortKey, sort_records, toggle_sort_key


@dataclass(frozen=True)
class ViewState:
    """
    Current filters and sort keys.

    Attributes
    ----------
    filters : Mapping[str, str]
        Column -> substring query. Empty queries are kept but inactive.
    sort_keys : Tuple[SortKey, ...]
        Sort keys in priority order
    """
    filters: Mapping[str, str] = field(default_factory=dict)
    sort_keys: Tuple[SortKey, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, 'filters', MappingProxyType(dict(self.filters)))
        object.__setattr__(self, 'sort_keys', tuple(self.sort_keys))

    @property
    def active_filters(self):
        return active_filters(self.filters)

    def with_filter(self, column: str, query: Optional[str]) -> 'ViewState':
        """Set (or clear, with an empty query) the filter for one column."""
        filters = dict(self.filters)
        filters[column] = query or ""
        return replace(self, filters=filters)

    def with_region_presence(self, code: str) -> 'ViewState':
        """Restrict to records present in ``code``, as a map click does."""
        return self.with_filter(code, RegionValue.PRESENT.value)

    def clear_filters(self) -> 'ViewState':
        return replace(self, filters={})

    def toggle_sort(self, column: str, extend: bool = False) -> 'ViewState':
        return replace(self, sort_keys=toggle_sort_key(self.sort_keys, column, extend))

    def filter(self, records: Sequence[SpeciesRecord]) -> List[SpeciesRecord]:
        return filter_records(records, self.filters)

    def table(self, records: Sequence[SpeciesRecord]) -> List[SpeciesRecord]:
        """Filtered records in sort order."""
        return sort_records(self.filter(records), self.sort_keys)

    def summary(self, records: Sequence[SpeciesRecord]) -> RegionSummary:
        """Regional summary of the filtered records."""
        return aggregate_regions(self.filter(records))
