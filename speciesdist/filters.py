"""
Substring Filtering of Checklist Records

Each active filter is a (column, query) pair. A record matches when, for
every active pair, the lowercased text of the record's value contains the
lowercased query. Missing values test as the empty string. Filters with an
empty query are ignored, exactly like columns with no filter at all.

Example Usage:
    >>> from speciesdist.filters import filter_records
    >>> amphibians = filter_records(records, {"Classe": "amphibia", "Lo": "y"})
"""

from typing import Any, Dict, List, Mapping, Optional, Sequence
import logging

from .records import SpeciesRecord

logger = logging.getLogger(__name__)


def _cell_text(value: Any) -> str:
    return "" if value is None else str(value)


def active_filters(filters: Optional[Mapping[str, Optional[str]]]) -> Dict[str, str]:
    """Drop filters whose query is empty or None."""
    if not filters:
        return {}
    return {column: query for column, query in filters.items() if query}


def matches_filters(record: SpeciesRecord, filters: Mapping[str, str]) -> bool:
    """True if ``record`` satisfies every filter (case-insensitive substring)."""
    for column, query in filters.items():
        if not query:
            continue
        if query.lower() not in _cell_text(record.get(column)).lower():
            return False
    return True


def filter_records(
    records: Sequence[SpeciesRecord],
    filters: Optional[Mapping[str, Optional[str]]],
) -> List[SpeciesRecord]:
    """
    Return the records matching all active filters, in input order.

    Parameters
    ----------
    records : Sequence[SpeciesRecord]
        Records to filter
    filters : Optional[Mapping[str, Optional[str]]]
        Column -> query. Absent columns and empty queries are unconstrained.

    Returns
    -------
    List[SpeciesRecord]
        Matching records. With no active filters this is every record in
        the original order.
    """
    active = active_filters(filters)
    if not active:
        return list(records)

    matched = [record for record in records if matches_filters(record, active)]
    logger.debug(f"Filters {active} matched {len(matched)}/{len(records)} records")
    return matched
