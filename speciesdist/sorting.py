"""
Multi-key Sorting of Checklist Records

Sort keys are applied in priority order: records are compared on the first
key, ties fall through to the next key, and records equal on every key keep
their input order. Values are compared as case-sensitive strings; missing
values and unknown columns compare as the empty string.

Interactive key cycling follows the table header behaviour:
- a column without a key becomes ascending
- an ascending column becomes descending
- a descending column loses its key
A plain click replaces every other key; an extending click (shift-click)
keeps the other keys and updates the clicked one in place, appending it
only when it is new.

Example Usage:
    >>> from speciesdist.sorting import SortKey, SortDirection, sort_records
    >>> ordered = sort_records(records, [
    ...     SortKey("Famiglia"),
    ...     SortKey("Genere", SortDirection.DESCENDING),
    ... ])
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from .records import SpeciesRecord


class SortDirection(Enum):
    ASCENDING = "asc"
    DESCENDING = "desc"


@dataclass(frozen=True)
class SortKey:
    """One sort column with its direction."""
    column: str
    direction: SortDirection = SortDirection.ASCENDING

    @property
    def descending(self) -> bool:
        return self.direction is SortDirection.DESCENDING


def _sort_text(record: SpeciesRecord, column: str) -> str:
    value = record.get(column)
    return "" if value is None else str(value)


def sort_records(
    records: Sequence[SpeciesRecord],
    keys: Sequence[SortKey],
) -> List[SpeciesRecord]:
    """
    Return a new list sorted by ``keys`` (first key has highest priority).

    Python's sort is stable, including with ``reverse=True``, so sorting
    by each key from lowest to highest priority gives the multi-key order
    while equal records keep their relative input order.
    """
    ordered = list(records)
    for key in reversed(keys):
        ordered.sort(key=lambda r, c=key.column: _sort_text(r, c), reverse=key.descending)
    return ordered


def next_direction(current: Optional[SortDirection]) -> Optional[SortDirection]:
    """Cycle none -> ascending -> descending -> none."""
    if current is None:
        return SortDirection.ASCENDING
    if current is SortDirection.ASCENDING:
        return SortDirection.DESCENDING
    return None


def toggle_sort_key(
    keys: Sequence[SortKey],
    column: str,
    extend: bool = False,
) -> Tuple[SortKey, ...]:
    """
    Apply a header click to the current sort keys.

    Parameters
    ----------
    keys : Sequence[SortKey]
        Current keys in priority order
    column : str
        Column that was activated
    extend : bool
        False replaces all keys with the toggled one; True keeps the other
        keys in place (default: False)

    Returns
    -------
    Tuple[SortKey, ...]
        New keys; the input is not modified
    """
    current = next((k.direction for k in keys if k.column == column), None)
    direction = next_direction(current)

    if not extend:
        return (SortKey(column, direction),) if direction is not None else ()

    if direction is None:
        return tuple(k for k in keys if k.column != column)

    updated = SortKey(column, direction)
    if current is None:
        return tuple(keys) + (updated,)
    return tuple(updated if k.column == column else k for k in keys)


def parse_sort_key(text: str) -> SortKey:
    """
    Parse a command-line sort key such as ``"Famiglia"`` or ``"Genere:desc"``.

    Raises
    ------
    ValueError
        If the direction is not 'asc' or 'desc', or the column is empty
    """
    column, sep, direction = text.rpartition(':')
    if not sep:
        column, direction = text, SortDirection.ASCENDING.value

    column = column.strip()
    if not column:
        raise ValueError(f"Sort key has no column: '{text}'")

    try:
        return SortKey(column, SortDirection(direction.strip().lower()))
    except ValueError:
        raise ValueError(
            f"Invalid sort direction '{direction}' in '{text}' (expected 'asc' or 'desc')"
        ) from None
