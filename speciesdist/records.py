"""
Checklist Record Normalization

This module converts one parsed checklist row into a canonical species
record. Normalization is the only place where names are composed; every
downstream operation (filtering, sorting, regional aggregation) reads the
records produced here.

Normalization Rules:
1. Genus, subgenus, species and subspecies are trimmed before use; an
   absent column counts as an empty string.
2. Rows whose trimmed genus or species is empty are dropped silently.
3. The scientific name is composed as
       Genus [(Subgenus)] species [subspecies]
   omitting empty parts and joining the rest with single spaces.
4. The canonical author is the subspecies authorship when the row has a
   non-blank subspecies, otherwise the species authorship. The chosen
   value is copied verbatim, even when it is empty.
5. Every raw column passes through unchanged, including both authorship
   columns.

Record Layout:
- Typed attributes for the recognised checklist headers
- ``distribution``: macro-region and region code columns
- ``extra``: any other header found in the source, kept for round-tripping

Example Usage:
    >>> from speciesdist.records import normalize_row
    >>> record = normalize_row({
    ...     "Genere": "Bufo", "Sottogenere": "Epidalea", "Specie": "bufo",
    ...     "Autore e anno specie": "(Linnaeus, 1758)", "Lo": "y",
    ... })
    >>> record.scientific_name
    'Bufo (Epidalea) bufo'
    >>> record.author
    '(Linnaeus, 1758)'
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple
import logging

import pandas as pd

from .regions import DISTRIBUTION_COLUMNS, REGION_CODES, RegionValue

logger = logging.getLogger(__name__)

# ============================================================================
# Column Names
# ============================================================================

GENUS = "Genere"
SUBGENUS = "Sottogenere"
SPECIES = "Specie"
SUBSPECIES = "Sottospecie"
SPECIES_AUTHOR = "Autore e anno specie"
SUBSPECIES_AUTHOR = "Autore e anno sottospecie"

SCIENTIFIC_NAME = "Nome Scientifico"
AUTHOR = "Autore"

# Recognised header -> SpeciesRecord attribute
CORE_COLUMNS: Dict[str, str] = {
    "Phylum": "phylum",
    "Classe": "class_name",
    "Ordine": "order",
    "Famiglia": "family",
    "Sottofamiglia": "subfamily",
    GENUS: "genus",
    SUBGENUS: "subgenus",
    SPECIES: "species",
    SUBSPECIES: "subspecies",
    SPECIES_AUTHOR: "species_author",
    SUBSPECIES_AUTHOR: "subspecies_author",
    "End": "endemic",
    "Alien": "alien",
}

DERIVED_COLUMNS: Dict[str, str] = {
    SCIENTIFIC_NAME: "scientific_name",
    AUTHOR: "author",
}

_DISTRIBUTION_FIELDS = frozenset(DISTRIBUTION_COLUMNS) | frozenset(REGION_CODES)


# ============================================================================
# Record Model
# ============================================================================

@dataclass(frozen=True)
class SpeciesRecord:
    """
    One normalized checklist entry.

    Raw attributes hold the source cell verbatim, or None when the column
    was not present in the source. ``scientific_name`` and ``author`` are
    derived during normalization and never change afterwards.
    """
    scientific_name: str
    author: str
    genus: Optional[str] = None
    species: Optional[str] = None
    subgenus: Optional[str] = None
    subspecies: Optional[str] = None
    species_author: Optional[str] = None
    subspecies_author: Optional[str] = None
    phylum: Optional[str] = None
    class_name: Optional[str] = None
    order: Optional[str] = None
    family: Optional[str] = None
    subfamily: Optional[str] = None
    endemic: Optional[str] = None
    alien: Optional[str] = None
    distribution: Mapping[str, Optional[str]] = field(default_factory=dict, compare=False)
    extra: Mapping[str, Optional[str]] = field(default_factory=dict, compare=False)

    def __post_init__(self):
        # Freeze the side mappings so the record cannot be mutated through them
        object.__setattr__(self, 'distribution', MappingProxyType(dict(self.distribution)))
        object.__setattr__(self, 'extra', MappingProxyType(dict(self.extra)))

    @property
    def identity(self) -> Tuple[str, str, str, str, str]:
        """Intrinsic identity: trimmed name components plus canonical author."""
        return (
            _clean(self.genus),
            _clean(self.subgenus),
            _clean(self.species),
            _clean(self.subspecies),
            self.author,
        )

    @property
    def has_subspecies(self) -> bool:
        return _clean(self.subspecies) != ""

    def get(self, column: str, default: Any = None) -> Any:
        """
        Look up a value by its source header name.

        Derived headers ("Nome Scientifico", "Autore") resolve to the derived
        attributes; region codes resolve to the distribution columns; any
        other header is looked up among the extra columns.
        """
        if column in DERIVED_COLUMNS:
            return getattr(self, DERIVED_COLUMNS[column])
        if column in CORE_COLUMNS:
            value = getattr(self, CORE_COLUMNS[column])
            return default if value is None else value
        if column in self.distribution:
            return self.distribution[column]
        return self.extra.get(column, default)

    def region_value(self, code: str) -> RegionValue:
        """Presence marker for a region or macro-region code."""
        return RegionValue.parse(self.distribution.get(code))

    def to_row(self) -> Dict[str, Optional[str]]:
        """Flatten the record back into a header -> value mapping."""
        row: Dict[str, Optional[str]] = {
            SCIENTIFIC_NAME: self.scientific_name,
            AUTHOR: self.author,
        }
        for column, attr in CORE_COLUMNS.items():
            value = getattr(self, attr)
            if value is not None:
                row[column] = value
        row.update(self.distribution)
        row.update(self.extra)
        return row


# ============================================================================
# Normalization
# ============================================================================

def _as_text(value: Any) -> Optional[str]:
    """Convert a raw cell to text, mapping None/NaN to None."""
    if value is None:
        return None
    if not isinstance(value, str) and pd.isna(value):
        return None
    return str(value)


def _clean(value: Any) -> str:
    text = _as_text(value)
    return text.strip() if text is not None else ""


def compose_scientific_name(
    genus: str,
    subgenus: str,
    species: str,
    subspecies: str,
) -> str:
    """
    Compose a scientific name from already-trimmed components.

    Examples
    --------
    >>> compose_scientific_name("Rana", "", "dalmatina", "")
    'Rana dalmatina'
    >>> compose_scientific_name("Rana", "Pelophylax", "esculentus", "")
    'Rana (Pelophylax) esculentus'
    >>> compose_scientific_name("Bufo", "", "bufo", "spinosus")
    'Bufo bufo spinosus'
    """
    parts = [
        genus,
        f"({subgenus})" if subgenus else "",
        species,
        subspecies,
    ]
    return " ".join(p for p in parts if p)


def normalize_row(raw_row: Mapping[str, Any]) -> Optional[SpeciesRecord]:
    """
    Normalize one parsed checklist row.

    Parameters
    ----------
    raw_row : Mapping[str, Any]
        Header -> cell mapping as produced by the dataset parser. Values
        may be None (or NaN) for missing cells.

    Returns
    -------
    Optional[SpeciesRecord]
        The normalized record, or None when the trimmed genus or species
        is empty. Dropped rows are not reported as errors.
    """
    genus = _clean(raw_row.get(GENUS))
    species = _clean(raw_row.get(SPECIES))
    if not genus or not species:
        return None

    subgenus = _clean(raw_row.get(SUBGENUS))
    subspecies = _clean(raw_row.get(SUBSPECIES))

    scientific_name = compose_scientific_name(genus, subgenus, species, subspecies)

    author_column = SUBSPECIES_AUTHOR if subspecies else SPECIES_AUTHOR
    author = _as_text(raw_row.get(author_column)) or ""

    core: Dict[str, Optional[str]] = {}
    distribution: Dict[str, Optional[str]] = {}
    extra: Dict[str, Optional[str]] = {}

    for column, value in raw_row.items():
        text = _as_text(value)
        if column in CORE_COLUMNS:
            core[CORE_COLUMNS[column]] = text
        elif column in _DISTRIBUTION_FIELDS:
            distribution[column] = text
        elif column in DERIVED_COLUMNS:
            # Derived headers always come from normalization
            continue
        else:
            extra[column] = text

    return SpeciesRecord(
        scientific_name=scientific_name,
        author=author,
        distribution=distribution,
        extra=extra,
        **core,
    )
