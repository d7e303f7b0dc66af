"""
Region Vocabulary for the Italian Checklist

Fixed tables describing the territories a checklist record can be assigned
to. Each record carries one column per region code and one per macro-region
code, holding a presence marker:

- "y": the taxon is present
- "?": presence is doubtful
- anything else (including an empty cell): absent

Territories:
- 20 administrative regions of Italy
- 5 associated territories: San Marino (RSM), Vatican City (CV),
  Canton Ticino (CT), Corsica (Cor) and the Maltese archipelago (M)

Macro-regions partition the same territories into North (N),
South/Centre (S), Sicily (Si) and Sardinia (Sa). Sicily and Sardinia are
both a region and a macro-region, so their columns are shared.

Example Usage:
    >>> from speciesdist.regions import REGION_NAMES, macro_region_for, RegionValue
    >>> REGION_NAMES["Lo"]
    'Lombardia'
    >>> macro_region_for("Lo")
    'N'
    >>> RegionValue.parse("?")
    <RegionValue.DOUBTFUL: '?'>
"""

from enum import Enum
from typing import Dict, List, Optional, Union

# ============================================================================
# Region and Macro-region Tables
# ============================================================================

REGION_NAMES: Dict[str, str] = {
    "Ao": "Valle d'Aosta",
    "Pi": "Piemonte",
    "Lo": "Lombardia",
    "VT": "Trentino-Alto Adige",
    "V": "Veneto",
    "FVG": "Friuli-Venezia Giulia",
    "Li": "Liguria",
    "ER": "Emilia-Romagna",
    "To": "Toscana",
    "Ma": "Marche",
    "Um": "Umbria",
    "La": "Lazio",
    "Abr": "Abruzzo",
    "Mo": "Molise",
    "Cp": "Campania",
    "Pu": "Puglia",
    "Bas": "Basilicata",
    "Cal": "Calabria",
    "Si": "Sicilia",
    "Sa": "Sardegna",
    "RSM": "Repubblica di San Marino",
    "CV": "Città del Vaticano",
    "CT": "Canton Ticino",
    "Cor": "Corsica",
    "M": "Arcipelago Maltese",
}

REGION_CODES: List[str] = list(REGION_NAMES)

MACRO_REGIONS: Dict[str, List[str]] = {
    "N": ["Ao", "Pi", "Lo", "VT", "V", "FVG", "Li", "ER"],
    "S": [
        "To", "Ma", "Um", "La", "Abr", "Mo", "Cp", "Pu", "Bas", "Cal",
        "RSM", "CV", "CT", "Cor", "M",
    ],
    "Si": ["Si"],
    "Sa": ["Sa"],
}

MACRO_REGION_NAMES: Dict[str, str] = {
    "N": "Nord",
    "S": "Sud e Centro",
    "Si": "Sicilia",
    "Sa": "Sardegna",
}

MACRO_REGION_CODES: List[str] = list(MACRO_REGIONS)

# Region columns that are not shared with a macro-region column
EXCLUSIVE_REGION_CODES: List[str] = [
    code for code in REGION_CODES if code not in MACRO_REGIONS
]

_PARENT_MACRO: Dict[str, str] = {
    code: macro
    for macro, members in MACRO_REGIONS.items()
    for code in members
}

# ============================================================================
# Column Layout
# ============================================================================

DISTRIBUTION_COLUMNS: List[str] = MACRO_REGION_CODES + EXCLUSIVE_REGION_CODES

RETAINED_COLUMNS: List[str] = [
    "Nome Scientifico",
    "Autore",
    "Phylum",
    "Classe",
    "Ordine",
    "Famiglia",
    "Sottofamiglia",
    "Genere",
    "Specie",
    "Sottospecie",
    "End",
    "Alien",
] + DISTRIBUTION_COLUMNS


# ============================================================================
# Presence Markers
# ============================================================================

class RegionValue(Enum):
    """Tri-state presence marker stored per record per region."""

    PRESENT = "y"
    DOUBTFUL = "?"
    ABSENT = ""

    @classmethod
    def parse(cls, raw: Optional[Union[str, "RegionValue"]]) -> "RegionValue":
        """
        Interpret a raw cell value.

        Only the exact markers "y" and "?" carry meaning; every other value,
        including None, whitespace and other letters, is absent.
        """
        if isinstance(raw, cls):
            return raw
        if raw == cls.PRESENT.value:
            return cls.PRESENT
        if raw == cls.DOUBTFUL.value:
            return cls.DOUBTFUL
        return cls.ABSENT


def macro_region_for(code: str) -> Optional[str]:
    """Return the macro-region containing ``code``, or None if unknown."""
    return _PARENT_MACRO.get(code)


def region_display_name(code: str) -> str:
    """Human-readable name for a region or macro-region code."""
    if code in REGION_NAMES:
        return REGION_NAMES[code]
    return MACRO_REGION_NAMES.get(code, code)


def is_region_code(code: str) -> bool:
    return code in REGION_NAMES or code in MACRO_REGIONS
