"""
Checklist Dataset Loading

This module obtains the delimited-text checklist, parses it into row
mappings and normalizes every row into a SpeciesRecord.

Key Responsibilities:
1. Fetch the raw text from a local path or an http(s) URL
2. Parse it as delimited text with a header row:
   - every cell is read as a string; empty cells stay "" (never NaN)
   - blank lines never produce rows
   - short rows are padded with absent (None) values
   - over-long rows are kept; fields beyond the header are dropped
3. Normalize each row (see records.normalize_row) and keep the survivors
   in input order

Failure Policy:
- An unreachable source, a non-success HTTP response, an empty file or
  text that cannot be parsed raises DatasetLoadError. No partial data is
  returned.
- Rows that fail normalization (missing genus or species) are dropped
  silently; only the totals are logged.

Example Usage:
    >>> from speciesdist.loader import load_dataset
    >>> records = load_dataset("data.csv")
    >>> print(len(records))
    1250
"""

import csv
from io import StringIO
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Union
from urllib.error import URLError
from urllib.request import urlopen
import logging

import pandas as pd

from .records import SpeciesRecord, normalize_row

logger = logging.getLogger(__name__)

RawRow = Dict[str, Optional[str]]


class DatasetLoadError(Exception):
    """Raised when the checklist source cannot be fetched or parsed."""
    pass


# ============================================================================
# Fetching
# ============================================================================

def is_remote_source(source: Union[str, Path]) -> bool:
    """True when the source is an http(s) URL rather than a local path."""
    return isinstance(source, str) and source.lower().startswith(("http://", "https://"))


def _decode(data: bytes, encoding: str) -> str:
    try:
        return data.decode(encoding)
    except UnicodeDecodeError:
        logger.warning(f"{encoding} decoding failed, trying latin-1")
        return data.decode('latin-1')


def read_source_text(
    source: Union[str, Path],
    encoding: str = 'utf-8',
    timeout: Optional[float] = None,
) -> str:
    """
    Read the raw checklist text.

    Parameters
    ----------
    source : Union[str, Path]
        Local file path or http(s) URL
    encoding : str
        Text encoding (default: 'utf-8', falls back to 'latin-1')
    timeout : Optional[float]
        Network timeout in seconds. None waits indefinitely.

    Returns
    -------
    str
        Decoded text

    Raises
    ------
    DatasetLoadError
        If the file is missing or unreadable, or the URL cannot be fetched
    """
    if is_remote_source(source):
        logger.info(f"Fetching checklist from {source}")
        try:
            kwargs = {} if timeout is None else {'timeout': timeout}
            with urlopen(source, **kwargs) as response:
                data = response.read()
        except URLError as e:
            raise DatasetLoadError(f"Could not fetch checklist from {source}: {e}") from e
        except OSError as e:
            raise DatasetLoadError(f"Network error while fetching {source}: {e}") from e
        return _decode(data, encoding)

    path = Path(source)
    if not path.exists():
        raise DatasetLoadError(f"Checklist file not found: {path}")

    logger.info(f"Reading checklist file: {path}")
    try:
        data = path.read_bytes()
    except OSError as e:
        raise DatasetLoadError(f"Could not read checklist file {path}: {e}") from e
    return _decode(data, encoding)


# ============================================================================
# Parsing
# ============================================================================

def parse_dataset_text(text: str, delimiter: str = ',') -> List[RawRow]:
    """
    Parse delimited text with a header row into row mappings.

    Parameters
    ----------
    text : str
        Raw delimited text
    delimiter : str
        Field separator (default: ',')

    Returns
    -------
    List[RawRow]
        One mapping per data row, header -> cell. Missing trailing cells
        are None; cells past the last header column are discarded.

    Raises
    ------
    DatasetLoadError
        If the text is empty or cannot be parsed
    """
    if not text.strip():
        raise DatasetLoadError("Checklist source is empty")

    truncated: List[List[str]] = []

    def _truncate_long_line(fields: List[str]) -> List[str]:
        truncated.append(fields)
        return fields[:n_header]

    try:
        header = next(row for row in csv.reader(StringIO(text), delimiter=delimiter) if row)
        n_header = len(header)
        df = pd.read_csv(
            StringIO(text),
            sep=delimiter,
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
            index_col=False,
            engine='python',
            on_bad_lines=_truncate_long_line,
        )
    except (pd.errors.ParserError, pd.errors.EmptyDataError, csv.Error, TypeError) as e:
        raise DatasetLoadError(f"Could not parse checklist: {e}") from e

    if truncated:
        logger.debug(f"Dropped extra fields from {len(truncated)} rows longer than the header")

    # Short rows come back as NaN even with keep_default_na=False
    df = df.astype(object).where(df.notna(), None)

    rows = df.to_dict(orient='records')
    logger.info(f"Parsed {len(rows)} rows and {len(df.columns)} columns")
    return rows


def normalize_rows(rows: Sequence[RawRow]) -> List[SpeciesRecord]:
    """
    Normalize parsed rows, dropping those without genus or species.

    Input order is preserved among the surviving rows.
    """
    records = []
    for row in rows:
        record = normalize_row(row)
        if record is not None:
            records.append(record)

    n_dropped = len(rows) - len(records)
    logger.info(
        f"Normalized {len(records)}/{len(rows)} rows "
        f"({n_dropped} dropped without genus or species)"
    )
    return records


def load_dataset(
    source: Union[str, Path],
    delimiter: str = ',',
    encoding: str = 'utf-8',
    timeout: Optional[float] = None,
) -> List[SpeciesRecord]:
    """
    Fetch, parse and normalize the checklist.

    Parameters
    ----------
    source : Union[str, Path]
        Local file path or http(s) URL
    delimiter : str
        Field separator (default: ',')
    encoding : str
        Text encoding (default: 'utf-8')
    timeout : Optional[float]
        Network timeout in seconds (default: None, wait indefinitely)

    Returns
    -------
    List[SpeciesRecord]
        Normalized records in source order

    Raises
    ------
    DatasetLoadError
        If the source cannot be read or parsed

    Examples
    --------
    >>> records = load_dataset("https://example.org/checklist.csv")
    >>> records[0].scientific_name
    'Bufo bufo'
    """
    text = read_source_text(source, encoding=encoding, timeout=timeout)
    rows = parse_dataset_text(text, delimiter=delimiter)
    return normalize_rows(rows)


# ============================================================================
# Export
# ============================================================================

def records_to_dataframe(
    records: Sequence[SpeciesRecord],
    columns: Optional[Sequence[str]] = None,
) -> pd.DataFrame:
    """
    Convert records to a DataFrame for tabular export.

    Parameters
    ----------
    records : Sequence[SpeciesRecord]
        Records to convert, in display order
    columns : Optional[Sequence[str]]
        Columns to keep, in order. Columns no record has are filled with
        empty strings. If None, every column found is kept.

    Returns
    -------
    pd.DataFrame
        One row per record
    """
    if columns is None:
        df = pd.DataFrame([record.to_row() for record in records])
    else:
        df = pd.DataFrame(
            [{col: record.get(col) for col in columns} for record in records],
            columns=list(columns),
        )

    return df.fillna('')
