"""
Viewer Orchestration for speciesdist

This module runs the whole viewer once, without a browser: it loads the
checklist, applies a view state and writes the tabular, figure and HTML
views of the result.

Steps:
1. Load and normalize the checklist (local file or URL)
2. Filter and sort the records under the given ViewState
3. Aggregate the filtered records per territory
4. Write the species table, the region summary, the bar chart and the
   HTML view, each one optional through OutputConfig

Example Usage:
    >>> from speciesdist.core import run_viewer
    >>> from speciesdist.state import ViewState
    >>> state = ViewState().with_filter("Classe", "amphibia").toggle_sort("Famiglia")
    >>> result = run_viewer("checklist.csv", state=state, output_dir="results/")
    >>> print(result.summary.tier)
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Union
import logging
import time

import pandas as pd

from . import utils
from .aggregation import RegionSummary, summary_to_dataframe
from .config import ViewerConfig, get_default_config
from .loader import load_dataset, records_to_dataframe
from .records import SpeciesRecord
from .reports import generate_html_report
from .state import ViewState
from .visualization import plot_region_counts

logger = logging.getLogger(__name__)


@dataclass
class ViewerResult:
    """
    Outcome of one viewer run.

    Attributes
    ----------
    name : str
        Output file prefix
    records : List[SpeciesRecord]
        Every normalized record loaded
    table : List[SpeciesRecord]
        Filtered records in sort order
    summary : RegionSummary
        Per-territory summary of the filtered records
    files : Dict[str, Path]
        Output kind -> path written
    """
    name: str
    records: List[SpeciesRecord]
    table: List[SpeciesRecord]
    summary: RegionSummary
    files: Dict[str, Path] = field(default_factory=dict)

    @property
    def n_loaded(self) -> int:
        return len(self.records)

    @property
    def n_shown(self) -> int:
        return len(self.table)


def run_viewer(
    source: Optional[Union[str, Path]] = None,
    cfg: Optional[ViewerConfig] = None,
    state: Optional[ViewState] = None,
    output_dir: Optional[Union[str, Path]] = None,
    name: Optional[str] = None,
) -> ViewerResult:
    """
    Load a checklist and write its filtered, sorted, aggregated views.

    Parameters
    ----------
    source : Optional[Union[str, Path]]
        Checklist path or URL (default: cfg.dataset.source)
    cfg : Optional[ViewerConfig]
        Configuration (default: get_default_config())
    state : Optional[ViewState]
        Filters and sort keys (default: no filters, source order)
    output_dir : Optional[Union[str, Path]]
        Where outputs go (default: cfg.output_dir)
    name : Optional[str]
        Output file prefix (default: derived from the source name)

    Returns
    -------
    ViewerResult
        Loaded records, table, summary and output paths

    Raises
    ------
    DatasetLoadError
        If the checklist cannot be read or parsed
    """
    start = time.time()

    cfg = cfg or get_default_config()
    state = state or ViewState()
    source = source if source is not None else cfg.dataset.source
    out_dir = utils.create_output_directory(output_dir if output_dir is not None else cfg.output_dir)
    name = name or utils.extract_dataset_name(source)

    logger.info("=" * 80)
    logger.info(f"speciesdist - {name}")
    logger.info("=" * 80)
    logger.info(f"Source: {source}")
    logger.info(f"Output directory: {out_dir}")

    # ========================================================================
    # Load
    # ========================================================================
    records = load_dataset(
        source,
        delimiter=cfg.dataset.delimiter,
        encoding=cfg.dataset.encoding,
        timeout=cfg.dataset.timeout,
    )

    # ========================================================================
    # Filter, sort, aggregate
    # ========================================================================
    filters = state.active_filters
    if filters:
        logger.info(f"Filters: {', '.join(f'{k}={v}' for k, v in filters.items())}")
    if state.sort_keys:
        logger.info(
            f"Sort: {', '.join(f'{k.column}:{k.direction.value}' for k in state.sort_keys)}"
        )

    table = state.table(records)
    summary = state.summary(records)
    logger.info(
        f"{utils.format_count(len(table), 'record')} of {len(records):,} match; "
        f"{summary.tier.value} resolution"
    )

    result = ViewerResult(name=name, records=records, table=table, summary=summary)

    # ========================================================================
    # Outputs
    # ========================================================================
    out_cfg = cfg.output

    if out_cfg.write_table:
        table_path = out_dir / f"{name}_table.tsv"
        records_to_dataframe(table, out_cfg.table_columns).to_csv(table_path, sep='\t', index=False)
        result.files['table'] = table_path
        logger.info(f"Wrote species table to {table_path}")

    if out_cfg.write_regions:
        regions_path = out_dir / f"{name}_regions.tsv"
        regions_df = summary_to_dataframe(summary)
        regions_df['intensity'] = regions_df['intensity'].astype(object).where(
            pd.notna(regions_df['intensity']), ''
        )
        regions_df.to_csv(regions_path, sep='\t', index=False)
        result.files['regions'] = regions_path
        logger.info(f"Wrote region summary to {regions_path}")

    if out_cfg.make_plot:
        plot_path = plot_region_counts(
            summary,
            out_dir / f"{name}_region_counts.png",
            map_config=cfg.map,
            dpi=out_cfg.figure_dpi,
        )
        if plot_path is not None:
            result.files['plot'] = plot_path

    if out_cfg.make_report:
        result.files['report'] = generate_html_report(
            records,
            state,
            out_dir / f"{name}_report.html",
            summary=summary,
            table=table,
            columns=out_cfg.table_columns,
            map_config=cfg.map,
            max_rows=out_cfg.report_max_rows,
        )

    logger.info(f"Completed in {utils.format_elapsed_time(time.time() - start)}")
    return result
