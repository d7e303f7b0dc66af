"""
Static HTML View

Renders a self-contained HTML page with the current view of the checklist:
headline numbers, the active filters and sort keys, the per-territory
summary with map fill colours, and the filtered, sorted species table.

Example Usage:
    >>> from speciesdist.reports import generate_html_report
    >>> generate_html_report(
    ...     records=records,
    ...     state=state,
    ...     output_path="results/checklist_report.html",
    ... )
"""

from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Union
import logging

from jinja2 import Environment, select_autoescape

from . import __version__
from .aggregation import RegionSummary, summary_to_dataframe
from .config import MapConfig
from .records import SpeciesRecord
from .regions import RETAINED_COLUMNS
from .state import ViewState
from .utils import format_count
from .visualization import region_fill_colors

logger = logging.getLogger(__name__)


HTML_REPORT_CSS = """
body { font-family: -apple-system, "Segoe UI", Helvetica, Arial, sans-serif;
       background: #fafaf9; color: #27272a; margin: 0; padding: 24px 32px; }
h1 { font-size: 1.5em; margin-bottom: 0; }
h2 { font-size: 1.1em; text-transform: uppercase; letter-spacing: 0.08em;
     color: #52525b; margin-top: 32px; }
.subtitle { color: #71717a; font-size: 0.85em; }
.stats { display: flex; gap: 16px; margin-top: 16px; }
.stat { background: #fff; border: 1px solid #e4e4e7; border-radius: 12px;
        padding: 12px 20px; }
.stat .value { font-size: 1.6em; font-weight: 300; }
.stat .label { font-size: 0.7em; text-transform: uppercase; color: #a1a1aa; }
.table-container { overflow-x: auto; background: #fff; border: 1px solid #e4e4e7;
                   border-radius: 12px; }
table { border-collapse: collapse; width: 100%; font-size: 0.85em; }
th { background: #f4f4f5; text-align: left; padding: 8px; white-space: nowrap; }
td { border-top: 1px solid #e4e4e7; padding: 6px 8px; white-space: nowrap; }
.swatch { display: inline-block; width: 14px; height: 14px; border-radius: 4px;
          border: 1px solid #d4d4d8; vertical-align: middle; }
.empty { padding: 24px; text-align: center; font-style: italic; color: #71717a; }
.note { color: #888; font-size: 0.85em; margin-top: 8px; }
"""

HTML_REPORT_TEMPLATE = """<!DOCTYPE html>
<html lang="it">
<head>
<meta charset="utf-8">
<title>{{ title }}</title>
<style>{{ css }}</style>
</head>
<body>
<h1>{{ title }}</h1>
<div class="subtitle">Generated {{ timestamp }} &middot; speciesdist {{ version }}</div>
<div class="stats">
{% for stat in quick_stats %}
  <div class="stat"><div class="value">{{ stat.value }}</div><div class="label">{{ stat.label }}</div></div>
{% endfor %}
</div>
{% for section in sections %}
<div class="section">
  <h2>{{ section.heading }}</h2>
  {% if section.kind == 'list' %}
    {% if section.entries %}
    <ul>{% for item in section.entries %}<li>{{ item }}</li>{% endfor %}</ul>
    {% else %}
    <p class="note">{{ section.empty_message }}</p>
    {% endif %}
  {% elif section.kind == 'table' %}
    {% if section.rows %}
    <div class="table-container">
    <table>
      <thead><tr>{% for col in section.columns %}<th>{{ col }}</th>{% endfor %}</tr></thead>
      <tbody>
      {% for row in section.rows %}
        <tr>{% for col in section.columns %}<td>{% if col == section.swatch_column %}<span class="swatch" style="background: {{ row[col] }}"></span>{% else %}{{ row[col] }}{% endif %}</td>{% endfor %}</tr>
      {% endfor %}
      </tbody>
    </table>
    </div>
    {% if section.truncated_from %}
    <p class="note">Showing first {{ section.rows|length }} rows of {{ section.truncated_from }} total</p>
    {% endif %}
    {% else %}
    <div class="empty">{{ section.empty_message }}</div>
    {% endif %}
  {% endif %}
</div>
{% endfor %}
</body>
</html>
"""


class HTMLReportBuilder:
    """
    Builder for the static HTML view.

    Sections are plain dictionaries consumed by the template: either a
    bullet list or a table.
    """

    def __init__(self, title: str, version: str = __version__):
        self.title = title
        self.version = version
        self.sections: List[Dict] = []
        self.quick_stats: List[Dict[str, str]] = []

    def add_quick_stat(self, value: str, label: str):
        """Add a headline number to the header bar."""
        self.quick_stats.append({'value': value, 'label': label})

    def add_list_section(self, heading: str, items: Sequence[str], empty_message: str = "None"):
        self.sections.append({
            'kind': 'list',
            'heading': heading,
            'entries': list(items),
            'empty_message': empty_message,
        })

    def add_table_section(
        self,
        heading: str,
        columns: Sequence[str],
        rows: Sequence[Dict],
        max_rows: Optional[int] = None,
        swatch_column: Optional[str] = None,
        empty_message: str = "No data found matching the filters.",
    ):
        truncated_from = None
        rows = list(rows)
        if max_rows is not None and len(rows) > max_rows:
            truncated_from = len(rows)
            rows = rows[:max_rows]

        self.sections.append({
            'kind': 'table',
            'heading': heading,
            'columns': list(columns),
            'rows': rows,
            'swatch_column': swatch_column,
            'truncated_from': truncated_from,
            'empty_message': empty_message,
        })

    def render(self) -> str:
        """Render the complete HTML document."""
        env = Environment(autoescape=select_autoescape(default=True, default_for_string=True))
        template = env.from_string(HTML_REPORT_TEMPLATE)

        return template.render(
            title=self.title,
            version=self.version,
            timestamp=datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
            css=HTML_REPORT_CSS,
            quick_stats=self.quick_stats,
            sections=self.sections,
        )


def _describe_state(state: ViewState) -> Dict[str, List[str]]:
    filters = [f"{column}: {query}" for column, query in state.active_filters.items()]
    sorts = [f"{key.column} ({key.direction.value})" for key in state.sort_keys]
    return {'filters': filters, 'sorts': sorts}


def generate_html_report(
    records: Sequence[SpeciesRecord],
    state: ViewState,
    output_path: Union[str, Path],
    summary: Optional[RegionSummary] = None,
    table: Optional[Sequence[SpeciesRecord]] = None,
    columns: Optional[Sequence[str]] = None,
    map_config: Optional[MapConfig] = None,
    max_rows: int = 500,
    title: str = "Italian Species Distribution",
) -> Path:
    """
    Render the HTML view of ``records`` under ``state``.

    Parameters
    ----------
    records : Sequence[SpeciesRecord]
        Full normalized record set
    state : ViewState
        Filters and sort keys to apply
    output_path : Union[str, Path]
        Path for the HTML file
    summary : Optional[RegionSummary]
        Precomputed summary of the filtered records (computed if None)
    table : Optional[Sequence[SpeciesRecord]]
        Precomputed filtered, sorted records (computed if None)
    columns : Optional[Sequence[str]]
        Species table columns (default: the retained columns)
    map_config : Optional[MapConfig]
        Colour settings for the region swatches
    max_rows : int
        Maximum species rows rendered (default: 500)
    title : str
        Page title

    Returns
    -------
    Path
        Path written
    """
    if table is None:
        table = state.table(records)
    if summary is None:
        summary = state.summary(records)
    if columns is None:
        columns = RETAINED_COLUMNS

    builder = HTMLReportBuilder(title)
    builder.add_quick_stat(f"{len(records):,}", "Records loaded")
    builder.add_quick_stat(f"{len(table):,}", "Species found")
    builder.add_quick_stat(summary.tier.value.capitalize(), "Resolution")

    described = _describe_state(state)
    builder.add_list_section("Active filters", described['filters'], "No filters applied")
    builder.add_list_section("Sort order", described['sorts'], "Source order")

    fills = region_fill_colors(summary, map_config)
    region_df = summary_to_dataframe(summary)
    region_df.insert(0, 'fill', region_df['code'].map(fills))
    region_df['intensity'] = region_df['intensity'].map(
        lambda v: "" if v is None or v != v else f"{v:.2f}"
    )
    region_rows = region_df[['fill', 'code', 'name', 'macro_region', 'count', 'state', 'intensity']]
    builder.add_table_section(
        f"Territories ({format_count(summary.record_count, 'record')})",
        list(region_rows.columns),
        region_rows.to_dict(orient='records'),
        swatch_column='fill',
    )

    species_rows = [
        {col: ("" if record.get(col) is None else record.get(col)) for col in columns}
        for record in table
    ]
    builder.add_table_section("Species", columns, species_rows, max_rows=max_rows)

    out = Path(output_path)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(builder.render(), encoding='utf-8')
    logger.info(f"Saved HTML report to {out}")
    return out
