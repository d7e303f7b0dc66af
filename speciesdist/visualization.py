"""
Territory Colours and Summary Figures

This module turns region classifications into fill colours and draws a
per-territory bar chart of presence counts.

Colour Rules:
- Singleton mode: PRESENT, DOUBTFUL and ABSENT use fixed categorical fills
- Gradient mode: intensity in [0, 1] is mapped linearly in RGB between the
  low and high gradient colours
- NO_DATA: neutral fill
- Boundary polygons whose name maps to no region: unknown fill

All colours come from MapConfig so the figure, the HTML view and any
external renderer agree.

Example Usage:
    >>> from speciesdist.visualization import region_fill_colors, plot_region_counts
    >>> fills = region_fill_colors(summary)
    >>> fills["Lo"]
    '#b31529'
    >>> plot_region_counts(summary, "results/checklist_region_counts.png")
"""

from typing import Dict, Iterable, Optional, Sequence, Tuple, Union
from pathlib import Path
import logging

import numpy as np
import matplotlib.pyplot as plt
import matplotlib.colors as mcolors
import seaborn as sns

from .aggregation import DisplayState, RegionClassification, RegionSummary
from .config import MapConfig
from .geography import region_code_for_boundary
from .regions import REGION_CODES

logger = logging.getLogger(__name__)


def gradient_colormap(map_config: Optional[MapConfig] = None) -> mcolors.LinearSegmentedColormap:
    """Two-stop linear RGB colormap between the configured gradient colours."""
    cfg = map_config or MapConfig()
    return mcolors.LinearSegmentedColormap.from_list(
        "speciesdist_gradient",
        [cfg.gradient_low_color, cfg.gradient_high_color],
    )


def classification_color(
    classification: RegionClassification,
    map_config: Optional[MapConfig] = None,
) -> str:
    """
    Fill colour for one classified territory.

    Parameters
    ----------
    classification : RegionClassification
        Result of RegionSummary.classify()
    map_config : Optional[MapConfig]
        Colour settings (default: MapConfig())

    Returns
    -------
    str
        Lowercase '#rrggbb' colour
    """
    cfg = map_config or MapConfig()
    state = classification.state

    if state is DisplayState.PRESENT:
        return cfg.present_color.lower()
    if state is DisplayState.DOUBTFUL:
        return cfg.doubtful_color.lower()
    if state is DisplayState.ABSENT:
        return cfg.absent_color.lower()
    if state is DisplayState.NO_DATA or classification.intensity is None:
        return cfg.no_data_color.lower()

    t = float(np.clip(classification.intensity, 0.0, 1.0))
    return mcolors.to_hex(gradient_colormap(cfg)(t))


def region_fill_colors(
    summary: RegionSummary,
    map_config: Optional[MapConfig] = None,
    codes: Optional[Sequence[str]] = None,
) -> Dict[str, str]:
    """Fill colour for every region code (or the given codes)."""
    if codes is None:
        codes = REGION_CODES
    return {code: classification_color(summary.classify(code), map_config) for code in codes}


def boundary_fill_colors(
    names: Iterable[str],
    summary: RegionSummary,
    map_config: Optional[MapConfig] = None,
) -> Dict[str, str]:
    """
    Fill colour for each external boundary polygon name.

    Names that map to no region get the unknown colour.
    """
    cfg = map_config or MapConfig()
    fills = {}
    for name in names:
        code = region_code_for_boundary(name)
        if code is None:
            logger.debug(f"Boundary '{name}' has no region code; using fallback colour")
            fills[name] = cfg.unknown_color.lower()
        else:
            fills[name] = classification_color(summary.classify(code), cfg)
    return fills


def plot_region_counts(
    summary: RegionSummary,
    output_path: Union[str, Path],
    map_config: Optional[MapConfig] = None,
    figsize: Tuple[float, float] = (12, 5),
    dpi: int = 150,
) -> Optional[Path]:
    """
    Bar chart of presence counts per region, coloured like the map.

    Parameters
    ----------
    summary : RegionSummary
        Aggregated counts
    output_path : Union[str, Path]
        Path for output figure (PNG or PDF)
    map_config : Optional[MapConfig]
        Colour settings
    figsize : Tuple[float, float]
        Figure size in inches (default: 12x5)
    dpi : int
        Resolution for PNG output (default: 150)

    Returns
    -------
    Optional[Path]
        Path written, or None when there are no records to draw
    """
    if summary.record_count == 0:
        logger.warning(f"No records to plot; skipping figure: {output_path}")
        return None

    out = Path(output_path)
    out.parent.mkdir(parents=True, exist_ok=True)

    codes = list(REGION_CODES)
    counts = [summary.region_counts.get(code, 0) for code in codes]
    fills = region_fill_colors(summary, map_config, codes)

    with sns.axes_style("whitegrid"):
        fig, ax = plt.subplots(figsize=figsize)
        ax.bar(
            codes, counts,
            color=[fills[c] for c in codes],
            edgecolor="#999999", linewidth=0.5,
        )
        ax.set_xlabel("Territory")
        ax.set_ylabel("Records present")
        ax.set_title(
            f"{summary.record_count} records, {summary.tier.value} resolution"
        )
        ax.tick_params(axis='x', labelrotation=90)
        sns.despine(ax=ax)
        fig.tight_layout()

        if out.suffix.lower() == ".png":
            fig.savefig(out, dpi=dpi, bbox_inches="tight")
        else:
            fig.savefig(out, bbox_inches="tight")
        plt.close(fig)

    logger.info(f"Saved region count figure to {out}")
    return out
