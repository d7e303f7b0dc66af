"""
speciesdist: Filtering, Sorting and Regional Summaries for Italian Species Checklists

speciesdist loads a national species checklist (one row per species or
subspecies, with presence columns for every Italian region and a few
neighbouring territories) and answers the two questions a checklist viewer
asks: which records match the current filters, in what order, and how are
the matching records distributed across the territories.

Core functionality includes:
- Normalization of raw checklist rows with a composed scientific name
- Case-insensitive column filters and stable multi-key sorting
- Per-territory aggregation at regional or macro-regional resolution
- Colour assignment for map rendering and a per-territory bar chart
- A static HTML view of the filtered table and its regional summary
"""

__version__ = "0.1.0"

# Import main modules for easy access
from . import regions
from . import records
from . import loader
from . import filters
from . import sorting
from . import aggregation
from . import state
from . import geography
from . import visualization
from . import reports
from . import core
from . import utils

__all__ = [
    "regions",
    "records",
    "loader",
    "filters",
    "sorting",
    "aggregation",
    "state",
    "geography",
    "visualization",
    "reports",
    "core",
    "utils",
]
