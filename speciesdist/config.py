"""
Configuration Management for speciesdist

This module provides the configuration system as frozen dataclasses. It
supports:

1. Default values matching the published checklist viewer
2. Loading configuration from YAML/JSON files
3. Environment variable overrides
4. Validation in __post_init__
5. Nested updates with double-underscore keys

Configuration Structure:
- DatasetConfig: where the checklist comes from and how to parse it
- MapConfig: colours used to draw territories
- OutputConfig: which artefacts a run writes
- ViewerConfig: master configuration combining all sections

Example Usage:
    >>> from speciesdist.config import get_default_config, load_config_from_file
    >>>
    >>> # Use defaults
    >>> config = get_default_config()
    >>> print(config.dataset.delimiter)
    ,
    >>>
    >>> # Load from file
    >>> config = load_config_from_file("viewer.yaml")
    >>>
    >>> # Update specific parameters
    >>> custom_config = config.update(
    ...     dataset__source="https://example.org/checklist.csv",
    ...     output__make_plot=False,
    ... )
"""

from dataclasses import dataclass, field, asdict, replace
from pathlib import Path
from typing import Optional, List, Dict, Any, Union
import os
import json
import logging
import re

import yaml

from .regions import RETAINED_COLUMNS

logger = logging.getLogger(__name__)

_HEX_COLOR = re.compile(r'^#[0-9a-fA-F]{6}$')


def _check_color(name: str, value: str) -> None:
    if not isinstance(value, str) or not _HEX_COLOR.match(value):
        raise ValueError(f"{name} must be a '#rrggbb' colour, got {value!r}")


# ============================================================================
# Dataset Configuration
# ============================================================================

@dataclass(frozen=True)
class DatasetConfig:
    """
    Configuration for fetching and parsing the checklist.

    Attributes
    ----------
    source : str
        Local path or http(s) URL of the delimited-text checklist
        (default: "data.csv")

    delimiter : str
        Single-character field separator (default: ",")

    encoding : str
        Text encoding; latin-1 is tried if decoding fails (default: "utf-8")

    timeout : Optional[float]
        Network timeout in seconds for remote sources (default: None).
        None waits indefinitely, as the browser viewer does.
    """
    source: str = "data.csv"
    delimiter: str = ","
    encoding: str = "utf-8"
    timeout: Optional[float] = None

    def __post_init__(self):
        """Validate configuration parameters."""
        if isinstance(self.source, Path):
            object.__setattr__(self, 'source', str(self.source))
        if not self.source:
            raise ValueError("source must not be empty")
        if len(self.delimiter) != 1:
            raise ValueError("delimiter must be a single character")
        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be positive or None")


# ============================================================================
# Map Configuration
# ============================================================================

@dataclass(frozen=True)
class MapConfig:
    """
    Colours used to draw territories.

    Attributes
    ----------
    present_color, doubtful_color, absent_color : str
        Fills for the three categories shown when exactly one record is
        selected (defaults: soft green, soft yellow, soft slate)

    no_data_color : str
        Fill for territories with a count of zero (default: "#f1f5f9")

    gradient_low_color, gradient_high_color : str
        Endpoints of the linear gradient for normalized counts
        (defaults: blue "#1065AB" to red "#B31529")

    unknown_color : str
        Fill for boundary polygons that map to no region (default: "#f8f9fa")
    """
    present_color: str = "#86efac"
    doubtful_color: str = "#fef08a"
    absent_color: str = "#f1f5f9"
    no_data_color: str = "#f1f5f9"
    gradient_low_color: str = "#1065AB"
    gradient_high_color: str = "#B31529"
    unknown_color: str = "#f8f9fa"

    def __post_init__(self):
        """Validate colour values."""
        for name, value in asdict(self).items():
            _check_color(name, value)


# ============================================================================
# Output Configuration
# ============================================================================

@dataclass(frozen=True)
class OutputConfig:
    """
    Artefacts written by a viewer run.

    Attributes
    ----------
    write_table : bool
        Write the filtered, sorted records as TSV (default: True)

    write_regions : bool
        Write the per-region summary as TSV (default: True)

    make_plot : bool
        Draw the per-region bar chart (default: True)

    make_report : bool
        Render the static HTML view (default: True)

    figure_dpi : int
        Resolution for PNG figures (default: 150)

    table_columns : List[str]
        Columns of the exported table, in order (default: the viewer's
        retained columns)

    report_max_rows : int
        Maximum species rows rendered in the HTML report (default: 500)
    """
    write_table: bool = True
    write_regions: bool = True
    make_plot: bool = True
    make_report: bool = True
    figure_dpi: int = 150
    table_columns: List[str] = field(default_factory=lambda: list(RETAINED_COLUMNS))
    report_max_rows: int = 500

    def __post_init__(self):
        """Validate configuration parameters."""
        if self.figure_dpi < 72:
            raise ValueError("figure_dpi must be at least 72")
        if not self.table_columns:
            raise ValueError("table_columns must not be empty")
        if self.report_max_rows < 1:
            raise ValueError("report_max_rows must be at least 1")


# ============================================================================
# Master Configuration
# ============================================================================

@dataclass(frozen=True)
class ViewerConfig:
    """
    Master configuration for a viewer run.

    Attributes
    ----------
    dataset : DatasetConfig
        Checklist source and parsing

    map : MapConfig
        Territory colours

    output : OutputConfig
        Artefacts to write

    log_level : str
        Logging level (default: "INFO")

    output_dir : Path
        Base output directory (default: "results")
    """
    dataset: DatasetConfig = field(default_factory=DatasetConfig)
    map: MapConfig = field(default_factory=MapConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    log_level: str = "INFO"
    output_dir: Path = field(default_factory=lambda: Path("results"))

    def __post_init__(self):
        """Validate and normalize configuration."""
        if isinstance(self.output_dir, str):
            object.__setattr__(self, 'output_dir', Path(self.output_dir))

        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if self.log_level.upper() not in valid_levels:
            raise ValueError(f"log_level must be one of {valid_levels}")

    def update(self, **kwargs) -> 'ViewerConfig':
        """
        Create a new configuration with updated values.

        Supports nested updates using double underscore notation:
        config.update(dataset__delimiter=";")

        Parameters
        ----------
        **kwargs
            Configuration parameters to update. Use double underscore
            for nested parameters (e.g., map__present_color)

        Returns
        -------
        ViewerConfig
            New configuration object with updates

        Examples
        --------
        >>> config = get_default_config()
        >>> new_config = config.update(
        ...     log_level="DEBUG",
        ...     output__figure_dpi=300,
        ... )
        """
        top_level = {}
        nested: Dict[str, Dict[str, Any]] = {}

        for key, value in kwargs.items():
            if '__' in key:
                component, param = key.split('__', 1)
                nested.setdefault(component, {})[param] = value
            else:
                top_level[key] = value

        for component, updates in nested.items():
            current = getattr(self, component)
            top_level[component] = replace(current, **updates)

        return replace(self, **top_level)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to a nested dictionary."""
        return asdict(self)

    def to_yaml(self, output_path: Union[str, Path]) -> None:
        """Save configuration to a YAML file."""
        config_dict = _convert_paths_to_strings(self.to_dict())

        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, 'w') as f:
            yaml.safe_dump(config_dict, f, default_flow_style=False, sort_keys=False)

        logger.info(f"Configuration saved to {path}")

    def to_json(self, output_path: Union[str, Path]) -> None:
        """Save configuration to a JSON file."""
        config_dict = _convert_paths_to_strings(self.to_dict())

        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, 'w') as f:
            json.dump(config_dict, f, indent=2)

        logger.info(f"Configuration saved to {path}")


# ============================================================================
# Helper Functions
# ============================================================================

def get_default_config() -> ViewerConfig:
    """Get the default viewer configuration."""
    return ViewerConfig()


def load_config_from_file(config_path: Union[str, Path]) -> ViewerConfig:
    """
    Load configuration from a YAML or JSON file.

    The format is chosen from the file extension.

    Parameters
    ----------
    config_path : Union[str, Path]
        Path to configuration file (.yaml, .yml, or .json)

    Returns
    -------
    ViewerConfig
        Loaded configuration

    Raises
    ------
    FileNotFoundError
        If configuration file doesn't exist
    ValueError
        If file format is not supported or values are invalid

    Examples
    --------
    >>> config = load_config_from_file("viewer.yaml")
    """
    path = Path(config_path)

    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    suffix = path.suffix.lower()

    if suffix in ['.yaml', '.yml']:
        with open(path, 'r') as f:
            config_dict = yaml.safe_load(f) or {}
    elif suffix == '.json':
        with open(path, 'r') as f:
            config_dict = json.load(f)
    else:
        raise ValueError(f"Unsupported config file format: {suffix}")

    logger.info(f"Loaded configuration from {path}")
    return _dict_to_config(config_dict)


def _dict_to_config(config_dict: Dict[str, Any]) -> ViewerConfig:
    """Convert a (possibly partial) nested dictionary to ViewerConfig."""
    config_dict = dict(config_dict)
    sections = {
        'dataset': DatasetConfig,
        'map': MapConfig,
        'output': OutputConfig,
    }

    nested = {}
    for name, cls in sections.items():
        if name in config_dict:
            nested[name] = cls(**(config_dict.pop(name) or {}))

    unknown = set(config_dict) - {'log_level', 'output_dir'}
    if unknown:
        raise ValueError(f"Unknown configuration keys: {sorted(unknown)}")

    return ViewerConfig(**nested, **config_dict)


def _convert_paths_to_strings(obj: Any) -> Any:
    """Recursively convert Path objects to strings for serialization."""
    if isinstance(obj, Path):
        return str(obj)
    elif isinstance(obj, dict):
        return {k: _convert_paths_to_strings(v) for k, v in obj.items()}
    elif isinstance(obj, (list, tuple)):
        return [_convert_paths_to_strings(item) for item in obj]
    else:
        return obj


def load_config_from_env(environ: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
    """
    Load configuration overrides from environment variables.

    Variables are prefixed with SPECIESDIST_ and use double underscores for
    nesting:

    SPECIESDIST_DATASET__SOURCE=https://example.org/checklist.csv
    SPECIESDIST_LOG_LEVEL=DEBUG

    Returns
    -------
    Dict[str, Any]
        Overrides suitable for ViewerConfig.update()

    Examples
    --------
    >>> import os
    >>> os.environ['SPECIESDIST_OUTPUT__MAKE_PLOT'] = 'false'
    >>> config = get_default_config().update(**load_config_from_env())
    """
    prefix = "SPECIESDIST_"
    environ = os.environ if environ is None else environ
    overrides = {}

    for key, value in environ.items():
        if key.startswith(prefix):
            config_key = key[len(prefix):].lower()
            overrides[config_key] = _parse_env_value(config_key, value)

    if overrides:
        logger.debug(f"Loaded {len(overrides)} configuration overrides from environment")

    return overrides


# Keys whose values stay strings even when they look numeric or boolean
_STRING_KEYS = {'dataset__source', 'dataset__delimiter', 'dataset__encoding', 'log_level', 'output_dir'}


def _parse_env_value(key: str, value: str) -> Any:
    """Parse an environment variable value to an appropriate type."""
    if key in _STRING_KEYS or key.startswith('map__'):
        return value

    if value.lower() in ['true', 'yes']:
        return True
    if value.lower() in ['false', 'no']:
        return False

    try:
        return int(value)
    except ValueError:
        pass

    try:
        return float(value)
    except ValueError:
        pass

    if ',' in value:
        return [item.strip() for item in value.split(',') if item.strip()]

    return value


def validate_config(config: ViewerConfig) -> List[str]:
    """
    Check a configuration for likely mistakes.

    Returns
    -------
    List[str]
        Warning messages (empty if no issues)
    """
    warnings = []

    source = config.dataset.source
    if not source.lower().startswith(("http://", "https://")) and not Path(source).exists():
        warnings.append(f"Checklist file not found: {source}")

    if config.dataset.delimiter not in [',', ';', '\t', '|']:
        warnings.append(
            f"Unusual delimiter {config.dataset.delimiter!r}; "
            "checklists are normally comma- or tab-separated."
        )

    if config.map.gradient_low_color.lower() == config.map.gradient_high_color.lower():
        warnings.append("Gradient endpoints are identical; all counts will share one colour.")

    if config.map.present_color.lower() == config.map.absent_color.lower():
        warnings.append("Present and absent colours are identical.")

    out = config.output
    if not (out.write_table or out.write_regions or out.make_plot or out.make_report):
        warnings.append("All outputs are disabled; a run will write nothing.")

    return warnings
