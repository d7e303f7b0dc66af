"""
Helper Functions and Utilities

Common helpers used throughout the speciesdist package.

Key Utilities:
1. Logging Configuration
   - Centralized logging setup for the package logger
   - Console and optional file output
2. File Operations
   - Output directory creation
   - Filename sanitization
   - Dataset name extraction for output file prefixes
3. Formatting
   - Elapsed time and count formatting for log and report messages

Example Usage:
    >>> from speciesdist.utils import setup_logging, extract_dataset_name
    >>> logger = setup_logging(log_level="DEBUG")
    >>> extract_dataset_name("https://example.org/data/checklist_fauna.csv")
    'checklist_fauna'
"""

from typing import Optional, Union
from pathlib import Path
from urllib.parse import urlparse
import logging
import re
import sys

logger = logging.getLogger(__name__)


# ============================================================================
# Logging Configuration
# ============================================================================

def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[str] = None,
    format_string: Optional[str] = None,
) -> logging.Logger:
    """
    Configure logging for speciesdist.

    Sets up the package logger with console and optional file output.

    Parameters
    ----------
    log_level : str, optional
        Logging level: DEBUG, INFO, WARNING, ERROR, or CRITICAL (default: INFO)
    log_file : str, optional
        Path to log file. If None, logs only to console (default: None)
    format_string : str, optional
        Custom format string for log messages. If None, uses default format

    Returns
    -------
    logging.Logger
        Configured package logger

    Notes
    -----
    The default format includes timestamp, level, and message:
    [2025-11-03 10:30:45] INFO: Parsed 1250 rows and 40 columns
    """
    package_logger = logging.getLogger("speciesdist")
    package_logger.setLevel(getattr(logging, log_level.upper()))

    # Remove existing handlers to avoid duplicates
    package_logger.handlers.clear()

    if format_string is None:
        format_string = "[%(asctime)s] %(levelname)s: %(message)s"

    formatter = logging.Formatter(format_string, datefmt="%Y-%m-%d %H:%M:%S")

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(getattr(logging, log_level.upper()))
    console_handler.setFormatter(formatter)
    package_logger.addHandler(console_handler)

    if log_file is not None:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file, mode='a', encoding='utf-8')
        file_handler.setLevel(getattr(logging, log_level.upper()))
        file_handler.setFormatter(formatter)
        package_logger.addHandler(file_handler)

        package_logger.info(f"Logging to file: {log_file}")

    return package_logger


# ============================================================================
# File Operations
# ============================================================================

def create_output_directory(output_dir: Union[str, Path]) -> Path:
    """
    Create output directory if it doesn't exist.

    Raises
    ------
    OSError
        If directory cannot be created due to permissions or other issues
    """
    path = Path(output_dir)

    try:
        path.mkdir(parents=True, exist_ok=True)
        logger.debug(f"Created/verified output directory: {path}")
        return path
    except OSError as e:
        logger.error(f"Failed to create directory {path}: {e}")
        raise


def sanitize_filename(filename: str) -> str:
    """
    Sanitize filename for cross-platform compatibility.

    Examples
    --------
    >>> sanitize_filename("Fauna d'Italia (2025)")
    'Fauna_d_Italia_2025'
    """
    safe = filename.replace(' ', '_')
    safe = re.sub(r'[^\w\-.]', '_', safe)
    safe = re.sub(r'_+', '_', safe)
    return safe.strip('_')


def extract_dataset_name(source: Union[str, Path]) -> str:
    """
    Derive an output file prefix from a checklist path or URL.

    Examples
    --------
    >>> extract_dataset_name("data/Checklist Fauna.csv")
    'Checklist_Fauna'
    >>> extract_dataset_name("https://example.org/data.csv?raw=1")
    'data'
    """
    text = str(source)
    if text.lower().startswith(("http://", "https://")):
        text = urlparse(text).path

    name = sanitize_filename(Path(text).stem)
    return name or "checklist"


# ============================================================================
# Formatting
# ============================================================================

def format_elapsed_time(seconds: float) -> str:
    """
    Format elapsed time in human-readable format.

    Examples
    --------
    >>> format_elapsed_time(45)
    '45s'
    >>> format_elapsed_time(150)
    '2.5m'
    """
    if seconds < 60:
        return f"{seconds:.0f}s"

    minutes = seconds / 60
    if minutes < 60:
        return f"{minutes:.1f}m"

    hours = minutes / 60
    return f"{int(hours)}h {int(minutes % 60)}m"


def format_count(n: int, singular: str, plural: Optional[str] = None) -> str:
    """
    Format a count with the right noun form.

    Examples
    --------
    >>> format_count(1, "species", "species")
    '1 species'
    >>> format_count(3, "record")
    '3 records'
    """
    if plural is None:
        plural = singular + "s"
    return f"{n:,} {singular if n == 1 else plural}"
