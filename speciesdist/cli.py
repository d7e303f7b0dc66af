#!/usr/bin/env python3
"""
speciesdist Command-Line Interface

Loads an Italian species checklist, applies column filters, territory
filters and sort keys, and writes the resulting table, per-territory
summary, bar chart and HTML view.
"""

import argparse
import sys
import logging
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

import yaml

from . import __version__, config, utils
from .core import run_viewer
from .loader import DatasetLoadError
from .regions import REGION_CODES, is_region_code
from .sorting import parse_sort_key
from .state import ViewState

logger = logging.getLogger(__name__)


def parse_filter_argument(text: str) -> Tuple[str, str]:
    """
    Split a ``FIELD=QUERY`` filter argument.

    Raises
    ------
    ValueError
        If there is no '=' or the field name is empty
    """
    column, sep, query = text.partition('=')
    column = column.strip()
    if not sep or not column:
        raise ValueError(f"Filter must look like FIELD=QUERY, got {text!r}")
    return column, query


def build_view_state(
    filters: Optional[Sequence[str]] = None,
    regions: Optional[Sequence[str]] = None,
    sorts: Optional[Sequence[str]] = None,
) -> ViewState:
    """
    Build a ViewState from command-line filter, region and sort arguments.

    Sort arguments are applied in priority order; a later key for the same
    column replaces the earlier one.

    Raises
    ------
    ValueError
        On a malformed filter or sort argument or an unknown region code
    """
    state = ViewState()

    for text in filters or []:
        column, query = parse_filter_argument(text)
        state = state.with_filter(column, query)

    for code in regions or []:
        if not is_region_code(code):
            raise ValueError(
                f"Unknown region code {code!r}; expected one of {', '.join(REGION_CODES)}"
            )
        state = state.with_region_presence(code)

    keys = [parse_sort_key(text) for text in sorts or []]
    sort_keys: List = []
    for key in keys:
        sort_keys = [k for k in sort_keys if k.column != key.column] + [key]
    if sort_keys:
        state = ViewState(filters=state.filters, sort_keys=tuple(sort_keys))

    return state


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='speciesdist',
        description='speciesdist: filter, sort and map an Italian species checklist',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Everything, in source order
  speciesdist data/checklist.csv

  # Amphibians present in Lombardy, sorted by family then name
  speciesdist data/checklist.csv --filter Classe=amphibia --region Lo \\
      --sort Famiglia --sort "Nome Scientifico"

  # Remote checklist, descending by genus, no figure
  speciesdist https://example.org/checklist.csv --sort Genere:desc --no-plot

Notes:
  - Filters are case-insensitive substring matches; all must hold
  - --region CODE keeps records marked present ('y') in that territory
  - Settings may also come from --config FILE or SPECIESDIST_* variables
        """
    )

    parser.add_argument(
        'source',
        nargs='?',
        default=None,
        help='Checklist CSV path or http(s) URL (default: dataset.source from configuration)'
    )

    parser.add_argument(
        '-f', '--filter',
        action='append',
        default=[],
        metavar='FIELD=QUERY',
        help='Keep records whose FIELD contains QUERY (repeatable)'
    )

    parser.add_argument(
        '-r', '--region',
        action='append',
        default=[],
        metavar='CODE',
        help='Keep records present in territory CODE, e.g. Lo, Si, N (repeatable)'
    )

    parser.add_argument(
        '-s', '--sort',
        action='append',
        default=[],
        metavar='FIELD[:asc|desc]',
        help='Sort key in priority order (repeatable)'
    )

    parser.add_argument(
        '-o', '--output', '--output-dir',
        type=Path,
        default=None,
        help='Output directory (default: output_dir from configuration)'
    )

    parser.add_argument(
        '-c', '--config',
        type=Path,
        default=None,
        help='YAML or JSON configuration file'
    )

    parser.add_argument(
        '--delimiter',
        type=str,
        default=None,
        help='Field separator of the checklist (default: ,)'
    )

    parser.add_argument(
        '--no-table',
        action='store_true',
        help='Skip writing the species table'
    )

    parser.add_argument(
        '--no-plot',
        action='store_true',
        help='Skip drawing the per-territory bar chart'
    )

    parser.add_argument(
        '--no-report',
        action='store_true',
        help='Skip generating the HTML view'
    )

    parser.add_argument(
        '--log-level',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        default=None,
        help='Logging verbosity (default: INFO)'
    )

    parser.add_argument(
        '--log-file',
        type=Path,
        default=None,
        help='Also write log messages to this file'
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'speciesdist {__version__}'
    )

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        state = build_view_state(args.filter, args.region, args.sort)
    except ValueError as e:
        parser.error(str(e))

    # Defaults, then file, then environment, then command line
    try:
        cfg = (
            config.load_config_from_file(args.config)
            if args.config is not None
            else config.get_default_config()
        )
        cfg = cfg.update(**config.load_config_from_env())

        overrides = {}
        if args.source is not None:
            overrides['dataset__source'] = args.source
        if args.delimiter is not None:
            overrides['dataset__delimiter'] = args.delimiter
        if args.output is not None:
            overrides['output_dir'] = args.output
        if args.log_level is not None:
            overrides['log_level'] = args.log_level
        if args.no_table:
            overrides['output__write_table'] = False
        if args.no_plot:
            overrides['output__make_plot'] = False
        if args.no_report:
            overrides['output__make_report'] = False
        cfg = cfg.update(**overrides)
    except (FileNotFoundError, ValueError, TypeError, yaml.YAMLError) as e:
        print(f"Error: Invalid configuration: {e}", file=sys.stderr)
        return 1

    utils.setup_logging(
        log_level=cfg.log_level,
        log_file=str(args.log_file) if args.log_file else None,
    )

    for warning in config.validate_config(cfg):
        logger.warning(warning)

    try:
        result = run_viewer(cfg.dataset.source, cfg=cfg, state=state, output_dir=cfg.output_dir)
    except KeyboardInterrupt:
        print("\n\nInterrupted by user", file=sys.stderr)
        return 130
    except DatasetLoadError as e:
        logger.error(f"Could not load checklist: {e}")
        return 1
    except Exception as e:
        logger.error(f"Viewer failed with error: {e}", exc_info=True)
        return 1

    for kind, path in result.files.items():
        logger.info(f"  {kind}: {path}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
