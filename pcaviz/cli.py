"""Command-line entry point: project a labeled CSV with PCA and plot it."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Dict, Iterable, Optional, Sequence

import jsonschema

from .errors import InvalidInput, NumericalFailure
from .preprocessing.dimensionality_reduction import (
    DimensionalityReductionPreprocessor,
    build_reduction_config,
)
from .utils.config.config_loader import ConfigLoader
from .utils.logging.logging_manager import get_logger, setup_logging

LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")

EXIT_OK = 0
EXIT_FILE_ERROR = 1
EXIT_INVALID_INPUT = 2
EXIT_NUMERICAL_FAILURE = 3

logger = get_logger("pcaviz.cli")


def _coerce_method_param_value(raw: str):
    """Parse a method parameter value from the CLI."""

    lowered = raw.lower()
    if lowered in {"true", "false"}:
        return lowered == "true"
    try:
        return int(raw)
    except ValueError:
        pass
    try:
        return float(raw)
    except ValueError:
        pass
    return raw


def _parse_method_params(pairs: Iterable[str]) -> Dict[str, object]:
    params: Dict[str, object] = {}
    for pair in pairs:
        if "=" not in pair:
            raise argparse.ArgumentTypeError(
                f"Invalid --method-param '{pair}'. Expected format KEY=VALUE."
            )
        key, raw_value = pair.split("=", 1)
        key = key.strip()
        if not key:
            raise argparse.ArgumentTypeError(
                "Method parameter keys must be non-empty (format KEY=VALUE)."
            )
        params[key] = _coerce_method_param_value(raw_value.strip())
    return params


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pcaviz-reduce",
        description="Project a labeled CSV onto its principal components and plot the result.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="YAML or JSON configuration file (defaults to configs/pca.yaml when present).",
    )
    parser.add_argument(
        "--input",
        type=Path,
        default=None,
        help="CSV with a header row; features in every column but the target.",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Directory where the run folder will be created.",
    )
    parser.add_argument(
        "--run-id",
        type=str,
        default=None,
        help="Optional identifier for the run (defaults to timestamp).",
    )
    parser.add_argument(
        "--n-components",
        type=int,
        default=None,
        help="Number of principal components to keep.",
    )
    parser.add_argument(
        "--method-param",
        type=str,
        action="append",
        default=None,
        help="Additional reducer parameters in KEY=VALUE format (repeatable), e.g. rtol=1e-8.",
    )
    parser.add_argument(
        "--target-column",
        type=str,
        default=None,
        help="Name of the label column (defaults to the last column).",
    )
    parser.add_argument(
        "--no-target",
        action="store_true",
        default=None,
        help="Treat every column as a feature and plot without labels.",
    )
    parser.add_argument(
        "--standardise",
        action="store_true",
        default=None,
        help="Apply z-score standardisation before the projection.",
    )
    parser.add_argument(
        "--margin",
        type=float,
        default=None,
        help="Padding added around the projected points on both plot axes.",
    )
    parser.add_argument(
        "--model",
        type=Path,
        default=None,
        help="Project through a saved pca_model.npz instead of fitting a new basis.",
    )
    parser.add_argument(
        "--overwrite",
        action="store_true",
        default=None,
        help="Overwrite the run directory if it already exists.",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=LOG_LEVELS,
        help="Logging verbosity for the run.",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Optional file receiving DEBUG-level logs.",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    try:
        method_params = _parse_method_params(args.method_param or [])
    except argparse.ArgumentTypeError as exc:
        print(exc, file=sys.stderr)
        return EXIT_INVALID_INPUT

    try:
        config_map = ConfigLoader(args.config).load()
    except FileNotFoundError as exc:
        print(exc, file=sys.stderr)
        return EXIT_FILE_ERROR
    except (jsonschema.ValidationError, ValueError) as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return EXIT_INVALID_INPUT

    level_name = (args.log_level or config_map["logging"]["level"]).upper()
    log_level = getattr(logging, level_name, logging.INFO)
    log_file = args.log_file or config_map["logging"].get("file")
    setup_logging(level=log_level, log_file=log_file)

    if method_params:
        config_map["reduction"]["method_params"].update(method_params)

    config = build_reduction_config(
        config_map,
        input_features=args.input.resolve() if args.input else None,
        output_root=args.output.resolve() if args.output else None,
        run_id=args.run_id,
        n_components=args.n_components,
        target_column=args.target_column,
        has_target=False if args.no_target else None,
        standardise=args.standardise,
        plot_margin=args.margin,
        model_path=args.model,
        overwrite=args.overwrite,
        log_level=log_level,
    )

    try:
        result = DimensionalityReductionPreprocessor(config).execute()
    except InvalidInput as exc:
        logger.error("Invalid input: %s", exc)
        return EXIT_INVALID_INPUT
    except NumericalFailure as exc:
        logger.error("Numerical failure: %s", exc)
        return EXIT_NUMERICAL_FAILURE
    except (FileNotFoundError, FileExistsError) as exc:
        logger.error("%s", exc)
        return EXIT_FILE_ERROR

    print(f"Run directory: {result.run_dir}")
    for name, path in result.artifacts.items():
        print(f"{name}: {path}")
    if "plot" in result.artifacts:
        print(f"PCA completed successfully. Results saved to {result.artifacts['plot']}")
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
