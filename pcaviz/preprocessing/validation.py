"""Post-run validation of projection artifacts.

Functions:
    validate_projection_output: Validate the embedding written by a run.

Classes:
    ValidationReport: Structured validation result container.
    ValidationWarning: Non-fatal validation issue.
    ValidationError: Fatal validation issue.

Example:
    >>> report = validate_projection_output(
    ...     embedding_csv=Path("artifacts/pca/run1/embedding.csv"),
    ...     expected_n_components=2,
    ... )
    >>> if not report.is_valid:
    ...     raise ValueError(f"Validation failed: {report.errors}")
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List

import numpy as np
import pandas as pd

from ..utils.logging.logging_manager import get_logger

logger = get_logger("pcaviz.preprocessing.validation")

#: Largest |mean| per dimension, relative to its spread, still counted as centred.
CENTERING_ATOL = 1e-6


@dataclass
class ValidationWarning:
    """Non-fatal validation issue.

    Attributes:
        message: Description of the warning.
        context: Additional context (e.g., affected columns, counts).
    """

    message: str
    context: Dict[str, Any] = field(default_factory=dict)


@dataclass
class ValidationError:
    """Fatal validation issue.

    Attributes:
        message: Description of the error.
        context: Additional context (e.g., affected columns, counts).
    """

    message: str
    context: Dict[str, Any] = field(default_factory=dict)


@dataclass
class ValidationReport:
    """Structured validation result container.

    Attributes:
        stage: Stage name (e.g., "projection").
        is_valid: Whether validation passed (no errors).
        warnings: List of non-fatal warnings.
        errors: List of fatal errors.
        metrics: Validation metrics (e.g., sample_count).
    """

    stage: str
    is_valid: bool
    warnings: List[ValidationWarning] = field(default_factory=list)
    errors: List[ValidationError] = field(default_factory=list)
    metrics: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to JSON-serializable dictionary."""
        return {
            "stage": self.stage,
            "is_valid": self.is_valid,
            "warnings": [
                {"message": w.message, "context": w.context} for w in self.warnings
            ],
            "errors": [
                {"message": e.message, "context": e.context} for e in self.errors
            ],
            "metrics": self.metrics,
        }

    def save(self, path: Path) -> None:
        """Save validation report to JSON file.

        Args:
            path: Output file path.
        """
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2)
        logger.info("Saved validation report to %s", path)


def validate_projection_output(
    embedding_csv: Path,
    expected_n_components: int = 2,
    min_samples: int = 2,
    check_centering: bool = True,
) -> ValidationReport:
    """Validate the embedding CSV produced by a projection run.

    Checks:
        - Embedding CSV exists and is readable
        - Sufficient number of samples
        - Expected number of ``dim*`` columns
        - No NaN/Inf values
        - No collapsed (zero-variance) dimensions
        - Column means near zero (when ``check_centering``; only holds for
          the data the basis was fitted on)

    Args:
        embedding_csv: Path to embedding.csv.
        expected_n_components: Expected number of dimensions.
        min_samples: Minimum number of samples required.
        check_centering: Warn when a dimension's mean is not zero.

    Returns:
        ValidationReport with validation results and metrics.
    """
    logger.info("Validating projection output: %s", embedding_csv)

    report = ValidationReport(stage="projection", is_valid=True)

    if not embedding_csv.exists():
        report.is_valid = False
        report.errors.append(
            ValidationError(
                message="Embedding CSV does not exist",
                context={"path": str(embedding_csv)},
            )
        )
        return report

    try:
        df = pd.read_csv(embedding_csv)
    except (OSError, pd.errors.ParserError, pd.errors.EmptyDataError) as exc:
        report.is_valid = False
        report.errors.append(
            ValidationError(
                message=f"Failed to read embedding CSV: {exc}",
                context={"path": str(embedding_csv)},
            )
        )
        return report

    n_samples = len(df)
    report.metrics["sample_count"] = n_samples

    if n_samples < min_samples:
        report.is_valid = False
        report.errors.append(
            ValidationError(
                message=f"Insufficient samples: {n_samples} < {min_samples}",
                context={"sample_count": n_samples, "min_samples": min_samples},
            )
        )

    dim_cols = [col for col in df.columns if re.fullmatch(r"dim\d+", str(col))]
    report.metrics["n_components"] = len(dim_cols)

    if not dim_cols:
        report.is_valid = False
        report.errors.append(
            ValidationError(
                message="No dimension columns found in embedding CSV",
                context={"columns": df.columns.tolist()},
            )
        )
        return report

    if len(dim_cols) != expected_n_components:
        report.is_valid = False
        report.errors.append(
            ValidationError(
                message=f"Unexpected number of dimensions: {len(dim_cols)} != {expected_n_components}",
                context={
                    "found_dimensions": len(dim_cols),
                    "expected_dimensions": expected_n_components,
                },
            )
        )

    embedding_values = df[dim_cols].to_numpy(dtype=np.float64)
    nan_count = int(np.isnan(embedding_values).sum())
    inf_count = int(np.isinf(embedding_values).sum())

    if nan_count or inf_count:
        report.is_valid = False
        report.errors.append(
            ValidationError(
                message=f"Embedding contains {nan_count} NaN and {inf_count} Inf values",
                context={"nan_count": nan_count, "inf_count": inf_count},
            )
        )
    elif n_samples >= 2:
        variances = df[dim_cols].var()
        report.metrics["dimension_variances"] = {
            col: float(var) for col, var in variances.items()
        }
        zero_var_dims = [col for col, var in variances.items() if var < 1e-12]
        if zero_var_dims:
            report.is_valid = False
            report.errors.append(
                ValidationError(
                    message=f"Embedding has collapsed dimensions (zero variance): {zero_var_dims}",
                    context={"zero_variance_dimensions": zero_var_dims},
                )
            )

        if check_centering:
            means = df[dim_cols].mean()
            scale = max(float(np.sqrt(variances.max())), 1.0)
            off_centre = [
                col for col, mean in means.items() if abs(mean) > CENTERING_ATOL * scale
            ]
            report.metrics["dimension_means"] = {col: float(m) for col, m in means.items()}
            if off_centre:
                report.warnings.append(
                    ValidationWarning(
                        message=f"Embedding dimensions are not centred: {off_centre}",
                        context={"off_centre_dimensions": off_centre},
                    )
                )

    logger.info(
        "Projection validation complete: valid=%s, samples=%d, dims=%d, warnings=%d",
        report.is_valid,
        n_samples,
        len(dim_cols),
        len(report.warnings),
    )

    return report


__all__ = [
    "ValidationError",
    "ValidationReport",
    "ValidationWarning",
    "validate_projection_output",
]
