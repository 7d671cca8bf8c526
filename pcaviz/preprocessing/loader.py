"""Delimited-text loader producing validated feature matrices and labels.

The expected layout is a header row followed by one sample per line. All
columns except the target are features; the target defaults to the last
column. Every cell must parse as a finite number, otherwise the file is
rejected with the row and column of the first offending cell.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Union

import numpy as np
import pandas as pd

from ..errors import InvalidInput
from ..utils.logging.logging_manager import get_logger

logger = get_logger("pcaviz.preprocessing.loader")


@dataclass
class LabeledDataset:
    """Numeric features with an optional parallel label vector.

    Attributes:
        features: Float matrix, shape ``(n_samples, n_features)``.
        labels: Float vector of length ``n_samples`` or ``None``.
        feature_columns: Header names of the feature columns, in order.
        target_column: Header name of the label column, if any.
    """

    features: np.ndarray
    labels: Optional[np.ndarray]
    feature_columns: List[str]
    target_column: Optional[str] = None

    @property
    def n_samples(self) -> int:
        return int(self.features.shape[0])

    @property
    def n_features(self) -> int:
        return int(self.features.shape[1])


def _first_invalid_cell(raw: pd.DataFrame, numeric: pd.DataFrame) -> Optional[str]:
    invalid = ~np.isfinite(numeric.to_numpy(dtype=np.float64))
    if not invalid.any():
        return None
    row_pos, col_pos = np.argwhere(invalid)[0]
    column = raw.columns[col_pos]
    value = raw.iat[row_pos, col_pos]
    # Data rows are 1-based; line numbers count the header as line 1
    location = f"data row {row_pos + 1} (line {row_pos + 2}), column '{column}'"
    # Short rows are padded with NaN or "" depending on the pandas version
    if pd.isna(value) or (isinstance(value, str) and not value.strip()):
        return f"{location} is missing or empty; every row needs {raw.shape[1]} fields"
    return f"{location} has non-numeric or non-finite value {value!r}"


def load_labeled_csv(
    path: Union[str, Path],
    *,
    target_column: Optional[str] = None,
    has_target: bool = True,
    delimiter: str = ",",
) -> LabeledDataset:
    """Read a delimited file with a header row into a ``LabeledDataset``.

    Args:
        path: File to read.
        target_column: Name of the label column. Defaults to the last column.
        has_target: When ``False`` every column is a feature and no labels
            are returned.
        delimiter: Single field separator character.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        InvalidInput: If the file is empty, has no feature columns, has rows
            with the wrong number of fields or contains non-numeric cells.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Input file not found at {path}")

    logger.info("Loading labeled samples from %s", path)
    # Header is row 0, so any row wider than it raises ParserError
    try:
        table = pd.read_csv(
            path,
            sep=delimiter,
            header=None,
            dtype=str,
            keep_default_na=False,
            skipinitialspace=True,
        )
    except pd.errors.EmptyDataError as exc:
        raise InvalidInput(f"{path} is empty.") from exc
    except pd.errors.ParserError as exc:
        raise InvalidInput(f"{path} has a row with more fields than the header: {exc}") from exc

    columns = [str(column).strip() for column in table.iloc[0]]
    raw = table.iloc[1:].reset_index(drop=True)
    raw.columns = columns
    if raw.empty:
        raise InvalidInput(f"{path} has a header but no data rows.")
    duplicated = sorted({column for column in columns if columns.count(column) > 1})
    if duplicated:
        raise InvalidInput(f"{path} has duplicate column names: {duplicated}")

    if has_target:
        target = target_column if target_column is not None else columns[-1]
        if target not in columns:
            raise InvalidInput(
                f"Target column '{target}' not found in {path}. Available columns: {columns}"
            )
        feature_columns = [column for column in columns if column != target]
    else:
        target = None
        feature_columns = columns

    if not feature_columns:
        raise InvalidInput(f"{path} has no feature columns besides the target '{target}'.")

    numeric = raw.apply(
        lambda column: pd.to_numeric(
            column.map(lambda value: value.strip() if isinstance(value, str) else value),
            errors="coerce",
        )
    )
    problem = _first_invalid_cell(raw, numeric)
    if problem is not None:
        raise InvalidInput(f"Malformed input in {path}: {problem}.")

    features = numeric[feature_columns].to_numpy(dtype=np.float64)
    labels = numeric[target].to_numpy(dtype=np.float64) if target is not None else None

    logger.info(
        "Loaded %d samples with %d features%s",
        features.shape[0],
        features.shape[1],
        f" and target '{target}'" if target is not None else "",
    )
    return LabeledDataset(
        features=features,
        labels=labels,
        feature_columns=feature_columns,
        target_column=target,
    )


__all__ = ["LabeledDataset", "load_labeled_csv"]
