"""Shared fixtures for the pcaviz test-suite."""

from pathlib import Path

import numpy as np
import pandas as pd
import pytest


@pytest.fixture
def diagonal_matrix():
    """Four points on the line y = x + 1."""
    return [[1.0, 2.0], [3.0, 4.0], [5.0, 6.0], [7.0, 8.0]]


@pytest.fixture
def random_matrix():
    """50 samples x 5 features with distinct per-feature spread (full rank)."""
    rng = np.random.default_rng(42)
    return rng.normal(size=(50, 5)) * np.array([5.0, 3.0, 2.0, 1.0, 0.5])


@pytest.fixture
def labeled_frame():
    """30 samples, 4 features, binary target in the last column."""
    rng = np.random.default_rng(7)
    features = rng.normal(size=(30, 4)) * np.array([4.0, 2.0, 1.0, 0.5])
    target = (features[:, 0] > 0).astype(float)
    frame = pd.DataFrame(features, columns=["f1", "f2", "f3", "f4"])
    frame["target"] = target
    return frame


@pytest.fixture
def labeled_csv(tmp_path: Path, labeled_frame: pd.DataFrame) -> Path:
    path = tmp_path / "data.csv"
    labeled_frame.to_csv(path, index=False)
    return path


@pytest.fixture
def write_csv(tmp_path: Path):
    """Write raw text to a CSV file inside ``tmp_path``."""

    def _write(text: str, name: str = "input.csv") -> Path:
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path

    return _write
