"""Principal Component Analysis of labeled tabular data with scatter rendering."""

from .errors import InvalidInput, NumericalFailure, PCAVizError
from .preprocessing.dimensionality_reduction.reducers.pca import (
    PCAModel,
    fit,
    fit_transform,
    transform,
)

__version__ = "0.1.0"

__all__ = [
    "InvalidInput",
    "NumericalFailure",
    "PCAModel",
    "PCAVizError",
    "fit",
    "fit_transform",
    "transform",
]
