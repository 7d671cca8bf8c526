"""Reducer implementations for dimensionality reduction."""

from .pca import (  # noqa: F401
    PCAModel,
    PCAReducer,
    fit,
    fit_transform,
    transform,
)

__all__ = [
    "PCAModel",
    "PCAReducer",
    "fit",
    "fit_transform",
    "transform",
]
