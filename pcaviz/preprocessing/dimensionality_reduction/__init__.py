"""PCA reduction and the projection run orchestrator."""

from .config import DimensionalityReductionConfig, build_reduction_config
from .preprocessor import DimensionalityReductionPreprocessor
from .reducers import PCAModel, PCAReducer

__all__ = [
    "DimensionalityReductionConfig",
    "DimensionalityReductionPreprocessor",
    "PCAModel",
    "PCAReducer",
    "build_reduction_config",
]
