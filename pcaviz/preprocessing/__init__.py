"""Loading, reduction and validation stages of a projection run."""

from .base import Preprocessor, PreprocessorConfig, PreprocessorResult  # noqa: F401
from .dimensionality_reduction import (  # noqa: F401
    DimensionalityReductionConfig,
    DimensionalityReductionPreprocessor,
    build_reduction_config,
)
from .loader import LabeledDataset, load_labeled_csv  # noqa: F401
from .validation import (  # noqa: F401
    ValidationError,
    ValidationReport,
    ValidationWarning,
    validate_projection_output,
)
