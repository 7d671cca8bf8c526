"""Configuration objects for dimensionality reduction runs."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

from ..base import PreprocessorConfig


@dataclass
class DimensionalityReductionConfig(PreprocessorConfig):
    """Configures a PCA projection and plotting run.

    Reducer tuning knobs (currently only ``rtol``) travel in ``method_params``
    and are passed to ``PCAReducer`` as keyword arguments.
    """

    input_features: Path = Path("data.csv")
    output_root: Path = Path("artifacts/pca")
    n_components: int = 2
    standardise: bool = False
    target_column: Optional[str] = None
    has_target: bool = True
    delimiter: str = ","
    model_path: Optional[Path] = None
    plot_filename: str = "pca_results.png"
    plot_title: str = "PCA Results"
    plot_margin: float = 1.0
    plot_size_px: Tuple[int, int] = (800, 600)
    point_size: float = 5.0
    label_colors: Optional[Dict[Any, str]] = None
    method_params: Dict[str, Any] = field(default_factory=dict)

    def to_serialisable_dict(self) -> Dict[str, Any]:
        data = super().to_serialisable_dict()
        data.update(
            {
                "input_features": str(self.input_features),
                "model_path": str(self.model_path) if self.model_path else None,
                "plot_size_px": list(self.plot_size_px),
                "label_colors": (
                    {str(key): value for key, value in self.label_colors.items()}
                    if self.label_colors
                    else None
                ),
            }
        )
        return data


def build_reduction_config(
    config: Mapping[str, Any], **overrides: Any
) -> DimensionalityReductionConfig:
    """Build a run configuration from a loaded configuration mapping.

    Args:
        config: Mapping with the ``input``, ``reduction``, ``plot``, ``output``
            and ``logging`` sections produced by ``ConfigLoader.load``.
        **overrides: Field values that take precedence over the mapping.
            ``None`` values are ignored.

    Returns:
        A populated ``DimensionalityReductionConfig``.
    """
    input_cfg = config.get("input", {})
    reduction_cfg = config.get("reduction", {})
    plot_cfg = config.get("plot", {})
    output_cfg = config.get("output", {})
    logging_cfg = config.get("logging", {})

    model_path = reduction_cfg.get("model_path")
    values: Dict[str, Any] = {
        "input_features": Path(input_cfg.get("path", "data.csv")),
        "target_column": input_cfg.get("target_column"),
        "has_target": input_cfg.get("has_target", True),
        "delimiter": input_cfg.get("delimiter", ","),
        "n_components": reduction_cfg.get("n_components", 2),
        "standardise": reduction_cfg.get("standardise", False),
        "model_path": Path(model_path) if model_path else None,
        "method_params": dict(reduction_cfg.get("method_params") or {}),
        "plot_filename": plot_cfg.get("filename", "pca_results.png"),
        "plot_title": plot_cfg.get("title", "PCA Results"),
        "plot_margin": float(plot_cfg.get("margin", 1.0)),
        "plot_size_px": (
            int(plot_cfg.get("width_px", 800)),
            int(plot_cfg.get("height_px", 600)),
        ),
        "point_size": float(plot_cfg.get("point_size", 5.0)),
        "label_colors": plot_cfg.get("label_colors"),
        "output_root": Path(output_cfg.get("root", "artifacts/pca")),
        "run_id": output_cfg.get("run_id"),
        "overwrite": output_cfg.get("overwrite", False),
        "log_level": getattr(
            logging, str(logging_cfg.get("level", "INFO")).upper(), logging.INFO
        ),
    }
    values.update({key: value for key, value in overrides.items() if value is not None})
    return DimensionalityReductionConfig(**values)


__all__ = ["DimensionalityReductionConfig", "build_reduction_config"]
