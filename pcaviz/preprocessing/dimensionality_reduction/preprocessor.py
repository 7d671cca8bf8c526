"""Projection run orchestration: load, reduce, render and persist."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Optional

import numpy as np
import pandas as pd
from sklearn.preprocessing import StandardScaler

from ...errors import InvalidInput
from ...visualization.scatter import render_projection
from ..base import Preprocessor, PreprocessorResult, _serialise_value
from ..loader import LabeledDataset, load_labeled_csv
from ..validation import validate_projection_output
from .config import DimensionalityReductionConfig
from .reducers import PCAModel, PCAReducer


class DimensionalityReductionPreprocessor(Preprocessor):
    """Project a labeled CSV with PCA and persist the run artifacts."""

    config: DimensionalityReductionConfig

    def __init__(self, config: DimensionalityReductionConfig) -> None:
        super().__init__(config)
        self.config = config

    def load_inputs(self) -> LabeledDataset:
        return load_labeled_csv(
            self.config.input_features,
            target_column=self.config.target_column,
            has_target=self.config.has_target,
            delimiter=self.config.delimiter,
        )

    def process(self, inputs: LabeledDataset) -> Dict[str, Any]:
        features = inputs.features

        if self.config.standardise:
            scaler = StandardScaler()
            features = scaler.fit_transform(features)
            self.logger.debug("Applied standardisation to feature matrix.")

        model: Optional[PCAModel]
        if self.config.model_path is not None:
            model = PCAModel.load(self.config.model_path)
            if model.n_components != self.config.n_components:
                self.logger.warning(
                    "Saved model has %d components; ignoring n_components=%d",
                    model.n_components,
                    self.config.n_components,
                )
            self.logger.info(
                "Projecting %d samples through saved model %s",
                inputs.n_samples,
                self.config.model_path,
            )
            embedding = model.transform(features)
            model_summary: Dict[str, Any] = dict(model.summary(), source=str(self.config.model_path))
        else:
            self.logger.info("Running PCA with %d components", self.config.n_components)
            reducer = self._create_reducer()
            embedding, model_summary = reducer.fit_transform(features)
            model = reducer.model_

        self.logger.log_metrics(
            {
                "n_samples": int(embedding.shape[0]),
                "n_components": int(embedding.shape[1]),
                "total_explained_variance": model_summary.get("total_explained_variance"),
            }
        )
        return {
            "embedding": embedding,
            "labels": inputs.labels,
            "target_column": inputs.target_column,
            "feature_columns": inputs.feature_columns,
            "model": model,
            "model_summary": model_summary,
        }

    def save(self, processed: Dict[str, Any]) -> PreprocessorResult:
        embedding: np.ndarray = processed["embedding"]
        model: Optional[PCAModel] = processed["model"]
        model_summary: Dict[str, Any] = processed["model_summary"]

        artifacts: Dict[str, Path] = {}

        embedding_npy = self.run_dir / "embedding.npy"
        np.save(embedding_npy, embedding)
        artifacts["embedding_npy"] = embedding_npy

        embedding_csv = self.run_dir / "embedding.csv"
        self._build_projection_dataframe(
            embedding, processed["labels"], processed["target_column"]
        ).to_csv(embedding_csv, index=False)
        artifacts["embedding_csv"] = embedding_csv

        if model is not None and self.config.model_path is None:
            artifacts["model"] = model.save(self.run_dir / "pca_model.npz")

        if embedding.shape[1] == 2:
            artifacts["plot"] = render_projection(
                embedding,
                processed["labels"],
                self.run_dir / self.config.plot_filename,
                label_colors=self.config.label_colors,
                margin=self.config.plot_margin,
                title=self.config.plot_title,
                size_px=self.config.plot_size_px,
                point_size=self.config.point_size,
            )
        else:
            self.logger.warning(
                "Skipping scatter plot: projection has %d components, plotting needs 2.",
                embedding.shape[1],
            )

        artifacts["projection_config"] = self._write_projection_config(processed)

        report = validate_projection_output(
            embedding_csv,
            expected_n_components=int(embedding.shape[1]),
            min_samples=1,
            check_centering=self.config.model_path is None,
        )
        report_path = self.run_dir / "validation_report.json"
        report.save(report_path)
        artifacts["validation_report"] = report_path
        if not report.is_valid:
            self.logger.warning(
                "Projection validation reported errors: %s",
                [error.message for error in report.errors],
            )

        metadata = {
            "n_components": int(embedding.shape[1]),
            "n_samples": int(embedding.shape[0]),
            "n_features": len(processed["feature_columns"]),
            "validation_passed": report.is_valid,
        }
        metadata.update(model_summary)

        return PreprocessorResult(
            run_id=self.run_id,
            run_dir=self.run_dir,
            artifacts=artifacts,
            metadata=metadata,
        )

    # Internal helpers -----------------------------------------------------

    def _create_reducer(self) -> PCAReducer:
        try:
            return PCAReducer(
                n_components=self.config.n_components,
                **self.config.method_params,
            )
        except TypeError as exc:
            raise InvalidInput(
                f"Unsupported PCA parameters {sorted(self.config.method_params)}; "
                "only 'rtol' is accepted."
            ) from exc

    def _build_projection_dataframe(
        self,
        embedding: np.ndarray,
        labels: Optional[np.ndarray],
        target_column: Optional[str],
    ) -> pd.DataFrame:
        dim_columns = [f"dim{idx + 1}" for idx in range(embedding.shape[1])]
        projection_df = pd.DataFrame(embedding, columns=dim_columns)
        if labels is not None and target_column is not None:
            projection_df[target_column] = labels
        return projection_df

    def _write_projection_config(self, processed: Dict[str, Any]) -> Path:
        payload = {
            "run_id": self.run_id,
            "config": self.config.to_serialisable_dict(),
            "feature_columns": processed["feature_columns"],
            "model_summary": _serialise_value(processed["model_summary"]),
        }
        config_path = self.run_dir / "projection_config.json"
        with config_path.open("w", encoding="utf-8") as fp:
            json.dump(payload, fp, indent=2, sort_keys=True)
        return config_path


__all__ = ["DimensionalityReductionPreprocessor"]
