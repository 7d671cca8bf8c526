"""Abstract preprocessing interfaces used by projection runs.

This module defines shared configuration and orchestration utilities that keep
preprocessing jobs consistent. Subclasses implement the domain-specific logic
while inheriting run directories, logging, and artifact bookkeeping.
"""

from __future__ import annotations

import json
import logging
import shutil
from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

import numpy as np

from ..utils.logging.logging_manager import LoggingManager, get_logger


def _serialise_value(value: Any) -> Any:
    """Convert dataclass values into JSON-friendly structures."""

    if isinstance(value, Path):
        return str(value)
    if isinstance(value, np.ndarray):
        return value.tolist()
    if isinstance(value, np.generic):
        return value.item()
    if isinstance(value, (list, tuple)):
        return [_serialise_value(item) for item in value]
    if isinstance(value, dict):
        return {str(key): _serialise_value(val) for key, val in value.items()}
    return value


@dataclass
class PreprocessorConfig:
    """Base configuration shared by preprocessing jobs."""

    output_root: Path = Path("artifacts")
    run_id: Optional[str] = None
    overwrite: bool = False
    log_level: int = logging.INFO
    extra_metadata: Dict[str, Any] = field(default_factory=dict)

    def to_serialisable_dict(self) -> Dict[str, Any]:
        """Return a JSON-serialisable representation of the configuration."""

        data = asdict(self)
        return {key: _serialise_value(value) for key, value in data.items()}


@dataclass
class PreprocessorResult:
    """Container describing the outcomes of a preprocessing run."""

    run_id: str
    run_dir: Path
    artifacts: Dict[str, Path]
    metadata: Dict[str, Any] = field(default_factory=dict)


class Preprocessor(ABC):
    """Abstract template that coordinates preprocessing pipelines."""

    config: PreprocessorConfig
    run_id: str
    run_dir: Path
    logger: LoggingManager

    def __init__(
        self, config: PreprocessorConfig, *, logger: Optional[LoggingManager] = None
    ) -> None:
        self.config = config
        self.run_id = config.run_id or self._generate_run_id()
        self.run_dir = Path(config.output_root) / self.run_id
        self.logger = logger or self._create_logger(config.log_level)

    # Public API -----------------------------------------------------------------

    def execute(self) -> PreprocessorResult:
        """Run the preprocessing pipeline end-to-end.

        The run directory is only created once ``process`` has succeeded and
        is removed again if saving fails, so a failed run leaves nothing behind.
        """

        self.logger.info("Starting run %s", self.run_id)
        self._check_run_directory()
        inputs = self.load_inputs()
        processed = self.process(inputs)
        self._prepare_run_directory()
        try:
            result = self.save(processed)
            self._persist_run_metadata(result)
        except Exception:
            self.logger.error("Saving run %s failed; removing %s", self.run_id, self.run_dir)
            shutil.rmtree(self.run_dir, ignore_errors=True)
            raise
        self.logger.info("Completed run %s", self.run_id)
        return result

    # Template methods -----------------------------------------------------------

    @abstractmethod
    def load_inputs(self) -> Any:
        """Load all resources required for processing."""

    @abstractmethod
    def process(self, inputs: Any) -> Any:
        """Execute the core transformation logic."""

    @abstractmethod
    def save(self, processed: Any) -> PreprocessorResult:
        """Persist the processed outputs and return a result summary."""

    # Helpers --------------------------------------------------------------------

    def _check_run_directory(self) -> None:
        if self.run_dir.exists() and not self.config.overwrite:
            raise FileExistsError(
                f"Output directory {self.run_dir} already exists. Set overwrite=True to replace it."
            )

    def _prepare_run_directory(self) -> None:
        self._check_run_directory()
        if self.run_dir.exists():
            for child in self.run_dir.iterdir():
                if child.is_file() or child.is_symlink():
                    child.unlink()
                else:
                    shutil.rmtree(child)
        self.run_dir.mkdir(parents=True, exist_ok=True)
        self._write_config()

    def _write_config(self) -> None:
        config_path = self.run_dir / "config.json"
        serialisable = self.config.to_serialisable_dict()
        serialisable.update({"run_id": self.run_id})
        with config_path.open("w", encoding="utf-8") as fp:
            json.dump(serialisable, fp, indent=2, sort_keys=True)

    def _persist_run_metadata(self, result: PreprocessorResult) -> None:
        metadata_path = self.run_dir / "run_metadata.json"
        payload = {
            "run_id": result.run_id,
            "artifacts": {name: str(path) for name, path in result.artifacts.items()},
            "metadata": _serialise_value(result.metadata),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        with metadata_path.open("w", encoding="utf-8") as fp:
            json.dump(payload, fp, indent=2, sort_keys=True)

    def _create_logger(self, log_level: int) -> LoggingManager:
        logger = get_logger(f"pcaviz.preprocessor.{self.__class__.__name__}")
        logger.logger.setLevel(log_level)
        return logger

    def _generate_run_id(self) -> str:
        timestamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
        return f"pca_{timestamp}"
