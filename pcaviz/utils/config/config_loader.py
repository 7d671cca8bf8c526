"""Configuration loader for PCA projection runs.

Supports both YAML and JSON configuration files with auto-detection based on
file extension. YAML is preferred for new configurations due to comment support.
"""

import copy
import json
from pathlib import Path
from typing import Any, Dict, Optional, Union

import jsonschema
import yaml

from .validator import ConfigValidator


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Deep merge two dictionaries, with override taking precedence."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


# JSON schema for projection run configuration
PCA_CONFIG_SCHEMA = {
    "type": "object",
    "properties": {
        "input": {
            "type": "object",
            "properties": {
                "path": {"type": "string"},
                "target_column": {"type": ["string", "null"]},
                "has_target": {"type": "boolean"},
                "delimiter": {"type": "string", "minLength": 1, "maxLength": 1},
            },
            "additionalProperties": False,
        },
        "reduction": {
            "type": "object",
            "properties": {
                "n_components": {"type": "integer", "minimum": 1},
                "standardise": {"type": "boolean"},
                "model_path": {"type": ["string", "null"]},
                "method_params": {"type": "object"},
            },
            "additionalProperties": False,
        },
        "plot": {
            "type": "object",
            "properties": {
                "filename": {"type": "string"},
                "title": {"type": "string"},
                "margin": {"type": "number", "minimum": 0},
                "width_px": {"type": "integer", "minimum": 1},
                "height_px": {"type": "integer", "minimum": 1},
                "point_size": {"type": "number", "exclusiveMinimum": 0},
                "label_colors": {
                    "type": ["object", "null"],
                    "additionalProperties": {"type": "string"},
                },
            },
            "additionalProperties": False,
        },
        "output": {
            "type": "object",
            "properties": {
                "root": {"type": "string"},
                "run_id": {"type": ["string", "null"]},
                "overwrite": {"type": "boolean"},
            },
            "additionalProperties": False,
        },
        "logging": {
            "type": "object",
            "properties": {
                "level": {
                    "type": "string",
                    "enum": ["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"],
                },
                "file": {"type": ["string", "null"]},
            },
            "additionalProperties": False,
        },
    },
}


class ConfigLoader:
    """Utility class for loading and validating projection configuration.

    Supports both YAML (.yaml, .yml) and JSON (.json) configuration files.
    Auto-detects format based on file extension.
    """

    # Default values for configuration sections
    DEFAULTS = {
        "input": {
            "path": "data.csv",
            "target_column": None,
            "has_target": True,
            "delimiter": ",",
        },
        "reduction": {
            "n_components": 2,
            "standardise": False,
            "model_path": None,
            "method_params": {},
        },
        "plot": {
            "filename": "pca_results.png",
            "title": "PCA Results",
            "margin": 1.0,
            "width_px": 800,
            "height_px": 600,
            "point_size": 5.0,
            "label_colors": None,
        },
        "output": {
            "root": "artifacts/pca",
            "run_id": None,
            "overwrite": False,
        },
        "logging": {
            "level": "INFO",
            "file": None,
        },
    }

    def __init__(self, config_path: Optional[Union[Path, str]] = None):
        """Initialize with optional config path override.

        Args:
            config_path: Path to config file. If None, searches for default config
                        in order: configs/pca.yaml, configs/pca.yml, configs/pca.json.
                        When none exists only the defaults are used.
        """
        if config_path is None:
            config_path = self._find_default_config()
        self.config_path = Path(config_path) if config_path else None
        self._config: Optional[Dict[str, Any]] = None

    def _find_default_config(self) -> Optional[Path]:
        """Find the default configuration file, preferring YAML over JSON."""
        configs_dir = Path("configs")
        candidates = [
            configs_dir / "pca.yaml",
            configs_dir / "pca.yml",
            configs_dir / "pca.json",
        ]
        for candidate in candidates:
            if candidate.exists():
                return candidate
        return None

    def _load_file(self, path: Path) -> Dict[str, Any]:
        """Load configuration from file, auto-detecting format."""
        suffix = path.suffix.lower()

        with open(path, "r", encoding="utf-8") as f:
            if suffix in (".yaml", ".yml"):
                return yaml.safe_load(f) or {}
            elif suffix == ".json":
                return json.load(f)
            else:
                # Try YAML first, fall back to JSON
                content = f.read()
                try:
                    return yaml.safe_load(content) or {}
                except yaml.YAMLError:
                    return json.loads(content)

    def load(self, validate: bool = True) -> Dict[str, Any]:
        """Load configuration from file with optional validation.

        Args:
            validate: Whether to validate against schema and value constraints

        Returns:
            Configuration dictionary merged over ``DEFAULTS``

        Raises:
            FileNotFoundError: If an explicit config file doesn't exist
            jsonschema.ValidationError: If structural validation fails
            ValueError: If value validation fails
        """
        if self._config is None:
            raw_config: Dict[str, Any] = {}
            if self.config_path is not None:
                if not self.config_path.exists():
                    raise FileNotFoundError(f"Config file not found: {self.config_path}")
                raw_config = self._load_file(self.config_path)
                if not isinstance(raw_config, dict):
                    raise ValueError(
                        f"Config file {self.config_path} must contain a mapping at the top level."
                    )

            if validate:
                jsonschema.validate(raw_config, PCA_CONFIG_SCHEMA)

            config = _deep_merge(copy.deepcopy(self.DEFAULTS), raw_config)

            if validate:
                ConfigValidator.validate_or_raise(config)

            self._config = config

        return copy.deepcopy(self._config)

    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value by key.

        Args:
            key: Configuration key (supports dot notation, e.g., 'plot.margin')
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        config = self.load()

        if key in config:
            return config[key]

        keys = key.split(".")
        value: Any = config

        try:
            for k in keys:
                value = value[k]
            return value
        except (KeyError, TypeError):
            return default

    def reload(self) -> Dict[str, Any]:
        """Force reload configuration from file."""
        self._config = None
        return self.load()


def load_config(config_path: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
    """Load configuration from a specific path, or the defaults when ``None``.

    Args:
        config_path: Path to the configuration file (YAML or JSON)

    Returns:
        Configuration dictionary
    """
    loader = ConfigLoader(Path(config_path) if config_path is not None else None)
    return loader.load()
