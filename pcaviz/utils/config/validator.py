"""Configuration validation utilities for PCA projection runs.

This module provides value-level validation that the JSON schema cannot
express, to catch errors early and provide helpful feedback.
"""

from pathlib import Path
from typing import Any, Dict, List
import logging

# Use standard logging to avoid circular import with logging_manager
logger = logging.getLogger("pcaviz.config_validator")


def _get_value(config: Dict[str, Any], key: str, default: Any = None) -> Any:
    """Get a value from config using dot notation.

    Args:
        config: Configuration dictionary
        key: Key in dot notation (e.g., 'plot.margin')
        default: Default value if not found

    Returns:
        Configuration value or default
    """
    keys = key.split(".")
    value: Any = config
    try:
        for k in keys:
            value = value[k]
        return value
    except (KeyError, TypeError):
        return default


class ConfigValidator:
    """Validate projection run configuration parameters."""

    @staticmethod
    def validate(config: Dict[str, Any]) -> List[str]:
        """Validate configuration and return list of warnings/errors.

        Args:
            config: Configuration dictionary to validate

        Returns:
            List of error/warning messages (empty if valid)
        """
        errors = []
        warnings = []

        n_components = _get_value(config, "reduction.n_components")
        if n_components is not None:
            if isinstance(n_components, bool) or not isinstance(n_components, int):
                errors.append(f"reduction.n_components={n_components!r} must be an integer")
            elif n_components < 1:
                errors.append(f"reduction.n_components={n_components} must be >= 1")
            elif n_components != 2:
                warnings.append(
                    f"reduction.n_components={n_components}: the scatter plot is only "
                    "rendered for 2 components."
                )

        model_path = _get_value(config, "reduction.model_path")
        if model_path:
            if not Path(model_path).exists():
                warnings.append(
                    f"reduction.model_path does not exist: {model_path}. "
                    "Will fail at runtime if not provided via CLI."
                )
            if _get_value(config, "reduction.standardise"):
                warnings.append(
                    "reduction.standardise is applied with statistics of the new data "
                    "when projecting through a saved model."
                )

        margin = _get_value(config, "plot.margin")
        if margin is not None and margin < 0:
            errors.append(f"plot.margin={margin} must be >= 0")

        has_target = _get_value(config, "input.has_target", True)
        label_colors = _get_value(config, "plot.label_colors")
        if not has_target and label_colors:
            warnings.append("plot.label_colors is ignored when input.has_target is false")
        if not has_target and _get_value(config, "input.target_column"):
            errors.append("input.target_column cannot be set when input.has_target is false")

        for width_key in ("plot.width_px", "plot.height_px"):
            size = _get_value(config, width_key)
            if size is not None and size > 10000:
                warnings.append(f"{width_key}={size} is very large.")

        # Combine and return
        all_messages = []
        for error in errors:
            all_messages.append(f"ERROR: {error}")
        for warning in warnings:
            all_messages.append(f"WARNING: {warning}")

        return all_messages

    @staticmethod
    def validate_or_raise(config: Dict[str, Any]) -> None:
        """Validate and raise exception if errors found.

        Args:
            config: Configuration dictionary to validate

        Raises:
            ValueError: If validation errors are found
        """
        messages = ConfigValidator.validate(config)

        errors = [m for m in messages if m.startswith("ERROR")]
        warnings = [m for m in messages if m.startswith("WARNING")]

        if errors:
            raise ValueError("Configuration validation failed:\n" + "\n".join(errors))

        for warning in warnings:
            logger.warning(warning)
