"""Scatter rendering of 2-D projections colored by label."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple, Union

import matplotlib
import numpy as np
import seaborn as sns
from matplotlib import pyplot as plt
from matplotlib.colors import to_hex

from ..errors import InvalidInput
from ..utils.logging.logging_manager import get_logger

matplotlib.use("Agg")

logger = get_logger("pcaviz.visualization.scatter")

FIGURE_DPI = 100
BINARY_COLORS = {1.0: "red", 0.0: "blue"}
UNMAPPED_LABEL_COLOR = "gray"
UNLABELED_COLOR = "blue"

Bounds = Tuple[Tuple[float, float], Tuple[float, float]]


def axis_bounds(projected: np.ndarray, margin: float = 1.0) -> Bounds:
    """Return ``((x_min, x_max), (y_min, y_max))`` padded by ``margin`` on each side."""
    x_values = projected[:, 0]
    y_values = projected[:, 1]
    return (
        (float(np.min(x_values)) - margin, float(np.max(x_values)) + margin),
        (float(np.min(y_values)) - margin, float(np.max(y_values)) + margin),
    )


def default_label_colors(labels: Sequence[float]) -> Dict[float, str]:
    """Pick a color per distinct label.

    Labels drawn from {0, 1} keep the red (1) / blue (0) scheme; any other label
    set gets one color per sorted distinct label from a seaborn palette.
    """
    unique = sorted({float(label) for label in labels})
    if set(unique) <= set(BINARY_COLORS):
        return {label: BINARY_COLORS[label] for label in unique}
    palette_name = "tab10" if len(unique) <= 10 else "husl"
    palette = sns.color_palette(palette_name, len(unique))
    return {label: to_hex(color) for label, color in zip(unique, palette)}


def _normalise_label_colors(label_colors: Mapping[Any, str]) -> Dict[float, str]:
    # Config files deliver label keys as strings
    normalised: Dict[float, str] = {}
    for key, color in label_colors.items():
        try:
            normalised[float(key)] = color
        except (TypeError, ValueError) as exc:
            raise InvalidInput(f"Label color key {key!r} is not numeric.") from exc
    return normalised


def _format_label(label: float) -> str:
    return f"{label:g}"


def render_projection(
    projected: np.ndarray,
    labels: Optional[Sequence[float]],
    output_path: Union[str, Path],
    *,
    label_colors: Optional[Mapping[Any, str]] = None,
    margin: float = 1.0,
    title: str = "PCA Results",
    size_px: Tuple[int, int] = (800, 600),
    point_size: float = 5.0,
) -> Path:
    """Draw one filled circle per sample and save the figure as an image.

    Args:
        projected: Projection with exactly two columns.
        labels: One label per row, or ``None`` to draw every point in one color.
        output_path: Destination image path; the format follows the suffix.
        label_colors: Mapping from label to matplotlib color. Labels missing
            from the mapping are drawn gray. Defaults to ``default_label_colors``.
        margin: Padding added to both ends of each axis range.
        title: Figure title.
        size_px: Image width and height in pixels.
        point_size: Circle radius in pixels.

    Returns:
        Path of the written image.

    Raises:
        InvalidInput: If the projection is not a non-empty finite ``(n, 2)``
            array or ``labels`` has the wrong length.
    """
    projected = np.asarray(projected, dtype=np.float64)
    if projected.ndim != 2 or projected.shape[1] != 2 or projected.shape[0] == 0:
        raise InvalidInput(
            f"Scatter rendering needs a non-empty (n_samples, 2) projection; got shape {projected.shape}."
        )
    if not np.all(np.isfinite(projected)):
        raise InvalidInput("Projection contains NaN or infinite values.")
    if labels is not None:
        labels = np.asarray(labels, dtype=np.float64)
        if labels.shape != (projected.shape[0],):
            raise InvalidInput(
                f"Expected {projected.shape[0]} labels; got array of shape {labels.shape}."
            )

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    (x_min, x_max), (y_min, y_max) = axis_bounds(projected, margin)

    # Marker area is in points squared; convert the pixel radius first
    diameter_pt = 2.0 * point_size * 72.0 / FIGURE_DPI
    marker_area = diameter_pt**2

    fig, ax = plt.subplots(figsize=(size_px[0] / FIGURE_DPI, size_px[1] / FIGURE_DPI), dpi=FIGURE_DPI)
    try:
        fig.patch.set_facecolor("white")
        if labels is None:
            ax.scatter(projected[:, 0], projected[:, 1], s=marker_area, c=UNLABELED_COLOR)
        else:
            colors = (
                _normalise_label_colors(label_colors)
                if label_colors
                else default_label_colors(labels)
            )
            unique_labels = sorted(set(labels.tolist()))
            for label in unique_labels:
                mask = labels == label
                ax.scatter(
                    projected[mask, 0],
                    projected[mask, 1],
                    s=marker_area,
                    c=colors.get(label, UNMAPPED_LABEL_COLOR),
                    label=_format_label(label),
                )
            if len(unique_labels) > 1:
                ax.legend(title="label", loc="best", fontsize=8)

        ax.set_xlim(x_min, x_max)
        ax.set_ylim(y_min, y_max)
        ax.set_xlabel("PC1")
        ax.set_ylabel("PC2")
        ax.set_title(title, fontsize=16)
        ax.grid(True, linestyle="--", alpha=0.3)
        fig.tight_layout()
        fig.savefig(str(output_path), dpi=FIGURE_DPI, facecolor="white")
    finally:
        plt.close(fig)

    logger.info("Saved projection plot to %s", output_path)
    return output_path


__all__ = ["axis_bounds", "default_label_colors", "render_projection"]
