"""Plotting helpers for projected samples."""

from .scatter import axis_bounds, default_label_colors, render_projection  # noqa: F401
