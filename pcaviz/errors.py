"""Error taxonomy shared by the reducer, the loader and the renderer."""

from __future__ import annotations

from typing import Optional


class PCAVizError(Exception):
    """Base class for errors raised by pcaviz."""


class InvalidInput(PCAVizError, ValueError):
    """Shape, parse or parameter violation that the caller can fix.

    Raised before any computation takes place.
    """


class NumericalFailure(PCAVizError, ArithmeticError):
    """The eigen decomposition could not deliver the requested components.

    Attributes:
        rank: Numerical rank of the covariance matrix, if known.
        n_components: Number of components that were requested.
    """

    def __init__(
        self,
        message: str,
        *,
        rank: Optional[int] = None,
        n_components: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.rank = rank
        self.n_components = n_components


__all__ = ["InvalidInput", "NumericalFailure", "PCAVizError"]
