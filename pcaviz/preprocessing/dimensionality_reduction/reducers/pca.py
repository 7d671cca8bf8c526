"""Principal Component Analysis over a dense feature matrix.

The fit is split from the projection: :func:`fit` centres the data, builds the
sample covariance matrix (divisor ``n_samples - 1``) and extracts its leading
eigenvectors through :func:`scipy.linalg.eigh`; :func:`transform` applies a
fitted basis and mean to any matrix with the same number of features.

Conventions that make the output reproducible:

* Eigenpairs are ordered by descending eigenvalue with a stable sort, so equal
  eigenvalues keep the order in which ``eigh`` returned them.
* Every basis column is flipped so that its largest-magnitude entry is
  positive. Entries whose magnitude is within ``SIGN_TIE_RTOL`` of the
  column maximum count as tied, and the first of them decides.
* Eigenvalues at or below ``rtol * max(eigenvalue)`` count as zero. Asking for
  more components than the resulting rank raises :class:`NumericalFailure`;
  the basis is never zero-padded.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Sequence, Tuple, Union

import numpy as np
from scipy import linalg

from ....errors import InvalidInput, NumericalFailure
from ....utils.logging.logging_manager import get_logger

logger = get_logger("pcaviz.reducers.pca")

ArrayLike = Union[np.ndarray, Sequence[Sequence[float]]]

#: Eigenvalues at or below this fraction of the largest one are treated as zero.
DEFAULT_RANK_RTOL = 1e-10

#: Absolute tolerance on ``basis.T @ basis == I``.
ORTHONORMALITY_ATOL = 1e-6

#: Relative gap under which two basis entries count as equally large.
SIGN_TIE_RTOL = 1e-8


def as_feature_matrix(data: ArrayLike, *, min_samples: int = 1, name: str = "X") -> np.ndarray:
    """Validate ``data`` as a rectangular, finite, 2-D float matrix.

    Args:
        data: ``numpy`` array or sequence of equally sized rows.
        min_samples: Minimum number of rows required.
        name: Name used in error messages.

    Returns:
        A float64 array. The caller's object is never modified.

    Raises:
        InvalidInput: If the matrix is empty, ragged, non-numeric, not finite
            or has fewer than ``min_samples`` rows.
    """
    if isinstance(data, np.ndarray) and data.dtype != object:
        if data.size == 0:
            raise InvalidInput(f"{name} is empty.")
        if data.ndim != 2:
            raise InvalidInput(
                f"{name} must be 2-dimensional (samples x features); got {data.ndim} dimension(s)."
            )
        try:
            matrix = data.astype(np.float64)
        except (TypeError, ValueError) as exc:
            raise InvalidInput(f"{name} contains non-numeric values: {exc}") from exc
    else:
        try:
            rows = [list(row) for row in data]
        except TypeError as exc:
            raise InvalidInput(f"{name} must be a sequence of rows: {exc}") from exc
        if not rows:
            raise InvalidInput(f"{name} is empty.")
        n_features = len(rows[0])
        for index, row in enumerate(rows):
            if len(row) != n_features:
                raise InvalidInput(
                    f"{name} is ragged: row {index} has {len(row)} values, "
                    f"expected {n_features}."
                )
        try:
            matrix = np.asarray(rows, dtype=np.float64)
        except (TypeError, ValueError) as exc:
            raise InvalidInput(f"{name} contains non-numeric values: {exc}") from exc
        if matrix.size == 0:
            raise InvalidInput(f"{name} is empty.")
        if matrix.ndim != 2:
            raise InvalidInput(
                f"{name} must be 2-dimensional (samples x features); got {matrix.ndim} dimension(s)."
            )

    if not np.all(np.isfinite(matrix)):
        bad_rows = np.where(~np.all(np.isfinite(matrix), axis=1))[0]
        raise InvalidInput(
            f"{name} contains NaN or infinite values (first offending row: {int(bad_rows[0])})."
        )

    n_samples = matrix.shape[0]
    if n_samples < min_samples:
        raise InvalidInput(
            f"{name} needs at least {min_samples} samples; got {n_samples}."
        )
    return matrix


def _validate_n_components(n_components: Any, n_features: int) -> int:
    if isinstance(n_components, bool) or not isinstance(n_components, (int, np.integer)):
        raise InvalidInput(
            f"n_components must be an integer; got {type(n_components).__name__}."
        )
    if not 1 <= n_components <= n_features:
        raise InvalidInput(
            f"n_components must be in [1, {n_features}]; got {n_components}."
        )
    return int(n_components)


def _validate_rtol(rtol: Any) -> float:
    if isinstance(rtol, bool):
        raise InvalidInput("rtol must be a number; got bool.")
    try:
        value = float(rtol)
    except (TypeError, ValueError) as exc:
        raise InvalidInput(f"rtol must be a number; got {rtol!r}.") from exc
    if not np.isfinite(value) or value < 0.0:
        raise InvalidInput(f"rtol must be a finite number >= 0; got {rtol!r}.")
    return value


def sample_covariance(centered: np.ndarray) -> np.ndarray:
    """Return ``centered.T @ centered / (n_samples - 1)``, symmetrised."""
    n_samples = centered.shape[0]
    covariance = centered.T @ centered / (n_samples - 1)
    return (covariance + covariance.T) / 2.0


def _sorted_eigenpairs(
    covariance: np.ndarray, rtol: float, n_components: int
) -> Tuple[np.ndarray, np.ndarray]:
    try:
        eigenvalues, eigenvectors = linalg.eigh(covariance, check_finite=False)
    except (linalg.LinAlgError, ValueError) as exc:
        raise NumericalFailure(
            f"Eigen decomposition did not converge: {exc}", n_components=n_components
        ) from exc

    order = np.argsort(-eigenvalues, kind="stable")
    eigenvalues = eigenvalues[order]
    eigenvectors = eigenvectors[:, order]

    threshold = rtol * float(np.max(np.abs(eigenvalues)))
    if np.any(eigenvalues < -threshold):
        raise NumericalFailure(
            "Covariance matrix is not positive semi-definite "
            f"(smallest eigenvalue {float(eigenvalues[-1]):.3e}).",
            n_components=n_components,
        )
    eigenvalues = np.where(np.abs(eigenvalues) <= threshold, 0.0, eigenvalues)
    return eigenvalues, eigenvectors


def normalise_signs(basis: np.ndarray) -> np.ndarray:
    """Flip each column so that its largest-magnitude entry is positive."""
    magnitudes = np.abs(basis)
    peaks = magnitudes.max(axis=0)
    # argmax over booleans picks the first near-maximal entry
    pivots = np.argmax(magnitudes >= peaks * (1.0 - SIGN_TIE_RTOL), axis=0)
    signs = np.sign(basis[pivots, np.arange(basis.shape[1])])
    signs[signs == 0] = 1.0
    return basis * signs


@dataclass(frozen=True, eq=False)
class PCAModel:
    """Fitted projection basis, mean and variance diagnostics.

    Attributes:
        components: Basis, shape ``(n_features, n_components)``; orthonormal columns.
        mean: Per-feature mean of the training matrix, shape ``(n_features,)``.
        explained_variance: Eigenvalues of the selected components.
        explained_variance_ratio: ``explained_variance / sum(eigenvalues)``.
        eigenvalues: All covariance eigenvalues, descending, clamped at zero.
        rank: Number of non-zero eigenvalues.
        n_samples: Rows in the training matrix.
    """

    components: np.ndarray
    mean: np.ndarray
    explained_variance: np.ndarray
    explained_variance_ratio: np.ndarray
    eigenvalues: np.ndarray
    rank: int
    n_samples: int

    @property
    def n_components(self) -> int:
        return int(self.components.shape[1])

    @property
    def n_features(self) -> int:
        return int(self.components.shape[0])

    def transform(self, features: ArrayLike) -> np.ndarray:
        return transform(features, self.components, self.mean)

    def save(self, path: Union[str, Path]) -> Path:
        """Write the model to an ``.npz`` archive and return its path."""
        path = Path(path)
        np.savez(
            path,
            components=self.components,
            mean=self.mean,
            explained_variance=self.explained_variance,
            explained_variance_ratio=self.explained_variance_ratio,
            eigenvalues=self.eigenvalues,
            rank=np.asarray(self.rank),
            n_samples=np.asarray(self.n_samples),
        )
        # np.savez appends the suffix when it is missing
        return path if path.suffix == ".npz" else path.with_name(path.name + ".npz")

    @classmethod
    def load(cls, path: Union[str, Path]) -> "PCAModel":
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"PCA model not found at {path}")
        with np.load(path) as archive:
            try:
                return cls(
                    components=archive["components"],
                    mean=archive["mean"],
                    explained_variance=archive["explained_variance"],
                    explained_variance_ratio=archive["explained_variance_ratio"],
                    eigenvalues=archive["eigenvalues"],
                    rank=int(archive["rank"]),
                    n_samples=int(archive["n_samples"]),
                )
            except KeyError as exc:
                raise InvalidInput(f"{path} is not a PCA model archive: {exc}") from exc

    def summary(self) -> Dict[str, object]:
        return {
            "explained_variance_ratio": self.explained_variance_ratio.tolist(),
            "explained_variance": self.explained_variance.tolist(),
            "total_explained_variance": float(np.sum(self.explained_variance_ratio)),
            "rank": self.rank,
            "covariance_divisor": "n_samples - 1",
        }


def fit(features: ArrayLike, n_components: int, *, rtol: float = DEFAULT_RANK_RTOL) -> PCAModel:
    """Fit a PCA basis with ``n_components`` columns to ``features``.

    Raises:
        InvalidInput: For an invalid matrix, fewer than two samples,
            ``n_components`` outside ``[1, n_features]`` or a negative or
            non-finite ``rtol``.
        NumericalFailure: If ``eigh`` fails or the covariance rank is below
            ``n_components``.
    """
    matrix = as_feature_matrix(features, min_samples=2)
    n_samples, n_features = matrix.shape
    k = _validate_n_components(n_components, n_features)
    rtol = _validate_rtol(rtol)

    mean = matrix.mean(axis=0)
    centered = matrix - mean
    covariance = sample_covariance(centered)
    eigenvalues, eigenvectors = _sorted_eigenpairs(covariance, rtol, k)

    rank = int(np.count_nonzero(eigenvalues > 0.0))
    if rank < k:
        raise NumericalFailure(
            f"Covariance matrix has rank {rank}; cannot extract {k} non-trivial "
            "components. Reduce n_components or supply data with more variance.",
            rank=rank,
            n_components=k,
        )

    basis = normalise_signs(eigenvectors[:, :k])
    gram = basis.T @ basis
    if not np.allclose(gram, np.eye(k), atol=ORTHONORMALITY_ATOL):
        raise NumericalFailure(
            "Principal directions are not orthonormal "
            f"(max deviation {float(np.max(np.abs(gram - np.eye(k)))):.3e}).",
            rank=rank,
            n_components=k,
        )

    total_variance = float(np.sum(eigenvalues))
    explained_variance = eigenvalues[:k].copy()
    logger.debug(
        "Fitted PCA on %d samples x %d features: rank=%d, top eigenvalue=%.6g",
        n_samples,
        n_features,
        rank,
        float(eigenvalues[0]),
    )
    return PCAModel(
        components=basis,
        mean=mean,
        explained_variance=explained_variance,
        explained_variance_ratio=explained_variance / total_variance,
        eigenvalues=eigenvalues,
        rank=rank,
        n_samples=n_samples,
    )


def transform(features: ArrayLike, basis: ArrayLike, mean: ArrayLike) -> np.ndarray:
    """Project ``features`` onto a fitted ``basis`` after subtracting ``mean``."""
    matrix = as_feature_matrix(features, min_samples=1, name="X_new")
    basis = np.asarray(basis, dtype=np.float64)
    mean = np.asarray(mean, dtype=np.float64)
    if basis.ndim != 2:
        raise InvalidInput(
            f"basis must be 2-dimensional (features x components); got {basis.ndim} dimension(s)."
        )
    if mean.ndim != 1:
        raise InvalidInput(f"mean must be 1-dimensional; got {mean.ndim} dimension(s).")
    n_features = matrix.shape[1]
    if basis.shape[0] != n_features or mean.shape[0] != n_features:
        raise InvalidInput(
            f"X_new has {n_features} features but basis expects {basis.shape[0]} "
            f"and mean has {mean.shape[0]}."
        )
    return (matrix - mean) @ basis


def fit_transform(
    features: ArrayLike, n_components: int, *, rtol: float = DEFAULT_RANK_RTOL
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Fit PCA and project the training matrix.

    Returns:
        ``(projected, basis, explained_variance_ratio)`` with shapes
        ``(n_samples, k)``, ``(n_features, k)`` and ``(k,)``.
    """
    model = fit(features, n_components, rtol=rtol)
    projected = transform(features, model.components, model.mean)
    return projected, model.components, model.explained_variance_ratio


class PCAReducer:
    """Apply PCA to a numeric feature matrix and keep the fitted model.

    Raises:
        InvalidInput: If ``rtol`` is not a finite number >= 0.
    """

    def __init__(self, *, n_components: int, rtol: float = DEFAULT_RANK_RTOL) -> None:
        self.n_components = n_components
        self.rtol = _validate_rtol(rtol)
        self.model_: Optional[PCAModel] = None

    def fit_transform(self, features: np.ndarray) -> tuple[np.ndarray, Dict[str, object]]:
        self.model_ = fit(features, self.n_components, rtol=self.rtol)
        embedding = self.model_.transform(features)
        return embedding, self.model_.summary()

    def transform(self, features: np.ndarray) -> np.ndarray:
        if self.model_ is None:
            raise RuntimeError("PCAReducer must be fitted before calling transform().")
        return self.model_.transform(features)


__all__ = [
    "DEFAULT_RANK_RTOL",
    "PCAModel",
    "PCAReducer",
    "as_feature_matrix",
    "fit",
    "fit_transform",
    "normalise_signs",
    "sample_covariance",
    "transform",
]
