"""
Base classes for theoretical variogram models.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Union

import numpy as np

from ..metrics import Euclidean, Metric, get_metric


class MetricBall:
    """
    Neighborhood defining how lags are measured and scaled.

    An isotropic ball has a single radius and measures lags with its metric.
    An anisotropic ball has one radius per axis of a (rotated) frame and
    measures lags with the quadratic form ``Q = R diag(1/r²) Rᵀ``, so lags
    are already expressed in units of range and the effective radius is 1.

    Parameters
    ----------
    radii : float or array-like
        Radius, or one radius per axis
    rotation : float or np.ndarray, optional
        Rotation matrix, or a rotation angle in radians for 2D balls
    metric : str or Metric, optional
        Metric of isotropic balls, Euclidean by default
    """

    def __init__(self, radii: Union[float, np.ndarray], rotation=None,
                 metric: Union[str, Metric, None] = None):
        radii = np.atleast_1d(np.asarray(radii, dtype=float))
        if radii.ndim != 1 or radii.size == 0:
            raise ValueError("Radii must be a scalar or a 1D array")
        if np.any(radii < 0):
            raise ValueError(f"Radii must be non-negative, got {radii}")
        radii.setflags(write=False)
        self.radii = radii
        self.metric = get_metric(metric)

        if rotation is None:
            self.rotation = None
        else:
            R = np.asarray(rotation, dtype=float)
            if R.ndim == 0:
                c, s = np.cos(R), np.sin(R)
                R = np.array([[c, -s], [s, c]])
            if R.shape != (radii.size, radii.size) and radii.size > 1:
                raise ValueError(f"Rotation must be a {radii.size}x{radii.size} matrix")
            self.rotation = R

    @property
    def is_isotropic(self) -> bool:
        return bool(np.all(self.radii == self.radii[0]))

    @property
    def radius(self) -> float:
        return float(self.radii[0]) if self.is_isotropic else 1.0

    @property
    def range(self) -> float:
        return float(np.max(self.radii))

    def _form(self) -> np.ndarray:
        R = np.eye(self.radii.size) if self.rotation is None else self.rotation
        return R @ np.diag(1.0 / self.radii ** 2) @ R.T

    def paired(self, A: np.ndarray, B: np.ndarray) -> np.ndarray:
        """Row-wise lags between two (m, d) arrays."""
        if self.is_isotropic:
            return self.metric.paired(A, B)
        D = np.asarray(A, dtype=float) - np.asarray(B, dtype=float)
        return np.sqrt(np.einsum("ij,jk,ik->i", D, self._form(), D))

    def evaluate(self, x, y) -> float:
        """Lag between two points."""
        a = np.atleast_2d(np.asarray(x, dtype=float))
        b = np.atleast_2d(np.asarray(y, dtype=float))
        return float(self.paired(a, b)[0])

    def pairwise(self, X: np.ndarray, Y: Optional[np.ndarray] = None) -> np.ndarray:
        """Lag matrix between the rows of X and Y."""
        if self.is_isotropic:
            return self.metric.pairwise(X, Y)
        X = np.asarray(X, dtype=float)
        Y = X if Y is None else np.asarray(Y, dtype=float)
        D = X[:, None, :] - Y[None, :, :]
        return np.sqrt(np.einsum("abi,ij,abj->ab", D, self._form(), D))

    def __eq__(self, other):
        if not isinstance(other, MetricBall):
            return NotImplemented
        same_rotation = (self.rotation is None and other.rotation is None) or (
            self.rotation is not None and other.rotation is not None
            and np.array_equal(self.rotation, other.rotation))
        return (np.array_equal(self.radii, other.radii) and same_rotation
                and self.metric == other.metric)

    def __hash__(self):
        return hash((tuple(self.radii), self.metric))

    def __repr__(self):
        radii = self.radii[0] if self.radii.size == 1 else self.radii.tolist()
        return f"MetricBall({radii}, metric={self.metric})"


class Variogram(ABC):
    """
    Theoretical variogram model.

    Calling a variogram with one argument evaluates it at lag(s) ``h``;
    calling it with two arguments evaluates it between two points or
    geometries (geometries are regularized by averaging over samples).
    """

    stationary = True
    unit: Optional[str] = None

    def __call__(self, *args):
        if len(args) == 1:
            return self._evaluate_lags(args[0])
        if len(args) == 2:
            from ..sampling import regularized
            return regularized(self, args[0], args[1])
        raise TypeError(f"{type(self).__name__} takes 1 or 2 positional arguments, got {len(args)}")

    def _evaluate_lags(self, h):
        h = np.asarray(h, dtype=float)
        out = self._lag(h)
        return float(out) if np.ndim(out) == 0 else out

    @abstractmethod
    def _lag(self, h: np.ndarray) -> np.ndarray:
        """Vectorized evaluation at lags."""

    def point_lags(self, A: np.ndarray, B: np.ndarray) -> np.ndarray:
        """Row-wise lags between two (m, d) point arrays."""
        return self.ball.paired(A, B)

    def lag_matrix(self, X: np.ndarray, Y: Optional[np.ndarray] = None) -> np.ndarray:
        """Lag matrix between two point arrays."""
        return self.ball.pairwise(X, Y)

    def evaluate_points(self, A: np.ndarray, B: np.ndarray) -> np.ndarray:
        """Variogram between paired rows of two (m, d) point arrays."""
        return self._lag(self.point_lags(A, B))

    def evaluate_matrix(self, X: np.ndarray, Y: Optional[np.ndarray] = None) -> np.ndarray:
        """Variogram matrix between two point arrays."""
        return self._lag(self.lag_matrix(X, Y))

    @property
    @abstractmethod
    def sill(self):
        """Total sill (value of the variogram at infinite lag)."""

    @property
    @abstractmethod
    def nugget(self):
        """Discontinuity at the origin."""

    @property
    @abstractmethod
    def range(self) -> float:
        """Lag at which the sill is (practically) reached."""

    @property
    def is_stationary(self) -> bool:
        return type(self).stationary

    @property
    def is_isotropic(self) -> bool:
        return self.ball.is_isotropic

    @abstractmethod
    def _params(self) -> Dict[str, Any]:
        """Constructor arguments reproducing this model."""

    def replace(self, **changes) -> "Variogram":
        """Copy of the model with some parameters changed."""
        params = self._params()
        unknown = set(changes) - set(params) - {"range"}
        if unknown:
            raise ValueError(f"Unknown parameters for {type(self).__name__}: {sorted(unknown)}")
        if "range" in changes:
            radius = changes.pop("range")
            if "ball" in params:
                params["ball"] = MetricBall(radius, metric=params["ball"].metric)
        params.update(changes)
        new = type(self)(**params)
        new.unit = self.unit
        return new

    def with_unit(self, unit: Optional[str]) -> "Variogram":
        """Copy of the model carrying a unit label for its values."""
        new = self.replace()
        new.unit = unit
        return new

    def __eq__(self, other):
        if type(self) is not type(other):
            return NotImplemented
        return self._params() == other._params()

    def __hash__(self):
        return hash((type(self), tuple(sorted(self._params().items(), key=lambda kv: kv[0]))))

    def __repr__(self):
        params = self._params()
        ball = params.pop("ball", None)
        parts = []
        if ball is not None:
            if ball.is_isotropic and ball.rotation is None:
                parts.append(f"range={ball.range:g}")
            else:
                parts.append(f"ball={ball!r}")
        parts += [f"{k}={v:g}" if isinstance(v, float) else f"{k}={v!r}" for k, v in params.items()]
        if ball is not None and not isinstance(ball.metric, Euclidean):
            parts.append(f"distance={ball.metric}")
        return f"{type(self).__name__}({', '.join(parts)})"
