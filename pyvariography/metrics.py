"""
Distances used to measure lags between spatial locations.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Union

import numpy as np
from scipy.spatial.distance import cdist
from sklearn.metrics.pairwise import haversine_distances


class Metric(ABC):
    """Distance between points given as rows of coordinate arrays."""

    is_minkowski = False

    @abstractmethod
    def paired(self, A: np.ndarray, B: np.ndarray) -> np.ndarray:
        """Row-wise distances between two (m, d) arrays."""

    @abstractmethod
    def pairwise(self, X: np.ndarray, Y: Optional[np.ndarray] = None) -> np.ndarray:
        """Distance matrix between the rows of X and the rows of Y."""

    def evaluate(self, x, y) -> float:
        """Distance between two single points."""
        a = np.atleast_2d(np.asarray(x, dtype=float))
        b = np.atleast_2d(np.asarray(y, dtype=float))
        return float(self.paired(a, b)[0])


@dataclass(frozen=True)
class Minkowski(Metric):
    """
    Minkowski distance of order p.

    Parameters
    ----------
    p : float, default=2.0
        Order of the norm, ``np.inf`` for the Chebyshev distance
    """

    p: float = 2.0

    is_minkowski = True

    def paired(self, A, B):
        diff = np.abs(np.asarray(A, dtype=float) - np.asarray(B, dtype=float))
        if self.p == 2:
            return np.sqrt(np.sum(diff * diff, axis=1))
        if self.p == 1:
            return np.sum(diff, axis=1)
        if np.isinf(self.p):
            return np.max(diff, axis=1)
        return np.sum(diff ** self.p, axis=1) ** (1.0 / self.p)

    def pairwise(self, X, Y=None):
        X = np.asarray(X, dtype=float)
        Y = X if Y is None else np.asarray(Y, dtype=float)
        if self.p == 2:
            return cdist(X, Y, metric="euclidean")
        if self.p == 1:
            return cdist(X, Y, metric="cityblock")
        if np.isinf(self.p):
            return cdist(X, Y, metric="chebyshev")
        return cdist(X, Y, metric="minkowski", p=self.p)


@dataclass(frozen=True)
class Euclidean(Minkowski):
    p: float = 2.0


@dataclass(frozen=True)
class Cityblock(Minkowski):
    p: float = 1.0


@dataclass(frozen=True)
class Chebyshev(Minkowski):
    p: float = np.inf


@dataclass(frozen=True)
class Haversine(Metric):
    """
    Great circle distance on a sphere.

    Coordinates are (longitude, latitude) pairs in degrees.

    Parameters
    ----------
    radius : float, default=6371.0
        Sphere radius, the mean Earth radius in kilometers by default
    """

    radius: float = 6371.0

    def paired(self, A, B):
        lon1, lat1 = np.radians(np.asarray(A, dtype=float)).T
        lon2, lat2 = np.radians(np.asarray(B, dtype=float)).T
        a = (np.sin((lat2 - lat1) / 2) ** 2 +
             np.cos(lat1) * np.cos(lat2) * np.sin((lon2 - lon1) / 2) ** 2)
        return 2 * self.radius * np.arcsin(np.sqrt(np.clip(a, 0.0, 1.0)))

    def pairwise(self, X, Y=None):
        X = np.asarray(X, dtype=float)
        Y = X if Y is None else np.asarray(Y, dtype=float)
        # scikit-learn expects (latitude, longitude) in radians
        Xr = np.radians(X[:, ::-1])
        Yr = np.radians(Y[:, ::-1])
        return self.radius * haversine_distances(Xr, Yr)


METRICS = {
    "euclidean": Euclidean,
    "cityblock": Cityblock,
    "chebyshev": Chebyshev,
    "haversine": Haversine,
}


def get_metric(metric: Union[str, Metric, None] = None) -> Metric:
    """
    Resolve a metric name or instance.

    Parameters
    ----------
    metric : str or Metric, optional
        Name of a registered metric or a Metric instance; Euclidean when None

    Returns
    -------
    Metric
    """
    if metric is None:
        return Euclidean()
    if isinstance(metric, Metric):
        return metric
    if isinstance(metric, str) and metric.lower() in METRICS:
        return METRICS[metric.lower()]()
    raise ValueError(f"Unknown distance: {metric}. Available: {sorted(METRICS)}")
