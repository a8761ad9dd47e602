"""
Directional and planar partitions of spatial data and the variograms
estimated on them.
"""

from typing import List, Optional

import numpy as np

from .control import VariogramControl
from .empirical import EmpiricalVariogram
from .geodata import SpatialData, VariableName


class DirectionPartition:
    """
    Group elements lying on a common line parallel to a direction.

    Parameters
    ----------
    direction : array-like
        Direction vector, normalized internally
    tol : float, default=1e-6
        Maximum distance of an element to the line through the group seed
    """

    def __init__(self, direction, tol: float = 1e-6):
        direction = np.asarray(direction, dtype=float)
        norm = np.linalg.norm(direction)
        if norm == 0:
            raise ValueError("Direction must be a non-zero vector")
        self.direction = direction / norm
        self.tol = tol

    def offsets(self, delta: np.ndarray) -> np.ndarray:
        """Distance of displacement vectors to the line spanned by the direction."""
        along = delta @ self.direction
        return np.linalg.norm(delta - np.outer(along, self.direction), axis=1)

    def __repr__(self):
        return f"DirectionPartition(direction={self.direction.tolist()}, tol={self.tol})"


class PlanePartition:
    """
    Group elements lying on a common plane orthogonal to a normal.

    Parameters
    ----------
    normal : array-like
        Normal vector, normalized internally
    tol : float, default=1e-6
        Maximum distance of an element to the plane through the group seed
    """

    def __init__(self, normal, tol: float = 1e-6):
        normal = np.asarray(normal, dtype=float)
        norm = np.linalg.norm(normal)
        if norm == 0:
            raise ValueError("Normal must be a non-zero vector")
        self.normal = normal / norm
        self.tol = tol

    def offsets(self, delta: np.ndarray) -> np.ndarray:
        """Distance of displacement vectors to the plane orthogonal to the normal."""
        return np.abs(delta @ self.normal)

    def __repr__(self):
        return f"PlanePartition(normal={self.normal.tolist()}, tol={self.tol})"


def partition_indices(coords: np.ndarray, method) -> List[np.ndarray]:
    """
    Index groups of a partition.

    Seeds are taken in ascending element order and each group lists its
    members in ascending order, so the result is deterministic.
    """
    coords = np.asarray(coords, dtype=float)
    dim = coords.shape[1]
    vector = method.direction if isinstance(method, DirectionPartition) else method.normal
    if vector.shape[0] != dim:
        raise ValueError(f"Partition vector has dimension {vector.shape[0]}, data has {dim}")

    groups = []
    remaining = np.arange(coords.shape[0])
    while remaining.size > 0:
        seed = coords[remaining[0]]
        inside = method.offsets(coords[remaining] - seed) < method.tol
        inside[0] = True
        groups.append(remaining[inside])
        remaining = remaining[~inside]
    return groups


def partition(data: SpatialData, method) -> List[SpatialData]:
    """Split spatial data into subsets with a partition method."""
    return [data.subset(group) for group in partition_indices(data.coordinates, method)]


def _resolve_maxlag(data: SpatialData, kwargs: dict) -> dict:
    # every partial variogram must share the bins of the whole domain
    if kwargs.get("maxlag") is None:
        control = kwargs.get("control") or VariogramControl()
        kwargs = dict(kwargs, maxlag=control.default_maxlag(data.diagonal()))
    return kwargs


def directional_variogram(direction, data: SpatialData, var1: VariableName,
                          var2: Optional[VariableName] = None, *,
                          dtol: float = 1e-6, **kwargs) -> EmpiricalVariogram:
    """
    Empirical variogram along a direction.

    Only pairs of elements lying on a common line parallel to ``direction``
    (within ``dtol``) contribute.

    Parameters
    ----------
    direction : array-like
        Direction vector
    data : SpatialData
        Georeferenced data
    var1, var2 : str or sequence of str
        Variables
    dtol : float, default=1e-6
        Tolerance of the direction partition
    **kwargs
        Forwarded to :meth:`EmpiricalVariogram.from_partition`, which
        accepts ``n_jobs`` on top of the :meth:`EmpiricalVariogram.from_data`
        arguments

    Returns
    -------
    EmpiricalVariogram
    """
    kwargs = _resolve_maxlag(data, kwargs)
    subsets = partition(data, DirectionPartition(direction, tol=dtol))
    return EmpiricalVariogram.from_partition(subsets, var1, var2, **kwargs)


def planar_variogram(normal, data: SpatialData, var1: VariableName,
                     var2: Optional[VariableName] = None, *,
                     ntol: float = 1e-6, **kwargs) -> EmpiricalVariogram:
    """
    Empirical variogram within planes orthogonal to ``normal``.

    Only pairs of elements lying on a common plane (within ``ntol``)
    contribute. In 2D the planes are lines perpendicular to ``normal``.
    """
    kwargs = _resolve_maxlag(data, kwargs)
    subsets = partition(data, PlanePartition(normal, tol=ntol))
    return EmpiricalVariogram.from_partition(subsets, var1, var2, **kwargs)
