"""
Varioplanes: directional variograms over a fan of angles within a plane.
"""

from typing import List, Optional, Sequence, Tuple

import numpy as np

from .empirical import EmpiricalVariogram
from .geodata import SpatialData, VariableName
from .partition import DirectionPartition, PlanePartition, _resolve_maxlag, partition_indices


def spheredir(theta: float, phi: float) -> np.ndarray:
    """
    Unit vector in 3D from spherical angles.

    Parameters
    ----------
    theta : float
        Polar angle in degrees, measured from the z axis
    phi : float
        Azimuthal angle in degrees, measured from the x axis

    Returns
    -------
    np.ndarray
    """
    t, p = np.radians(theta), np.radians(phi)
    return np.array([np.sin(t) * np.cos(p), np.sin(t) * np.sin(p), np.cos(t)])


def householder_basis(normal) -> Tuple[np.ndarray, np.ndarray]:
    """
    Orthonormal basis (u, v) of the plane orthogonal to ``normal``.

    The reflection pivot is the component maximizing ``n + |n|``, which
    keeps the reflection vector away from zero for any normal.
    """
    n = np.asarray(normal, dtype=float)
    if n.shape != (3,):
        raise ValueError("Householder basis requires a 3D normal")
    norm = np.linalg.norm(n)
    if norm == 0:
        raise ValueError("Normal must be a non-zero vector")

    i = int(np.argmax(n + norm))
    h = n.copy()
    h[i] += norm
    H = np.eye(3) - 2 * np.outer(h, h) / (h @ h)
    u, v = [H[:, j] for j in range(3) if j != i]
    if i == 1:
        u, v = v, u
    return u, v


class EmpiricalVarioplane:
    """
    Directional variograms at evenly spaced angles in a plane.

    Parameters
    ----------
    angles : np.ndarray
        Angles in radians within [0, π]
    variograms : list of EmpiricalVariogram
        One variogram per angle
    """

    def __init__(self, angles, variograms: Sequence[EmpiricalVariogram]):
        angles = np.array(angles, dtype=float)
        if len(angles) != len(variograms):
            raise ValueError("Number of angles and variograms must match")
        angles.setflags(write=False)
        self.angles = angles
        self.variograms = list(variograms)

    def __len__(self):
        return len(self.angles)

    def __iter__(self):
        return iter(zip(self.angles, self.variograms))

    def __repr__(self):
        lines = [f"{type(self).__name__}", "  N° pairs"]
        entries = [f"  └─{np.degrees(a):.2f}° → {int(g.counts.sum())}"
                   for a, g in zip(self.angles, self.variograms)]
        if len(entries) > 6:
            entries = entries[:3] + ["  ⋮"] + entries[-3:]
        return "\n".join(lines + entries)


def empirical_varioplane(data: SpatialData, var1: VariableName,
                         var2: Optional[VariableName] = None, *,
                         normal=None, nangs: int = 50,
                         ptol: float = 0.5, dtol: float = 0.5,
                         **kwargs) -> EmpiricalVarioplane:
    """
    Estimate a varioplane.

    Parameters
    ----------
    data : SpatialData
        Georeferenced 2D or 3D data
    var1, var2 : str or sequence of str
        Variables
    normal : array-like, optional
        Normal of the plane in 3D, ``spheredir(0, 0)`` by default
    nangs : int, default=50
        Number of angles in [0, π]
    ptol : float, default=0.5
        Tolerance of the plane partition (3D only)
    dtol : float, default=0.5
        Tolerance of the direction partition
    **kwargs
        Forwarded to :meth:`EmpiricalVariogram.from_partition`, which
        accepts ``n_jobs`` on top of the :meth:`EmpiricalVariogram.from_data`
        arguments

    Returns
    -------
    EmpiricalVarioplane
    """
    if nangs <= 1:
        raise ValueError(f"Number of angles must be greater than 1, got {nangs}")

    dim = data.embed_dim
    coords = np.asarray(data.coordinates, dtype=float)
    if dim == 2:
        planes = [np.arange(len(data))]
        u, v = np.array([1.0, 0.0]), np.array([0.0, 1.0])
    elif dim == 3:
        normal = spheredir(0, 0) if normal is None else np.asarray(normal, dtype=float)
        planes = partition_indices(coords, PlanePartition(normal, tol=ptol))
        u, v = householder_basis(normal)
    else:
        raise ValueError(f"Varioplane is only defined in 2D and 3D, got {dim}D data")

    kwargs = _resolve_maxlag(data, kwargs)

    angles = np.linspace(0, np.pi, nangs)
    variograms: List[EmpiricalVariogram] = []
    for theta in angles:
        direction = np.cos(theta) * u + np.sin(theta) * v
        method = DirectionPartition(direction, tol=dtol)
        subsets = []
        for plane in planes:
            if len(plane) < 2:
                continue
            for group in partition_indices(coords[plane], method):
                subsets.append(data.subset(plane[group]))
        variograms.append(EmpiricalVariogram.from_partition(subsets, var1, var2, **kwargs))

    return EmpiricalVarioplane(angles, variograms)
