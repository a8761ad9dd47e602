"""
Point sampling of geometries and regularized (block) variogram evaluation.
"""

from typing import Optional

import numpy as np
import shapely
from shapely.geometry.base import BaseGeometry

from .control import VariogramControl
from .geometry import Geometry, Segment, bounding_sides, is_geometry
from .theoretical import Variogram


# Upper bound on candidate points drawn by min-distance sampling
MAX_CANDIDATES = 20_000


def _spacing(gamma: Variogram, geom) -> float:
    sides = bounding_sides(geom)
    positive = sides[sides > 0]
    if positive.size == 0:
        raise ValueError(f"Cannot sample degenerate geometry {geom!r}")
    scale = float(np.min(positive))
    r = gamma.range
    if np.isfinite(r) and r > 0:
        scale = min(r, scale)
    return scale / 3


def _dims(gamma: Variogram, geom) -> np.ndarray:
    alpha = _spacing(gamma, geom)
    n = np.ceil(bounding_sides(geom) / alpha).astype(int)
    n[n == 0] = 1
    return n


def min_distance_sample(region: BaseGeometry, spacing: float, seed: int,
                        oversampling: int = 100) -> np.ndarray:
    """
    Points of a shapely region at least ``spacing`` apart.

    Candidates are drawn uniformly in the region with a seeded generator
    and accepted greedily when they keep the minimum distance, so the same
    seed always returns the same points.
    """
    if region.area <= 0:
        raise ValueError("Cannot sample a region with zero area")
    rng = np.random.default_rng(seed)
    minx, miny, maxx, maxy = region.bounds
    expected = max(1.0, region.area / spacing ** 2)
    target = int(min(MAX_CANDIDATES, np.ceil(oversampling * expected)))

    candidates = []
    drawn = 0
    while drawn < target:
        batch = max(target - drawn, 64)
        x = rng.uniform(minx, maxx, batch)
        y = rng.uniform(miny, maxy, batch)
        inside = shapely.contains_xy(region, x, y)
        candidates.append(np.column_stack([x[inside], y[inside]]))
        drawn += int(inside.sum())
    candidates = np.vstack(candidates)[:target]

    selected = [candidates[0]]
    for p in candidates[1:]:
        d = np.sqrt(np.sum((np.asarray(selected) - p) ** 2, axis=1))
        if np.all(d >= spacing):
            selected.append(p)
    return np.asarray(selected)


def variosample(gamma: Variogram, obj, seed: Optional[int] = None) -> np.ndarray:
    """
    Sample points representing a point or geometry for variogram evaluation.

    Parameters
    ----------
    gamma : Variogram
        Variogram whose range sets the sampling resolution
    obj : array-like, Geometry or shapely geometry
        Point, segment, quadrangle, hexahedron or shapely region
    seed : int, optional
        Seed of the sampling of shapely regions

    Returns
    -------
    np.ndarray
        (m, d) array of sample points
    """
    if isinstance(obj, BaseGeometry) and obj.geom_type == "Point":
        return np.array([obj.coords[0]], dtype=float)
    if not is_geometry(obj):
        return np.atleast_2d(np.asarray(obj, dtype=float))

    if isinstance(obj, Geometry):
        shrunk = obj.shrink(0.05, 0.95)
        if isinstance(obj, Segment):
            return shrunk.regular_points([_dims(gamma, obj).max()])
        # counts follow the parametric edges so embedded faces sample like flat ones
        n = np.ceil(obj.param_sides() / _spacing(gamma, obj)).astype(int)
        n[n == 0] = 1
        return shrunk.regular_points(n)

    if seed is None:
        seed = VariogramControl().seed
    return min_distance_sample(obj, _spacing(gamma, obj), seed)


def _mean_between(gamma: Variogram, A: np.ndarray, B: np.ndarray):
    left = np.repeat(A, len(B), axis=0)
    right = np.tile(B, (len(A), 1))
    values = gamma.evaluate_points(left, right)
    mean = np.mean(values, axis=0)
    return float(mean) if np.ndim(mean) == 0 else mean


def regularized(gamma: Variogram, a, b, seed: Optional[int] = None):
    """
    Variogram between two points or geometries.

    Geometries are replaced by their samples and the point variogram is
    averaged over every pair of samples.
    """
    return _mean_between(gamma, variosample(gamma, a, seed), variosample(gamma, b, seed))


def _is_point_array(domain) -> bool:
    return isinstance(domain, np.ndarray) and domain.ndim == 2


def pairwise(gamma: Variogram, domain, domain2=None, seed: Optional[int] = None) -> np.ndarray:
    """
    Variogram matrix between the elements of one or two domains.

    Parameters
    ----------
    gamma : Variogram
        Variogram model
    domain : np.ndarray or sequence
        (n, d) array of points or sequence of points/geometries
    domain2 : np.ndarray or sequence, optional
        Second domain; the result is symmetric when omitted
    seed : int, optional
        Seed of the sampling of shapely regions

    Returns
    -------
    np.ndarray
    """
    if _is_point_array(domain) and (domain2 is None or _is_point_array(domain2)):
        return gamma.evaluate_matrix(domain, domain2)

    samples1 = [variosample(gamma, obj, seed) for obj in domain]
    if domain2 is None:
        n = len(samples1)
        G = np.zeros((n, n))
        for j in range(n):
            G[j, j] = _mean_between(gamma, samples1[j], samples1[j])
            for i in range(j + 1, n):
                G[i, j] = G[j, i] = _mean_between(gamma, samples1[i], samples1[j])
        return G

    samples2 = [variosample(gamma, obj, seed) for obj in domain2]
    G = np.zeros((len(samples1), len(samples2)))
    for i, si in enumerate(samples1):
        for j, sj in enumerate(samples2):
            G[i, j] = _mean_between(gamma, si, sj)
    return G
