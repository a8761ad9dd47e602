"""
Pair accumulation algorithms for empirical variograms.

Both algorithms enumerate candidate pairs in the same canonical order
(left index ascending, then right index ascending) and share the same
filtering and binning, so they produce bit-identical sums.
"""

import warnings
from abc import ABC, abstractmethod
from typing import Iterator, Optional, Tuple

import numpy as np
from scipy.spatial import cKDTree

from .control import force_fullsearch
from .estimators import VariogramEstimator
from .geodata import SpatialData, VariableName
from .metrics import Metric


# Upper bound on the number of candidate pairs held in memory at once
PAIR_CHUNK_SIZE = 2_000_000


class VariogramAccumAlgo(ABC):
    """
    Configuration of an accumulation pass.

    Parameters
    ----------
    nlags : int
        Number of lag bins
    maxlag : float
        Maximum lag
    distance : Metric
        Distance used to measure lags
    """

    def __init__(self, nlags: int, maxlag: float, distance: Metric):
        self.nlags = nlags
        self.maxlag = maxlag
        self.distance = distance

    @abstractmethod
    def candidate_pairs(self, coords: np.ndarray) -> Iterator[Tuple[np.ndarray, np.ndarray]]:
        """Yield (left, right) index arrays with left < right in canonical order."""

    def __repr__(self):
        return (f"{type(self).__name__}(nlags={self.nlags}, maxlag={self.maxlag}, "
                f"distance={self.distance})")


class FullSearchAccum(VariogramAccumAlgo):
    """Visit every pair of elements."""

    def candidate_pairs(self, coords):
        n = coords.shape[0]
        rows_per_chunk = max(1, PAIR_CHUNK_SIZE // max(n, 1))
        for start in range(0, n - 1, rows_per_chunk):
            rows = np.arange(start, min(start + rows_per_chunk, n - 1))
            sizes = n - 1 - rows
            left = np.repeat(rows, sizes)
            offsets = np.arange(left.size) - np.repeat(np.cumsum(sizes) - sizes, sizes)
            right = left + 1 + offsets
            yield left, right


class BallSearchAccum(VariogramAccumAlgo):
    """
    Visit only pairs closer than the maximum lag, found with a k-d tree.

    Requires floating point coordinates and a Minkowski distance.
    """

    def candidate_pairs(self, coords):
        tree = cKDTree(np.asarray(coords, dtype=float))
        # pad the radius so rounding in the tree never drops a pair at maxlag
        radius = self.maxlag * (1 + 1e-9) + 1e-12
        pairs = tree.query_pairs(radius, p=self.distance.p, output_type="ndarray")
        order = np.lexsort((pairs[:, 1], pairs[:, 0]))
        pairs = pairs[order]
        yield pairs[:, 0].astype(np.intp), pairs[:, 1].astype(np.intp)


ALGORITHMS = {
    "full": FullSearchAccum,
    "ball": BallSearchAccum,
}


def get_algorithm(name: str, nlags: int, maxlag: float, distance: Metric,
                  coords: Optional[np.ndarray] = None) -> VariogramAccumAlgo:
    """
    Build the accumulation algorithm for a tag.

    Ball search falls back to full search with a warning when the
    coordinates are not floating point or the distance is not Minkowski.
    """
    if isinstance(name, VariogramAccumAlgo):
        return name
    key = str(name).lower()
    if key not in ALGORITHMS:
        raise ValueError(f"Unknown algorithm: {name}. Available: {sorted(ALGORITHMS)}")

    if key == "ball" and force_fullsearch():
        key = "full"

    if key == "ball":
        if coords is not None and not np.issubdtype(np.asarray(coords).dtype, np.floating):
            warnings.warn("Ball search requires floating point coordinates. Falling back to full search.")
            key = "full"
        elif not distance.is_minkowski:
            warnings.warn(f"Ball search requires a Minkowski distance, got {distance}. "
                          "Falling back to full search.")
            key = "full"

    return ALGORITHMS[key](nlags, maxlag, distance)


def accumulate(data: SpatialData, var1: VariableName, var2: Optional[VariableName],
               estimator: VariogramEstimator,
               algo: VariogramAccumAlgo) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Accumulate lag sums, estimator sums and pair counts per lag bin.

    Parameters
    ----------
    data : SpatialData
        Spatial data
    var1, var2 : str or sequence of str
        Variables; ``var2=None`` gives the auto-variogram of ``var1``
    estimator : VariogramEstimator
        Estimator providing the per-pair formula
    algo : VariogramAccumAlgo
        Accumulation algorithm

    Returns
    -------
    xsums, ysums, counts : np.ndarray
        Arrays of length ``nlags``
    """
    nlags, maxlag, distance = algo.nlags, algo.maxlag, algo.distance
    delta = maxlag / nlags

    coords = data.coordinates
    z1 = data.variable(var1)
    z2 = z1 if var2 is None else data.variable(var2)
    if z1.shape != z2.shape:
        raise ValueError(f"Variables {var1} and {var2} must have the same number of components")

    lag_chunks, h_chunks, v_chunks = [], [], []
    duplicates = False
    undefined = 0
    for left, right in algo.candidate_pairs(coords):
        if left.size == 0:
            continue
        h = distance.paired(coords[left], coords[right])
        inside = h <= maxlag
        left, right, h = left[inside], right[inside], h[inside]

        lag = np.ceil(h / delta).astype(np.intp)
        if np.any(lag == 0):
            duplicates = True

        v = estimator.formula(z1[left], z1[right], z2[left], z2[right])
        in_range = (lag > 0) & (lag <= nlags)
        missing = (np.isnan(z1[left]).any(axis=1) | np.isnan(z1[right]).any(axis=1) |
                   np.isnan(z2[left]).any(axis=1) | np.isnan(z2[right]).any(axis=1))
        undefined += int(np.sum(in_range & np.isnan(v) & ~missing))
        keep = in_range & ~np.isnan(v)
        lag_chunks.append(lag[keep])
        h_chunks.append(h[keep])
        v_chunks.append(v[keep])

    if duplicates:
        warnings.warn("Duplicate coordinates found, pairs at zero lag are ignored.")
    if undefined:
        warnings.warn(f"{undefined} pairs excluded: {estimator.name} estimator is undefined "
                      "for negative increment products.")

    if lag_chunks:
        bins = np.concatenate(lag_chunks) - 1
        hs = np.concatenate(h_chunks)
        vs = np.concatenate(v_chunks)
    else:
        bins = np.zeros(0, dtype=np.intp)
        hs = vs = np.zeros(0)

    counts = np.bincount(bins, minlength=nlags)
    xsums = np.bincount(bins, weights=hs, minlength=nlags)
    ysums = np.bincount(bins, weights=vs, minlength=nlags)
    return xsums, ysums, counts
