"""
Empirical variograms estimated from spatial data.
"""

from functools import reduce
from typing import Optional, Sequence, Tuple

import numpy as np
from joblib import Parallel, delayed

from .algorithms import VariogramAccumAlgo, accumulate, get_algorithm
from .control import VariogramControl
from .estimators import VariogramEstimator, get_estimator
from .geodata import SpatialData, VariableName
from .metrics import Metric, get_metric


class EmpiricalVariogram:
    """
    Binned estimate of a (cross-)variogram.

    Instances are immutable values: the arrays are read-only and merging
    returns a new variogram.

    Parameters
    ----------
    abscissa : np.ndarray
        Mean lag of each bin (bin center for empty bins)
    ordinate : np.ndarray
        Variogram value of each bin (0 for empty bins)
    counts : np.ndarray
        Number of pairs in each bin
    distance : Metric
        Distance used to measure lags
    estimator : VariogramEstimator
        Estimator used to compute the ordinates
    maxlag : float, optional
        Maximum lag used to build the bins
    unit : str, optional
        Unit label of the ordinate

    Examples
    --------
    >>> data = georef(df, ('x', 'y'))
    >>> g = EmpiricalVariogram.from_data(data, 'z', nlags=10, maxlag=5.0)
    >>> x, y, n = g.values()
    """

    def __init__(self, abscissa, ordinate, counts, distance: Metric,
                 estimator: VariogramEstimator, maxlag: Optional[float] = None,
                 unit: Optional[str] = None):
        abscissa = np.array(abscissa, dtype=float)
        ordinate = np.array(ordinate, dtype=float)
        counts = np.array(counts, dtype=np.int64)
        if not (abscissa.shape == ordinate.shape == counts.shape) or abscissa.ndim != 1:
            raise ValueError("abscissa, ordinate and counts must be 1D arrays of equal length")
        for arr in (abscissa, ordinate, counts):
            arr.setflags(write=False)

        self._abscissa = abscissa
        self._ordinate = ordinate
        self._counts = counts
        self._distance = distance
        self._estimator = estimator
        self._maxlag = maxlag
        self._unit = unit

    @classmethod
    def from_data(cls, data: SpatialData, var1: VariableName,
                  var2: Optional[VariableName] = None, *,
                  nlags: Optional[int] = None,
                  maxlag: Optional[float] = None,
                  distance=None,
                  estimator=None,
                  algorithm=None,
                  control: Optional[VariogramControl] = None) -> "EmpiricalVariogram":
        """
        Estimate the variogram of ``var1`` (or the cross-variogram of
        ``var1`` and ``var2``) from spatial data.

        Parameters
        ----------
        data : SpatialData
            Georeferenced data
        var1 : str or sequence of str
            First variable
        var2 : str or sequence of str, optional
            Second variable, defaults to ``var1``
        nlags : int, optional
            Number of lag bins
        maxlag : float, optional
            Maximum lag, defaults to a fraction of the bounding box diagonal
        distance : str or Metric, optional
            Distance used to measure lags
        estimator : str or VariogramEstimator, optional
            'matheron' or 'cressie'
        algorithm : str or VariogramAccumAlgo, optional
            'full' or 'ball', or an accumulation instance whose nlags, maxlag
            and distance are used
        control : VariogramControl, optional
            Default settings; explicit arguments take precedence

        Returns
        -------
        EmpiricalVariogram
        """
        control = control or VariogramControl()
        if isinstance(algorithm, VariogramAccumAlgo):
            nlags, maxlag, distance = _adopt_algorithm(algorithm, nlags, maxlag, distance)
        nlags = control.nlags if nlags is None else nlags
        distance = get_metric(control.distance if distance is None else distance)
        estimator = get_estimator(control.estimator if estimator is None else estimator)
        algorithm = control.algorithm if algorithm is None else algorithm

        if len(data) < 2:
            raise ValueError("Variogram estimation requires at least 2 elements")
        if maxlag is None:
            maxlag = control.default_maxlag(data.diagonal())
        if nlags <= 0:
            raise ValueError(f"Number of lags must be positive, got {nlags}")
        if not maxlag > 0:
            raise ValueError(f"Maximum lag must be positive, got {maxlag}")

        algo = get_algorithm(algorithm, nlags, maxlag, distance, data.coordinates)
        xsums, ysums, counts = accumulate(data, var1, var2, estimator, algo)

        delta = maxlag / nlags
        centers = delta / 2 + delta * np.arange(nlags)
        filled = counts > 0
        abscissa = np.where(filled, xsums / np.where(filled, counts, 1), centers)
        ordinate = np.zeros(nlags)
        ordinate[filled] = estimator.normsum(ysums[filled], counts[filled])

        return cls(abscissa, ordinate, counts, distance, estimator,
                   maxlag=maxlag, unit=_ordinate_unit(data, var1, var2))

    @classmethod
    def from_partition(cls, subsets: Sequence[SpatialData], var1: VariableName,
                       var2: Optional[VariableName] = None, **kwargs) -> "EmpiricalVariogram":
        """
        Merge the variograms of several subsets of a dataset.

        Subsets with fewer than 2 elements are skipped. Pairs that straddle
        two subsets are not counted. The subset variograms are computed in
        ``n_jobs`` joblib workers (``control.n_jobs`` by default) and merged
        in subset order, so the result does not depend on ``n_jobs``.
        """
        valid = [subset for subset in subsets if len(subset) > 1]
        if not valid:
            raise ValueError("Invalid partition of data: no subset has 2 or more elements")
        n_jobs = kwargs.pop("n_jobs", None)
        if n_jobs is None:
            n_jobs = (kwargs.get("control") or VariogramControl()).n_jobs

        if n_jobs == 1 or len(valid) == 1:
            variograms = [cls.from_data(subset, var1, var2, **kwargs) for subset in valid]
        else:
            variograms = Parallel(n_jobs=n_jobs)(
                delayed(cls.from_data)(subset, var1, var2, **kwargs) for subset in valid
            )
        return reduce(merge, variograms)

    @property
    def abscissa(self) -> np.ndarray:
        return self._abscissa

    @property
    def ordinate(self) -> np.ndarray:
        return self._ordinate

    @property
    def counts(self) -> np.ndarray:
        return self._counts

    @property
    def distance(self) -> Metric:
        return self._distance

    @property
    def estimator(self) -> VariogramEstimator:
        return self._estimator

    @property
    def maxlag(self) -> Optional[float]:
        return self._maxlag

    @property
    def unit(self) -> Optional[str]:
        return self._unit

    @property
    def nlags(self) -> int:
        return len(self._abscissa)

    def values(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Abscissa, ordinate and counts."""
        return self._abscissa, self._ordinate, self._counts

    def merge(self, other: "EmpiricalVariogram") -> "EmpiricalVariogram":
        """Variogram of the union of the pairs of two variograms."""
        return merge(self, other)

    def summary(self) -> str:
        """Human readable summary."""
        x, y, n = self.values()
        unit = f" [{self._unit}]" if self._unit else ""
        lines = [
            f"{type(self).__name__}",
            f"  abscissa: [{x.min():.4g}, ..., {x.max():.4g}]",
            f"  ordinate: [{y.min():.4g}, ..., {y.max():.4g}]{unit}",
            f"  distance: {self._distance}",
            f"  estimator: {self._estimator.name}",
            f"  N° pairs: {int(n.sum())}",
        ]
        return "\n".join(lines)

    def __repr__(self):
        return self.summary()


def merge(a: EmpiricalVariogram, b: EmpiricalVariogram) -> EmpiricalVariogram:
    """
    Merge two empirical variograms computed on disjoint sets of pairs.

    The operation is commutative and associative up to floating point
    rounding. Both variograms must share the number of lags, the distance
    and the estimator.
    """
    if a.nlags != b.nlags:
        raise ValueError(f"Cannot merge variograms with {a.nlags} and {b.nlags} lags")
    if a.distance != b.distance:
        raise ValueError(f"Cannot merge variograms with distances {a.distance} and {b.distance}")
    if a.estimator != b.estimator:
        raise ValueError(f"Cannot merge variograms with estimators {a.estimator} and {b.estimator}")
    if a.maxlag is not None and b.maxlag is not None and not np.isclose(a.maxlag, b.maxlag):
        raise ValueError(f"Cannot merge variograms with maximum lags {a.maxlag} and {b.maxlag}")

    xa, ya, na = a.values()
    xb, yb, nb = b.values()
    n = na + nb
    filled = n > 0

    x = xa.copy()
    y = np.zeros(len(n))
    x[filled] = (xa[filled] * na[filled] + xb[filled] * nb[filled]) / n[filled]
    y[filled] = a.estimator.combine(ya[filled], na[filled], yb[filled], nb[filled])

    maxlag = a.maxlag if a.maxlag == b.maxlag else None
    unit = a.unit if a.unit == b.unit else None
    return EmpiricalVariogram(x, y, n, a.distance, a.estimator, maxlag=maxlag, unit=unit)


def _adopt_algorithm(algo: VariogramAccumAlgo, nlags, maxlag, distance):
    # an accumulation instance carries its own bins
    if nlags is not None and nlags != algo.nlags:
        raise ValueError(f"nlags={nlags} conflicts with {algo!r}")
    if maxlag is not None and not np.isclose(maxlag, algo.maxlag):
        raise ValueError(f"maxlag={maxlag} conflicts with {algo!r}")
    if distance is not None and get_metric(distance) != algo.distance:
        raise ValueError(f"distance={distance} conflicts with {algo!r}")
    return algo.nlags, algo.maxlag, algo.distance


def _ordinate_unit(data: SpatialData, var1, var2) -> Optional[str]:
    u1 = data.unit(var1)
    u2 = u1 if var2 is None else data.unit(var2)
    if u1 is None or u2 is None:
        return None
    return f"{u1}^2" if u1 == u2 else f"{u1}*{u2}"
