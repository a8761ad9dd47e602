"""
Fitting theoretical variogram models to empirical variograms.

Models are fitted by box-constrained weighted least squares on the
parameters (range, sill, nugget). Any parameter may be fixed or given an
upper bound.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Optional, Sequence, Tuple, Type, Union

import numpy as np
from scipy.optimize import minimize

from .empirical import EmpiricalVariogram
from .theoretical import (
    CircularVariogram,
    CubicVariogram,
    ExponentialVariogram,
    GaussianVariogram,
    MaternVariogram,
    PentasphericalVariogram,
    SineHoleVariogram,
    SphericalVariogram,
    StationaryVariogram,
    VARIOGRAM_MODELS,
)


# Stationary families with (range, sill, nugget) parameters, in declaration
# order; ties in multi-model fitting go to the earliest entry
FITTABLE = (
    CircularVariogram,
    CubicVariogram,
    ExponentialVariogram,
    GaussianVariogram,
    MaternVariogram,
    PentasphericalVariogram,
    SineHoleVariogram,
    SphericalVariogram,
)


class VariogramFitAlgo(ABC):
    """Base class for variogram fitting algorithms."""

    @abstractmethod
    def weights(self, x: np.ndarray, counts: np.ndarray) -> np.ndarray:
        """Weight of each non-empty bin."""


@dataclass
class WeightedLeastSquares(VariogramFitAlgo):
    """
    Weighted least squares.

    Attributes
    ----------
    weightfun : callable, optional
        Function of the lags returning bin weights; by default bins are
        weighted by their share of the total number of pairs
    max_iter : int, default=1000
        Maximum number of optimizer iterations
    penalty : float, default=1e3
        Weight of the penalty keeping the nugget below the sill
    """
    weightfun: Optional[Callable[[np.ndarray], np.ndarray]] = None
    max_iter: int = 1000
    penalty: float = 1e3

    def weights(self, x, counts):
        if self.weightfun is not None:
            return np.asarray(self.weightfun(x), dtype=float)
        return counts / counts.sum()


@dataclass
class FitResult:
    """
    Outcome of fitting one model family.

    Attributes
    ----------
    model : StationaryVariogram
        Fitted variogram
    error : float
        Weighted sum of squared residuals at the solution
    success : bool
        Whether the optimizer reported convergence
    """
    model: StationaryVariogram
    error: float
    success: bool = True


ModelSpec = Union[str, Type[StationaryVariogram], Sequence[Type[StationaryVariogram]]]


def _resolve_models(model: ModelSpec) -> Tuple[Type[StationaryVariogram], ...]:
    if isinstance(model, str):
        key = model.lower()
        if key == "stationary":
            return FITTABLE
        if key not in VARIOGRAM_MODELS:
            raise ValueError(f"Unknown variogram model: {model}. Available: {sorted(VARIOGRAM_MODELS)}")
        candidates = (VARIOGRAM_MODELS[key],)
    elif isinstance(model, type):
        candidates = (model,)
    else:
        candidates = tuple(_resolve_models(m)[0] if isinstance(m, str) else m for m in model)
        if not candidates:
            raise ValueError("At least one variogram model is required")

    for V in candidates:
        if V not in FITTABLE:
            raise ValueError(f"{getattr(V, '__name__', V)} cannot be fitted; "
                             f"fittable models: {[M.__name__ for M in FITTABLE]}")
    return candidates


def fit_impl(V: Type[StationaryVariogram], g: EmpiricalVariogram,
             algo: WeightedLeastSquares, range: Optional[float] = None,
             sill: Optional[float] = None, nugget: Optional[float] = None,
             maxrange: Optional[float] = None, maxsill: Optional[float] = None,
             maxnugget: Optional[float] = None) -> FitResult:
    """
    Fit a single model family by weighted least squares.

    Parameters
    ----------
    V : type
        Variogram family
    g : EmpiricalVariogram
        Empirical variogram
    algo : WeightedLeastSquares
        Fitting algorithm
    range, sill, nugget : float, optional
        Fixed parameter values
    maxrange, maxsill, maxnugget : float, optional
        Upper bounds replacing the defaults (largest lag, largest ordinate)

    Returns
    -------
    FitResult
    """
    x, y, n = g.values()
    filled = n > 0
    if not np.any(filled):
        raise ValueError("Empirical variogram has no pairs, cannot fit a model")
    x, y, n = x[filled], np.asarray(y[filled], dtype=float), n[filled]
    w = algo.weights(x, n)

    xmax, ymax = float(np.max(x)), float(np.max(y))
    rmax = xmax if maxrange is None else maxrange
    smax = ymax if maxsill is None else maxsill
    nmax = ymax if maxnugget is None else maxnugget

    fixed = np.array([range, sill, nugget], dtype=object)
    is_fixed = np.array([v is not None for v in fixed])
    lower = np.array([v if v is not None else 0.0 for v in fixed], dtype=float)
    upper = np.array([v if v is not None else b for v, b in zip(fixed, (rmax, smax, nmax))],
                     dtype=float)
    guess = np.array([v if v is not None else b for v, b in zip(fixed, (rmax / 3, 0.95 * smax, 1e-6))],
                     dtype=float)
    if np.any(upper < lower):
        raise ValueError(f"Invalid parameter bounds: lower={lower}, upper={upper}")
    guess = np.clip(guess, lower, upper)

    # optimize in coordinates scaled by the bounds
    scales = np.where(upper > 0, upper, 1.0)
    yscale = ymax if ymax > 0 else 1.0
    distance = g.distance

    def build(theta):
        return V(range=theta[0], sill=theta[1], nugget=theta[2], distance=distance)

    def sse(theta):
        residuals = build(theta)(x) - y
        return float(np.sum(w * residuals ** 2))

    def objective(u):
        theta = u * scales
        excess = max(0.0, theta[2] - theta[1]) / yscale
        return sse(theta) / yscale ** 2 + algo.penalty * excess ** 2

    bounds = list(zip(lower / scales, upper / scales))
    result = minimize(objective, guess / scales, method="L-BFGS-B", bounds=bounds,
                      options={"maxiter": algo.max_iter, "ftol": 1e-15, "gtol": 1e-12})

    theta = np.clip(result.x * scales, lower, upper)
    theta[is_fixed] = lower[is_fixed]
    model = build(theta)
    if g.unit is not None:
        model = model.with_unit(g.unit)
    return FitResult(model=model, error=sse(theta), success=bool(result.success))


def fit(model: ModelSpec, g: EmpiricalVariogram,
        algo: Union[WeightedLeastSquares, Callable, None] = None, *,
        range: Optional[float] = None, sill: Optional[float] = None,
        nugget: Optional[float] = None, maxrange: Optional[float] = None,
        maxsill: Optional[float] = None, maxnugget: Optional[float] = None,
        return_error: bool = False):
    """
    Fit a theoretical variogram to an empirical variogram.

    Parameters
    ----------
    model : type, sequence of types or str
        Variogram family, several families, a registered model name, or
        'stationary' for every fittable family; with several families the
        one with the smallest error is returned
    g : EmpiricalVariogram
        Empirical variogram
    algo : WeightedLeastSquares or callable, optional
        Fitting algorithm; a callable is used as the weight function
    range, sill, nugget : float, optional
        Fixed parameter values
    maxrange, maxsill, maxnugget : float, optional
        Upper bounds of the free parameters
    return_error : bool, default=False
        Also return the weighted residual error

    Returns
    -------
    StationaryVariogram or (StationaryVariogram, float)

    Examples
    --------
    >>> g = EmpiricalVariogram.from_data(data, 'z')
    >>> gamma = fit(GaussianVariogram, g)
    >>> gamma, err = fit('stationary', g, return_error=True)
    """
    if algo is None:
        algo = WeightedLeastSquares()
    elif not isinstance(algo, VariogramFitAlgo):
        if not callable(algo):
            raise ValueError(f"Invalid fitting algorithm: {algo}")
        algo = WeightedLeastSquares(weightfun=algo)

    candidates = _resolve_models(model)
    results = [fit_impl(V, g, algo, range=range, sill=sill, nugget=nugget,
                        maxrange=maxrange, maxsill=maxsill, maxnugget=maxnugget)
               for V in candidates]
    errors = np.array([r.error for r in results])
    errors[~np.isfinite(errors)] = np.inf
    best = results[int(np.argmin(errors))]

    if return_error:
        return best.model, best.error
    return best.model
