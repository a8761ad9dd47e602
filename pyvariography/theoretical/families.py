"""
Closed-form variogram families.

Stationary families share the form ``(s - n) f(h / r) + n [h > 0]`` where
``s`` is the total sill, ``n`` the nugget and ``r`` the radius of the
metric ball. Compact families reach ``f = 1`` at ``h >= r``.
"""

from typing import Optional, Union

import numpy as np
from scipy.special import gamma as gamma_fn, kv

from ..metrics import Metric, get_metric
from .base import MetricBall, Variogram


EPS = np.finfo(float).eps


class StationaryVariogram(Variogram):
    """
    Stationary variogram with range, sill and nugget.

    Parameters
    ----------
    range : float, default=1.0
        Range of the isotropic ball (ignored when ``ball`` is given)
    sill : float, default=1.0
        Total sill
    nugget : float, default=0.0
        Nugget effect
    ball : MetricBall, optional
        Custom (possibly anisotropic) metric ball
    distance : str or Metric, optional
        Metric of the isotropic ball built from ``range``
    """

    def __init__(self, range: float = 1.0, sill: float = 1.0, nugget: float = 0.0,
                 ball: Optional[MetricBall] = None,
                 distance: Union[str, Metric, None] = None):
        self.ball = ball if ball is not None else MetricBall(range, metric=distance)
        self._sill = float(sill)
        self._nugget = float(nugget)

    @property
    def sill(self):
        return self._sill

    @property
    def nugget(self):
        return self._nugget

    @property
    def range(self):
        return self.ball.range

    def _params(self):
        return {"ball": self.ball, "sill": self._sill, "nugget": self._nugget}

    def _shape(self, x: np.ndarray) -> np.ndarray:
        """Normalized structure ``f`` at scaled lags ``x = h / r``."""
        raise NotImplementedError

    def _scaled(self, h: np.ndarray, shift: float = 0.0) -> np.ndarray:
        r = self.ball.radius
        with np.errstate(divide="ignore", invalid="ignore"):
            x = (h + shift) / r
        return np.where(h > 0, x, shift / r if r > 0 else 0.0)

    def _lag(self, h):
        s, n = self._sill, self._nugget
        with np.errstate(over="ignore", invalid="ignore"):
            f = self._shape(self._scaled(h))
        return (s - n) * f + n * (h > 0)


class GaussianVariogram(StationaryVariogram):
    """Gaussian variogram ``f(x) = 1 - exp(-3x²)``."""

    def _lag(self, h):
        # small nugget floor for numerical stability at the origin
        s, n = self._sill, self._nugget + 1e-6
        x = self._scaled(h)
        with np.errstate(over="ignore", invalid="ignore"):
            f = 1 - np.exp(-3 * x ** 2)
        return (s - n) * f + n * (h > 0)


class ExponentialVariogram(StationaryVariogram):
    """Exponential variogram ``f(x) = 1 - exp(-3x)``."""

    def _shape(self, x):
        return 1 - np.exp(-3 * x)


class SphericalVariogram(StationaryVariogram):
    """Spherical variogram ``f(x) = 1.5x - 0.5x³`` for ``x < 1``."""

    def _shape(self, x):
        return np.where(x < 1, 1.5 * x - 0.5 * x ** 3, 1.0)


class CubicVariogram(StationaryVariogram):
    """Cubic variogram."""

    def _shape(self, x):
        poly = 7 * x ** 2 - 35 / 4 * x ** 3 + 7 / 2 * x ** 5 - 3 / 4 * x ** 7
        return np.where(x < 1, poly, 1.0)


class PentasphericalVariogram(StationaryVariogram):
    """Pentaspherical variogram."""

    def _shape(self, x):
        poly = 15 / 8 * x - 5 / 4 * x ** 3 + 3 / 8 * x ** 5
        return np.where(x < 1, poly, 1.0)


class CircularVariogram(StationaryVariogram):
    """Circular variogram."""

    def _shape(self, x):
        xc = np.clip(x, 0.0, 1.0)
        inside = 1 - 2 / np.pi * np.arccos(xc) + 2 / np.pi * xc * np.sqrt(1 - xc ** 2)
        return np.where(x < 1, inside, 1.0)


class SineHoleVariogram(StationaryVariogram):
    """
    Sine hole variogram ``f(x) = 1 - sin(πx) / (πx)``.

    The lag is shifted by machine precision to avoid 0/0 at the origin.
    """

    def _lag(self, h):
        s, n = self._sill, self._nugget
        x = self._scaled(h, shift=EPS)
        with np.errstate(over="ignore", invalid="ignore"):
            f = 1 - np.sin(np.pi * x) / (np.pi * x)
        f = np.where(np.isinf(x), 1.0, np.where(x == 0, 0.0, f))
        return (s - n) * f + n * (h > 0)


class MaternVariogram(StationaryVariogram):
    """
    Matérn variogram of order ``ν``.

    ``f(x) = 1 - 2^(1-ν)/Γ(ν) δ^ν K_ν(δ)`` with ``δ = 3√(2ν) x``. The lag
    is shifted by machine precision to avoid an explosion at the origin.

    Parameters
    ----------
    order : float, default=1.0
        Order ``ν`` of the Bessel function
    """

    def __init__(self, range: float = 1.0, sill: float = 1.0, nugget: float = 0.0,
                 order: float = 1.0, ball: Optional[MetricBall] = None,
                 distance: Union[str, Metric, None] = None):
        super().__init__(range=range, sill=sill, nugget=nugget, ball=ball, distance=distance)
        if order <= 0:
            raise ValueError(f"Matérn order must be positive, got {order}")
        self.order = float(order)

    def _params(self):
        params = super()._params()
        params["order"] = self.order
        return params

    def _lag(self, h):
        s, n, nu = self._sill, self._nugget, self.order
        x = self._scaled(h, shift=EPS)
        delta = np.sqrt(2 * nu) * 3 * x
        with np.errstate(over="ignore", invalid="ignore"):
            f = 1 - 2 ** (1 - nu) / gamma_fn(nu) * delta ** nu * kv(nu, delta)
        f = np.where(np.isinf(delta), 1.0, np.where(delta == 0, 0.0, f))
        return (s - n) * f + n * (h > 0)


class NuggetEffect(Variogram):
    """
    Pure nugget effect ``n [h > 0]``.

    Point evaluation uses the Euclidean distance; the range is 0.
    """

    def __init__(self, nugget: float = 1.0):
        self._nugget = float(nugget)
        self.ball = MetricBall(0.0)

    @property
    def sill(self):
        return self._nugget

    @property
    def nugget(self):
        return self._nugget

    @property
    def range(self):
        return 0.0

    def _params(self):
        return {"nugget": self._nugget}

    def replace(self, **changes):
        changes.pop("sill", None)
        changes.pop("range", None)
        return super().replace(**changes)

    def _lag(self, h):
        return self._nugget * (h > 0)

    def __repr__(self):
        return f"NuggetEffect(nugget={self._nugget:g})"


class PowerVariogram(Variogram):
    """
    Power variogram ``s h^a + n [h > 0]``.

    Not stationary: the sill and the range are infinite.

    Parameters
    ----------
    scaling : float, default=1.0
        Scaling ``s``
    exponent : float, default=1.0
        Exponent ``a`` in (0, 2]
    nugget : float, default=0.0
        Nugget effect
    distance : str or Metric, optional
        Metric used between points, Euclidean by default
    """

    stationary = False

    def __init__(self, scaling: float = 1.0, exponent: float = 1.0, nugget: float = 0.0,
                 distance: Union[str, Metric, None] = None):
        self.scaling = float(scaling)
        self.exponent = float(exponent)
        self._nugget = float(nugget)
        self.distance = get_metric(distance)

    @property
    def sill(self):
        return np.inf

    @property
    def nugget(self):
        return self._nugget

    @property
    def range(self):
        return np.inf

    @property
    def is_isotropic(self):
        return True

    def _params(self):
        return {"scaling": self.scaling, "exponent": self.exponent,
                "nugget": self._nugget, "distance": self.distance}

    def point_lags(self, A, B):
        return self.distance.paired(A, B)

    def lag_matrix(self, X, Y=None):
        return self.distance.pairwise(X, Y)

    def _lag(self, h):
        return self.scaling * h ** self.exponent + self._nugget * (h > 0)

    def __repr__(self):
        return (f"PowerVariogram(scaling={self.scaling:g}, exponent={self.exponent:g}, "
                f"nugget={self._nugget:g})")


VARIOGRAM_MODELS = {
    "circular": CircularVariogram,
    "cubic": CubicVariogram,
    "exponential": ExponentialVariogram,
    "gaussian": GaussianVariogram,
    "matern": MaternVariogram,
    "nugget": NuggetEffect,
    "pentaspherical": PentasphericalVariogram,
    "power": PowerVariogram,
    "sinehole": SineHoleVariogram,
    "spherical": SphericalVariogram,
}
