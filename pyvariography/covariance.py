"""
Covariance functions derived from stationary variograms.

``cov(x₁, x₂) = sill(γ) - γ(x₁, x₂)``
"""

from typing import Optional, Type

from .sampling import pairwise as variogram_pairwise
from .theoretical import (
    CircularVariogram,
    CubicVariogram,
    ExponentialVariogram,
    GaussianVariogram,
    MaternVariogram,
    PentasphericalVariogram,
    SineHoleVariogram,
    SphericalVariogram,
    Variogram,
)


class Covariance:
    """
    Covariance function of a stationary variogram.

    Parameters
    ----------
    *args, **kwargs
        A Variogram instance, or arguments forwarded to the variogram family
        of the subclass
    """

    variogram_class: Optional[Type[Variogram]] = None

    def __init__(self, *args, **kwargs):
        if len(args) == 1 and not kwargs and isinstance(args[0], Variogram):
            gamma = args[0]
        elif self.variogram_class is not None:
            gamma = self.variogram_class(*args, **kwargs)
        else:
            raise ValueError("Covariance requires a Variogram")
        if not gamma.is_stationary:
            raise ValueError(f"Covariance is undefined for non-stationary {type(gamma).__name__}")
        self.variogram = gamma

    @property
    def sill(self):
        return self.variogram.sill

    def __call__(self, x1, x2):
        return self.variogram.sill - self.variogram(x1, x2)

    def pairwise(self, domain, domain2=None, seed: Optional[int] = None):
        """Covariance matrix between the elements of one or two domains."""
        return self.variogram.sill - variogram_pairwise(self.variogram, domain, domain2, seed=seed)

    def __repr__(self):
        return f"{type(self).__name__}({self.variogram!r})"


class CircularCovariance(Covariance):
    variogram_class = CircularVariogram


class CubicCovariance(Covariance):
    variogram_class = CubicVariogram


class ExponentialCovariance(Covariance):
    variogram_class = ExponentialVariogram


class GaussianCovariance(Covariance):
    variogram_class = GaussianVariogram


class MaternCovariance(Covariance):
    variogram_class = MaternVariogram


class PentasphericalCovariance(Covariance):
    variogram_class = PentasphericalVariogram


class SineHoleCovariance(Covariance):
    variogram_class = SineHoleVariogram


class SphericalCovariance(Covariance):
    variogram_class = SphericalVariogram
