"""
pyVariography: empirical and theoretical variograms

A Python library to estimate variograms from spatial data, fit theoretical
variogram models and evaluate them between points and geometries.
"""

from .control import VariogramControl
from .geodata import SpatialData, georef
from .metrics import Euclidean, Cityblock, Chebyshev, Minkowski, Haversine
from .estimators import MatheronEstimator, CressieEstimator
from .algorithms import FullSearchAccum, BallSearchAccum
from .empirical import EmpiricalVariogram, merge
from .partition import (
    DirectionPartition,
    PlanePartition,
    partition,
    directional_variogram,
    planar_variogram,
)
from .varioplane import EmpiricalVarioplane, empirical_varioplane, spheredir
from .theoretical import (
    MetricBall,
    Variogram,
    GaussianVariogram,
    ExponentialVariogram,
    SphericalVariogram,
    CubicVariogram,
    PentasphericalVariogram,
    CircularVariogram,
    SineHoleVariogram,
    MaternVariogram,
    NuggetEffect,
    PowerVariogram,
    NestedVariogram,
    add,
    scale,
    structures,
)
from .fitting import fit, FITTABLE, WeightedLeastSquares
from .geometry import Segment, Quadrangle, Hexahedron
from .sampling import variosample, pairwise
from .covariance import Covariance

__version__ = "0.1.0"
__author__ = "pyVariography contributors"

__all__ = [
    "VariogramControl",
    "SpatialData",
    "georef",
    "Euclidean",
    "Cityblock",
    "Chebyshev",
    "Minkowski",
    "Haversine",
    "MatheronEstimator",
    "CressieEstimator",
    "FullSearchAccum",
    "BallSearchAccum",
    "EmpiricalVariogram",
    "merge",
    "DirectionPartition",
    "PlanePartition",
    "partition",
    "directional_variogram",
    "planar_variogram",
    "EmpiricalVarioplane",
    "empirical_varioplane",
    "spheredir",
    "MetricBall",
    "Variogram",
    "GaussianVariogram",
    "ExponentialVariogram",
    "SphericalVariogram",
    "CubicVariogram",
    "PentasphericalVariogram",
    "CircularVariogram",
    "SineHoleVariogram",
    "MaternVariogram",
    "NuggetEffect",
    "PowerVariogram",
    "NestedVariogram",
    "add",
    "scale",
    "structures",
    "fit",
    "FITTABLE",
    "WeightedLeastSquares",
    "Segment",
    "Quadrangle",
    "Hexahedron",
    "variosample",
    "pairwise",
    "Covariance",
]
