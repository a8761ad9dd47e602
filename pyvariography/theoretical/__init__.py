"""
Theoretical variogram models.
"""

from .base import MetricBall, Variogram
from .families import (
    StationaryVariogram,
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
    VARIOGRAM_MODELS,
)
from .nested import NestedVariogram, add, scale, structures

__all__ = [
    "MetricBall",
    "Variogram",
    "StationaryVariogram",
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
    "VARIOGRAM_MODELS",
    "NestedVariogram",
    "add",
    "scale",
    "structures",
]
