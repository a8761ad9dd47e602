"""
Nested variograms: linear combinations of variogram structures.

Combinations are built with the named constructors :func:`scale` and
:func:`add`, which preserve associativity, commutativity and
distributivity. Coefficients may be scalars or symmetric matrices (for
multivariate models).
"""

from typing import Sequence, Tuple

import numpy as np

from .base import Variogram
from .families import NuggetEffect, PowerVariogram


def _is_matrix(c) -> bool:
    return isinstance(c, np.ndarray) and c.ndim > 0


def _raw(value):
    if isinstance(value, np.ndarray) and value.ndim == 0:
        return float(value)
    return value


class NestedVariogram(Variogram):
    """
    Nested variogram ``γ = c₁γ₁ + c₂γ₂ + ⋯ + cₙγₙ``.

    Parameters
    ----------
    coefficients : sequence
        Scalars or symmetric matrices ``c₁, ..., cₙ``
    structures : sequence of Variogram
        Variogram models ``γ₁, ..., γₙ``; nested members are flattened
    """

    def __init__(self, coefficients: Sequence, structures: Sequence[Variogram]):
        if len(coefficients) != len(structures):
            raise ValueError("Number of coefficients and structures must match")
        if len(structures) == 0:
            raise ValueError("Nested variogram requires at least one structure")

        cs, gs = [], []
        for c, g in zip(coefficients, structures):
            c = np.array(c, dtype=float) if np.ndim(c) > 0 else c
            if _is_matrix(c) and (c.ndim != 2 or not np.allclose(c, c.T)):
                raise ValueError("Coefficients must be symmetric")
            if isinstance(g, NestedVariogram):
                cs.extend(np.multiply(c, ci) for ci in g.coefficients)
                gs.extend(g.structures)
            elif isinstance(g, Variogram):
                cs.append(c)
                gs.append(g)
            else:
                raise ValueError(f"Expected a Variogram, got {type(g).__name__}")

        self.coefficients = tuple(cs)
        self.structures = tuple(gs)

    def _combine(self, values):
        total = 0.0
        for c, v in zip(self.coefficients, values):
            total = total + (np.multiply.outer(v, c) if _is_matrix(c) else c * v)
        return _raw(total)

    def _lag(self, h):
        return self._combine(g._lag(h) for g in self.structures)

    def evaluate_points(self, A, B):
        return self._combine(g.evaluate_points(A, B) for g in self.structures)

    def evaluate_matrix(self, X, Y=None):
        total = 0.0
        for c, g in zip(self.coefficients, self.structures):
            G = g.evaluate_matrix(X, Y)
            total = total + (np.kron(G, c) if _is_matrix(c) else c * G)
        return total

    @property
    def sill(self):
        return _raw(sum(c * g.sill for c, g in zip(self.coefficients, self.structures)))

    @property
    def nugget(self):
        return _raw(sum(c * g.nugget for c, g in zip(self.coefficients, self.structures)))

    @property
    def range(self):
        return max(g.range for g in self.structures)

    @property
    def is_stationary(self):
        return all(g.is_stationary for g in self.structures)

    @property
    def is_isotropic(self):
        return all(g.is_isotropic for g in self.structures)

    def _params(self):
        return {"coefficients": self.coefficients, "structures": self.structures}

    def replace(self, **changes):
        params = self._params()
        params.update(changes)
        new = NestedVariogram(params["coefficients"], params["structures"])
        new.unit = self.unit
        return new

    def __eq__(self, other):
        if not isinstance(other, NestedVariogram):
            return NotImplemented
        if len(self.coefficients) != len(other.coefficients):
            return False
        same_cs = all(np.array_equal(a, b) for a, b in zip(self.coefficients, other.coefficients))
        return same_cs and self.structures == other.structures

    __hash__ = None

    def __repr__(self):
        terms = []
        for c, g in zip(self.coefficients, self.structures):
            coef = np.array2string(c, separator=", ") if _is_matrix(c) else f"{c:g}"
            terms.append(f"{coef} × {g!r}")
        return " + ".join(terms)


def scale(c, gamma: Variogram) -> NestedVariogram:
    """
    Scale a variogram by a scalar or symmetric matrix ``c``.

    Scaling a nested variogram distributes ``c`` over its coefficients.
    """
    if isinstance(gamma, NestedVariogram):
        return NestedVariogram([np.multiply(c, ci) if _is_matrix(c) or _is_matrix(ci) else c * ci
                                for ci in gamma.coefficients], gamma.structures)
    return NestedVariogram([c], [gamma])


def add(*gammas: Variogram) -> NestedVariogram:
    """
    Sum of variograms.

    Plain models enter with coefficient 1 and nested models contribute
    all their terms, in order.
    """
    if not gammas:
        raise ValueError("add requires at least one variogram")
    cs, gs = [], []
    for gamma in gammas:
        if isinstance(gamma, NestedVariogram):
            cs.extend(gamma.coefficients)
            gs.extend(gamma.structures)
        else:
            cs.append(1.0)
            gs.append(gamma)
    return NestedVariogram(cs, gs)


def _normalize(gamma: Variogram):
    if isinstance(gamma, PowerVariogram):
        return gamma.scaling, gamma.replace(scaling=1.0, nugget=0.0)
    return gamma.sill - gamma.nugget, gamma.replace(sill=1.0, nugget=0.0)


def structures(gamma: Variogram) -> Tuple[object, tuple, tuple]:
    """
    Decompose a variogram into its individual structures.

    Returns
    -------
    nugget : float or np.ndarray
        Total nugget ``cₒ``
    contributions : tuple
        Contribution of each non-trivial structure
    structures : tuple of Variogram
        Structures normalized to sill 1 and nugget 0; pure nugget effects
        are discarded

    Examples
    --------
    >>> g = add(SphericalVariogram(), scale(2, ExponentialVariogram()), NuggetEffect(10))
    >>> structures(g)
    (10.0, (1.0, 2.0), (SphericalVariogram(...), ExponentialVariogram(...)))
    """
    if isinstance(gamma, NestedVariogram):
        ks, gs = gamma.coefficients, gamma.structures
    else:
        ks, gs = (1.0,), (gamma,)

    c0 = _raw(sum(k * g.nugget for k, g in zip(ks, gs)))
    cs, normalized = [], []
    for k, g in zip(ks, gs):
        if isinstance(g, NuggetEffect):
            continue
        contribution, unit = _normalize(g)
        cs.append(_raw(k * contribution))
        normalized.append(unit)
    return c0, tuple(cs), tuple(normalized)
