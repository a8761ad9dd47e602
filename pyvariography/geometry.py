"""
Parametric geometries used for block (regularized) variogram evaluation.

Segments, quadrangles and hexahedra are parametrized on the unit interval,
square and cube respectively. Arbitrary 2D regions are represented with
shapely polygons.
"""

from abc import ABC, abstractmethod
from typing import Tuple

import numpy as np
from shapely.geometry.base import BaseGeometry


class Geometry(ABC):
    """
    Geometry given by its vertices and a multilinear parametrization.

    Parameters
    ----------
    *vertices : array-like
        Vertex coordinates
    """

    paramdim = 0
    nvertices = 0

    def __init__(self, *vertices):
        if len(vertices) != self.nvertices:
            raise ValueError(f"{type(self).__name__} requires {self.nvertices} vertices, got {len(vertices)}")
        pts = np.array([np.asarray(v, dtype=float) for v in vertices])
        if pts.ndim != 2:
            raise ValueError("Vertices must have the same dimension")
        pts.setflags(write=False)
        self.vertices = pts

    @property
    def embed_dim(self) -> int:
        return self.vertices.shape[1]

    @abstractmethod
    def __call__(self, *params) -> np.ndarray:
        """Point at parametric coordinates in [0, 1]."""

    @abstractmethod
    def measure(self) -> float:
        """Length, area or volume."""

    def bounding_box(self) -> Tuple[np.ndarray, np.ndarray]:
        return self.vertices.min(axis=0), self.vertices.max(axis=0)

    def sides(self) -> np.ndarray:
        lower, upper = self.bounding_box()
        return upper - lower

    def centroid(self) -> np.ndarray:
        return self(*([0.5] * self.paramdim))

    def param_sides(self) -> np.ndarray:
        """Longest edge along each parametric direction."""
        corners = _unit_corners(self.paramdim)
        sides = np.zeros(self.paramdim)
        for i, j in zip(*np.triu_indices(len(corners), k=1)):
            diff = corners[i] != corners[j]
            if diff.sum() == 1:
                axis = int(np.argmax(diff))
                length = np.linalg.norm(self.vertices[i] - self.vertices[j])
                sides[axis] = max(sides[axis], length)
        return sides

    def shrink(self, lo: float = 0.05, hi: float = 0.95) -> "Geometry":
        """Same geometry restricted to the parametric box [lo, hi]^paramdim."""
        corners = _unit_corners(self.paramdim)
        params = np.where(corners == 0, lo, hi)
        return type(self)(*[self(*p) for p in params])

    def regular_points(self, sizes) -> np.ndarray:
        """Points on a regular grid of the parametric domain, endpoints included."""
        axes = [np.linspace(0.0, 1.0, int(n)) if n > 1 else np.array([0.5]) for n in sizes]
        grid = np.meshgrid(*axes, indexing="ij")
        params = np.column_stack([g.ravel() for g in grid])
        return np.array([self(*p) for p in params])

    def __eq__(self, other):
        return type(self) is type(other) and np.array_equal(self.vertices, other.vertices)

    def __hash__(self):
        return hash((type(self), self.vertices.tobytes()))

    def __repr__(self):
        verts = ", ".join(str(tuple(v)) for v in self.vertices.tolist())
        return f"{type(self).__name__}({verts})"


def _unit_corners(paramdim: int) -> np.ndarray:
    # vertex order: counter-clockwise in (u, v), then bottom/top in w
    square = np.array([[0, 0], [1, 0], [1, 1], [0, 1]])
    if paramdim == 1:
        return np.array([[0], [1]])
    if paramdim == 2:
        return square
    return np.vstack([np.column_stack([square, np.zeros(4)]),
                      np.column_stack([square, np.ones(4)])])


class Segment(Geometry):
    """Segment between two points."""

    paramdim = 1
    nvertices = 2

    def __call__(self, t):
        a, b = self.vertices
        return a + t * (b - a)

    def measure(self):
        a, b = self.vertices
        return float(np.linalg.norm(b - a))


class Quadrangle(Geometry):
    """Quadrangle with vertices in counter-clockwise order, bilinear parametrization."""

    paramdim = 2
    nvertices = 4

    def __call__(self, u, v):
        p1, p2, p3, p4 = self.vertices
        return (1 - u) * (1 - v) * p1 + u * (1 - v) * p2 + u * v * p3 + (1 - u) * v * p4

    def measure(self):
        p1, p2, p3, p4 = self.vertices
        return _triangle_area(p1, p2, p3) + _triangle_area(p1, p3, p4)


class Hexahedron(Geometry):
    """
    Hexahedron with trilinear parametrization.

    Vertices 1-4 form the bottom face and 5-8 the top face, both in
    counter-clockwise order.
    """

    paramdim = 3
    nvertices = 8

    def __call__(self, u, v, w):
        p = self.vertices
        bottom = (1 - u) * (1 - v) * p[0] + u * (1 - v) * p[1] + u * v * p[2] + (1 - u) * v * p[3]
        top = (1 - u) * (1 - v) * p[4] + u * (1 - v) * p[5] + u * v * p[6] + (1 - u) * v * p[7]
        return (1 - w) * bottom + w * top

    def jacobian(self, u, v, w) -> np.ndarray:
        p = self.vertices
        du = ((1 - w) * ((1 - v) * (p[1] - p[0]) + v * (p[2] - p[3])) +
              w * ((1 - v) * (p[5] - p[4]) + v * (p[6] - p[7])))
        dv = ((1 - w) * ((1 - u) * (p[3] - p[0]) + u * (p[2] - p[1])) +
              w * ((1 - u) * (p[7] - p[4]) + u * (p[6] - p[5])))
        dw = self(u, v, 1.0) - self(u, v, 0.0)
        return np.column_stack([du, dv, dw])

    def measure(self):
        # 2-point Gauss-Legendre quadrature is exact for the trilinear Jacobian
        nodes = 0.5 + np.array([-0.5, 0.5]) / np.sqrt(3)
        total = sum(abs(np.linalg.det(self.jacobian(u, v, w)))
                    for u in nodes for v in nodes for w in nodes)
        return float(total / 8)


def _triangle_area(a, b, c) -> float:
    ab, ac = b - a, c - a
    if ab.shape[0] == 2:
        return 0.5 * abs(ab[0] * ac[1] - ab[1] * ac[0])
    return 0.5 * float(np.linalg.norm(np.cross(ab, ac)))


def is_geometry(obj) -> bool:
    """Whether an object is a geometry rather than a point."""
    return isinstance(obj, Geometry) or (
        isinstance(obj, BaseGeometry) and obj.geom_type != "Point")


def bounding_sides(obj) -> np.ndarray:
    """Sides of the bounding box of a geometry or shapely region."""
    if isinstance(obj, Geometry):
        return obj.sides()
    minx, miny, maxx, maxy = obj.bounds
    return np.array([maxx - minx, maxy - miny])
