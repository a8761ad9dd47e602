"""
Test cases for directional, planar and varioplane estimation.
"""

import pytest
import numpy as np
import pandas as pd

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from pyvariography.geodata import SpatialData, georef
from pyvariography.control import VariogramControl
from pyvariography.empirical import EmpiricalVariogram
from pyvariography.partition import (
    DirectionPartition, PlanePartition, partition, partition_indices,
    directional_variogram, planar_variogram
)
from pyvariography.varioplane import (
    EmpiricalVarioplane, empirical_varioplane, householder_basis, spheredir
)
from pyvariography.theoretical import GaussianVariogram
from pyvariography.fitting import fit
from pyvariography.datasets import generate_gaussian_field, generate_anisotropic_field


def grid_data(nx, ny, seed=0):
    df = generate_gaussian_field(nx=nx, ny=ny, correlation_length=2.0, seed=seed)
    return georef(df, ("x", "y"))


class TestPartitions:
    """Test partition methods."""

    def test_direction_groups_grid_rows(self):
        data = grid_data(5, 4)
        groups = partition_indices(data.coordinates, DirectionPartition((1.0, 0.0)))
        assert len(groups) == 4
        for group in groups:
            assert len(group) == 5
            assert np.all(np.diff(group) > 0)
            assert np.ptp(data.coordinates[group, 1]) == 0

    def test_plane_groups_match_direction_groups_in_2d(self):
        data = grid_data(5, 4)
        by_plane = partition_indices(data.coordinates, PlanePartition((0.0, 1.0)))
        by_direction = partition_indices(data.coordinates, DirectionPartition((1.0, 0.0)))
        assert len(by_plane) == len(by_direction)
        for a, b in zip(by_plane, by_direction):
            np.testing.assert_array_equal(a, b)

    def test_partition_covers_all_elements(self):
        rng = np.random.default_rng(4)
        data = SpatialData(pd.DataFrame({"z": rng.random(50)}), rng.random((50, 3)))
        subsets = partition(data, DirectionPartition((1.0, 1.0, 0.0), tol=0.2))
        assert sum(len(s) for s in subsets) == 50

    def test_invalid_vectors(self):
        with pytest.raises(ValueError, match="non-zero"):
            DirectionPartition((0.0, 0.0))
        with pytest.raises(ValueError, match="non-zero"):
            PlanePartition((0.0, 0.0, 0.0))

        data = grid_data(3, 3)
        with pytest.raises(ValueError, match="dimension"):
            partition(data, DirectionPartition((1.0, 0.0, 0.0)))


class TestDirectionalVariogram:
    """Test directional and planar variograms."""

    def test_collinear_data_equals_omnidirectional(self):
        rng = np.random.default_rng(8)
        x = np.sort(rng.random(40) * 10)
        df = pd.DataFrame({"x": x, "y": np.zeros(40), "z": rng.normal(size=40)})
        data = georef(df, ("x", "y"))

        g = EmpiricalVariogram.from_data(data, "z", maxlag=3.0, nlags=6)
        gd = directional_variogram((1.0, 0.0), data, "z", maxlag=3.0, nlags=6)
        for a, b in zip(g.values(), gd.values()):
            np.testing.assert_allclose(a, b)

    @pytest.mark.parametrize("normal", [(0.0, 1.0), (1.0, 1.0), (1.0, 0.0)])
    def test_planar_equals_rotated_directional_in_2d(self, normal):
        data = grid_data(15, 12, seed=1)
        direction = (-normal[1], normal[0])

        gp = planar_variogram(normal, data, "z", maxlag=5.0, nlags=5)
        gd = directional_variogram(direction, data, "z", maxlag=5.0, nlags=5)
        for a, b in zip(gp.values(), gd.values()):
            np.testing.assert_allclose(a, b, rtol=1e-10)

    def test_default_maxlag_from_whole_domain(self):
        data = grid_data(10, 10)
        gd = directional_variogram((1.0, 0.0), data, "z")
        assert gd.maxlag == pytest.approx(0.1 * data.diagonal())

    def test_no_valid_subset(self):
        df = pd.DataFrame({"x": [0.0, 1.0, 2.0], "y": [0.0, 1.0, 2.0], "z": [1.0, 2.0, 3.0]})
        data = georef(df, ("x", "y"))
        with pytest.raises(ValueError, match="Invalid partition"):
            directional_variogram((1.0, 0.0), data, "z", maxlag=1.0)

    def test_parallel_equals_sequential(self):
        data = grid_data(15, 12, seed=3)
        serial = directional_variogram((1.0, 0.0), data, "z", maxlag=5.0, nlags=5, n_jobs=1)
        parallel = directional_variogram((1.0, 0.0), data, "z", maxlag=5.0, nlags=5, n_jobs=2)
        for a, b in zip(serial.values(), parallel.values()):
            np.testing.assert_array_equal(a, b)

        control = VariogramControl(n_jobs=2)
        from_control = directional_variogram((1.0, 0.0), data, "z", maxlag=5.0, nlags=5,
                                             control=control)
        for a, b in zip(serial.values(), from_control.values()):
            np.testing.assert_array_equal(a, b)

    def test_geometric_anisotropy(self):
        """Ranges fitted along x and y recover the 3:1 anisotropy ratio."""
        df = generate_anisotropic_field(n=40, ratio=3.0, correlation_length=2.0, seed=2024)
        data = georef(df, ("x", "y"))

        gx = directional_variogram((1.0, 0.0), data, "z", maxlag=37.5, nlags=10)
        gy = directional_variogram((0.0, 1.0), data, "z", maxlag=12.5, nlags=10)

        np.testing.assert_array_equal(gx.counts, gy.counts)
        np.testing.assert_allclose(gx.abscissa, 3 * gy.abscissa, rtol=1e-10)
        np.testing.assert_allclose(gx.ordinate, gy.ordinate, rtol=1e-8)

        rx = fit(GaussianVariogram, gx).range
        ry = fit(GaussianVariogram, gy).range
        assert rx / ry == pytest.approx(3.0, rel=0.05)


class TestVarioplane:
    """Test varioplane estimation."""

    def test_angles_and_size(self):
        data = grid_data(12, 12, seed=3)
        vp = empirical_varioplane(data, "z", nangs=5, maxlag=4.0, nlags=4)
        assert isinstance(vp, EmpiricalVarioplane)
        assert len(vp) == 5
        assert vp.angles[0] == 0.0
        assert vp.angles[-1] == pytest.approx(np.pi)
        for theta, g in vp:
            assert g.nlags == 4

    def test_first_angle_matches_directional(self):
        data = grid_data(12, 12, seed=3)
        vp = empirical_varioplane(data, "z", nangs=3, maxlag=4.0, nlags=4)
        gd = directional_variogram((1.0, 0.0), data, "z", dtol=0.5, maxlag=4.0, nlags=4)
        for a, b in zip(vp.variograms[0].values(), gd.values()):
            np.testing.assert_allclose(a, b)

    def test_3d_varioplane(self):
        x, y, z = np.meshgrid(np.arange(5.0), np.arange(5.0), np.arange(3.0), indexing="ij")
        coords = np.column_stack([x.ravel(), y.ravel(), z.ravel()])
        rng = np.random.default_rng(12)
        data = SpatialData(pd.DataFrame({"v": rng.normal(size=len(coords))}), coords)

        vp = empirical_varioplane(data, "v", nangs=3, maxlag=3.0, nlags=3)
        assert len(vp) == 3
        assert vp.variograms[0].counts.sum() > 0

    def test_invalid_inputs(self):
        data = grid_data(5, 5)
        with pytest.raises(ValueError, match="angles"):
            empirical_varioplane(data, "z", nangs=1)

        data1d = SpatialData(pd.DataFrame({"z": [1.0, 2.0, 3.0]}), np.array([[0.0], [1.0], [2.0]]))
        with pytest.raises(ValueError, match="2D and 3D"):
            empirical_varioplane(data1d, "z")

    def test_repr_elides_angles(self):
        data = grid_data(10, 10, seed=5)
        vp = empirical_varioplane(data, "z", nangs=8, maxlag=3.0, nlags=3)
        text = repr(vp)
        assert "⋮" in text
        assert text.count("└─") == 6


class TestPlaneBasis:
    """Test plane basis construction."""

    @pytest.mark.parametrize("normal", [
        (0.0, 0.0, 1.0), (0.0, 0.0, -1.0), (1.0, 0.0, 0.0), (0.0, 1.0, 0.0),
        (1.0, 2.0, 3.0), (-0.3, 0.1, -0.9),
    ])
    def test_householder_orthonormal(self, normal):
        n = np.asarray(normal) / np.linalg.norm(normal)
        u, v = householder_basis(normal)
        assert u @ n == pytest.approx(0.0, abs=1e-12)
        assert v @ n == pytest.approx(0.0, abs=1e-12)
        assert u @ v == pytest.approx(0.0, abs=1e-12)
        assert np.linalg.norm(u) == pytest.approx(1.0)
        assert np.linalg.norm(v) == pytest.approx(1.0)

    def test_spheredir(self):
        np.testing.assert_allclose(spheredir(0, 0), [0.0, 0.0, 1.0])
        np.testing.assert_allclose(spheredir(90, 0), [1.0, 0.0, 0.0], atol=1e-12)
        np.testing.assert_allclose(spheredir(90, 90), [0.0, 1.0, 0.0], atol=1e-12)
