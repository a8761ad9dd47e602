"""
Test cases for dataset generation and loading.
"""

import pytest
import numpy as np
import pandas as pd

import sys
import os
# Add parent directory to path to find pyvariography package
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from pyvariography.datasets import (
    smooth_sequence, generate_gaussian_field, generate_anisotropic_field,
    load_example_spatial_data, create_toy_example
)


class TestGaussianField:
    """Test gridded field generation."""

    def test_structure(self):
        data = generate_gaussian_field(nx=10, ny=8, seed=1)

        assert isinstance(data, pd.DataFrame)
        assert len(data) == 80
        for col in ["x", "y", "z"]:
            assert col in data.columns
        assert data["x"].nunique() == 10
        assert data["y"].nunique() == 8
        assert pd.api.types.is_float_dtype(data["x"])

    def test_reproducibility(self):
        a = generate_gaussian_field(nx=10, ny=10, seed=5)
        b = generate_gaussian_field(nx=10, ny=10, seed=5)
        c = generate_gaussian_field(nx=10, ny=10, seed=6)
        pd.testing.assert_frame_equal(a, b)
        assert not np.allclose(a["z"], c["z"])

    def test_variance(self):
        data = generate_gaussian_field(nx=20, ny=20, variance=4.0, seed=2)
        assert data["z"].var(ddof=0) == pytest.approx(4.0)

    def test_missing_values(self):
        data = generate_gaussian_field(nx=10, ny=10, missing_rate=0.2, seed=3)
        assert data["z"].isna().sum() == 20

    def test_nugget_increases_variance(self):
        smooth = generate_gaussian_field(nx=20, ny=20, seed=4)
        noisy = generate_gaussian_field(nx=20, ny=20, nugget=1.0, seed=4)
        assert noisy["z"].var() > smooth["z"].var()


class TestAnisotropicField:
    """Test anisotropic field generation."""

    def test_grid_spacing(self):
        data = generate_anisotropic_field(n=6, ratio=3.0, seed=1)
        assert len(data) == 36
        np.testing.assert_allclose(np.unique(data["x"]), 3.0 * np.arange(6))
        np.testing.assert_allclose(np.unique(data["y"]), np.arange(6))

    def test_separable(self):
        data = generate_anisotropic_field(n=6, seed=1)
        z = data["z"].to_numpy().reshape(6, 6)
        # z(i, j) = s(i) + s(j) is symmetric in (i, j)
        np.testing.assert_allclose(z, z.T)

    def test_smooth_sequence(self):
        s = smooth_sequence(100, correlation_length=3.0, seed=0)
        assert s.shape == (100,)
        assert s.mean() == pytest.approx(0.0, abs=1e-12)
        assert s.std() == pytest.approx(1.0)
        # neighbors are strongly correlated
        assert np.corrcoef(s[:-1], s[1:])[0, 1] > 0.8


class TestExampleData:
    """Test example dataset loading."""

    @pytest.mark.parametrize("name", ["gaussian", "anisotropic", "missing"])
    def test_load_example(self, name):
        data = load_example_spatial_data(name)
        assert isinstance(data, pd.DataFrame)
        assert {"x", "y", "z"} <= set(data.columns)

    def test_unknown_dataset(self):
        with pytest.raises(ValueError, match="Unknown dataset"):
            load_example_spatial_data("wheat")

    def test_toy_example(self):
        data = create_toy_example()
        assert len(data) == 48
        assert not data["z"].isna().any()
