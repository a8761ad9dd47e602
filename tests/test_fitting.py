"""
Test cases for variogram model fitting.
"""

import pytest
import numpy as np

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from pyvariography.geodata import georef
from pyvariography.metrics import Euclidean
from pyvariography.estimators import MatheronEstimator
from pyvariography.empirical import EmpiricalVariogram
from pyvariography.theoretical import (
    GaussianVariogram,
    ExponentialVariogram,
    SphericalVariogram,
    NuggetEffect,
    PowerVariogram,
)
from pyvariography.fitting import fit, fit_impl, FITTABLE, WeightedLeastSquares
from pyvariography.datasets import generate_gaussian_field


def synthetic_variogram(gamma, xmax, nbins=40, unit=None):
    """Empirical variogram sampled exactly from a theoretical model."""
    x = np.linspace(xmax / nbins, xmax, nbins)
    return EmpiricalVariogram(x, gamma(x), np.full(nbins, 10), Euclidean(),
                              MatheronEstimator(), maxlag=xmax, unit=unit)


class TestModelRecovery:
    """Test recovery of known parameters."""

    @pytest.mark.parametrize("V, xmax", [
        (GaussianVariogram, 20.0),
        (ExponentialVariogram, 40.0),
        (SphericalVariogram, 15.0),
    ])
    def test_recover_parameters(self, V, xmax):
        truth = V(range=6.0, sill=2.0, nugget=0.3)
        g = synthetic_variogram(truth, xmax)

        model = fit(V, g)
        assert isinstance(model, V)
        assert model.range == pytest.approx(6.0, rel=2e-2)
        assert model.sill == pytest.approx(2.0, rel=1e-2)
        assert model.nugget == pytest.approx(0.3, abs=2e-2)

    def test_error_near_zero_for_exact_model(self):
        g = synthetic_variogram(GaussianVariogram(range=4.0, sill=1.0), 12.0)
        _, err = fit(GaussianVariogram, g, return_error=True)
        assert err >= 0
        assert err < 1e-6

    def test_model_from_name(self):
        g = synthetic_variogram(SphericalVariogram(range=5.0), 10.0)
        assert isinstance(fit("spherical", g), SphericalVariogram)


class TestFixedAndBoundedParameters:
    """Test fixed values and upper bounds."""

    def setup_method(self):
        self.g = synthetic_variogram(GaussianVariogram(range=5.0, sill=1.5, nugget=0.2), 15.0)

    def test_fixed_range(self):
        model = fit(GaussianVariogram, self.g, range=4.2)
        assert model.range == 4.2

    def test_fixed_sill_and_nugget(self):
        model = fit(GaussianVariogram, self.g, sill=1.4, nugget=0.5)
        assert model.sill == 1.4
        assert model.nugget == 0.5

    def test_maximum_range(self):
        model = fit(GaussianVariogram, self.g, maxrange=3.0)
        assert model.range <= 3.0 + 1e-12

    def test_maximum_nugget(self):
        model = fit(GaussianVariogram, self.g, maxnugget=0.05)
        assert model.nugget <= 0.05 + 1e-12

    def test_nugget_below_sill(self):
        model = fit(ExponentialVariogram, self.g)
        assert model.nugget <= model.sill

    def test_invalid_bounds(self):
        with pytest.raises(ValueError, match="bounds"):
            fit(GaussianVariogram, self.g, sill=2.0, maxnugget=-1.0)


class TestModelSelection:
    """Test fitting several families at once."""

    def test_best_family_selected(self):
        g = synthetic_variogram(GaussianVariogram(range=6.0, sill=2.0), 20.0)
        model = fit([SphericalVariogram, GaussianVariogram, ExponentialVariogram], g)
        assert isinstance(model, GaussianVariogram)

    def test_stationary_is_minimum_over_families(self):
        g = synthetic_variogram(ExponentialVariogram(range=5.0, sill=1.0, nugget=0.1), 20.0)
        best, err = fit("stationary", g, return_error=True)
        assert isinstance(best, FITTABLE)
        for V in FITTABLE:
            _, err_v = fit(V, g, return_error=True)
            assert err <= err_v

    def test_not_fittable(self):
        g = synthetic_variogram(GaussianVariogram(), 3.0)
        with pytest.raises(ValueError, match="cannot be fitted"):
            fit(NuggetEffect, g)
        with pytest.raises(ValueError, match="cannot be fitted"):
            fit("power", g)
        with pytest.raises(ValueError, match="At least one"):
            fit([], g)
        with pytest.raises(ValueError, match="Unknown variogram model"):
            fit("linear", g)


class TestFittingAlgorithm:
    """Test weights and algorithm options."""

    def test_default_weights(self):
        algo = WeightedLeastSquares()
        w = algo.weights(np.array([1.0, 2.0]), np.array([1, 3]))
        np.testing.assert_allclose(w, [0.25, 0.75])

    def test_weight_function(self):
        g = synthetic_variogram(SphericalVariogram(range=4.0, sill=1.0), 10.0)
        model = fit(SphericalVariogram, g, lambda x: 1 / x ** 2)
        assert isinstance(model, SphericalVariogram)
        assert model.range == pytest.approx(4.0, rel=5e-2)

    def test_algorithm_instance(self):
        g = synthetic_variogram(SphericalVariogram(range=4.0), 10.0)
        result = fit_impl(SphericalVariogram, g, WeightedLeastSquares(max_iter=500))
        assert result.error >= 0
        assert isinstance(result.model, SphericalVariogram)

    def test_invalid_algorithm(self):
        g = synthetic_variogram(SphericalVariogram(range=4.0), 10.0)
        with pytest.raises(ValueError, match="Invalid fitting algorithm"):
            fit(SphericalVariogram, g, "wls")

    def test_empty_variogram(self):
        g = EmpiricalVariogram([0.5, 1.5], [0.0, 0.0], [0, 0], Euclidean(), MatheronEstimator())
        with pytest.raises(ValueError, match="no pairs"):
            fit(GaussianVariogram, g)

    def test_empty_bins_ignored(self):
        x = np.linspace(0.5, 10.0, 20)
        truth = SphericalVariogram(range=5.0, sill=1.0)
        y = truth(x)
        n = np.full(20, 5)
        n[::4] = 0
        y[::4] = 0.0
        g = EmpiricalVariogram(x, y, n, Euclidean(), MatheronEstimator())
        model = fit(SphericalVariogram, g)
        assert model.range == pytest.approx(5.0, rel=2e-2)


class TestFittingData:
    """Test fitting empirical variograms of synthetic fields."""

    def test_fit_gaussian_field(self):
        df = generate_gaussian_field(nx=30, ny=30, correlation_length=3.0, seed=7)
        data = georef(df, ("x", "y"), units={"z": "m"})
        g = EmpiricalVariogram.from_data(data, "z", maxlag=15.0, nlags=15)

        model = fit(GaussianVariogram, g)
        assert 0 < model.range <= np.max(g.abscissa) + 1e-12
        assert model.sill > 0
        assert model.unit == "m^2"

    def test_distance_carried_over(self):
        from pyvariography.metrics import Cityblock
        x = np.linspace(0.5, 10.0, 20)
        g = EmpiricalVariogram(x, ExponentialVariogram(range=4.0)(x), np.full(20, 3),
                               Cityblock(), MatheronEstimator())
        model = fit(ExponentialVariogram, g)
        assert model.ball.metric == Cityblock()
