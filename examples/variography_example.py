#!/usr/bin/env python3
"""
pyVariography Example: Variography of Synthetic Spatial Fields

This script demonstrates the key capabilities of the pyVariography package
on synthetic gridded data. It shows how to:

1. Georeference a table of measurements
2. Estimate omnidirectional and directional empirical variograms
3. Fit theoretical models and select the best family
4. Detect geometric anisotropy with directional variograms
5. Build nested models and decompose them into structures
6. Evaluate block variograms and covariances between geometries
"""

import numpy as np
import sys
import os

# Add parent directory to path to find pyvariography package
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from pyvariography import (
    georef, EmpiricalVariogram, directional_variogram, empirical_varioplane,
    GaussianVariogram, SphericalVariogram, NuggetEffect, Quadrangle,
    fit, add, scale, structures, pairwise
)
from pyvariography.covariance import GaussianCovariance
from pyvariography.datasets import load_example_spatial_data


def main():
    """Main example demonstrating pyVariography capabilities."""

    print("=" * 80)
    print("pyVariography Example: Variography of Synthetic Spatial Fields")
    print("=" * 80)

    # -------------------------------------------------------------------------
    # 1. Load and georeference data
    # -------------------------------------------------------------------------
    print("\n1. Loading gridded field with missing values...")

    df = load_example_spatial_data("missing")
    data = georef(df, ("x", "y"), units={"z": "mm"})
    print(f"   - {data}")
    print(f"   - Missing values: {df['z'].isna().sum()}")

    # -------------------------------------------------------------------------
    # 2. Empirical variograms
    # -------------------------------------------------------------------------
    print("\n2. Estimating empirical variograms...")

    g = EmpiricalVariogram.from_data(data, "z", nlags=15, maxlag=20.0)
    print(g)

    g_robust = EmpiricalVariogram.from_data(data, "z", nlags=15, maxlag=20.0, estimator="cressie")
    print(f"   - Cressie ordinate at first lag: {g_robust.ordinate[0]:.4f}")

    # -------------------------------------------------------------------------
    # 3. Model fitting
    # -------------------------------------------------------------------------
    print("\n3. Fitting theoretical models...")

    gamma = fit(GaussianVariogram, g)
    print(f"   - Gaussian fit: {gamma}")

    best, err = fit("stationary", g, return_error=True)
    print(f"   - Best family: {type(best).__name__} (error {err:.3e})")

    fixed = fit(SphericalVariogram, g, nugget=0.0, maxrange=15.0)
    print(f"   - Spherical without nugget: {fixed}")

    # -------------------------------------------------------------------------
    # 4. Anisotropy
    # -------------------------------------------------------------------------
    print("\n4. Directional variograms on an anisotropic field...")

    aniso = georef(load_example_spatial_data("anisotropic"), ("x", "y"))
    gx = directional_variogram((1.0, 0.0), aniso, "z", maxlag=60.0, nlags=10)
    gy = directional_variogram((0.0, 1.0), aniso, "z", maxlag=20.0, nlags=10)
    rx = fit(GaussianVariogram, gx).range
    ry = fit(GaussianVariogram, gy).range
    print(f"   - Range along x: {rx:.2f}, along y: {ry:.2f}, ratio {rx / ry:.2f}")

    vp = empirical_varioplane(aniso, "z", nangs=7, maxlag=20.0, nlags=5)
    print(vp)

    # -------------------------------------------------------------------------
    # 5. Nested models
    # -------------------------------------------------------------------------
    print("\n5. Nested models...")

    nested = add(NuggetEffect(0.1), scale(0.6, GaussianVariogram(range=5.0)),
                 scale(0.3, SphericalVariogram(range=15.0)))
    print(f"   - Model: {nested}")
    c0, cs, gs = structures(nested)
    print(f"   - Nugget: {c0:.2f}, contributions: {cs}")
    print(f"   - Sill: {nested.sill:.2f}, range: {nested.range:.1f}")

    # -------------------------------------------------------------------------
    # 6. Block variograms and covariances
    # -------------------------------------------------------------------------
    print("\n6. Block variograms...")

    U = Quadrangle((0, 0), (4, 0), (4, 4), (0, 4))
    V = Quadrangle((4, 0), (8, 0), (8, 4), (4, 4))
    print(f"   - γ(U, V) = {gamma(U, V):.4f}")
    print(f"   - γ(centroids) = {gamma(U.centroid(), V.centroid()):.4f}")

    G = pairwise(gamma, [U, V, (10.0, 10.0)])
    print(f"   - Variogram matrix:\n{np.array2string(G, precision=4)}")

    cov = GaussianCovariance(gamma)
    print(f"   - Covariance between blocks: {cov(U, V):.4f}")

    print("\n" + "=" * 80)
    print("Done")
    print("=" * 80)


if __name__ == "__main__":
    main()
