"""
Control parameters for empirical variogram estimation.
"""

import os


FORCE_FULLSEARCH_ENV = "PYVARIOGRAPHY_FORCE_FULLSEARCH"


class VariogramControl:
    """
    Default settings for empirical variogram estimation and sampling.

    Parameters
    ----------
    nlags : int, default=20
        Number of lag bins
    maxlag_fraction : float, default=0.1
        Maximum lag as a fraction of the bounding box diagonal, used when
        no explicit ``maxlag`` is given
    distance : str, default='euclidean'
        Name of the distance used to measure lags
    estimator : str, default='matheron'
        Name of the variogram estimator ('matheron' or 'cressie')
    algorithm : str, default='ball'
        Accumulation algorithm ('full' or 'ball')
    seed : int, default=123
        Seed of the random generator used when sampling arbitrary regions
    n_jobs : int, default=1
        Number of joblib workers used to estimate the variograms of the
        subsets of a partition (-1 uses all processors)
    """

    def __init__(
        self,
        nlags: int = 20,
        maxlag_fraction: float = 0.1,
        distance: str = "euclidean",
        estimator: str = "matheron",
        algorithm: str = "ball",
        seed: int = 123,
        n_jobs: int = 1
    ):
        self.nlags = nlags
        self.maxlag_fraction = maxlag_fraction
        self.distance = distance
        self.estimator = estimator
        self.algorithm = algorithm
        self.seed = seed
        self.n_jobs = n_jobs

    def default_maxlag(self, diagonal: float) -> float:
        """Maximum lag for a domain with the given bounding box diagonal."""
        return self.maxlag_fraction * diagonal

    def __repr__(self):
        return (f"VariogramControl(nlags={self.nlags}, maxlag_fraction={self.maxlag_fraction}, "
                f"distance={self.distance!r}, estimator={self.estimator!r}, "
                f"algorithm={self.algorithm!r}, n_jobs={self.n_jobs})")


def force_fullsearch() -> bool:
    """Return True when the environment requests full search accumulation."""
    return os.getenv(FORCE_FULLSEARCH_ENV, "0") == "1"
