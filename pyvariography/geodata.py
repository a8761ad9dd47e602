"""
Spatial data container pairing a table of variables with coordinates.
"""

from typing import Dict, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd


VariableName = Union[str, Sequence[str]]


class SpatialData:
    """
    Table of measurements attached to point locations.

    Parameters
    ----------
    table : pd.DataFrame
        Variables, one row per location
    coords : sequence of str or array-like
        Names of the coordinate columns in ``table`` or an (n, d) array of
        coordinates aligned with the rows of ``table``
    units : dict, optional
        Mapping from variable name to unit label

    Attributes
    ----------
    table : pd.DataFrame
        Variable columns (coordinate columns are removed)
    coordinates : np.ndarray
        (n, d) coordinate array keeping the input dtype
    """

    def __init__(self, table: pd.DataFrame, coords, units: Optional[Dict[str, str]] = None):
        if not isinstance(table, pd.DataFrame):
            raise ValueError("table must be a pandas DataFrame")

        if isinstance(coords, str):
            coords = [coords]
        if _is_column_names(coords):
            names = list(coords)
            missing = [name for name in names if name not in table.columns]
            if missing:
                raise ValueError(f"Coordinate columns not found in table: {missing}")
            for name in names:
                if not pd.api.types.is_numeric_dtype(table[name]):
                    raise ValueError(f"Coordinate column '{name}' must be numeric")
            coordinates = table[names].to_numpy()
            table = table.drop(columns=names)
        else:
            coordinates = np.asarray(coords)
            if coordinates.ndim == 1:
                coordinates = coordinates.reshape(-1, 1)
            if coordinates.ndim != 2 or coordinates.shape[0] != len(table):
                raise ValueError(
                    f"Coordinates must be an array with {len(table)} rows, "
                    f"got shape {coordinates.shape}"
                )
            if not np.issubdtype(coordinates.dtype, np.number):
                raise ValueError("Coordinates must be numeric")

        self.table = table.reset_index(drop=True)
        self.coordinates = coordinates
        self.units = dict(units) if units else {}

    def __len__(self):
        return self.coordinates.shape[0]

    @property
    def embed_dim(self) -> int:
        """Number of spatial dimensions."""
        return self.coordinates.shape[1]

    def variable(self, name: VariableName) -> np.ndarray:
        """
        Values of a (possibly vector-valued) variable.

        Parameters
        ----------
        name : str or sequence of str
            Column name, or several column names forming a vector variable

        Returns
        -------
        np.ndarray
            (n, k) float array with NaN marking missing values
        """
        names = [name] if isinstance(name, str) else list(name)
        if not names:
            raise ValueError("Variable name must not be empty")
        unknown = [n for n in names if n not in self.table.columns]
        if unknown:
            raise ValueError(f"Variable(s) {unknown} not found. Available: {list(self.table.columns)}")

        columns = []
        for n in names:
            values = pd.to_numeric(self.table[n], errors="coerce")
            columns.append(values.to_numpy(dtype=float, na_value=np.nan))
        return np.column_stack(columns)

    def unit(self, name: VariableName) -> Optional[str]:
        """Unit label of a variable, None when unknown."""
        key = name if isinstance(name, str) else tuple(name)
        if isinstance(key, tuple):
            labels = {self.units.get(n) for n in key}
            return labels.pop() if len(labels) == 1 else None
        return self.units.get(key)

    def subset(self, indices) -> "SpatialData":
        """New SpatialData restricted to the given row indices."""
        indices = np.asarray(indices, dtype=int)
        return SpatialData(self.table.iloc[indices], self.coordinates[indices], self.units)

    def bounding_box(self) -> Tuple[np.ndarray, np.ndarray]:
        """Lower and upper corners of the axis-aligned bounding box."""
        coords = self.coordinates.astype(float)
        return coords.min(axis=0), coords.max(axis=0)

    def diagonal(self) -> float:
        """Length of the bounding box diagonal."""
        lower, upper = self.bounding_box()
        return float(np.linalg.norm(upper - lower))

    def __repr__(self):
        return (f"SpatialData(n={len(self)}, dim={self.embed_dim}, "
                f"variables={list(self.table.columns)})")


def _is_column_names(coords) -> bool:
    if isinstance(coords, str):
        return True
    if isinstance(coords, (list, tuple)) and coords and all(isinstance(c, str) for c in coords):
        return True
    return False


def georef(table: pd.DataFrame, coords, units: Optional[Dict[str, str]] = None) -> SpatialData:
    """
    Georeference a table.

    Examples
    --------
    >>> df = pd.DataFrame({'x': [0., 1.], 'y': [0., 0.], 'z': [1., 2.]})
    >>> data = georef(df, ('x', 'y'))
    """
    return SpatialData(table, coords, units)
