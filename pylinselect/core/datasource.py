"""
DataSource for pylinselect.

DataSource is the "I have data" abstraction. It doesn't know or care
that a regression will consume it. It stores named columns, remembers
which of them are numeric, and hands them out on request.

Usage:
    from pylinselect import DataSource

    ds = DataSource.from_arrays(X=X, y=y)
    ds = DataSource.from_file("data.csv")
    ds = DataSource.from_dataframe(df)

    ds.keys()  # frozenset({'X', 'y'})
    X = ds['X']
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, TYPE_CHECKING
import numpy as np
from numpy.typing import NDArray

from pylinselect.core.exceptions import ValidationError

if TYPE_CHECKING:
    import pandas as pd


@dataclass
class DataSource:
    """
    Named column container. Domain-agnostic.

    Construct via factory classmethods, not directly.

    Numeric columns are stored as float64 arrays. Non-numeric columns
    (strings, categoricals) are kept as object arrays and reported by
    is_numeric() as False, so a regression design can treat them as
    nominal attributes.
    """
    _data: dict[str, Any]
    _metadata: dict[str, Any] = field(default_factory=dict)

    # === Array Access ===

    def keys(self) -> frozenset[str]:
        """Return the names of all available arrays."""
        return frozenset(k for k in self._data.keys() if not k.startswith('_'))

    def columns(self) -> list[str]:
        """Return array names in insertion order."""
        return [k for k in self._data.keys() if not k.startswith('_')]

    def __getitem__(self, key: str) -> Any:
        """
        Access a named array.

        Raises:
            KeyError: If key not found, with a message listing available keys
        """
        if key not in self._data:
            available = self.keys()
            raise KeyError(
                f"DataSource has no array '{key}'. Available: {available}"
            )
        return self._data[key]

    def __contains__(self, key: str) -> bool:
        return key in self._data

    def is_numeric(self, key: str) -> bool:
        """True if the named array holds numeric values."""
        arr = self[key]
        return np.issubdtype(np.asarray(arr).dtype, np.number)

    # === Properties ===

    @property
    def n_observations(self) -> int:
        """Number of rows."""
        return self._metadata.get('n_observations', 0)

    @property
    def metadata(self) -> dict[str, Any]:
        """Source metadata (origin, column order, path)."""
        return self._metadata.copy()

    # === Factory Methods ===

    @classmethod
    def from_arrays(
        cls,
        *,
        X: NDArray | None = None,
        y: NDArray | None = None,
        data: NDArray | None = None,
        columns: list[str] | None = None,
        **named_arrays: NDArray,
    ) -> DataSource:
        """Construct from NumPy arrays."""
        storage: dict[str, Any] = {}
        n_obs: int | None = None

        if X is not None:
            X = np.asarray(X, dtype=np.float64)
            if X.ndim == 1:
                X = X.reshape(-1, 1)
            storage['X'] = X
            n_obs = X.shape[0]

        if y is not None:
            y = _as_column(y)
            if y.ndim == 2 and y.shape[1] == 1:
                y = y.ravel()
            storage['y'] = y
            n_obs = n_obs or y.shape[0]

        if data is not None:
            data = np.asarray(data, dtype=np.float64)
            n_obs = n_obs or data.shape[0]
            if columns is not None:
                for i, col in enumerate(columns):
                    storage[col] = data[:, i]
            else:
                storage['_data'] = data

        for name, arr in named_arrays.items():
            storage[name] = _as_column(arr)
            n_obs = n_obs or storage[name].shape[0]

        return cls(
            _data=storage,
            _metadata={'n_observations': n_obs, 'source': 'arrays'},
        )

    @classmethod
    def from_file(cls, path: str | Path, *, columns: list[str] | None = None) -> DataSource:
        """Construct from file (CSV, TSV, NPY)."""
        path = Path(path)
        suffix = path.suffix.lower()

        if suffix in ('.csv', '.tsv'):
            import pandas as pd
            sep = '\t' if suffix == '.tsv' else ','
            df = pd.read_csv(path, usecols=columns, sep=sep)
            return cls.from_dataframe(df, source_path=str(path))
        elif suffix == '.npy':
            data = np.load(path)
            return cls.from_arrays(data=data, columns=columns)
        else:
            raise ValidationError(f"Unknown file format: {suffix}")

    @classmethod
    def from_dataframe(cls, df: 'pd.DataFrame', *, source_path: str | None = None) -> DataSource:
        """
        Construct from pandas DataFrame.

        Numeric and boolean columns become float64; every other column
        is kept as an object array of its values.
        """
        import pandas as pd

        storage: dict[str, Any] = {}

        for col in df.columns:
            series = df[col]
            if pd.api.types.is_bool_dtype(series) or pd.api.types.is_numeric_dtype(series):
                storage[str(col)] = series.to_numpy(dtype=np.float64)
            else:
                storage[str(col)] = series.to_numpy(dtype=object)

        metadata = {
            'n_observations': len(df),
            'source': 'dataframe',
            'columns': [str(c) for c in df.columns],
        }
        if source_path:
            metadata['source_path'] = source_path

        return cls(_data=storage, _metadata=metadata)


def _as_column(arr: Any) -> NDArray:
    """Numeric input becomes float64; anything else stays as objects."""
    arr = np.asarray(arr)
    if np.issubdtype(arr.dtype, np.number) or arr.dtype == np.bool_:
        return arr.astype(np.float64)
    return arr.astype(object)
