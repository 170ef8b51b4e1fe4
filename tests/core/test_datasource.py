"""
Tests for the DataSource container.
"""

import numpy as np
import pandas as pd
import pytest

from pylinselect.core.datasource import DataSource
from pylinselect.core.exceptions import ValidationError


class TestFromArrays:

    def test_named_arrays(self):
        ds = DataSource.from_arrays(a=[1, 2, 3], b=np.array([4.0, 5.0, 6.0]))
        assert ds.columns() == ['a', 'b']
        assert ds['a'].dtype == np.float64
        assert ds.n_observations == 3
        assert 'a' in ds

    def test_X_y(self, rng):
        ds = DataSource.from_arrays(X=rng.standard_normal((5, 2)), y=np.ones((5, 1)))
        assert ds['X'].shape == (5, 2)
        assert ds['y'].shape == (5,)

    def test_string_array_kept_as_objects(self):
        ds = DataSource.from_arrays(color=['red', 'blue'])
        assert ds['color'].dtype == object
        assert not ds.is_numeric('color')

    def test_missing_key_lists_available(self):
        ds = DataSource.from_arrays(a=[1.0])
        with pytest.raises(KeyError, match="Available"):
            ds['b']


class TestFromDataFrame:

    def test_dtypes(self):
        df = pd.DataFrame({'x': [1, 2], 'flag': [True, False], 'name': ['u', 'v']})
        ds = DataSource.from_dataframe(df)
        assert ds.is_numeric('x')
        assert ds.is_numeric('flag')
        assert not ds.is_numeric('name')
        assert ds.metadata['columns'] == ['x', 'flag', 'name']


class TestFromFile:

    def test_csv(self, tmp_path):
        path = tmp_path / 'data.csv'
        pd.DataFrame({'x': [1.0, 2.0, 3.0], 'y': [2.0, 4.0, 6.0]}).to_csv(path, index=False)
        ds = DataSource.from_file(path)
        assert ds.columns() == ['x', 'y']
        assert ds.metadata['source_path'] == str(path)

    def test_npy(self, tmp_path):
        path = tmp_path / 'data.npy'
        np.save(path, np.arange(6.0).reshape(3, 2))
        ds = DataSource.from_file(path, columns=['a', 'b'])
        np.testing.assert_array_equal(ds['b'], [1.0, 3.0, 5.0])

    def test_unknown_format(self, tmp_path):
        with pytest.raises(ValidationError, match="Unknown file format"):
            DataSource.from_file(tmp_path / 'data.parquet')
