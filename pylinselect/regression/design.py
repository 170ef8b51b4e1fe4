"""
Regression Design.

Design wraps the raw data and exposes what the engine needs: the attribute
matrix with per-attribute numeric/nominal flags, the label, and per-example
weights. It knows it is building a regression; DataSource doesn't.

A two-class nominal label is stored as integer codes plus its class names;
the numeric 0/1 working label is derived on demand by binarized_label().
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterator, Sequence
import numpy as np
from numpy.typing import NDArray, ArrayLike

from pylinselect.core.datasource import DataSource
from pylinselect.core.exceptions import ValidationError
from pylinselect.core.compute.statistics import weighted_mean, weighted_variance
from pylinselect.core.validation import (
    check_array,
    check_finite,
    check_1d,
    check_2d,
    check_consistent_length,
    check_min_samples,
    check_weights,
)


@dataclass(frozen=True)
class RegressionDesign:
    """
    Regression dataset specification.

    Immutable after construction.

    Construction:
        RegressionDesign.from_arrays(X, y)
        RegressionDesign.from_arrays(X, y, weights=w, attribute_names=[...])
        RegressionDesign.from_dataframe(df, y='target')
        RegressionDesign.from_datasource(ds, y='target', x=['a', 'b'])

    Nominal attributes are kept (as integer codes) so attribute indices,
    masks and the attribute-weight output line up with the caller's
    columns, but they never enter the model.
    """
    _X: NDArray[np.floating[Any]]
    _y: NDArray[np.floating[Any]]
    _weights: NDArray[np.floating[Any]] | None
    _attribute_names: tuple[str, ...]
    _numeric: tuple[bool, ...]
    _label_name: str
    _class_names: tuple[str, str] | None = None

    # === Construction ===

    @classmethod
    def from_arrays(
        cls,
        X: ArrayLike,
        y: ArrayLike,
        *,
        weights: ArrayLike | None = None,
        attribute_names: Sequence[str] | None = None,
        nominal_attributes: Sequence[str | int] = (),
        label_name: str = 'label',
        positive_class: Any = None,
    ) -> RegressionDesign:
        """
        Build a design from arrays.

        Args:
            X: Attribute matrix (n x p). Columns listed in
                nominal_attributes may hold any values; all other columns
                must be numeric.
            y: Label (n,). Numeric, or a two-class nominal label.
            weights: Optional per-example weights (n,)
            attribute_names: Column names (default 'att1', 'att2', ...)
            nominal_attributes: Names or indices of nominal columns
            label_name: Name of the label, used in summaries
            positive_class: For a nominal label, the class coded 1.0.
                Defaults to the second class in sorted order.

        Returns:
            RegressionDesign ready for fitting
        """
        X_raw = np.asarray(X)
        if X_raw.ndim == 1:
            X_raw = X_raw.reshape(-1, 1)
        check_2d(X_raw, 'X')
        n, p = X_raw.shape

        if attribute_names is None:
            names = tuple(f'att{i + 1}' for i in range(p))
        else:
            names = tuple(str(a) for a in attribute_names)
            if len(names) != p:
                raise ValidationError(
                    f"attribute_names: expected {p} names, got {len(names)}"
                )
            if len(set(names)) != p:
                raise ValidationError("attribute_names: names must be unique")

        nominal_idx = set()
        for item in nominal_attributes:
            if isinstance(item, (int, np.integer)):
                if not 0 <= item < p:
                    raise ValidationError(f"nominal_attributes: index {item} out of range")
                nominal_idx.add(int(item))
            elif item in names:
                nominal_idx.add(names.index(item))
            else:
                raise ValidationError(f"nominal_attributes: unknown attribute {item!r}")

        columns = []
        numeric = []
        for j in range(p):
            if j in nominal_idx:
                columns.append(_encode_nominal(X_raw[:, j]))
                numeric.append(False)
            else:
                column = X_raw[:, j]
                if column.dtype == object or column.dtype.kind in 'US':
                    column = _object_to_float(column, names[j])
                column = check_array(column, names[j])
                check_finite(column, names[j])
                columns.append(column.astype(np.float64))
                numeric.append(True)
        X_arr = np.column_stack(columns) if columns else np.empty((n, 0))

        return cls._build(
            X_arr, y, weights,
            names=names, numeric=tuple(numeric),
            label_name=label_name, positive_class=positive_class,
        )

    @classmethod
    def from_datasource(
        cls,
        source: DataSource,
        *,
        y: str,
        x: Sequence[str] | None = None,
        weight: str | None = None,
        positive_class: Any = None,
    ) -> RegressionDesign:
        """
        Build a design from named DataSource columns.

        Args:
            source: The DataSource
            y: Label column
            x: Attribute columns. Default: every column except y and weight,
                in the source's column order.
            weight: Optional weight column
            positive_class: See from_arrays()
        """
        if x is None:
            x = [c for c in source.columns() if c not in (y, weight)]
        if not x:
            raise ValidationError("No attribute columns available")

        nominal = [name for name in x if not source.is_numeric(name)]
        X_arr = np.empty((source[x[0]].shape[0], len(x)), dtype=object)
        for j, name in enumerate(x):
            column = source[name]
            if column.ndim != 1:
                raise ValidationError(f"{name}: expected a single column")
            X_arr[:, j] = column

        return cls.from_arrays(
            X_arr if nominal else X_arr.astype(np.float64),
            source[y],
            weights=source[weight] if weight is not None else None,
            attribute_names=list(x),
            nominal_attributes=nominal,
            label_name=y,
            positive_class=positive_class,
        )

    @classmethod
    def from_dataframe(
        cls,
        df: Any,
        *,
        y: str,
        weight: str | None = None,
        positive_class: Any = None,
    ) -> RegressionDesign:
        """Build a design from a pandas DataFrame (non-numeric columns are nominal)."""
        source = DataSource.from_dataframe(df)
        return cls.from_datasource(source, y=y, weight=weight, positive_class=positive_class)

    @classmethod
    def _build(
        cls,
        X: NDArray[np.floating[Any]],
        y: ArrayLike,
        weights: ArrayLike | None,
        *,
        names: tuple[str, ...],
        numeric: tuple[bool, ...],
        label_name: str,
        positive_class: Any,
    ) -> RegressionDesign:
        """Internal builder: label handling and cross-array validation."""
        y_raw = np.asarray(y)
        if y_raw.ndim == 2 and y_raw.shape[1] == 1:
            y_raw = y_raw.ravel()
        check_1d(y_raw, 'y')

        class_names = None
        if np.issubdtype(y_raw.dtype, np.number) and y_raw.dtype != np.bool_:
            y_arr = y_raw.astype(np.float64)
            check_finite(y_arr, 'y')
        else:
            y_arr, class_names = _encode_binary_label(y_raw, positive_class)

        w_arr = None
        if weights is not None:
            w_arr = check_array(weights, 'weights').astype(np.float64)
            check_1d(w_arr, 'weights')
            check_weights(w_arr, 'weights')
            check_consistent_length(X, y_arr, w_arr, names=('X', 'y', 'weights'))
        else:
            check_consistent_length(X, y_arr, names=('X', 'y'))
        check_min_samples(X, 2, 'X')

        return cls(
            _X=X,
            _y=y_arr,
            _weights=w_arr,
            _attribute_names=names,
            _numeric=numeric,
            _label_name=label_name,
            _class_names=class_names,
        )

    # === Properties ===

    @property
    def X(self) -> NDArray[np.floating[Any]]:
        """Attribute matrix (n x p); nominal columns hold integer codes."""
        return self._X

    @property
    def y(self) -> NDArray[np.floating[Any]]:
        """Label values: numeric label, or class codes 0/1 for a nominal label."""
        return self._y

    @property
    def weights(self) -> NDArray[np.floating[Any]] | None:
        """Per-example weights, or None when every example weighs 1.0."""
        return self._weights

    @property
    def example_weights(self) -> NDArray[np.floating[Any]]:
        """Per-example weights with the 1.0 default filled in."""
        if self._weights is None:
            return np.ones(self.n, dtype=np.float64)
        return self._weights

    @property
    def n(self) -> int:
        """Number of examples."""
        return self._X.shape[0]

    @property
    def p(self) -> int:
        """Number of regular attributes (numeric and nominal)."""
        return self._X.shape[1]

    @property
    def attribute_names(self) -> tuple[str, ...]:
        return self._attribute_names

    @property
    def numeric(self) -> NDArray[np.bool_]:
        """Boolean vector, True for numeric attributes."""
        return np.array(self._numeric, dtype=bool)

    @property
    def label_name(self) -> str:
        return self._label_name

    @property
    def class_names(self) -> tuple[str, str] | None:
        """(negative, positive) class names for a nominal label, else None."""
        return self._class_names

    @property
    def is_nominal_label(self) -> bool:
        return self._class_names is not None

    # === Statistics ===

    def column_means(self, columns: NDArray[np.floating[Any]]) -> NDArray[np.floating[Any]]:
        """Weighted mean of each column of a (n x k) block."""
        return np.atleast_1d(weighted_mean(columns, self._weights, axis=0))

    def column_std(self, columns: NDArray[np.floating[Any]]) -> NDArray[np.floating[Any]]:
        """Weighted standard deviation of each column of a (n x k) block."""
        return np.sqrt(np.atleast_1d(weighted_variance(columns, self._weights, axis=0)))

    # === Working label ===

    @contextmanager
    def binarized_label(self) -> Iterator[NDArray[np.floating[Any]]]:
        """
        Scope the numeric working label for the duration of one fit.

        For a numeric label this yields the label itself. For a two-class
        nominal label it yields a fresh 0.0 (negative) / 1.0 (positive)
        vector that lives only inside the block.
        """
        if self._class_names is None:
            yield self._y
            return
        yield np.where(self._y == 1.0, 1.0, 0.0)


def _encode_nominal(values: NDArray[Any]) -> NDArray[np.floating[Any]]:
    """Integer codes (as float) for a nominal column, in sorted-value order."""
    _, codes = np.unique(values.astype(str), return_inverse=True)
    return codes.astype(np.float64)


def _encode_binary_label(
    values: NDArray[Any],
    positive_class: Any,
) -> tuple[NDArray[np.floating[Any]], tuple[str, str]]:
    """Map a two-class label to 0/1 codes; return codes and (negative, positive)."""
    as_str = values.astype(str)
    classes = sorted(set(as_str.tolist()))
    if len(classes) != 2:
        raise ValidationError(
            f"y: nominal label must have exactly 2 classes, got {len(classes)}: {classes[:5]}"
        )
    if positive_class is None:
        negative, positive = classes
    else:
        positive = str(positive_class)
        if positive not in classes:
            raise ValidationError(
                f"positive_class {positive_class!r} is not one of the label classes {classes}"
            )
        negative = classes[0] if classes[1] == positive else classes[1]
    codes = (as_str == positive).astype(np.float64)
    return codes, (negative, positive)


def _object_to_float(values: NDArray[Any], name: str) -> NDArray[np.floating[Any]]:
    """Convert an object column that should be numeric."""
    try:
        return values.astype(np.float64)
    except (TypeError, ValueError) as e:
        raise ValidationError(
            f"{name}: non-numeric values in a numeric attribute; "
            f"list it in nominal_attributes"
        ) from e
