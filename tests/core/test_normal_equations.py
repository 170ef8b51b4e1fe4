"""
Tests for the ridge normal-equation kernel and the fallible inverse.
"""

import numpy as np
import pytest

from pylinselect.core.compute.linalg import (
    RidgeSolveResult,
    solve_ridge_normal_equations,
    try_invert,
)
from pylinselect.core.compute.tolerances import MAX_RIDGE_ESCALATIONS
from pylinselect.core.exceptions import SingularMatrixError


class TestSolveRidgeNormalEquations:

    def test_matches_lstsq_without_ridge(self, rng):
        X = rng.standard_normal((50, 3))
        y = rng.standard_normal(50)
        solved = solve_ridge_normal_equations(X, y, None, 0.0)
        expected, *_ = np.linalg.lstsq(X, y, rcond=None)
        assert isinstance(solved, RidgeSolveResult)
        np.testing.assert_allclose(solved.coefficients, expected, rtol=1e-10)
        assert solved.escalations == 0
        assert solved.ridge == 0.0

    def test_ridge_shrinks(self, rng):
        X = rng.standard_normal((50, 2))
        y = X @ [1.0, 2.0]
        small = solve_ridge_normal_equations(X, y, None, 1e-8).coefficients
        large = solve_ridge_normal_equations(X, y, None, 1e3).coefficients
        assert np.linalg.norm(large) < np.linalg.norm(small)

    def test_closed_form_with_ridge(self, rng):
        X = rng.standard_normal((30, 2))
        y = rng.standard_normal(30)
        ridge = 0.7
        expected = np.linalg.solve(X.T @ X + ridge * np.eye(2), X.T @ y)
        solved = solve_ridge_normal_equations(X, y, None, ridge)
        np.testing.assert_allclose(solved.coefficients, expected, rtol=1e-10)

    def test_weights_match_row_replication(self, rng):
        """Integer weights act like repeated rows."""
        X = rng.standard_normal((20, 2))
        y = rng.standard_normal(20)
        w = rng.integers(1, 4, size=20).astype(float)
        weighted = solve_ridge_normal_equations(X, y, w, 0.0).coefficients
        repeats = w.astype(int)
        replicated = solve_ridge_normal_equations(
            np.repeat(X, repeats, axis=0), np.repeat(y, repeats), None, 0.0
        ).coefficients
        np.testing.assert_allclose(weighted, replicated, rtol=1e-10)

    def test_singular_system_escalates(self):
        """An all-zero design is singular until the ridge kicks in."""
        X = np.zeros((5, 2))
        y = np.ones(5)
        solved = solve_ridge_normal_equations(X, y, None, 0.0)
        assert solved.escalations >= 1
        assert solved.ridge > 0
        np.testing.assert_array_equal(solved.coefficients, [0.0, 0.0])

    def test_exhausted_escalation_raises(self, monkeypatch):
        def always_singular(a, b):
            raise np.linalg.LinAlgError("Singular matrix")

        monkeypatch.setattr(np.linalg, "solve", always_singular)
        with pytest.raises(SingularMatrixError) as exc_info:
            solve_ridge_normal_equations(np.eye(2), np.ones(2), None, 0.0)
        assert exc_info.value.attempts == MAX_RIDGE_ESCALATIONS + 1
        assert exc_info.value.ridge > 0


class TestTryInvert:

    def test_well_conditioned(self):
        A = np.array([[2.0, 0.5], [0.5, 1.0]])
        inverse = try_invert(A)
        np.testing.assert_allclose(inverse @ A, np.eye(2), atol=1e-12)

    def test_singular_returns_none(self):
        A = np.array([[1.0, 2.0], [2.0, 4.0]])
        assert try_invert(A) is None

    def test_ill_conditioned_returns_none(self):
        A = np.array([[1.0, 1.0], [1.0, 1.0 + 1e-17]])
        assert try_invert(A) is None

    def test_non_finite_returns_none(self):
        assert try_invert(np.array([[np.inf]])) is None

    def test_empty_matrix(self):
        assert try_invert(np.empty((0, 0))).shape == (0, 0)
