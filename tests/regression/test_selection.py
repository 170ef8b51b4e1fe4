"""
Tests for the attribute selection methods and their registry.
"""

from dataclasses import FrozenInstanceError

import numpy as np
import pytest
from scipy import stats

from pylinselect.core.exceptions import ConfigurationError, FitCancelledError
from pylinselect.regression.design import RegressionDesign
from pylinselect.regression.selection import (
    SELECTION_METHODS,
    AkaikeBackward,
    GreedyBackward,
    IterativeTTest,
    NoSelection,
    SelectionMethod,
    TTestFilter,
    akaike_criterion,
    attribute_p_value,
    filter_by_p_value,
    forward_step,
    selection_method,
)


# ═══════════════════════════════════════════════════════════════════════
# NoSelection
# ═══════════════════════════════════════════════════════════════════════


class TestNoSelection:

    def test_returns_baseline_unchanged(self, sparse_design, context_factory):
        baseline, context = context_factory(sparse_design)
        selected = NoSelection().apply(baseline, context)
        assert selected is baseline
        assert context.trace == []

    def test_idempotent_across_datasets(self, rng, context_factory):
        for _ in range(5):
            X = rng.standard_normal((30, 4))
            design = RegressionDesign.from_arrays(X, rng.standard_normal(30))
            baseline, context = context_factory(design)
            selected = NoSelection().apply(baseline, context)
            np.testing.assert_array_equal(selected.mask, baseline.mask)
            np.testing.assert_array_equal(selected.coefficients, baseline.coefficients)
            assert selected.squared_error == baseline.squared_error


# ═══════════════════════════════════════════════════════════════════════
# Backward elimination
# ═══════════════════════════════════════════════════════════════════════


@pytest.mark.parametrize("method", [AkaikeBackward(), GreedyBackward()],
                         ids=['m5_prime', 'greedy'])
class TestBackwardElimination:

    def test_keeps_informative_attributes(self, method, sparse_design, context_factory):
        baseline, context = context_factory(sparse_design)
        selected = method.apply(baseline, context)
        assert selected.mask[0] and selected.mask[3]
        assert selected.n_active < baseline.n_active

    def test_error_never_decreases(self, method, sparse_design, context_factory):
        baseline, context = context_factory(sparse_design)
        method.apply(baseline, context)
        errors = [baseline.squared_error] + [step.squared_error for step in context.trace]
        for before, after in zip(errors, errors[1:]):
            assert after >= before * (1 - 1e-9)

    def test_mask_shrinks_and_terminates(self, method, sparse_design, context_factory):
        baseline, context = context_factory(sparse_design)
        selected = method.apply(baseline, context)
        assert len(context.trace) <= context.number_of_used_attributes
        assert all(step.action == 'remove' for step in context.trace)
        removed = [step.attribute for step in context.trace]
        assert len(set(removed)) == len(removed)
        assert selected.n_active == baseline.n_active - len(removed)

    def test_criterion_strictly_improves(self, method, sparse_design, context_factory):
        baseline, context = context_factory(sparse_design)
        method.apply(baseline, context)
        criteria = [akaike_criterion(baseline.squared_error, baseline.n_active + 1, context)]
        criteria += [step.criterion for step in context.trace]
        assert all(b < a for a, b in zip(criteria, criteria[1:]))

    def test_cancellation(self, method, sparse_design, context_factory):
        baseline, context = context_factory(sparse_design, should_stop=lambda: True)
        with pytest.raises(FitCancelledError):
            method.apply(baseline, context)


class TestAkaikeCriterion:

    def test_baseline_value(self, sparse_design, context_factory):
        baseline, context = context_factory(sparse_design)
        value = akaike_criterion(baseline.squared_error, baseline.n_active + 1, context)
        assert value == pytest.approx((200 - 7) + 2 * 7)

    def test_informative_attribute_survives(self, rng, context_factory):
        """The informative attribute survives; the intercept stays near 0."""
        n = 100
        X = rng.standard_normal((n, 2))
        y = 4.0 * X[:, 0] + 0.1 * rng.standard_normal(n)
        design = RegressionDesign.from_arrays(X, y)
        baseline, context = context_factory(design)
        selected = GreedyBackward().apply(baseline, context)
        assert selected.mask[0]
        assert selected.intercept == pytest.approx(0.0, abs=0.1)


# ═══════════════════════════════════════════════════════════════════════
# t-test selection
# ═══════════════════════════════════════════════════════════════════════


class TestTTestFilter:

    def test_noise_attribute_usually_dropped(self, context_factory):
        """With a pure-noise attribute the test rejects at about 1 - alpha."""
        dropped = 0
        trials = 200
        for seed in range(trials):
            rng = np.random.default_rng(seed)
            n = 50
            X = rng.standard_normal((n, 1))
            design = RegressionDesign.from_arrays(X, rng.standard_normal(n))
            baseline, context = context_factory(design)
            selected = TTestFilter(alpha=0.05).apply(baseline, context)
            dropped += int(not selected.mask[0])
        assert dropped / trials > 0.85

    def test_informative_attribute_kept(self, sparse_design, context_factory):
        baseline, context = context_factory(sparse_design)
        selected = TTestFilter().apply(baseline, context)
        assert selected.mask[0] and selected.mask[3]

    def test_single_pass_against_baseline_mask(self, sparse_design, context_factory):
        baseline, context = context_factory(sparse_design)
        selected = TTestFilter(alpha=0.05).apply(baseline, context)
        removed = {step.attribute for step in context.trace}
        assert removed == set(np.flatnonzero(baseline.mask & ~selected.mask))
        assert len({step.squared_error for step in context.trace}) <= 1

    def test_p_value_uses_full_model_r_squared(self, sparse_data, sparse_design, context_factory):
        X, y, _ = sparse_data
        n = len(y)
        _, context = context_factory(sparse_design)
        subset = context.refit(np.array([True, True, False, True, False, False]))

        full = np.column_stack([X, np.ones(n)])
        beta_full, *_ = np.linalg.lstsq(full, y, rcond=None)
        r2_full = np.corrcoef(full @ beta_full, y)[0, 1] ** 2
        others = np.column_stack([X[:, [0, 3]], np.ones(n)])
        gamma, *_ = np.linalg.lstsq(others, X[:, 1], rcond=None)
        tol = 1.0 - np.corrcoef(others @ gamma, X[:, 1])[0, 1] ** 2
        se = np.sqrt((1.0 - r2_full) / (tol * (n - 6 - 1)))
        se *= np.std(y, ddof=1) / np.std(X[:, 1], ddof=1)
        t = subset.coefficients[1] / se
        expected = stats.f.sf(t * t, 1, n - 4)

        assert context.r_squared_full == pytest.approx(r2_full, rel=1e-6)
        assert attribute_p_value(subset, 1, context) == pytest.approx(expected, rel=1e-5)

    def test_no_degrees_of_freedom_drops_everything(self, rng, context_factory):
        design = RegressionDesign.from_arrays(rng.standard_normal((3, 2)), rng.standard_normal(3))
        baseline, context = context_factory(design)
        selected = TTestFilter().apply(baseline, context)
        assert selected.n_active == 0
        assert len(selected.coefficients) == 1


class TestIterativeTTest:

    def test_one_iteration_is_forward_then_backward(self, sparse_design, context_factory):
        baseline, context = context_factory(sparse_design)
        selected = IterativeTTest(max_iterations=1).apply(baseline, context)

        _, manual_context = context_factory(sparse_design)
        empty = manual_context.refit(np.zeros(6, dtype=bool))
        include = forward_step(empty, baseline.mask, manual_context, 0.05)
        expanded = manual_context.refit(empty.mask | include)
        expected = filter_by_p_value(expanded, manual_context, 0.05)

        np.testing.assert_array_equal(selected.mask, expected.mask)
        np.testing.assert_allclose(selected.coefficients, expected.coefficients)

    def test_finds_informative_attributes(self, sparse_design, context_factory):
        baseline, context = context_factory(sparse_design)
        selected = IterativeTTest().apply(baseline, context)
        assert selected.mask[0] and selected.mask[3]
        assert context.info['converged'] is True
        assert context.info['iterations'] >= 2
        assert context.notes == []

    def test_output_is_fixed_point(self, sparse_design, context_factory):
        baseline, context = context_factory(sparse_design)
        first = IterativeTTest(max_iterations=50).apply(baseline, context)

        _, again = context_factory(sparse_design)
        second = IterativeTTest(max_iterations=50).apply(again.refit(first.mask), again)
        np.testing.assert_array_equal(second.mask, first.mask)

    def test_iteration_cap_noted(self, sparse_design, context_factory):
        baseline, context = context_factory(sparse_design)
        IterativeTTest(max_iterations=1).apply(baseline, context)
        assert context.info == {'iterations': 1, 'converged': False}
        assert any('max_iterations=1' in note for note in context.notes)

    def test_only_allowed_attributes_enter(self, sparse_design, context_factory):
        mask = np.array([False, True, True, True, True, True])
        baseline, context = context_factory(sparse_design, mask=mask)
        selected = IterativeTTest().apply(baseline, context)
        assert not selected.mask[0]
        assert selected.mask[3]


# ═══════════════════════════════════════════════════════════════════════
# Parameters and registry
# ═══════════════════════════════════════════════════════════════════════


class TestParameters:

    def test_defaults(self):
        assert TTestFilter().params() == {'alpha': 0.05}
        assert IterativeTTest().params() == {
            'max_iterations': 10, 'alpha_forward': 0.05, 'alpha_backward': 0.05,
        }
        assert AkaikeBackward().params() == {}

    @pytest.mark.parametrize("alpha", [0.0, 1.0, -0.1, 2.0])
    def test_alpha_open_interval(self, alpha):
        with pytest.raises(ConfigurationError, match="alpha"):
            TTestFilter(alpha=alpha)

    @pytest.mark.parametrize("value", [0, -1, 2.5])
    def test_max_iterations(self, value):
        with pytest.raises(ConfigurationError, match="max_iterations"):
            IterativeTTest(max_iterations=value)

    def test_alpha_coerced_to_float(self):
        assert isinstance(TTestFilter(alpha=np.float32(0.1)).alpha, float)

    def test_frozen(self):
        method = TTestFilter()
        with pytest.raises(FrozenInstanceError):
            method.alpha = 0.1

    def test_declared_parameters_match_fields(self):
        for method_class in SELECTION_METHODS.values():
            instance = method_class()
            for spec in method_class.parameters:
                assert getattr(instance, spec.name) == spec.default


class TestRegistry:

    def test_all_methods_registered(self):
        assert set(SELECTION_METHODS) == {
            'none', 'm5_prime', 'greedy', 't_test', 'iterative_t_test',
        }
        for name, method_class in SELECTION_METHODS.items():
            assert issubclass(method_class, SelectionMethod)
            assert method_class.name == name

    @pytest.mark.parametrize("name, expected", [
        ('m5_prime', AkaikeBackward),
        ('M5 prime', AkaikeBackward),
        ('akaike', AkaikeBackward),
        ('Greedy', GreedyBackward),
        ('no-selection', NoSelection),
        ('T-Test', TTestFilter),
        ('Iterative T-Test', IterativeTTest),
    ])
    def test_name_resolution(self, name, expected):
        assert type(selection_method(name)) is expected

    def test_params_forwarded(self):
        method = selection_method('iterative_t_test', max_iterations=3, alpha_forward=0.1)
        assert method.max_iterations == 3
        assert method.alpha_forward == 0.1

    def test_unknown_name(self):
        with pytest.raises(ConfigurationError, match="Unknown selection method") as exc_info:
            selection_method('lasso')
        assert exc_info.value.parameter == 'selection'

    def test_unknown_parameter(self):
        with pytest.raises(ConfigurationError, match="no parameter"):
            selection_method('greedy', alpha=0.1)

    def test_non_string_name(self):
        with pytest.raises(ConfigurationError):
            selection_method(3)
