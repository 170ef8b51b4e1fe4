"""
Tests for the Result[P] envelope.

Validates:
    - Generic payload, info and timing access
    - Frozen immutability
    - Default factories (warnings, provenance)
    - has_warning() method
    - Provenance metadata contains package versions
"""

from dataclasses import FrozenInstanceError, dataclass

import pytest

from pylinselect.core.result import Result, _default_provenance


@dataclass(frozen=True)
class FakeParams:
    """Minimal payload for testing."""
    coefficients: tuple[float, ...]


def make_result(**overrides):
    fields = dict(
        params=FakeParams(coefficients=(1.0, 0.5)),
        info={'selection': 'm5_prime'},
        timing=None,
        backend_name='cpu_normal_equations',
    )
    fields.update(overrides)
    return Result(**fields)


# ═══════════════════════════════════════════════════════════════════════
# Construction and field access
# ═══════════════════════════════════════════════════════════════════════


class TestResultConstruction:

    def test_basic_creation(self):
        result = make_result(timing={'total_seconds': 0.01})
        assert result.params.coefficients == (1.0, 0.5)
        assert result.info['selection'] == 'm5_prime'
        assert result.timing['total_seconds'] == 0.01
        assert result.backend_name == 'cpu_normal_equations'

    def test_timing_with_sections(self):
        result = make_result(
            timing={'total_seconds': 1.0, 'collinearity': 0.3, 'selection': 0.7}
        )
        assert result.timing['collinearity'] == 0.3
        assert result.timing['selection'] == 0.7

    def test_info_arbitrary_keys(self):
        result = make_result(info={'converged': True, 'iterations': 3})
        assert result.info['converged'] is True
        assert result.info['iterations'] == 3


# ═══════════════════════════════════════════════════════════════════════
# Default factories
# ═══════════════════════════════════════════════════════════════════════


class TestDefaults:

    def test_warnings_default_empty(self):
        result = make_result()
        assert result.warnings == ()
        assert isinstance(result.warnings, tuple)

    def test_warnings_explicit(self):
        result = make_result(warnings=("matrix inversion failed",))
        assert result.warnings == ("matrix inversion failed",)

    def test_provenance_auto_generated(self):
        result = make_result()
        assert 'pylinselect_version' in result.provenance
        assert 'numpy_version' in result.provenance
        assert 'scipy_version' in result.provenance

    def test_provenance_explicit_override(self):
        result = make_result(provenance={'custom': 'metadata'})
        assert result.provenance == {'custom': 'metadata'}


# ═══════════════════════════════════════════════════════════════════════
# Immutability
# ═══════════════════════════════════════════════════════════════════════


class TestImmutability:
    """Result is frozen."""

    @pytest.mark.parametrize("attribute, value", [
        ('params', FakeParams(coefficients=(0.0,))),
        ('backend_name', 'other'),
        ('warnings', ('new warning',)),
        ('timing', None),
    ])
    def test_cannot_set(self, attribute, value):
        result = make_result()
        with pytest.raises(FrozenInstanceError):
            setattr(result, attribute, value)


# ═══════════════════════════════════════════════════════════════════════
# has_warning()
# ═══════════════════════════════════════════════════════════════════════


class TestHasWarning:

    def test_no_warnings_returns_false(self):
        assert make_result().has_warning("anything") is False

    def test_substring_match(self):
        result = make_result(
            warnings=("Iterative t-test stopped after max_iterations=2 rounds",)
        )
        assert result.has_warning("max_iterations") is True
        assert result.has_warning("2 rounds") is True
        assert result.has_warning("singular") is False

    def test_multiple_warnings(self):
        result = make_result(warnings=("could not be inverted", "stopped after"))
        assert result.has_warning("inverted") is True
        assert result.has_warning("stopped") is True


# ═══════════════════════════════════════════════════════════════════════
# _default_provenance()
# ═══════════════════════════════════════════════════════════════════════


class TestDefaultProvenance:

    def test_versions_are_strings(self):
        prov = _default_provenance()
        for key in ('pylinselect_version', 'numpy_version', 'scipy_version'):
            assert isinstance(prov[key], str)

    def test_independent_copies(self):
        """Each call returns a new dict."""
        prov1 = _default_provenance()
        prov2 = _default_provenance()
        assert prov1 is not prov2
        assert prov1 == prov2
