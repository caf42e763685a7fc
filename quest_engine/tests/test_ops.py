"""Named gates: each one is a single kernel call with fully determined params."""
import numpy as np
import pytest

from quest_engine.kernel import ops, statevec
from quest_engine.kernel.algebra import Complex, Vector
from quest_engine.kernel.gates import (
    PHASE_TERMS, X_AXIS, Y_AXIS, Z_AXIS,
    conjugate_alpha_beta, get_alpha_beta_from_rotation, phase_shift_term,
)
from quest_engine.register.qureg import create_qubit_register, init_plus_state


@pytest.fixture
def calls(monkeypatch):
    """Record kernel entry-point calls instead of touching amplitudes."""
    log = []
    for name in ("compact_unitary", "controlled_compact_unitary",
                 "phase_shift_by_term", "unitary"):
        monkeypatch.setattr(statevec, name,
                            lambda *args, _n=name: log.append((_n,) + args[1:]))
    return log


def _plus(n=3, precision=2):
    q = create_qubit_register(n, precision=precision)
    init_plus_state(q)
    return q


@pytest.mark.parametrize("fn,axis", [(ops.rotate_x, X_AXIS),
                                     (ops.rotate_y, Y_AXIS),
                                     (ops.rotate_z, Z_AXIS)])
def test_fixed_rotation_single_call(calls, fn, axis):
    fn(None, 1, 0.42)
    assert calls == [("compact_unitary", 1, *get_alpha_beta_from_rotation(0.42, axis))]


@pytest.mark.parametrize("fn,axis", [(ops.controlled_rotate_x, X_AXIS),
                                     (ops.controlled_rotate_y, Y_AXIS),
                                     (ops.controlled_rotate_z, Z_AXIS)])
def test_controlled_rotation_single_call(calls, fn, axis):
    fn(None, 2, 0, -1.1)
    alpha, beta = get_alpha_beta_from_rotation(-1.1, axis)
    assert calls == [("controlled_compact_unitary", 2, 0, alpha, beta)]


def test_conj_variants_negate_after_derivation(calls):
    axis = Vector(1, -2, 0.5)
    ops.rotate_around_axis_conj(None, 0, 0.3, axis)
    ops.controlled_rotate_around_axis_conj(None, 1, 0, 0.3, axis)
    alpha, beta = conjugate_alpha_beta(*get_alpha_beta_from_rotation(0.3, axis))
    assert calls == [
        ("compact_unitary", 0, alpha, beta),
        ("controlled_compact_unitary", 1, 0, alpha, beta),
    ]


@pytest.mark.parametrize("fn,key", [(ops.sigma_z, "Z"), (ops.s_gate, "S"), (ops.t_gate, "T"),
                                    (ops.s_gate_conj, "SDG"), (ops.t_gate_conj, "TDG")])
def test_phase_gates_use_table_term(calls, fn, key):
    fn(None, 2)
    assert calls == [("phase_shift_by_term", 2, PHASE_TERMS[key])]


def test_phase_shift_term(calls):
    ops.phase_shift(None, 0, 0.6)
    assert calls == [("phase_shift_by_term", 0, phase_shift_term(0.6))]


def test_zero_axis_is_not_rejected_by_dispatch(calls):
    ops.rotate_around_axis(None, 0, 1.0, Vector(0, 0, 0))
    (_, _, alpha, beta), = calls
    assert np.isnan(alpha.imag)


# ── on real registers ───────────────────────────────────────────────

@pytest.mark.parametrize("precision", [1, 2, 4])
@pytest.mark.parametrize("theta", [0.0, 0.37, np.pi, -2.9])
def test_fixed_axis_equals_explicit_axis_exactly(precision, theta):
    for fixed, axis in [(ops.rotate_x, Vector(1, 0, 0)),
                        (ops.rotate_y, Vector(0, 1, 0)),
                        (ops.rotate_z, Vector(0, 0, 1))]:
        a, b = _plus(precision=precision), _plus(precision=precision)
        ops.rotate_y(a, 0, 0.9)
        ops.rotate_y(b, 0, 0.9)
        fixed(a, 1, theta)
        ops.rotate_around_axis(b, 1, theta, axis)
        np.testing.assert_array_equal(a.real, b.real)
        np.testing.assert_array_equal(a.imag, b.imag)


@pytest.mark.parametrize("axis", [X_AXIS, Z_AXIS])
def test_conj_variant_undoes_x_and_z_rotations(axis):
    """conj(R_n(θ)) == R_n(-θ) when n lies in the x-z plane."""
    q = _plus()
    ops.rotate_y(q, 0, 0.5)
    before = q.real.copy(), q.imag.copy()
    ops.rotate_around_axis(q, 0, 0.8, axis)
    ops.rotate_around_axis_conj(q, 0, 0.8, axis)
    np.testing.assert_allclose(q.real, before[0], atol=1e-12)
    np.testing.assert_allclose(q.imag, before[1], atol=1e-12)


def test_compact_unitary_rejects_non_unitary():
    q = _plus()
    with pytest.raises(ValueError, match="alpha"):
        ops.compact_unitary(q, 0, Complex(1, 0), Complex(1, 0))
    with pytest.raises(ValueError, match="alpha"):
        ops.controlled_compact_unitary(q, 0, 1, Complex(0.5, 0), Complex(0, 0))


def test_controlled_compact_unitary_rejects_same_qubit():
    q = _plus()
    with pytest.raises(ValueError, match="differ"):
        ops.controlled_compact_unitary(q, 1, 1, Complex(1, 0), Complex(0, 0))


def test_unitary_rejects_non_unitary():
    q = _plus()
    with pytest.raises(ValueError, match="not unitary"):
        ops.unitary(q, 0, [[1, 1], [0, 1]])


def test_unitary_conj_applies_elementwise_conjugate():
    U = np.array([[1, 1j], [1j, 1]]) / np.sqrt(2)
    a, b = _plus(2), _plus(2)
    ops.unitary_conj(a, 0, U)
    ops.unitary(b, 0, U.conj())
    np.testing.assert_allclose(a.real, b.real, atol=1e-15)
    np.testing.assert_allclose(a.imag, b.imag, atol=1e-15)


def test_apply_gate_unknown_name():
    with pytest.raises(ValueError, match="unknown gate"):
        ops.apply_gate(None, {"gate": "FOO", "qubits": [0], "params": {}})
