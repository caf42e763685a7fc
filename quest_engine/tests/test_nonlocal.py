"""Cross-chunk (exchange) updates.

Setup: 3 qubits, 4 chunks of 2 amplitudes.
  → qubit 0 is local (bit of the local index)
  → qubits 1,2 are non-local (bits of the chunk id)
"""
import numpy as np
import pytest

from quest_engine.kernel import ops
from quest_engine.kernel.algebra import Vector
from quest_engine.kernel.ref_dense import rotation_matrix
from quest_engine.register.cluster import LocalCluster
from quest_engine.register.qureg import create_qubit_register, init_plus_state

NQ = 3
NCHUNKS = 4


def _cluster_plus():
    cluster = LocalCluster(NQ, NCHUNKS)
    cluster.run(init_plus_state)
    return cluster


def _dense_plus():
    return np.full(1 << NQ, 1 / np.sqrt(1 << NQ), dtype=np.complex128)


def _apply_dense(psi, target, U, control=None):
    out = psi.copy()
    for i in range(len(psi)):
        if (i >> target) & 1 or (control is not None and not (i >> control) & 1):
            continue
        j = i | (1 << target)
        out[i] = U[0, 0] * psi[i] + U[0, 1] * psi[j]
        out[j] = U[1, 0] * psi[i] + U[1, 1] * psi[j]
    return out


def test_layout():
    cluster = LocalCluster(NQ, NCHUNKS)
    q = cluster.registers[0]
    assert q.num_amps_per_chunk == 2
    assert q.num_local_qubits == 1
    assert q.is_local(0) and not q.is_local(1) and not q.is_local(2)


@pytest.mark.parametrize("target", [1, 2])
def test_rotation_on_nonlocal_target(target):
    cluster = _cluster_plus()
    cluster.run(ops.rotate_y, 0, 0.3)
    cluster.run(ops.rotate_x, target, 1.1)
    psi = _apply_dense(_dense_plus(), 0, rotation_matrix(0.3, (0, 1, 0)))
    psi = _apply_dense(psi, target, rotation_matrix(1.1, (1, 0, 0)))
    np.testing.assert_allclose(cluster.collect_state(), psi, atol=1e-12)


@pytest.mark.parametrize("control,target", [(0, 1), (2, 1), (1, 2), (1, 0), (2, 0)])
def test_controlled_rotation_layouts(control, target):
    """local/non-local control × local/non-local target."""
    axis = Vector(0.2, -1.0, 0.7)
    cluster = _cluster_plus()
    cluster.run(ops.rotate_z, control, 0.4)
    cluster.run(ops.rotate_y, target, 0.9)
    cluster.run(ops.controlled_rotate_around_axis, control, target, 2.3, axis)
    psi = _apply_dense(_dense_plus(), control, rotation_matrix(0.4, (0, 0, 1)))
    psi = _apply_dense(psi, target, rotation_matrix(0.9, (0, 1, 0)))
    psi = _apply_dense(psi, target, rotation_matrix(2.3, (0.2, -1.0, 0.7)), control=control)
    np.testing.assert_allclose(cluster.collect_state(), psi, atol=1e-12)


@pytest.mark.parametrize("target", [0, 1, 2])
def test_phase_gate_needs_no_exchange(target):
    cluster = _cluster_plus()
    cluster.env.exchange = None            # any exchange attempt would fail
    cluster.run(ops.t_gate, target)
    psi = _dense_plus()
    idx = [i for i in range(len(psi)) if (i >> target) & 1]
    psi[idx] *= np.exp(1j * np.pi / 4)
    np.testing.assert_allclose(cluster.collect_state(), psi, atol=1e-12)


def test_non_local_without_env_raises():
    """A lone chunk cannot reach its partner."""
    q = create_qubit_register(NQ, num_chunks=NCHUNKS, chunk_id=1)
    with pytest.raises(NotImplementedError, match="non-local"):
        ops.rotate_x(q, 2, 0.5)
    # local target and phase gates are fine
    ops.rotate_x(q, 0, 0.5)
    ops.sigma_z(q, 2)


def test_non_local_control_off_skips_chunk():
    """Chunk 0 has every non-local bit = 0: a gate controlled on qubit 2 leaves it alone."""
    cluster = _cluster_plus()
    before = cluster.registers[0].real.copy()
    cluster.run(ops.controlled_rotate_x, 2, 1, 1.0)
    np.testing.assert_array_equal(cluster.registers[0].real, before)


def test_exchange_reads_pre_step_values():
    """Rank order must not matter: both halves see the partner's old amplitudes."""
    cluster = _cluster_plus()
    cluster.run(ops.rotate_x, 2, 0.7)
    forward = cluster.collect_state()

    other = _cluster_plus()
    other.registers.reverse()
    other.run(ops.rotate_x, 2, 0.7)
    other.registers.reverse()
    np.testing.assert_allclose(other.collect_state(), forward, atol=0)


def test_exchange_outside_step_raises():
    """Per-register calls bypass the step snapshot and must not read half-updated partners."""
    cluster = _cluster_plus()
    cluster.run(ops.rotate_y, 0, 0.3)
    before = cluster.collect_state()
    with pytest.raises(RuntimeError, match="outside a LocalCluster.run step"):
        for q in cluster:
            ops.rotate_x(q, 2, 0.7)
    # the exchange fails before the first chunk is touched
    np.testing.assert_array_equal(cluster.collect_state(), before)

    cluster.run(ops.rotate_x, 2, 0.7)
    psi = _apply_dense(_dense_plus(), 0, rotation_matrix(0.3, (0, 1, 0)))
    psi = _apply_dense(psi, 2, rotation_matrix(0.7, (1, 0, 0)))
    np.testing.assert_allclose(cluster.collect_state(), psi, atol=1e-12)


def test_local_gates_need_no_step():
    cluster = _cluster_plus()
    for q in cluster:
        ops.rotate_x(q, 0, 0.7)
        ops.t_gate(q, 2)
    psi = _apply_dense(_dense_plus(), 0, rotation_matrix(0.7, (1, 0, 0)))
    psi = _apply_dense(psi, 2, np.diag([1, np.exp(1j * np.pi / 4)]))
    np.testing.assert_allclose(cluster.collect_state(), psi, atol=1e-12)


@pytest.mark.parametrize("qubit", [0, 2])
def test_kernel_rejects_control_equal_target(qubit):
    """Local and non-local qubits fail the same way, before any amplitude changes."""
    from quest_engine.kernel import statevec
    from quest_engine.kernel.gates import X_AXIS, get_alpha_beta_from_rotation

    alpha, beta = get_alpha_beta_from_rotation(0.9, X_AXIS)
    cluster = _cluster_plus()
    with pytest.raises(ValueError, match="must differ"):
        cluster.run(statevec.controlled_compact_unitary, qubit, qubit, alpha, beta)
    np.testing.assert_array_equal(cluster.collect_state(), _dense_plus())
