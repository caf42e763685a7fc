"""Qubit register: one chunk of a partitioned state vector.

Layout:
  The global vector has 2^n amplitudes split into ``num_chunks`` contiguous
  chunks of ``num_amps_per_chunk`` amplitudes.  Local index i on chunk c is
  global index c*num_amps_per_chunk + i.

  With k = log2(num_amps_per_chunk), qubits 0..k-1 are local (bits of the
  local index) and qubits k..n-1 are bits of the chunk id.

Amplitudes are stored as two parallel real arrays (``real``, ``imag``) of
the configured precision.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

import numpy as np

from quest_engine.config import DEFAULT_CONFIG, PRECISION_DTYPES

log = logging.getLogger(__name__)


def _is_pow2(x: int) -> bool:
    return x > 0 and (x & (x - 1)) == 0


@dataclass(eq=False)
class QubitRegister:
    num_qubits_in_state_vec: int
    num_amps_per_chunk: int
    num_chunks: int
    chunk_id: int
    real: np.ndarray
    imag: np.ndarray
    # exchange buffers, filled from the partner chunk before distributed updates
    pair_real: Optional[np.ndarray] = field(default=None, repr=False)
    pair_imag: Optional[np.ndarray] = field(default=None, repr=False)
    # communication layer (None: single process, no exchanges possible)
    env: Any = field(default=None, repr=False, compare=False)

    def validate(self):
        total = self.num_amps_per_chunk * self.num_chunks
        expected = 1 << self.num_qubits_in_state_vec
        if total != expected:
            raise ValueError(
                f"num_amps_per_chunk*num_chunks={total} != 2^num_qubits={expected}"
            )
        if not _is_pow2(self.num_chunks):
            raise ValueError(f"num_chunks must be a power of two, got {self.num_chunks}")
        if not 0 <= self.chunk_id < self.num_chunks:
            raise ValueError(
                f"chunk_id {self.chunk_id} out of range [0, {self.num_chunks})"
            )
        for name in ("real", "imag"):
            arr = getattr(self, name)
            if arr.shape != (self.num_amps_per_chunk,):
                raise ValueError(
                    f"{name} has shape {arr.shape}, expected ({self.num_amps_per_chunk},)"
                )

    @property
    def num_amps_total(self) -> int:
        return 1 << self.num_qubits_in_state_vec

    @property
    def num_local_qubits(self) -> int:
        return self.num_amps_per_chunk.bit_length() - 1

    @property
    def chunk_start(self) -> int:
        return self.chunk_id * self.num_amps_per_chunk

    @property
    def dtype(self):
        return self.real.dtype

    def global_index(self, local_index: int) -> int:
        return self.chunk_start + local_index

    def is_local(self, qubit: int) -> bool:
        return qubit < self.num_local_qubits

    def chunk_bit(self, qubit: int) -> int:
        """Value of a non-local qubit's bit for every amplitude in this chunk."""
        return (self.chunk_id >> (qubit - self.num_local_qubits)) & 1


def create_qubit_register(
    num_qubits: int,
    num_chunks: int = 1,
    chunk_id: int = 0,
    precision: int | None = None,
    env: Any = None,
) -> QubitRegister:
    """Allocate one zero-filled chunk of an n-qubit register."""
    if not isinstance(num_qubits, int) or num_qubits < 1:
        raise ValueError(f"num_qubits must be positive int, got {num_qubits!r}")
    if precision is None:
        dtype = DEFAULT_CONFIG.dtype
    elif precision in PRECISION_DTYPES:
        dtype = PRECISION_DTYPES[precision]
    else:
        raise ValueError(f"unsupported precision {precision!r}")
    N = 1 << num_qubits
    if not _is_pow2(num_chunks) or num_chunks > N:
        raise ValueError(
            f"num_chunks must be a power of two <= 2^num_qubits={N}, got {num_chunks}"
        )
    chunk_size = N // num_chunks
    qureg = QubitRegister(
        num_qubits_in_state_vec=num_qubits,
        num_amps_per_chunk=chunk_size,
        num_chunks=num_chunks,
        chunk_id=chunk_id,
        real=np.zeros(chunk_size, dtype=dtype),
        imag=np.zeros(chunk_size, dtype=dtype),
        env=env,
    )
    qureg.validate()
    log.debug("allocated chunk %d/%d: %d qubits, %d amps, %s",
              chunk_id, num_chunks, num_qubits, chunk_size, np.dtype(dtype).name)
    return qureg


# ── initial states ──────────────────────────────────────────────────

def init_zero_state(qureg: QubitRegister) -> None:
    """|0…0⟩: amplitude 1 at global index 0."""
    qureg.real[:] = 0
    qureg.imag[:] = 0
    if qureg.chunk_id == 0:
        qureg.real[0] = 1.0


def init_plus_state(qureg: QubitRegister) -> None:
    """Uniform superposition, every amplitude 1/sqrt(2^n)."""
    norm = 1.0 / np.sqrt(float(qureg.num_amps_total))
    qureg.real[:] = norm
    qureg.imag[:] = 0


def init_classical_state(qureg: QubitRegister, state_index: int) -> None:
    """Basis state |state_index⟩; only the owning chunk holds the amplitude."""
    if not 0 <= state_index < qureg.num_amps_total:
        raise ValueError(
            f"state index {state_index} out of range [0, {qureg.num_amps_total})"
        )
    qureg.real[:] = 0
    qureg.imag[:] = 0
    owner, local = divmod(state_index, qureg.num_amps_per_chunk)
    if owner == qureg.chunk_id:
        qureg.real[local] = 1.0


# ── accessors (local index) ─────────────────────────────────────────

def get_real_amp(qureg: QubitRegister, index: int):
    return qureg.real[index]


def get_imag_amp(qureg: QubitRegister, index: int):
    return qureg.imag[index]


def get_amp(qureg: QubitRegister, index: int) -> complex:
    return complex(qureg.real[index], qureg.imag[index])
