"""In-process stand-in for the inter-chunk communication layer.

A ``LocalCluster`` owns every chunk of one state vector, each chunk a
``QubitRegister`` that would live in its own process in a distributed run.
Operations run SPMD style: ``run(fn, ...)`` calls ``fn`` once per chunk in
rank order.  Before the step, a snapshot of all chunks is taken, and
``LocalEnv.exchange`` serves partner amplitudes from that snapshot, so every
chunk sees its partner's pre-step values no matter the execution order.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Optional, TextIO

import numpy as np

from quest_engine.register.qureg import QubitRegister, create_qubit_register, init_zero_state
from quest_engine.register import report

log = logging.getLogger(__name__)


class LocalEnv:
    """Pairwise chunk exchange between registers of the same process."""

    def __init__(self, num_ranks: int):
        self.num_ranks = num_ranks
        self.registers: list[QubitRegister] = []
        self._snapshot: Optional[dict[int, tuple[np.ndarray, np.ndarray]]] = None

    def begin_step(self) -> None:
        self._snapshot = {r.chunk_id: (r.real.copy(), r.imag.copy()) for r in self.registers}

    def end_step(self) -> None:
        self._snapshot = None

    def exchange(self, qureg: QubitRegister, pair_rank: int) -> None:
        """Copy chunk ``pair_rank``'s pre-step amplitudes into ``qureg``'s pair buffers.

        Only valid inside ``LocalCluster.run``: outside a step the partner may
        already hold post-gate values.
        """
        if not 0 <= pair_rank < self.num_ranks:
            raise ValueError(f"pair rank {pair_rank} out of range [0, {self.num_ranks})")
        if self._snapshot is None:
            raise RuntimeError("exchange outside a LocalCluster.run step")
        real, imag = self._snapshot[pair_rank]
        if qureg.pair_real is None:
            qureg.pair_real = np.empty_like(qureg.real)
            qureg.pair_imag = np.empty_like(qureg.imag)
        qureg.pair_real[:] = real
        qureg.pair_imag[:] = imag


class LocalCluster:
    """All chunks of an n-qubit register, held in one process."""

    def __init__(self, num_qubits: int, num_chunks: int = 1, precision: int | None = None):
        self.env = LocalEnv(num_chunks)
        self.registers = [
            create_qubit_register(num_qubits, num_chunks, chunk_id=c,
                                  precision=precision, env=self.env)
            for c in range(num_chunks)
        ]
        self.env.registers = self.registers
        self.num_qubits = num_qubits
        self.num_chunks = num_chunks
        self.run(init_zero_state)
        log.debug("cluster: %d qubits over %d chunk(s)", num_qubits, num_chunks)

    @property
    def num_amps_per_chunk(self) -> int:
        return self.registers[0].num_amps_per_chunk

    def __iter__(self):
        return iter(self.registers)

    def run(self, fn: Callable, *args, **kwargs) -> list:
        """Call ``fn(qureg, *args, **kwargs)`` on every chunk (one SPMD step)."""
        self.env.begin_step()
        try:
            return [fn(qureg, *args, **kwargs) for qureg in self.registers]
        finally:
            self.env.end_step()

    def collect_state(self) -> np.ndarray:
        """Concatenate all chunks into one complex vector (global index order)."""
        return np.concatenate([r.real + 1j * r.imag for r in self.registers])

    def calc_total_probability(self):
        return sum(self.run(report.calc_total_probability))

    def export(self, directory: str | Path | None = None) -> None:
        self.run(report.export_chunk_to_file, directory)

    def report_params(self, stream: Optional[TextIO] = None) -> None:
        self.run(report.report_register_params, stream)
