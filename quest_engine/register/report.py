"""Register statistics and per-chunk export.

Export format (one file per chunk, ``state_rank_<chunk_id>.csv``):
  header ``real, imag`` on chunk 0 only, then one ``real, imag`` line per
  local amplitude in ascending local index, 12 decimals.
"""
from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional, TextIO

import numpy as np

from quest_engine.config import DEFAULT_CONFIG
from quest_engine.register.qureg import QubitRegister, get_imag_amp, get_real_amp

log = logging.getLogger(__name__)

HEADER = "real, imag\n"


def state_filename(chunk_id: int) -> str:
    return f"state_rank_{chunk_id}.csv"


def get_probability(qureg: QubitRegister, index: int):
    """|amplitude|^2 at a local index."""
    real = get_real_amp(qureg, index)
    imag = get_imag_amp(qureg, index)
    return real * real + imag * imag


def calc_total_probability(qureg: QubitRegister):
    """Sum of |amplitude|^2 over this chunk."""
    return np.sum(qureg.real * qureg.real + qureg.imag * qureg.imag)


def _amp_formatter(dtype):
    """12-decimal formatter; extended precision is rounded without a float64 detour."""
    if dtype == np.longdouble and np.finfo(np.longdouble).bits > 64:
        return lambda x: np.format_float_positional(x, precision=12, unique=False, trim="k")
    return lambda x: "%.12f" % float(x)


def export_chunk_to_file(qureg: QubitRegister, directory: str | Path | None = None) -> None:
    """Write this chunk's amplitudes to ``state_rank_<chunk_id>.csv``.

    I/O errors are not caught.
    """
    d = Path(directory) if directory is not None else DEFAULT_CONFIG.output_dir
    path = d / state_filename(qureg.chunk_id)
    fmt = _amp_formatter(qureg.dtype)
    with open(path, "w") as f:
        if qureg.chunk_id == 0:
            f.write(HEADER)
        for index in range(qureg.num_amps_per_chunk):
            f.write(f"{fmt(qureg.real[index])}, {fmt(qureg.imag[index])}\n")
    log.info("exported chunk %d (%d amps) to %s",
             qureg.chunk_id, qureg.num_amps_per_chunk, path)


def report_register_params(qureg: QubitRegister, stream: Optional[TextIO] = None) -> None:
    """Print register sizes.  Only chunk 0 writes, so ranks do not duplicate output."""
    num_amps = 1 << qureg.num_qubits_in_state_vec
    num_amps_per_rank = num_amps // qureg.num_chunks
    if qureg.chunk_id != 0:
        return
    out = stream if stream is not None else sys.stdout
    out.write("QUBITS:\n")
    out.write(f"Number of qubits is {qureg.num_qubits_in_state_vec}.\n")
    out.write(f"Number of amps is {num_amps}.\n")
    out.write(f"Number of amps per rank is {num_amps_per_rank}.\n")
