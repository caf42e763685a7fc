"""Distributed half-updates for gates whose target qubit is non-local.

When the target qubit q >= k = log2(chunk_size), the paired amplitudes live
in different chunks:

    partner_bit = q - k
    chunk c  pairs with  c XOR (1 << partner_bit)

Before calling into this module the partner chunk has been copied into
``qureg.pair_real`` / ``qureg.pair_imag``.  Each side only rewrites its own
amplitudes:

    upper chunk (target bit 0):  own' = u00*own  + u01*pair
    lower chunk (target bit 1):  own' = u10*pair + u11*own
"""
from __future__ import annotations

import numpy as np


def apply_2x2_half(qureg, entries, upper: bool, control: int | None = None) -> None:
    """Update this chunk's half of every cross-chunk pair.  Modifies in-place.

    ``control`` must be a local qubit (a non-local control is resolved by the
    caller from the chunk id).
    """
    if qureg.pair_real is None or qureg.pair_imag is None:
        raise RuntimeError("pair buffers are empty: exchange must run first")
    u00, u01, u10, u11 = entries
    own = qureg.real + 1j * qureg.imag
    pair = qureg.pair_real + 1j * qureg.pair_imag
    if upper:
        new = u00 * own + u01 * pair
    else:
        new = u10 * pair + u11 * own
    if control is None:
        qureg.real[:], qureg.imag[:] = new.real, new.imag
        return
    mask = ((np.arange(len(qureg.real)) >> control) & 1) == 1
    qureg.real[mask] = new.real[mask]
    qureg.imag[mask] = new.imag[mask]
