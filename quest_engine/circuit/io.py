"""Circuit dict validation, parsing, and exchange segmentation.

Endianness convention: LITTLE-ENDIAN.
  qubit 0 = bit 0 (LSB) of the state-vector index.

Gate entries: {"gate": NAME, "qubits": [...], "params": {...}}.
Controlled gates list the control first: "qubits": [control, target].
"""
from __future__ import annotations

from typing import Any

import numpy as np

from quest_engine.kernel.algebra import Complex, Vector, magnitude
from quest_engine.kernel.gates import is_compact_unitary, is_unitary_matrix, matrix2

ENDIANNESS = "little"

PHASE_GATES = frozenset({"Z", "S", "T", "SDG", "TDG", "P"})

GATES_1Q_NO_PARAMS = frozenset({"Z", "S", "T", "SDG", "TDG"})
GATES_1Q_PARAM_SPEC: dict[str, dict[str, str]] = {
    "RX":       {"angle": "real"},
    "RY":       {"angle": "real"},
    "RZ":       {"angle": "real"},
    "P":        {"angle": "real"},
    "ROT":      {"angle": "real", "axis": "vector"},
    "ROT_CONJ": {"angle": "real", "axis": "vector"},
    "U":        {"alpha": "complex", "beta": "complex"},
    "MAT":      {"matrix": "matrix"},
    "MAT_CONJ": {"matrix": "matrix"},
}
GATES_2Q_PARAM_SPEC: dict[str, dict[str, str]] = {
    "CRX":       {"angle": "real"},
    "CRY":       {"angle": "real"},
    "CRZ":       {"angle": "real"},
    "CROT":      {"angle": "real", "axis": "vector"},
    "CROT_CONJ": {"angle": "real", "axis": "vector"},
    "CU":        {"alpha": "complex", "beta": "complex"},
}

ALL_1Q = GATES_1Q_NO_PARAMS | set(GATES_1Q_PARAM_SPEC)
ALL_2Q = set(GATES_2Q_PARAM_SPEC)
ALL_GATES = ALL_1Q | ALL_2Q


# ── param coercion ──────────────────────────────────────────────────
def _coerce(tag: str, key: str, kind: str, value):
    if kind == "real":
        if isinstance(value, bool) or not isinstance(value, (int, float, np.floating, np.integer)):
            raise ValueError(f"{tag}: param '{key}' bad type")
        return float(value)
    if kind == "complex":
        if isinstance(value, Complex):
            return value
        if isinstance(value, bool) or not isinstance(value, (int, float, complex, np.number)):
            raise ValueError(f"{tag}: param '{key}' bad type")
        return Complex.from_complex(complex(value))
    if kind == "vector":
        if not isinstance(value, Vector):
            if not isinstance(value, (list, tuple)) or len(value) != 3:
                raise ValueError(f"{tag}: param '{key}' must be a 3-vector")
            value = Vector(*(float(c) for c in value))
        if not magnitude(value) > 0:
            raise ValueError(f"{tag}: axis must be non-zero")
        return value
    if kind == "matrix":
        try:
            m = matrix2(value)
        except (TypeError, ValueError) as e:
            raise ValueError(f"{tag}: param '{key}' {e}") from e
        if not is_unitary_matrix(m):
            raise ValueError(f"{tag}: matrix is not unitary")
        return m
    raise AssertionError(kind)


# ── validation ──────────────────────────────────────────────────────
def validate_circuit_dict(d: dict[str, Any]) -> dict:
    """Validate and normalise a circuit dict.  Raises ValueError on bad input."""
    if not isinstance(d, dict):
        raise ValueError("circuit must be a dict")
    missing = {"number_of_qubits", "gates"} - set(d)
    if missing:
        raise ValueError(f"missing required keys: {missing}")
    extra = set(d) - {"number_of_qubits", "gates"}
    if extra:
        raise ValueError(f"unknown top-level keys: {extra}")

    n = d["number_of_qubits"]
    if not isinstance(n, int) or n < 1:
        raise ValueError(f"number_of_qubits must be positive int, got {n!r}")

    if not isinstance(d["gates"], list):
        raise ValueError("gates must be a list")

    return {
        "number_of_qubits": n,
        "gates": [_validate_gate(g, n, i) for i, g in enumerate(d["gates"])],
    }


def _validate_gate(g: dict, nq: int, idx: int) -> dict:
    tag = f"gate[{idx}]"
    if not isinstance(g, dict):
        raise ValueError(f"{tag}: must be a dict")
    if not {"qubits", "gate"} <= set(g):
        raise ValueError(f"{tag}: missing 'qubits' or 'gate'")
    if set(g) - {"qubits", "gate", "params"}:
        raise ValueError(f"{tag}: unknown keys {set(g) - {'qubits', 'gate', 'params'}}")

    qubits = g["qubits"]
    if not isinstance(qubits, list) or not all(isinstance(q, int) for q in qubits):
        raise ValueError(f"{tag}: qubits must be list[int]")
    for q in qubits:
        if q < 0 or q >= nq:
            raise ValueError(f"{tag}: qubit {q} out of range [0, {nq})")

    name = g["gate"]
    if name not in ALL_GATES:
        raise ValueError(f"{tag}: unsupported gate '{name}'")

    expected_arity = 1 if name in ALL_1Q else 2
    if len(qubits) != expected_arity:
        raise ValueError(f"{tag}: {name} needs {expected_arity} qubit(s), got {len(qubits)}")
    if expected_arity == 2 and qubits[0] == qubits[1]:
        raise ValueError(f"{tag}: control and target qubits must differ")

    raw = g.get("params") or {}
    kinds = GATES_1Q_PARAM_SPEC.get(name) or GATES_2Q_PARAM_SPEC.get(name) or {}
    params = {}
    for key, kind in kinds.items():
        if key not in raw:
            raise ValueError(f"{tag}: {name} requires param '{key}'")
        params[key] = _coerce(tag, key, kind, raw[key])
    if "alpha" in params and not is_compact_unitary(params["alpha"], params["beta"]):
        raise ValueError(f"{tag}: |alpha|^2 + |beta|^2 must be 1")

    return {"qubits": list(qubits), "gate": name, "params": params}


# ── exchange segmentation ───────────────────────────────────────────
def needs_exchange(gate: dict, k: int) -> bool:
    """True if the gate's target qubit lies outside the chunk (q >= k)."""
    if gate["gate"] in PHASE_GATES:
        return False
    return gate["qubits"][-1] >= k


def segment_by_exchange(gates: list[dict], k: int) -> list[dict]:
    """Split a gate list into maximal runs that all do / do not need an exchange."""
    segments: list[dict] = []
    for g in gates:
        ex = needs_exchange(g, k)
        if not segments or segments[-1]["exchange"] != ex:
            segments.append({"exchange": ex, "gates": []})
        segments[-1]["gates"].append(g)
    return segments
