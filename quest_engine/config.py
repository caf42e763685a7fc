"""
Configuration for the quest_engine simulator.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import numpy as np

# precision flag → amplitude dtype (single / double / extended)
PRECISION_DTYPES = {
    1: np.float32,
    2: np.float64,
    4: np.longdouble,
}


@dataclass
class EngineConfig:
    """Configuration for register allocation, export and the Spark runner."""

    # Floating-point width of amplitudes: 1, 2 or 4
    precision: int = 2

    # Directory receiving state_rank_<id>.csv exports
    output_dir: Path = field(default_factory=lambda: Path("."))

    # Spark configuration
    spark_app_name: str = "QuestEngine"
    spark_master: str = "local[*]"

    # Logging: level applied by the runners, optional copy of every record
    log_level: int = logging.INFO
    log_file: Optional[Path] = None

    def __post_init__(self):
        if self.precision not in PRECISION_DTYPES:
            raise ValueError(
                f"precision must be one of {sorted(PRECISION_DTYPES)}, got {self.precision!r}"
            )
        self.output_dir = Path(self.output_dir)
        if self.log_file is not None:
            self.log_file = Path(self.log_file)

    @property
    def dtype(self) -> type:
        """numpy dtype used for the real and imaginary amplitude arrays."""
        return PRECISION_DTYPES[self.precision]

    @classmethod
    def from_env(cls) -> "EngineConfig":
        """Build a config from QE_PRECISION, QE_OUTPUT_DIR, QE_LOG_LEVEL and QE_LOG_FILE."""
        kwargs = {}
        prec = os.environ.get("QE_PRECISION")
        if prec is not None:
            kwargs["precision"] = int(prec)
        out = os.environ.get("QE_OUTPUT_DIR")
        if out is not None:
            kwargs["output_dir"] = Path(out)
        level = os.environ.get("QE_LOG_LEVEL")
        if level is not None:
            kwargs["log_level"] = logging.getLevelName(level.upper())
        log_file = os.environ.get("QE_LOG_FILE")
        if log_file is not None:
            kwargs["log_file"] = Path(log_file)
        return cls(**kwargs)


# Default configuration instance
DEFAULT_CONFIG = EngineConfig.from_env()
