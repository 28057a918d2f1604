"""Exponential sine sweep stimulus generation for impulse response measurement."""

from logsweep.config import SweepConfig, ResolvedSweepConfig
from logsweep.errors import (
    SweepError,
    ConfigurationError,
    NumericDegeneracyError,
    AllocationBoundsError,
)
from logsweep.synthesis import (
    SweepResult,
    SweepSignals,
    generate_sweep,
    synthesize,
    synthesize_detailed,
)

__version__ = "0.1.0"
