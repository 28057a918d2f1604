#!/usr/bin/env python3
"""Exceptions raised while configuring or synthesizing sweeps."""


class SweepError(Exception):
    """Base class for all sweep synthesis failures."""


class ConfigurationError(SweepError, ValueError):
    """Invalid sweep parameters, e.g. a sample rate below the Nyquist rate."""


class NumericDegeneracyError(SweepError, ArithmeticError):
    """The phase trimmer could not find a cutoff index (sweep too short)."""


class AllocationBoundsError(SweepError, IndexError):
    """The composite buffer is too large, or a copy would not fit inside it."""
