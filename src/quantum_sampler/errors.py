"""Exception hierarchy raised by the simulator core."""

from __future__ import annotations


class QuantumSamplerError(ValueError):
    """Base class for malformed circuits, gates and distributions."""


class UnsupportedGateError(QuantumSamplerError):
    """Raised when a gate kind is not part of the gate library."""


class InvalidParameterError(QuantumSamplerError):
    """Raised for non-finite, missing or unexpected gate parameters."""


class DimensionMismatchError(QuantumSamplerError):
    """Raised when targets do not fit the register or the gate arity."""


class InvalidDistributionError(QuantumSamplerError):
    """Raised when probabilities are negative or do not sum to one."""


class MeasurementConflictError(QuantumSamplerError):
    """Raised when two measurements write the same classical bit."""


class SweepCancelledError(RuntimeError):
    """Raised when a parameter sweep is cancelled before completion."""
