"""quantum-sampler: statevector simulation and seeded shot sampling for small circuits."""

from .circuit import Circuit
from .errors import (
    DimensionMismatchError,
    InvalidDistributionError,
    InvalidParameterError,
    MeasurementConflictError,
    QuantumSamplerError,
    SweepCancelledError,
    UnsupportedGateError,
)
from .gates import PARAMETERIZED_GATES, SUPPORTED_GATES, Gate, GateOperation, Parameter, matrix_for
from .sampler import SampleResult, Sampler, sample
from .simulator import CircuitSimulator, SweepPoint
from .state import StateVector

__all__ = [
    "Circuit",
    "CircuitSimulator",
    "SweepPoint",
    "StateVector",
    "Gate",
    "GateOperation",
    "Parameter",
    "SUPPORTED_GATES",
    "PARAMETERIZED_GATES",
    "matrix_for",
    "SampleResult",
    "Sampler",
    "sample",
    "QuantumSamplerError",
    "UnsupportedGateError",
    "InvalidParameterError",
    "DimensionMismatchError",
    "InvalidDistributionError",
    "MeasurementConflictError",
    "SweepCancelledError",
]
