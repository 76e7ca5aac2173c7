"""Statevector representation evolved in place by gate operations."""

from __future__ import annotations

import logging
import math
from typing import Dict, Iterable, Tuple

from .errors import DimensionMismatchError
from .gates import GateOperation


AmplitudeVector = Tuple[complex, ...]

NORM_TOLERANCE = 1e-9

logger = logging.getLogger(__name__)


def _validate_dimension(length: int) -> int:
    if length < 2:
        raise DimensionMismatchError("Quantum state must contain at least two amplitudes.")
    num_qubits = int(math.log2(length))
    if 2**num_qubits != length:
        raise DimensionMismatchError(
            f"State vector length {length} is not a power of two and cannot represent qubits."
        )
    return num_qubits


def _normalise(amplitudes: AmplitudeVector) -> AmplitudeVector:
    norm_squared = sum(abs(value) ** 2 for value in amplitudes)
    if math.isclose(norm_squared, 1.0, rel_tol=1e-9, abs_tol=1e-12):
        return amplitudes
    if math.isclose(norm_squared, 0.0, abs_tol=1e-12):
        raise ValueError("Cannot normalise the zero vector.")
    scale = math.sqrt(norm_squared)
    return tuple(value / scale for value in amplitudes)


def basis_label(index: int, width: int) -> str:
    """Bitstring for basis ``index``; bit 0 is the rightmost character."""

    return format(index, f"0{width}b")


def zero_state(num_qubits: int) -> AmplitudeVector:
    return (1.0 + 0j,) + (0j,) * ((1 << num_qubits) - 1)


class StateVector:
    """Amplitudes of an n-qubit register, starting at ``|0...0>``.

    Qubit ``q`` is bit ``q`` of the basis-state index, so in bitstrings
    qubit 0 is the rightmost character. ``apply`` replaces the amplitudes in
    place and leaves them untouched when the operation is rejected.
    """

    def __init__(self, num_qubits: int, *, tolerance: float = NORM_TOLERANCE) -> None:
        if isinstance(num_qubits, bool) or not isinstance(num_qubits, int) or num_qubits <= 0:
            raise DimensionMismatchError("A state vector needs at least one qubit.")
        self.num_qubits = num_qubits
        self.tolerance = tolerance
        self._amplitudes: AmplitudeVector = zero_state(num_qubits)

    @classmethod
    def from_amplitudes(
        cls, amplitudes: Iterable[complex], *, normalise: bool = True
    ) -> "StateVector":
        vector = tuple(complex(value) for value in amplitudes)
        num_qubits = _validate_dimension(len(vector))
        if normalise:
            vector = _normalise(vector)
        state = cls(num_qubits)
        state._amplitudes = vector
        return state

    @property
    def amplitudes(self) -> AmplitudeVector:
        return self._amplitudes

    @property
    def dimension(self) -> int:
        return len(self._amplitudes)

    def norm(self) -> float:
        return math.sqrt(sum(abs(value) ** 2 for value in self._amplitudes))

    def is_normalised(self) -> bool:
        return math.isclose(self.norm(), 1.0, rel_tol=self.tolerance, abs_tol=self.tolerance)

    def apply(self, operation: GateOperation) -> "StateVector":
        for target in operation.targets:
            if target >= self.num_qubits:
                raise DimensionMismatchError(
                    f"Operation '{operation.describe()}' targets qubit {target}, "
                    f"but the state holds {self.num_qubits} qubit(s)."
                )
        self._amplitudes = operation.apply(self._amplitudes, self.num_qubits)
        logger.debug("Applied %s to %d-qubit state", operation.describe(), self.num_qubits)
        return self

    def apply_all(self, operations: Iterable[GateOperation]) -> "StateVector":
        for operation in operations:
            self.apply(operation)
        return self

    def probability_vector(self) -> Tuple[float, ...]:
        return tuple(abs(value) ** 2 for value in self._amplitudes)

    def probabilities(self) -> Dict[str, float]:
        width = self.num_qubits
        return {
            basis_label(index, width): probability
            for index, probability in enumerate(self.probability_vector())
        }

    def probability_of(self, bitstring: str) -> float:
        if len(bitstring) != self.num_qubits or set(bitstring) - {"0", "1"}:
            raise DimensionMismatchError(
                f"Bitstring {bitstring!r} does not describe a {self.num_qubits}-qubit basis state."
            )
        return abs(self._amplitudes[int(bitstring, 2)]) ** 2

    def reset(self) -> "StateVector":
        self._amplitudes = zero_state(self.num_qubits)
        return self

    def copy(self) -> "StateVector":
        clone = StateVector(self.num_qubits, tolerance=self.tolerance)
        clone._amplitudes = self._amplitudes
        return clone

    def __repr__(self) -> str:
        return f"StateVector(num_qubits={self.num_qubits}, amplitudes={self._amplitudes!r})"
