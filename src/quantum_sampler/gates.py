"""Gate library: unitary matrices for named gates and their application helpers."""

from __future__ import annotations

import cmath
import math
import numbers
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, Mapping, Optional, Sequence, Tuple, Union

from .errors import DimensionMismatchError, InvalidParameterError, UnsupportedGateError


Matrix = Tuple[Tuple[complex, ...], ...]

UNITARY_TOLERANCE = 1e-9


def _is_unitary(matrix: Matrix, *, tolerance: float = UNITARY_TOLERANCE) -> bool:
    size = len(matrix)
    for row in matrix:
        if len(row) != size:
            return False
    for i in range(size):
        for j in range(size):
            total = 0j
            for k in range(size):
                total += matrix[i][k] * matrix[j][k].conjugate()
            expected = 1.0 if i == j else 0.0
            if not math.isclose(total.real, expected, rel_tol=tolerance, abs_tol=tolerance):
                return False
            if not math.isclose(total.imag, 0.0, abs_tol=tolerance):
                return False
    return True


@dataclass(frozen=True)
class Gate:
    """Unitary matrix describing a quantum gate."""

    name: str
    matrix: Matrix
    num_qubits: int

    def __post_init__(self) -> None:
        expected = 2**self.num_qubits
        if len(self.matrix) != expected:
            raise ValueError(
                f"Gate {self.name} expects {expected} rows, received {len(self.matrix)} instead."
            )
        if not all(len(row) == expected for row in self.matrix):
            raise ValueError(f"Gate {self.name} matrix must be square.")
        if not _is_unitary(self.matrix):
            raise ValueError(f"Gate {self.name} matrix is not unitary within tolerance.")


@dataclass(frozen=True)
class Parameter:
    """Named placeholder for a gate angle that is bound before execution."""

    name: str

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name:
            raise InvalidParameterError("Parameter names must be non-empty strings.")

    def __str__(self) -> str:
        return self.name


ParameterValue = Union[float, Parameter]


def _create_gate(name: str, matrix: Iterable[Iterable[complex]], num_qubits: int) -> Gate:
    mat = tuple(tuple(complex(value) for value in row) for row in matrix)
    return Gate(name=name, matrix=mat, num_qubits=num_qubits)


def _permutation_gate(name: str, permutation: Sequence[int], num_qubits: int) -> Gate:
    size = len(permutation)
    rows = [[1.0 if column == permutation[row] else 0.0 for column in range(size)] for row in range(size)]
    return _create_gate(name, rows, num_qubits)


def _diagonal_gate(name: str, diagonal: Sequence[complex], num_qubits: int) -> Gate:
    size = len(diagonal)
    rows = [[diagonal[row] if row == column else 0.0 for column in range(size)] for row in range(size)]
    return _create_gate(name, rows, num_qubits)


SQRT_HALF = 1.0 / math.sqrt(2.0)

ID_GATE = _diagonal_gate("I", [1.0, 1.0], 1)

X_GATE = _create_gate(
    "X",
    [
        [0.0, 1.0],
        [1.0, 0.0],
    ],
    1,
)

Y_GATE = _create_gate(
    "Y",
    [
        [0.0, -1.0j],
        [1.0j, 0.0],
    ],
    1,
)

Z_GATE = _diagonal_gate("Z", [1.0, -1.0], 1)

H_GATE = _create_gate(
    "H",
    [
        [SQRT_HALF, SQRT_HALF],
        [SQRT_HALF, -SQRT_HALF],
    ],
    1,
)

S_GATE = _diagonal_gate("S", [1.0, 1.0j], 1)

SDG_GATE = _diagonal_gate("SDG", [1.0, -1.0j], 1)

T_GATE = _diagonal_gate("T", [1.0, cmath.exp(1.0j * math.pi / 4.0)], 1)

# Multi-qubit matrices index the first target as the most significant bit,
# so controls come first and the acted-on qubit last.
CX_GATE = _permutation_gate("CX", [0, 1, 3, 2], 2)

CZ_GATE = _diagonal_gate("CZ", [1.0, 1.0, 1.0, -1.0], 2)

SWAP_GATE = _permutation_gate("SWAP", [0, 2, 1, 3], 2)

CCX_GATE = _permutation_gate("CCX", [0, 1, 2, 3, 4, 5, 7, 6], 3)

SUPPORTED_GATES: Dict[str, Gate] = {
    gate.name: gate
    for gate in (
        ID_GATE,
        X_GATE,
        Y_GATE,
        Z_GATE,
        H_GATE,
        S_GATE,
        SDG_GATE,
        T_GATE,
        CX_GATE,
        CZ_GATE,
        SWAP_GATE,
        CCX_GATE,
    )
}


def phase_gate(theta: float) -> Gate:
    return _diagonal_gate("P", [1.0, cmath.exp(1.0j * theta)], 1)


def rx_gate(theta: float) -> Gate:
    cos = math.cos(theta / 2.0)
    sin = math.sin(theta / 2.0)
    return _create_gate("RX", [[cos, -1.0j * sin], [-1.0j * sin, cos]], 1)


def ry_gate(theta: float) -> Gate:
    cos = math.cos(theta / 2.0)
    sin = math.sin(theta / 2.0)
    return _create_gate("RY", [[cos, -sin], [sin, cos]], 1)


def rz_gate(theta: float) -> Gate:
    return _diagonal_gate(
        "RZ", [cmath.exp(-0.5j * theta), cmath.exp(0.5j * theta)], 1
    )


PARAMETERIZED_GATES: Dict[str, Callable[[float], Gate]] = {
    "P": phase_gate,
    "RX": rx_gate,
    "RY": ry_gate,
    "RZ": rz_gate,
}

_PARAMETERIZED_ARITY = {name: 1 for name in PARAMETERIZED_GATES}

GATE_ALIASES = {
    "ID": "I",
    "CNOT": "CX",
    "TOFFOLI": "CCX",
    "PHASE": "P",
}


def canonical_gate_name(kind: str) -> str:
    """Return the library name for ``kind``, accepting aliases in any case."""

    if not isinstance(kind, str):
        raise UnsupportedGateError(f"Gate kind must be a string, received {kind!r}.")
    name = kind.strip().upper()
    name = GATE_ALIASES.get(name, name)
    if name not in SUPPORTED_GATES and name not in PARAMETERIZED_GATES:
        raise UnsupportedGateError(f"Gate '{kind}' is not supported.")
    return name


def is_parameterized(kind: str) -> bool:
    return canonical_gate_name(kind) in PARAMETERIZED_GATES


def gate_arity(kind: str) -> int:
    name = canonical_gate_name(kind)
    if name in PARAMETERIZED_GATES:
        return _PARAMETERIZED_ARITY[name]
    return SUPPORTED_GATES[name].num_qubits


def validate_angle(theta: object, *, gate_name: str = "gate") -> float:
    """Return ``theta`` as a float, rejecting non-real and non-finite values."""

    if isinstance(theta, bool) or not isinstance(theta, numbers.Real):
        raise InvalidParameterError(
            f"Gate {gate_name} requires a real-valued parameter, received {theta!r}."
        )
    value = float(theta)
    if not math.isfinite(value):
        raise InvalidParameterError(f"Gate {gate_name} parameter must be finite, received {value}.")
    return value


def matrix_for(kind: str, theta: Optional[float] = None) -> Gate:
    """Build the unitary for ``kind``.

    Fixed gates are shared module-level instances. Parameterized gates
    (``P``, ``RX``, ``RY``, ``RZ``) are built on every call from a finite
    real ``theta``.
    """

    name = canonical_gate_name(kind)
    if name in PARAMETERIZED_GATES:
        if theta is None:
            raise InvalidParameterError(f"Gate {name} requires a parameter.")
        if isinstance(theta, Parameter):
            raise InvalidParameterError(
                f"Gate {name} parameter '{theta.name}' must be bound before building its matrix."
            )
        return PARAMETERIZED_GATES[name](validate_angle(theta, gate_name=name))
    if theta is not None:
        raise InvalidParameterError(f"Gate {name} does not take a parameter.")
    return SUPPORTED_GATES[name]


@dataclass(frozen=True)
class GateOperation:
    """Concrete placement of a gate over a set of qubits."""

    kind: str
    targets: Tuple[int, ...]
    theta: Optional[ParameterValue] = None

    def __post_init__(self) -> None:
        name = canonical_gate_name(self.kind)
        object.__setattr__(self, "kind", name)
        try:
            targets = tuple(int(target) for target in self.targets)
        except (TypeError, ValueError) as exc:
            raise DimensionMismatchError(
                f"Gate {name} targets must be integers, received {self.targets!r}."
            ) from exc
        object.__setattr__(self, "targets", targets)

        arity = gate_arity(name)
        if len(targets) != arity:
            raise DimensionMismatchError(
                f"Gate {name} expects {arity} targets, received {len(targets)}."
            )
        if len(set(targets)) != len(targets):
            raise DimensionMismatchError("Target qubits must be unique for a gate operation.")
        if any(target < 0 for target in targets):
            raise DimensionMismatchError(f"Gate {name} targets {targets} must be non-negative.")

        if name in PARAMETERIZED_GATES:
            if self.theta is None:
                raise InvalidParameterError(f"Gate {name} requires a parameter.")
            if not isinstance(self.theta, Parameter):
                object.__setattr__(self, "theta", validate_angle(self.theta, gate_name=name))
        elif self.theta is not None:
            raise InvalidParameterError(f"Gate {name} does not take a parameter.")

    @property
    def num_qubits(self) -> int:
        return len(self.targets)

    @property
    def parameter(self) -> Optional[Parameter]:
        return self.theta if isinstance(self.theta, Parameter) else None

    @property
    def is_bound(self) -> bool:
        return self.parameter is None

    @property
    def gate(self) -> Gate:
        return matrix_for(self.kind, self.theta)

    def bind(self, values: Mapping[str, float]) -> "GateOperation":
        """Return a copy with a symbolic parameter replaced from ``values``."""

        parameter = self.parameter
        if parameter is None or parameter.name not in values:
            return self
        return GateOperation(kind=self.kind, targets=self.targets, theta=values[parameter.name])

    def apply(self, state: Tuple[complex, ...], num_qubits: int) -> Tuple[complex, ...]:
        """Apply the gate operation to a flat state vector."""

        if len(state) != 2**num_qubits:
            raise DimensionMismatchError(
                f"State length {len(state)} does not match expected dimension 2**{num_qubits}."
            )

        return apply_gate_matrix(state, self.gate.matrix, self.targets, num_qubits)

    def describe(self) -> str:
        label = self.kind
        if self.theta is not None:
            if isinstance(self.theta, Parameter):
                label = f"{self.kind}({self.theta.name})"
            else:
                label = f"{self.kind}({self.theta:.4f})"
        if len(self.targets) == 1:
            return f"{label} q{self.targets[0]}"
        if self.kind in ("CX", "CZ", "CCX"):
            controls = ",".join(f"q{q}" for q in self.targets[:-1])
            return f"{label} {controls}->q{self.targets[-1]}"
        target_list = ",".join(f"q{q}" for q in self.targets)
        return f"{label} ({target_list})"

    def __str__(self) -> str:  # pragma: no cover - convenience wrapper
        return self.describe()


def apply_gate_matrix(
    state: Tuple[complex, ...], gate_matrix: Matrix, targets: Sequence[int], num_qubits: int
) -> Tuple[complex, ...]:
    """Apply a gate matrix to the provided state vector.

    Qubit ``q`` is bit ``q`` of the basis-state index. The first target is the
    most significant bit of the gate matrix's own index.
    """

    targets = tuple(targets)
    if any(q < 0 or q >= num_qubits for q in targets):
        raise DimensionMismatchError(f"Targets {targets} are invalid for {num_qubits} qubits.")
    if len(gate_matrix) != 1 << len(targets):
        raise DimensionMismatchError(
            f"A {len(gate_matrix)}x{len(gate_matrix)} matrix cannot act on {len(targets)} target(s)."
        )

    dimension = 1 << num_qubits
    result = [0j] * dimension
    target_mask = 0
    for qubit in targets:
        target_mask |= 1 << qubit

    block_size = 1 << len(targets)
    reversed_targets = tuple(reversed(targets))

    for base_index in range(dimension):
        if base_index & target_mask:
            continue
        indices = []
        for pattern in range(block_size):
            idx = base_index
            for offset, qubit in enumerate(reversed_targets):
                if (pattern >> offset) & 1:
                    idx |= 1 << qubit
            indices.append(idx)

        vector = [state[idx] for idx in indices]
        transformed = []
        for row in gate_matrix:
            total = 0j
            for coefficient, amplitude in zip(row, vector):
                total += coefficient * amplitude
            transformed.append(total)

        for idx, value in zip(indices, transformed):
            result[idx] = value

    return tuple(result)
