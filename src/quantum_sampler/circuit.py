"""Ordered gate sequences with terminal measurements into classical bits."""

from __future__ import annotations

from typing import Dict, FrozenSet, Iterator, List, Mapping, Optional, Sequence, Tuple, Union

from .errors import DimensionMismatchError, InvalidParameterError, MeasurementConflictError
from .gates import GateOperation, Parameter, ParameterValue, validate_angle


ClbitKey = Union[int, str]
Bindings = Mapping[Union[str, Parameter], float]


class Circuit:
    """Gate operations over ``num_qubits`` qubits plus a measurement map.

    Measurements are terminal: whatever order they are added in, they read
    the register after every gate has been applied. Each classical bit has at
    most one writer. Classical bits may carry labels so that results can be
    looked up by name as well as by position.
    """

    def __init__(
        self,
        num_qubits: int,
        num_clbits: Optional[int] = None,
        *,
        clbit_labels: Optional[Sequence[str]] = None,
        name: Optional[str] = None,
    ) -> None:
        if isinstance(num_qubits, bool) or not isinstance(num_qubits, int) or num_qubits <= 0:
            raise DimensionMismatchError("A circuit must operate on at least one qubit.")
        if num_clbits is None:
            num_clbits = len(clbit_labels) if clbit_labels is not None else num_qubits
        if num_clbits < 0:
            raise DimensionMismatchError("Classical bit count must be non-negative.")
        labels: Tuple[str, ...] = ()
        if clbit_labels is not None:
            labels = tuple(clbit_labels)
            if len(labels) != num_clbits:
                raise DimensionMismatchError(
                    f"Expected {num_clbits} classical bit labels, received {len(labels)}."
                )
            if len(set(labels)) != len(labels):
                raise DimensionMismatchError("Classical bit labels must be unique.")
        self.num_qubits = num_qubits
        self.num_clbits = num_clbits
        self.clbit_labels = labels
        self.name = name
        self._operations: List[GateOperation] = []
        self._measurements: Dict[int, int] = {}

    @property
    def operations(self) -> Tuple[GateOperation, ...]:
        return tuple(self._operations)

    @property
    def measurements(self) -> Dict[int, int]:
        """Mapping of classical bit position to the qubit measured into it."""

        return dict(sorted(self._measurements.items()))

    @property
    def has_measurements(self) -> bool:
        return bool(self._measurements)

    @property
    def parameters(self) -> FrozenSet[Parameter]:
        return frozenset(
            operation.parameter for operation in self._operations if operation.parameter is not None
        )

    @property
    def parameter_names(self) -> Tuple[str, ...]:
        return tuple(sorted(parameter.name for parameter in self.parameters))

    @property
    def is_bound(self) -> bool:
        return not self.parameters

    def __len__(self) -> int:
        return len(self._operations)

    def __iter__(self) -> Iterator[GateOperation]:
        return iter(tuple(self._operations))

    def _check_targets(self, operation: GateOperation) -> None:
        for target in operation.targets:
            if target >= self.num_qubits:
                raise DimensionMismatchError(
                    f"Operation '{operation.describe()}' targets qubit {target}, "
                    f"but the circuit has {self.num_qubits} qubit(s)."
                )

    def append(
        self,
        operation: Union[GateOperation, str],
        targets: Optional[Sequence[int]] = None,
        theta: Optional[ParameterValue] = None,
    ) -> "Circuit":
        """Add a gate; accepts a ready ``GateOperation`` or a kind with targets."""

        if not isinstance(operation, GateOperation):
            if targets is None:
                raise DimensionMismatchError(f"Gate '{operation}' needs target qubits.")
            operation = GateOperation(kind=operation, targets=tuple(targets), theta=theta)
        elif targets is not None or theta is not None:
            raise ValueError("Targets and theta are taken from the GateOperation itself.")
        self._check_targets(operation)
        self._operations.append(operation)
        return self

    def extend(self, operations: Sequence[GateOperation]) -> "Circuit":
        for operation in operations:
            self.append(operation)
        return self

    def i(self, qubit: int) -> "Circuit":
        return self.append("I", (qubit,))

    def x(self, qubit: int) -> "Circuit":
        return self.append("X", (qubit,))

    def y(self, qubit: int) -> "Circuit":
        return self.append("Y", (qubit,))

    def z(self, qubit: int) -> "Circuit":
        return self.append("Z", (qubit,))

    def h(self, qubit: int) -> "Circuit":
        return self.append("H", (qubit,))

    def s(self, qubit: int) -> "Circuit":
        return self.append("S", (qubit,))

    def sdg(self, qubit: int) -> "Circuit":
        return self.append("SDG", (qubit,))

    def t(self, qubit: int) -> "Circuit":
        return self.append("T", (qubit,))

    def p(self, theta: ParameterValue, qubit: int) -> "Circuit":
        return self.append("P", (qubit,), theta)

    def rx(self, theta: ParameterValue, qubit: int) -> "Circuit":
        return self.append("RX", (qubit,), theta)

    def ry(self, theta: ParameterValue, qubit: int) -> "Circuit":
        return self.append("RY", (qubit,), theta)

    def rz(self, theta: ParameterValue, qubit: int) -> "Circuit":
        return self.append("RZ", (qubit,), theta)

    def cx(self, control: int, target: int) -> "Circuit":
        return self.append("CX", (control, target))

    def cz(self, control: int, target: int) -> "Circuit":
        return self.append("CZ", (control, target))

    def swap(self, first: int, second: int) -> "Circuit":
        return self.append("SWAP", (first, second))

    def ccx(self, first_control: int, second_control: int, target: int) -> "Circuit":
        return self.append("CCX", (first_control, second_control, target))

    def clbit_index(self, key: ClbitKey) -> int:
        """Resolve a classical bit position or label to its position."""

        if isinstance(key, str):
            try:
                return self.clbit_labels.index(key)
            except ValueError as exc:
                raise KeyError(f"Circuit has no classical bit labelled '{key}'.") from exc
        if isinstance(key, bool) or not isinstance(key, int) or not 0 <= key < self.num_clbits:
            raise DimensionMismatchError(
                f"Classical bit {key!r} is out of range for {self.num_clbits} classical bit(s)."
            )
        return key

    def measure(self, qubit: int, clbit: ClbitKey) -> "Circuit":
        if isinstance(qubit, bool) or not isinstance(qubit, int) or not 0 <= qubit < self.num_qubits:
            raise DimensionMismatchError(
                f"Cannot measure qubit {qubit!r} in a {self.num_qubits}-qubit circuit."
            )
        position = self.clbit_index(clbit)
        if position in self._measurements:
            raise MeasurementConflictError(
                f"Classical bit {position} already receives qubit {self._measurements[position]}."
            )
        self._measurements[position] = qubit
        return self

    def measure_all(self) -> "Circuit":
        """Measure qubit ``q`` into classical bit ``q`` for every qubit."""

        if self.num_clbits < self.num_qubits:
            raise DimensionMismatchError(
                f"measure_all needs {self.num_qubits} classical bits, circuit has {self.num_clbits}."
            )
        for qubit in range(self.num_qubits):
            self.measure(qubit, qubit)
        return self

    def _resolve_bindings(self, values: Bindings) -> Dict[str, float]:
        known = {parameter.name for parameter in self.parameters}
        resolved: Dict[str, float] = {}
        for key, value in values.items():
            name = key.name if isinstance(key, Parameter) else key
            if name not in known:
                raise InvalidParameterError(f"Circuit has no parameter named '{name}'.")
            resolved[name] = validate_angle(value, gate_name=name)
        return resolved

    def bind(self, values: Bindings) -> "Circuit":
        """Return a new circuit with parameters substituted from ``values``.

        Parameters missing from ``values`` stay symbolic. The receiver is not
        modified.
        """

        resolved = self._resolve_bindings(values)
        bound = self._empty_like()
        bound._operations = [operation.bind(resolved) for operation in self._operations]
        bound._measurements = dict(self._measurements)
        return bound

    def copy(self) -> "Circuit":
        clone = self._empty_like()
        clone._operations = list(self._operations)
        clone._measurements = dict(self._measurements)
        return clone

    def _empty_like(self) -> "Circuit":
        return Circuit(
            self.num_qubits,
            self.num_clbits,
            clbit_labels=self.clbit_labels or None,
            name=self.name,
        )

    def describe(self) -> List[str]:
        lines = [operation.describe() for operation in self._operations]
        for clbit, qubit in self.measurements.items():
            label = f" ({self.clbit_labels[clbit]})" if self.clbit_labels else ""
            lines.append(f"MEASURE q{qubit}->c{clbit}{label}")
        return lines

    def __repr__(self) -> str:
        return (
            f"Circuit(num_qubits={self.num_qubits}, num_clbits={self.num_clbits}, "
            f"operations={len(self._operations)}, measurements={len(self._measurements)})"
        )
