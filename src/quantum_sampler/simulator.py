"""Circuit execution: construct, apply gates in order, read out, optionally sample."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Union

from .circuit import Circuit
from .errors import InvalidParameterError, SweepCancelledError
from .gates import Parameter, validate_angle
from .sampler import DISTRIBUTION_TOLERANCE, SampleResult, Sampler
from .state import NORM_TOLERANCE, StateVector, basis_label


logger = logging.getLogger(__name__)


@dataclass
class SweepPoint:
    """Outcome of one bound circuit in a parameter sweep."""

    value: float
    probabilities: Dict[str, float]
    counts: Optional[SampleResult] = None

    def probability(self, bitstring: str) -> float:
        return self.probabilities.get(bitstring, 0.0)


class CircuitSimulator:
    """Run circuits on a fresh ``StateVector`` per execution."""

    def __init__(
        self,
        *,
        tolerance: float = NORM_TOLERANCE,
        distribution_tolerance: float = DISTRIBUTION_TOLERANCE,
    ) -> None:
        self.tolerance = tolerance
        self.sampler = Sampler(tolerance=distribution_tolerance)

    def _require_bound(self, circuit: Circuit) -> None:
        if not circuit.is_bound:
            names = ", ".join(circuit.parameter_names)
            raise InvalidParameterError(f"Circuit has unbound parameters: {names}.")

    def statevector(self, circuit: Circuit) -> StateVector:
        self._require_bound(circuit)
        state = StateVector(circuit.num_qubits, tolerance=self.tolerance)
        return state.apply_all(circuit.operations)

    def evolve(self, circuit: Circuit) -> List[StateVector]:
        """Return a snapshot of the state after each operation."""

        self._require_bound(circuit)
        states: List[StateVector] = []
        current = StateVector(circuit.num_qubits, tolerance=self.tolerance)
        for operation in circuit.operations:
            current.apply(operation)
            states.append(current.copy())
        return states

    def distribution(self, circuit: Circuit, state: StateVector) -> Dict[str, float]:
        """Read ``state`` out through the circuit's measurement map.

        Without measurements every qubit is reported. Otherwise outcomes are
        classical-bit strings of width ``num_clbits`` with unmeasured bits at 0.
        """

        if not circuit.has_measurements:
            return state.probabilities()
        measurements = circuit.measurements
        width = circuit.num_clbits
        marginal: Dict[str, float] = {}
        for index, probability in enumerate(state.probability_vector()):
            outcome = 0
            for clbit, qubit in measurements.items():
                if (index >> qubit) & 1:
                    outcome |= 1 << clbit
            label = basis_label(outcome, width)
            marginal[label] = marginal.get(label, 0.0) + probability
        return dict(sorted(marginal.items()))

    def probabilities(self, circuit: Circuit) -> Dict[str, float]:
        return self.distribution(circuit, self.statevector(circuit))

    def run(self, circuit: Circuit, shots: int, seed: Optional[int] = None) -> SampleResult:
        distribution = self.probabilities(circuit)
        labels = circuit.clbit_labels if circuit.has_measurements else ()
        result = self.sampler.sample(distribution, shots, seed, labels=labels)
        logger.debug(
            "Ran %s for %d shot(s): %s", circuit.name or "circuit", shots, result.counts
        )
        return result

    def _sweep_point(
        self,
        circuit: Circuit,
        name: str,
        value: float,
        shots: Optional[int],
        seed: Optional[int],
        cancel_event: Optional[threading.Event],
    ) -> SweepPoint:
        if cancel_event is not None and cancel_event.is_set():
            raise SweepCancelledError(f"Sweep over '{name}' cancelled before value {value}.")
        bound = circuit.bind({name: value})
        probabilities = self.probabilities(bound)
        counts = None
        if shots is not None:
            labels = bound.clbit_labels if bound.has_measurements else ()
            counts = self.sampler.sample(probabilities, shots, seed, labels=labels)
        return SweepPoint(value=value, probabilities=probabilities, counts=counts)

    def sweep(
        self,
        circuit: Circuit,
        parameter: Union[str, Parameter],
        values: Sequence[float],
        *,
        shots: Optional[int] = None,
        seed: Optional[int] = None,
        max_workers: Optional[int] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> List[SweepPoint]:
        """Bind ``parameter`` to each value and execute the circuits independently.

        Each value gets its own bound circuit and state vector, so executions
        run concurrently on a thread pool. Results follow the order of
        ``values``. Setting ``cancel_event`` stops the sweep between
        executions with ``SweepCancelledError``.
        """

        name = parameter.name if isinstance(parameter, Parameter) else parameter
        if name not in circuit.parameter_names:
            raise InvalidParameterError(f"Circuit has no parameter named '{name}'.")
        remaining = [other for other in circuit.parameter_names if other != name]
        if remaining:
            raise InvalidParameterError(
                f"Bind {', '.join(remaining)} before sweeping over '{name}'."
            )
        points = [validate_angle(value, gate_name=name) for value in values]
        logger.info("Sweeping '%s' over %d value(s)", name, len(points))

        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            futures = [
                executor.submit(
                    self._sweep_point, circuit, name, value, shots, seed, cancel_event
                )
                for value in points
            ]
            try:
                return [future.result() for future in futures]
            except SweepCancelledError:
                for future in futures:
                    future.cancel()
                logger.info("Sweep over '%s' cancelled", name)
                raise
