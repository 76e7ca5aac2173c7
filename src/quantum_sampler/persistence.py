"""Helper routines for persisting circuits and execution results."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence

from .circuit import Circuit
from .gates import GateOperation, Parameter
from .sampler import SampleResult
from .simulator import SweepPoint
from .state import StateVector


logger = logging.getLogger(__name__)


def _complex_to_pair(value: complex) -> List[float]:
    return [float(value.real), float(value.imag)]


def amplitudes_to_pairs(amplitudes: Iterable[complex]) -> List[List[float]]:
    return [_complex_to_pair(value) for value in amplitudes]


def _operation_payload(operation: GateOperation) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "gate": operation.kind,
        "targets": list(operation.targets),
    }
    if isinstance(operation.theta, Parameter):
        payload["theta"] = operation.theta.name
    elif operation.theta is not None:
        payload["theta"] = operation.theta
    return payload


def serialize_sequence(sequence: Iterable[GateOperation]) -> List[Dict[str, Any]]:
    return [_operation_payload(operation) for operation in sequence]


def circuit_to_payload(circuit: Circuit) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "num_qubits": circuit.num_qubits,
        "num_clbits": circuit.num_clbits,
        "operations": serialize_sequence(circuit.operations),
        "measurements": [
            {"qubit": qubit, "clbit": clbit} for clbit, qubit in circuit.measurements.items()
        ],
    }
    if circuit.clbit_labels:
        payload["clbit_labels"] = list(circuit.clbit_labels)
    if circuit.name:
        payload["name"] = circuit.name
    return payload


def state_payload(state: StateVector) -> Dict[str, Any]:
    return {
        "num_qubits": state.num_qubits,
        "amplitudes": amplitudes_to_pairs(state.amplitudes),
        "probabilities": state.probabilities(),
    }


def sample_payload(result: SampleResult) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "shots": result.shots,
        "counts": dict(sorted(result.counts.items())),
    }
    if result.labels:
        payload["labels"] = list(result.labels)
    return payload


def sweep_payload(parameter: str, points: Sequence[SweepPoint]) -> Dict[str, Any]:
    return {
        "parameter": parameter,
        "points": [
            {
                "value": point.value,
                "probabilities": point.probabilities,
                **({"counts": sample_payload(point.counts)} if point.counts is not None else {}),
            }
            for point in points
        ],
    }


def result_to_payload(
    circuit: Circuit,
    *,
    probabilities: Dict[str, float],
    states: Sequence[StateVector] = (),
    counts: Optional[SampleResult] = None,
    seed: Optional[int] = None,
) -> Dict[str, Any]:
    steps = []
    for index, (operation, state) in enumerate(zip(circuit.operations, states), start=1):
        steps.append(
            {
                "layer": index,
                "operation": _operation_payload(operation),
                "state": state_payload(state),
            }
        )

    payload: Dict[str, Any] = {
        "circuit": circuit_to_payload(circuit),
        "steps": steps,
        "probabilities": probabilities,
    }
    if states:
        payload["final_state"] = state_payload(states[-1])
    if counts is not None:
        payload["sample"] = sample_payload(counts)
        payload["seed"] = seed
    return payload


def write_payload(payload: Dict[str, Any], destination: str | Path) -> Path:
    path = Path(destination)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2))
    logger.info("Persisted result to %s", path)
    return path
