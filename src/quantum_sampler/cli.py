"""Command-line interface for the quantum-sampler project."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Dict, Iterable, Optional, Sequence

import numpy as np

from .circuit import Circuit
from .errors import QuantumSamplerError
from .gates import GateOperation, Parameter
from .persistence import result_to_payload, sweep_payload, write_payload
from .simulator import CircuitSimulator, SweepPoint
from .state import StateVector
from .timeline import render_histogram, render_timeline


DEFAULT_SHOTS = 1024

logger = logging.getLogger(__name__)


def _load_config(path: str) -> dict:
    if path == "-":
        return json.load(sys.stdin)
    return json.loads(Path(path).read_text())


def _parse_theta(raw: object, *, step: int) -> object:
    if raw is None:
        return None
    if isinstance(raw, str):
        try:
            return float(raw)
        except ValueError:
            return Parameter(raw)
    if isinstance(raw, (int, float)) and not isinstance(raw, bool):
        return float(raw)
    raise ValueError(f"Operation at step {step} has an invalid 'theta': {raw!r}.")


def _parse_operations(raw: object) -> Sequence[GateOperation]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise ValueError("Configuration field 'operations' must be a list.")

    operations = []
    for step, item in enumerate(raw, start=1):
        if not isinstance(item, dict):
            raise ValueError(
                "Each item in 'operations' must be an object with 'gate', 'targets' and optional 'theta'."
            )

        gate_name = item.get("gate")
        if not isinstance(gate_name, str):
            raise ValueError(f"Operation at step {step} must specify a gate name.")

        targets_raw = item.get("targets")
        if not isinstance(targets_raw, (list, tuple)):
            raise ValueError(f"Operation at step {step} must define 'targets' as a list.")
        try:
            targets = tuple(int(target) for target in targets_raw)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Operation targets at step {step} must be integers.") from exc

        theta = _parse_theta(item.get("theta"), step=step)
        try:
            operations.append(GateOperation(kind=gate_name, targets=targets, theta=theta))
        except QuantumSamplerError as exc:
            raise ValueError(f"Operation at step {step}: {exc}") from exc

    return operations


def _parse_measurements(raw: object, circuit: Circuit) -> None:
    if raw is None:
        return
    if not isinstance(raw, list):
        raise ValueError("Configuration field 'measurements' must be a list.")
    for index, item in enumerate(raw, start=1):
        if not isinstance(item, dict) or "qubit" not in item or "clbit" not in item:
            raise ValueError(f"Measurement {index} must be an object with 'qubit' and 'clbit'.")
        clbit = item["clbit"]
        try:
            qubit = int(item["qubit"])
            if not isinstance(clbit, str):
                clbit = int(clbit)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Measurement {index} has a non-integer qubit or clbit.") from exc
        circuit.measure(qubit, clbit)


def build_circuit(config: dict) -> Circuit:
    """Build a circuit from the JSON configuration layout."""

    try:
        num_qubits = int(config["num_qubits"])
        if num_qubits <= 0:
            raise ValueError
    except (KeyError, TypeError, ValueError) as exc:
        raise ValueError("Configuration must define a positive integer 'num_qubits'.") from exc

    labels = config.get("clbit_labels")
    num_clbits = config.get("num_clbits")
    circuit = Circuit(
        num_qubits,
        int(num_clbits) if num_clbits is not None else None,
        clbit_labels=labels,
        name=config.get("name"),
    )
    circuit.extend(_parse_operations(config.get("operations")))
    if config.get("measure_all"):
        circuit.measure_all()
    _parse_measurements(config.get("measurements"), circuit)

    bindings = config.get("parameters")
    if bindings:
        if not isinstance(bindings, dict):
            raise ValueError("Configuration field 'parameters' must map names to values.")
        circuit = circuit.bind(bindings)
    return circuit


def _format_distribution(probabilities: Dict[str, float], *, precision: int = 6) -> str:
    lines = ["Probabilities:"]
    for bitstring, probability in probabilities.items():
        lines.append(f"  {bitstring}: {probability:.{precision}f}")
    return "\n".join(lines)


def _print_sweep(name: str, points: Sequence[SweepPoint]) -> None:
    print(f"Sweep over '{name}':")
    for point in points:
        summary = ", ".join(
            f"{bitstring}={probability:.4f}" for bitstring, probability in point.probabilities.items()
        )
        print(f"  {name}={point.value:.6f}: {summary}")
        if point.counts is not None:
            print(f"    counts: {dict(sorted(point.counts.counts.items()))}")


def build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="quantum-sampler",
        description="Simulate a small quantum circuit and sample its measurement outcomes.",
    )
    parser.add_argument(
        "--config",
        required=True,
        help="Path to a JSON circuit configuration file or '-' to read from stdin.",
    )
    parser.add_argument(
        "--shots",
        type=int,
        help="Override the number of shots supplied in the config file.",
    )
    parser.add_argument(
        "--seed",
        type=int,
        help="Override the sampling seed supplied in the config file.",
    )
    parser.add_argument(
        "--exact",
        action="store_true",
        help="Report the exact probability distribution without sampling.",
    )
    parser.add_argument(
        "--sweep",
        nargs=4,
        metavar=("NAME", "START", "STOP", "COUNT"),
        help="Sweep parameter NAME over COUNT evenly spaced values from START to STOP inclusive.",
    )
    parser.add_argument(
        "--workers",
        type=int,
        help="Maximum number of worker threads for a sweep.",
    )
    parser.add_argument(
        "--no-timeline",
        dest="timeline",
        action="store_false",
        help="Disable ASCII timeline output.",
    )
    parser.set_defaults(timeline=True)
    parser.add_argument(
        "--output",
        help="Persist the result JSON to this path. Use '-' for stdout.",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity.",
    )
    return parser


def _resolve_shots(args, config: dict) -> int:
    if args.shots is not None:
        return args.shots
    try:
        return int(config.get("shots", DEFAULT_SHOTS))
    except (TypeError, ValueError) as exc:
        raise SystemExit("Configuration field 'shots' must be an integer.") from exc


def _emit(payload: dict, output_path: Optional[str]) -> None:
    if not output_path:
        return
    if output_path == "-":
        json.dump(payload, sys.stdout, indent=2)
        sys.stdout.write("\n")
    else:
        write_payload(payload, output_path)
        print(f"Persisted result to {output_path}")


def _run_sweep(args, config: dict, circuit: Circuit, simulator: CircuitSimulator) -> int:
    name, start_raw, stop_raw, count_raw = args.sweep
    try:
        start, stop, count = float(start_raw), float(stop_raw), int(count_raw)
    except ValueError as exc:
        raise SystemExit("Sweep bounds must be numbers and COUNT an integer.") from exc
    if count <= 0:
        raise SystemExit("Sweep COUNT must be a positive integer.")

    shots = None if args.exact else _resolve_shots(args, config)
    seed = args.seed if args.seed is not None else config.get("seed")
    values = np.linspace(start, stop, count)
    try:
        points = simulator.sweep(
            circuit, name, values, shots=shots, seed=seed, max_workers=args.workers
        )
    except (QuantumSamplerError, ValueError) as exc:
        raise SystemExit(str(exc)) from exc

    _print_sweep(name, points)
    output_path = args.output if args.output is not None else config.get("output_path")
    _emit(sweep_payload(name, points), output_path)
    return 0


def main(argv: Iterable[str] | None = None) -> int:
    parser = build_argument_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = _load_config(args.config)
    try:
        circuit = build_circuit(config)
    except (QuantumSamplerError, ValueError, KeyError) as exc:
        raise SystemExit(str(exc)) from exc
    logger.info(
        "Loaded %d-qubit circuit with %d operation(s)", circuit.num_qubits, len(circuit)
    )

    simulator = CircuitSimulator(
        distribution_tolerance=float(config.get("tolerance", 1e-6)),
    )
    if args.sweep:
        return _run_sweep(args, config, circuit, simulator)

    try:
        states = simulator.evolve(circuit)
        final_state = states[-1] if states else StateVector(circuit.num_qubits)
        probabilities = simulator.distribution(circuit, final_state)
    except QuantumSamplerError as exc:
        raise SystemExit(str(exc)) from exc

    print(_format_distribution(probabilities))

    counts = None
    seed = args.seed if args.seed is not None else config.get("seed")
    if not args.exact:
        shots = _resolve_shots(args, config)
        labels = circuit.clbit_labels if circuit.has_measurements else ()
        try:
            counts = simulator.sampler.sample(probabilities, shots, seed, labels=labels)
        except (QuantumSamplerError, ValueError) as exc:
            raise SystemExit(str(exc)) from exc
        print()
        print(render_histogram(counts))

    if args.timeline:
        print()
        print(render_timeline(circuit, states))

    output_path = args.output if args.output is not None else config.get("output_path")
    payload = result_to_payload(
        circuit, probabilities=probabilities, states=states, counts=counts, seed=seed
    )
    _emit(payload, output_path)
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
