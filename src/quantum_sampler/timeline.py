"""ASCII rendering of circuit evolution and measurement histograms."""

from __future__ import annotations

from typing import List, Sequence

from .circuit import Circuit
from .gates import GateOperation
from .sampler import SampleResult
from .state import StateVector, basis_label


def _format_amplitude(amplitude: complex, *, precision: int = 6) -> str:
    return f"{amplitude.real:.{precision}f}{amplitude.imag:+.{precision}f}i"


def format_state(state: StateVector, *, precision: int = 6) -> List[str]:
    lines: List[str] = []
    width = state.num_qubits
    for index, amplitude in enumerate(state.amplitudes):
        probability = abs(amplitude) ** 2
        lines.append(
            f"|{basis_label(index, width)}> amplitude={_format_amplitude(amplitude, precision=precision)}, "
            f"prob={probability:.{precision}f}"
        )
    return lines


# Single-qubit wire labels; every label fits the default layer width.
GATE_GLYPHS = {"SDG": "Sdg", "RX": "Rx", "RY": "Ry", "RZ": "Rz"}


def _render_layer_lines(operation: GateOperation, num_qubits: int, width: int = 7) -> List[str]:
    center = width // 2
    wires: List[List[str]] = [["─"] * width for _ in range(num_qubits)]

    if operation.num_qubits == 1:
        label = GATE_GLYPHS.get(operation.kind, operation.kind)
        start = center - len(label) // 2
        wires[operation.targets[0]][start : start + len(label)] = list(label)
    elif operation.kind in ("CX", "CZ", "CCX"):
        *controls, target = operation.targets
        top, bottom = min(operation.targets), max(operation.targets)
        for idx in range(top + 1, bottom):
            wires[idx][center] = "│"
        for control in controls:
            wires[control][center] = "●"
        wires[target][center] = "●" if operation.kind == "CZ" else "X"
    elif operation.kind == "SWAP":
        first, second = operation.targets
        for idx in range(min(first, second) + 1, max(first, second)):
            wires[idx][center] = "│"
        wires[first][center] = "x"
        wires[second][center] = "x"

    return [f"q{idx} " + "".join(chars) for idx, chars in enumerate(wires)]


def render_timeline(
    circuit: Circuit,
    states: Sequence[StateVector],
    *,
    precision: int = 6,
) -> str:
    """Render each layer of ``circuit`` with the state reached after it."""

    start = StateVector(circuit.num_qubits)
    lines: List[str] = []
    lines.append("Initial state:")
    lines.extend(format_state(start, precision=precision))
    lines.append("")

    if not circuit.operations:
        lines.append("Timeline: (no operations)")
        lines.append("")
        lines.append("Final state:")
        lines.extend(format_state(start, precision=precision))
        return "\n".join(lines)

    lines.append("Timeline:")
    for layer_index, (operation, state) in enumerate(zip(circuit.operations, states), start=1):
        lines.append(f"Layer {layer_index}: {operation.describe()}")
        for wire_line in _render_layer_lines(operation, circuit.num_qubits):
            lines.append("    " + wire_line)
        lines.append("    State after layer {}:".format(layer_index))
        for state_line in format_state(state, precision=precision):
            lines.append("        " + state_line)
        lines.append("")

    lines.append("Final state:")
    lines.extend(format_state(states[-1], precision=precision))
    return "\n".join(lines)


def render_histogram(result: SampleResult, *, bar_width: int = 40) -> str:
    """Text histogram of ``result`` with bars scaled to the most frequent outcome."""

    if not result.counts:
        return "Counts: (empty)"
    peak = max(result.counts.values())
    lines = [f"Counts ({result.shots} shots):"]
    if result.labels:
        lines.append("  bits: " + " ".join(reversed(result.labels)))
    for bitstring in sorted(result.counts):
        count = result.counts[bitstring]
        bar = "#" * max(1, round(bar_width * count / peak))
        lines.append(f"  {bitstring} {count:>7} {bar}")
    return "\n".join(lines)
