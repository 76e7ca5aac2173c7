import math
import unittest

from quantum_sampler.circuit import Circuit
from quantum_sampler.errors import (
    DimensionMismatchError,
    InvalidParameterError,
    MeasurementConflictError,
    UnsupportedGateError,
)
from quantum_sampler.gates import GateOperation, Parameter


class CircuitTest(unittest.TestCase):
    def test_builder_records_operations_in_order(self) -> None:
        circuit = Circuit(2).h(0).cx(0, 1).rz(0.25, 1).measure_all()
        self.assertEqual(
            circuit.describe(),
            ["H q0", "CX q0->q1", "RZ(0.2500) q1", "MEASURE q0->c0", "MEASURE q1->c1"],
        )
        self.assertEqual(circuit.measurements, {0: 0, 1: 1})

    def test_unknown_gate_leaves_circuit_unchanged(self) -> None:
        circuit = Circuit(1).h(0)
        with self.assertRaises(UnsupportedGateError):
            circuit.append("MAGIC", (0,))
        self.assertEqual(len(circuit), 1)

    def test_out_of_range_target_rejected(self) -> None:
        circuit = Circuit(2)
        with self.assertRaises(DimensionMismatchError):
            circuit.x(2)
        with self.assertRaises(DimensionMismatchError):
            circuit.append(GateOperation(kind="CZ", targets=(0, 3)))
        with self.assertRaises(DimensionMismatchError):
            circuit.append("CX", (0,))
        self.assertEqual(len(circuit), 0)

    def test_measurement_conflict(self) -> None:
        circuit = Circuit(2, 1).measure(0, 0)
        with self.assertRaises(MeasurementConflictError):
            circuit.measure(1, 0)
        self.assertEqual(circuit.measurements, {0: 0})

    def test_measurement_range_checks(self) -> None:
        circuit = Circuit(2, 1)
        with self.assertRaises(DimensionMismatchError):
            circuit.measure(2, 0)
        with self.assertRaises(DimensionMismatchError):
            circuit.measure(0, 1)
        with self.assertRaises(DimensionMismatchError):
            circuit.measure_all()

    def test_labels_resolve_to_positions(self) -> None:
        circuit = Circuit(2, clbit_labels=["screen", "detector"])
        self.assertEqual(circuit.num_clbits, 2)
        self.assertEqual(circuit.clbit_index("screen"), 0)
        self.assertEqual(circuit.clbit_index("detector"), 1)
        circuit.measure(1, "screen")
        self.assertEqual(circuit.measurements, {0: 1})
        with self.assertRaises(KeyError):
            circuit.clbit_index("missing")
        with self.assertRaises(DimensionMismatchError):
            Circuit(1, 2, clbit_labels=["only"])
        with self.assertRaises(DimensionMismatchError):
            Circuit(2, clbit_labels=["same", "same"])

    def test_bind_returns_new_circuit(self) -> None:
        theta = Parameter("theta")
        circuit = Circuit(1).h(0).p(theta, 0).h(0).measure(0, 0)
        self.assertEqual(circuit.parameter_names, ("theta",))
        bound = circuit.bind({theta: math.pi})
        self.assertTrue(bound.is_bound)
        self.assertFalse(circuit.is_bound)
        self.assertEqual(bound.operations[1].theta, math.pi)
        self.assertIs(circuit.operations[1].theta, theta)
        self.assertEqual(bound.measurements, circuit.measurements)

    def test_partial_bind_keeps_remaining_parameters(self) -> None:
        circuit = Circuit(1).rx(Parameter("a"), 0).ry(Parameter("b"), 0)
        partial = circuit.bind({"a": 0.1})
        self.assertEqual(partial.parameter_names, ("b",))

    def test_bind_rejects_unknown_and_non_finite_values(self) -> None:
        circuit = Circuit(1).p(Parameter("theta"), 0)
        with self.assertRaises(InvalidParameterError):
            circuit.bind({"phi": 1.0})
        with self.assertRaises(InvalidParameterError):
            circuit.bind({"theta": float("nan")})

    def test_copy_is_independent(self) -> None:
        circuit = Circuit(1).h(0)
        clone = circuit.copy().x(0)
        self.assertEqual(len(circuit), 1)
        self.assertEqual(len(clone), 2)


if __name__ == "__main__":
    unittest.main()
