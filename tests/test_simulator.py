import math
import threading
import unittest

from quantum_sampler.circuit import Circuit
from quantum_sampler.errors import InvalidParameterError, SweepCancelledError
from quantum_sampler.gates import Parameter
from quantum_sampler.simulator import CircuitSimulator


class _CancelAfterFirstRun(CircuitSimulator):
    def __init__(self, cancel_event: threading.Event) -> None:
        super().__init__()
        self.cancel_event = cancel_event
        self.executed = []

    def probabilities(self, circuit):
        result = super().probabilities(circuit)
        self.executed.append(circuit)
        self.cancel_event.set()
        return result


class CircuitSimulatorTest(unittest.TestCase):
    def setUp(self) -> None:
        self.simulator = CircuitSimulator()

    def test_double_slit_counts_by_label(self) -> None:
        circuit = Circuit(1, clbit_labels=["screen"]).h(0).h(0).measure(0, "screen")
        result = self.simulator.run(circuit, shots=1000, seed=11)
        self.assertEqual(result.labels, ("screen",))
        self.assertEqual(result.counts_for("screen"), {"0": 1000, "1": 0})

    def test_single_slit_superposition(self) -> None:
        circuit = Circuit(1).h(0)
        probabilities = self.simulator.probabilities(circuit)
        self.assertAlmostEqual(probabilities["0"], 0.5)
        self.assertAlmostEqual(probabilities["1"], 0.5)

    def test_run_is_reproducible_under_seed(self) -> None:
        circuit = Circuit(2).h(0).cx(0, 1).measure_all()
        first = self.simulator.run(circuit, shots=1000, seed=42)
        second = self.simulator.run(circuit, shots=1000, seed=42)
        self.assertEqual(first.counts, second.counts)
        self.assertEqual(set(first.counts), {"00", "11"})

    def test_measurement_marginalises_onto_clbits(self) -> None:
        circuit = Circuit(2, 1).x(1).measure(1, 0)
        probabilities = self.simulator.probabilities(circuit)
        self.assertEqual(set(probabilities), {"0", "1"})
        self.assertAlmostEqual(probabilities["1"], 1.0)

    def test_unmeasured_clbits_read_zero(self) -> None:
        circuit = Circuit(2, 3).x(0).measure(0, 2)
        probabilities = self.simulator.probabilities(circuit)
        self.assertAlmostEqual(probabilities["100"], 1.0)
        self.assertAlmostEqual(sum(probabilities.values()), 1.0)

    def test_unbound_circuit_rejected(self) -> None:
        circuit = Circuit(1).p(Parameter("theta"), 0)
        with self.assertRaises(InvalidParameterError):
            self.simulator.probabilities(circuit)
        with self.assertRaises(InvalidParameterError):
            self.simulator.run(circuit, shots=10)

    def test_evolve_snapshots_each_layer(self) -> None:
        circuit = Circuit(1).h(0).h(0)
        states = self.simulator.evolve(circuit)
        self.assertEqual(len(states), 2)
        self.assertAlmostEqual(states[0].probability_of("1"), 0.5)
        self.assertAlmostEqual(states[1].probability_of("0"), 1.0)

    def _phase_circuit(self) -> Circuit:
        theta = Parameter("theta")
        return Circuit(1).h(0).p(theta, 0).h(0).measure(0, 0)

    def test_phase_sweep_matches_cosine_squared(self) -> None:
        values = [0.0, math.pi / 2, math.pi, 3 * math.pi / 2]
        points = self.simulator.sweep(self._phase_circuit(), "theta", values, max_workers=4)
        self.assertEqual([point.value for point in points], values)
        for point in points:
            self.assertAlmostEqual(point.probability("0"), math.cos(point.value / 2) ** 2)
            self.assertIsNone(point.counts)

    def test_sweep_sampling_matches_serial_runs(self) -> None:
        circuit = self._phase_circuit()
        values = [0.3, 1.1, 2.4]
        points = self.simulator.sweep(circuit, Parameter("theta"), values, shots=200, seed=5)
        for point in points:
            serial = self.simulator.run(circuit.bind({"theta": point.value}), shots=200, seed=5)
            self.assertEqual(point.counts.counts, serial.counts)

    def test_sweep_rejects_unknown_or_extra_parameters(self) -> None:
        with self.assertRaises(InvalidParameterError):
            self.simulator.sweep(self._phase_circuit(), "phi", [0.0])
        circuit = Circuit(1).rx(Parameter("a"), 0).ry(Parameter("b"), 0)
        with self.assertRaises(InvalidParameterError):
            self.simulator.sweep(circuit, "a", [0.0])

    def test_cancelled_sweep_raises(self) -> None:
        cancel = threading.Event()
        cancel.set()
        with self.assertRaises(SweepCancelledError):
            self.simulator.sweep(self._phase_circuit(), "theta", [0.0, 1.0], cancel_event=cancel)

    def test_cancel_during_sweep_stops_remaining_executions(self) -> None:
        cancel = threading.Event()
        simulator = _CancelAfterFirstRun(cancel)
        with self.assertRaises(SweepCancelledError):
            simulator.sweep(
                self._phase_circuit(),
                "theta",
                [0.0, 1.0, 2.0],
                max_workers=1,
                cancel_event=cancel,
            )
        self.assertEqual(len(simulator.executed), 1)
        self.assertEqual(simulator.executed[0].operations[1].theta, 0.0)


if __name__ == "__main__":
    unittest.main()
