import unittest

from quantum_sampler.errors import InvalidDistributionError
from quantum_sampler.sampler import SampleResult, Sampler, sample


class SamplerTest(unittest.TestCase):
    def test_fixed_seed_is_reproducible(self) -> None:
        distribution = {"0": 0.5, "1": 0.5}
        first = sample(distribution, 1000, seed=1234)
        second = sample(distribution, 1000, seed=1234)
        self.assertEqual(first.counts, second.counts)
        self.assertEqual(first.shots, 1000)

    def test_counts_sum_to_shots(self) -> None:
        distribution = {"00": 0.1, "01": 0.2, "10": 0.3, "11": 0.4}
        for shots in (1, 1, 1000, 100000):
            with self.subTest(shots=shots):
                result = sample(distribution, shots, seed=shots)
                self.assertEqual(sum(result.counts.values()), shots)
                self.assertEqual(result.shots, shots)

    def test_fair_coin_is_roughly_balanced(self) -> None:
        result = sample({"0": 0.5, "1": 0.5}, 100000, seed=7)
        self.assertGreater(result.get("0"), 48000)
        self.assertGreater(result.get("1"), 48000)

    def test_zero_probability_outcome_never_drawn(self) -> None:
        result = sample({"0": 0.0, "1": 1.0}, 5000, seed=3)
        self.assertEqual(result.counts, {"1": 5000})
        result = sample({"0": 1.0, "1": 0.0}, 5000, seed=3)
        self.assertEqual(result.counts, {"0": 5000})

    def test_residue_is_clamped(self) -> None:
        result = sample({"0": 1.0 + 1e-13, "1": -1e-13}, 100, seed=0)
        self.assertEqual(result.counts, {"0": 100})

    def test_input_not_mutated(self) -> None:
        distribution = {"1": 0.25, "0": 0.75}
        sample(distribution, 10, seed=1)
        self.assertEqual(distribution, {"1": 0.25, "0": 0.75})
        self.assertEqual(list(distribution), ["1", "0"])

    def test_invalid_distributions(self) -> None:
        invalid = [
            {},
            {"0": 0.5, "1": 0.4},
            {"0": 1.1, "1": -0.1},
            {"0": float("nan"), "1": 1.0},
            {"0": "half", "1": 0.5},
            {"0": 0.5, "11": 0.5},
            {"0": 0.5, "2": 0.5},
            {0: 0.5, "1": 0.5},
        ]
        for distribution in invalid:
            with self.subTest(distribution=distribution):
                with self.assertRaises(InvalidDistributionError):
                    sample(distribution, 10, seed=0)

    def test_invalid_shots(self) -> None:
        for shots in (0, -5, 1.5, True):
            with self.subTest(shots=shots):
                with self.assertRaises(ValueError):
                    sample({"0": 1.0}, shots, seed=0)

    def test_sampler_uses_default_seed(self) -> None:
        sampler = Sampler(seed=99)
        distribution = {"0": 0.3, "1": 0.7}
        self.assertEqual(
            sampler.sample(distribution, 500).counts, sample(distribution, 500, seed=99).counts
        )
        self.assertEqual(
            sampler.sample(distribution, 500, seed=5).counts,
            sample(distribution, 500, seed=5).counts,
        )


class SampleResultTest(unittest.TestCase):
    def setUp(self) -> None:
        self.result = SampleResult(
            counts={"01": 3, "10": 5, "11": 2}, shots=10, labels=("a", "b")
        )

    def test_counts_must_match_shots(self) -> None:
        with self.assertRaises(ValueError):
            SampleResult(counts={"0": 3}, shots=4)

    def test_lookup_by_label_matches_position(self) -> None:
        self.assertEqual(self.result.counts_for("a"), {"0": 5, "1": 5})
        self.assertEqual(self.result.counts_for("b"), {"0": 3, "1": 7})
        self.assertEqual(self.result.counts_for(1), self.result.counts_for("b"))
        with self.assertRaises(KeyError):
            self.result.counts_for("c")

    def test_marginal_orders_first_position_rightmost(self) -> None:
        swapped = self.result.marginal(["b", "a"])
        self.assertEqual(swapped.counts, {"01": 5, "10": 3, "11": 2})
        self.assertEqual(swapped.labels, ("b", "a"))

    def test_helpers(self) -> None:
        self.assertEqual(self.result.most_frequent(), "10")
        self.assertEqual(self.result["00"], 0)
        self.assertEqual(self.result.int_counts(), {1: 3, 2: 5, 3: 2})
        self.assertAlmostEqual(self.result.frequencies()["10"], 0.5)


if __name__ == "__main__":
    unittest.main()
