"""Shot-based sampling of probability distributions.

Outcomes are drawn by inverting the cumulative distribution: keys are sorted,
their probabilities summed in that order, and each shot takes one uniform
double in ``[0, 1)`` from a PCG64 generator (``numpy.random.PCG64`` driven
through ``Generator.random``), scaled by the cumulative total and located
with a right bisection. The same seed always yields the same histogram.
"""

from __future__ import annotations

import logging
import math
import numbers
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional, Sequence, Tuple, Union

import numpy as np

from .errors import InvalidDistributionError


DISTRIBUTION_TOLERANCE = 1e-6
NEGATIVE_TOLERANCE = 1e-9
RESIDUE_CUTOFF = 1e-12

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SampleResult:
    """Histogram of measured bitstrings.

    Position ``k`` of a bitstring is read from the right, so the rightmost
    character is classical bit 0 (or qubit 0 for unmeasured circuits).
    """

    counts: Dict[str, int]
    shots: int
    labels: Tuple[str, ...] = field(default=())

    def __post_init__(self) -> None:
        total = sum(self.counts.values())
        if total != self.shots:
            raise ValueError(f"Counts sum to {total}, expected {self.shots} shots.")
        if any(count < 0 for count in self.counts.values()):
            raise ValueError("Counts must be non-negative.")
        widths = {len(key) for key in self.counts}
        if len(widths) > 1:
            raise ValueError("All bitstrings in a result must share one width.")
        if self.labels and widths and widths != {len(self.labels)}:
            raise ValueError(
                f"Result carries {len(self.labels)} labels for {widths.pop()}-bit outcomes."
            )

    @property
    def width(self) -> int:
        if self.labels:
            return len(self.labels)
        return len(next(iter(self.counts), ""))

    def get(self, bitstring: str) -> int:
        return self.counts.get(bitstring, 0)

    def __getitem__(self, bitstring: str) -> int:
        return self.get(bitstring)

    def frequencies(self) -> Dict[str, float]:
        return {key: count / self.shots for key, count in self.counts.items()}

    def most_frequent(self) -> str:
        return max(sorted(self.counts), key=lambda key: self.counts[key])

    def int_counts(self) -> Dict[int, int]:
        return {int(key, 2): count for key, count in self.counts.items()}

    def _position(self, key: Union[int, str]) -> int:
        if isinstance(key, str):
            if key not in self.labels:
                raise KeyError(f"Result has no classical bit labelled '{key}'.")
            return self.labels.index(key)
        if not 0 <= key < self.width:
            raise IndexError(f"Bit position {key} is out of range for {self.width}-bit outcomes.")
        return key

    def marginal(self, positions: Sequence[Union[int, str]]) -> "SampleResult":
        """Counts restricted to ``positions``; the first position is the rightmost bit."""

        resolved = [self._position(key) for key in positions]
        if len(set(resolved)) != len(resolved):
            raise ValueError("Marginal positions must be unique.")
        width = self.width
        counts: Dict[str, int] = {}
        for key, count in self.counts.items():
            bits = "".join(key[width - 1 - position] for position in reversed(resolved))
            counts[bits] = counts.get(bits, 0) + count
        labels: Tuple[str, ...] = ()
        if self.labels:
            labels = tuple(self.labels[position] for position in resolved)
        return SampleResult(counts=dict(sorted(counts.items())), shots=self.shots, labels=labels)

    def counts_for(self, key: Union[int, str]) -> Dict[str, int]:
        """Counts of a single classical bit, by position or label."""

        marginal = self.marginal([key])
        return {bit: marginal.get(bit) for bit in ("0", "1")}


def _validate_shots(shots: object) -> int:
    if isinstance(shots, bool) or not isinstance(shots, numbers.Integral):
        raise ValueError(f"Shot count must be an integer, received {shots!r}.")
    if shots < 1:
        raise ValueError(f"Shot count must be at least 1, received {shots}.")
    return int(shots)


def prepare_distribution(
    distribution: Mapping[str, float], *, tolerance: float = DISTRIBUTION_TOLERANCE
) -> Tuple[Tuple[str, ...], Tuple[float, ...]]:
    """Validate ``distribution`` and return sorted keys with clamped probabilities."""

    if not distribution:
        raise InvalidDistributionError("Distribution must contain at least one outcome.")
    for key in distribution:
        if not isinstance(key, str) or not key or set(key) - {"0", "1"}:
            raise InvalidDistributionError(f"Outcome {key!r} is not a bitstring.")
    if len({len(key) for key in distribution}) != 1:
        raise InvalidDistributionError("All outcomes must be bitstrings of one width.")
    keys = tuple(sorted(distribution))
    probabilities = []
    for key in keys:
        value = distribution[key]
        try:
            probability = float(value)
        except (TypeError, ValueError) as exc:
            raise InvalidDistributionError(
                f"Probability for outcome {key!r} is not a number: {value!r}."
            ) from exc
        if not math.isfinite(probability):
            raise InvalidDistributionError(f"Probability for outcome {key!r} is not finite.")
        if probability < -NEGATIVE_TOLERANCE:
            raise InvalidDistributionError(
                f"Probability for outcome {key!r} is negative ({probability})."
            )
        probabilities.append(0.0 if probability < RESIDUE_CUTOFF else probability)
    total = math.fsum(probabilities)
    if not math.isclose(total, 1.0, rel_tol=0.0, abs_tol=tolerance):
        raise InvalidDistributionError(f"Probabilities sum to {total}, expected 1.")
    return keys, tuple(probabilities)


def sample(
    distribution: Mapping[str, float],
    shots: int,
    seed: Optional[int] = None,
    *,
    tolerance: float = DISTRIBUTION_TOLERANCE,
    labels: Sequence[str] = (),
) -> SampleResult:
    """Draw ``shots`` outcomes from ``distribution``; the input is not modified."""

    shots = _validate_shots(shots)
    keys, probabilities = prepare_distribution(distribution, tolerance=tolerance)

    cumulative = np.cumsum(np.asarray(probabilities, dtype=np.float64))
    total = cumulative[-1]
    generator = np.random.Generator(np.random.PCG64(seed))
    draws = generator.random(shots) * total
    indices = np.searchsorted(cumulative, draws, side="right")
    # A draw that rounds up to the total lands on the last outcome with weight.
    last_supported = int(np.flatnonzero(np.asarray(probabilities) > 0.0)[-1])
    indices = np.minimum(indices, last_supported)

    tallies = np.bincount(indices, minlength=len(keys))
    counts = {keys[index]: int(tally) for index, tally in enumerate(tallies) if tally}
    logger.debug("Sampled %d shot(s) over %d outcome(s) with seed %r", shots, len(keys), seed)
    return SampleResult(counts=counts, shots=shots, labels=tuple(labels))


class Sampler:
    """Sampling front end holding a default seed and tolerance."""

    def __init__(
        self, *, seed: Optional[int] = None, tolerance: float = DISTRIBUTION_TOLERANCE
    ) -> None:
        self.seed = seed
        self.tolerance = tolerance

    def sample(
        self,
        distribution: Mapping[str, float],
        shots: int,
        seed: Optional[int] = None,
        *,
        labels: Sequence[str] = (),
    ) -> SampleResult:
        return sample(
            distribution,
            shots,
            self.seed if seed is None else seed,
            tolerance=self.tolerance,
            labels=labels,
        )
