"""Exact sampling from a Lipschitz density by envelope rejection.

LipschitzSampler ties the pieces together: it builds the envelope once,
then repeatedly draws proposal batches and filters them until the requested
number of samples has been accepted.

Example:
    from lipsample import LipschitzSampler, SamplerConfig

    sampler = LipschitzSampler(
        lambda x: 1 + math.cos(2 * math.pi * x),
        lipschitz=2 * math.pi,
        interval=(0.0, 1.0),
        config=SamplerConfig(seed=7),
    )
    result = sampler.sample(10_000)
    values, grid_x, grid_y = result
"""

from __future__ import annotations

import logging
import math
import random
from collections.abc import Iterator, Sequence
from dataclasses import dataclass

import pandas as pd

from lipsample.acceptance import FilterOutcome, filter_proposals
from lipsample.config import SamplerConfig
from lipsample.envelope import (
    Density,
    Envelope,
    build_envelope,
    validate_interval,
    validate_lipschitz,
)
from lipsample.mixture import draw_proposals

logger = logging.getLogger(__name__)


def oversampling_factor(width: float, lipschitz: float, segment_count: int) -> float:
    """Expected proposal overhead ``s = (b - a) * L / (2 n)``."""
    return width * lipschitz / (2 * segment_count)


def batch_size(count: int, factor: float) -> int:
    """Number of proposals expected to yield ``count`` acceptances."""
    return math.ceil((1 + factor) * count)


@dataclass
class SamplingStats:
    """Counters accumulated over the rounds of one ``sample`` call.

    ``density_evaluations`` counts calls made by the acceptance test only;
    the ``n + 1`` grid evaluations happen once per sampler when the envelope
    is built.
    """

    rounds: int = 0
    proposals: int = 0
    squeeze_accepted: int = 0
    density_accepted: int = 0
    density_evaluations: int = 0
    envelope_violations: int = 0

    def record(self, outcome: FilterOutcome) -> None:
        self.rounds += 1
        self.proposals += outcome.proposals
        self.squeeze_accepted += outcome.squeeze_accepted
        self.density_accepted += outcome.density_accepted
        self.density_evaluations += outcome.density_evaluations
        self.envelope_violations += outcome.envelope_violations

    @property
    def accepted(self) -> int:
        return self.squeeze_accepted + self.density_accepted

    @property
    def acceptance_rate(self) -> float:
        """Fraction of proposals accepted, 0.0 before any proposal."""
        return self.accepted / self.proposals if self.proposals else 0.0

    @property
    def squeeze_rate(self) -> float:
        """Fraction of proposals accepted by the squeeze test alone."""
        return self.squeeze_accepted / self.proposals if self.proposals else 0.0


@dataclass
class SampleResult:
    """Samples plus the envelope that produced them.

    Unpacks as ``values, grid_x, grid_y``.

    Attributes:
        values: Exactly the requested number of samples in [a, b].
        envelope: Envelope used as the proposal density.
        stats: Counters for the call.
    """

    values: list[float]
    envelope: Envelope
    stats: SamplingStats

    @property
    def grid_x(self) -> list[float]:
        return self.envelope.grid_x

    @property
    def grid_y(self) -> list[float]:
        return self.envelope.grid_y

    def __iter__(self) -> Iterator:
        return iter((self.values, self.grid_x, self.grid_y))

    def __len__(self) -> int:
        return len(self.values)

    def to_series(self) -> pd.Series:
        return pd.Series(self.values, name="sample", dtype="float64")


class LipschitzSampler:
    """Draws exact samples from an unnormalized L-Lipschitz density on [a, b].

    The density must be non-negative on the interval and ``lipschitz`` must
    be at least its Lipschitz constant. A smaller value is not detected in
    general (a warning is logged when the grid or a test point reveals it)
    and makes the output biased.

    Args:
        f: Unnormalized density, called with floats in [a, b].
        lipschitz: Upper bound on the Lipschitz constant of ``f``.
        interval: Pair ``(a, b)`` with ``a < b``.
        config: Segment count and seed. Defaults to ``SamplerConfig()``.
        rng: Random source. Defaults to ``random.Random(config.seed)``.

    Raises:
        ValueError: If the interval or Lipschitz constant is invalid.
    """

    def __init__(
        self,
        f: Density,
        lipschitz: float,
        interval: Sequence[float],
        config: SamplerConfig | None = None,
        rng: random.Random | None = None,
    ):
        if len(interval) != 2:
            raise ValueError(f"interval must be a pair (a, b), got {interval!r}")
        a, b = float(interval[0]), float(interval[1])
        validate_interval(a, b)
        validate_lipschitz(lipschitz)

        self._f = f
        self._lipschitz = float(lipschitz)
        self._a = a
        self._b = b
        self._config = config or SamplerConfig()
        self._segment_count = self._config.resolve_segment_count(self._lipschitz)
        self._rng = rng if rng is not None else random.Random(self._config.seed)
        self._envelope: Envelope | None = None

    @property
    def lipschitz(self) -> float:
        return self._lipschitz

    @property
    def interval(self) -> tuple[float, float]:
        return (self._a, self._b)

    @property
    def segment_count(self) -> int:
        return self._segment_count

    @property
    def envelope(self) -> Envelope:
        """Envelope of the density, built on first access."""
        if self._envelope is None:
            self._envelope = build_envelope(
                self._f, self._lipschitz, self._a, self._b, self._segment_count
            )
        return self._envelope

    @property
    def oversampling(self) -> float:
        return oversampling_factor(self._b - self._a, self._lipschitz, self._segment_count)

    def sample(self, m: int) -> SampleResult:
        """Draw exactly ``m`` i.i.d. samples.

        Batches of ``ceil((1 + s) * k)`` proposals are drawn for the ``k``
        samples still missing until enough have been accepted; the surplus of
        the last batch is dropped.

        Raises:
            ValueError: If ``m`` is not a non-negative integer, or the density
                returns a negative value.
        """
        if isinstance(m, bool) or not isinstance(m, int) or m < 0:
            raise ValueError(f"sample count must be a non-negative integer, got {m!r}")

        envelope = self.envelope
        factor = self.oversampling
        stats = SamplingStats()
        values: list[float] = []

        while len(values) < m:
            missing = m - len(values)
            batch = draw_proposals(envelope, batch_size(missing, factor), self._rng)
            outcome = filter_proposals(envelope, self._f, batch)
            stats.record(outcome)
            values.extend(outcome.samples)
            logger.debug(
                "Round %d: wanted %d, proposed %d, accepted %d",
                stats.rounds,
                missing,
                outcome.proposals,
                outcome.accepted,
            )

        del values[m:]

        logger.debug(
            "Sampled %d values in %d round(s): acceptance=%.3f squeeze=%.3f evaluations=%d",
            m,
            stats.rounds,
            stats.acceptance_rate,
            stats.squeeze_rate,
            stats.density_evaluations,
        )
        return SampleResult(values=values, envelope=envelope, stats=stats)


def sample(
    f: Density,
    lipschitz: float,
    interval: Sequence[float],
    m: int,
    config: SamplerConfig | None = None,
    rng: random.Random | None = None,
) -> SampleResult:
    """Draw ``m`` exact samples from the density proportional to ``f`` on ``interval``.

    Shorthand for ``LipschitzSampler(f, lipschitz, interval, config, rng).sample(m)``.
    The result unpacks as ``values, grid_x, grid_y``.
    """
    return LipschitzSampler(f, lipschitz, interval, config=config, rng=rng).sample(m)
