"""Proposal generation from the envelope viewed as a tent-kernel mixture.

A continuous piecewise-linear function on the grid ``u_i = i / n`` equals
the sum of ``n + 1`` tent kernels ``y_i * T(n * u - i)``, where ``T`` is the
unit triangle on [-1, 1]. Sampling from the envelope therefore reduces to
picking a kernel with probability proportional to its area and adding a
triangular offset, ``U1 + U2 - 1`` for two independent uniforms.

The two boundary tents stick out of [0, 1] by half. Folding the sample back
at 0 and 1 turns each into a half tent of double height, which is the
boundary piece of the envelope, provided its weight is halved first.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field

from lipsample.envelope import Envelope

logger = logging.getLogger(__name__)


@dataclass
class ProposalBatch:
    """Candidate positions with their acceptance uniforms.

    Attributes:
        positions: Proposal locations in normalized coordinates [0, 1].
        uniforms: Acceptance uniforms ``V``, one per position.
    """

    positions: list[float] = field(default_factory=list)
    uniforms: list[float] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.positions)


def kernel_weights(envelope: Envelope) -> list[float]:
    """Mixture weights of the tent kernels, boundary kernels halved.

    Negative envelope values can only come from rounding next to a zero of
    the density and are clipped to zero.
    """
    weights = [max(value, 0.0) for value in envelope.upper_values]
    weights[0] /= 2
    weights[-1] /= 2
    return weights


def fold_unit(value: float) -> float:
    """Reflect a value from [-1, 2] into [0, 1] at both ends."""
    value = abs(value)
    if value > 1:
        value = 2 - value
    return value


def draw_proposals(envelope: Envelope, count: int, rng: random.Random) -> ProposalBatch:
    """Draw ``count`` positions distributed as the (normalized) envelope.

    Args:
        envelope: Envelope to sample from.
        count: Number of proposals.
        rng: Source of uniforms and of the weighted kernel choice.

    Returns:
        ProposalBatch of length ``count``.

    Raises:
        ValueError: If the envelope has no mass to sample from.
    """
    weights = kernel_weights(envelope)
    if sum(weights) <= 0:
        raise ValueError("envelope has zero mass; the density vanishes on the whole grid")
    if count == 0:
        return ProposalBatch()

    n = envelope.segment_count
    kernels = rng.choices(range(n + 1), weights=weights, k=count)
    positions = [fold_unit((rng.random() + rng.random() - 1 + k) / n) for k in kernels]
    uniforms = [rng.random() for _ in range(count)]

    logger.debug("Drew %d proposals from %d kernels", count, n + 1)
    return ProposalBatch(positions=positions, uniforms=uniforms)
