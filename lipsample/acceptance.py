"""Two-stage acceptance test for envelope proposals.

Each proposal ``u`` with uniform ``V`` is accepted when ``V * E(u) < f(x)``,
where ``E`` is the envelope and ``x`` the true-coordinate position. Since the
squeeze curve ``B`` lies below ``f``, ``V * E(u) < B(u)`` already implies
acceptance and saves the call to ``f``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from lipsample.envelope import Density, Envelope, evaluate_density
from lipsample.mixture import ProposalBatch

logger = logging.getLogger(__name__)

# Relative slack for rounding when comparing the density with the envelope
VIOLATION_TOLERANCE = 1e-9


@dataclass
class FilterOutcome:
    """Result of filtering one proposal batch.

    Attributes:
        samples: Accepted positions in true coordinates, in proposal order.
        proposals: Number of proposals tested.
        squeeze_accepted: Proposals accepted without evaluating the density.
        density_accepted: Proposals accepted after evaluating the density.
        density_evaluations: Calls made to the density.
        envelope_violations: Evaluations where the density exceeded the
            envelope, which means the Lipschitz constant was too small.
    """

    samples: list[float] = field(default_factory=list)
    proposals: int = 0
    squeeze_accepted: int = 0
    density_accepted: int = 0
    density_evaluations: int = 0
    envelope_violations: int = 0

    @property
    def accepted(self) -> int:
        return self.squeeze_accepted + self.density_accepted


def filter_proposals(envelope: Envelope, f: Density, batch: ProposalBatch) -> FilterOutcome:
    """Run the squeeze and density tests over a batch.

    Proposals are independent; the accepted ones are returned in the order
    they were proposed, so any prefix of the result is an i.i.d. sample.

    Raises:
        ValueError: If the density returns a negative value.
    """
    outcome = FilterOutcome(proposals=len(batch))

    for u, v in zip(batch.positions, batch.uniforms):
        upper = envelope.upper_at(u)
        bound = v * upper
        if bound < envelope.lower_at(u):
            outcome.squeeze_accepted += 1
            outcome.samples.append(envelope.from_unit(u))
            continue

        value = evaluate_density(f, envelope.from_unit(u))
        outcome.density_evaluations += 1
        if value > upper + VIOLATION_TOLERANCE * max(1.0, abs(upper)):
            outcome.envelope_violations += 1
        if bound < value:
            outcome.density_accepted += 1
            outcome.samples.append(envelope.from_unit(u))

    if outcome.envelope_violations:
        logger.warning(
            "Density exceeded the envelope at %d point(s); L=%g is too small for exact sampling",
            outcome.envelope_violations,
            envelope.lipschitz,
        )
    logger.debug(
        "Filtered %d proposals: %d squeeze, %d density, %d rejected",
        outcome.proposals,
        outcome.squeeze_accepted,
        outcome.density_accepted,
        outcome.proposals - outcome.accepted,
    )
    return outcome
