"""Unit tests for the squeeze and density acceptance tests."""

import logging

import pytest

from lipsample.acceptance import FilterOutcome, filter_proposals
from lipsample.envelope import Envelope
from lipsample.mixture import ProposalBatch


class CountingDensity:
    """Constant density that records where it was evaluated."""

    def __init__(self, value: float = 1.0):
        self.value = value
        self.calls: list[float] = []

    def __call__(self, x: float) -> float:
        self.calls.append(x)
        return self.value


@pytest.fixture
def envelope():
    """Flat envelope at 2 with squeeze at 0.5 over [10, 20]."""
    return Envelope(
        a=10.0,
        b=20.0,
        lipschitz=1.0,
        density_values=(1.0, 1.0),
        upper_values=(2.0, 2.0),
        lower_values=(0.5, 0.5),
    )


class TestFilterProposals:
    """Tests for filter_proposals."""

    def test_squeeze_accepts_without_evaluating(self, envelope):
        """V * E < B accepts and never calls f."""
        density = CountingDensity()
        batch = ProposalBatch(positions=[0.5], uniforms=[0.1])

        outcome = filter_proposals(envelope, density, batch)

        assert outcome.samples == [15.0]
        assert outcome.squeeze_accepted == 1
        assert outcome.density_evaluations == 0
        assert density.calls == []

    def test_density_test_accepts(self, envelope):
        """B <= V * E < f accepts after one evaluation at the true position."""
        density = CountingDensity(1.0)
        batch = ProposalBatch(positions=[0.25], uniforms=[0.4])

        outcome = filter_proposals(envelope, density, batch)

        assert outcome.samples == [12.5]
        assert outcome.density_accepted == 1
        assert density.calls == [12.5]

    def test_density_test_rejects(self, envelope):
        """V * E >= f rejects."""
        density = CountingDensity(1.0)
        batch = ProposalBatch(positions=[0.25], uniforms=[0.6])

        outcome = filter_proposals(envelope, density, batch)

        assert outcome.samples == []
        assert outcome.accepted == 0
        assert outcome.density_evaluations == 1

    def test_keeps_proposal_order(self, envelope):
        """Squeeze and density acceptances are interleaved as proposed."""
        batch = ProposalBatch(
            positions=[0.1, 0.2, 0.3, 0.4],
            uniforms=[0.9, 0.4, 0.1, 0.45],
        )

        outcome = filter_proposals(envelope, CountingDensity(1.0), batch)

        assert outcome.samples == pytest.approx([12.0, 13.0, 14.0])
        assert outcome.squeeze_accepted == 1
        assert outcome.density_accepted == 2
        assert outcome.proposals == 4

    def test_empty_batch(self, envelope):
        """No proposals, nothing accepted."""
        outcome = filter_proposals(envelope, CountingDensity(), ProposalBatch())

        assert outcome == FilterOutcome()

    def test_negative_density_raises(self, envelope):
        """A negative density value is an input error."""
        batch = ProposalBatch(positions=[0.5], uniforms=[0.9])

        with pytest.raises(ValueError, match="non-negative"):
            filter_proposals(envelope, lambda x: -1.0, batch)

    def test_density_errors_propagate(self, envelope):
        """Exceptions from f are not swallowed."""

        def broken(x):
            raise ZeroDivisionError("boom")

        batch = ProposalBatch(positions=[0.5], uniforms=[0.9])

        with pytest.raises(ZeroDivisionError):
            filter_proposals(envelope, broken, batch)

    def test_counts_envelope_violations(self, envelope, caplog):
        """f above the envelope is counted and logged."""
        batch = ProposalBatch(positions=[0.5, 0.6], uniforms=[0.9, 0.95])

        with caplog.at_level(logging.WARNING, logger="lipsample"):
            outcome = filter_proposals(envelope, CountingDensity(3.0), batch)

        assert outcome.envelope_violations == 2
        assert outcome.accepted == 2
        assert "exceeded the envelope" in caplog.text

    def test_density_on_envelope_is_not_a_violation(self, envelope):
        """Touching the envelope is allowed."""
        batch = ProposalBatch(positions=[0.5], uniforms=[0.99])

        outcome = filter_proposals(envelope, CountingDensity(2.0), batch)

        assert outcome.envelope_violations == 0
