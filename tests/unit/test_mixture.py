"""Unit tests for tent-mixture proposal generation."""

import random
from statistics import fmean

import pytest

from lipsample.envelope import Envelope, build_envelope
from lipsample.mixture import ProposalBatch, draw_proposals, fold_unit, kernel_weights


def _envelope(upper, a=0.0, b=1.0):
    values = tuple(float(v) for v in upper)
    return Envelope(
        a=a,
        b=b,
        lipschitz=1.0,
        density_values=values,
        upper_values=values,
        lower_values=tuple(0.0 for _ in values),
    )


class TestKernelWeights:
    """Tests for kernel_weights."""

    def test_boundary_weights_are_halved(self):
        """Only the two end kernels are halved."""
        weights = kernel_weights(_envelope([2, 4, 6, 8]))

        assert weights == [1.0, 4.0, 6.0, 4.0]

    def test_does_not_modify_envelope(self):
        """The envelope values stay untouched."""
        envelope = _envelope([2, 4, 6])
        kernel_weights(envelope)

        assert envelope.upper_values == (2.0, 4.0, 6.0)

    def test_clips_negative_values(self):
        """Rounding noise below zero becomes a zero weight."""
        assert kernel_weights(_envelope([-1e-17, 1, 1]))[0] == 0.0

    def test_weights_sum_to_mass_over_width(self):
        """Total weight times segment width is the envelope mass."""
        envelope = _envelope([1, 3, 2, 5])

        total = sum(kernel_weights(envelope)) * envelope.segment_width
        assert total == pytest.approx(envelope.total_mass())


class TestFoldUnit:
    """Tests for fold_unit."""

    @pytest.mark.parametrize(
        "value,expected",
        [(0.3, 0.3), (-0.2, 0.2), (1.25, 0.75), (0.0, 0.0), (1.0, 1.0), (2.0, 0.0), (-1.0, 1.0)],
    )
    def test_reflects_into_unit_interval(self, value, expected):
        """Negative values mirror at 0, values above 1 mirror at 1."""
        assert fold_unit(value) == pytest.approx(expected)


class TestDrawProposals:
    """Tests for draw_proposals."""

    def test_returns_requested_count(self):
        """Batch length matches the requested count."""
        batch = draw_proposals(_envelope([1, 1, 1]), 250, random.Random(1))

        assert len(batch) == 250
        assert len(batch.uniforms) == 250

    def test_zero_count(self):
        """An empty request gives an empty batch."""
        batch = draw_proposals(_envelope([1, 1]), 0, random.Random(1))

        assert batch == ProposalBatch()

    def test_positions_and_uniforms_in_unit_interval(self):
        """Everything lives in [0, 1]."""
        batch = draw_proposals(_envelope([3, 0, 5, 1, 2]), 5000, random.Random(2))

        assert all(0.0 <= u <= 1.0 for u in batch.positions)
        assert all(0.0 <= v < 1.0 for v in batch.uniforms)

    def test_deterministic_with_seed(self):
        """Same seed, same batch."""
        envelope = _envelope([1, 2, 3])

        first = draw_proposals(envelope, 100, random.Random(42))
        second = draw_proposals(envelope, 100, random.Random(42))

        assert first == second

    def test_zero_mass_envelope_raises(self):
        """Nothing can be drawn from an all-zero envelope."""
        with pytest.raises(ValueError, match="zero mass"):
            draw_proposals(_envelope([0, 0, 0]), 10, random.Random(1))

    def test_interior_kernel_is_triangle(self):
        """A single interior kernel gives a symmetric tent around its centre."""
        batch = draw_proposals(_envelope([0, 0, 1, 0, 0]), 20000, random.Random(3))

        assert all(0.25 <= u <= 0.75 for u in batch.positions)
        assert fmean(batch.positions) == pytest.approx(0.5, abs=0.005)
        # Tent of half-width w has variance w^2 / 6
        variance = fmean((u - 0.5) ** 2 for u in batch.positions)
        assert variance == pytest.approx(0.25**2 / 6, rel=0.05)

    def test_boundary_kernel_is_folded_half_tent(self):
        """The left kernel folds onto [0, 1/n] with mean w / 3."""
        batch = draw_proposals(_envelope([1, 0, 0, 0]), 20000, random.Random(4))

        assert all(0.0 <= u <= 1 / 3 for u in batch.positions)
        assert fmean(batch.positions) == pytest.approx(1 / 9, abs=0.003)

    def test_right_boundary_kernel(self):
        """The right kernel folds onto [1 - 1/n, 1]."""
        batch = draw_proposals(_envelope([0, 0, 0, 1]), 20000, random.Random(5))

        assert all(2 / 3 <= u <= 1.0 for u in batch.positions)
        assert fmean(batch.positions) == pytest.approx(1 - 1 / 9, abs=0.003)

    def test_flat_envelope_is_uniform(self):
        """A constant envelope proposes uniformly over [0, 1]."""
        batch = draw_proposals(_envelope([2] * 11), 40000, random.Random(6))

        counts = [0] * 10
        for u in batch.positions:
            counts[min(int(u * 10), 9)] += 1
        for count in counts:
            assert 3600 < count < 4400

    def test_follows_linear_envelope(self):
        """Proposals from the envelope of f(x) = x have mean close to 2/3."""
        envelope = build_envelope(lambda x: x, 1.0, 0.0, 1.0, 200)

        batch = draw_proposals(envelope, 20000, random.Random(7))

        assert fmean(batch.positions) == pytest.approx(2 / 3, abs=0.01)
