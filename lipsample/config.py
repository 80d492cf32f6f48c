"""Sampler configuration.

SamplerConfig carries the knobs of a sampling call: the number of envelope
segments and the random seed. Both are optional; the segment count is
derived from the Lipschitz constant when it is not set explicitly.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

# Default n = ceil(SEGMENTS_PER_UNIT_L * L) + MIN_SEGMENTS
SEGMENTS_PER_UNIT_L = 200
MIN_SEGMENTS = 200


def default_segment_count(lipschitz: float) -> int:
    """Return the default number of envelope segments for a Lipschitz constant.

    Uses ``ceil(200 * L) + 200``. Larger ``L`` means the density can change
    faster between breakpoints, so the grid is refined proportionally; the
    constant term keeps the envelope tight for nearly flat densities.

    Args:
        lipschitz: Lipschitz constant of the density, ``L >= 0``.

    Returns:
        Positive segment count.
    """
    return math.ceil(SEGMENTS_PER_UNIT_L * lipschitz) + MIN_SEGMENTS


@dataclass(frozen=True)
class SamplerConfig:
    """Options for a sampling call.

    Attributes:
        segment_count: Number of envelope segments ``n``. The grid has
            ``n + 1`` breakpoints. ``None`` selects ``default_segment_count``.
        seed: Seed for the ``random.Random`` instance created when the caller
            does not supply one.
    """

    segment_count: int | None = None
    seed: int | None = None

    def __post_init__(self):
        if self.segment_count is None:
            return
        if isinstance(self.segment_count, bool) or not isinstance(self.segment_count, int):
            raise ValueError(
                f"segment_count must be an integer, got {self.segment_count!r}"
            )
        if self.segment_count <= 0:
            raise ValueError(f"segment_count must be positive, got {self.segment_count}")

    def resolve_segment_count(self, lipschitz: float) -> int:
        """Return the explicit segment count, or the default for ``lipschitz``."""
        if self.segment_count is not None:
            return self.segment_count
        return default_segment_count(lipschitz)
