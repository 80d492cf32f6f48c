"""Piecewise-linear envelope and squeeze curve of a Lipschitz density.

The density f is evaluated on n + 1 evenly spaced breakpoints of [a, b].
Between two breakpoints, any L-Lipschitz function through the observed
values is confined to the parallelogram cut out by lines of slope +L and -L
from both ends. Its largest distance from the secant, h, is computed from
that wedge with the law of sines:

    alpha = atan(L)                        angle of the Lipschitz cone
    beta  = |atan(d / w)|                  angle of the secant (rise d, width w)
    r     = 0.5 * hypot(w, d) * sin(pi - alpha - beta) / sin(alpha)
    h     = r * (L - |d / w|)

which simplifies to h = (L^2 w^2 - d^2) / (2 L w). Raising every breakpoint
by the larger adjustment of its two segments gives an upper envelope; lowering
it gives the squeeze curve.

The guarantee only holds if L bounds the true Lipschitz constant of f. A
smaller L is not rejected: the envelope may then cut below f and samples are
no longer exact.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Sequence
from dataclasses import dataclass

import pandas as pd

logger = logging.getLogger(__name__)

Density = Callable[[float], float]


def validate_interval(a: float, b: float) -> None:
    """Raise ValueError unless ``a < b`` and both bounds are finite."""
    if not (math.isfinite(a) and math.isfinite(b)):
        raise ValueError(f"interval bounds must be finite, got [{a}, {b}]")
    if a >= b:
        raise ValueError(f"interval must satisfy a < b, got [{a}, {b}]")


def validate_lipschitz(lipschitz: float) -> None:
    """Raise ValueError unless the Lipschitz constant is finite and non-negative."""
    if not math.isfinite(lipschitz) or lipschitz < 0:
        raise ValueError(f"Lipschitz constant must be finite and >= 0, got {lipschitz}")


def evaluate_density(f: Density, x: float) -> float:
    """Call the density at ``x`` and check the value is usable.

    Raises:
        ValueError: If ``f(x)`` is negative or not finite.
    """
    value = float(f(x))
    if not math.isfinite(value) or value < 0:
        raise ValueError(f"density must be finite and non-negative, got f({x}) = {value}")
    return value


def segment_adjustment(rise: float, width: float, lipschitz: float) -> float:
    """Largest gap between an L-Lipschitz function and its secant on one segment.

    Args:
        rise: Difference of the density values at the segment ends.
        width: Segment width in true coordinates.
        lipschitz: Lipschitz constant L.

    Returns:
        The adjustment h. Zero when the secant slope equals L, negative when
        it exceeds L (an invalid L).
    """
    if lipschitz == 0:
        # Only constants are 0-Lipschitz; the secant is exact.
        return 0.0

    slope = rise / width
    alpha = math.atan(lipschitz)
    beta = abs(math.atan(slope))
    radius = 0.5 * math.hypot(width, rise) * math.sin(math.pi - alpha - beta) / math.sin(alpha)
    return radius * (lipschitz - abs(slope))


@dataclass(frozen=True)
class Envelope:
    """Upper envelope and squeeze curve sampled on an even grid over [a, b].

    Values are stored per breakpoint; both curves are the linear
    interpolants of those values. Positions are handled either in true
    coordinates ``x`` or in normalized coordinates ``u = (x - a) / (b - a)``.

    Attributes:
        a: Left end of the interval.
        b: Right end of the interval.
        lipschitz: Lipschitz constant used to build the curves.
        density_values: Raw ``f(x_i)`` at each breakpoint.
        upper_values: Envelope values ``y_i``.
        lower_values: Squeeze values ``ylow_i``.
    """

    a: float
    b: float
    lipschitz: float
    density_values: tuple[float, ...]
    upper_values: tuple[float, ...]
    lower_values: tuple[float, ...]

    @property
    def segment_count(self) -> int:
        """Number of segments ``n``; the grid has ``n + 1`` breakpoints."""
        return len(self.upper_values) - 1

    @property
    def width(self) -> float:
        return self.b - self.a

    @property
    def segment_width(self) -> float:
        return self.width / self.segment_count

    @property
    def grid_x(self) -> list[float]:
        """Breakpoints in true coordinates."""
        n = self.segment_count
        return [self.from_unit(i / n) for i in range(n + 1)]

    @property
    def grid_y(self) -> list[float]:
        """Envelope values at the breakpoints."""
        return list(self.upper_values)

    @property
    def grid_lower(self) -> list[float]:
        """Squeeze values at the breakpoints."""
        return list(self.lower_values)

    def to_unit(self, x: float) -> float:
        return (x - self.a) / self.width

    def from_unit(self, u: float) -> float:
        return min(max(self.width * u + self.a, self.a), self.b)

    def upper_at(self, u: float) -> float:
        """Envelope at normalized position ``u`` in [0, 1]."""
        return self._interpolate(self.upper_values, u)

    def lower_at(self, u: float) -> float:
        """Squeeze curve at normalized position ``u`` in [0, 1]."""
        return self._interpolate(self.lower_values, u)

    def upper(self, x: float) -> float:
        """Envelope at ``x`` in true coordinates."""
        return self.upper_at(self._checked_unit(x))

    def lower(self, x: float) -> float:
        """Squeeze curve at ``x`` in true coordinates."""
        return self.lower_at(self._checked_unit(x))

    def total_mass(self) -> float:
        """Integral of the envelope over [a, b] (trapezoidal rule, exact here)."""
        values = self.upper_values
        inner = sum(values[1:-1])
        return self.segment_width * (inner + 0.5 * (values[0] + values[-1]))

    def to_dataframe(self) -> pd.DataFrame:
        """Breakpoints with density, envelope and squeeze values, one row each."""
        return pd.DataFrame(
            {
                "x": self.grid_x,
                "upper": list(self.upper_values),
                "lower": list(self.lower_values),
                "density": list(self.density_values),
            }
        )

    def _checked_unit(self, x: float) -> float:
        if not self.a <= x <= self.b:
            raise ValueError(f"x={x} lies outside [{self.a}, {self.b}]")
        return self.to_unit(x)

    def _interpolate(self, values: Sequence[float], u: float) -> float:
        n = self.segment_count
        position = min(max(u, 0.0), 1.0) * n
        k = min(int(position), n - 1)
        t = position - k
        return values[k] + t * (values[k + 1] - values[k])


def build_envelope(
    f: Density,
    lipschitz: float,
    a: float,
    b: float,
    segment_count: int,
) -> Envelope:
    """Evaluate ``f`` on the grid and build its envelope and squeeze curve.

    Args:
        f: Unnormalized, non-negative density on [a, b].
        lipschitz: Upper bound on the Lipschitz constant of ``f``.
        a: Left end of the interval.
        b: Right end of the interval.
        segment_count: Number of segments ``n``; ``f`` is called ``n + 1`` times.

    Returns:
        The constructed Envelope.

    Raises:
        ValueError: On an invalid interval, Lipschitz constant or segment
            count, or if ``f`` returns a negative value on the grid.
    """
    validate_interval(a, b)
    validate_lipschitz(lipschitz)
    if segment_count <= 0:
        raise ValueError(f"segment_count must be positive, got {segment_count}")

    n = segment_count
    width = (b - a) / n
    grid = [min((b - a) * (i / n) + a, b) for i in range(n + 1)]
    raw = [evaluate_density(f, x) for x in grid]

    adjustments = [
        segment_adjustment(raw[i + 1] - raw[i], width, lipschitz) for i in range(n)
    ]

    # Relative slack so that a secant slope equal to L is not reported.
    limit = lipschitz * width * (1 + 1e-9)
    steep = sum(1 for i in range(n) if abs(raw[i + 1] - raw[i]) > limit)
    if steep:
        logger.warning(
            "%d of %d grid secants are steeper than L=%g; samples may not be exact",
            steep,
            n,
            lipschitz,
        )

    upper = []
    lower = []
    for i, value in enumerate(raw):
        if i == 0:
            h = adjustments[0]
        elif i == n:
            h = adjustments[n - 1]
        else:
            h = max(adjustments[i - 1], adjustments[i])
        upper.append(value + h)
        lower.append(value - h)

    envelope = Envelope(
        a=a,
        b=b,
        lipschitz=lipschitz,
        density_values=tuple(raw),
        upper_values=tuple(upper),
        lower_values=tuple(lower),
    )
    logger.debug(
        "Envelope built: n=%d L=%g interval=[%g, %g] mass=%.6g max=%.6g",
        n,
        lipschitz,
        a,
        b,
        envelope.total_mass(),
        max(upper),
    )
    return envelope
