"""Exact samples from f(x) = 1 + cos(2 pi x) on [0, 1].

The density is 2 pi - Lipschitz (|f'(x)| = 2 pi |sin(2 pi x)|). This example
draws samples, prints the sampling statistics, and plots a histogram
against the density together with the envelope the sampler constructed.

Run:
    python examples/cosine_density.py --samples 1000000 --lipschitz 12.566

A larger L is still valid (samples stay exact) but loosens the envelope;
a smaller one is logged as a warning and biases the output.
"""

from __future__ import annotations

import math
from pathlib import Path

import lipsample
from lipsample import LipschitzSampler, SampleResult, SamplerConfig


def density(x: float) -> float:
    return 1.0 + math.cos(2.0 * math.pi * x)


def print_summary(result: SampleResult) -> None:
    stats = result.stats
    envelope = result.envelope

    print("\n" + "=" * 60)
    print("LIPSCHITZ ENVELOPE SAMPLING")
    print("=" * 60)
    print(f"  Samples:              {len(result.values)}")
    print(f"  Segments:             {envelope.segment_count}")
    print(f"  Envelope mass:        {envelope.total_mass():.6f} (density integral = 1)")
    print(f"  Rounds:               {stats.rounds}")
    print(f"  Proposals:            {stats.proposals}")
    print(f"  Acceptance rate:      {stats.acceptance_rate:.4f}")
    print(f"  Squeeze rate:         {stats.squeeze_rate:.4f}")
    print(f"  Density evaluations:  {stats.density_evaluations + envelope.segment_count + 1}")
    if stats.envelope_violations:
        print(f"  Envelope violations:  {stats.envelope_violations} (L too small!)")

    series = result.to_series()
    print(f"\n  Sample mean:          {series.mean():.4f} (expected 0.5)")
    print(f"  Sample variance:      {series.var():.4f} (expected {1 / 12 + 1 / (2 * math.pi**2):.4f})")


def visualize(result: SampleResult, output_dir: Path) -> None:
    import matplotlib

    matplotlib.use("Agg")
    import matplotlib.pyplot as plt

    output_dir.mkdir(parents=True, exist_ok=True)
    frame = result.envelope.to_dataframe()
    xs = [i / 500 for i in range(501)]

    fig, ax = plt.subplots(figsize=(10, 5))
    ax.hist(result.values, bins=100, density=True, alpha=0.4, label="samples")
    ax.plot(xs, [density(x) for x in xs], "k-", linewidth=1.5, label="f")
    ax.plot(frame["x"], frame["upper"], "r-", linewidth=1, label="envelope")
    ax.plot(frame["x"], frame["lower"], "g--", linewidth=1, label="squeeze")
    ax.set_xlabel("x")
    ax.set_ylabel("density")
    ax.set_title(f"1 + cos(2 pi x), n = {result.envelope.segment_count}")
    ax.legend(loc="upper center")
    ax.grid(True, alpha=0.3)

    fig.tight_layout()
    fig.savefig(output_dir / "cosine_density.png", dpi=150)
    plt.close(fig)
    frame.to_csv(output_dir / "envelope.csv", index=False)
    print(f"Saved: {output_dir / 'cosine_density.png'}")


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Sample 1 + cos(2 pi x) on [0, 1]")
    parser.add_argument("--samples", type=int, default=100_000, help="Number of samples")
    parser.add_argument("--lipschitz", type=float, default=2 * math.pi, help="Lipschitz constant")
    parser.add_argument("--segments", type=int, default=None, help="Envelope segments (default from L)")
    parser.add_argument("--seed", type=int, default=42, help="Random seed (use -1 for random)")
    parser.add_argument("--output", type=str, default="output/cosine_density", help="Output directory")
    parser.add_argument("--no-viz", action="store_true", help="Skip visualization generation")
    parser.add_argument("--verbose", action="store_true", help="Log sampling rounds")
    args = parser.parse_args()

    if args.verbose:
        lipsample.enable_console_logging(level="DEBUG")

    seed = None if args.seed == -1 else args.seed
    sampler = LipschitzSampler(
        density,
        args.lipschitz,
        (0.0, 1.0),
        SamplerConfig(segment_count=args.segments, seed=seed),
    )

    print(f"Sampling {args.samples} values (L={args.lipschitz:.4f})...")
    result = sampler.sample(args.samples)
    print_summary(result)

    if not args.no_viz:
        output_dir = Path(args.output)
        visualize(result, output_dir)
        print(f"\nVisualizations saved to: {output_dir.absolute()}")
