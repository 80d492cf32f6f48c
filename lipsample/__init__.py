"""lipsample: exact random variates from Lipschitz continuous densities.

Draws i.i.d. samples from an unnormalized density f on [a, b] by
acceptance-rejection against a piecewise-linear envelope built from the
Lipschitz constant of f.

Example:
    import math
    import lipsample

    values, grid_x, grid_y = lipsample.sample(
        lambda x: 1 + math.cos(2 * math.pi * x),
        lipschitz=2 * math.pi,
        interval=(0, 1),
        m=10_000,
        config=lipsample.SamplerConfig(seed=1),
    )

The library is silent by default. Use ``lipsample.enable_console_logging()``
or ``lipsample.configure_from_env()`` to see its log output.
"""

import logging

logging.getLogger("lipsample").addHandler(logging.NullHandler())

from lipsample.acceptance import FilterOutcome, filter_proposals
from lipsample.config import SamplerConfig, default_segment_count
from lipsample.envelope import Envelope, build_envelope, segment_adjustment
from lipsample.logging_config import (
    configure_from_env,
    disable_logging,
    enable_console_logging,
    enable_file_logging,
    enable_json_logging,
    set_level,
    set_module_level,
)
from lipsample.mixture import ProposalBatch, draw_proposals, kernel_weights
from lipsample.sampler import LipschitzSampler, SampleResult, SamplingStats, sample

__version__ = "0.1.0"

__all__ = [
    # Sampling
    "LipschitzSampler",
    "SampleResult",
    "SamplingStats",
    "sample",
    # Configuration
    "SamplerConfig",
    "default_segment_count",
    # Building blocks
    "Envelope",
    "FilterOutcome",
    "ProposalBatch",
    "build_envelope",
    "draw_proposals",
    "filter_proposals",
    "kernel_weights",
    "segment_adjustment",
    # Logging
    "configure_from_env",
    "disable_logging",
    "enable_console_logging",
    "enable_file_logging",
    "enable_json_logging",
    "set_level",
    "set_module_level",
]
