"""
Shared pytest fixtures for lipsample tests.
"""

import logging
import math
from pathlib import Path

import pytest


@pytest.fixture(scope="session")
def test_output_root() -> Path:
    """
    Returns the root test_output directory. Created once per test session.
    Files here persist after tests complete for easy access.
    """
    output_dir = Path(__file__).parent.parent / "test_output"
    output_dir.mkdir(exist_ok=True)
    return output_dir


@pytest.fixture
def test_output_dir(request, test_output_root) -> Path:
    """
    Returns a directory for the current test to write output files.
    Directory structure: test_output/<module_name>/<test_name>/
    """
    module_name = request.module.__name__.split(".")[-1]
    test_name = request.node.name

    test_dir = test_output_root / module_name / test_name
    test_dir.mkdir(parents=True, exist_ok=True)
    return test_dir


def _reset_lipsample_logger() -> None:
    logger = logging.getLogger("lipsample")
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        if not isinstance(handler, logging.NullHandler):
            handler.close()
    logger.addHandler(logging.NullHandler())
    logger.setLevel(logging.NOTSET)


@pytest.fixture(autouse=True)
def reset_lipsample_logging():
    """Start and end every test with the library-default logging setup:
    a single NullHandler and a NOTSET level.
    """
    _reset_lipsample_logger()
    yield
    _reset_lipsample_logger()


@pytest.fixture
def cosine_density():
    """1 + cos(2 pi x) on [0, 1]; Lipschitz constant 2 pi."""
    return lambda x: 1.0 + math.cos(2.0 * math.pi * x)
