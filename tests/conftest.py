"""Pytest configuration for tests.

No sys.path hacks - tests import from the installed schemaloom package.
"""

import pytest

from schemaloom.adapter import clear_validator_cache
from schemaloom.config import get_config
from schemaloom._internal.bridge import set_bridge


def pytest_addoption(parser):
    """Add gated perf test option."""
    parser.addoption(
        "--run-perf",
        action="store_true",
        default=False,
        help="Run performance sentinel benchmarks (gated)."
    )


def pytest_collection_modifyitems(config, items):
    """Skip perf-marked tests unless --run-perf is set."""
    if config.getoption("--run-perf"):
        return
    skip_perf = pytest.mark.skip(reason="perf tests gated; pass --run-perf")
    for item in items:
        if "perf" in item.keywords:
            item.add_marker(skip_perf)


@pytest.fixture(autouse=True)
def fresh_engine_state():
    """Each test sees configuration re-read from its environment and a freshly probed bridge."""
    get_config.cache_clear()
    set_bridge(None)
    clear_validator_cache()
    yield
    get_config.cache_clear()
    set_bridge(None)
    clear_validator_cache()
