"""
Pytest configuration and fixtures for link crawler tests.
"""

import pytest
from hypothesis import settings, Verbosity
import os

# Configure Hypothesis for faster test runs
settings.register_profile("fast", max_examples=25, deadline=None, verbosity=Verbosity.quiet)
settings.register_profile("thorough", max_examples=200, deadline=None, verbosity=Verbosity.normal)

settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "fast"))


@pytest.fixture
def abc_graph():
    """Small cyclic graph: A links to B and C, B links back to A."""
    return {
        "A": ("page A", ["B", "C"]),
        "B": ("page B", ["A"]),
        "C": ("page C", []),
    }


@pytest.fixture(autouse=True)
def clean_crawler_env(monkeypatch):
    """Keep CRAWLER_* variables from the host out of config tests."""
    for name in list(os.environ):
        if name.startswith("CRAWLER_"):
            monkeypatch.delenv(name, raising=False)


def pytest_configure(config):
    """Configure pytest with custom settings."""
    import logging
    import structlog

    # Keep per-task debug/info lines out of test output
    structlog.configure(wrapper_class=structlog.make_filtering_bound_logger(logging.WARNING))
    logging.getLogger("link_crawler").setLevel(logging.WARNING)
    logging.getLogger("hypothesis").setLevel(logging.WARNING)


def pytest_collection_modifyitems(config, items):
    """Modify test collection to add markers."""
    for item in items:
        if "properties" in item.fspath.basename:
            item.add_marker(pytest.mark.property)

        if "integration" in item.fspath.basename:
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)
