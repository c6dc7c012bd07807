"""
Pytest configuration for the ikvmbuild test suite.

Integration tests launch a stand-in ikvmc through a real subprocess and are
skipped by default; pass --full to run them.
"""

import pytest


def pytest_addoption(parser):
    """Add custom command-line options."""
    parser.addoption(
        "--full",
        action="store_true",
        default=False,
        help="Run full test suite including integration tests (slow)",
    )


def pytest_configure(config):
    """Configure pytest based on command-line options."""
    if config.getoption("--full"):
        # Remove the default marker expression that excludes integration tests
        markexpr = config.getoption("-m", "")
        if markexpr == "not integration":
            config.option.markexpr = ""


@pytest.fixture(autouse=True)
def _no_ikvm_path_env(monkeypatch):
    """Keep a developer's IKVM_PATH from leaking into configuration tests."""
    monkeypatch.delenv("IKVM_PATH", raising=False)
