"""
conftest.py
===========
Session-level pytest configuration for the test suite.

Custom marks
------------
large_scale
    Applied to tests that build trees with tens of thousands of tips to
    check that parsing and printing do not recurse.  They take a few
    seconds; deselect with ``-m "not large_scale"``.

    Registration here suppresses PytestUnknownMarkWarning and makes the mark
    visible in ``pytest --markers``.
"""

import logging


def pytest_configure(config):
    """
    Configure pytest before test collection begins.
    """
    config.addinivalue_line(
        "markers",
        "large_scale: builds trees with tens of thousands of tips "
        "(deselect with -m 'not large_scale')",
    )

    # Parse/print summaries are DEBUG records; keep them out of captured
    # output unless a test asks for them through caplog.
    logging.getLogger("ringtree").setLevel(logging.INFO)
