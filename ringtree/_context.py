"""
_context.py
===========
Context managers for ringtree logging.

All context managers properly restore state on exit, even if exceptions occur.
"""

import logging
from contextlib import contextmanager


# Loggers owned by the package; ``quiet`` changes all of them at once.
PACKAGE_LOGGERS = (
    "ringtree._parser",
    "ringtree._logging",
)


@contextmanager
def suppress_logger(logger_name: str, level: int = logging.CRITICAL):
    """
    Temporarily change a logger's level.

    Parameters
    ----------
    logger_name : str
        Name of the logger to suppress (e.g., 'ringtree._logging').
    level : int, default logging.CRITICAL
        Temporary logging level.

    Yields
    ------
    None
        Control is yielded back to the with-block.

    Examples
    --------
    >>> # Hide empty-branch-label warnings while bulk-loading trees
    >>> with suppress_logger('ringtree._logging'):
    ...     trees = [loads(nwk) for nwk in newicks]

    Notes
    -----
    - Exception-safe: Logger level restored even if exception raised
    - Nesting-safe: Can nest multiple suppress_logger contexts
    """
    logger = logging.getLogger(logger_name)
    original_level = logger.level

    try:
        logger.setLevel(level)
        yield
    finally:
        logger.setLevel(original_level)


@contextmanager
def quiet(level: int = logging.CRITICAL):
    """
    Temporarily suppress all ringtree logging.

    Parameters
    ----------
    level : int, default logging.CRITICAL
        Temporary logging level for every package logger.

    Examples
    --------
    >>> with quiet():
    ...     root = loads("(A:1[],B:2,C:3);")

    >>> # Show only warnings
    >>> with quiet(logging.WARNING):
    ...     root = load("big.tree")
    """
    loggers = [logging.getLogger(name) for name in PACKAGE_LOGGERS]
    original_levels = [lg.level for lg in loggers]

    try:
        for lg in loggers:
            lg.setLevel(level)
        yield
    finally:
        for lg, original in zip(loggers, original_levels):
            lg.setLevel(original)
