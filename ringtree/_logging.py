"""
_logging.py
===========
Logging functions for ringtree.

All functions in this module have NO side effects except logging. They take
computed data as parameters and format/emit log messages.  The library never
installs handlers; applications decide where records go.
"""

import logging


logger = logging.getLogger(__name__)


# ============================================================================ #
# Parse-time Logging
# ============================================================================ #


def log_empty_branch_label(offset: int) -> None:
    """
    Warn about an empty bracketed branch label ``[]``.

    Parameters
    ----------
    offset : int
        Byte offset of the opening ``[``.
    """
    logger.warning("Empty branch label '[]' at offset %d; treated as absent.", offset)


def log_parse_summary(
    n_tips: int, n_internal: int, unrooted: bool, start: int, end: int
) -> None:
    """
    Log the shape of a freshly parsed tree at DEBUG level.

    Parameters
    ----------
    n_tips, n_internal : int
        Vertex counts of the parsed tree.
    unrooted : bool
        Whether the outermost group had three children (pseudo-root).
    start, end : int
        Offsets of the first consumed character and just past the last.
    """
    logger.debug(
        "Parsed tree: %d tips, %d internal vertices, %s top level, "
        "offsets %d..%d",
        n_tips,
        n_internal,
        "trifurcating" if unrooted else "bifurcating",
        start,
        end,
    )


# ============================================================================ #
# Print-time Logging
# ============================================================================ #


def log_print_summary(start_index: int, root_index: int, n_chars: int) -> None:
    """
    Log a completed print at DEBUG level.

    Parameters
    ----------
    start_index : int
        Half-edge the caller asked to print from.
    root_index : int
        Half-edge actually used as the top-level vertex (differs from
        *start_index* when printing started at a tip).
    n_chars : int
        Number of characters written.
    """
    if start_index != root_index:
        logger.debug(
            "Printing from tip half-edge %d moved to internal half-edge %d",
            start_index,
            root_index,
        )
    logger.debug("Printed tree from half-edge %d: %d characters", root_index, n_chars)
