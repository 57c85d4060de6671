"""
_utils.py
=========
General-purpose utility functions for ringtree.

These are standalone functions that don't depend on the parser or the
tree arena and are useful when preparing Newick text.
"""


def format_newick(newick: str) -> str:
    """
    Format a NEWICK string for consistent representation.

    Ensures the NEWICK string:
    - Ends with a semicolon
    - Has no leading/trailing whitespace

    Examples
    --------
    >>> format_newick('(A:1,B:1,C:1)')
    '(A:1,B:1,C:1);'

    >>> format_newick('  (A:1,B:1,C:1);  ')
    '(A:1,B:1,C:1);'
    """
    newick = newick.strip()
    if not newick.endswith(";"):
        newick += ";"
    return newick


def strip_whitespace(newick: str) -> str:
    """
    Remove every space, tab and newline from *newick*.

    Useful before comparing printer output with hand-written strings, or
    before parsing a tree that was wrapped over several lines (the parser
    itself only skips spaces and tabs).  Bracketed labels keep their
    inner whitespace.

    >>> strip_whitespace("(A:1, B:2,\\n C:3[a b]);")
    '(A:1,B:2,C:3[a b]);'
    """
    out = []
    depth = 0
    for c in newick:
        if c == "[":
            depth += 1
        elif c == "]" and depth:
            depth -= 1
        elif depth == 0 and c in " \t\r\n":
            continue
        out.append(c)
    return "".join(out)
