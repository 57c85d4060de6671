"""
_lexer.py
=========
Character classification and scanning primitives over a ``ParserInput``.

Every function takes the input and a cursor position and returns a new
position; none of them keeps state between calls.  All scans stop at the
end of the input, and the ones that need a terminator raise
``UnterminatedToken`` when they do not find it.
"""

from ringtree._errors import UnterminatedToken
from ringtree._input import ParserInput


# Characters that end a tip label or a node label.  ';' is included so a
# rooted top-level group such as "(A,B)90;" terminates its label.
BRANCH_TERMINATORS = ":,);"


def is_digit(c: str) -> bool:
    return "0" <= c <= "9"


def is_space(c: str) -> bool:
    # Newlines are not whitespace inside a tree.
    return c == " " or c == "\t"


def is_float_char(c: str) -> bool:
    return is_digit(c) or c == "." or c == "e" or c == "E" or c == "-"


def skip_whitespace(pi: ParserInput, pos: int) -> int:
    """Advance past spaces and tabs; stops at the end of the input."""
    n = pi.size()
    while pos < n and is_space(pi.char_at(pos)):
        pos += 1
    return pos


def find_end_of_branch(pi: ParserInput, pos: int, allow_end: bool = False) -> int:
    """
    Return the offset of the first branch terminator (``:``, ``,``, ``)``,
    ``;``) at or after *pos*.

    Parameters
    ----------
    pi        : ParserInput
    pos       : int    Start of the label.
    allow_end : bool   If True, the end of the input or a line break also
                       terminates the label (used for the label of the
                       outermost group, which may end a line).

    Raises
    ------
    UnterminatedToken   if no terminator is found and *allow_end* is False.
    """
    start = pos
    n = pi.size()
    while pos < n:
        c = pi.char_at(pos)
        if c in BRANCH_TERMINATORS or (allow_end and c in "\r\n"):
            return pos
        pos += 1
    if allow_end:
        return pos
    raise UnterminatedToken("unterminated label", start)


def find_next(pi: ParserInput, pos: int, c: str) -> int:
    """
    Return the offset of the first occurrence of *c* at or after *pos*.

    Raises
    ------
    UnterminatedToken   if *c* does not occur before the end of the input.
    """
    start = pos
    n = pi.size()
    while pos < n:
        if pi.char_at(pos) == c:
            return pos
        pos += 1
    raise UnterminatedToken(f"missing {c!r}", start)


def find_float(pi: ParserInput, pos: int) -> int:
    """
    Return the end of the run of float-literal characters starting at
    *pos*.  Returns *pos* itself when no such character is there.
    """
    n = pi.size()
    while pos < n and is_float_char(pi.char_at(pos)):
        pos += 1
    return pos
