"""
_errors.py
==========
Exception taxonomy for Newick parsing and printing.

Every error carries the byte ``offset`` at which it was detected (``None``
when no single position applies).  All classes derive from ``ValueError``
so callers that already guard tree input with ``except ValueError`` keep
working.
"""

from typing import Optional


class NewickError(ValueError):
    """Base class for all ringtree parse and print failures."""

    def __init__(self, message: str, offset: Optional[int] = None) -> None:
        self.offset = offset
        if offset is not None:
            message = f"{message} at offset {offset}"
        super().__init__(message)


class UnexpectedCharacter(NewickError):
    """A specific delimiter was required but something else was found."""

    def __init__(self, expected: str, found: str, offset: int) -> None:
        self.expected = expected
        self.found = found
        super().__init__(f"expected {expected}, found {found!r}", offset)


class MalformedNumber(NewickError):
    """A branch length or support label does not parse as a number."""

    def __init__(self, text: str, offset: int) -> None:
        self.text = text
        if text:
            message = f"malformed number {text!r}"
        else:
            message = "missing number"
        super().__init__(message, offset)


class UnterminatedToken(NewickError):
    """A scan ran off the end of the input before finding its terminator."""


class NoPrintableRoot(NewickError):
    """No internal vertex is reachable from the half-edge given to the printer."""
