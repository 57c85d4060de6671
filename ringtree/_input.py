"""
_input.py
=========
Random-access text sources consumed by the parser.

The parser only ever asks three things of its input: the character at an
offset, the total size, and a substring.  ``ParserInput`` captures that
contract; ``StringInput`` and ``BytesInput`` are the two concrete buffers
used in practice.  Offsets are 0-based.  Reading outside ``[0, size())``
raises ``UnterminatedToken`` instead of returning garbage, so every scan
in the lexer is bounded by the input length.
"""

from abc import ABC, abstractmethod
from typing import Union

from ringtree._errors import UnterminatedToken


class ParserInput(ABC):
    """Abstract immutable text buffer with random access."""

    @abstractmethod
    def char_at(self, offset: int) -> str:
        """Return the single character at *offset*."""

    @abstractmethod
    def size(self) -> int:
        """Return the number of characters in the buffer."""

    @abstractmethod
    def substring(self, start: int, end: int) -> str:
        """Return the text in ``[start, end)``."""

    def __len__(self) -> int:
        return self.size()

    def _check(self, offset: int) -> None:
        if offset < 0 or offset >= self.size():
            raise UnterminatedToken("unexpected end of input", offset)


class StringInput(ParserInput):
    """``ParserInput`` over an in-memory ``str``."""

    def __init__(self, text: str) -> None:
        self._text = text

    def char_at(self, offset: int) -> str:
        self._check(offset)
        return self._text[offset]

    def size(self) -> int:
        return len(self._text)

    def substring(self, start: int, end: int) -> str:
        return self._text[start:end]

    def __repr__(self) -> str:
        return f"StringInput(size={len(self._text)})"


class BytesInput(ParserInput):
    """
    ``ParserInput`` over raw bytes (``bytes``, ``bytearray``, ``memoryview``
    or an ``mmap``).  Offsets are byte offsets.  ``char_at`` looks at one
    byte at a time, which is enough to find the ASCII delimiters; substrings
    between delimiters are decoded as UTF-8, so non-ASCII labels survive.
    """

    def __init__(self, data: Union[bytes, bytearray, memoryview]) -> None:
        self._data = data

    def char_at(self, offset: int) -> str:
        self._check(offset)
        return chr(self._data[offset])

    def size(self) -> int:
        return len(self._data)

    def substring(self, start: int, end: int) -> str:
        return bytes(self._data[start:end]).decode("utf-8")

    def __repr__(self) -> str:
        return f"BytesInput(size={len(self._data)})"


def open_input(path) -> BytesInput:
    """
    Read the whole file at *path* into memory and wrap it as a
    ``BytesInput``.  Tree files are small enough that streaming is never
    needed.
    """
    with open(path, "rb") as fh:
        return BytesInput(fh.read())
