"""
_parser.py
==========
Newick reader producing a ``RingTree``.

Grammar
-------
  tree        := node
  node        := leaf | inner
  leaf        := label                 ; longest run not in ':,);'
  inner       := '(' node branchlen branchlabel
                 ',' node branchlen branchlabel
                 ( ',' node branchlen branchlabel )?
                 ')' [ node-label ]
  branchlen   := (':' float)?
  branchlabel := ('[' text ']')?

A group with three children is the pseudo-root of an unrooted tree and is
only accepted at the outermost level.  A two-child group becomes an
internal vertex whose first half-edge is left unlinked for the enclosing
group (or stays free when it is the outermost group, i.e. a rooted tree).

The node label after a two-child group is read as the vertex support when
it is a plain integer without a leading zero ("100" -> 100.0; "0", "07",
"abc" -> no support).

Public API
----------
  parse(pi, pos=0)          -> (Node, pos)   one tree from a ParserInput
  loads(text)               -> Node          a whole Newick string
  load(path)                -> Node          a whole Newick file
  iter_parse(pi)            -> Iterator[Node]  ';'-separated trees

Notes
-----
Nesting is handled with an explicit frame stack rather than recursion, so
caterpillar trees with tens of thousands of tips do not hit Python's
recursion limit.
"""

import logging
from typing import Iterator, List, Tuple

from ringtree._errors import MalformedNumber, UnexpectedCharacter
from ringtree._input import ParserInput, StringInput, open_input
from ringtree._lexer import (
    find_end_of_branch,
    find_float,
    find_next,
    is_digit,
    skip_whitespace,
)
from ringtree._logging import log_empty_branch_label, log_parse_summary
from ringtree._tree import NO_SUPPORT, Node, RingTree

logger = logging.getLogger(__name__)


# ============================================================================ #
# Branch attributes
# ============================================================================ #


def parse_branch_length(pi: ParserInput, pos: int) -> Tuple[float, int]:
    """
    Parse an optional ``:length``.

    Returns ``(0.0, pos)`` with the cursor unchanged (after whitespace)
    when no ``:`` is present.

    Raises
    ------
    MalformedNumber   if ``:`` is not followed by a valid float literal.
    """
    pos = skip_whitespace(pi, pos)
    if pos >= pi.size() or pi.char_at(pos) != ":":
        return 0.0, pos

    pos = skip_whitespace(pi, pos + 1)
    end = find_float(pi, pos)
    text = pi.substring(pos, end)
    if end == pos:
        raise MalformedNumber(text, pos)
    try:
        length = float(text)
    except ValueError:
        raise MalformedNumber(text, pos) from None
    return length, end


def parse_branch_label(pi: ParserInput, pos: int) -> Tuple[str, int]:
    """
    Parse an optional ``[label]`` and return the text between the brackets.

    An empty ``[]`` is logged as a warning and yields ``''``.

    Raises
    ------
    UnterminatedToken   if the closing ``]`` is missing.
    """
    if pos >= pi.size() or pi.char_at(pos) != "[":
        return "", pos

    end = find_next(pi, pos + 1, "]")
    if end == pos + 1:
        log_empty_branch_label(pos)
    return pi.substring(pos + 1, end), end + 1


def _label_support(label: str) -> float:
    """Support encoded by a node label, or ``NO_SUPPORT``."""
    if not label or label[0] == "0":
        return NO_SUPPORT
    for c in label:
        if not is_digit(c):
            return NO_SUPPORT
    return float(label)


# ============================================================================ #
# Nodes
# ============================================================================ #


def parse_leaf(pi: ParserInput, pos: int, tree: RingTree) -> Tuple[int, int]:
    """Parse a tip label and add a tip to *tree*; returns (half-edge, pos)."""
    pos = skip_whitespace(pi, pos)
    end = find_end_of_branch(pi, pos)
    return tree.add_tip(pi.substring(pos, end)), end


def parse_node(pi: ParserInput, pos: int, tree: RingTree) -> Tuple[int, int]:
    """Parse a tip or a parenthesised group, dispatching on the lookahead."""
    pos = skip_whitespace(pi, pos)
    if pi.char_at(pos) == "(":
        return parse_inner_node(pi, pos, tree)
    return parse_leaf(pi, pos, tree)


class _Frame:
    """An open '(' group and the children parsed for it so far."""

    __slots__ = ("offset", "children")

    def __init__(self, offset: int) -> None:
        self.offset = offset
        # (half-edge, branch length, branch label) per child
        self.children: List[Tuple[int, float, str]] = []


def parse_inner_node(pi: ParserInput, pos: int, tree: RingTree) -> Tuple[int, int]:
    """
    Parse a parenthesised group starting at *pos* (after optional
    whitespace) and everything nested in it.

    Returns
    -------
    (int, int)   Half-edge of the outermost vertex and the offset past the
                 group.  For a two-child group it is the vertex's free slot;
                 for a three-child pseudo-root it is linked to the third child.

    Raises
    ------
    UnexpectedCharacter   for a missing '(' / ',' / ')' or a nested
                          three-child group.
    UnterminatedToken     when the input ends inside the group.
    MalformedNumber       for an unparsable branch length.
    """
    pos = skip_whitespace(pi, pos)
    c = pi.char_at(pos)
    if c != "(":
        raise UnexpectedCharacter("'('", c, pos)

    stack = [_Frame(pos)]
    pos += 1

    while True:
        pos = skip_whitespace(pi, pos)
        if pi.char_at(pos) == "(":
            stack.append(_Frame(pos))
            pos += 1
            continue

        child, pos = parse_leaf(pi, pos, tree)

        # A finished child may close any number of enclosing groups.
        while True:
            frame = stack[-1]
            length, pos = parse_branch_length(pi, pos)
            label, pos = parse_branch_label(pi, pos)
            frame.children.append((child, length, label))
            n_children = len(frame.children)

            pos = skip_whitespace(pi, pos)
            c = pi.char_at(pos)

            if c == "," and n_children == 1:
                pos += 1
                break
            if c == "," and n_children == 2:
                if len(stack) > 1:
                    # A nested vertex with three children would have degree 4.
                    raise UnexpectedCharacter("')'", c, pos)
                pos += 1
                break
            if c == ")" and n_children >= 2:
                stack.pop()
                child, pos = _close_group(pi, pos, tree, frame, outermost=not stack)
                if not stack:
                    return child, pos
                continue

            if n_children == 1:
                expected = "','"
            elif n_children == 2:
                expected = "',' or ')'"
            else:
                expected = "')'"
            raise UnexpectedCharacter(expected, c, pos)


def _close_group(
    pi: ParserInput, pos: int, tree: RingTree, frame: _Frame, outermost: bool
) -> Tuple[int, int]:
    """Consume the ')' at *pos*, build the vertex for *frame* and link it."""
    pos += 1

    if len(frame.children) == 3:
        # Pseudo-root: the third child takes the vertex's own slot.
        pos = skip_whitespace(pi, pos)
        end = find_end_of_branch(pi, pos, allow_end=True)
        h = tree.add_vertex(label=pi.substring(pos, end))
        slots = (tree.ring_next[h], tree.ring_next[tree.ring_next[h]], h)
        support = NO_SUPPORT
        pos = end
    else:
        end = find_end_of_branch(pi, pos, allow_end=outermost)
        node_label = pi.substring(pos, end)
        support = _label_support(node_label)
        h = tree.add_vertex(support=support, label=node_label)
        slots = (tree.ring_next[h], tree.ring_next[tree.ring_next[h]])
        pos = end

    for slot, (child, length, label) in zip(slots, frame.children):
        tree.link(child, int(slot), length, label, support)
    return h, pos


# ============================================================================ #
# Entry points
# ============================================================================ #


def parse(pi: ParserInput, pos: int = 0) -> Tuple[Node, int]:
    """
    Parse one tree from *pi* starting at *pos*.

    A trailing ';' is not consumed.

    Returns
    -------
    (Node, int)   A half-edge of the new tree and the offset just past it.
                  For an unrooted tree the half-edge belongs to the
                  pseudo-root; for a rooted one it is the root's free slot.
    """
    pos = skip_whitespace(pi, pos)
    start = pos
    tree = RingTree()
    h, pos = parse_node(pi, pos, tree)
    tree._trim()

    log_parse_summary(tree.n_tips, tree.n_internal, tree.is_unrooted, start, pos)
    return tree.node(h), pos


def _skip_blank(pi: ParserInput, pos: int) -> int:
    n = pi.size()
    while pos < n and pi.char_at(pos) in " \t\r\n":
        pos += 1
    return pos


def _parse_document(pi: ParserInput) -> Node:
    node, pos = parse(pi, _skip_blank(pi, 0))
    pos = skip_whitespace(pi, pos)
    if pos < pi.size() and pi.char_at(pos) == ";":
        pos += 1
    pos = _skip_blank(pi, pos)
    if pos < pi.size():
        raise UnexpectedCharacter("end of input", pi.char_at(pos), pos)
    return node


def loads(text: str) -> Node:
    """
    Parse a complete Newick string (optional trailing ';' and newlines).

    >>> root = loads("(A:1,B:2,C:3);")
    >>> sorted(root.tree.tip_labels)
    ['A', 'B', 'C']
    """
    return _parse_document(StringInput(text))


def load(path) -> Node:
    """Parse the single tree stored in the file at *path*."""
    logger.debug("Reading tree from %s", path)
    return _parse_document(open_input(path))


def iter_parse(pi: ParserInput) -> Iterator[Node]:
    """
    Yield every ';'-terminated tree in *pi* (one tree per line, as written
    by bootstrap and posterior-sample files).

    Raises
    ------
    UnexpectedCharacter   if a tree is followed by something other than ';'.
    UnterminatedToken     if the input ends before a tree's ';'.
    """
    pos = _skip_blank(pi, 0)
    while pos < pi.size():
        node, pos = parse(pi, pos)
        pos = skip_whitespace(pi, pos)
        c = pi.char_at(pos)
        if c != ";":
            raise UnexpectedCharacter("';'", c, pos)
        yield node
        pos = _skip_blank(pi, pos + 1)
