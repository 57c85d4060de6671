"""
_printer.py
===========
Newick writer for ``RingTree`` structures.

Printing may start from any half-edge.  The vertex printing starts at is
written as the top-level group: with three children when all three of its
half-edges are linked (the usual unrooted form ``(a,b,c);``), or with two
when one slot is free (a rooted tree).  Every other internal vertex is
written as ``(left,right)label:length`` where *length* is the edge towards
the vertex it was reached from.

Starting from a tip moves to the internal vertex on the other side of the
tip's edge; a tree with no internal vertex cannot be printed.

Branch lengths are written in fixed-point notation with ``precision``
digits after the decimal point (20 by default), so a re-parse recovers
them to double precision for ordinary branch-length magnitudes.
Lengths too small for that many decimals (below about 1e-13 at the default)
are written in the shortest exponent form instead, e.g. ``1e-22``.

The free root of a rooted tree has no place in an unrooted string when
printing starts below it.  Its two edges become one: lengths are added and
branch labels joined with a space.  The root's own node label and support
are not written.
"""

import io
from typing import TextIO

from ringtree._errors import NoPrintableRoot
from ringtree._logging import log_print_summary
from ringtree._tree import NO_LINK, Node, RingTree


DEFAULT_PRECISION = 20


def _format_length(length: float, precision: int) -> str:
    """
    Fixed-point with *precision* decimals, or the shortest round-tripping
    form when fixed-point would keep fewer than min(precision, 8)
    significant digits of a non-zero length.
    """
    if length and abs(length) < 10.0 ** (min(precision, 8) - precision - 1):
        return repr(length)
    return f"{length:.{precision}f}"


def _node_label(tree: RingTree, v: int) -> str:
    """Text written after an internal vertex's ')'."""
    label = tree.label[v]
    if label:
        return label
    support = float(tree.support[v])
    if support > 0 and support.is_integer():
        return str(int(support))
    return ""


def _find_root(node: Node) -> int:
    """Half-edge of the internal vertex to print from."""
    tree = node.tree
    h = node.index
    if not tree.is_tip[tree.vertex[h]]:
        return h

    nxt = tree.ring_next
    for candidate in (h, int(nxt[h]), int(nxt[nxt[h]])):
        if tree.back[candidate] != NO_LINK:
            root = int(tree.back[candidate])
            break
    else:
        raise NoPrintableRoot("cannot print a single unlinked node", h)

    if tree.is_tip[tree.vertex[root]]:
        raise NoPrintableRoot("cannot print a tree of two tips", h)
    return root


def write_tree(
    node: Node,
    stream: TextIO,
    precision: int = DEFAULT_PRECISION,
    branch_labels: bool = True,
    node_labels: bool = True,
) -> int:
    """
    Write the tree containing *node* to *stream* in Newick format,
    using *node*'s vertex as the top level.

    Parameters
    ----------
    node          : Node   Any half-edge of the tree.
    stream        : TextIO
    precision     : int    Digits after the decimal point for lengths.
    branch_labels : bool   Write ``[label]`` after lengths of labelled edges.
    node_labels   : bool   Write node labels / integer supports after ')'.

    Returns
    -------
    int   Number of characters written.

    Raises
    ------
    NoPrintableRoot   if no internal vertex is reachable from *node*.
    """
    tree = node.tree
    nxt = tree.ring_next
    back = tree.back
    root = _find_root(node)

    # Linked slots of the top-level vertex, in ring order starting after root.
    slots = [int(nxt[root]), int(nxt[nxt[root]]), root]
    children = [int(back[s]) for s in slots if back[s] != NO_LINK]
    if len(children) < 2:
        raise NoPrintableRoot("top-level vertex has fewer than two neighbours", root)

    # Work stack: str items are written verbatim; (half-edge, extra, carried)
    # items are subtrees whose edge length is increased by *extra* and whose
    # branch label is joined with *carried*.
    stack = [");"]
    for i in range(len(children) - 1, -1, -1):
        stack.append((children[i], 0.0, ""))
        if i:
            stack.append(",")
    stack.append("(")

    written = 0
    while stack:
        item = stack.pop()
        if isinstance(item, str):
            stream.write(item)
            written += len(item)
            continue

        h, extra, carried = item
        v = int(tree.vertex[h])
        suffix = ":" + _format_length(float(tree.back_length[h]) + extra, precision)
        branch_label = " ".join(t for t in (carried, tree.back_label[h]) if t)
        if branch_labels and branch_label:
            suffix += "[" + branch_label + "]"

        if tree.is_tip[v]:
            text = tree.label[v] + suffix
            stream.write(text)
            written += len(text)
            continue

        kids = [int(back[s]) for s in (int(nxt[h]), int(nxt[nxt[h]])) if back[s] != NO_LINK]
        if len(kids) == 1:
            # Degree-2 vertex (the free root of a rooted tree seen from
            # below): merge its two edges into one.
            stack.append((kids[0], float(tree.back_length[h]) + extra, branch_label))
            continue

        close = ")"
        if node_labels:
            close += _node_label(tree, v)
        stack.append(close + suffix)
        for i in range(len(kids) - 1, -1, -1):
            stack.append((kids[i], 0.0, ""))
            if i:
                stack.append(",")
        stack.append("(")

    log_print_summary(node.index, root, written)
    return written


def print_tree(
    node: Node,
    precision: int = DEFAULT_PRECISION,
    branch_labels: bool = True,
    node_labels: bool = True,
) -> str:
    """
    Return the Newick string of the tree containing *node*.

    >>> from ringtree import loads
    >>> print_tree(loads("(A:1,B:2,C:3);"), precision=1)
    '(A:1.0,B:2.0,C:3.0);'
    """
    buf = io.StringIO()
    write_tree(node, buf, precision, branch_labels, node_labels)
    return buf.getvalue()
