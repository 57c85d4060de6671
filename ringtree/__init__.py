"""
ringtree
========

Newick reader and writer built on a ring-of-half-edges tree model that
represents rooted and unrooted (trifurcating pseudo-root) trees with the
same vertex type.

Main Classes
------------
RingTree : Arena of half-edges and vertices
Node : Handle on one half-edge; any half-edge is a valid entry point

Parsing
-------
parse : Parse one tree from a ParserInput at an offset
loads / load : Parse a whole Newick string / file
iter_parse : Iterate over ';'-separated trees

Printing
--------
print_tree : Newick string starting from any half-edge
write_tree : Same, written to a text stream

Inputs
------
ParserInput : Abstract random-access text buffer
StringInput, BytesInput : Concrete buffers
open_input : Read a file into a BytesInput

Errors
------
NewickError and its subclasses UnexpectedCharacter, MalformedNumber,
UnterminatedToken, NoPrintableRoot.

Examples
--------
>>> from ringtree import loads, print_tree
>>> root = loads("(A:1,(B:2,C:3)90:4,D:5);")
>>> root.tree.n_tips, root.tree.n_internal
(4, 2)
>>> print_tree(root, precision=1)
'(A:1.0,(B:2.0,C:3.0)90:4.0,D:5.0);'
"""

__version__ = "0.1.0"
__license__ = "MIT"

# Main classes
from ._tree import RingTree, Node

# Parsing and printing
from ._parser import (
    parse,
    parse_node,
    parse_leaf,
    parse_inner_node,
    parse_branch_length,
    parse_branch_label,
    loads,
    load,
    iter_parse,
)
from ._printer import print_tree, write_tree, DEFAULT_PRECISION

# Inputs
from ._input import ParserInput, StringInput, BytesInput, open_input

# Errors
from ._errors import (
    NewickError,
    UnexpectedCharacter,
    MalformedNumber,
    UnterminatedToken,
    NoPrintableRoot,
)

# Context managers
from ._context import suppress_logger, quiet

# Utilities
from ._utils import format_newick, strip_whitespace

# Public API
__all__ = [
    # Main classes
    "RingTree",
    "Node",
    # Parsing
    "parse",
    "parse_node",
    "parse_leaf",
    "parse_inner_node",
    "parse_branch_length",
    "parse_branch_label",
    "loads",
    "load",
    "iter_parse",
    # Printing
    "print_tree",
    "write_tree",
    "DEFAULT_PRECISION",
    # Inputs
    "ParserInput",
    "StringInput",
    "BytesInput",
    "open_input",
    # Errors
    "NewickError",
    "UnexpectedCharacter",
    "MalformedNumber",
    "UnterminatedToken",
    "NoPrintableRoot",
    # Context managers
    "suppress_logger",
    "quiet",
    # Utilities
    "format_newick",
    "strip_whitespace",
    # Version info
    "__version__",
]
