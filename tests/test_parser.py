"""
tests/test_parser.py
====================
Pytest test suite for the Newick reader.

Covers the branch attribute scanners, the three node routines, the
top-level entry points (parse / loads / load / iter_parse), the error
taxonomy, and very deep trees (``large_scale``).

Tree files used (tests/trees/):
  star_3tip.tree, nested_4tip.tree, balanced_5tip.tree,
  rooted_3tip.tree, labelled_4tip.tree, three_trees.trees
"""

import os
import sys
import logging

import pytest

_TREES_DIR = os.path.join(os.path.dirname(__file__), "trees")

sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from ringtree import (
    BytesInput,
    MalformedNumber,
    NewickError,
    StringInput,
    UnexpectedCharacter,
    UnterminatedToken,
    iter_parse,
    load,
    loads,
    open_input,
    parse,
    parse_branch_label,
    parse_branch_length,
    parse_inner_node,
    parse_leaf,
    parse_node,
)
from ringtree._tree import NO_LINK, NO_SUPPORT, RingTree


def tree_path(filename: str) -> str:
    return os.path.join(_TREES_DIR, filename)


def children(node):
    """Neighbours of *node*'s vertex reached through its other ring slots."""
    return [n.back for n in node.tree.ring(node)[1:] if n.back is not None]


# ======================================================================== #
# 1. Branch length / branch label                                          #
# ======================================================================== #


class TestBranchLength:
    def test_plain(self):
        assert parse_branch_length(StringInput(":1.25,"), 0) == (1.25, 5)

    def test_whitespace_around_colon(self):
        assert parse_branch_length(StringInput("  : \t0.5)"), 0) == (0.5, 8)

    def test_exponent(self):
        length, pos = parse_branch_length(StringInput(":1e-3,"), 0)
        assert length == pytest.approx(0.001)
        assert pos == 5

    def test_absent_keeps_cursor(self):
        # No ':' means no length; the cursor must stay put, not reset to 0.
        assert parse_branch_length(StringInput("A,B"), 1) == (0.0, 1)

    def test_absent_skips_whitespace_only(self):
        assert parse_branch_length(StringInput("A  ,B"), 1) == (0.0, 3)

    def test_at_end_of_input(self):
        assert parse_branch_length(StringInput("A"), 1) == (0.0, 1)

    def test_missing_number(self):
        with pytest.raises(MalformedNumber) as exc:
            parse_branch_length(StringInput(":,"), 0)
        assert exc.value.offset == 1

    def test_unparsable_number(self):
        with pytest.raises(MalformedNumber) as exc:
            parse_branch_length(StringInput(":1.2.3,"), 0)
        assert exc.value.text == "1.2.3"
        assert exc.value.offset == 1


class TestBranchLabel:
    def test_label(self):
        assert parse_branch_label(StringInput("[comment],"), 0) == ("comment", 9)

    def test_absent(self):
        assert parse_branch_label(StringInput(",x"), 0) == ("", 0)

    def test_absent_at_end(self):
        assert parse_branch_label(StringInput("x"), 1) == ("", 1)

    def test_label_may_contain_delimiters(self):
        assert parse_branch_label(StringInput("[a,b:(c)]"), 0) == ("a,b:(c)", 9)

    def test_empty_label_warns(self, caplog):
        with caplog.at_level(logging.WARNING, logger="ringtree"):
            label, pos = parse_branch_label(StringInput("[],"), 0)
        assert (label, pos) == ("", 2)
        assert "Empty branch label" in caplog.text

    def test_unterminated(self):
        with pytest.raises(UnterminatedToken):
            parse_branch_label(StringInput("[open"), 0)


# ======================================================================== #
# 2. Node routines                                                          #
# ======================================================================== #


class TestNodeRoutines:
    def test_parse_leaf(self):
        t = RingTree()
        h, pos = parse_leaf(StringInput("  Homo_sapiens:0.1"), 0, t)
        assert pos == 14
        assert t.node(h).label == "Homo_sapiens"
        assert t.node(h).is_tip

    def test_parse_leaf_unterminated(self):
        with pytest.raises(UnterminatedToken) as exc:
            parse_leaf(StringInput("A"), 0, RingTree())
        assert exc.value.offset == 0

    def test_parse_node_dispatches_to_leaf(self):
        t = RingTree()
        h, _ = parse_node(StringInput("A,"), 0, t)
        assert t.node(h).is_tip

    def test_parse_node_dispatches_to_inner(self):
        t = RingTree()
        h, pos = parse_node(StringInput("(A,B):1"), 0, t)
        assert not t.node(h).is_tip
        assert pos == 5

    def test_inner_leaves_upward_slot_unlinked(self):
        t = RingTree()
        h, _ = parse_inner_node(StringInput("(A:1,B:2):3"), 0, t)
        assert t.back[h] == NO_LINK
        assert t.back[t.ring_next[h]] != NO_LINK
        assert t.back[t.ring_next[t.ring_next[h]]] != NO_LINK

    def test_inner_requires_open_paren(self):
        with pytest.raises(UnexpectedCharacter) as exc:
            parse_inner_node(StringInput("A,B)"), 0, RingTree())
        assert exc.value.expected == "'('"
        assert exc.value.found == "A"


# ======================================================================== #
# 3. Tree shapes                                                            #
# ======================================================================== #


class TestPseudoRoot:
    def test_three_tips(self):
        root = load(tree_path("star_3tip.tree"))
        assert root.tree.n_internal == 1
        kids = children(root) + [root.back]
        assert [k.label for k in kids] == ["A", "B", "C"]
        assert [k.back_length for k in kids] == [1.0, 2.0, 3.0]

    def test_root_support_unset(self):
        root = loads("(A:1,B:2,C:3);")
        assert root.support == NO_SUPPORT
        assert all(n.back_support == NO_SUPPORT for n in root.tree.ring(root))

    def test_all_slots_linked(self):
        root = loads("(A:1,B:2,C:3);")
        assert all(n.back is not None for n in root.tree.ring(root))
        assert root.tree.is_unrooted


class TestNestedBifurcation:
    @pytest.fixture(scope="class")
    def root(self):
        return load(tree_path("nested_4tip.tree"))

    def test_second_child_is_internal(self, root):
        inner = root.next.next.back
        assert not inner.is_tip
        assert inner.support == 90.0

    def test_inner_branch_length(self, root):
        inner = root.next.next.back
        assert inner.back_length == 4.0
        assert inner.back.vertex == root.vertex

    def test_inner_children(self, root):
        inner = root.next.next.back
        kids = children(inner)
        assert [k.label for k in kids] == ["B", "C"]
        assert [k.back_length for k in kids] == [2.0, 3.0]

    def test_support_on_child_edges(self, root):
        inner = root.next.next.back
        for kid in children(inner):
            assert kid.back_support == 90.0

    def test_outer_children(self, root):
        assert root.next.back.label == "A"
        assert root.back.label == "D"
        assert root.back.back_length == 5.0


class TestRooted:
    def test_two_child_top_level(self):
        top = load(tree_path("rooted_3tip.tree"))
        assert not top.is_tip
        assert top.back is None
        assert not top.tree.is_unrooted
        assert top.tree.n_tips == 3
        assert top.tree.n_internal == 2

    def test_top_level_support_before_semicolon(self):
        top = loads("(A:1,B:2)75;")
        assert top.support == 75.0

    def test_top_level_label_at_end_of_input(self):
        top, pos = parse(StringInput("(A:1,B:2)75"))
        assert top.support == 75.0
        assert pos == 11


class TestSupport:
    @pytest.mark.parametrize(
        "label,expected",
        [
            ("100", 100.0),
            ("90", 90.0),
            ("7", 7.0),
            ("0", NO_SUPPORT),
            ("07", NO_SUPPORT),
            ("abc", NO_SUPPORT),
            ("0.95", NO_SUPPORT),
            ("9a", NO_SUPPORT),
            ("", NO_SUPPORT),
        ],
    )
    def test_node_label_support(self, label, expected):
        root = loads(f"(A:1,(B:2,C:3){label}:4,D:5);")
        assert root.next.next.back.support == expected

    def test_raw_node_label_kept(self):
        root = loads("(A:1,(B:2,C:3)abc:4,D:5);")
        assert root.next.next.back.label == "abc"

    def test_pseudo_root_label_kept_without_support(self):
        root = loads("(A,B,C)top;")
        assert root.label == "top"
        assert root.support == NO_SUPPORT


class TestLabels:
    @pytest.fixture(scope="class")
    def root(self):
        return load(tree_path("labelled_4tip.tree"))

    def test_tip_branch_label_both_sides(self, root):
        a = root.tree.find_tip("A")
        assert a.back_length == 1.5
        assert a.back_label == "comment"
        assert a.back.back_label == "comment"

    def test_inner_branch_label(self, root):
        inner = root.next.next.back
        assert inner.back_label == "clade one"
        assert inner.back.back_label == "clade one"

    def test_unlabelled_edges_empty(self, root):
        assert root.tree.find_tip("D").back_label == ""


class TestWhitespaceAndDefaults:
    def test_spaces_and_tabs(self):
        root = loads(" ( A:1 ,\t( B:2 , C:3 )90:4 , D:5 ) ;")
        assert sorted(root.tree.tip_labels) == ["A", "B", "C", "D"]
        assert root.next.next.back.back_length == 4.0

    def test_missing_lengths_default_to_zero(self):
        root = loads("(A,B,C);")
        assert all(n.back_length == 0.0 for n in root.tree.ring(root))

    def test_empty_tip_labels(self):
        root = loads("(,,);")
        assert root.tree.tip_labels == ["", "", ""]

    def test_trailing_newline(self):
        assert loads("(A,B,C);\n").tree.n_tips == 3

    def test_semicolon_optional(self):
        assert loads("(A,B,C)").tree.n_tips == 3

    def test_trailing_newline_without_semicolon(self):
        root = loads("((A:1,B:2):3,C:4,D:5)\n")
        assert root.label == ""
        assert root.tree.n_tips == 4

    def test_crlf_after_pseudo_root_label(self):
        root = loads("(A,B,C)top\r\n")
        assert root.label == "top"

    def test_trailing_newline_rooted(self):
        root = loads("(A:1,B:2)\n")
        assert root.label == ""
        assert not root.tree.is_unrooted


# ======================================================================== #
# 4. Entry points                                                           #
# ======================================================================== #


class TestEntryPoints:
    def test_parse_returns_offset_before_semicolon(self):
        pi = StringInput("(A:1,B:2,C:3);")
        node, pos = parse(pi)
        assert pos == 13
        assert pi.char_at(pos) == ";"

    def test_parse_from_offset(self):
        pi = StringInput("xx  (A,B,C);")
        node, pos = parse(pi, 2)
        assert node.tree.tip_labels == ["A", "B", "C"]
        assert pos == 11

    def test_parse_bytes_input(self):
        node, _ = parse(BytesInput(b"(A:1,B:2,C:3);"))
        assert node.tree.tip_labels == ["A", "B", "C"]

    def test_load_file(self):
        assert load(tree_path("balanced_5tip.tree")).tree.n_tips == 5

    def test_separate_parses_are_independent(self):
        a = loads("(A,B,C);")
        b = loads("(A,B,C);")
        assert a.tree is not b.tree

    def test_iter_parse(self):
        trees = list(iter_parse(open_input(tree_path("three_trees.trees"))))
        assert [t.tree.n_tips for t in trees] == [3, 4, 3]
        assert trees[0].tree.is_unrooted
        assert not trees[2].tree.is_unrooted

    def test_iter_parse_requires_semicolon(self):
        with pytest.raises(UnexpectedCharacter) as exc:
            list(iter_parse(StringInput("(A,B,C) (D,E,F);")))
        assert exc.value.expected == "';'"

    def test_iter_parse_missing_final_semicolon(self):
        with pytest.raises(UnterminatedToken) as exc:
            list(iter_parse(StringInput("(A,B,C);\n(D,E,F)")))
        assert exc.value.offset == 16

    def test_debug_summary_logged(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="ringtree"):
            loads("(A,B,C);")
        assert "Parsed tree: 3 tips, 1 internal vertices" in caplog.text


# ======================================================================== #
# 5. Malformed input                                                        #
# ======================================================================== #


class TestErrors:
    def test_missing_close(self):
        with pytest.raises((UnterminatedToken, UnexpectedCharacter)):
            loads("(A:1,B:2")

    def test_missing_close_offset(self):
        with pytest.raises(UnterminatedToken) as exc:
            parse(StringInput("(A:1,B:2"))
        assert exc.value.offset == 8

    def test_missing_comma(self):
        with pytest.raises(UnexpectedCharacter) as exc:
            loads("((A:1)B:2,C);")
        assert exc.value.expected == "','"
        assert exc.value.offset == 5

    def test_four_children(self):
        with pytest.raises(UnexpectedCharacter) as exc:
            loads("(A,B,C,D);")
        assert exc.value.expected == "')'"
        assert exc.value.offset == 6

    def test_nested_trifurcation_rejected(self):
        with pytest.raises(UnexpectedCharacter) as exc:
            loads("(A,(B,C,D),E);")
        assert exc.value.offset == 7

    def test_unterminated_bracket(self):
        with pytest.raises(UnterminatedToken):
            loads("(A:1[oops,B,C);")

    def test_bad_length(self):
        with pytest.raises(MalformedNumber):
            loads("(A:1-2,B,C);")

    def test_trailing_garbage(self):
        with pytest.raises(UnexpectedCharacter) as exc:
            loads("(A,B,C); x")
        assert exc.value.offset == 9

    def test_empty_input(self):
        with pytest.raises(UnterminatedToken):
            loads("")

    def test_errors_are_value_errors(self):
        with pytest.raises(ValueError):
            loads("(A,B")
        with pytest.raises(NewickError):
            loads("(A,B")

    def test_message_has_offset(self):
        with pytest.raises(UnexpectedCharacter, match="at offset 6"):
            loads("(A,B,C,D);")


# ======================================================================== #
# 6. Deep trees                                                             #
# ======================================================================== #


def caterpillar(n_tips: int) -> str:
    """
    Unrooted caterpillar with every branch length 1, nested n_tips - 3 deep:
    (t0:1,(t1:1,(t2:1,(t3:1,t4:1):1):1):1,t5:1);  for n_tips = 6
    """
    n_nested = n_tips - 4
    return (
        "(t0:1,"
        + "".join(f"(t{i}:1," for i in range(1, n_nested + 1))
        + f"(t{n_tips - 3}:1,t{n_tips - 2}:1)"
        + ":1)" * n_nested
        + f":1,t{n_tips - 1}:1);"
    )


@pytest.mark.large_scale
class TestLargeScale:
    N_TIPS = 20000

    def test_deep_caterpillar_parses(self):
        root = loads(caterpillar(self.N_TIPS))
        t = root.tree
        assert t.n_tips == self.N_TIPS
        assert t.n_internal == self.N_TIPS - 2
        t.check_invariants()

    def test_caterpillar_helper_small(self):
        root = loads(caterpillar(5))
        assert root.tree.tip_labels == ["t0", "t1", "t2", "t3", "t4"]
        assert root.tree.n_internal == 3
