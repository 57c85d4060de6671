"""
_tree.py
========
An unrooted phylogenetic tree stored as a ring-of-half-edges arena.

Every vertex of the tree is a ring of half-edges.  An internal vertex owns
three half-edges whose ``ring_next`` links form a cycle of length 3; a tip
owns a single half-edge whose ``ring_next`` points to itself.  Each
half-edge may be joined to a half-edge of another vertex through ``back``,
and the pair of half-edges joined this way is one tree edge.  None of the
three half-edges of an internal vertex is special: any of them can act as
the "upward" connection, which is what lets a traversal (and the printer)
start anywhere in the tree.

Public API
----------
  RingTree()
      Empty arena.  Filled by the parser through ``add_vertex``,
      ``add_tip`` and ``link``.

  Node(tree, index)
      Lightweight handle on one half-edge.  This is what ``parse`` returns.

Storage
-------
All per-half-edge and per-vertex data live in flat numpy arrays indexed by
integer IDs, so the cyclic ``ring_next``/``back`` references are plain
integers and the whole structure pickles or saves with ``np.savez``.

Arrays, per half-edge  [n_half_edges]
-------------------------------------
ring_next    : int32    Next half-edge of the same vertex ring.
back         : int32    Half-edge on the other side of the edge; -1 if unlinked.
vertex       : int32    Owning vertex ID.
back_length  : float64  Branch length of the edge.
back_support : float64  Support value of the edge; -1.0 sentinel.
back_label   : list[str]  Free-text branch label; '' if absent.

Arrays, per vertex  [n_vertices]
---------------------------------
is_tip       : bool     True for tips.
support      : float64  Vertex support parsed from a node label; -1.0 sentinel.
first_half   : int32    First half-edge of the vertex ring.
label        : list[str]  Tip name, or raw node label for internal vertices.
"""

import numpy as np


NO_LINK = -1
NO_SUPPORT = -1.0


def _grow(arr: np.ndarray, size: int, fill) -> np.ndarray:
    out = np.full(size, fill, dtype=arr.dtype)
    out[: arr.shape[0]] = arr
    return out


class Node:
    """
    Handle on a single half-edge of a ``RingTree``.

    Handles are cheap views: two handles compare equal when they refer to
    the same half-edge of the same tree.  All attribute access reads the
    tree's arrays, so a handle never goes stale while the tree is alive.
    """

    __slots__ = ("tree", "index")

    def __init__(self, tree: "RingTree", index: int) -> None:
        self.tree = tree
        self.index = int(index)

    # ---- ring / edge navigation ---- #

    @property
    def next(self) -> "Node":
        return Node(self.tree, self.tree.ring_next[self.index])

    @property
    def back(self):
        b = int(self.tree.back[self.index])
        return None if b == NO_LINK else Node(self.tree, b)

    # ---- edge attributes ---- #

    @property
    def back_length(self) -> float:
        return float(self.tree.back_length[self.index])

    @property
    def back_label(self) -> str:
        return self.tree.back_label[self.index]

    @property
    def back_support(self) -> float:
        return float(self.tree.back_support[self.index])

    # ---- shared vertex attributes ---- #

    @property
    def vertex(self) -> int:
        return int(self.tree.vertex[self.index])

    @property
    def is_tip(self) -> bool:
        return bool(self.tree.is_tip[self.vertex])

    @property
    def label(self) -> str:
        return self.tree.label[self.vertex]

    @property
    def support(self) -> float:
        return float(self.tree.support[self.vertex])

    def __eq__(self, other) -> bool:
        if not isinstance(other, Node):
            return NotImplemented
        return self.tree is other.tree and self.index == other.index

    def __hash__(self) -> int:
        return hash((id(self.tree), self.index))

    def __repr__(self) -> str:
        if self.is_tip:
            return f"Node({self.index}, tip={self.label!r})"
        return f"Node({self.index}, vertex={self.vertex})"


class RingTree:
    """
    Arena of half-edges and vertices.

    Attributes (see module docstring for the arrays)
    -----------------------------------------------
    n_half_edges : int   Number of half-edges in use.
    n_vertices   : int   Number of vertices in use.
    """

    # ================================================================== #
    # Construction                                                         #
    # ================================================================== #

    def __init__(self, capacity: int = 16) -> None:
        capacity = max(int(capacity), 3)

        self.ring_next = np.full(capacity, NO_LINK, dtype=np.int32)
        self.back = np.full(capacity, NO_LINK, dtype=np.int32)
        self.vertex = np.full(capacity, NO_LINK, dtype=np.int32)
        self.back_length = np.zeros(capacity, dtype=np.float64)
        self.back_support = np.full(capacity, NO_SUPPORT, dtype=np.float64)
        self.back_label = [""] * capacity

        self.is_tip = np.zeros(capacity, dtype=bool)
        self.support = np.full(capacity, NO_SUPPORT, dtype=np.float64)
        self.first_half = np.full(capacity, NO_LINK, dtype=np.int32)
        self.label = [""] * capacity

        self.n_half_edges: int = 0
        self.n_vertices: int = 0

        # Name index: built lazily on first name-based query.
        self._name_index: dict = None  # type: ignore[assignment]

    def add_vertex(self, support: float = NO_SUPPORT, label: str = "") -> int:
        """
        Create an internal vertex (a ring of three half-edges) and return
        the ID of its first half-edge.  The ring is first → first+1 →
        first+2 → first.
        """
        self._reserve(3, 1)
        v = self.n_vertices
        h = self.n_half_edges

        self.ring_next[h] = h + 1
        self.ring_next[h + 1] = h + 2
        self.ring_next[h + 2] = h
        self.vertex[h : h + 3] = v

        self.is_tip[v] = False
        self.support[v] = support
        self.first_half[v] = h
        self.label[v] = label

        self.n_half_edges += 3
        self.n_vertices += 1
        self._name_index = None
        return h

    def add_tip(self, label: str) -> int:
        """Create a tip vertex (a single self-looped half-edge) and return its ID."""
        self._reserve(1, 1)
        v = self.n_vertices
        h = self.n_half_edges

        self.ring_next[h] = h
        self.vertex[h] = v

        self.is_tip[v] = True
        self.support[v] = NO_SUPPORT
        self.first_half[v] = h
        self.label[v] = label

        self.n_half_edges += 1
        self.n_vertices += 1
        self._name_index = None
        return h

    def link(
        self,
        h1: int,
        h2: int,
        length: float = 0.0,
        label: str = "",
        support: float = NO_SUPPORT,
    ) -> None:
        """
        Join half-edges *h1* and *h2* into one tree edge.

        Sets ``back`` in both directions and writes the same length, label
        and support on both sides.  A half-edge that was already linked
        elsewhere has its previous partner unlinked first, so ``back``
        stays symmetric.
        """
        for h, other in ((h1, h2), (h2, h1)):
            old = int(self.back[h])
            if old != NO_LINK and old != other:
                self.back[old] = NO_LINK
                self.back_length[old] = 0.0
                self.back_label[old] = ""
                self.back_support[old] = NO_SUPPORT

        self.back[h1] = h2
        self.back[h2] = h1
        self.back_length[h1] = length
        self.back_length[h2] = length
        self.back_label[h1] = label
        self.back_label[h2] = label
        self.back_support[h1] = support
        self.back_support[h2] = support

    # ================================================================== #
    # Public methods                                                       #
    # ================================================================== #

    def node(self, index: int) -> Node:
        if not 0 <= index < self.n_half_edges:
            raise IndexError(f"half-edge {index} out of range")
        return Node(self, index)

    @property
    def n_tips(self) -> int:
        return int(np.count_nonzero(self.is_tip[: self.n_vertices]))

    @property
    def n_internal(self) -> int:
        return self.n_vertices - self.n_tips

    @property
    def is_unrooted(self) -> bool:
        """True when every half-edge is linked (a pseudo-root is present)."""
        if self.n_half_edges == 0:
            return False
        return bool(np.all(self.back[: self.n_half_edges] != NO_LINK))

    @property
    def tip_labels(self) -> list:
        """Tip names in parse (left-to-right) order."""
        return [self.label[v] for v in range(self.n_vertices) if self.is_tip[v]]

    def tips(self):
        """Yield the half-edge of every tip."""
        for v in range(self.n_vertices):
            if self.is_tip[v]:
                yield Node(self, self.first_half[v])

    def internal_vertices(self):
        """Yield the first half-edge of every internal vertex."""
        for v in range(self.n_vertices):
            if not self.is_tip[v]:
                yield Node(self, self.first_half[v])

    def ring(self, node: Node) -> list:
        """Return the half-edges of *node*'s vertex, starting at *node*."""
        out = [node]
        h = int(self.ring_next[node.index])
        while h != node.index:
            out.append(Node(self, h))
            h = int(self.ring_next[h])
        return out

    def edges(self):
        """Yield each linked edge once as a ``(Node, Node)`` pair."""
        for h in range(self.n_half_edges):
            b = int(self.back[h])
            if b != NO_LINK and h < b:
                yield Node(self, h), Node(self, b)

    def find_tip(self, name: str) -> Node:
        """
        Return the half-edge of the tip called *name*.

        Raises
        ------
        KeyError     if no tip has that name.
        ValueError   if tip names are not unique.
        """
        if self._name_index is None:
            self._build_name_index()
        if name not in self._name_index:
            raise KeyError(f"No tip with name '{name}' found in tree.")
        return Node(self, self._name_index[name])

    def check_invariants(self) -> None:
        """
        Verify the ring and edge invariants of the whole arena.

        * Every internal ring has three distinct half-edges owned by the
          same vertex, and ``ring_next`` applied three times is the identity.
        * Every tip ring is a single self-looped half-edge.
        * ``back`` is symmetric and both sides carry identical length,
          label and support.

        Raises
        ------
        ValueError   describing the first violation found.
        """
        nxt = self.ring_next
        for v in range(self.n_vertices):
            h = int(self.first_half[v])
            if self.is_tip[v]:
                if nxt[h] != h:
                    raise ValueError(f"Tip vertex {v} ring is not a self-loop.")
                continue
            ring = (h, int(nxt[h]), int(nxt[nxt[h]]))
            if len(set(ring)) != 3 or int(nxt[ring[2]]) != h:
                raise ValueError(f"Vertex {v} ring is not a 3-cycle: {ring}.")
            for r in ring:
                if self.vertex[r] != v:
                    raise ValueError(f"Half-edge {r} in ring of {v} has vertex {self.vertex[r]}.")

        for h in range(self.n_half_edges):
            b = int(self.back[h])
            if b == NO_LINK:
                continue
            if self.back[b] != h:
                raise ValueError(f"back link {h} -> {b} is not symmetric.")
            if (
                self.back_length[h] != self.back_length[b]
                or self.back_label[h] != self.back_label[b]
                or self.back_support[h] != self.back_support[b]
            ):
                raise ValueError(f"Edge {h} <-> {b} has mismatched attributes.")

    # ================================================================== #
    # Private methods                                                      #
    # ================================================================== #

    def _reserve(self, n_half: int, n_vert: int) -> None:
        """Grow the arrays (by doubling) so *n_half*/*n_vert* more entries fit."""
        need = self.n_half_edges + n_half
        cap = self.ring_next.shape[0]
        if need > cap:
            cap = max(2 * cap, need)
            self.ring_next = _grow(self.ring_next, cap, NO_LINK)
            self.back = _grow(self.back, cap, NO_LINK)
            self.vertex = _grow(self.vertex, cap, NO_LINK)
            self.back_length = _grow(self.back_length, cap, 0.0)
            self.back_support = _grow(self.back_support, cap, NO_SUPPORT)
            self.back_label.extend([""] * (cap - len(self.back_label)))

        need = self.n_vertices + n_vert
        cap = self.is_tip.shape[0]
        if need > cap:
            cap = max(2 * cap, need)
            self.is_tip = _grow(self.is_tip, cap, False)
            self.support = _grow(self.support, cap, NO_SUPPORT)
            self.first_half = _grow(self.first_half, cap, NO_LINK)
            self.label.extend([""] * (cap - len(self.label)))

    def _trim(self) -> None:
        """Shrink every array to the number of entries in use."""
        nh = self.n_half_edges
        nv = self.n_vertices
        self.ring_next = self.ring_next[:nh].copy()
        self.back = self.back[:nh].copy()
        self.vertex = self.vertex[:nh].copy()
        self.back_length = self.back_length[:nh].copy()
        self.back_support = self.back_support[:nh].copy()
        del self.back_label[nh:]
        self.is_tip = self.is_tip[:nv].copy()
        self.support = self.support[:nv].copy()
        self.first_half = self.first_half[:nv].copy()
        del self.label[nv:]

    def _build_name_index(self) -> None:
        """
        **Private.**  Build and cache ``self._name_index``: a dict mapping
        each tip name to its half-edge ID.

        Raises
        ------
        ValueError   if duplicate tip names are found.
        """
        idx = {}
        for v in range(self.n_vertices):
            if not self.is_tip[v]:
                continue
            name = self.label[v]
            if name in idx:
                raise ValueError(
                    f"Duplicate tip name '{name}' at half-edges "
                    f"{idx[name]} and {int(self.first_half[v])}."
                )
            idx[name] = int(self.first_half[v])
        self._name_index = idx
