"""Generalized suffix tree over token sequences.

Sequences are appended online with Ukkonen's algorithm. Every sequence is
terminated by a terminator unique to it, so once a sequence has been added
each of its suffixes ends in its own leaf and the tree stays a proper suffix
tree for the next insertion. Tokens compare through their ``key``.

The tree is not thread-safe; callers serialize access (see ``IndexWorker``).
"""

from __future__ import annotations

from typing import Hashable, Iterator, Sequence

from clone_check.models.tokens import Token


class Terminator:
    """End marker of one sequence; never equal to any other element."""

    __slots__ = ("sequence_id",)

    def __init__(self, sequence_id: int) -> None:
        self.sequence_id = sequence_id

    @property
    def key(self) -> Hashable:
        return (None, self.sequence_id)

    def __repr__(self) -> str:
        return f"Terminator({self.sequence_id})"


class _LeafEnd:
    """Shared, growing end index for all leaves of the sequence being added."""

    __slots__ = ("value",)

    def __init__(self) -> None:
        self.value = -1


class Node:
    """A tree node together with the edge leading into it.

    The edge label is ``sequence[begin:end + 1]``. Leaves remember where the
    suffix they terminate starts in their sequence.
    """

    __slots__ = ("children", "suffix_link", "sequence", "sequence_id", "begin", "_end", "suffix_start")

    def __init__(
        self,
        sequence: list,
        sequence_id: int,
        begin: int,
        end: "int | _LeafEnd",
        suffix_start: int = -1,
    ) -> None:
        self.children: dict[Hashable, Node] = {}
        self.suffix_link: Node | None = None
        self.sequence = sequence
        self.sequence_id = sequence_id
        self.begin = begin
        self._end = end
        self.suffix_start = suffix_start

    @property
    def end(self) -> int:
        return self._end.value if isinstance(self._end, _LeafEnd) else self._end

    @property
    def length(self) -> int:
        return self.end - self.begin + 1

    @property
    def is_leaf(self) -> bool:
        return not self.children

    @property
    def is_unextendable(self) -> bool:
        """True for a leaf edge holding nothing but its sequence terminator."""
        return self.is_leaf and self.begin == self.end == len(self.sequence) - 1

    def label(self) -> list:
        return self.sequence[self.begin : self.end + 1]

    def leaves(self) -> Iterator["Node"]:
        stack = [self]
        while stack:
            node = stack.pop()
            if node.is_leaf:
                yield node
            else:
                stack.extend(node.children.values())

    def __repr__(self) -> str:
        return f"Node(seq={self.sequence_id}, begin={self.begin}, end={self.end}, children={len(self.children)})"


class SuffixTree:
    """Generalized suffix tree supporting incremental sequence appends."""

    def __init__(self) -> None:
        self.root = Node([], -1, 0, -1)
        self._sequences: list[list] = []
        self._token_count = 0

    @property
    def sequence_count(self) -> int:
        return len(self._sequences)

    @property
    def token_count(self) -> int:
        return self._token_count

    def sequence(self, sequence_id: int) -> list[Token]:
        """Tokens of a stored sequence without its terminator."""
        return self._sequences[sequence_id][:-1]

    def add_sequence(self, tokens: Sequence[Token]) -> int:
        """Append a sequence and return its id."""
        if len(tokens) < 2:
            raise ValueError("Sequences shorter than two tokens cannot be indexed")
        sequence_id = len(self._sequences)
        seq: list = [*tokens, Terminator(sequence_id)]
        self._sequences.append(seq)
        self._token_count += len(tokens)

        root = self.root
        leaf_end = _LeafEnd()
        active_node = root
        active_edge = 0
        active_length = 0
        remainder = 0

        for i, item in enumerate(seq):
            leaf_end.value = i
            remainder += 1
            last_internal: Node | None = None
            while remainder:
                if active_length == 0:
                    active_edge = i
                edge_key = seq[active_edge].key
                child = active_node.children.get(edge_key)
                if child is None:
                    active_node.children[edge_key] = Node(seq, sequence_id, i, leaf_end, i - remainder + 1)
                    if last_internal is not None:
                        last_internal.suffix_link = active_node
                        last_internal = None
                else:
                    length = child.length
                    if active_length >= length:
                        active_edge += length
                        active_length -= length
                        active_node = child
                        continue
                    if child.sequence[child.begin + active_length].key == item.key:
                        if last_internal is not None and active_node is not root:
                            last_internal.suffix_link = active_node
                            last_internal = None
                        active_length += 1
                        break
                    split = Node(child.sequence, child.sequence_id, child.begin, child.begin + active_length - 1)
                    active_node.children[edge_key] = split
                    split.children[item.key] = Node(seq, sequence_id, i, leaf_end, i - remainder + 1)
                    child.begin += active_length
                    split.children[child.sequence[child.begin].key] = child
                    if last_internal is not None:
                        last_internal.suffix_link = split
                    last_internal = split
                remainder -= 1
                if active_node is root and active_length > 0:
                    active_length -= 1
                    active_edge = i - remainder + 1
                elif active_node is not root:
                    active_node = active_node.suffix_link or root

        return sequence_id

    def find_repeated_substrings(self) -> Iterator[Node]:
        """Lazily yield internal nodes, each a substring found at least twice."""
        stack = list(self.root.children.values())
        while stack:
            node = stack.pop()
            if node.is_leaf:
                continue
            yield node
            stack.extend(node.children.values())


__all__ = ["SuffixTree", "Node", "Terminator"]
