"""Tests for the generalized suffix tree."""

from __future__ import annotations

import pytest

from clone_check.index.suffix_tree import Node, SuffixTree
from clone_check.models.tokens import Mode, Span, Token


def make_tokens(text: str, owner_id: int = 1) -> list[Token]:
    span = Span(file="x", from_line=1, from_col=0, to_line=1, to_col=1)
    return [
        Token(
            symbol=char,
            compare_text=char,
            mode=Mode.SUBMISSION,
            owner_id=owner_id,
            denizen_id=owner_id,
            span=span,
            display_text=char,
        )
        for char in text
    ]


def _paths(tree: SuffixTree) -> list[tuple[Node, list]]:
    found = []
    stack: list[tuple[Node, list]] = [(child, []) for child in tree.root.children.values()]
    while stack:
        node, prefix = stack.pop()
        path = prefix + [item.key for item in node.label()]
        if node.is_leaf:
            found.append((node, path))
        else:
            stack.extend((child, path) for child in node.children.values())
    return found


@pytest.mark.parametrize(
    "texts",
    [
        ["banana"],
        ["abcab", "xab"],
        ["mississippi", "missouri", "ssi"],
        ["aaaa", "aa", "aaa"],
    ],
)
def test_every_suffix_ends_in_its_own_leaf(texts: list[str]) -> None:
    tree = SuffixTree()
    sequences = [make_tokens(text) for text in texts]
    for seq in sequences:
        tree.add_sequence(seq)

    leaves = _paths(tree)
    starts: dict[int, set[int]] = {}
    for leaf, path in leaves:
        seq = sequences[leaf.sequence_id]
        expected = [token.key for token in seq[leaf.suffix_start :]]
        assert path[:-1] == expected
        starts.setdefault(leaf.sequence_id, set()).add(leaf.suffix_start)
    for seq_id, seq in enumerate(sequences):
        assert starts[seq_id] == set(range(len(seq) + 1))


def test_identical_sequences_share_an_unextendable_node() -> None:
    tree = SuffixTree()
    tree.add_sequence(make_tokens("abcd"))
    tree.add_sequence(make_tokens("abcd", owner_id=2))

    nodes = [
        node
        for node in tree.find_repeated_substrings()
        if all(child.is_unextendable for child in node.children.values())
        and any(child.suffix_start == 0 for child in node.children.values())
    ]
    assert len(nodes) == 1
    assert sorted(child.sequence_id for child in nodes[0].children.values()) == [0, 1]


def test_prefix_of_longer_sequence_is_extendable() -> None:
    tree = SuffixTree()
    tree.add_sequence(make_tokens("abc"))
    tree.add_sequence(make_tokens("abcd"))

    for node in tree.find_repeated_substrings():
        children = list(node.children.values())
        if any(child.suffix_start == 0 for child in children):
            assert not all(child.is_unextendable for child in children)


def test_repeated_substrings_have_two_occurrences() -> None:
    tree = SuffixTree()
    tree.add_sequence(make_tokens("xyzxy"))
    nodes = list(tree.find_repeated_substrings())
    assert nodes
    assert all(sum(1 for _ in node.leaves()) >= 2 for node in nodes)


def test_short_sequences_are_rejected() -> None:
    tree = SuffixTree()
    with pytest.raises(ValueError):
        tree.add_sequence([])
    with pytest.raises(ValueError):
        tree.add_sequence(make_tokens("a"))
    assert tree.sequence_count == 0


def test_counts_and_sequence_lookup() -> None:
    tree = SuffixTree()
    first = tree.add_sequence(make_tokens("abc"))
    second = tree.add_sequence(make_tokens("de"))
    assert (first, second) == (0, 1)
    assert tree.sequence_count == 2
    assert tree.token_count == 5
    assert [token.symbol for token in tree.sequence(1)] == ["d", "e"]
